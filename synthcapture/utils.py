import logging
from pathlib import Path
from typing import Any

import yaml

from synthcapture.models.settings import CaptureSettings


def find_project_root() -> Path:
    """Find the project root by looking for marker files."""
    current = Path(__file__).resolve()

    # Project root markers
    markers = ["pyproject.toml", ".git"]

    for parent in [current] + list(current.parents):
        if any((parent / marker).exists() for marker in markers):
            return parent

    return current.parent


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """
    Configure console logging with timestamp and level.

    Args:
        level: Logging level name or number.

    Returns:
        The configured root logger.
    """
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers so repeated calls do not duplicate output
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def load_capture_settings_from_yaml(path: str | Path) -> CaptureSettings:
    """
    Load capture settings from a YAML configuration file.

    Args:
        path: File path to the YAML configuration file

    Returns:
        CaptureSettings object populated with data from the YAML file

    Raises:
        FileNotFoundError: If the specified file does not exist
        yaml.YAMLError: If the file contains invalid YAML syntax
        pydantic.ValidationError: If the data doesn't match the settings schema

    Expected YAML structure:
        ```yaml
        viewpoints_per_subject: 300
        radius: 5.0
        image_width: 512
        image_height: 512
        jitter:
          distance: 3.0
          rotation: [10, 10, 180]
        subjects:
          - id: "mug"
            size: [0.8, 1.0, 0.8]
        environment_variants:
          - name: "studio"
            background: [200, 200, 200]
        ```
    """
    try:
        with open(path, "r", encoding="utf-8") as file:
            raw_data: dict[str, Any] = yaml.safe_load(file) or {}
    except FileNotFoundError:
        raise FileNotFoundError(f"Capture settings YAML file not found: {path}")
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML syntax in file {path}: {e}")

    return CaptureSettings(**raw_data)
