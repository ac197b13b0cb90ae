import csv
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from synthcapture.configs.capture_data import DatasetRow
from synthcapture.enums import DatasetFormat

logger = logging.getLogger(__name__)


def format_automl_row(row: DatasetRow) -> list[str]:
    """
    Format a row for AutoML-style bounding box CSV files.

    The two unused vertices of the four-corner polygon convention are left blank.

    Returns:
        [partition_tag, filename, label, x_min, y_min, "", "", x_max, y_max]
    """
    x_min, y_min, x_max, y_max = row.region.corners
    return [
        row.partition_tag.value,
        row.filename,
        row.label,
        str(x_min),
        str(y_min),
        "",
        "",
        str(x_max),
        str(y_max),
    ]


def format_tensorflow_row(row: DatasetRow) -> list[str]:
    """
    Format a row for TensorFlow object detection CSV files.

    Returns:
        [filename, width, height, class, xmin, ymin, xmax, ymax]
    """
    x_min, y_min, x_max, y_max = row.region.corners
    return [
        row.filename,
        str(row.image_width),
        str(row.image_height),
        row.label,
        str(x_min),
        str(y_min),
        str(x_max),
        str(y_max),
    ]


class DatasetEmitter(ABC):
    """
    Accumulates dataset rows in capture order and writes them as one file.

    Subclasses only decide how the accumulated rows are serialized.
    """

    format: DatasetFormat
    filename: str

    def __init__(self):
        self._rows: list[DatasetRow] = []

    @property
    def rows(self) -> list[DatasetRow]:
        return list(self._rows)

    def append(self, row: DatasetRow) -> None:
        self._rows.append(row)

    def clear(self) -> None:
        self._rows.clear()

    @abstractmethod
    def _write(self, path: Path) -> None: ...

    def flush(self, dataset_dir: Path) -> Path:
        """
        Write the accumulated rows into `dataset_dir`, then clear them.

        Args:
            dataset_dir: Directory the dataset file is written to.

        Returns:
            Path of the written file.

        Raises:
            OSError: If the directory or the file cannot be written.
        """
        dataset_dir = Path(dataset_dir)
        dataset_dir.mkdir(parents=True, exist_ok=True)

        path = dataset_dir / self.filename
        self._write(path)
        logger.info("Wrote %d rows to %s", len(self._rows), path)

        self.clear()
        return path


class BoxMapEmitter(DatasetEmitter):
    """Maps each image filename to its box-form region [x, y, w, h]."""

    format = DatasetFormat.BOX_MAP
    filename = "ml_dataset.json"

    def _write(self, path: Path) -> None:
        data = {row.filename: list(row.region.box) for row in self._rows}
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)


class AutoMLEmitter(DatasetEmitter):
    """One delimited corner-form row per capture."""

    format = DatasetFormat.AUTOML
    filename = "automl_dataset.csv"

    def _write(self, path: Path) -> None:
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerows(format_automl_row(row) for row in self._rows)


class CornerMapEmitter(DatasetEmitter):
    """Maps each image basename to its corner-form region [x_min, y_min, x_max, y_max]."""

    format = DatasetFormat.CORNER_MAP
    filename = "custom_vision_dataset.json"

    def _write(self, path: Path) -> None:
        data = {Path(row.filename).name: list(row.region.corners) for row in self._rows}
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)


class TensorflowEmitter(DatasetEmitter):
    """CSV with a header row, one corner-form row per capture."""

    format = DatasetFormat.TENSORFLOW
    filename = "tensorflow_dataset.csv"
    header = ["filename", "width", "height", "class", "xmin", "ymin", "xmax", "ymax"]

    def _write(self, path: Path) -> None:
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(self.header)
            writer.writerows(format_tensorflow_row(row) for row in self._rows)


EMITTERS: dict[DatasetFormat, type[DatasetEmitter]] = {
    DatasetFormat.BOX_MAP: BoxMapEmitter,
    DatasetFormat.AUTOML: AutoMLEmitter,
    DatasetFormat.CORNER_MAP: CornerMapEmitter,
    DatasetFormat.TENSORFLOW: TensorflowEmitter,
}


def build_emitters(formats: list[DatasetFormat]) -> list[DatasetEmitter]:
    """Instantiate one emitter per requested format, ignoring duplicates."""
    return [EMITTERS[fmt]() for fmt in dict.fromkeys(formats)]
