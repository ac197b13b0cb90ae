"""Capture a labeled object-detection dataset with the reference pinhole renderer.

Usage:
    python capture.py --config assets/capture.yaml --output-dir dataset
"""

import argparse
import logging

from synthcapture.pipeline.pipeline import run_capture
from synthcapture.pipeline.sampling import generate_points
from synthcapture.plotting import plot_viewpoints
from synthcapture.utils import (
    find_project_root,
    load_capture_settings_from_yaml,
    setup_logging,
)

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic detection dataset")
    parser.add_argument(
        "--config",
        type=str,
        default=str(find_project_root() / "assets" / "capture.yaml"),
        help="YAML capture settings.",
    )
    parser.add_argument("--output-dir", type=str, default=None, help="Override output_dir.")
    parser.add_argument("--seed", type=int, default=None, help="Override the jitter seed.")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument(
        "--plot-viewpoints",
        action="store_true",
        help="Show the sampled camera positions and exit without capturing.",
    )
    args = parser.parse_args()

    setup_logging(args.log_level.upper())

    settings = load_capture_settings_from_yaml(args.config)
    overrides = {}
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if args.seed is not None:
        overrides["seed"] = args.seed
    if overrides:
        settings = settings.model_copy(update=overrides)

    if args.plot_viewpoints:
        plot_viewpoints(generate_points(settings.viewpoints_per_subject, settings.radius))
        return

    summary = run_capture(settings)

    logger.info("Captured %d images in %s", summary.total_images_captured, summary.dataset_dir)
    for fmt, path in summary.dataset_paths.items():
        logger.info("%s dataset created at %s", fmt.value, path)
    if summary.flagged_images:
        logger.warning("%d captures never fit in frame", len(summary.flagged_images))
    if summary.skipped_subjects:
        logger.warning("Skipped subjects: %s", ", ".join(summary.skipped_subjects))


if __name__ == "__main__":
    main()
