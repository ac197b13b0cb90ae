import logging
from collections import defaultdict
from pathlib import Path

import cv2
import numpy as np

from synthcapture.rendering.pinhole import PinholeRenderer

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND = (127, 127, 127)


class FrameWriter:
    """
    Reference screenshot service for the pinhole renderer.

    Fills the frame with the current environment's background color, draws the
    convex silhouette of every active subject and saves the result as a PNG.
    Files are named after the output folder with a running index, restarting
    at zero whenever the folder has to be created.
    """

    def __init__(self, renderer: PinholeRenderer, extension: str = ".png") -> None:
        self.renderer = renderer
        self.extension = extension
        self._counters: dict[Path, int] = defaultdict(int)

    def render(self) -> np.ndarray:
        """Rasterize the current frame as a BGR image."""
        width, height = self.renderer.image_size
        environment = self.renderer.environment
        background = environment.background if environment else DEFAULT_BACKGROUND

        image = np.empty((height, width, 3), dtype=np.uint8)
        image[:] = background

        for subject_id in sorted(self.renderer.active):
            points = self.renderer.project_subject_points(subject_id)
            if points is None:
                continue

            hull = cv2.convexHull(np.round(points).astype(np.int32))
            color = tuple(int(c) for c in self.renderer.subjects[subject_id].color)
            cv2.fillConvexPoly(image, hull, color, lineType=cv2.LINE_AA)

        return image

    def capture_frame(self, output_directory: Path) -> Path:
        """
        Save the current frame inside `output_directory`.

        Args:
            output_directory: Folder to write into (created if missing).

        Returns:
            Path of the written image.

        Raises:
            OSError: If the image cannot be written.
        """
        output_directory = Path(output_directory)
        if not output_directory.is_dir():
            # Folder was removed since the last frame, numbering starts over
            self._counters.pop(output_directory, None)
            output_directory.mkdir(parents=True)

        index = self._counters[output_directory]
        self._counters[output_directory] += 1
        path = output_directory / f"{output_directory.name}_{index:05d}{self.extension}"

        try:
            written = cv2.imwrite(str(path), self.render())
        except cv2.error as e:
            raise OSError(f"Failed to write frame to {path}: {e}") from e
        if not written:
            raise OSError(f"Failed to write frame to {path}")

        logger.debug("Captured frame %s", path)
        return path
