from dataclasses import dataclass

import numpy as np


@dataclass
class CameraConfig:
    """Configuration for the reference pinhole camera."""

    image_width: int = 512
    image_height: int = 512
    field_of_view: float = 60.0
    near_plane: float = 0.01
    world_up: tuple = (0.0, 1.0, 0.0)

    @property
    def focal_length(self) -> float:
        """
        Focal length in pixels derived from the vertical field of view.

        Returns:
            float: f such that the image height spans `field_of_view` degrees.
        """
        return (self.image_height / 2) / np.tan(np.radians(self.field_of_view) / 2)

    def intrinsic_matrix(self) -> np.ndarray:
        """
        Build the 3x3 intrinsic matrix with square pixels and a centered principal point.

        Returns:
            np.ndarray: Camera intrinsic matrix K.
        """
        f = self.focal_length
        cx, cy = self.image_width / 2, self.image_height / 2
        return np.array([[f, 0, cx], [0, f, cy], [0, 0, 1]], dtype=np.float64)
