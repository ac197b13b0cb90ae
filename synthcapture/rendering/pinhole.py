import logging

import numpy as np

from synthcapture.configs.camera_config import CameraConfig
from synthcapture.configs.capture_data import RawRegion, Vector3
from synthcapture.geometry import (
    apply_euler_offset,
    bounding_rect,
    box_corners,
    camera_depths,
    look_at_rotation,
    project_points,
)
from synthcapture.models.subject import Subject
from synthcapture.models.variant import EnvironmentVariant

logger = logging.getLogger(__name__)


class PinholeRenderer:
    """
    Reference renderer built on an ideal pinhole camera.

    Subjects are axis-aligned boxes; their on-screen rectangle is the bounding
    rectangle of the 8 projected corners. A subject with any corner at or behind
    the near plane has no projection.
    """

    def __init__(self, camera_config: CameraConfig | None = None) -> None:
        """
        Initialize the renderer.

        Args:
            camera_config: Intrinsics and clipping configuration (defaults if None).
        """
        self.camera_config = camera_config if camera_config else CameraConfig()
        self.K = self.camera_config.intrinsic_matrix()

        self.subjects: dict[str, Subject] = {}
        self.active: set[str] = set()
        self.environment: EnvironmentVariant | None = None

        # Camera at the origin looking down +z until a pose is set
        self.R = np.eye(3)
        self.t = np.zeros(3)

    @property
    def image_size(self) -> tuple[int, int]:
        return self.camera_config.image_width, self.camera_config.image_height

    @property
    def camera_position(self) -> np.ndarray:
        """Camera center in world coordinates."""
        return -self.R.T @ self.t

    def spawn_subject(self, subject: Subject) -> None:
        self.subjects[subject.id] = subject

    def despawn_subject(self, subject_id: str) -> None:
        self.subjects.pop(subject_id, None)
        self.active.discard(subject_id)

    def set_subject_active(self, subject_id: str, active: bool) -> None:
        if subject_id not in self.subjects:
            raise KeyError(f"Subject '{subject_id}' has not been spawned.")
        if active:
            self.active.add(subject_id)
        else:
            self.active.discard(subject_id)

    def set_environment(self, variant: EnvironmentVariant | None) -> None:
        self.environment = variant

    def set_camera_pose(
        self, position: Vector3, look_at_target: Vector3, euler_offset: Vector3
    ) -> None:
        R_wc = look_at_rotation(position, look_at_target, self.camera_config.world_up)
        self.R = apply_euler_offset(R_wc, euler_offset)
        self.t = -self.R @ np.asarray(position, dtype=np.float64)

    def project_subject_points(self, subject_id: str) -> np.ndarray | None:
        """
        Project the corners of a subject into the current frame.

        Returns:
            (8, 2) pixel coordinates, or None if the subject is unknown or not
            entirely in front of the camera.
        """
        subject = self.subjects.get(subject_id)
        if subject is None:
            return None

        corners = box_corners(subject.center, subject.size)
        if np.any(camera_depths(corners, self.R, self.t) <= self.camera_config.near_plane):
            return None

        return project_points(corners, self.R, self.t, self.K)

    def project_subject_to_screen_rect(self, subject_id: str) -> RawRegion | None:
        points = self.project_subject_points(subject_id)
        if points is None:
            return None

        return RawRegion(*bounding_rect(points))
