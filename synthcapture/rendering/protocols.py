from pathlib import Path
from typing import Protocol

from synthcapture.configs.capture_data import RawRegion, Vector3
from synthcapture.models.subject import Subject
from synthcapture.models.variant import EnvironmentVariant


class Renderer(Protocol):
    """
    Scene and camera collaborator driven by the capture pipeline.

    The renderer owns all camera and scene state. The pipeline only writes the
    camera pose and reads projections back, one capture at a time.
    """

    @property
    def image_size(self) -> tuple[int, int]:
        """Render target size as (width, height) in pixels."""
        ...

    def spawn_subject(self, subject: Subject) -> None: ...

    def despawn_subject(self, subject_id: str) -> None: ...

    def set_subject_active(self, subject_id: str, active: bool) -> None: ...

    def set_environment(self, variant: EnvironmentVariant | None) -> None: ...

    def set_camera_pose(
        self, position: Vector3, look_at_target: Vector3, euler_offset: Vector3
    ) -> None:
        """Place the camera, aim it at the target, then rotate it by the offset."""
        ...

    def project_subject_to_screen_rect(self, subject_id: str) -> RawRegion | None:
        """Pixel rectangle of the subject in the current frame, None if unavailable."""
        ...


class ScreenshotService(Protocol):
    """Writes the current frame to disk."""

    def capture_frame(self, output_directory: Path) -> Path:
        """Save the current frame inside `output_directory` and return its path."""
        ...
