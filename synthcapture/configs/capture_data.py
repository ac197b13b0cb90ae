from dataclasses import dataclass, field
from pathlib import Path

from synthcapture.enums import DatasetFormat, PartitionTag
from synthcapture.models.subject import Subject
from synthcapture.models.variant import EnvironmentVariant

Vector3 = tuple[float, float, float]


@dataclass(frozen=True)
class Viewpoint:
    """A camera position plus the point it looks at."""

    position: Vector3
    look_at_target: Vector3


@dataclass
class CaptureRequest:
    """A single (subject, viewpoint, variant) capture attempt."""

    subject: Subject
    viewpoint: Viewpoint
    environment_variant: EnvironmentVariant | None
    image_width: int
    image_height: int


@dataclass(frozen=True)
class RawRegion:
    """Pixel-space rectangle as reported by the projector (origin top-left, y down)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def x_min(self) -> float:
        return self.x

    @property
    def y_min(self) -> float:
        return self.y

    @property
    def x_max(self) -> float:
        return self.x + self.width

    @property
    def y_max(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class NormalizedRegion:
    """
    Resolution-normalized region in both output conventions.

    Both tuples are derived from the same raw rectangle, so every dataset format
    built from one instance describes the same box.
    """

    box: tuple[float, float, float, float]
    corners: tuple[float, float, float, float]

    @property
    def x_min(self) -> float:
        return self.corners[0]

    @property
    def y_min(self) -> float:
        return self.corners[1]

    @property
    def x_max(self) -> float:
        return self.corners[2]

    @property
    def y_max(self) -> float:
        return self.corners[3]


@dataclass
class PerturbResult:
    """Outcome of a jitter-and-check loop."""

    accepted: bool
    region: NormalizedRegion | None
    attempts_used: int


@dataclass
class DatasetRow:
    """One labeled image, shared by every dataset emitter."""

    filename: str
    label: str
    region: NormalizedRegion
    image_width: int
    image_height: int
    partition_tag: PartitionTag = PartitionTag.UNASSIGNED
    flagged: bool = False


@dataclass
class CaptureSummary:
    """Result of a full capture run."""

    dataset_dir: Path
    total_images_captured: int = 0
    accepted_images: int = 0
    flagged_images: list[str] = field(default_factory=list)
    discarded_captures: int = 0
    skipped_subjects: list[str] = field(default_factory=list)
    dataset_paths: dict[DatasetFormat, Path] = field(default_factory=dict)
    cancelled: bool = False
