from pydantic import BaseModel, Field, model_validator

from synthcapture.enums import DatasetFormat, ExhaustedPolicy
from synthcapture.models.subject import Subject
from synthcapture.models.variant import EnvironmentVariant

DEFAULT_FORMATS = [DatasetFormat.BOX_MAP, DatasetFormat.AUTOML, DatasetFormat.CORNER_MAP]


class JitterSettings(BaseModel):
    """
    Bounds for the random camera perturbation applied to every viewpoint.

    Attributes:
        distance: Maximum offset along the view axis, in world units
        rotation: Maximum Euler offset per axis (x, y, z), in degrees
    """

    distance: float = Field(3.0, ge=0, description="Max distance offset")
    rotation: tuple[float, float, float] = Field(
        (10.0, 10.0, 180.0), description="Max Euler offsets in degrees"
    )


class CaptureSettings(BaseModel):
    """
    Main container for a capture run: subjects, sampling, jitter and outputs.

    Attributes:
        subjects: Subjects to photograph, in capture order
        viewpoints_per_subject: Number of sphere points per subject
        radius: Sphere radius around each subject
        image_width: Capture width in pixels
        image_height: Capture height in pixels
        jitter: Camera perturbation bounds
        max_attempts: Jitter attempts per viewpoint before giving up
        environment_variants: Environments (skyboxes) to capture in
        variants_to_capture: How many variants to use, -1 for all of them
        capture_per_variant: Repeat the viewpoints for every variant
        exhausted_policy: What to do with captures that never fit in frame
        dataset_formats: Dataset files to produce
        output_dir: Dataset directory
        field_of_view: Vertical field of view of the reference camera, in degrees
        seed: Seed for the jitter random generator
    """

    subjects: list[Subject] = Field(
        default_factory=list, description="Subjects to capture"
    )
    viewpoints_per_subject: int = Field(300, ge=0, description="Sphere points")
    radius: float = Field(5.0, gt=0, description="Capture sphere radius")
    image_width: int = Field(512, gt=0, description="Capture width in pixels")
    image_height: int = Field(512, gt=0, description="Capture height in pixels")
    jitter: JitterSettings = Field(default_factory=JitterSettings)
    max_attempts: int = Field(5, ge=0, description="Jitter attempts per viewpoint")
    environment_variants: list[EnvironmentVariant] = Field(default_factory=list)
    variants_to_capture: int = Field(-1, ge=-1, description="-1 means all variants")
    capture_per_variant: bool = True
    exhausted_policy: ExhaustedPolicy = ExhaustedPolicy.FLAG
    dataset_formats: list[DatasetFormat] = Field(
        default_factory=lambda: list(DEFAULT_FORMATS)
    )
    output_dir: str = Field("dataset", description="Dataset directory")
    field_of_view: float = Field(60.0, gt=0, lt=180, description="Vertical FOV")
    seed: int | None = Field(None, description="Jitter random seed")

    @model_validator(mode="after")
    def validate_unique_subject_ids(self) -> "CaptureSettings":
        """Subject ids key the renderer's pool, so each one may appear once."""
        seen = set()
        for subject in self.subjects:
            if subject.id in seen:
                raise ValueError(f"Duplicate subject id '{subject.id}'")
            seen.add(subject.id)
        return self

    def active_variants(self) -> list[EnvironmentVariant | None]:
        """
        Resolve the environment variants each viewpoint is captured in.

        Returns:
            The first `variants_to_capture` variants (all of them for -1), or
            `[None]` when there are no variants or per-variant capture is off.
        """
        if not self.environment_variants or not self.capture_per_variant:
            return [None]

        if self.variants_to_capture <= -1:
            return list(self.environment_variants)
        return list(self.environment_variants[: self.variants_to_capture])
