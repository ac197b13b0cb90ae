from pydantic import BaseModel, Field, field_validator


class Subject(BaseModel):
    """
    Represents a 3D object to be photographed for the dataset.

    Subjects are modelled as axis-aligned boxes. The label becomes the class name
    in every dataset format and the name of the folder the frames are written to.

    Attributes:
        id: Unique identifier for the subject
        label: Class label written into dataset rows (defaults to the id)
        size: Box extents (width, height, depth) in world units
        center: Box center in world coordinates, used as the look-at target
        color: BGR color used by the reference frame writer
    """

    id: str = Field(..., description="Unique identifier for the subject")
    label: str | None = Field(None, description="Class label for dataset rows")
    size: tuple[float, float, float] = Field(
        (1.0, 1.0, 1.0), description="Box extents (width, height, depth)"
    )
    center: tuple[float, float, float] = Field(
        (0.0, 0.0, 0.0), description="Box center in world coordinates"
    )
    color: tuple[int, int, int] = Field(
        (40, 160, 220), description="BGR fill color for reference rendering"
    )

    @field_validator("id", "label")
    @classmethod
    def validate_folder_name(cls, value: str | None) -> str | None:
        """Ids and labels name dataset folders, so they must be single path parts."""
        if value is None:
            return value
        if not value.strip() or value in {".", ".."}:
            raise ValueError(f"'{value}' is not a valid folder name")
        if "/" in value or "\\" in value:
            raise ValueError(f"'{value}' must not contain path separators")
        return value

    @property
    def class_label(self) -> str:
        """Label used in dataset rows, falling back to the id."""
        return self.label or self.id

    def __str__(self) -> str:
        """
        Generate a human-readable string representation of the subject.

        Example:
            "[S001] mug
            * size:   0.1×0.12×0.1 @ (0.0, 0.0, 0.0)"
        """
        w, h, d = self.size
        return f"[{self.id}] {self.class_label}\n* size:   {w}×{h}×{d} @ {self.center}"
