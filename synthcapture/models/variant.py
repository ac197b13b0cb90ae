from pydantic import BaseModel, Field


class EnvironmentVariant(BaseModel):
    """
    An environment the subjects are captured in (e.g. a skybox).

    Attributes:
        name: Identifier of the environment, passed through to the renderer
        background: BGR background color used by the reference frame writer
    """

    name: str = Field(..., description="Environment identifier")
    background: tuple[int, int, int] = Field(
        (127, 127, 127), description="BGR background color"
    )

    def __str__(self) -> str:
        return self.name
