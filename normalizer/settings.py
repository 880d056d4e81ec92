"""Per-conversion settings."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from normalizer.base import ICON_MAX_SIZE, ICON_SQUARENESS_RATIO


class CodeFramework(str, Enum):
    """Target framework of the downstream generator."""
    HTML = "html"
    TAILWIND = "tailwind"
    REACT = "react"
    FLUTTER = "flutter"
    SWIFTUI = "swiftui"
    COMPOSE = "compose"


class ConversionSettings(BaseModel):
    """Settings that travel with one conversion request.

    ``framework`` is only consumed by the generator; the pipeline reads the
    vector, color-variable and icon-threshold fields.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    framework: CodeFramework = Field(..., description="Target framework")
    use_color_variables: bool = Field(
        default=False,
        alias="useColorVariables",
        description="Resolve bound color variables on solid fills and strokes"
    )
    embed_vectors: bool = Field(
        default=False,
        alias="embedVectors",
        description="Flatten icons and vectors into inline SVG markup"
    )
    icon_max_size: float = Field(
        default=ICON_MAX_SIZE,
        alias="iconMaxSize",
        description="Largest width/height still considered an icon",
        gt=0
    )
    icon_squareness_ratio: float = Field(
        default=ICON_SQUARENESS_RATIO,
        alias="iconSquarenessRatio",
        description="Max |w - h| as a fraction of the larger side",
        ge=0,
        le=1
    )

    @field_validator('framework', mode='before')
    @classmethod
    def normalize_framework(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v
