"""Pydantic models for the brief, the outbound request and the validated result.

This module defines the closed vocabularies (camera, ratio, style tags),
the typed views of the two external contracts (image analysis and prompt
generation) and the HTTP request/response bodies of the briefs API.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Optional, Tuple
from enum import Enum

from ..services.palette import HEX_COLOR_RE


class Camera(str, Enum):
    """Camera angles offered to the user and to image analysis."""
    SATELLITE_VIEW = "Satellite View"
    ISOMETRIC = "Isometric"
    HIGH_ANGLE = "High Angle"
    EYE_LEVEL = "Eye Level"
    PROFILE_VIEW = "Profile View"
    LOW_ANGLE = "Low Angle"
    EXTREME_CLOSE_UP = "Extreme Close-Up"


class Ratio(str, Enum):
    """Supported aspect ratios."""
    SQUARE = "1:1"
    PORTRAIT_4_5 = "4:5"
    WIDE = "16:9"
    TALL = "9:16"
    LANDSCAPE_3_2 = "3:2"
    PORTRAIT_2_3 = "2:3"


class StyleTag(str, Enum):
    """Flat set of style tags; see STYLE_CATEGORIES for the sub-vocabularies."""
    LINE_ART = "Line Art"
    VECTOR_2D = "2D Vector"
    ARTWORK_2_5D = "2.5D Artwork"
    RENDER_3D = "3D Render"
    PAPER_3D = "3D Paper"
    REAL_PHOTO = "Real Photo"
    MATTE = "Matte"
    SHINY = "Shiny"
    GLASS = "Glass"
    DAY = "Day"
    NIGHT = "Night"
    MIST = "Mist"


STYLE_CATEGORIES: Dict[str, Tuple[StyleTag, ...]] = {
    "artStyle": (
        StyleTag.LINE_ART, StyleTag.VECTOR_2D, StyleTag.ARTWORK_2_5D,
        StyleTag.RENDER_3D, StyleTag.PAPER_3D, StyleTag.REAL_PHOTO,
    ),
    "texture": (StyleTag.MATTE, StyleTag.SHINY, StyleTag.GLASS),
    "lighting": (StyleTag.DAY, StyleTag.NIGHT, StyleTag.MIST),
}

DEFAULT_CAMERA = Camera.EYE_LEVEL
DEFAULT_RATIO = Ratio.SQUARE


class OutputLanguage(str, Enum):
    """Language for design intent and designer comment (prompts are always English)."""
    EN = "en"
    KO = "ko"


class ColorRole(str, Enum):
    BACKGROUND = "background"
    OBJECT = "object"


class ReferenceImage(BaseModel):
    """Inline reference image split out of a data URL."""
    model_config = ConfigDict(frozen=True)

    mime_type: str = Field(..., description="Image MIME type", examples=["image/png"])
    data: str = Field(..., description="Base64 payload without the data URL header")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


# Image analysis contract
class AnalysisResult(BaseModel):
    """Untrusted structural guess about an uploaded image.

    Advisory only: its colors are reconciled against the palette before they
    reach a brief, and the object itself is never stored.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    camera: Camera
    ratio: Ratio
    art_style: StyleTag = Field(..., alias="artStyle")
    texture: StyleTag
    lighting: StyleTag
    bg_colors: Tuple[str, ...] = Field(..., alias="bgColors")
    obj_colors: Tuple[str, ...] = Field(..., alias="objColors")

    @property
    def style_tags(self) -> Tuple[StyleTag, ...]:
        return (self.art_style, self.texture, self.lighting)


# Generation contract
class VisualBalance(BaseModel):
    vibrancy: float
    minimalism: float
    complexity: float
    softness: float
    futurism: float


class ToneManner(BaseModel):
    temperature: str
    dynamism: str


class TextureDensity(BaseModel):
    reflectivity: float
    transparency: float
    roughness: float


class InsightDashboard(BaseModel):
    visual_balance: VisualBalance
    tone_manner: ToneManner
    texture_density: TextureDensity
    designer_comment: str

    def scores(self) -> Dict[str, float]:
        """All 0-100 scores keyed by dotted field path."""
        out: Dict[str, float] = {}
        for group in ("visual_balance", "texture_density"):
            for name, value in getattr(self, group).model_dump().items():
                out[f"{group}.{name}"] = value
        return out


class GenerationResult(BaseModel):
    """Validated reply of the generative service."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    midjourney: str
    dalle: str
    stable_diffusion: str = Field(..., alias="stableDiffusion")
    design_intent: str = Field(..., alias="designIntent")
    insight: InsightDashboard


class GenerationRequest(BaseModel):
    """Serialized view of a brief, one per outbound generation call."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    idea: str
    style_tags: Tuple[str, ...] = Field(..., alias="styleTags")
    background_colors: Tuple[str, ...] = Field(..., alias="backgroundColors")
    object_colors: Tuple[str, ...] = Field(..., alias="objectColors")
    camera: str
    ratio: str
    output_language: OutputLanguage = Field(..., alias="outputLanguage")
    reference_image: Optional[ReferenceImage] = Field(None, alias="referenceImage")


# Briefs API bodies
class IdeaUpdate(BaseModel):
    idea: str = Field(..., max_length=4000, description="Free-text idea", examples=["A cozy reading nook"])


class CameraUpdate(BaseModel):
    camera: Camera = Field(..., examples=["Isometric"])


class RatioUpdate(BaseModel):
    ratio: Ratio = Field(..., examples=["16:9"])


class ColorToggle(BaseModel):
    color: str = Field(..., description="Hex color code", examples=["#FF0000"])

    @field_validator('color')
    @classmethod
    def validate_hex_color(cls, v):
        """Validate hex color format."""
        if not HEX_COLOR_RE.match(v.strip()):
            raise ValueError(f'Invalid hex color format: {v}')
        return v


class ReferenceImageUpload(BaseModel):
    image: str = Field(..., description="data:image/...;base64,... URL or bare base64")
    analyze: bool = Field(False, description="Run image analysis after storing the image")


class AnalyzeRequest(BaseModel):
    image: Optional[str] = Field(
        None,
        description="Image to analyze; defaults to the brief's reference image",
    )


class GenerateRequest(BaseModel):
    output_language: Optional[OutputLanguage] = Field(None, alias="outputLanguage")

    model_config = ConfigDict(populate_by_name=True)


class BriefView(BaseModel):
    idea: str
    style_tags: List[str] = Field(..., alias="styleTags")
    background_colors: List[str] = Field(..., alias="backgroundColors")
    object_colors: List[str] = Field(..., alias="objectColors")
    camera: str
    ratio: str
    has_reference_image: bool = Field(..., alias="hasReferenceImage")

    model_config = ConfigDict(populate_by_name=True)


class BriefSessionResponse(BaseModel):
    session_id: str
    brief: BriefView
    last_result: Optional[GenerationResult] = None


class AnalyzeResponse(BaseModel):
    session_id: str
    applied: bool = Field(..., description="False when a newer analysis superseded this one")
    brief: BriefView


class GenerateResponse(BaseModel):
    session_id: str
    request: GenerationRequest
    result: GenerationResult
