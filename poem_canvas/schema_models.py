import base64
import logging
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# Dark text on a pale background; never chosen by the model.
FONT_COLOR = "#1A202C"


class TextPlacement(str, Enum):
    CENTER = "center"
    TOP_CENTER = "top-center"
    BOTTOM_CENTER = "bottom-center"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def region(self) -> str:
        """Placement in words, e.g. 'top left'."""
        return self.value.replace("-", " ")


class TextStyle(str, Enum):
    SHADOW = "shadow"
    GLOW = "glow"
    OVERLAY = "overlay"


def _coerce_enum(value, enum_cls, default, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        logger.warning(f"Unrecognized {field_name} {value!r}, falling back to {default.value!r}")
        return default


class PoemAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="The final, formatted title of the poem")
    author: str = Field(..., description="The author of the poem, 'Anonymous' when unknown")
    body: str = Field(..., description="The poem body in free verse, line breaks preserved")
    emotions: List[str] = Field(..., description="1-3 dominant emotions")
    imagery: List[str] = Field(..., description="2-4 key visual elements")
    atmosphere: str = Field(..., description="A single word for the overall mood")
    art_style: str = Field(..., alias="artStyle", description="A concise art style description")
    text_placement: TextPlacement = Field(..., alias="textPlacement", description="Where the text block sits")
    text_style: TextStyle = Field(..., alias="textStyle", description="Legibility treatment for the text")

    @field_validator("text_placement", mode="before")
    @classmethod
    def _placement_or_center(cls, value):
        return _coerce_enum(value, TextPlacement, TextPlacement.CENTER, "textPlacement")

    @field_validator("text_style", mode="before")
    @classmethod
    def _style_or_shadow(cls, value):
        return _coerce_enum(value, TextStyle, TextStyle.SHADOW, "textStyle")


class GenerationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    author: str
    body: str
    background_image: str = Field(..., alias="backgroundImage", description="Base64-encoded JPEG bytes")
    font_color: str = Field(FONT_COLOR, alias="fontColor")
    text_placement: TextPlacement = Field(..., alias="textPlacement")
    text_style: TextStyle = Field(..., alias="textStyle")

    @classmethod
    def from_analysis(cls, analysis: PoemAnalysis, image_bytes: bytes) -> "GenerationResult":
        return cls(
            title=analysis.title,
            author=analysis.author,
            body=analysis.body,
            background_image=base64.b64encode(image_bytes).decode("utf-8"),
            font_color=FONT_COLOR,
            text_placement=analysis.text_placement,
            text_style=analysis.text_style,
        )

    @property
    def image_bytes(self) -> bytes:
        return base64.b64decode(self.background_image)

    def to_payload(self) -> dict:
        """camelCase dict, as handed to the presentation layer."""
        return self.model_dump(by_alias=True, mode="json")


class PoemImage(BaseModel):
    """An uploaded photo or scan of a poem."""
    data: bytes
    mime_type: str = "image/jpeg"
    name: Optional[str] = None

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")
