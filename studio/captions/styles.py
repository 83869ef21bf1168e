"""
Caption style models.

`segments` renders classic per-segment subtitles, `highlight` renders karaoke
captions with the spoken word highlighted.
"""
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

CaptionType = Literal["segments", "highlight"]

Position = Literal[
    "bottom_left", "bottom_center", "bottom_right",
    "middle_left", "middle_center", "middle_right",
    "top_left", "top_center", "top_right",
]

POSITIONS = {
    "bottom_left": "Inferior Esquerda",
    "bottom_center": "Inferior Centro",
    "bottom_right": "Inferior Direita",
    "middle_left": "Meio Esquerda",
    "middle_center": "Meio Centro",
    "middle_right": "Meio Direita",
    "top_left": "Superior Esquerda",
    "top_center": "Superior Centro",
    "top_right": "Superior Direita",
}

# 1 outline, 3 box, 4 rounded box
BORDER_STYLES = {1: "Contorno", 3: "Caixa", 4: "Arredondado"}

FONTS = [
    "Arial",
    "Arial Black",
    "The Luckiest Guy",
    "Impact",
    "Helvetica",
    "Times New Roman",
    "Courier New",
    "Verdana",
    "Georgia",
    "Comic Sans MS",
    "Trebuchet MS",
    "Montserrat",
    "Roboto",
    "Open Sans",
]


class _Style(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_assignment=True)


class SegmentsFont(_Style):
    name: str = "Arial"
    size: int = Field(default=36, ge=20, le=200)
    bold: bool = True


class SegmentsColors(_Style):
    primary: str = "#FFFFFF"
    outline: str = "#000000"


class SegmentsBorder(_Style):
    style: Literal[1, 3, 4] = 1
    width: int = Field(default=3, ge=0, le=10)


class SegmentsPosition(_Style):
    alignment: Position = "bottom_center"
    marginVertical: int = Field(default=20, ge=0, le=500)


class SegmentsStyle(_Style):
    """Segmented subtitle style."""
    font: SegmentsFont = Field(default_factory=SegmentsFont)
    colors: SegmentsColors = Field(default_factory=SegmentsColors)
    border: SegmentsBorder = Field(default_factory=SegmentsBorder)
    position: SegmentsPosition = Field(default_factory=SegmentsPosition)


class HighlightStyle(_Style):
    """Karaoke style; `highlight_texto_cor` falls back to `texto_cor`."""
    fonte: str = "Arial Black"
    tamanho_fonte: int = Field(default=72, ge=20, le=200)
    fundo_cor: str = "#000000"
    fundo_opacidade: int = Field(default=50, ge=0, le=100)
    fundo_arredondado: bool = True
    texto_cor: str = "#FFFFFF"
    highlight_texto_cor: Optional[str] = None
    highlight_cor: str = "#D60000"
    highlight_borda: int = Field(default=12, ge=0, le=50)
    padding_horizontal: int = Field(default=40, ge=0, le=500)
    padding_vertical: int = Field(default=80, ge=0, le=500)
    position: Position = "bottom_center"
    words_per_line: int = Field(default=4, ge=1, le=10)
    max_lines: int = Field(default=2, ge=1, le=5)


class CaptionStyleConfig(BaseModel):
    """Stored in `canais.caption_style`."""
    uppercase: bool = False
    type: CaptionType = "highlight"
    style: Union[SegmentsStyle, HighlightStyle]

    @classmethod
    def from_raw(cls, data: dict) -> "CaptionStyleConfig":
        """Parse a stored config, choosing the style shape from `type`."""
        caption_type = data.get("type") or "highlight"
        style_cls = SegmentsStyle if caption_type == "segments" else HighlightStyle
        return cls(
            uppercase=bool(data.get("uppercase", False)),
            type=caption_type,
            style=style_cls.model_validate(data.get("style") or {}),
        )

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)
