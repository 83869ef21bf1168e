"""
Caption style editing state and live preview geometry.
"""
import math
from typing import Any, Callable, Dict, List, Optional, Tuple

from studio.captions.styles import (
    CaptionStyleConfig,
    CaptionType,
    HighlightStyle,
    SegmentsStyle,
)
from studio.config import Settings, settings

# Previews are drawn against a 1080p frame
REFERENCE_HEIGHT = 1080

SAMPLE_WORDS = [
    "Esta", "é", "uma", "demonstração", "visual", "de", "legendas", "no", "estilo",
    "karaoke", "com", "destaque", "palavra", "por", "palavra", "ajuste", "os", "controles",
]

JUSTIFY = {"left": "flex-start", "right": "flex-end"}
ALIGN = {"top": "flex-start", "bottom": "flex-end"}

NESTED_SEGMENT_FIELDS = ("font", "colors", "border", "position")


def _px(value: float) -> str:
    value = float(value)
    number = str(int(value)) if value.is_integer() else repr(value)
    return f"{number}px"


def _placement(position: str) -> Dict[str, str]:
    vertical, horizontal = position.split("_")
    return {
        "justifyContent": JUSTIFY.get(horizontal, "center"),
        "alignItems": ALIGN.get(vertical, "center"),
    }


def preview_scale(container_height: float) -> float:
    """Scale of a preview box relative to a 1080p frame."""
    return container_height / REFERENCE_HEIGHT


def opacity_hex(percent: int) -> str:
    """Two digit hex alpha for a 0-100 opacity."""
    return format(math.floor(percent * 2.55 + 0.5), "02x")


def preview_image_url(config: Optional[Settings] = None) -> str:
    config = config or settings
    return f"{config.minio_url}{config.preview_image_path}"


class CaptionStyleEditor:
    """Holds both caption styles and emits the active configuration on every change."""

    def __init__(
        self,
        initial_config: Optional[Dict[str, Any]] = None,
        on_change: Optional[Callable[[Dict[str, Any]], None]] = None,
    ):
        initial = initial_config or {}
        self.on_change = on_change
        self.type: CaptionType = initial.get("type") or "highlight"
        self.uppercase: bool = bool(initial.get("uppercase", False))
        initial_style = initial.get("style") or {}
        self.segments = SegmentsStyle.model_validate(initial_style if self.type == "segments" else {})
        self.highlight = HighlightStyle.model_validate(initial_style if self.type == "highlight" else {})
        self._emit()

    @property
    def active_style(self):
        return self.segments if self.type == "segments" else self.highlight

    @property
    def config(self) -> CaptionStyleConfig:
        return CaptionStyleConfig(uppercase=self.uppercase, type=self.type, style=self.active_style)

    def _emit(self) -> None:
        if self.on_change is not None:
            self.on_change(self.config.to_payload())

    def set_type(self, caption_type: CaptionType) -> None:
        if caption_type not in ("segments", "highlight"):
            raise ValueError(f"Unknown caption type: {caption_type}")
        self.type = caption_type
        self._emit()

    def set_uppercase(self, value: bool) -> None:
        self.uppercase = bool(value)
        self._emit()

    def update_segments(self, **updates) -> None:
        """Merge `updates` into the segments style; nested groups merge field by field."""
        data = self.segments.model_dump()
        for key, value in updates.items():
            if key in NESTED_SEGMENT_FIELDS and isinstance(value, dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        self.segments = SegmentsStyle.model_validate(data)
        self._emit()

    def update_highlight(self, **updates) -> None:
        data = {**self.highlight.model_dump(), **updates}
        self.highlight = HighlightStyle.model_validate(data)
        self._emit()

    # Preview

    def preview_styles(self, scale: float) -> Dict[str, Dict[str, str]]:
        """Inline CSS for the preview of the active style at `scale`."""
        if self.type == "segments":
            return self._segments_preview(scale)
        return self._highlight_preview(scale)

    def _segments_preview(self, scale: float) -> Dict[str, Dict[str, str]]:
        style = self.segments
        width = style.border.width * scale
        outline = style.colors.outline
        shadow = ", ".join(
            f"{dx}{_px(width)} {dy}{_px(width)} 0 {outline}"
            for dx, dy in (("-", "-"), ("", "-"), ("-", ""), ("", ""))
        )
        return {
            "container": {
                **_placement(style.position.alignment),
                "padding": f"{_px(style.position.marginVertical * scale)} {_px(20 * scale)}",
            },
            "text": {
                "fontFamily": style.font.name,
                "fontSize": _px(style.font.size * scale),
                "fontWeight": "bold" if style.font.bold else "normal",
                "color": style.colors.primary,
                "textShadow": shadow,
            },
        }

    def _highlight_preview(self, scale: float) -> Dict[str, Dict[str, str]]:
        style = self.highlight
        # Burned-in strokes look heavier than CSS ones, hence the doubling
        stroke = f"{_px(style.highlight_borda * scale * 2)} {style.highlight_cor}"
        bg_padding = 16 * scale
        return {
            "container": {
                **_placement(style.position),
                "padding": f"{_px(style.padding_vertical * scale)} {_px(style.padding_horizontal * scale)}",
            },
            "background": {
                "backgroundColor": f"{style.fundo_cor}{opacity_hex(style.fundo_opacidade)}",
                "borderRadius": _px(12 * scale if style.fundo_arredondado else 0),
                "padding": f"{_px(bg_padding)} {_px(bg_padding * 1.5)}",
            },
            "text": {
                "fontFamily": style.fonte,
                "fontSize": _px(style.tamanho_fonte * scale),
                "fontWeight": "bold",
                "color": style.texto_cor,
            },
            "highlight": {
                "color": style.highlight_texto_cor or style.texto_cor,
                "WebkitTextStroke": stroke,
                "textStroke": stroke,
                "paintOrder": "stroke fill",
            },
        }

    def karaoke_lines(self) -> List[List[Tuple[str, bool]]]:
        """Sample caption lines as `(word, highlighted)` pairs."""
        per_line = self.highlight.words_per_line
        words = SAMPLE_WORDS[: per_line * self.highlight.max_lines]
        lines = [words[i:i + per_line] for i in range(0, len(words), per_line)]
        if not lines:
            return []
        line_index = len(lines) // 2
        word_index = len(lines[line_index]) // 2
        return [
            [(word, i == line_index and j == word_index) for j, word in enumerate(line)]
            for i, line in enumerate(lines)
        ]
