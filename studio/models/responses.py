"""
Webhook response schemas.

Each webhook answers with a bare object or an array of result objects depending
on the discriminator it was called with; the parsers below validate the shape at
the boundary and raise ResponseFormatError on anything else.
"""
from typing import Any, List

from pydantic import BaseModel, ValidationError, field_validator

from studio.exceptions.handlers import ResponseFormatError

UNTITLED = "Título não disponível"


class TitlesOutput(BaseModel):
    """`output` object of a title generation result."""
    titulos: dict[str, str]


class TitlesEnvelope(BaseModel):
    """One element of the title generation response."""
    output: TitlesOutput


class GeneratedScript(BaseModel):
    """A script produced by content generation."""
    id_roteiro: str
    titulo: str = UNTITLED
    roteiro: str = ""
    audio_path: str | None = None

    @field_validator("id_roteiro", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Ids arrive as numbers or strings."""
        return str(v)


class GeneratedImages(BaseModel):
    """Images produced for a script."""
    id_roteiro: str
    titulo: str = UNTITLED
    images_path: List[str] = []

    @field_validator("id_roteiro", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Ids arrive as numbers or strings."""
        return str(v)


class Ack(BaseModel):
    """Acknowledgement from an update webhook."""
    success: bool = False


def parse_titles(payload: Any) -> List[str]:
    """Titles in key order from `[{"output": {"titulos": {...}}}]`."""
    if not isinstance(payload, list) or not payload:
        raise ResponseFormatError("a non-empty list of title results", payload)
    try:
        envelope = TitlesEnvelope.model_validate(payload[0])
    except ValidationError as e:
        raise ResponseFormatError("output.titulos object", payload) from e
    return [title for title in envelope.output.titulos.values() if title]


def parse_scripts(payload: Any) -> List[GeneratedScript]:
    """Scripts from a list of `{id_roteiro, titulo, roteiro, audio_path}`."""
    if not isinstance(payload, list):
        raise ResponseFormatError("a list of scripts", payload)
    scripts = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ResponseFormatError("script objects", payload)
        data = {k: v for k, v in item.items() if v not in (None, "")}
        data.setdefault("id_roteiro", f"temp-{index}")
        try:
            scripts.append(GeneratedScript.model_validate(data))
        except ValidationError as e:
            raise ResponseFormatError("script objects", payload) from e
    return scripts


def parse_images(payload: Any) -> List[GeneratedImages]:
    """Image results from a list of `{id_roteiro, titulo, images_path}`."""
    if not isinstance(payload, list):
        raise ResponseFormatError("a list of image results", payload)
    try:
        return [GeneratedImages.model_validate(item) for item in payload]
    except ValidationError as e:
        raise ResponseFormatError("image result objects", payload) from e


def parse_ack(payload: Any) -> bool:
    """True for `{"success": true}` or `[{"success": true}]`."""
    if isinstance(payload, list):
        payload = payload[0] if payload else {}
    if not isinstance(payload, dict):
        return False
    try:
        return Ack.model_validate(payload).success is True
    except ValidationError:
        return False
