"""
Content generation workflow.

One state machine drives both flavours of the generation screen. With
`legacy_modes` the caller picks script-only, script+audio or audio-only
generation and generates images separately; without it every added title is
sent with a per-title media description (audio, images and optional video).
"""
import base64
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from studio.clients.service_client import ServiceClient
from studio.exceptions.handlers import WorkflowBusyError, WorkflowValidationError
from studio.hooks.api_state import CollectionHook
from studio.logging.config import get_structured_logger
from studio.models.records import Channel, ImageModel, Script, Voice
from studio.models.responses import (
    GeneratedImages,
    GeneratedScript,
    parse_images,
    parse_scripts,
    parse_titles,
)
from studio.repositories.supabase import SupabaseRepository
from studio.services.channels import resolve_preferred_voice

logger = get_structured_logger(__name__)

MIN_IMAGE_SIDE = 128
IMAGE_SIDE_STEP = 64
MAX_RANDOM_VIDEOS = 50


class WorkflowState(str, Enum):
    IDLE = "idle"
    TITLES_GENERATING = "titles_generating"
    TITLES_READY = "titles_ready"
    SCRIPT_GENERATING = "script_generating"
    SCRIPTS_READY = "scripts_ready"
    AUDIO_GENERATING = "audio_generating"
    IMAGES_GENERATING = "images_generating"


class GenerationMode(str, Enum):
    """Legacy generation modes, sent as `tipo_geracao`."""
    SCRIPT = "gerar_roteiro"
    SCRIPT_AUDIO = "gerar_roteiro_audio"
    AUDIO = "gerar_audio"


class VideoMethod(str, Enum):
    IMAGE_TO_VIDEO = "image-to-video"
    VIDEO_TO_VIDEO = "video-to-video"


@dataclass(frozen=True)
class WorkflowCapabilities:
    """Feature switches of a workflow instance."""
    legacy_modes: bool = True

    @property
    def titles_type(self) -> str:
        return "gerar_titulos" if self.legacy_modes else "titulos"


@dataclass
class TitleItem:
    id: str
    text: str


@dataclass
class MediaOptions:
    """Per-title media settings for the `conteudo` generation."""
    model: str
    language: str = "Português-Brasil"
    speed: float = 1.0
    generate_video: bool = False
    video_method: VideoMethod = VideoMethod.IMAGE_TO_VIDEO
    caption: bool = False
    image_model_id: Optional[int] = None
    # None falls back to the style collected for the channel
    image_style: Optional[str] = None
    image_style_detail: Optional[str] = None
    image_width: int = 1344
    image_height: int = 768
    n_imgs: int = 10


def regen_image_payload(script_id: int, index: int, image_info: Dict[str, Any]) -> Dict[str, Any]:
    """Payload that re-renders one image of a script in place."""
    return {
        "id_roteiro": script_id,
        "index": index,
        "image_info": {
            "altura": image_info.get("altura"),
            "largura": image_info.get("largura"),
            "modelo": image_info.get("modelo"),
            "prompt": image_info.get("prompt"),
        },
        "tipo_geracao": "regen_image",
    }


def drive_view_url(file_id: str) -> str:
    return f"https://drive.google.com/file/d/{file_id}/view"


def _now_ms() -> int:
    return int(time.time() * 1000)


class ContentGenerationWorkflow:
    """Titles, scripts, audio and images for a channel."""

    def __init__(
        self,
        client: ServiceClient,
        repository=SupabaseRepository,
        capabilities: Optional[WorkflowCapabilities] = None,
        on_change: Optional[Callable[["ContentGenerationWorkflow"], None]] = None,
    ):
        self.client = client
        self.repository = repository
        self.capabilities = capabilities or WorkflowCapabilities()
        self.on_change = on_change

        self.state = WorkflowState.IDLE
        self.loading = False
        self.collecting_style = False

        self._channels = CollectionHook(lambda: run_in_threadpool(self.repository.list_channels, "nome_canal"))
        self._voices = CollectionHook(lambda: run_in_threadpool(self.repository.list_voices))
        self._image_models = CollectionHook(lambda: run_in_threadpool(self.repository.list_image_models))

        self.selected_channel_id: Optional[int] = None
        self.selected_voice_id: Optional[int] = None
        self.mode = GenerationMode.SCRIPT

        self.generated_titles: List[TitleItem] = []
        self.added_titles: List[TitleItem] = []
        self.editing_title_id: Optional[str] = None
        self.editing_text = ""

        self.scripts_without_audio: List[Script] = []
        self.scripts_without_images: List[Script] = []
        self.scripts_reload_error: Optional[str] = None
        self.audio_selection: List[int] = []
        self.image_settings: Dict[int, Dict[str, int]] = {}

        self.generated_scripts: List[GeneratedScript] = []
        self.generated_images: List[GeneratedImages] = []

        self.image_style = ""
        self.image_style_detail = ""
        self.drive_videos_by_title: Dict[str, List[str]] = {}

    # Catalogs

    @property
    def channels(self) -> List[Channel]:
        return self._channels.data

    @property
    def voices(self) -> List[Voice]:
        return self._voices.data

    @property
    def image_models(self) -> List[ImageModel]:
        return self._image_models.data

    @property
    def catalog_errors(self) -> Dict[str, str]:
        """Load errors of the channel, voice and image model lists."""
        hooks = {"channels": self._channels, "voices": self._voices, "image_models": self._image_models}
        return {name: hook.error for name, hook in hooks.items() if hook.error}

    async def load_catalogs(self) -> None:
        """Load channels, voices and image models."""
        await self._channels.refetch()
        await self._voices.refetch()
        await self._image_models.refetch()
        self._emit()

    @property
    def selected_channel(self) -> Optional[Channel]:
        return next((c for c in self.channels if c.id == self.selected_channel_id), None)

    @property
    def selected_voice(self) -> Optional[Voice]:
        return next((v for v in self.voices if v.id == self.selected_voice_id), None)

    def select_channel(self, channel_id: Optional[int]) -> None:
        """Select a channel and pre-select its preferred voice."""
        self.selected_channel_id = channel_id
        self.scripts_without_audio = []
        self.scripts_without_images = []
        self.audio_selection = []
        self.image_settings = {}
        channel = self.selected_channel
        voice = resolve_preferred_voice(channel, self.voices) if channel else None
        self.selected_voice_id = voice.id if voice else None
        self._emit()

    def select_voice(self, voice_id: Optional[int]) -> None:
        self.selected_voice_id = voice_id
        self._emit()

    def set_generation_mode(self, mode: GenerationMode) -> None:
        self.mode = GenerationMode(mode)
        self._emit()

    # Transitions

    def _emit(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    async def _transition(
        self,
        busy: WorkflowState,
        call: Callable[[], Awaitable[Any]],
        done: Optional[WorkflowState] = None,
    ) -> Any:
        """Run one network call in `busy`; the state reverts when it fails."""
        if self.loading:
            raise WorkflowBusyError(self.state.value)
        previous = self.state
        self.state = busy
        self.loading = True
        self._emit()
        try:
            result = await call()
        except Exception as e:
            logger.error("Workflow step %s failed: %s", busy.value, str(e))
            self.state = previous
            raise
        else:
            self.state = done or previous
        finally:
            self.loading = False
            self._emit()
        return result

    def _require_channel(self) -> int:
        if self.selected_channel_id is None:
            raise WorkflowValidationError("Select a channel first", "channel")
        return self.selected_channel_id

    # Titles

    async def generate_titles(self, idea: str, language: str = "pt-br") -> List[TitleItem]:
        """Ask the backend for title suggestions."""
        if self.selected_channel_id is None or not (idea or "").strip():
            raise WorkflowValidationError("Select a channel and enter a new idea", "idea")

        payload = {
            "id_canal": self.selected_channel_id,
            "nova_ideia": idea,
            "idioma": language,
            "tipo_geracao": self.capabilities.titles_type,
        }

        async def call():
            return parse_titles(await self.client.generate_content(payload))

        titles = await self._transition(WorkflowState.TITLES_GENERATING, call, WorkflowState.TITLES_READY)
        stamp = _now_ms()
        self.generated_titles = [TitleItem(f"generated-{stamp}-{i}", text) for i, text in enumerate(titles)]
        self._emit()
        return self.generated_titles

    def add_title(self, title_id: str) -> None:
        """Move a generated title into the added list (legacy: copy it)."""
        title = next((t for t in self.generated_titles if t.id == title_id), None)
        if title is None:
            return
        if self.capabilities.legacy_modes:
            self.added_titles.append(TitleItem(f"added-{_now_ms()}", title.text))
        elif not any(t.id == title.id for t in self.added_titles):
            self.added_titles.append(TitleItem(title.id, title.text))
            self.generated_titles = [t for t in self.generated_titles if t.id != title.id]
        self._emit()

    def add_manual_title(self, text: str) -> Optional[TitleItem]:
        text = (text or "").strip()
        if not text:
            return None
        item = TitleItem(f"manual-{_now_ms()}", text)
        self.added_titles.append(item)
        self._emit()
        return item

    def start_edit(self, title_id: str) -> None:
        title = next((t for t in self.added_titles if t.id == title_id), None)
        if title is not None:
            self.editing_title_id = title.id
            self.editing_text = title.text
            self._emit()

    def save_edit(self, text: Optional[str] = None) -> None:
        """Store the edited text; blank edits are ignored outside legacy mode."""
        if self.editing_title_id is None:
            return
        if text is not None:
            self.editing_text = text
        new_text = self.editing_text
        if not self.capabilities.legacy_modes:
            if not new_text.strip():
                return
            new_text = new_text.strip()
        for title in self.added_titles:
            if title.id == self.editing_title_id:
                title.text = new_text
        self.cancel_edit()

    def cancel_edit(self) -> None:
        self.editing_title_id = None
        self.editing_text = ""
        self._emit()

    def remove_title(self, title_id: str) -> None:
        self.added_titles = [t for t in self.added_titles if t.id != title_id]
        self.drive_videos_by_title.pop(title_id, None)
        self._emit()

    # Existing scripts

    async def load_scripts_without_audio(self) -> List[Script]:
        channel_id = self._require_channel()
        self.scripts_without_audio = await run_in_threadpool(self.repository.scripts_without_audio, channel_id)
        self._emit()
        return self.scripts_without_audio

    async def load_scripts_without_images(self) -> List[Script]:
        channel_id = self._require_channel()
        self.scripts_without_images = await run_in_threadpool(self.repository.scripts_without_images, channel_id)
        self._emit()
        return self.scripts_without_images

    async def _reload_scripts_without_images(self) -> None:
        """Refresh the list after a generation; a failure is recorded, not raised."""
        try:
            await self.load_scripts_without_images()
            self.scripts_reload_error = None
        except Exception as e:
            logger.error("Reloading scripts without images failed: %s", str(e))
            self.scripts_reload_error = str(e)
            self._emit()

    def toggle_script_for_audio(self, script_id: int) -> None:
        if script_id in self.audio_selection:
            self.audio_selection.remove(script_id)
        else:
            self.audio_selection.append(script_id)
        self._emit()

    def clear_audio_selection(self) -> None:
        self.audio_selection = []
        self._emit()

    def toggle_script_for_images(self, script_id: int) -> None:
        if script_id in self.image_settings:
            del self.image_settings[script_id]
        else:
            self.image_settings[script_id] = {"n_imgs": 1}
        self._emit()

    def set_image_count(self, script_id: int, n_imgs: int) -> None:
        if script_id in self.image_settings:
            self.image_settings[script_id]["n_imgs"] = n_imgs
            self._emit()

    def clear_image_selection(self) -> None:
        self.image_settings = {}
        self._emit()

    # Legacy generation

    async def generate_content(self, model: str, language: str, speed: float = 1.0) -> List[GeneratedScript]:
        """Scripts, scripts with audio, or audio for existing scripts."""
        voice = self.selected_voice
        if self.mode is GenerationMode.AUDIO:
            if not self.audio_selection or voice is None:
                raise WorkflowValidationError("Select at least one script and a voice to generate audio", "voice")
            payload = {
                "id_roteiro": list(self.audio_selection),
                "voice_id": voice.voice_id,
                "speed": speed,
                "tipo_geracao": self.mode.value,
            }
            busy = WorkflowState.AUDIO_GENERATING
        else:
            if (
                self.selected_channel_id is None
                or not self.added_titles
                or not (model or "").strip()
                or not (language or "").strip()
            ):
                raise WorkflowValidationError(
                    "Select a channel, add at least one title, pick a model and enter the language"
                )
            if self.mode is GenerationMode.SCRIPT_AUDIO and voice is None:
                raise WorkflowValidationError("This mode needs a voice", "voice")
            payload = {
                "id_canal": self.selected_channel_id,
                "titulos": [t.text for t in self.added_titles],
                "modelo": model,
                "idioma": language,
                "tipo_geracao": self.mode.value,
            }
            if self.mode is GenerationMode.SCRIPT_AUDIO:
                payload["id_voz"] = voice.voice_id
                payload["speed"] = speed
            busy = WorkflowState.SCRIPT_GENERATING

        async def call():
            return parse_scripts(await self.client.generate_content(payload))

        self.generated_scripts = await self._transition(busy, call, WorkflowState.SCRIPTS_READY)
        self._emit()
        return self.generated_scripts

    async def generate_images(
        self,
        model_air: str,
        style: str,
        style_detail: str,
        width: int,
        height: int,
    ) -> List[GeneratedImages]:
        """Images for the selected scripts that still have none."""
        if not self.image_settings or not model_air:
            raise WorkflowValidationError("Select at least one script and an image model", "img_model")
        if not (style or "").strip() or not (style_detail or "").strip():
            raise WorkflowValidationError("Fill in the visual style and its detail", "estilo")
        for side in (width, height):
            if side < MIN_IMAGE_SIDE or side % IMAGE_SIDE_STEP != 0:
                raise WorkflowValidationError(
                    f"Dimensions must be multiples of {IMAGE_SIDE_STEP} and at least {MIN_IMAGE_SIDE}px",
                    "dimensions",
                )
        if any(s.get("n_imgs", 0) < 1 for s in self.image_settings.values()):
            raise WorkflowValidationError("Set the number of images for every selected script", "n_imgs")

        payload = {
            "roteiros": [
                {"id_roteiro": int(script_id), "n_imgs": s["n_imgs"]}
                for script_id, s in self.image_settings.items()
            ],
            "img_model": model_air,
            "estilo": style,
            "detalhe_estilo": style_detail,
            "altura": height,
            "largura": width,
            "tipo_geracao": "gerar_imagens",
        }

        async def call():
            return parse_images(await self.client.generate_content(payload))

        self.generated_images = await self._transition(WorkflowState.IMAGES_GENERATING, call)
        self.clear_image_selection()
        await self._reload_scripts_without_images()
        return self.generated_images

    # Per-title media generation

    def set_title_videos(self, title_id: str, urls: List[str]) -> None:
        self.drive_videos_by_title[title_id] = list(urls)
        self._emit()

    def select_random_videos(self, title_id: str, count: int, available_ids: List[str]) -> List[str]:
        """Pick `count` distinct drive videos at random for a title."""
        if not count or count < 1 or count > MAX_RANDOM_VIDEOS:
            raise WorkflowValidationError(f"Pick a number between 1 and {MAX_RANDOM_VIDEOS}", "count")
        if not available_ids:
            raise WorkflowValidationError("No videos available to pick from", "videos")
        picked = random.sample(list(available_ids), min(count, len(available_ids)))
        urls = [drive_view_url(file_id) for file_id in picked]
        self.set_title_videos(title_id, urls)
        return urls

    def _image_block(self, options: MediaOptions, model: ImageModel) -> Dict[str, Any]:
        style = self.image_style if options.image_style is None else options.image_style
        detail = self.image_style_detail if options.image_style_detail is None else options.image_style_detail
        return {
            "model_id": model.air,
            "style": style,
            "style_detail": detail,
            "width": options.image_width,
            "height": options.image_height,
            "n_imgs": options.n_imgs,
        }

    def build_media_payload(self, options: MediaOptions) -> Dict[str, Any]:
        """Validate the selection and build the `conteudo` payload."""
        if not self.added_titles:
            raise WorkflowValidationError("Add at least one title", "titulos")
        if not options.model:
            raise WorkflowValidationError("Select a script model", "modelo_roteiro")

        voice = self.selected_voice
        image_model = next((m for m in self.image_models if m.id == options.image_model_id), None)
        method = VideoMethod(options.video_method)
        needs_image = not options.generate_video or method is VideoMethod.IMAGE_TO_VIDEO

        if not options.generate_video:
            if voice is None:
                raise WorkflowValidationError("Select a voice for audio generation", "voice")
            if image_model is None:
                raise WorkflowValidationError("Select an image model", "image_model")
        channel_id = self._require_channel()

        if options.generate_video and method is VideoMethod.VIDEO_TO_VIDEO:
            missing = [t.text for t in self.added_titles if not self.drive_videos_by_title.get(t.id)]
            if missing:
                raise WorkflowValidationError(
                    "Select videos for every title. Missing: " + ", ".join(missing), "videos"
                )
        if voice is None:
            raise WorkflowValidationError("Select a voice", "voice")
        if needs_image and image_model is None:
            raise WorkflowValidationError("Select an image model", "image_model")

        audio = {"voice_id": voice.voice_id, "speed": options.speed}
        titles = []
        for title in self.added_titles:
            media: Dict[str, Any] = {"audio": dict(audio)}
            if not options.generate_video:
                media["imagem"] = self._image_block(options, image_model)
                media["video"] = {"type": "imagem", "generate": False}
            elif method is VideoMethod.VIDEO_TO_VIDEO:
                media["video"] = {
                    "type": "video",
                    "generate": True,
                    "caption": options.caption,
                    "videos_url": list(self.drive_videos_by_title.get(title.id, [])),
                }
            else:
                media["imagem"] = self._image_block(options, image_model)
                media["video"] = {"type": "imagem", "generate": True, "caption": options.caption}
            titles.append({"titulo": title.text, "media": media})

        payload: Dict[str, Any] = {
            "canal_id": int(channel_id),
            "modelo_roteiro": options.model,
            "idioma": options.language,
            "tipo_geracao": "conteudo",
        }
        if not options.generate_video:
            payload["audio"] = dict(audio)
        payload["titulos"] = titles
        return payload

    async def generate_media_content(self, options: MediaOptions) -> Any:
        """Start script, audio, image and video generation for every added title."""
        payload = self.build_media_payload(options)
        result = await self._transition(
            WorkflowState.SCRIPT_GENERATING,
            lambda: self.client.generate_content(payload),
            WorkflowState.SCRIPTS_READY,
        )
        logger.info("Content generation started for %d title(s)", len(payload["titulos"]))
        return result

    async def regenerate_image(self, script_id: int, index: int, image_info: Dict[str, Any]) -> Any:
        """Re-render one image of a stored script."""
        payload = regen_image_payload(script_id, index, image_info)
        return await self._transition(
            WorkflowState.IMAGES_GENERATING,
            lambda: self.client.generate_content(payload),
        )

    async def collect_style(self, image: bytes) -> Dict[str, str]:
        """Derive the image style of the selected channel from a reference picture."""
        if not image:
            raise WorkflowValidationError("Select or paste an image first", "image")
        channel_id = self._require_channel()
        if self.collecting_style:
            raise WorkflowBusyError("collecting_style")

        self.collecting_style = True
        self._emit()
        try:
            encoded = base64.b64encode(image).decode("ascii")
            await self.client.collect_channel_style(int(channel_id), encoded)
            style = await run_in_threadpool(self.repository.get_channel_style, channel_id)
            if isinstance(style, dict) and style:
                self.image_style = style.get("main_style") or ""
                self.image_style_detail = style.get("detailed_style") or ""
            await self._channels.refetch()
        finally:
            self.collecting_style = False
            self._emit()
        return {"main_style": self.image_style, "detailed_style": self.image_style_detail}
