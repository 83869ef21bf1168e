"""
Provider registry: proxy functions and the platform to provider mapping.
"""
from typing import Dict, Type

from . import elevenlabs, fish_audio, minimax, runware
from .base import FUNCTIONS, BaseProvider, ProxyFunction, get_function, register_function
from .elevenlabs import ElevenLabsProvider
from .fish_audio import FishAudioProvider
from .minimax import MinimaxProvider
from .openrouter import OpenRouterProvider
from .runware import RunwareProvider

register_function(ProxyFunction(
    name="fetch-elevenlabs-voice",
    provider_cls=ElevenLabsProvider,
    handler=elevenlabs.fetch_function,
    identifier_field="voice_id",
    identifier_error="voice_id is required",
))
register_function(ProxyFunction(
    name="fetch-fish-audio-voice",
    provider_cls=FishAudioProvider,
    handler=fish_audio.fetch_function,
    identifier_field="voice_id",
    identifier_error="voice_id is required",
))
register_function(ProxyFunction(
    name="fetch-minimax-voice",
    provider_cls=MinimaxProvider,
    handler=minimax.fetch_function,
    identifier_field="voice_id",
    identifier_error="voice_id is required",
))
register_function(ProxyFunction(
    name="fetch-runware-model",
    provider_cls=RunwareProvider,
    handler=runware.fetch_function,
    identifier_field="air",
    identifier_error="AIR is required",
))
register_function(ProxyFunction(
    name="list-elevenlabs-voices",
    provider_cls=ElevenLabsProvider,
    handler=elevenlabs.list_function,
))
register_function(ProxyFunction(
    name="list-fish-audio-voices",
    provider_cls=FishAudioProvider,
    handler=fish_audio.list_function,
))
register_function(ProxyFunction(
    name="list-minimax-voices",
    provider_cls=MinimaxProvider,
    handler=minimax.list_function,
))

# Voice platforms as stored in `apis.plataforma`
VOICE_PROVIDERS: Dict[str, Type[BaseProvider]] = {
    "ElevenLabs": ElevenLabsProvider,
    "Fish-Audio": FishAudioProvider,
    "Minimax": MinimaxProvider,
}

__all__ = [
    "BaseProvider",
    "FUNCTIONS",
    "ProxyFunction",
    "VOICE_PROVIDERS",
    "get_function",
    "register_function",
    "ElevenLabsProvider",
    "FishAudioProvider",
    "MinimaxProvider",
    "OpenRouterProvider",
    "RunwareProvider",
]
