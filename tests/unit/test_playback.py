"""Audio playback and voice preview tests."""
import asyncio
from unittest.mock import Mock

import httpx
import pytest

from studio.exceptions.handlers import AppValidationError, ExternalServiceError
from studio.models.records import Voice
from studio.workflows.playback import AudioPlayer, VoicePreviewService


class TestAudioPlayer:
    """Single clip playback."""

    def test_play_stops_previous(self):
        clips = {}

        def factory(url):
            clips[url] = Mock()
            return clips[url]

        player = AudioPlayer(factory)
        player.play("a", "https://cdn/a.mp3")
        player.play("b", "https://cdn/b.mp3")

        clips["https://cdn/a.mp3"].pause.assert_called_once()
        clips["https://cdn/a.mp3"].seek.assert_called_once_with(0)
        clips["https://cdn/b.mp3"].play.assert_called_once()
        assert player.is_playing("b")
        assert not player.is_playing("a")

    def test_stop_clears(self):
        player = AudioPlayer(lambda url: Mock())
        player.play("a", "u")
        player.stop()
        assert player.current is None
        assert not player.is_playing("a")

    def test_on_ended_only_for_current(self):
        player = AudioPlayer(lambda url: Mock())
        player.play("a", "u")
        player.on_ended("other")
        assert player.is_playing("a")
        player.on_ended("a")
        assert not player.is_playing("a")


class TestVoicePreviewService:
    """Server-side preview resolution."""

    def test_elevenlabs_stored_preview(self, http_client):
        service = VoicePreviewService(http_client, Mock())
        voice = Voice(id=1, nome_voz="Adam", plataforma="ElevenLabs", preview_url="https://cdn/adam.mp3")
        assert asyncio.run(service.preview_url(voice)) == "https://cdn/adam.mp3"

    def test_elevenlabs_without_preview(self, http_client):
        service = VoicePreviewService(http_client, Mock())
        voice = Voice(id=1, nome_voz="Adam", plataforma="ElevenLabs")
        with pytest.raises(AppValidationError):
            asyncio.run(service.preview_url(voice))

    def test_fish_audio_fetched_fresh(self, transport, http_client):
        transport.routes[("GET", "/model/fa1")] = httpx.Response(
            200, json={"_id": "fa1", "samples": [{"audio": "https://cdn/fresh.mp3"}]}
        )
        repository = Mock()
        repository.get_api_key.return_value = "fish_key"
        service = VoicePreviewService(http_client, repository)
        voice = Voice(id=2, nome_voz="Narrador", voice_id="fa1", plataforma="Fish-Audio",
                      preview_url="https://cdn/stale.mp3")

        assert asyncio.run(service.preview_url(voice)) == "https://cdn/fresh.mp3"
        repository.get_api_key.assert_called_once_with("Fish-Audio")
        assert transport.requests[0].headers["authorization"] == "Bearer fish_key"

    def test_fish_audio_missing_key(self, http_client):
        repository = Mock()
        repository.get_api_key.return_value = None
        service = VoicePreviewService(http_client, repository)
        voice = Voice(id=2, voice_id="fa1", plataforma="Fish-Audio")
        with pytest.raises(ExternalServiceError):
            asyncio.run(service.preview_url(voice))

    def test_fish_audio_provider_error(self, transport, http_client):
        transport.routes[("GET", "/model/fa1")] = httpx.Response(500, text="down")
        repository = Mock()
        repository.get_api_key.return_value = "fish_key"
        service = VoicePreviewService(http_client, repository)
        voice = Voice(id=2, voice_id="fa1", plataforma="Fish-Audio")
        with pytest.raises(ExternalServiceError) as exc_info:
            asyncio.run(service.preview_url(voice))
        assert exc_info.value.details == {"status": 500}

    def test_other_platform_unsupported(self, http_client):
        service = VoicePreviewService(http_client, Mock())
        with pytest.raises(AppValidationError) as exc_info:
            asyncio.run(service.preview_url(Voice(id=3, plataforma="Minimax")))
        assert exc_info.value.error_code == "PREVIEW_NOT_SUPPORTED"
