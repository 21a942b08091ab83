"""HTTP clients for the language model and premium speech synthesis."""
from __future__ import annotations

import json
import math
import time
from typing import Any

import httpx
import structlog

from siani_common.exceptions import LLMServiceError, TextToSpeechUnavailableError
from ..config import ElevenLabsSettings, OpenAISettings

logger = structlog.get_logger(__name__)

ChatMessage = dict[str, str]


def safe_number(value: Any, default: float, *, lower: float, upper: float, cast: type = float) -> Any:
    """Convert a model-supplied number into ``[lower, upper]``, or return ``default``."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (ValueError, TypeError):
        return default
    if not math.isfinite(number):
        return default
    return cast(max(lower, min(upper, number)))


def string_list(value: Any) -> list[str]:
    """Model-supplied list of strings; anything other than a list reads as empty."""
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item).strip()]


class OpenAIChatClient:
    """Minimal chat-completions client.

    Raises ``LLMServiceError`` when no API key is configured or the call
    fails; callers decide on their own fallback text.
    """

    def __init__(self, settings: OpenAISettings | None = None,
                 transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings or OpenAISettings()
        self._http = httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=httpx.Timeout(self._settings.timeout_seconds),
            transport=transport,
        )
        self._stats = {"requests": 0, "failures": 0}

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    async def complete(self, messages: list[ChatMessage], *, system_prompt: str | None = None,
                       **params: Any) -> str:
        """Return the assistant text for a conversation."""
        data = await self._post(self._build_payload(messages, system_prompt, **params))
        choice = (data.get("choices") or [{}])[0]
        return (choice.get("message", {}).get("content") or "").strip()

    async def complete_json(self, messages: list[ChatMessage], *, system_prompt: str | None = None,
                            **params: Any) -> dict[str, Any]:
        """Return a JSON object reply parsed from the assistant text."""
        params.setdefault("response_format", {"type": "json_object"})
        content = await self.complete(messages, system_prompt=system_prompt, **params)
        try:
            parsed = json.loads(content or "{}")
        except json.JSONDecodeError as e:
            raise LLMServiceError("openai", f"Invalid JSON response: {e}") from e
        if not isinstance(parsed, dict):
            raise LLMServiceError("openai", "JSON response is not an object")
        return parsed

    async def close(self) -> None:
        await self._http.aclose()

    def get_statistics(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "model": self._settings.model, **self._stats}

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.enabled:
            raise LLMServiceError("openai", "OpenAI API key not configured")
        self._stats["requests"] += 1
        start = time.perf_counter()
        try:
            response = await self._http.post("/chat/completions", json=payload, headers=self._build_headers())
            self._check_response(response)
            data = response.json()
        except httpx.TimeoutException as e:
            self._stats["failures"] += 1
            raise LLMServiceError("openai", f"Request timeout: {e}", retryable=True) from e
        except httpx.RequestError as e:
            self._stats["failures"] += 1
            raise LLMServiceError("openai", f"Connection error: {e}", retryable=True) from e
        except LLMServiceError:
            self._stats["failures"] += 1
            raise
        logger.debug("openai_completion_received", model=payload["model"],
                     latency_ms=int((time.perf_counter() - start) * 1000))
        return data

    def _build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.api_key.get_secret_value()}",
            "Content-Type": "application/json",
        }

    def _build_payload(self, messages: list[ChatMessage], system_prompt: str | None,
                       **params: Any) -> dict[str, Any]:
        chat: list[ChatMessage] = []
        if system_prompt:
            chat.append({"role": "system", "content": system_prompt})
        chat.extend(messages)
        payload: dict[str, Any] = {
            "model": params.pop("model", self._settings.model),
            "messages": chat,
            "temperature": params.pop("temperature", self._settings.temperature),
        }
        payload.update({k: v for k, v in params.items() if v is not None})
        return payload

    def _check_response(self, response: httpx.Response) -> None:
        if response.status_code == 200:
            return
        if response.status_code == 429:
            raise LLMServiceError("openai", "Rate limit exceeded", retryable=True, status_code=429)
        if response.status_code >= 500:
            raise LLMServiceError("openai", f"Server error: {response.status_code}",
                                  retryable=True, status_code=response.status_code)
        try:
            error_msg = response.json().get("error", {}).get("message", response.text)
        except ValueError:
            error_msg = response.text
        raise LLMServiceError("openai", f"API error: {error_msg}", status_code=response.status_code)


class ElevenLabsClient:
    """Text-to-speech client returning MP3 audio."""

    def __init__(self, settings: ElevenLabsSettings | None = None,
                 transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings or ElevenLabsSettings()
        self._http = httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=httpx.Timeout(self._settings.timeout_seconds),
            transport=transport,
        )
        if not self.enabled:
            logger.warning("elevenlabs_api_key_missing", fallback="browser_tts")

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    async def synthesize(self, text: str, voice_id: str | None = None) -> bytes:
        if not self.enabled:
            raise TextToSpeechUnavailableError("ElevenLabs API key not configured")
        voice = voice_id or self._settings.voice_id
        try:
            response = await self._http.post(
                f"/text-to-speech/{voice}",
                json=self._build_payload(text),
                headers={
                    "Accept": "audio/mpeg",
                    "Content-Type": "application/json",
                    "xi-api-key": self._settings.api_key.get_secret_value(),
                },
            )
        except httpx.RequestError as e:
            raise TextToSpeechUnavailableError(f"ElevenLabs request failed: {e}", cause=e) from e
        if response.status_code != 200:
            raise TextToSpeechUnavailableError(
                f"ElevenLabs API error {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        logger.debug("speech_synthesized", voice_id=voice, bytes=len(response.content))
        return response.content

    async def list_voices(self) -> list[dict[str, Any]]:
        if not self.enabled:
            return []
        try:
            response = await self._http.get(
                "/voices", headers={"xi-api-key": self._settings.api_key.get_secret_value()},
            )
        except httpx.RequestError as e:
            logger.warning("elevenlabs_voices_failed", error=str(e))
            return []
        if response.status_code != 200:
            logger.warning("elevenlabs_voices_failed", status_code=response.status_code)
            return []
        return response.json().get("voices", [])

    async def close(self) -> None:
        await self._http.aclose()

    def _build_payload(self, text: str) -> dict[str, Any]:
        return {
            "text": text,
            "model_id": self._settings.model_id,
            "voice_settings": {
                "stability": self._settings.stability,
                "similarity_boost": self._settings.similarity_boost,
                "style": self._settings.style,
                "use_speaker_boost": self._settings.use_speaker_boost,
            },
        }
