"""
SIANI Wellness Service - Voice session controller.

Drives continuous speech recognition and spoken replies over injected
ports, so the same logic runs against a browser bridge, a desktop audio
stack or test fakes. Timers go through a scheduler port.

Usage:
    controller = VoiceSessionController(recognizer, microphone, synthesizer)
    await controller.start_listening(on_transcript, on_error)
    controller.speak("I'm here with you.", on_end=resume_listening)
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

logger = structlog.get_logger(__name__)

RESTART_DELAY = 0.3
SPEAK_DELAY = 0.1

NOT_SUPPORTED_MESSAGE = "Speech recognition not supported in this browser"
PERMISSION_MESSAGE = "Please allow microphone access to use voice features. Check your browser settings."
START_FAILED_MESSAGE = "Failed to start speech recognition"

ERROR_MESSAGES = {
    "no-speech": "I'm listening... please speak when you're ready",
    "network": "Connection issue. Let me try again...",
}
DEFAULT_ERROR_MESSAGE = "Let me try that again..."
SUPPRESSED_ERRORS = frozenset({"aborted"})

PREFERRED_VOICE_NAMES = (
    "Samantha", "Alex", "Karen", "Zira", "Victoria", "Allison", "Ava", "Serena",
    "Google US English", "Microsoft",
)


class InvalidStateError(Exception):
    """Raised by a recognizer asked to start while already running."""


@dataclass(frozen=True)
class Voice:
    name: str
    lang: str
    local_service: bool = False


@dataclass(frozen=True)
class RecognitionResult:
    transcript: str
    is_final: bool


@dataclass
class Utterance:
    text: str
    rate: float = 0.9
    pitch: float = 1.0
    volume: float = 0.95
    voice: Voice | None = None
    on_end: Callable[[], None] | None = None
    on_error: Callable[[Any], None] | None = None


class Recognizer(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...


class Microphone(Protocol):
    async def request_access(self) -> None: ...


class Synthesizer(Protocol):
    @property
    def speaking(self) -> bool: ...

    def cancel(self) -> None: ...

    def get_voices(self) -> Sequence[Voice]: ...

    def on_voices_changed(self, callback: Callable[[], None]) -> None: ...

    def speak(self, utterance: Utterance) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Any: ...


class AsyncioScheduler:
    """Schedules callbacks on the running event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


def friendly_error_message(code: str) -> str | None:
    """Map a recognizer error code to user-facing text, or None to stay silent."""
    if code in SUPPRESSED_ERRORS:
        return None
    return ERROR_MESSAGES.get(code, DEFAULT_ERROR_MESSAGE)


def select_voice(voices: Sequence[Voice]) -> Voice | None:
    """Prefer natural-sounding English voices, then any local English voice."""
    english = [voice for voice in voices if voice.lang.startswith("en")]
    for voice in english:
        if any(name in voice.name for name in PREFERRED_VOICE_NAMES):
            return voice
        if "female" in voice.name.lower() and voice.local_service:
            return voice
    for voice in english:
        if voice.local_service:
            return voice
    return english[0] if english else None


def fallback_timeout(text: str) -> float:
    """Seconds to wait for an end event before assuming speech finished."""
    return max(len(text) * 80 + 3000, 5000) / 1000


class VoiceSessionController:
    """Continuous listening with auto-restart plus queued speech output."""

    def __init__(
        self,
        recognizer: Recognizer | None,
        microphone: Microphone,
        synthesizer: Synthesizer,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._recognizer = recognizer
        self._microphone = microphone
        self._synthesizer = synthesizer
        self._scheduler = scheduler or AsyncioScheduler()
        self._listening = False
        self._on_transcript: Callable[[str], None] | None = None
        self._on_error: Callable[[str], None] | None = None

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def is_supported(self) -> bool:
        return self._recognizer is not None

    async def start_listening(
        self,
        on_transcript: Callable[[str], None],
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        if self._recognizer is None:
            logger.warning("speech_recognition_unsupported")
            if on_error:
                on_error(NOT_SUPPORTED_MESSAGE)
            return
        try:
            await self._microphone.request_access()
        except Exception as e:
            logger.warning("microphone_permission_denied", error=str(e))
            if on_error:
                on_error(PERMISSION_MESSAGE)
            return

        self._on_transcript = on_transcript
        self._on_error = on_error
        self._listening = True
        try:
            self._recognizer.start()
            logger.debug("speech_recognition_started")
        except InvalidStateError:
            logger.debug("speech_recognition_already_running")
        except Exception as e:
            logger.error("speech_recognition_start_failed", error=str(e))
            if on_error:
                on_error(START_FAILED_MESSAGE)

    def stop_listening(self) -> None:
        if self._recognizer is None or not self._listening:
            return
        self._listening = False
        try:
            self._recognizer.stop()
        except Exception as e:
            logger.debug("speech_recognition_stop_ignored", error=str(e))

    # Recognizer events

    def handle_result(self, results: Sequence[RecognitionResult]) -> None:
        """Deliver the joined transcript once the latest result is final."""
        if not results or not results[-1].is_final or self._on_transcript is None:
            return
        self._on_transcript("".join(result.transcript for result in results))

    def handle_error(self, code: str) -> None:
        message = friendly_error_message(code)
        if message is None:
            logger.debug("speech_recognition_aborted")
            return
        logger.warning("speech_recognition_error", code=code)
        if self._on_error:
            self._on_error(message)

    def handle_end(self) -> None:
        if self._listening:
            self._scheduler.call_later(RESTART_DELAY, self._restart)

    def _restart(self) -> None:
        if not self._listening or self._recognizer is None:
            return
        try:
            self._recognizer.start()
            logger.debug("speech_recognition_restarted")
        except InvalidStateError:
            pass
        except Exception as e:
            logger.error("speech_recognition_restart_failed", error=str(e))
            self._listening = False

    # Speech output

    def speak(self, text: str, on_end: Callable[[], None] | None = None) -> Utterance:
        self._synthesizer.cancel()
        finished = False

        def finish(*_: Any) -> None:
            nonlocal finished
            if finished or on_end is None:
                return
            finished = True
            on_end()

        utterance = Utterance(text=text, on_end=finish, on_error=finish)

        def choose_voice() -> None:
            utterance.voice = select_voice(self._synthesizer.get_voices())

        if self._synthesizer.get_voices():
            choose_voice()
        else:
            self._synthesizer.on_voices_changed(choose_voice)

        self._scheduler.call_later(SPEAK_DELAY, lambda: self._synthesizer.speak(utterance))

        if on_end is not None:
            def timeout() -> None:
                if not self._synthesizer.speaking:
                    finish()

            self._scheduler.call_later(fallback_timeout(text), timeout)
        return utterance
