"""
Tests for the voice session controller with fake recognizer, microphone and synthesizer.
"""
from collections.abc import Callable

import pytest

from wellness_service.domain.voice_controller import (
    DEFAULT_ERROR_MESSAGE,
    NOT_SUPPORTED_MESSAGE,
    PERMISSION_MESSAGE,
    RESTART_DELAY,
    InvalidStateError,
    RecognitionResult,
    Utterance,
    Voice,
    VoiceSessionController,
    fallback_timeout,
    friendly_error_message,
    select_voice,
)


class FakeRecognizer:
    def __init__(self) -> None:
        self.starts = 0
        self.stops = 0
        self.running = False

    def start(self) -> None:
        if self.running:
            raise InvalidStateError("already started")
        self.running = True
        self.starts += 1

    def stop(self) -> None:
        self.running = False
        self.stops += 1


class FakeMicrophone:
    def __init__(self, allow: bool = True) -> None:
        self.allow = allow

    async def request_access(self) -> None:
        if not self.allow:
            raise PermissionError("denied")


class FakeSynthesizer:
    def __init__(self, voices: list[Voice] | None = None) -> None:
        self.voices = voices or []
        self.spoken: list[Utterance] = []
        self.cancels = 0
        self.speaking = False
        self.voices_changed: list[Callable[[], None]] = []

    def cancel(self) -> None:
        self.cancels += 1

    def get_voices(self) -> list[Voice]:
        return self.voices

    def on_voices_changed(self, callback: Callable[[], None]) -> None:
        self.voices_changed.append(callback)

    def speak(self, utterance: Utterance) -> None:
        self.spoken.append(utterance)
        self.speaking = True


class ManualScheduler:
    """Collects callbacks so tests decide when timers fire."""

    def __init__(self) -> None:
        self.pending: list[tuple[float, Callable[[], None]]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self.pending.append((delay, callback))

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for _, callback in sorted(pending, key=lambda item: item[0]):
            callback()


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer([Voice("Daniel", "en-GB"), Voice("Samantha", "en-US")])


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def controller(recognizer, synthesizer, scheduler) -> VoiceSessionController:
    return VoiceSessionController(recognizer, FakeMicrophone(), synthesizer, scheduler)


class TestErrorMessages:
    """Recognizer error codes become friendly text."""

    def test_no_speech(self) -> None:
        assert friendly_error_message("no-speech") == "I'm listening... please speak when you're ready"

    def test_network(self) -> None:
        assert friendly_error_message("network") == "Connection issue. Let me try again..."

    def test_aborted_is_suppressed(self) -> None:
        assert friendly_error_message("aborted") is None

    def test_other_codes_get_default(self) -> None:
        assert friendly_error_message("audio-capture") == DEFAULT_ERROR_MESSAGE


class TestVoiceSelection:
    """Preferred voices and fallback timeouts."""

    def test_prefers_named_voice(self) -> None:
        voices = [Voice("Daniel", "en-GB"), Voice("Samantha", "en-US"), Voice("Amelie", "fr-FR")]
        assert select_voice(voices).name == "Samantha"

    def test_falls_back_to_local_english(self) -> None:
        voices = [Voice("Remote", "en-US"), Voice("Local", "en-AU", local_service=True)]
        assert select_voice(voices).name == "Local"

    def test_no_english_voice(self) -> None:
        assert select_voice([Voice("Amelie", "fr-FR")]) is None

    def test_fallback_timeout(self) -> None:
        assert fallback_timeout("hi") == 5.0
        assert fallback_timeout("x" * 100) == 11.0


class TestListening:
    """Start, stop, results and auto-restart."""

    @pytest.mark.asyncio
    async def test_unsupported_reports_error(self, synthesizer, scheduler) -> None:
        errors: list[str] = []
        controller = VoiceSessionController(None, FakeMicrophone(), synthesizer, scheduler)
        await controller.start_listening(lambda t: None, errors.append)

        assert not controller.is_supported
        assert errors == [NOT_SUPPORTED_MESSAGE]

    @pytest.mark.asyncio
    async def test_permission_denied(self, recognizer, synthesizer, scheduler) -> None:
        errors: list[str] = []
        controller = VoiceSessionController(recognizer, FakeMicrophone(allow=False), synthesizer, scheduler)
        await controller.start_listening(lambda t: None, errors.append)

        assert errors == [PERMISSION_MESSAGE]
        assert not controller.is_listening
        assert recognizer.starts == 0

    @pytest.mark.asyncio
    async def test_final_results_are_joined(self, controller) -> None:
        transcripts: list[str] = []
        await controller.start_listening(transcripts.append)

        controller.handle_result([RecognitionResult("I feel ", False)])
        controller.handle_result([RecognitionResult("I feel ", True), RecognitionResult("okay", True)])

        assert transcripts == ["I feel okay"]

    @pytest.mark.asyncio
    async def test_errors_are_mapped(self, controller) -> None:
        errors: list[str] = []
        await controller.start_listening(lambda t: None, errors.append)

        controller.handle_error("no-speech")
        controller.handle_error("aborted")
        controller.handle_error("network")

        assert errors == [
            "I'm listening... please speak when you're ready",
            "Connection issue. Let me try again...",
        ]

    @pytest.mark.asyncio
    async def test_end_restarts_while_listening(self, controller, recognizer, scheduler) -> None:
        await controller.start_listening(lambda t: None)
        recognizer.running = False
        controller.handle_end()

        assert scheduler.pending[0][0] == RESTART_DELAY
        scheduler.run_all()
        assert recognizer.starts == 2

    @pytest.mark.asyncio
    async def test_no_restart_after_stop(self, controller, recognizer, scheduler) -> None:
        await controller.start_listening(lambda t: None)
        controller.stop_listening()
        controller.handle_end()

        assert scheduler.pending == []
        assert recognizer.stops == 1

    @pytest.mark.asyncio
    async def test_double_start_is_tolerated(self, controller, recognizer) -> None:
        await controller.start_listening(lambda t: None)
        await controller.start_listening(lambda t: None)
        assert recognizer.starts == 1
        assert controller.is_listening


class TestSpeaking:
    """Spoken replies and the end callback."""

    def test_speak_cancels_and_picks_voice(self, controller, synthesizer, scheduler) -> None:
        utterance = controller.speak("Hello there")

        assert synthesizer.cancels == 1
        assert utterance.voice.name == "Samantha"
        assert (utterance.rate, utterance.pitch, utterance.volume) == (0.9, 1.0, 0.95)
        scheduler.run_all()
        assert synthesizer.spoken == [utterance]

    def test_voice_chosen_when_voices_load(self, recognizer, scheduler) -> None:
        synthesizer = FakeSynthesizer()
        controller = VoiceSessionController(recognizer, FakeMicrophone(), synthesizer, scheduler)
        utterance = controller.speak("Hello")
        assert utterance.voice is None

        synthesizer.voices = [Voice("Alex", "en-US")]
        synthesizer.voices_changed[0]()
        assert utterance.voice.name == "Alex"

    def test_end_callback_fires_once(self, controller, synthesizer, scheduler) -> None:
        ended: list[bool] = []
        utterance = controller.speak("Hello", on_end=lambda: ended.append(True))
        scheduler.run_all()

        utterance.on_end()
        utterance.on_error("interrupted")
        assert ended == [True]

    def test_timeout_finishes_when_not_speaking(self, controller, synthesizer, scheduler) -> None:
        ended: list[bool] = []
        controller.speak("Hello", on_end=lambda: ended.append(True))
        synthesizer.speak = lambda utterance: None  # engine never starts
        scheduler.run_all()

        assert ended == [True]
