import random
import threading

import numpy as np
import pytest

from sight_tuner.core.interfaces import IAudioProvider, IRenderer
from sight_tuner.detection.stability_filter import StabilityFilter
from sight_tuner.exceptions import ConfigError, InvalidInputError
from sight_tuner.note_game_core import NoteGame
from sight_tuner.note_types import SILENT, TOO_QUIET, StableValue
from sight_tuner.services.tuner_service import (
    SampleWindow,
    TunerPipeline,
    TunerService,
    analyze_stream,
)

from conftest import SAMPLE_RATE, FakeClock, sine


class RecordingRenderer(IRenderer):
    def __init__(self):
        self.values = []
        self.guesses = []
        self.targets = []

    def show_value(self, text):
        self.values.append(text)

    def show_guess(self, result):
        self.guesses.append(result)

    def show_target(self, note, commands):
        self.targets.append((note, commands))


class ListProvider(IAudioProvider):
    """Delivers a fixed list of chunks synchronously on start()."""

    def __init__(self, chunks, sample_rate=SAMPLE_RATE):
        self._chunks = chunks
        self._sample_rate = sample_rate
        self.stopped = False

    def start(self, on_data_callback):
        for chunk in self._chunks:
            on_data_callback(chunk)

    def stop(self):
        self.stopped = True

    @property
    def sample_rate(self):
        return self._sample_rate

    @property
    def channels(self):
        return 1


def make_pipeline(target="C4", smoothing="basic", display="note", clock=None):
    clock = clock or FakeClock()
    game = NoteGame(rng=random.Random(0), clock=clock, initial_target=target)
    return TunerPipeline(
        stability_filter=StabilityFilter(smoothing),
        game=game,
        display_mode=display,
        clock=clock,
    )


def test_middle_c_end_to_end():
    pipeline = make_pipeline(target="C4")
    buffer = sine(261.63)

    results = [pipeline.process_frame(buffer, SAMPLE_RATE) for _ in range(5)]

    assert [r.stable for r in results[:4]] == [None] * 4
    assert results[4].stable == StableValue("C")
    assert results[4].guess is not None
    assert results[4].guess.correct
    assert results[4].guess.target == "C4"
    assert abs(results[4].frequency - 261.63) / 261.63 < 0.01


def test_wrong_note_is_reported():
    pipeline = make_pipeline(target="C4")
    buffer = sine(293.66)  # D4

    results = [pipeline.process_frame(buffer, SAMPLE_RATE) for _ in range(5)]
    assert results[4].stable == StableValue("D")
    assert results[4].guess.correct is False
    assert pipeline.game.current_target == "C4"


def test_cooldown_blocks_matcher_but_not_filter():
    clock = FakeClock()
    pipeline = make_pipeline(target="C4", clock=clock)
    buffer = sine(261.63)

    for _ in range(5):
        pipeline.process_frame(buffer, SAMPLE_RATE)
    assert not pipeline.game.listening

    # Next stable value arrives inside the cooldown window
    results = [pipeline.process_frame(buffer, SAMPLE_RATE) for _ in range(5)]
    assert results[4].stable == StableValue("C")
    assert results[4].guess is None
    assert pipeline.game.stats["total_notes"] == 1

    clock.advance(0.8)
    pipeline.process_frame(buffer, SAMPLE_RATE)
    assert pipeline.game.listening


def test_new_target_after_cooldown_is_published():
    clock = FakeClock()
    pipeline = make_pipeline(target="C4", clock=clock)
    renderer = RecordingRenderer()
    pipeline.attach_renderer(renderer)
    assert renderer.targets[0][0] == "C4"

    buffer = sine(261.63)
    for _ in range(5):
        pipeline.process_frame(buffer, SAMPLE_RATE)
    clock.advance(1.0)
    pipeline.process_frame(buffer, SAMPLE_RATE)

    assert len(renderer.targets) == 2
    note, commands = renderer.targets[1]
    assert note == pipeline.game.current_target
    assert commands
    assert [g.correct for g in renderer.guesses] == [True]


def test_silence_shows_too_quiet(silence_audio):
    pipeline = make_pipeline()
    renderer = RecordingRenderer()
    pipeline.attach_renderer(renderer)

    result = pipeline.process_frame(silence_audio, SAMPLE_RATE)
    assert result.is_silent
    assert result.frequency is SILENT
    assert result.stable is TOO_QUIET
    assert result.guess is None
    assert renderer.values == ["Too quiet..."]


def test_silence_does_not_break_a_run(silence_audio):
    pipeline = make_pipeline(target="A4")
    buffer = sine(440.0)
    for _ in range(3):
        pipeline.process_frame(buffer, SAMPLE_RATE)
    pipeline.process_frame(silence_audio, SAMPLE_RATE)
    results = [pipeline.process_frame(buffer, SAMPLE_RATE) for _ in range(2)]
    assert results[1].stable == StableValue("A")


def test_hz_display_mode():
    pipeline = make_pipeline(target="A4", display="hz")
    renderer = RecordingRenderer()
    pipeline.attach_renderer(renderer)

    for _ in range(5):
        result = pipeline.process_frame(sine(440.0), SAMPLE_RATE)

    assert isinstance(result.stable.value, int)
    assert abs(result.stable.value - 440) <= 4
    assert renderer.values[-1].endswith(" Hz")
    # The matcher still judges the pitch class of the stable frequency
    assert result.guess.played == "A"
    assert result.guess.correct


def test_raw_display_mode():
    pipeline = make_pipeline(display="raw")
    assert pipeline.format_value(440.25) == 440.25
    pipeline.set_display_mode("hz")
    assert pipeline.format_value(440.6) == 441
    pipeline.set_display_mode("note")
    assert pipeline.format_value(440.6) == "A"


def test_unknown_display_mode():
    with pytest.raises(ConfigError):
        make_pipeline(display="cents")


def test_set_smoothing():
    pipeline = make_pipeline(smoothing="very")
    pipeline.set_smoothing("none")
    result = pipeline.process_frame(sine(440.0), SAMPLE_RATE)
    assert result.stable == StableValue("A")


def test_pipeline_without_game():
    pipeline = TunerPipeline(clock=FakeClock())
    results = [pipeline.process_frame(sine(440.0), SAMPLE_RATE) for _ in range(5)]
    assert results[4].stable == StableValue("A")
    assert results[4].guess is None


def test_invalid_frame_is_rejected():
    pipeline = make_pipeline()
    with pytest.raises(InvalidInputError):
        pipeline.process_frame(np.array([]), SAMPLE_RATE)
    with pytest.raises(InvalidInputError):
        pipeline.process_frame(sine(440.0), 0)


def test_failing_renderer_does_not_stop_pipeline():
    pipeline = make_pipeline()

    def broken(_text):
        raise RuntimeError("display went away")

    pipeline.events.on_value(broken)
    result = pipeline.process_frame(np.zeros(2048), SAMPLE_RATE)
    assert result.stable is TOO_QUIET


class TestSampleWindow:
    def test_not_full_until_size_samples(self):
        window = SampleWindow(8)
        window.extend(np.ones(5))
        assert not window.is_full
        window.extend(np.ones(3))
        assert window.is_full

    def test_keeps_most_recent_samples(self):
        window = SampleWindow(4)
        window.extend(np.arange(3))
        window.extend(np.arange(3, 6))
        np.testing.assert_array_equal(window.snapshot(), [2, 3, 4, 5])

    def test_large_chunk(self):
        window = SampleWindow(4)
        window.extend(np.arange(10))
        np.testing.assert_array_equal(window.snapshot(), [6, 7, 8, 9])

    def test_snapshot_is_a_copy(self):
        window = SampleWindow(4)
        window.extend(np.ones(4))
        snapshot = window.snapshot()
        snapshot[:] = 0
        np.testing.assert_array_equal(window.snapshot(), np.ones(4))

    def test_clear(self):
        window = SampleWindow(4)
        window.extend(np.ones(4))
        window.clear()
        assert not window.is_full

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            SampleWindow(0)


def test_analyze_stream_frames():
    pipeline = make_pipeline(target="A4")
    audio = sine(440.0, size=SAMPLE_RATE)  # one second
    chunks = np.array_split(audio, 100)

    results = list(
        analyze_stream(pipeline, chunks, SAMPLE_RATE, buffer_size=2048, frame_rate=60)
    )

    # First frame once the window is full, then one every 735 samples
    assert len(results) == 1 + (SAMPLE_RATE - 2048) // 735
    stable = [r.stable for r in results if r.stable is not None]
    assert stable and all(s == StableValue("A") for s in stable)
    guesses = [r.guess for r in results if r.guess is not None]
    assert guesses[0].correct
    assert guesses[0].timestamp == pytest.approx((2048 + 4 * 735) / SAMPLE_RATE)


def test_analyze_stream_cooldown_runs_in_audio_time():
    pipeline = make_pipeline(target="A4")
    audio = sine(440.0, size=2 * SAMPLE_RATE)

    results = list(analyze_stream(pipeline, [audio], SAMPLE_RATE))
    guesses = [r.guess for r in results if r.guess is not None]

    assert len(guesses) >= 2
    for first, second in zip(guesses, guesses[1:]):
        assert second.timestamp - first.timestamp >= 0.8


def test_service_tick_waits_for_full_window():
    pipeline = make_pipeline()
    service = TunerService(ListProvider([np.ones(512)]), pipeline, buffer_size=2048)
    service.start()
    assert service.tick() is None
    assert service.frames_processed == 0


def test_service_processes_frames():
    pipeline = make_pipeline(target="C4", smoothing="none")
    provider = ListProvider(np.array_split(sine(261.63, size=4096), 8))
    service = TunerService(provider, pipeline, buffer_size=2048)
    service.start()

    result = service.tick()
    assert result.stable == StableValue("C")
    assert result.guess.correct
    assert service.frames_processed == 1


def test_service_run_stops_after_duration():
    pipeline = make_pipeline(smoothing="none")
    provider = ListProvider([sine(440.0)])
    service = TunerService(provider, pipeline, buffer_size=2048, frame_rate=200)

    service.run(duration=0.05)

    assert provider.stopped
    assert service.frames_processed >= 1


def test_service_stop_from_another_thread():
    pipeline = make_pipeline()
    provider = ListProvider([])
    service = TunerService(provider, pipeline, frame_rate=100)

    timer = threading.Timer(0.05, service.stop)
    timer.start()
    service.run()
    timer.join()
    assert provider.stopped


def test_service_rejects_bad_frame_rate():
    with pytest.raises(ValueError):
        TunerService(ListProvider([]), make_pipeline(), frame_rate=0)


def test_analyze_stream_times_notes_in_audio_time():
    # Game and pipeline on the wall clock; the stream must still time in audio seconds
    game = NoteGame(rng=random.Random(0), initial_target="C4")
    pipeline = TunerPipeline(game=game)
    audio = sine(261.63, size=SAMPLE_RATE)

    list(analyze_stream(pipeline, np.array_split(audio, 50), SAMPLE_RATE))

    times = game.stats["times"]
    assert times
    # Window fill plus one run of frames, or a cooldown plus a run after a repeat target
    assert all(0.0 <= t <= game.cooldown + 0.2 for t in times)
    assert times[0] == pytest.approx((2048 + 4 * 735) / SAMPLE_RATE)
