import unittest

from sight_tuner.core.events import EventEmitter, TunerEvents, TunerEventType
from sight_tuner.core.interfaces import IRenderer


class TestEventEmitter(unittest.TestCase):
    def test_emit_calls_listeners(self):
        emitter = EventEmitter()
        calls = []
        emitter.on(TunerEventType.VALUE_CHANGED, calls.append)
        emitter.emit(TunerEventType.VALUE_CHANGED, "A")
        emitter.emit(TunerEventType.GUESS_EVALUATED, "ignored")
        self.assertEqual(calls, ["A"])

    def test_listener_registered_once(self):
        emitter = EventEmitter()
        calls = []
        emitter.on("tick", calls.append)
        emitter.on("tick", calls.append)
        emitter.emit("tick", 1)
        self.assertEqual(calls, [1])

    def test_failing_listener_does_not_block_others(self):
        emitter = EventEmitter()
        calls = []

        def broken(_value):
            raise RuntimeError("boom")

        emitter.on("tick", broken)
        emitter.on("tick", calls.append)
        emitter.emit("tick", 2)
        self.assertEqual(calls, [2])

    def test_failures_are_counted(self):
        emitter = EventEmitter()
        emitter.on("tick", lambda _v: 1 / 0)
        emitter.on("tick", lambda _v: None)
        self.assertEqual(emitter.emit("tick", 0), 1)
        self.assertEqual(emitter.emit("other", 0), 0)

    def test_off(self):
        emitter = EventEmitter()
        calls = []
        emitter.on("tick", calls.append)
        self.assertTrue(emitter.off("tick", calls.append))
        self.assertFalse(emitter.off("tick", calls.append))
        self.assertEqual(emitter.listener_count("tick"), 0)
        emitter.emit("tick", 1)
        self.assertEqual(calls, [])

    def test_listener_can_unsubscribe_while_called(self):
        emitter = EventEmitter()
        calls = []

        def once(value):
            calls.append(("once", value))
            emitter.off("tick", once)

        emitter.on("tick", once)
        emitter.on("tick", lambda value: calls.append(("always", value)))
        emitter.emit("tick", 1)
        emitter.emit("tick", 2)
        self.assertEqual(calls, [("once", 1), ("always", 1), ("always", 2)])

    def test_clear(self):
        events = TunerEvents()
        calls = []
        events.on_value(calls.append)
        events.clear()
        events.emit_value("C")
        self.assertEqual(calls, [])

    def test_target_event_arguments(self):
        events = TunerEvents()
        calls = []
        events.on_target(lambda note, commands: calls.append((note, commands)))
        events.emit_target("C4", ["cmd"])
        self.assertEqual(calls, [("C4", ["cmd"])])


class RecordingRenderer(IRenderer):
    def __init__(self):
        self.values = []

    def show_value(self, text):
        self.values.append(text)

    def show_guess(self, result):
        pass

    def show_target(self, note, commands):
        pass


class TestRendererWiring(unittest.TestCase):
    def test_attach_and_detach(self):
        events = TunerEvents()
        renderer = RecordingRenderer()
        events.attach_renderer(renderer)
        events.emit_value("A")
        events.detach_renderer(renderer)
        events.emit_value("Bb")
        self.assertEqual(renderer.values, ["A"])


if __name__ == "__main__":
    unittest.main()
