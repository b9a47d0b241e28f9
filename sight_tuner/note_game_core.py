import random
import time
from typing import Callable, List, Optional

from .logger import get_logger
from .note_matcher import NoteMatcher
from .note_types import GuessResult
from .note_utils import remove_octave

# Get logger for this module
logger = get_logger(__name__)

# Treble staff notes from middle C up to G5, flats only
TARGET_NOTES: List[str] = [
    "G5",
    "Gb5",
    "F5",
    "E5",
    "Eb5",
    "D5",
    "Db5",
    "C5",
    "B4",
    "Bb4",
    "A4",
    "Ab4",
    "G4",
    "Gb4",
    "F4",
    "E4",
    "Eb4",
    "D4",
    "Db4",
    "C4",
]

DEFAULT_COOLDOWN = 0.8  # seconds the matcher stays deaf after a guess


class NoteGame:
    """Holds the target note and judges stable guesses against it.

    After each guess the game stops listening for ``cooldown`` seconds so a
    note held over several frames is judged once. When the cooldown elapses
    a correct guess advances to a new random target; a wrong one keeps it.
    """

    def __init__(
        self,
        cooldown: float = DEFAULT_COOLDOWN,
        notes: Optional[List[str]] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        initial_target: Optional[str] = None,
    ) -> None:
        """Initialize the game.

        Args:
            cooldown: Seconds to ignore new guesses after each evaluation
            notes: Target note vocabulary, defaults to TARGET_NOTES
            rng: Optional random.Random for reproducible targets
            clock: Monotonic time source, injectable for tests
            initial_target: Start with this note instead of a random one
        """
        if cooldown < 0:
            raise ValueError(f"Cooldown must not be negative, got {cooldown}")

        self.available_notes = list(notes) if notes is not None else list(TARGET_NOTES)
        if not self.available_notes:
            raise ValueError("At least one target note is required")

        self.cooldown = cooldown
        self.note_matcher = NoteMatcher()
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock

        # Target state
        self.current_target: Optional[str] = None
        self.listening = True
        self._deadline: Optional[float] = None
        self._pending: Optional[GuessResult] = None
        self.last_note_change_time = 0.0
        self._target_listeners: List[Callable[[str], None]] = []

        self.stats = {
            "total_notes": 0,
            "correct_notes": 0,
            "times": [],
            "notes_played": {},
        }

        if initial_target is not None:
            self.set_target(initial_target)
        else:
            self.new_target()

        logger.debug(
            "NoteGame initialized with %d available notes", len(self.available_notes)
        )

    def on_target_changed(self, callback: Callable[[str], None]) -> None:
        """Register a callback invoked with each new target note."""
        self._target_listeners.append(callback)

    def set_target(self, note: str, now: Optional[float] = None) -> None:
        old_target = self.current_target
        self.current_target = note
        self.last_note_change_time = self._clock() if now is None else now
        logger.debug("New target note: %s (was: %s)", note, old_target)
        for callback in self._target_listeners:
            callback(note)

    def new_target(self, now: Optional[float] = None) -> str:
        """Pick a new target uniformly at random (it may repeat the current one)."""
        self.set_target(self._rng.choice(self.available_notes), now)
        return self.current_target

    def check_guess(self, played: str) -> bool:
        """True if the played pitch class matches the target, octave ignored."""
        return self.note_matcher.match(remove_octave(self.current_target), played)

    def submit_guess(self, played: str, now: Optional[float] = None) -> Optional[GuessResult]:
        """Judge a stable guess, unless a previous guess is still cooling down.

        Returns:
            The GuessResult, or None if the game was not listening
        """
        now = self._clock() if now is None else now
        self.update(now)
        if not self.listening:
            logger.debug("Ignoring guess %s during cooldown", played)
            return None

        correct = self.check_guess(played)
        result = GuessResult(
            played=played,
            target=self.current_target,
            correct=correct,
            timestamp=now,
        )

        self.stats["total_notes"] += 1
        self.stats["notes_played"][played] = self.stats["notes_played"].get(played, 0) + 1
        if correct:
            elapsed = now - self.last_note_change_time
            self.stats["times"].append(elapsed)
            self.stats["correct_notes"] += 1
            logger.info(
                "NOTE MATCHED! '%s' matches target '%s' in %.2f seconds",
                played,
                self.current_target,
                elapsed,
            )
        else:
            logger.info("Wrong note: '%s' for target '%s'", played, self.current_target)

        self.listening = False
        self._deadline = now + self.cooldown
        self._pending = result
        return result

    def update(self, now: Optional[float] = None) -> None:
        """Finish the cooldown once its deadline has passed."""
        if self.listening:
            return
        now = self._clock() if now is None else now
        if self._deadline is not None and now < self._deadline:
            return

        pending = self._pending
        self.listening = True
        self._deadline = None
        self._pending = None
        if pending is not None and pending.correct:
            self.new_target(now)

    @property
    def cooldown_remaining(self) -> float:
        if self.listening or self._deadline is None:
            return 0.0
        return max(0.0, self._deadline - self._clock())

    def restart_timer(self, now: Optional[float] = None) -> None:
        """Start timing the current target from ``now``, e.g. when a stream begins."""
        self.last_note_change_time = self._clock() if now is None else now

    def reset_stats(self) -> None:
        self.stats = {
            "total_notes": 0,
            "correct_notes": 0,
            "times": [],
            "notes_played": {},
        }
