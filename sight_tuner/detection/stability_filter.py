from typing import Dict, Mapping, Optional, Tuple, Union

from ..exceptions import ConfigError
from ..logger import get_logger
from ..note_types import SILENT, TOO_QUIET, DisplayValue, Silence, StableValue

logger = get_logger(__name__)

# mode -> (closeness threshold in Hz, consecutive frames required)
SMOOTHING_MODES: Dict[str, Tuple[float, int]] = {
    "none": (float("inf"), 0),
    "basic": (10.0, 5),
    "very": (5.0, 10),
}


class StabilityFilter:
    """
    Suppresses frame-to-frame jitter in the displayed value.

    A value is only emitted once it has been seen, or stayed within the
    closeness threshold of the reference, for ``required_frames`` consecutive
    frames. A value that disagrees with the reference immediately becomes the
    new reference.
    """

    def __init__(
        self,
        mode: str = "basic",
        modes: Optional[Mapping[str, Tuple[float, int]]] = None,
    ):
        self._modes: Dict[str, Tuple[float, int]] = dict(
            SMOOTHING_MODES if modes is None else modes
        )
        self._mode = ""
        self._closeness = 0.0
        self._required_frames = 0
        self.configure(mode)
        self.reset()

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def closeness(self) -> float:
        return self._closeness

    @property
    def required_frames(self) -> int:
        return self._required_frames

    @property
    def last_accepted(self) -> Optional[DisplayValue]:
        return self._last_accepted

    @property
    def run_length(self) -> int:
        return self._count

    def configure(self, mode: str) -> None:
        """Select the thresholds for a smoothing mode."""
        if mode not in self._modes:
            raise ConfigError(
                f"Unknown smoothing mode '{mode}', expected one of {sorted(self._modes)}"
            )
        if mode != self._mode:
            self._closeness, self._required_frames = self._modes[mode]
            self._mode = mode
            logger.debug(
                f"Smoothing '{mode}': closeness={self._closeness} "
                f"frames={self._required_frames}"
            )

    def reset(self) -> None:
        """Forget the reference value and run, e.g. at the start of a session."""
        self._last_accepted: Optional[DisplayValue] = None
        self._count = 0

    def is_similar(self, candidate: DisplayValue) -> bool:
        last = self._last_accepted
        if last is None:
            return False
        if _is_number(candidate) and _is_number(last):
            return abs(candidate - last) < self._closeness
        return candidate == last

    def accept(
        self, candidate: Union[DisplayValue, Silence], mode: Optional[str] = None
    ) -> Optional[StableValue]:
        """Feed one frame's value; return a StableValue when one is committed.

        SILENT bypasses the filter and yields the too-quiet state without
        touching the reference or the run.
        """
        if candidate is SILENT:
            return TOO_QUIET

        if mode is not None:
            self.configure(mode)

        if self.is_similar(candidate):
            self._count += 1
        else:
            # Re-anchor; this frame is the first observation of the new run
            self._last_accepted = candidate
            self._count = 1

        if self._count < self._required_frames:
            return None

        self._last_accepted = candidate
        self._count = 0
        return StableValue(candidate)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
