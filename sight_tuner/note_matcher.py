import re
from .logger import get_logger

# Get logger for this module
logger = get_logger(__name__)

# Compile regex to extract note name and octave
# This pattern matches:
# - Note name (A-G, either case)
# - Optional accidental (# or b)
# - Optional octave number (0-9+)
NOTE_PATTERN = re.compile(r"^([A-Ga-g][#b]?)([0-9]*)")

# Spellings we accept that are not in the flat-only pitch class vocabulary
ENHARMONIC_TO_FLAT = {
    "C#": "Db",
    "D#": "Eb",
    "F#": "Gb",
    "G#": "Ab",
    "A#": "Bb",
    "B#": "C",
    "E#": "F",
    "Cb": "B",
    "Fb": "E",
}


class NoteMatcher:
    """
    Encapsulates logic for comparing played pitch classes to target notes,
    including normalization and enharmonic equivalence.
    """

    @staticmethod
    def normalize_to_flat(note: str) -> str:
        """Return the flat spelling of a pitch class ('F#' -> 'Gb', 'a' -> 'A')."""
        note = note[0].upper() + note[1:]
        return ENHARMONIC_TO_FLAT.get(note, note)

    @classmethod
    def pitch_class_of(cls, note: str):
        """Parse a note ('Gb5', 'F#', 'c4') into its flat pitch class, or None."""
        match = NOTE_PATTERN.match(str(note).strip())
        if not match:
            return None
        return cls.normalize_to_flat(match.group(1))

    @classmethod
    def match(cls, target: str, played: str) -> bool:
        """
        Check if the played note matches the target note, ignoring octave.

        Args:
            target: The target note (e.g., 'C4', 'Bb', 'Gb5')
            played: The played pitch class (e.g., 'C', 'A#', 'Bb2')
        Returns:
            bool: True if the notes match (ignoring octave), False otherwise
        """
        target = str(target).strip() if target is not None else ""
        played = str(played).strip() if played is not None else ""

        if not target or not played:
            logger.warning(f"⚠️  EMPTY INPUT - Target: '{target}', Played: '{played}'")
            return False

        target_note = cls.pitch_class_of(target)
        played_note = cls.pitch_class_of(played)

        if not target_note or not played_note:
            logger.warning(
                f"⚠️  INVALID NOTE FORMAT"
                f"\n  • Target: '{target}' (parsed: {target_note})"
                f"\n  • Played: '{played}' (parsed: {played_note})"
            )
            return False

        if target_note == played_note:
            logger.debug(f"✅ MATCH: '{played}' == '{target}'")
            return True

        logger.debug(f"❌ NO MATCH: '{played_note}' != '{target_note}' (from '{target}')")
        return False
