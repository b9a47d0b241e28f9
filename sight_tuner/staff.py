"""Staff layout for target notes.

Maps each named target note to its vertical position on a treble staff and
describes how to draw it as a list of draw commands. Nothing here draws; a
rendering collaborator consumes the commands.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

# Vertical offset of each target note relative to the top of the staff image.
# Flats share the line or space of their natural.
STAFF_POSITIONS: Dict[str, int] = {
    "G5": -45,
    "Gb5": -45,
    "F5": -15,
    "E5": 15,
    "Eb5": 15,
    "D5": 45,
    "Db5": 45,
    "C5": 75,
    "B4": 105,
    "Bb4": 105,
    "A4": 135,
    "Ab4": 135,
    "G4": 165,
    "Gb4": 165,
    "F4": 195,
    "E4": 225,
    "Eb4": 225,
    "D4": 255,
    "Db4": 255,
    "C4": 285,
}

# Notes that sit below the staff and need a ledger line
LEDGER_LINE_NOTES = frozenset({"C4"})

STAFF_ASSET = "images/staff.png"
WHOLE_NOTE_ASSET = "images/whole-note.png"
FLAT_ASSET = "images/flat.png"


def staff_position(note: str) -> int:
    """Vertical offset for a target note; raises KeyError for notes off the staff."""
    return STAFF_POSITIONS[note]


def is_flat(note: str) -> bool:
    """True if the note is spelled with a flat (e.g. 'Bb4')."""
    return "b" in note


def needs_ledger_line(note: str) -> bool:
    return note in LEDGER_LINE_NOTES


@dataclass(frozen=True)
class DrawCommand:
    """A single drawing instruction for a rendering collaborator.

    ``kind`` is 'image' (asset drawn at x, y, optionally scaled to
    width/height) or 'line' (from (x, y) to end, with line_width).
    """

    kind: str
    x: float
    y: float
    asset: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None
    end: Optional[Tuple[float, float]] = None
    line_width: Optional[float] = None


@dataclass
class StaffLayout:
    """Computes draw commands for a note on a staff canvas."""

    canvas_width: float = 800.0
    canvas_height: float = 600.0
    note_x: float = 380.0
    note_size: float = 110.0
    flat_x: float = 340.0
    ledger_x: Tuple[float, float] = (360.0, 510.0)
    ledger_line_width: float = 3.5
    staff_height: float = 360.0
    positions: Dict[str, int] = field(default_factory=lambda: dict(STAFF_POSITIONS))

    @property
    def staff_top(self) -> float:
        return self.canvas_height / 2 - self.staff_height / 2

    def draw_commands(self, note: str) -> List[DrawCommand]:
        """Staff, note head, and where needed the flat sign and ledger line."""
        if note not in self.positions:
            raise KeyError(f"Note {note!r} has no staff position")

        offset = self.positions[note]
        middle = self.canvas_height / 2
        commands = [
            DrawCommand(
                kind="image",
                asset=STAFF_ASSET,
                x=0.0,
                y=self.staff_top,
                width=self.canvas_width + 20,
                height=self.staff_height,
            ),
            DrawCommand(
                kind="image",
                asset=WHOLE_NOTE_ASSET,
                x=self.note_x,
                y=self.staff_top + offset,
                width=self.note_size,
                height=self.note_size,
            ),
        ]

        if is_flat(note):
            commands.append(
                DrawCommand(kind="image", asset=FLAT_ASSET, x=self.flat_x, y=middle + offset - 206)
            )

        if needs_ledger_line(note):
            y = middle + offset - 125
            commands.append(
                DrawCommand(
                    kind="line",
                    x=self.ledger_x[0],
                    y=y,
                    end=(self.ledger_x[1], y),
                    line_width=self.ledger_line_width,
                )
            )

        return commands
