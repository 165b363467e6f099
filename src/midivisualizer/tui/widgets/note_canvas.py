"""Canvas widget drawing the active notes."""

from collections.abc import Sequence

from rich.style import Style
from rich.text import Text
from textual.widget import Widget

from midivisualizer.core.styling import DEFAULT_MAX_RADIUS
from midivisualizer.models import MIDI_MAX, ActiveNote, Color, VisualizationStyle

BACKGROUND = Color(r=12, g=12, b=20)
GRID_COLOR = Color(r=48, g=48, b=64)
PITCH_CLASSES = 12
GRID_ROW_SPACING = 4

FILL_CHAR = "█"
GRID_CHAR = "·"

Cell = tuple[str, Style]


def _blank_cell() -> Cell:
    return (" ", Style(bgcolor=BACKGROUND.to_hex()))


def _note_style(note: ActiveNote) -> Style:
    color = note.color.blend(BACKGROUND, note.opacity)
    return Style(color=color.to_hex(), bgcolor=BACKGROUND.to_hex())


def _draw_grid(cells: list[list[Cell]], width: int, height: int) -> None:
    style = Style(color=GRID_COLOR.to_hex(), bgcolor=BACKGROUND.to_hex())
    column_width = width / PITCH_CLASSES
    columns = {int(i * column_width) for i in range(1, PITCH_CLASSES)}
    for y in range(height):
        for x in range(width):
            if x in columns or (y % GRID_ROW_SPACING == 0 and x % 2 == 0):
                cells[y][x] = (GRID_CHAR, style)


def _draw_circle(cells: list[list[Cell]], note: ActiveNote, width: int, height: int, max_radius: float) -> None:
    # Horizontal by pitch class, vertical by pitch (high notes at the top)
    cx = (note.pitch % PITCH_CLASSES + 0.5) * width / PITCH_CLASSES
    cy = (1.0 - note.pitch / MIDI_MAX) * (height - 1)

    # A full-size circle spans one pitch-class column; cells are twice as tall as wide
    rx = max(note.radius / max_radius * width / PITCH_CLASSES / 2.0, 0.5)
    ry = max(rx / 2.0, 0.5)

    style = _note_style(note)
    for y in range(max(int(cy - ry), 0), min(int(cy + ry) + 1, height)):
        for x in range(max(int(cx - rx), 0), min(int(cx + rx) + 1, width)):
            if ((x + 0.5 - cx) / rx) ** 2 + ((y - cy) / ry) ** 2 <= 1.0:
                cells[y][x] = (FILL_CHAR, style)

    label = note.name
    row = int(round(cy))
    start = int(round(cx - len(label) / 2))
    if 2 * rx >= len(label) and 0 <= row < height and start >= 0 and start + len(label) <= width:
        label_style = Style(color=BACKGROUND.to_hex(), bgcolor=style.color, bold=True)
        for offset, char in enumerate(label):
            cells[row][start + offset] = (char, label_style)


def _draw_bar(cells: list[list[Cell]], note: ActiveNote, width: int, height: int, max_radius: float) -> None:
    column = note.pitch % PITCH_CLASSES
    left = int(column * width / PITCH_CLASSES)
    right = max(int((column + 1) * width / PITCH_CLASSES) - 1, left + 1)
    bar_height = max(int(round(note.radius / max_radius * height)), 1)

    style = _note_style(note)
    for y in range(max(height - bar_height, 0), height):
        for x in range(left, min(right, width)):
            cells[y][x] = (FILL_CHAR, style)


def draw_notes(
    notes: Sequence[ActiveNote],
    width: int,
    height: int,
    style: VisualizationStyle = VisualizationStyle.CIRCLES,
    show_grid: bool = True,
    max_radius: float = DEFAULT_MAX_RADIUS,
) -> Text:
    """
    Rasterize notes into a block of rich Text.

    Notes are drawn in the given order, so later notes cover earlier ones.
    Each note's color is blended toward the background by its opacity.
    """
    if width <= 0 or height <= 0:
        return Text()

    cells = [[_blank_cell() for _ in range(width)] for _ in range(height)]
    if show_grid:
        _draw_grid(cells, width, height)

    draw = _draw_bar if VisualizationStyle(style) == VisualizationStyle.BARS else _draw_circle
    for note in notes:
        draw(cells, note, width, height, max_radius)

    text = Text(no_wrap=True, overflow="crop")
    for y, row in enumerate(cells):
        for char, cell_style in row:
            text.append(char, cell_style)
        if y < height - 1:
            text.append("\n")
    return text


class NoteCanvas(Widget):
    """Draws dispatcher snapshots as circles or bars."""

    DEFAULT_CSS = """
    NoteCanvas {
        width: 100%;
        height: 1fr;
        min-height: 8;
    }
    """

    def __init__(self, id: str | None = None) -> None:
        super().__init__(id=id)
        self._notes: tuple[ActiveNote, ...] = ()
        self.style_name = VisualizationStyle.CIRCLES
        self.show_grid = True
        self.max_radius = DEFAULT_MAX_RADIUS

    def configure(self, style: VisualizationStyle, show_grid: bool, max_radius: float) -> None:
        """Change how notes are drawn."""
        self.style_name = VisualizationStyle(style)
        self.show_grid = show_grid
        self.max_radius = max_radius
        self.refresh()

    def update_notes(self, notes: Sequence[ActiveNote]) -> None:
        """Show a new snapshot."""
        notes = tuple(notes)
        if notes or self._notes:
            self._notes = notes
            self.refresh()

    @property
    def notes(self) -> tuple[ActiveNote, ...]:
        return self._notes

    def render(self) -> Text:
        return draw_notes(
            self._notes,
            self.size.width,
            self.size.height,
            style=self.style_name,
            show_grid=self.show_grid,
            max_radius=self.max_radius,
        )
