"""On-screen keyboard for one octave."""

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Button

from midivisualizer.models import KEYBOARD_RANGE, get_note_name

# Computer-keyboard keys for C4..B4, laid out like a piano
KEY_BINDINGS = ("a", "w", "s", "e", "d", "f", "t", "g", "y", "h", "u", "j")


def is_black_key(pitch: int) -> bool:
    return pitch % 12 in (1, 3, 6, 8, 10)


class VirtualKeyboard(Horizontal):
    """
    Row of note buttons.

    Posts KeyPressed when a button is clicked; the app decides what to
    play and reports held notes back with `set_held`.
    """

    DEFAULT_CSS = """
    VirtualKeyboard {
        height: 5;
        padding: 0 1;
    }

    VirtualKeyboard Button {
        width: 1fr;
        min-width: 4;
        height: 100%;
        margin: 0;
    }

    VirtualKeyboard Button.black {
        background: $surface-darken-2;
        color: $text;
    }

    VirtualKeyboard Button.white {
        background: $surface-lighten-2;
    }

    VirtualKeyboard Button.held {
        background: $accent;
        text-style: bold;
    }
    """

    class KeyPressed(Message):
        """Posted when a key button is clicked."""

        def __init__(self, pitch: int):
            super().__init__()
            self.pitch = pitch

    def compose(self) -> ComposeResult:
        for pitch, key in zip(KEYBOARD_RANGE, KEY_BINDINGS):
            button = Button(f"{get_note_name(pitch)}\n({key})", id=f"key-{pitch}")
            button.add_class("black" if is_black_key(pitch) else "white")
            yield button

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id and event.button.id.startswith("key-"):
            event.stop()
            self.post_message(self.KeyPressed(int(event.button.id.removeprefix("key-"))))

    def set_held(self, pitch: int, held: bool) -> None:
        """Highlight (or un-highlight) the button for `pitch`."""
        for button in self.query(f"#key-{pitch}"):
            button.set_class(held, "held")
