import curses
from typing_extensions import *

BACKSPACE_KEYS = (curses.KEY_BACKSPACE, curses.KEY_DC, "\x7f", "\b")

Key = Union[str, int]


class InputField:
    """Single-line buffer the user types symbols into."""

    def __init__(self):
        self._buffer: List[str] = []

    def receive_event(self, key: Key):
        if key in BACKSPACE_KEYS:
            if self._buffer:
                self._buffer.pop()
        elif isinstance(key, str) and len(key) == 1 and ("a" <= key <= "z" or key == " "):
            self._buffer.append(key)

    @property
    def value(self) -> str:
        return "".join(self._buffer)

    def split_value(self) -> List[str]:
        return self.value.split()

    def __len__(self):
        return len(self._buffer)

    def __repr__(self):
        return f"InputField({self.value!r})"
