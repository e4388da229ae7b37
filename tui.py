import curses
from dataclasses import dataclass
from typing_extensions import *

from automaton import AutomatonError, state_set_label
from input_field import InputField, Key

INSTRUCTIONS = "Type symbols separated by spaces. Press Esc or Ctrl-C to quit."
ACCEPTED = "Input accepted"
REJECTED = "Input rejected"

QUIT_KEYS = ("\x1b", "\x03")

ERROR_COLOR_PAIR = 1

INSTRUCTIONS_ROW = 0
RESULT_ROW = 1
VERDICT_ROW = 2
INPUT_ROW = 3


class Resolver(Protocol):
    def resolve(self, symbols: Sequence[str]) -> FrozenSet[str]: ...

    def is_accepting(self, frontier: FrozenSet[str]) -> bool: ...


@dataclass(frozen=True)
class Frame:
    result: str
    is_error: bool
    verdict: str
    input_text: str
    instructions: str = INSTRUCTIONS

    @property
    def cursor(self) -> Tuple[int, int]:
        return INPUT_ROW, len(self.input_text)


def build_frame(automaton: Resolver, field: InputField) -> Frame:
    """Re-run the simulation on the current buffer and describe what to show."""
    try:
        frontier = automaton.resolve(field.split_value())
    except AutomatonError as e:
        return Frame(result=str(e), is_error=True, verdict=REJECTED, input_text=field.value)

    return Frame(
        result=f"States: {state_set_label(frontier)}",
        is_error=False,
        verdict=ACCEPTED if automaton.is_accepting(frontier) else REJECTED,
        input_text=field.value,
    )


def _put_row(screen, row: int, text: str, width: int, attr: int = 0):
    # Rows below the bottom of a short terminal are dropped.
    try:
        screen.addnstr(row, 0, text, width - 1, attr)
    except curses.error:
        pass


def visible_input(text: str, width: int) -> str:
    """Tail of ``text`` that fits before the last column, leaving room for the cursor."""
    room = max(width - 1, 0)
    return text[len(text) - room:] if len(text) > room else text


def draw_frame(screen, frame: Frame, error_attr: int = 0):
    """Repaint the whole screen from ``frame``, clipped to the window size."""
    height, width = screen.getmaxyx()
    screen.erase()
    _put_row(screen, INSTRUCTIONS_ROW, frame.instructions, width)
    _put_row(screen, RESULT_ROW, frame.result, width, error_attr if frame.is_error else 0)
    _put_row(screen, VERDICT_ROW, frame.verdict, width)

    shown = visible_input(frame.input_text, width)
    _put_row(screen, INPUT_ROW, shown, width)
    if INPUT_ROW < height and width > 0:
        screen.move(INPUT_ROW, min(len(shown), width - 1))
    screen.refresh()


def is_quit_key(key: Key) -> bool:
    return key in QUIT_KEYS


def run(screen, automaton: Resolver, error_attr: int = 0) -> InputField:
    """Read keys until a quit key arrives, repainting after every key."""
    field = InputField()
    draw_frame(screen, build_frame(automaton, field), error_attr)

    while True:
        try:
            key = screen.get_wch()
        except KeyboardInterrupt:
            break
        if is_quit_key(key):
            break
        field.receive_event(key)
        draw_frame(screen, build_frame(automaton, field), error_attr)

    return field


def _tui_main(screen, automaton: Resolver) -> InputField:
    curses.raw()
    curses.set_escdelay(25)
    screen.keypad(True)

    error_attr = curses.A_BOLD
    if curses.has_colors():
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(ERROR_COLOR_PAIR, curses.COLOR_RED, -1)
        error_attr = curses.color_pair(ERROR_COLOR_PAIR)

    return run(screen, automaton, error_attr)


def show_tui(automaton: Resolver) -> InputField:
    return curses.wrapper(_tui_main, automaton)
