"""Frame rendering for the tabbed editor.

Rendering is a pure function of a :class:`FrameView`, so it can be tested
without a terminal. Rows and columns are 1-based terminal coordinates, the
same ones SGR mouse reports use.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..utils import display_width, pad_to_width

C_RESET = "\033[0m"
C_CYAN = "\033[1;36m"
C_GREEN = "\033[1;32m"
C_MAGENTA = "\033[1;35m"
C_RED = "\033[1;31m"
C_WHITE = "\033[1;37m"
C_GREY = "\033[1;30m"
C_YELLOW = "\033[1;33m"
C_INVERSE = "\033[7m"
CLR_EOL = "\033[K"
CLR_EOS = "\033[J"
CLR_SCREEN = "\033[2J"
CURSOR_HOME = "\033[H"
CURSOR_HIDE = "\033[?25l"
CURSOR_SHOW = "\033[?25h"
MOUSE_ON = "\033[?1000h\033[?1002h\033[?1006h"
MOUSE_OFF = "\033[?1000l\033[?1002l\033[?1006l"

UNSET = "unset"
FOOTER_KEYS = " [Tab] Category  [r] Reset  [←/→ h/l] Adjust  [↑/↓ j/k] Nav  [q] Quit"


@dataclass(frozen=True)
class Layout:
    box_inner_width: int = 76
    label_width: int = 32
    max_display_rows: int = 14
    tab_row: int = 3
    item_start_row: int = 5
    adjust_threshold: int = 40


@dataclass(frozen=True)
class FrameRow:
    label: str
    value: str | None
    display: str | None = None


@dataclass(frozen=True)
class FrameView:
    title: str
    tab_names: Sequence[str]
    current_tab: int
    rows: Sequence[FrameRow]
    selected_row: int
    file_path: str
    layout: Layout = Layout()
    status: str = ""


@dataclass(frozen=True)
class Frame:
    text: str
    tab_zones: tuple[tuple[int, int], ...]


def format_value(row: FrameRow) -> str:
    if row.display is not None:
        return f"{C_MAGENTA}{row.display}{C_RESET}"
    if row.value is None:
        return f"{C_RED}{UNSET}{C_RESET}"
    if row.value == "true":
        return f"{C_GREEN}ON{C_RESET}"
    if row.value == "false":
        return f"{C_RED}OFF{C_RESET}"
    return f"{C_WHITE}{row.value}{C_RESET}"


def _header(title: str, width: int) -> list[str]:
    h_line = "─" * width
    title_len = display_width(title)
    left_pad = max(0, (width - title_len) // 2)
    right_pad = max(0, width - title_len - left_pad)
    return [
        f"{C_MAGENTA}┌{h_line}┐{C_RESET}",
        f"{C_MAGENTA}│{' ' * left_pad}{C_WHITE}{title}{C_MAGENTA}{' ' * right_pad}│{C_RESET}",
    ]


def _tab_bar(view: FrameView) -> tuple[str, tuple[tuple[int, int], ...]]:
    width = view.layout.box_inner_width
    parts = [f"{C_MAGENTA}│ "]
    zones: list[tuple[int, int]] = []
    # Column 1 is the border, column 2 a space; the first tab starts at 3.
    col = 3
    for index, name in enumerate(view.tab_names):
        name_len = display_width(name)
        if index == view.current_tab:
            parts.append(f"{C_CYAN}{C_INVERSE} {name} {C_RESET}{C_MAGENTA}│ ")
        else:
            parts.append(f"{C_GREY} {name} {C_MAGENTA}│ ")
        zones.append((col, col + name_len + 1))
        col += name_len + 4

    pad_needed = width - col + 2
    if pad_needed > 0:
        parts.append(" " * pad_needed)
    parts.append(f"{C_MAGENTA}│{C_RESET}")
    return "".join(parts), tuple(zones)


def render_frame(view: FrameView) -> Frame:
    """Build the whole screen as one string plus the tab zone map."""

    layout = view.layout
    lines = _header(view.title, layout.box_inner_width)
    tab_line, zones = _tab_bar(view)
    lines.append(tab_line)
    lines.append(f"{C_MAGENTA}└{'─' * layout.box_inner_width}┘{C_RESET}")

    for index, row in enumerate(view.rows):
        label = pad_to_width(row.label, layout.label_width)
        value = format_value(row)
        if index == view.selected_row:
            lines.append(f"{C_CYAN} ➤ {C_INVERSE}{label}{C_RESET} : {value}{CLR_EOL}")
        else:
            lines.append(f"    {label} : {value}{CLR_EOL}")

    for _ in range(len(view.rows), layout.max_display_rows):
        lines.append(CLR_EOL)

    lines.append("")
    lines.append(f"{C_CYAN}{FOOTER_KEYS}{C_RESET}")
    lines.append(f"{C_CYAN} File: {C_WHITE}{view.file_path}{C_RESET}{CLR_EOL}")
    status = f"{C_YELLOW} {view.status}{C_RESET}" if view.status else ""
    lines.append(f"{status}{CLR_EOL}{CLR_EOS}")

    return Frame(text=CURSOR_HOME + "\n".join(lines), tab_zones=zones)
