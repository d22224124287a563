"""Raw terminal input: byte decoding and scoped terminal mode handling."""
from __future__ import annotations

import codecs
import os
import re
import select
import signal
import sys
import termios
import tty
from dataclasses import dataclass
from typing import TextIO

from .screen import C_RESET, CLR_SCREEN, CURSOR_HIDE, CURSOR_HOME, CURSOR_SHOW, MOUSE_OFF, MOUSE_ON

ESC = 0x1B
DEFAULT_ESCAPE_TIMEOUT = 0.02

SGR_MOUSE_RE = re.compile(r"^\[<(?P<button>\d+);(?P<x>\d+);(?P<y>\d+)(?P<kind>[Mm])$")

SEQUENCE_KEYS = {
    "[A": "up",
    "OA": "up",
    "[B": "down",
    "OB": "down",
    "[C": "right",
    "OC": "right",
    "[D": "left",
    "OD": "left",
    "[Z": "shift_tab",
}

CONTROL_KEYS = {
    "\t": "tab",
    "\r": "enter",
    "\n": "enter",
    "\x03": "ctrl_c",
    "\x7f": "backspace",
}


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class MouseEvent:
    button: int
    x: int
    y: int
    pressed: bool


@dataclass(frozen=True)
class UnknownSequence:
    raw: str


Event = KeyPress | MouseEvent | UnknownSequence


class TerminalError(Exception):
    """Raised when the terminal cannot be put into interactive mode."""


def decode_sequence(seq: str) -> Event:
    """Map the bytes that followed an ESC to an event."""

    if seq == "":
        return KeyPress("escape")
    key = SEQUENCE_KEYS.get(seq)
    if key is not None:
        return KeyPress(key)
    match = SGR_MOUSE_RE.match(seq)
    if match:
        return MouseEvent(
            button=int(match.group("button")),
            x=int(match.group("x")),
            y=int(match.group("y")),
            pressed=match.group("kind") == "M",
        )
    return UnknownSequence(seq)


class InputDecoder:
    """Incremental decoder turning raw input bytes into key and mouse events.

    Escape sequences may arrive split across reads. ``pending`` is true while
    an ESC has been seen but its sequence is not complete yet; the caller
    should then wait briefly for more bytes and call :meth:`flush` if none
    arrive, which turns a lone ESC into an ``escape`` key press.
    """

    def __init__(self) -> None:
        self._text = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._seq: str | None = None

    @property
    def pending(self) -> bool:
        return self._seq is not None

    def feed(self, data: bytes) -> list[Event]:
        events: list[Event] = []
        for ch in self._text.decode(data):
            if self._seq is None:
                if ch == "\x1b":
                    self._seq = ""
                else:
                    events.append(KeyPress(CONTROL_KEYS.get(ch, ch)))
                continue

            if ch == "\x1b":
                # A second ESC ends whatever was collected so far.
                events.append(decode_sequence(self._seq))
                self._seq = ""
                continue

            self._seq += ch
            if self._sequence_complete(self._seq):
                events.append(decode_sequence(self._seq))
                self._seq = None
        return events

    def flush(self) -> list[Event]:
        if self._seq is None:
            return []
        seq, self._seq = self._seq, None
        return [decode_sequence(seq)]

    @staticmethod
    def _sequence_complete(seq: str) -> bool:
        introducer = seq[0]
        if introducer == "[":
            # CSI: parameter and intermediate bytes, then a final byte.
            return len(seq) > 1 and "\x40" <= seq[-1] <= "\x7e"
        if introducer == "O":
            return len(seq) == 2
        return True


class RawTerminal:
    """Scoped raw-input + mouse-reporting mode.

    Entering puts the terminal in cbreak mode, enables SGR mouse reports,
    hides the cursor and installs a SIGTERM handler. Leaving undoes all of
    it, whether the block exits normally, by exception or by signal.
    """

    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        escape_timeout: float = DEFAULT_ESCAPE_TIMEOUT,
    ) -> None:
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.escape_timeout = escape_timeout
        self.decoder = InputDecoder()
        self.fd = self.stdin.fileno()
        self._old_settings = None
        self._old_sigterm = None

    def __enter__(self) -> RawTerminal:
        if not os.isatty(self.fd):
            raise TerminalError("stdin is not an interactive terminal")
        try:
            self._old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except termios.error as exc:
            raise TerminalError(f"Could not switch terminal mode: {exc}") from exc
        self._old_sigterm = signal.signal(signal.SIGTERM, _raise_exit)
        self.write(MOUSE_ON + CURSOR_HIDE + CLR_SCREEN + CURSOR_HOME)
        return self

    def __exit__(self, *args) -> None:
        try:
            self.write(MOUSE_OFF + CURSOR_SHOW + C_RESET + "\n")
        finally:
            if self._old_settings is not None:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self._old_settings)
                self._old_settings = None
            if self._old_sigterm is not None:
                signal.signal(signal.SIGTERM, self._old_sigterm)
                self._old_sigterm = None

    def write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def _read(self, timeout: float | None) -> bytes | None:
        """Read one byte; ``None`` when ``timeout`` expires first."""

        ready = select.select([self.fd], [], [], timeout)[0]
        if not ready:
            return None
        data = os.read(self.fd, 1)
        if not data:
            raise EOFError("terminal input closed")
        return data

    def read_events(self) -> list[Event]:
        """Block for the next input and return the events it completes."""

        events = self.decoder.feed(self._read(None) or b"")
        while self.decoder.pending:
            data = self._read(self.escape_timeout)
            if data is None:
                events.extend(self.decoder.flush())
                break
            events.extend(self.decoder.feed(data))
        return events


def _raise_exit(signum, frame) -> None:
    raise SystemExit(128 + signum)
