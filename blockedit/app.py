#!/usr/bin/env python3
"""
blockedit: tabbed terminal editor for brace-delimited config files,
with mouse support and in-place, comment-preserving write-back.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Callable, Sequence
from typing import TextIO

from .cache import CommitResult, ConfigCache
from .config import load_config
from .editor import ValueEditor
from .fields import Field, Tab
from .profiles import BUILTIN_PROFILES, Profile, ProfileError, get_profile, load_profile_file
from .ui.screen import C_RED, C_RESET, FrameRow, FrameView, render_frame
from .ui.terminal import Event, KeyPress, MouseEvent, RawTerminal, TerminalError
from .writeback import WriteBackError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

BUTTON_PRIMARY = 0
BUTTON_SECONDARY = 2
BUTTON_WHEEL_UP = 64
BUTTON_WHEEL_DOWN = 65
# Shift, meta and ctrl bits of an SGR button code.
BUTTON_MODIFIERS = 4 | 8 | 16

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


class TargetFileError(Exception):
    """Raised when the file to edit is missing or not accessible."""


def check_target(path: str) -> None:
    if not os.path.isfile(path):
        raise TargetFileError(f"Config not found: {path}")
    if not os.access(path, os.R_OK):
        raise TargetFileError(f"Config not readable: {path}")
    if not os.access(path, os.W_OK):
        raise TargetFileError(f"Config not writable: {path}")


class BlockEditApp:
    def __init__(
        self,
        profile: Profile,
        cache: ConfigCache,
        *,
        escape_timeout: float = 0.02,
        terminal_factory: Callable[..., RawTerminal] = RawTerminal,
        out: TextIO | None = None,
    ) -> None:
        self.profile = profile
        self.layout = profile.layout
        self.cache = cache
        self.editor = ValueEditor(cache)
        self.escape_timeout = escape_timeout
        self.terminal_factory = terminal_factory
        self.out = out or sys.stdout

        self.current_tab = 0
        self.selected_row = 0
        self.tab_zones: tuple[tuple[int, int], ...] = ()
        self.status = ""
        self.running = False

    # -- State helpers --

    @property
    def tabs(self) -> tuple[Tab, ...]:
        return self.profile.registry.tabs

    @property
    def current_fields(self) -> tuple[Field, ...]:
        return self.tabs[self.current_tab].fields

    def selected_field(self) -> Field | None:
        fields = self.current_fields
        if not fields:
            return None
        return fields[self.selected_row]

    def _clamp_selection(self) -> None:
        count = len(self.current_fields)
        if count == 0 or self.selected_row < 0:
            self.selected_row = 0
        elif self.selected_row >= count:
            self.selected_row = count - 1

    # -- Operations --

    def navigate(self, direction: int) -> None:
        count = len(self.current_fields)
        if count == 0:
            return
        self.selected_row = (self.selected_row + direction) % count

    def adjust(self, direction: int) -> None:
        field = self.selected_field()
        if field is None:
            return
        self.status = ""
        self._report(field, lambda: self.editor.adjust(field, direction))

    def switch_tab(self, direction: int = 1) -> None:
        self.current_tab = (self.current_tab + direction) % len(self.tabs)
        self.selected_row = 0

    def set_tab(self, index: int) -> None:
        if index != self.current_tab and 0 <= index < len(self.tabs):
            self.current_tab = index
            self.selected_row = 0

    def reset_defaults(self) -> None:
        tab = self.tabs[self.current_tab]
        try:
            results = self.editor.reset(tab.fields)
        except WriteBackError as exc:
            logger.warning("Reset of %s stopped: %s", tab.name, exc)
            self.status = f"Reset of {tab.name} stopped: {exc}"
            return
        missed = [field.label for field, result in results if result == "missed"]
        if missed:
            self.status = f"Not found in file, file not changed: {', '.join(missed)}"
        else:
            self.status = f"Reset {tab.name} to defaults"

    def _report(self, field: Field, action: Callable[[], CommitResult]) -> None:
        try:
            result = action()
        except WriteBackError as exc:
            logger.warning("Write failed for %s: %s", field.label, exc)
            self.status = f"Write failed for {field.label}: {exc}"
            return
        if result == "missed":
            where = f"[{field.block}]" if field.block else "the file"
            self.status = f"{field.label}: no '{field.key}' line in {where}; file not changed"

    # -- Input handling --

    def handle_mouse(self, event: MouseEvent) -> None:
        if not event.pressed:
            return
        button = event.button & ~BUTTON_MODIFIERS
        if button == BUTTON_WHEEL_UP:
            self.navigate(-1)
            return
        if button == BUTTON_WHEEL_DOWN:
            self.navigate(1)
            return

        if event.y == self.layout.tab_row:
            for index, (start, end) in enumerate(self.tab_zones):
                if start <= event.x <= end:
                    self.set_tab(index)
                    return

        start_row = self.layout.item_start_row
        count = len(self.current_fields)
        if start_row <= event.y < start_row + count:
            self.selected_row = event.y - start_row
            if event.x > self.layout.adjust_threshold:
                if button == BUTTON_PRIMARY:
                    self.adjust(1)
                elif button == BUTTON_SECONDARY:
                    self.adjust(-1)

    def handle_key(self, key: str) -> bool:
        if key in ("q", "Q", "ctrl_c"):
            return False
        if key in ("up", "k", "K"):
            self.navigate(-1)
        elif key in ("down", "j", "J"):
            self.navigate(1)
        elif key in ("right", "l", "L"):
            self.adjust(1)
        elif key in ("left", "h", "H"):
            self.adjust(-1)
        elif key == "tab":
            self.switch_tab(1)
        elif key == "shift_tab":
            self.switch_tab(-1)
        elif key in ("r", "R"):
            self.reset_defaults()
        return True

    def handle_event(self, event: Event) -> bool:
        """Apply one input event; returns ``False`` when the loop should end."""

        if isinstance(event, KeyPress):
            return self.handle_key(event.key)
        if isinstance(event, MouseEvent):
            self.handle_mouse(event)
        return True

    # -- Rendering --

    def frame_view(self) -> FrameView:
        self._clamp_selection()
        rows = []
        for field in self.current_fields:
            value = self.editor.current_value(field)
            display = None
            describe = getattr(field, "describe", None)
            if describe is not None and value is not None:
                display = describe(value)
            rows.append(FrameRow(label=field.label, value=value, display=display))
        return FrameView(
            title=self.profile.title,
            tab_names=self.profile.registry.tab_names,
            current_tab=self.current_tab,
            rows=rows,
            selected_row=self.selected_row,
            file_path=self.cache.path,
            layout=self.layout,
            status=self.status,
        )

    def draw(self) -> None:
        frame = render_frame(self.frame_view())
        self.tab_zones = frame.tab_zones
        self.out.write(frame.text)
        self.out.flush()

    def run(self) -> int:
        self.running = True
        try:
            with self.terminal_factory(stdout=self.out, escape_timeout=self.escape_timeout) as term:
                while self.running:
                    self.draw()
                    for event in term.read_events():
                        if not self.handle_event(event):
                            self.running = False
                            break
        except KeyboardInterrupt:
            return EXIT_INTERRUPTED
        except EOFError:
            logger.info("Input closed; leaving")
        finally:
            self.running = False
        return EXIT_OK


def log_err(message: str) -> None:
    print(f"{C_RED}[ERROR]{C_RESET} {message}", file=sys.stderr)


def setup_logging(log_file: str, level: str) -> None:
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    try:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        # The terminal belongs to the UI, so there is nowhere else to log to.
        handler = logging.NullHandler()
    logging.basicConfig(level=numeric, format=LOG_FORMAT, handlers=[handler])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blockedit",
        description="Tabbed terminal editor for brace-delimited config files.",
    )
    parser.add_argument("profile", nargs="?", help="built-in profile to use")
    parser.add_argument("-f", "--file", help="config file to edit")
    parser.add_argument("--profile-file", help="load fields from a JSON profile")
    parser.add_argument("--list-profiles", action="store_true", help="list built-in profiles")
    parser.add_argument("--log-level", help="logging level (default from settings)")
    return parser


def main(
    argv: Sequence[str] | None = None,
    app_factory: Callable[..., BlockEditApp] = BlockEditApp,
) -> int:
    args = build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))
    if args.list_profiles:
        for name, factory in BUILTIN_PROFILES.items():
            print(f"{name}\t{factory().title}")
        return EXIT_OK

    cfg = load_config()
    setup_logging(str(cfg["log_file"]), args.log_level or str(cfg["log_level"]))

    try:
        if args.profile_file:
            profile = load_profile_file(args.profile_file)
        else:
            profile = get_profile(args.profile or str(cfg["default_profile"]))
        path = args.file or cfg["targets"].get(profile.name) or profile.default_path
        if not path:
            raise TargetFileError(f"No config file given for profile {profile.name!r}")
        path = os.path.expanduser(str(path))
        check_target(path)
        cache = ConfigCache.load(path)
    except (ProfileError, TargetFileError) as exc:
        log_err(str(exc))
        return EXIT_ERROR
    except (OSError, UnicodeDecodeError) as exc:
        log_err(f"Could not read config: {exc}")
        return EXIT_ERROR

    try:
        timeout_ms = float(cfg.get("escape_timeout_ms", 20))
    except (TypeError, ValueError):
        timeout_ms = 20.0
    logger.info("Editing %s with profile %s", path, profile.name)
    app = app_factory(profile, cache, escape_timeout=max(0.001, timeout_ms / 1000))
    try:
        return app.run()
    except TerminalError as exc:
        log_err(str(exc))
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
