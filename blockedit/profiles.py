"""Field registration tables.

A profile bundles everything the editor needs for one target file: the
tabs and fields, the default file location and the screen layout. Two
profiles ship with the package; more can be loaded from JSON files::

    {
      "name": "misc",
      "title": "Misc Settings",
      "path": "~/.config/hypr/misc.conf",
      "layout": {"label_width": 24},
      "tabs": [
        {"name": "General", "fields": [
          {"label": "VRR", "key": "vrr", "type": "int", "block": "misc",
           "min": 0, "max": 3, "step": 1, "default": "0"},
          {"label": "Mode", "key": "mode", "type": "cycle",
           "options": "a,b,c", "default": "a"}
        ]}
      ]
    }
"""
from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, fields as dataclass_fields

from .fields import (
    ActionField,
    BoolField,
    CycleField,
    Field,
    FieldRegistry,
    FloatField,
    IntField,
    parse_options,
)
from .ui.screen import Layout

SHADOW_COLOR_STATIC = "rgba(1a1a1aee)"
SHADOW_COLOR_DYNAMIC = "$primary"


class ProfileError(Exception):
    """Raised when a profile cannot be found or loaded."""


@dataclass(frozen=True)
class Profile:
    name: str
    title: str
    default_path: str
    registry: FieldRegistry
    layout: Layout = Layout()


def _toggle_shadow_color(current: str | None) -> str:
    if current and SHADOW_COLOR_DYNAMIC in current:
        return SHADOW_COLOR_STATIC
    return SHADOW_COLOR_DYNAMIC


def _describe_shadow_color(value: str) -> str | None:
    return "Dynamic" if SHADOW_COLOR_DYNAMIC in value else None


def input_profile() -> Profile:
    registry = FieldRegistry(["Keyboard", "Mouse", "Touchpad", "Cursor", "Gestures"])
    add = registry.register

    add("Keyboard", CycleField("Layout", "kb_layout", "input", "us", ("us", "uk", "de", "fr", "es")))
    add("Keyboard", BoolField("Numlock Default", "numlock_by_default", "input", "true"))
    add("Keyboard", IntField("Repeat Rate", "repeat_rate", "input", "35", 10, 100, 5))
    add("Keyboard", IntField("Repeat Delay", "repeat_delay", "input", "250", 100, 1000, 50))
    add("Keyboard", BoolField("Resolve Binds Sym", "resolve_binds_by_sym", "input", "false"))

    add("Mouse", FloatField("Sensitivity", "sensitivity", "input", "0", -1.0, 1.0, 0.1))
    add(
        "Mouse",
        CycleField("Accel Profile", "accel_profile", "input", "adaptive", ("flat", "adaptive", "custom")),
    )
    add("Mouse", BoolField("Force No Accel", "force_no_accel", "input", "false"))
    add("Mouse", BoolField("Left Handed", "left_handed", "input", "true"))
    add("Mouse", IntField("Follow Mouse", "follow_mouse", "input", "1", 0, 3, 1))
    add("Mouse", BoolField("Mouse Refocus", "mouse_refocus", "input", "true"))
    add("Mouse", BoolField("Mouse Nat Scroll", "natural_scroll", "input", "false"))
    add(
        "Mouse",
        CycleField(
            "Scroll Method", "scroll_method", "input", "2fg", ("2fg", "edge", "on_button_down", "no_scroll")
        ),
    )

    add("Touchpad", BoolField("TP Nat Scroll", "natural_scroll", "touchpad", "true"))
    add("Touchpad", BoolField("Tap to Click", "tap-to-click", "touchpad", "true"))
    add("Touchpad", BoolField("Disable While Typing", "disable_while_typing", "touchpad", "true"))
    add("Touchpad", BoolField("Clickfinger Behav", "clickfinger_behavior", "touchpad", "false"))
    add("Touchpad", BoolField("Drag Lock", "drag_lock", "touchpad", "false"))

    add("Cursor", IntField("No HW Cursors", "no_hardware_cursors", "cursor", "2", 0, 2, 1))
    add("Cursor", IntField("Use CPU Buffer", "use_cpu_buffer", "cursor", "2", 0, 2, 1))
    add("Cursor", BoolField("Hide On Key", "hide_on_key_press", "cursor", "false"))
    add("Cursor", IntField("Inactive Timeout", "inactive_timeout", "cursor", "0", 0, 60, 5))
    add("Cursor", IntField("Warp On Change", "warp_on_change_workspace", "cursor", "0", 0, 2, 1))
    add("Cursor", IntField("No Break VRR", "no_break_fs_vrr", "cursor", "2", 0, 2, 1))
    add("Cursor", FloatField("Zoom Factor", "zoom_factor", "cursor", "1.0", 1.0, 5.0, 0.1))

    add("Gestures", IntField("Swipe Distance", "workspace_swipe_distance", "gestures", "300", 100, 1000, 50))
    add(
        "Gestures",
        FloatField("Swipe Cancel Ratio", "workspace_swipe_cancel_ratio", "gestures", "0.5", 0.0, 1.0, 0.1),
    )
    add("Gestures", BoolField("Swipe Invert", "workspace_swipe_invert", "gestures", "true"))
    add("Gestures", BoolField("Swipe Create New", "workspace_swipe_create_new", "gestures", "true"))
    add("Gestures", BoolField("Swipe Forever", "workspace_swipe_forever", "gestures", "false"))

    return Profile(
        name="input",
        title="Input Settings",
        default_path="~/.config/hypr/edit_here/source/input.conf",
        registry=registry,
        layout=Layout(box_inner_width=76, label_width=32, max_display_rows=14, adjust_threshold=40),
    )


def appearance_profile() -> Profile:
    registry = FieldRegistry(["Layout", "Decoration", "Blur", "Shadow", "Snap"])
    add = registry.register

    # Unscoped keys resolve to their first occurrence anywhere in the file.
    add("Layout", IntField("Gaps In", "gaps_in", "", "6", 0, 100, 1))
    add("Layout", IntField("Gaps Out", "gaps_out", "", "12", 0, 100, 1))
    add("Layout", IntField("Gaps Workspaces", "gaps_workspaces", "general", "0", 0, 100, 1))
    add("Layout", IntField("Border Size", "border_size", "", "2", 0, 10, 1))
    add("Layout", BoolField("Resize on Border", "resize_on_border", "general", "false"))
    add("Layout", BoolField("Allow Tearing", "allow_tearing", "general", "true"))

    add("Decoration", IntField("Rounding", "rounding", "", "6", 0, 30, 1))
    add("Decoration", FloatField("Rounding Power", "rounding_power", "", "6.0", 0.0, 10.0, 0.1))
    add("Decoration", FloatField("Active Opacity", "active_opacity", "", "1.0", 0.1, 1.0, 0.05))
    add("Decoration", FloatField("Inactive Opacity", "inactive_opacity", "", "1.0", 0.1, 1.0, 0.05))
    add("Decoration", FloatField("Fullscreen Opacity", "fullscreen_opacity", "", "1.0", 0.1, 1.0, 0.05))
    add("Decoration", BoolField("Dim Inactive", "dim_inactive", "", "true"))
    add("Decoration", FloatField("Dim Strength", "dim_strength", "", "0.2", 0.0, 1.0, 0.05))
    add("Decoration", FloatField("Dim Special", "dim_special", "", "0.8", 0.0, 1.0, 0.05))

    add("Blur", BoolField("Blur Enabled", "enabled", "blur", "false"))
    add("Blur", IntField("Blur Size", "size", "blur", "4", 1, 20, 1))
    add("Blur", IntField("Blur Passes", "passes", "blur", "2", 1, 10, 1))
    add("Blur", BoolField("Blur Xray", "xray", "blur", "false"))
    add("Blur", FloatField("Blur Noise", "noise", "blur", "0.0117", 0.0, 1.0, 0.01))
    add("Blur", FloatField("Blur Contrast", "contrast", "blur", "0.8916", 0.0, 2.0, 0.05))
    add("Blur", FloatField("Blur Brightness", "brightness", "blur", "0.8172", 0.0, 2.0, 0.05))
    add("Blur", BoolField("Blur Popups", "popups", "blur", "false"))
    add("Blur", FloatField("Blur Vibrancy", "vibrancy", "blur", "0.1696", 0.0, 1.0, 0.05))

    add("Shadow", BoolField("Shadow Enabled", "enabled", "shadow", "false"))
    add("Shadow", IntField("Shadow Range", "range", "shadow", "35", 0, 100, 1))
    add("Shadow", IntField("Shadow Power", "render_power", "shadow", "2", 1, 4, 1))
    add("Shadow", BoolField("Shadow Sharp", "sharp", "shadow", "false"))
    add("Shadow", FloatField("Shadow Scale", "scale", "shadow", "1.0", 0.0, 1.1, 0.05))
    add("Shadow", BoolField("Shadow Ignore Win", "ignore_window", "shadow", "true"))
    add(
        "Shadow",
        ActionField(
            "Shadow Color",
            "color",
            "shadow",
            SHADOW_COLOR_STATIC,
            toggle=_toggle_shadow_color,
            describe=_describe_shadow_color,
        ),
    )

    add("Snap", BoolField("Snap Enabled", "enabled", "snap", "false"))
    add("Snap", IntField("Snap Window Gap", "window_gap", "snap", "10", 0, 50, 1))
    add("Snap", IntField("Snap Monitor Gap", "monitor_gap", "snap", "10", 0, 50, 1))
    add("Snap", BoolField("Snap Border Overlap", "border_overlap", "snap", "false"))

    return Profile(
        name="appearance",
        title="Appearance Settings",
        default_path="~/.config/hypr/edit_here/source/appearance.conf",
        registry=registry,
        layout=Layout(box_inner_width=64, label_width=22, max_display_rows=12, adjust_threshold=30),
    )


BUILTIN_PROFILES: dict[str, Callable[[], Profile]] = {
    "input": input_profile,
    "appearance": appearance_profile,
}


def get_profile(name: str) -> Profile:
    factory = BUILTIN_PROFILES.get(name)
    if factory is None:
        known = ", ".join(sorted(BUILTIN_PROFILES))
        raise ProfileError(f"Unknown profile {name!r} (known: {known})")
    return factory()


def _optional_str(value) -> str | None:
    return None if value is None else str(value)


def _field_from_dict(data: dict) -> Field:
    try:
        label = str(data["label"])
        key = str(data["key"])
        kind = data.get("type", "")
    except KeyError as exc:
        raise ProfileError(f"Field entry is missing {exc.args[0]!r}: {data!r}") from None

    common = {
        "label": label,
        "key": key,
        "block": str(data.get("block", "")),
        "default": _optional_str(data.get("default")),
    }
    try:
        if kind == "int":
            return IntField(
                **common,
                minimum=None if data.get("min") is None else int(data["min"]),
                maximum=None if data.get("max") is None else int(data["max"]),
                step=int(data.get("step", 1)),
            )
        if kind == "float":
            return FloatField(
                **common,
                minimum=None if data.get("min") is None else float(data["min"]),
                maximum=None if data.get("max") is None else float(data["max"]),
                step=float(data.get("step", 0.1)),
            )
        if kind == "bool":
            return BoolField(**common)
        if kind == "cycle":
            return CycleField(**common, options=parse_options(data.get("options", "")))
    except (TypeError, ValueError) as exc:
        raise ProfileError(f"Invalid field {label!r}: {exc}") from exc
    if kind == "action":
        raise ProfileError(f"Field {label!r}: action fields cannot be declared in a profile file")
    raise ProfileError(f"Field {label!r} has unknown type {kind!r}")


def _layout_from_dict(data: dict) -> Layout:
    if not isinstance(data, dict):
        raise ProfileError("'layout' must be a JSON object")
    known = {f.name for f in dataclass_fields(Layout)}
    unknown = set(data) - known
    if unknown:
        raise ProfileError(f"Unknown layout settings: {', '.join(sorted(unknown))}")
    try:
        return Layout(**{name: int(value) for name, value in data.items()})
    except (TypeError, ValueError) as exc:
        raise ProfileError(f"Invalid layout: {exc}") from exc


def profile_from_dict(data: dict) -> Profile:
    if not isinstance(data, dict):
        raise ProfileError("Profile must be a JSON object")
    tabs = data.get("tabs")
    if not isinstance(tabs, list) or not tabs:
        raise ProfileError("Profile needs a non-empty 'tabs' list")

    try:
        registry = FieldRegistry([str(tab["name"]) for tab in tabs])
        for tab in tabs:
            for entry in tab.get("fields", []):
                registry.register(str(tab["name"]), _field_from_dict(entry))
    except (KeyError, TypeError, AttributeError) as exc:
        raise ProfileError(f"Malformed tab entry: {exc}") from exc
    except ValueError as exc:
        raise ProfileError(str(exc)) from exc

    name = str(data.get("name", "custom"))
    return Profile(
        name=name,
        title=str(data.get("title", name)),
        default_path=str(data.get("path", "")),
        registry=registry,
        layout=_layout_from_dict(data.get("layout", {})),
    )


def load_profile_file(path: str) -> Profile:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise ProfileError(f"Could not read profile {path}: {exc}") from exc
    return profile_from_dict(data)
