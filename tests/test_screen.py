from blockedit.ui.screen import FrameRow, FrameView, Layout, format_value, render_frame
from blockedit.utils import strip_ansi


def _view(**overrides) -> FrameView:
    values = dict(
        title="Input Settings",
        tab_names=["Keyboard", "Mouse", "Touchpad"],
        current_tab=1,
        rows=[FrameRow("Left Handed", "true"), FrameRow("Sensitivity", "0.5"), FrameRow("Drag", None)],
        selected_row=1,
        file_path="/tmp/input.conf",
        layout=Layout(box_inner_width=60, label_width=20, max_display_rows=6),
    )
    values.update(overrides)
    return FrameView(**values)


def test_tab_zones_cover_each_tab_label():
    frame = render_frame(_view())

    assert frame.tab_zones == ((3, 12), (15, 21), (24, 33))
    tab_line = strip_ansi(frame.text.split("\n")[2])
    for (start, end), name in zip(frame.tab_zones, ["Keyboard", "Mouse", "Touchpad"]):
        assert tab_line[start - 1 : end] == f" {name} "


def test_frame_rows_start_at_item_row():
    frame = render_frame(_view())
    lines = [strip_ansi(line) for line in frame.text.split("\n")]

    item_lines = lines[4:7]
    assert item_lines[0].startswith("    Left Handed")
    assert item_lines[0].rstrip().endswith(": ON")
    assert item_lines[1].startswith(" ➤ Sensitivity")
    assert item_lines[2].rstrip().endswith(": unset")


def test_frame_is_padded_to_max_rows_and_has_footer():
    frame = render_frame(_view(status="warning here"))
    lines = [strip_ansi(line) for line in frame.text.split("\n")]

    # 4 header lines + 6 rows + blank + keys + file + status
    assert len(lines) == 4 + 6 + 4
    assert "[q] Quit" in lines[-3]
    assert lines[-2].strip() == "File: /tmp/input.conf"
    assert lines[-1].strip() == "warning here"


def test_boxes_line_up():
    frame = render_frame(_view())
    lines = [strip_ansi(line) for line in frame.text.split("\n")]

    assert len(lines[0]) == len(lines[1]) == len(lines[2]) == len(lines[3]) == 62


def test_format_value_variants():
    assert strip_ansi(format_value(FrameRow("a", "false"))) == "OFF"
    assert strip_ansi(format_value(FrameRow("a", None))) == "unset"
    assert strip_ansi(format_value(FrameRow("a", "$primary", display="Dynamic"))) == "Dynamic"
    assert strip_ansi(format_value(FrameRow("a", "us"))) == "us"
