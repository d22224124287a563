import pytest

from blockedit.parser import ConfigRecord, parse_records, scan_lines, strip_comment

SAMPLE = """\
# Top comment = not data
$mainMod = SUPER
general {
    gaps_in = 5 # inner gap
    border_size = 2
    col.active_border = rgba(33ccffee)
}

decoration {
    rounding = 6
    blur {
        enabled = true
        size = 4
    }
    shadow {
        enabled = false
        color = rgba(1a1a1aee)
    }
    dim_inactive = true
}
"""


def _pairs(text: str):
    return [(r.key, r.block, r.raw_value) for r in parse_records(text)]


def test_parse_records_tracks_enclosing_block():
    assert _pairs(SAMPLE) == [
        ("$mainMod", "", "SUPER"),
        ("gaps_in", "general", "5"),
        ("border_size", "general", "2"),
        ("col.active_border", "general", "rgba(33ccffee)"),
        ("rounding", "decoration", "6"),
        ("enabled", "blur", "true"),
        ("size", "blur", "4"),
        ("enabled", "shadow", "false"),
        ("color", "shadow", "rgba(1a1a1aee)"),
        ("dim_inactive", "decoration", "true"),
    ]


def test_parse_records_keeps_line_numbers():
    records = parse_records(SAMPLE)
    assert records[0] == ConfigRecord("$mainMod", "", "SUPER", line=1)
    assert records[1].line == 3


def test_comment_lines_do_not_touch_block_stack():
    text = "input {\n    # }\n    kb_layout = us\n}\n"
    assert _pairs(text) == [("kb_layout", "input", "us")]


@pytest.mark.parametrize(
    "line",
    [
        "no equals sign here",
        "   = value without key",
        "",
        "    ",
        "# commented = out",
    ],
)
def test_malformed_lines_are_ignored(line):
    assert parse_records(line) == []


def test_value_keeps_everything_after_first_equals():
    assert _pairs("exec = foo --opt=bar # run it") == [("exec", "", "foo --opt=bar")]


def test_multiple_closes_on_one_line_pop_each_level():
    text = "a {\n b {\n  x = 1\n }}\ny = 2\n"
    assert _pairs(text) == [("x", "b", "1"), ("y", "", "2")]


def test_unbalanced_close_never_goes_below_top_level():
    text = "}\n}\nx = 1\nouter {\n y = 2\n}\n"
    assert _pairs(text) == [("x", "", "1"), ("y", "outer", "2")]


def test_inline_block_with_data():
    text = "blur { enabled = true }\nafter = 1\n"
    assert _pairs(text) == [("enabled", "blur", "true"), ("after", "", "1")]


def test_scan_lines_reports_value_span():
    line = "    gaps_in   =   5   # comment\n"
    (data,) = list(scan_lines([line]))
    assert line[data.value_start : data.value_end] == "5"
    assert data.index == 0


def test_empty_value_span_sits_right_after_equals():
    line = "    gaps_in =   # comment\n"
    (data,) = list(scan_lines([line]))
    assert data.value == ""
    assert data.value_start == data.value_end == line.index("=") + 1


def test_strip_comment_drops_line_break_and_comment():
    assert strip_comment("key = 1 # note\n") == "key = 1 "
    assert strip_comment("key = 1\r\n") == "key = 1"
