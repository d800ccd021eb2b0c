import pytest

from sudscript.lines import (
    DEFAULT_METADATA_KEY,
    TAB_INDENT,
    extract_gosub_id,
    extract_text_id,
    format_text_id,
    is_comment_line,
    parse_comment_metadata,
    split_lines,
    trim_line,
)


@pytest.mark.parametrize("sep", ["\n", "\r\n", "\r"])
def test_split_lines_each_separator(sep):
    assert split_lines(sep.join(["a", "b", "c"])) == ["a", "b", "c"]


def test_split_lines_keeps_trailing_empty_line():
    assert split_lines("one\ntwo\n") == ["one", "two", ""]


def test_split_lines_mixed_and_blank():
    assert split_lines("a\r\n\rb\nc") == ["a", "", "b", "c"]


def test_split_lines_join_round_trip():
    text = "Player: Hello\n  * Choice 1\n\tNPC: I see"
    assert "\n".join(split_lines(text)) == text


def test_trim_line_spaces():
    assert trim_line("   NPC: Hi  ") == ("NPC: Hi", 3)


def test_trim_line_tabs_use_tab_indent():
    text, indent = trim_line("\t\tX", tab_indent=TAB_INDENT)
    assert text == "X"
    assert indent == 2 * TAB_INDENT


def test_trim_line_mixed_custom_tab():
    assert trim_line(" \t x", tab_indent=3) == ("x", 5)


def test_trim_line_blank():
    assert trim_line("   \t") == ("", 3 + TAB_INDENT)


@pytest.mark.parametrize(
    "line, expected",
    [("# a comment", True), ("#= meta", True), ("Player: # no", False), ("", False)],
)
def test_is_comment_line(line, expected):
    assert is_comment_line(line) is expected


def test_extract_text_id():
    found = extract_text_id("Hello @0012@")
    assert found is not None
    assert found.text == "Hello"
    assert found.id == "@0012@"
    assert found.number == 0x12


def test_extract_text_id_absent():
    assert extract_text_id("Hello there") is None


def test_extract_text_id_ignores_gosub_id():
    assert extract_text_id("[gosub sub] @GS0001@") is None


def test_extract_gosub_id():
    found = extract_gosub_id("[gosub mysub] @GS00a1@")
    assert found is not None
    assert found.text == "[gosub mysub]"
    assert found.id == "@GS00a1@"
    assert found.number == 0xA1


def test_extract_gosub_id_absent():
    assert extract_gosub_id("[gosub mysub]") is None


@pytest.mark.parametrize("number", [0, 1, 0x12, 0x16, 0xFFFF, 0x12345])
def test_format_then_extract_round_trip(number):
    found = extract_text_id("Line " + format_text_id(number))
    assert found.number == number
    assert found.id == format_text_id(number)
    assert found.text == "Line"


def test_format_text_id_matches_script_form():
    assert format_text_id(0x12) == "@0012@"


def test_metadata_transient_with_key():
    meta = parse_comment_metadata("#= Mood: angry ")
    assert meta.persistent is False
    assert meta.key == "Mood"
    assert meta.value == "angry"


def test_metadata_persistent_default_key():
    meta = parse_comment_metadata("#+ Said quietly")
    assert meta.persistent is True
    assert meta.key == DEFAULT_METADATA_KEY == "Comment"
    assert meta.value == "Said quietly"


def test_metadata_empty_value_resets():
    meta = parse_comment_metadata("#= Mood:")
    assert meta.key == "Mood"
    assert meta.value == ""


def test_plain_comment_is_not_metadata():
    assert parse_comment_metadata("# just a note") is None
    assert parse_comment_metadata("not a comment") is None