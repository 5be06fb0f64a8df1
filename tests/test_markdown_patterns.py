import pytest

from mdbrowse.core.patterns import (
    DEFAULT_ICON_SIZE,
    Matcher,
    find_match,
    parse_icon_url,
    unescape_markdown,
)


def test_emphasis_start_needs_visible_text_after_stars():
    assert find_match(Matcher.EMPHASIS_START, "* item", 0) is None
    match = find_match(Matcher.EMPHASIS_START, "a **b**", 0)
    assert match.start() == 2
    assert match.group(1) == "**"


def test_escaped_star_is_not_emphasis():
    assert find_match(Matcher.EMPHASIS_START, r"\*x", 0) is None


def test_header_must_start_line():
    content = "text # not\n## Real"
    match = find_match(Matcher.HEADER_START, content, 0)
    assert match.group(1) == "##"
    assert match.start() == content.index("##")


def test_search_from_offset_keeps_line_anchors():
    content = "* one\n  * two"
    match = find_match(Matcher.BULLET_ITEM_START, content, 3)
    assert match.start() == 6
    assert match.group(1) == "  "


def test_link_does_not_match_image():
    content = "![alt](pic.png) [text](topic)"
    image = find_match(Matcher.IMAGE, content, 0)
    link = find_match(Matcher.LINK, content, 0)
    assert image.groups() == ("alt", "pic.png")
    assert link.groups() == ("text", "topic")


def test_line_end_is_zero_width():
    match = find_match(Matcher.HEADER_OR_LIST_ITEM_END, "abc\r\ndef", 0)
    assert match.start() == match.end() == 3


@pytest.mark.parametrize("char", list("[]\\`*_{}<>()#+-.!|"))
def test_unescape_each_reserved_char(char):
    assert unescape_markdown("a\\" + char + "b") == "a" + char + "b"


def test_unescape_markdown():
    assert unescape_markdown(r"\*a\* \[b\] \\ c") == r"*a* [b] \ c"
    assert unescape_markdown(r"no \q change") == r"no \q change"


def test_parse_icon_url():
    assert parse_icon_url("icon:help-about") == ("help-about", DEFAULT_ICON_SIZE)
    assert parse_icon_url("icon:32:go-home") == ("go-home", 32)
    assert parse_icon_url("icon:big:go-home") == ("go-home", DEFAULT_ICON_SIZE)
    assert parse_icon_url("icon:0:go-home", default_size=16) == ("go-home", 16)
    assert parse_icon_url("images/pic.png") is None


def test_line_start_after_bare_carriage_return():
    match = find_match(Matcher.HEADER_START, "intro\r## Head", 0)
    assert match.start() == 6
    assert find_match(Matcher.NUMERIC_ITEM_START, "x\r3. y", 0).start() == 2
    assert find_match(Matcher.BULLET_ITEM_START, "x * y", 0) is None
