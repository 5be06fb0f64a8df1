from mdbrowse.core.render_sink import AltLinkMap, MarkdownRenderer, RecordingSink
from mdbrowse.core.scanner import ImageResolver


class NamedIconResolver(ImageResolver):
    def load_icon(self, name, size):
        return f"{name}@{size}"


def test_render_replays_tokens_into_sink():
    sink = RecordingSink()
    renderer = MarkdownRenderer(sink)
    count = renderer.render("Hi *there* [docs](index)")
    assert count == 4
    assert sink.events == [
        ("text", "Hi ", frozenset()),
        ("text", "there", frozenset({"italic"})),
        ("text", " ", frozenset()),
        ("link", 1, "docs", frozenset({"link"})),
    ]
    assert renderer.alt_links.link_url(1) == "index"
    assert sink.plain_text() == "Hi there docs"
    assert sink.text_runs()[1] == ("there", frozenset({"italic"}))


def test_alt_text_registered_only_when_present():
    sink = RecordingSink()
    renderer = MarkdownRenderer(sink, NamedIconResolver())
    renderer.render("![logo](icon:32:home) ![ ](icon:x)")
    assert ("image", 1, "home@32") in sink.events
    assert renderer.alt_links.alt_text(1) == "logo"
    assert renderer.alt_links.alt_text(2) == " "
    assert 1 in renderer.alt_links


def test_render_starts_fresh():
    sink = RecordingSink()
    renderer = MarkdownRenderer(sink)
    renderer.render("[a](x)")
    assert renderer.render("") == 0
    assert sink.events == []
    assert len(renderer.alt_links) == 0


def test_alt_link_map():
    links = AltLinkMap()
    links.register_alt(1, "picture")
    links.register_link(2, "topic")
    assert links.alt_text(1) == "picture"
    assert links.link_url(2) == "topic"
    assert links.link_url(3) is None
    assert links.alt_text(2) is None
    assert len(links) == 2
    links.clear()
    assert 1 not in links
