from mdbrowse.core.scanner import ImageResolver, ImageRun, LinkRun, TextRun, tokenize


class FakeResolver(ImageResolver):
    def __init__(self):
        self.icon_requests = []

    def load_icon(self, name, size):
        self.icon_requests.append((name, size))
        return f"icon-{name}-{size}"


def runs(content, **options):
    return [(t.text, set(t.tags)) for t in tokenize(content, **options) if isinstance(t, TextRun)]


def plain(content, **options):
    parts = []
    for token in tokenize(content, **options):
        if isinstance(token, (TextRun, LinkRun)):
            parts.append(token.text)
    return "".join(parts)


def test_bold_and_italic_runs():
    assert runs("**bold** and *italic*") == [
        ("bold", {"bold"}),
        (" and ", set()),
        ("italic", {"italic"}),
    ]


def test_bold_italic_run():
    assert runs("***both*** plain") == [("both", {"bold", "italic"}), (" plain", set())]


def test_emphasis_closes_before_newline():
    assert runs("*a*\nb") == [("a", {"italic"}), ("\nb", set())]


def test_escaped_stars_are_literal():
    assert runs(r"\*not emphasis\*") == [("*not emphasis*", set())]


def test_plain_text_is_one_run():
    assert runs("nothing to see") == [("nothing to see", set())]


def test_empty_content_yields_nothing():
    assert list(tokenize("")) == []


def test_header_runs():
    assert runs("# Title\nBody") == [("Title", {"h1"}), ("\nBody", set())]
    assert runs("### *Sub*\n") == [("Sub", {"italic", "h3"}), ("\n", set())]


def test_nested_bullet_levels():
    content = "* one\n  * two\n    * three\n  * four\n* five\n"
    tokens = runs(content)
    items = [(text, tags) for text, tags in tokens if text.strip() and not text.endswith(" ")]
    assert items == [
        ("one", {"list1"}),
        ("two", {"list2"}),
        ("three", {"list3"}),
        ("four", {"list2"}),
        ("five", {"list1"}),
    ]
    bullets = [text for text, tags in tokens if text.endswith(" ")]
    assert bullets == ["● ", "○ ", "■ ", "○ ", "● "]


def test_custom_bullet_chars():
    tokens = runs("* a\n  * b\n", bullet_chars=["-"])
    assert [text for text, _ in tokens if text.endswith(" ")] == ["- ", "- "]


def test_numeric_counters():
    content = "1. a\n  1. b\n  7. c\n2. d\n"
    assert plain(content) == "1. a\n1. b\n2. c\n2. d\n"


def test_header_ends_list():
    content = "1. a\n# H\n1. b\n"
    assert plain(content) == "1. a\nH\n1. b\n"


def test_over_indented_first_item_is_text():
    assert runs("    * deep") == [("    * ", set()), ("deep", set())]


def test_link_run():
    tokens = list(tokenize("See [the guide](guide) now"))
    assert tokens[0] == TextRun("See ")
    assert tokens[1] == LinkRun(1, "the guide", "guide", frozenset({"link"}))
    assert tokens[2] == TextRun(" now")


def test_link_inside_bold():
    tokens = list(tokenize("**[x](y)**"))
    assert tokens == [LinkRun(1, "x", "y", frozenset({"bold", "link"}))]


def test_emphasis_inside_link_text_is_not_duplicated():
    tokens = list(tokenize("[a *b* c](t) end"))
    assert tokens == [LinkRun(1, "a *b* c", "t", frozenset({"link"})), TextRun(" end")]


def test_icon_image():
    resolver = FakeResolver()
    tokens = list(tokenize("![logo](icon:32:home)", resolver=resolver))
    assert resolver.icon_requests == [("home", 32)]
    assert tokens == [ImageRun(1, "icon-home-32", "logo")]


def test_icon_default_size():
    resolver = FakeResolver()
    list(tokenize("![x](icon:help)", resolver=resolver, icon_size=16))
    assert resolver.icon_requests == [("help", 16)]


def test_file_image_uses_images_path(tmp_path):
    (tmp_path / "shot.png").write_bytes(b"png")
    tokens = list(tokenize("![pic](somewhere/else/shot.png)", images_path=tmp_path))
    assert tokens == [ImageRun(1, tmp_path / "shot.png", "pic")]


def test_missing_image_is_skipped(tmp_path):
    tokens = list(tokenize("a ![pic](missing.png) b", images_path=tmp_path))
    assert tokens == [TextRun("a "), TextRun(" b")]


def test_handles_are_shared_and_increasing():
    resolver = FakeResolver()
    tokens = list(tokenize("[a](x) ![i](icon:y) [b](z)", resolver=resolver))
    handles = [t.handle for t in tokens if isinstance(t, (ImageRun, LinkRun))]
    assert handles == [1, 2, 3]


def test_tokenizing_twice_is_identical():
    content = "# T\n* **a** [l](x)\n  1. *b*\nplain \\*text\\*"
    assert list(tokenize(content)) == list(tokenize(content))


def test_no_overlap_or_loss_without_markup():
    content = "line one\nline two\r\nline three"
    assert plain(content) == content



def test_bare_carriage_return_starts_lines():
    assert runs("intro\r# Head\r* item\r") == [
        ("intro\r", set()),
        ("Head", {"h1"}),
        ("\r", set()),
        ("● ", set()),
        ("item", {"list1"}),
        ("\r", set()),
    ]
    assert runs("a\r\n2. b\r\n") == [("a\r\n", set()), ("1. ", set()), ("b", {"list1"}), ("\r\n", set())]
