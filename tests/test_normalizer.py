"""
Tests for tree normalization.

Tests text cleanup, noise removal, inline unwrapping, metrics,
patterns and repetitiveness scoring.
"""

import pytest

from refinery.config import ExtractorSettings
from refinery.core.exceptions import InvalidInputError
from refinery.dom import CommentNode, DirectiveNode, ElementNode, TextNode, element, parse_html
from refinery.extraction import TreeNormalizer, clean_text, resolve_root
from refinery.extraction.normalizer import count_title_words, decode_entities


def words(n: int, stem: str = "word") -> str:
    return " ".join(f"{stem}{i}" for i in range(n))


def page(*body_children, title: str | None = None) -> ElementNode:
    head = element("head", element("title", title)) if title else element("head")
    return element("html", head, element("body", *body_children))


def find(doc, name: str):
    """First element with the given name, in document order."""
    for node in doc.tree.iter_subtree(doc.root_id):
        if node.is_element and node.name == name:
            return node
    raise AssertionError(f"no <{name}> in tree")


class TestCleanText:
    """Tests for entity decoding and whitespace collapsing."""

    def test_decodes_common_entities(self):
        """The five common entities and &apos; should be decoded."""
        assert clean_text("a &amp; b") == "a & b"
        assert clean_text("&lt;p&gt;") == "<p>"
        assert clean_text("&quot;quoted&quot;") == '"quoted"'
        assert clean_text("it&apos;s") == "it's"
        assert clean_text("a&nbsp;b") == "a b"

    def test_collapses_whitespace(self):
        """Whitespace runs become a single space."""
        assert clean_text("one  \n\t two") == "one two"

    def test_keeps_boundary_space(self):
        """A single boundary space survives so inline siblings don't fuse."""
        assert clean_text("  Hello  ") == " Hello "

    @pytest.mark.parametrize("raw", [
        "plain text",
        "a &amp;amp; b",
        "  spaced   out \n text ",
        "&lt;b&gt; &nbsp;&nbsp; tag",
    ])
    def test_idempotent(self, raw: str):
        """Cleaning already clean text is a no-op."""
        once = clean_text(raw)
        assert clean_text(once) == once

    def test_double_escaped_fully_decoded(self):
        """Doubly escaped entities are decoded all the way."""
        assert decode_entities("&amp;lt;") == "<"


class TestResolveRoot:
    """Tests for locating the document root."""

    def test_forest_with_html(self):
        """The html element is found among top-level nodes."""
        html = element("html", element("body", "text"))
        forest = [DirectiveNode("doctype html"), TextNode("\n"), html]

        assert resolve_root(forest) is html

    def test_single_html_element(self):
        """A single html element is its own root."""
        html = element("html", element("body", "text"))
        assert resolve_root(html) is html

    def test_wrapper_element(self):
        """A non-html wrapper is searched for an html child."""
        html = element("html", element("body", "text"))
        wrapper = element("document", html)
        assert resolve_root(wrapper) is html

    def test_missing_html_raises(self):
        """A forest without an html element is invalid."""
        with pytest.raises(InvalidInputError):
            resolve_root([element("body", element("p", "text"))])

    def test_empty_html_raises(self):
        """An html element without children is invalid."""
        with pytest.raises(InvalidInputError) as exc_info:
            resolve_root([element("html")])
        assert exc_info.value.root_name == "html"

    def test_wrong_type_raises(self):
        """Anything but nodes is invalid."""
        with pytest.raises(InvalidInputError):
            resolve_root("<html></html>")


class TestNoiseRemoval:
    """Tests for deleting non-content nodes."""

    def test_noise_elements_removed(self):
        """Scripts, styles, frames and comments never reach the tree."""
        doc = TreeNormalizer().normalize(page(
            element("script", "var x = 1;"),
            element("style", "p { color: red }"),
            element("iframe", "frame text"),
            element("noscript", "enable js"),
            CommentNode("a comment"),
            element("p", "Visible content"),
        ))

        body = find(doc, "body")
        names = [child.name for child in doc.tree.children_of(body.id)]
        assert names == ["p"]
        assert doc.tree.text_of(doc.root_id).strip() == "Visible content"

    def test_whitespace_text_removed(self):
        """Text that is empty after cleanup is deleted."""
        doc = TreeNormalizer().normalize(page("   \n  ", element("p", "x")))
        body = find(doc, "body")
        assert [c.kind for c in doc.tree.children_of(body.id)] == ["element"]

    def test_whitespace_between_elements_folded(self):
        """Dropped whitespace leaves one space on the preceding text."""
        doc = TreeNormalizer().normalize(parse_html(
            "<html><body><p><span>one</span> <span>two</span></p></body></html>"))

        p = find(doc, "p")
        assert [c.kind for c in doc.tree.children_of(p.id)] == ["element", "element"]
        assert doc.tree.text_of(p.id) == "one two"

    def test_whitespace_fold_not_doubled(self):
        """Text already ending in a space gets no second one."""
        doc = TreeNormalizer().normalize(page(
            element("div", element("p", "ends "), "  ", element("p", "next"))))

        assert doc.tree.text_of(find(doc, "div").id) == "ends next"

    def test_form_controls_are_leaves(self):
        """Form controls are kept without their contents."""
        doc = TreeNormalizer().normalize(page(
            element("form",
                    element("textarea", "prefilled comment text"),
                    element("select", element("optgroup", "Group label")),
                    element("button", "Submit now"),
                    element("input", type="text"))))

        form = find(doc, "form")
        controls = doc.tree.children_of(form.id)
        assert [c.name for c in controls] == ["textarea", "select", "button", "input"]
        assert all(c.children == [] for c in controls)
        assert doc.tree.annotation(form.id).words == 0
        assert doc.tree.annotation(form.id).pattern == "m(X()v()B()n())"

    def test_title_element_dropped(self):
        """The declared title is captured, not kept as content."""
        doc = TreeNormalizer().normalize(page(element("p", "Body"), title="The Title"))

        assert doc.info.title == "the title"
        assert "The Title" not in doc.tree.text_of(doc.root_id)


class TestLineBreaks:
    """Tests for br and hr handling."""

    def test_br_appends_newline(self):
        """A br adds a newline to the preceding text."""
        doc = TreeNormalizer().normalize(parse_html(
            "<html><body><p>line one<br>line two</p></body></html>"))

        p = find(doc, "p")
        children = doc.tree.children_of(p.id)
        assert len(children) == 1
        assert children[0].data == "line one\nline two"
        assert doc.tree.annotation(p.id).words == 4

    def test_br_without_preceding_text(self):
        """A leading br creates a newline text node."""
        doc = TreeNormalizer().normalize(page(element("p", element("br"), "after")))

        p = find(doc, "p")
        assert [c.data for c in doc.tree.children_of(p.id)] == ["\nafter"]

    def test_hr_after_element(self):
        """An hr following an element becomes its own newline node."""
        doc = TreeNormalizer().normalize(page(
            element("div", element("p", "one"), element("hr"), element("p", "two"))))

        div = find(doc, "div")
        kinds = [(c.kind, c.name or c.data) for c in doc.tree.children_of(div.id)]
        assert kinds == [("element", "p"), ("text", "\n"), ("element", "p")]


class TestInlineUnwrapping:
    """Tests for folding text-only formatting tags into text."""

    def test_bold_unwrapped_and_merged(self):
        """Text-only inline tags are replaced by their text."""
        doc = TreeNormalizer().normalize(parse_html(
            "<html><body><p>Hello <b>bold</b> world</p></body></html>"))

        p = find(doc, "p")
        children = doc.tree.children_of(p.id)
        assert [c.data for c in children] == ["Hello bold world"]
        assert children[0].words == 3
        assert doc.tree.annotation(p.id).height == 0

    def test_nested_inline_unwrapped(self):
        """Inline tags nested in inline tags collapse bottom-up."""
        doc = TreeNormalizer().normalize(page(
            element("p", "a ", element("em", element("strong", "deep")), " z")))

        p = find(doc, "p")
        assert [c.data for c in doc.tree.children_of(p.id)] == ["a deep z"]

    def test_inline_with_tags_kept(self):
        """Inline tags containing elements are not unwrapped."""
        doc = TreeNormalizer().normalize(page(
            element("p", element("b", element("a", "link", href="/x")))))

        b = find(doc, "b")
        assert doc.tree.annotation(b.id).height == 1

    def test_empty_inline_removed(self):
        """Empty inline tags disappear."""
        doc = TreeNormalizer().normalize(page(element("p", "x", element("i"))))
        p = find(doc, "p")
        assert len(doc.tree.children_of(p.id)) == 1


class TestMetrics:
    """Tests for per-element word and structure metrics."""

    def test_word_and_run_invariants(self, sample_html: str):
        """Words are additive and longest run is a max over children."""
        doc = TreeNormalizer().normalize(parse_html(sample_html))
        tree = doc.tree

        for node in tree.iter_subtree(doc.root_id):
            if not node.is_element:
                continue
            ann = tree.annotation(node.id)
            children = tree.children_of(node.id)

            child_words = [
                c.words if c.is_text else tree.annotation(c.id).words for c in children
            ]
            child_runs = [
                c.words if c.is_text else tree.annotation(c.id).longest_run
                for c in children
            ]
            assert ann.words == sum(child_words)
            assert ann.longest_run == max(child_runs, default=0)

    def test_height_and_tag_count(self):
        """Height is the longest tag chain and tag count counts descendants."""
        doc = TreeNormalizer().normalize(page(
            element("div", element("ul", element("li", "a"), element("li", "b")), element("p", "c"))))

        div = doc.tree.annotation(find(doc, "div").id)
        assert div.height == 2
        assert div.tag_count == 4
        assert doc.tree.annotation(find(doc, "p").id).height == 0

    def test_anchor_words(self):
        """Anchor words propagate upward additively."""
        doc = TreeNormalizer().normalize(page(
            element("div",
                    element("p", "Some text ", element("a", "two words", href="/a")),
                    element("p", element("a", "three more words", href="/b")))))

        div = doc.tree.annotation(find(doc, "div").id)
        assert div.anchor_words == 5
        assert div.anchors == 2
        assert div.words == 7

    def test_document_stats(self, sample_html: str):
        """Document-level statistics are collected."""
        doc = TreeNormalizer().normalize(parse_html(
            sample_html.replace("<footer>", "<footer><img src=\"/logo.png\">")))

        hrefs = [link["href"] for link in doc.info.links]
        assert hrefs == ["/", "/world", "/contact", "/privacy", "/terms"]
        assert doc.info.links[1]["text"] == "World News"
        assert doc.info.media == 1
        assert doc.info.words == doc.tree.annotation(doc.root_id).words

    def test_fragment_and_script_links_skipped(self):
        """In-page and javascript links are not collected."""
        doc = TreeNormalizer().normalize(page(
            element("a", "top", href="#top"),
            element("a", "run", href="javascript:void(0)"),
            element("a", "real", href="/real"),
        ))
        assert [link["href"] for link in doc.info.links] == ["/real"]

    def test_depth_cap(self):
        """Nesting beyond the depth cap is dropped with a warning."""
        node = element("p", "deep text")
        for _ in range(20):
            node = element("div", node)
        settings = ExtractorSettings(max_depth=8)

        doc = TreeNormalizer(settings).normalize(page(node))

        assert "deep text" not in doc.tree.text_of(doc.root_id)
        assert doc.tree.annotation(doc.root_id).height <= 8


class TestPatterns:
    """Tests for structural pattern signatures."""

    def test_pattern_shape(self):
        """Patterns nest children inside the tag symbol."""
        doc = TreeNormalizer().normalize(page(
            element("ul", element("li", element("a", "x", href="/")), element("li", "y"))))

        ul = doc.tree.annotation(find(doc, "ul").id)
        assert ul.pattern == "u(l(a())l())"

    def test_unknown_tag_symbol(self):
        """Unlisted tags use the wildcard symbol."""
        doc = TreeNormalizer().normalize(page(element("marquee", "hi")))
        assert doc.tree.annotation(find(doc, "marquee").id).pattern == "x()"

    def test_tall_nodes_have_no_pattern(self):
        """Nodes above the height bound get an empty pattern."""
        settings = ExtractorSettings(pattern_max_height=1)
        doc = TreeNormalizer(settings).normalize(page(
            element("section", element("div", element("p", "text")))))

        assert doc.tree.annotation(find(doc, "div").id).pattern == "d(p())"
        assert doc.tree.annotation(find(doc, "section").id).pattern == ""


class TestScoring:
    """Tests for the repetitiveness score."""

    def test_text_only_element_scores_one(self):
        """Elements without element children get the default score."""
        doc = TreeNormalizer().normalize(page(element("p", "text")))
        assert doc.tree.annotation(find(doc, "p").id).score == 1.0

    def test_unique_children_average(self):
        """Unique children contribute their own scores."""
        doc = TreeNormalizer().normalize(page(
            element("div", element("h2", "Title"), element("p", "text"))))
        assert doc.tree.annotation(find(doc, "div").id).score == 1.0

    def test_group_multiplied_by_pattern_length(self):
        """Repeated children cost their summed scores times pattern length."""
        doc = TreeNormalizer().normalize(page(
            element("section", *[element("div", element("p", "text")) for _ in range(3)])))

        # one group: (1 + 1 + 1) * len("dp")
        assert doc.tree.annotation(find(doc, "section").id).score == 6.0

    def test_anchor_bonus(self):
        """Anchor children add a fixed bonus."""
        doc = TreeNormalizer().normalize(page(
            element("li", element("a", "link", href="/"))))
        assert doc.tree.annotation(find(doc, "li").id).score == 2.0

        settings = ExtractorSettings(anchor_bonus=0.0)
        doc = TreeNormalizer(settings).normalize(page(
            element("li", element("a", "link", href="/"))))
        assert doc.tree.annotation(find(doc, "li").id).score == 1.0

    def test_identical_list_penalized(self):
        """A list of identical items ranks below a paragraph of equal words."""
        items = [element("li", words(4, f"item{i}x")) for i in range(5)]
        doc = TreeNormalizer().normalize(page(
            element("ul", *items),
            element("div", element("p", words(20, "prose")))))

        ul = doc.tree.annotation(find(doc, "ul").id)
        div = doc.tree.annotation(find(doc, "div").id)
        assert ul.words == div.words == 20
        assert ul.score > div.score
        assert ul.words ** 2 / ul.score < div.words ** 2 / div.score

    def test_grouping_raises_score(self):
        """Identical siblings score higher than the same number of unique ones."""
        same = TreeNormalizer().normalize(page(
            element("div", *[element("p", "x") for _ in range(4)])))
        unique = TreeNormalizer().normalize(page(
            element("div", element("p", "x"), element("h2", "x"),
                    element("h3", "x"), element("blockquote", "x"))))

        same_score = same.tree.annotation(find(same, "div").id).score
        unique_score = unique.tree.annotation(find(unique, "div").id).score
        assert same_score > unique_score

    def test_comment_thread_scores_higher(self, comments_html: str):
        """A thread of identical comment blocks is penalized."""
        doc = TreeNormalizer().normalize(parse_html(comments_html))
        tree = doc.tree

        divs = {
            node.attributes.get("class"): tree.annotation(node.id)
            for node in tree.iter_subtree(doc.root_id)
            if node.is_element and node.name == "div"
        }
        assert divs["comments"].score == 10.0
        assert divs["article"].score == 1.0

    def test_score_never_below_floor(self, sample_html: str):
        """Every element has a positive score."""
        doc = TreeNormalizer().normalize(parse_html(sample_html))
        for node in doc.tree.iter_subtree(doc.root_id):
            if node.is_element:
                assert doc.tree.annotation(node.id).score >= 1.0


class TestTitleCapture:
    """Tests for reading the declared title."""

    def test_title_words_ignore_separators(self):
        """Separator punctuation doesn't count as words."""
        assert count_title_words("page title | site name") == 4
        assert count_title_words("news - world: today") == 3

    def test_title_captured(self, sample_html: str):
        """The head title is captured lower-cased."""
        doc = TreeNormalizer().normalize(parse_html(sample_html))
        assert doc.info.title == "my great article"
        assert doc.info.title_words == 3

    def test_no_title(self):
        """Documents without a title have zero title words."""
        doc = TreeNormalizer().normalize(page(element("p", "text")))
        assert doc.info.title == ""
        assert doc.info.title_words == 0
