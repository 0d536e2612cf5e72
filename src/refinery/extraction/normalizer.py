"""
Tree normalization and scoring.

Copies the parsed node forest into a DocumentTree, dropping noise,
cleaning text and folding inline formatting into plain text, then
annotates every element bottom-up with word statistics, a structural
pattern and a repetitiveness score.

Scoring rewards elements built from structurally unique children
(articles are mostly singleton paragraphs and headings) and penalizes
elements built from many identically shaped children (menus, comment
threads, ad grids).
"""

import re
from dataclasses import dataclass

from refinery.config.settings import ExtractorSettings
from refinery.core.exceptions import InvalidInputError
from refinery.dom.nodes import ElementNode, Node, TextNode
from refinery.dom.tree import DocumentInfo, DocumentTree, TreeNode
from refinery.utils.logging import get_logger

logger = get_logger(__name__)

ROOT_TAG = "html"

# Deleted together with their content
NOISE_TAGS = {
    "script",
    "style",
    "iframe",
    "frame",
    "object",
    "noscript",
    "option",
    "title",
}

# Kept as leaves; prefilled values and options are not content
FORM_TAGS = {"input", "textarea", "button", "select"}

# Replaced by a newline in the preceding text
LINE_BREAK_TAGS = {"br", "hr"}

# Unwrapped into their parent when they contain nothing but text
TEXT_TAGS = {
    "i",
    "b",
    "u",
    "em",
    "strong",
    "q",
    "sub",
    "sup",
    "abbr",
    "strike",
    "del",
    "ins",
}

MEDIA_TAGS = {"img", "embed", "video", "audio", "picture"}

# One symbol per tag name for structural patterns
PATTERN_LEGEND = {
    "a": "a",
    "article": "A",
    "aside": "S",
    "blockquote": "q",
    "button": "B",
    "cite": "j",
    "code": "K",
    "dd": "e",
    "div": "d",
    "dl": "L",
    "dt": "t",
    "figcaption": "C",
    "figure": "F",
    "footer": "f",
    "form": "m",
    "h1": "1",
    "h2": "2",
    "h3": "3",
    "h4": "4",
    "h5": "5",
    "h6": "6",
    "header": "H",
    "img": "i",
    "input": "n",
    "label": "k",
    "li": "l",
    "main": "M",
    "nav": "N",
    "ol": "o",
    "p": "p",
    "pre": "r",
    "section": "c",
    "select": "v",
    "small": "h",
    "span": "s",
    "table": "T",
    "tbody": "y",
    "td": "z",
    "textarea": "X",
    "th": "Z",
    "thead": "Y",
    "time": "g",
    "tr": "w",
    "ul": "u",
}
DEFAULT_SYMBOL = "x"

ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "nbsp": " ",
    "apos": "'",
}
ENTITY_RE = re.compile(r"&(amp|lt|gt|quot|nbsp|apos);?")
WHITESPACE_RE = re.compile(r"\s+")

# Separators in titles like "Page Title | Site Name"
TITLE_SEPARATORS_RE = re.compile(r"[|\-:/\s»]+")


def decode_entities(text: str) -> str:
    """
    Decode the handful of entities common in HTML text.

    Repeats until nothing changes so doubly escaped input ends up fully
    decoded and a second call is always a no-op.
    """
    while True:
        decoded = ENTITY_RE.sub(lambda m: ENTITIES[m.group(1)], text)
        if decoded == text:
            return decoded
        text = decoded


def clean_text(text: str) -> str:
    """Decode entities and collapse whitespace runs to a single space."""
    return WHITESPACE_RE.sub(" ", decode_entities(text))


def count_words(text: str) -> int:
    return len(text.split())


def count_title_words(title: str) -> int:
    """Count words of a title, ignoring separator punctuation."""
    return len([word for word in TITLE_SEPARATORS_RE.split(title) if word])


def strip_parens(pattern: str) -> str:
    return pattern.replace("(", "").replace(")", "")


def resolve_root(forest: "list[Node] | ElementNode") -> ElementNode:
    """
    Find the document's html element.

    Accepts either the top-level forest or a single element. A single
    element that is not the html element is treated as a wrapper and its
    children are searched instead.

    Raises:
        InvalidInputError: If no html element with children is found
    """
    if isinstance(forest, ElementNode):
        candidates = [forest] if forest.name.lower() == ROOT_TAG else forest.children
    elif isinstance(forest, (list, tuple)):
        candidates = forest
    else:
        raise InvalidInputError(
            "Invalid node forest",
            details={"type": type(forest).__name__},
        )

    for node in candidates:
        if isinstance(node, ElementNode) and node.name.lower() == ROOT_TAG:
            if not node.children:
                raise InvalidInputError(
                    "Document root has no children", root_name=node.name)
            return node

    raise InvalidInputError("Can't find the document's html element")


def find_declared_title(root: ElementNode) -> str:
    """Text of the first title element, cleaned and lower-cased."""
    stack: list[Node] = [root]
    while stack:
        node = stack.pop()
        if not isinstance(node, ElementNode):
            continue
        if node.name.lower() == "title":
            text = "".join(
                child.data for child in node.children if isinstance(child, TextNode)
            )
            return clean_text(text).strip().lower()
        stack.extend(reversed(node.children))
    return ""


@dataclass
class NormalizedDocument:
    """Output of the normalizer: the arena, its root and the document context."""

    tree: DocumentTree
    root_id: int
    info: DocumentInfo


class TreeNormalizer:
    """
    Cleans a parsed node forest and computes per-element metrics.

    Example:
        >>> normalizer = TreeNormalizer()
        >>> doc = normalizer.normalize(parse_html(html))
        >>> doc.tree.annotation(doc.root_id).words
        412
    """

    def __init__(self, settings: ExtractorSettings | None = None) -> None:
        self.settings = settings or ExtractorSettings()

    def normalize(self, forest: "list[Node] | ElementNode") -> NormalizedDocument:
        """
        Normalize and annotate a document.

        Args:
            forest: Top-level nodes from the parser, or a single element

        Returns:
            NormalizedDocument with the annotated tree

        Raises:
            InvalidInputError: If the document has no usable root
        """
        root = resolve_root(forest)

        info = DocumentInfo()
        info.title = find_declared_title(root)
        info.title_words = count_title_words(info.title)

        tree = DocumentTree()
        root_id, order = self._copy(tree, root)

        # Pre-order reversed visits every child before its parent
        for element_id in reversed(order):
            self._finish(tree, element_id)

        self._collect_stats(tree, root_id, info)

        logger.debug(
            f"Normalized document: {info.words} words, {info.tag_count} tags, "
            f"height {info.height}, title words {info.title_words}"
        )
        return NormalizedDocument(tree=tree, root_id=root_id, info=info)

    def _copy(self, tree: DocumentTree, root: ElementNode) -> tuple[int, list[int]]:
        """
        Copy the raw tree into the arena, dropping noise and empty text.

        A dropped whitespace-only node still separates words: one space
        is folded into the text preceding it in document order.

        Returns the root id and element ids in document order.
        """
        root_id = tree.add_element(root.name.lower(), root.attributes)
        order = [root_id]
        truncated = 0
        last_text: TreeNode | None = None

        stack: list[tuple[Node, int, int]] = [
            (child, root_id, 1) for child in reversed(root.children)
        ]
        while stack:
            raw, parent_id, depth = stack.pop()
            parent = tree.node(parent_id)

            if isinstance(raw, TextNode):
                data = clean_text(raw.data)
                if not data.strip():
                    if data and last_text is not None and not last_text.data[-1:].isspace():
                        last_text.data += " "
                    continue
                text_id = tree.add_text(data, parent=parent_id)
                last_text = tree.node(text_id)
                last_text.words = count_words(data)
                parent.children.append(text_id)
                continue

            if not isinstance(raw, ElementNode):
                continue  # comments, directives

            name = raw.name.lower()
            if name in NOISE_TAGS:
                continue
            if depth > self.settings.max_depth:
                truncated += 1
                continue

            element_id = tree.add_element(name, raw.attributes, parent=parent_id)
            parent.children.append(element_id)
            order.append(element_id)
            if name in FORM_TAGS:
                continue
            stack.extend((child, element_id, depth + 1) for child in reversed(raw.children))

        if truncated:
            logger.warning(
                f"Dropped {truncated} elements nested deeper than {self.settings.max_depth}"
            )
        return root_id, order

    def _finish(self, tree: DocumentTree, element_id: int) -> None:
        """Rewrite an element's child list, then compute its annotation."""
        node = tree.node(element_id)
        kept: list[int] = []

        for child_id in node.children:
            child = tree.node(child_id)

            if child.is_text:
                self._append_text(tree, element_id, kept, child_id)
                continue

            if child.name in LINE_BREAK_TAGS:
                child.parent = None
                last = tree.node(kept[-1]) if kept else None
                if last is not None and last.is_text:
                    last.data += "\n"
                else:
                    kept.append(tree.add_text("\n", parent=element_id))
                continue

            if child.name in TEXT_TAGS and tree.annotation(child_id).height == 0:
                child.parent = None
                for grandchild_id in child.children:
                    self._append_text(tree, element_id, kept, grandchild_id)
                continue

            kept.append(child_id)

        node.children = kept
        self._annotate(tree, element_id)

    def _append_text(
        self, tree: DocumentTree, parent_id: int, kept: list[int], text_id: int
    ) -> None:
        """Append a text node, merging it into a preceding text sibling."""
        text = tree.node(text_id)
        last = tree.node(kept[-1]) if kept else None
        if last is not None and last.is_text:
            last.data += text.data
            last.words = count_words(last.data)
            text.parent = None
        else:
            text.parent = parent_id
            kept.append(text_id)

    def _annotate(self, tree: DocumentTree, element_id: int) -> None:
        node = tree.node(element_id)
        ann = tree.annotation(element_id)

        words = anchor_words = anchors = longest = height = tags = 0
        for child in tree.children_of(element_id):
            if child.is_text:
                words += child.words
                longest = max(longest, child.words)
                continue
            sub = tree.annotation(child.id)
            words += sub.words
            anchor_words += sub.anchor_words
            anchors += sub.anchors + (1 if child.name == "a" else 0)
            longest = max(longest, sub.longest_run)
            height = max(height, sub.height + 1)
            tags += sub.tag_count + 1

        ann.words = words
        ann.anchor_words = words if node.name == "a" else anchor_words
        ann.anchors = anchors
        ann.longest_run = longest
        ann.height = height
        ann.tag_count = tags

        if height <= self.settings.pattern_max_height:
            symbol = PATTERN_LEGEND.get(node.name, DEFAULT_SYMBOL)
            inner = "".join(
                tree.annotation(child.id).pattern
                for child in tree.element_children(element_id)
            )
            ann.pattern = f"{symbol}({inner})"
        else:
            ann.pattern = ""

        ann.score = self._score(tree, element_id)

    def _score(self, tree: DocumentTree, element_id: int) -> float:
        """
        Repetitiveness of an element's direct children.

        Children sharing a pattern are grouped; a group of two or more
        contributes the sum of its members' scores times the length of
        the pattern's symbols. Everything else contributes its own
        score. The result is the mean over singles and groups.
        """
        groups: dict[str, list[float]] = {}
        total = 0.0
        singles = 0

        for child in tree.element_children(element_id):
            sub = tree.annotation(child.id)
            if sub.pattern:
                groups.setdefault(sub.pattern, []).append(sub.score)
            else:
                total += sub.score
                singles += 1
            if child.name == "a":
                total += self.settings.anchor_bonus

        group_count = 0
        for pattern, scores in groups.items():
            if len(scores) >= 2:
                total += sum(scores) * len(strip_parens(pattern))
                group_count += 1
            else:
                total += scores[0]
                singles += 1

        divisor = singles + group_count
        if divisor == 0:
            return 1.0
        score = total / divisor
        return score if score > 0 else 1.0

    def _collect_stats(self, tree: DocumentTree, root_id: int, info: DocumentInfo) -> None:
        root = tree.annotation(root_id)
        info.words = root.words
        info.tag_count = root.tag_count
        info.anchors = root.anchors
        info.anchor_words = root.anchor_words
        info.longest_run = root.longest_run
        info.height = root.height

        for node in tree.iter_subtree(root_id):
            if not node.is_element:
                continue
            if node.name in MEDIA_TAGS:
                info.media += 1
            elif node.name == "a":
                href = node.attributes.get("href", "")
                if href and not href.startswith("#") and "javascript" not in href.lower():
                    info.links.append({
                        "text": tree.text_of(node.id).strip(),
                        "href": href,
                        "title": node.attributes.get("title", ""),
                    })
