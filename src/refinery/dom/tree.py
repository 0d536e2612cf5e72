"""
Annotated document arena.

The normalized document lives in a flat arena of TreeNode records
addressed by integer ids. Children are ordered id lists owned by the
parent; the parent link is a plain id used for upward walks only.

Derived metrics are kept apart from the node shape in one Annotation
record per element, so each pipeline stage can be exercised on its own.
"""

from dataclasses import dataclass, field
from typing import Iterator, Literal

TEXT = "text"
ELEMENT = "element"


@dataclass
class TreeNode:
    """One node of the normalized document."""

    id: int
    kind: Literal["text", "element"]
    name: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    data: str = ""
    words: int = 0  # text nodes only; elements keep theirs in the annotation
    children: list[int] = field(default_factory=list)
    parent: int | None = None

    @property
    def is_text(self) -> bool:
        return self.kind == TEXT

    @property
    def is_element(self) -> bool:
        return self.kind == ELEMENT


@dataclass
class Annotation:
    """
    Metrics computed for an element.

    Populated bottom-up by the normalizer. ``contains_title`` and
    ``title`` are set by the title locator, ``excluded`` by the pruner.
    """

    words: int = 0
    anchor_words: int = 0
    anchors: int = 0
    longest_run: int = 0
    height: int = 0
    tag_count: int = 0
    pattern: str = ""
    score: float = 1.0
    title: bool = False
    contains_title: bool = False
    excluded: bool = False


@dataclass
class DocumentInfo:
    """
    Document-level context threaded through the pipeline stages.

    Holds the declared title and the heading the title locator found,
    plus overall statistics of the normalized document.
    """

    title: str = ""
    title_words: int = 0
    heading_id: int | None = None
    words: int = 0
    tag_count: int = 0
    anchors: int = 0
    anchor_words: int = 0
    longest_run: int = 0
    height: int = 0
    media: int = 0
    links: list[dict[str, str]] = field(default_factory=list)

    @property
    def has_title(self) -> bool:
        return self.heading_id is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "title": self.title,
            "title_words": self.title_words,
            "heading_id": self.heading_id,
            "words": self.words,
            "tag_count": self.tag_count,
            "anchors": self.anchors,
            "anchor_words": self.anchor_words,
            "longest_run": self.longest_run,
            "height": self.height,
            "media": self.media,
            "links": list(self.links),
        }


class DocumentTree:
    """
    Arena of TreeNodes with per-element annotations.

    Nodes removed during normalization stay in the arena but are
    detached; everything reachable from the root is the live document.
    """

    def __init__(self) -> None:
        self._nodes: list[TreeNode] = []
        self._annotations: dict[int, Annotation] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def add_text(self, data: str, parent: int | None = None) -> int:
        node = TreeNode(id=len(self._nodes), kind=TEXT, data=data, parent=parent)
        self._nodes.append(node)
        return node.id

    def add_element(
        self,
        name: str,
        attributes: dict[str, str] | None = None,
        parent: int | None = None,
    ) -> int:
        node = TreeNode(
            id=len(self._nodes),
            kind=ELEMENT,
            name=name,
            attributes=dict(attributes or {}),
            parent=parent,
        )
        self._nodes.append(node)
        self._annotations[node.id] = Annotation()
        return node.id

    def node(self, node_id: int) -> TreeNode:
        return self._nodes[node_id]

    def annotation(self, node_id: int) -> Annotation:
        """Annotation of an element. Raises KeyError for text nodes."""
        return self._annotations[node_id]

    def children_of(self, node_id: int) -> list[TreeNode]:
        return [self._nodes[child] for child in self._nodes[node_id].children]

    def element_children(self, node_id: int) -> list[TreeNode]:
        return [child for child in self.children_of(node_id) if child.is_element]

    def parent_of(self, node_id: int) -> TreeNode | None:
        parent = self._nodes[node_id].parent
        return None if parent is None else self._nodes[parent]

    def ancestors(self, node_id: int) -> Iterator[TreeNode]:
        """Yield ancestors from the parent up to the root."""
        parent = self._nodes[node_id].parent
        while parent is not None:
            node = self._nodes[parent]
            yield node
            parent = node.parent

    def iter_subtree(self, node_id: int) -> Iterator[TreeNode]:
        """Pre-order walk of a subtree using an explicit stack."""
        stack = [node_id]
        while stack:
            node = self._nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def text_of(self, node_id: int) -> str:
        """Concatenated text data of a subtree, ignoring exclusion."""
        return "".join(
            node.data for node in self.iter_subtree(node_id) if node.is_text
        )
