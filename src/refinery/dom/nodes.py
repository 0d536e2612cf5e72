"""
Parser-facing node shapes.

These are the nodes a markup parser hands to the extractor. They are
immutable; the pipeline copies what it keeps into a DocumentTree and
never writes back.
"""

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class TextNode:
    """A run of character data."""

    data: str


@dataclass(frozen=True)
class ElementNode:
    """A tag with attributes and ordered children."""

    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)


@dataclass(frozen=True)
class CommentNode:
    """An HTML comment. Always discarded."""

    data: str = ""


@dataclass(frozen=True)
class DirectiveNode:
    """Doctype, processing instruction or CDATA section. Always discarded."""

    data: str = ""


Node = Union[TextNode, ElementNode, CommentNode, DirectiveNode]


def element(name: str, *children: "Node | str", **attributes: str) -> ElementNode:
    """
    Build an ElementNode, wrapping plain strings as TextNodes.

    Handy for tests and for callers assembling trees by hand.

    Example:
        >>> element("p", "Hello ", element("a", "world", href="/w"))
    """
    kids: list[Node] = [
        TextNode(child) if isinstance(child, str) else child
        for child in children
    ]
    return ElementNode(name=name, attributes=dict(attributes), children=kids)
