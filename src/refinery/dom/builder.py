"""
BeautifulSoup adapter.

Turns parsed markup into the node forest the extractor consumes. The
extractor itself never parses HTML; this module is the seam where a
parser plugs in.
"""

from bs4 import (
    BeautifulSoup,
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from refinery.dom.nodes import (
    CommentNode,
    DirectiveNode,
    ElementNode,
    Node,
    TextNode,
)
from refinery.utils.logging import get_logger

logger = get_logger(__name__)

DIRECTIVE_TYPES = (Doctype, Declaration, ProcessingInstruction, CData)


def parse_html(html: str) -> list[Node]:
    """
    Parse an HTML string into a node forest.

    Args:
        html: Markup to parse

    Returns:
        Top-level nodes of the document, in order
    """
    soup = BeautifulSoup(html, "html.parser")
    return from_soup(soup)


def from_soup(soup: BeautifulSoup | Tag) -> list[Node]:
    """
    Convert the contents of a soup (or any tag) into nodes.

    Uses an explicit stack so deeply nested markup cannot exhaust the
    interpreter stack.
    """
    forest: list[Node] = []
    stack: list[tuple[Tag, list[Node]]] = [(soup, forest)]

    while stack:
        tag, out = stack.pop()
        for child in tag.children:
            if isinstance(child, Tag):
                node = ElementNode(
                    name=child.name.lower(),
                    attributes=_attributes(child),
                    children=[],
                )
                out.append(node)
                stack.append((child, node.children))
            elif isinstance(child, Comment):
                out.append(CommentNode(str(child)))
            elif isinstance(child, DIRECTIVE_TYPES):
                out.append(DirectiveNode(str(child)))
            elif isinstance(child, NavigableString):
                out.append(TextNode(str(child)))

    logger.debug(f"Converted soup into {len(forest)} top-level nodes")
    return forest


def _attributes(tag: Tag) -> dict[str, str]:
    """Flatten multi-valued attributes such as class into strings."""
    attributes = {}
    for key, value in tag.attrs.items():
        if isinstance(value, (list, tuple)):
            value = " ".join(value)
        attributes[key.lower()] = str(value)
    return attributes
