"""
Document model for Refinery.

Provides:
- Immutable parser-facing node shapes
- The annotated node arena the pipeline works on
- A BeautifulSoup adapter producing node forests
"""

from refinery.dom.nodes import (
    Node,
    TextNode,
    ElementNode,
    CommentNode,
    DirectiveNode,
    element,
)
from refinery.dom.tree import (
    DocumentTree,
    TreeNode,
    Annotation,
    DocumentInfo,
)
from refinery.dom.builder import parse_html, from_soup

__all__ = [
    # Input nodes
    "Node",
    "TextNode",
    "ElementNode",
    "CommentNode",
    "DirectiveNode",
    "element",
    # Arena
    "DocumentTree",
    "TreeNode",
    "Annotation",
    "DocumentInfo",
    # Parsing adapter
    "parse_html",
    "from_soup",
]
