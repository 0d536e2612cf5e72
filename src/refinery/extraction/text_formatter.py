"""
Plain-text rendering of an annotated subtree.
"""

import re

from refinery.dom.tree import DocumentTree
from refinery.utils.logging import get_logger

logger = get_logger(__name__)

# Rendered without surrounding line breaks
INLINE_TAGS = {
    "a",
    "i",
    "b",
    "u",
    "strong",
    "em",
    "q",
    "sub",
    "sup",
    "abbr",
    "span",
    "cite",
    "strike",
    "code",
    "del",
    "ins",
}

NEWLINE_RUN_RE = re.compile(r"\n{2,}")
SPACE_AROUND_NEWLINE_RE = re.compile(r"[ \t]*\n[ \t]*")
SPACE_RUN_RE = re.compile(r"[ \t]{2,}")

# Marks the end of an element on the render stack
_CLOSE = -1


class TextFormatter:
    """
    Renders the non-excluded text of a subtree.

    Block-level elements start and end on their own line; inline
    elements flow with the surrounding text.

    Example:
        >>> TextFormatter().format(tree, candidate_id)
        'My Great Article\\nFirst paragraph...\\nSecond paragraph...'
    """

    def format(self, tree: DocumentTree, node_id: int) -> str:
        """
        Render a subtree to plain text.

        Args:
            tree: Annotated document
            node_id: Subtree root, usually the selected candidate

        Returns:
            Text with one line per block and no blank lines
        """
        pieces: list[str] = []
        # (node id, is block) pairs; node id _CLOSE closes a block
        stack: list[tuple[int, bool]] = [(node_id, False)]

        while stack:
            current, block = stack.pop()
            if current == _CLOSE:
                if block:
                    pieces.append("\n")
                continue

            node = tree.node(current)
            if node.is_text:
                pieces.append(node.data)
                continue
            if tree.annotation(current).excluded:
                continue

            is_block = node.name not in INLINE_TAGS
            if is_block:
                pieces.append("\n")
            stack.append((_CLOSE, is_block))
            stack.extend((child, False) for child in reversed(node.children))

        return self.tidy("".join(pieces))

    @staticmethod
    def tidy(text: str) -> str:
        """Trim spaces around line breaks and collapse blank lines."""
        text = SPACE_AROUND_NEWLINE_RE.sub("\n", text)
        text = SPACE_RUN_RE.sub(" ", text)
        text = NEWLINE_RUN_RE.sub("\n", text)
        return text.strip("\n ")
