"""
Title localization.

Finds the body text that repeats the document's declared title and marks
the element holding it as the heading. Every ancestor of the heading is
flagged ``contains_title`` so the candidate walker can favor the branch
that carries the headline.
"""

import re

from refinery.config.settings import ExtractorSettings
from refinery.dom.tree import DocumentInfo, DocumentTree, TreeNode
from refinery.extraction.normalizer import count_title_words
from refinery.utils.logging import get_logger

logger = get_logger(__name__)

HEADING_TAGS = ("h1", "h2")

# With a long title, a single matching word is most likely a stopword
SINGLE_WORD_TITLE_LIMIT = 5


class TitleLocator:
    """
    Locates the heading that matches the declared title.

    Example:
        >>> locator = TitleLocator()
        >>> heading_id = locator.locate(doc.tree, doc.root_id, doc.info)
    """

    def __init__(self, settings: ExtractorSettings | None = None) -> None:
        self.settings = settings or ExtractorSettings()

    def locate(self, tree: DocumentTree, root_id: int, info: DocumentInfo) -> int | None:
        """
        Find and mark the heading node.

        Args:
            tree: Normalized document
            root_id: Id of the document root
            info: Document context; ``heading_id`` is set on success

        Returns:
            Id of the heading element, or None if the title wasn't found
        """
        heading_id = None
        if info.title_words:
            heading_id = self._best_match(tree, root_id, info)
        if heading_id is None and self.settings.heading_fallback:
            heading_id = self._single_heading(tree, root_id, info)

        if heading_id is None:
            logger.info("No heading matches the document title")
            return None

        self.mark(tree, heading_id)
        info.heading_id = heading_id
        logger.debug(
            f"Heading located: <{tree.node(heading_id).name}> #{heading_id}")
        return heading_id

    def mark(self, tree: DocumentTree, heading_id: int) -> None:
        """Flag the heading and its whole ancestor chain."""
        ann = tree.annotation(heading_id)
        ann.title = True
        ann.contains_title = True
        for ancestor in tree.ancestors(heading_id):
            tree.annotation(ancestor.id).contains_title = True

    def matches(self, text: TreeNode, info: DocumentInfo) -> int:
        """
        Number of title words a text node matches, or 0.

        The node must not be much longer than the title and its text has
        to occur in the title as a whole phrase.
        """
        if text.words - info.title_words >= self.settings.title_word_slack:
            return 0

        data = text.data.strip().lower()
        words = count_title_words(data)
        if not words or words > info.title_words:
            return 0
        if data not in info.title:
            return 0
        if not re.search(r"(\s|^)" + re.escape(data) + r"(\s|$)", info.title):
            return 0
        if words == 1 and info.title_words > SINGLE_WORD_TITLE_LIMIT:
            return 0
        return words

    def _best_match(self, tree: DocumentTree, root_id: int, info: DocumentInfo) -> int | None:
        best: tuple[int, bool] | None = None
        best_id = None

        for node in tree.iter_subtree(root_id):
            if not node.is_text or node.parent is None:
                continue
            words = self.matches(node, info)
            if not words:
                continue

            parent = tree.node(node.parent)
            rank = (words, parent.name in HEADING_TAGS)
            # Strictly greater keeps the earliest of equal matches
            if best is None or rank > best:
                best = rank
                best_id = parent.id

        return best_id

    def _single_heading(
        self, tree: DocumentTree, root_id: int, info: DocumentInfo
    ) -> int | None:
        """The only h1 (or else the only h2) no longer than the title."""
        for name in HEADING_TAGS:
            found = [
                node.id
                for node in tree.iter_subtree(root_id)
                if node.is_element
                and node.name == name
                and tree.annotation(node.id).words
                and (not info.title_words
                     or tree.annotation(node.id).words <= info.title_words)
            ]
            if len(found) == 1:
                return found[0]
        return None
