"""
Trash pruning.

Walks the selected candidate and flags descendants that look like
boilerplate: scaffolding without prose, tag-dense widgets, locally
anomalous repetitive blocks and trailing link clusters. Flagged nodes
stay in the tree and are skipped by the formatter.
"""

from refinery.config.settings import ExtractorSettings
from refinery.dom.tree import DocumentInfo, DocumentTree
from refinery.extraction.text_formatter import INLINE_TAGS
from refinery.utils.logging import get_logger

logger = get_logger(__name__)


class TrashPruner:
    """
    Marks boilerplate inside the candidate as excluded.

    Example:
        >>> pruner = TrashPruner()
        >>> pruner.prune(doc.tree, candidate_id, doc.info)
        3
    """

    def __init__(self, settings: ExtractorSettings | None = None) -> None:
        self.settings = settings or ExtractorSettings()

    def prune(self, tree: DocumentTree, candidate_id: int, info: DocumentInfo) -> int:
        """
        Flag boilerplate descendants of the candidate.

        The candidate itself is never flagged, and neither is the heading
        or any element on its ancestor chain.

        Args:
            tree: Annotated document
            candidate_id: Selected candidate
            info: Document context

        Returns:
            Number of elements flagged
        """
        candidate_words = max(tree.annotation(candidate_id).words, 1)
        excluded = 0

        stack = list(reversed(self._walkable_children(tree, candidate_id)))
        while stack:
            node_id = stack.pop()
            reason = self.exclusion_reason(tree, node_id, candidate_words)
            if reason:
                tree.annotation(node_id).excluded = True
                excluded += 1
                logger.debug(f"Excluded <{tree.node(node_id).name}> #{node_id}: {reason}")
                continue
            stack.extend(reversed(self._walkable_children(tree, node_id)))

        logger.debug(f"Pruned {excluded} nodes under candidate #{candidate_id}")
        return excluded

    def exclusion_reason(
        self, tree: DocumentTree, node_id: int, candidate_words: int
    ) -> str | None:
        """Why a node should be excluded, or None to keep it."""
        s = self.settings
        node = tree.node(node_id)
        ann = tree.annotation(node_id)

        if ann.title or ann.contains_title:
            return None

        if ann.words == 0 or not node.children:
            return "empty"

        if ann.longest_run < ann.height:
            return "structure outgrows its prose"

        if ann.height < s.prune_min_height and ann.longest_run < ann.score:
            return "shallow scaffolding"

        if node.parent is not None:
            parent_score = tree.annotation(node.parent).score
            if ann.score / parent_score > s.prune_parent_score_ratio:
                return "repetitive relative to its parent"

        tag_density = ann.tag_count / max(ann.longest_run, 1)
        if (
            ann.words / candidate_words < s.prune_word_share
            and tag_density > s.prune_sparse_tag_ratio
        ):
            return "sparse and tag-dense"

        if tag_density > s.prune_dense_tag_ratio:
            return "tag-dense"

        if node.parent is not None and s.prune_trailing_siblings:
            siblings = tree.node(node.parent).children
            trailing = siblings[-s.prune_trailing_siblings:]
            if (
                node_id in trailing
                and ann.anchor_words / max(ann.words, 1) > s.prune_anchor_ratio
            ):
                return "trailing link cluster"

        return None

    @staticmethod
    def _walkable_children(tree: DocumentTree, node_id: int) -> list[int]:
        """
        Element children worth judging.

        Inline elements inside running text belong to the sentence and
        are never judged on their own.
        """
        children = tree.children_of(node_id)
        has_prose = any(child.is_text and child.words for child in children)
        return [
            child.id
            for child in children
            if child.is_element and not (has_prose and child.name in INLINE_TAGS)
        ]
