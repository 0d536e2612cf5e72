"""
Candidate selection.

Walks down from the document root, at every level picking the child
most likely to hold the main content, and stops as soon as no child is
decisively better than its siblings.
"""

from dataclasses import dataclass

from refinery.config.settings import ExtractorSettings
from refinery.dom.tree import DocumentInfo, DocumentTree
from refinery.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Contender:
    """A child competing for selection at one level of the walk."""

    node_id: int
    probability: float
    words: int
    score: float
    height: int

    @property
    def weight(self) -> float:
        """words² / score: large, non-repetitive content weighs most."""
        return self.words * self.words / self.score


class CandidateWalker:
    """
    Selects the subtree most likely to contain the main content.

    Example:
        >>> walker = CandidateWalker()
        >>> candidate_id = walker.walk(doc.tree, doc.root_id, doc.info)
    """

    def __init__(self, settings: ExtractorSettings | None = None) -> None:
        self.settings = settings or ExtractorSettings()

    def walk(self, tree: DocumentTree, root_id: int, info: DocumentInfo) -> int:
        """
        Walk from the root to the content candidate.

        Args:
            tree: Normalized, title-annotated document
            root_id: Id of the document root
            info: Document context

        Returns:
            Id of the selected candidate element
        """
        root_height = max(tree.annotation(root_id).height, 1)
        current = root_id

        while True:
            next_id = self._step(tree, current, root_height)
            if next_id is None:
                break
            current = next_id

        candidate = self._lift_to_title(tree, current, info)
        if candidate == root_id:
            logger.info("No confident candidate, using the whole document")
        return candidate

    def contenders(self, tree: DocumentTree, parent_id: int) -> list[Contender]:
        """Element children with nonzero probability, most probable first."""
        parent_words = max(tree.annotation(parent_id).words, 1)
        found = []
        for child in tree.element_children(parent_id):
            ann = tree.annotation(child.id)
            probability = ann.words / parent_words
            if ann.contains_title:
                probability *= self.settings.title_boost
            if probability > 0:
                found.append(Contender(
                    node_id=child.id,
                    probability=probability,
                    words=ann.words,
                    score=ann.score,
                    height=ann.height,
                ))
        # sort is stable, so document order breaks ties
        found.sort(key=lambda c: c.probability, reverse=True)
        return found

    def _step(self, tree: DocumentTree, parent_id: int, root_height: int) -> int | None:
        """Apply the decision table at one node. None means stop here."""
        s = self.settings
        contenders = self.contenders(tree, parent_id)

        if not contenders:
            logger.debug(f"#{parent_id}: no content-bearing children, stop")
            return None

        winner = contenders[0]
        if len(contenders) == 1:
            if winner.height < s.min_descend_height:
                logger.debug(f"#{parent_id}: only child #{winner.node_id} too shallow, stop")
                return None
            return self._descend(parent_id, winner, "single child")

        runnerup = contenders[1]
        ratio = winner.score / runnerup.score
        if ratio > s.decisive_score_ratio or (
            runnerup.height < root_height / 2 and ratio > s.decisive_score_ratio / 2
        ):
            pick = max((winner, runnerup), key=lambda c: c.weight)
            return self._descend(parent_id, pick, f"decisive score ratio {ratio:.2f}")

        parent_height = tree.annotation(parent_id).height
        if (
            parent_height / root_height < 0.5
            and winner.probability + runnerup.probability < s.fragmented_sum_ratio
        ):
            logger.debug(f"#{parent_id}: content split across siblings, stop")
            return None

        if winner.probability < s.min_winner_probability:
            logger.debug(
                f"#{parent_id}: winner probability {winner.probability:.2f} too low, stop")
            return None

        return self._descend(parent_id, winner, f"probability {winner.probability:.2f}")

    def _descend(self, parent_id: int, pick: Contender, reason: str) -> int | None:
        if pick.height < self.settings.min_descend_height:
            logger.debug(f"#{parent_id}: pick #{pick.node_id} holds only text, stop")
            return None
        logger.debug(f"#{parent_id}: descend into #{pick.node_id} ({reason})")
        return pick.node_id

    def _lift_to_title(self, tree: DocumentTree, candidate_id: int, info: DocumentInfo) -> int:
        """Move up a few levels if that brings the headline into the candidate."""
        if info.heading_id is None or tree.annotation(candidate_id).contains_title:
            return candidate_id

        for level, ancestor in enumerate(tree.ancestors(candidate_id)):
            if level >= self.settings.title_lift_levels:
                break
            if tree.annotation(ancestor.id).contains_title:
                logger.debug(f"Lifted candidate #{candidate_id} to #{ancestor.id} for the title")
                return ancestor.id

        return candidate_id
