"""
Main content extraction pipeline.

Runs the five stages in order: normalize, locate title, walk to the
candidate, prune trash, format text. Each stage reads what the previous
ones produced and writes only its own fields.
"""

from dataclasses import dataclass, field

from refinery.config.settings import ExtractorSettings
from refinery.dom.builder import parse_html
from refinery.dom.nodes import ElementNode, Node
from refinery.dom.tree import DocumentInfo, DocumentTree, TreeNode
from refinery.extraction.candidate_walker import CandidateWalker
from refinery.extraction.normalizer import TreeNormalizer
from refinery.extraction.text_formatter import TextFormatter
from refinery.extraction.title_locator import TitleLocator
from refinery.extraction.trash_pruner import TrashPruner
from refinery.utils.logging import get_logger
from refinery.utils.metrics import increment_documents_extracted, time_stage

logger = get_logger(__name__)


@dataclass
class ExtractionResult:
    """
    Everything the pipeline produced for one document.

    The annotated tree is kept for inspection; ``candidate_id`` points
    into it and ``text`` is the rendered main content.
    """

    tree: DocumentTree
    root_id: int
    candidate_id: int
    text: str
    info: DocumentInfo
    excluded: int = 0
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def candidate(self) -> TreeNode:
        return self.tree.node(self.candidate_id)

    @property
    def title(self) -> str:
        return self.info.title

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    @property
    def is_whole_document(self) -> bool:
        """True when no confident candidate was found below the root."""
        return self.candidate_id == self.root_id


class ContentExtractor:
    """
    Extracts the main text of an HTML document.

    Example:
        >>> extractor = ContentExtractor()
        >>> result = extractor.extract_html(html)
        >>> print(result.text)
    """

    def __init__(self, settings: ExtractorSettings | None = None) -> None:
        """
        Initialize the extractor.

        Args:
            settings: Heuristic thresholds. Defaults are used if None.
        """
        self.settings = settings or ExtractorSettings()
        self.normalizer = TreeNormalizer(self.settings)
        self.title_locator = TitleLocator(self.settings)
        self.walker = CandidateWalker(self.settings)
        self.pruner = TrashPruner(self.settings)
        self.formatter = TextFormatter()

    def extract(self, forest: "list[Node] | ElementNode") -> ExtractionResult:
        """
        Run the pipeline on a parsed node forest.

        Args:
            forest: Top-level nodes from a parser, or a single element

        Returns:
            ExtractionResult with the annotated tree and the text

        Raises:
            InvalidInputError: If the forest has no usable html root
        """
        timings: dict[str, float] = {}

        with time_stage("normalize", timings):
            doc = self.normalizer.normalize(forest)
        tree, root_id, info = doc.tree, doc.root_id, doc.info

        with time_stage("locate_title", timings):
            self.title_locator.locate(tree, root_id, info)

        with time_stage("walk", timings):
            candidate_id = self.walker.walk(tree, root_id, info)

        with time_stage("prune", timings):
            excluded = self.pruner.prune(tree, candidate_id, info)

        with time_stage("format", timings):
            text = self.formatter.format(tree, candidate_id)

        increment_documents_extracted()
        logger.debug(
            f"Extracted {len(text.split())} of {info.words} words from "
            f"<{tree.node(candidate_id).name}> #{candidate_id}"
        )

        return ExtractionResult(
            tree=tree,
            root_id=root_id,
            candidate_id=candidate_id,
            text=text,
            info=info,
            excluded=excluded,
            timings=timings,
        )

    def extract_html(self, html: str) -> ExtractionResult:
        """
        Parse markup and run the pipeline.

        Args:
            html: HTML document

        Returns:
            ExtractionResult
        """
        return self.extract(parse_html(html))
