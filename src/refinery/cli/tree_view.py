"""
Rich rendering of the annotated document tree.

Shows the per-node metrics the pipeline computed so heuristics can be
inspected on real pages. Reads the tree only.
"""

from rich.text import Text
from rich.tree import Tree

from refinery.extraction.extractor import ExtractionResult

TEXT_PREVIEW_LENGTH = 60


def node_label(result: ExtractionResult, node_id: int) -> Text:
    """One-line summary of a node and its annotation."""
    tree = result.tree
    node = tree.node(node_id)

    if node.is_text:
        data = node.data.strip().replace("\n", " ")
        if len(data) > TEXT_PREVIEW_LENGTH:
            data = data[:TEXT_PREVIEW_LENGTH] + "..."
        return Text(data, style="dim")

    ann = tree.annotation(node_id)
    label = Text()
    label.append(node.name, style="bold red" if ann.excluded else "bold green")
    label.append(f" H {ann.height}", style="blue")
    label.append(f" | W {ann.words} | A {ann.anchor_words} | L {ann.longest_run}", style="blue")
    label.append(f" | S {ann.score:.2f}", style="blue")
    if ann.title:
        label.append(" TITLE", style="bold magenta")
    elif ann.contains_title:
        label.append(" (title)", style="magenta")
    if node_id == result.candidate_id:
        label.append(" CANDIDATE", style="bold yellow")
    if ann.excluded:
        label.append(" EXCLUDED", style="red")
    return label


def render_tree(
    result: ExtractionResult,
    show_excluded: bool = True,
    max_depth: int | None = None,
    show_text: bool = True,
) -> Tree:
    """
    Build a rich Tree for an extraction result.

    Args:
        result: Output of the extraction pipeline
        show_excluded: Whether excluded subtrees are drawn
        max_depth: Stop drawing below this depth (None draws everything)
        show_text: Whether text nodes are drawn

    Returns:
        rich Tree rooted at the document root
    """
    tree = result.tree
    view = Tree(node_label(result, result.root_id))

    stack: list[tuple[int, Tree, int]] = [
        (child, view, 1) for child in reversed(tree.node(result.root_id).children)
    ]
    while stack:
        node_id, branch, depth = stack.pop()
        node = tree.node(node_id)

        if node.is_text and not show_text:
            continue
        if node.is_element and tree.annotation(node_id).excluded and not show_excluded:
            continue

        child_branch = branch.add(node_label(result, node_id))
        if max_depth is not None and depth >= max_depth:
            continue
        stack.extend(
            (child, child_branch, depth + 1) for child in reversed(node.children)
        )

    return view
