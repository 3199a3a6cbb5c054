"""
Block Differ v1.0.0
===================
Block-level comparison of two structured documents with word-level
highlighting inside modified paragraphs.

Pipeline: extract blocks (x2) -> match -> classify -> assemble.

compare() never raises: any failure is logged and the two documents come
back unchanged with a zero summary, so a review is never blocked. Only an
invariant violation in strict mode (tests, debug runs) escapes.
"""

from typing import Any, Dict, Optional

from config_logging import AppConfig, get_config, get_logger, InvariantError
from .assembler import Assembler
from .classifier import BlockClassifier, LEFT, RIGHT
from .extractor import BlockExtractor
from .matcher import BlockMatcher
from .models import ComparisonResult, ComparisonSummary, OutputNode, OutputState
from .render import render_result
from .similarity import SimilarityService
from .tree import DocumentNode, parse_html

logger = get_logger('block_compare.differ')


class BlockDiffer:
    """
    Comparison engine. Holds no state between calls.

    Args:
        similarity: Similarity service (a fresh one is built when omitted)
        threshold: Fuzzy match threshold (config default when omitted)
        strict: Raise invariant violations instead of degrading
        config: Configuration to read defaults from
    """

    def __init__(self, similarity: Optional[SimilarityService] = None,
                 threshold: Optional[float] = None,
                 strict: Optional[bool] = None,
                 config: Optional[AppConfig] = None):
        config = config or get_config()
        self.similarity = similarity or SimilarityService(diff_timeout=config.diff_timeout)
        self.threshold = config.similarity_threshold if threshold is None else threshold
        self.strict = config.strict if strict is None else strict

        self.extractor = BlockExtractor()
        self.matcher = BlockMatcher(self.similarity, self.threshold)
        self.classifier = BlockClassifier(self.similarity)
        self.assembler = Assembler()

    def compare(self, left_tree: DocumentNode, right_tree: DocumentNode) -> ComparisonResult:
        """
        Compare two document trees.

        Returns:
            ComparisonResult with aligned left/right sequences and summary;
            `degraded` is set when the unchanged documents were echoed back
        """
        try:
            return self._compare(left_tree, right_tree)
        except InvariantError as e:
            if self.strict:
                raise
            logger.warning(f"Returning unchanged documents after invariant violation: {e}")
        except Exception as e:
            logger.warning(f"Returning unchanged documents after failure: {type(e).__name__}: {e}")
        return self._echo(left_tree, right_tree)

    def _compare(self, left_tree: DocumentNode, right_tree: DocumentNode) -> ComparisonResult:
        with logger.log_operation('block_comparison'):
            left_blocks = self.extractor.extract(left_tree)
            right_blocks = self.extractor.extract(right_tree)
            logger.debug(f"Block counts: left={len(left_blocks)}, right={len(right_blocks)}")

            match_result = self.matcher.match(left_blocks, right_blocks)
            match_result.verify(left_blocks, right_blocks)

            classified, summary = self.classifier.classify(match_result)
            result = self.assembler.assemble(classified, summary)

        logger.info(f"Comparison complete: +{summary.additions}, -{summary.deletions}, "
                    f"~{summary.changes}", **summary.to_dict())
        return result

    def _echo(self, left_tree: Any, right_tree: Any) -> ComparisonResult:
        return ComparisonResult(
            left_result=[_echo_node(left_tree, LEFT)],
            right_result=[_echo_node(right_tree, RIGHT)],
            summary=ComparisonSummary(),
            degraded=True
        )


def _echo_node(tree: Any, side: str) -> OutputNode:
    """Whole-document unchanged slot for a degraded result."""
    node = None
    if isinstance(tree, DocumentNode):
        try:
            node = tree.clone(deep=True)
        except Exception as e:
            logger.warning(f"Could not copy {side} document for echo: {e}")
            node = tree
    return OutputNode(state=OutputState.UNCHANGED, side=side, node=node)


def compare(left_tree: DocumentNode, right_tree: DocumentNode, **kwargs) -> ComparisonResult:
    """
    Compare two document trees with a fresh BlockDiffer.

    Args:
        left_tree: Original document
        right_tree: Revised document
        **kwargs: Passed to BlockDiffer

    Returns:
        ComparisonResult
    """
    return BlockDiffer(**kwargs).compare(left_tree, right_tree)


def compare_documents(left_html: str, right_html: str,
                      include_nodes: bool = False, **kwargs) -> Dict[str, Any]:
    """
    Compare two HTML documents and return annotated HTML for both panes.

    Never raises; on failure the input markup is returned as-is.

    Returns:
        {left_html, right_html, summary, degraded[, left_nodes, right_nodes]}
    """
    differ = BlockDiffer(**kwargs)
    try:
        result = differ.compare(parse_html(left_html), parse_html(right_html))
        rendered_left, rendered_right = render_result(result)
    except InvariantError:
        if differ.strict:
            raise
        logger.warning("Returning unchanged markup after invariant violation")
        return _echo_documents(left_html, right_html)
    except Exception as e:
        logger.warning(f"Returning unchanged markup after failure: {type(e).__name__}: {e}")
        return _echo_documents(left_html, right_html)

    data = {
        'left_html': rendered_left,
        'right_html': rendered_right,
        'summary': result.summary.to_dict(),
        'degraded': result.degraded
    }
    if include_nodes:
        data['left_nodes'] = [n.to_dict() for n in result.left_result]
        data['right_nodes'] = [n.to_dict() for n in result.right_result]
    return data


def _echo_documents(left_html: Any, right_html: Any) -> Dict[str, Any]:
    return {
        'left_html': left_html,
        'right_html': right_html,
        'summary': ComparisonSummary().to_dict(),
        'degraded': True
    }
