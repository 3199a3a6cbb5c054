"""
Block Classifier v1.0.0
=======================
Builds the left/right output slots for every match entry and counts the
summary.

- exact:     both sides pass through unchanged
- modified:  paragraphs get a word-level diff, tables/images are wrapped
             whole as an opaque modified unit
- deleted:   left shows the block marked deleted, right gets a placeholder
- added:     right shows the block marked added, left gets a placeholder
"""

from typing import List, Tuple

from config_logging import get_logger
from .models import (
    Block, BlockType, ClassifiedEntry, ComparisonSummary, DiffOpKind,
    MatchEntry, MatchKind, MatchResult, OutputNode, OutputState
)
from .similarity import SimilarityService

logger = get_logger('block_compare.classifier')

LEFT = 'left'
RIGHT = 'right'


def _whole(block: Block, state: OutputState, side: str) -> OutputNode:
    return OutputNode(
        state=state,
        side=side,
        block_type=block.type,
        node=block.node.clone(deep=True),
        width=block.width,
        height=block.height,
        block_id=block.id
    )


def _placeholder(block: Block, side: str, placeholder_for: str) -> OutputNode:
    """Content-free slot sized like the block on the other side."""
    return OutputNode(
        state=OutputState.PLACEHOLDER,
        side=side,
        block_type=block.type,
        width=block.width,
        height=block.height,
        block_id=block.id,
        placeholder_for=placeholder_for
    )


class BlockClassifier:
    """Turns a MatchResult into classified entries plus a summary."""

    def __init__(self, similarity: SimilarityService):
        self.similarity = similarity

    def classify(self, match_result: MatchResult) -> Tuple[List[ClassifiedEntry], ComparisonSummary]:
        summary = ComparisonSummary()
        classified = [self.classify_entry(entry, summary)
                      for entry in match_result.entries()]
        return classified, summary

    def classify_entry(self, entry: MatchEntry, summary: ComparisonSummary) -> ClassifiedEntry:
        """Build both output slots for one entry and bump its counter."""
        if entry.kind is MatchKind.EXACT:
            return ClassifiedEntry(entry,
                                   _whole(entry.left, OutputState.UNCHANGED, LEFT),
                                   _whole(entry.right, OutputState.UNCHANGED, RIGHT))

        if entry.kind is MatchKind.MODIFIED:
            summary.changes += 1
            if entry.left.type is BlockType.PARAGRAPH and entry.right.type is BlockType.PARAGRAPH:
                outputs = self._paragraph_diff(entry.left, entry.right)
                if outputs is not None:
                    return ClassifiedEntry(entry, *outputs)
            return ClassifiedEntry(entry,
                                   _whole(entry.left, OutputState.MODIFIED, LEFT),
                                   _whole(entry.right, OutputState.MODIFIED, RIGHT))

        if entry.kind is MatchKind.DELETED_ONLY:
            summary.deletions += 1
            return ClassifiedEntry(entry,
                                   _whole(entry.left, OutputState.DELETED, LEFT),
                                   _placeholder(entry.left, RIGHT, 'deleted'))

        summary.additions += 1
        return ClassifiedEntry(entry,
                               _placeholder(entry.right, LEFT, 'added'),
                               _whole(entry.right, OutputState.ADDED, RIGHT))

    def _paragraph_diff(self, left: Block, right: Block):
        """
        Word-level outputs for a modified paragraph pair, or None if the
        diff primitive fails (the pair is then shown as an opaque change).
        """
        try:
            ops = self.similarity.word_diff(left.content, right.content)
        except Exception as e:
            logger.warning(f"Word diff failed for {left.id} / {right.id}: {e}",
                           left_id=left.id, right_id=right.id)
            return None

        left_output = OutputNode(
            state=OutputState.MODIFIED_PARAGRAPH,
            side=LEFT,
            block_type=left.type,
            node=left.node.clone(deep=False),
            segments=[op for op in ops if op.kind is not DiffOpKind.INSERT],
            width=left.width,
            height=left.height,
            block_id=left.id
        )
        right_output = OutputNode(
            state=OutputState.MODIFIED_PARAGRAPH,
            side=RIGHT,
            block_type=right.type,
            node=right.node.clone(deep=False),
            segments=[op for op in ops if op.kind is not DiffOpKind.DELETE],
            width=right.width,
            height=right.height,
            block_id=right.id
        )
        return left_output, right_output
