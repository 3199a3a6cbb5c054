"""
Tests for the Block Classifier and Assembler
============================================
Output slots per entry kind, summary counters, and final ordering.
"""

from dataclasses import replace

from block_compare.assembler import Assembler
from block_compare.classifier import BlockClassifier
from block_compare.models import (
    BlockType, ComparisonSummary, DiffOpKind, MatchResult, OutputState
)

from .helpers import BrokenSimilarity, make_block, paragraphs


class TestClassifier:
    """One classified entry per match entry."""

    def test_exact_passes_through(self, similarity):
        left, right = paragraphs('same'), paragraphs('same')
        classified, summary = BlockClassifier(similarity).classify(
            MatchResult(exact_matches=[(left[0], right[0])]))

        entry = classified[0]
        assert entry.left_output.state is OutputState.UNCHANGED
        assert entry.right_output.state is OutputState.UNCHANGED
        assert summary == ComparisonSummary(0, 0, 0)

    def test_outputs_are_copies(self, similarity):
        left, right = paragraphs('same'), paragraphs('same')
        classified, _ = BlockClassifier(similarity).classify(
            MatchResult(exact_matches=[(left[0], right[0])]))
        assert classified[0].left_output.node is not left[0].node
        assert classified[0].left_output.text == 'same'

    def test_modified_paragraph_word_diff(self, similarity):
        left = make_block(BlockType.PARAGRAPH, 0, 'the cat sat', 'The cat sat')
        right = make_block(BlockType.PARAGRAPH, 0, 'the dog sat', 'The dog sat')
        classified, summary = BlockClassifier(similarity).classify(
            MatchResult(modified_pairs=[(left, right)]))

        left_out, right_out = classified[0].left_output, classified[0].right_output
        assert left_out.state is OutputState.MODIFIED_PARAGRAPH
        assert right_out.state is OutputState.MODIFIED_PARAGRAPH
        assert [op.text for op in left_out.segments if op.kind is DiffOpKind.DELETE] == ['cat']
        assert [op.text for op in right_out.segments if op.kind is DiffOpKind.INSERT] == ['dog']
        assert all(op.kind is not DiffOpKind.INSERT for op in left_out.segments)
        assert all(op.kind is not DiffOpKind.DELETE for op in right_out.segments)
        assert summary.changes == 1

    def test_word_diff_round_trip(self, similarity):
        left = make_block(BlockType.PARAGRAPH, 0, 'k1', 'Delivery takes 3 days from dispatch.')
        right = make_block(BlockType.PARAGRAPH, 0, 'k2', 'Delivery now takes 5 working days.')
        classified, _ = BlockClassifier(similarity).classify(
            MatchResult(modified_pairs=[(left, right)]))
        assert classified[0].left_output.text == left.content
        assert classified[0].right_output.text == right.content

    def test_modified_table_is_opaque(self, similarity):
        left = make_block(BlockType.TABLE, 0, 'a\t1')
        right = make_block(BlockType.TABLE, 0, 'a\t2')
        classified, summary = BlockClassifier(similarity).classify(
            MatchResult(modified_pairs=[(left, right)]))

        assert classified[0].left_output.state is OutputState.MODIFIED
        assert classified[0].right_output.state is OutputState.MODIFIED
        assert classified[0].left_output.segments == []
        assert summary.changes == 1

    def test_modified_image_is_opaque(self, similarity):
        left = make_block(BlockType.IMAGE, 0, 'v1.png')
        right = make_block(BlockType.IMAGE, 0, 'v2.png')
        classified, _ = BlockClassifier(similarity).classify(
            MatchResult(modified_pairs=[(left, right)]))
        assert classified[0].right_output.state is OutputState.MODIFIED

    def test_word_diff_failure_falls_back_to_opaque(self):
        left, right = paragraphs('the cat sat'), paragraphs('the dog sat')
        classified, summary = BlockClassifier(BrokenSimilarity()).classify(
            MatchResult(modified_pairs=[(left[0], right[0])]))
        assert classified[0].left_output.state is OutputState.MODIFIED
        assert summary.changes == 1

    def test_deleted_block_gets_placeholder(self, similarity):
        block = make_block(BlockType.IMAGE, 0, 'gone.png')
        block = replace(block, width=640, height=480)
        classified, summary = BlockClassifier(similarity).classify(
            MatchResult(left_unmatched=[block]))

        left_out, right_out = classified[0].left_output, classified[0].right_output
        assert left_out.state is OutputState.DELETED
        assert left_out.node is not None
        assert right_out.is_placeholder
        assert right_out.node is None
        assert right_out.text == ''
        assert right_out.placeholder_for == 'deleted'
        assert right_out.block_type is BlockType.IMAGE
        assert (right_out.width, right_out.height) == (640, 480)
        assert summary == ComparisonSummary(additions=0, deletions=1, changes=0)

    def test_added_block_gets_placeholder(self, similarity):
        block = make_block(BlockType.PARAGRAPH, 0, 'new')
        classified, summary = BlockClassifier(similarity).classify(
            MatchResult(right_unmatched=[block]))

        assert classified[0].left_output.is_placeholder
        assert classified[0].left_output.placeholder_for == 'added'
        assert classified[0].right_output.state is OutputState.ADDED
        assert summary == ComparisonSummary(additions=1, deletions=0, changes=0)

    def test_summary_matches_partition(self, similarity):
        left = paragraphs('same', 'the cat sat', 'gone one', 'gone two')
        right = paragraphs('same', 'the dog sat', 'qqqqqqqqqq')
        result = MatchResult(
            exact_matches=[(left[0], right[0])],
            modified_pairs=[(left[1], right[1])],
            left_unmatched=[left[2], left[3]],
            right_unmatched=[right[2]])
        _, summary = BlockClassifier(similarity).classify(result)
        assert summary.to_dict() == {'additions': 1, 'deletions': 2, 'changes': 1}


class TestAssembler:
    """Ordering of the two output sequences."""

    def test_sorted_by_left_index_then_right(self, similarity):
        left = paragraphs('zero', 'one', 'two')
        right = paragraphs('two', 'new', 'zero')
        result = MatchResult(
            exact_matches=[(left[0], right[2]), (left[2], right[0])],
            left_unmatched=[left[1]],
            right_unmatched=[right[1]])
        classified, summary = BlockClassifier(similarity).classify(result)
        assembled = Assembler().assemble(classified, summary)

        assert [n.state for n in assembled.left_result] == [
            OutputState.UNCHANGED, OutputState.DELETED,
            OutputState.PLACEHOLDER, OutputState.UNCHANGED,
        ]
        assert [n.text for n in assembled.right_result] == ['zero', '', 'new', 'two']
        assert len(assembled.left_result) == len(assembled.right_result)
        assert assembled.summary is summary

    def test_ties_keep_classification_order(self, similarity):
        left = [make_block(BlockType.IMAGE, 0, 'a.png')]
        right = [make_block(BlockType.PARAGRAPH, 0, 'a.png')]
        classified, summary = BlockClassifier(similarity).classify(
            MatchResult(left_unmatched=left, right_unmatched=right))
        assembled = Assembler().assemble(classified, summary)

        assert [n.state for n in assembled.left_result] == [OutputState.DELETED, OutputState.PLACEHOLDER]
        assert [n.state for n in assembled.right_result] == [OutputState.PLACEHOLDER, OutputState.ADDED]
