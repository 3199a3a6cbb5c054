"""
Tests for the Block Matcher
===========================
Exact and fuzzy phases, greedy ordering, and the partition invariant.
"""

import pytest

from block_compare.matcher import BlockMatcher
from block_compare.models import BlockType, MatchKind, MatchResult
from config_logging import InvariantError

from .helpers import BrokenSimilarity, ScriptedSimilarity, make_block, paragraphs


def pair_keys(pairs):
    return [(left.compare_key, right.compare_key) for left, right in pairs]


class TestExactPhase:
    """Phase 1: identical type and key."""

    def test_exact_match(self, similarity):
        result = BlockMatcher(similarity).match(paragraphs('hello'), paragraphs('hello', 'world'))
        assert pair_keys(result.exact_matches) == [('hello', 'hello')]
        assert [b.compare_key for b in result.right_unmatched] == ['world']
        assert result.left_unmatched == []

    def test_exact_ignores_position(self, similarity):
        left = paragraphs('a', 'b', 'c')
        right = paragraphs('c', 'b', 'a')
        result = BlockMatcher(similarity).match(left, right)
        assert pair_keys(result.exact_matches) == [('a', 'a'), ('b', 'b'), ('c', 'c')]
        assert result.exact_matches[0][1].index == 2

    def test_duplicates_pair_first_fit(self, similarity):
        left = paragraphs('dup', 'dup')
        right = paragraphs('other', 'dup', 'dup')
        result = BlockMatcher(similarity).match(left, right)
        assert [(l.index, r.index) for l, r in result.exact_matches] == [(0, 1), (1, 2)]

    def test_more_duplicates_on_left(self, similarity):
        result = BlockMatcher(similarity).match(paragraphs('dup', 'dup'), paragraphs('dup'))
        assert len(result.exact_matches) == 1
        assert [b.index for b in result.left_unmatched] == [1]

    def test_types_never_match(self, similarity):
        left = [make_block(BlockType.IMAGE, 0, 'a.png')]
        right = [make_block(BlockType.PARAGRAPH, 0, 'a.png')]
        result = BlockMatcher(similarity).match(left, right)
        assert result.exact_matches == []
        assert result.modified_pairs == []
        assert len(result.left_unmatched) == 1
        assert len(result.right_unmatched) == 1

    def test_empty_keys_match_exactly(self, similarity):
        result = BlockMatcher(similarity).match(paragraphs(''), paragraphs(''))
        assert len(result.exact_matches) == 1
        assert result.modified_pairs == []


class TestFuzzyPhase:
    """Phase 2: same type, similarity above the threshold."""

    def test_modified_pair(self, similarity):
        result = BlockMatcher(similarity).match(paragraphs('the cat sat'), paragraphs('the dog sat'))
        assert pair_keys(result.modified_pairs) == [('the cat sat', 'the dog sat')]
        assert result.left_unmatched == []
        assert result.right_unmatched == []

    def test_dissimilar_blocks_stay_unmatched(self, similarity):
        result = BlockMatcher(similarity).match(paragraphs('alpha'), paragraphs('zzzzzzzz'))
        assert result.modified_pairs == []
        assert len(result.left_unmatched) == 1
        assert len(result.right_unmatched) == 1

    def test_first_candidate_above_threshold_wins(self):
        scores = {('left', 'good'): 0.7, ('left', 'better'): 0.95}
        result = BlockMatcher(ScriptedSimilarity(scores)).match(
            paragraphs('left'), paragraphs('good', 'better'))
        assert pair_keys(result.modified_pairs) == [('left', 'good')]
        assert [b.compare_key for b in result.right_unmatched] == ['better']

    def test_threshold_is_strict(self):
        scores = {('left', 'edge'): 0.6}
        result = BlockMatcher(ScriptedSimilarity(scores), threshold=0.6).match(
            paragraphs('left'), paragraphs('edge'))
        assert result.modified_pairs == []

    def test_custom_threshold(self):
        scores = {('left', 'right'): 0.5}
        result = BlockMatcher(ScriptedSimilarity(scores), threshold=0.4).match(
            paragraphs('left'), paragraphs('right'))
        assert len(result.modified_pairs) == 1

    def test_exact_matches_are_not_rescored(self):
        service = ScriptedSimilarity({}, default=1.0)
        BlockMatcher(service).match(paragraphs('same', 'x'), paragraphs('same', 'y'))
        assert service.calls == [('x', 'y')]

    def test_types_are_not_scored_across(self):
        service = ScriptedSimilarity({}, default=1.0)
        left = [make_block(BlockType.TABLE, 0, 'a\tb')]
        right = [make_block(BlockType.PARAGRAPH, 0, 'a b')]
        result = BlockMatcher(service).match(left, right)
        assert service.calls == []
        assert result.modified_pairs == []

    def test_consumed_right_blocks_are_skipped(self):
        service = ScriptedSimilarity({}, default=0.9)
        result = BlockMatcher(service).match(paragraphs('a', 'b'), paragraphs('c', 'd'))
        assert [(l.index, r.index) for l, r in result.modified_pairs] == [(0, 0), (1, 1)]

    def test_failing_similarity_leaves_blocks_unmatched(self):
        result = BlockMatcher(BrokenSimilarity()).match(
            paragraphs('the cat sat'), paragraphs('the dog sat'))
        assert result.modified_pairs == []
        assert len(result.left_unmatched) == 1
        assert len(result.right_unmatched) == 1


class TestPartition:
    """Every block lands in exactly one entry."""

    def test_partition_is_complete(self, similarity):
        left = paragraphs('keep', 'the cat sat', 'gone', 'dup', 'dup')
        right = paragraphs('dup', 'the dog sat', 'keep', 'brand new text')
        result = BlockMatcher(similarity).match(left, right)

        assert (len(result.exact_matches) + len(result.modified_pairs)
                + len(result.left_unmatched)) == len(left)
        assert (len(result.exact_matches) + len(result.modified_pairs)
                + len(result.right_unmatched)) == len(right)
        result.verify(left, right)

    def test_entries_in_classification_order(self, similarity):
        result = BlockMatcher(similarity).match(
            paragraphs('same', 'the cat sat', 'gone'),
            paragraphs('same', 'the dog sat', 'qqqqqqqqqqqq'))
        kinds = [entry.kind for entry in result.entries()]
        assert kinds == [MatchKind.EXACT, MatchKind.MODIFIED,
                         MatchKind.DELETED_ONLY, MatchKind.ADDED_ONLY]

    def test_verify_detects_missing_block(self):
        left = paragraphs('a', 'b')
        broken = MatchResult(left_unmatched=[left[0]])
        with pytest.raises(InvariantError):
            broken.verify(left, [])

    def test_verify_detects_duplicate_reference(self):
        left = paragraphs('a')
        right = paragraphs('a')
        broken = MatchResult(exact_matches=[(left[0], right[0])], left_unmatched=[left[0]])
        with pytest.raises(InvariantError):
            broken.verify(left, right)

    def test_verify_detects_cross_type_pair(self):
        left = [make_block(BlockType.IMAGE, 0, 'a')]
        right = [make_block(BlockType.PARAGRAPH, 0, 'a')]
        broken = MatchResult(exact_matches=[(left[0], right[0])])
        with pytest.raises(InvariantError):
            broken.verify(left, right)
