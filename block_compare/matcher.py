"""
Block Matcher v1.0.0
====================
Partitions two ordered block lists into exact matches, modified pairs and
unmatched leftovers.

Matching is greedy first-fit in left order, not a global assignment:
  Phase 1 pairs each left block with the first unconsumed right block of
          the same type and identical compare key.
  Phase 2 pairs each remaining left block with the first unconsumed right
          block of the same type scoring above the similarity threshold.

With duplicate keys or several candidates above the threshold the pairing
depends on document order. Phase 1 is O(n + m) using per-key queues;
Phase 2 is O(n * m) similarity calls in the worst case. Consumed blocks are
tombstoned rather than removed, so removal itself is O(1).
"""

from collections import defaultdict, deque
from typing import Deque, Dict, List, Optional, Tuple

from config_logging import get_logger, DEFAULT_SIMILARITY_THRESHOLD
from .models import Block, BlockType, MatchResult
from .similarity import SimilarityService

logger = get_logger('block_compare.matcher')


class BlockMatcher:
    """
    Greedy two-phase block matcher.

    Args:
        similarity: Service used to score fuzzy candidates
        threshold: Fuzzy match requires a score strictly greater than this
    """

    def __init__(self, similarity: SimilarityService,
                 threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        self.similarity = similarity
        self.threshold = threshold

    def match(self, left_blocks: List[Block], right_blocks: List[Block]) -> MatchResult:
        result = MatchResult()
        left_used = [False] * len(left_blocks)
        right_used = [False] * len(right_blocks)

        self._match_exact(left_blocks, right_blocks, left_used, right_used, result)
        self._match_fuzzy(left_blocks, right_blocks, left_used, right_used, result)

        result.left_unmatched = [b for b, used in zip(left_blocks, left_used) if not used]
        result.right_unmatched = [b for b, used in zip(right_blocks, right_used) if not used]

        logger.debug("Block matching complete", **result.stats())
        return result

    def _match_exact(self, left_blocks, right_blocks, left_used, right_used,
                     result: MatchResult) -> None:
        # Right positions per (type, key), in document order
        queues: Dict[Tuple[BlockType, str], Deque[int]] = defaultdict(deque)
        for j, block in enumerate(right_blocks):
            queues[(block.type, block.compare_key)].append(j)

        for i, left in enumerate(left_blocks):
            queue = queues.get((left.type, left.compare_key))
            if not queue:
                continue
            j = queue.popleft()
            left_used[i] = True
            right_used[j] = True
            result.exact_matches.append((left, right_blocks[j]))

    def _match_fuzzy(self, left_blocks, right_blocks, left_used, right_used,
                     result: MatchResult) -> None:
        for i, left in enumerate(left_blocks):
            if left_used[i]:
                continue
            j = self._first_similar(left, right_blocks, right_used)
            if j is None:
                continue
            left_used[i] = True
            right_used[j] = True
            result.modified_pairs.append((left, right_blocks[j]))

    def _first_similar(self, left: Block, right_blocks: List[Block],
                       right_used: List[bool]) -> Optional[int]:
        for j, right in enumerate(right_blocks):
            if right_used[j] or right.type is not left.type:
                continue
            # equal keys (including two empty ones) were settled in phase 1
            if not left.compare_key and not right.compare_key:
                continue
            if self._score(left, right) > self.threshold:
                return j
        return None

    def _score(self, left: Block, right: Block) -> float:
        """Similarity of two keys; a failing diff counts as no similarity."""
        try:
            return self.similarity.similarity(left.compare_key, right.compare_key)
        except Exception as e:
            logger.warning(f"Similarity failed for {left.id} / {right.id}: {e}",
                           left_id=left.id, right_id=right.id)
            return 0.0
