"""
Similarity Service v1.0.0
=========================
Normalized similarity scores and word-level diff operations between two
strings, built on diff-match-patch.

Instances are reentrant: each call creates its own diff state, so one
service can be shared by the extractor, matcher and classifier of a
comparison, or swapped for a fake in tests.
"""

from typing import List

import diff_match_patch as dmp_module

from config_logging import DEFAULT_DIFF_TIMEOUT
from .models import DiffOp, DiffOpKind

_OP_KINDS = {
    dmp_module.diff_match_patch.DIFF_EQUAL: DiffOpKind.EQUAL,
    dmp_module.diff_match_patch.DIFF_INSERT: DiffOpKind.INSERT,
    dmp_module.diff_match_patch.DIFF_DELETE: DiffOpKind.DELETE,
}


class SimilarityService:
    """
    Wraps the diff-match-patch primitive.

    Args:
        diff_timeout: Seconds diff-match-patch may spend per diff before
                      returning a coarser result; 0 means unlimited
        edit_cost: Cost of an empty edit, used by efficiency cleanup
    """

    def __init__(self, diff_timeout: float = DEFAULT_DIFF_TIMEOUT, edit_cost: int = 4):
        self.diff_timeout = diff_timeout
        self.edit_cost = edit_cost

    def _engine(self) -> dmp_module.diff_match_patch:
        dmp = dmp_module.diff_match_patch()
        dmp.Diff_Timeout = self.diff_timeout
        dmp.Diff_EditCost = self.edit_cost
        return dmp

    def similarity(self, a: str, b: str) -> float:
        """
        Score in [0, 1]: 1 - levenshtein / max(len(a), len(b)).

        Two empty strings are identical (1.0); exactly one empty string
        scores 0.0.
        """
        if not a and not b:
            return 1.0
        if not a or not b:
            return 0.0

        dmp = self._engine()
        distance = dmp.diff_levenshtein(dmp.diff_main(a, b))
        return max(0.0, 1.0 - distance / max(len(a), len(b)))

    def word_diff(self, a: str, b: str) -> List[DiffOp]:
        """
        Diff with semantic cleanup, so edits land on human-meaningful spans.

        Joining equal+delete texts gives back `a`; joining equal+insert
        texts gives back `b`.
        """
        dmp = self._engine()
        diffs = dmp.diff_main(a, b)
        dmp.diff_cleanupSemantic(diffs)
        return [DiffOp(_OP_KINDS[op], text) for op, text in diffs if text]
