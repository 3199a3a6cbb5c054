"""
Assembler
=========
Merges classified entries back into two synchronized output sequences.
"""

from typing import List

from .models import ClassifiedEntry, ComparisonResult, ComparisonSummary


class Assembler:
    """Orders classified entries by original position."""

    def assemble(self, classified: List[ClassifiedEntry],
                 summary: ComparisonSummary) -> ComparisonResult:
        """
        Sort by left index (right index when there is no left block) and
        split into left/right sequences. The sort is stable, so entries
        sharing an index keep classification order.
        """
        ordered = sorted(classified, key=lambda c: c.sort_index)
        return ComparisonResult(
            left_result=[c.left_output for c in ordered],
            right_result=[c.right_output for c in ordered],
            summary=summary
        )
