"""
Block Comparison Module v1.0.0
==============================
Side-by-side comparison of two structured documents at block level
(paragraphs, tables, images) with word-level diff highlighting inside
modified paragraphs.

Features:
- Block extraction from any document tree (HTML via BeautifulSoup)
- Exact and fuzzy block matching
- Word-level diffs for modified paragraphs
- Dimension-preserving placeholders to keep both panes aligned
- Fail-open comparison: errors degrade to an unchanged view
"""

from .models import (
    Block,
    BlockType,
    MatchEntry,
    MatchKind,
    MatchResult,
    DiffOp,
    DiffOpKind,
    ComparisonSummary,
    OutputNode,
    OutputState,
    ComparisonResult
)
from .tree import DocumentNode, SoupNode, parse_html
from .similarity import SimilarityService
from .extractor import BlockExtractor
from .matcher import BlockMatcher
from .classifier import BlockClassifier
from .assembler import Assembler
from .differ import BlockDiffer, compare, compare_documents
from .render import render_output, render_result, render_page, BLOCK_COMPARE_CSS
from .session import ComparisonSession
from .routes import bc_blueprint

__version__ = "1.0.0"
__all__ = [
    'Block',
    'BlockType',
    'MatchEntry',
    'MatchKind',
    'MatchResult',
    'DiffOp',
    'DiffOpKind',
    'ComparisonSummary',
    'OutputNode',
    'OutputState',
    'ComparisonResult',
    'DocumentNode',
    'SoupNode',
    'parse_html',
    'SimilarityService',
    'BlockExtractor',
    'BlockMatcher',
    'BlockClassifier',
    'Assembler',
    'BlockDiffer',
    'compare',
    'compare_documents',
    'render_output',
    'render_result',
    'render_page',
    'BLOCK_COMPARE_CSS',
    'ComparisonSession',
    'bc_blueprint'
]
