"""
Block Comparison Models v1.0.0
==============================
Data classes for block extraction, matching and comparison results.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Tuple, TYPE_CHECKING

from config_logging import InvariantError

if TYPE_CHECKING:
    from .tree import DocumentNode


class BlockType(Enum):
    """Structural block kinds and the markup tag each is read from."""
    PARAGRAPH = "paragraph"
    TABLE = "table"
    IMAGE = "image"

    @property
    def tag(self) -> str:
        return _TAG_BY_TYPE[self]

    @classmethod
    def from_tag(cls, tag: str) -> Optional['BlockType']:
        """Map a tag name to a block type (None if the tag is not a block)."""
        return _TYPE_BY_TAG.get((tag or '').lower())


_TAG_BY_TYPE = {
    BlockType.PARAGRAPH: 'p',
    BlockType.TABLE: 'table',
    BlockType.IMAGE: 'img',
}
_TYPE_BY_TAG = {tag: block_type for block_type, tag in _TAG_BY_TYPE.items()}


@dataclass(frozen=True)
class Block:
    """
    One structural unit extracted from a document, in traversal order.

    Attributes:
        type: Block kind
        index: Position in source order (0-based, strictly increasing)
        content: Human-visible text used for word-level diffing
        compare_key: Normalized form used for matching
        node: Source element (opaque, never mutated)
        width: Minimum render width in px (for placeholders)
        height: Minimum render height in px (for placeholders)
        id: "{type}-{index}-{hash}", unique within one extraction
    """
    type: BlockType
    index: int
    content: str
    compare_key: str
    node: Any = field(compare=False, repr=False)
    width: int = 300
    height: int = 40
    id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'type': self.type.value,
            'index': self.index,
            'content': self.content,
            'compare_key': self.compare_key,
            'width': self.width,
            'height': self.height
        }


class MatchKind(Enum):
    EXACT = "exact"
    MODIFIED = "modified"
    DELETED_ONLY = "deletedOnly"
    ADDED_ONLY = "addedOnly"


@dataclass
class MatchEntry:
    """A left/right pairing produced by the matcher."""
    kind: MatchKind
    left: Optional[Block] = None
    right: Optional[Block] = None

    @property
    def sort_index(self) -> int:
        """Left index if there is a left block, else right index."""
        if self.left is not None:
            return self.left.index
        return self.right.index if self.right is not None else 0


@dataclass
class MatchResult:
    """
    Partition of two block lists into exact matches, modified pairs and
    the blocks left over on either side.
    """
    exact_matches: List[Tuple[Block, Block]] = field(default_factory=list)
    modified_pairs: List[Tuple[Block, Block]] = field(default_factory=list)
    left_unmatched: List[Block] = field(default_factory=list)
    right_unmatched: List[Block] = field(default_factory=list)

    def entries(self) -> List[MatchEntry]:
        """All entries in classification order: exact, modified, deleted, added."""
        entries = [MatchEntry(MatchKind.EXACT, left, right)
                   for left, right in self.exact_matches]
        entries.extend(MatchEntry(MatchKind.MODIFIED, left, right)
                       for left, right in self.modified_pairs)
        entries.extend(MatchEntry(MatchKind.DELETED_ONLY, left=block)
                       for block in self.left_unmatched)
        entries.extend(MatchEntry(MatchKind.ADDED_ONLY, right=block)
                       for block in self.right_unmatched)
        return entries

    def verify(self, left_blocks: List[Block], right_blocks: List[Block]) -> None:
        """
        Check that every input block sits in exactly one entry on the
        correct side.

        Raises:
            InvariantError: if a block is missing, duplicated or misplaced
        """
        left_seen = [b.id for b, _ in self.exact_matches]
        left_seen += [b.id for b, _ in self.modified_pairs]
        left_seen += [b.id for b in self.left_unmatched]
        right_seen = [b.id for _, b in self.exact_matches]
        right_seen += [b.id for _, b in self.modified_pairs]
        right_seen += [b.id for b in self.right_unmatched]

        for side, seen, blocks in (('left', left_seen, left_blocks),
                                   ('right', right_seen, right_blocks)):
            if len(seen) != len(set(seen)):
                raise InvariantError(f"Block referenced twice on {side} side",
                                     side=side)
            if sorted(seen) != sorted(b.id for b in blocks):
                raise InvariantError(
                    f"Match result does not partition the {side} blocks",
                    side=side, expected=len(blocks), actual=len(seen))

        for left, right in self.exact_matches + self.modified_pairs:
            if left.type is not right.type:
                raise InvariantError(
                    f"Matched blocks of different types: {left.id} / {right.id}")

    def stats(self) -> Dict[str, int]:
        return {
            'exact': len(self.exact_matches),
            'modified': len(self.modified_pairs),
            'deleted': len(self.left_unmatched),
            'added': len(self.right_unmatched)
        }


class DiffOpKind(Enum):
    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True)
class DiffOp:
    """One span of a character diff between two strings."""
    kind: DiffOpKind
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind.value, 'text': self.text}


@dataclass
class ComparisonSummary:
    """Counts of added, deleted and modified blocks."""
    additions: int = 0
    deletions: int = 0
    changes: int = 0

    @property
    def total(self) -> int:
        return self.additions + self.deletions + self.changes

    def to_dict(self) -> Dict[str, int]:
        return {
            'additions': self.additions,
            'deletions': self.deletions,
            'changes': self.changes
        }


class OutputState(Enum):
    """Rendering state of one side of one classified block."""
    UNCHANGED = "unchanged"
    MODIFIED_PARAGRAPH = "paragraph-modified"  # word-level annotated
    MODIFIED = "modified"  # opaque table/image change
    DELETED = "deleted"
    ADDED = "added"
    PLACEHOLDER = "placeholder"


@dataclass
class OutputNode:
    """
    One rendered slot in the left or right result sequence.

    Placeholders carry no node and no segments, only the type and minimum
    dimensions of the block on the other side, so both panes stay aligned
    position-for-position.

    Attributes:
        state: What the renderer should show
        side: 'left' or 'right'
        block_type: Type of the block this slot stands for (None for an echo)
        node: Deep copy of the source element (None for placeholders)
        segments: Annotated spans for word-level diffs (equal/delete on the
                  left, equal/insert on the right)
        width: Minimum width in px
        height: Minimum height in px
        block_id: Id of the originating block
        placeholder_for: 'deleted' or 'added' for placeholders
    """
    state: OutputState
    side: str
    block_type: Optional[BlockType] = None
    node: Optional['DocumentNode'] = field(default=None, repr=False)
    segments: List[DiffOp] = field(default_factory=list)
    width: int = 0
    height: int = 0
    block_id: str = ""
    placeholder_for: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.state is OutputState.PLACEHOLDER

    @property
    def text(self) -> str:
        """Literal text with all annotations stripped."""
        if self.segments:
            return ''.join(op.text for op in self.segments)
        if self.node is None:
            return ''
        return self.node.text()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'state': self.state.value,
            'side': self.side,
            'block_type': self.block_type.value if self.block_type else None,
            'block_id': self.block_id,
            'text': self.text,
            'segments': [op.to_dict() for op in self.segments],
            'width': self.width,
            'height': self.height,
            'placeholder_for': self.placeholder_for
        }


@dataclass
class ClassifiedEntry:
    """A match entry together with the two output slots built for it."""
    entry: MatchEntry
    left_output: OutputNode
    right_output: OutputNode

    @property
    def sort_index(self) -> int:
        return self.entry.sort_index


@dataclass
class ComparisonResult:
    """
    Complete comparison result.

    Attributes:
        left_result: Ordered output slots for the left pane
        right_result: Ordered output slots for the right pane (same length)
        summary: Addition/deletion/change counts
        degraded: True when an internal failure forced an unchanged echo
    """
    left_result: List[OutputNode] = field(default_factory=list)
    right_result: List[OutputNode] = field(default_factory=list)
    summary: ComparisonSummary = field(default_factory=ComparisonSummary)
    degraded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'left_result': [n.to_dict() for n in self.left_result],
            'right_result': [n.to_dict() for n in self.right_result],
            'summary': self.summary.to_dict(),
            'degraded': self.degraded
        }
