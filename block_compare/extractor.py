"""
Block Extractor v1.0.0
======================
Walks a document tree depth-first and produces the ordered list of
paragraph, table and image blocks that the matcher compares.

A block nested inside an accepted paragraph or table is not extracted on
its own; the enclosing block already represents it.
"""

import re
from typing import List

from config_logging import get_logger, TreeError
from .models import Block, BlockType
from .tree import DocumentNode

logger = get_logger('block_compare.extractor')

MIN_WIDTH = 300
MIN_HEIGHT = 40
MIN_IMAGE_HEIGHT = 100

# Only these accepted blocks hide their descendants
_CONTAINER_TYPES = (BlockType.PARAGRAPH, BlockType.TABLE)
_ROW_GROUP_TAGS = ('thead', 'tbody', 'tfoot')
_CELL_TAGS = ('td', 'th')

_WHITESPACE = re.compile(r'\s+')


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to one space and trim."""
    return _WHITESPACE.sub(' ', text or '').strip()


def hash_key(value: str) -> str:
    """
    Stable 32-bit rolling hash (h * 31 + unit) over UTF-16 code units,
    absolute value in base 36.
    """
    h = 0
    data = value.encode('utf-16-le')
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return _to_base36(abs(h))


def _to_base36(number: int) -> str:
    digits = '0123456789abcdefghijklmnopqrstuvwxyz'
    if number == 0:
        return '0'
    out = []
    while number:
        number, rem = divmod(number, 36)
        out.append(digits[rem])
    return ''.join(reversed(out))


def table_rows(table: DocumentNode) -> List[List[DocumentNode]]:
    """Cells of each row that belongs to this table (not to nested tables)."""
    rows = []
    for child in table.children():
        if child.tag in _ROW_GROUP_TAGS:
            rows.extend(table_rows(child))
        elif child.tag == 'tr':
            rows.append([cell for cell in child.children() if cell.tag in _CELL_TAGS])
    return rows


def table_text(table: DocumentNode) -> str:
    """Row-major text: cells joined by tabs, rows joined by newlines."""
    return '\n'.join(
        '\t'.join(cell.text().strip() for cell in row)
        for row in table_rows(table)
    )


class BlockExtractor:
    """Turns a document tree into an ordered list of Blocks."""

    def extract(self, root: DocumentNode) -> List[Block]:
        """
        Extract blocks in document order.

        The root itself is never a block. Indexes start at 0 and follow
        acceptance order.

        Raises:
            TreeError: if the tree cannot be traversed
        """
        blocks: List[Block] = []
        try:
            self._walk(root, blocks)
        except TreeError:
            raise
        except (AttributeError, TypeError, ValueError) as e:
            raise TreeError(f"Malformed document tree: {e}") from e

        logger.debug(f"Extracted {len(blocks)} blocks",
                     paragraphs=sum(1 for b in blocks if b.type is BlockType.PARAGRAPH),
                     tables=sum(1 for b in blocks if b.type is BlockType.TABLE),
                     images=sum(1 for b in blocks if b.type is BlockType.IMAGE))
        return blocks

    def _walk(self, node: DocumentNode, blocks: List[Block]) -> None:
        # explicit stack keeps deep documents off the recursion limit
        stack = list(reversed(node.children()))
        while stack:
            current = stack.pop()
            block_type = BlockType.from_tag(current.tag)
            if block_type is not None:
                blocks.append(self.create_block(current, block_type, len(blocks)))
                if block_type in _CONTAINER_TYPES:
                    continue
            stack.extend(reversed(current.children()))

    def create_block(self, node: DocumentNode, block_type: BlockType, index: int) -> Block:
        """Build the Block for one accepted node."""
        if block_type is BlockType.IMAGE:
            content = node.get_attribute('src') or ''
            compare_key = content
        elif block_type is BlockType.TABLE:
            content = table_text(node)
            compare_key = content
        else:
            content = normalize_text(node.text())
            compare_key = content.lower()

        rendered_width, rendered_height = node.rendered_size()
        min_height = MIN_IMAGE_HEIGHT if block_type is BlockType.IMAGE else MIN_HEIGHT

        return Block(
            type=block_type,
            index=index,
            content=content,
            compare_key=compare_key,
            node=node,
            width=round(max(rendered_width, MIN_WIDTH)),
            height=round(max(rendered_height, min_height)),
            id=f"{block_type.value}-{index}-{hash_key(compare_key)}"
        )
