"""Test doubles shared by the block comparison tests."""

from typing import Dict, List, Optional, Tuple

from block_compare.models import Block, BlockType
from block_compare.similarity import SimilarityService
from block_compare.tree import DocumentNode


class FakeNode(DocumentNode):
    """In-memory DocumentNode, independent of any markup parser."""

    def __init__(self, tag: str, text: str = '', attrs: Optional[Dict[str, str]] = None,
                 children: Optional[List['FakeNode']] = None):
        self._tag = tag
        self._text = text
        self.attrs = dict(attrs or {})
        self._children = list(children or [])

    @property
    def tag(self) -> str:
        return self._tag

    def children(self) -> List['FakeNode']:
        return list(self._children)

    def text(self) -> str:
        return self._text + ''.join(child.text() for child in self._children)

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attrs.get(name)

    def clone(self, deep: bool = True) -> 'FakeNode':
        children = [child.clone() for child in self._children] if deep else []
        return FakeNode(self._tag, self._text if deep else '', self.attrs, children)


class ScriptedSimilarity(SimilarityService):
    """Similarity service with fixed scores per (left_key, right_key)."""

    def __init__(self, scores: Dict[Tuple[str, str], float], default: float = 0.0):
        super().__init__()
        self.scores = scores
        self.default = default
        self.calls: List[Tuple[str, str]] = []

    def similarity(self, a: str, b: str) -> float:
        self.calls.append((a, b))
        return self.scores.get((a, b), self.default)


class BrokenSimilarity(SimilarityService):
    """Every diff call fails."""

    def similarity(self, a: str, b: str) -> float:
        raise RuntimeError("diff exploded")

    def word_diff(self, a: str, b: str):
        raise RuntimeError("diff exploded")


def make_block(block_type: BlockType, index: int, key: str, content: Optional[str] = None) -> Block:
    content = key if content is None else content
    node = FakeNode(block_type.tag, content)
    return Block(type=block_type, index=index, content=content, compare_key=key,
                 node=node, id=f"{block_type.value}-{index}-{key}")


def paragraphs(*keys: str) -> List[Block]:
    return [make_block(BlockType.PARAGRAPH, i, key) for i, key in enumerate(keys)]
