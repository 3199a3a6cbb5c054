"""
Document Tree Interface
=======================
Minimal tree capability the comparison engine needs: ordered element
children, tag inspection, text content, attribute lookup and deep copy.

SoupNode implements it over BeautifulSoup so any HTML fragment can be
compared; other parsed-markup representations only need to subclass
DocumentNode.
"""

import copy
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from config_logging import TreeError

# "120", "120px", "120.5px" -> 120 / 120.5; percentages and ems are ignored
_PX_VALUE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*(?:px)?\s*$', re.IGNORECASE)
_STYLE_DECL = re.compile(r'(?:^|;)\s*(width|height)\s*:\s*([^;]+)', re.IGNORECASE)

_DOCTYPE = '<!DOCTYPE html>'


def _parse_px(value: Optional[str]) -> float:
    if not value:
        return 0.0
    match = _PX_VALUE.match(value)
    return float(match.group(1)) if match else 0.0


class DocumentNode(ABC):
    """Abstract element of a parsed document."""

    @property
    @abstractmethod
    def tag(self) -> str:
        """Lower-case tag name ('' for a document root)."""

    @abstractmethod
    def children(self) -> List['DocumentNode']:
        """Element children in document order (text nodes excluded)."""

    @abstractmethod
    def text(self) -> str:
        """Concatenated text content of the whole subtree."""

    @abstractmethod
    def get_attribute(self, name: str) -> Optional[str]:
        """Attribute value, or None when absent."""

    @abstractmethod
    def clone(self, deep: bool = True) -> 'DocumentNode':
        """Independent copy; a shallow clone keeps attributes but no children."""

    def rendered_size(self) -> Tuple[float, float]:
        """
        Best-known rendered (width, height) in px, 0 where unknown.

        Markup carries no layout, so this reads the width/height attributes
        and any px values in the inline style.
        """
        width = _parse_px(self.get_attribute('width'))
        height = _parse_px(self.get_attribute('height'))
        style = self.get_attribute('style') or ''
        for prop, value in _STYLE_DECL.findall(style):
            px = _parse_px(value)
            if prop.lower() == 'width':
                width = max(width, px)
            else:
                height = max(height, px)
        return width, height


class SoupNode(DocumentNode):
    """DocumentNode backed by a BeautifulSoup Tag (or the soup itself)."""

    def __init__(self, element: Tag):
        if not isinstance(element, Tag):
            raise TreeError(f"Expected a BeautifulSoup Tag, got {type(element).__name__}")
        self.element = element

    def __repr__(self) -> str:
        return f"SoupNode(<{self.tag or '#root'}>)"

    @property
    def is_root(self) -> bool:
        return isinstance(self.element, BeautifulSoup)

    @property
    def tag(self) -> str:
        if self.is_root:
            return ''
        return (self.element.name or '').lower()

    def children(self) -> List['SoupNode']:
        return [SoupNode(child) for child in self.element.children
                if isinstance(child, Tag)]

    def text(self) -> str:
        return self.element.get_text()

    def get_attribute(self, name: str) -> Optional[str]:
        value = self.element.get(name)
        if isinstance(value, list):
            # multi-valued attributes such as class
            return ' '.join(value)
        return value

    def clone(self, deep: bool = True) -> 'SoupNode':
        if self.is_root:
            root = _empty_root()
            if deep:
                for child in self.element.contents:
                    root.append(copy.copy(child))
            return SoupNode(root)
        if deep:
            return SoupNode(copy.copy(self.element))
        attrs = {key: list(value) if isinstance(value, list) else value
                 for key, value in self.element.attrs.items()}
        return SoupNode(_empty_root().new_tag(self.element.name, attrs=attrs))

    def to_html(self) -> str:
        """Outer markup (inner markup for a document root)."""
        if self.is_root:
            return self.element.decode_contents()
        return str(self.element)


def _empty_root() -> BeautifulSoup:
    # a bare container: no <html>/<head>/<body> wrapper, nothing parsed
    return BeautifulSoup('', 'html.parser')


def parse_html(markup: str) -> SoupNode:
    """
    Parse an HTML fragment into a root SoupNode.

    The markup goes through html5lib, so implicit end tags behave as in a
    browser (`<p>A<p>B` is two paragraphs, a `<table>` closes an open
    `<p>`). The document wrapper html5lib adds is dropped; the root holds
    the fragment's own top-level nodes.

    Raises:
        TreeError: if the markup is not a string
    """
    if not isinstance(markup, str):
        raise TreeError(f"HTML markup must be a string, got {type(markup).__name__}")

    # no-quirks mode, where <table> closes an open <p>
    document = BeautifulSoup(_DOCTYPE + markup, 'html5lib')
    root = _empty_root()
    for section in (document.head, document.body):
        if section is None:
            continue
        for child in list(section.contents):
            root.append(child.extract())
    return SoupNode(root)
