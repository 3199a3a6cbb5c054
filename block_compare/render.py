"""
HTML Rendering
==============
Serializes OutputNode sequences back to markup with the CSS classes the
review UI styles:

    block-modified-paragraph  word-level diff (word-added / word-deleted spans)
    block-modified            opaque table/image change
    block-deleted / block-added
    block-placeholder         placeholder-deleted / placeholder-added

Every annotated element gets explicit px dimensions so both panes keep
the same vertical rhythm.
"""

import copy
import html
from typing import Iterable, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag

from .models import ComparisonResult, DiffOpKind, OutputNode, OutputState
from .tree import SoupNode

_LABELS = {
    OutputState.DELETED: 'deleted',
    OutputState.ADDED: 'added',
    OutputState.MODIFIED: 'modified',
}

_VOID_TAGS = frozenset({'img'})

_SPAN_CLASSES = {
    DiffOpKind.DELETE: 'word-deleted',
    DiffOpKind.INSERT: 'word-added',
}

BLOCK_COMPARE_CSS = """\
.word-added { background-color: #bbf7d0; color: #166534; }
.word-deleted { background-color: #fecaca; color: #991b1b; text-decoration: line-through; }
.block-modified-paragraph { background-color: #eff6ff; border-left: 4px solid #3b82f6; }
.block-deleted, .block-added, .block-modified {
    border-radius: 8px; padding: 12px; margin: 8px 0; position: relative;
}
.block-deleted { background-color: #fef2f2; border: 3px solid #ef4444; opacity: 0.9; }
.block-added { background-color: #f0fdf4; border: 3px solid #22c55e; }
.block-modified { background-color: #fffbeb; border: 3px solid #f59e0b; }
.block-label {
    position: absolute; top: 4px; right: 8px; font-size: 10px; font-weight: bold;
}
.block-label-deleted { color: #ef4444; }
.block-label-added { color: #22c55e; }
.block-label-modified { color: #f59e0b; }
.block-placeholder {
    margin: 8px 0; border: 3px dashed #d1d5db; border-radius: 8px; opacity: 0.7;
    display: flex; align-items: center; justify-content: center;
}
.placeholder-deleted { background-color: #fef2f2; border-color: #fca5a5; color: #991b1b; }
.placeholder-added { background-color: #f0fdf4; border-color: #86efac; color: #166534; }
.placeholder-caption { text-align: center; font-size: 12px; }
.placeholder-icon { font-size: 20px; font-weight: bold; }
.placeholder-type { font-size: 10px; opacity: 0.8; }
"""


def _dimension_style(width: int, height: int) -> str:
    return (f"width: {width}px; height: {height}px; min-width: {width}px; "
            f"min-height: {height}px; max-width: {width}px; box-sizing: border-box")


def _apply_dimensions(tag: Tag, width: int, height: int) -> None:
    existing = (tag.get('style') or '').strip().rstrip(';')
    dims = _dimension_style(width, height)
    tag['style'] = f"{existing}; {dims}" if existing else dims


def _add_class(tag: Tag, css_class: str) -> None:
    classes = tag.get('class') or []
    if isinstance(classes, str):
        classes = classes.split()
    tag['class'] = list(classes) + [css_class]


def _element(output: OutputNode) -> Tag:
    if not isinstance(output.node, SoupNode):
        raise TypeError(f"Cannot render {type(output.node).__name__} as HTML")
    # render from a copy so an OutputNode can be rendered more than once
    return copy.copy(output.node.element)


def _render_placeholder(output: OutputNode, factory: BeautifulSoup) -> Tag:
    kind = output.placeholder_for or 'added'
    removed = kind == 'deleted'

    placeholder = factory.new_tag('div', attrs={'class': ['block-placeholder', f'placeholder-{kind}']})
    _apply_dimensions(placeholder, output.width, output.height)

    caption = factory.new_tag('div', attrs={'class': 'placeholder-caption'})
    for css_class, text in (
        ('placeholder-icon', '−' if removed else '+'),
        ('placeholder-text', 'Content Removed' if removed else 'Content Added'),
        ('placeholder-type', f"({output.block_type.value.upper()})" if output.block_type else ''),
    ):
        part = factory.new_tag('div', attrs={'class': css_class})
        part.string = text
        caption.append(part)
    placeholder.append(caption)
    return placeholder


def _render_word_diff(output: OutputNode, factory: BeautifulSoup) -> Tag:
    element = _element(output)
    element.clear()
    for op in output.segments:
        if op.kind is DiffOpKind.EQUAL:
            element.append(NavigableString(op.text))
            continue
        span = factory.new_tag('span', attrs={'class': _SPAN_CLASSES[op.kind]})
        span.string = op.text
        element.append(span)
    _add_class(element, 'block-modified-paragraph')
    _apply_dimensions(element, output.width, output.height)
    return element


def _render_marked(output: OutputNode, factory: BeautifulSoup) -> Tag:
    label_name = _LABELS[output.state]
    element = _element(output)
    if element.name in _VOID_TAGS:
        # void elements cannot hold the label, so mark a wrapper instead
        wrapper = factory.new_tag('div')
        wrapper.append(element)
        element = wrapper
    _add_class(element, f'block-{label_name}')
    _apply_dimensions(element, output.width, output.height)

    label = factory.new_tag('div', attrs={'class': ['block-label', f'block-label-{label_name}']})
    label.string = label_name.upper()
    element.append(label)
    return element


def render_output(output: OutputNode) -> str:
    """Markup for one output slot."""
    factory = BeautifulSoup('', 'html.parser')

    if output.state is OutputState.PLACEHOLDER:
        return str(_render_placeholder(output, factory))
    if output.state is OutputState.UNCHANGED:
        if output.node is None:
            return ''
        if isinstance(output.node, SoupNode):
            return output.node.to_html()
        raise TypeError(f"Cannot render {type(output.node).__name__} as HTML")
    if output.state is OutputState.MODIFIED_PARAGRAPH:
        return str(_render_word_diff(output, factory))
    return str(_render_marked(output, factory))


def render_sequence(outputs: Iterable[OutputNode]) -> str:
    return ''.join(render_output(output) for output in outputs)


def render_result(result: ComparisonResult) -> Tuple[str, str]:
    """(left_html, right_html) for a comparison result."""
    return render_sequence(result.left_result), render_sequence(result.right_result)


def render_page(result: ComparisonResult, title: str = "Block Comparison") -> str:
    """Standalone side-by-side HTML page with the change summary."""
    left_html, right_html = render_result(result)
    summary = result.summary
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{html.escape(title)}</title>
<style>
body {{ font-family: sans-serif; margin: 24px; }}
.bc-summary {{ display: flex; gap: 24px; margin-bottom: 16px; }}
.bc-panes {{ display: grid; grid-template-columns: 1fr 1fr; gap: 16px; }}
.bc-pane {{ border: 1px solid #e5e7eb; padding: 12px; overflow-x: auto; }}
{BLOCK_COMPARE_CSS}</style>
</head>
<body>
<h1>{html.escape(title)}</h1>
<div class="bc-summary">
<div>Blocks Added: <strong>{summary.additions}</strong></div>
<div>Blocks Removed: <strong>{summary.deletions}</strong></div>
<div>Total Changes: <strong>{summary.changes}</strong></div>
</div>
<div class="bc-panes">
<div class="bc-pane bc-left">{left_html}</div>
<div class="bc-pane bc-right">{right_html}</div>
</div>
</body>
</html>
"""
