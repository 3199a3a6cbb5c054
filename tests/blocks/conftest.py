"""Shared fixtures for block comparison tests."""

import pytest

from block_compare.similarity import SimilarityService


@pytest.fixture
def similarity() -> SimilarityService:
    return SimilarityService()


@pytest.fixture
def mixed_left_html() -> str:
    return """
    <h1>Report</h1>
    <p>The quick brown fox jumps over the lazy dog.</p>
    <p>Obsolete warranty terms.</p>
    <table>
      <tr><th>Name</th><th>Qty</th></tr>
      <tr><td>Apples</td><td>3</td></tr>
    </table>
    <div><img src="chart-v1.png" width="640" height="480"></div>
    <p>Closing remarks stay the same.</p>
    """


@pytest.fixture
def mixed_right_html() -> str:
    return """
    <h1>Report</h1>
    <p>The quick brown fox leaps over the lazy dog.</p>
    <table>
      <tr><th>Name</th><th>Qty</th></tr>
      <tr><td>Apples</td><td>4</td></tr>
    </table>
    <div><img src="chart-v2.png" width="640" height="480"></div>
    <p>Closing remarks stay the same.</p>
    <p>A brand new appendix paragraph.</p>
    """
