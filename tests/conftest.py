"""
Shared pytest fixtures for Refinery tests.

Provides reusable fixtures for:
- Configuration and settings
- Sample documents
- Temporary resources
- Global state resets
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from refinery.config import ExtractorSettings, reset_settings
from refinery.utils.logging import reset_logging
from refinery.utils.metrics import Metrics


@pytest.fixture(autouse=True)
def reset_global_state():
    """
    Reset cached settings, logging and metrics around each test.

    This ensures tests are isolated and don't share global state.
    """
    reset_settings()
    reset_logging()
    Metrics.reset()
    yield
    reset_settings()
    reset_logging()
    Metrics.reset()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def extractor_settings() -> ExtractorSettings:
    """Provide default extractor settings."""
    return ExtractorSettings()


@pytest.fixture
def sample_html() -> str:
    """
    An article page with a navigation list, the article and a footer.

    The article container holds a heading that repeats the page title
    and two multi-sentence paragraphs.
    """
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <title>My Great Article</title>
        <style>body { color: red; }</style>
    </head>
    <body>
        <ul class="nav">
            <li><a href="/">Home</a></li>
            <li><a href="/world">World News</a></li>
            <li><a href="/contact">Contact</a></li>
        </ul>
        <div class="content">
            <h1>My Great Article</h1>
            <p>Rivers carve valleys over thousands of years. The slow work of water
            shapes stone into canyons that later generations admire. Every bend
            tells a story about floods, droughts and the patience of geology.</p>
            <p>Scientists measure sediment to estimate how fast a canyon grows. Their
            estimates vary widely because climate changes the flow. Still, the
            overall picture is one of steady, almost invisible progress.</p>
        </div>
        <footer>
            <a href="/privacy">Privacy</a>
            <a href="/terms">Terms</a>
        </footer>
        <script>console.log('tracking');</script>
    </body>
    </html>
    """


@pytest.fixture
def comments_html() -> str:
    """A page where a comment thread competes with a single long paragraph."""
    comment = "<div class=\"comment\"><p>{}</p></div>"
    comments = "".join(
        comment.format(" ".join(f"remark{i}x{j}" for j in range(10)))
        for i in range(5)
    )
    article = " ".join(f"prose{j}" for j in range(50))
    return (
        "<html><body>"
        f"<div class=\"comments\">{comments}</div>"
        f"<div class=\"article\"><p>{article}</p></div>"
        "</body></html>"
    )
