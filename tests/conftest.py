"""Pytest fixtures for critical-css-inliner tests."""

from unittest import mock

import pytest

from critical_css_inliner.pipeline import HTMLEventPayload
from critical_css_inliner.storage.memory import MemoryAssetStore


@pytest.fixture
def sample_html():
    """Generated page linking two stylesheets."""
    return (
        "<!DOCTYPE html><html><head>"
        '<link rel="stylesheet" href="/static/a.css">'
        '<link rel="stylesheet" href="/static/b.css">'
        "</head><body><h1>Hello</h1></body></html>"
    )


@pytest.fixture
def asset_store():
    """In-memory build with two stylesheets and a script."""
    return MemoryAssetStore(
        {
            "a.css": "h1 { color: red; }",
            "b.js": "console.log(1);",
            "b.css": "p { margin: 0; }",
        },
        base_path="/build",
    )


@pytest.fixture
def payload(sample_html):
    """HTML event for index.html with a mixed manifest."""
    return HTMLEventPayload(
        output_name="index.html",
        html=sample_html,
        asset_json='["a.css", "b.js", "b.css"]',
    )


@pytest.fixture
def mock_extractor():
    """Extractor whose generate() returns fixed HTML."""
    extractor = mock.Mock()
    extractor.generate = mock.AsyncMock(return_value="<html>critical</html>")
    return extractor
