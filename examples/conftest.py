"""Shared pytest configuration for wren examples.

``example_app`` runs the ``app.py`` next to the requesting test file
and returns its ``app``. The module is executed again for every test,
so each test gets an unfrozen App with its own route tree.
"""

import runpy
from pathlib import Path

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest):
    """A fresh App from the sibling app.py."""
    app_path = Path(request.path).parent / "app.py"
    namespace = runpy.run_path(str(app_path), run_name=f"example_{app_path.parent.name}")
    return namespace["app"]
