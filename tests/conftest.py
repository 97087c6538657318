"""Pytest configuration for tests.

No sys.path hacks - tests should import from the installed apiledger package.
"""

import pytest

from apiledger.kernel.components import ComponentKind
from apiledger.kernel.registry import DocumentBuildContext
from apiledger.kernel.resolver import ReferenceResolver
from apiledger.settings import DocumentSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep APILEDGER_* variables from the developer's shell out of tests."""
    import os
    for name in list(os.environ):
        if name.startswith("APILEDGER_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def context():
    """A fresh document build context targeting OpenAPI 3.1."""
    return DocumentBuildContext(DocumentSettings())


@pytest.fixture
def resolver(context):
    return ReferenceResolver(context)


@pytest.fixture
def example_value():
    """A dict-shaped example component."""
    return {"summary": "A pet", "value": {"name": "Rex", "tags": ["dog", "good"]}}


@pytest.fixture
def kinds():
    return [k for k in ComponentKind if k is not ComponentKind.MEDIA_TYPES]
