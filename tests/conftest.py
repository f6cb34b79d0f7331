"""Shared pytest fixtures for dimap tests."""

import pytest

from dimap import Registry


@pytest.fixture()
def registry() -> Registry:
    """Empty root registry."""
    return Registry()


@pytest.fixture()
def parent_registry() -> Registry:
    """Empty registry used as the parent of ``child_registry``."""
    return Registry()


@pytest.fixture()
def child_registry(parent_registry: Registry) -> Registry:
    """Empty registry linked to ``parent_registry``."""
    return Registry(parent=parent_registry)
