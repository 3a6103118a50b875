"""Shared fixtures for the workbench tests."""

import pytest

from json_workbench.config.models import WorkbenchConfig
from json_workbench.services.session_store import SessionStore
from json_workbench.tools.workbench_tools import WorkbenchTools


@pytest.fixture
def store_document():
    """Small catalogue used by query and path tests."""
    return {
        "store": {
            "books": [
                {"title": "Sayings", "author": "Nigel", "price": 8.95, "tags": ["quotes"]},
                {"title": "Sword", "author": "Evelyn", "price": 12.99, "tags": []},
                {"title": "Moby Dick", "author": "Herman", "price": 8.99, "isbn": "0-553-21311-3"},
            ],
            "bicycle": {"color": "red", "price": 19.95},
        }
    }


@pytest.fixture
def products():
    """Root-level array of product records."""
    return [
        {"id": 1, "name": "Laptop", "price": 1200, "inStock": True},
        {"id": 2, "name": "Mouse", "price": 25, "inStock": False},
        {"id": 3, "name": "Monitor", "price": 300, "inStock": True},
    ]


@pytest.fixture
def config():
    return WorkbenchConfig()


@pytest.fixture
def tools(config):
    return WorkbenchTools(config, session_store=SessionStore(config))
