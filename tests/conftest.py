"""Pytest configuration and shared fixtures."""

import pytest
from rest_framework.test import APIClient

from studio.stores.django_store import DjangoStudioStore
from studio.stores.memory_store import InMemoryStudioStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def store() -> InMemoryStudioStore:
    return InMemoryStudioStore()


@pytest.fixture
def django_store(db) -> DjangoStudioStore:
    return DjangoStudioStore()
