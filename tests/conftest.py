"""Configuration de test pour pytest avec gestion des chemins.

Ce module configure pytest pour résoudre les imports `catalog_console` en ajoutant la racine du
projet au sys.path, et fournit le catalogue factice branché sur la console via `TestClient`.
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so that
# imports like `from catalog_console...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from catalog_console.core.container import Container  # noqa: E402
from catalog_console.core.settings import Settings  # noqa: E402
from catalog_console.infra.fake_catalog import (  # noqa: E402
    FakeCatalogStore,
    create_fake_catalog_app,
)


@pytest.fixture
def settings() -> Settings:
    """Settings de test pointant vers le serveur de test FastAPI."""
    return Settings(CATALOG_API_URL="http://testserver", CATALOG_API_TOKEN=None)


@pytest.fixture
def fake_store() -> FakeCatalogStore:
    """Stockage vide du catalogue factice."""
    return FakeCatalogStore()


@pytest.fixture
def fake_client(fake_store: FakeCatalogStore):
    """Client HTTP (TestClient) vers le catalogue factice."""
    with TestClient(create_fake_catalog_app(fake_store)) as client:
        yield client


@pytest.fixture
def container(settings: Settings, fake_client: TestClient) -> Container:
    """Conteneur complet de la console branché sur le catalogue factice."""
    return Container(settings, client=fake_client)
