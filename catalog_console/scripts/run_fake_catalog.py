"""
Script de serveur de développement avec catalogue factice.

Ce script lance le service catalogue factice en mémoire (préfixe `/api`) pour utiliser la console
en local sans dépendance externe. `--seed` crée un projet et quelques artefacts de démonstration.
"""

from __future__ import annotations

import argparse

import uvicorn

from catalog_console.core.logging import setup_logging
from catalog_console.core.settings import get_settings
from catalog_console.domain.entities import ArtifactStatus, CreateArtifactPayload
from catalog_console.infra.fake_catalog import FakeCatalogStore, create_fake_catalog_app


def seed(store: FakeCatalogStore) -> None:
    """Remplit le stockage avec un projet de démonstration."""
    project = store.create_project("Docs")
    intro = store.create_artifact(
        CreateArtifactPayload(
            project_id=project.id,
            type="guide",
            title="Intro",
            content="Welcome to the catalog.\n\nArtifacts move from DRAFT to APPROVED.",
        )
    )
    store.transition(intro.id, ArtifactStatus.DRAFT, ArtifactStatus.APPROVED)
    store.create_artifact(
        CreateArtifactPayload(
            project_id=project.id,
            type="faq",
            title="Long FAQ",
            content="\n\n".join(f"Question {i}: how does truncation work?" for i in range(2000)),
        )
    )


def main() -> None:
    """
    Point d'entrée principal pour le serveur catalogue factice.

    Lance l'application FastAPI factice avec uvicorn sur l'hôte/port configurés.
    """
    settings = get_settings()
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default=settings.FAKE_CATALOG_HOST)
    parser.add_argument("--port", type=int, default=settings.FAKE_CATALOG_PORT)
    parser.add_argument("--seed", action="store_true", help="Create demo project and artifacts")
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)
    store = FakeCatalogStore()
    if args.seed:
        seed(store)
    app = create_fake_catalog_app(store, prefix="/api")
    uvicorn.run(app, host=args.host, port=args.port, reload=False)


if __name__ == "__main__":  # pragma: no cover - script entry
    main()
