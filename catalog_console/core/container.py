"""
Conteneur d'injection de dépendances de la console.

Assemble settings → transport → passerelle → services. Le conteneur est construit explicitement par
le point d'entrée (ou par les tests) et fabrique des états de vue neufs pour chaque écran.
"""

from __future__ import annotations

import httpx

from catalog_console.core.settings import Settings, get_settings
from catalog_console.domain.view_state import (
    ArtifactViewState,
    ProjectsViewState,
    ReindexViewState,
    SearchViewState,
)
from catalog_console.infra.catalog_gateway import CatalogGateway
from catalog_console.infra.http_client import CatalogTransport
from catalog_console.services.artifact_controller import ArtifactController
from catalog_console.services.content_reconciler import ContentReconciler
from catalog_console.services.projects import ProjectService
from catalog_console.services.reindex import ReindexService
from catalog_console.services.search_normalizer import SearchService


class Container:
    """Composants centraux de la console."""

    def __init__(self, settings: Settings | None = None, client: httpx.Client | None = None):
        """Construit les composants; `client` permet d'injecter un client HTTP (tests)."""
        self.settings = settings or get_settings()
        self.transport = CatalogTransport(
            base_url=self.settings.CATALOG_API_URL,
            token=self.settings.CATALOG_API_TOKEN,
            client=client,
        )
        self.gateway = CatalogGateway(self.transport)
        self.reconciler = ContentReconciler(
            self.gateway, full_content_max_length=self.settings.FULL_CONTENT_MAX_LENGTH
        )
        self.artifacts = ArtifactController(self.gateway, self.reconciler)
        self.search = SearchService(self.gateway, max_top_k=self.settings.SEARCH_MAX_TOP_K)
        self.projects = ProjectService(self.gateway)
        self.reindex = ReindexService(self.gateway)

    def artifact_view(self, artifact_id: int | None = None) -> ArtifactViewState:
        """Nouvel état de détail d'artefact avec le plafond de contenu par défaut."""
        state = ArtifactViewState(max_content_length=str(self.settings.DEFAULT_MAX_CONTENT_LENGTH))
        if artifact_id is not None:
            state.navigate(artifact_id)
        return state

    def search_view(self, project_id: int | None = None) -> SearchViewState:
        """Nouvel état de recherche (statut APPROVED, top_k et extrait par défaut)."""
        return SearchViewState(
            project_id=project_id,
            top_k=str(self.settings.DEFAULT_TOP_K),
            max_snippet_length=str(self.settings.DEFAULT_MAX_SNIPPET_LENGTH),
        )

    def projects_view(self, name_filter: str = "") -> ProjectsViewState:
        """Nouvel état de liste des projets."""
        return ProjectsViewState(name_filter=name_filter)

    def reindex_view(self, project_id: int | None = None) -> ReindexViewState:
        """Nouvel état de réindexation (limite par défaut des settings)."""
        return ReindexViewState(
            project_id=project_id, limit=str(self.settings.DEFAULT_REINDEX_LIMIT)
        )

    def close(self) -> None:
        """Libère le client HTTP."""
        self.transport.close()
