# ============================================================
# Module : catalog_console/infra/catalog_gateway.py
# Objet  : Opérations typées du service catalogue.
# Invariants :
#  - Aucune logique métier ici: mise en forme des paramètres uniquement.
#  - Les erreurs du transport remontent telles quelles.
# ============================================================
"""Passerelle typée vers le service catalogue (projets, artefacts, réindexation)."""

from __future__ import annotations

from typing import Any

from catalog_console.domain.entities import (
    Artifact,
    CreateArtifactPayload,
    Project,
    ReindexParams,
    ReindexResult,
    SearchArtifactsParams,
    SearchResultItem,
    UpdateArtifactPayload,
)
from catalog_console.infra.http_client import CatalogTransport


class CatalogGateway:
    """Correspondance 1:1 entre opérations typées et appels du transport."""

    def __init__(self, transport: CatalogTransport) -> None:
        """Construit la passerelle au-dessus d'un transport."""
        self._transport = transport

    # -------------------- Projets --------------------

    def list_projects(self, name_prefix: str | None = None) -> list[Project]:
        """Liste les projets, filtrés par préfixe de nom si fourni."""
        data = self._transport.get("/projects", {"name": name_prefix})
        return [Project.model_validate(item) for item in _as_list(data)]

    def create_project(self, name: str) -> Project:
        """Crée un projet."""
        data = self._transport.post("/projects", {"name": name})
        return Project.model_validate(data)

    def get_project(self, project_id: int) -> Project:
        """Charge un projet par identifiant."""
        return Project.model_validate(self._transport.get(f"/projects/{project_id}"))

    # -------------------- Artefacts --------------------

    def search_artifacts(self, params: SearchArtifactsParams) -> list[SearchResultItem]:
        """Recherche d'artefacts; `query` est transmis même vide."""
        data = self._transport.get(
            "/artifacts/search",
            {
                "projectId": params.project_id,
                "query": params.query,
                "status": params.status,
                "type": params.type,
                "mode": params.mode,
                "topK": params.top_k,
                "maxSnippetLength": params.max_snippet_length,
            },
        )
        return [SearchResultItem.model_validate(item) for item in _as_list(data)]

    def create_artifact(
        self, payload: CreateArtifactPayload, max_content_length: int | None = None
    ) -> Artifact:
        """Crée un artefact (statut DRAFT imposé par le service)."""
        data = self._transport.post(
            "/artifacts",
            payload.model_dump(by_alias=True),
            {"maxContentLength": max_content_length},
        )
        return Artifact.model_validate(data)

    def get_artifact(self, artifact_id: int, max_content_length: int | None = None) -> Artifact:
        """Charge un artefact; le contenu renvoyé est plafonné à `max_content_length`."""
        data = self._transport.get(
            f"/artifacts/{artifact_id}", {"maxContentLength": max_content_length}
        )
        return Artifact.model_validate(data)

    def patch_artifact(
        self,
        artifact_id: int,
        payload: UpdateArtifactPayload,
        max_content_length: int | None = None,
    ) -> Artifact:
        """Mise à jour partielle (409 si l'artefact n'est pas en DRAFT)."""
        data = self._transport.patch(
            f"/artifacts/{artifact_id}",
            payload.to_body(),
            {"maxContentLength": max_content_length},
        )
        return Artifact.model_validate(data)

    def approve_artifact(
        self, artifact_id: int, max_content_length: int | None = None
    ) -> Artifact | None:
        """Transition DRAFT → APPROVED (POST sans corps)."""
        return self._transition(artifact_id, "approve", max_content_length)

    def deprecate_artifact(
        self, artifact_id: int, max_content_length: int | None = None
    ) -> Artifact | None:
        """Transition APPROVED → DEPRECATED (POST sans corps)."""
        return self._transition(artifact_id, "deprecate", max_content_length)

    def _transition(
        self, artifact_id: int, action: str, max_content_length: int | None
    ) -> Artifact | None:
        data = self._transport.post(
            f"/artifacts/{artifact_id}/{action}",
            None,
            {"maxContentLength": max_content_length},
        )
        # Le service peut répondre sans contenu: l'appelant recharge l'état.
        if not data:
            return None
        return Artifact.model_validate(data)

    # -------------------- Administration --------------------

    def reindex_project(
        self, project_id: int, params: ReindexParams | None = None
    ) -> ReindexResult:
        """Déclenche la réindexation d'un projet (filtres statut/type/limite optionnels)."""
        params = params or ReindexParams()
        data = self._transport.post(
            f"/admin/projects/{project_id}/reindex",
            None,
            {"status": params.status, "type": params.type, "limit": params.limit},
        )
        return ReindexResult.model_validate(data)


def _as_list(data: Any) -> list[Any]:
    return list(data) if data else []
