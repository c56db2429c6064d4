# ============================================================
# Module : catalog_console/infra/fake_catalog.py
# Objet  : Service catalogue factice en mémoire (FastAPI).
# Contexte : Dev local et tests de bout en bout de la console.
# Invariants :
#  - PATCH refusé (409) hors DRAFT; transitions à sens unique.
#  - Version incrémentée à chaque mutation acceptée.
# ============================================================
"""Implémentation factice et déterministe de l'API du service catalogue.

Reproduit le contrat consommé par la console: troncature du contenu (`maxContentLength`) et des
extraits (`maxSnippetLength`), édition réservée aux brouillons, transitions DRAFT → APPROVED →
DEPRECATED, recherche LIKE/VECTOR/HYBRID et réindexation avec bilan traités/échecs. Les erreurs
suivent l'enveloppe `{message, status, timestamp}`.

La "similarité vectorielle" est un simple recouvrement de jetons: aucun embedding n'est calculé.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from catalog_console.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_CREATED,
    HTTP_NOT_FOUND,
)
from catalog_console.domain.entities import (
    Artifact,
    ArtifactStatus,
    CreateArtifactPayload,
    MatchType,
    Project,
    SearchMode,
    UpdateArtifactPayload,
)

DEFAULT_MAX_CONTENT_LENGTH = 10_000
DEFAULT_MAX_SNIPPET_LENGTH = 240
DEFAULT_TOP_K = 10
MAX_TOP_K = 20
INITIAL_VERSION = 1

_TOKEN = re.compile(r"\w+", re.UNICODE)


class FakeCatalogError(Exception):
    """Erreur applicative rendue avec l'enveloppe standard."""

    def __init__(self, status: int, message: str) -> None:
        """Initialise l'erreur avec statut HTTP et message."""
        super().__init__(message)
        self.status = status
        self.message = message


class ProjectCreate(BaseModel):
    """Payload de création de projet."""

    name: str = ""


def _now() -> datetime:
    return datetime.now(UTC)


def _tokens(text: str) -> set[str]:
    return {t.lower() for t in _TOKEN.findall(text)}


def _paragraphs(content: str) -> list[str]:
    parts = [p.strip() for p in re.split(r"\n\s*\n", content)]
    return [p for p in parts if p] or [content]


@dataclass
class FakeCatalogStore:
    """Stockage mémoire des projets et artefacts (contenu complet)."""

    projects: dict[int, Project] = field(default_factory=dict)
    artifacts: dict[int, Artifact] = field(default_factory=dict)
    _next_project_id: int = 1
    _next_artifact_id: int = 1
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    # -------------------- Projets --------------------

    def list_projects(self, name: str | None) -> list[Project]:
        """Projets triés par id, filtrés par préfixe insensible à la casse."""
        prefix = (name or "").lower()
        return [
            p for _, p in sorted(self.projects.items()) if p.name.lower().startswith(prefix)
        ]

    def create_project(self, name: str) -> Project:
        """Crée un projet au nom unique."""
        cleaned = name.strip()
        if not cleaned:
            raise FakeCatalogError(HTTP_BAD_REQUEST, "Project name must not be blank")
        with self._lock:
            if any(p.name.lower() == cleaned.lower() for p in self.projects.values()):
                raise FakeCatalogError(HTTP_CONFLICT, f"Project '{cleaned}' already exists")
            project = Project(id=self._next_project_id, name=cleaned)
            self.projects[project.id] = project
            self._next_project_id += 1
        return project

    def get_project(self, project_id: int) -> Project:
        """Projet par id (404 si absent)."""
        project = self.projects.get(project_id)
        if project is None:
            raise FakeCatalogError(HTTP_NOT_FOUND, f"Project {project_id} not found")
        return project

    # -------------------- Artefacts --------------------

    def create_artifact(self, payload: CreateArtifactPayload) -> Artifact:
        """Crée un artefact en DRAFT, version initiale."""
        self.get_project(payload.project_id)
        if not payload.type.strip() or not payload.title.strip():
            raise FakeCatalogError(HTTP_BAD_REQUEST, "Artifact type and title are required")
        with self._lock:
            artifact = Artifact(
                id=self._next_artifact_id,
                project_id=payload.project_id,
                type=payload.type,
                title=payload.title,
                content=payload.content,
                status=ArtifactStatus.DRAFT,
                version=INITIAL_VERSION,
                updated_at=_now(),
                content_truncated=False,
                content_length=len(payload.content),
            )
            self.artifacts[artifact.id] = artifact
            self._next_artifact_id += 1
        return artifact

    def get_artifact(self, artifact_id: int) -> Artifact:
        """Artefact par id (404 si absent)."""
        artifact = self.artifacts.get(artifact_id)
        if artifact is None:
            raise FakeCatalogError(HTTP_NOT_FOUND, f"Artifact {artifact_id} not found")
        return artifact

    def update_artifact(self, artifact_id: int, payload: UpdateArtifactPayload) -> Artifact:
        """Applique une mise à jour partielle (DRAFT uniquement)."""
        changes = payload.model_dump(exclude_none=True)
        if not changes:
            raise FakeCatalogError(HTTP_BAD_REQUEST, "Nothing to update")
        with self._lock:
            current = self.get_artifact(artifact_id)
            if current.status != ArtifactStatus.DRAFT:
                raise FakeCatalogError(
                    HTTP_CONFLICT, f"Artifact {artifact_id} is {current.status.value}, not DRAFT"
                )
            if "content" in changes:
                changes["content_length"] = len(changes["content"])
            return self._mutate(current, **changes)

    def transition(
        self, artifact_id: int, expected: ArtifactStatus, target: ArtifactStatus
    ) -> Artifact:
        """Transition à sens unique `expected` → `target` (409 sinon)."""
        with self._lock:
            current = self.get_artifact(artifact_id)
            if current.status != expected:
                raise FakeCatalogError(
                    HTTP_CONFLICT,
                    f"Cannot move artifact {artifact_id} from {current.status.value} "
                    f"to {target.value}",
                )
            return self._mutate(current, status=target)

    def _mutate(self, current: Artifact, **changes: Any) -> Artifact:
        updated = current.model_copy(
            update={**changes, "version": current.version + 1, "updated_at": _now()}
        )
        self.artifacts[updated.id] = updated
        return updated

    def filtered(
        self, project_id: int, status: ArtifactStatus | None, artifact_type: str | None
    ) -> list[Artifact]:
        """Artefacts d'un projet filtrés par statut et type, triés par id."""
        return [
            a
            for _, a in sorted(self.artifacts.items())
            if a.project_id == project_id
            and (status is None or a.status == status)
            and (not artifact_type or a.type == artifact_type)
        ]


# -------------------- Rendu --------------------


def render_artifact(artifact: Artifact, max_content_length: int | None) -> dict[str, Any]:
    """Sérialise l'artefact en tronquant le contenu au plafond demandé."""
    cap = max_content_length or DEFAULT_MAX_CONTENT_LENGTH
    content = artifact.content[:cap]
    rendered = artifact.model_copy(
        update={
            "content": content,
            "content_length": len(artifact.content),
            "content_truncated": len(content) < len(artifact.content),
        }
    )
    return rendered.model_dump(mode="json", by_alias=True)


def _snippet_item(
    artifact: Artifact,
    source: str,
    match_type: MatchType,
    score: float | None,
    section_id: int | None,
    max_snippet_length: int,
) -> dict[str, Any]:
    snippet = source[:max_snippet_length]
    return {
        "id": artifact.id,
        "title": artifact.title,
        "snippet": snippet,
        "status": artifact.status.value,
        "snippetTruncated": len(snippet) < len(source),
        "snippetLength": len(source),
        "matchType": match_type.value,
        "score": score,
        "sectionId": section_id,
    }


def _like_matches(
    candidates: list[Artifact], query: str, max_snippet_length: int
) -> list[dict[str, Any]]:
    needle = query.strip().lower()
    out: list[dict[str, Any]] = []
    for a in candidates:
        haystack = a.content.lower()
        if needle and needle not in a.title.lower() and needle not in haystack:
            continue
        start = max(0, haystack.find(needle)) if needle else 0
        out.append(
            _snippet_item(a, a.content[start:], MatchType.LIKE, None, None, max_snippet_length)
        )
    return out


def _vector_matches(
    candidates: list[Artifact], query: str, max_snippet_length: int
) -> list[dict[str, Any]]:
    wanted = _tokens(query)
    if not wanted:
        return []
    scored: list[tuple[float, int, dict[str, Any]]] = []
    for a in candidates:
        best_score, best_section, best_text = 0.0, None, ""
        for index, paragraph in enumerate(_paragraphs(a.content), start=1):
            overlap = len(wanted & _tokens(paragraph)) / len(wanted)
            if overlap > best_score:
                best_score, best_section, best_text = overlap, index, paragraph
        if best_score > 0:
            item = _snippet_item(
                a, best_text, MatchType.VECTOR, round(best_score, 6), best_section,
                max_snippet_length,
            )
            scored.append((best_score, a.id, item))
    scored.sort(key=lambda s: (-s[0], s[1]))
    return [item for _, _, item in scored]


# -------------------- Application --------------------


def _error_body(status: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"message": message, "status": status, "timestamp": _now().isoformat()},
    )


def create_fake_catalog_app(store: FakeCatalogStore | None = None, prefix: str = "") -> FastAPI:
    """Construit l'application FastAPI du catalogue factice.

    Args:
        store: stockage à utiliser (un stockage vide par défaut).
        prefix: préfixe des routes (ex: `/api`).
    """
    store = store or FakeCatalogStore()
    app = FastAPI(title="fake-catalog")
    app.state.store = store
    router = APIRouter(prefix=prefix)

    @app.exception_handler(FakeCatalogError)
    def _handle_catalog_error(request: Request, exc: FakeCatalogError) -> JSONResponse:
        return _error_body(exc.status, exc.message)

    @app.exception_handler(RequestValidationError)
    def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_body(HTTP_BAD_REQUEST, "Invalid request parameters")

    @router.get("/projects")
    def list_projects(name: str | None = None) -> list[dict]:
        return [p.model_dump(by_alias=True) for p in store.list_projects(name)]

    @router.post("/projects", status_code=HTTP_CREATED)
    def create_project(body: ProjectCreate) -> dict:
        return store.create_project(body.name).model_dump(by_alias=True)

    @router.get("/projects/{project_id}")
    def get_project(project_id: int) -> dict:
        return store.get_project(project_id).model_dump(by_alias=True)

    @router.get("/artifacts/search")
    def search_artifacts(
        project_id: int = Query(alias="projectId"),
        query: str = "",
        status: ArtifactStatus | None = None,
        type: str | None = None,  # noqa: A002
        mode: SearchMode | None = None,
        top_k: int = Query(default=DEFAULT_TOP_K, alias="topK", ge=1, le=MAX_TOP_K),
        max_snippet_length: int = Query(
            default=DEFAULT_MAX_SNIPPET_LENGTH, alias="maxSnippetLength", ge=1
        ),
    ) -> list[dict]:
        store.get_project(project_id)
        candidates = store.filtered(project_id, status, type)
        strategy = mode or SearchMode.HYBRID
        results: list[dict[str, Any]] = []
        if strategy in (SearchMode.VECTOR, SearchMode.HYBRID):
            results.extend(_vector_matches(candidates, query, max_snippet_length))
        if strategy in (SearchMode.LIKE, SearchMode.HYBRID):
            seen = {r["id"] for r in results}
            results.extend(
                r
                for r in _like_matches(candidates, query, max_snippet_length)
                if r["id"] not in seen
            )
        return results[:top_k]

    @router.post("/artifacts", status_code=HTTP_CREATED)
    def create_artifact(
        body: CreateArtifactPayload,
        max_content_length: int | None = Query(default=None, alias="maxContentLength", ge=1),
    ) -> dict:
        return render_artifact(store.create_artifact(body), max_content_length)

    @router.get("/artifacts/{artifact_id}")
    def get_artifact(
        artifact_id: int,
        max_content_length: int | None = Query(default=None, alias="maxContentLength", ge=1),
    ) -> dict:
        return render_artifact(store.get_artifact(artifact_id), max_content_length)

    @router.patch("/artifacts/{artifact_id}")
    def patch_artifact(
        artifact_id: int,
        body: UpdateArtifactPayload,
        max_content_length: int | None = Query(default=None, alias="maxContentLength", ge=1),
    ) -> dict:
        return render_artifact(store.update_artifact(artifact_id, body), max_content_length)

    @router.post("/artifacts/{artifact_id}/approve")
    def approve_artifact(
        artifact_id: int,
        max_content_length: int | None = Query(default=None, alias="maxContentLength", ge=1),
    ) -> dict:
        updated = store.transition(artifact_id, ArtifactStatus.DRAFT, ArtifactStatus.APPROVED)
        return render_artifact(updated, max_content_length)

    @router.post("/artifacts/{artifact_id}/deprecate")
    def deprecate_artifact(
        artifact_id: int,
        max_content_length: int | None = Query(default=None, alias="maxContentLength", ge=1),
    ) -> dict:
        updated = store.transition(
            artifact_id, ArtifactStatus.APPROVED, ArtifactStatus.DEPRECATED
        )
        return render_artifact(updated, max_content_length)

    @router.post("/admin/projects/{project_id}/reindex")
    def reindex_project(
        project_id: int,
        status: ArtifactStatus = ArtifactStatus.APPROVED,
        type: str | None = None,  # noqa: A002
        limit: int | None = Query(default=None, ge=1),
    ) -> dict:
        store.get_project(project_id)
        selected = store.filtered(project_id, status, type)
        if limit is not None:
            selected = selected[:limit]
        failed = sum(1 for a in selected if not a.content.strip())
        return {
            "projectId": project_id,
            "status": status.value,
            "type": type,
            "processed": len(selected) - failed,
            "failed": failed,
        }

    app.include_router(router)
    return app
