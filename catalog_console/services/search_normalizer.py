# ============================================================
# Module : catalog_console/services/search_normalizer.py
# Objet  : Mise en forme des recherches et normalisation des résultats.
# Invariants :
#  - `query` toujours transmis, même vide.
#  - top_k borné à [1, 20]; saisie invalide => défaut serveur.
#  - Score/section absents affichés "unavailable", jamais 0.
# ============================================================
"""Normalisation des requêtes de recherche d'artefacts et de leurs résultats.

Deux types de correspondance (LIKE, VECTOR), un score de pertinence optionnel et un localisateur de
section optionnel sont ramenés à une seule forme affichable (`SearchResultView`).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import structlog

from catalog_console.domain.entities import (
    ArtifactStatus,
    MatchType,
    SearchArtifactsParams,
    SearchMode,
    SearchResultItem,
)
from catalog_console.domain.errors import CatalogError, ClientValidationError, to_ui_error_message
from catalog_console.domain.view_state import SearchViewState
from catalog_console.infra.catalog_gateway import CatalogGateway
from catalog_console.services.inputs import blank_to_none, parse_positive
from catalog_console.services.outcomes import ActionOutcome, ActionResult

MAX_TOP_K = 20
MIN_TOP_K = 1
UNAVAILABLE = "unavailable"
SELECT_PROJECT_MESSAGE = "Select a project before searching."

log = structlog.get_logger(__name__)


def clamp_top_k(raw: object, max_top_k: int = MAX_TOP_K) -> int | None:
    """Borne top_k dans [1, max_top_k]; valeur non finie ou <= 0 => None (défaut serveur)."""
    value = parse_positive(raw)
    if value is None:
        return None
    return min(max_top_k, max(MIN_TOP_K, int(value)))


def parse_mode(raw: SearchMode | str | None) -> SearchMode | None:
    """Mode de recherche; vide => None (le service choisit sa stratégie)."""
    if raw is None or isinstance(raw, SearchMode):
        return raw
    cleaned = raw.strip().upper()
    if not cleaned:
        return None
    try:
        return SearchMode(cleaned)
    except ValueError as exc:
        raise ClientValidationError(f"Unknown search mode: {raw}") from exc


def build_search_params(
    project_id: int | None,
    query: str | None = "",
    status: ArtifactStatus | None = ArtifactStatus.APPROVED,
    artifact_type: str | None = None,
    mode: SearchMode | str | None = None,
    top_k: object = None,
    max_snippet_length: object = None,
    max_top_k: int = MAX_TOP_K,
) -> SearchArtifactsParams:
    """Construit les paramètres de recherche à partir de saisies brutes.

    Paramètres:
    - project_id: projet ciblé (obligatoire).
    - query: texte libre, transmis tel quel même vide.
    - status: filtre de statut; APPROVED par défaut, None pour ne pas filtrer.
    - artifact_type: nettoyé, omis si vide.
    - mode: LIKE/VECTOR/HYBRID, omis si absent.
    - top_k: borné à [1, max_top_k], omis si invalide.
    - max_snippet_length: transmis tel quel si > 0, sinon omis.

    Raises:
        ClientValidationError: projet absent ou mode inconnu.
    """
    if project_id is None:
        raise ClientValidationError(SELECT_PROJECT_MESSAGE)
    return SearchArtifactsParams(
        project_id=project_id,
        query=query or "",
        status=status,
        type=blank_to_none(artifact_type),
        mode=parse_mode(mode),
        top_k=clamp_top_k(top_k, max_top_k),
        max_snippet_length=parse_positive(max_snippet_length),
    )


def format_score(score: float | None) -> str:
    """Score à 4 décimales; absent ou NaN => "unavailable"."""
    if score is None or not math.isfinite(score):
        return UNAVAILABLE
    return f"{score:.4f}"


def format_section(section_id: int | None) -> str:
    """Identifiant de section, ou "unavailable"."""
    return UNAVAILABLE if section_id is None else str(section_id)


@dataclass(frozen=True)
class SearchResultView:
    """Forme unique d'affichage d'un résultat de recherche."""

    key: str
    id: int
    title: str
    snippet: str
    status: ArtifactStatus
    match_type: MatchType
    score: str
    section: str
    snippet_length: int
    snippet_note: str


def normalize_item(item: SearchResultItem) -> SearchResultView:
    """Normalise un résultat brut; la clé distingue plusieurs sections d'un même artefact."""
    section_key = "na" if item.section_id is None else str(item.section_id)
    return SearchResultView(
        key=f"{item.id}-{section_key}",
        id=item.id,
        title=item.title,
        snippet=item.snippet,
        status=item.status,
        match_type=item.match_type,
        score=format_score(item.score),
        section=format_section(item.section_id),
        snippet_length=item.snippet_length,
        snippet_note="Snippet was truncated" if item.snippet_truncated else "Full snippet shown",
    )


class SearchService:
    """Recherche d'artefacts pour l'écran de recherche."""

    def __init__(self, gateway: CatalogGateway, max_top_k: int = MAX_TOP_K) -> None:
        """Initialise le service avec la passerelle et la borne haute de top_k."""
        self._gateway = gateway
        self.max_top_k = max_top_k

    def search(self, params: SearchArtifactsParams) -> list[SearchResultView]:
        """Exécute la recherche et normalise les résultats."""
        items = self._gateway.search_artifacts(params)
        return [normalize_item(item) for item in items]

    def run(self, state: SearchViewState) -> ActionResult:
        """Exécute la recherche décrite par l'état de vue et y range les résultats."""
        if state.searching:
            return ActionResult(ActionOutcome.BUSY)
        try:
            params = build_search_params(
                project_id=state.project_id,
                query=state.query,
                status=state.status,
                artifact_type=state.type,
                mode=state.mode,
                top_k=state.top_k,
                max_snippet_length=state.max_snippet_length,
                max_top_k=self.max_top_k,
            )
        except ClientValidationError as exc:
            state.error = str(exc)
            return ActionResult(ActionOutcome.FAILED, state.error)

        ticket = state.begin_request()
        state.searching = True
        state.error = None
        try:
            results = self.search(params)
        except CatalogError as exc:
            message = to_ui_error_message(exc)
            if state.is_current(ticket):
                state.error = message
                state.results = []
            return ActionResult(ActionOutcome.FAILED, message)
        finally:
            state.searching = False
        if not state.is_current(ticket):
            log.info("stale_response_discarded", project_id=ticket.entity_id)
            return ActionResult(ActionOutcome.STALE)
        state.results = results
        log.info(
            "artifact_search",
            project_id=params.project_id,
            mode=params.mode.value if params.mode else None,
            results=len(results),
        )
        return ActionResult(ActionOutcome.DONE, value=results)
