"""Service de l'écran de réindexation d'un projet.

Le bilan expose séparément les artefacts traités et en échec: un échec partiel n'est jamais réduit à
un simple booléen.
"""

from __future__ import annotations

import structlog

from catalog_console.domain.entities import ReindexParams, ReindexResult
from catalog_console.domain.errors import CatalogError, to_ui_error_message
from catalog_console.domain.view_state import ReindexViewState
from catalog_console.infra.catalog_gateway import CatalogGateway
from catalog_console.services.inputs import blank_to_none, parse_positive_int
from catalog_console.services.outcomes import ActionOutcome, ActionResult

PROJECT_REQUIRED_MESSAGE = "Project is required."

log = structlog.get_logger(__name__)


def summarize(result: ReindexResult) -> str:
    """Ligne de bilan affichable."""
    scope = result.status if not result.type else f"{result.status}/{result.type}"
    return (
        f"Project #{result.project_id} ({scope}): "
        f"processed={result.processed} failed={result.failed}"
    )


class ReindexService:
    """Déclenche la réindexation d'un projet depuis l'état de vue."""

    def __init__(self, gateway: CatalogGateway) -> None:
        """Initialise le service avec la passerelle catalogue."""
        self._gateway = gateway

    def run(self, state: ReindexViewState) -> ActionResult:
        """Réindexe le projet sélectionné (type nettoyé, limite > 0 sinon omise)."""
        if state.submitting:
            return ActionResult(ActionOutcome.BUSY)
        if state.project_id is None:
            state.error = PROJECT_REQUIRED_MESSAGE
            return ActionResult(ActionOutcome.FAILED, state.error)

        params = ReindexParams(
            status=state.status,
            type=blank_to_none(state.type),
            limit=parse_positive_int(state.limit),
        )
        state.submitting = True
        state.error = None
        state.result = None
        try:
            result = self._gateway.reindex_project(state.project_id, params)
        except CatalogError as exc:
            state.error = to_ui_error_message(exc)
            return ActionResult(ActionOutcome.FAILED, state.error)
        finally:
            state.submitting = False
        state.result = result
        if result.has_failures:
            log.warning(
                "reindex_partial_failure", project_id=result.project_id, failed=result.failed
            )
        else:
            log.info("reindex_done", project_id=result.project_id, processed=result.processed)
        return ActionResult(ActionOutcome.DONE, summarize(result), result)
