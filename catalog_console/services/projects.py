"""Service de l'écran projets: liste filtrée par préfixe et création."""

from __future__ import annotations

import structlog

from catalog_console.domain.entities import Project
from catalog_console.domain.errors import CatalogError, to_ui_error_message
from catalog_console.domain.view_state import ProjectsViewState
from catalog_console.infra.catalog_gateway import CatalogGateway
from catalog_console.services.inputs import blank_to_none
from catalog_console.services.outcomes import ActionOutcome, ActionResult

PROJECT_NAME_REQUIRED_MESSAGE = "Project name is required."

log = structlog.get_logger(__name__)


def default_project_id(projects: list[Project]) -> int | None:
    """Premier projet de la liste, utilisé quand aucun projet n'est sélectionné."""
    return projects[0].id if projects else None


class ProjectService:
    """Chargement et création de projets."""

    def __init__(self, gateway: CatalogGateway) -> None:
        """Initialise le service avec la passerelle catalogue."""
        self._gateway = gateway

    def load(self, state: ProjectsViewState) -> ActionResult:
        """Recharge la liste; un filtre vide n'envoie pas de paramètre `name`."""
        state.loading = True
        state.error = None
        try:
            state.projects = self._gateway.list_projects(blank_to_none(state.name_filter))
        except CatalogError as exc:
            state.error = to_ui_error_message(exc)
            return ActionResult(ActionOutcome.FAILED, state.error)
        finally:
            state.loading = False
        return ActionResult(ActionOutcome.DONE, value=state.projects)

    def create(self, state: ProjectsViewState, name: str) -> ActionResult:
        """Crée un projet (nom nettoyé obligatoire) puis recharge la liste filtrée."""
        if state.submitting:
            return ActionResult(ActionOutcome.BUSY)
        cleaned = name.strip()
        if not cleaned:
            state.error = PROJECT_NAME_REQUIRED_MESSAGE
            return ActionResult(ActionOutcome.FAILED, state.error)

        state.submitting = True
        state.error = None
        try:
            project = self._gateway.create_project(cleaned)
        except CatalogError as exc:
            state.error = to_ui_error_message(exc)
            return ActionResult(ActionOutcome.FAILED, state.error)
        finally:
            state.submitting = False
        log.info("project_created", project_id=project.id)
        reload = self.load(state)
        if not reload.ok:
            return reload
        return ActionResult(ActionOutcome.DONE, f"Project #{project.id} created.", project)

    def get(self, project_id: int) -> ActionResult:
        """Charge un projet pour l'écran de détail."""
        try:
            project = self._gateway.get_project(project_id)
        except CatalogError as exc:
            return ActionResult(ActionOutcome.FAILED, to_ui_error_message(exc))
        return ActionResult(ActionOutcome.DONE, value=project)
