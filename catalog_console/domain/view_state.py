"""
États de vue explicites, un par session d'écran.

Chaque écran de la console (projets, recherche, détail d'artefact, réindexation) possède son propre
enregistrement d'état, passé par référence aux services. Aucun état global mutable n'est partagé.

Les réponses obsolètes sont écartées par un ticket de requête: une réponse n'est appliquée que si
l'entité courante n'a pas changé et qu'aucune requête plus récente n'a été émise depuis.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from catalog_console.domain.entities import (
    Artifact,
    ArtifactStatus,
    Project,
    ReindexResult,
)

DEFAULT_MAX_CONTENT_LENGTH = "4000"


@dataclass(frozen=True)
class RequestTicket:
    """Identifie une requête émise pour une entité donnée."""

    entity_id: int | None
    sequence: int


@dataclass
class _TicketedState:
    """Gestion commune des tickets de requête."""

    _sequence: int = field(default=0, init=False, repr=False)

    def _current_entity(self) -> int | None:
        raise NotImplementedError

    def begin_request(self) -> RequestTicket:
        """Émet un ticket; toute requête antérieure devient obsolète."""
        self._sequence += 1
        return RequestTicket(entity_id=self._current_entity(), sequence=self._sequence)

    def is_current(self, ticket: RequestTicket) -> bool:
        """Vrai si la réponse associée au ticket peut encore être appliquée."""
        return ticket.sequence == self._sequence and ticket.entity_id == self._current_entity()


@dataclass
class ArtifactViewState(_TicketedState):
    """État de l'écran de détail d'un artefact."""

    artifact_id: int | None = None
    artifact: Artifact | None = None
    max_content_length: str = DEFAULT_MAX_CONTENT_LENGTH
    edit_type: str = ""
    edit_title: str = ""
    edit_content: str = ""
    loading: bool = False
    saving: bool = False
    changing_status: bool = False
    still_truncated_after_auto_load: bool = False
    error: str | None = None
    success: str | None = None

    def _current_entity(self) -> int | None:
        return self.artifact_id

    def navigate(self, artifact_id: int) -> None:
        """Bascule sur un autre artefact; les réponses en vol sont invalidées."""
        self.artifact_id = artifact_id
        self.artifact = None
        self.edit_type = ""
        self.edit_title = ""
        self.edit_content = ""
        self.still_truncated_after_auto_load = False
        self.clear_messages()
        self._sequence += 1

    @property
    def is_draft(self) -> bool:
        """Vrai si l'artefact chargé est en DRAFT."""
        return self.artifact is not None and self.artifact.status == ArtifactStatus.DRAFT

    @property
    def can_edit(self) -> bool:
        """L'édition n'est permise que sur un brouillon."""
        return self.is_draft

    def apply_artifact(self, artifact: Artifact) -> None:
        """Expose l'artefact effectif et réinitialise le tampon d'édition."""
        self.artifact = artifact
        self.edit_type = artifact.type
        self.edit_title = artifact.title
        self.edit_content = artifact.content

    def clear_messages(self) -> None:
        """Efface erreur et message de succès."""
        self.error = None
        self.success = None


@dataclass
class SearchViewState(_TicketedState):
    """État de l'écran de recherche d'artefacts (les champs texte sont des saisies brutes)."""

    project_id: int | None = None
    query: str = ""
    status: ArtifactStatus | None = ArtifactStatus.APPROVED
    type: str = ""
    mode: str = ""
    top_k: str = "5"
    max_snippet_length: str = "240"
    results: list = field(default_factory=list)
    searching: bool = False
    error: str | None = None

    def _current_entity(self) -> int | None:
        return self.project_id

    def select_project(self, project_id: int | None) -> None:
        """Change le projet ciblé; une recherche en vol ne sera pas appliquée."""
        self.project_id = project_id
        self.results = []
        self._sequence += 1


@dataclass
class ProjectsViewState:
    """État de l'écran de liste des projets."""

    name_filter: str = ""
    projects: list[Project] = field(default_factory=list)
    loading: bool = False
    submitting: bool = False
    error: str | None = None


@dataclass
class ReindexViewState:
    """État de l'écran de réindexation."""

    project_id: int | None = None
    status: ArtifactStatus = ArtifactStatus.APPROVED
    type: str = ""
    limit: str = "100"
    result: ReindexResult | None = None
    submitting: bool = False
    error: str | None = None
