# ============================================================
# Module : catalog_console/services/artifact_controller.py
# Objet  : Chargement, édition et cycle de vie d'un artefact.
# Invariants :
#  - Édition envoyée uniquement si l'artefact chargé est DRAFT.
#  - Un 409 sur PATCH devient le message "DRAFT uniquement".
#  - Une réponse obsolète n'écrase jamais l'état courant.
# ============================================================
"""Contrôleur d'édition et de cycle de vie des artefacts.

Responsabilités:
- Charger l'artefact effectif (via `ContentReconciler`) dans un `ArtifactViewState`.
- Calculer le diff minimal entre l'artefact chargé et le tampon d'édition, puis l'envoyer.
- Traduire le conflit serveur (409) en message dédié, sans appliquer le diff localement.
- Piloter les transitions approve/deprecate puis relire l'état faisant autorité.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

import structlog

from catalog_console.core.http_constants import HTTP_CONFLICT
from catalog_console.domain.entities import (
    Artifact,
    CreateArtifactPayload,
    UpdateArtifactPayload,
)
from catalog_console.domain.errors import (
    ApiClientError,
    CatalogError,
    EditConflictError,
    EditNotPermittedError,
    to_ui_error_message,
)
from catalog_console.domain.view_state import DEFAULT_MAX_CONTENT_LENGTH, ArtifactViewState
from catalog_console.infra.catalog_gateway import CatalogGateway
from catalog_console.services.content_reconciler import ContentReconciler, EffectiveArtifact
from catalog_console.services.inputs import parse_positive_int
from catalog_console.services.outcomes import ActionOutcome, ActionResult

Transition = Literal["approve", "deprecate"]

NO_CHANGES_MESSAGE = "No changes to save."
NO_ARTIFACT_MESSAGE = "No artifact loaded."
PROJECT_REQUIRED_MESSAGE = "Project is required."
CUSTOM_PRESET = "custom"

log = structlog.get_logger(__name__)


def resolve_max_content_length(raw: object) -> int | None:
    """Plafond de contenu saisi: entier > 0, sinon None (défaut serveur)."""
    return parse_positive_int(raw)


def select_content_length(state: ArtifactViewState, choice: str, custom: str = "") -> None:
    """Applique un preset (`"4000"`, `"10000"`...) ou la valeur personnalisée (défaut si vide)."""
    if choice == CUSTOM_PRESET:
        state.max_content_length = custom.strip() or DEFAULT_MAX_CONTENT_LENGTH
        return
    state.max_content_length = choice


def preset_choice(max_content_length: str, presets: Sequence[int]) -> str:
    """Preset correspondant au plafond saisi, sinon `"custom"`."""
    value = parse_positive_int(max_content_length)
    return str(value) if value in presets else CUSTOM_PRESET


def build_update_payload(
    artifact: Artifact, edit_type: str, edit_title: str, edit_content: str
) -> UpdateArtifactPayload:
    """Diff minimal: seuls les champs dont la valeur nettoyée diffère de l'artefact chargé."""
    changes: dict[str, str] = {}
    for name, edited, current in (
        ("type", edit_type, artifact.type),
        ("title", edit_title, artifact.title),
        ("content", edit_content, artifact.content),
    ):
        value = edited.strip()
        if value != current:
            changes[name] = value
    return UpdateArtifactPayload(**changes)


class ArtifactController:
    """Orchestre passerelle et réconciliateur pour l'écran de détail d'un artefact."""

    def __init__(self, gateway: CatalogGateway, reconciler: ContentReconciler) -> None:
        """Initialise le contrôleur avec ses dépendances."""
        self._gateway = gateway
        self._reconciler = reconciler

    # -------------------- API sans état --------------------

    def submit_edits(
        self,
        artifact: Artifact,
        edit_type: str,
        edit_title: str,
        edit_content: str,
        max_content_length: int | None = None,
    ) -> EffectiveArtifact | None:
        """Envoie le diff minimal et retourne l'artefact effectif, ou None sans changement.

        Raises:
            EditNotPermittedError: l'artefact chargé n'est pas DRAFT (aucun appel réseau).
            EditConflictError: le service a répondu 409 (l'artefact n'est plus DRAFT).
            CatalogError: autres erreurs transport/serveur, inchangées.
        """
        if not artifact.is_draft:
            raise EditNotPermittedError()
        payload = build_update_payload(artifact, edit_type, edit_title, edit_content)
        if payload.is_empty():
            return None
        try:
            updated = self._gateway.patch_artifact(artifact.id, payload, max_content_length)
        except ApiClientError as exc:
            if exc.status == HTTP_CONFLICT:
                log.info(
                    "artifact_save_conflict", artifact_id=artifact.id, version=artifact.version
                )
                raise EditConflictError(exc.status, exc.message) from exc
            raise
        return self._reconciler.reconcile(updated)

    def create(
        self,
        project_id: int | None,
        artifact_type: str,
        title: str,
        content: str,
        max_content_length: int | None = None,
    ) -> ActionResult:
        """Crée un artefact (DRAFT); le projet est obligatoire."""
        if project_id is None:
            return ActionResult(ActionOutcome.FAILED, PROJECT_REQUIRED_MESSAGE)
        payload = CreateArtifactPayload(
            project_id=project_id,
            type=artifact_type.strip(),
            title=title.strip(),
            content=content.strip(),
        )
        try:
            created = self._gateway.create_artifact(payload, max_content_length)
        except CatalogError as exc:
            return ActionResult(ActionOutcome.FAILED, to_ui_error_message(exc))
        log.info("artifact_created", artifact_id=created.id, project_id=created.project_id)
        return ActionResult(
            ActionOutcome.DONE, f"Artifact #{created.id} created as DRAFT.", created
        )

    # -------------------- API sur état de vue --------------------

    def load(
        self,
        state: ArtifactViewState,
        artifact_id: int | None = None,
        auto_expand: bool = True,
    ) -> ActionResult:
        """Charge l'artefact courant (ou `artifact_id`) dans l'état de vue."""
        if artifact_id is not None and artifact_id != state.artifact_id:
            state.navigate(artifact_id)
        if state.artifact_id is None:
            state.error = NO_ARTIFACT_MESSAGE
            return ActionResult(ActionOutcome.FAILED, NO_ARTIFACT_MESSAGE)

        cap = resolve_max_content_length(state.max_content_length)
        ticket = state.begin_request()
        state.loading = True
        state.clear_messages()
        state.still_truncated_after_auto_load = False
        try:
            effective = self._reconciler.load(state.artifact_id, cap, auto_expand=auto_expand)
        except CatalogError as exc:
            return self._fail(state, ticket, exc)
        finally:
            state.loading = False
        if not state.is_current(ticket):
            return self._stale(ticket)
        self._apply(state, effective)
        return ActionResult(ActionOutcome.DONE, value=effective.artifact)

    def load_more(self, state: ArtifactViewState) -> ActionResult:
        """Recharge avec le plafond explicite saisi, sans relecture automatique."""
        if state.artifact is None:
            state.error = NO_ARTIFACT_MESSAGE
            return ActionResult(ActionOutcome.FAILED, NO_ARTIFACT_MESSAGE)
        return self.load(state, auto_expand=False)

    def save(self, state: ArtifactViewState) -> ActionResult:
        """Sauvegarde le tampon d'édition de l'état de vue."""
        if state.saving:
            return ActionResult(ActionOutcome.BUSY)
        artifact = state.artifact
        if artifact is None:
            state.error = NO_ARTIFACT_MESSAGE
            return ActionResult(ActionOutcome.FAILED, NO_ARTIFACT_MESSAGE)

        cap = resolve_max_content_length(state.max_content_length)
        ticket = state.begin_request()
        state.saving = True
        state.clear_messages()
        try:
            effective = self.submit_edits(
                artifact, state.edit_type, state.edit_title, state.edit_content, cap
            )
        except EditConflictError as exc:
            if state.is_current(ticket):
                state.error = str(exc)
            return ActionResult(ActionOutcome.CONFLICT, str(exc))
        except EditNotPermittedError as exc:
            state.error = str(exc)
            return ActionResult(ActionOutcome.NOT_PERMITTED, str(exc))
        except CatalogError as exc:
            return self._fail(state, ticket, exc)
        finally:
            state.saving = False

        if effective is None:
            state.success = NO_CHANGES_MESSAGE
            return ActionResult(ActionOutcome.NO_CHANGES, NO_CHANGES_MESSAGE)
        if not state.is_current(ticket):
            return self._stale(ticket)
        self._apply(state, effective)
        state.success = "Artifact updated."
        log.info(
            "artifact_saved",
            artifact_id=effective.artifact.id,
            version=effective.artifact.version,
        )
        return ActionResult(ActionOutcome.DONE, state.success, effective.artifact)

    def approve(self, state: ArtifactViewState) -> ActionResult:
        """DRAFT → APPROVED puis relecture."""
        return self.change_status(state, "approve")

    def deprecate(self, state: ArtifactViewState) -> ActionResult:
        """APPROVED → DEPRECATED puis relecture."""
        return self.change_status(state, "deprecate")

    def change_status(self, state: ArtifactViewState, target: Transition) -> ActionResult:
        """Applique une transition puis relit l'artefact pour obtenir l'état faisant autorité.

        Un refus serveur (transition invalide pour l'état courant) est simplement remonté.
        """
        if state.changing_status:
            return ActionResult(ActionOutcome.BUSY)
        artifact_id = state.artifact_id
        if artifact_id is None:
            state.error = NO_ARTIFACT_MESSAGE
            return ActionResult(ActionOutcome.FAILED, NO_ARTIFACT_MESSAGE)

        cap = resolve_max_content_length(state.max_content_length)
        ticket = state.begin_request()
        state.changing_status = True
        state.clear_messages()
        state.still_truncated_after_auto_load = False
        try:
            if target == "approve":
                self._gateway.approve_artifact(artifact_id, cap)
            else:
                self._gateway.deprecate_artifact(artifact_id, cap)
            effective = self._reconciler.load(artifact_id, cap)
        except CatalogError as exc:
            return self._fail(state, ticket, exc)
        finally:
            state.changing_status = False
        if not state.is_current(ticket):
            return self._stale(ticket)
        self._apply(state, effective)
        state.success = "Artifact approved." if target == "approve" else "Artifact deprecated."
        log.info(
            "artifact_status_changed",
            artifact_id=artifact_id,
            status=effective.artifact.status.value,
        )
        return ActionResult(ActionOutcome.DONE, state.success, effective.artifact)

    # -------------------- Helpers internes --------------------

    @staticmethod
    def _apply(state: ArtifactViewState, effective: EffectiveArtifact) -> None:
        state.apply_artifact(effective.artifact)
        state.still_truncated_after_auto_load = effective.still_truncated

    @staticmethod
    def _fail(state: ArtifactViewState, ticket, exc: CatalogError) -> ActionResult:
        message = to_ui_error_message(exc)
        if state.is_current(ticket):
            state.error = message
        return ActionResult(ActionOutcome.FAILED, message)

    @staticmethod
    def _stale(ticket) -> ActionResult:
        log.info("stale_response_discarded", artifact_id=ticket.entity_id, sequence=ticket.sequence)
        return ActionResult(ActionOutcome.STALE)
