"""Rendu texte des modèles d'affichage pour la console en ligne de commande."""

from __future__ import annotations

from collections.abc import Sequence

from catalog_console.domain.entities import Project, ReindexResult
from catalog_console.domain.view_state import ArtifactViewState
from catalog_console.services.artifact_controller import CUSTOM_PRESET, preset_choice
from catalog_console.services.reindex import summarize
from catalog_console.services.search_normalizer import SearchResultView

STILL_TRUNCATED_NOTICE = (
    "Content is still truncated after automatic full-load attempt. "
    "Request a larger --max-content-length to see more."
)


def render_project(project: Project) -> str:
    return f"#{project.id}  {project.name}"


def render_artifact(state: ArtifactViewState, presets: Sequence[int] = ()) -> str:
    """Métadonnées, avertissement de troncature et contenu de l'artefact effectif."""
    artifact = state.artifact
    if artifact is None:
        return ""
    truncated = " (truncated)" if artifact.content_truncated else ""
    lines = [
        f"{artifact.title}  [{artifact.status.value}]",
        f"ID: {artifact.id}  Project: {artifact.project_id}  Type: {artifact.type}",
        f"Version: {artifact.version}  Updated at: {artifact.updated_at.isoformat()}",
        f"Content: {artifact.content_length} chars{truncated}",
    ]
    if presets:
        custom = preset_choice(state.max_content_length, presets) == CUSTOM_PRESET
        kind = "custom" if custom else "preset"
        lines.append(f"Max content length: {state.max_content_length} ({kind})")
    if state.still_truncated_after_auto_load:
        lines.append(STILL_TRUNCATED_NOTICE)
    if not state.can_edit:
        lines.append("Editing is disabled because this artifact is not in DRAFT status.")
    lines.extend(["", artifact.content])
    return "\n".join(lines)


def render_search_result(view: SearchResultView) -> str:
    return "\n".join(
        [
            f"#{view.id}  {view.title}  [{view.status.value}]",
            f"  {view.snippet}",
            f"  Match: {view.match_type.value}  Score: {view.score}  Section: {view.section}",
            f"  Snippet len: {view.snippet_length}  {view.snippet_note}",
        ]
    )


def render_reindex(result: ReindexResult) -> str:
    line = summarize(result)
    if result.has_failures:
        return f"{line}\n{result.failed} artifact(s) failed to reindex."
    return line
