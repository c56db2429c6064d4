"""
Tests pour les écrans projets et réindexation.

Vérifie la liste filtrée par préfixe, la création (nom obligatoire, doublon refusé) et le bilan de
réindexation avec échecs partiels.
"""

from __future__ import annotations

from structlog.testing import capture_logs

from catalog_console.domain.entities import ArtifactStatus, CreateArtifactPayload
from catalog_console.services.outcomes import ActionOutcome
from catalog_console.services.projects import PROJECT_NAME_REQUIRED_MESSAGE, default_project_id
from catalog_console.services.reindex import summarize


def test_listing_is_stable_and_filtered_by_prefix(container, fake_store) -> None:
    """Teste que deux listes successives sont identiques et que le préfixe filtre."""
    fake_store.create_project("Docs")
    fake_store.create_project("Guides")
    state = container.projects_view()
    container.projects.load(state)
    first = [p.id for p in state.projects]
    container.projects.load(state)
    assert [p.id for p in state.projects] == first == [1, 2]
    assert default_project_id(state.projects) == 1

    state.name_filter = " do "
    container.projects.load(state)
    assert [p.name for p in state.projects] == ["Docs"]


def test_create_project_reloads_list(container) -> None:
    """Teste la création d'un projet (nom nettoyé) suivie du rechargement."""
    state = container.projects_view()
    result = container.projects.create(state, "  Docs  ")
    assert result.ok
    assert result.message == "Project #1 created."
    assert [p.name for p in state.projects] == ["Docs"]
    assert state.submitting is False


def test_create_project_requires_name(container, fake_store) -> None:
    """Teste qu'un nom vide est refusé sans appel au service."""
    state = container.projects_view()
    result = container.projects.create(state, "   ")
    assert result.outcome == ActionOutcome.FAILED
    assert state.error == PROJECT_NAME_REQUIRED_MESSAGE
    assert fake_store.projects == {}


def test_duplicate_project_surfaces_server_message(container, fake_store) -> None:
    """Teste que le refus serveur (409) est affiché tel quel."""
    fake_store.create_project("Docs")
    state = container.projects_view()
    result = container.projects.create(state, "docs")
    assert result.outcome == ActionOutcome.FAILED
    assert state.error == "Project 'docs' already exists"


def test_unknown_project_is_reported(container) -> None:
    """Teste le message 404 pour un projet inconnu."""
    result = container.projects.get(42)
    assert result.outcome == ActionOutcome.FAILED
    assert result.message == "Project 42 not found"


def _approved(fake_store, project_id: int, content: str) -> None:
    created = fake_store.create_artifact(
        CreateArtifactPayload(project_id=project_id, type="faq", title="A", content=content)
    )
    fake_store.transition(created.id, ArtifactStatus.DRAFT, ArtifactStatus.APPROVED)


def test_reindex_reports_partial_failure(container, fake_store) -> None:
    """Teste que les échecs partiels restent visibles dans le bilan et les logs."""
    project = fake_store.create_project("Docs")
    _approved(fake_store, project.id, "one")
    _approved(fake_store, project.id, "two")
    _approved(fake_store, project.id, "   ")
    state = container.reindex_view(project.id)
    state.type = "  "
    state.limit = "abc"

    with capture_logs() as logs:
        result = container.reindex.run(state)

    assert result.ok
    assert state.result is not None
    assert (state.result.processed, state.result.failed) == (2, 1)
    assert result.message == "Project #1 (APPROVED): processed=2 failed=1"
    assert any(e["event"] == "reindex_partial_failure" for e in logs)


def test_reindex_limit_and_type(container, fake_store) -> None:
    """Teste la limite et le filtre de type transmis au service."""
    project = fake_store.create_project("Docs")
    for _ in range(3):
        _approved(fake_store, project.id, "text")
    state = container.reindex_view(project.id)
    state.type = "faq"
    state.limit = "2"
    result = container.reindex.run(state)
    assert result.ok
    assert state.result.processed == 2
    assert not state.result.has_failures
    assert summarize(state.result) == "Project #1 (APPROVED/faq): processed=2 failed=0"


def test_reindex_requires_project(container) -> None:
    """Teste qu'aucune réindexation n'est lancée sans projet."""
    state = container.reindex_view()
    result = container.reindex.run(state)
    assert result.outcome == ActionOutcome.FAILED
    assert state.error == "Project is required."
