"""
Tests pour la réconciliation du contenu tronqué.

Vérifie la relecture unique à plafond large, l'état terminal "toujours tronqué", l'absence de
relecture sur "charger plus" et la cohérence contenu/longueur/troncature.
"""

from __future__ import annotations

from catalog_console.domain.entities import CreateArtifactPayload
from catalog_console.services.content_reconciler import (
    FULL_CONTENT_MAX_LENGTH,
    ContentReconciler,
    normalize_lengths,
)
from tests.fakes import StubGateway, make_artifact


def test_untruncated_artifact_needs_single_fetch() -> None:
    """Teste qu'un artefact complet ne déclenche aucune relecture."""
    gw = StubGateway()
    gw.artifacts = [make_artifact(content="hello")]
    eff = ContentReconciler(gw).load(1, 4000)  # type: ignore[arg-type]
    assert gw.calls == [("get_artifact", (1, 4000))]
    assert eff.auto_expanded is False
    assert eff.still_truncated is False
    assert eff.possibly_incomplete is False


def test_truncated_artifact_triggers_one_full_fetch() -> None:
    """Teste la relecture unique avec le plafond large."""
    gw = StubGateway()
    gw.artifacts = [
        make_artifact(content="hel", content_length=5),
        make_artifact(content="hello"),
    ]
    eff = ContentReconciler(gw).load(1, 3)  # type: ignore[arg-type]
    assert gw.calls == [
        ("get_artifact", (1, 3)),
        ("get_artifact", (1, FULL_CONTENT_MAX_LENGTH)),
    ]
    assert eff.artifact.content == "hello"
    assert eff.auto_expanded is True
    assert eff.still_truncated is False


def test_still_truncated_after_full_fetch_is_terminal() -> None:
    """Teste que l'état "toujours tronqué" est signalé sans nouvelle relecture."""
    gw = StubGateway()
    gw.artifacts = [
        make_artifact(content="a" * 10, content_length=500_000),
        make_artifact(content="a" * 200, content_length=500_000),
    ]
    eff = ContentReconciler(gw, full_content_max_length=200).load(1, 10)  # type: ignore[arg-type]
    assert len(gw.calls) == 2
    assert eff.still_truncated is True
    assert eff.possibly_incomplete is True
    assert eff.artifact.content_length == 500_000


def test_explicit_cap_disables_auto_expand() -> None:
    """Teste qu'un "charger plus" explicite garde le plafond demandé."""
    gw = StubGateway()
    gw.artifacts = [make_artifact(content="a" * 50, content_length=100)]
    eff = ContentReconciler(gw).load(1, 50, auto_expand=False)  # type: ignore[arg-type]
    assert len(gw.calls) == 1
    assert eff.auto_expanded is False
    assert eff.still_truncated is False
    assert eff.possibly_incomplete is True


def test_partial_content_reported_complete_is_expanded() -> None:
    """Teste qu'un contenu plus court que content_length, annoncé complet, est relu en entier."""
    gw = StubGateway()
    gw.artifacts = [
        make_artifact(content="hel", content_length=5, truncated=False),
        make_artifact(content="hello"),
    ]
    eff = ContentReconciler(gw).load(1, 3)  # type: ignore[arg-type]
    assert gw.calls == [
        ("get_artifact", (1, 3)),
        ("get_artifact", (1, FULL_CONTENT_MAX_LENGTH)),
    ]
    assert eff.auto_expanded is True
    assert eff.artifact.content == "hello"
    assert eff.artifact.content_length == 5


def test_partial_content_without_expansion_stays_flagged() -> None:
    """Teste que, sans relecture, le contenu partiel reste signalé comme incomplet."""
    gw = StubGateway()
    gw.artifacts = [make_artifact(content="hel", content_length=5, truncated=False)]
    eff = ContentReconciler(gw).load(1, 3, auto_expand=False)  # type: ignore[arg-type]
    assert len(gw.calls) == 1
    assert eff.artifact.content_length == 5
    assert eff.possibly_incomplete is True


def test_normalize_lengths_repairs_inconsistent_values() -> None:
    """Teste la remise en cohérence de contenu/longueur/troncature."""
    too_short = normalize_lengths(make_artifact(content="hello", content_length=2, truncated=False))
    assert (too_short.content_length, too_short.content_truncated) == (5, False)

    flagged_but_full = normalize_lengths(
        make_artifact(content="hello", content_length=5, truncated=True)
    )
    assert flagged_but_full.content_truncated is False

    unflagged_partial = normalize_lengths(
        make_artifact(content="hel", content_length=5, truncated=False)
    )
    assert (unflagged_partial.content_length, unflagged_partial.content_truncated) == (5, True)

    ok = make_artifact(content="hel", content_length=5)
    assert normalize_lengths(ok) is ok


def test_reconciled_values_respect_length_invariant(container, fake_store) -> None:
    """Teste de bout en bout len(content) <= content_length, égalité ssi non tronqué."""
    project = fake_store.create_project("Docs")
    for size in (0, 1, 3999, 4000, 4001, 250_000):
        created = fake_store.create_artifact(
            CreateArtifactPayload(project_id=project.id, type="t", title="x", content="z" * size)
        )
        for cap, auto in ((4000, True), (4000, False), (1, True), (None, True)):
            eff = container.reconciler.load(created.id, cap, auto_expand=auto)
            a = eff.artifact
            assert len(a.content) <= a.content_length
            assert (len(a.content) == a.content_length) == (not a.content_truncated)
            assert a.content_length == size
        assert container.reconciler.load(created.id, 4000).still_truncated is (size > 200_000)
