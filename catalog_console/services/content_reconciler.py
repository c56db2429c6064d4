# ============================================================
# Module : catalog_console/services/content_reconciler.py
# Objet  : Produire l'artefact "effectif" malgré la troncature serveur.
# Invariants :
#  - Au plus une relecture pleine longueur par chargement.
#  - len(content) <= content_length, égalité ssi non tronqué.
# ============================================================
"""Réconciliation du contenu tronqué des artefacts.

Le service catalogue plafonne le contenu renvoyé (`maxContentLength`). Quand la réponse est
tronquée, le réconciliateur relit une seule fois l'artefact avec un plafond très large; si le
contenu reste tronqué, l'état "toujours tronqué" est signalé à l'appelant au lieu d'afficher
silencieusement un contenu partiel.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from catalog_console.app.metrics import ARTIFACT_AUTO_EXPAND
from catalog_console.domain.entities import Artifact
from catalog_console.infra.catalog_gateway import CatalogGateway

FULL_CONTENT_MAX_LENGTH = 200_000

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class EffectiveArtifact:
    """Artefact exposé à l'affichage après réconciliation.

    Attributs
    - artifact: valeur cohérente (contenu/longueur/troncature).
    - auto_expanded: une relecture pleine longueur a eu lieu.
    - still_truncated: la relecture pleine longueur est elle-même tronquée (état terminal).
    """

    artifact: Artifact
    auto_expanded: bool = False
    still_truncated: bool = False

    @property
    def possibly_incomplete(self) -> bool:
        """Vrai si le contenu affiché peut être incomplet."""
        return self.artifact.content_truncated


def normalize_lengths(artifact: Artifact) -> Artifact:
    """Rend `content`/`content_length`/`content_truncated` mutuellement cohérents.

    Un `content_length` plus petit que le contenu est relevé. Un contenu plus court que
    `content_length` est marqué tronqué (même si le service le dit complet) pour déclencher la
    relecture; un contenu "tronqué" de la longueur annoncée est marqué complet.
    """
    if artifact.is_consistent():
        return artifact
    size = len(artifact.content)
    if size < artifact.content_length:
        fixed = {"content_length": artifact.content_length, "content_truncated": True}
    else:
        fixed = {"content_length": size, "content_truncated": False}
    log.warning(
        "artifact_length_mismatch",
        artifact_id=artifact.id,
        content_size=size,
        content_length=artifact.content_length,
        content_truncated=artifact.content_truncated,
    )
    return artifact.model_copy(update=fixed)


class ContentReconciler:
    """Charge un artefact et tente une relecture complète si son contenu est tronqué."""

    def __init__(
        self, gateway: CatalogGateway, full_content_max_length: int = FULL_CONTENT_MAX_LENGTH
    ) -> None:
        """Initialise le réconciliateur.

        Args:
            gateway: passerelle catalogue.
            full_content_max_length: plafond utilisé pour la relecture "contenu complet".
        """
        self._gateway = gateway
        self.full_content_max_length = full_content_max_length

    def load(
        self,
        artifact_id: int,
        max_content_length: int | None = None,
        auto_expand: bool = True,
    ) -> EffectiveArtifact:
        """Charge l'artefact avec le plafond demandé puis le réconcilie.

        `auto_expand=False` correspond à un "charger plus" explicite: le plafond demandé est
        respecté tel quel.
        """
        artifact = self._gateway.get_artifact(artifact_id, max_content_length)
        return self.reconcile(artifact, auto_expand=auto_expand)

    def reconcile(self, artifact: Artifact, auto_expand: bool = True) -> EffectiveArtifact:
        """Réconcilie une réponse déjà obtenue (chargement, création ou sauvegarde)."""
        artifact = normalize_lengths(artifact)
        if not artifact.content_truncated or not auto_expand:
            return EffectiveArtifact(artifact=artifact)

        log.info(
            "artifact_auto_expand",
            artifact_id=artifact.id,
            content_length=artifact.content_length,
            cap=self.full_content_max_length,
        )
        full = normalize_lengths(
            self._gateway.get_artifact(artifact.id, self.full_content_max_length)
        )
        if full.content_truncated:
            ARTIFACT_AUTO_EXPAND.labels("still_truncated").inc()
            log.warning(
                "artifact_still_truncated",
                artifact_id=full.id,
                content_length=full.content_length,
                cap=self.full_content_max_length,
            )
        else:
            ARTIFACT_AUTO_EXPAND.labels("complete").inc()
        return EffectiveArtifact(
            artifact=full, auto_expanded=True, still_truncated=full.content_truncated
        )
