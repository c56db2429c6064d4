"""
Entités du domaine catalogue.

Ce module définit les modèles de données échangés avec le service catalogue: projets, artefacts
versionnés, résultats de recherche et bilans de réindexation. Les champs suivent le nommage Python;
les alias camelCase correspondent au format JSON du service.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ArtifactStatus(str, Enum):
    """Cycle de vie d'un artefact (sens unique: DRAFT → APPROVED → DEPRECATED)."""

    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    DEPRECATED = "DEPRECATED"


class SearchMode(str, Enum):
    """Stratégie de recherche demandée au service."""

    LIKE = "LIKE"
    VECTOR = "VECTOR"
    HYBRID = "HYBRID"


class MatchType(str, Enum):
    """Façon dont un résultat de recherche a été trouvé."""

    LIKE = "LIKE"
    VECTOR = "VECTOR"


class CatalogModel(BaseModel):
    """Base commune: alias camelCase, population par nom ou alias."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Project(CatalogModel):
    """Projet regroupant des artefacts (immuable côté console)."""

    id: int
    name: str


class Artifact(CatalogModel):
    """
    Artefact versionné appartenant à un projet.

    `content_length` est la longueur du contenu stocké complet, pas celle de `content` qui peut être
    tronqué par le service selon `maxContentLength`.
    """

    id: int
    project_id: int
    type: str
    title: str
    content: str
    status: ArtifactStatus
    version: int
    updated_at: datetime
    content_truncated: bool = False
    content_length: int = 0

    @property
    def is_draft(self) -> bool:
        """Vrai si l'artefact accepte encore des modifications."""
        return self.status == ArtifactStatus.DRAFT

    def is_consistent(self) -> bool:
        """Vérifie `len(content) <= content_length` et l'égalité ssi non tronqué."""
        size = len(self.content)
        if size > self.content_length:
            return False
        return (size == self.content_length) != self.content_truncated


class SearchResultItem(CatalogModel):
    """Résultat brut de recherche (score et section optionnels)."""

    id: int
    title: str
    snippet: str
    status: ArtifactStatus
    snippet_truncated: bool = False
    snippet_length: int = 0
    match_type: MatchType
    score: float | None = None
    section_id: int | None = None


class ReindexResult(CatalogModel):
    """Bilan ponctuel d'une réindexation (non persisté)."""

    project_id: int
    status: str
    type: str | None = None
    processed: int = 0
    failed: int = 0

    @property
    def has_failures(self) -> bool:
        """Vrai si au moins un artefact n'a pas pu être réindexé."""
        return self.failed > 0


class CreateArtifactPayload(CatalogModel):
    """Corps de création d'artefact (le statut est imposé à DRAFT par le service)."""

    project_id: int
    type: str
    title: str
    content: str


class UpdateArtifactPayload(CatalogModel):
    """Mise à jour partielle: seuls les champs renseignés sont envoyés."""

    type: str | None = None
    title: str | None = None
    content: str | None = None

    def to_body(self) -> dict[str, str]:
        """Corps JSON minimal (champs absents omis)."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def is_empty(self) -> bool:
        """Vrai si aucun champ n'est à envoyer."""
        return not self.to_body()


class SearchArtifactsParams(CatalogModel):
    """Paramètres d'une recherche d'artefacts (`query` toujours transmis, même vide)."""

    project_id: int
    query: str = ""
    status: ArtifactStatus | None = None
    type: str | None = None
    mode: SearchMode | None = None
    top_k: int | None = None
    max_snippet_length: float | None = None


class ReindexParams(CatalogModel):
    """Filtres optionnels d'une réindexation de projet."""

    status: ArtifactStatus | None = None
    type: str | None = None
    limit: int | None = None
