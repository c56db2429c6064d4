"""
Taxonomie des erreurs de la console catalogue.

- `CatalogNetworkError`: aucune réponse obtenue (réseau, DNS, connexion refusée...).
- `ApiClientError`: erreur applicative renvoyée par le service `{message, status, timestamp}`.
- `ClientValidationError`: saisie invalide détectée localement, aucun appel réseau.
- `EditNotPermittedError`: édition refusée car l'artefact n'est plus en DRAFT.
"""

from __future__ import annotations

from catalog_console.core.http_constants import HTTP_INTERNAL_SERVER_ERROR

DRAFT_ONLY_MESSAGE = "Editing is only allowed for DRAFT artifacts"
UNEXPECTED_ERROR_MESSAGE = "Unexpected error"


class CatalogError(Exception):
    """Erreur de base de la console."""


class CatalogNetworkError(CatalogError):
    """Erreur réseau entre la console et le service catalogue."""


class ApiClientError(CatalogError):
    """Erreur HTTP renvoyée par le service catalogue (statut non 2xx)."""

    def __init__(self, message: str, status: int, timestamp: str | None = None) -> None:
        """Initialise l'erreur avec le message serveur, le statut et l'horodatage éventuel."""
        super().__init__(message)
        self.message = message
        self.status = status
        self.timestamp = timestamp

    @property
    def is_server_fault(self) -> bool:
        """Vrai pour les statuts 5xx."""
        return self.status >= HTTP_INTERNAL_SERVER_ERROR


class ClientValidationError(CatalogError):
    """Saisie invalide (ex: projet non sélectionné); jamais envoyée au service."""


class EditNotPermittedError(CatalogError):
    """L'artefact chargé n'est pas en DRAFT: la sauvegarde est refusée localement."""

    def __init__(self, message: str = DRAFT_ONLY_MESSAGE) -> None:
        """Initialise l'erreur avec le message d'édition réservée aux brouillons."""
        super().__init__(message)


def to_ui_error_message(error: BaseException) -> str:
    """Convertit une exception en message lisible pour l'affichage.

    Les fautes serveur (>= 500) sont préfixées par `Server error:`.
    """
    if isinstance(error, ApiClientError):
        if error.is_server_fault:
            return f"Server error: {error.message}"
        return error.message
    return str(error) or UNEXPECTED_ERROR_MESSAGE


class EditConflictError(EditNotPermittedError):
    """Le service a refusé l'écriture (409): l'artefact a quitté l'état DRAFT entre-temps."""

    def __init__(self, status: int, server_message: str | None = None) -> None:
        """Conserve le statut et le message serveur d'origine (non affiché)."""
        super().__init__()
        self.status = status
        self.server_message = server_message
