# ============================================================
# Module : catalog_console/infra/http_client.py
# Objet  : Transport HTTP/JSON vers le service catalogue.
# Invariants :
#  - Un appel = une requête; ni retry ni timeout côté client.
#  - Toute réponse non 2xx devient une ApiClientError.
# ============================================================
"""Couche transport vers le service catalogue.

Sérialise les corps en JSON, met en forme les paramètres de requête et normalise les échecs en une
forme d'erreur unique (`ApiClientError` pour les réponses non 2xx, `CatalogNetworkError` quand
aucune réponse n'a pu être obtenue).
"""

from __future__ import annotations

import time as _t
from collections.abc import Mapping
from enum import Enum
from typing import Any

import httpx
import structlog

from catalog_console.app.metrics import (
    CATALOG_CLIENT_ERRORS,
    CATALOG_CLIENT_LATENCY,
    CATALOG_CLIENT_REQUESTS,
    normalize_route,
)
from catalog_console.core.http_constants import (
    HTTP_MULTIPLE_CHOICES,
    HTTP_NO_CONTENT,
    HTTP_OK,
)
from catalog_console.domain.errors import ApiClientError, CatalogNetworkError

QueryParams = Mapping[str, Any]


class _EmptyResponse:
    """Résultat d'un succès sans contenu (204 ou corps vide)."""

    _instance: _EmptyResponse | None = None

    def __new__(cls) -> _EmptyResponse:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "EMPTY_RESPONSE"


EMPTY_RESPONSE = _EmptyResponse()


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_query(query: QueryParams | None) -> dict[str, str]:
    """Construit les paramètres de requête.

    Les clés à valeur `None` sont supprimées; les autres valeurs sont converties en chaîne. Une
    chaîne vide reste transmise (`query=` n'équivaut pas à l'absence du paramètre).
    """
    if not query:
        return {}
    return {key: _stringify(value) for key, value in query.items() if value is not None}


def parse_error(response: httpx.Response) -> ApiClientError:
    """Construit une ApiClientError depuis une réponse non 2xx.

    Message par défaut `Request failed with status N`; remplacé par le champ `message` du corps JSON
    s'il est présent. Le `timestamp` éventuel est conservé.
    """
    message = f"Request failed with status {response.status_code}"
    timestamp: str | None = None
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        server_message = data.get("message")
        if isinstance(server_message, str) and server_message:
            message = server_message
        server_timestamp = data.get("timestamp")
        if isinstance(server_timestamp, str):
            timestamp = server_timestamp
    return ApiClientError(message, response.status_code, timestamp)


class CatalogTransport:
    """Client HTTP JSON minimal au-dessus d'`httpx.Client`.

    Un client peut être injecté (ex: `fastapi.testclient.TestClient` ou un `httpx.Client` muni d'un
    `MockTransport`); sinon il est construit depuis `base_url`/`token`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialise le transport avec un client existant ou une URL de base."""
        if client is None:
            if not base_url:
                raise ValueError("base_url est requis quand aucun client n'est fourni")
            headers: dict[str, str] = {"Accept": "application/json"}
            if token:
                headers["Authorization"] = f"Bearer {token}"
            # Pas de timeout client: l'appel attend la réponse du service.
            client = httpx.Client(base_url=base_url.rstrip("/"), headers=headers, timeout=None)
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client
        self._log = structlog.get_logger(__name__).bind(component="catalog_transport")

    def send(
        self,
        method: str,
        path: str,
        body: Any = None,
        query: QueryParams | None = None,
    ) -> Any:
        """Émet une requête et retourne le JSON décodé ou `EMPTY_RESPONSE`.

        Args:
            method: Verbe HTTP.
            path: Chemin relatif à l'URL de base (ex: `/artifacts/3`).
            body: Corps à sérialiser en JSON; `None` signifie aucun corps.
            query: Paramètres de requête (valeurs `None` supprimées).

        Raises:
            ApiClientError: statut non 2xx ou JSON de succès illisible.
            CatalogNetworkError: aucune réponse obtenue.
        """
        route = normalize_route(path)
        params = build_query(query)
        kwargs: dict[str, Any] = {"params": params}
        if body is not None:
            kwargs["json"] = body
            kwargs["headers"] = {"Content-Type": "application/json"}

        start = _t.perf_counter()
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            CATALOG_CLIENT_ERRORS.labels(route, "network").inc()
            self._log.warning("catalog_request_failed", method=method, route=route, error=str(exc))
            raise CatalogNetworkError(str(exc) or "Network error") from exc
        finally:
            CATALOG_CLIENT_LATENCY.labels(method, route).observe(_t.perf_counter() - start)

        CATALOG_CLIENT_REQUESTS.labels(method, route, str(response.status_code)).inc()
        if not HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            error = parse_error(response)
            CATALOG_CLIENT_ERRORS.labels(route, "http").inc()
            self._log.info(
                "catalog_request_rejected",
                method=method,
                route=route,
                status=error.status,
                timestamp=error.timestamp,
            )
            raise error

        self._log.debug("catalog_request", method=method, route=route, status=response.status_code)
        if response.status_code == HTTP_NO_CONTENT or not response.content:
            return EMPTY_RESPONSE
        try:
            return response.json()
        except ValueError as exc:
            raise ApiClientError(
                f"Invalid JSON response with status {response.status_code}",
                response.status_code,
            ) from exc

    def get(self, path: str, query: QueryParams | None = None) -> Any:
        """GET sans corps."""
        return self.send("GET", path, query=query)

    def post(self, path: str, body: Any = None, query: QueryParams | None = None) -> Any:
        """POST avec corps JSON optionnel."""
        return self.send("POST", path, body=body, query=query)

    def patch(self, path: str, body: Any = None, query: QueryParams | None = None) -> Any:
        """PATCH avec corps JSON optionnel."""
        return self.send("PATCH", path, body=body, query=query)

    def close(self) -> None:
        """Ferme le client HTTP s'il a été créé par le transport."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> CatalogTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
