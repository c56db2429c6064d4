"""Tests pour la couche transport vers le service catalogue.

Ce module vérifie la mise en forme des paramètres et des corps, la normalisation des erreurs HTTP et
réseau, et le résultat "vide" des succès sans contenu.
"""

# ============================================================
# Tests : tests/test_http_client.py
# Objet  : Couvrir CatalogTransport via httpx.MockTransport.
# ============================================================

from __future__ import annotations

import json

import httpx
import pytest

from catalog_console.core.http_constants import (
    HTTP_BAD_GATEWAY,
    HTTP_CONFLICT,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NO_CONTENT,
    HTTP_NOT_FOUND,
    HTTP_OK,
)
from catalog_console.domain.errors import (
    ApiClientError,
    CatalogNetworkError,
    to_ui_error_message,
)
from catalog_console.infra.http_client import EMPTY_RESPONSE, CatalogTransport, build_query


def _transport(handler, seen: list[httpx.Request] | None = None) -> CatalogTransport:
    def _record(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return handler(request)

    client = httpx.Client(
        base_url="http://catalog.test/api", transport=httpx.MockTransport(_record)
    )
    return CatalogTransport(client=client)


def test_build_query_drops_none_and_keeps_empty_string() -> None:
    """Teste que les None sont supprimés mais qu'une chaîne vide reste transmise."""
    params = build_query({"query": "", "status": None, "topK": 5, "flag": True, "ratio": 2.0})
    assert params == {"query": "", "topK": "5", "flag": "true", "ratio": "2"}
    assert build_query(None) == {}


def test_send_without_body_omits_body() -> None:
    """Teste qu'aucun corps n'est envoyé quand body est None."""
    seen: list[httpx.Request] = []
    t = _transport(lambda r: httpx.Response(HTTP_OK, json={"ok": True}), seen)
    assert t.post("/artifacts/1/approve") == {"ok": True}
    assert seen[0].content == b""
    assert "content-type" not in seen[0].headers


def test_send_with_empty_body_serializes_it() -> None:
    """Teste qu'un corps vide `{}` est distinct de l'absence de corps."""
    seen: list[httpx.Request] = []
    t = _transport(lambda r: httpx.Response(HTTP_OK, json={}), seen)
    t.patch("/artifacts/1", {})
    assert json.loads(seen[0].content) == {}
    assert seen[0].headers["content-type"] == "application/json"


def test_send_joins_base_url_and_query() -> None:
    """Teste la construction de l'URL finale avec le préfixe et les paramètres."""
    seen: list[httpx.Request] = []
    t = _transport(lambda r: httpx.Response(HTTP_OK, json=[]), seen)
    t.get("/artifacts/search", {"projectId": 3, "query": "", "type": None})
    url = seen[0].url
    assert url.path == "/api/artifacts/search"
    assert url.params["projectId"] == "3"
    assert "query" in url.params and url.params["query"] == ""
    assert "type" not in url.params


def test_no_content_returns_empty_response() -> None:
    """Teste qu'un 204 ou un corps vide donne EMPTY_RESPONSE (falsy, distinct de {})."""
    t = _transport(lambda r: httpx.Response(HTTP_NO_CONTENT))
    result = t.post("/x")
    assert result is EMPTY_RESPONSE
    assert not result
    assert result != {}

    t2 = _transport(lambda r: httpx.Response(HTTP_OK, content=b""))
    assert t2.get("/x") is EMPTY_RESPONSE


def test_error_uses_server_message_and_timestamp() -> None:
    """Teste que le message et le timestamp du corps d'erreur sont repris."""
    body = {"message": "Artifact 4 is APPROVED", "status": 409, "timestamp": "2025-01-01T00:00:00Z"}
    t = _transport(lambda r: httpx.Response(HTTP_CONFLICT, json=body))
    with pytest.raises(ApiClientError) as err:
        t.patch("/artifacts/4", {"title": "x"})
    assert err.value.status == HTTP_CONFLICT
    assert err.value.message == "Artifact 4 is APPROVED"
    assert err.value.timestamp == "2025-01-01T00:00:00Z"


def test_error_falls_back_to_generic_message() -> None:
    """Teste le message par défaut si le corps est absent, illisible ou sans `message`."""
    for response in (
        httpx.Response(HTTP_NOT_FOUND),
        httpx.Response(HTTP_NOT_FOUND, content=b"<html>nope</html>"),
        httpx.Response(HTTP_NOT_FOUND, json={"error": "x"}),
    ):
        t = _transport(lambda r, resp=response: resp)
        with pytest.raises(ApiClientError) as err:
            t.get("/projects/9")
        assert err.value.message == "Request failed with status 404"
        assert err.value.timestamp is None


def test_network_failure_raises_network_error() -> None:
    """Teste qu'une absence de réponse devient CatalogNetworkError."""

    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    t = _transport(_boom)
    with pytest.raises(CatalogNetworkError):
        t.get("/projects")


def test_no_retry_on_server_error() -> None:
    """Teste qu'un 5xx est remonté sans nouvelle tentative."""
    seen: list[httpx.Request] = []
    t = _transport(lambda r: httpx.Response(HTTP_BAD_GATEWAY), seen)
    with pytest.raises(ApiClientError):
        t.get("/projects")
    assert len(seen) == 1


def test_token_sets_authorization_header() -> None:
    """Teste l'en-tête Authorization quand un jeton est configuré."""
    t = CatalogTransport(base_url="http://catalog.test/api/", token="secret")
    try:
        assert t._client.headers["Authorization"] == "Bearer secret"  # type: ignore[attr-defined]
        assert str(t._client.base_url) == "http://catalog.test/api/"  # type: ignore[attr-defined]
    finally:
        t.close()


def test_transport_requires_base_url_without_client() -> None:
    """Teste qu'un transport sans client ni URL est refusé."""
    with pytest.raises(ValueError):
        CatalogTransport()


def test_to_ui_error_message() -> None:
    """Teste la conversion des erreurs en messages affichables."""
    assert to_ui_error_message(ApiClientError("boom", HTTP_INTERNAL_SERVER_ERROR)) == (
        "Server error: boom"
    )
    assert to_ui_error_message(ApiClientError("missing", HTTP_NOT_FOUND)) == "missing"
    assert to_ui_error_message(CatalogNetworkError("offline")) == "offline"
    assert to_ui_error_message(RuntimeError()) == "Unexpected error"
