"""
Métriques Prometheus de la console.

Ce module définit les métriques des appels sortants vers le service catalogue et de la
réconciliation du contenu tronqué des artefacts.
"""

import re

from prometheus_client import Counter, Histogram

CATALOG_CLIENT_REQUESTS = Counter(
    "catalog_client_requests_total",
    "Total outbound requests to the catalog service",
    ["method", "route", "status"],
)
CATALOG_CLIENT_LATENCY = Histogram(
    "catalog_client_request_duration_seconds",
    "Latency of outbound catalog requests",
    ["method", "route"],
)
CATALOG_CLIENT_ERRORS = Counter(
    "catalog_client_errors_total",
    "Total failed catalog requests",
    ["route", "kind"],
)

# Réconciliation de contenu tronqué
ARTIFACT_AUTO_EXPAND = Counter(
    "artifact_auto_expand_total",
    "Follow-up full-content fetches for truncated artifacts",
    ["outcome"],
)

_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


def normalize_route(path: str) -> str:
    """Remplace les segments numériques par `{id}` pour borner la cardinalité des labels."""
    route = _NUMERIC_SEGMENT.sub("/{id}", path.split("?", 1)[0])
    return route or "/"
