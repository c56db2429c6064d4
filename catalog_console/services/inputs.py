"""Interprétation des saisies numériques et textuelles des formulaires de la console."""

from __future__ import annotations

import math


def parse_positive(raw: object) -> float | None:
    """Retourne la valeur numérique si elle est finie et > 0, sinon None.

    Accepte int/float ou chaîne (espaces tolérés). Les booléens sont refusés.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def parse_positive_int(raw: object) -> int | None:
    """Variante entière de `parse_positive` (tronquée, au moins 1)."""
    value = parse_positive(raw)
    if value is None:
        return None
    return max(1, int(value))


def blank_to_none(raw: str | None) -> str | None:
    """Texte nettoyé, ou None s'il est vide."""
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None
