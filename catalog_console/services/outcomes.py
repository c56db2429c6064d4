"""Issue commune des actions utilisateur de la console."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ActionOutcome(str, Enum):
    """Issue d'une action utilisateur."""

    DONE = "done"
    NO_CHANGES = "no_changes"
    NOT_PERMITTED = "not_permitted"
    CONFLICT = "conflict"
    FAILED = "failed"
    BUSY = "busy"
    STALE = "stale"


@dataclass(frozen=True)
class ActionResult:
    """Résultat d'une action: issue, message affichable et valeur éventuelle."""

    outcome: ActionOutcome
    message: str | None = None
    value: Any = None

    @property
    def ok(self) -> bool:
        """Vrai si l'action a abouti ou n'avait rien à faire."""
        return self.outcome in (ActionOutcome.DONE, ActionOutcome.NO_CHANGES)
