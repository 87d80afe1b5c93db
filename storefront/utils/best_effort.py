"""
Effets de bord « best-effort »: le résultat est inspectable (observabilité)
mais son échec ne change jamais l'issue de l'opération principale.
"""
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar
import logging

T = TypeVar("T")


@dataclass(frozen=True)
class BestEffort(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None


def run_best_effort(action: str, fn: Callable[..., T], *args: Any, logger: Optional[logging.Logger] = None, **kwargs: Any) -> BestEffort[T]:
    """Exécute fn; toute exception est journalisée puis convertie en BestEffort(ok=False)."""
    log = logger or logging.getLogger(__name__)
    try:
        return BestEffort(ok=True, value=fn(*args, **kwargs))
    except Exception as e:
        log.exception("best-effort %s failed", action)
        return BestEffort(ok=False, error=f"{type(e).__name__}: {e}")
