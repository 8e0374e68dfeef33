from __future__ import annotations

"""Tie-aware winner selection shared by every award.

Key features:
- Deterministic ordering: metric first, then an optional secondary metric,
  then the entity's stable identity (competitor ID, pair key, URI)
- Exact-equality ties by default, or an award-specific tolerance
- A winner, the full tie set, and the rest of the field excluding every tied
  winner
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar

from .types import AwardResult, RestOfFieldRow

T = TypeVar("T")


@dataclass(frozen=True)
class RankedField(Generic[T]):
    ordered: List[T] = field(default_factory=list)
    tied: List[T] = field(default_factory=list)
    rest: List[T] = field(default_factory=list)

    @property
    def winner(self) -> Optional[T]:
        if self.tied:
            return self.tied[0]
        return None

    @property
    def is_tied(self) -> bool:
        return len(self.tied) > 1


def same_value(a: float, b: float, tolerance: float = 0.0) -> bool:
    """Exact equality for tolerance 0, otherwise |a - b| < tolerance."""
    if tolerance <= 0.0:
        return a == b
    return abs(a - b) < tolerance


def _sort_key(
    entry: T,
    *,
    metric: Callable[[T], float],
    identity: Callable[[T], str],
    descending: bool,
    secondary: Optional[Callable[[T], float]],
) -> Tuple:
    value = float(metric(entry))
    primary = (-value,) if descending else (value,)
    tb: Tuple[float, ...] = ()
    if secondary is not None:
        tb = (-float(secondary(entry)),)
    return primary + tb + (str(identity(entry)),)


def rank_field(
    entries: Iterable[T],
    *,
    metric: Callable[[T], float],
    identity: Callable[[T], str],
    descending: bool = True,
    tolerance: float = 0.0,
    secondary: Optional[Callable[[T], float]] = None,
) -> RankedField[T]:
    """Sort `entries` and split them into tied winners and the rest.

    `secondary` (higher first) only orders entries; it never breaks a tie on
    the primary metric.
    """
    ordered = sorted(
        entries,
        key=lambda e: _sort_key(e, metric=metric, identity=identity, descending=descending, secondary=secondary),
    )
    if not ordered:
        return RankedField()

    top = float(metric(ordered[0]))
    tied = [e for e in ordered if same_value(float(metric(e)), top, tolerance)]
    rest = [e for e in ordered if not same_value(float(metric(e)), top, tolerance)]
    return RankedField(ordered=ordered, tied=tied, rest=rest)


def finish_award(
    ranked: RankedField[T],
    *,
    name_of: Callable[[T], str],
    score_of: Callable[[T], str],
    fields: Mapping[str, Any],
    tied_name_of: Optional[Callable[[T], str]] = None,
) -> AwardResult:
    """Attach the tie and rest-of-field block to winner-specific `fields`."""
    tied_names = tied_name_of or name_of
    out: Dict[str, Any] = dict(fields)
    out["is_tied"] = ranked.is_tied
    out["tied_winners"] = [tied_names(e) for e in ranked.tied] if ranked.is_tied else None
    rest: List[RestOfFieldRow] = [{"name": name_of(e), "score": score_of(e)} for e in ranked.rest]
    out["rest_of_field"] = rest
    return out  # type: ignore[return-value]


def empty_award(**fields: Any) -> AwardResult:
    out: Dict[str, Any] = dict(fields)
    out["is_tied"] = False
    out["tied_winners"] = None
    out["rest_of_field"] = []
    return out  # type: ignore[return-value]
