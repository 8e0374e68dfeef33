from __future__ import annotations

"""Typed containers used by the superlatives engine.

Raw league exports are four tables of string-keyed records. Their field names
are the contract with whatever parsed them:

    competitors: {"ID", "Name"}
    rounds:      {"ID", "Name"}
    submissions: {"Spotify URI", "Submitter ID", "Round ID", "Title",
                  "Artist(s)", "Created", "popularity"?}
    votes:       {"Voter ID", "Spotify URI", "Round ID", "Points Assigned",
                  "Comment"?, "Created"}

This module defines:
- Normalized dataclasses used internally (`Competitor`, `Round`, `Submission`,
  `Vote`, `League`)
- TypedDicts used for JSON-like outputs (`RestOfFieldRow`, `AwardResult`, ...)
- Coercion helpers that never raise

Design goal: keep the boundary between "raw records" and "derived view"
explicit. Records are never mutated once normalized.
"""

import datetime as _dt
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, TypedDict


# ----------------------------
# Raw field names
# ----------------------------


F_ID = "ID"
F_NAME = "Name"
F_URI = "Spotify URI"
F_SUBMITTER = "Submitter ID"
F_ROUND = "Round ID"
F_TITLE = "Title"
F_ARTIST = "Artist(s)"
F_CREATED = "Created"
F_POPULARITY = "popularity"
F_VOTER = "Voter ID"
F_POINTS = "Points Assigned"
F_COMMENT = "Comment"


# ----------------------------
# Normalized internal records
# ----------------------------


@dataclass(frozen=True, slots=True)
class Competitor:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Round:
    """One competition cycle.

    Notes:
        - `sequence_index` is the 0-based position of the record in the input
          sequence. It is the only source of chronological round order.
    """

    id: str
    name: str
    sequence_index: int

    @property
    def is_valid(self) -> bool:
        return bool(self.id.strip())


@dataclass(frozen=True, slots=True)
class Submission:
    uri: str
    submitter_id: str
    round_id: str
    title: str = ""
    artist: str = ""
    created: Optional[_dt.datetime] = None
    created_raw: str = ""
    popularity: Optional[float] = None


@dataclass(frozen=True, slots=True)
class Vote:
    voter_id: str
    uri: str
    round_id: str
    points: int = 0
    comment: str = ""
    created: Optional[_dt.datetime] = None
    created_raw: str = ""

    @property
    def has_comment(self) -> bool:
        return bool(self.comment and self.comment.strip())


@dataclass(frozen=True, slots=True)
class League:
    """Read-only snapshot of the four league tables."""

    competitors: Tuple[Competitor, ...] = ()
    rounds: Tuple[Round, ...] = ()
    submissions: Tuple[Submission, ...] = ()
    votes: Tuple[Vote, ...] = ()

    def competitor_by_id(self) -> Dict[str, Competitor]:
        return competitor_lookup(self.competitors)


# ----------------------------
# Outputs
# ----------------------------


TimingDirection = Literal["earlier-better", "later-better", "neutral", "insufficient-data"]


class RestOfFieldRow(TypedDict):
    name: str
    score: str


class AwardResult(TypedDict, total=False):
    """Common shape of every award.

    Single-winner awards fill `competitor`; pair awards fill `competitor1` and
    `competitor2`. Metric fields are award specific and always raw numbers;
    `*_display` fields carry the rounded strings.
    """

    competitor: Optional[Competitor]
    competitor1: Optional[Competitor]
    competitor2: Optional[Competitor]
    is_tied: bool
    tied_winners: Optional[List[str]]
    rest_of_field: List[RestOfFieldRow]


class SubmissionTimingRecord(TypedDict):
    round_id: str
    round_name: str
    round_number: Optional[int]
    submitter_id: str
    submitter_name: str
    created: str
    created_raw: str
    order: int
    order_total: int
    order_fraction: float
    relative_time: float
    votes: int
    relative_votes: float
    performance_rank: float
    title: str
    uri: str


class RoundTimingSummary(TypedDict):
    round_id: str
    round_name: str
    submission_count: int
    span_hours: float
    min_votes: int
    max_votes: int
    mean_votes: float
    std_votes: float


class TimingBucket(TypedDict):
    bucket_index: int
    label: str
    center: float
    count: int
    average_votes: Optional[float]
    average_relative_votes: Optional[float]
    average_performance: Optional[float]


class TimingSummary(TypedDict):
    coefficient: float
    p_value: float
    iterations: int
    sample_size: int
    is_significant: bool
    early_avg_votes: Optional[float]
    late_avg_votes: Optional[float]
    difference: Optional[float]
    direction: TimingDirection


class CompetitorTiming(TimingSummary):
    competitor: Optional[Competitor]
    impact_score: float


class TimingImpactResult(TypedDict):
    overall: TimingSummary
    competitor_stats: Dict[str, CompetitorTiming]
    best_competitor: Optional[CompetitorTiming]
    ranked_competitors: List[CompetitorTiming]
    submission_records: List[SubmissionTimingRecord]
    round_summaries: List[RoundTimingSummary]
    bucket_averages: List[TimingBucket]


# ----------------------------
# Helpers
# ----------------------------


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_points(value: Any) -> int:
    """Parse a point allocation the way a lenient integer parser would.

    Leading sign and digits are taken ("5", " 3 pts", "7.9" -> 5, 3, 7);
    anything without leading digits (None, "", "abc") is 0.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    m = _LEADING_INT.match(str(value))
    if not m:
        return 0
    return int(m.group(1))


def coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def optional_float(value: Any) -> Optional[float]:
    """Return a finite float, or None for missing/blank/non-numeric values."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


def parse_timestamp(value: Any) -> Optional[_dt.datetime]:
    """Parse an ISO-8601-like timestamp into an aware UTC datetime.

    Accepts a trailing "Z" and space-separated date/time. Naive values are
    taken as UTC. Returns None when the value cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, _dt.datetime):
        parsed = value
    else:
        s = str(value).strip()
        if not s:
            return None
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        try:
            parsed = _dt.datetime.fromisoformat(s)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_dt.timezone.utc)
    return parsed.astimezone(_dt.timezone.utc)


def format_fixed(value: Optional[float], decimals: int = 2) -> Optional[str]:
    if value is None:
        return None
    return f"{value:.{decimals}f}"


def competitor_lookup(competitors: Tuple[Competitor, ...] | List[Competitor]) -> Dict[str, Competitor]:
    """ID -> Competitor. The first record wins when IDs repeat."""
    out: Dict[str, Competitor] = {}
    for c in competitors:
        if c.id and c.id not in out:
            out[c.id] = c
    return out


def round_lookup(rounds: Tuple[Round, ...] | List[Round]) -> Dict[str, Round]:
    out: Dict[str, Round] = {}
    for r in rounds:
        if r.is_valid and r.id not in out:
            out[r.id] = r
    return out


def raw_value(record: Mapping[str, Any], key: str) -> str:
    return coerce_str(record.get(key)).strip()
