from __future__ import annotations

"""Raw record ingestion.

Turns already-parsed league tables (sequences of string-keyed records) into a
normalized, immutable `League`. File reading and CSV parsing happen elsewhere;
this module only sanitizes and coerces.

Rows that are not mappings, or that are entirely blank, are dropped. Rows
missing a required key are dropped as well (rounds excepted, see below).
Round records are never dropped so that `Round.sequence_index` keeps matching
the position of the record in the input sequence.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .types import (
    F_ARTIST,
    F_COMMENT,
    F_CREATED,
    F_ID,
    F_NAME,
    F_POINTS,
    F_POPULARITY,
    F_ROUND,
    F_SUBMITTER,
    F_TITLE,
    F_URI,
    F_VOTER,
    Competitor,
    League,
    Round,
    Submission,
    Vote,
    coerce_points,
    coerce_str,
    optional_float,
    parse_timestamp,
    raw_value,
)

logger = logging.getLogger(__name__)

COMPETITOR_REQUIRED: Tuple[str, ...] = (F_ID,)
SUBMISSION_REQUIRED: Tuple[str, ...] = (F_URI, F_SUBMITTER, F_ROUND)
VOTE_REQUIRED: Tuple[str, ...] = (F_VOTER, F_URI, F_ROUND)


def _is_blank_row(row: Mapping[str, Any]) -> bool:
    return not any(coerce_str(v).strip() for v in row.values())


def sanitize_rows(rows: Iterable[Any] | None, required: Sequence[str] = ()) -> List[Mapping[str, Any]]:
    """Drop non-mapping rows, all-blank rows and rows missing a required value."""
    out: List[Mapping[str, Any]] = []
    if rows is None:
        return out
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        if _is_blank_row(row):
            continue
        if any(not raw_value(row, key) for key in required):
            continue
        out.append(row)
    return out


def normalize_competitors(rows: Iterable[Any] | None) -> Tuple[Competitor, ...]:
    return tuple(
        Competitor(id=raw_value(r, F_ID), name=raw_value(r, F_NAME))
        for r in sanitize_rows(rows, COMPETITOR_REQUIRED)
    )


def normalize_rounds(rows: Iterable[Any] | None) -> Tuple[Round, ...]:
    out: List[Round] = []
    for index, r in enumerate(rows or ()):
        if isinstance(r, Mapping):
            out.append(Round(id=raw_value(r, F_ID), name=raw_value(r, F_NAME), sequence_index=index))
        else:
            out.append(Round(id="", name="", sequence_index=index))
    return tuple(out)


def normalize_submissions(rows: Iterable[Any] | None) -> Tuple[Submission, ...]:
    out: List[Submission] = []
    for r in sanitize_rows(rows, SUBMISSION_REQUIRED):
        created_raw = raw_value(r, F_CREATED)
        out.append(
            Submission(
                uri=raw_value(r, F_URI),
                submitter_id=raw_value(r, F_SUBMITTER),
                round_id=raw_value(r, F_ROUND),
                title=coerce_str(r.get(F_TITLE)),
                artist=coerce_str(r.get(F_ARTIST)),
                created=parse_timestamp(created_raw),
                created_raw=created_raw,
                popularity=optional_float(r.get(F_POPULARITY)),
            )
        )
    return tuple(out)


def normalize_votes(rows: Iterable[Any] | None) -> Tuple[Vote, ...]:
    out: List[Vote] = []
    for r in sanitize_rows(rows, VOTE_REQUIRED):
        created_raw = raw_value(r, F_CREATED)
        out.append(
            Vote(
                voter_id=raw_value(r, F_VOTER),
                uri=raw_value(r, F_URI),
                round_id=raw_value(r, F_ROUND),
                points=coerce_points(r.get(F_POINTS)),
                comment=coerce_str(r.get(F_COMMENT)),
                created=parse_timestamp(created_raw),
                created_raw=created_raw,
            )
        )
    return tuple(out)


def _count(rows: Iterable[Any] | None) -> int:
    try:
        return len(rows)  # type: ignore[arg-type]
    except TypeError:
        return 0


def build_league(
    *,
    competitors: Iterable[Any] | None = None,
    rounds: Iterable[Any] | None = None,
    submissions: Iterable[Any] | None = None,
    votes: Iterable[Any] | None = None,
    popularity: Optional[Mapping[str, Any]] = None,
) -> League:
    """Normalize the four raw tables into a `League`.

    `popularity` is an optional pre-fetched track-id -> popularity mapping that
    is merged into the submission records first (see `annotate_popularity`).
    """
    competitors = list(competitors or ())
    rounds = list(rounds or ())
    submissions = list(submissions or ())
    votes = list(votes or ())

    if popularity:
        submissions = annotate_popularity(submissions, popularity)

    league = League(
        competitors=normalize_competitors(competitors),
        rounds=normalize_rounds(rounds),
        submissions=normalize_submissions(submissions),
        votes=normalize_votes(votes),
    )

    dropped = {
        "competitors": _count(competitors) - len(league.competitors),
        "submissions": _count(submissions) - len(league.submissions),
        "votes": _count(votes) - len(league.votes),
    }
    if any(n > 0 for n in dropped.values()):
        logger.warning("build_league: dropped blank/incomplete rows %s", dropped)

    logger.debug(
        "build_league: competitors=%d rounds=%d submissions=%d votes=%d",
        len(league.competitors),
        len(league.rounds),
        len(league.submissions),
        len(league.votes),
    )
    return league


# ---------------------------------------------------------------------------
# Popularity annotation
# ---------------------------------------------------------------------------


def extract_track_id(uri: Any) -> str:
    """Extract the catalog track id from a track URI or share URL.

    Handles `spotify:track:<id>` and `https://open.spotify.com/track/<id>?...`.
    Anything else is returned unchanged.
    """
    s = coerce_str(uri).strip()
    if "spotify:track:" in s:
        return s.split("spotify:track:", 1)[1]
    if "spotify.com/track/" in s:
        tail = s.split("/track/", 1)[1]
        return tail.split("?", 1)[0]
    return s


def _popularity_of(entry: Any) -> Optional[float]:
    if isinstance(entry, Mapping):
        return optional_float(entry.get("popularity"))
    return optional_float(entry)


def annotate_popularity(
    submissions: Iterable[Any],
    popularity_by_track: Mapping[str, Any],
) -> List[Dict[str, Any]]:
    """Return copies of the submission records with `popularity` filled in.

    `popularity_by_track` maps track id to either `{"popularity": n}` or a bare
    number. Tracks absent from the mapping get `popularity=None`.
    """
    out: List[Dict[str, Any]] = []
    for row in submissions:
        if not isinstance(row, Mapping):
            continue
        track_id = extract_track_id(row.get(F_URI))
        copy = dict(row)
        copy[F_POPULARITY] = _popularity_of(popularity_by_track.get(track_id))
        out.append(copy)
    return out
