from __future__ import annotations

"""Comment awards: longest single comment and most comments given."""

from dataclasses import dataclass
from typing import Dict, List, Sequence

from .ranking import empty_award, finish_award, rank_field
from .types import AwardResult, Competitor, Vote, competitor_lookup


@dataclass(frozen=True)
class _LongestComment:
    competitor: Competitor
    comment: str

    @property
    def length(self) -> int:
        return len(self.comment)


def calculate_longest_comment(votes: Sequence[Vote], competitors: Sequence[Competitor]) -> AwardResult:
    """Each voter's longest comment, ranked by character count.

    When a voter wrote several comments of the same maximal length, the first
    one in vote order is kept.
    """
    lookup = competitor_lookup(competitors)
    best: Dict[str, str] = {}
    for v in votes:
        if not v.has_comment or v.voter_id not in lookup:
            continue
        current = best.get(v.voter_id)
        if current is None or len(v.comment) > len(current):
            best[v.voter_id] = v.comment

    entries = [_LongestComment(competitor=lookup[cid], comment=text) for cid, text in best.items()]
    ranked = rank_field(entries, metric=lambda e: e.length, identity=lambda e: e.competitor.id)
    if ranked.winner is None:
        return empty_award(competitor=None, comment=None, comment_length=None, tied_comments=None)

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda e: e.competitor.name,
        score_of=lambda e: f"{e.length} characters",
        fields={
            "competitor": w.competitor,
            "comment": w.comment,
            "comment_length": w.length,
            "tied_comments": (
                [{"competitor": e.competitor, "comment": e.comment} for e in ranked.tied] if ranked.is_tied else None
            ),
        },
    )


@dataclass(frozen=True)
class _CommentCount:
    competitor: Competitor
    count: int


def calculate_most_comments(votes: Sequence[Vote], competitors: Sequence[Competitor]) -> AwardResult:
    """Number of non-blank comments each voter left."""
    lookup = competitor_lookup(competitors)
    counts: Dict[str, int] = {}
    for v in votes:
        if v.has_comment:
            counts[v.voter_id] = counts.get(v.voter_id, 0) + 1

    entries: List[_CommentCount] = [
        _CommentCount(competitor=lookup[cid], count=n) for cid, n in counts.items() if cid in lookup
    ]
    ranked = rank_field(entries, metric=lambda e: e.count, identity=lambda e: e.competitor.id)
    if ranked.winner is None:
        return empty_award(competitor=None, comment_count=None)

    return finish_award(
        ranked,
        name_of=lambda e: e.competitor.name,
        score_of=lambda e: f"{e.count} comments",
        fields={"competitor": ranked.winner.competitor, "comment_count": ranked.winner.count},
    )
