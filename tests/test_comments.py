"""Tests for comment awards."""

from superlatives.comments import calculate_longest_comment, calculate_most_comments
from superlatives.types import Competitor, Vote

ALICE = Competitor("a", "Alice")
BOB = Competitor("b", "Bob")


def _vote(voter, comment, uri="s1"):
    return Vote(voter_id=voter, uri=uri, round_id="r1", points=1, comment=comment)


class TestLongestComment:
    def test_longest_per_voter(self):
        votes = [
            _vote("a", "short"),
            _vote("a", "a much longer comment"),
            _vote("b", "medium text"),
            _vote("b", "   "),
        ]
        result = calculate_longest_comment(votes, [ALICE, BOB])
        assert result["competitor"] == ALICE
        assert result["comment"] == "a much longer comment"
        assert result["comment_length"] == 21
        assert result["rest_of_field"] == [{"name": "Bob", "score": "11 characters"}]

    def test_unknown_voters_are_skipped(self):
        votes = [_vote("ghost", "x" * 500), _vote("a", "hi")]
        result = calculate_longest_comment(votes, [ALICE])
        assert result["competitor"] == ALICE
        assert result["comment_length"] == 2

    def test_tie(self):
        votes = [_vote("b", "abcd"), _vote("a", "wxyz")]
        result = calculate_longest_comment(votes, [ALICE, BOB])
        assert result["is_tied"] is True
        assert result["tied_winners"] == ["Alice", "Bob"]
        assert [row["comment"] for row in result["tied_comments"]] == ["wxyz", "abcd"]

    def test_no_comments(self):
        result = calculate_longest_comment([_vote("a", "")], [ALICE])
        assert result["competitor"] is None
        assert result["comment"] is None
        assert result["rest_of_field"] == []


class TestMostComments:
    def test_counts_non_blank_comments(self):
        votes = [
            _vote("a", "one"),
            _vote("a", "two"),
            _vote("a", "three"),
            _vote("b", "only"),
            _vote("b", ""),
            _vote("b", "  "),
        ]
        result = calculate_most_comments(votes, [ALICE, BOB])
        assert result["competitor"] == ALICE
        assert result["comment_count"] == 3
        assert result["rest_of_field"] == [{"name": "Bob", "score": "1 comments"}]

    def test_tie(self):
        votes = [_vote("a", "one"), _vote("b", "two")]
        result = calculate_most_comments(votes, [ALICE, BOB])
        assert result["is_tied"] is True
        assert result["tied_winners"] == ["Alice", "Bob"]
        assert result["rest_of_field"] == []
