from __future__ import annotations

"""Plain-language "how it works" text for each award.

Keys match `superlatives.superlatives.AWARD_KEYS`, plus `submission_timing`
for the timing analyzer.
"""

from typing import Dict, Optional

EXPLANATIONS: Dict[str, str] = {
    "most_popular": (
        "Goes to the competitor who received the most points across all of their submissions.\n\n"
        "How it works:\n"
        "- Add up every point given to each competitor's songs\n"
        "- Self-votes count toward the total\n"
        "- The highest total wins"
    ),
    "least_popular": (
        "Consistently popular: the highest average points per submission, rewarding steady quality "
        "over volume.\n\n"
        "How it works:\n"
        "- Total points received divided by number of submissions\n"
        "- Only competitors with 3+ submissions are considered\n"
        "- The highest average wins"
    ),
    "most_average": (
        "Goes to the competitor whose average score sits closest to the league average.\n\n"
        "How it works:\n"
        "- Average points per submission for each competitor with 3+ submissions\n"
        "- League average = mean of those averages\n"
        "- The smallest distance from the league average wins"
    ),
    "best_performance": (
        "The single best round result of the season.\n\n"
        "How it works:\n"
        "- Total the points each song received in its own round\n"
        "- The song with the highest total wins for its submitter"
    ),
    "longest_comment": (
        "Goes to the competitor who wrote the longest single comment while voting.\n\n"
        "How it works:\n"
        "- Take each voter's longest non-empty comment\n"
        "- Compare by character count\n"
        "- The longest comment wins"
    ),
    "most_comments": (
        "Goes to the competitor who left the most comments while voting.\n\n"
        "How it works:\n"
        "- Count every non-empty comment per voter\n"
        "- The highest count wins"
    ),
    "most_compatible": (
        "The pair who consistently gave each other the most points.\n\n"
        "How it works:\n"
        "- Average points each gave to the other's submissions\n"
        "- Compatibility = geometric mean of both averages, e.g. sqrt(3 x 4) = 3.46\n"
        "- Self-votes are ignored and both must have voted for each other\n"
        "- Both need 3+ submissions that received votes\n"
        "- The highest score wins"
    ),
    "least_compatible": (
        "The pair who consistently gave each other the fewest points.\n\n"
        "How it works:\n"
        "- Same score as most compatible, e.g. sqrt(0.5 x 1) = 0.71\n"
        "- The lowest score wins"
    ),
    "most_similar": (
        "The pair who voted most alike on the same songs.\n\n"
        "How it works:\n"
        "- Compare the points both gave to songs in the same round\n"
        "- Similarity = 5 minus the average point difference, never below 0\n"
        "- Requires 10+ common votes across 3+ common rounds\n"
        "- The highest similarity wins"
    ),
    "least_similar": (
        "The pair who voted most differently on the same songs.\n\n"
        "How it works:\n"
        "- Same similarity score as most similar\n"
        "- The lowest similarity wins"
    ),
    "early_voter": (
        "Goes to the competitor who most often voted among the first quarter of voters in a round.\n\n"
        "How it works:\n"
        "- Take each competitor's first vote time per round\n"
        "- The earliest 25% of voters (rounded up) are early voters\n"
        "- The most early rounds wins"
    ),
    "late_voter": (
        "Goes to the competitor who most often voted among the last quarter of voters in a round.\n\n"
        "How it works:\n"
        "- Take each competitor's last vote time per round\n"
        "- The latest 25% of voters (rounded up) are late voters\n"
        "- The most late rounds wins"
    ),
    "mainstream": (
        "Goes to the competitor who submitted the most popular songs.\n\n"
        "How it works:\n"
        "- Each song carries a catalog popularity score from 0 to 100\n"
        "- Average it over each competitor's annotated submissions (3+ required)\n"
        "- The highest average wins"
    ),
    "trend_setter": (
        "Goes to the competitor who submitted the most obscure songs.\n\n"
        "How it works:\n"
        "- Same popularity average as mainstream\n"
        "- The lowest average wins"
    ),
    "vote_spreader": (
        "Goes to the competitor who spreads points most evenly.\n\n"
        "How it works:\n"
        "- Standard deviation of the points given per vote\n"
        "- Spread score = 1 / (standard deviation + 0.1)\n"
        "- Needs 30+ points handed out over 10+ votes\n"
        "- The highest spread score wins"
    ),
    "zero_vote_giver": (
        "Goes to the competitor who handed out the most zero-point votes.\n\n"
        "How it works:\n"
        "- Count votes worth 0 points\n"
        "- Needs 30+ points handed out\n"
        "- The highest count wins"
    ),
    "single_vote_giver": (
        "Goes to the competitor who most often gave out single points.\n\n"
        "How it works:\n"
        "- Count votes worth exactly 1 point\n"
        "- Divide by the total points handed out\n"
        "- Needs 30+ points handed out\n"
        "- The highest percentage wins"
    ),
    "max_vote_giver": (
        "Goes to the competitor who most often went all-in on a single song.\n\n"
        "How it works:\n"
        "- A round is all-in when every point went to one song\n"
        "- Rounds where no points were given are skipped\n"
        "- Needs 3+ rounds voted in\n"
        "- The highest all-in percentage wins"
    ),
    "comeback_kid": (
        "Goes to the competitor with the biggest bounce back from a low round.\n\n"
        "How it works:\n"
        "- For every low point, find the best score in a later round\n"
        "- Keep the biggest rise (at least 5 points)\n"
        "- Needs submissions in 3+ rounds\n"
        "- The biggest comeback wins"
    ),
    "doesnt_vote": (
        "Goes to the competitor who missed the most rounds of voting.\n\n"
        "How it works:\n"
        "- Compare the rounds each competitor voted in with the total rounds\n"
        "- Only competitors who missed at least 1 round are considered\n"
        "- The most missed rounds wins"
    ),
    "early_submitter": (
        "Goes to the competitor whose songs did best when submitted early in a round.\n\n"
        "How it works:\n"
        "- Each song gets a submission position in its round, 0% for first and 100% for last\n"
        "- Points are turned into a standing within the round so rounds of any size compare fairly\n"
        "- Needs 4+ timed songs, with at least 2 in the first half and 2 in the second half\n"
        "- The largest early-minus-late standing difference wins"
    ),
    "late_submitter": (
        "Goes to the competitor whose songs did best when submitted late in a round.\n\n"
        "How it works:\n"
        "- Same positions and within-round standings as the early submitter award\n"
        "- Needs 4+ timed songs, with at least 2 in the first half and 2 in the second half\n"
        "- The largest late-over-early standing advantage wins"
    ),
    "submission_timing": (
        "Checks whether submitting early or late in a round goes with more points.\n\n"
        "How it works:\n"
        "- Rank each round's submissions by time, 0 for first and 1 for last\n"
        "- Correlate that position with points received\n"
        "- A permutation test estimates how likely the correlation is by chance\n"
        "- Competitors with 3+ timed submissions get their own result"
    ),
}


def get_explanation(key: str) -> Optional[str]:
    return EXPLANATIONS.get(key)
