from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class LeagueSnapshotRequest(BaseModel):
    """The four league tables as parsed records, keyed by their export column names."""

    competitors: List[Dict[str, Any]] = Field(default_factory=list)
    rounds: List[Dict[str, Any]] = Field(default_factory=list)
    submissions: List[Dict[str, Any]] = Field(default_factory=list)
    votes: List[Dict[str, Any]] = Field(default_factory=list)
    popularity: Optional[Dict[str, Any]] = None  # track id -> {"popularity": n} or n
    seed: Optional[int] = None  # seeds the permutation test
