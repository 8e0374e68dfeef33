from __future__ import annotations

import logging
import os
import random
from typing import Optional

from fastapi import APIRouter, HTTPException

from app.schemas.superlatives import LeagueSnapshotRequest
from superlatives import (
    EXPLANATIONS,
    analyze_submission_timing,
    build_league,
    compute_award,
    compute_league_report,
)
from superlatives.types import League

logger = logging.getLogger(__name__)

router = APIRouter()


def _league_from(req: LeagueSnapshotRequest) -> League:
    return build_league(
        competitors=req.competitors,
        rounds=req.rounds,
        submissions=req.submissions,
        votes=req.votes,
        popularity=req.popularity,
    )


def _rng_for(req: LeagueSnapshotRequest) -> random.Random:
    """Request seed first, then SUPERLATIVES_RANDOM_SEED, else unseeded."""
    if req.seed is not None:
        return random.Random(req.seed)
    raw = (os.environ.get("SUPERLATIVES_RANDOM_SEED") or "").strip()
    if not raw:
        return random.Random()
    try:
        return random.Random(int(raw))
    except ValueError:
        logger.warning("Ignoring non-integer SUPERLATIVES_RANDOM_SEED=%r", raw)
        return random.Random()


@router.post("/api/superlatives")
async def api_superlatives(req: LeagueSnapshotRequest):
    """Every award plus the submission timing analysis."""
    try:
        return compute_league_report(_league_from(req), rng=_rng_for(req))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("superlatives report failed")
        raise HTTPException(status_code=500, detail=f"Superlatives computation failed: {e}")


@router.post("/api/superlatives/timing")
async def api_superlatives_timing(req: LeagueSnapshotRequest):
    try:
        league = _league_from(req)
        return analyze_submission_timing(
            league.competitors, league.rounds, league.submissions, league.votes, rng=_rng_for(req)
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("submission timing analysis failed")
        raise HTTPException(status_code=500, detail=f"Submission timing analysis failed: {e}")


@router.post("/api/superlatives/award/{award_key}")
async def api_superlative_award(award_key: str, req: LeagueSnapshotRequest):
    try:
        return {"award": award_key, "result": compute_award(_league_from(req), award_key)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("award computation failed: %s", award_key)
        raise HTTPException(status_code=500, detail=f"Award computation failed: {e}")


@router.get("/api/superlatives/explanations")
async def api_superlative_explanations(key: Optional[str] = None):
    if key is None:
        return {"explanations": EXPLANATIONS}
    text = EXPLANATIONS.get(key)
    if text is None:
        raise HTTPException(status_code=404, detail=f"No explanation for {key!r}")
    return {"key": key, "explanation": text}
