# fitfeed/services/popularity.py
"""
Popular feed ranking.

Callers fetch a recency-ordered window of ``page_size * OVERFETCH_FACTOR``
posts created within the last ``WINDOW_DAYS`` days, attach like and comment
counts, and hand the candidates to :func:`rank_popular`. The over-fetch only
lowers the chance that an older, heavily engaged post falls outside the
window. It is a heuristic and does not guarantee the globally most popular
posts are returned.

Scores are a transient sort key: they are never stored and never included in
what :func:`rank_popular` returns.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

logger = logging.getLogger(__name__)

WINDOW_DAYS = 30
OVERFETCH_FACTOR = 3

RECENCY_DAYS = 7
LIKE_WEIGHT = 1
COMMENT_WEIGHT = 3
RECENCY_WEIGHT = 2


@dataclass
class PostSummary:
    post_id: int
    created_at: datetime
    like_count: int = 0
    comment_count: int = 0
    # whatever the caller wants handed back (an ORM row, a dict...)
    payload: Any = None


def window_start(now: datetime, days: int = WINDOW_DAYS) -> datetime:
    return now - timedelta(days=days)


def popularity_score(like_count: int, comment_count: int, created_at: datetime, now: datetime) -> float:
    age_days = max(0, (now - created_at) // timedelta(days=1))
    days_since_creation = min(RECENCY_DAYS, age_days)
    recency_boost = max(0.0, (RECENCY_DAYS - days_since_creation) / RECENCY_DAYS)
    return (
        LIKE_WEIGHT * like_count
        + COMMENT_WEIGHT * comment_count
        + RECENCY_WEIGHT * recency_boost
    )


def rank_popular(candidates, now: datetime, page_size: int) -> list[PostSummary]:
    """
    Orders candidates by popularity score, highest first, and keeps the top
    ``page_size``. Equal scores keep their retrieval order.
    """
    scored = [
        (popularity_score(c.like_count, c.comment_count, c.created_at, now), c)
        for c in candidates
    ]

    for score, c in scored:
        logger.debug(
            "post %s: likes=%s comments=%s score=%.3f",
            c.post_id,
            c.like_count,
            c.comment_count,
            score,
        )

    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [c for _, c in scored[: max(0, page_size)]]
