# fitfeed/services/ranking.py
import logging

from sqlalchemy import select

from ..errors import RankingFinalized
from ..models.statistics import QuarterlyRanking
from .periods import Period
from .rows import load_or_create_locked

logger = logging.getLogger(__name__)

GROUP_DAILY_POINTS = 100.0


class QuarterlyRankingAccumulator:
    """
    Group score for a quarter. Each member's first post of a day adds
    100 / (member count at that moment); earlier contributions are never
    rescaled when the group grows or shrinks.
    """

    def __init__(self, session):
        self.session = session

    def contribute(self, group_id: int, period: Period, member_count: int) -> QuarterlyRanking:
        if member_count < 1:
            raise ValueError(f"group {group_id} has no members to contribute")

        contribution = GROUP_DAILY_POINTS / member_count

        ranking, created = load_or_create_locked(
            self.session,
            QuarterlyRanking,
            defaults={"score": contribution, "is_final": False},
            type="GROUP",
            group_id=group_id,
            year=period.year,
            quarter=period.quarter,
        )

        if ranking.is_final:
            raise RankingFinalized()

        if not created:
            ranking.score = float(ranking.score or 0.0) + contribution

        logger.info(
            "group %s %sQ%s +%.4f -> %.4f",
            group_id,
            period.year,
            period.quarter,
            contribution,
            ranking.score,
        )
        return ranking

    def find(self, group_id: int, period: Period):
        return self.session.execute(
            select(QuarterlyRanking).filter_by(
                type="GROUP", group_id=group_id, year=period.year, quarter=period.quarter
            )
        ).scalar_one_or_none()

    def standings(self, period: Period, limit: int = 50) -> list[QuarterlyRanking]:
        return list(
            self.session.execute(
                select(QuarterlyRanking)
                .filter_by(type="GROUP", year=period.year, quarter=period.quarter)
                .order_by(QuarterlyRanking.score.desc(), QuarterlyRanking.group_id.asc())
                .limit(limit)
            ).scalars()
        )
