# fitfeed/services/statistics.py
from sqlalchemy import select

from ..models.statistics import QuarterlyStatistics, empty_time_zone_counts
from .periods import Period
from .rows import load_or_create_locked


class QuarterlyStatisticsStore:
    def __init__(self, session):
        self.session = session

    def find(self, user_uuid: str, period: Period):
        return self.session.execute(
            select(QuarterlyStatistics).filter_by(
                user_uuid=user_uuid, year=period.year, quarter=period.quarter
            )
        ).scalar_one_or_none()

    def load_or_create(self, user_uuid: str, period: Period) -> QuarterlyStatistics:
        stats, _ = load_or_create_locked(
            self.session,
            QuarterlyStatistics,
            defaults={
                "body_part": {},
                "time_zone": empty_time_zone_counts(),
                "current_streak": 0,
                "longest_streak": 0,
            },
            user_uuid=user_uuid,
            year=period.year,
            quarter=period.quarter,
        )
        return stats

    @staticmethod
    def fold(
        stats: QuarterlyStatistics,
        body_parts,
        time_label: str,
        advance_streak: bool,
        active_date=None,
    ):
        """
        Adds one post to the record. JSON columns are replaced with new dicts
        so the change is picked up on flush.
        """
        body_part = dict(stats.body_part or {})
        for part in body_parts:
            body_part[part] = body_part.get(part, 0) + 1
        stats.body_part = body_part

        time_zone = dict(stats.time_zone or empty_time_zone_counts())
        time_zone[time_label] = time_zone.get(time_label, 0) + 1
        stats.time_zone = time_zone

        if advance_streak:
            stats.current_streak = (stats.current_streak or 0) + 1
            stats.last_active_date = active_date
        stats.longest_streak = max(stats.longest_streak or 0, stats.current_streak or 0)
        return stats
