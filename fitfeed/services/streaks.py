# fitfeed/services/streaks.py
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select

from ..errors import MembershipRequired, ValidationError
from ..models.post import Post
from ..models.statistics import QuarterlyRanking, QuarterlyStatistics
from . import periods
from .workout_logs import replace_workout_logs

logger = logging.getLogger(__name__)


class RecordOutcome(str, enum.Enum):
    OK = "ok"
    # primary writes succeeded, a secondary reporting write did not
    DEGRADED = "degraded"


@dataclass
class RecordResult:
    outcome: RecordOutcome
    statistics: QuarterlyStatistics
    ranking: Optional[QuarterlyRanking] = None
    qualifying: bool = False
    degraded_reasons: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return self.outcome is RecordOutcome.DEGRADED


class StreakUpdater:
    """
    Folds an accepted post into the author's quarterly statistics and, for
    the author's first post of the local day, advances the streak and credits
    the author's group.

    Nothing here commits. The caller owns the transaction, so a failure in
    the statistics or ranking path rolls back the post as well. The daily
    activity counter runs in its own SAVEPOINT and only degrades the result
    when it fails.

    MembershipRequired is raised after the statistics row is locked and can
    leave a new, empty row in the session; the caller rolls it back with the
    post.
    """

    def __init__(self, session, groups, statistics, rankings, activity, utc_offset_hours: int):
        self.session = session
        self.groups = groups
        self.statistics = statistics
        self.rankings = rankings
        self.activity = activity
        self.utc_offset_hours = utc_offset_hours

    def already_posted_today(
        self, user_uuid: str, timestamp: datetime, exclude_post_id: Optional[int] = None
    ) -> bool:
        start, end = periods.local_day_bounds(timestamp, self.utc_offset_hours)
        stmt = select(Post.id).where(
            Post.user_uuid == user_uuid,
            Post.created_at >= start,
            Post.created_at < end,
        )
        if exclude_post_id is not None:
            stmt = stmt.where(Post.id != exclude_post_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def record_post(
        self,
        user_uuid: str,
        group,
        body_parts,
        duration_minutes: Optional[int],
        timestamp: datetime,
        post: Optional[Post] = None,
    ) -> RecordResult:
        parts = list(dict.fromkeys(body_parts or []))
        if not parts:
            raise ValidationError("at least one body part is required")

        period = periods.resolve_period(timestamp, self.utc_offset_hours)
        label = periods.time_of_day_label(timestamp, self.utc_offset_hours)
        today = periods.local_date(timestamp, self.utc_offset_hours)

        # The statistics row lock serialises posts by the same user, so the
        # same-day check below sees any credit committed before it.
        stats = self.statistics.load_or_create(user_uuid, period)
        exclude_id = post.id if post is not None else None
        posted_today = stats.last_active_date == today or self.already_posted_today(
            user_uuid, timestamp, exclude_id
        )

        if group is None and not posted_today:
            raise MembershipRequired()

        self.statistics.fold(
            stats, parts, label, advance_streak=not posted_today, active_date=today
        )

        result = RecordResult(
            outcome=RecordOutcome.OK, statistics=stats, qualifying=not posted_today
        )

        if not posted_today:
            member_count = self.groups.current_member_count(group.id)
            result.ranking = self.rankings.contribute(group.id, period, member_count)
            self._bump_daily_activity(group.id, timestamp, result)

        if post is not None and duration_minutes:
            replace_workout_logs(self.session, post, parts, duration_minutes)

        self.session.flush()
        return result

    def _bump_daily_activity(self, group_id: int, timestamp: datetime, result: RecordResult):
        day = periods.local_date(timestamp, self.utc_offset_hours)
        try:
            with self.session.begin_nested():
                self.activity.increment(group_id, day)
        except Exception as e:
            logger.warning(
                "daily activity update failed group_id=%s date=%s: %s",
                group_id,
                day.isoformat(),
                e,
            )
            result.outcome = RecordOutcome.DEGRADED
            result.degraded_reasons.append("daily_group_activity")
