# fitfeed/models/statistics.py
from .. import db
from ..services.periods import TIME_OF_DAY_LABELS, utcnow


def empty_time_zone_counts():
    return {label: 0 for label in TIME_OF_DAY_LABELS}


# -----------------------------
# Per-user quarterly statistics
# -----------------------------
class QuarterlyStatistics(db.Model):
    __tablename__ = "quarterly_statistics"
    __table_args__ = (
        db.UniqueConstraint("user_uuid", "year", "quarter", name="uq_stats_user_period"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_uuid = db.Column(db.String(36), db.ForeignKey("users.user_uuid"), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    quarter = db.Column(db.SmallInteger, nullable=False)

    # {"legs": 3, "back": 1}; a missing key means 0
    body_part = db.Column(db.JSON, nullable=False, default=dict)
    # {"dawn": 0, "morning": 2, "afternoon": 1, "night": 0}
    time_zone = db.Column(db.JSON, nullable=False, default=empty_time_zone_counts)

    current_streak = db.Column(db.Integer, nullable=False, default=0)
    longest_streak = db.Column(db.Integer, nullable=False, default=0)
    # local date of the last post that advanced the streak
    last_active_date = db.Column(db.Date)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def to_dict(self):
        return {
            "year": self.year,
            "quarter": self.quarter,
            "body_part": dict(self.body_part or {}),
            "time_zone": dict(self.time_zone or empty_time_zone_counts()),
            "current_streak": self.current_streak or 0,
            "longest_streak": self.longest_streak or 0,
        }


# -----------------------------
# Quarterly competitive ranking
# -----------------------------
class QuarterlyRanking(db.Model):
    """
    Score rows keyed by (type, group, year, quarter). Only the GROUP type is
    written today. Once is_final is set the row is read-only.
    """
    __tablename__ = "quarterly_rankings"
    __table_args__ = (
        db.UniqueConstraint(
            "type", "group_id", "year", "quarter", name="uq_ranking_group_period"
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(
        db.Enum("GROUP", "USER", name="ranking_type"),
        nullable=False,
        default="GROUP",
    )
    group_id = db.Column(
        db.Integer, db.ForeignKey("user_groups.id", ondelete="CASCADE"), nullable=False
    )
    year = db.Column(db.Integer, nullable=False)
    quarter = db.Column(db.SmallInteger, nullable=False)
    score = db.Column(db.Float, nullable=False, default=0.0)
    is_final = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    group = db.relationship("Group")

    def to_dict(self):
        return {
            "group_id": self.group_id,
            "group_name": self.group.name if self.group else None,
            "year": self.year,
            "quarter": self.quarter,
            "score": round(float(self.score or 0.0), 4),
            "is_final": bool(self.is_final),
        }


# -----------------------------
# Daily group activity (write-only sink)
# -----------------------------
class DailyGroupActivity(db.Model):
    __tablename__ = "daily_group_activity"
    __table_args__ = (
        db.UniqueConstraint("group_id", "date", name="uq_daily_activity_group_date"),
    )

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(
        db.Integer, db.ForeignKey("user_groups.id", ondelete="CASCADE"), nullable=False
    )
    date = db.Column(db.Date, nullable=False)
    value = db.Column(db.Integer, nullable=False, default=0)
