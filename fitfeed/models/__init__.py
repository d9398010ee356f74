# fitfeed/models/__init__.py
from .user import User
from .group import Group, GroupMember
from .post import BODY_PARTS, Comment, Like, Post, WorkoutLog
from .statistics import DailyGroupActivity, QuarterlyRanking, QuarterlyStatistics

__all__ = [
    "BODY_PARTS",
    "Comment",
    "DailyGroupActivity",
    "Group",
    "GroupMember",
    "Like",
    "Post",
    "QuarterlyRanking",
    "QuarterlyStatistics",
    "User",
    "WorkoutLog",
]
