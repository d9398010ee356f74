# fitfeed/services/directory.py
"""
Lookups the aggregation engine needs from the rest of the app: group
membership and per-post engagement counts. They are passed into services
explicitly so tests can swap them for fakes.
"""
from sqlalchemy import func, select

from ..models.group import Group, GroupMember
from ..models.post import Comment, Like


class GroupDirectory:
    def __init__(self, session):
        self.session = session

    def resolve_group_for_user(self, user_uuid: str):
        membership = self.session.execute(
            select(GroupMember).filter_by(user_uuid=user_uuid)
        ).scalar_one_or_none()
        return membership.group if membership else None

    def current_member_count(self, group_id: int) -> int:
        return self.session.execute(
            select(func.count(GroupMember.id)).where(GroupMember.group_id == group_id)
        ).scalar_one()

    def group_members(self, group_id: int) -> list[str]:
        return list(
            self.session.execute(
                select(GroupMember.user_uuid)
                .where(GroupMember.group_id == group_id)
                .order_by(GroupMember.joined_at, GroupMember.id)
            ).scalars()
        )

    def is_user_in_group(self, user_uuid: str, group_id: int) -> bool:
        return (
            self.session.execute(
                select(GroupMember.id).filter_by(user_uuid=user_uuid, group_id=group_id)
            ).first()
            is not None
        )

    def get_group(self, group_id: int):
        return self.session.get(Group, group_id)


def _counts_by_post(session, model, post_ids) -> dict[int, int]:
    if not post_ids:
        return {}

    counts = {post_id: 0 for post_id in post_ids}
    rows = session.execute(
        select(model.post_id, func.count(model.id))
        .where(model.post_id.in_(post_ids))
        .group_by(model.post_id)
    ).all()
    for post_id, count in rows:
        counts[post_id] = int(count)
    return counts


class EngagementCounts:
    def __init__(self, session):
        self.session = session

    def like_counts_by_post_ids(self, post_ids) -> dict[int, int]:
        return _counts_by_post(self.session, Like, list(post_ids))

    def comment_counts_by_post_ids(self, post_ids) -> dict[int, int]:
        return _counts_by_post(self.session, Comment, list(post_ids))

    def has_liked(self, user_uuid: str, post_id: int) -> bool:
        return (
            self.session.execute(
                select(Like.id).filter_by(user_uuid=user_uuid, post_id=post_id)
            ).first()
            is not None
        )
