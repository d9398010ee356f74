# fitfeed/services/posts.py
import logging
from typing import Optional

from sqlalchemy import func, or_, select

from ..errors import Forbidden, NotFound, ValidationError
from ..models.post import BODY_PARTS, Like, Post
from ..models.user import User
from . import popularity
from .activity import DailyActivityCounter
from .directory import EngagementCounts, GroupDirectory
from .periods import utcnow
from .ranking import QuarterlyRankingAccumulator
from .statistics import QuarterlyStatisticsStore
from .streaks import StreakUpdater
from .workout_logs import replace_workout_logs

logger = logging.getLogger(__name__)


def page_meta(total: int, page: int, limit: int) -> dict:
    return {
        "total_items": total,
        "items_per_page": limit,
        "total_pages": (total + limit - 1) // limit if limit else 0,
        "current_page": page,
    }


def validate_body_parts(body_parts, required: bool = True) -> list[str]:
    if body_parts is None:
        body_parts = []
    if not isinstance(body_parts, (list, tuple)):
        raise ValidationError("body_part must be a list")

    parts = list(dict.fromkeys(str(p).strip().lower() for p in body_parts))
    unknown = [p for p in parts if p not in BODY_PARTS]
    if unknown:
        raise ValidationError(f"unknown body part(s): {', '.join(unknown)}")
    if required and not parts:
        raise ValidationError("at least one body part is required")
    return parts


def validate_duration(duration) -> Optional[int]:
    if duration is None:
        return None
    try:
        duration = int(duration)
    except (TypeError, ValueError):
        raise ValidationError("duration must be an integer number of minutes")
    if duration < 0:
        raise ValidationError("duration must not be negative")
    return duration


class PostService:
    def __init__(
        self,
        session,
        groups,
        engagement,
        updater,
        popular_window_days: int = popularity.WINDOW_DAYS,
        overfetch_factor: int = popularity.OVERFETCH_FACTOR,
    ):
        self.session = session
        self.groups = groups
        self.engagement = engagement
        self.updater = updater
        self.popular_window_days = popular_window_days
        self.overfetch_factor = overfetch_factor

    # ------------------------------
    # Helpers
    # ------------------------------
    def _get_user(self, user_uuid: str) -> User:
        user = self.session.execute(
            select(User).filter_by(user_uuid=user_uuid)
        ).scalar_one_or_none()
        if user is None:
            raise NotFound("user not found")
        return user

    def _get_post(self, post_id: int) -> Post:
        post = self.session.get(Post, post_id)
        if post is None:
            raise NotFound("post not found")
        return post

    def _visibility_clause(self, viewer_uuid: Optional[str]):
        clauses = [Post.is_public.is_(True)]
        if viewer_uuid:
            clauses.append(Post.user_uuid == viewer_uuid)
            group = self.groups.resolve_group_for_user(viewer_uuid)
            if group is not None:
                clauses.append(Post.user_uuid.in_(group.member_uuids))
        return or_(*clauses)

    def _can_view(self, post: Post, viewer_uuid: Optional[str]) -> bool:
        if post.is_public:
            return True
        if not viewer_uuid:
            return False
        if post.user_uuid == viewer_uuid:
            return True
        group = self.groups.resolve_group_for_user(viewer_uuid)
        return group is not None and post.user_uuid in group.member_uuids

    def _serialize(self, posts, viewer_uuid: Optional[str], like_counts=None, comment_counts=None):
        post_ids = [p.id for p in posts]
        if like_counts is None:
            like_counts = self.engagement.like_counts_by_post_ids(post_ids)
        if comment_counts is None:
            comment_counts = self.engagement.comment_counts_by_post_ids(post_ids)

        payload = []
        for post in posts:
            item = post.to_summary_dict()
            item["like_count"] = like_counts.get(post.id, 0)
            item["comment_count"] = comment_counts.get(post.id, 0)
            item["is_mine"] = bool(viewer_uuid) and post.user_uuid == viewer_uuid
            item["user"] = post.author.to_public_dict() if post.author else None
            payload.append(item)
        return payload

    def _paginate(self, stmt, page: int, limit: int):
        total = self.session.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar_one()
        posts = list(
            self.session.execute(
                stmt.order_by(Post.created_at.desc(), Post.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            ).scalars()
        )
        return posts, total

    # ------------------------------
    # Create / update / delete
    # ------------------------------
    def create_post(
        self,
        user_uuid: str,
        title: str,
        content: Optional[str] = None,
        image_url: Optional[str] = None,
        is_public: bool = True,
        body_parts=None,
        duration=None,
    ):
        """
        Saves the post and folds it into the author's statistics and group
        ranking in one transaction. Returns (post, RecordResult).
        """
        self._get_user(user_uuid)
        title = (title or "").strip()
        if not title:
            raise ValidationError("title is required")
        parts = validate_body_parts(body_parts)
        duration = validate_duration(duration)

        now = utcnow()
        post = Post(
            user_uuid=user_uuid,
            title=title,
            content=content,
            image_url=image_url,
            is_public=bool(is_public),
            created_at=now,
            updated_at=now,
        )

        try:
            self.session.add(post)
            self.session.flush()

            group = self.groups.resolve_group_for_user(user_uuid)
            result = self.updater.record_post(
                user_uuid, group, parts, duration, now, post=post
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        if result.degraded:
            logger.warning(
                "post %s saved with degraded side effects: %s",
                post.id,
                ", ".join(result.degraded_reasons),
            )
        return post, result

    def update_post(self, post_id: int, user_uuid: str, data: dict):
        post = self._get_post(post_id)
        if post.user_uuid != user_uuid:
            raise Forbidden("you are not allowed to edit this post")

        parts = validate_body_parts(data.get("body_part"), required=False)
        duration = validate_duration(data.get("duration"))

        if "title" in data:
            title = (data.get("title") or "").strip()
            if not title:
                raise ValidationError("title must not be empty")
            post.title = title
        for field in ("content", "image_url"):
            if field in data:
                setattr(post, field, data.get(field))
        if "is_public" in data:
            post.is_public = bool(data.get("is_public"))

        try:
            if parts and duration:
                replace_workout_logs(self.session, post, parts, duration)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        return self.find_one_post(post_id, user_uuid)

    def remove_post(self, post_id: int, user_uuid: str) -> None:
        post = self._get_post(post_id)
        if post.user_uuid != user_uuid:
            raise Forbidden("you are not allowed to delete this post")

        self.session.delete(post)
        self.session.commit()

    def toggle_like(self, post_id: int, user_uuid: str) -> dict:
        post = self._get_post(post_id)
        if not self._can_view(post, user_uuid):
            raise NotFound("post not found")

        like = self.session.execute(
            select(Like).filter_by(post_id=post_id, user_uuid=user_uuid)
        ).scalar_one_or_none()
        if like is None:
            self.session.add(Like(post_id=post_id, user_uuid=user_uuid))
            liked = True
        else:
            self.session.delete(like)
            liked = False
        self.session.commit()

        return {
            "liked": liked,
            "like_count": self.engagement.like_counts_by_post_ids([post_id])[post_id],
        }

    # ------------------------------
    # Reads
    # ------------------------------
    def find_one_post(self, post_id: int, viewer_uuid: Optional[str] = None) -> dict:
        post = self._get_post(post_id)
        if not self._can_view(post, viewer_uuid):
            raise NotFound("post not found")

        payload = post.to_summary_dict()
        payload["body_part"] = list(dict.fromkeys(log.body_part for log in post.workout_logs))
        payload["duration"] = sum(log.duration for log in post.workout_logs)
        payload["like_count"] = self.engagement.like_counts_by_post_ids([post.id])[post.id]

        comments = sorted(post.comments, key=lambda c: (c.created_at, c.id))
        payload["comments"] = [c.to_dict(viewer_uuid) for c in comments]
        payload["comment_count"] = len(comments)
        payload["user_liked"] = (
            self.engagement.has_liked(viewer_uuid, post.id) if viewer_uuid else False
        )
        payload["is_mine"] = bool(viewer_uuid) and post.user_uuid == viewer_uuid
        payload["user"] = post.author.to_public_dict() if post.author else None
        return payload

    def find_all_posts(self, author_uuid: str, viewer_uuid: Optional[str], page: int, limit: int) -> dict:
        stmt = select(Post).where(Post.user_uuid == author_uuid)
        if viewer_uuid != author_uuid:
            stmt = stmt.where(self._visibility_clause(viewer_uuid))

        posts, total = self._paginate(stmt, page, limit)
        return {
            "data": self._serialize(posts, viewer_uuid),
            "meta": page_meta(total, page, limit),
        }

    def find_posts_by_nickname(self, nickname: str, viewer_uuid: Optional[str], page: int = 1, limit: int = 10) -> dict:
        user = self.session.execute(
            select(User).filter_by(nickname=nickname)
        ).scalar_one_or_none()
        if user is None:
            raise NotFound("user not found")
        return self.find_all_posts(user.user_uuid, viewer_uuid, page, limit)

    def find_group_posts(self, group_id: int, viewer_uuid: Optional[str], page: int, limit: int) -> dict:
        group = self.groups.get_group(group_id)
        if group is None:
            raise NotFound("group not found")

        stmt = select(Post).where(Post.user_uuid.in_(self.groups.group_members(group_id)))
        if not (viewer_uuid and self.groups.is_user_in_group(viewer_uuid, group_id)):
            stmt = stmt.where(Post.is_public.is_(True))

        posts, total = self._paginate(stmt, page, limit)
        return {
            "data": self._serialize(posts, viewer_uuid),
            "meta": page_meta(total, page, limit),
        }

    def find_popular_posts(self, viewer_uuid: Optional[str], page: int, limit: int) -> dict:
        """
        Over-fetches ``limit * overfetch_factor`` of the most recent visible
        posts inside the popularity window, then ranks them by engagement.
        Best effort: a popular post older than the fetched slice is missed.
        """
        now = utcnow()
        stmt = select(Post).where(
            self._visibility_clause(viewer_uuid),
            Post.created_at >= popularity.window_start(now, self.popular_window_days),
        )
        total = self.session.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()

        fetch = limit * self.overfetch_factor
        posts = list(
            self.session.execute(
                stmt.order_by(Post.created_at.desc(), Post.id.desc())
                .offset((page - 1) * fetch)
                .limit(fetch)
            ).scalars()
        )
        if not posts:
            return {"data": [], "meta": page_meta(total, page, limit)}

        post_ids = [p.id for p in posts]
        like_counts = self.engagement.like_counts_by_post_ids(post_ids)
        comment_counts = self.engagement.comment_counts_by_post_ids(post_ids)

        candidates = [
            popularity.PostSummary(
                post_id=p.id,
                created_at=p.created_at,
                like_count=like_counts.get(p.id, 0),
                comment_count=comment_counts.get(p.id, 0),
                payload=p,
            )
            for p in posts
        ]
        ranked = popularity.rank_popular(candidates, now, limit)

        return {
            "data": self._serialize(
                [c.payload for c in ranked], viewer_uuid, like_counts, comment_counts
            ),
            "meta": page_meta(total, page, limit),
        }


def build_post_service(session, config) -> PostService:
    """Wires the post service and the aggregation engine onto one session."""
    groups = GroupDirectory(session)
    updater = StreakUpdater(
        session,
        groups=groups,
        statistics=QuarterlyStatisticsStore(session),
        rankings=QuarterlyRankingAccumulator(session),
        activity=DailyActivityCounter(session),
        utc_offset_hours=config.get("REFERENCE_UTC_OFFSET_HOURS", 9),
    )
    return PostService(
        session,
        groups=groups,
        engagement=EngagementCounts(session),
        updater=updater,
        popular_window_days=config.get("POPULAR_WINDOW_DAYS", popularity.WINDOW_DAYS),
        overfetch_factor=config.get("POPULAR_OVERFETCH_FACTOR", popularity.OVERFETCH_FACTOR),
    )
