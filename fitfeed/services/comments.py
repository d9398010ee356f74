# fitfeed/services/comments.py
from typing import Optional

from sqlalchemy import func, select

from ..errors import Forbidden, NotFound, ValidationError
from ..models.post import Comment, Post
from .posts import page_meta


class CommentService:
    def __init__(self, session, posts):
        self.session = session
        self.posts = posts

    def _get_comment(self, comment_id: int) -> Comment:
        comment = self.session.get(Comment, comment_id)
        if comment is None:
            raise NotFound("comment not found")
        return comment

    @staticmethod
    def _clean_content(content) -> str:
        content = (content or "").strip()
        if not content:
            raise ValidationError("content is required")
        return content

    def create_comment(self, post_id: int, user_uuid: str, content: str) -> Comment:
        # raises NotFound when the post is missing or hidden from the caller
        self.posts.find_one_post(post_id, user_uuid)

        comment = Comment(
            post_id=post_id, user_uuid=user_uuid, content=self._clean_content(content)
        )
        self.session.add(comment)
        self.session.commit()
        return comment

    def find_all_comments(self, post_id: int, viewer_uuid: Optional[str], page: int, limit: int) -> dict:
        if self.session.get(Post, post_id) is None:
            raise NotFound("post not found")

        total = self.session.execute(
            select(func.count(Comment.id)).where(Comment.post_id == post_id)
        ).scalar_one()
        comments = self.session.execute(
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars()

        return {
            "data": [c.to_dict(viewer_uuid) for c in comments],
            "meta": page_meta(total, page, limit),
        }

    def find_one_comment(self, comment_id: int, viewer_uuid: Optional[str] = None) -> dict:
        return self._get_comment(comment_id).to_dict(viewer_uuid)

    def update_comment(self, comment_id: int, user_uuid: str, content: str) -> dict:
        comment = self._get_comment(comment_id)
        if comment.user_uuid != user_uuid:
            raise Forbidden("you are not allowed to edit this comment")

        comment.content = self._clean_content(content)
        self.session.commit()
        return comment.to_dict(user_uuid)

    def remove_comment(self, comment_id: int, user_uuid: str) -> None:
        comment = self._get_comment(comment_id)
        if comment.user_uuid != user_uuid:
            raise Forbidden("you are not allowed to delete this comment")

        self.session.delete(comment)
        self.session.commit()
