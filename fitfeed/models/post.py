# fitfeed/models/post.py
from .. import db
from ..services.periods import utcnow

BODY_PARTS = (
    "chest",
    "back",
    "shoulders",
    "arms",
    "legs",
    "core",
    "glutes",
    "cardio",
    "full_body",
)


class Post(db.Model):
    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)
    user_uuid = db.Column(
        db.String(36), db.ForeignKey("users.user_uuid"), nullable=False, index=True
    )
    title = db.Column(db.String(100), nullable=False)
    content = db.Column(db.Text)
    image_url = db.Column(db.String(255))
    is_public = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    author = db.relationship("User", backref="posts")
    workout_logs = db.relationship(
        "WorkoutLog",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="WorkoutLog.id",
    )
    comments = db.relationship(
        "Comment", back_populates="post", cascade="all, delete-orphan"
    )
    likes = db.relationship("Like", back_populates="post", cascade="all, delete-orphan")

    def to_summary_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "image_url": self.image_url,
            "is_public": self.is_public,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class WorkoutLog(db.Model):
    """One row per (post, body part); the post's duration is split evenly."""
    __tablename__ = "workout_logs"

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(
        db.Integer, db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_uuid = db.Column(db.String(36), nullable=False)
    body_part = db.Column(db.String(20), nullable=False)
    duration = db.Column(db.Integer, nullable=False, default=0)  # minutes
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    post = db.relationship("Post", back_populates="workout_logs")


class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(
        db.Integer, db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_uuid = db.Column(db.String(36), db.ForeignKey("users.user_uuid"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    post = db.relationship("Post", back_populates="comments")
    author = db.relationship("User")

    def to_dict(self, viewer_uuid=None):
        return {
            "id": self.id,
            "post_id": self.post_id,
            "content": self.content,
            "is_mine": bool(viewer_uuid) and self.user_uuid == viewer_uuid,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "user": {
                "user_uuid": self.user_uuid,
                "nickname": self.author.nickname,
                "profile_image": self.author.profile_image,
            }
            if self.author
            else None,
        }


class Like(db.Model):
    __tablename__ = "likes"
    __table_args__ = (db.UniqueConstraint("post_id", "user_uuid", name="uq_like_post_user"),)

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(
        db.Integer, db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_uuid = db.Column(db.String(36), db.ForeignKey("users.user_uuid"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    post = db.relationship("Post", back_populates="likes")
