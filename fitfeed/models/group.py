# fitfeed/models/group.py
from .. import db
from ..services.periods import utcnow


class Group(db.Model):
    __tablename__ = "user_groups"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.String(255))
    owner_uuid = db.Column(db.String(36), db.ForeignKey("users.user_uuid"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    members = db.relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupMember.id",
    )

    @property
    def member_uuids(self) -> list[str]:
        return [m.user_uuid for m in self.members]

    def to_dict(self, include_members: bool = False):
        payload = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "member_count": len(self.members),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_members:
            payload["members"] = [m.to_dict() for m in self.members]
        return payload


class GroupMember(db.Model):
    """
    A user belongs to at most one group at a time, enforced by the unique
    constraint on user_uuid.
    """
    __tablename__ = "group_members"

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(
        db.Integer, db.ForeignKey("user_groups.id", ondelete="CASCADE"), nullable=False
    )
    user_uuid = db.Column(
        db.String(36), db.ForeignKey("users.user_uuid"), unique=True, nullable=False
    )
    joined_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    group = db.relationship("Group", back_populates="members")
    user = db.relationship("User", backref=db.backref("membership", uselist=False))

    def to_dict(self):
        return {
            "user_uuid": self.user_uuid,
            "nickname": self.user.nickname if self.user else None,
            "profile_image": self.user.profile_image if self.user else None,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
        }
