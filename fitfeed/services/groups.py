# fitfeed/services/groups.py
from sqlalchemy import select

from ..errors import Forbidden, NotFound, ValidationError
from ..models.group import Group, GroupMember


class GroupService:
    """Group lifecycle. A user belongs to at most one group at a time."""

    def __init__(self, session, directory):
        self.session = session
        self.directory = directory

    def _ensure_not_member(self, user_uuid: str):
        if self.directory.resolve_group_for_user(user_uuid) is not None:
            raise ValidationError("user already belongs to a group")

    def get_group(self, group_id: int) -> Group:
        group = self.directory.get_group(group_id)
        if group is None:
            raise NotFound("group not found")
        return group

    def create_group(self, owner_uuid: str, name: str, description=None) -> Group:
        name = (name or "").strip()
        if not name:
            raise ValidationError("name is required")
        self._ensure_not_member(owner_uuid)
        if self.session.execute(select(Group.id).filter_by(name=name)).first():
            raise ValidationError("group name already in use")

        group = Group(name=name, description=description, owner_uuid=owner_uuid)
        group.members.append(GroupMember(user_uuid=owner_uuid))
        self.session.add(group)
        self.session.commit()
        return group

    def join_group(self, group_id: int, user_uuid: str) -> Group:
        group = self.get_group(group_id)
        self._ensure_not_member(user_uuid)

        group.members.append(GroupMember(user_uuid=user_uuid))
        self.session.commit()
        return group

    def leave_group(self, group_id: int, user_uuid: str) -> None:
        membership = self.session.execute(
            select(GroupMember).filter_by(group_id=group_id, user_uuid=user_uuid)
        ).scalar_one_or_none()
        if membership is None:
            raise Forbidden("not a member of this group")

        self.session.delete(membership)
        self.session.commit()
