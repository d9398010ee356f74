# fitfeed/routes/group_routes.py
from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from .. import db
from ..services.directory import GroupDirectory
from ..services.groups import GroupService

groups_bp = Blueprint("groups", __name__)


def _group_service():
    return GroupService(db.session, GroupDirectory(db.session))


@groups_bp.route("", methods=["POST"])
@jwt_required()
def create_group():
    data = request.get_json(silent=True) or {}
    group = _group_service().create_group(
        get_jwt_identity(), data.get("name"), data.get("description")
    )
    return jsonify({"group": group.to_dict(include_members=True)}), 201


@groups_bp.route("/mine", methods=["GET"])
@jwt_required()
def my_group():
    group = GroupDirectory(db.session).resolve_group_for_user(get_jwt_identity())
    return jsonify({"group": group.to_dict(include_members=True) if group else None}), 200


@groups_bp.route("/<int:group_id>", methods=["GET"])
@jwt_required(optional=True)
def get_group(group_id: int):
    group = _group_service().get_group(group_id)
    return jsonify({"group": group.to_dict(include_members=True)}), 200


@groups_bp.route("/<int:group_id>/join", methods=["POST"])
@jwt_required()
def join_group(group_id: int):
    group = _group_service().join_group(group_id, get_jwt_identity())
    return jsonify({"group": group.to_dict(include_members=True)}), 200


@groups_bp.route("/<int:group_id>/leave", methods=["POST"])
@jwt_required()
def leave_group(group_id: int):
    _group_service().leave_group(group_id, get_jwt_identity())
    return jsonify({"message": "left group", "group_id": group_id}), 200
