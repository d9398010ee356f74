# fitfeed/routes/comment_routes.py
from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from .helpers import comment_service, page_args, safe_int, viewer_uuid

comments_bp = Blueprint("comments", __name__)


@comments_bp.route("", methods=["POST"])
@jwt_required()
def create_comment():
    """
    Body:
    {
      "post_id": 12,
      "content": "nice!"
    }
    """
    data = request.get_json(silent=True) or {}
    post_id = safe_int(data.get("post_id"), 0)
    if not post_id:
        return jsonify({"message": "post_id is required"}), 400

    comment = comment_service().create_comment(post_id, get_jwt_identity(), data.get("content"))
    return jsonify({"comment": comment.to_dict(comment.user_uuid)}), 201


@comments_bp.route("/post/<int:post_id>", methods=["GET"])
@jwt_required(optional=True)
def list_comments(post_id: int):
    page, limit = page_args()
    return jsonify(comment_service().find_all_comments(post_id, viewer_uuid(), page, limit)), 200


@comments_bp.route("/<int:comment_id>", methods=["GET"])
@jwt_required(optional=True)
def get_comment(comment_id: int):
    return jsonify({"comment": comment_service().find_one_comment(comment_id, viewer_uuid())}), 200


@comments_bp.route("/<int:comment_id>", methods=["PATCH"])
@jwt_required()
def update_comment(comment_id: int):
    data = request.get_json(silent=True) or {}
    comment = comment_service().update_comment(comment_id, get_jwt_identity(), data.get("content"))
    return jsonify({"comment": comment}), 200


@comments_bp.route("/<int:comment_id>", methods=["DELETE"])
@jwt_required()
def delete_comment(comment_id: int):
    comment_service().remove_comment(comment_id, get_jwt_identity())
    return jsonify({"message": "comment deleted"}), 200
