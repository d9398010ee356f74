# fitfeed/routes/post_routes.py
from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from .helpers import page_args, post_service, viewer_uuid

posts_bp = Blueprint("posts", __name__)


@posts_bp.route("", methods=["POST"])
@jwt_required()
def create_post():
    """
    Body:
    {
      "title": "Leg day",
      "content": "...",
      "image_url": "https://...",
      "is_public": true,
      "body_part": ["legs", "back"],
      "duration": 40
    }
    """
    user_uuid = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    post, result = post_service().create_post(
        user_uuid,
        title=data.get("title"),
        content=data.get("content"),
        image_url=data.get("image_url"),
        is_public=data.get("is_public", True),
        body_parts=data.get("body_part"),
        duration=data.get("duration"),
    )

    current_app.logger.info(
        f"[posts/create] post_id={post.id} user={user_uuid} qualifying={result.qualifying}"
    )

    return jsonify(
        {
            "post": post.to_summary_dict(),
            "statistics": result.statistics.to_dict(),
            "ranking": result.ranking.to_dict() if result.ranking else None,
        }
    ), 201


@posts_bp.route("", methods=["GET"])
@jwt_required()
def my_posts():
    user_uuid = get_jwt_identity()
    page, limit = page_args()
    return jsonify(post_service().find_all_posts(user_uuid, user_uuid, page, limit)), 200


@posts_bp.route("/popular", methods=["GET"])
@jwt_required(optional=True)
def popular_posts():
    page, limit = page_args()
    return jsonify(post_service().find_popular_posts(viewer_uuid(), page, limit)), 200


@posts_bp.route("/group/<int:group_id>", methods=["GET"])
@jwt_required(optional=True)
def group_posts(group_id: int):
    page, limit = page_args()
    return jsonify(post_service().find_group_posts(group_id, viewer_uuid(), page, limit)), 200


@posts_bp.route("/user/<nickname>", methods=["GET"])
@jwt_required(optional=True)
def posts_by_nickname(nickname: str):
    return jsonify(post_service().find_posts_by_nickname(nickname, viewer_uuid())), 200


@posts_bp.route("/<int:post_id>", methods=["GET"])
@jwt_required(optional=True)
def get_post(post_id: int):
    return jsonify({"post": post_service().find_one_post(post_id, viewer_uuid())}), 200


@posts_bp.route("/<int:post_id>", methods=["PATCH"])
@jwt_required()
def update_post(post_id: int):
    data = request.get_json(silent=True) or {}
    post = post_service().update_post(post_id, get_jwt_identity(), data)
    return jsonify({"post": post}), 200


@posts_bp.route("/<int:post_id>", methods=["DELETE"])
@jwt_required()
def delete_post(post_id: int):
    post_service().remove_post(post_id, get_jwt_identity())
    return jsonify({"message": "post deleted"}), 200


@posts_bp.route("/<int:post_id>/like", methods=["POST"])
@jwt_required()
def toggle_like(post_id: int):
    return jsonify(post_service().toggle_like(post_id, get_jwt_identity())), 200
