# fitfeed/routes/helpers.py
from typing import Any, Optional

from flask import current_app, request
from flask_jwt_extended import get_jwt_identity

from .. import db
from ..services.comments import CommentService
from ..services.posts import build_post_service


def safe_int(v: Any, default: int = 0) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def page_args():
    """Reads ?page=&limit= with the configured bounds."""
    max_limit = current_app.config.get("MAX_PAGE_SIZE", 50)
    page = max(1, safe_int(request.args.get("page"), 1))
    limit = safe_int(request.args.get("limit"), current_app.config.get("DEFAULT_PAGE_SIZE", 10))
    limit = max(1, min(limit, max_limit))
    return page, limit


def viewer_uuid() -> Optional[str]:
    """Identity from an optional JWT (use with @jwt_required(optional=True))."""
    return get_jwt_identity() or None


def post_service():
    return build_post_service(db.session, current_app.config)


def comment_service():
    return CommentService(db.session, post_service())
