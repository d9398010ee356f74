# fitfeed/routes/auth_routes.py

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, get_jwt_identity, jwt_required
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from .. import db
from ..errors import NotFound, Unauthorized, ValidationError
from ..models.user import User

auth_bp = Blueprint("auth", __name__)

MIN_PASSWORD_LENGTH = 6


def _check_registration(email: str, nickname: str, password: str) -> None:
    if not email or not nickname or not password:
        raise ValidationError("email, nickname and password are required")
    if "@" not in email:
        raise ValidationError("email is not valid")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
    if User.query.filter_by(email=email).first():
        raise ValidationError("email already in use")
    if User.query.filter_by(nickname=nickname).first():
        raise ValidationError("nickname already in use")


# -----------------------------
# Routes
# -----------------------------
@auth_bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}

    email = (data.get("email") or "").strip().lower()
    nickname = (data.get("nickname") or "").strip()
    password = data.get("password") or ""  # passwords are not stripped

    _check_registration(email, nickname, password)

    user = User(email=email, nickname=nickname, profile_image=data.get("profile_image"))
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        # a concurrent registration took the email or nickname
        db.session.rollback()
        raise ValidationError("email or nickname already in use")
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"[auth/register] failed for '{nickname}': {e}")
        return jsonify({"message": "Internal server error"}), 500

    current_app.logger.info(f"[auth/register] new user {user.user_uuid}")
    access_token = create_access_token(identity=user.user_uuid)
    return jsonify({"token": access_token, "user": user.to_dict()}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Accepts:
      - { "email": "...", "password": "..." }
      - { "nickname": "...", "password": "..." }
      - { "identifier": "...", "password": "..." }  # email or nickname
    """
    data = request.get_json(silent=True) or {}

    identifier = (data.get("identifier") or data.get("email") or data.get("nickname") or "").strip()
    password = data.get("password") or ""

    if not identifier or not password:
        raise ValidationError("identifier and password are required")

    user = User.query.filter(
        or_(
            User.email == identifier.lower(),
            User.nickname == identifier,
        )
    ).first()

    if not user or not user.check_password(password):
        current_app.logger.info(f"[auth/login] failed login for '{identifier}'")
        raise Unauthorized("invalid credentials")

    access_token = create_access_token(identity=user.user_uuid)
    return jsonify({"token": access_token, "user": user.to_dict()}), 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = User.query.filter_by(user_uuid=get_jwt_identity()).first()
    if not user:
        raise NotFound("user not found")
    return jsonify({"user": user.to_dict()}), 200
