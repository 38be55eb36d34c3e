from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token, create_refresh_token

from board.repositories import member_repository


USER_ID_MAX_LENGTH = 50


def _require_non_empty_string(value):
    return isinstance(value, str) and value.strip()


def register(user_id, password, nickname=None):
    if not _require_non_empty_string(user_id) or not _require_non_empty_string(password):
        raise ValueError("Missing fields")

    user_id = user_id.strip()
    if len(user_id) > USER_ID_MAX_LENGTH:
        raise ValueError(f"User id must be {USER_ID_MAX_LENGTH} characters or fewer")

    if nickname is not None and not _require_non_empty_string(nickname):
        raise ValueError("Nickname must be a non-empty string")

    if member_repository.find_by_id(user_id):
        raise ValueError("User id already exists")

    member_repository.create_member(
        user_id=user_id,
        password_hash=generate_password_hash(password),
        nickname=nickname,
    )


def login(user_id, password):
    if not _require_non_empty_string(user_id) or not _require_non_empty_string(password):
        raise ValueError("Invalid credentials")

    member = member_repository.find_by_id(user_id.strip())
    if not member or not check_password_hash(member.password_hash, password):
        raise ValueError("Invalid credentials")

    return {
        "access_token": create_access_token(identity=member.user_id),
        "refresh_token": create_refresh_token(identity=member.user_id)
    }


def refresh_access_token(user_id):
    return {
        "access_token": create_access_token(identity=user_id)
    }
