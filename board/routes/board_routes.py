from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from board.services import post_service

board_bp = Blueprint("board", __name__)


def _uploaded_files():
    files = (
        request.files.getlist("files")
        or request.files.getlist("files[]")
        or request.files.getlist("file")
    )
    return [file for file in files if getattr(file, "filename", "")]


def _parse_id_list(values):
    ids = []
    for value in values:
        # bool is an int subclass, so JSON true would otherwise become id 1.
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError(f"Invalid attachment id: {value!r}")
        if isinstance(value, int):
            parts = [str(value)]
        else:
            parts = [part.strip() for part in value.split(",") if part.strip()]

        for part in parts:
            if not (part.isascii() and part.isdigit()) or int(part) < 1:
                raise ValueError(f"Invalid attachment id: {part}")
            ids.append(int(part))
    return ids


def _read_post_form():
    """Return (title, content, del_files, files) from multipart or JSON."""
    content_type = (request.content_type or "").lower()

    if "multipart/form-data" in content_type:
        del_files = request.form.getlist("del_files") or request.form.getlist("del_files[]")
        return (
            request.form.get("title"),
            request.form.get("content"),
            _parse_id_list(del_files),
            _uploaded_files(),
        )

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Invalid JSON body")

    del_files = data.get("del_files") or []
    if not isinstance(del_files, list):
        raise ValueError("del_files must be a list")
    return data.get("title"), data.get("content"), _parse_id_list(del_files), []


@board_bp.route("/posts", methods=["POST"])
@jwt_required()
def create_post():
    user_id = get_jwt_identity()

    try:
        title, content, _, files = _read_post_form()
        post_id = post_service.create_post(user_id, title, content, files)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({
        "message": "Post created successfully",
        "post_id": post_id
    }), 201


@board_bp.route("/posts", methods=["GET"])
def list_posts():
    page = request.args.get("page", default=1, type=int)
    size = request.args.get("size", default=None, type=int)

    return jsonify(post_service.list_posts(page, size)), 200


@board_bp.route("/posts/search", methods=["GET"])
def search_posts():
    keyword = request.args.get("keyword", default="")
    page = request.args.get("page", default=1, type=int)
    size = request.args.get("size", default=None, type=int)

    return jsonify(post_service.search_posts(keyword, page, size)), 200


@board_bp.route("/posts/<int:post_id>", methods=["GET"])
def get_post(post_id):
    return jsonify(post_service.get_post(post_id)), 200


@board_bp.route("/posts/<int:post_id>", methods=["PUT"])
@jwt_required()
def update_post(post_id):
    user_id = get_jwt_identity()

    try:
        title, content, del_files, files = _read_post_form()
        post_service.update_post(post_id, user_id, title, content, del_files, files)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"message": "Post updated successfully"}), 200


@board_bp.route("/posts/<int:post_id>", methods=["DELETE"])
@jwt_required()
def remove_post(post_id):
    post_service.remove_post(post_id, get_jwt_identity())
    return jsonify({"message": "Post removed successfully"}), 200
