import unicodedata
from urllib.parse import quote

from flask import Blueprint, Response, current_app, jsonify, stream_with_context

from board.services import file_service, post_service


file_bp = Blueprint("files", __name__)


def _download_names(filename: str) -> dict:
    try:
        filename.encode("ascii")
    except UnicodeEncodeError:
        simple = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
        quoted = quote(filename, safe="!#$&+^`|~")
        return {"filename": simple or "download", "filename*": f"UTF-8''{quoted}"}
    return {"filename": filename}


@file_bp.route("/files/<int:attachment_id>", methods=["GET"])
def download_file(attachment_id):
    attachment = post_service.get_attachment(attachment_id)
    stored = file_service.open_file(attachment.save_path, attachment.content_type)

    chunk_size = max(
        int(current_app.config.get("BOARD_FILE_CHUNK_SIZE", 256 * 1024)),
        1024,
    )
    response = Response(
        stream_with_context(stored.iter_chunks(chunk_size)),
        status=200,
        mimetype=stored.content_type,
        direct_passthrough=True,
    )
    response.headers.set(
        "Content-Disposition",
        "attachment",
        **_download_names(attachment.original_name),
    )
    if stored.length is not None:
        response.content_length = stored.length
    return response


@file_bp.route("/files/<int:attachment_id>/path", methods=["GET"])
def get_file_path(attachment_id):
    return jsonify(post_service.get_attachment_path(attachment_id)), 200
