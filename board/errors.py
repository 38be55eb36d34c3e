from flask import jsonify


class ErrorCode:
    NOT_EXISTS = "NOT_EXISTS"
    UNAUTHORIZED_REQUEST = "UNAUTHORIZED_REQUEST"
    FILE_STORAGE_ERROR = "FILE_STORAGE_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"


class BoardError(Exception):
    code = ErrorCode.INVALID_REQUEST
    status_code = 400

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self):
        return {"error": self.message, "code": self.code}


class NotFoundError(BoardError):
    code = ErrorCode.NOT_EXISTS
    status_code = 404


class UnauthorizedError(BoardError):
    code = ErrorCode.UNAUTHORIZED_REQUEST
    status_code = 403


class FileStorageError(BoardError):
    code = ErrorCode.FILE_STORAGE_ERROR
    status_code = 503


def register_error_handlers(app):
    @app.errorhandler(BoardError)
    def handle_board_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(413)
    def handle_too_large(_error):
        return jsonify({
            "error": "Uploaded files are too large",
            "code": ErrorCode.INVALID_REQUEST,
        }), 413
