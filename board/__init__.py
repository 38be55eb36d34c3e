import logging

from flask import Flask

from board.config import Config
from board.db import db
from board.errors import register_error_handlers
from board.extensions.extensions import jwt, ma


def _configure_logging(app):
    level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("board").setLevel(level)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    _configure_logging(app)

    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)

    from board.routes.auth_routes import auth_bp
    from board.routes.board_routes import board_bp
    from board.routes.file_routes import file_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(board_bp, url_prefix="/api/board")
    app.register_blueprint(file_bp, url_prefix="/api/board")
    register_error_handlers(app)

    # Models must be imported before create_all sees their tables.
    from board.models import attachment_model, member_model, post_model  # noqa: F401

    with app.app_context():
        db.create_all()

    return app
