import os
from datetime import timedelta

from dotenv import load_dotenv


load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> set[str]:
    raw = os.getenv(name, default)
    return {item.strip().lower() for item in raw.split(",") if item.strip()}


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///board.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        minutes=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_MINUTES", "15"))
    )
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=30)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # "local" keeps files under UPLOAD_FOLDER, "minio" stores them in MINIO_BUCKET.
    FILE_STORAGE_BACKEND = os.getenv("FILE_STORAGE_BACKEND", "local").strip().lower()
    UPLOAD_FOLDER = os.getenv(
        "UPLOAD_FOLDER",
        os.path.join(os.path.abspath(os.getcwd()), "uploads"),
    )
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(50 * 1024 * 1024)))

    MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "localhost:9000")
    MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "admin")
    MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "supersecret")
    MINIO_BUCKET = os.getenv("MINIO_BUCKET", "board")
    MINIO_SECURE = _env_bool("MINIO_SECURE", False)
    MINIO_CONNECT_TIMEOUT = float(os.getenv("MINIO_CONNECT_TIMEOUT", "5"))
    MINIO_READ_TIMEOUT = float(os.getenv("MINIO_READ_TIMEOUT", "20"))
    MINIO_HTTP_POOL_MAXSIZE = int(os.getenv("MINIO_HTTP_POOL_MAXSIZE", "32"))

    BOARD_FILE_GROUP = os.getenv("BOARD_FILE_GROUP", "board")
    BOARD_PAGE_BLOCK_COUNT = int(os.getenv("BOARD_PAGE_BLOCK_COUNT", "5"))
    BOARD_DEFAULT_PAGE_SIZE = int(os.getenv("BOARD_DEFAULT_PAGE_SIZE", "10"))
    BOARD_MAX_PAGE_SIZE = int(os.getenv("BOARD_MAX_PAGE_SIZE", "50"))
    BOARD_MAX_ATTACHMENTS = int(os.getenv("BOARD_MAX_ATTACHMENTS", "10"))
    BOARD_ALLOWED_EXTENSIONS = _env_list(
        "BOARD_ALLOWED_EXTENSIONS",
        "jpg,jpeg,png,gif,webp,pdf,txt,csv,zip,doc,docx,xls,xlsx,ppt,pptx,hwp",
    )
    BOARD_FILE_CHUNK_SIZE = int(os.getenv("BOARD_FILE_CHUNK_SIZE", str(256 * 1024)))
