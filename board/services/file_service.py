import logging
import mimetypes
import os
import uuid
from dataclasses import dataclass
from datetime import datetime

import urllib3
from flask import current_app
from minio.error import S3Error

from board.errors import FileStorageError, NotFoundError
from board.extensions.minio_client import ensure_bucket, get_minio_client


logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = {"NoSuchKey", "NoSuchBucket", "NoSuchObject"}


@dataclass
class UploadDescriptor:
    file_storage: object
    group_name: str
    save_path: str
    original_name: str
    content_type: str
    size: int


@dataclass
class StoredFile:
    stream: object
    length: int | None
    content_type: str

    def iter_chunks(self, chunk_size: int):
        try:
            while True:
                chunk = self.stream.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            self.stream.close()
            # MinIO responses hand their connection back to the urllib3 pool.
            release_conn = getattr(self.stream, "release_conn", None)
            if release_conn is not None:
                release_conn()


def _original_name(file_storage) -> str:
    filename = getattr(file_storage, "filename", "") or ""
    return os.path.basename(filename.replace("\\", "/")).strip()


def _extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lower()


def _content_type(file_storage, filename: str) -> str:
    mimetype = getattr(file_storage, "mimetype", None)
    if mimetype:
        return mimetype
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "application/octet-stream"


def _get_stream_and_length(file_storage):
    stream = getattr(file_storage, "stream", file_storage)
    try:
        stream.seek(0, 2)
        length = stream.tell()
        stream.seek(0)
        return stream, length
    except (AttributeError, OSError):
        return stream, -1


def _build_save_path(group_name: str, extension: str) -> str:
    today = datetime.now()
    return f"{group_name}/{today:%Y/%m/%d}/{uuid.uuid4().hex}{extension}"


def generate_upload_descriptors(group_name: str, files) -> list[UploadDescriptor]:
    """Assign a storage path to every upload without touching storage yet.

    Parts without a filename are skipped, which is what browsers send for
    an empty file input.
    """
    allowed = current_app.config.get("BOARD_ALLOWED_EXTENSIONS") or set()
    descriptors = []

    for file_storage in files or []:
        original_name = _original_name(file_storage)
        if not original_name:
            continue

        extension = _extension(original_name)
        if allowed and extension.lstrip(".") not in allowed:
            raise ValueError(f"Unsupported file type: {original_name}")

        _, length = _get_stream_and_length(file_storage)
        descriptors.append(
            UploadDescriptor(
                file_storage=file_storage,
                group_name=group_name,
                save_path=_build_save_path(group_name, extension),
                original_name=original_name,
                content_type=_content_type(file_storage, original_name),
                size=max(length, 0),
            )
        )

    return descriptors


class LocalFileStorage:
    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def _absolute(self, save_path: str) -> str:
        path = os.path.abspath(os.path.join(self.root, save_path))
        if os.path.commonpath([self.root, path]) != self.root:
            raise ValueError(f"Invalid storage path: {save_path}")
        return path

    def prepare(self):
        os.makedirs(self.root, exist_ok=True)

    def write(self, descriptor: UploadDescriptor):
        path = self._absolute(descriptor.save_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)

        stream, _ = _get_stream_and_length(descriptor.file_storage)
        with open(path, "wb") as target:
            while True:
                chunk = stream.read(current_app.config["BOARD_FILE_CHUNK_SIZE"])
                if not chunk:
                    break
                target.write(chunk)

    def delete(self, save_path: str):
        os.remove(self._absolute(save_path))

    def open(self, save_path: str, content_type: str) -> StoredFile:
        path = self._absolute(save_path)
        try:
            handle = open(path, "rb")
        except FileNotFoundError as e:
            raise NotFoundError("File not found") from e
        return StoredFile(
            stream=handle,
            length=os.fstat(handle.fileno()).st_size,
            content_type=content_type,
        )

    def exists(self, save_path: str) -> bool:
        return os.path.isfile(self._absolute(save_path))


class MinioFileStorage:
    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    def prepare(self):
        ensure_bucket(self.client, self.bucket)

    def write(self, descriptor: UploadDescriptor):
        stream, length = _get_stream_and_length(descriptor.file_storage)
        upload_kwargs = {
            "bucket_name": self.bucket,
            "object_name": descriptor.save_path,
            "data": stream,
            "length": length,
            "content_type": descriptor.content_type,
        }
        if length == -1:
            upload_kwargs["part_size"] = 10 * 1024 * 1024

        self.client.put_object(**upload_kwargs)

    def delete(self, save_path: str):
        self.client.remove_object(bucket_name=self.bucket, object_name=save_path)

    def open(self, save_path: str, content_type: str) -> StoredFile:
        try:
            stat = self.client.stat_object(
                bucket_name=self.bucket,
                object_name=save_path,
            )
            response = self.client.get_object(
                bucket_name=self.bucket,
                object_name=save_path,
            )
        except S3Error as e:
            if e.code in MISSING_OBJECT_CODES:
                raise NotFoundError("File not found") from e
            raise FileStorageError("File storage is unavailable") from e
        except urllib3.exceptions.HTTPError as e:
            raise FileStorageError("File storage is unavailable") from e

        return StoredFile(
            stream=response,
            length=getattr(stat, "size", None),
            content_type=getattr(stat, "content_type", None) or content_type,
        )

    def exists(self, save_path: str) -> bool:
        try:
            self.client.stat_object(bucket_name=self.bucket, object_name=save_path)
        except S3Error as e:
            if e.code in MISSING_OBJECT_CODES:
                return False
            raise
        return True


def get_storage():
    backend = current_app.config.get("FILE_STORAGE_BACKEND", "local")
    if backend == "minio":
        return MinioFileStorage(get_minio_client(), current_app.config["MINIO_BUCKET"])
    if backend == "local":
        return LocalFileStorage(current_app.config["UPLOAD_FOLDER"])
    raise RuntimeError(f"Unknown file storage backend: {backend}")


def write_files(descriptors):
    """Physically store every descriptor's upload.

    A failure removes whatever this batch already wrote and raises
    FileStorageError, so a failed batch leaves nothing behind.
    """
    if not descriptors:
        return

    written = []
    try:
        storage = get_storage()
        storage.prepare()
        for descriptor in descriptors:
            storage.write(descriptor)
            written.append(descriptor)
    except Exception as e:
        logger.exception(
            "Writing %d file(s) failed after %d succeeded",
            len(descriptors),
            len(written),
        )
        for descriptor in written:
            delete_file(descriptor.save_path)
        raise FileStorageError("File storage is unavailable") from e

    logger.debug("Stored %d file(s)", len(written))


def delete_file(save_path: str) -> bool:
    """Best-effort removal; storage failures are logged, never raised."""
    try:
        get_storage().delete(save_path)
    except FileNotFoundError:
        logger.warning("File already missing: %s", save_path)
        return False
    except (OSError, S3Error, urllib3.exceptions.HTTPError):
        logger.warning("Could not delete file %s", save_path, exc_info=True)
        return False
    return True


def open_file(save_path: str, content_type: str = "application/octet-stream") -> StoredFile:
    return get_storage().open(save_path, content_type)


def file_exists(save_path: str) -> bool:
    return get_storage().exists(save_path)
