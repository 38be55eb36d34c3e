import logging

from flask import current_app

from board.db import transaction
from board.errors import NotFoundError, UnauthorizedError
from board.models.attachment_model import Attachment
from board.models.post_model import Post, TITLE_MAX_LENGTH
from board.repositories import attachment_repository, member_repository, post_repository
from board.schemas.post_schema import (
    PagingSchema,
    PathDescriptorSchema,
    PostDetailSchema,
    PostSummarySchema,
)
from board.services import file_service
from board.services.paging import Paging


logger = logging.getLogger(__name__)


def _file_group():
    return current_app.config.get("BOARD_FILE_GROUP", "board")


def _validate_fields(title, content):
    if not isinstance(title, str) or not title.strip():
        raise ValueError("Title is required")
    if len(title.strip()) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title must be {TITLE_MAX_LENGTH} characters or fewer")
    if not isinstance(content, str) or not content.strip():
        raise ValueError("Content is required")
    return title.strip(), content


def _check_attachment_count(count):
    limit = current_app.config.get("BOARD_MAX_ATTACHMENTS", 10)
    if count > limit:
        raise ValueError(f"Maximum {limit} attachments allowed")


def _load_post(post_id):
    post = post_repository.find_by_id(post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


def _load_owned_post(post_id, user_id):
    post = _load_post(post_id)
    if not post.is_written_by(user_id):
        raise UnauthorizedError("Only the author can change this post")
    return post


def _normalize_paging(page, size):
    config = current_app.config
    if size is None or size < 1:
        size = config.get("BOARD_DEFAULT_PAGE_SIZE", 10)
    size = min(size, config.get("BOARD_MAX_PAGE_SIZE", 50))
    if page is None or page < 1:
        page = 1
    return page, size


def _page_result(posts, page, size, total):
    paging = Paging(
        page,
        size,
        total,
        block_count=current_app.config.get("BOARD_PAGE_BLOCK_COUNT", 5),
    )
    return {
        "items": PostSummarySchema(many=True).dump(posts),
        "paging": PagingSchema().dump(paging),
    }


def create_post(user_id, title, content, files=None):
    title, content = _validate_fields(title, content)

    member = member_repository.find_by_id(user_id)
    if member is None:
        raise NotFoundError("Member not found")

    uploads = file_service.generate_upload_descriptors(_file_group(), files)
    _check_attachment_count(len(uploads))

    with transaction():
        post = Post(user_id=member.user_id, title=title, content=content)
        for upload in uploads:
            post.add_attachment(Attachment.from_descriptor(upload))
        post_repository.add(post)

    post_id = post.id
    try:
        file_service.write_files(uploads)
    except Exception:
        # Files could not be stored, so the record must not survive either.
        with transaction():
            post_repository.delete(post)
        raise

    logger.info("Post %s created by %s with %d file(s)", post_id, user_id, len(uploads))
    return post_id


def list_posts(page=1, size=None):
    page, size = _normalize_paging(page, size)
    posts, total = post_repository.find_page(page, size)
    return _page_result(posts, page, size, total)


def search_posts(keyword, page=1, size=None):
    keyword = keyword or ""
    page, size = _normalize_paging(page, size)
    if keyword:
        posts, total = post_repository.find_by_title_containing(keyword, page, size)
    else:
        posts, total = post_repository.find_page(page, size)

    result = _page_result(posts, page, size, total)
    result["keyword"] = keyword
    return result


def get_post(post_id):
    return PostDetailSchema().dump(_load_post(post_id))


def get_attachment(attachment_id):
    attachment = attachment_repository.find_by_id(attachment_id)
    if attachment is None:
        raise NotFoundError("Attachment not found")
    return attachment


def get_attachment_path(attachment_id):
    attachment = get_attachment(attachment_id)
    return PathDescriptorSchema().dump(attachment.path_descriptor())


def update_post(post_id, user_id, title, content, del_file_ids=None, files=None):
    removed_paths = []

    with transaction():
        post = _load_owned_post(post_id, user_id)
        post.title, post.content = _validate_fields(title, content)

        for attachment_id in dict.fromkeys(del_file_ids or []):
            attachment = attachment_repository.find_by_id(attachment_id)
            if attachment is None or attachment.post_id != post.id:
                raise NotFoundError("Attachment not found")
            removed_paths.append(attachment.save_path)
            post.remove_attachment(attachment)

        uploads = file_service.generate_upload_descriptors(_file_group(), files)
        _check_attachment_count(len(post.attachments) + len(uploads))

        added = [Attachment.from_descriptor(upload) for upload in uploads]
        for attachment in added:
            post.add_attachment(attachment)

    try:
        file_service.write_files(uploads)
    except Exception:
        with transaction():
            for attachment in added:
                post.remove_attachment(attachment)
        raise
    finally:
        # The records are already gone, so the files go regardless.
        for save_path in removed_paths:
            file_service.delete_file(save_path)

    logger.info(
        "Post %s updated by %s: %d file(s) added, %d removed",
        post_id,
        user_id,
        len(added),
        len(removed_paths),
    )


def remove_post(post_id, user_id):
    with transaction():
        post = _load_owned_post(post_id, user_id)
        descriptors = [attachment.path_descriptor() for attachment in post.attachments]
        post_repository.delete(post)

    for descriptor in descriptors:
        file_service.delete_file(descriptor["save_path"])

    logger.info("Post %s removed by %s with %d file(s)", post_id, user_id, len(descriptors))
