from sqlalchemy.orm import selectinload

from board.models.post_model import Post
from board.db import db


def find_by_id(post_id):
    return db.session.get(Post, post_id)


def _paginate(query, page, size):
    total = query.count()
    posts = (
        query
        .order_by(Post.id.desc())
        .offset((page - 1) * size)
        .limit(size)
        .all()
    )
    return posts, total


def find_page(page, size):
    query = Post.query.options(selectinload(Post.attachments))
    return _paginate(query, page, size)


def find_by_title_containing(keyword, page, size):
    query = (
        Post.query
        .options(selectinload(Post.attachments))
        .filter(Post.title.contains(keyword, autoescape=True))
    )
    return _paginate(query, page, size)


def add(post):
    db.session.add(post)
    db.session.flush()
    return post


def delete(post):
    # Children go first so attachment rows never outlive their post.
    for attachment in list(post.attachments):
        db.session.delete(attachment)
    db.session.delete(post)
    db.session.flush()
