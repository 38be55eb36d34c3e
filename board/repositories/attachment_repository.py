from board.models.attachment_model import Attachment
from board.db import db


def find_by_id(attachment_id):
    return db.session.get(Attachment, attachment_id)
