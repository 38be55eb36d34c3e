from board.db import db
from datetime import datetime


TITLE_MAX_LENGTH = 200


class Post(db.Model):
    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.String(50),
        db.ForeignKey("members.user_id"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(TITLE_MAX_LENGTH), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    author = db.relationship("Member", lazy="joined")
    attachments = db.relationship(
        "Attachment",
        back_populates="post",
        lazy="select",
        order_by="Attachment.id",
        cascade="all, delete-orphan",
    )

    def add_attachment(self, attachment):
        self.attachments.append(attachment)

    def remove_attachment(self, attachment):
        self.attachments.remove(attachment)

    def is_written_by(self, user_id) -> bool:
        return self.user_id == user_id
