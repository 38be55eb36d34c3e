from board.db import db
from datetime import datetime


class Attachment(db.Model):
    __tablename__ = "attachments"

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(
        db.Integer,
        db.ForeignKey("posts.id"),
        nullable=False,
        index=True,
    )
    group_name = db.Column(db.String(50), nullable=False)
    save_path = db.Column(db.String(255), nullable=False, unique=True)
    original_name = db.Column(db.String(255), nullable=False)
    content_type = db.Column(db.String(100), nullable=False)
    size = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    post = db.relationship("Post", back_populates="attachments")

    @classmethod
    def from_descriptor(cls, descriptor):
        return cls(
            group_name=descriptor.group_name,
            save_path=descriptor.save_path,
            original_name=descriptor.original_name,
            content_type=descriptor.content_type,
            size=descriptor.size,
        )

    def path_descriptor(self):
        return {
            "group_name": self.group_name,
            "save_path": self.save_path,
            "original_name": self.original_name,
        }
