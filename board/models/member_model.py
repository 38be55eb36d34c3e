from board.db import db
from datetime import datetime


class Member(db.Model):
    __tablename__ = "members"

    user_id = db.Column(db.String(50), primary_key=True)
    password_hash = db.Column(db.String(256), nullable=False)
    nickname = db.Column(db.String(80), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "nickname": self.nickname,
        }
