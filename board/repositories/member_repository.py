from board.models.member_model import Member
from board.db import db


def find_by_id(user_id: str):
    return db.session.get(Member, user_id)


def create_member(user_id, password_hash, nickname=None):
    member = Member(
        user_id=user_id,
        password_hash=password_hash,
        nickname=(nickname or user_id).strip(),
    )
    db.session.add(member)
    db.session.commit()
    return member
