"""
Membership lookups used to gate invites, proposals and votes.

Always a fresh row lookup on (dao_id, btc_address); nothing is cached, so the
answer reflects the latest committed state.
"""
from __future__ import annotations

from typing import Optional

from daofactory.extensions import db
from daofactory.models.member import Member, ROLE_ADMIN


def get_member(dao_id: int, address: str) -> Optional[Member]:
    if not address:
        return None
    return (
        db.session.query(Member)
        .filter_by(dao_id=dao_id, btc_address=address)
        .one_or_none()
    )


def is_member(dao_id: int, address: str) -> bool:
    return get_member(dao_id, address) is not None


def is_admin(dao_id: int, address: str) -> bool:
    if not address:
        return False
    q = db.session.query(Member.id).filter_by(dao_id=dao_id, btc_address=address, role=ROLE_ADMIN)
    return db.session.query(q.exists()).scalar()
