"""
Organization registry: DAO creation, member invites, treasury funding and the
DAO-level counters (member_count, proposal_count, treasury_sats).

Every mutation here is one SQLAlchemy transaction: the row insert, the counter
bump and the activity append commit together or roll back together. Counters
are bumped with SQL expressions (``col = col + 1``) so concurrent requests
never lose an increment to a stale read.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from flask import current_app
from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from daofactory.extensions import db
from daofactory.models.dao import Dao, DAO_STATUS_ACTIVE
from daofactory.models.member import Member, ROLE_ADMIN, ROLE_MEMBER
from daofactory.models.proposal import Proposal
from daofactory.models.vote import Vote
from daofactory.services import audit, membership
from daofactory.services.errors import Conflict, Forbidden, InvalidArgument, NotFound, ensure_max_len
from daofactory.utils.validators import clamp, clean_identity, clean_str, clean_text, to_int

THRESHOLD_MIN = 1
THRESHOLD_MAX = 100


@dataclass(frozen=True)
class Page:
    items: List
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


# ---------------------------------------------------------------------------
# Counters (staged on the caller's session; the caller commits)
# ---------------------------------------------------------------------------

def increment_member_count(session: Session, dao_id: int) -> None:
    session.execute(
        update(Dao)
        .where(Dao.id == dao_id)
        .values(member_count=Dao.member_count + 1, updated_at=func.now())
        .execution_options(synchronize_session="fetch")
    )


def increment_proposal_count(session: Session, dao_id: int) -> None:
    session.execute(
        update(Dao)
        .where(Dao.id == dao_id)
        .values(proposal_count=Dao.proposal_count + 1, updated_at=func.now())
        .execution_options(synchronize_session="fetch")
    )


def add_treasury(session: Session, dao_id: int, amount_sats: int) -> None:
    if amount_sats is None or isinstance(amount_sats, bool) or amount_sats < 1:
        raise InvalidArgument("amount_sats must be a positive integer")
    session.execute(
        update(Dao)
        .where(Dao.id == dao_id)
        .values(treasury_sats=Dao.treasury_sats + amount_sats, updated_at=func.now())
        .execution_options(synchronize_session="fetch")
    )


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def get_dao(dao_id: int) -> Dao:
    dao = db.session.get(Dao, dao_id)
    if dao is None:
        raise NotFound("DAO not found")
    return dao


def list_daos(status: str = DAO_STATUS_ACTIVE, *, limit: int = 50, offset: int = 0) -> Page:
    max_limit = current_app.config.get("DAO_LIST_MAX_LIMIT", 200)
    limit = clamp(limit, 1, max_limit)
    offset = max(offset, 0)

    query = db.session.query(Dao).filter(Dao.status == status)
    total = query.count()
    items = (
        query.order_by(Dao.created_at.desc(), Dao.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return Page(items=items, total=total, limit=limit, offset=offset)


def get_dao_detail(dao_id: int) -> dict:
    """DAO row plus members (admins first), newest proposals and newest activity."""
    dao = get_dao(dao_id)
    cfg = current_app.config

    members = (
        db.session.query(Member)
        .filter(Member.dao_id == dao_id)
        .order_by(case((Member.role == ROLE_ADMIN, 0), else_=1), Member.joined_at, Member.id)
        .all()
    )
    proposals = (
        db.session.query(Proposal)
        .filter(Proposal.dao_id == dao_id)
        .order_by(Proposal.created_at.desc(), Proposal.id.desc())
        .limit(cfg.get("DAO_DETAIL_PROPOSAL_LIMIT", 20))
        .all()
    )
    activity = audit.recent(dao_id, limit=cfg.get("DAO_DETAIL_ACTIVITY_LIMIT", 30))

    return {
        "dao": dao,
        "members": members,
        "proposals": proposals,
        "activity": activity,
    }


def factory_stats() -> dict:
    s = db.session
    return {
        "total_daos": s.query(func.count(Dao.id)).scalar() or 0,
        "active_daos": s.query(func.count(Dao.id)).filter(Dao.status == DAO_STATUS_ACTIVE).scalar() or 0,
        "total_members": s.query(func.coalesce(func.sum(Dao.member_count), 0)).scalar() or 0,
        "total_treasury_sats": s.query(func.coalesce(func.sum(Dao.treasury_sats), 0)).scalar() or 0,
        "total_proposals": s.query(func.count(Proposal.id)).scalar() or 0,
        "passed_proposals": s.query(func.count(Proposal.id)).filter(Proposal.status == "passed").scalar() or 0,
        "total_votes": s.query(func.count(Vote.id)).scalar() or 0,
    }


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

def create_dao(
    *,
    name,
    description,
    creator,
    creator_name=None,
    creator_stx=None,
    approval_threshold=None,
    spend_limit_sats=None,
) -> Dao:
    """Create a DAO and seat its creator as the first admin."""
    name = clean_str(name, max_len=None)
    description = clean_text(description)
    creator = clean_identity(creator)
    creator_stx = clean_identity(creator_stx)
    if not name or not description or not creator:
        raise InvalidArgument("Required: name, description, creator")
    ensure_max_len(255, name=name, creator=creator, creator_stx=creator_stx)

    default_threshold = current_app.config.get("DAO_DEFAULT_APPROVAL_THRESHOLD", 51)
    # 0 / missing fall back to the default, everything else is clamped
    threshold = clamp(to_int(approval_threshold) or default_threshold, THRESHOLD_MIN, THRESHOLD_MAX)
    if spend_limit_sats is None or spend_limit_sats == "":
        spend_limit = 0
    else:
        spend_limit = to_int(spend_limit_sats)
        if spend_limit is None or spend_limit < 0:
            raise InvalidArgument("spend_limit_sats must be a non-negative integer")
    creator_name = clean_str(creator_name)

    if db.session.query(Dao.id).filter(Dao.name == name).first():
        raise Conflict("DAO name already taken")

    dao = Dao(
        name=name,
        description=description,
        creator=creator,
        creator_name=creator_name,
        approval_threshold=threshold,
        spend_limit_sats=spend_limit,
        member_count=1,
        proposal_count=0,
        treasury_sats=0,
        status=DAO_STATUS_ACTIVE,
    )
    try:
        db.session.add(dao)
        db.session.flush()

        db.session.add(Member(
            dao_id=dao.id,
            btc_address=creator,
            stx_address=creator_stx,
            display_name=creator_name,
            role=ROLE_ADMIN,
        ))
        audit.record(
            db.session, dao.id, creator, audit.ACTION_CREATED,
            f'DAO "{name}" created with {threshold}% approval threshold',
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("DAO name already taken")

    current_app.logger.info(
        "dao_created",
        extra={"event": "dao_created", "dao_id": dao.id, "creator": creator, "threshold": threshold},
    )
    return dao


def invite_member(
    dao_id: int,
    *,
    inviter,
    btc_address,
    stx_address=None,
    display_name=None,
    role=None,
) -> Member:
    """Admin-gated invite. Member row, member_count bump and activity commit together."""
    inviter = clean_identity(inviter)
    btc_address = clean_identity(btc_address)
    stx_address = clean_identity(stx_address)
    if not btc_address or not inviter:
        raise InvalidArgument("Required: btc_address, inviter")
    ensure_max_len(255, inviter=inviter, btc_address=btc_address, stx_address=stx_address)

    get_dao(dao_id)

    if not membership.is_admin(dao_id, inviter):
        raise Forbidden("Only admins can invite members")
    if membership.is_member(dao_id, btc_address):
        raise Conflict("Already a member")

    role = clean_str(role, max_len=32) or ROLE_MEMBER
    display_name = clean_str(display_name)

    member = Member(
        dao_id=dao_id,
        btc_address=btc_address,
        stx_address=stx_address,
        display_name=display_name,
        role=role,
    )
    try:
        db.session.add(member)
        db.session.flush()
        increment_member_count(db.session, dao_id)
        audit.record(
            db.session, dao_id, inviter, audit.ACTION_INVITED,
            f"{display_name or btc_address} added as {role}",
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Already a member")

    current_app.logger.info(
        "member_invited",
        extra={"event": "member_invited", "dao_id": dao_id, "inviter": inviter, "address": btc_address, "role": role},
    )
    return member


def fund_treasury(dao_id: int, *, funder, amount_sats, tx_id=None) -> Dao:
    funder = clean_identity(funder)
    amount = to_int(amount_sats)
    if not funder or amount is None or amount < 1:
        raise InvalidArgument("Required: funder, amount_sats (positive)")
    ensure_max_len(255, funder=funder)

    dao = get_dao(dao_id)
    tx_id = clean_str(tx_id)

    details = f"{amount} sats deposited"
    if tx_id:
        details += f" (tx: {tx_id})"

    add_treasury(db.session, dao_id, amount)
    audit.record(db.session, dao_id, funder, audit.ACTION_FUNDED, details)
    db.session.commit()

    current_app.logger.info(
        "treasury_funded",
        extra={"event": "treasury_funded", "dao_id": dao_id, "funder": funder, "amount_sats": amount},
    )
    return dao


# ---------------------------------------------------------------------------
# Operator checks
# ---------------------------------------------------------------------------

def reconcile_counters(dao_id: Optional[int] = None) -> List[dict]:
    """
    Compare denormalized counters with row counts. Read-only; returns one dict
    per mismatch (empty list when everything agrees).
    """
    s = db.session
    mismatches: List[dict] = []

    dao_q = s.query(Dao)
    if dao_id is not None:
        dao_q = dao_q.filter(Dao.id == dao_id)

    for dao in dao_q.order_by(Dao.id).all():
        members = s.query(func.count(Member.id)).filter(Member.dao_id == dao.id).scalar() or 0
        proposals = s.query(func.count(Proposal.id)).filter(Proposal.dao_id == dao.id).scalar() or 0
        if dao.member_count != members:
            mismatches.append({
                "dao_id": dao.id, "field": "member_count",
                "stored": dao.member_count, "actual": members,
            })
        if dao.proposal_count != proposals:
            mismatches.append({
                "dao_id": dao.id, "field": "proposal_count",
                "stored": dao.proposal_count, "actual": proposals,
            })

    vote_counts = (
        s.query(Proposal.id, Proposal.dao_id, Proposal.votes_for, Proposal.votes_against, func.count(Vote.id))
        .outerjoin(Vote, Vote.proposal_id == Proposal.id)
        .group_by(Proposal.id, Proposal.dao_id, Proposal.votes_for, Proposal.votes_against)
    )
    if dao_id is not None:
        vote_counts = vote_counts.filter(Proposal.dao_id == dao_id)

    for pid, pdao, vf, va, actual in vote_counts.order_by(Proposal.id).all():
        stored = (vf or 0) + (va or 0)
        if stored != actual:
            mismatches.append({
                "dao_id": pdao, "proposal_id": pid, "field": "votes",
                "stored": stored, "actual": actual,
            })

    return mismatches
