"""
Proposal lifecycle and voting.

States
    active  -> passed     (vote-and-tally, when quorum and threshold both hold)
    active  -> rejected   (reserved; nothing produces it yet, but it is read back fine)

Pass rule, evaluated after every recorded vote against fresh counters:
    total        = votes_for + votes_against
    quorum       = ceil(member_count / 2)        (current membership, not a snapshot)
    approval_pct = votes_for / total * 100       (0 when total == 0)
    passes iff total >= quorum and approval_pct >= approval_threshold

Atomic units
    create:   proposal insert + proposal_count bump + "proposed" activity
    vote:     vote insert + votes_for/against bump + "voted" activity
    pass:     status='passed' (only WHERE status='active') + "passed" activity

The unique (proposal_id, voter) constraint is the authoritative duplicate-vote
guard; the pre-check in cast_vote only avoids a failed insert in the common case.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from daofactory.extensions import db
from daofactory.models.dao import Dao
from daofactory.models.proposal import Proposal, ACTION_GENERAL
from daofactory.models.vote import Vote, VOTE_CHOICES, VOTE_YES
from daofactory.services import audit, membership
from daofactory.services.errors import (
    Conflict, Forbidden, InvalidArgument, InvalidState, NotFound, ensure_max_len,
)
from daofactory.services.registry import get_dao, increment_proposal_count
from daofactory.utils.validators import clean_identity, clean_str, clean_text, to_int


class ProposalStatus(str, enum.Enum):
    ACTIVE = "active"
    PASSED = "passed"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ProposalStatus.ACTIVE


@dataclass(frozen=True)
class TallySnapshot:
    votes_for: int
    votes_against: int
    member_count: int
    approval_threshold: int

    @property
    def total(self) -> int:
        return self.votes_for + self.votes_against

    @property
    def quorum(self) -> int:
        # ceil(member_count / 2) without floats
        return -(-self.member_count // 2)

    @property
    def approval_pct(self) -> float:
        """Display value only; the pass decision uses threshold_met."""
        if self.total == 0:
            return 0.0
        return self.votes_for / self.total * 100

    @property
    def quorum_met(self) -> bool:
        return self.total >= self.quorum

    @property
    def threshold_met(self) -> bool:
        # Integer cross-multiplication: 29/50 is exactly 58%, which a float misses
        return self.total > 0 and self.votes_for * 100 >= self.approval_threshold * self.total


@dataclass(frozen=True)
class VoteResult:
    votes_for: int
    votes_against: int
    status: ProposalStatus
    passed: bool


def next_status(current: ProposalStatus, snapshot: TallySnapshot) -> ProposalStatus:
    """Pure transition function; terminal states are returned unchanged."""
    if current is not ProposalStatus.ACTIVE:
        return current
    if snapshot.quorum_met and snapshot.threshold_met:
        return ProposalStatus.PASSED
    return ProposalStatus.ACTIVE


def approval_label(pct: float | Decimal) -> int:
    """Whole-percent approval for activity text (half rounds up: 66.67 -> 67)."""
    return int(Decimal(str(pct)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_status(value: str) -> ProposalStatus:
    try:
        return ProposalStatus(value)
    except ValueError:
        # Unknown labels written by other tooling are treated as closed
        return ProposalStatus.REJECTED


def _utcnow():
    return datetime.now(timezone.utc)


def has_voted(proposal_id: int, voter: str) -> bool:
    q = db.session.query(Vote.id).filter_by(proposal_id=proposal_id, voter=voter)
    return db.session.query(q.exists()).scalar()


def create_proposal(
    dao_id: int,
    *,
    proposer,
    title,
    description=None,
    action_type=None,
    amount_sats=None,
    recipient=None,
) -> Proposal:
    proposer = clean_identity(proposer)
    title = clean_str(title, max_len=None)
    recipient = clean_identity(recipient)
    if not proposer or not title:
        raise InvalidArgument("Required: proposer, title")
    ensure_max_len(255, proposer=proposer, title=title, recipient=recipient)

    if amount_sats is None or amount_sats == "":
        amount = 0
    else:
        amount = to_int(amount_sats)
        if amount is None or amount < 0:
            raise InvalidArgument("amount_sats must be a non-negative integer")

    get_dao(dao_id)
    if not membership.is_member(dao_id, proposer):
        raise Forbidden("Only members can create proposals")

    proposal = Proposal(
        dao_id=dao_id,
        proposer=proposer,
        title=title,
        description=clean_text(description),
        action_type=clean_str(action_type, max_len=32) or ACTION_GENERAL,
        amount_sats=amount,
        recipient=recipient,
        status=ProposalStatus.ACTIVE.value,
        votes_for=0,
        votes_against=0,
    )
    db.session.add(proposal)
    db.session.flush()
    increment_proposal_count(db.session, dao_id)
    audit.record(db.session, dao_id, proposer, audit.ACTION_PROPOSED, title)
    db.session.commit()

    current_app.logger.info(
        "proposal_created",
        extra={"event": "proposal_created", "dao_id": dao_id, "proposal_id": proposal.id, "proposer": proposer},
    )
    return proposal


def cast_vote(dao_id: int, proposal_id: int, *, voter, choice) -> VoteResult:
    voter = clean_identity(voter)
    choice = clean_str(choice, max_len=None)
    if not voter or not choice:
        raise InvalidArgument("Required: voter, vote (yes/no)")
    ensure_max_len(255, voter=voter)
    if choice not in VOTE_CHOICES:
        raise InvalidArgument('vote must be "yes" or "no"')

    if not membership.is_member(dao_id, voter):
        raise Forbidden("Only members can vote")

    proposal = (
        db.session.query(Proposal)
        .filter(Proposal.id == proposal_id, Proposal.dao_id == dao_id)
        .one_or_none()
    )
    if proposal is None:
        raise NotFound("Proposal not found")
    if parse_status(proposal.status) is not ProposalStatus.ACTIVE:
        raise InvalidState("Proposal is not active")

    if has_voted(proposal_id, voter):
        raise Conflict("Already voted")

    title = proposal.title
    _record_vote(dao_id, proposal_id, voter, choice, title)

    # Fresh counters straight from the database, not the identity map
    row = db.session.execute(
        select(
            Proposal.votes_for,
            Proposal.votes_against,
            Proposal.status,
            Dao.member_count,
            Dao.approval_threshold,
        )
        .join(Dao, Dao.id == Proposal.dao_id)
        .where(Proposal.id == proposal_id)
    ).one()

    snapshot = TallySnapshot(
        votes_for=row.votes_for,
        votes_against=row.votes_against,
        member_count=row.member_count,
        approval_threshold=row.approval_threshold,
    )
    current = parse_status(row.status)
    target = next_status(current, snapshot)

    passed = False
    if target is ProposalStatus.PASSED and current is ProposalStatus.ACTIVE:
        passed = _apply_pass(dao_id, proposal_id, title, snapshot)
        # A lost race still means the row is passed, just not by this request
        current = ProposalStatus.PASSED

    return VoteResult(
        votes_for=snapshot.votes_for,
        votes_against=snapshot.votes_against,
        status=current,
        passed=passed,
    )


def _record_vote(dao_id: int, proposal_id: int, voter: str, choice: str, title: str) -> None:
    column = Proposal.votes_for if choice == VOTE_YES else Proposal.votes_against
    try:
        db.session.add(Vote(proposal_id=proposal_id, dao_id=dao_id, voter=voter, vote=choice))
        db.session.flush()

        bumped = db.session.execute(
            update(Proposal)
            .where(Proposal.id == proposal_id, Proposal.status == ProposalStatus.ACTIVE.value)
            .values({column: column + 1, Proposal.updated_at: func.now()})
            .execution_options(synchronize_session=False)
        )
        if bumped.rowcount != 1:
            # Passed by a concurrent voter after our status check
            db.session.rollback()
            raise InvalidState("Proposal is not active")

        audit.record(db.session, dao_id, voter, audit.ACTION_VOTED, f'{choice} on "{title}"')
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info(
            "vote_conflict",
            extra={"event": "vote_conflict", "dao_id": dao_id, "proposal_id": proposal_id, "voter": voter},
        )
        raise Conflict("Already voted")

    current_app.logger.info(
        "vote_recorded",
        extra={"event": "vote_recorded", "dao_id": dao_id, "proposal_id": proposal_id, "voter": voter, "vote": choice},
    )


def _apply_pass(dao_id: int, proposal_id: int, title: str, snapshot: TallySnapshot) -> bool:
    """
    Conditional transition. Only the writer whose UPDATE matched an active row
    appends the "passed" activity; a concurrent loser rolls back and returns False.
    """
    result = db.session.execute(
        update(Proposal)
        .where(Proposal.id == proposal_id, Proposal.status == ProposalStatus.ACTIVE.value)
        .values(status=ProposalStatus.PASSED.value, executed_at=_utcnow(), updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        return False

    pct = approval_label(Decimal(snapshot.votes_for * 100) / Decimal(snapshot.total))
    audit.record(
        db.session, dao_id, audit.SYSTEM_ACTOR, audit.ACTION_PASSED,
        f'"{title}" passed with {pct}% approval',
    )
    db.session.commit()

    current_app.logger.info(
        "proposal_passed",
        extra={
            "event": "proposal_passed",
            "dao_id": dao_id,
            "proposal_id": proposal_id,
            "approval_pct": pct,
            "total_votes": snapshot.total,
            "quorum": snapshot.quorum,
        },
    )
    return True
