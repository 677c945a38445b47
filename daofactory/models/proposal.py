from __future__ import annotations

from sqlalchemy import CheckConstraint, text
from sqlalchemy.sql import func

from daofactory.extensions import db

ACTION_GENERAL = "general"
ACTION_SPENDING = "spending"
ACTION_MEMBERSHIP = "membership"


class Proposal(db.Model):
    __tablename__ = "proposals"

    id = db.Column(db.Integer, primary_key=True)
    dao_id = db.Column(db.Integer, db.ForeignKey("daos.id", ondelete="CASCADE"), nullable=False, index=True)

    proposer = db.Column(db.String(255), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Spending metadata is stored, never settled
    action_type = db.Column(db.String(32), nullable=False, server_default=text("'general'"))
    amount_sats = db.Column(db.BigInteger, nullable=True, server_default=text("0"))
    recipient = db.Column(db.String(255), nullable=True)

    status = db.Column(db.String(32), nullable=False, server_default=text("'active'"), index=True)
    votes_for = db.Column(db.Integer, nullable=False, server_default=text("0"))
    votes_against = db.Column(db.Integer, nullable=False, server_default=text("0"))
    executed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    votes = db.relationship("Vote", backref="proposal", lazy="select", order_by="Vote.id")

    __table_args__ = (
        CheckConstraint("votes_for >= 0 AND votes_against >= 0", name="ck_proposals_votes_non_negative"),
    )

    @property
    def total_votes(self) -> int:
        return (self.votes_for or 0) + (self.votes_against or 0)

    def __repr__(self) -> str:
        return f"<Proposal id={self.id} dao_id={self.dao_id} status={self.status!r} for={self.votes_for} against={self.votes_against}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            dao_id=self.dao_id,
            proposer=self.proposer,
            title=self.title,
            description=self.description,
            action_type=self.action_type,
            amount_sats=self.amount_sats,
            recipient=self.recipient,
            status=self.status,
            votes_for=self.votes_for,
            votes_against=self.votes_against,
            executed_at=self.executed_at.isoformat() if self.executed_at else None,
            created_at=self.created_at.isoformat() if self.created_at else None,
            updated_at=self.updated_at.isoformat() if self.updated_at else None,
        )
