from __future__ import annotations

from sqlalchemy import CheckConstraint, UniqueConstraint, text
from sqlalchemy.sql import func

from daofactory.extensions import db

DAO_STATUS_ACTIVE = "active"


class Dao(db.Model):
    __tablename__ = "daos"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    creator = db.Column(db.String(255), nullable=False)
    creator_name = db.Column(db.String(255), nullable=True)

    # Governance rules
    approval_threshold = db.Column(db.Integer, nullable=False, server_default=text("51"))
    spend_limit_sats = db.Column(db.BigInteger, nullable=True, server_default=text("0"))  # informational only

    # Denormalized counters; bumped in the same transaction as the rows they count
    treasury_sats = db.Column(db.BigInteger, nullable=False, server_default=text("0"))
    member_count = db.Column(db.Integer, nullable=False, server_default=text("1"))
    proposal_count = db.Column(db.Integer, nullable=False, server_default=text("0"))

    status = db.Column(db.String(32), nullable=False, server_default=text("'active'"))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    members = db.relationship("Member", backref="dao", lazy="select", order_by="Member.id")
    proposals = db.relationship("Proposal", backref="dao", lazy="select", order_by="Proposal.id")

    __table_args__ = (
        UniqueConstraint("name", name="uq_daos_name"),
        CheckConstraint("approval_threshold BETWEEN 1 AND 100", name="ck_daos_threshold_range"),
        CheckConstraint("treasury_sats >= 0", name="ck_daos_treasury_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Dao id={self.id} name={self.name!r} members={self.member_count} proposals={self.proposal_count}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            name=self.name,
            description=self.description,
            creator=self.creator,
            creator_name=self.creator_name,
            approval_threshold=self.approval_threshold,
            spend_limit_sats=self.spend_limit_sats,
            treasury_sats=self.treasury_sats,
            member_count=self.member_count,
            proposal_count=self.proposal_count,
            status=self.status,
            created_at=self.created_at.isoformat() if self.created_at else None,
            updated_at=self.updated_at.isoformat() if self.updated_at else None,
        )
