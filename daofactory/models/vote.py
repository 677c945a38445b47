from sqlalchemy import func, CheckConstraint, UniqueConstraint
from daofactory.extensions import db

VOTE_YES = "yes"
VOTE_NO = "no"
VOTE_CHOICES = (VOTE_YES, VOTE_NO)


class Vote(db.Model):
    __tablename__ = "votes"

    id = db.Column(db.Integer, primary_key=True)
    proposal_id = db.Column(
        db.Integer,
        db.ForeignKey("proposals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Copied from the proposal so per-DAO vote counts need no join
    dao_id = db.Column(db.Integer, db.ForeignKey("daos.id", ondelete="CASCADE"), nullable=False)
    voter = db.Column(db.String(255), nullable=False)
    vote = db.Column(db.String(8), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        # Authoritative duplicate-vote guard; the service pre-check only saves a round trip
        UniqueConstraint("proposal_id", "voter", name="uq_votes_proposal_voter"),
        CheckConstraint("vote IN ('yes','no')", name="ck_votes_vote_valid"),
    )

    def __repr__(self) -> str:
        return f"<Vote proposal_id={self.proposal_id} voter={self.voter!r} vote={self.vote!r}>"
