from sqlalchemy import func, UniqueConstraint
from daofactory.extensions import db

# Roles are plain text: callers may pass other labels, only "admin" gates anything
ROLE_MEMBER = "member"
ROLE_ADMIN = "admin"


class Member(db.Model):
    __tablename__ = "members"

    id = db.Column(db.Integer, primary_key=True)

    dao_id = db.Column(
        db.Integer,
        db.ForeignKey("daos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    btc_address = db.Column(db.String(255), nullable=False, index=True)
    stx_address = db.Column(db.String(255), nullable=True)
    display_name = db.Column(db.String(255), nullable=True)

    role = db.Column(db.String(32), nullable=False, server_default=ROLE_MEMBER)

    joined_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("dao_id", "btc_address", name="uq_members_dao_address"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<Member dao_id={self.dao_id} address={self.btc_address!r} role={self.role!r}>"

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            dao_id=self.dao_id,
            btc_address=self.btc_address,
            stx_address=self.stx_address,
            display_name=self.display_name,
            role=self.role,
            joined_at=self.joined_at.isoformat() if self.joined_at else None,
        )
