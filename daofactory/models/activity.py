from daofactory.extensions import db


class Activity(db.Model):
    __tablename__ = "activity"
    id = db.Column(db.Integer, primary_key=True)
    dao_id = db.Column(db.Integer, db.ForeignKey("daos.id", ondelete="CASCADE"), nullable=False, index=True)
    actor = db.Column(db.String(255), nullable=False)
    action = db.Column(db.String(32), nullable=False)
    details = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), server_default=db.func.now(), nullable=False)

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            dao_id=self.dao_id,
            actor=self.actor,
            action=self.action,
            details=self.details,
            created_at=self.created_at.isoformat() if self.created_at else None,
        )
