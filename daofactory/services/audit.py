from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from daofactory.extensions import db
from daofactory.models.activity import Activity

ACTION_CREATED = "created"
ACTION_INVITED = "invited"
ACTION_PROPOSED = "proposed"
ACTION_VOTED = "voted"
ACTION_PASSED = "passed"
ACTION_FUNDED = "funded"

SYSTEM_ACTOR = "system"


def record(session: Session, dao_id: int, actor: str, action: str, details: Optional[str] = None) -> Activity:
    """
    Stage one activity row on the caller's session.

    Never flushes or commits: the row lands (or rolls back) together with the
    state change it documents.
    """
    row = Activity(dao_id=dao_id, actor=actor, action=action, details=details)
    session.add(row)
    return row


def recent(dao_id: int, limit: int = 30) -> List[Activity]:
    return (
        db.session.query(Activity)
        .filter(Activity.dao_id == dao_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
        .all()
    )
