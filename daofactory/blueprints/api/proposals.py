from flask import jsonify

from daofactory.extensions import limiter
from daofactory.services import governance
from . import bp, json_body, write_limit


@bp.post("/daos/<int:dao_id>/proposals")
@limiter.limit(write_limit)
def create_proposal(dao_id: int):
    """Members only. Returns the new proposal id."""
    data = json_body()
    proposal = governance.create_proposal(
        dao_id,
        proposer=data.get("proposer"),
        title=data.get("title"),
        description=data.get("description"),
        action_type=data.get("action_type"),
        amount_sats=data.get("amount_sats"),
        recipient=data.get("recipient"),
    )
    return jsonify({"success": True, "proposal_id": proposal.id}), 201


@bp.post("/daos/<int:dao_id>/proposals/<int:proposal_id>/vote")
@limiter.limit(write_limit)
def vote(dao_id: int, proposal_id: int):
    """Record one yes/no vote, then pass the proposal if quorum and threshold hold."""
    data = json_body()
    result = governance.cast_vote(
        dao_id,
        proposal_id,
        voter=data.get("voter"),
        choice=data.get("vote"),
    )
    return jsonify({
        "success": True,
        "votes_for": result.votes_for,
        "votes_against": result.votes_against,
        "status": result.status.value,
    }), 200
