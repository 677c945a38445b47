from flask import current_app, jsonify, request

from daofactory.extensions import limiter
from daofactory.services import registry
from daofactory.utils.validators import to_int
from . import bp, json_body, write_limit


@bp.post("/daos")
@limiter.limit(write_limit)
def create_dao():
    """Create a DAO; the creator becomes its first admin."""
    data = json_body()
    dao = registry.create_dao(
        name=data.get("name"),
        description=data.get("description"),
        creator=data.get("creator"),
        creator_name=data.get("creator_name"),
        creator_stx=data.get("creator_stx"),
        approval_threshold=data.get("approval_threshold"),
        spend_limit_sats=data.get("spend_limit_sats"),
    )
    return jsonify({"success": True, "dao_id": dao.id, "name": dao.name}), 201


@bp.get("/daos")
def list_daos():
    cfg = current_app.config
    status = (request.args.get("status") or "active").strip() or "active"
    limit = to_int(request.args.get("limit"), cfg.get("DAO_LIST_DEFAULT_LIMIT", 50))
    offset = to_int(request.args.get("offset"), 0)

    page = registry.list_daos(status, limit=limit, offset=offset)
    return jsonify({
        "daos": [d.to_dict() for d in page.items],
        "pagination": {
            "total": page.total,
            "limit": page.limit,
            "offset": page.offset,
            "hasMore": page.has_more,
        },
    }), 200


@bp.get("/daos/<int:dao_id>")
def get_dao(dao_id: int):
    detail = registry.get_dao_detail(dao_id)
    return jsonify({
        "dao": detail["dao"].to_dict(),
        "members": [m.to_dict() for m in detail["members"]],
        "proposals": [p.to_dict() for p in detail["proposals"]],
        "activity": [a.to_dict() for a in detail["activity"]],
    }), 200


@bp.post("/daos/<int:dao_id>/members")
@limiter.limit(write_limit)
def invite_member(dao_id: int):
    """Admin-only invite."""
    data = json_body()
    registry.invite_member(
        dao_id,
        inviter=data.get("inviter"),
        btc_address=data.get("btc_address"),
        stx_address=data.get("stx_address"),
        display_name=data.get("display_name"),
        role=data.get("role"),
    )
    return jsonify({"success": True}), 201


@bp.post("/daos/<int:dao_id>/fund")
@limiter.limit(write_limit)
def fund_dao(dao_id: int):
    data = json_body()
    registry.fund_treasury(
        dao_id,
        funder=data.get("funder"),
        amount_sats=data.get("amount_sats"),
        tx_id=data.get("tx_id"),
    )
    return jsonify({"success": True}), 200
