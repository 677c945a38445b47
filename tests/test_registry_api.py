import pytest

from daofactory.extensions import db
from daofactory.models import Activity, Dao, Member
from helpers import ADMIN, make_dao, make_proposal, member_addr, vote


def _dao(app, dao_id):
    with app.app_context():
        return db.session.get(Dao, dao_id).to_dict()


def test_create_dao_seats_creator_as_admin(app, client):
    r = client.post("/api/daos", json={
        "name": "Satoshi Guild",
        "description": "Builders",
        "creator": ADMIN,
        "creator_name": "alice",
        "approval_threshold": 60,
    })
    assert r.status_code == 201
    body = r.get_json()
    assert body["success"] is True
    assert body["name"] == "Satoshi Guild"

    dao_id = body["dao_id"]
    d = _dao(app, dao_id)
    assert d["member_count"] == 1
    assert d["proposal_count"] == 0
    assert d["treasury_sats"] == 0
    assert d["approval_threshold"] == 60

    with app.app_context():
        members = Member.query.filter_by(dao_id=dao_id).all()
        assert [(m.btc_address, m.role, m.display_name) for m in members] == [(ADMIN, "admin", "alice")]
        created = Activity.query.filter_by(dao_id=dao_id, action="created").one()
        assert created.actor == ADMIN
        assert created.details == 'DAO "Satoshi Guild" created with 60% approval threshold'


@pytest.mark.parametrize("given,stored", [
    (None, 51),
    (0, 51),
    (-5, 1),
    (150, 100),
    ("75", 75),
    ("abc", 51),
])
def test_threshold_is_clamped(app, client, given, stored):
    r = client.post("/api/daos", json={
        "name": f"T{given}",
        "description": "d",
        "creator": ADMIN,
        "approval_threshold": given,
    })
    assert r.status_code == 201
    assert _dao(app, r.get_json()["dao_id"])["approval_threshold"] == stored


def test_create_dao_validation_and_duplicate_name(client):
    r = client.post("/api/daos", json={"name": "X", "creator": ADMIN})
    assert r.status_code == 400
    assert r.get_json()["error"] == "Required: name, description, creator"

    make_dao(client, name="Dup")
    again = client.post("/api/daos", json={"name": "Dup", "description": "d", "creator": member_addr(1)})
    assert again.status_code == 409
    assert again.get_json()["error"] == "DAO name already taken"


def test_invite_gating(app, client):
    dao_id = make_dao(client, members=2)

    # Plain member cannot invite
    r = client.post(f"/api/daos/{dao_id}/members", json={"inviter": member_addr(1), "btc_address": member_addr(9)})
    assert r.status_code == 403
    assert r.get_json()["error"] == "Only admins can invite members"

    dup = client.post(f"/api/daos/{dao_id}/members", json={"inviter": ADMIN, "btc_address": member_addr(1)})
    assert dup.status_code == 409
    assert dup.get_json()["error"] == "Already a member"

    missing = client.post("/api/daos/9999/members", json={"inviter": ADMIN, "btc_address": member_addr(9)})
    assert missing.status_code == 404

    bad = client.post(f"/api/daos/{dao_id}/members", json={"inviter": ADMIN})
    assert bad.status_code == 400

    assert _dao(app, dao_id)["member_count"] == 2


def test_invited_admin_can_invite(app, client):
    dao_id = make_dao(client)
    r = client.post(f"/api/daos/{dao_id}/members", json={
        "inviter": ADMIN, "btc_address": member_addr(1), "display_name": "bob", "role": "admin",
    })
    assert r.status_code == 201
    r2 = client.post(f"/api/daos/{dao_id}/members", json={"inviter": member_addr(1), "btc_address": member_addr(2)})
    assert r2.status_code == 201

    with app.app_context():
        details = [a.details for a in Activity.query.filter_by(dao_id=dao_id, action="invited").order_by(Activity.id)]
    assert details == ["bob added as admin", f"{member_addr(2)} added as member"]
    assert _dao(app, dao_id)["member_count"] == 3


def test_fund_treasury(app, client):
    dao_id = make_dao(client)
    assert client.post(f"/api/daos/{dao_id}/fund", json={"funder": ADMIN, "amount_sats": 1500}).status_code == 200
    r = client.post(f"/api/daos/{dao_id}/fund", json={"funder": member_addr(3), "amount_sats": 500, "tx_id": "abc123"})
    assert r.get_json() == {"success": True}

    assert _dao(app, dao_id)["treasury_sats"] == 2000
    with app.app_context():
        details = [a.details for a in Activity.query.filter_by(dao_id=dao_id, action="funded").order_by(Activity.id)]
    assert details == ["1500 sats deposited", "500 sats deposited (tx: abc123)"]


@pytest.mark.parametrize("payload", [
    {"funder": ADMIN},
    {"funder": ADMIN, "amount_sats": 0},
    {"funder": ADMIN, "amount_sats": -10},
    {"funder": ADMIN, "amount_sats": "lots"},
    {"amount_sats": 10},
])
def test_fund_rejects_bad_input(app, client, payload):
    dao_id = make_dao(client)
    r = client.post(f"/api/daos/{dao_id}/fund", json=payload)
    assert r.status_code == 400
    assert r.get_json()["error"] == "Required: funder, amount_sats (positive)"
    assert _dao(app, dao_id)["treasury_sats"] == 0


def test_fund_missing_dao(client):
    r = client.post("/api/daos/4242/fund", json={"funder": ADMIN, "amount_sats": 10})
    assert r.status_code == 404


def test_create_proposal_errors(app, client):
    dao_id = make_dao(client, members=2)

    r = client.post(f"/api/daos/{dao_id}/proposals", json={"proposer": ADMIN})
    assert r.status_code == 400
    assert r.get_json()["error"] == "Required: proposer, title"

    r = client.post("/api/daos/31337/proposals", json={"proposer": ADMIN, "title": "x"})
    assert r.status_code == 404

    r = client.post(f"/api/daos/{dao_id}/proposals", json={"proposer": "bc1qstranger", "title": "x"})
    assert r.status_code == 403

    r = client.post(f"/api/daos/{dao_id}/proposals", json={"proposer": ADMIN, "title": "x", "amount_sats": -1})
    assert r.status_code == 400

    r = client.post(f"/api/daos/{dao_id}/proposals", json={"proposer": ADMIN, "title": "x", "amount_sats": "lots"})
    assert r.status_code == 400
    assert r.get_json() == {"error": "amount_sats must be a non-negative integer", "code": "invalid_argument"}

    assert _dao(app, dao_id)["proposal_count"] == 0


def test_create_proposal_stores_spending_metadata(app, client):
    dao_id = make_dao(client, members=2)
    r = client.post(f"/api/daos/{dao_id}/proposals", json={
        "proposer": member_addr(1),
        "title": "Pay the designer",
        "description": "Logo work",
        "action_type": "spending",
        "amount_sats": 25000,
        "recipient": "bc1qdesigner",
    })
    assert r.status_code == 201

    detail = client.get(f"/api/daos/{dao_id}").get_json()
    p = detail["proposals"][0]
    assert p["id"] == r.get_json()["proposal_id"]
    assert p["status"] == "active"
    assert (p["action_type"], p["amount_sats"], p["recipient"]) == ("spending", 25000, "bc1qdesigner")
    assert (p["votes_for"], p["votes_against"]) == (0, 0)
    assert detail["dao"]["proposal_count"] == 1
    assert detail["activity"][0]["action"] == "proposed"
    assert detail["activity"][0]["details"] == "Pay the designer"


def test_list_daos_pagination(client):
    for i in range(3):
        make_dao(client, name=f"Guild {i}")

    r = client.get("/api/daos?limit=2")
    body = r.get_json()
    assert r.status_code == 200
    assert len(body["daos"]) == 2
    assert body["pagination"] == {"total": 3, "limit": 2, "offset": 0, "hasMore": True}

    r = client.get("/api/daos?limit=2&offset=2")
    body = r.get_json()
    assert len(body["daos"]) == 1
    assert body["pagination"]["hasMore"] is False

    assert client.get("/api/daos?status=archived").get_json()["pagination"]["total"] == 0


def test_dao_detail_lists_admins_first(client):
    dao_id = make_dao(client, members=3)
    client.post(f"/api/daos/{dao_id}/members", json={"inviter": ADMIN, "btc_address": member_addr(7), "role": "admin"})

    detail = client.get(f"/api/daos/{dao_id}").get_json()
    roles = [m["role"] for m in detail["members"]]
    assert roles == ["admin", "admin", "member", "member"]
    assert detail["dao"]["member_count"] == 4

    assert client.get("/api/daos/777").status_code == 404


def test_stats(client):
    a = make_dao(client, name="A", members=2)
    make_dao(client, name="B")
    client.post(f"/api/daos/{a}/fund", json={"funder": ADMIN, "amount_sats": 900})
    pid = make_proposal(client, a)
    vote(client, a, pid, ADMIN, "yes")

    s = client.get("/api/stats").get_json()
    assert s == {
        "total_daos": 2,
        "active_daos": 2,
        "total_members": 3,
        "total_treasury_sats": 900,
        "total_proposals": 1,
        "passed_proposals": 1,
        "total_votes": 1,
    }


def test_long_addresses_are_rejected_not_truncated(app, client):
    prefix = "bc1q" + "x" * 260
    r = client.post("/api/daos", json={"name": "Long", "description": "d", "creator": prefix + "A"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "creator must be at most 255 characters"

    dao_id = make_dao(client, name="Short")
    r = client.post(f"/api/daos/{dao_id}/members", json={"inviter": ADMIN, "btc_address": prefix + "B"})
    assert r.status_code == 400
    r = client.post(f"/api/daos/{dao_id}/proposals", json={"proposer": ADMIN, "title": "t" * 256})
    assert r.status_code == 400
    assert r.get_json()["error"] == "title must be at most 255 characters"

    with app.app_context():
        assert Member.query.filter_by(dao_id=dao_id).count() == 1


def test_addresses_keep_inner_characters(app, client):
    spaced = "bc1q  spaced\taddress"
    dao_id = make_dao(client, name="Opaque", admin=spaced)

    with app.app_context():
        assert Member.query.filter_by(dao_id=dao_id).one().btc_address == spaced

    # A whitespace-collapsed variant is a different identity
    pid = make_proposal(client, dao_id, proposer=spaced)
    r = vote(client, dao_id, pid, "bc1q spaced address", "yes")
    assert r.status_code == 403


def test_create_dao_rejects_malformed_spend_limit(client):
    for bad in ("lots", -1, 1.5):
        r = client.post("/api/daos", json={"name": f"S{bad}", "description": "d", "creator": ADMIN,
                                           "spend_limit_sats": bad})
        assert r.status_code == 400, bad
        assert r.get_json()["code"] == "invalid_argument"
    ok = client.post("/api/daos", json={"name": "S ok", "description": "d", "creator": ADMIN, "spend_limit_sats": "500"})
    assert ok.status_code == 201
