"""API helpers shared by the scenario tests."""

ADMIN = "bc1qadmin0000000000000000000000000000000"


def member_addr(i: int) -> str:
    return f"bc1qmember{i:030d}"


def make_dao(client, *, name="Guild", threshold=51, members=1, admin=ADMIN):
    """Create a DAO via the API and invite members until it has `members` rows."""
    resp = client.post("/api/daos", json={
        "name": name,
        "description": "Test guild",
        "creator": admin,
        "approval_threshold": threshold,
    })
    assert resp.status_code == 201, resp.get_json()
    dao_id = resp.get_json()["dao_id"]
    for i in range(1, members):
        r = client.post(f"/api/daos/{dao_id}/members", json={"inviter": admin, "btc_address": member_addr(i)})
        assert r.status_code == 201, r.get_json()
    return dao_id


def make_proposal(client, dao_id, *, proposer=ADMIN, title="Fund the docs sprint"):
    resp = client.post(f"/api/daos/{dao_id}/proposals", json={"proposer": proposer, "title": title})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["proposal_id"]


def vote(client, dao_id, proposal_id, voter, choice):
    return client.post(
        f"/api/daos/{dao_id}/proposals/{proposal_id}/vote",
        json={"voter": voter, "vote": choice},
    )
