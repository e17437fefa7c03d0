import time

import pytest
from fastapi.testclient import TestClient

from folio.infra.store import StoreError

WEEK = 7 * 24 * 3600

PROTECTED = [
    ("post", "/logout"),
    ("post", "/addHolding"),
    ("get", "/holdings"),
    ("post", "/addPosition"),
    ("get", "/positions"),
    ("post", "/addOrder"),
    ("get", "/orders"),
]

ORDER = {"name": "INFY", "qty": 2, "price": 1555.45, "mode": "BUY"}


def test_root_says_hello(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.text == "Server is running fine!"


def test_signup_signin_scenario(client):
    r = client.post("/signup", json={"username": "alice", "password": "s3cret"})
    assert r.status_code == 201
    body = r.json()
    assert body["user"]["username"] == "alice"
    assert body["token"]
    signup_token = body["token"]
    user_id = body["user"]["id"]

    r = client.post("/signup", json={"username": "alice", "password": "s3cret"})
    assert r.status_code == 400
    assert r.json() == {"message": "User already exists"}

    r = client.post("/signin", json={"username": "alice", "password": "wrong"})
    assert r.status_code == 400
    assert r.json() == {"message": "Password is incorrect"}

    r = client.post("/signin", json={"username": "alice", "password": "s3cret"})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Login successful"
    assert body["user"] == {"id": user_id, "username": "alice"}
    assert body["token"] and body["token"] != signup_token


def test_signin_unknown_user(client):
    r = client.post("/signin", json={"username": "ghost", "password": "s3cret"})
    assert r.status_code == 400
    assert r.json() == {"message": "User does not exist"}


@pytest.mark.parametrize(
    "payload",
    [{}, {"username": "alice"}, {"password": "s3cret"}, {"username": "", "password": "s3cret"}],
)
def test_signup_body_is_validated(client, payload):
    r = client.post("/signup", json=payload)
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid request body"


def test_verify_token_reports_valid_user(client, signup):
    user_id, headers = signup()
    r = client.get("/verifyToken", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"valid": True, "userId": user_id}


@pytest.mark.parametrize(
    "headers,message",
    [
        ({}, "No token provided"),
        ({"Authorization": "Bearer"}, "Token missing"),
        ({"Authorization": "Bearer not-a-token"}, "Invalid or expired token"),
    ],
)
def test_verify_token_never_fails_the_request(client, headers, message):
    r = client.get("/verifyToken", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"valid": False, "message": message}


def test_expired_token(client, app, signup):
    user_id, _ = signup()
    stale = app.state.sessions.issue_token(user_id, now=time.time() - WEEK - 60)
    headers = {"Authorization": f"Bearer {stale}"}

    r = client.get("/verifyToken", headers=headers)
    assert r.json() == {"valid": False, "message": "Invalid or expired token"}

    r = client.get("/holdings", headers=headers)
    assert r.status_code == 403
    assert r.json() == {"message": "Invalid or expired token"}


@pytest.mark.parametrize("method,path", PROTECTED)
def test_protected_routes_need_a_token(client, store, method, path):
    r = client.request(method, path, json=ORDER)
    assert r.status_code == 401
    assert r.json() == {"message": "No token provided"}
    # the handler never ran
    assert store.find("orders") == []


@pytest.mark.parametrize("method,path", PROTECTED)
def test_protected_routes_reject_bad_tokens(client, method, path):
    r = client.request(method, path, json=ORDER, headers={"Authorization": "Bearer forged.token.value"})
    assert r.status_code == 403


def test_header_without_token_is_unauthenticated(client):
    r = client.get("/orders", headers={"Authorization": "Bearer"})
    assert r.status_code == 401


@pytest.mark.parametrize("scheme", ["Basic", "Token"])
def test_valid_token_under_another_scheme_is_rejected(client, signup, scheme):
    _, headers = signup()
    token = headers["Authorization"].split()[1]
    other = {"Authorization": f"{scheme} {token}"}

    r = client.get("/orders", headers=other)
    assert r.status_code == 401
    assert r.json() == {"message": "No token provided"}

    r = client.get("/verifyToken", headers=other)
    assert r.json() == {"valid": False, "message": "Token missing"}


def test_bearer_scheme_is_case_insensitive(client, signup):
    _, headers = signup()
    token = headers["Authorization"].split()[1]
    assert client.get("/orders", headers={"Authorization": f"bearer {token}"}).status_code == 200


def test_logout_clears_cookie(client, signup):
    _, headers = signup()
    r = client.post("/logout", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Logged out successfully"}
    assert "token=" in r.headers.get("set-cookie", "")

    # stateless: the token keeps working until it expires
    assert client.get("/verifyToken", headers=headers).json()["valid"] is True


def test_holdings_are_created_and_listed_per_owner(client, signup):
    alice_id, alice = signup("alice", "s3cret")
    bob_id, bob = signup("bob", "hunter2")

    holding = {"name": "INFY", "qty": 5, "avg": 1350.5, "price": 1555.45, "net": 15.2, "day": "+0.5%"}
    r = client.post("/addHolding", json={**holding, "userId": bob_id}, headers=alice)
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Holding added successfully"
    assert body["data"]["userId"] == alice_id
    assert body["data"]["name"] == "INFY"
    assert body["data"]["_id"]

    r = client.get("/holdings", headers=alice)
    assert r.status_code == 200
    assert r.json()["message"] == "Holdings fetched successfully"
    assert [h["_id"] for h in r.json()["data"]] == [body["data"]["_id"]]

    assert client.get("/holdings", headers=bob).json()["data"] == []


def test_positions(client, signup):
    user_id, headers = signup()
    position = {"product": "CNC", "name": "TCS", "qty": 1, "avg": 3000, "price": 3100, "net": "+3.3%", "day": "+1%", "isLoss": False}
    r = client.post("/addPosition", json=position, headers=headers)
    assert r.status_code == 201
    assert r.json()["message"] == "Position added successfully"
    assert r.json()["data"]["isLoss"] is False

    r = client.get("/positions", headers=headers)
    data = r.json()["data"]
    assert len(data) == 1
    assert data[0]["product"] == "CNC"
    assert data[0]["userId"] == user_id


def test_orders(client, signup):
    user_id, headers = signup()
    r = client.post("/addOrder", json=ORDER, headers=headers)
    assert r.status_code == 201
    assert r.json()["message"] == "Order added successfully"

    r = client.get("/orders", headers=headers)
    assert r.json()["message"] == "Orders fetched successfully"
    [order] = r.json()["data"]
    assert order["mode"] == "BUY"
    assert order["userId"] == user_id


@pytest.mark.parametrize("missing", ["name", "qty", "price", "mode"])
def test_order_requires_every_field(client, signup, store, missing):
    _, headers = signup()
    payload = {k: v for k, v in ORDER.items() if k != missing}
    r = client.post("/addOrder", json=payload, headers=headers)
    assert r.status_code == 400
    assert r.json() == {"message": "All fields are required"}
    assert store.find("orders") == []


def test_order_with_zero_qty_counts_as_missing(client, signup):
    _, headers = signup()
    r = client.post("/addOrder", json={**ORDER, "qty": 0}, headers=headers)
    assert r.status_code == 400


def test_non_numeric_qty_is_rejected(client, signup):
    _, headers = signup()
    r = client.post("/addHolding", json={"name": "INFY", "qty": "lots"}, headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid request body"


def test_store_failure_is_masked(client, signup, store, monkeypatch):
    _, headers = signup()

    def boom(*args, **kwargs):
        raise StoreError("/var/lib/folio.yml: permission denied")

    monkeypatch.setattr(store, "insert_one", boom)
    r = client.post("/addOrder", json=ORDER, headers=headers)
    assert r.status_code == 500
    assert r.json() == {"message": "Internal server error"}

    r = client.post("/signup", json={"username": "bob", "password": "hunter2"})
    assert r.status_code == 500
    assert r.json() == {"message": "Internal server error"}


def test_unexpected_error_is_masked(app, signup, monkeypatch):
    import folio.app as app_module

    _, headers = signup()

    def boom(*args, **kwargs):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(app_module, "list_records", boom)
    client = TestClient(app, raise_server_exceptions=False)
    r = client.get("/orders", headers=headers)
    assert r.status_code == 500
    assert r.json() == {"message": "Internal server error"}


def test_startup_checks_the_store(app):
    with TestClient(app) as client:
        assert client.get("/").status_code == 200


def test_accounts_persist_across_restarts(settings, signup):
    from folio.app import create_app

    signup("alice", "s3cret")
    fresh = TestClient(create_app(settings))
    r = fresh.post("/signin", json={"username": "alice", "password": "s3cret"})
    assert r.status_code == 200
