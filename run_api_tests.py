"""End-to-end smoke run against a live server (uvicorn src.main:app --port 8000).

Mints an admin token locally (needs the same JWT_SECRET as the server), then walks
one event through create -> outcomes -> open -> quote -> wagers -> close -> resolve
and prints every response.
"""
import json
import time
import urllib.error
import urllib.request

from src.pm_common.enums import UserRole
from src.pm_gateway.auth.jwt_handler import create_access_token

BASE = "http://localhost:8000"

ADMIN = create_access_token("admin-smoke", role=UserRole.ADMIN)


def call(method, path, body=None, token=None):
    data = json.dumps(body).encode() if body is not None else None
    req = urllib.request.Request(
        f"{BASE}{path}",
        data=data,
        method=method,
        headers={"Content-Type": "application/json"},
    )
    if token:
        req.add_header("Authorization", f"Bearer {token}")
    try:
        with urllib.request.urlopen(req) as r:
            raw = r.read()
            return r.status, json.loads(raw) if raw else None
    except urllib.error.HTTPError as e:
        raw = e.read()
        return e.code, json.loads(raw) if raw else None


def post(path, body=None, token=None):
    return call("POST", path, body, token)


def get(path, token=None, params=None):
    if params:
        path += "?" + "&".join(f"{k}={v}" for k, v in params.items())
    return call("GET", path, token=token)


def section(title):
    print(f"\n{'='*60}")
    print(f"### {title} ###")
    print('='*60)


def label(name):
    print(f"\n--- {name} ---")


def out(result):
    status, data = result
    print(status)
    if data is not None:
        print(json.dumps(data, indent=2, ensure_ascii=False))
    return data


# ── Users ──────────────────────────────────────────────────────
section("USERS AND FUNDING")

label("Unauthenticated admin call")
out(post("/admin/dev-scripts/generate-user-token", {"email": "alice@example.com"}))

label("Token for alice")
ALICE = out(post("/admin/dev-scripts/generate-user-token", {"email": "alice@example.com"}, ADMIN))["token"]

label("Token for bob")
BOB = out(post("/admin/dev-scripts/generate-user-token", {"email": "bob@example.com"}, ADMIN))["token"]

label("Fund alice: 500 topup, 20 bonus")
out(post("/admin/dev-scripts/credit-wallet", {"email": "alice@example.com", "wallet_type": "topup", "amount": 500}, ADMIN))
out(post("/admin/dev-scripts/credit-wallet", {"email": "alice@example.com", "wallet_type": "bonus", "amount": 20}, ADMIN))

label("Fund bob: 5000 topup")
out(post("/admin/dev-scripts/credit-wallet", {"email": "bob@example.com", "wallet_type": "topup", "amount": 5000}, ADMIN))

label("Alice wallets")
wallets = out(get("/wallets", ALICE))["wallets"]
ALICE_WALLET = wallets["topup"]["id"]
BOB_WALLET = out(get("/wallets", BOB))["wallets"]["topup"]["id"]

# ── Event ──────────────────────────────────────────────────────
section("EVENT LIFECYCLE")

suffix = str(int(time.time()))
label("Create event")
event = out(post("/admin/events", {
    "ticker": f"SMOKE{suffix}",
    "name": f"Smoke test event {suffix}",
    "ends_at": "2030-01-01T00:00:00Z",
    "timezone": "Asia/Tokyo",
}, ADMIN))
CODE = event["code"]

label("Open without outcomes (409)")
out(post(f"/admin/events/{CODE}/open", token=ADMIN))

label("Add outcomes A and B")
out(post(f"/admin/events/{CODE}/outcomes", {"name": "Yes"}, ADMIN))
out(post(f"/admin/events/{CODE}/outcomes", {"name": "No"}, ADMIN))

label("Open (204) then open again (409)")
out(post(f"/admin/events/{CODE}/open", token=ADMIN))
out(post(f"/admin/events/{CODE}/open", token=ADMIN))

# ── Quotes and wagers ──────────────────────────────────────────
section("QUOTES AND WAGERS")

label("Quote 10 on A at 2x")
quote = out(post("/quotes", {"event_id": CODE, "event_outcome_id": "A", "pledge": 10, "leverage": 2}))
out(get(f"/quotes/{quote['_id']}"))

label("Alice wagers 10 on A at 5x")
out(post("/wagers", {
    "event_id": CODE, "event_outcome_id": "A", "wallet_id": ALICE_WALLET,
    "pledge": 10, "leverage": 5,
}, ALICE))

label("Bob wagers 800 on B (moves A down, may margin-call alice)")
out(post("/wagers", {
    "event_id": CODE, "event_outcome_id": "B", "wallet_id": BOB_WALLET,
    "pledge": 800, "leverage": 1,
}, BOB))

label("Below min pledge (409)")
out(post("/wagers", {
    "event_id": CODE, "event_outcome_id": "A", "wallet_id": ALICE_WALLET, "pledge": 1,
}, ALICE))

label("Alice positions on the event")
out(get(f"/wagers/events/{CODE}", ALICE))

# ── Resolution ─────────────────────────────────────────────────
section("RESOLUTION")

out(post(f"/admin/events/{CODE}/close", token=ADMIN))

label("Dry run")
out(post(f"/admin/events/{CODE}/resolve", {"event_outcome_id": "B", "ends_at": "2030-01-01T00:00:00Z", "dry_run": True}, ADMIN))

label("Resolve B")
out(post(f"/admin/events/{CODE}/resolve", {"event_outcome_id": "B", "ends_at": "2030-01-01T00:00:00Z"}, ADMIN))

label("Resolve again (409)")
out(post(f"/admin/events/{CODE}/resolve", {"event_outcome_id": "B", "ends_at": "2030-01-01T00:00:00Z"}, ADMIN))

label("Bob dashboard (inactive)")
out(get("/dashboard/wager-position-events", BOB, {"status": "inactive", "pagination": "false"}))

label("Bob wallets")
out(get("/wallets", BOB))

print("\n\n=== SMOKE RUN COMPLETE ===\n")
