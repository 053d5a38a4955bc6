"""HTTP surface tests using FastAPI's TestClient.

Each test builds its own app from ``ServerSettings`` so admin keys and
ruleset directories stay isolated.  The ``with`` block runs the lifespan
handler, which loads the rulesets.
"""

import shutil
from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient

from helpers.rulesets import make_doc
from screening_server.app import create_app
from screening_server.config import ServerSettings, load_settings
from species_screening.ruleset import find_repo_root

BEE = "rusty_patched_bumble_bee"
ADMIN_KEY = "test-admin-key"

SHIPPED_DIR = find_repo_root(Path(__file__)) / "v1" / "rulesets"


@pytest.fixture
def ruleset_dir(tmp_path):
    """Writable copy of the shipped rulesets."""
    target = tmp_path / "rulesets"
    shutil.copytree(SHIPPED_DIR, target)
    return target


@pytest.fixture
def client(ruleset_dir):
    settings = ServerSettings(ruleset_dir=str(ruleset_dir), admin_api_key=ADMIN_KEY)
    with TestClient(create_app(settings)) as c:
        yield c


# =====================================================================
# Settings
# =====================================================================


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("SERVER_PORT", "9000")
    monkeypatch.setenv("SERVER_CORS_ORIGINS", "http://a.example, http://b.example")
    monkeypatch.setenv("SERVER_LOG_LEVEL", "debug")
    monkeypatch.delenv("ADMIN_API_KEY", raising=False)
    settings = load_settings()
    assert settings.port == 9000
    assert settings.cors_origins == ["http://a.example", "http://b.example"]
    assert settings.log_level == "DEBUG"
    assert settings.admin_api_key is None


# =====================================================================
# Read endpoints
# =====================================================================


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "rulesets": 1}


def test_list_rulesets(client):
    resp = client.get("/api/v1/rulesets")
    assert resp.status_code == 200
    (summary,) = resp.json()
    assert summary["id"] == BEE
    assert summary["species"] == "Bombus affinis"
    assert summary["riskScoreMax"] == 100


def test_get_ruleset_camel_case(client):
    resp = client.get(f"/api/v1/rulesets/{BEE}")
    assert resp.status_code == 200
    body = resp.json()
    assert set(body) == {"meta", "rulesInOrder", "scoring", "report"}
    assert "highRiskTriggers" in body["scoring"]


def test_get_unknown_ruleset_is_404(client):
    resp = client.get("/api/v1/rulesets/no_such_ruleset")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Resource not found"}


# =====================================================================
# Screening endpoints
# =====================================================================


IN_ZONE = {
    "federal_nexus": "Yes",
    "hpz_overlap": "Yes",
    "habitat_present": "Yes",
    "activities_selected": ["Insecticide application"],
    "insecticide_used": "Yes",
}


def test_evaluate(client):
    resp = client.post(f"/api/v1/rulesets/{BEE}/evaluate", json={"answers": IN_ZONE})
    assert resp.status_code == 200
    body = resp.json()
    assert body["determination"] == "May Affect, Likely to Adversely Affect"
    assert body["riskScore"] == 70
    assert body["riskBand"] == "High"
    assert body["confidence"] == "High"
    assert body["drivers"][0]["points"] == 60


def test_evaluate_empty_body(client):
    resp = client.post(f"/api/v1/rulesets/{BEE}/evaluate", json={})
    assert resp.status_code == 200
    assert resp.json()["determination"].startswith("Outside")


def test_evaluate_unknown_ruleset(client):
    resp = client.post("/api/v1/rulesets/nope/evaluate", json={"answers": {}})
    assert resp.status_code == 404


def test_evaluate_rejects_non_object_answers(client):
    resp = client.post(f"/api/v1/rulesets/{BEE}/evaluate", json={"answers": ["Yes"]})
    assert resp.status_code == 422


def test_report(client):
    resp = client.post(f"/api/v1/rulesets/{BEE}/report", json={"answers": IN_ZONE})
    assert resp.status_code == 200
    body = resp.json()
    assert body["rulesetId"] == BEE
    assert body["riskScoreMax"] == 100
    assert body["topDrivers"][0]["label"].startswith("Pesticide exposure risk")
    assert any(r.startswith("Avoid insecticide and fungicide") for r in body["recommendations"])
    assert body["documentationText"].startswith("Rusty patched bumble bee (Bombus affinis)")


# =====================================================================
# Admin reload
# =====================================================================


RELOAD = "/api/v1/admin/rulesets/reload"


def test_reload_disabled_without_key(ruleset_dir):
    settings = ServerSettings(ruleset_dir=str(ruleset_dir))
    with TestClient(create_app(settings)) as c:
        resp = c.post(RELOAD, headers={"X-Admin-Key": "anything"})
    assert resp.status_code == 403


def test_reload_missing_header(client):
    assert client.post(RELOAD).status_code == 401


def test_reload_wrong_key(client):
    assert client.post(RELOAD, headers={"X-Admin-Key": "wrong"}).status_code == 403


def test_reload_picks_up_new_ruleset(client, ruleset_dir):
    doc = make_doc()
    doc["meta"]["id"] = "second_species"
    (ruleset_dir / "second_species.yaml").write_text(yaml.safe_dump(doc), encoding="utf-8")

    resp = client.post(RELOAD, headers={"X-Admin-Key": ADMIN_KEY})
    assert resp.status_code == 200
    assert resp.json() == {"rulesets": 2, "ids": [BEE, "second_species"]}
    assert client.get("/health").json()["rulesets"] == 2


def test_defective_reload_keeps_serving(client, ruleset_dir):
    (ruleset_dir / "broken.yaml").write_text("meta: {id: broken}\n", encoding="utf-8")

    resp = client.post(RELOAD, headers={"X-Admin-Key": ADMIN_KEY})
    assert resp.status_code == 422
    body = resp.json()
    assert body["detail"] == "Ruleset configuration defect"
    assert "missing required section 'scoring'" in body["error"]

    resp = client.post(f"/api/v1/rulesets/{BEE}/evaluate", json={"answers": IN_ZONE})
    assert resp.status_code == 200
    assert client.get("/health").json()["rulesets"] == 1


def test_evaluate_huge_number_answer(client):
    """A number too large for a float degrades like any unusable answer."""
    answers = {
        "federal_nexus": "Yes",
        "hpz_overlap": "Yes",
        "habitat_present": "Yes",
        "forage_unavailable": "Yes",
        "forage_acres": 10**400,
    }
    resp = client.post(f"/api/v1/rulesets/{BEE}/evaluate", json={"answers": answers})
    assert resp.status_code == 200
    body = resp.json()
    assert body["riskScore"] == 20
    assert body["unknowns"] == 1
