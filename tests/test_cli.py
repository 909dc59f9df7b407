"""
Tests for the command-line interface.
"""

import json

import pytest

from relief_engine.cli import main


def write_json(path, data):
    path.write_text(json.dumps(data))
    return str(path)


def report_row(report_id, hours, lat, lon, **overrides):
    row = {
        "id": report_id,
        "title": "Warehouse fire on Dock Street",
        "description": "Large flames and black smoke coming from the old warehouse",
        "category": "fire",
        "severity": "high",
        "latitude": str(lat),
        "longitude": str(lon),
        "createdAt": f"2024-03-01T{10 + hours:02d}:00:00Z",
        "similarReportIds": [],
    }
    row.update(overrides)
    return row


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("RELIEF_ENABLE_EXTERNAL_SCORING", "RELIEF_MAX_POOL_SIZE", "RELIEF_DUPLICATE_THRESHOLD"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def reports_file(tmp_path):
    return write_json(tmp_path / "reports.json", [
        report_row("r1", 0, 34.0, -118.25),
        report_row("r2", 1, 34.001, -118.25),
        report_row("r3", 2, 34.0, -118.251, similarReportIds=["r1"]),
        report_row(
            "q1", 5, 40.0, -120.0,
            title="Tremor felt downtown",
            description="Shelves shook for a few seconds",
            category="earthquake", severity="low",
        ),
    ])


@pytest.fixture
def matching_files(tmp_path):
    requests = write_json(tmp_path / "requests.json", [
        {"id": "req-1", "resourceType": "water", "quantity": 100, "urgency": "critical",
         "latitude": "10.0", "longitude": "10.0"},
        {"id": "req-2", "resourceType": "food", "quantity": 20},
    ])
    offers = write_json(tmp_path / "offers.json", [
        {"id": "off-1", "resourceType": "water", "quantity": 150, "latitude": "10.03", "longitude": "10.03"},
        {"id": "off-2", "resourceType": "food", "quantity": 5},
    ])
    return requests, offers


def run(capsys, argv):
    code = main(argv)
    captured = capsys.readouterr()
    return code, captured.out, captured.err


class TestReportCommands:

    def test_similar(self, capsys, reports_file):
        code, out, _ = run(capsys, ["similar", "--reports", reports_file, "--report-id", "r1"])
        assert code == 0
        payload = json.loads(out)
        assert payload["target_report_id"] == "r1"
        assert [s["report_id"] for s in payload["similar_reports"]] == ["r2", "r3"]

    def test_duplicates(self, capsys, reports_file):
        code, out, _ = run(capsys, ["duplicates", "--reports", reports_file, "--report-id", "r3"])
        assert code == 0
        payload = json.loads(out)
        assert payload["is_duplicate"] is True
        assert payload["duplicate_of_id"] in {"r1", "r2"}
        assert {link["similar_report_id"] for link in payload["proposed_links"]} == {"r1", "r2"}
        # q1 keeps its (empty) link list, so it is left out
        assert payload["link_updates"] == {
            "r1": ["r3"],
            "r2": ["r3"],
            "r3": ["r1", "r2"],
        }

    def test_clusters(self, capsys, reports_file):
        code, out, _ = run(capsys, ["clusters", "--reports", reports_file])
        assert code == 0
        payload = json.loads(out)
        assert payload["total_clusters"] == 1
        assert payload["reports_analyzed"] == 4
        assert payload["clusters"][0]["member_ids"] == ["r1", "r2", "r3"]

    def test_clusters_limit(self, capsys, reports_file):
        code, out, _ = run(capsys, ["clusters", "--reports", reports_file, "--limit", "2"])
        assert code == 0
        payload = json.loads(out)
        assert payload["reports_analyzed"] == 2
        assert payload["total_clusters"] == 0


class TestMatchCommands:

    def test_match_request(self, capsys, matching_files):
        requests, offers = matching_files
        code, out, _ = run(capsys, [
            "match-request", "--requests", requests, "--offers", offers, "--request-id", "req-1",
        ])
        assert code == 0
        payload = json.loads(out)
        assert payload["request_id"] == "req-1"
        [match] = payload["matches"]
        assert match["offer_id"] == "off-1"
        assert match["score"] == 100
        assert match["scored_by"] == "fallback"

    def test_match_offer(self, capsys, matching_files):
        requests, offers = matching_files
        code, out, _ = run(capsys, [
            "match-offer", "--offers", offers, "--requests", requests, "--offer-id", "off-2",
        ])
        assert code == 0
        [match] = json.loads(out)["matches"]
        # 50 + floor(20 * 5 / 20) + 10 + 5 (medium)
        assert match["request_id"] == "req-2"
        assert match["score"] == 70


class TestErrors:

    def test_no_command(self, capsys):
        code, _, _ = run(capsys, [])
        assert code == 1

    def test_unknown_id(self, capsys, reports_file):
        code, out, err = run(capsys, ["similar", "--reports", reports_file, "--report-id", "missing"])
        assert code == 1
        assert out == ""
        assert "Report not found: missing" in err

    def test_missing_file(self, capsys, tmp_path):
        code, _, err = run(capsys, ["clusters", "--reports", str(tmp_path / "none.json")])
        assert code == 1
        assert "File not found" in err

    def test_invalid_snapshot(self, capsys, tmp_path):
        path = write_json(tmp_path / "bad.json", [{"id": "r1", "title": "no category"}])
        code, _, err = run(capsys, ["clusters", "--reports", path])
        assert code == 1
        assert "bad.json" in err

    def test_not_a_list(self, capsys, tmp_path):
        path = write_json(tmp_path / "obj.json", {"id": "r1"})
        code, _, err = run(capsys, ["clusters", "--reports", path])
        assert code == 1
        assert "expected a JSON array" in err
