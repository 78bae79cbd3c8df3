import importlib
import json
import logging

import pytest

from trailwalk import config
from trailwalk.errors import WalkwayNotFoundError
from trailwalk.models import WalkwayDetail, WalkwayHistoryResult, WalkwayPage, WalkwaySummary

# the package re-exports main(), so fetch the module itself
cli = importlib.import_module("trailwalk.main")


class StubClient:
    def __init__(self):
        self.calls = []

    def search_walkways(self, params):
        self.calls.append(("search", params))
        return WalkwayPage(
            walkways=[WalkwaySummary(walkway_id=3, name="Lake", distance=2.1, rating=4.25)],
            has_next=True,
        )

    def get_walkway_detail(self, walkway_id):
        if walkway_id == 404:
            raise WalkwayNotFoundError("Walkway 404 detail: missing (status 404)", 404)
        return WalkwayDetail(
            walkway_id=walkway_id, name="Lake", time=3725, hashtags=["quiet"], liked=True
        )

    def create_walkway_history(self, walkway_id, *, time, distance):
        self.calls.append(("history", walkway_id, time, distance))
        return WalkwayHistoryResult(walkway_history_id=12, can_review=True)


@pytest.fixture
def stub_client(monkeypatch):
    client = StubClient()
    monkeypatch.setattr(cli, "get_default_client", lambda: client)
    return client


@pytest.fixture
def fixes_csv(tmp_path):
    path = tmp_path / "walk.csv"
    path.write_text("lat,lng\n37.0,127.0\n37.008993,127.0\n37.017986,127.0\n")
    return path


def test_distance_json(fixes_csv, capsys):
    assert cli.main(["distance", "--fixes", str(fixes_csv), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["fixes"] == 3
    assert payload["steps"] == 2
    assert payload["distance_m"] == 2000.0


def test_distance_json_reports_effective_policy(fixes_csv, capsys, monkeypatch):
    monkeypatch.setattr(config, "NOISE_GATE_MODE", "and")
    monkeypatch.setattr(config, "DISTANCE_ROUNDING", "centimeters")
    assert cli.main(["distance", "--fixes", str(fixes_csv), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["gate"] == "and"
    assert payload["rounding"] == "centimeters"


def test_distance_text_with_gate(fixes_csv, capsys):
    assert cli.main(["distance", "--fixes", str(fixes_csv), "--gate", "and"]) == 0
    out = capsys.readouterr().out
    assert "distance=2000.00 m (2.000 km)" in out


def test_distance_undecodable_csv_returns_error(tmp_path, caplog):
    path = tmp_path / "walk.csv"
    path.write_bytes(b"lat,lng\n37.0,127.0\n\xff\xfe,127.0\n")
    with caplog.at_level(logging.ERROR):
        assert cli.main(["distance", "--fixes", str(path)]) == 1
    assert "unreadable CSV" in caplog.text


def test_distance_missing_file_returns_error(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        assert cli.main(["distance", "--fixes", str(tmp_path / "none.csv")]) == 1
    assert "Failed to load fixes" in caplog.text


def test_search_prints_results(stub_client, capsys):
    assert cli.main(["search", "--lat", "37.5", "--lng", "127.0", "--size", "5"]) == 0
    out = capsys.readouterr().out
    assert "3\tLake" in out
    assert "rating=4.2" in out
    assert "--last-id 3" in out
    params = stub_client.calls[0][1]
    assert (params.latitude, params.longitude, params.size) == (37.5, 127.0, 5)
    assert params.last_id is None

    hint = out.split("--last-id ")[1].split(")")[0]
    follow_up = ["search", "--lat", "37.5", "--lng", "127.0", "--last-id", hint]
    assert cli.main(follow_up) == 0
    assert stub_client.calls[1][1].last_id == 3


def test_detail_and_not_found(stub_client, capsys):
    assert cli.main(["detail", "8"]) == 0
    out = capsys.readouterr().out
    assert "8: Lake" in out
    assert "time=1:02:05" in out
    assert "#quiet" in out
    assert cli.main(["detail", "404"]) == 1


def test_submit_history(stub_client, fixes_csv, capsys):
    code = cli.main(
        ["submit-history", "9", "--fixes", str(fixes_csv), "--time", "1500", "--rounding", "meters"]
    )
    assert code == 0
    assert stub_client.calls == [("history", 9, 1500, 2000)]
    assert "history=12" in capsys.readouterr().out
