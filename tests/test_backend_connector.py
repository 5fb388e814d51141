import pytest
import requests

import connectors.backend_connector as backend_mod
from connectors.backend_connector import BackendConnector, build_filters

from conftest import DummyResponse


@pytest.fixture
def connector():
    return BackendConnector(api_key="anon-key", base_url="https://demo.backend.example/")


def test_requires_api_key():
    with pytest.raises(ValueError):
        BackendConnector(api_key=None, base_url="https://demo.backend.example")


def test_build_filters():
    assert build_filters({"status": "active", "id": [1, 2], "client_id": None}) == {
        "status": "eq.active",
        "id": "in.(1,2)",
        "client_id": "is.null",
    }


def test_select_rows_pages_until_short_page(monkeypatch, connector):
    calls = []

    def fake_get(url, headers=None, params=None):
        calls.append(params["offset"])
        size = 1000 if params["offset"] == 0 else 3
        return DummyResponse(payload=[{"id": params["offset"] + i} for i in range(size)])

    monkeypatch.setattr(backend_mod.requests, "get", fake_get)

    rows = connector.select_rows("projects", filters={"status": "active"}, order="created_at.desc")

    assert calls == [0, 1000]
    assert len(rows) == 1003


def test_select_rows_sends_auth_headers_and_filters(monkeypatch, connector):
    seen = {}

    def fake_get(url, headers=None, params=None):
        seen.update(url=url, headers=headers, params=params)
        return DummyResponse(payload=[])

    monkeypatch.setattr(backend_mod.requests, "get", fake_get)
    connector.select_rows("projects", filters={"status": "active"})

    assert seen["url"] == "https://demo.backend.example/rest/v1/projects"
    assert seen["headers"]["apikey"] == "anon-key"
    assert seen["headers"]["Authorization"] == "Bearer anon-key"
    assert seen["params"]["status"] == "eq.active"


def test_dataframe_is_empty_on_failure(monkeypatch, connector):
    monkeypatch.setattr(
        backend_mod.requests, "get",
        lambda url, headers=None, params=None: DummyResponse(status_code=500, text="boom"),
    )
    assert connector.get_table_as_dataframe("projects").empty


def test_count_rows_reads_content_range(monkeypatch, connector):
    monkeypatch.setattr(
        backend_mod.requests, "get",
        lambda url, headers=None, params=None: DummyResponse(payload=[{"id": 1}], headers={"Content-Range": "0-0/12"}),
    )
    assert connector.count_rows("projects", {"status": "active"}) == 12


def test_update_row_returns_none_on_failure(monkeypatch, connector):
    monkeypatch.setattr(
        backend_mod.requests, "patch",
        lambda url, headers=None, params=None, json=None: DummyResponse(status_code=400, text="bad"),
    )
    assert connector.update_row("projects", "p-1", {"progress": 10}) is None


def test_update_row_targets_single_id(monkeypatch, connector):
    seen = {}

    def fake_patch(url, headers=None, params=None, json=None):
        seen.update(params=params, json=json, prefer=headers.get("Prefer"))
        return DummyResponse(payload=[{"id": "p-1", "progress": 10}])

    monkeypatch.setattr(backend_mod.requests, "patch", fake_patch)
    assert connector.update_row("projects", "p-1", {"progress": 10}) == [{"id": "p-1", "progress": 10}]
    assert seen == {"params": {"id": "eq.p-1"}, "json": {"progress": 10}, "prefer": "return=representation"}


def test_delete_rows_batches_and_stops_on_failure(monkeypatch, connector):
    calls = []

    def fake_delete(url, headers=None, params=None):
        calls.append(params["id"])
        if len(calls) == 2:
            raise requests.exceptions.ConnectionError("gone")
        return DummyResponse(status_code=204)

    monkeypatch.setattr(backend_mod.requests, "delete", fake_delete)

    assert connector.delete_rows("projects", list(range(450))) is False
    assert len(calls) == 2
    assert calls[0].startswith("in.(0,1,")


def test_delete_nothing_is_a_success(connector):
    assert connector.delete_rows("projects", []) is True


def test_get_row_filters_by_id(monkeypatch, connector):
    seen = {}

    def fake_get(url, headers=None, params=None):
        seen.update(params)
        return DummyResponse(payload=[{"id": "c-1", "name": "Ana"}])

    monkeypatch.setattr(backend_mod.requests, "get", fake_get)

    assert connector.get_row("clients", "c-1") == {"id": "c-1", "name": "Ana"}
    assert seen["id"] == "eq.c-1"


def test_get_row_missing_returns_none(monkeypatch, connector):
    monkeypatch.setattr(
        backend_mod.requests, "get",
        lambda url, headers=None, params=None: DummyResponse(payload=[]),
    )
    assert connector.get_row("clients", "nope") is None
