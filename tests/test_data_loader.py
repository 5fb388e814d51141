import pytest
import requests

import connectors.catalog_connector as catalog_mod
import utils.data_loader as loader_mod
from services.catalog_sync import CatalogSync

from conftest import DummyResponse, make_records


@pytest.fixture
def catalog_config(monkeypatch):
    config = {
        "catalog": {"api_key": "k", "base_url": "https://catalog.example", "timeout": 5, "page_size": 250},
        "backend": {"api_key": "anon-key", "url": "https://demo.backend.example", "clients_table": "clientes"},
    }
    monkeypatch.setattr(loader_mod, "APP_CONFIG", config)
    loader_mod.get_catalog_connector.clear()
    loader_mod.load_client.clear()
    yield config
    loader_mod.get_catalog_connector.clear()
    loader_mod.load_client.clear()


def test_catalog_step_ignores_configured_page_size(catalog_config):
    connector = loader_mod.get_catalog_connector()

    assert connector.page_size == 1000
    assert connector.timeout == 5
    assert CatalogSync(connector).page_size == 1000


def test_loaded_pages_do_not_overlap(monkeypatch, catalog_config):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append(params["offset"])
        records = make_records(params["offset"], 1000)
        return DummyResponse(payload={"total_count": 2500, "count": 1000, "art_cat_m": records})

    monkeypatch.setattr(catalog_mod.requests, "get", fake_get)
    sync = CatalogSync(loader_mod.get_catalog_connector())

    assert sync.reload()
    assert sync.load_more()

    skus = [product.sku for product in sync.items]
    assert calls == [0, 1000]
    assert len(skus) == 2000
    assert len(set(skus)) == len(skus)
    assert sync.offset == 2000


class DummyBackend:
    def __init__(self, row=None, error=None):
        self.row = row
        self.error = error
        self.calls = []

    def get_row(self, table, row_id):
        self.calls.append((table, row_id))
        if self.error:
            raise self.error
        return self.row


def test_load_client_reads_single_row(monkeypatch, catalog_config):
    backend = DummyBackend(row={"id": "c-1", "name": "Ana"})
    monkeypatch.setattr(loader_mod, "get_backend_connector", lambda: backend)

    assert loader_mod.load_client("c-1") == {"id": "c-1", "name": "Ana"}
    assert backend.calls == [("clientes", "c-1")]


def test_load_client_without_id_or_on_failure(monkeypatch, catalog_config):
    backend = DummyBackend(error=requests.exceptions.ConnectionError("down"))
    monkeypatch.setattr(loader_mod, "get_backend_connector", lambda: backend)

    assert loader_mod.load_client(None) is None
    assert backend.calls == []
    assert loader_mod.load_client("c-2") is None
