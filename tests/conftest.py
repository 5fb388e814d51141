"""Shared test doubles for catalog and backend tests."""

import requests

from connectors.catalog_connector import RawPage


def make_records(start, count, prefix="SKU"):
    return [
        {
            "sku": f"{prefix}-{i}",
            "name": f"Producto {i}",
            "category": "Herramientas" if i % 2 else "Pinturas",
            "urls_foto": f"https://img.example/{i}-a.jpg, https://img.example/{i}-b.jpg",
        }
        for i in range(start, start + count)
    ]


class DummyResponse:
    def __init__(self, status_code=200, payload=None, headers=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.exceptions.HTTPError(f"HTTP {self.status_code}", response=self)


class ScriptedConnector:
    """Serves RawPages from a fixed feed; queued exceptions are raised first."""

    def __init__(self, total_count, page_size=1000, records=None):
        self.total_count = total_count
        self.page_size = page_size
        self.records = records if records is not None else make_records(0, total_count)
        self.failures = []
        self.calls = []

    def fetch_page(self, offset):
        self.calls.append(offset)
        if self.failures:
            raise self.failures.pop(0)
        chunk = self.records[offset:offset + self.page_size]
        return RawPage(offset=offset, total_count=self.total_count, count=len(chunk), records=chunk)
