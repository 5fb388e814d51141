# contractor_dashboard/connectors/catalog_connector.py
import requests
import logging

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000  # Fixed step used by the upstream feed


class CatalogError(Exception):
    """Base class for failures while fetching a catalog page."""


class NetworkError(CatalogError):
    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class DecodeError(CatalogError):
    pass


class RawPage:
    """A decoded page body, still holding the upstream records as dicts."""

    def __init__(self, offset, total_count, count, records):
        self.offset = offset
        self.total_count = total_count
        self.count = count
        self.records = records

    def __repr__(self):
        return f"RawPage(offset={self.offset}, count={self.count}, total_count={self.total_count})"


class CatalogConnector:
    page_size = PAGE_SIZE

    def __init__(self, api_key, base_url, timeout=None):
        if not api_key:
            logger.error("Catalog API key is not provided.")
            raise ValueError("Catalog API key is required.")
        if not base_url:
            logger.error("Catalog base URL is not provided.")
            raise ValueError("Catalog base URL is required.")
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def fetch_page(self, offset):
        """
        Fetches one page of the product feed starting at `offset`.
        :param offset: Non-negative number of records already requested.
        :return: A RawPage.
        :raises NetworkError: On a non-2xx status or a transport failure.
        :raises DecodeError: When the body is not a valid page.
        """
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise ValueError(f"offset must be a non-negative integer, got {offset!r}")

        params = {"api_key": self.api_key, "offset": offset}
        logger.info(f"Fetching catalog page at offset {offset}.")
        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Transport error fetching catalog page at offset {offset}: {e}")
            raise NetworkError(f"Could not reach the catalog API: {e}") from e

        if not response.ok:
            logger.error(f"Catalog API returned HTTP {response.status_code} for offset {offset}.")
            raise NetworkError(f"Catalog API returned HTTP {response.status_code}", status=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Catalog page at offset {offset} is not valid JSON: {e}")
            raise DecodeError("Catalog response is not valid JSON") from e

        try:
            page = self._decode_body(data, offset)
        except DecodeError as e:
            logger.error(f"Malformed catalog page at offset {offset}: {e}")
            raise
        logger.info(f"Fetched {page.count} of {page.total_count} products at offset {offset}.")
        return page

    @staticmethod
    def _decode_body(data, offset):
        if not isinstance(data, dict):
            raise DecodeError("Catalog response is not a JSON object")

        total_count = data.get("total_count")
        count = data.get("count")
        records = data.get("art_cat_m")

        for field, value in (("total_count", total_count), ("count", count)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise DecodeError(f"Catalog response has an invalid '{field}': {value!r}")
        if not isinstance(records, list):
            raise DecodeError("Catalog response is missing the 'art_cat_m' list")
        if len(records) != count:
            raise DecodeError(f"Catalog response declares {count} products but contains {len(records)}")

        return RawPage(offset=offset, total_count=total_count, count=count, records=records)
