# contractor_dashboard/services/catalog_sync.py
"""
Incremental loading of the paged product feed.

A CatalogSync owns one growing collection of products for a single catalog
view. Pages are fetched on explicit user action ("load more" / "refresh"),
appended in arrival order, and searched locally without re-fetching.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from connectors.catalog_connector import PAGE_SIZE, CatalogError, NetworkError, DecodeError
from services.catalog_models import FieldConfig, Product

logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class CatalogState:
    items: Tuple[Product, ...]
    loading: bool
    error: Optional[str]
    has_more: bool
    total_count: int
    offset: int
    status: SyncStatus
    query: str

    @property
    def complete(self):
        return self.status == SyncStatus.READY and not self.has_more


def filter_products(items, query, searchable):
    """
    Returns the products whose searchable fields contain `query`, ignoring case.
    An empty query returns every product. The input is never modified.
    """
    if not query:
        return list(items)
    needle = query.lower()
    matches = []
    for product in items:
        for field_name in searchable:
            value = getattr(product, field_name, None)
            if value and needle in str(value).lower():
                matches.append(product)
                break
    return matches


def describe_error(error):
    if isinstance(error, NetworkError):
        if error.status is not None:
            return f"Error al cargar los productos (HTTP {error.status})."
        return "No se pudo conectar con el catálogo. Intenta nuevamente."
    if isinstance(error, DecodeError):
        return "El catálogo devolvió una respuesta inválida."
    return f"Error al cargar los productos: {error}"


class CatalogSync:
    def __init__(self, connector, field_config=None):
        self.connector = connector
        self.field_config = field_config or FieldConfig.standard()
        self.page_size = getattr(connector, "page_size", PAGE_SIZE)
        self._listeners = []
        self._active = True
        self._query = ""
        self.reset()

    # --- STATE ---
    @property
    def items(self):
        return tuple(self._items)

    @property
    def loading(self):
        return self._loading

    @property
    def error(self):
        return self._error

    @property
    def has_more(self):
        return self._has_more

    @property
    def total_count(self):
        return self._total_count

    @property
    def offset(self):
        return self._offset

    @property
    def status(self):
        return self._status

    @property
    def query(self):
        return self._query

    @property
    def active(self):
        return self._active

    @property
    def complete(self):
        return self._status == SyncStatus.READY and not self._has_more

    @property
    def filtered_items(self):
        return filter_products(self._items, self._query, self.field_config.searchable)

    def snapshot(self):
        return CatalogState(
            items=tuple(self._items),
            loading=self._loading,
            error=self._error,
            has_more=self._has_more,
            total_count=self._total_count,
            offset=self._offset,
            status=self._status,
            query=self._query,
        )

    # --- SUBSCRIPTIONS ---
    def subscribe(self, listener):
        """Registers `listener(state)` for every state change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        if not self._listeners:
            return
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Catalog state listener raised an error.")

    # --- ACTIONS ---
    def reset(self):
        self._items = []
        self._offset = 0
        self._has_more = True
        self._total_count = 0
        self._error = None
        self._loading = False
        self._status = SyncStatus.IDLE
        self._failed_fetch = None
        self._notify()

    def append(self, page):
        self._append(page)
        self._notify()

    def _append(self, page):
        # Duplicated SKUs across overlapping pages are kept as received.
        self._items.extend(page.items)
        self._has_more = page.offset + page.count < page.total_count
        self._total_count = page.total_count

    def set_query(self, query):
        query = query or ""
        if query == self._query:
            return
        self._query = query
        self._notify()

    def load_more(self):
        """
        Fetches the page at the current cursor. Returns True when a page was added.
        After a failure, repeats the failed request instead (a failed reload is retried as a reload).
        """
        if self._loading:
            logger.warning("A catalog page is already loading; ignoring 'load more'.")
            return False
        if self.complete:
            logger.info("Catalog is already complete; nothing more to load.")
            return False
        if self._failed_fetch is not None:
            offset, full_reload = self._failed_fetch
            return self._fetch(offset, full_reload=full_reload)
        return self._fetch(self._offset, full_reload=False)

    def reload(self):
        """Reloads the catalog from offset 0, replacing the collection only once the first page arrives."""
        if self._loading:
            logger.warning("A catalog page is already loading; ignoring reload.")
            return False
        return self._fetch(0, full_reload=True)

    def close(self):
        """Marks the session as abandoned; results that arrive afterwards are discarded."""
        self._active = False
        self._listeners.clear()

    def _fetch(self, offset, full_reload):
        self._loading = True
        self._error = None
        self._status = SyncStatus.LOADING
        self._notify()

        try:
            raw_page = self.connector.fetch_page(offset)
            page = self.field_config.decode_page(raw_page)
        except CatalogError as e:
            self._loading = False
            if not self._active:
                logger.debug(f"Discarding failed catalog fetch at offset {offset} for a closed session.")
                return False
            self._error = describe_error(e)
            self._status = SyncStatus.ERROR
            self._failed_fetch = (offset, full_reload)
            logger.error(f"Catalog fetch at offset {offset} failed: {e}")
            self._notify()
            return False
        except Exception:
            self._loading = False
            self._status = SyncStatus.ERROR
            self._error = "Error inesperado al cargar los productos."
            self._notify()
            raise

        self._loading = False
        if not self._active:
            logger.debug(f"Discarding catalog page at offset {offset} for a closed session.")
            return False

        if full_reload:
            self._items = []
            self._offset = 0
        self._append(page)
        self._offset = offset + self.page_size
        self._failed_fetch = None
        self._status = SyncStatus.READY
        logger.info(
            f"Catalog now holds {len(self._items)} of {self._total_count} products "
            f"(next offset {self._offset}, has_more={self._has_more})."
        )
        self._notify()
        return True
