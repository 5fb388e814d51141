# contractor_dashboard/services/catalog_models.py
import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from connectors.catalog_connector import DecodeError

logger = logging.getLogger(__name__)

SEARCHABLE_FIELDS = ("name", "sku", "category", "supplier_sku")


def split_list(value, separator):
    """Splits a delimited string into trimmed, non-empty parts, keeping their order."""
    if value is None:
        return ()
    return tuple(part.strip() for part in str(value).split(separator) if part.strip())


def parse_number(value):
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(',', '.')
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        logger.debug(f"Ignoring non-numeric value {value!r}")
        return None


def parse_int(value):
    number = parse_number(value)
    return int(number) if number is not None else None


def _text(value):
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Product:
    sku: str
    name: str
    category: str
    image_urls: Tuple[str, ...] = ()
    supplier_sku: Optional[str] = None
    attributes: Tuple[str, ...] = ()
    list_price: Optional[float] = None
    stock: Optional[int] = None

    @property
    def main_image(self):
        return self.image_urls[0] if self.image_urls else None


@dataclass(frozen=True)
class Page:
    offset: int
    total_count: int
    count: int
    items: Tuple[Product, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FieldConfig:
    """
    Describes one catalog view: which product fields the search box looks at
    and which optional upstream columns are parsed into each Product.
    """
    searchable: Tuple[str, ...] = ("name", "sku", "category")
    parse_supplier_sku: bool = False
    parse_attributes: bool = False
    parse_list_price: bool = False
    parse_stock: bool = False
    image_urls_key: str = "urls_foto"
    supplier_sku_key: str = "sku_proveedor"
    attributes_key: str = "atributos"
    list_price_key: str = "precio_lista"
    stock_key: str = "stock"

    def __post_init__(self):
        unknown = [name for name in self.searchable if name not in SEARCHABLE_FIELDS]
        if unknown:
            raise ValueError(f"Unknown searchable field(s): {unknown}")

    @classmethod
    def standard(cls):
        return cls()

    @classmethod
    def supplier(cls):
        return cls(
            searchable=("name", "sku", "supplier_sku"),
            parse_supplier_sku=True,
            parse_attributes=True,
            parse_list_price=True,
            parse_stock=True,
        )

    def with_searchable(self, *fields):
        return replace(self, searchable=tuple(fields))

    def with_optional(self, **flags):
        # e.g. with_optional(parse_stock=True, stock_key="existencia")
        return replace(self, **flags)

    def decode_product(self, record):
        if not isinstance(record, dict):
            raise DecodeError(f"Catalog record is not an object: {record!r}")
        if record.get("sku") in (None, ""):
            raise DecodeError(f"Catalog record has no 'sku': {record!r}")

        return Product(
            sku=str(record["sku"]),
            name=_text(record.get("name")),
            category=_text(record.get("category")),
            image_urls=split_list(record.get(self.image_urls_key), ','),
            supplier_sku=(_text(record.get(self.supplier_sku_key)) or None) if self.parse_supplier_sku else None,
            attributes=split_list(record.get(self.attributes_key), '|') if self.parse_attributes else (),
            list_price=parse_number(record.get(self.list_price_key)) if self.parse_list_price else None,
            stock=parse_int(record.get(self.stock_key)) if self.parse_stock else None,
        )

    def decode_page(self, raw_page):
        items = tuple(self.decode_product(record) for record in raw_page.records)
        return Page(
            offset=raw_page.offset,
            total_count=raw_page.total_count,
            count=raw_page.count,
            items=items,
        )
