"""
Ad product sanitization and storage.

Products are persisted field by field as meta of the product id, under the
``_ad_`` prefix. The ids of every ad product are tracked in a single option so
ad products can be told apart from any other product.
"""

import math
import re
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Iterable, List, Optional, Union

from ads_manager.errors import NotFoundError, ValidationError
from ads_manager.marketplace.models import AdProduct, PayableEvent, Placement
from ads_manager.utils.logging import setup_logger
from ads_manager.utils.options import OptionStore

logger = setup_logger(__name__)

PRODUCTS_OPTION_NAME = "_newspack_ads_products"
PRODUCT_META_PREFIX = "_ad_"
PRODUCT_NAME_META = "_name"

PRODUCT_FIELDS = ("placements", "price", "payable_event", "required_sizes")
DEFAULT_PAYABLE_EVENT = PayableEvent.CPD.value

_TAGS = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"[\r\n\t ]+")
_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")

def sanitize_text_field(value: Any) -> str:
    """Strip tags and control whitespace from a single line of text."""
    text = _TAGS.sub("", str(value))
    return _WHITESPACE.sub(" ", text).strip()

def is_numeric(value: Any) -> bool:
    """Whether a value is a number or a numeric string."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    return isinstance(value, str) and bool(_NUMERIC.match(value))

def sanitize_placements(placements: Optional[Iterable[Any]]) -> List[str]:
    """
    Sanitize placements.

    Args:
        placements: Placement keys

    Returns:
        List[str]: Sanitized placement keys
    """
    return [sanitize_text_field(placement) for placement in placements or []]

def sanitize_sizes(sizes: Optional[Iterable[Any]]) -> List[str]:
    """
    Sanitize sizes, dropping anything that is not two numbers joined by "x".

    Args:
        sizes: Size strings

    Returns:
        List[str]: Valid size strings
    """
    sanitized = []
    for size in sizes or []:
        size = sanitize_text_field(size)
        dimensions = size.split("x")
        if len(dimensions) != 2 or not all(is_numeric(dimension) for dimension in dimensions):
            continue
        sanitized.append(size)
    return sanitized

def sanitize_payable_event(payable_event: Any) -> str:
    """Return the payable event if allowed, otherwise an empty string."""
    allowed = {event.value for event in PayableEvent}
    return payable_event if payable_event in allowed else ""

def sanitize_price(price: Union[str, int, float, None]) -> float:
    """
    Sanitize a price.

    Args:
        price: Price as entered

    Returns:
        float: Price rounded to cents, 0 for empty or non-numeric input
    """
    if not price or not is_numeric(price):
        return 0
    value = Decimal(str(price).strip())
    with localcontext() as context:
        # Room for every integer digit plus the cents
        context.prec = max(context.prec, value.adjusted() + 3)
        value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    result = float(value)
    if not math.isfinite(result):
        return 0
    return max(result, 0)

SANITIZERS = {
    "placements": sanitize_placements,
    "price": sanitize_price,
    "payable_event": sanitize_payable_event,
    "required_sizes": sanitize_sizes,
}

def sanitize_product_args(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sanitize the arguments of an ad product.

    Raises:
        ValidationError: If a required field is missing
    """
    args = {"payable_event": DEFAULT_PAYABLE_EVENT, **args}
    missing = [field for field in PRODUCT_FIELDS if args.get(field) is None]
    if missing:
        raise ValidationError(
            f"Missing required product fields: {', '.join(missing)}",
            operation="sanitize_product",
            details={"missing_fields": missing}
        )
    return {field: SANITIZERS[field](args[field]) for field in PRODUCT_FIELDS}

class ProductStore:
    """Ad product persistence on top of the option store."""

    def __init__(
        self,
        store: OptionStore,
        placements: Optional[Dict[str, Placement]] = None,
        ad_units: Optional[List[Dict[str, Any]]] = None
    ):
        """
        Initialize the product store.

        Args:
            store: Option store
            placements: Placement catalog keyed by placement key
            ad_units: GAM ad units, each with an ``id`` and a list of ``sizes``
        """
        self.store = store
        self.placements = placements or {}
        self.ad_units = ad_units or []

    def _product_ids(self) -> List[int]:
        ids = self.store.get_option(PRODUCTS_OPTION_NAME, [])
        if not isinstance(ids, list):
            return []
        return [int(product_id) for product_id in ids]

    def set_product_meta(self, product_id: int, key: str, value: Any) -> None:
        self.store.update_meta(product_id, PRODUCT_META_PREFIX + key, value)

    def get_product_meta(self, product_id: int, key: str) -> Any:
        return self.store.get_meta(product_id, PRODUCT_META_PREFIX + key)

    def is_ad_product(self, product_id: Optional[int]) -> bool:
        if not product_id:
            return False
        return int(product_id) in self._product_ids()

    def set_ad_product(self, product_id: int) -> bool:
        """Register a product id in the ad product list."""
        ids = self._product_ids()
        if product_id not in ids:
            ids.append(product_id)
        return self.store.update_option(PRODUCTS_OPTION_NAME, ids)

    def get_product(self, product_id: int) -> Optional[AdProduct]:
        """Get an ad product, or None if it does not exist."""
        if not self.is_ad_product(product_id):
            return None
        meta = self.store.get_all_meta(int(product_id))
        data = {
            field: meta[PRODUCT_META_PREFIX + field]
            for field in PRODUCT_FIELDS
            if meta.get(PRODUCT_META_PREFIX + field) is not None
        }
        return AdProduct(id=int(product_id), name=meta.get(PRODUCT_NAME_META) or "", **data)

    def get_products(self) -> List[AdProduct]:
        products = [self.get_product(product_id) for product_id in self._product_ids()]
        return [product for product in products if product is not None]

    def update_product(self, product_id: Optional[int], args: Dict[str, Any]) -> AdProduct:
        """
        Create or update an ad product from raw arguments.

        Args:
            product_id: Id of the product to update, None to create one
            args: Unsanitized product fields

        Returns:
            AdProduct: The stored product

        Raises:
            NotFoundError: If product_id is not an ad product
            ValidationError: If a required field is missing
        """
        if product_id is not None and not self.is_ad_product(product_id):
            raise NotFoundError("Ad product not found.", operation="update_product", details={"id": product_id})

        sanitized = sanitize_product_args(args)
        if product_id is None:
            product_id = self.store.next_id("product")
        product_id = int(product_id)

        for key, value in sanitized.items():
            self.set_product_meta(product_id, key, value)
        self.set_ad_product(product_id)
        self.store.update_meta(product_id, PRODUCT_NAME_META, f"Ad - {self.get_product_title(sanitized)}")
        logger.info(f"Saved ad product {product_id}")
        return self.get_product(product_id)

    def delete_product(self, product_id: int) -> None:
        """
        Delete an ad product.

        Raises:
            NotFoundError: If the product does not exist
        """
        if not self.is_ad_product(product_id):
            raise NotFoundError("Ad product not found.", operation="delete_product", details={"id": product_id})
        product_id = int(product_id)
        self.store.delete_meta(product_id)
        self.store.update_option(
            PRODUCTS_OPTION_NAME,
            [existing for existing in self._product_ids() if existing != product_id]
        )
        logger.info(f"Deleted ad product {product_id}")

    def get_product_placements(self, product: Union[AdProduct, Dict[str, Any]]) -> List[Placement]:
        """Resolve a product's placement keys through the placement catalog."""
        keys = product.placements if isinstance(product, AdProduct) else product.get("placements", [])
        return [self.placements[key] for key in keys if key in self.placements]

    def get_product_title(self, product: Union[AdProduct, Dict[str, Any]]) -> str:
        return ", ".join(placement.name for placement in self.get_product_placements(product))

    def get_product_sizes(self, product: Union[AdProduct, Dict[str, Any]]) -> List[str]:
        """Sizes of the ad units behind a product's placements, de-duplicated."""
        ad_units = {str(ad_unit["id"]): ad_unit for ad_unit in self.ad_units}
        sizes: List[str] = []
        for placement in self.get_product_placements(product):
            ad_unit = ad_units.get(str(placement.ad_unit))
            if not ad_unit:
                continue
            sizes.extend("x".join(str(dimension) for dimension in size) for size in ad_unit.get("sizes", []))
        return list(dict.fromkeys(sizes))
