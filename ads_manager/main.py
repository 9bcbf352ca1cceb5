"""
Main FastAPI application module.

This module sets up the FastAPI application exposing the bidder registry,
the ad settings and the ad products.
"""

from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ads_manager.config import server_config
from ads_manager.bidding.registry import BidderRegistry, default_registry
from ads_manager.errors import NotFoundError, ValidationError
from ads_manager.marketplace.product import ProductStore
from ads_manager.settings import AdsSettings
from ads_manager.utils.logging import setup_logger
from ads_manager.utils.options import OptionStore

logger = setup_logger(__name__)

app = FastAPI(
    title="Ads Manager",
    description="Ad products, ad settings and header bidding partners",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=server_config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

class ProductArgs(BaseModel):
    """Ad product request body. Values are sanitized, not rejected."""
    placements: Optional[List[Any]] = None
    price: Optional[Any] = None
    payable_event: Optional[Any] = None
    required_sizes: Optional[List[Any]] = None

@lru_cache
def get_store() -> OptionStore:
    return OptionStore()

def get_registry(store: OptionStore = Depends(get_store)) -> BidderRegistry:
    return default_registry(store)

def get_settings(store: OptionStore = Depends(get_store)) -> AdsSettings:
    return AdsSettings(store)

def get_products(store: OptionStore = Depends(get_store)) -> ProductStore:
    return ProductStore(store)

def _http_error(error: Exception) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=error.to_dict())
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=error.to_dict())
    logger.error(f"Unexpected error: {error}")
    return HTTPException(status_code=500, detail=str(error))

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}

@app.get("/bidders")
async def list_bidders(registry: BidderRegistry = Depends(get_registry)):
    """Registered bidders keyed by bidder key."""
    return registry.to_dict()

@app.get("/bidders/{key}")
async def get_bidder(key: str, registry: BidderRegistry = Depends(get_registry)):
    try:
        return registry.get_bidder_data(key)
    except NotFoundError as e:
        raise _http_error(e)

@app.post("/bidders/{key}")
async def update_bidder(
    key: str,
    values: Dict[str, Any],
    registry: BidderRegistry = Depends(get_registry)
):
    try:
        return registry.update_bidder_data(key, values)
    except (NotFoundError, ValidationError) as e:
        raise _http_error(e)

@app.get("/settings")
async def list_settings(settings: AdsSettings = Depends(get_settings)):
    return [setting.model_dump() for setting in settings.get_settings_list()]

@app.post("/settings/{section}")
async def update_settings_section(
    section: str,
    values: Dict[str, Any],
    settings: AdsSettings = Depends(get_settings)
):
    """Update a settings section, returning every setting."""
    try:
        updated = settings.update_section(section, values)
    except ValidationError as e:
        raise _http_error(e)
    return [setting.model_dump() for setting in updated]

@app.get("/products")
async def list_products(products: ProductStore = Depends(get_products)):
    return [product.model_dump() for product in products.get_products()]

@app.get("/products/{product_id}")
async def get_product(product_id: int, products: ProductStore = Depends(get_products)):
    product = products.get_product(product_id)
    if product is None:
        raise _http_error(NotFoundError("Ad product not found.", operation="get_product"))
    return product.model_dump()

@app.post("/products")
async def create_product(args: ProductArgs, products: ProductStore = Depends(get_products)):
    try:
        return products.update_product(None, args.model_dump(exclude_none=True)).model_dump()
    except ValidationError as e:
        raise _http_error(e)

@app.put("/products/{product_id}")
async def update_product(
    product_id: int,
    args: ProductArgs,
    products: ProductStore = Depends(get_products)
):
    try:
        return products.update_product(product_id, args.model_dump(exclude_none=True)).model_dump()
    except (NotFoundError, ValidationError) as e:
        raise _http_error(e)

@app.delete("/products/{product_id}")
async def delete_product(product_id: int, products: ProductStore = Depends(get_products)):
    try:
        products.delete_product(product_id)
    except NotFoundError as e:
        raise _http_error(e)
    return {"deleted": True, "id": product_id}
