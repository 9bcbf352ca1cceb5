"""
Header bidding models.

This module defines the records exchanged with the remote ad-server adapter
while provisioning a GAM order, and the bidder registry entries.
"""

from typing import List, Optional, Dict, Any
from enum import Enum
from pydantic import BaseModel, Field, field_validator

class CreateType(str, Enum):
    """Kinds of entity the adapter's create endpoint provisions."""
    ORDER = "order"
    LINE_ITEMS = "line_items"
    CREATIVES = "creatives"

class OrderConfig(BaseModel):
    """User supplied configuration of a header bidding order."""
    order_id: Optional[str] = None
    name: str = ""
    revenue_share: float = Field(default=0, ge=0, le=100, description="Percentage that goes to the bidder")
    bidders: List[str] = Field(default_factory=list, description="Bidder keys included in the order")

    model_config = {"validate_assignment": True}

    @field_validator("order_id", mode="before")
    @classmethod
    def coerce_order_id(cls, v):
        """GAM ids come back as integers from some endpoints."""
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("bidders")
    @classmethod
    def unique_bidders(cls, v):
        """Drop repeated bidder keys, keeping the first occurrence."""
        return list(dict.fromkeys(v))

    def to_payload(self) -> Dict[str, Any]:
        """Serialize the config the way the adapter expects it."""
        return {
            "order_name": self.name,
            "revenue_share": self.revenue_share,
            "bidders": self.bidders
        }

class OrderState(BaseModel):
    """Order state accumulated by the remote adapter."""
    order_id: Optional[str] = None
    order_name: Optional[str] = None
    line_item_ids: List[str] = Field(default_factory=list)
    lica_batch_count: int = Field(default=0, ge=0)
    revenue_share: Optional[float] = None
    bidders: Optional[List[str]] = None

    model_config = {"extra": "ignore"}

    @field_validator("order_id", mode="before")
    @classmethod
    def coerce_order_id(cls, v):
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("line_item_ids", mode="before")
    @classmethod
    def coerce_line_item_ids(cls, v):
        if v is None:
            return []
        return [str(item) for item in v]

    @field_validator("lica_batch_count", mode="before")
    @classmethod
    def coerce_batch_count(cls, v):
        return v or 0

class BidderSetting(BaseModel):
    """A configurable field of a bidder."""
    key: str
    type: str = "string"
    description: str = ""
    help: str = ""

class Bidder(BaseModel):
    """Header bidding partner registered in the bidder registry."""
    key: str
    name: str
    active_key: str = Field(..., description="Setting whose value marks the bidder as active")
    settings: List[BidderSetting] = Field(default_factory=list)

    @field_validator("settings")
    @classmethod
    def active_key_is_a_setting(cls, v, info):
        active_key = info.data.get("active_key")
        if active_key and v and active_key not in {setting.key for setting in v}:
            raise ValueError(f"Active key '{active_key}' is not one of the bidder settings")
        return v

    def setting_keys(self) -> List[str]:
        return [setting.key for setting in self.settings]
