"""
Ad product models.

An ad product is a purchasable bundle of ad placements, priced per payable
event and restricted to a set of creative sizes.
"""

from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field

class PayableEvent(str, Enum):
    """Events an ad product is charged by."""
    CPM = "cpm"
    CPC = "cpc"
    CPV = "cpv"
    CPD = "cpd"
    VIEWABLE_CPM = "viewable_cpm"

class AdProduct(BaseModel):
    """Stored ad product."""
    id: int
    name: str = ""
    placements: List[str] = Field(default_factory=list, description="Placement keys")
    price: float = Field(default=0, ge=0, description="Price rounded to cents")
    payable_event: str = Field(default=PayableEvent.CPD.value, description="Payable event, empty when invalid")
    required_sizes: List[str] = Field(default_factory=list, description="Sizes formatted as WxH")

class Placement(BaseModel):
    """Placement as exposed by the placement catalog."""
    key: str
    name: str
    ad_unit: Optional[str] = None
