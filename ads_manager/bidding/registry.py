"""Bidder Registry.

This module provides a registry of header bidding partners: their identity,
their configurable settings, the stored values of those settings and the
Prebid.js configuration hooks each partner contributes.
"""
from typing import Any, Callable, Dict, List, Optional
from copy import deepcopy

from ads_manager.bidding.bidders import register_bundled_bidders
from ads_manager.bidding.models import Bidder, BidderSetting
from ads_manager.errors import NotFoundError, ValidationError
from ads_manager.utils.options import OptionStore

BIDDER_OPTION_PREFIX = "_newspack_ads_bidder_"

PrebidConfigHook = Callable[[Dict[str, Any], Dict[str, Any]], Dict[str, Any]]
AdUnitBidHook = Callable[[Dict[str, Any], str, Dict[str, Any]], Optional[Dict[str, Any]]]

class BidderRegistry:
    """Registry for managing header bidding partners."""

    def __init__(self, store: Optional[OptionStore] = None):
        """Initialize an empty bidder registry.

        Args:
            store: Option store holding bidder setting values. Without one,
                bidders are never active.
        """
        self.store = store
        self.bidders: Dict[str, Bidder] = {}
        self._config_hooks: Dict[str, PrebidConfigHook] = {}
        self._bid_hooks: Dict[str, AdUnitBidHook] = {}

    def register(
        self,
        key: str,
        name: str,
        active_key: str,
        settings: Optional[List[Dict[str, Any]]] = None,
        prebid_config: Optional[PrebidConfigHook] = None,
        ad_unit_bid: Optional[AdUnitBidHook] = None
    ) -> Bidder:
        """Register a bidder with the registry.

        Args:
            key: Unique bidder key, as used by Prebid.js
            name: Human readable bidder name
            active_key: Setting key whose value marks the bidder as active
            settings: Bidder settings definitions
            prebid_config: Optional hook amending the global Prebid.js config
            ad_unit_bid: Optional hook building the bid for an ad unit

        Returns:
            The registered bidder

        Raises:
            ValueError: If a bidder with the same key is already registered
        """
        if key in self.bidders:
            raise ValueError(f"Bidder '{key}' is already registered")

        bidder = Bidder(
            key=key,
            name=name,
            active_key=active_key,
            settings=[BidderSetting(**setting) for setting in settings or []]
        )
        self.bidders[key] = bidder
        if prebid_config:
            self._config_hooks[key] = prebid_config
        if ad_unit_bid:
            self._bid_hooks[key] = ad_unit_bid
        return bidder

    def get(self, key: str) -> Bidder:
        """Get a registered bidder by key.

        Raises:
            NotFoundError: If no bidder with the given key exists
        """
        if key not in self.bidders:
            raise NotFoundError(f"No bidder registered with key '{key}'", operation="get_bidder")
        return self.bidders[key]

    def keys(self) -> List[str]:
        return list(self.bidders.keys())

    def list(self) -> List[Bidder]:
        return list(self.bidders.values())

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Registry payload keyed by bidder key."""
        return {key: bidder.model_dump() for key, bidder in self.bidders.items()}

    def get_bidder_data(self, key: str) -> Dict[str, Any]:
        """Get a bidder entry along with the stored values of its settings."""
        bidder = self.get(key)
        stored = self.store.get_option(BIDDER_OPTION_PREFIX + key, {}) if self.store else {}
        data = {
            setting_key: stored[setting_key]
            for setting_key in bidder.setting_keys()
            if setting_key in stored
        }
        return {**bidder.model_dump(), "data": data}

    def update_bidder_data(self, key: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Store setting values for a bidder.

        Raises:
            ValidationError: If a value does not match one of the bidder settings
        """
        bidder = self.get(key)
        unknown = [name for name in values if name not in bidder.setting_keys()]
        if unknown:
            raise ValidationError(
                f"Invalid settings for bidder '{key}': {', '.join(unknown)}",
                operation="update_bidder_data",
                details={"bidder": key, "invalid_keys": unknown}
            )
        if self.store is None:
            raise RuntimeError("Bidder registry has no option store")

        stored = self.store.get_option(BIDDER_OPTION_PREFIX + key, {})
        stored.update(values)
        self.store.update_option(BIDDER_OPTION_PREFIX + key, stored)
        return self.get_bidder_data(key)

    def is_active(self, key: str) -> bool:
        """Whether the bidder's active setting has a value."""
        bidder_data = self.get_bidder_data(key)
        return bool(bidder_data["data"].get(bidder_data["active_key"]))

    def active_keys(self) -> List[str]:
        return [key for key in self.bidders if self.is_active(key)]

    def build_prebid_config(self, base: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Apply every active bidder's config hook to the Prebid.js config."""
        config = deepcopy(base) if base else {}
        for key in self.active_keys():
            hook = self._config_hooks.get(key)
            if hook:
                config = hook(config, self.get_bidder_data(key))
        return config

    def ad_unit_bid(
        self,
        key: str,
        placement_id: str,
        ad_unit: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """Build the bid of an active bidder for an ad unit placement."""
        hook = self._bid_hooks.get(key)
        if not hook or not self.is_active(key):
            return None
        return hook(self.get_bidder_data(key), placement_id, ad_unit or {})

def default_registry(store: Optional[OptionStore] = None) -> BidderRegistry:
    """Create a registry with the bundled bidders registered."""
    registry = BidderRegistry(store)
    register_bundled_bidders(registry)
    return registry
