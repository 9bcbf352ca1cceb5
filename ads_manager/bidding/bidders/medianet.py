"""
Media.net bidder.

The Prebid.js modules for Media.net (bid adapter and real-time data provider)
are part of the bundled Prebid.js build. More information on Prebid.js:
https://github.com/prebid/Prebid.js/
"""

from typing import Any, Dict

KEY = "medianet"
CUSTOMER_ID = "medianet_cid"

def add_realtime_data_config(config: Dict[str, Any], bidder: Dict[str, Any]) -> Dict[str, Any]:
    """
    Add the real-time data provider config for Media.net.

    Args:
        config: Prebid.js config
        bidder: Bidder data, including the stored settings under ``data``

    Returns:
        The Prebid.js config
    """
    cid = bidder.get("data", {}).get(CUSTOMER_ID)
    if not cid:
        return config
    realtime_data = config.setdefault("realtimeData", {})
    realtime_data.setdefault("dataProvider", []).append({
        "name": KEY,
        "params": {"cid": cid}
    })
    return config

def ad_unit_bid(bidder: Dict[str, Any], placement_id: str, ad_unit: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the Media.net bid for an ad unit.

    Assumes the customer id is set, since a bid is only requested from active
    bidders.
    """
    return {
        "bidder": KEY,
        "params": {
            "cid": bidder["data"][CUSTOMER_ID],
            "crid": placement_id
        }
    }

def register(registry) -> None:
    """Register Media.net and its hooks."""
    registry.register(
        KEY,
        name="Media.net",
        active_key=CUSTOMER_ID,
        settings=[
            {
                "key": CUSTOMER_ID,
                "type": "string",
                "description": "Media.net Customer ID",
                "help": "Your customer ID provided by Media.net"
            }
        ],
        prebid_config=add_realtime_data_config,
        ad_unit_bid=ad_unit_bid
    )
