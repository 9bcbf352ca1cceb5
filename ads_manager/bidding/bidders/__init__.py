"""Bidders bundled with the Prebid.js build."""

from ads_manager.bidding.bidders import medianet

BUNDLED_BIDDERS = (medianet,)

def register_bundled_bidders(registry) -> None:
    for module in BUNDLED_BIDDERS:
        module.register(registry)
