"""Header bidding: bidder registry and GAM order provisioning."""
