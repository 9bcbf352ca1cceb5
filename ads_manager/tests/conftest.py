"""
Shared test fixtures.
"""
import pytest
from unittest.mock import MagicMock, AsyncMock

from ads_manager.bidding.client import GamBiddingClient
from ads_manager.bidding.models import OrderState
from ads_manager.utils.options import OptionStore

@pytest.fixture
def mock_redis():
    """Mock Redis client backed by dictionaries."""
    values = {}
    hashes = {}
    counters = {}
    client = MagicMock()

    def set_value(key, value):
        values[key] = value
        return True

    def delete(*keys):
        removed = 0
        for key in keys:
            removed += int(values.pop(key, None) is not None)
            removed += int(hashes.pop(key, None) is not None)
        return removed

    def hset(key, field, value):
        hashes.setdefault(key, {})[field] = value
        return 1

    def incr(key):
        counters[key] = counters.get(key, 0) + 1
        return counters[key]

    client.get.side_effect = values.get
    client.set.side_effect = set_value
    client.delete.side_effect = delete
    client.hget.side_effect = lambda key, field: hashes.get(key, {}).get(field)
    client.hgetall.side_effect = lambda key: dict(hashes.get(key, {}))
    client.hset.side_effect = hset
    client.incr.side_effect = incr
    client.values = values
    client.hashes = hashes
    return client

@pytest.fixture
def option_store(mock_redis):
    """Option store on the mock Redis client."""
    return OptionStore(client=mock_redis, prefix="test:")

@pytest.fixture
def mock_client():
    """Mock remote adapter client."""
    client = AsyncMock(spec=GamBiddingClient)
    client.get_bidders.return_value = {
        "medianet": {"key": "medianet", "name": "Media.net", "active_key": "medianet_cid", "settings": []}
    }
    client.get_lica_config.return_value = []
    return client

def order_state(order_id=None, line_item_ids=None, lica_batch_count=0, name="Header Bidding A"):
    """Build an adapter response."""
    return OrderState(
        order_id=order_id,
        order_name=name,
        line_item_ids=line_item_ids or [],
        lica_batch_count=lica_batch_count
    )

@pytest.fixture
def make_state():
    """Factory for adapter responses."""
    return order_state
