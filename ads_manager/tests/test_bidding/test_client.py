"""Tests for the remote adapter REST client."""

import pytest
from unittest.mock import Mock
from requests import ConnectionError as RequestsConnectionError

from ads_manager.bidding.client import GamBiddingClient
from ads_manager.bidding.models import CreateType, OrderConfig
from ads_manager.config import ApiConfig
from ads_manager.errors import RemoteCallError

def make_response(status=200, body=None, reason="OK"):
    response = Mock()
    response.status_code = status
    response.ok = status < 400
    response.reason = reason
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response

@pytest.fixture
def session():
    return Mock()

@pytest.fixture
def client(session):
    config = ApiConfig(base_url="https://news.example/wp-json/", namespace="/newspack-ads/v1")
    return GamBiddingClient(config=config, session=session)

@pytest.mark.asyncio
async def test_create_posts_step(client, session):
    session.request.return_value = make_response(body={
        "order_id": 1001,
        "order_name": "Header Bidding A",
        "line_item_ids": [1, 2],
        "lica_batch_count": 1
    })
    config = OrderConfig(order_id="1001", name="Header Bidding A", revenue_share=20, bidders=["medianet"])

    state = await client.create(CreateType.CREATIVES, config, batch=1)

    method, url = session.request.call_args.args
    assert method == "POST"
    assert url == "https://news.example/wp-json/newspack-ads/v1/bidding/gam/create"
    assert session.request.call_args.kwargs["json"] == {
        "id": "1001",
        "type": "creatives",
        "config": {"order_name": "Header Bidding A", "revenue_share": 20, "bidders": ["medianet"]},
        "batch": 1
    }
    assert state.order_id == "1001"
    assert state.line_item_ids == ["1", "2"]
    assert state.lica_batch_count == 1

@pytest.mark.asyncio
async def test_new_order_sends_null_id(client, session):
    session.request.return_value = make_response(body={"order_id": "5", "line_item_ids": None})

    state = await client.create(CreateType.ORDER, OrderConfig(name="New"))

    assert session.request.call_args.kwargs["json"]["id"] is None
    assert session.request.call_args.kwargs["json"]["batch"] == 0
    assert state.line_item_ids == []
    assert state.lica_batch_count == 0

@pytest.mark.asyncio
async def test_get_lica_config(client, session):
    session.request.return_value = make_response(body=[{"line_item_id": 1}, {"line_item_id": 2}])

    lica_config = await client.get_lica_config("1001")

    assert len(lica_config) == 2
    assert session.request.call_args.kwargs["params"] == {"id": "1001"}
    assert session.request.call_args.args[1].endswith("/bidding/gam/lica_config")

@pytest.mark.asyncio
async def test_get_order_and_bidders(client, session):
    session.request.side_effect = [
        make_response(body={"order_id": "7", "order_name": "Existing", "revenue_share": 10, "bidders": ["medianet"]}),
        make_response(body={"medianet": {"name": "Media.net"}}),
    ]

    state = await client.get_order("7")
    bidders = await client.get_bidders()

    assert state.revenue_share == 10
    assert state.bidders == ["medianet"]
    assert bidders["medianet"]["name"] == "Media.net"

@pytest.mark.asyncio
async def test_error_response_uses_adapter_message(client, session):
    session.request.return_value = make_response(
        status=404,
        reason="Not Found",
        body={"code": "newspack_ads_gam_order_not_found", "message": "Order not found."}
    )

    with pytest.raises(RemoteCallError) as exc_info:
        await client.get_order("404")

    assert exc_info.value.status == 404
    assert exc_info.value.code == "newspack_ads_gam_order_not_found"
    assert str(exc_info.value) == "Order not found."

@pytest.mark.asyncio
async def test_error_response_without_json(client, session):
    session.request.return_value = make_response(status=502, reason="Bad Gateway", body=ValueError("no json"))

    with pytest.raises(RemoteCallError) as exc_info:
        await client.create(CreateType.LINE_ITEMS, OrderConfig(order_id="1", name="A"))

    assert exc_info.value.status == 502
    assert exc_info.value.message == "Bad Gateway"
    assert exc_info.value.operation == "create_line_items"

@pytest.mark.asyncio
async def test_transport_error(client, session):
    session.request.side_effect = RequestsConnectionError("connection refused")

    with pytest.raises(RemoteCallError) as exc_info:
        await client.get_bidders()

    assert exc_info.value.status is None
    assert "connection refused" in exc_info.value.message

def test_default_session_sends_token():
    client = GamBiddingClient(config=ApiConfig(auth_token="secret"))
    try:
        assert client._session.headers["Authorization"] == "Bearer secret"
    finally:
        client.close()
