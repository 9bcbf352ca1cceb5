"""
REST client for the remote ad-server adapter.

This module provides the client the order provisioning workflow uses to
create GAM orders, line items and creative associations, and to read back
order state, the LICA config and the bidder registry.
"""

import asyncio
from typing import Any, Dict, List, Optional
from requests import Session, RequestException, Response
from requests.adapters import HTTPAdapter, Retry

from ads_manager.config import ApiConfig, api_config
from ads_manager.bidding.models import CreateType, OrderConfig, OrderState
from ads_manager.errors import RemoteCallError
from ads_manager.utils.logging import setup_logger

logger = setup_logger(__name__)

class GamBiddingClient:
    """
    Client for the header bidding GAM endpoints.

    Blocking HTTP calls run in a worker thread so the workflow can await them.
    """

    def __init__(self, config: Optional[ApiConfig] = None, session: Optional[Session] = None):
        """
        Initialize the client.

        Args:
            config: API configuration, defaults to the application settings
            session: Optional pre-configured session
        """
        self.config = config or api_config
        self._session = session or self._build_session()

    def _build_session(self) -> Session:
        session = Session()
        # Only idempotent reads are retried at transport level
        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=self.config.backoff_factor,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        if self.config.auth_token:
            session.headers["Authorization"] = f"Bearer {self.config.auth_token}"
        return session

    def _url(self, path: str) -> str:
        return "/".join([
            self.config.base_url.rstrip("/"),
            self.config.namespace.strip("/"),
            path.lstrip("/")
        ])

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Execute a request and decode its JSON body.

        Raises:
            RemoteCallError: On transport failures and non-2xx responses
        """
        try:
            response = self._session.request(
                method,
                self._url(path),
                params=params,
                json=json,
                timeout=self.config.timeout
            )
        except RequestException as e:
            logger.error(f"Request {operation} failed: {e}")
            raise RemoteCallError(
                message=f"Request failed: {e}",
                operation=operation,
                details={"path": path}
            ) from e

        if not response.ok:
            raise self._response_error(response, operation, path)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteCallError(
                message="Invalid JSON response",
                operation=operation,
                details={"path": path},
                status=response.status_code
            ) from e

    @staticmethod
    def _response_error(response: Response, operation: str, path: str) -> RemoteCallError:
        """Map an error response, preferring the adapter's own message."""
        message = response.reason or f"HTTP {response.status_code}"
        code = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or message
            code = body.get("code")
        logger.warning(f"Request {operation} returned {response.status_code}: {message}")
        return RemoteCallError(
            message=message,
            operation=operation,
            details={"path": path},
            status=response.status_code,
            code=code
        )

    async def get_bidders(self) -> Dict[str, Dict[str, Any]]:
        """Fetch the bidder registry payload, keyed by bidder key."""
        return await asyncio.to_thread(self._request, "GET", "bidders", "get_bidders")

    async def get_order(self, order_id: str) -> OrderState:
        """Fetch the state of an existing order."""
        data = await asyncio.to_thread(
            self._request, "GET", "bidding/gam/order", "get_order", {"id": order_id}
        )
        return OrderState(**data)

    async def get_lica_config(self, order_id: str) -> List[Dict[str, Any]]:
        """Fetch the line item creative association descriptors of an order."""
        data = await asyncio.to_thread(
            self._request, "GET", "bidding/gam/lica_config", "get_lica_config", {"id": order_id}
        )
        return list(data or [])

    async def create(
        self,
        type: CreateType,
        config: OrderConfig,
        batch: int = 0
    ) -> OrderState:
        """
        Run one provisioning step on the adapter.

        Args:
            type: Entity to create
            config: Order configuration, including the order id once known
            batch: 1-based creative association batch, 0 for other steps

        Returns:
            OrderState: Cumulative order state after the step
        """
        body = {
            "id": config.order_id,
            "type": CreateType(type).value,
            "config": config.to_payload(),
            "batch": batch
        }
        data = await asyncio.to_thread(
            self._request, "POST", "bidding/gam/create", f"create_{CreateType(type).value}", None, body
        )
        return OrderState(**data)

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()
