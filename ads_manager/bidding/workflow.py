"""
GAM order provisioning workflow.

This module drives the remote adapter through the steps that provision a
header bidding order: the order itself, its line items, and the line item
creative associations (LICA) in batches. Every step is idempotent on the
adapter side and returns the cumulative order state, so a run can resume
from wherever a previous one stopped.

Failures follow a two strike policy:

- a failure in a fresh attempt is recoverable and the user may retry;
- once an order id has been obtained, a failure flags the next attempt as the
  last one;
- a failure in the last attempt, or while fixing an order that already existed
  when the workflow was opened, is unrecoverable. The order is handed to the
  ``on_unrecoverable`` callback for archival and the local state is cleared.
"""

import inspect
import math
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ads_manager.config import bidding_config
from ads_manager.bidding.client import GamBiddingClient
from ads_manager.bidding.models import CreateType, OrderConfig, OrderState
from ads_manager.errors import UnrecoverableWorkflowError, WorkflowBusyError
from ads_manager.utils.logging import setup_logger

logger = setup_logger(__name__)

Callback = Callable[..., Union[Any, Awaitable[Any]]]

class WorkflowStep(str, Enum):
    """Phase of a provisioning run."""
    IDLE = "idle"
    CREATING_ORDER = "creating_order"
    CREATING_LINE_ITEMS = "creating_line_items"
    ASSOCIATING_CREATIVES = "associating_creatives"
    COMPLETE = "complete"

class AttemptState(str, Enum):
    """Retry escalation state."""
    FRESH = "fresh"
    RETRY_PENDING = "retry_pending"
    EXHAUSTED = "exhausted"

async def _call(callback: Optional[Callback], *args) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result

class OrderWorkflow:
    """Resumable provisioning of a single header bidding order."""

    def __init__(
        self,
        client: GamBiddingClient,
        order_id: Optional[str] = None,
        name: str = "",
        state: Optional[OrderState] = None,
        batch_size: Optional[int] = None,
        on_create: Optional[Callback] = None,
        on_unrecoverable: Optional[Callback] = None,
        on_cancel: Optional[Callback] = None
    ):
        """
        Initialize the workflow.

        Args:
            client: Remote adapter client
            order_id: Id of an existing order to inspect or fix
            name: Initial order name
            state: Known state of the existing order, fetched by ``load()`` otherwise
            batch_size: Creative associations per batch, defaults to configuration
            on_create: Called with the final OrderState after a complete run
            on_unrecoverable: Called with the OrderConfig of an order that must be archived
            on_cancel: Called when the user cancels
        """
        self.client = client
        self.batch_size = bidding_config.lica_batch_size if batch_size is None else batch_size
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if state and state.order_id:
            order_id = state.order_id
            name = name or state.order_name or ""
        self.existing_order_id = str(order_id) if order_id else None
        self.on_create = on_create
        self.on_unrecoverable = on_unrecoverable
        self.on_cancel = on_cancel

        self.config = OrderConfig(order_id=order_id, name=name)
        self.order: Optional[OrderState] = state if state and state.order_id else None
        self.bidders: Dict[str, Dict[str, Any]] = {}
        self.in_flight = False
        self.error: Optional[Exception] = None
        self.unrecoverable: Optional[UnrecoverableWorkflowError] = None
        self.attempt_state = AttemptState.FRESH

        self.phase = WorkflowStep.IDLE
        self.step = 0
        # Placeholders until the LICA config is fetched
        self.total_batches = 1
        self.total_steps = 4

    @property
    def is_last_attempt(self) -> bool:
        return self.attempt_state == AttemptState.RETRY_PENDING

    def _set_step(self, phase: WorkflowStep, step: int) -> None:
        self.phase = phase
        self.step = step
        logger.info(f"Order {self.config.order_id or '(new)'}: {phase.value} ({step}/{self.total_steps})")

    def _adopt(self, state: OrderState) -> OrderState:
        self.order = state
        return state

    def update_config(self, **changes: Any) -> OrderConfig:
        """
        Apply user input to the order configuration.

        Raises:
            pydantic.ValidationError: If a value is out of range
        """
        for field, value in changes.items():
            setattr(self.config, field, value)
        return self.config

    def has_issues(self) -> bool:
        """Whether the order exists on the server but is not fully provisioned."""
        if self.in_flight or not self.order or not self.order.order_id:
            return False
        return not self.order.line_item_ids or self.total_batches > self.order.lica_batch_count

    async def load(self) -> None:
        """Fetch the bidder registry and, for an existing order, its state."""
        self.in_flight = True
        try:
            try:
                self.bidders = await self.client.get_bidders()
            except Exception as e:
                logger.error(f"Failed to load bidders: {e}")
                self.error = e
            if self.existing_order_id:
                try:
                    state = await self.client.get_order(self.existing_order_id)
                    config = OrderConfig(
                        order_id=state.order_id,
                        name=state.order_name or "",
                        revenue_share=state.revenue_share or 0,
                        bidders=state.bidders or []
                    )
                except Exception as e:
                    logger.error(f"Failed to load order {self.existing_order_id}: {e}")
                    self.error = e
                else:
                    self.config = config
                    self._adopt(state)
        finally:
            self.in_flight = False

    async def _fetch_batches(self, order_id: str) -> int:
        lica_config: List[Dict[str, Any]] = await self.client.get_lica_config(order_id)
        self.total_batches = math.ceil(len(lica_config) / self.batch_size)
        self.total_steps = 3 + self.total_batches
        return self.total_batches

    async def create(self) -> Optional[OrderState]:
        """
        Run or resume the provisioning sequence.

        Returns:
            The final OrderState on success, None when the run failed. Failures
            are recorded on ``error`` (recoverable) or ``unrecoverable``.

        Raises:
            WorkflowBusyError: If a run is already in flight
        """
        if self.in_flight:
            raise WorkflowBusyError("Order provisioning is already in progress", operation="create_order")

        self.error = None
        self.unrecoverable = None
        self.in_flight = True
        if self.attempt_state == AttemptState.EXHAUSTED:
            self.attempt_state = AttemptState.FRESH

        pending = self.order.model_copy(deep=True) if self.order else OrderState()
        try:
            if self.order is None and self.config.order_id:
                pending = self._adopt(await self.client.get_order(self.config.order_id))

            if not pending.order_id:
                self._set_step(WorkflowStep.CREATING_ORDER, 1)
                pending = self._adopt(await self.client.create(CreateType.ORDER, self.config))
                self.config.order_id = pending.order_id

            if not pending.line_item_ids:
                self._set_step(WorkflowStep.CREATING_LINE_ITEMS, 2)
                pending = self._adopt(await self.client.create(CreateType.LINE_ITEMS, self.config))

            batches = await self._fetch_batches(pending.order_id)
            for index in range(pending.lica_batch_count, batches):
                batch = index + 1
                self._set_step(WorkflowStep.ASSOCIATING_CREATIVES, 2 + batch)
                pending = self._adopt(await self.client.create(CreateType.CREATIVES, self.config, batch))

            self._set_step(WorkflowStep.COMPLETE, 3 + batches)
            await _call(self.on_create, pending)
            self.attempt_state = AttemptState.FRESH
            return pending
        except Exception as e:
            await self._handle_failure(e, pending)
            return None
        finally:
            self.phase = WorkflowStep.IDLE
            self.step = 0
            self.in_flight = False

    async def _handle_failure(self, error: Exception, pending: OrderState) -> None:
        if self.existing_order_id or self.is_last_attempt:
            logger.error(f"Unrecoverable failure provisioning order {self.config.order_id}: {error}")
            self.attempt_state = AttemptState.EXHAUSTED
            self.unrecoverable = UnrecoverableWorkflowError(error, order_id=self.config.order_id)
            archived = self.config.model_copy(deep=True)
            self.order = None
            self.config.order_id = None
            self.existing_order_id = None
            try:
                await _call(self.on_unrecoverable, archived)
            except Exception as e:
                logger.error(f"Failed to archive order {archived.order_id}: {e}")
                self.error = e
            return

        if pending.order_id:
            # The next failure will archive the order
            self.attempt_state = AttemptState.RETRY_PENDING
        logger.warning(f"Order provisioning failed, retry is possible: {error}")
        self.error = error

    async def submit(self) -> Optional[OrderState]:
        """Create a new order or fix a misconfigured one."""
        if self.has_issues() or not self.config.order_id:
            return await self.create()
        logger.info(f"Order {self.config.order_id} is already provisioned")
        return self.order

    async def cancel(self) -> None:
        """Abandon the form. Not available while a step is running."""
        if self.in_flight:
            raise WorkflowBusyError("Cannot cancel while a step is running", operation="cancel_order")
        await _call(self.on_cancel)
