"""
Progress and error reporting for the order provisioning workflow.

Maps the workflow state to the labels, notices and progress data the order
form renders.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from ads_manager.bidding.workflow import OrderWorkflow
from ads_manager.errors import RemoteCallError

STEP_NAMES = {
    0: "",
    1: "Creating Order…",
    2: "Creating Line Items…",
}
ASSOCIATING_CREATIVES = "Associating Creatives…"

DURATION_WARNING = "This may take up to 15 minutes, please do not close the window."
ARCHIVED_NOTICE = (
    "We were unable to fix the issues with this order and have archived it. "
    "Please create a new order below."
)
MISCONFIGURED_NOTICE = "Order exists but it's misconfigured."

class Notice(BaseModel):
    """A banner shown above the order form."""
    level: str  # error, warning
    text: str

class ProgressBar(BaseModel):
    """Progress of the running step."""
    completed: int
    total: int
    label: str

def get_step_name(step: int) -> str:
    """Label of a numeric workflow step."""
    return STEP_NAMES.get(step, ASSOCIATING_CREATIVES)

def _is_not_found(error: Exception) -> bool:
    return isinstance(error, RemoteCallError) and error.status == 404

class ProgressReporter:
    """Read-only view of an order workflow for the order form."""

    def __init__(self, workflow: OrderWorkflow):
        self.workflow = workflow

    @property
    def step_name(self) -> str:
        return get_step_name(self.workflow.step)

    def progress(self) -> Optional[ProgressBar]:
        """Progress bar data, None while idle."""
        if not self.workflow.step or not self.step_name:
            return None
        return ProgressBar(
            completed=self.workflow.step,
            total=self.workflow.total_steps,
            label=self.step_name
        )

    def notices(self) -> List[Notice]:
        """Banners in display order."""
        notices = []
        error = self.workflow.error
        # A missing order is expected before the first run
        if error is not None and not _is_not_found(error):
            notices.append(Notice(level="error", text=str(error)))
        if self.workflow.unrecoverable is not None:
            notices.append(Notice(level="error", text=ARCHIVED_NOTICE))
        if self.workflow.has_issues():
            notices.append(Notice(level="warning", text=MISCONFIGURED_NOTICE))
        if self.progress() is not None:
            notices.append(Notice(level="warning", text=DURATION_WARNING))
        return notices

    def button_label(self) -> str:
        return "Fix issues" if self.workflow.has_issues() else "Create Order"

    def button_disabled(self) -> bool:
        return not self.workflow.config.name or self.workflow.in_flight

    def bidder_options(self) -> List[Dict[str, str]]:
        """Bidder select options from the loaded registry."""
        return [
            {"value": key, "label": bidder.get("name", key)}
            for key, bidder in self.workflow.bidders.items()
        ]

    def name_field(self) -> Dict[str, Any]:
        """Order name input: locked once the order exists on the server."""
        order = self.workflow.order
        locked_name = order.order_name if order and order.order_name else None
        return {
            "value": locked_name or self.workflow.config.name,
            "disabled": self.workflow.in_flight or bool(locked_name)
        }

    def render(self) -> Dict[str, Any]:
        """Complete form state as a JSON-serializable dictionary."""
        progress = self.progress()
        return {
            "step": self.workflow.step,
            "step_name": self.step_name,
            "progress": progress.model_dump() if progress else None,
            "notices": [notice.model_dump() for notice in self.notices()],
            "button": {
                "label": self.button_label(),
                "disabled": self.button_disabled()
            },
            "name": self.name_field(),
            "bidders": self.bidder_options(),
            "has_issues": self.workflow.has_issues()
        }
