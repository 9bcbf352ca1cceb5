"""Tests for workflow progress reporting."""

import pytest

from ads_manager.bidding.reporter import (
    ARCHIVED_NOTICE,
    DURATION_WARNING,
    MISCONFIGURED_NOTICE,
    ProgressReporter,
    get_step_name,
)
from ads_manager.bidding.workflow import OrderWorkflow
from ads_manager.errors import RemoteCallError, UnrecoverableWorkflowError

@pytest.fixture
def workflow(mock_client):
    return OrderWorkflow(mock_client, name="Header Bidding A")

def test_step_names():
    assert get_step_name(0) == ""
    assert get_step_name(1) == "Creating Order…"
    assert get_step_name(2) == "Creating Line Items…"
    assert get_step_name(3) == "Associating Creatives…"
    assert get_step_name(7) == "Associating Creatives…"

def test_idle_form(workflow):
    reporter = ProgressReporter(workflow)

    assert reporter.progress() is None
    assert reporter.notices() == []
    assert reporter.button_label() == "Create Order"
    assert reporter.button_disabled() is False

def test_running_step_shows_progress_and_warning(workflow):
    workflow.in_flight = True
    workflow.step = 4
    workflow.total_steps = 6
    reporter = ProgressReporter(workflow)

    progress = reporter.progress()
    assert progress.completed == 4
    assert progress.total == 6
    assert progress.label == "Associating Creatives…"
    assert [notice.text for notice in reporter.notices()] == [DURATION_WARNING]
    assert reporter.button_disabled() is True

def test_recoverable_error_notice(workflow):
    workflow.error = RemoteCallError("Quota exceeded", operation="create_order", status=500)
    notices = ProgressReporter(workflow).notices()

    assert len(notices) == 1
    assert notices[0].level == "error"
    assert notices[0].text == "Quota exceeded"

def test_not_found_error_is_hidden(workflow):
    workflow.error = RemoteCallError("Order not found", operation="get_order", status=404)
    assert ProgressReporter(workflow).notices() == []

def test_archived_notice(workflow):
    workflow.unrecoverable = UnrecoverableWorkflowError(RuntimeError("boom"), order_id="1")
    notices = ProgressReporter(workflow).notices()

    assert [notice.text for notice in notices] == [ARCHIVED_NOTICE]

def test_misconfigured_order(mock_client, make_state):
    workflow = OrderWorkflow(mock_client, state=make_state("1", name="Locked name"))
    reporter = ProgressReporter(workflow)

    assert reporter.button_label() == "Fix issues"
    assert reporter.notices()[0].text == MISCONFIGURED_NOTICE
    assert reporter.name_field() == {"value": "Locked name", "disabled": True}

def test_button_disabled_without_name(mock_client):
    assert ProgressReporter(OrderWorkflow(mock_client)).button_disabled() is True

@pytest.mark.asyncio
async def test_render_after_load(workflow):
    await workflow.load()
    rendered = ProgressReporter(workflow).render()

    assert rendered["bidders"] == [{"value": "medianet", "label": "Media.net"}]
    assert rendered["button"] == {"label": "Create Order", "disabled": False}
    assert rendered["progress"] is None
    assert rendered["has_issues"] is False
