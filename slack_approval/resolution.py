"""Resolution of the approval request once a reviewer clicks a button.

Each outcome has its own handler. The handler acknowledges the click and
records the decision in a one-shot ApprovalResolution; the supervisor awaits
that resolution, lets the winning handler rewrite the message, and only then
exits with the outcome's code.
"""

import asyncio
import traceback
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from slack_approval.blocks import build_resolution_blocks
from slack_approval.channel import NotificationChannel
from slack_approval.errors import InvalidActionEvent
from slack_approval.models import ActionEvent, Outcome, PostedMessage
from slack_approval.workflow import WorkflowStatus


@dataclass(frozen=True)
class Resolution:
    """The first decision delivered for the request."""

    outcome: Outcome
    event: Optional[ActionEvent] = None  # None when the click payload was malformed


class ApprovalResolution:
    """One-shot future for the approval decision.

    Only the first resolve() takes effect; later clicks are ignored.
    """

    def __init__(self):
        self._future: Optional[asyncio.Future] = None

    @property
    def future(self) -> asyncio.Future:
        """Lazily create the Future on the running loop."""
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    def resolve(self, outcome: Outcome, event: Optional[ActionEvent] = None) -> bool:
        """Record the decision.

        Returns:
            True if this call resolved the request, False if it was already resolved
        """
        actor = event.actor_id if event else "unknown"
        try:
            self.future.set_result(Resolution(outcome=outcome, event=event))
        except asyncio.InvalidStateError:
            logger.warning(
                f"Approval request already resolved, ignoring {outcome.verdict.lower()} "
                f"from {actor}"
            )
            return False

        logger.info(f"Approval request {outcome.verdict.lower()} by {actor}")
        return True

    async def wait(self) -> Resolution:
        """Wait for a decision indefinitely."""
        return await self.future


class ResolutionHandler:
    """Handles clicks for a single outcome."""

    def __init__(
        self,
        outcome: Outcome,
        channel: NotificationChannel,
        resolution: ApprovalResolution,
        status: WorkflowStatus,
    ):
        self.outcome = outcome
        self.channel = channel
        self.resolution = resolution
        self.status = status

    async def on_action(self, ack, body: dict) -> None:
        """Listener callback: acknowledge the click and record the decision."""
        try:
            logger.info("Acking...")
            await ack()
            logger.info("Acked.")
        except Exception as e:
            logger.error(f"Failed to acknowledge {self.outcome.value} action: {e}")

        try:
            event = ActionEvent.from_body(body)
        except InvalidActionEvent as e:
            logger.error(f"{e}; resolving without updating the message")
            event = None

        self.resolution.resolve(self.outcome, event)

    async def finalize(
        self, event: Optional[ActionEvent], posted: Optional[PostedMessage] = None
    ) -> int:
        """Show the decision on the message and report it to the runner.

        The message update is best effort: any failure is logged and the
        outcome's exit code is returned regardless.

        Args:
            event: The click that resolved the request
            posted: The message as originally posted, used when the click
                payload carries no blocks

        Returns:
            Process exit code for the outcome
        """
        try:
            if event is None:
                logger.warning("No click details available, leaving message unchanged")
            else:
                message = event.message
                blocks = list(message.blocks)
                if not blocks and posted is not None:
                    blocks = list(posted.blocks)
                await self.channel.update(
                    message, build_resolution_blocks(blocks, self.outcome, event.actor_id)
                )
        except Exception as e:
            logger.error(f"Failed to show {self.outcome.verdict.lower()} decision: {e}\n{traceback.format_exc()}")

        self._report(event)
        return self.outcome.exit_code

    def _report(self, event: Optional[ActionEvent]) -> None:
        self.status.set_output("result", self.outcome.verdict.lower())
        if event is not None:
            self.status.set_output("approver", event.actor_id)

        if self.outcome is Outcome.APPROVED:
            logger.info("Approval request approved")
        else:
            self.status.set_failed("Approval request rejected")
            logger.info("Approval request rejected")
