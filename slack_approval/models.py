import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from slack_approval.errors import InvalidActionEvent

ACTION_ID_PREFIX = "slack-approval"


class Outcome(Enum):
    """Decision a reviewer can make on an approval request."""

    APPROVED = "approve"
    REJECTED = "reject"

    @property
    def button_label(self) -> str:
        return "Approve" if self is Outcome.APPROVED else "Reject"

    @property
    def button_style(self) -> str:
        return "primary" if self is Outcome.APPROVED else "danger"

    @property
    def verdict(self) -> str:
        """Label shown in the resolution block."""
        return "Approved" if self is Outcome.APPROVED else "Rejected"

    @property
    def exit_code(self) -> int:
        return 0 if self is Outcome.APPROVED else 1


def new_correlation_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ApprovalRequest:
    """The single approval request made by one process run."""

    channel_id: str
    body_blocks: tuple[dict, ...] = ()
    correlation_id: str = field(default_factory=new_correlation_id)

    def action_id(self, outcome: Outcome) -> str:
        """Action id scoped to this run, e.g. slack-approval-approve-<uuid>."""
        return f"{ACTION_ID_PREFIX}-{outcome.value}-{self.correlation_id}"

    @property
    def action_ids(self) -> dict[str, Outcome]:
        return {self.action_id(outcome): outcome for outcome in Outcome}


@dataclass(frozen=True)
class PostedMessage:
    """Address of a message sent to Slack, needed to update it later."""

    channel_id: str
    ts: str
    blocks: tuple[dict, ...] = ()


@dataclass(frozen=True)
class ActionEvent:
    """A button click delivered by Slack."""

    action_id: str
    actor_id: str
    message: PostedMessage

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> "ActionEvent":
        """Create an event from a Bolt block_actions body.

        Raises
        ------
        InvalidActionEvent
            If the payload lacks the clicked action, user, channel or message ts.
        """
        try:
            action_id = body["actions"][0]["action_id"]
            actor_id = body["user"]["id"]
            channel_id = body["channel"]["id"]
            ts = body["message"]["ts"]
        except (KeyError, IndexError, TypeError) as e:
            raise InvalidActionEvent(f"Missing required field in action body: {e}") from e

        blocks = body["message"].get("blocks") or []
        return cls(
            action_id=action_id,
            actor_id=actor_id,
            message=PostedMessage(channel_id=channel_id, ts=ts, blocks=tuple(blocks)),
        )
