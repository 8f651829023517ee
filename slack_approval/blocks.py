"""Slack Block Kit builders for approval request messages."""

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from slack_approval.config import RunMetadata
from slack_approval.errors import BlockParseError
from slack_approval.models import ApprovalRequest, Outcome

REQUEST_TITLE = "GitHub Actions Approval Request"
REQUEST_FALLBACK_TEXT = "GitHub Actions Approval request"


class TextObject(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["plain_text", "mrkdwn"]
    text: str


class _BaseBlock(BaseModel):
    # Unknown fields (block_id, accessory, ...) pass through untouched
    model_config = ConfigDict(extra="allow")


class HeaderBlock(_BaseBlock):
    type: Literal["header"]
    text: TextObject


class SectionBlock(_BaseBlock):
    type: Literal["section"]
    text: Optional[TextObject] = None
    fields: Optional[list[TextObject]] = None

    @model_validator(mode="after")
    def require_content(self) -> "SectionBlock":
        if self.text is None and not self.fields:
            raise ValueError("section block requires text or fields")
        return self


class DividerBlock(_BaseBlock):
    type: Literal["divider"]


class ContextBlock(_BaseBlock):
    type: Literal["context"]
    elements: list[dict[str, Any]] = Field(min_length=1)


class ImageBlock(_BaseBlock):
    type: Literal["image"]
    alt_text: str


class ActionsBlock(_BaseBlock):
    type: Literal["actions"]
    elements: list[dict[str, Any]] = Field(min_length=1)


class RichTextBlock(_BaseBlock):
    type: Literal["rich_text"]
    elements: list[dict[str, Any]]


class MarkdownBlock(_BaseBlock):
    type: Literal["markdown"]
    text: str


class InputBlock(_BaseBlock):
    type: Literal["input"]
    label: TextObject
    element: dict[str, Any]


class VideoBlock(_BaseBlock):
    type: Literal["video"]
    alt_text: str
    video_url: str


class FileBlock(_BaseBlock):
    type: Literal["file"]
    external_id: str
    source: str


Block = Annotated[
    Union[
        HeaderBlock,
        SectionBlock,
        DividerBlock,
        ContextBlock,
        ImageBlock,
        ActionsBlock,
        RichTextBlock,
        MarkdownBlock,
        InputBlock,
        VideoBlock,
        FileBlock,
    ],
    Field(discriminator="type"),
]

_block_list_adapter = TypeAdapter(list[Block])


def parse_custom_blocks(raw: Optional[str]) -> Optional[list[dict]]:
    """Parse the caller-supplied blocks input.

    Args:
        raw: JSON-encoded array of Block Kit blocks, or an empty string

    Returns:
        The blocks exactly as supplied, or None when no blocks were given

    Raises:
        BlockParseError: If the input is not JSON, not an array, or contains
            a block that does not match its Block Kit type
    """
    if raw is None or not raw.strip():
        return None

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BlockParseError(f"Invalid JSON in blocks input: {e}") from e

    if not isinstance(parsed, list):
        raise BlockParseError("Expected a JSON array of blocks")

    try:
        _block_list_adapter.validate_python(parsed)
    except ValidationError as e:
        raise BlockParseError(f"Invalid blocks input: {e}") from e

    return parsed or None


def build_default_blocks(metadata: RunMetadata) -> list[dict]:
    """Build the run summary shown when no custom blocks are supplied."""
    fields = [
        ("GitHub Actor", metadata.actor),
        ("Repos", metadata.repository_url),
        ("Actions URL", metadata.actions_url),
        ("GITHUB_RUN_ID", metadata.run_id),
        ("Workflow", metadata.workflow),
        ("RunnerOS", metadata.runner_os),
    ]
    return [
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*{label}:*\n{value}"} for label, value in fields
            ],
        }
    ]


def build_body_blocks(custom_blocks: Optional[list[dict]], metadata: RunMetadata) -> list[dict]:
    if custom_blocks:
        return list(custom_blocks)
    return build_default_blocks(metadata)


def build_action_block(request: ApprovalRequest) -> dict:
    return {
        "type": "actions",
        "elements": [
            {
                "type": "button",
                "text": {
                    "type": "plain_text",
                    "emoji": True,
                    "text": outcome.button_label,
                },
                "style": outcome.button_style,
                "value": outcome.value,
                "action_id": request.action_id(outcome),
            }
            for outcome in Outcome
        ],
    }


def build_approval_blocks(request: ApprovalRequest) -> list[dict]:
    """Build the full approval request message.

    The action block is always last so that resolution can replace it.
    """
    return [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": REQUEST_TITLE,
            },
        },
        *request.body_blocks,
        build_action_block(request),
    ]


def build_resolution_blocks(blocks: list[dict], outcome: Outcome, actor_id: str) -> list[dict]:
    """Replace the trailing action block with the reviewer's verdict.

    Args:
        blocks: Blocks of the posted message, action block last
        outcome: The decision taken
        actor_id: Slack user id of the reviewer

    Returns:
        A new list with the same number of blocks
    """
    resolved = list(blocks[:-1])
    resolved.append(
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"{outcome.verdict} by <@{actor_id}>",
            },
        }
    )
    return resolved
