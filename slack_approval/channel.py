"""Posting and updating the approval message in Slack."""

import asyncio

import aiohttp
from loguru import logger
from slack_sdk.errors import SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from slack_approval.blocks import REQUEST_FALLBACK_TEXT, build_approval_blocks
from slack_approval.errors import MessageDeliveryError
from slack_approval.models import ApprovalRequest, PostedMessage


class NotificationChannel:
    """Sends the approval message and rewrites it once a decision is made."""

    def __init__(self, client: AsyncWebClient):
        self.client = client

    async def post(self, request: ApprovalRequest) -> PostedMessage:
        """Post the approval request to its channel.

        Raises:
            MessageDeliveryError: If Slack rejects the channel or payload
        """
        blocks = build_approval_blocks(request)
        try:
            result = await self.client.chat_postMessage(
                channel=request.channel_id,
                text=REQUEST_FALLBACK_TEXT,
                blocks=blocks,
            )
        except (SlackClientError, aiohttp.ClientError, asyncio.TimeoutError, TimeoutError, OSError) as e:
            raise MessageDeliveryError(request.channel_id, f"{type(e).__name__}: {e}") from e

        message = PostedMessage(
            channel_id=result.get("channel") or request.channel_id,
            ts=result["ts"],
            blocks=tuple(blocks),
        )
        logger.info(f"Posted approval request {request.correlation_id} (ts={message.ts})")
        return message

    async def update(self, message: PostedMessage, blocks: list[dict]) -> bool:
        """Replace the blocks of a posted message.

        Failures are logged rather than raised so that the gate outcome is
        never held up by a cosmetic update.

        Returns:
            True if Slack accepted the update
        """
        logger.info("Updating message...")
        try:
            await self.client.chat_update(
                channel=message.channel_id,
                ts=message.ts,
                text=REQUEST_FALLBACK_TEXT,
                blocks=blocks,
            )
        except Exception as e:
            logger.error(f"Failed to update approval message {message.ts}: {e}")
            return False
        logger.info("Message updated.")
        return True
