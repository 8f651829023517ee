#!/usr/bin/env python3
"""
Slack Approval Gate - Main Application Entry Point

Posts an approval request to Slack, waits for a reviewer to click Approve or
Reject, updates the message with the decision and exits with the matching
status code for the calling workflow.
"""

import asyncio
import logging
import signal
import sys
from typing import Callable, Optional

from loguru import logger
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp
from slack_sdk.web.async_client import AsyncWebClient

from slack_approval.blocks import build_body_blocks, parse_custom_blocks
from slack_approval.channel import NotificationChannel
from slack_approval.config import Config
from slack_approval.errors import ListenerConnectionError, SlackApprovalError
from slack_approval.listener import EventListener
from slack_approval.models import ApprovalRequest, Outcome
from slack_approval.resolution import ApprovalResolution, ResolutionHandler
from slack_approval.workflow import WorkflowStatus

CANCELLED_EXIT_CODE = 1


def setup_logging(level: str) -> None:
    """Send loguru and library (slack_bolt, slack_sdk) logs to stderr at `level`."""
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level)
    logging.basicConfig(level=getattr(logging, level, logging.INFO))


def _handle_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """Log failures from tasks and callbacks whose errors nobody awaited."""
    exc = context.get("exception")
    error = exc or context.get("message", "unknown error")
    logger.opt(exception=exc).error(f"Unhandled rejection: {error}")


def _handle_uncaught_exception(exc_type, exc, tb) -> None:
    logger.opt(exception=(exc_type, exc, tb)).error(f"Uncaught exception: {exc}")


def install_exception_hooks(loop: asyncio.AbstractEventLoop) -> None:
    """Log unobserved async failures and uncaught exceptions instead of dropping them."""
    loop.set_exception_handler(_handle_loop_exception)
    sys.excepthook = _handle_uncaught_exception


async def main(
    config: Config,
    status: Optional[WorkflowStatus] = None,
    client: Optional[AsyncWebClient] = None,
    app: Optional[AsyncApp] = None,
    handler_factory: Callable[[AsyncApp, str], AsyncSocketModeHandler] = AsyncSocketModeHandler,
) -> int:
    """Run the approval gate.

    Returns:
        Exit code: 0 when approved, 1 when rejected or cancelled

    Raises:
        SlackApprovalError: If the gate cannot be set up (configuration,
            custom blocks, Socket Mode connection or initial post)
    """
    status = status or WorkflowStatus(config.GITHUB_OUTPUT)
    loop = asyncio.get_running_loop()
    install_exception_hooks(loop)

    # Validate everything before touching the network
    config.ensure_valid()
    custom_blocks = parse_custom_blocks(config.INPUT_BLOCKS)
    request = ApprovalRequest(
        channel_id=config.SLACK_CHANNEL_ID,
        body_blocks=tuple(build_body_blocks(custom_blocks, config.run_metadata)),
    )

    client = client or AsyncWebClient(token=config.SLACK_BOT_TOKEN)
    app = app or AsyncApp(client=client, signing_secret=config.SLACK_SIGNING_SECRET)

    channel = NotificationChannel(client)
    listener = EventListener(app, config.SLACK_APP_TOKEN, handler_factory=handler_factory)
    resolution = ApprovalResolution()

    handlers: dict[Outcome, ResolutionHandler] = {}
    for action_id, outcome in request.action_ids.items():
        handler = ResolutionHandler(outcome, channel, resolution, status)
        listener.register_handler(action_id, handler.on_action)
        handlers[outcome] = handler

    # Pipeline cancellation arrives as a signal
    shutdown_event = asyncio.Event()

    def signal_handler():
        logger.info("Received shutdown signal")
        shutdown_event.set()

    installed_signals = []
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, signal_handler)
            installed_signals.append(sig)
        except (NotImplementedError, RuntimeError):
            logger.debug(f"Signal handler for {sig.name} not supported on this platform")

    try:
        try:
            await listener.start()
        except Exception as e:
            raise ListenerConnectionError(f"Failed to connect to Slack: {e}") from e

        posted = await channel.post(request)
        logger.info("Waiting for approval...")

        resolution_task = asyncio.ensure_future(resolution.wait())
        shutdown_task = asyncio.ensure_future(shutdown_event.wait())
        done, pending = await asyncio.wait(
            {resolution_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()

        if resolution_task in done:
            result = resolution_task.result()
            # Update strictly precedes exit
            return await handlers[result.outcome].finalize(result.event, posted)

        status.set_failed("Approval request cancelled")
        return CANCELLED_EXIT_CODE
    finally:
        for sig in installed_signals:
            loop.remove_signal_handler(sig)
        await listener.close()


def run():
    """Console entry point."""
    config = Config()
    setup_logging(config.LOG_LEVEL)

    status = WorkflowStatus(config.GITHUB_OUTPUT)
    try:
        exit_code = asyncio.run(main(config, status=status))
    except SlackApprovalError as e:
        logger.error(str(e))
        status.set_failed(str(e))
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    run()
