"""Socket Mode listener dispatching button clicks to their handlers."""

import traceback
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from loguru import logger
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

ActionCallback = Callable[[Callable[..., Awaitable[Any]], dict], Awaitable[None]]


class ListenerState(Enum):
    """Lifecycle of the event listener."""

    IDLE = "idle"
    CONNECTED = "connected"
    DISPATCHING = "dispatching"
    TERMINATED = "terminated"


class EventListener:
    """Routes block actions received over Socket Mode to one callback per action id.

    Callback failures are logged and never propagate into the transport.
    """

    def __init__(
        self,
        app: AsyncApp,
        app_token: str,
        handler_factory: Callable[[AsyncApp, str], AsyncSocketModeHandler] = AsyncSocketModeHandler,
    ):
        self.app = app
        self.state = ListenerState.IDLE
        self._app_token = app_token
        self._handler_factory = handler_factory
        self._handler: Optional[AsyncSocketModeHandler] = None
        self._callbacks: dict[str, ActionCallback] = {}

    def register_handler(self, action_id: str, callback: ActionCallback) -> None:
        """Associate a callback with an action id.

        Raises:
            ValueError: If the action id already has a callback
        """
        if action_id in self._callbacks:
            raise ValueError(f"Handler already registered for action {action_id}")
        self._callbacks[action_id] = callback

        async def handle_action(ack, body):
            await self.dispatch(action_id, ack, body)

        self.app.action(action_id)(handle_action)
        logger.debug(f"Registered handler for action {action_id}")

    async def dispatch(self, action_id: str, ack, body: dict) -> None:
        """Invoke the callback registered for `action_id`.

        Bolt only routes the ids passed to `app.action`, so clicks carrying the
        action id of another run never reach this method; Bolt logs them as
        unhandled requests. The unknown-id branch covers direct calls.
        """
        callback = self._callbacks.get(action_id)
        if callback is None:
            logger.debug(f"Ignoring unregistered action {action_id}")
            return

        if self.state is ListenerState.CONNECTED:
            self.state = ListenerState.DISPATCHING

        try:
            await callback(ack, body)
        except Exception as e:
            logger.error(f"Handler for action {action_id} failed: {e}\n{traceback.format_exc()}")

    async def start(self) -> None:
        """Open the Socket Mode connection and begin receiving events."""
        if self.state is not ListenerState.IDLE:
            raise RuntimeError(f"Listener cannot start from state {self.state.value}")

        logger.info("Connecting to Slack (Socket Mode)...")
        self._handler = self._handler_factory(self.app, self._app_token)
        await self._handler.connect_async()
        self.state = ListenerState.CONNECTED
        logger.info("Connected to Slack")

    async def close(self) -> None:
        if self._handler is not None:
            try:
                await self._handler.close_async()
            except Exception as e:
                logger.warning(f"Error closing Socket Mode connection: {e}")
        self.state = ListenerState.TERMINATED
