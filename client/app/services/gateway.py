"""
Remote command gateway.

The gateway is the only boundary performing actual I/O: each command is a
single request / single response exchange of structured records. Stores
treat it as an opaque async function per command name.

This module provides:
- Command: the command names consumed by the shell
- CommandGateway: abstract base class every gateway implements
- HttpCommandGateway: JSON-over-HTTP implementation (httpx)
- HandlerGateway: in-process gateway dispatching to registered async handlers

Any failure (transport error, non-2xx status, unreadable body, handler
exception) is raised as RemoteCallFailed; nothing is retried here.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from client.app.errors import RemoteCallFailed
from client.app.logging_config import get_logger

logger = get_logger(__name__)


class Command(str, Enum):
    """Remote command names."""
    # Assets
    ASSET_GET_ASSET_TYPES = "asset_get_asset_types"
    ASSET_GET_USER_GROUPS = "asset_get_user_groups"
    ASSET_GET_USER_ASSETS = "asset_get_user_assets"
    ASSET_CREATE_GROUP = "asset_create_group"
    ASSET_UPDATE_GROUP = "asset_update_group"
    ASSET_DELETE_GROUP = "asset_delete_group"
    ASSET_CREATE_ASSET = "asset_create_asset"
    ASSET_UPDATE_ASSET = "asset_update_asset"
    ASSET_DELETE_ASSET = "asset_delete_asset"
    # Investment plans
    PLAN_CREATE = "plan_create_investment_plan"
    PLAN_UPDATE = "plan_update_investment_plan"
    PLAN_DELETE = "plan_delete_investment_plan"
    PLAN_GET_USER_PLANS = "plan_get_user_investment_plans"
    # Import tasks
    GET_IMPORT_TASKS = "get_import_tasks"
    GET_IMPORT_TASK = "get_import_task"
    START_IMPORT = "start_import"
    GET_AVAILABLE_DATA = "get_available_data"
    # Session
    AUTH_VERIFY_SESSION = "auth_verify_session"


def command_name(command) -> str:
    """Plain command name for a Command member or a raw string."""
    return command.value if isinstance(command, Command) else str(command)


class CommandGateway(ABC):
    """
    Abstract remote command gateway.

    Implementations must raise RemoteCallFailed for every failure and
    return the decoded response (dict, list, scalar or None) on success.
    """

    @abstractmethod
    async def invoke(self, command: str, payload: Optional[dict] = None) -> Any:
        """
        Execute one remote command.

        Args:
            command: Command name (see Command)
            payload: Structured request arguments (None for argument-less commands)

        Returns:
            Decoded response body

        Raises:
            RemoteCallFailed: On any transport or backend failure
        """
        pass

    async def aclose(self) -> None:
        """Release gateway resources (no-op by default)."""
        return None


class HttpCommandGateway(CommandGateway):
    """
    Gateway that POSTs each command as JSON to {base_url}/{command}.

    The backend answers 2xx with the JSON response body, or a non-2xx status
    with {"error": "..."} (any other body is reported verbatim).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
        ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._token: Optional[str] = None

    def set_token(self, token: Optional[str]) -> None:
        """Attach (or drop, with None) the bearer token sent with every command."""
        self._token = token

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def invoke(self, command: str, payload: Optional[dict] = None) -> Any:
        command = command_name(command)
        url = f"{self.base_url}/{command}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload or {}, headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning("Gateway transport error", command=command, error=str(e))
            raise RemoteCallFailed(command, f"transport error: {e}") from e

        if response.status_code >= 400:
            message = _extract_error_message(response)
            logger.warning("Gateway command rejected", command=command, status=response.status_code, error=message)
            raise RemoteCallFailed(command, message, {"status_code": response.status_code})

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise RemoteCallFailed(command, "invalid JSON response") from e


def _extract_error_message(response: httpx.Response) -> str:
    """Best-effort error text from a rejected command response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return str(body)


CommandHandler = Callable[[Optional[dict]], Awaitable[Any]]


class HandlerGateway(CommandGateway):
    """
    In-process gateway dispatching commands to registered async handlers.

    Example usage:
        gateway = HandlerGateway()

        @gateway.handler(Command.ASSET_GET_ASSET_TYPES)
        async def asset_types(payload):
            return [{"id": 1, "name": "Stock"}]
    """

    def __init__(self):
        self._handlers: Dict[str, CommandHandler] = {}

    def register(self, command: str, handler: CommandHandler) -> None:
        name = command_name(command)
        self._handlers[name] = handler

    def handler(self, command: str):
        """Decorator registering the decorated coroutine for `command`."""

        def decorator(func: CommandHandler) -> CommandHandler:
            self.register(command, func)
            return func

        return decorator

    def list_commands(self) -> list[str]:
        return sorted(self._handlers)

    async def invoke(self, command: str, payload: Optional[dict] = None) -> Any:
        name = command_name(command)
        handler = self._handlers.get(name)
        if handler is None:
            raise RemoteCallFailed(name, "unknown command")
        try:
            return await handler(payload)
        except RemoteCallFailed:
            raise
        except Exception as e:
            logger.warning("Command handler failed", command=name, error=str(e))
            raise RemoteCallFailed(name, str(e)) from e
