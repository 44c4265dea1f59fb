"""
Services package.
Shell-level components that are not stores.

- gateway.py: Command enum, CommandGateway (HTTP and in-process handlers)
- session.py: SessionContext (acting user) and session verification
- reconciler.py: PositionReconciler, owner of the Position projection
- task_poller.py: TaskPoller / PollHandle for import tasks
- view_registry.py: ViewRegistry of open views
- state.py: ShellState container and create_shell_state()

Only the modules the stores depend on are re-exported here; import the
poller, the view registry and the shell state from their own modules.
"""
from client.app.services.gateway import (
    Command,
    CommandGateway,
    HandlerGateway,
    HttpCommandGateway,
    )
from client.app.services.reconciler import PositionReconciler
from client.app.services.session import SessionContext, verify_session

__all__ = [
    "Command",
    "CommandGateway",
    "HandlerGateway",
    "HttpCommandGateway",
    "PositionReconciler",
    "SessionContext",
    "verify_session",
    ]
