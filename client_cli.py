#!/usr/bin/env python3
"""
Client Shell CLI

Command-line front end for the client shell: verifies a session against the
backend command endpoint and drives the stores from the terminal.

Usage:
    python client_cli.py --token <token> verify
    python client_cli.py --token <token> assets [--asset-type-id N] [--group-id N]
    python client_cli.py --token <token> positions
    python client_cli.py --token <token> import-start <asset_type> <symbol> <source> <start> <end> <interval> [--watch]
    python client_cli.py --token <token> import-watch <task_id>
    python client_cli.py --token <token> available-data [--asset-type TYPE]

The backend URL and polling parameters come from the environment / .env
(GATEWAY_BASE_URL, POLL_INTERVAL_SECONDS, ...). When the backend answers
session verification with a bare flag, pass --user-id (and --username) with
the locally saved user.
"""
import argparse
import asyncio
import json
import os
import sys
from datetime import datetime
from pathlib import Path

import argcomplete

# Add project root to path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from client.app.config import get_settings
from client.app.errors import ShellError
from client.app.logging_config import configure_logging
from client.app.schemas.tasks import ITStartItem
from client.app.services.gateway import HttpCommandGateway
from client.app.services.session import SessionContext, verify_session
from client.app.services.state import ShellState, create_shell_state


async def open_session(args) -> tuple[ShellState, SessionContext]:
    settings = get_settings()
    gateway = HttpCommandGateway(settings.GATEWAY_BASE_URL, timeout=settings.GATEWAY_TIMEOUT)
    gateway.set_token(args.token)

    saved_user = None
    if args.user_id is not None:
        saved_user = {"id": args.user_id, "username": args.username}
    ctx = await verify_session(gateway, args.token, saved_user)
    return create_shell_state(gateway, settings), ctx


async def cmd_verify(args) -> bool:
    """Check the session token."""
    _, ctx = await open_session(args)
    if not ctx.is_authenticated:
        print("❌ Session not valid")
        return False
    print(f"✅ Session valid for user {ctx.username or ''} (ID {ctx.user_id})")
    return True


async def cmd_assets(args) -> bool:
    """List the user's assets."""
    state, ctx = await open_session(args)
    await state.assets.fetch_asset_types()
    assets = await state.assets.fetch_user_assets(ctx, args.asset_type_id, args.group_id)

    if not assets:
        print("No assets found")
        return True

    print(f"\n{'ID':<6} {'Code':<12} {'Name':<30} {'Group':<20} {'Amount':>12} {'Cost':>12}")
    print("-" * 96)
    for asset in assets:
        amount = "" if asset.position_amount is None else f"{asset.position_amount:.4f}"
        cost = "" if asset.position_cost is None else f"{asset.position_cost:.2f}"
        print(f"{asset.id:<6} {asset.code:<12} {asset.name[:30]:<30} {(asset.group_name or '-')[:20]:<20} {amount:>12} {cost:>12}")
    print()
    return True


async def cmd_positions(args) -> bool:
    """Load everything and print the position projection."""
    state, ctx = await open_session(args)
    await state.init_data(ctx)
    print(json.dumps(state.positions, indent=2, sort_keys=True))
    return True


async def watch_task(state: ShellState, ctx: SessionContext, task_id: str) -> bool:
    handle = await state.poller.start_polling(ctx, task_id)
    final_status = await handle.wait()
    task = state.tasks.get(task_id)

    if handle.error is not None:
        print(f"❌ Polling stopped: {handle.error}")
        return False
    if task is None:
        print(f"❌ Import task '{task_id}' not found")
        return False

    print(f"{'✅' if final_status and final_status.value == 'Completed' else '❌'} "
          f"Task {task.id}: {task.status.value} "
          f"({task.imported_candles or 0}/{task.total_candles or '?'} candles)")
    if task.error:
        print(f"   {task.error}")
    return task.status.value == "Completed"


async def cmd_import_start(args) -> bool:
    """Start a historical-data import (optionally waiting for it)."""
    state, ctx = await open_session(args)
    item = ITStartItem(
        asset_type=args.asset_type,
        symbol=args.symbol,
        source=args.source,
        start_time=datetime.fromisoformat(args.start),
        end_time=datetime.fromisoformat(args.end),
        interval=args.interval,
        )
    task = await state.tasks.start_import(ctx, item)
    print(f"✅ Import task {task.id} started ({task.status.value})")

    if args.watch:
        try:
            return await watch_task(state, ctx, task.id)
        finally:
            await state.poller.shutdown()
    return True


async def cmd_import_watch(args) -> bool:
    """Poll an import task until it finishes."""
    state, ctx = await open_session(args)
    try:
        return await watch_task(state, ctx, args.task_id)
    finally:
        await state.poller.shutdown()


async def cmd_available_data(args) -> bool:
    """List the datasets already imported."""
    state, ctx = await open_session(args)
    await state.tasks.fetch_available_data(ctx)
    datasets = state.tasks.available_data_by_type(args.asset_type) if args.asset_type else state.tasks.available_data

    if not datasets:
        print("No data available")
        return True

    print(f"\n{'Type':<10} {'Symbol':<12} {'Source':<12} {'Candles':>10}  Intervals")
    print("-" * 70)
    for data in datasets:
        print(f"{data.asset_type:<10} {(data.symbol or '-'):<12} {(data.source or '-'):<12} {data.candle_count:>10}  {', '.join(data.intervals)}")
    print()
    return True


COMMANDS = {
    "verify": cmd_verify,
    "assets": cmd_assets,
    "positions": cmd_positions,
    "import-start": cmd_import_start,
    "import-watch": cmd_import_watch,
    "available-data": cmd_available_data,
    }


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Client shell CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
        )
    parser.add_argument("--token", default=os.environ.get("WOLFQUANT_TOKEN"), help="Session token (default: $WOLFQUANT_TOKEN)")
    parser.add_argument("--user-id", type=int, default=None, help="Locally saved user id")
    parser.add_argument("--username", default=None, help="Locally saved username")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--log-file", action="store_true", help="Also log to logs/wolfquant-client.log")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # verify
    subparsers.add_parser("verify", help="Verify the session token")

    # assets
    assets_parser = subparsers.add_parser("assets", help="List assets")
    assets_parser.add_argument("--asset-type-id", type=int, default=None, help="Only assets of this type")
    assets_parser.add_argument("--group-id", type=int, default=None, help="Only assets of this group")

    # positions
    subparsers.add_parser("positions", help="Print the position projection")

    # import-start
    start_parser = subparsers.add_parser("import-start", help="Start a historical-data import")
    start_parser.add_argument("asset_type", help="Asset type (e.g. stock)")
    start_parser.add_argument("symbol", help="Symbol to import")
    start_parser.add_argument("source", help="Data source")
    start_parser.add_argument("start", help="Start time (ISO 8601)")
    start_parser.add_argument("end", help="End time (ISO 8601)")
    start_parser.add_argument("interval", help="Candle interval (e.g. 1d)")
    start_parser.add_argument("--watch", action="store_true", help="Poll until the task finishes")

    # import-watch
    watch_parser = subparsers.add_parser("import-watch", help="Poll an import task until it finishes")
    watch_parser.add_argument("task_id", help="Import task id")

    # available-data
    data_parser = subparsers.add_parser("available-data", help="List imported datasets")
    data_parser.add_argument("--asset-type", default=None, help="Only datasets of this asset type")

    return parser


def main():
    parser = create_parser()

    argcomplete.autocomplete(parser)
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    configure_logging(
        log_level=args.log_level or get_settings().LOG_LEVEL,
        enable_file_logging=args.log_file
        )

    try:
        success = asyncio.run(COMMANDS[args.command](args))
    except ShellError as e:
        print(f"❌ {e.message}")
        success = False
    except ValueError as e:
        print(f"❌ Invalid arguments: {e}")
        success = False
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
