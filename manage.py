#!/usr/bin/env python3
"""
Shop ledger management CLI.

Usage:
    python manage.py start         Start the API server in the background
    python manage.py stop          Graceful shutdown
    python manage.py restart       Stop + start
    python manage.py dev           Run the API server in the foreground with reload
    python manage.py status        Check if server is running
    python manage.py migrate       Apply pending database migrations
    python manage.py create-admin  Create a verified admin account
"""

import argparse
import asyncio
import getpass
import os
import signal
import socket
import subprocess
import sys
import time
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
PID_FILE = ROOT_DIR / ".shop_ledger.pid"


def _read_pid() -> int | None:
    """Read PID from the PID file, return None if missing or stale."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
    except (ValueError, OSError):
        return None
    if _is_pid_alive(pid):
        return pid
    # Stale PID file
    PID_FILE.unlink(missing_ok=True)
    return None


def _is_pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
        return True
    except OSError:
        return False


def _is_port_free(port: int) -> bool:
    """Check if a port is available for binding."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", port))
        return True
    except OSError:
        return False


def _uvicorn_cmd(args: argparse.Namespace, reload: bool = False) -> list[str]:
    cmd = [
        sys.executable, "-m", "uvicorn",
        "src.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if reload:
        cmd.append("--reload")
    return cmd


def cmd_start(args: argparse.Namespace) -> None:
    """Start the server in the background."""
    existing_pid = _read_pid()
    if existing_pid is not None:
        print(f"Server already running (PID {existing_pid}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    if not _is_port_free(args.port):
        print(f"Port {args.port} is occupied. Stop the process holding it first.")
        sys.exit(1)

    print(f"Starting server on {args.host}:{args.port}...")
    proc = subprocess.Popen(_uvicorn_cmd(args), cwd=str(ROOT_DIR))
    PID_FILE.write_text(str(proc.pid))
    print(f"Server started (PID {proc.pid}).")
    print(f"  API:      http://{args.host}:{args.port}/api")
    print(f"  PID file: {PID_FILE}")


def cmd_stop(args: argparse.Namespace) -> None:
    """Stop the running server."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return

    print(f"Stopping server (PID {pid})...")
    try:
        os.kill(pid, signal.SIGTERM)
    except OSError:
        pass
    for _ in range(30):
        if not _is_pid_alive(pid):
            break
        time.sleep(0.1)
    else:
        print("Warning: Process did not exit within 3 seconds.")

    PID_FILE.unlink(missing_ok=True)
    print("Server stopped." if not _is_pid_alive(pid) else "Warning: Server may still be running.")


def cmd_restart(args: argparse.Namespace) -> None:
    """Stop then start the server."""
    cmd_stop(args)
    cmd_start(args)


def cmd_dev(args: argparse.Namespace) -> None:
    """Run the server in the foreground with auto-reload."""
    print(f"Starting server on {args.host}:{args.port} (reload mode)...")
    try:
        subprocess.run(_uvicorn_cmd(args, reload=True), cwd=str(ROOT_DIR))
    except KeyboardInterrupt:
        print("\nServer stopped.")


def cmd_status(args: argparse.Namespace) -> None:
    """Check if the server is running."""
    pid = _read_pid()
    if pid is not None:
        print(f"Server is running (PID {pid}).")
    elif not _is_port_free(args.port):
        print(f"No PID file. Port {args.port} is in use by another process.")
    else:
        print(f"Server is not running (port {args.port} is free).")


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from src.config import configure_logging
    from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database

    configure_logging()
    results = asyncio.run(initialize_database(create_backup_before=not args.no_backup))
    for r in results:
        print(f"  {r.version}: {'OK' if r.success else 'FAILED'} ({r.execution_time_ms}ms)")
    if any(not r.success for r in results):
        sys.exit(1)
    print(f"Applied {len(results)} migration(s).")


async def _create_admin(name: str, email: str, password: str) -> int:
    from src.application.dto.requests import CreateUserRequest
    from src.application.use_cases import CreateUserUseCase
    from src.core.entities.user import UserRole
    from src.infrastructure.storage.sqlite import close_pool
    from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database

    await initialize_database()
    try:
        user = await CreateUserUseCase().execute(
            CreateUserRequest(name=name, email=email, password=password, role=UserRole.ADMIN)
        )
    finally:
        await close_pool()
    return user.id  # type: ignore[return-value]


def cmd_create_admin(args: argparse.Namespace) -> None:
    """Create a verified admin account."""
    from src.config import configure_logging
    from src.core.exceptions import ShopLedgerError

    configure_logging()
    password = args.password or getpass.getpass("Password: ")
    try:
        user_id = asyncio.run(_create_admin(args.name, args.email, password))
    except ShopLedgerError as e:
        print(f"Error: {e.message}")
        sys.exit(1)
    print(f"Admin created (id {user_id}, {args.email}).")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Shop ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("start", cmd_start, "Start the server in the background"),
        ("restart", cmd_restart, "Restart the server"),
        ("dev", cmd_dev, "Run the server with auto-reload"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
        p.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
        p.set_defaults(func=func)

    p_stop = sub.add_parser("stop", help="Stop the server")
    p_stop.set_defaults(func=cmd_stop)

    p_status = sub.add_parser("status", help="Check if server is running")
    p_status.add_argument("--port", type=int, default=8000, help="Port to check (default: 8000)")
    p_status.set_defaults(func=cmd_status)

    p_migrate = sub.add_parser("migrate", help="Apply pending database migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    p_migrate.set_defaults(func=cmd_migrate)

    p_admin = sub.add_parser("create-admin", help="Create a verified admin account")
    p_admin.add_argument("--name", required=True)
    p_admin.add_argument("--email", required=True)
    p_admin.add_argument("--password", help="Prompted for when omitted")
    p_admin.set_defaults(func=cmd_create_admin)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
