"""Command-line interface for the token permissions console."""

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable

from permissions_console.backend.interfaces import LedgerBackend
from permissions_console.backend.memory import InMemoryLedgerBackend
from permissions_console.config import BackendType, Settings, get_settings
from permissions_console.container import Container
from permissions_console.controller import PermissionsController
from permissions_console.domain.delegates import Delegate, Role, SecurityToken
from permissions_console.domain.features import PERMISSIONS_FEATURE, Feature
from permissions_console.logging_config import configure_logging
from permissions_console.view import ConsoleView

Command = Callable[[PermissionsController], Awaitable[object]]


def demo_backend() -> InMemoryLedgerBackend:
    """An in-memory ledger with two tokens, used by `--backend memory`."""
    backend = InMemoryLedgerBackend()
    backend.add_token(
        SecurityToken(symbol="ACME", name="Acme Holdings Series A"),
        {
            PERMISSIONS_FEATURE: True,
            Feature.SHAREHOLDERS.value: True,
            Feature.ERC20_DIVIDENDS.value: False,
            Feature.USD_TIERED_STO.value: False,
        },
        delegates=[
            Delegate(
                address="0x" + "a1" * 20,
                description="Transfer agent",
                roles=(Role.PERMISSIONS_ADMINISTRATOR, Role.SHAREHOLDERS_OPERATOR),
            ),
        ],
    )
    backend.add_token(SecurityToken(symbol="BETA", name="Beta Real Estate Fund"))
    return backend


def build_settings(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    updates: dict[str, object] = {}
    if args.backend:
        updates["backend_type"] = BackendType(args.backend)
    if args.api_url:
        updates["ledger_api_url"] = args.api_url
    return settings.model_copy(update=updates) if updates else settings


def render(view: ConsoleView, *, delegates: bool = False) -> None:
    if view.token is not None:
        print(f"Token: {view.token.symbol} {view.token.name}".rstrip())

    if view.show_features and not delegates:
        print(f"\n{'Feature':<32} {'Status'}")
        print("-" * 42)
        for row in view.feature_rows:
            status = "enabled" if row.enabled else "disabled"
            print(f"{row.label:<32} {status}")

    if delegates:
        if not view.show_delegates:
            print("Role management is not enabled for this token")
        elif not view.delegate_rows:
            print("No delegates found")
        else:
            print(f"\n{'Address':<44} {'Role':<28} {'Description'}")
            print("-" * 90)
            for record in view.delegate_rows:
                print(f"{record.address:<44} {record.role:<28} {record.description}")
            print(f"\nTotal: {len(view.delegate_rows)} role assignments")

    if view.error:
        print(f"\nError: {view.error}")


async def run_command(
    args: argparse.Namespace,
    command: Command | None = None,
    *,
    delegates: bool = False,
    backend: LedgerBackend | None = None,
) -> int:
    settings = build_settings(args)
    configure_logging(settings)
    if backend is None and settings.backend_type == BackendType.MEMORY:
        backend = demo_backend()

    async with Container(settings=settings, backend=backend) as container:
        controller = container.controller
        await controller.load_tokens()
        if controller.connection_error:
            print(f"Error: {controller.connection_error}")
            return 1

        token = controller.find_token(args.symbol)
        if token is None:
            print(f"Error: Token not found: {args.symbol}")
            return 1

        controller.select_token(token)
        await controller.wait_idle()

        if command is not None:
            await command(controller)
            await controller.wait_idle()

        view = controller.view()
        render(view, delegates=delegates)
        return 1 if view.error else 0


def _run(args: argparse.Namespace, command: Command | None = None, **kwargs) -> int:
    return asyncio.run(run_command(args, command, **kwargs))


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    settings = get_settings()
    print(f"{settings.app_name} v{settings.app_version}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show feature status for a token."""
    return _run(args)


def cmd_delegates(args: argparse.Namespace) -> int:
    """List role assignments for a token."""
    return _run(args, delegates=True)


def cmd_enable(args: argparse.Namespace) -> int:
    return _run(args, lambda c: c.toggle_permissions(True))


def cmd_disable(args: argparse.Namespace) -> int:
    return _run(args, lambda c: c.toggle_permissions(False))


def cmd_assign(args: argparse.Namespace) -> int:
    return _run(
        args,
        lambda c: c.assign_role(args.address, args.role, args.description),
        delegates=True,
    )


def cmd_revoke(args: argparse.Namespace) -> int:
    return _run(
        args, lambda c: c.revoke_role(args.address, args.role), delegates=True
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pmc",
        description="Token Permissions Console - manage delegate roles on security tokens",
    )
    parser.add_argument(
        "--backend",
        "-b",
        choices=[t.value for t in BackendType],
        help="Ledger backend (default: from PMC_BACKEND_TYPE)",
        default=None,
    )
    parser.add_argument(
        "--api-url",
        help="Ledger gateway base URL (default: from PMC_LEDGER_API_URL)",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    status_parser = subparsers.add_parser("status", help="Show token feature status")
    status_parser.add_argument("symbol", help="Token symbol")
    status_parser.set_defaults(func=cmd_status)

    delegates_parser = subparsers.add_parser("delegates", help="List delegates and roles")
    delegates_parser.add_argument("symbol", help="Token symbol")
    delegates_parser.set_defaults(func=cmd_delegates)

    enable_parser = subparsers.add_parser("enable", help="Enable role management")
    enable_parser.add_argument("symbol", help="Token symbol")
    enable_parser.set_defaults(func=cmd_enable)

    disable_parser = subparsers.add_parser("disable", help="Disable role management")
    disable_parser.add_argument("symbol", help="Token symbol")
    disable_parser.set_defaults(func=cmd_disable)

    assign_parser = subparsers.add_parser("assign", help="Assign a role to a delegate")
    assign_parser.add_argument("symbol", help="Token symbol")
    assign_parser.add_argument("address", help="Delegate address (0x...)")
    assign_parser.add_argument("role", help="Role to assign")
    assign_parser.add_argument(
        "--description",
        "-D",
        default="",
        help="Delegate description",
    )
    assign_parser.set_defaults(func=cmd_assign)

    revoke_parser = subparsers.add_parser("revoke", help="Revoke a role from a delegate")
    revoke_parser.add_argument("symbol", help="Token symbol")
    revoke_parser.add_argument("address", help="Delegate address (0x...)")
    revoke_parser.add_argument("role", help="Role to revoke")
    revoke_parser.set_defaults(func=cmd_revoke)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
