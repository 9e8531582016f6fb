"""Command-line interface for running and inspecting the expense service."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

from my_expenses import __version__
from my_expenses.config import Settings, SettingsError, load_settings
from my_expenses.database import Database
from my_expenses.domain.errors import ExpenseTrackerError
from my_expenses.domain.report import IncomeItem, build_monthly_report
from my_expenses.logging import configure_logging
from my_expenses.repositories import SqlCategoryRepository, SqlExpenseRepository

DESCRIPTION = "My Expenses GraphQL service"


def _parse_decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"Expected a number, got {value!r}") from exc


def _parse_income(value: str) -> IncomeItem:
    """Parse ``DESCRIPTION=AMOUNT`` into an :class:`IncomeItem`."""

    description, sep, amount = value.rpartition("=")
    if not sep or not description.strip():
        raise argparse.ArgumentTypeError("Expected DESCRIPTION=AMOUNT, e.g. bonus=300")
    return IncomeItem(description=description.strip(), amount=_parse_decimal(amount))


def _json_default(value: object) -> str:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="my-expenses", description=DESCRIPTION)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file (defaults to $MY_EXPENSES_CONFIG)",
    )
    parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Mirror logs to artifacts/logs/my_expenses.log in JSON format (overrides settings)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    serve = sub.add_parser("serve", help="Run the GraphQL API server")
    serve.add_argument("--host", default=None, help="Bind address (overrides settings)")
    serve.add_argument("--port", type=int, default=None, help="Port (overrides settings)")

    sub.add_parser("init-db", help="Create the database tables")
    sub.add_parser("categories", help="List every stored category")

    report = sub.add_parser("report", help="Print the monthly report as JSON")
    report.add_argument("--month", type=int, required=True, help="Month number (1-12)")
    report.add_argument("--year", type=int, required=True, help="Calendar year")
    report.add_argument("--salary", type=_parse_decimal, required=True, help="Salary figure")
    report.add_argument(
        "--income",
        type=_parse_income,
        action="append",
        default=[],
        metavar="DESCRIPTION=AMOUNT",
        help="Additional income line item; repeat for several",
    )
    return parser


def _handle_serve(args: argparse.Namespace, settings: Settings) -> None:
    import uvicorn

    from my_expenses.server import create_app

    host = args.host if args.host is not None else settings.host
    port = args.port if args.port is not None else settings.port
    print(f"[my-expenses] serving GraphQL at http://{host}:{port}/graphql")
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())


def _handle_init_db(database: Database) -> None:
    database.create_schema()
    print(f"[my-expenses] schema ready url={database.engine.url.render_as_string(hide_password=True)}")


def _handle_categories(database: Database) -> None:
    database.create_schema()
    with database.session_scope() as session:
        categories = SqlCategoryRepository(session).find_all()
    if not categories:
        print("[my-expenses] no categories found")
        return
    for category in categories:
        print(f"- {category.name} (ID: {category.id})")
        print(f"  Description: {category.description or 'N/A'}")
        print(f"  Color: {category.color}")


def _handle_report(args: argparse.Namespace, database: Database) -> None:
    database.create_schema()
    with database.session_scope() as session:
        expenses = SqlExpenseRepository(session).find_by_month_and_year(args.month, args.year)
    report = build_monthly_report(args.month, args.year, args.salary, args.income, expenses)
    print(json.dumps(report.to_dict(), default=_json_default, indent=2))


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings(args.config)
    except SettingsError as exc:
        parser.exit(2, f"[my-expenses] invalid settings: {exc}\n")
    json_logs = args.json_logs if args.json_logs is not None else settings.json_logs
    configure_logging(settings.log_level, json_logs=json_logs)
    if args.cmd == "serve":
        _handle_serve(args, settings)
        return
    # SQL echo would interleave with the JSON printed on stdout.
    database = Database(settings.database_url)
    try:
        if args.cmd == "init-db":
            _handle_init_db(database)
        elif args.cmd == "categories":
            _handle_categories(database)
        elif args.cmd == "report":
            _handle_report(args, database)
        else:
            print(f"[my-expenses] command = {args.cmd}")
    except ExpenseTrackerError as exc:
        print(f"[my-expenses] error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
