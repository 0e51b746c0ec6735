# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from dotenv import load_dotenv

from pricewatch.app import approve, record_price, reject, request_workflow, submit_prices
from pricewatch.config import ConfigurationError, configure_logging
from pricewatch.domain.errors import PricewatchError
from pricewatch.domain.model import Actor, ChangeType, EntityType, UserRole
from pricewatch.domain.time_windows import parse_iso_datetime

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from pricewatch.domain.ingestion import SubmissionResult
    from pricewatch.domain.model import ApprovalWorkflow

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class UsageError(ValueError):
    """Raised for command line input that parses but makes no sense."""


def _uuid_arg(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid UUID: {value}") from exc


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pricewatch", description="Submit and review commodity price observations"
    )
    parser.add_argument(
        "--user-id",
        type=_uuid_arg,
        required=True,
        help="Id of the authenticated caller",
    )
    parser.add_argument(
        "--role",
        type=str.upper,
        choices=[role.value for role in UserRole],
        required=True,
        help="Role of the authenticated caller",
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    submit = subparsers.add_parser("submit", help="Queue scraped prices for review")
    submit.add_argument(
        "path",
        nargs="?",
        default="-",
        help="JSON file holding one record or a list of records ('-' reads stdin)",
    )

    request = subparsers.add_parser("request", help="Open a workflow for an arbitrary change")
    request.add_argument(
        "--entity-type",
        type=str.upper,
        choices=[entity_type.value for entity_type in EntityType],
        required=True,
    )
    request.add_argument(
        "--change-type",
        type=str.upper,
        choices=[change_type.value for change_type in ChangeType],
        required=True,
    )
    request.add_argument(
        "--entity-id",
        type=_uuid_arg,
        help="Target of an update or delete (required for both; creations get a fresh id)",
    )
    request.add_argument(
        "--data",
        required=True,
        help="Change data as a JSON object, or @path to read it from a file",
    )

    record = subparsers.add_parser("record", help="Record an observation without review")
    record.add_argument("--commodity-id", type=_uuid_arg, required=True)
    record.add_argument("--city-id", type=_uuid_arg, required=True)
    record.add_argument("--source-id", type=_uuid_arg, required=True)
    record.add_argument("--price", required=True, help="Exact decimal price")
    record.add_argument("--currency", required=True)
    record.add_argument("--unit", required=True)
    record.add_argument("--observed-at", help="ISO-8601 timestamp (defaults to now)")

    approve_cmd = subparsers.add_parser("approve", help="Approve a pending workflow")
    approve_cmd.add_argument("workflow_id", type=_uuid_arg)
    approve_cmd.add_argument(
        "--override",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Replace a change data field before applying (repeatable)",
    )

    reject_cmd = subparsers.add_parser("reject", help="Reject a pending workflow")
    reject_cmd.add_argument("workflow_id", type=_uuid_arg)

    return parser.parse_args(list(argv))


def _parse_overrides(items: Sequence[str]) -> dict[str, Any]:
    """Turn ``KEY=VALUE`` pairs into a mapping; values are JSON when they parse as JSON."""

    overrides: dict[str, Any] = {}
    for item in items:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            raise UsageError(f"Invalid override (expected KEY=VALUE): {item}")
        try:
            value: Any = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        overrides[key.strip()] = value
    return overrides


def _read_json(source: str) -> Any:
    try:
        if source == "-":
            return json.load(sys.stdin)
        return json.loads(Path(source).read_text(encoding="utf-8"))
    except OSError as exc:
        raise UsageError(f"Cannot read {source}: {exc.strerror}") from exc
    except json.JSONDecodeError as exc:
        raise UsageError(f"Invalid JSON in {source}: {exc.msg}") from exc


def _load_records(path: str) -> list[dict[str, Any]]:
    document = _read_json(path)
    records = document if isinstance(document, list) else [document]
    for record in records:
        if not isinstance(record, dict):
            raise UsageError("Each submitted record must be a JSON object")
    return records


def _load_change_data(value: str) -> dict[str, Any]:
    if value.startswith("@"):
        document = _read_json(value[1:])
    else:
        try:
            document = json.loads(value)
        except json.JSONDecodeError as exc:
            raise UsageError(f"Invalid JSON in --data: {exc.msg}") from exc
    if not isinstance(document, dict):
        raise UsageError("--data must be a JSON object")
    return document


def _result_json(result: SubmissionResult) -> str:
    return json.dumps(
        {
            "success": result.success,
            "message": result.message,
            "outcome": result.outcome.value,
            "workflowId": str(result.workflow_id) if result.workflow_id else None,
            "skipped": result.skipped,
        }
    )


def _workflow_json(workflow: ApprovalWorkflow) -> str:
    return json.dumps(
        {
            "id": str(workflow.id),
            "entityType": workflow.entity_type.value,
            "entityId": str(workflow.entity_id),
            "changeType": workflow.change_type.value,
            "status": workflow.status.value,
        }
    )


def _run(args: argparse.Namespace) -> int:
    actor = Actor(user_id=args.user_id, role=UserRole(args.role))

    if args.command == "submit":
        results = submit_prices(_load_records(args.path), actor=actor)
        for result in results:
            print(_result_json(result))
        return EXIT_OK if all(result.success for result in results) else EXIT_FAILURE

    if args.command == "request":
        workflow = request_workflow(
            actor=actor,
            entity_type=args.entity_type,
            change_type=args.change_type,
            change_data=_load_change_data(args.data),
            entity_id=args.entity_id,
        )
        print(_workflow_json(workflow))
        return EXIT_OK

    if args.command == "record":
        try:
            observed_at = parse_iso_datetime(args.observed_at) if args.observed_at else None
        except ValueError as exc:
            raise UsageError(str(exc)) from exc
        observation = record_price(
            actor=actor,
            commodity_id=args.commodity_id,
            city_id=args.city_id,
            source_id=args.source_id,
            price_value=args.price,
            price_currency=args.currency,
            price_unit=args.unit,
            observed_at=observed_at,
        )
        print(json.dumps({"id": str(observation.id)}))
        return EXIT_OK

    if args.command == "approve":
        workflow = approve(
            args.workflow_id,
            actor=actor,
            overrides=_parse_overrides(args.override) or None,
        )
        print(_workflow_json(workflow))
        return EXIT_OK

    if args.command == "reject":
        workflow = reject(args.workflow_id, actor=actor)
        print(_workflow_json(workflow))
        return EXIT_OK

    raise UsageError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    """Main application entry point."""

    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        return _run(parsed_args)
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except (PricewatchError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        return EXIT_FAILURE


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    sys.exit(main())
