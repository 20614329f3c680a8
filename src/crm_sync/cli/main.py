"""Main CLI entry point."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(
        prog="crm-sync",
        description="Normalize license webhook events and sync them to the CRM",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("CRM_SYNC_LOG_LEVEL", "INFO"),
        help="Logging level (default: CRM_SYNC_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # process
    process_parser = subparsers.add_parser("process", help="Run the pipeline on a webhook payload")
    process_parser.add_argument(
        "payload",
        type=Path,
        help="Path to webhook payload JSON",
    )
    process_parser.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="Rules file (JSON or YAML). Default: CRM_SYNC_RULES_PATH or bundled rules",
    )
    process_parser.add_argument(
        "--store",
        type=Path,
        default=None,
        metavar="DB_PATH",
        help="Dead-letter failures (and record outcome events) in SQLite at given path",
    )
    process_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Use an in-memory CRM instead of the live API",
    )
    process_parser.add_argument(
        "--preview",
        action="store_true",
        help="Print normalized record and CRM payloads only; no CRM calls",
    )
    process_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write result JSON to file (default: stdout)",
    )

    # rules
    rules_parser = subparsers.add_parser("rules", help="Inspect a rules file")
    rules_parser.add_argument(
        "action",
        choices=["check", "show"],
        help="Check for event overlaps, or print the parsed rules",
    )
    rules_parser.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="Rules file (JSON or YAML)",
    )

    # deadletter
    dl_parser = subparsers.add_parser("deadletter", help="Inspect dead-lettered payloads")
    dl_parser.add_argument(
        "action",
        choices=["list", "show", "count"],
        help="List dead letters, show one, or print count",
    )
    dl_parser.add_argument(
        "--db",
        type=Path,
        default=Path(os.environ.get("CRM_SYNC_DB", "crm_sync.db")),
        help="Path to SQLite database",
    )
    dl_parser.add_argument("--id", type=str, default=None, help="Dead letter id (for show)")
    dl_parser.add_argument("--limit", type=int, default=None, help="Max entries to list")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "process":
        _run_process(args)
    elif args.command == "rules":
        _run_rules(args)
    elif args.command == "deadletter":
        _run_deadletter(args)
    else:
        parser.print_help()


def _emit(data, output: Path | None) -> None:
    text = json.dumps(data, indent=2, default=str)
    if output:
        output.write_text(text, encoding="utf-8")
        print(f"Wrote result to {output}")
    else:
        print(text)


def _run_process(args: argparse.Namespace) -> None:
    """Run process command."""
    from crm_sync.crm import BiginCRMClient, InMemoryCRMClient
    from crm_sync.pipeline import WebhookPipeline
    from crm_sync.rules import load_ruleset

    try:
        payload = json.loads(args.payload.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SystemExit(f"Cannot read payload {args.payload}: {e}")

    rules = load_ruleset(args.rules)

    if args.preview:
        pipeline = WebhookPipeline(rules)
        try:
            _emit(pipeline.preview(payload), args.output)
        except ValueError as e:
            raise SystemExit(str(e))
        return

    if args.dry_run:
        client = InMemoryCRMClient()
    else:
        try:
            client = BiginCRMClient()
        except ValueError as e:
            raise SystemExit(str(e))
    pipeline = WebhookPipeline(rules, client)
    result = pipeline.process(payload)

    if args.store is not None:
        from crm_sync.store import DeadLetterStore

        store = DeadLetterStore(args.store)
        if result.success:
            store.write_event("success", {"license": result.data.get("license") if result.data else None})
        else:
            letter = store.write(payload, result.error or "unknown error")
            store.write_event("failure", {"deadletter": letter.id, "error": result.error})
            print(f"Dead-lettered as {letter.id}", file=sys.stderr)

    _emit(result.to_dict(), args.output)
    if not result.success:
        raise SystemExit(1)


def _run_rules(args: argparse.Namespace) -> None:
    """Run rules command."""
    from crm_sync.rules import load_ruleset

    rules = load_ruleset(args.rules)
    if args.action == "show":
        print(json.dumps(rules.model_dump(mode="json", by_alias=True), indent=2))
        return

    overlaps = rules.event_overlaps()
    if not overlaps:
        print("OK: no event name appears in more than one category")
        return
    for event, categories in overlaps.items():
        print(f"  {event!r}: {', '.join(categories)} (classified as {categories[0]})")
    raise SystemExit(1)


def _run_deadletter(args: argparse.Namespace) -> None:
    """Run deadletter command."""
    from crm_sync.store import DeadLetterStore

    store = DeadLetterStore(args.db)
    if args.action == "count":
        print(store.count())
    elif args.action == "list":
        for letter in store.list(limit=args.limit):
            print(f"  {letter.id}  {letter.created_at.isoformat()}  {letter.error}")
    elif args.action == "show":
        if not args.id:
            raise SystemExit("deadletter show requires --id")
        letter = store.get(args.id)
        if letter is None:
            raise SystemExit(f"Dead letter not found: {args.id}")
        print(json.dumps(letter.to_dict(), indent=2, default=str))


if __name__ == "__main__":
    main()
