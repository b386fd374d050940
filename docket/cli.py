"""
docket.cli
==========

Operator command line for the compliance engine.

Examples
--------
$ python -m docket.cli create-db            # first-time table creation
$ python -m docket.cli reconcile            # derive items from services
$ python -m docket.cli escalate             # PENDING → OVERDUE + tasks
$ python -m docket.cli cleanup-duplicates
$ python -m docket.cli chart --out images/
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Any, Optional, Sequence

from docket.cleanup import cleanup_duplicates, cleanup_invalid_clients
from docket.engine import ComplianceEngine, build_engine
from docket.settings import settings

logger = logging.getLogger(__name__)

COMMANDS = (
    "create-db",
    "reconcile",
    "escalate",
    "daily",
    "hourly",
    "cleanup-clients",
    "cleanup-duplicates",
    "stats",
    "chart",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m docket.cli",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Docket compliance engine utilities
            ----------------------------------
            create-db           Create the SQLite tables (safe if they exist)
            reconcile           Derive compliance items from active services
            escalate            Mark past-due items OVERDUE and escalate tasks
            daily / hourly      Run a scheduled trigger once, now
            cleanup-clients     Remove items whose client no longer exists
            cleanup-duplicates  Keep only the newest item per client/service/type
            stats               Print compliance statistics
            chart               Write status and correlation PNGs
            """
        ),
    )
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--portfolio", type=int, help="portfolio code for stats")
    parser.add_argument("--out", default="images", help="output directory for chart")
    return parser


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def run(command: str, engine: ComplianceEngine, args: argparse.Namespace) -> Any:
    if command == "reconcile":
        return engine.reconciler.reconcile_from_directory().to_dict()
    if command == "escalate":
        return engine.scheduler.escalate_overdue().to_dict()
    if command == "daily":
        return engine.scheduler.daily_run().to_dict()
    if command == "hourly":
        return engine.scheduler.hourly_check()
    if command == "cleanup-clients":
        return cleanup_invalid_clients(engine.registry, engine.clients).to_dict()
    if command == "cleanup-duplicates":
        return cleanup_duplicates(engine.registry).to_dict()
    if command == "stats":
        return engine.registry.statistics(portfolio_code=args.portfolio)
    if command == "chart":
        from docket import viz
        from docket.relationships import CorrelationGraph

        items = engine.registry.all_items()
        out = Path(args.out)
        graph = CorrelationGraph.build(items, engine.bridge.all_tasks())
        return {
            "status_chart": str(viz.status_summary(items, out / "compliance_status.png")),
            "correlation_chart": str(viz.plot_correlation_graph(graph, out / "compliance_tasks.png")),
        }
    raise ValueError(f"unknown command {command}")


def main(argv: Optional[Sequence[str]] = None, engine: Optional[ComplianceEngine] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command == "create-db":
        from docket.db import create_all

        create_all()
        print("✅ docket.db schema initialised")
        return 0

    if engine is None:
        from docket.db import create_all

        create_all()
        engine = build_engine()
    _emit(run(args.command, engine, args))
    return 0


if __name__ == "__main__":
    sys.exit(main())
