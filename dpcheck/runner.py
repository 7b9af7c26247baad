#!/usr/bin/env python3
"""dpcheck scenario runner.

Scenarios run one after another, each in its own browser session.
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from dpcheck.core import constants
from dpcheck.core.config import ScenarioConfig
from dpcheck.core.events import EventType, FlowEvent
from dpcheck.core.exceptions import ConfigException
from dpcheck.core.runner import ScenarioResult, ScenarioRunner
from dpcheck.utils.logging import get_logger
from dpcheck.utils.timestamp import random_string

CONFIG_DIR = Path(__file__).parent / "configs"

IS_CI = os.getenv("CI") == "true" or os.getenv("GITHUB_ACTIONS") == "true"
IS_INTERACTIVE = sys.stdout.isatty() and not IS_CI

logger = get_logger("runner")


def resolve_scenario(name: str) -> Path:
    """Accept a YAML path or the name of a bundled scenario."""
    candidate = Path(name)
    if candidate.is_file():
        return candidate
    bundled = CONFIG_DIR / f"{name}.yaml"
    if bundled.is_file():
        return bundled
    raise ConfigException(f"Scenario not found: {name}")


def available_scenarios() -> List[str]:
    return sorted(p.stem for p in CONFIG_DIR.glob("*.yaml"))


class ProgressReporter:
    """Moves a rich progress task along as the flow publishes step events."""

    def __init__(self, progress: Progress, task_id: Any):
        self.progress = progress
        self.task_id = task_id

    def __call__(self, event: FlowEvent) -> None:
        if event.type == EventType.FLOW_STARTED:
            self.progress.update(self.task_id, total=len(event.steps))
        elif event.type == EventType.STEP_STARTED:
            self.progress.update(
                self.task_id, description=f"[bold]{event.scenario}[/] • {event.step}"
            )
        elif event.type == EventType.STEP_COMPLETED:
            self.progress.update(self.task_id, advance=1)
        elif event.type == EventType.STEP_FAILED:
            self.progress.update(
                self.task_id,
                advance=1,
                description=f"[bold red]{event.scenario}[/] • {event.step} failed",
            )


async def run_scenario(
    config: ScenarioConfig,
    run_id: str,
    progress: Optional[Progress] = None,
    **runner_kwargs: Any,
) -> ScenarioResult:
    listeners = []
    if progress is not None:
        task_id = progress.add_task(f"[bold]{config.name}[/] • starting", total=None)
        listeners.append(ProgressReporter(progress, task_id))
    return await ScenarioRunner(
        config, run_id=run_id, listeners=listeners, **runner_kwargs
    ).run()


def print_summary(results: List[ScenarioResult], console: Console) -> None:
    table = Table(title="Scenario Results", show_lines=False)
    table.add_column("Scenario")
    table.add_column("Status")
    table.add_column("Delivered", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Duration", justify="right")

    for result in results:
        status = "[green]PASSED[/]" if result.success else "[red]FAILED[/]"
        table.add_row(
            result.name,
            status,
            str(result.metrics.get("delivered", "-")),
            str(result.metrics.get("failed", "-")),
            f"{result.duration:.2f}s",
        )

    console.print()
    console.print(table)
    for result in results:
        for error in result.errors:
            console.print(f"[red]• {result.name}: {error}[/]")
        for shot in result.screenshots:
            console.print(f"📸 {result.name}: {shot}")


async def run_all(args: argparse.Namespace) -> int:
    configs: Dict[str, ScenarioConfig] = {}
    for name in args.scenarios:
        config = ScenarioConfig.from_file(resolve_scenario(name))
        updates: Dict[str, Any] = {}
        if args.env:
            updates["environment"] = args.env
        if args.headed:
            updates["browser"] = config.browser.model_copy(update={"headless": False})
        if updates:
            config = config.model_copy(update=updates)
        run_id = f"{args.run_id_prefix}{config.name}-{random_string(6).lower()}"
        configs[run_id] = config

    console = Console()
    results: List[ScenarioResult] = []
    if IS_INTERACTIVE and not args.no_ui:
        progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            TimeElapsedColumn(),
            console=console,
        )
        with progress:
            for run_id, config in configs.items():
                results.append(await run_scenario(config, run_id, progress))
    else:
        for run_id, config in configs.items():
            logger.info(f"▶ Starting: {config.name}")
            results.append(await run_scenario(config, run_id))

    print_summary(results, console)
    return 0 if all(r.success for r in results) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dpcheck",
        description="Browser end-to-end verification of a data-plane dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s identify_webhook                 # Run a bundled scenario
  %(prog)s scenarios/smoke.yaml --env dev   # Run a scenario file against dev
  %(prog)s --list                           # List bundled scenarios
        """,
    )
    parser.add_argument("scenarios", nargs="*", help="Scenario names or YAML paths")
    parser.add_argument("--list", action="store_true", help="List bundled scenarios")
    parser.add_argument(
        "--env",
        default=None,
        help=f"Dashboard environment (default: ${constants.ENVIRONMENT_ENV} or qa)",
    )
    parser.add_argument("--env-file", default=".env", help="dotenv file to load first")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--run-id-prefix", default="dpcheck-", help="Prefix for run IDs")
    parser.add_argument("--no-ui", action="store_true", help="Disable the Rich progress UI")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.list:
        for name in available_scenarios():
            print(name)
        return 0

    if not args.scenarios:
        print("❌ No scenarios specified. Use scenario names, paths or --list")
        return 1

    env_path = Path(args.env_file)
    if env_path.is_file():
        load_dotenv(env_path, override=True)
        logger.info(f"✅ Loaded environment from {env_path}")

    try:
        return asyncio.run(run_all(args))
    except ConfigException as e:
        print(f"❌ {e.message}")
        return 1
    except KeyboardInterrupt:
        print("\n⚠️  Run interrupted")
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
