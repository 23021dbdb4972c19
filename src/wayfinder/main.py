"""Main entry point for the Wayfinder journey explorer."""

import asyncio
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.table import Table

from .adapters import PlaywrightPageDriver, LLMDecisionOracle
from .core import (
    EventType,
    ExplorationEngine,
    ExplorationEvent,
    Journey,
    JourneyCache,
    JourneyStore,
    JsonFileStorage
)
from .utils import log, config, console, create_progress, TargetConfig


def print_event(event: ExplorationEvent):
    """Render engine events on the console as they happen."""
    if event.type == EventType.STARTED:
        console.print(f"\n[bold blue]🚀 Exploration started (max depth {event.payload.get('max_depth')})[/bold blue]\n")
    elif event.type == EventType.PAGE_SCANNED:
        console.print(
            f"  🔍 Scanned [cyan]{event.payload['key']}[/cyan] "
            f"({event.payload['meaningful_count']} meaningful elements)"
        )
    elif event.type == EventType.JOURNEY_FOUND:
        journey: Journey = event.payload["journey"]
        console.print(f"  🎯 [green]Journey found[/green]: {journey.name} ({len(journey.steps)} steps)")
    elif event.type == EventType.PAUSED:
        console.print("  [yellow]⏸  Paused[/yellow]")
    elif event.type == EventType.ERROR:
        console.print(f"  [red]⚠️  {event.payload.get('message')}[/red]")
    elif event.type == EventType.COMPLETED:
        console.print(
            f"\n[bold green]✅ Exploration completed: {event.payload.get('journeys')} journeys "
            f"in {event.payload.get('rounds')} rounds[/bold green]\n"
        )


async def run_exploration(
    target: TargetConfig,
    headless: bool = False,
    llm_provider: str = "openai",
    fresh: bool = False,
    **overrides
) -> List[Journey]:
    """
    Explore a single target and store what was found.

    Args:
        target: App to explore
        headless: Run browser in headless mode
        llm_provider: LLM provider to use
        fresh: Discard cached page analysis first
        **overrides: ExplorationConfig field overrides

    Returns:
        Journeys discovered in this session
    """
    exploration_config = config.exploration_config(target, **overrides)
    cache = JourneyCache(JsonFileStorage(config.cache_dir))
    if fresh:
        log.info("Clearing cached page analysis")
        cache.clear()
    store = JourneyStore()

    console.print(f"\n[bold]🌐 Target:[/bold] {target.name} ({target.start_url})")
    console.print(f"[bold]🤖 LLM:[/bold] {llm_provider}")
    console.print(f"[bold]📐 Max depth:[/bold] {exploration_config.max_depth}\n")

    oracle = LLMDecisionOracle(provider=llm_provider)

    async with PlaywrightPageDriver(
        target_config=target,
        headless=headless,
        browser_type=config.browser_type
    ) as driver:
        if not await driver.navigate(target.start_url):
            console.print(f"[red]Error: could not open {target.start_url}[/red]")
            return []

        engine = ExplorationEngine(
            driver=driver,
            oracle=oracle,
            exploration_config=exploration_config,
            cache=cache,
            store=store
        )
        engine.subscribe(print_event)

        with create_progress() as progress:
            task = progress.add_task("Exploring", total=exploration_config.max_rounds)

            def track_rounds(event: ExplorationEvent):
                progress.update(
                    task,
                    completed=engine.rounds,
                    description=f"Exploring (depth {engine.current_depth}, {len(engine.journeys)} journeys)"
                )

            engine.subscribe(track_rounds)
            journeys = await engine.start()

    # Confirmed journeys were saved by the engine; keep pending ones for review
    for journey in journeys:
        if journey.status == "pending" and not store.has_similar(journey):
            store.add(journey)

    return journeys


def list_targets():
    """List all configured targets."""
    table = Table(title="Available Targets", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Start URL", style="green")
    table.add_column("Description", style="yellow")

    for target_name, target_config in config.targets.items():
        table.add_row(
            target_name,
            target_config.start_url,
            target_config.description or "N/A"
        )

    console.print(table)


def list_journeys(status: Optional[str] = None):
    """List stored journeys."""
    store = JourneyStore()
    table = Table(title="Stored Journeys", show_header=True)
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Steps", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Status", justify="center")

    for journey in store.list(status):
        table.add_row(
            journey.id[:8],
            journey.name[:60],
            str(len(journey.steps)),
            str(journey.confidence),
            journey.status
        )

    console.print(table)


def resolve_journey_id(store: JourneyStore, prefix: str) -> Optional[str]:
    """Expand a (possibly shortened) journey id."""
    matches = [j.id for j in store.list() if j.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        console.print(f"[red]Error: no journey matches '{prefix}'[/red]")
    else:
        console.print(f"[red]Error: '{prefix}' is ambiguous ({len(matches)} journeys)[/red]")
    return None


def show_summary(journeys: List[Journey]):
    """Show summary of discovered journeys."""
    if not journeys:
        console.print("[yellow]No journeys discovered[/yellow]")
        return

    console.print("\n[bold cyan]═══ Exploration Summary ═══[/bold cyan]\n")

    table = Table(show_header=True)
    table.add_column("Journey", style="cyan")
    table.add_column("Steps", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Status", justify="center")

    for journey in journeys:
        table.add_row(
            journey.name[:60],
            str(len(journey.steps)),
            str(journey.confidence),
            journey.status
        )

    console.print(table)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Wayfinder - AI-guided discovery of user journeys",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Explore an app from a URL
  wayfinder --url https://app.example.com --max-depth 5

  # Explore a configured target
  wayfinder --target demo_bank --headless

  # Review discovered journeys
  wayfinder --list-journeys --status pending
  wayfinder --confirm 3f2a9c1e
  wayfinder --export 3f2a9c1e --out journey.md
        """
    )

    # Exploration target
    parser.add_argument("--url", type=str, help="Start URL to explore")
    parser.add_argument("--target", type=str, help="Target name from config/targets.yaml")

    # Optional parameters
    parser.add_argument("--max-depth", type=int, help="Maximum exploration depth")
    parser.add_argument("--delay", type=int, help="Delay between actions in milliseconds")
    parser.add_argument("--max-rounds", type=int, help="Maximum exploration rounds")
    parser.add_argument("--auto-save", action="store_true", default=None,
                       help="Confirm journeys automatically")
    parser.add_argument("--fresh", action="store_true", help="Clear cached page analysis first")
    parser.add_argument("--headless", action="store_true", help="Run in headless mode")
    parser.add_argument("--llm-provider", type=str, default=config.llm_provider,
                       choices=["openai", "anthropic"], help="LLM provider")

    # Info commands
    parser.add_argument("--list-targets", action="store_true", help="List configured targets")
    parser.add_argument("--list-journeys", action="store_true", help="List stored journeys")
    parser.add_argument("--status", type=str, choices=["pending", "confirmed", "discarded"],
                       help="Filter for --list-journeys")

    # Journey review
    parser.add_argument("--confirm", type=str, metavar="ID", help="Confirm a pending journey")
    parser.add_argument("--discard", type=str, metavar="ID", help="Discard a journey")
    parser.add_argument("--export", type=str, metavar="ID", help="Export a journey as Markdown")
    parser.add_argument("--out", type=str, help="Output path for --export")

    args = parser.parse_args()

    # Info commands
    if args.list_targets:
        list_targets()
        return

    if args.list_journeys:
        list_journeys(args.status)
        return

    # Journey review commands
    if args.confirm or args.discard or args.export:
        store = JourneyStore()
        journey_id = resolve_journey_id(store, args.confirm or args.discard or args.export)
        if not journey_id:
            sys.exit(1)
        if args.confirm:
            store.confirm(journey_id)
            console.print(f"[green]Confirmed {journey_id}[/green]")
        elif args.discard:
            store.discard(journey_id)
            console.print(f"[yellow]Discarded {journey_id}[/yellow]")
        else:
            path = store.export_markdown(journey_id, Path(args.out) if args.out else None)
            console.print(f"[green]Exported to {path}[/green]")
        return

    # Resolve target
    if args.target:
        target = config.get_target_config(args.target)
        if not target:
            console.print(f"[red]Error: Unknown target '{args.target}'[/red]")
            console.print(f"[yellow]Available targets: {', '.join(config.targets.keys())}[/yellow]")
            return
    elif args.url:
        target = TargetConfig(name=args.url, start_url=args.url)
    else:
        parser.print_help()
        return

    # Validate API keys
    if args.llm_provider == "openai" and not config.openai_api_key:
        console.print("[red]Error: OPENAI_API_KEY not set in environment[/red]")
        return

    if args.llm_provider == "anthropic" and not config.anthropic_api_key:
        console.print("[red]Error: ANTHROPIC_API_KEY not set in environment[/red]")
        return

    try:
        journeys = asyncio.run(run_exploration(
            target,
            headless=args.headless or config.headless,
            llm_provider=args.llm_provider,
            fresh=args.fresh,
            max_depth=args.max_depth,
            inter_action_delay=args.delay,
            max_rounds=args.max_rounds,
            auto_save_journeys=args.auto_save
        ))
        show_summary(journeys)

    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Interrupted by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[red]❌ Error: {e}[/red]")
        log.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
