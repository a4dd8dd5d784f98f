#!/usr/bin/env python3
"""Page Composer CLI - compose, validate, and inspect page compositions.

Usage:
    # Compose a project from a request file
    python main.py --request ./request.json

    # Registry-only composition without images
    python main.py --request ./request.json --mode registry --no-images

    # Strict validation for export
    python main.py --request ./request.json --export --seed 42

    # Inspect the catalog or an existing composition
    python main.py --list-patterns --category hero
    python main.py --validate ./outputs/acme-1a2b3c/composition.json
"""

import asyncio
import sys
import logging
from typing import Optional

try:
    import click
    from pydantic import ValidationError
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.panel import Panel
    from rich.progress import Progress, SpinnerColumn, TextColumn
    from rich.table import Table
except ImportError:
    print("Missing dependencies. Run: pip install -e .")
    sys.exit(1)

from contracts import ComposerMode, CompositionIntent, PatternCategory
from orchestrator import (
    Composer,
    CompositionError,
    ProgressEvent,
    load_composition,
    load_request,
    write_output,
)
from images import estimate_images
from patterns import (
    RegistryError,
    get_registry,
    is_valid_for_export,
    suggest_fixes,
    validate_definition,
)
from providers import list_providers as get_available_providers


console = Console()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=verbose)],
    )
    # Provider SDKs are chatty at DEBUG
    for noisy in ("LiteLLM", "litellm", "httpx", "httpcore", "openai", "anthropic"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def print_patterns(category: Optional[str], inspired_by: Optional[str] = None) -> None:
    registry = get_registry()
    patterns = registry.by_category(category) if category else registry.all()
    if inspired_by:
        inspired = {p.id for p in registry.by_inspiration(inspired_by)}
        patterns = [p for p in patterns if p.id in inspired]
    table = Table(title=f"Patterns ({len(patterns)})")
    table.add_column("ID", style="cyan")
    table.add_column("Category")
    table.add_column("Variants")
    table.add_column("Tags", style="dim")
    for pattern in patterns:
        table.add_row(pattern.id, pattern.category.value, ", ".join(pattern.variants), ", ".join(pattern.tags))
    console.print(table)


def print_validation(path: str, export: bool) -> bool:
    result = validate_definition(load_composition(path), get_registry())
    export_ready = is_valid_for_export(result)
    if not result.issues:
        console.print("[green]✓ Composition is valid and ready for export[/green]")
        return True
    for issue, hint in zip(result.issues, suggest_fixes(result)):
        color = "red" if issue.severity.value == "error" else "yellow"
        console.print(f"  [{color}]{issue.severity.value:7}[/{color}] {issue.code.value}: {issue.message}")
        console.print(f"          [dim]{hint}[/dim]")
    console.print(f"\n[bold]Valid for preview:[/bold] {result.valid}")
    console.print(f"[bold]Ready for export:[/bold]  {export_ready}")
    return export_ready if export else result.valid


@click.command()
@click.option(
    "--request", "-r", "request_path",
    required=False,
    help="Path to a CompositionRequest JSON file"
)
@click.option(
    "--output", "-o", "output_dir",
    default=None,
    help="Output directory (default: ./outputs)"
)
@click.option(
    "--mode", "-m",
    type=click.Choice([m.value for m in ComposerMode]),
    default=None,
    help="Override the request's matching mode"
)
@click.option(
    "--no-images",
    is_flag=True,
    help="Skip placeholder image generation"
)
@click.option(
    "--no-gap-filling",
    is_flag=True,
    help="Never design custom sections"
)
@click.option(
    "--provider", "-p",
    type=click.Choice(["litellm", "anthropic", "openai", "deepseek", "gemini"]),
    default=None,
    help="LLM provider (default: litellm with tier routing)"
)
@click.option(
    "--model",
    default=None,
    help="Model or tier (e.g., fast, quality, gpt-4o-mini)"
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for reproducible ids"
)
@click.option(
    "--export", "export_intent",
    is_flag=True,
    help="Validate strictly for export (unresolved images block export)"
)
@click.option(
    "--list-patterns",
    is_flag=True,
    help="List catalog patterns and exit"
)
@click.option(
    "--category",
    type=click.Choice([c.value for c in PatternCategory]),
    default=None,
    help="Filter --list-patterns by category"
)
@click.option(
    "--inspired-by",
    default=None,
    help="Filter --list-patterns to patterns inspired by a site, e.g. linear.app"
)
@click.option(
    "--list-providers",
    is_flag=True,
    help="List available providers and exit"
)
@click.option(
    "--validate", "validate_path",
    default=None,
    help="Validate an existing composition.json and exit"
)
@click.option(
    "--estimate-images", "estimate_path",
    default=None,
    help="Estimate image work for an existing composition.json and exit"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Verbose output"
)
def main(
    request_path: Optional[str],
    output_dir: Optional[str],
    mode: Optional[str],
    no_images: bool,
    no_gap_filling: bool,
    provider: Optional[str],
    model: Optional[str],
    seed: Optional[int],
    export_intent: bool,
    list_patterns: bool,
    category: Optional[str],
    inspired_by: Optional[str],
    list_providers: bool,
    validate_path: Optional[str],
    estimate_path: Optional[str],
    verbose: bool,
):
    """Page Composer: assemble page compositions from a pattern catalog."""
    configure_logging(verbose)

    try:
        if list_providers:
            console.print("[bold]Available LLM Providers:[/bold]\n")
            for name, available in get_available_providers().items():
                status = "[green]✓ Ready[/green]" if available else "[red]✗ No API key[/red]"
                console.print(f"  {name:12} {status}")
            console.print("\n[dim]Set API keys via environment variables:[/dim]")
            console.print("  ANTHROPIC_API_KEY, OPENAI_API_KEY, GOOGLE_API_KEY, DEEPSEEK_API_KEY")
            return

        if list_patterns:
            print_patterns(category, inspired_by)
            return

        if validate_path:
            if not print_validation(validate_path, export_intent):
                sys.exit(1)
            return

        if estimate_path:
            project = load_composition(estimate_path)
            sections = [section for page in project.pages for section in page.sections]
            estimate = estimate_images(sections, get_registry())
            console.print(f"[green]Sections needing images:[/green] {estimate.sections_needing_images}")
            console.print(f"[green]Estimated images:[/green]        {estimate.estimated_images}")
            console.print(f"[green]Estimated time:[/green]          ~{estimate.estimated_time}")
            return

        if not request_path:
            console.print("[red]Error: --request is required[/red]")
            sys.exit(1)

        request = load_request(request_path)
    except RegistryError as e:
        console.print(f"[red]Catalog error:[/red] {e}")
        sys.exit(1)
    except (OSError, ValidationError) as e:
        console.print(f"[red]Could not read input:[/red] {e}")
        sys.exit(1)

    options = request.options
    updates = {}
    if mode:
        updates["mode"] = ComposerMode(mode)
    if no_images:
        updates["generate_images"] = False
    if no_gap_filling:
        updates["enable_gap_filling"] = False
    if seed is not None:
        updates["seed"] = seed
    if export_intent:
        updates["intent"] = CompositionIntent.EXPORT
    if updates:
        request = request.model_copy(update={"options": options.model_copy(update=updates)})

    console.print(Panel.fit(
        "[bold blue]Page Composer[/bold blue]\n"
        f"[dim]{request.vision.project_name} · {len(request.pages)} page(s) · "
        f"mode {request.options.mode.value}[/dim]",
        border_style="blue"
    ))
    if provider or model:
        console.print(f"\n[dim]Provider:[/dim] {provider or 'litellm'}")
        if model:
            console.print(f"[dim]Model:[/dim] {model}")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Composing...", total=None)

        def on_progress(event: ProgressEvent) -> None:
            label = f"{event.stage} (page {event.page_index + 1})"
            if event.total:
                label += f" {event.completed}/{event.total}"
            progress.update(task, description=label)

        try:
            composer = Composer(provider=provider, model=model)
            output = asyncio.run(composer.compose_project(request, on_progress=on_progress))
        except RegistryError as e:
            console.print(f"[red]Catalog error:[/red] {e}")
            sys.exit(1)
        except CompositionError as e:
            console.print(f"[red]Composition failed:[/red] {e}")
            sys.exit(1)

        progress.update(task, completed=True)

    composition = output.composition
    metadata = composition.metadata
    console.print("\n" + "=" * 60)
    console.print(f"[green]Project:[/green]    {composition.id}")
    console.print(f"[green]Pages:[/green]      {len(composition.pages)}")
    console.print(f"[green]Confidence:[/green] {metadata.average_confidence}")
    console.print(f"[green]Duration:[/green]   {metadata.generation_time_seconds:.1f}s")

    console.print("\n[bold]Cost Summary:[/bold]")
    console.print(f"  Input tokens:  {metadata.input_tokens:,}")
    console.print(f"  Output tokens: {metadata.output_tokens:,}")
    console.print(f"  Total cost:    ${metadata.cost_usd:.4f}")

    stats = metadata.image_stats
    if stats.total:
        console.print(
            f"\n[bold]Images:[/bold] {stats.generated} generated, {stats.cached} cached, {stats.failed} failed"
        )

    if output.warnings:
        console.print(f"\n[yellow]Warnings ({len(output.warnings)}):[/yellow]")
        for warning in output.warnings:
            console.print(f"  - {warning}")

    export_label = "[green]yes[/green]" if output.export_ready else "[yellow]no[/yellow]"
    console.print(f"\n[bold]Ready for export:[/bold] {export_label}")

    path = write_output(output, output_dir)
    console.print(f"[bold]Output saved to:[/bold] {path}")
    console.print("\n" + "=" * 60)

    if export_intent and not output.export_ready:
        sys.exit(2)


if __name__ == "__main__":
    main()
