"""Command line interface for Wardrobe."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from wardrobe.config import (
    ConfigError,
    ConfigManager,
    WardrobeConfig,
    flatten_for_env,
    resolve_with_precedence,
)
from wardrobe.errors import WardrobeError
from wardrobe.rotation import ChangeSet, RotationService
from wardrobe.scanning import CategoryRef, CategoryState, ItemRef
from wardrobe.state import RotationRepository

console = Console()


def _configure_logging(verbose: bool) -> None:
    """Attach a Rich handler to the package logger at the configured level.

    Args:
        verbose: Force DEBUG output regardless of configuration.
    """
    level_name = "DEBUG"
    if not verbose:
        try:
            level_name = ConfigManager().load().logging.level
        except ConfigError:
            level_name = "WARNING"

    logger = logging.getLogger("wardrobe")
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    logger.setLevel(getattr(logging, level_name.upper(), logging.WARNING))


def _build_service() -> RotationService:
    return RotationService(ConfigManager(), RotationRepository())


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)

    raise click.ClickException(message) from original


def _error_code(exc: WardrobeError) -> str:
    # CamelCase class name to snake_case code, e.g. ItemNotFoundError -> item_not_found_error
    name = type(exc).__name__
    return "".join(f"_{char.lower()}" if char.isupper() else char for char in name).lstrip("_")


def _item_payload(item: ItemRef | None) -> dict[str, Any] | None:
    if item is None:
        return None
    return {"category": item.category.name, "file": item.file_name, "path": item.file_path}


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """
    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="wardrobe")
@click.option("-v", "--verbose", is_flag=True, help="Emit debug logging.")
def cli(verbose: bool) -> None:
    """Wardrobe picks outfits without repeats until each category is exhausted."""
    _configure_logging(verbose)


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--exclude", "excluded", multiple=True, help="Category to exclude (repeatable).")
@click.option("--extension", type=str, help="Item file extension (default: avatar).")
def init(root: Path, excluded: tuple[str, ...], extension: str | None) -> None:
    """Point Wardrobe at ROOT and record its current categories."""
    manager = ConfigManager()
    file_data = manager.load_file_overrides()
    file_data["root"] = str(root.expanduser().resolve())
    if excluded:
        file_data["excluded_categories"] = sorted(set(excluded))
    if extension:
        _assign_nested(file_data, ["scanning", "item_extension"], extension)

    try:
        resolve_with_precedence(defaults=WardrobeConfig(), file_overrides=file_data)
        manager.save(file_data)
        service = _build_service()
        service.apply_changes(ChangeSet())
        categories = service.categories()
    except WardrobeError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(
        f"[green]Tracking {len(categories)} categories under {file_data['root']}.[/green]"
    )


@cli.command("categories")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
def categories_command(json_output: bool) -> None:
    """List categories with their state and availability."""
    service = _build_service()
    try:
        infos = service.category_info()
        rows = []
        for info in infos:
            available = None
            if info.state is CategoryState.HAS_OUTFITS:
                available = service.available_count(info.category.name)
            rows.append((info, available))
    except WardrobeError as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(
            data={
                "categories": [
                    {
                        "name": info.category.name,
                        "state": info.state.value,
                        "items": info.item_count,
                        "available": available,
                    }
                    for info, available in rows
                ]
            }
        )
        return

    table = Table(title="Categories")
    table.add_column("Name")
    table.add_column("State")
    table.add_column("Items", justify="right")
    table.add_column("Available", justify="right")
    for info, available in rows:
        table.add_row(
            info.category.name,
            info.state.value,
            str(info.item_count),
            "-" if available is None else str(available),
        )
    console.print(table)


@cli.command()
@click.argument("category", required=False)
@click.option("--wear", "wear_now", is_flag=True, help="Mark the picked item as worn.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
def pick(category: str | None, wear_now: bool, json_output: bool) -> None:
    """Pick an unworn item from CATEGORY, or from any category when omitted."""
    service = _build_service()
    try:
        if category is None:
            item = service.select_across_categories()
        else:
            item = service.select_one(category)
        if item is not None and wear_now:
            service.mark_worn(item)
    except WardrobeError as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data={"item": _item_payload(item), "worn": bool(item and wear_now)})
        return
    if item is None:
        console.print("[yellow]No items available.[/yellow]")
        return
    suffix = " (marked worn)" if wear_now else ""
    console.print(f"[green]{item.file_name}[/green] from [cyan]{item.category.name}[/cyan]{suffix}")


@cli.command()
@click.argument("category")
@click.argument("files", nargs=-1, required=True)
def wear(category: str, files: tuple[str, ...]) -> None:
    """Mark FILES in CATEGORY as worn."""
    service = _build_service()
    try:
        listed = service.list_items(category)
        ref = listed[0].category if listed else CategoryRef(name=category, path=category)
        service.mark_many_worn(ItemRef(file_name=name, category=ref) for name in files)
        worn, total = service.rotation_progress(category)
    except WardrobeError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(f"[green]Recorded {len(files)} item(s). Progress {worn}/{total}.[/green]")


@cli.command()
@click.argument("category", required=False)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
def status(category: str | None, json_output: bool) -> None:
    """Show rotation progress for CATEGORY or every category with items."""
    service = _build_service()
    try:
        if category is None:
            names = [
                info.category.name
                for info in service.category_info()
                if info.state is CategoryState.HAS_OUTFITS
            ]
        else:
            names = [category]
        progress = {name: service.rotation_progress(name) for name in names}
    except WardrobeError as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(
            data={
                "progress": {
                    name: {"worn": worn, "total": total}
                    for name, (worn, total) in progress.items()
                }
            }
        )
        return

    table = Table(title="Rotation progress")
    table.add_column("Category")
    table.add_column("Worn", justify="right")
    table.add_column("Total", justify="right")
    for name, (worn, total) in progress.items():
        table.add_row(name, str(worn), str(total))
    console.print(table)


@cli.command()
@click.argument("categories", nargs=-1)
@click.option("--all", "reset_everything", is_flag=True, help="Discard every category record.")
def reset(categories: tuple[str, ...], reset_everything: bool) -> None:
    """Clear worn tracking for CATEGORIES, or everything with --all."""
    if not categories and not reset_everything:
        raise click.UsageError("Provide at least one CATEGORY or pass --all.")

    service = _build_service()
    try:
        if reset_everything:
            service.reset_all()
        else:
            service.reset_categories(categories)
    except WardrobeError as exc:
        raise click.ClickException(str(exc)) from exc

    target = "all categories" if reset_everything else ", ".join(categories)
    console.print(f"[green]Reset {target}.[/green]")


@cli.command("partial-reset")
@click.argument("category")
@click.argument("count", type=click.IntRange(min=0))
def partial_reset(category: str, count: int) -> None:
    """Keep only COUNT worn items in CATEGORY."""
    service = _build_service()
    try:
        service.partial_reset(category, count)
        worn, total = service.rotation_progress(category)
    except WardrobeError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print(f"[green]{category}: {worn}/{total} worn.[/green]")


@cli.command()
@click.option("--apply", "apply_changes", is_flag=True, help="Record the current layout.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
def changes(apply_changes: bool, json_output: bool) -> None:
    """Compare the category tree against the last recorded snapshot."""
    service = _build_service()
    try:
        change_set = service.detect_changes()
        if apply_changes:
            service.apply_changes(change_set)
    except WardrobeError as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    if json_output:
        payload = change_set.to_payload()
        payload["applied"] = apply_changes
        console.print_json(data=payload)
        return

    if change_set.is_empty:
        console.print("[green]No changes detected.[/green]")
        return

    payload = change_set.to_payload()
    for label, key in (
        ("New categories", "new_categories"),
        ("Deleted categories", "deleted_categories"),
        ("Changed categories", "changed_categories"),
    ):
        if payload[key]:
            console.print(f"[cyan]{label}:[/cyan] {', '.join(payload[key])}")
    for label, key in (("Added", "added_files"), ("Removed", "deleted_files")):
        for name, files in payload[key].items():
            console.print(f"  {label} in {name}: {', '.join(files)}")
    if apply_changes:
        console.print("[green]Snapshot updated.[/green]")
        if change_set.deleted_categories:
            console.print("[yellow]Rotation progress was reset for every category.[/yellow]")


@cli.command()
@click.argument("pattern")
def search(pattern: str) -> None:
    """Find items whose filename contains PATTERN."""
    service = _build_service()
    try:
        results = service.search_items(pattern)
    except WardrobeError as exc:
        raise click.ClickException(str(exc)) from exc

    if not results:
        console.print("[yellow]No matching items.[/yellow]")
        return
    for item in results:
        console.print(f"{item.category.name}/{item.file_name}")


@cli.group()
def config() -> None:
    """Manage Wardrobe configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.option(
    "--set",
    "overrides",
    multiple=True,
    metavar="KEY=VALUE",
    help="Preview a dotted override without saving it (repeatable).",
)
@click.option("--env", "as_env", is_flag=True, help="Print as WARDROBE__ environment variables.")
def config_view(no_env: bool, overrides: tuple[str, ...], as_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    cli_overrides: dict[str, Any] = {}
    for entry in overrides:
        key, sep, raw = entry.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"Expected KEY=VALUE, got '{entry}'.", param_hint="--set")
        try:
            cli_overrides[key.strip()] = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise click.BadParameter(f"Unable to parse value: {exc}", param_hint="--set") from exc

    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(cli_overrides=cli_overrides or None, include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_env:
        for name, value in sorted(flatten_for_env(loaded).items()):
            console.print(f"{name}={value}", markup=False, highlight=False, soft_wrap=True)
        return

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'logging.level'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=WardrobeConfig(), file_overrides=file_data)
        manager.save(file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    after = manager.read_text().splitlines()
    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if not line.lstrip("+-").startswith("# Last updated:")
    ]
    if len(diff) <= 3:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


def main() -> None:
    """Entry point used by the console script."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
