"""CLI entry point for Merkled."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from merkled.config import MerkledConfig, load_config
from merkled.config.loader import DEFAULT_CONFIG_TEMPLATE
from merkled.log import configure_logging
from merkled.merkle import (
    FolderScanner,
    Manifest,
    MerkledError,
    VerificationResult,
    load_manifest,
    save_manifest,
    seal as seal_files,
    verify_files,
)

app = typer.Typer(
    name="merkled",
    help="Seal folders with a Merkle root and verify them later.",
)

config_app = typer.Typer(help="Manage Merkled configuration.")
app.add_typer(config_app, name="config")

# Exit codes for `verify`
EXIT_MISMATCH = 1
EXIT_ERROR = 2

# Global state
_config: MerkledConfig | None = None


def _get_config() -> MerkledConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to merkled.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)
    configure_logging(_config.log_level, _config.log_format)


def format_bytes(size: int) -> str:
    """Human-readable size in base 1024, e.g. ``1 KB`` or ``1.5 MB``."""
    if size == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    idx = 0
    while idx < len(units) - 1 and size >= 1024 ** (idx + 1):
        idx += 1
    value = round(size / 1024**idx, 2)
    return f"{value:g} {units[idx]}"


def _display_manifest(manifest: Manifest, title: str) -> None:
    """Summary panel plus a table of sealed files."""
    lines = [
        f"[dim]Version:[/dim]     {manifest.version}",
        f"[dim]Sealed at:[/dim]   {manifest.timestamp.isoformat()}",
        f"[dim]Total files:[/dim] {manifest.total_files}",
        f"[dim]Total size:[/dim]  {format_bytes(manifest.total_size)}",
    ]
    if manifest.metadata is not None:
        meta = manifest.metadata.model_dump(by_alias=True, exclude_none=True)
        for key, value in meta.items():
            lines.append(f"[dim]{key}:[/dim] {escape(str(value))}")
    lines.append(f"\n[bold]Merkle root[/bold]\n{manifest.merkle_root}")
    rprint(Panel("\n".join(lines), title=title, border_style="blue"))

    table = Table(title=f"Files ({manifest.total_files})")
    table.add_column("File Path", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("SHA-256", style="dim")
    for fh in manifest.files:
        table.add_row(escape(fh.relative_path), format_bytes(fh.size), fh.hash[:32] + "...")
    rprint(table)


def _display_result(result: VerificationResult) -> None:
    status = "[green]VALID[/green]" if result.is_valid else "[red]INVALID[/red]"
    root = "Match" if result.merkle_root_match else "Mismatch"
    rprint(Panel(
        f"[dim]Status:[/dim]        {status}\n"
        f"[dim]Merkle root:[/dim]   {root}\n"
        f"[dim]Files matched:[/dim] {result.files_matched}/{result.files_total}",
        title="Verification Result",
        border_style="green" if result.is_valid else "red",
    ))
    if result.is_valid:
        return

    table = Table(title="Differences")
    table.add_column("File", style="cyan")
    table.add_column("Status", justify="center")
    for path in result.tampered_files:
        table.add_row(escape(path), "[red]tampered[/red]")
    for path in result.missing_files:
        table.add_row(escape(path), "[yellow]missing[/yellow]")
    for path in result.extra_files:
        table.add_row(escape(path), "[magenta]extra[/magenta]")
    rprint(table)


@app.command()
def seal(
    path: Annotated[str, typer.Argument(help="Folder to seal")],
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Where to write the manifest")
    ] = None,
    case_number: Annotated[str | None, typer.Option("--case-number")] = None,
    description: Annotated[str | None, typer.Option("--description")] = None,
    investigator: Annotated[str | None, typer.Option("--investigator")] = None,
    organization: Annotated[str | None, typer.Option("--organization")] = None,
    workers: Annotated[
        int | None, typer.Option("--workers", "-w", min=1, help="Hashing threads")
    ] = None,
    ci: Annotated[bool, typer.Option("--ci", help="Machine-readable output")] = False,
) -> None:
    """Hash a folder and write its integrity manifest."""
    cfg = _get_config()
    root = Path(path)
    metadata = {
        "case_number": case_number,
        "description": description,
        "investigator": investigator,
        "organization": organization,
    }
    metadata = {k: v for k, v in metadata.items() if v}

    try:
        scanner = FolderScanner(cfg.hashing)
        manifest = seal_files(
            scanner.scan(root),
            metadata or None,
            ignore=scanner.ignore,
            max_workers=workers or cfg.hashing.max_workers,
            chunk_size=cfg.hashing.chunk_size,
        )
    except (MerkledError, OSError) as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    if output:
        dest = Path(output)
    else:
        dest = Path(cfg.manifest.output_dir) / f"integrity-manifest-{int(time.time() * 1000)}.json"
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        save_manifest(manifest, dest)
    except OSError as e:
        rprint(f"[red]Error:[/red] Could not write manifest: {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    if ci:
        typer.echo(f"merkle_root={manifest.merkle_root}")
        typer.echo(f"total_files={manifest.total_files}")
        typer.echo(f"total_size={manifest.total_size}")
        typer.echo(f"manifest={dest}")
        return

    _display_manifest(manifest, title="Folder Sealed")
    rprint(f"\n[green]Manifest written to[/green] {dest}")


@app.command()
def verify(
    path: Annotated[str, typer.Argument(help="Folder to verify")],
    manifest_path: Annotated[str, typer.Argument(help="Manifest JSON produced by `seal`")],
    as_json: Annotated[bool, typer.Option("--json", help="Print the result as JSON")] = False,
    ci: Annotated[bool, typer.Option("--ci", help="Machine-readable output")] = False,
    workers: Annotated[
        int | None, typer.Option("--workers", "-w", min=1, help="Hashing threads")
    ] = None,
) -> None:
    """Verify a folder against a saved manifest."""
    cfg = _get_config()

    try:
        manifest = load_manifest(
            Path(manifest_path), strict_version=cfg.manifest.strict_version
        )
        scanner = FolderScanner(cfg.hashing)
        result = verify_files(
            scanner.scan(Path(path)),
            manifest,
            ignore=scanner.ignore,
            max_workers=workers or cfg.hashing.max_workers,
            chunk_size=cfg.hashing.chunk_size,
        )
    except (MerkledError, OSError) as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    elif ci:
        for p in result.tampered_files:
            typer.echo(f"TAMPERED {p}")
        for p in result.missing_files:
            typer.echo(f"MISSING {p}")
        for p in result.extra_files:
            typer.echo(f"EXTRA {p}")
        typer.echo("OK" if result.is_valid else "FAIL")
        typer.echo(f"merkle_root_match={str(result.merkle_root_match).lower()}")
        typer.echo(f"files_matched={result.files_matched}/{result.files_total}")
    else:
        _display_result(result)

    if not result.is_valid:
        raise typer.Exit(EXIT_MISMATCH)


@app.command()
def inspect(
    manifest_path: Annotated[str, typer.Argument(help="Manifest JSON to display")],
) -> None:
    """Show the contents of a manifest."""
    cfg = _get_config()
    try:
        manifest = load_manifest(
            Path(manifest_path), strict_version=cfg.manifest.strict_version
        )
    except (MerkledError, OSError) as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)
    _display_manifest(manifest, title="Integrity Manifest")


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default merkled.yaml in current directory."""
    target = Path("merkled.yaml")
    if target.exists() and not force:
        rprint("[yellow]merkled.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
