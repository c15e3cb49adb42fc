"""CLI entry point for checksums."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax

from checksums_core.algorithms import DigestAlgorithm, parse_algorithms
from checksums_core.comparator import DiffStatus
from checksums_core.config import ChecksumsConfig, HashConfig, RunConfig, WalkerConfig, load_config, resolve_config
from checksums_core.config.loader import DEFAULT_CONFIG_TEMPLATE, PROJECT_CONFIG_NAME
from checksums_core.engine import create_manifest, verify_tree
from checksums_core.errors import Aborted, ChecksumsError, EntryError

app = typer.Typer(
    name="checksums",
    help="Make and verify checksums of directory trees.",
)

config_app = typer.Typer(help="Manage checksums configuration.")
app.add_typer(config_app, name="config")

EXIT_DIFFERENCES = 1
EXIT_FATAL = 2
EXIT_ABORTED = 130

# Global state
_config: ChecksumsConfig | None = None
_config_source: Path | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class _JsonFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


def _configure_logging(level: str, fmt: str) -> None:
    if fmt == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(level=_LOG_LEVELS[level], handlers=[handler], force=True)


def _get_config() -> ChecksumsConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to checksums.yaml")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="debug | info | warn | error")
    ] = None,
) -> None:
    """Global options."""
    global _config, _config_source
    try:
        _config, _config_source = resolve_config(config)
    except ValueError as e:
        rprint(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(EXIT_FATAL)
    level = log_level or _config.log_level
    if level not in _LOG_LEVELS:
        rprint(f"[red]Unknown log level:[/red] {escape(level)}")
        raise typer.Exit(EXIT_FATAL)
    _configure_logging(level, _config.log_format)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _default_manifest_path(root: Path, suffix: str) -> Path:
    """``<dir><suffix>`` next to the directory, e.g. ``photos.hash``."""
    root = root.resolve()
    return root.parent / f"{root.name}{suffix}"


def _build_run_config(
    directory: str,
    algorithms: list[str] | None,
    depth: int | None,
    jobs: int | None,
    include: str | None,
    exclude: str | None,
    follow_symlinks: bool | None,
    hidden: bool | None,
    output: Path | None = None,
    compare_against: Path | None = None,
) -> RunConfig:
    cfg = _get_config()

    walker_data = cfg.walker.model_dump(exclude_unset=True)
    for key, value in (
        ("max_depth", depth),
        ("include_pattern", include),
        ("exclude_pattern", exclude),
        ("follow_symlinks", follow_symlinks),
        ("include_hidden", hidden),
    ):
        if value is not None:
            walker_data[key] = value

    hash_data = cfg.hashing.model_dump(exclude_unset=True)
    if algorithms:
        hash_data["algorithms"] = parse_algorithms(
            name for arg in algorithms for name in arg.split(",") if name.strip()
        )
    if jobs is not None:
        hash_data["concurrency"] = jobs

    return RunConfig(
        root_path=Path(directory),
        walker=WalkerConfig(**walker_data),
        hashing=HashConfig(**hash_data),
        output_manifest_path=output,
        compare_against_path=compare_against,
    )


def _print_errors(errors: list[EntryError]) -> None:
    for err in errors:
        rprint(f"  [red]error:[/red] {escape(str(err))}")


def _fail(message: str, code: int = EXIT_FATAL) -> typer.Exit:
    rprint(f"[red]{escape(message)}[/red]")
    return typer.Exit(code)


# Options shared by create and verify
AlgorithmOpt = Annotated[
    list[str] | None,
    typer.Option("--algorithm", "-a", help="Hashing algorithm; repeat or comma-separate for several."),
]
DepthOpt = Annotated[
    int | None, typer.Option("--depth", "-d", help="Max recursion depth. -1 for infinite, 0 for top level only.")
]
JobsOpt = Annotated[int | None, typer.Option("--jobs", "-j", min=1, help="Worker threads (default: CPU count)")]
IncludeOpt = Annotated[str | None, typer.Option("--include", help="Only hash paths matching this regex")]
ExcludeOpt = Annotated[str | None, typer.Option("--exclude", help="Skip paths matching this regex")]
FollowOpt = Annotated[
    bool | None, typer.Option("--follow-symlinks/--no-follow-symlinks", help="Follow symbolic links")
]
HiddenOpt = Annotated[bool | None, typer.Option("--hidden/--no-hidden", help="Include dot-files and dot-dirs")]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def create(
    directory: Annotated[str, typer.Argument(help="Directory to hash")] = ".",
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Manifest file (default: <DIRECTORY>.hash)")
    ] = None,
    algorithm: AlgorithmOpt = None,
    depth: DepthOpt = None,
    jobs: JobsOpt = None,
    include: IncludeOpt = None,
    exclude: ExcludeOpt = None,
    follow_symlinks: FollowOpt = None,
    hidden: HiddenOpt = None,
) -> None:
    """Hash every file under DIRECTORY and write a manifest."""
    cfg = _get_config()
    output = output or _default_manifest_path(Path(directory), cfg.manifest_suffix)
    try:
        run_config = _build_run_config(
            directory, algorithm, depth, jobs, include, exclude, follow_symlinks, hidden, output=output
        )
        run = create_manifest(run_config)
    except Aborted as e:
        raise _fail(str(e), EXIT_ABORTED)
    except (ChecksumsError, ValidationError, OSError) as e:
        raise _fail(str(e))

    rprint(f"[green]Wrote[/green] {len(run.manifest)} entries to {escape(str(output))}")
    if run.errors:
        _print_errors(run.errors)
        raise typer.Exit(EXIT_DIFFERENCES)


@app.command()
def verify(
    directory: Annotated[str, typer.Argument(help="Directory to verify")] = ".",
    manifest: Annotated[
        Path | None, typer.Option("--manifest", "-m", help="Manifest to verify against (default: <DIRECTORY>.hash)")
    ] = None,
    algorithm: AlgorithmOpt = None,
    depth: DepthOpt = None,
    jobs: JobsOpt = None,
    include: IncludeOpt = None,
    exclude: ExcludeOpt = None,
    follow_symlinks: FollowOpt = None,
    hidden: HiddenOpt = None,
) -> None:
    """Re-hash DIRECTORY and report differences from a saved manifest."""
    cfg = _get_config()
    manifest = manifest or _default_manifest_path(Path(directory), cfg.manifest_suffix)
    if not manifest.is_file():
        raise _fail(f"Manifest not found: {manifest}. Run 'checksums create' first.")
    try:
        run_config = _build_run_config(
            directory, algorithm, depth, jobs, include, exclude, follow_symlinks, hidden,
            compare_against=manifest,
        )
        result = verify_tree(run_config)
    except Aborted as e:
        raise _fail(str(e), EXIT_ABORTED)
    except (ChecksumsError, ValidationError, OSError) as e:
        raise _fail(str(e))

    for entry in result.report.entries:
        if entry.status is DiffStatus.unchanged:
            continue
        line = f"{entry.status.value.upper()} {escape(entry.relative_path)}"
        if entry.reason is not None:
            line += f" [dim]({escape(str(entry.reason))})[/dim]"
        rprint(line)
    _print_errors(result.errors)

    counts = result.report.counts()
    summary = ", ".join(f"{n} {status.value}" for status, n in counts.items() if n)
    if result.ok:
        rprint(f"[green]OK[/green] {summary or 'no files'}")
        return
    rprint(f"[red]FAILED[/red] {summary}")
    raise typer.Exit(EXIT_DIFFERENCES)


@app.command(name="algorithms")
def list_algorithms() -> None:
    """List supported hashing algorithms."""
    for alg in DigestAlgorithm:
        typer.echo(f"{alg.value}\t{alg.digest_size * 8} bits")


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    source = escape(str(_config_source)) if _config_source else "built-in defaults"
    rprint(f"[dim]Source:[/dim] {source}")
    rprint(Syntax(yaml.safe_dump(cfg.model_dump(mode="json"), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default checksums.yaml in current directory."""
    target = Path(PROJECT_CONFIG_NAME)
    if target.exists() and not force:
        rprint("[yellow]checksums.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
