"""CLI interface for photo-uploader."""

import logging
from typing import Any, Optional

import click
from rich.progress import Progress, SpinnerColumn, TextColumn

from .commands import (
    COPY_ALL,
    COPY_DIRS,
    SYNC_FILES,
    UPDATE_CACHE,
    CommandResult,
    CommandRunner,
)
from .config import config
from .exceptions import ConfigurationError, RemoteToolError
from .output import OutputFormatter
from .uploader import UploadEngine

logger = logging.getLogger(__name__)


def _get_engine(ctx: Any) -> UploadEngine:
    """Create the upload engine once per invocation."""
    if "engine" not in ctx.obj:
        ctx.obj["engine"] = UploadEngine(config)
    return ctx.obj["engine"]


def _prompt_settings() -> None:
    """Ask for the primary mapping, using saved values as defaults."""
    current = config.load()
    values = {
        "source": click.prompt(
            "Source dir", default=current.source if current else None
        ),
        "target": click.prompt(
            "Target dir", default=current.target if current else None
        ),
        "gDriveDir": click.prompt(
            "Remote dir", default=current.remote_dir if current else None
        ),
        "fileTypes": click.prompt(
            "File types", default=current.file_types if current else None
        ),
    }
    config.save(values)


def _confirm_upload(question: str) -> bool:
    return click.confirm(question, default=False)


def _make_runner(
    ctx: Any, dry_run: bool = False, assume_yes: bool = False
) -> CommandRunner:
    out: OutputFormatter = ctx.obj["out"]
    return CommandRunner(
        engine=_get_engine(ctx),
        out=out,
        confirm=(lambda _question: True) if assume_yes else _confirm_upload,
        configure=_prompt_settings,
        dry_run=dry_run,
    )


def _run_upload_command(
    ctx: Any, command_id: str, dry_run: bool, assume_yes: bool
) -> None:
    out: OutputFormatter = ctx.obj["out"]
    try:
        runner = _make_runner(ctx, dry_run=dry_run, assume_yes=assume_yes)
        result = runner.run_command(command_id)
    except ConfigurationError as e:
        for error in e.errors:
            out.error(error)
        ctx.exit(1)
    except OSError as e:
        out.error(f"Transfer stopped: {e}")
        ctx.exit(1)

    if out.json_output and result.stats is not None:
        out.output_json(result.stats)
    if not result.ok:
        ctx.exit(1)


def _interactive_loop(ctx: Any) -> None:
    """Menu driven loop over the command interface."""
    out: OutputFormatter = ctx.obj["out"]
    engine = _get_engine(ctx)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    ) as progress:
        progress.add_task("Loading remote files...", total=None)
        entries = engine.ensure_cache()
    if entries is not None:
        out.success(f"Done! {len(entries)} remote file(s) cached.")

    if not config.is_present():
        _prompt_settings()

    runner = _make_runner(ctx)
    menu = "\n".join(f"({cid}) - {label}" for cid, label in runner.list_commands())

    while True:
        out.print("Select command:")
        out.print(menu)
        choice = click.prompt("Command", default="", show_default=False)
        result: CommandResult = runner.run_command(choice)
        if result.exit_loop:
            break


@click.group(invoke_without_command=True)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="photo-uploader")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """Photo Uploader - back up new photos to a local folder and an rclone remote.

    Without a command an interactive menu is started.
    """
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("photouploader").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    if ctx.invoked_subcommand is None:
        out: OutputFormatter = ctx.obj["out"]
        try:
            _interactive_loop(ctx)
        except (ConfigurationError, RemoteToolError) as e:
            out.error(str(e))
            ctx.exit(1)
        except OSError as e:
            out.error(f"Transfer stopped: {e}")
            ctx.exit(1)


@main.command()
@click.option("--source", "-s", help="Source directory to scan")
@click.option("--target", "-t", help="Local target directory")
@click.option("--remote-dir", "-r", help="Directory on the remote")
@click.option("--file-types", "-f", help="Comma separated extensions, e.g. .jpg,.png")
@click.option("--remote-name", help="rclone remote name (default: gdrive)")
@click.option(
    "--add-copy-dir",
    nargs=3,
    multiple=True,
    metavar="SOURCE TARGET REMOTE_DIR",
    help="Add a copy dir mirrored by relative path (repeatable)",
)
@click.option("--clear-copy-dirs", is_flag=True, help="Remove all copy dirs")
@click.pass_context
def configure(
    ctx: Any,
    source: Optional[str],
    target: Optional[str],
    remote_dir: Optional[str],
    file_types: Optional[str],
    remote_name: Optional[str],
    add_copy_dir: tuple[tuple[str, str, str], ...],
    clear_copy_dirs: bool,
) -> None:
    """Configure directories and file types.

    Without options the settings are asked for interactively, with the
    saved values offered as defaults.

    Examples:
        photo-uploader configure
        photo-uploader configure -s /media/card -t ~/Photos -r Photos -f .jpg,.png
        photo-uploader configure --add-copy-dir ~/Docs ~/Backup/Docs Docs
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        values: dict[str, Any] = {}
        if source is not None:
            values["source"] = source
        if target is not None:
            values["target"] = target
        if remote_dir is not None:
            values["gDriveDir"] = remote_dir
        if file_types is not None:
            values["fileTypes"] = file_types
        if remote_name is not None:
            values["remoteName"] = remote_name

        if clear_copy_dirs or add_copy_dir:
            current = config.load()
            copy_dirs = []
            if current is not None and not clear_copy_dirs:
                copy_dirs = [d.to_dict() for d in current.copy_dirs]
            for dir_source, dir_target, dir_remote in add_copy_dir:
                copy_dirs.append(
                    {"source": dir_source, "target": dir_target, "gDriveDir": dir_remote}
                )
            values["copyDirs"] = copy_dirs

        if values:
            config.save(values)
        else:
            _prompt_settings()
    except ConfigurationError as e:
        out.error(str(e))
        ctx.exit(1)

    out.success(f"✓ Configuration saved to {config.get_config_path()}")


@main.command(name="update-cache")
@click.pass_context
def update_cache(ctx: Any) -> None:
    """Reload the remote file listing into the local cache."""
    runner = _make_runner(ctx)
    result = runner.run_command(UPDATE_CACHE)
    if not result.ok:
        ctx.exit(1)


@main.command()
@click.option(
    "--dry-run", is_flag=True, help="Show what would be transferred without doing it"
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def sync(ctx: Any, dry_run: bool, yes: bool) -> None:
    """Transfer new files from the source dir into date folders.

    Press Ctrl+C to stop after the current file.
    """
    _run_upload_command(ctx, SYNC_FILES, dry_run, yes)


@main.command(name="copy-dirs")
@click.option(
    "--dry-run", is_flag=True, help="Show what would be transferred without doing it"
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def copy_dirs(ctx: Any, dry_run: bool, yes: bool) -> None:
    """Mirror the configured copy dirs by relative path."""
    _run_upload_command(ctx, COPY_DIRS, dry_run, yes)


@main.command(name="all")
@click.option(
    "--dry-run", is_flag=True, help="Show what would be transferred without doing it"
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def copy_all(ctx: Any, dry_run: bool, yes: bool) -> None:
    """Run sync and copy dirs as one batch."""
    _run_upload_command(ctx, COPY_ALL, dry_run, yes)


@main.command()
@click.pass_context
def status(ctx: Any) -> None:
    """Show configuration and remote cache status."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        engine = _get_engine(ctx)
        cfg = config.load()
    except ConfigurationError as e:
        out.error(str(e))
        ctx.exit(1)
    entries = engine.cache.load()
    errors = engine.validate()

    if out.json_output:
        out.output_json(
            {
                "config_file": str(config.get_config_path()),
                "config": cfg.to_dict() if cfg else None,
                "cache_file": str(engine.cache.cache_file),
                "cached_entries": len(entries) if entries is not None else None,
                "errors": errors,
            }
        )
        return

    rows = [
        ("Config file", str(config.get_config_path())),
        ("Cache file", str(engine.cache.cache_file)),
        (
            "Cached entries",
            str(len(entries)) if entries is not None else "not loaded",
        ),
    ]
    if cfg is not None:
        rows.append(("Primary", str(cfg.primary_mapping())))
        rows.append(("File types", cfg.file_types or "(all)"))
        rows.append(("Remote", f"{cfg.remote_name}:"))
        for mapping in cfg.copy_dir_mappings():
            rows.append(("Copy dir", str(mapping)))
    out.print_summary("Photo Uploader Status", rows)

    for error in errors:
        out.error(error)


if __name__ == "__main__":
    main()
