"""Front-end independent command interface.

The interactive menu, the click subcommands and scripted callers all go
through :class:`CommandRunner`, which only needs callables for the pieces
that require user input.
"""

import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Optional

from .exceptions import ConfigurationError, RemoteToolError
from .output import OutputFormatter
from .sync.comparator import PendingTransfer
from .sync.engine import CancellationToken
from .uploader import UploadEngine

logger = logging.getLogger(__name__)

UPDATE_CACHE = "u"
CONFIGURE = "c"
SYNC_FILES = "s"
COPY_DIRS = "d"
COPY_ALL = "a"
QUIT = "q"

COMMANDS: list[tuple[str, str]] = [
    (UPDATE_CACHE, "Update remote cache"),
    (CONFIGURE, "Configure settings"),
    (SYNC_FILES, "Sync files"),
    (COPY_DIRS, "Copy dirs"),
    (COPY_ALL, "Copy all, both sync and dirs"),
    (QUIT, "Quit"),
]


@dataclass
class CommandResult:
    """Outcome of running one command."""

    ok: bool = True
    """False if the command could not do its work"""

    exit_loop: bool = False
    """True if an interactive loop should stop after this command"""

    errors: list[str] = field(default_factory=list)
    """Error messages shown to the user"""

    stats: Optional[dict] = None
    """Transfer statistics when files were transferred"""


@contextmanager
def cancel_on_interrupt(
    token: CancellationToken, out: OutputFormatter
) -> Iterator[CancellationToken]:
    """Turn the first Ctrl+C into a cancellation request.

    The running transfer finishes and no further item is started. A
    second Ctrl+C raises KeyboardInterrupt as usual.
    """

    def _handle_interrupt(_signum, _frame) -> None:
        if token.is_cancelled:
            raise KeyboardInterrupt
        token.cancel()
        out.warning("Stopping after the current file (Ctrl+C again to abort)...")

    previous = signal.signal(signal.SIGINT, _handle_interrupt)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


class CommandRunner:
    """Runs menu commands against an UploadEngine."""

    def __init__(
        self,
        engine: UploadEngine,
        out: OutputFormatter,
        confirm: Callable[[str], bool],
        configure: Callable[[], None],
        token: Optional[CancellationToken] = None,
        dry_run: bool = False,
    ):
        """Initialize command runner.

        Args:
            engine: Upload engine doing the work
            out: Output formatter for user-facing messages
            confirm: Asks a yes/no question, returns the answer
            configure: Asks for and saves settings
            token: Cancellation token shared with the front end
            dry_run: Only show what would be transferred
        """
        self.engine = engine
        self.out = out
        self.confirm = confirm
        self.configure = configure
        self.token = token or CancellationToken()
        self.dry_run = dry_run
        self._handlers: dict[str, Callable[[], CommandResult]] = {
            UPDATE_CACHE: self.update_cache,
            CONFIGURE: self.configure_settings,
            SYNC_FILES: lambda: self.upload(self.engine.get_files_to_upload),
            COPY_DIRS: lambda: self.upload(
                self.engine.get_files_to_upload_from_copy_dirs
            ),
            COPY_ALL: lambda: self.upload(self.engine.get_all_files_to_upload),
            QUIT: lambda: CommandResult(exit_loop=True),
        }

    def list_commands(self) -> list[tuple[str, str]]:
        """Return ``(id, label)`` pairs for every command."""
        return list(COMMANDS)

    def run_command(self, command_id: str) -> CommandResult:
        """Run a command by id.

        Unknown ids do nothing and return a non-ok result.
        """
        handler = self._handlers.get(command_id.strip().lower())
        if handler is None:
            logger.debug("Unknown command: %r", command_id)
            return CommandResult(ok=False, errors=[f"Unknown command: {command_id}"])
        return handler()

    def update_cache(self) -> CommandResult:
        """Reload the remote listing into the cache."""
        self.out.info("Loading remote files...")
        try:
            entries = self.engine.update_cache()
        except RemoteToolError as e:
            self.out.error(str(e))
            return CommandResult(ok=False, errors=[str(e)])
        self.out.success(f"Done! {len(entries)} remote file(s) cached.")
        return CommandResult()

    def configure_settings(self) -> CommandResult:
        """Ask for settings and save them."""
        self.configure()
        return CommandResult()

    def _report_errors(self, errors: list[str]) -> CommandResult:
        for error in errors:
            self.out.error(error)
        return CommandResult(ok=False, exit_loop=True, errors=list(errors))

    def upload(
        self, get_pending: Callable[[], Optional[list[PendingTransfer]]]
    ) -> CommandResult:
        """Validate, reconcile, confirm and transfer.

        A failed validation or an absent remote cache ends an interactive
        loop. Local filesystem errors during the transfer propagate to the
        caller.
        """
        errors = self.engine.validate()
        if errors:
            return self._report_errors(errors)

        self.token.reset()
        try:
            items = get_pending()
        except ConfigurationError as e:
            return self._report_errors(e.errors)

        if items is None:
            message = "Remote cache not loaded, update the remote cache first."
            self.out.warning(message)
            return CommandResult(ok=False, exit_loop=True, errors=[message])

        if not items:
            self.out.success("No changes needed - everything is up to date!")
            return CommandResult(stats=_empty_stats())

        self._display_plan(items)

        if self.dry_run:
            for item in items:
                self.out.info(_describe(item))
            self.out.success("Dry run complete!")
            return CommandResult()

        if not self.confirm(f"Do you want to upload {len(items)} files?"):
            self.out.warning("Upload cancelled.")
            return CommandResult()

        with cancel_on_interrupt(self.token, self.out):
            stats = self.engine.upload(
                items,
                on_progress=self.out.info,
                should_continue=self.token.should_continue,
                on_warning=self.out.warning,
            )

        self._display_summary(stats)
        return CommandResult(stats=stats)

    def _display_plan(self, items: list[PendingTransfer]) -> None:
        uploads = sum(1 for i in items if i.remote_destination is not None)
        copies = sum(1 for i in items if i.target_destination is not None)
        self.out.info(f"Found {len(items)} file(s) to transfer:")
        if uploads:
            self.out.info(f"  ↑ Upload to remote: {uploads} file(s)")
        if copies:
            self.out.info(f"  → Copy to target: {copies} file(s)")

    def _display_summary(self, stats: dict) -> None:
        self.out.print("")
        if stats["cancelled"]:
            self.out.warning(
                f"Stopped after {stats['processed']} file(s), "
                "run again to transfer the rest."
            )
        else:
            self.out.success("Upload complete!")
        if stats["uploads"]:
            self.out.info(f"  Uploaded: {stats['uploads']}")
        if stats["copies"]:
            self.out.info(f"  Copied: {stats['copies']}")
        if stats["warnings"]:
            self.out.warning(f"  Uploads with warnings: {stats['warnings']}")


def _empty_stats() -> dict:
    return {
        "processed": 0,
        "uploads": 0,
        "copies": 0,
        "warnings": 0,
        "cancelled": False,
    }


def _describe(item: PendingTransfer) -> str:
    destinations = []
    if item.remote_destination is not None:
        destinations.append(f"remote:{item.remote_destination}")
    if item.target_destination is not None:
        destinations.append(str(item.target_destination))
    return f"{item.source} -> {', '.join(destinations)}"
