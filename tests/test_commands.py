"""Tests for the upload engine and the command interface."""

import signal
from datetime import datetime
from unittest.mock import Mock

import pytest

from photouploader.cache import RemoteListingCache
from photouploader.commands import (
    COPY_ALL,
    COPY_DIRS,
    QUIT,
    SYNC_FILES,
    UPDATE_CACHE,
    CommandRunner,
    cancel_on_interrupt,
)
from photouploader.config import ConfigStore
from photouploader.exceptions import ConfigurationError, RemoteToolError
from photouploader.output import OutputFormatter
from photouploader.rclone import CopyResult, RcloneClient
from photouploader.sync.engine import CancellationToken
from photouploader.uploader import UploadEngine

MARCH_FIRST = datetime(2024, 3, 1, 12, 0).timestamp()


@pytest.fixture(autouse=True)
def fixed_creation_time(monkeypatch):
    monkeypatch.setattr(
        "photouploader.sync.scanner.get_creation_time", lambda stat: MARCH_FIRST
    )


@pytest.fixture
def mock_client():
    """Create a mock rclone client with an empty remote."""
    client = Mock(spec=RcloneClient)
    client.list_files.return_value = ""
    client.copy_to.return_value = CopyResult(returncode=0, error_output="")
    return client


@pytest.fixture
def dirs(tmp_path):
    """Create source, target and copy dir folders."""
    paths = {
        name: tmp_path / name for name in ["source", "target", "docs", "docs_backup"]
    }
    for path in paths.values():
        path.mkdir()
    return paths


@pytest.fixture
def store(tmp_path, dirs):
    """Create a config store with a primary mapping and one copy dir."""
    store = ConfigStore(config_file=tmp_path / "config.json")
    store.save(
        {
            "source": str(dirs["source"]),
            "target": str(dirs["target"]),
            "gDriveDir": "Photos",
            "fileTypes": ".jpg",
            "copyDirs": [
                {
                    "source": str(dirs["docs"]),
                    "target": str(dirs["docs_backup"]),
                    "gDriveDir": "Docs",
                }
            ],
        }
    )
    return store


@pytest.fixture
def engine(store, mock_client, tmp_path):
    cache = RemoteListingCache(mock_client, cache_file=tmp_path / "cache.json")
    return UploadEngine(store, client=mock_client, cache=cache)


@pytest.fixture
def mock_output():
    """Create a mock output formatter."""
    output = Mock(spec=OutputFormatter)
    output.quiet = True
    return output


class TestUploadEngine:
    """Tests for UploadEngine."""

    def test_ensure_cache_refreshes_once(self, engine, mock_client):
        """Test that the cache is only loaded when absent."""
        mock_client.list_files.return_value = " 1 a.jpg\n"

        assert len(engine.ensure_cache()) == 1
        assert engine.ensure_cache() is None
        mock_client.list_files.assert_called_once()

    def test_get_files_to_upload(self, engine, dirs):
        """Test primary reconciliation through the engine."""
        engine.update_cache()
        (dirs["source"] / "a.jpg").write_bytes(b"x")
        (dirs["source"] / "a.txt").write_bytes(b"x")

        (item,) = engine.get_files_to_upload()

        assert item.remote_destination == "Photos/2024-03-01/a.jpg"

    def test_absent_cache_returns_none(self, engine, dirs):
        """Test that reconciliation refuses to run without a cache."""
        (dirs["source"] / "a.jpg").write_bytes(b"x")

        assert engine.get_files_to_upload() is None
        assert engine.get_files_to_upload_from_copy_dirs() is None
        assert engine.get_all_files_to_upload() is None

    def test_validation_errors_raise(self, store, engine, tmp_path):
        """Test that all validation errors are carried by the exception."""
        store.save({"source": str(tmp_path / "x"), "target": str(tmp_path / "y")})
        engine.update_cache()

        with pytest.raises(ConfigurationError) as exc_info:
            engine.get_files_to_upload()
        assert exc_info.value.errors == ["Source dir not found", "Target dir not found"]

    def test_all_is_primary_then_copy_dirs(self, engine, dirs):
        """Test that copy all concatenates primary and copy dir items."""
        engine.update_cache()
        (dirs["source"] / "a.jpg").write_bytes(b"x")
        (dirs["docs"] / "sub").mkdir()
        (dirs["docs"] / "sub" / "letter.pdf").write_bytes(b"x")

        items = engine.get_all_files_to_upload()

        assert [i.remote_destination for i in items] == [
            "Photos/2024-03-01/a.jpg",
            "Docs/sub/letter.pdf",
        ]

    def test_missing_copy_dir_source(self, store, engine, tmp_path):
        """Test that a missing copy dir source is a configuration error."""
        store.save(
            {"copyDirs": [{"source": str(tmp_path / "gone"), "target": "t", "gDriveDir": "d"}]}
        )
        engine.update_cache()

        with pytest.raises(ConfigurationError, match="gone"):
            engine.get_files_to_upload_from_copy_dirs()


class TestCommandRunner:
    """Tests for CommandRunner."""

    def _runner(self, engine, out, confirm=True, dry_run=False, configure=None):
        return CommandRunner(
            engine=engine,
            out=out,
            confirm=lambda question: confirm,
            configure=configure or Mock(),
            dry_run=dry_run,
        )

    def test_list_commands(self, engine, mock_output):
        """Test that the menu lists every command id."""
        runner = self._runner(engine, mock_output)

        ids = [cid for cid, _label in runner.list_commands()]

        assert ids == ["u", "c", "s", "d", "a", "q"]

    def test_unknown_command(self, engine, mock_output):
        """Test that unknown ids are rejected without side effects."""
        result = self._runner(engine, mock_output).run_command("x")

        assert result.ok is False
        assert result.exit_loop is False

    def test_quit(self, engine, mock_output):
        """Test that quit ends the loop."""
        assert self._runner(engine, mock_output).run_command(QUIT).exit_loop is True

    def test_configure_calls_callback(self, engine, mock_output):
        """Test that configure delegates to the front end."""
        configure = Mock()

        self._runner(engine, mock_output, configure=configure).run_command("c")

        configure.assert_called_once_with()

    def test_update_cache(self, engine, mock_output, mock_client):
        """Test that update refreshes the cache."""
        mock_client.list_files.return_value = " 1 a.jpg\n"

        result = self._runner(engine, mock_output).run_command(UPDATE_CACHE)

        assert result.ok is True
        assert len(engine.cache.load()) == 1

    def test_update_cache_failure(self, engine, mock_output, mock_client):
        """Test that a listing failure is reported, not raised."""
        mock_client.list_files.side_effect = RemoteToolError("rclone missing")

        result = self._runner(engine, mock_output).run_command(UPDATE_CACHE)

        assert result.ok is False
        assert result.exit_loop is False
        mock_output.error.assert_called_once_with("rclone missing")

    def test_sync_transfers_files(self, engine, mock_output, mock_client, dirs):
        """Test the full sync command."""
        engine.update_cache()
        (dirs["source"] / "a.jpg").write_bytes(b"x")

        result = self._runner(engine, mock_output).run_command(SYNC_FILES)

        assert result.ok is True
        assert result.stats["uploads"] == 1
        assert result.stats["copies"] == 1
        assert (dirs["target"] / "2024-03-01" / "a.jpg").exists()
        mock_client.copy_to.assert_called_once()

    def test_sync_declined(self, engine, mock_output, mock_client, dirs):
        """Test that answering no transfers nothing."""
        engine.update_cache()
        (dirs["source"] / "a.jpg").write_bytes(b"x")

        result = self._runner(engine, mock_output, confirm=False).run_command(SYNC_FILES)

        assert result.stats is None
        mock_client.copy_to.assert_not_called()
        assert not (dirs["target"] / "2024-03-01").exists()

    def test_dry_run(self, engine, mock_output, mock_client, dirs):
        """Test that dry run lists items without transferring."""
        engine.update_cache()
        (dirs["source"] / "a.jpg").write_bytes(b"x")

        result = self._runner(engine, mock_output, dry_run=True).run_command(SYNC_FILES)

        assert result.ok is True
        mock_client.copy_to.assert_not_called()

    def test_nothing_to_do(self, engine, mock_output, mock_client):
        """Test an up to date source."""
        engine.update_cache()

        result = self._runner(engine, mock_output).run_command(SYNC_FILES)

        assert result.ok is True
        assert result.stats["processed"] == 0

    def test_validation_failure_ends_loop(self, store, engine, mock_output, tmp_path):
        """Test that validation errors are all shown and end the loop."""
        store.save({"source": str(tmp_path / "x"), "target": str(tmp_path / "y")})

        result = self._runner(engine, mock_output).run_command(SYNC_FILES)

        assert result.exit_loop is True
        assert result.errors == ["Source dir not found", "Target dir not found"]
        assert mock_output.error.call_count == 2

    def test_absent_cache_ends_loop(self, engine, mock_output, dirs):
        """Test that an absent cache is reported and ends the loop."""
        (dirs["source"] / "a.jpg").write_bytes(b"x")

        result = self._runner(engine, mock_output).run_command(SYNC_FILES)

        assert result.ok is False
        assert result.exit_loop is True
        mock_output.warning.assert_called_once()

    def test_copy_dirs(self, engine, mock_output, dirs):
        """Test the copy dirs command."""
        engine.update_cache()
        (dirs["docs"] / "a.txt").write_bytes(b"x")

        result = self._runner(engine, mock_output).run_command(COPY_DIRS)

        assert result.stats["copies"] == 1
        assert (dirs["docs_backup"] / "a.txt").exists()

    def test_copy_all_skips_already_uploaded(self, engine, mock_output, mock_client, dirs):
        """Test that a second run finds nothing after the first completes."""
        engine.update_cache()
        (dirs["source"] / "a.jpg").write_bytes(b"x")
        (dirs["docs"] / "a.txt").write_bytes(b"x")
        runner = self._runner(engine, mock_output)

        first = runner.run_command(COPY_ALL)
        second = runner.run_command(COPY_ALL)

        assert first.stats["processed"] == 2
        assert second.stats["processed"] == 0
        assert mock_client.copy_to.call_count == 2

    def test_token_is_reset_between_runs(self, engine, mock_output, dirs):
        """Test that a previous cancellation does not block the next run."""
        engine.update_cache()
        (dirs["source"] / "a.jpg").write_bytes(b"x")
        token = CancellationToken()
        token.cancel()
        runner = CommandRunner(
            engine=engine,
            out=mock_output,
            confirm=lambda q: True,
            configure=Mock(),
            token=token,
        )

        result = runner.run_command(SYNC_FILES)

        assert result.stats["processed"] == 1


class TestCancelOnInterrupt:
    """Tests for the Ctrl+C handler."""

    def test_first_interrupt_cancels(self, mock_output):
        """Test that the handler sets the token and is restored afterwards."""
        token = CancellationToken()
        previous = signal.getsignal(signal.SIGINT)

        with cancel_on_interrupt(token, mock_output):
            handler = signal.getsignal(signal.SIGINT)
            handler(signal.SIGINT, None)
            assert token.is_cancelled is True
            with pytest.raises(KeyboardInterrupt):
                handler(signal.SIGINT, None)

        assert signal.getsignal(signal.SIGINT) is previous
