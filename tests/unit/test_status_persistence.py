"""Unit tests for StatusStore snapshot persistence."""

from __future__ import annotations

import datetime as dt
import json
import typing as typ

import pytest

from pushdeploy.status.models import FAILURE_MARKER, DeploymentStatus
from pushdeploy.status.persistence import StatusStore

if typ.TYPE_CHECKING:
    from pathlib import Path

ATTEMPT = dt.datetime(2024, 7, 8, 12, 0, tzinfo=dt.UTC)
SUCCESS = dt.datetime(2024, 7, 8, 12, 1, 30, tzinfo=dt.UTC)


@pytest.fixture
def snapshot() -> dict[str, DeploymentStatus]:
    """Return a snapshot with one successful and one failed repository."""
    return {
        "app": DeploymentStatus(
            last_attempt=ATTEMPT,
            last_success=SUCCESS,
            last_exit_code=0,
            last_duration=dt.timedelta(seconds=90, milliseconds=250),
        ),
        "api": DeploymentStatus(
            last_attempt=ATTEMPT,
            last_exit_code=2,
            last_duration=dt.timedelta(seconds=4),
            last_error=FAILURE_MARKER,
        ),
    }


class TestStatusStoreLoad:
    """Tests for StatusStore.load."""

    def test_missing_file_is_fresh_start(self, tmp_path: Path) -> None:
        """A missing snapshot yields an empty mapping."""
        assert StatusStore(tmp_path / "absent.json").load({"app"}) == {}

    @pytest.mark.parametrize(
        "content",
        [
            b"",
            b"{not json",
            b"[]",
            b'{"app": 3}',
            b'{"app": {"lastAttempt": "yesterday"}}',
            b'{"app": {"lastExitCode": "zero"}}',
        ],
    )
    def test_corrupt_file_is_discarded(self, tmp_path: Path, content: bytes) -> None:
        """Unparseable or mis-shaped snapshots fall back to empty."""
        path = tmp_path / "status.json"
        path.write_bytes(content)
        assert StatusStore(path).load({"app"}) == {}

    def test_unreadable_path_is_fresh_start(self, tmp_path: Path) -> None:
        """A snapshot path that cannot be read as a file falls back to empty."""
        assert StatusStore(tmp_path).load({"app"}) == {}

    def test_drops_unregistered_identifiers(
        self,
        tmp_path: Path,
        snapshot: dict[str, DeploymentStatus],
    ) -> None:
        """Entries for repositories no longer registered are dropped."""
        store = StatusStore(tmp_path / "status.json")
        store.save(snapshot)
        assert store.load({"app", "web"}) == {"app": snapshot["app"]}


class TestStatusStoreSave:
    """Tests for StatusStore.save."""

    def test_round_trip(
        self,
        tmp_path: Path,
        snapshot: dict[str, DeploymentStatus],
    ) -> None:
        """Loading a saved snapshot reproduces it exactly."""
        store = StatusStore(tmp_path / "status.json")
        assert store.save(snapshot) is True
        assert store.load(snapshot.keys()) == snapshot

    def test_json_layout(
        self,
        tmp_path: Path,
        snapshot: dict[str, DeploymentStatus],
    ) -> None:
        """The file uses camelCase keys, ISO-8601 values, and nulls."""
        path = tmp_path / "status.json"
        StatusStore(path).save(snapshot)
        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["app"]["lastAttempt"] == "2024-07-08T12:00:00Z"
        assert data["app"]["lastSuccess"] == "2024-07-08T12:01:30Z"
        assert data["app"]["lastExitCode"] == 0
        assert data["app"]["lastError"] is None
        assert data["api"]["lastSuccess"] is None
        assert data["api"]["lastError"] == FAILURE_MARKER
        assert data["app"]["lastDuration"].startswith("PT")

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        """Missing parent directories are created."""
        path = tmp_path / "nested" / "dir" / "status.json"
        assert StatusStore(path).save({}) is True
        assert path.read_bytes() == b"{}"

    def test_overwrites_whole_snapshot(
        self,
        tmp_path: Path,
        snapshot: dict[str, DeploymentStatus],
    ) -> None:
        """Each save replaces the previous contents entirely."""
        store = StatusStore(tmp_path / "status.json")
        store.save(snapshot)
        store.save({"app": snapshot["app"]})
        assert store.load({"app", "api"}) == {"app": snapshot["app"]}

    def test_leaves_no_temporary_file(
        self,
        tmp_path: Path,
        snapshot: dict[str, DeploymentStatus],
    ) -> None:
        """The temporary file is renamed into place."""
        StatusStore(tmp_path / "status.json").save(snapshot)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["status.json"]

    def test_write_failure_is_reported_not_raised(self, tmp_path: Path) -> None:
        """An OSError while writing returns False instead of raising."""
        target = tmp_path / "status.json"
        target.mkdir()
        assert StatusStore(target).save({"app": DeploymentStatus()}) is False
