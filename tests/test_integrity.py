"""Tests for fingerprints, checksum persistence, baseline store and restore."""

from pathlib import Path

import pytest

from soulscan.integrity.baseline import BaselineStore
from soulscan.integrity.checksums import ChecksumStore, fingerprint, fingerprint_all
from soulscan.integrity.restore import RestoreExecutor


class TestFingerprint:
    def test_deterministic_sha256(self):
        assert fingerprint(b"hello") == fingerprint(b"hello")
        assert fingerprint(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        assert len(fingerprint(b"anything")) == 64

    def test_no_whitespace_normalization(self):
        assert fingerprint(b"line\n") != fingerprint(b"line\r\n")
        assert fingerprint(b"a b") != fingerprint(b"a  b")

    def test_fingerprint_all(self):
        result = fingerprint_all({"SOUL.md": b"A", "USER.md": b"B"})
        assert set(result) == {"SOUL.md", "USER.md"}
        assert result["SOUL.md"] == fingerprint(b"A")


class TestChecksumStore:
    def test_missing_file_is_absent(self, tmp_path: Path):
        assert ChecksumStore(tmp_path / "checksums.json").load() is None

    def test_save_and_load(self, tmp_path: Path):
        store = ChecksumStore(tmp_path / "checksums.json")
        store.save({"SOUL.md": "ab" * 32})
        assert store.load() == {"SOUL.md": "ab" * 32}

    def test_save_replaces_previous_set(self, tmp_path: Path):
        store = ChecksumStore(tmp_path / "checksums.json")
        store.save({"SOUL.md": "1" * 64, "USER.md": "2" * 64})
        store.save({"SOUL.md": "3" * 64})
        assert store.load() == {"SOUL.md": "3" * 64}

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]", '{"SOUL.md": 5}'])
    def test_malformed_file_is_absent(self, tmp_path: Path, content: str):
        path = tmp_path / "checksums.json"
        path.write_text(content)
        assert ChecksumStore(path).load() is None


class TestBaselineStore:
    def test_save_and_load(self, tmp_path: Path):
        store = BaselineStore(tmp_path / "baseline")
        store.save({"SOUL.md": b"A", "USER.md": b"me"})

        assert store.load("SOUL.md") == b"A"
        assert store.load("USER.md") == b"me"
        assert store.load("TOOLS.md") is None

    def test_save_drops_untracked_snapshots(self, tmp_path: Path):
        store = BaselineStore(tmp_path / "baseline")
        store.save({"SOUL.md": b"A", "USER.md": b"me"})
        store.save({"SOUL.md": b"B"})

        assert store.load("SOUL.md") == b"B"
        assert store.load("USER.md") is None
        assert not (tmp_path / "baseline" / "USER.md").exists()

    def test_no_index_means_no_baseline(self, tmp_path: Path):
        root = tmp_path / "baseline"
        root.mkdir()
        (root / "SOUL.md").write_bytes(b"A")
        assert BaselineStore(root).load("SOUL.md") is None

    def test_corrupt_index_means_no_baseline(self, tmp_path: Path):
        store = BaselineStore(tmp_path / "baseline")
        store.save({"SOUL.md": b"A"})
        store.index_path.write_text("not json")
        assert store.load("SOUL.md") is None

    def test_modified_snapshot_is_rejected(self, tmp_path: Path):
        store = BaselineStore(tmp_path / "baseline")
        store.save({"SOUL.md": b"A"})
        (tmp_path / "baseline" / "SOUL.md").write_bytes(b"evil")

        assert store.load("SOUL.md") is None
        assert store.status() == {"SOUL.md": False}

    def test_rejects_path_like_names(self, tmp_path: Path):
        store = BaselineStore(tmp_path / "baseline")
        with pytest.raises(ValueError):
            store.save({"../escape.md": b"x"})


class TestRestoreExecutor:
    def test_round_trip(self, tmp_path: Path):
        workspace = tmp_path / "ws"
        workspace.mkdir()
        store = BaselineStore(tmp_path / "baseline")
        store.save({"SOUL.md": b"C"})
        saved_digest = fingerprint(b"C")

        (workspace / "SOUL.md").write_bytes(b"tampered")
        assert RestoreExecutor(workspace, store).restore("SOUL.md")

        live = (workspace / "SOUL.md").read_bytes()
        assert live == b"C"
        assert fingerprint(live) == saved_digest

    def test_restores_removed_file(self, tmp_path: Path):
        workspace = tmp_path / "ws"
        workspace.mkdir()
        store = BaselineStore(tmp_path / "baseline")
        store.save({"IDENTITY.md": b"name: x"})

        assert RestoreExecutor(workspace, store).restore("IDENTITY.md")
        assert (workspace / "IDENTITY.md").read_bytes() == b"name: x"

    def test_missing_baseline_leaves_file_untouched(self, tmp_path: Path):
        workspace = tmp_path / "ws"
        workspace.mkdir()
        (workspace / "SOUL.md").write_bytes(b"B")
        store = BaselineStore(tmp_path / "baseline")

        assert not RestoreExecutor(workspace, store).restore("SOUL.md")
        assert (workspace / "SOUL.md").read_bytes() == b"B"


def test_restore_write_failure_returns_false(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    from soulscan.integrity import restore as restore_mod

    workspace = tmp_path / "ws"
    workspace.mkdir()
    (workspace / "SOUL.md").write_bytes(b"B")
    store = BaselineStore(tmp_path / "baseline")
    store.save({"SOUL.md": b"A"})

    def full_disk(path: Path, data: bytes) -> None:
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(restore_mod, "atomic_write", full_disk)

    assert not RestoreExecutor(workspace, store).restore("SOUL.md")
    assert (workspace / "SOUL.md").read_bytes() == b"B"
