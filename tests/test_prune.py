"""
Tests for store cleanup, stats and the CLI wrappers around them
"""
import os

import pytest

from sds_harvester.errors import ConfigError
from sds_harvester.main import _format_bytes, main
from sds_harvester.prune import find_redundant, manifest_stats, prune_store, store_stats


def _store(tmp_path):
    store = tmp_path / "PDFs"
    store.mkdir()
    (store / "a.pdf").write_bytes(b"aaaa")
    (store / "b.pdf").write_bytes(b"bb")
    (store / "keep.txt").write_text("x")
    manifest = tmp_path / "downloaded.txt"
    manifest.write_text("a.pdf\nc.pdf\n\nkeep.txt\n")
    return store, manifest


class TestPrune:
    def test_find_redundant(self, tmp_path):
        store, manifest = _store(tmp_path)
        assert find_redundant(str(manifest), str(store)) == ["a.pdf"]

    def test_prune_removes_common_files(self, tmp_path):
        store, manifest = _store(tmp_path)
        removed = prune_store(str(manifest), str(store))
        assert removed == [os.path.join(str(store), "a.pdf")]
        assert sorted(os.listdir(store)) == ["b.pdf", "keep.txt"]

    def test_dry_run_keeps_files(self, tmp_path):
        store, manifest = _store(tmp_path)
        removed = prune_store(str(manifest), str(store), dry_run=True)
        assert len(removed) == 1
        assert sorted(os.listdir(store)) == ["a.pdf", "b.pdf", "keep.txt"]

    def test_missing_manifest(self, tmp_path):
        store, _ = _store(tmp_path)
        assert prune_store(str(tmp_path / "missing.txt"), str(store)) == []
        assert len(os.listdir(store)) == 3


class TestStats:
    def test_store_and_manifest(self, tmp_path):
        store, manifest = _store(tmp_path)
        assert store_stats(str(store)) == (2, 6)
        assert manifest_stats(str(manifest)) == 3
        assert manifest_stats(str(tmp_path / "missing.txt")) == 0

    def test_format_bytes(self):
        assert _format_bytes(512) == "512 B"
        assert _format_bytes(2048) == "2.0 KB"
        assert _format_bytes(5 * 1024 ** 2) == "5.0 MB"
        assert _format_bytes(3 * 1024 ** 3) == "3.00 GB"


class TestCli:
    def _config(self, tmp_path, store, manifest):
        path = tmp_path / "config.yaml"
        path.write_text(
            f"log_dir: {tmp_path / 'logs'}\n"
            "harvest:\n"
            f"  output_dir: {store}\n"
            f"  manifest_path: {manifest}\n"
        )
        return str(path)

    def test_prune_command(self, tmp_path, capsys):
        store, manifest = _store(tmp_path)
        main(["--config", self._config(tmp_path, store, manifest), "--prune"])
        assert "Removed 1 files" in capsys.readouterr().out
        assert not (store / "a.pdf").exists()

    def test_prune_dry_run_command(self, tmp_path, capsys):
        store, manifest = _store(tmp_path)
        main(["--config", self._config(tmp_path, store, manifest), "--prune", "--dry-run"])
        assert "Would remove 1 files" in capsys.readouterr().out
        assert (store / "a.pdf").exists()

    def test_stats_command(self, tmp_path, capsys):
        store, manifest = _store(tmp_path)
        main(["--config", self._config(tmp_path, store, manifest), "--stats"])
        out = capsys.readouterr().out
        assert "HARVEST STATISTICS" in out
        assert "6 B" in out

    def test_unknown_source(self, tmp_path):
        store, manifest = _store(tmp_path)
        path = self._config(tmp_path, store, manifest)
        with open(path, "a") as f:
            f.write("source: nowhere\n")
        with pytest.raises(ConfigError):
            main(["--config", path, "--stats"])
