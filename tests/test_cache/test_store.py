"""Tests for the local file store."""

import pytest

from imgcache.cache.store import LocalStore
from imgcache.errors.exceptions import LoadError, StorageError


class TestEnsureCacheDir:
    def test_creates_missing_directory(self, tmp_path):
        store = LocalStore(tmp_path / "root" / "img")
        result = store.ensure_cache_dir()
        assert result == tmp_path / "root" / "img"
        assert result.is_dir()

    def test_idempotent(self, tmp_path):
        store = LocalStore(tmp_path / "img")
        assert store.ensure_cache_dir() == store.ensure_cache_dir()

    def test_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = LocalStore(blocker / "img")
        with pytest.raises(StorageError) as exc_info:
            store.ensure_cache_dir()
        assert exc_info.value.path == blocker / "img"
        assert isinstance(exc_info.value.original, OSError)


class TestExists:
    def test_missing_file(self, tmp_path):
        store = LocalStore(tmp_path)
        assert store.exists(tmp_path / "nope.jpg") is False

    def test_present_file(self, tmp_path):
        (tmp_path / "a.jpg").write_bytes(b"x")
        assert LocalStore(tmp_path).exists(tmp_path / "a.jpg") is True

    def test_directory_is_not_a_file(self, tmp_path):
        (tmp_path / "d.jpg").mkdir()
        assert LocalStore(tmp_path).exists(tmp_path / "d.jpg") is False


class TestWrite:
    async def test_writes_bytes(self, tmp_path):
        store = LocalStore(tmp_path)
        await store.write(tmp_path / "a.jpg", b"\xff\xd8data")
        assert (tmp_path / "a.jpg").read_bytes() == b"\xff\xd8data"

    async def test_overwrites(self, tmp_path):
        store = LocalStore(tmp_path)
        await store.write(tmp_path / "a.jpg", b"first")
        await store.write(tmp_path / "a.jpg", b"second")
        assert (tmp_path / "a.jpg").read_bytes() == b"second"

    async def test_leaves_no_temp_files(self, tmp_path):
        store = LocalStore(tmp_path)
        await store.write(tmp_path / "a.jpg", b"data")
        assert [p.name for p in tmp_path.iterdir()] == ["a.jpg"]

    async def test_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        store = LocalStore(blocker)
        with pytest.raises(StorageError):
            await store.write(blocker / "a.jpg", b"data")


class TestReadAsImage:
    async def test_decodes_file(self, tmp_path, png_bytes):
        (tmp_path / "a.jpg").write_bytes(png_bytes)
        handle = await LocalStore(tmp_path).read_as_image(tmp_path / "a.jpg")
        assert handle.size == (4, 3)

    async def test_missing_file_raises_load_error(self, tmp_path):
        with pytest.raises(LoadError):
            await LocalStore(tmp_path).read_as_image(tmp_path / "missing.jpg")

    async def test_corrupt_file_raises_load_error(self, tmp_path):
        (tmp_path / "bad.jpg").write_bytes(b"not an image")
        with pytest.raises(LoadError):
            await LocalStore(tmp_path).read_as_image(tmp_path / "bad.jpg")

    async def test_uses_injected_decoder(self, tmp_path):
        seen = []
        store = LocalStore(tmp_path, decoder=lambda path: seen.append(path) or "handle")
        result = await store.read_as_image(tmp_path / "a.jpg")
        assert result == "handle"
        assert seen == [tmp_path / "a.jpg"]


class TestDiscard:
    def test_removes_file(self, tmp_path):
        (tmp_path / "a.jpg").write_bytes(b"x")
        LocalStore(tmp_path).discard(tmp_path / "a.jpg")
        assert not (tmp_path / "a.jpg").exists()

    def test_missing_file_is_noop(self, tmp_path):
        LocalStore(tmp_path).discard(tmp_path / "a.jpg")


class TestEntries:
    def test_lists_only_cache_files(self, tmp_path):
        (tmp_path / "a.jpg").write_bytes(b"1")
        (tmp_path / "b.jpg").write_bytes(b"22")
        (tmp_path / "notes.txt").write_text("skip")
        store = LocalStore(tmp_path)
        assert sorted(p.name for p in store.entries()) == ["a.jpg", "b.jpg"]
        assert store.size_bytes() == 3

    def test_missing_directory(self, tmp_path):
        store = LocalStore(tmp_path / "absent")
        assert store.entries() == []
        assert store.size_bytes() == 0

    def test_size_skips_vanished_file(self, tmp_path, monkeypatch):
        (tmp_path / "a.jpg").write_bytes(b"123")
        store = LocalStore(tmp_path)
        monkeypatch.setattr(store, "entries", lambda: [tmp_path / "a.jpg", tmp_path / "gone.jpg"])
        assert store.size_bytes() == 3

    def test_clear(self, tmp_path):
        (tmp_path / "a.jpg").write_bytes(b"1")
        (tmp_path / "b.jpg").write_bytes(b"2")
        (tmp_path / "keep.txt").write_text("x")
        store = LocalStore(tmp_path)
        assert store.clear() == 2
        assert store.entries() == []
        assert (tmp_path / "keep.txt").exists()
