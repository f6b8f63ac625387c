"""Tests for the handle registry and deep release."""

from PIL import Image

from imgcache.cache.registry import HandleRegistry, release_deep
from imgcache.types import ImageHandle


def _handle(source: str = "a", dependencies=None) -> ImageHandle:
    return ImageHandle(Image.new("RGB", (2, 2)), source=source, dependencies=dependencies)


class TestHandleRegistry:
    def test_add(self):
        registry = HandleRegistry()
        handle = _handle()
        assert registry.add(handle) is True
        assert handle in registry
        assert len(registry) == 1

    def test_same_reference_added_once(self):
        registry = HandleRegistry()
        handle = _handle()
        registry.add(handle)
        assert registry.add(handle) is False
        assert len(registry) == 1

    def test_equal_content_different_handles(self):
        registry = HandleRegistry()
        registry.add(_handle("same"))
        registry.add(_handle("same"))
        assert len(registry) == 2

    def test_preserves_insertion_order(self):
        registry = HandleRegistry()
        handles = [_handle(str(i)) for i in range(3)]
        for h in handles:
            registry.add(h)
        assert list(registry) == handles

    def test_release_all(self):
        registry = HandleRegistry()
        handles = [_handle(str(i)) for i in range(3)]
        for h in handles:
            registry.add(h)
        assert registry.release_all() == 3
        assert len(registry) == 0
        assert all(h.released for h in handles)

    def test_release_all_twice_is_noop(self):
        registry = HandleRegistry()
        registry.add(_handle())
        registry.release_all()
        assert registry.release_all() == 0

    def test_readd_after_clear(self):
        registry = HandleRegistry()
        handle = _handle()
        registry.add(handle)
        registry.clear()
        assert registry.add(handle) is True


class TestReleaseDeep:
    def test_none_is_noop(self):
        release_deep(None)

    def test_releases_dependencies(self):
        atlas = _handle("atlas")
        frame = _handle("frame", dependencies=[atlas])
        release_deep(frame)
        assert frame.released
        assert atlas.released

    def test_shared_dependency_released_once(self):
        atlas = _handle("atlas")
        frames = [_handle(f"f{i}", dependencies=[atlas]) for i in range(2)]
        for frame in frames:
            release_deep(frame)
        assert atlas.released

    def test_already_released(self):
        handle = _handle()
        release_deep(handle)
        release_deep(handle)
        assert handle.released

    def test_cycle_terminates(self):
        a = _handle("a")
        b = _handle("b", dependencies=[a])
        a.dependencies.append(b)
        release_deep(a)
        assert a.released and b.released
