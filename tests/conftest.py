import io
import struct
import zlib

import httpx
import pytest
from PIL import Image

from imgcache.config.schema import ImageCacheConfig


def _encode(size=(4, 3), color="red", fmt="PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    """Small valid PNG (4x3, red)."""
    return _encode()


@pytest.fixture
def jpeg_bytes():
    """Small valid JPEG (8x8, blue)."""
    return _encode(size=(8, 8), color="blue", fmt="JPEG")


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


@pytest.fixture
def oversized_png_bytes():
    """PNG whose header declares 20000x20000 pixels, far past Pillow's bomb limit."""
    header = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b""))
        + _png_chunk(b"IEND", b"")
    )


@pytest.fixture
def resource_dir(tmp_path):
    """Resource directory holding the default image."""
    root = tmp_path / "resources"
    (root / "SystemHead").mkdir(parents=True)
    (root / "SystemHead" / "1.png").write_bytes(_encode(size=(2, 2), color="white"))
    return root


@pytest.fixture
def chat_resources(resource_dir):
    """Chat sprite sheet: a 64x32 atlas with two 32x32 frames."""
    chat = resource_dir / "Chat"
    chat.mkdir()
    atlas = Image.new("RGB", (64, 32), "black")
    atlas.paste((255, 0, 0), (0, 0, 32, 32))
    atlas.paste((0, 255, 0), (32, 0, 64, 32))
    atlas.save(chat / "Chat.png")
    (chat / "Chat.yaml").write_text(
        "frames:\n"
        "  biaoqing_2: [32, 0, 32, 32]\n"
        "  biaoqing_1: {x: 0, y: 0, width: 32, height: 32}\n"
        "  unrelated: [0, 0, 8, 8]\n"
    )
    return resource_dir


@pytest.fixture
def config(tmp_path, resource_dir):
    """Config with storage under tmp_path and local caching enabled."""
    return ImageCacheConfig(
        storage_root=tmp_path / "storage",
        resource_dir=resource_dir,
        local_storage=True,
    )


class ImageServer:
    """Fake HTTP server for httpx.MockTransport. Records every request URL."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, bytes] | Exception] = {}
        self.requests: list[str] = []

    def add(self, url: str, content: bytes = b"", status: int = 200) -> None:
        self.routes[url] = (status, content)

    def fail(self, url: str, error: Exception) -> None:
        self.routes[url] = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404)
        if isinstance(route, Exception):
            raise route
        status, content = route
        return httpx.Response(status, content=content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def image_server(png_bytes):
    """Fake server serving a PNG at http://x/a.jpg."""
    server = ImageServer()
    server.add("http://x/a.jpg", png_bytes)
    return server
