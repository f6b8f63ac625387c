"""Image decoding with Pillow."""

from __future__ import annotations

import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from imgcache.errors.exceptions import LoadError
from imgcache.types import FrameBox, ImageHandle

_MAX_IMAGE_SIZE_BYTES = 50 * 1024 * 1024  # 50 MB

# DecompressionBombError derives from Exception, not OSError
_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    SyntaxError,
    ValueError,
)


def decode_from_path(path: str | Path) -> ImageHandle:
    """Decode an image file into a handle.

    The file extension is ignored; Pillow identifies the format from the
    content, so a PNG cached under ``<hash>.jpg`` still decodes.
    """
    path = Path(path)
    if not path.is_file():
        raise LoadError(f"Image file not found: {path}", source=str(path))
    size = path.stat().st_size
    if size > _MAX_IMAGE_SIZE_BYTES:
        raise LoadError(
            f"Image too large ({size} bytes, max {_MAX_IMAGE_SIZE_BYTES}): {path}",
            source=str(path),
        )
    try:
        img = Image.open(path)
        img.load()
    except _DECODE_ERRORS as e:
        raise LoadError(f"Cannot decode image {path}: {e}", source=str(path), original=e) from e
    return ImageHandle(img, source=str(path))


def decode_from_bytes(data: bytes, source: str = "<bytes>") -> ImageHandle:
    """Decode raw image bytes into a handle."""
    if not data:
        raise LoadError(f"Empty image data from {source}", source=source)
    if len(data) > _MAX_IMAGE_SIZE_BYTES:
        raise LoadError(
            f"Image too large ({len(data)} bytes, max {_MAX_IMAGE_SIZE_BYTES}) from {source}",
            source=source,
        )
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except _DECODE_ERRORS as e:
        raise LoadError(f"Cannot decode image from {source}: {e}", source=source, original=e) from e
    return ImageHandle(img, source=source)


def crop_frames(
    atlas: ImageHandle,
    boxes: dict[str, FrameBox],
    names: list[str],
) -> list[ImageHandle]:
    """Cut the named frames out of a sprite sheet, in ``names`` order.

    Names missing from ``boxes`` are skipped. Each frame depends on the atlas.
    """
    width, height = atlas.size
    frames: list[ImageHandle] = []
    for name in names:
        frame_box = boxes.get(name)
        if frame_box is None:
            continue
        _, _, right, bottom = frame_box.box
        if right > width or bottom > height:
            raise LoadError(
                f"Frame '{name}' {frame_box.box} lies outside atlas {atlas.size}",
                source=atlas.source,
            )
        frames.append(
            ImageHandle(
                atlas.image.crop(frame_box.box),
                source=f"{atlas.source}#{name}",
                dependencies=[atlas],
            )
        )
    return frames
