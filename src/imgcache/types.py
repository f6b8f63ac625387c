"""Shared models for imgcache."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from PIL import Image


class ImageHandle:
    """A decoded image plus everything it was derived from.

    Handles are compared by identity: two decodes of the same bytes are two
    different handles. ``dependencies`` lists the handles this one cannot
    outlive (e.g. the atlas a sprite frame was cut from).
    """

    def __init__(
        self,
        image: Image.Image,
        source: str,
        dependencies: list[ImageHandle] | None = None,
    ) -> None:
        self._image: Image.Image | None = image
        self.source = source
        self.dependencies: list[ImageHandle] = list(dependencies or [])

    @property
    def image(self) -> Image.Image:
        if self._image is None:
            raise ValueError(f"Image handle for {self.source!r} has been released")
        return self._image

    @property
    def released(self) -> bool:
        return self._image is None

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    @property
    def mode(self) -> str:
        return self.image.mode

    def release(self) -> None:
        """Close this handle's own image. Dependencies are left alone."""
        if self._image is not None:
            self._image.close()
            self._image = None

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self._image.size}"
        return f"ImageHandle(source={self.source!r}, {state})"


class FrameBox(BaseModel):
    """Pixel box of one frame inside a sprite sheet."""

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @property
    def box(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)
