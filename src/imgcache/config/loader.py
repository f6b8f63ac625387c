"""YAML loading for sprite-sheet frame manifests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from imgcache.types import FrameBox


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load any YAML file safely."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Expected YAML mapping, got {type(raw).__name__} in {path}")

    return raw


def load_frame_manifest(path: str | Path) -> dict[str, FrameBox]:
    """Load a sprite-sheet manifest and return validated frame boxes.

    Expected layout::

        frames:
          biaoqing_1: [0, 0, 32, 32]
          biaoqing_2: {x: 32, y: 0, width: 32, height: 32}
    """
    raw = load_yaml(path)
    frames = raw.get("frames")
    if not isinstance(frames, dict):
        raise ValueError(f"Invalid frame manifest: missing top-level 'frames' mapping in {path}")

    result: dict[str, FrameBox] = {}
    for name, spec in frames.items():
        try:
            if isinstance(spec, (list, tuple)):
                if len(spec) != 4:
                    raise ValueError(f"frame '{name}' needs [x, y, width, height]")
                x, y, width, height = spec
                result[str(name)] = FrameBox(x=x, y=y, width=width, height=height)
            elif isinstance(spec, dict):
                result[str(name)] = FrameBox(**spec)
            else:
                raise ValueError(f"frame '{name}' has unsupported value {spec!r}")
        except ValidationError as e:
            raise ValueError(f"Invalid frame '{name}' in {path}: {e}") from e
    return result
