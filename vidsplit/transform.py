"""Rotation/scale selection and filter graph resolution

Responsibilities:
- Cycle rotation through a fixed ring and scale through an ordered ladder
- Map a TransformSpec to ffmpeg filter fragments
- Pick the scale axis to lock from the rotation, so a target resolution
  is applied to the short side after rotation

The ladder value is the pixel size of the locked axis itself (720p gives
scale=720:-1 or scale=-1:720), not a 16:9 width such as 1280.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .exceptions import ConfigurationError
from .models import Rotation, Scale, TransformSpec

logger = logging.getLogger(__name__)

ROTATION_RING: Dict[Rotation, Rotation] = {
    Rotation.NONE: Rotation.CW_90,
    Rotation.CW_90: Rotation.HALF,
    Rotation.HALF: Rotation.CCW_90,
    Rotation.CCW_90: Rotation.NONE,
}

SCALE_LADDER = (Scale.NATIVE, Scale.P144, Scale.P360, Scale.P720, Scale.P1080)

ROTATION_FRAGMENTS: Dict[Rotation, str] = {
    Rotation.NONE: "",
    Rotation.CW_90: "transpose=1,",
    Rotation.CCW_90: "transpose=2,",
    Rotation.HALF: "rotate=PI:bilinear=0,",
}

# A half turn keeps the frame's orientation, so height stays the short axis
HEIGHT_LOCKED = frozenset({Rotation.HALF})


def next_rotation(rotation: Rotation) -> Rotation:
    return ROTATION_RING[rotation]


def step_scale(scale: Scale, direction: str) -> Scale:
    """Move one step "left" or "right" on the scale ladder, wrapping at both ends."""
    if direction not in ("left", "right"):
        raise ConfigurationError(f"Invalid scale direction: {direction!r}", module="transform")
    step = -1 if direction == "left" else 1
    index = SCALE_LADDER.index(scale)
    return SCALE_LADDER[(index + step) % len(SCALE_LADDER)]


def scale_fragment(rotation: Rotation, scale: Scale) -> str:
    if scale is Scale.NATIVE:
        return ""
    if rotation in HEIGHT_LOCKED:
        return f"scale=-1:{scale.value}"
    return f"scale={scale.value}:-1"


@dataclass(frozen=True)
class ResolvedTransform:
    """Filter fragments for a TransformSpec.

    Attributes:
        rotation_fragment: Rotation filter with its trailing separator, or ""
        scale_fragment: Scale filter, or ""
        uses_filter: Whether any re-encoding filter is required
    """
    rotation_fragment: str
    scale_fragment: str
    uses_filter: bool

    @property
    def filter_graph(self) -> Optional[str]:
        """The composed -vf value, or None when no filter is active."""
        graph = f"{self.rotation_fragment}{self.scale_fragment}".rstrip(",")
        return graph or None


def resolve_transform(spec: TransformSpec) -> ResolvedTransform:
    resolved = ResolvedTransform(
        rotation_fragment=ROTATION_FRAGMENTS[spec.rotate],
        scale_fragment=scale_fragment(spec.rotate, spec.scale),
        uses_filter=spec.rotate is not Rotation.NONE or spec.scale is not Scale.NATIVE,
    )
    logger.debug("Resolved %s to filter graph %r", spec, resolved.filter_graph)
    return resolved
