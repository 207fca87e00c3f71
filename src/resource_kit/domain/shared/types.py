"""Reusable Pydantic Annotated types for validation across the package.

Models annotate their fields with these instead of repeating constraints::

    from resource_kit.domain.shared.types import LoopCount, UnitInterval

    class MixerSettings(BaseModel):
        volume: UnitInterval = 1.0
        loops: LoopCount = 0
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

UnitInterval = Annotated[float, Field(ge=0.0, le=1.0)]
"""Float in [0.0, 1.0]; used for playback volume."""

LoopCount = Annotated[int, Field(ge=-1)]
"""Whole-file loop count: 0 once, n extra plays, -1 infinite."""


# ── String constraints ──────────────────────────────────────────────

FileExtensionStr = Annotated[str, Field(min_length=1, max_length=16, pattern=r"^[A-Za-z0-9]+$")]
"""File extension without the leading dot."""
