"""Plain-text rendering of blooms for the interactive ritual."""

from typing import Optional

from ..kernel.bloom import Bloom
from .session import RULE

RESONANCE_CELLS = 10


def resonance_bar(resonance: float, label: Optional[str] = None) -> str:
    """Render resonance in [0, 1] as a ten cell bar with its type label."""
    filled = max(0, min(RESONANCE_CELLS, round(resonance * RESONANCE_CELLS)))
    bar = "●" * filled + "○" * (RESONANCE_CELLS - filled)
    return f"[{bar}] {label or 'unknown'}"


def bloom_header(bloom: Bloom, position: Optional[int] = None, total: Optional[int] = None) -> str:
    progress = f"[{position}/{total}] " if position is not None and total is not None else ""
    return "\n".join([
        RULE,
        f"  {progress}{bloom.title}",
        f"  {resonance_bar(bloom.resonance, bloom.resonance_type)}",
        "",
    ])


def bloom_content(bloom: Bloom) -> str:
    if not bloom.body:
        return "\n  (no content)\n"
    body = "\n".join(f"  {line}" for line in bloom.body.splitlines())
    return f"\n{body}\n"
