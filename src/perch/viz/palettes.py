"""
ColorBrewer palettes as plain tuples of hex colours.

Qualitative palettes (Set1, Set2, Dark2) are prefixes of their largest form, so any ``n`` up to
the maximum is supported. Sequential palettes (Greens, Blues) differ per ``n``; the sizes used in
the workshop material are tabulated.

Examples
```python
from perch.viz.palettes import brewer_palette
pal = list(brewer_palette("Set2", 4))
pal[1] = "#000000"   # palettes are plain values; edit a copy freely
```
"""

from __future__ import annotations

__all__ = [
    "brewer_palette",
    "available_palettes",
]

_QUALITATIVE: dict[str, tuple[str, ...]] = {
    "Set1": (
        "#E41A1C", "#377EB8", "#4DAF4A", "#984EA3", "#FF7F00",
        "#FFFF33", "#A65628", "#F781BF", "#999999",
    ),
    "Set2": (
        "#66C2A5", "#FC8D62", "#8DA0CB", "#E78AC3",
        "#A6D854", "#FFD92F", "#E5C494", "#B3B3B3",
    ),
    "Dark2": (
        "#1B9E77", "#D95F02", "#7570B3", "#E7298A",
        "#66A61E", "#E6AB02", "#A6761D", "#666666",
    ),
}

_SEQUENTIAL: dict[str, dict[int, tuple[str, ...]]] = {
    "Greens": {
        3: ("#E5F5E0", "#A1D99B", "#31A354"),
        4: ("#EDF8E9", "#BAE4B3", "#74C476", "#238B45"),
        5: ("#EDF8E9", "#BAE4B3", "#74C476", "#31A354", "#006D2C"),
        9: (
            "#F7FCF5", "#E5F5E0", "#C7E9C0", "#A1D99B", "#74C476",
            "#41AB5D", "#238B45", "#006D2C", "#00441B",
        ),
    },
    "Blues": {
        3: ("#DEEBF7", "#9ECAE1", "#3182BD"),
        4: ("#EFF3FF", "#BDD7E7", "#6BAED6", "#2171B5"),
        5: ("#EFF3FF", "#BDD7E7", "#6BAED6", "#3182BD", "#08519C"),
        9: (
            "#F7FBFF", "#DEEBF7", "#C6DBEF", "#9ECAE1", "#6BAED6",
            "#4292C6", "#2171B5", "#08519C", "#08306B",
        ),
    },
}


def available_palettes() -> list[str]:
    return sorted([*_QUALITATIVE, *_SEQUENTIAL])


def brewer_palette(name: str, n: int) -> tuple[str, ...]:
    """
    Return ``n`` colours from the ColorBrewer palette ``name``.

    Raises:
        ValueError: If the palette is unknown or ``n`` is not available for it.
    """
    if name in _QUALITATIVE:
        colors = _QUALITATIVE[name]
        if not 1 <= n <= len(colors):
            raise ValueError(f"palette {name!r} supports 1..{len(colors)} colours, got {n}")
        return colors[:n]
    if name in _SEQUENTIAL:
        sizes = _SEQUENTIAL[name]
        if n not in sizes:
            raise ValueError(f"palette {name!r} is tabulated for n in {sorted(sizes)}, got {n}")
        return sizes[n]
    raise ValueError(f"unknown palette {name!r}; expected one of {available_palettes()}")
