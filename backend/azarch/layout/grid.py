from dataclasses import dataclass
from typing import Iterable, Optional

from azarch.model.types import Bounds


@dataclass(frozen=True)
class Size:
    w: float
    h: float


@dataclass(frozen=True)
class Gap:
    x: float
    y: float


DEFAULT_CELL = Size(160, 140)
DEFAULT_GAP = Gap(16, 16)


def place_in(
    parent: Optional[Bounds],
    col: int,
    row: int,
    cell: Size = DEFAULT_CELL,
    gap: Gap = DEFAULT_GAP,
) -> Bounds:
    """
    Parent-relative bounds of grid cell (col, row).

    >>> place_in(None, 1, 0)
    Bounds(x=192, y=16, w=160, h=140)
    """
    return Bounds(
        x=gap.x + col * (cell.w + gap.x),
        y=gap.y + row * (cell.h + gap.y),
        w=cell.w,
        h=cell.h,
    )


def grid_extent(count: int, columns: int, cell: Size, gap: Gap) -> Size:
    """Space taken by `count` cells laid out `columns` wide, without outer gaps."""
    if count <= 0:
        return Size(0, 0)
    columns = max(1, min(columns, count))
    rows = (count + columns - 1) // columns
    return Size(
        columns * cell.w + (columns - 1) * gap.x,
        rows * cell.h + (rows - 1) * gap.y,
    )


def enclose(children: Iterable[Bounds], padding: float, title_height: float) -> Optional[Bounds]:
    """Bounding box of the children plus padding on every side and a title bar on top."""
    children = list(children)
    if not children:
        return None
    min_x = min(b.x for b in children)
    min_y = min(b.y for b in children)
    max_x = max(b.right for b in children)
    max_y = max(b.bottom for b in children)
    return Bounds(
        x=min_x - padding,
        y=min_y - padding - title_height,
        w=max_x - min_x + 2 * padding,
        h=max_y - min_y + 2 * padding + title_height,
    )
