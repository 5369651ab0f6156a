"""Matplotlib rendering of a K-map and its solution groups."""

from __future__ import annotations

from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .kmap_engine import CellValue, GroupRect, Matrix
from .synthesis import Solution, variable_names

VALUE_COLORS = {
    CellValue.ONE: "#1f3c88",
    CellValue.DONT_CARE: "#ff8c32",
    CellValue.ZERO: "#9aa7b7",
}
FIG_SIZES = {2: (3.2, 3.2), 3: (5.2, 3.4), 4: (5.2, 5.2)}


def axis_labels(matrix: Matrix) -> Tuple[List[str], List[str]]:
    """Row and column header labels, e.g. 'AB=01' and 'CD=11'."""
    row_vars, col_vars = variable_names(matrix.nvars)
    row_labels = [
        f"{row_vars}={format(matrix.get(r, 0).row_code, f'0{matrix.row_bits}b')}"
        for r in range(matrix.nrows)
    ]
    col_labels = [
        f"{col_vars}={format(matrix.get(0, c).col_code, f'0{matrix.col_bits}b')}"
        for c in range(matrix.ncols)
    ]
    return row_labels, col_labels


def _segments(start: int, length: int, size: int) -> List[Tuple[int, int]]:
    if start + length <= size:
        return [(start, length)]
    head = size - start
    return [(start, head), (0, length - head)]


def group_boxes(rect: GroupRect, nrows: int, ncols: int) -> List[Tuple[int, int, int, int]]:
    """Split a (possibly wrapping) group into in-grid (x, y, width, height) boxes."""
    boxes = []
    for r0, rows in _segments(rect.r0, rect.rows, nrows):
        for c0, cols in _segments(rect.c0, rect.cols, ncols):
            boxes.append((c0, r0, cols, rows))
    return boxes


def draw_kmap(matrix: Matrix, solution: Optional[Solution] = None, ax=None):
    """Draw values, minterm indices and group outlines; return the figure."""
    if ax is None:
        fig, ax = plt.subplots(figsize=FIG_SIZES[matrix.nvars])
    else:
        fig = ax.figure

    nrows, ncols = matrix.shape
    ax.set_xlim(-0.6, ncols)
    ax.set_ylim(-0.6, nrows)
    ax.set_xticks(np.arange(0, ncols + 1))
    ax.set_yticks(np.arange(0, nrows + 1))
    ax.set_xticklabels([])
    ax.set_yticklabels([])
    ax.grid(True, color="#888", linewidth=1)
    ax.invert_yaxis()
    ax.set_facecolor("#fafafa")

    row_labels, col_labels = axis_labels(matrix)
    for j, lab in enumerate(col_labels):
        ax.text(j + 0.5, -0.25, lab, ha="center", va="center", fontsize=10, color="#333")
    for i, lab in enumerate(row_labels):
        ax.text(-0.25, i + 0.5, lab, ha="right", va="center", fontsize=10, color="#333")

    for (r, c), cell in matrix.cells():
        ax.text(c + 0.5, r + 0.5, str(cell.value), color=VALUE_COLORS[cell.value],
                fontsize=13, ha="center", va="center", weight="bold")
        ax.text(c + 0.05, r + 0.9, str(matrix.index_of(r, c)),
                color="#777", fontsize=8, alpha=0.7)

    if solution is not None:
        for group in solution.groups:
            # stagger insets per group
            pad = 0.06 + 0.04 * (group.id % 4)
            boxes = group_boxes(group.rect, nrows, ncols)
            for x, y, w, h in boxes:
                ax.add_patch(plt.Rectangle(
                    (x + pad, y + pad), w - 2 * pad, h - 2 * pad,
                    fill=False, color=group.color, lw=2.5, ls="-",
                ))
            x, y, w, h = boxes[0]
            ax.text(x + w / 2, y + h / 2 + 0.25, group.term, color=group.color,
                    fontsize=9, ha="center", va="center", weight="bold")

    return fig


__all__ = ["axis_labels", "draw_kmap", "group_boxes"]
