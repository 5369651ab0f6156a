"""Karnaugh map indexing, grouping and cover helpers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

import numpy as np


Coord = Tuple[int, int]


class CellValue(Enum):
    """Output value stored in one K-map cell."""

    ZERO = "0"
    ONE = "1"
    DONT_CARE = "X"

    @classmethod
    def coerce(cls, raw) -> "CellValue":
        """Accept 0/1/'X' style input as well as members."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, bool):
            return cls.ONE if raw else cls.ZERO
        text = str(raw).strip().upper()
        if text in ("X", "-", "D"):
            return cls.DONT_CARE
        if text in ("0", "1"):
            return cls(text)
        raise ValueError(f"Unsupported cell value: {raw!r}")

    def __str__(self) -> str:
        return self.value


class FormType(str, Enum):
    SOP = "SOP"
    POS = "POS"

    @property
    def target(self) -> CellValue:
        """Value each term must cover: ones for SOP, zeros for POS."""
        return CellValue.ONE if self is FormType.SOP else CellValue.ZERO


@dataclass(frozen=True)
class Cell:
    """One map entry with its Gray-coded coordinates."""

    value: CellValue
    row_code: int
    col_code: int
    row_bits: int
    col_bits: int

    def row_bit(self, pos: int) -> int:
        return (self.row_code >> (self.row_bits - 1 - pos)) & 1

    def col_bit(self, pos: int) -> int:
        return (self.col_code >> (self.col_bits - 1 - pos)) & 1

    @property
    def code(self) -> str:
        return format(self.row_code, f"0{self.row_bits}b") + format(
            self.col_code, f"0{self.col_bits}b"
        )


def map_dimensions(nvars: int) -> Tuple[int, int]:
    """Return (rows, cols) for K-map based on variable count."""
    if nvars == 2:
        return 2, 2
    if nvars == 3:
        return 2, 4
    if nvars == 4:
        return 4, 4
    raise ValueError(f"K-map available for 2-4 variables, got {nvars!r}.")


def code_widths(nvars: int) -> Tuple[int, int]:
    """Return (row_bits, col_bits) for the variable count."""
    nrows, ncols = map_dimensions(nvars)
    return nrows.bit_length() - 1, ncols.bit_length() - 1


def gray_code(i: int) -> int:
    return i ^ (i >> 1)


def permutation_table(nvars: int) -> np.ndarray:
    """Binary assignment table, one row per truth-table index (MSB first)."""
    idx = np.arange(2**nvars)[:, None]
    shifts = np.arange(nvars - 1, -1, -1)[None, :]
    return (idx >> shifts) & 1


def _bits_to_int(bits: Iterable[int]) -> int:
    value = 0
    for bit in bits:
        value = (value << 1) | int(bit)
    return value


class Matrix:
    """Gray-coded K-map grid of 2, 3 or 4 variables."""

    def __init__(self, nvars: int, grid: List[List[Cell]]):
        self.nvars = nvars
        self.nrows, self.ncols = map_dimensions(nvars)
        self.row_bits, self.col_bits = code_widths(nvars)
        if len(grid) != self.nrows or any(len(row) != self.ncols for row in grid):
            shape = (len(grid), max((len(row) for row in grid), default=0))
            raise ValueError(
                f"Matrix shape {shape} does not match {nvars}-variable map "
                f"({self.nrows}x{self.ncols})."
            )
        self._grid = grid

    @classmethod
    def from_values(cls, nvars: int, values: Sequence[Sequence]) -> "Matrix":
        """Build a matrix from a rows x cols grid of 0/1/'X' values."""
        matrix = new_matrix(nvars)
        if len(values) != matrix.nrows or any(len(row) != matrix.ncols for row in values):
            raise ValueError(
                f"Expected a {matrix.nrows}x{matrix.ncols} grid for {nvars} variables."
            )
        for r, row in enumerate(values):
            for c, raw in enumerate(row):
                matrix.set(r, c, raw)
        return matrix

    @property
    def shape(self) -> Tuple[int, int]:
        return self.nrows, self.ncols

    def get(self, row: int, col: int) -> Cell:
        return self._grid[row][col]

    def value(self, row: int, col: int) -> CellValue:
        return self._grid[row][col].value

    def set(self, row: int, col: int, value) -> None:
        if not (0 <= row < self.nrows and 0 <= col < self.ncols):
            raise ValueError(f"Cell ({row}, {col}) is outside the {self.nrows}x{self.ncols} map.")
        self._grid[row][col] = replace(self._grid[row][col], value=CellValue.coerce(value))

    def rows(self) -> List[List[Cell]]:
        return [list(row) for row in self._grid]

    def cells(self) -> Iterator[Tuple[Coord, Cell]]:
        """Yield ((row, col), cell) in row-major order."""
        for r, row in enumerate(self._grid):
            for c, cell in enumerate(row):
                yield (r, c), cell

    def values(self) -> Tuple[Tuple[str, ...], ...]:
        """Hashable snapshot of the cell values."""
        return tuple(tuple(cell.value.value for cell in row) for row in self._grid)

    def index_of(self, row: int, col: int) -> int:
        """Truth-table index of a cell (A is the most significant bit)."""
        cell = self._grid[row][col]
        return (cell.row_code << self.col_bits) | cell.col_code

    def indices(self, value: CellValue) -> List[int]:
        return sorted(self.index_of(r, c) for (r, c), cell in self.cells() if cell.value is value)

    def truth_table(self) -> List[Tuple[Tuple[int, ...], CellValue]]:
        """Rows of (input bits, output) ordered by truth-table index."""
        table = permutation_table(self.nvars)
        outputs: Dict[int, CellValue] = {
            self.index_of(r, c): cell.value for (r, c), cell in self.cells()
        }
        return [
            (tuple(int(b) for b in table[idx]), outputs[idx])
            for idx in range(2**self.nvars)
        ]

    def copy(self) -> "Matrix":
        return Matrix(self.nvars, self.rows())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.nvars == other.nvars and self._grid == other._grid

    def __repr__(self) -> str:
        body = "/".join("".join(row) for row in self.values())
        return f"Matrix(nvars={self.nvars}, values={body})"


def new_matrix(nvars: int) -> Matrix:
    """Return an all-zero matrix with Gray-coded row/column coordinates."""
    nrows, ncols = map_dimensions(nvars)
    row_bits, col_bits = code_widths(nvars)
    perm = permutation_table(nvars)
    grid: List[List[Cell]] = []
    for r in range(nrows):
        row: List[Cell] = []
        for c in range(ncols):
            bits = perm[(gray_code(r) << col_bits) | gray_code(c)]
            row.append(
                Cell(
                    value=CellValue.ZERO,
                    row_code=_bits_to_int(bits[:row_bits]),
                    col_code=_bits_to_int(bits[row_bits:]),
                    row_bits=row_bits,
                    col_bits=col_bits,
                )
            )
        grid.append(row)
    return Matrix(nvars, grid)


def idx_to_rc(nvars: int, idx: int) -> Coord:
    """Translate a minterm index to (row, col) coordinates."""
    validate_minterm_range([idx], nvars)
    _, col_bits = code_widths(nvars)
    row_code = idx >> col_bits
    col_code = idx & ((1 << col_bits) - 1)
    nrows, ncols = map_dimensions(nvars)
    row = next(r for r in range(nrows) if gray_code(r) == row_code)
    col = next(c for c in range(ncols) if gray_code(c) == col_code)
    return row, col


def validate_minterm_range(minterms: Iterable[int], n: int) -> None:
    """Ensure all minterms are within the range for the current variable count."""
    max_valid = (1 << n) - 1
    invalid = [m for m in minterms if m < 0 or m > max_valid]
    if invalid:
        raise ValueError(
            f"Minterms out of range for {n} variables (0-{max_valid}): {sorted(set(invalid))}"
        )


def matrix_from_minterms(
    nvars: int, minterms: Iterable[int], dontcares: Iterable[int] = ()
) -> Matrix:
    """Build a matrix with ones at `minterms` and X at `dontcares`."""
    mins = list(minterms)
    dcs = list(dontcares)
    validate_minterm_range(mins, nvars)
    validate_minterm_range(dcs, nvars)
    overlap = set(mins) & set(dcs)
    if overlap:
        raise ValueError(f"Indices listed as both minterm and don't care: {sorted(overlap)}")
    matrix = new_matrix(nvars)
    for idx in mins:
        matrix.set(*idx_to_rc(nvars, idx), CellValue.ONE)
    for idx in dcs:
        matrix.set(*idx_to_rc(nvars, idx), CellValue.DONT_CARE)
    return matrix


@dataclass(frozen=True)
class GroupRect:
    """Descriptor for a grouped rectangle on the K-map."""

    r0: int
    rows: int
    c0: int
    cols: int
    cells: FrozenSet[Coord]

    @property
    def size(self) -> int:
        return len(self.cells)

    def sorted_cells(self) -> List[Coord]:
        return sorted(self.cells)


def rect_cells(
    r0: int, rows: int, c0: int, cols: int, nrows: int, ncols: int
) -> Set[Coord]:
    """Return the set of cells covered by a rectangle (with wrap-around)."""
    cells: Set[Coord] = set()
    for dr in range(rows):
        for dc in range(cols):
            cells.add(((r0 + dr) % nrows, (c0 + dc) % ncols))
    return cells


def group_factors(size: int) -> List[Tuple[int, int]]:
    """(height, width) pairs for a power-of-two size, squarest first."""
    factors = []
    height = 1
    while height <= size:
        factors.append((height, size // height))
        height *= 2
    factors.sort(key=lambda hw: (max(hw) // min(hw), -hw[0]))
    return factors


def _accepts(value: CellValue, target: CellValue) -> bool:
    return value is target or value is CellValue.DONT_CARE


def _try_group(
    matrix: Matrix,
    r0: int,
    rows: int,
    c0: int,
    cols: int,
    target: CellValue,
    covered: Set[Coord],
) -> Optional[GroupRect]:
    cells = rect_cells(r0, rows, c0, cols, matrix.nrows, matrix.ncols)
    for r, c in cells:
        if (r, c) in covered or not _accepts(matrix.value(r, c), target):
            return None
    return GroupRect(r0=r0, rows=rows, c0=c0, cols=cols, cells=frozenset(cells))


def enumerate_groups(matrix: Matrix, size: int, target: CellValue) -> List[GroupRect]:
    """Return groups of exactly `size` cells made of target or don't-care cells.

    Windows are scanned row-major for each factorization of `size`, followed
    by the wraparound probes: columns 3/0 on 4-column maps when the width is 2
    and rows 3/0 on the 4-row map when the height is 2. A cell claimed by an
    accepted group cannot be claimed again within the same size pass.
    """
    nrows, ncols = matrix.shape
    covered: Set[Coord] = set()
    groups: List[GroupRect] = []

    def claim(r0: int, rows: int, c0: int, cols: int) -> None:
        group = _try_group(matrix, r0, rows, c0, cols, target, covered)
        if group is not None:
            groups.append(group)
            covered.update(group.cells)

    for height, width in group_factors(size):
        if height > nrows or width > ncols:
            continue
        for r0 in range(nrows - height + 1):
            for c0 in range(ncols - width + 1):
                claim(r0, height, c0, width)
        if width == 2 and ncols == 4:
            for r0 in range(nrows - height + 1):
                claim(r0, height, ncols - 1, 2)
        if height == 2 and nrows == 4:
            for c0 in range(ncols - width + 1):
                claim(nrows - 1, 2, c0, width)
    return groups


def enumerate_all_groups(matrix: Matrix, target: CellValue) -> List[GroupRect]:
    """Enumerate candidate groups for every size, largest first."""
    groups: List[GroupRect] = []
    size = matrix.nrows * matrix.ncols
    while size >= 1:
        groups.extend(enumerate_groups(matrix, size, target))
        size //= 2
    return groups


def essential_cells(matrix: Matrix, target: CellValue) -> Set[Coord]:
    """Cells holding exactly the target value."""
    return {rc for rc, cell in matrix.cells() if cell.value is target}


def select_cover(groups: Sequence[GroupRect], essential: Set[Coord]) -> List[GroupRect]:
    """Greedy largest-first cover of the essential cells."""
    if not essential:
        return []
    chosen: List[GroupRect] = []
    remaining = set(essential)
    for group in sorted(groups, key=lambda g: g.size, reverse=True):
        hit = group.cells & remaining
        if not hit:
            continue
        chosen.append(group)
        remaining -= hit
        if not remaining:
            break
    return chosen


__all__ = [
    "Cell",
    "CellValue",
    "Coord",
    "FormType",
    "GroupRect",
    "Matrix",
    "code_widths",
    "enumerate_all_groups",
    "enumerate_groups",
    "essential_cells",
    "gray_code",
    "group_factors",
    "idx_to_rc",
    "map_dimensions",
    "matrix_from_minterms",
    "new_matrix",
    "permutation_table",
    "rect_cells",
    "select_cover",
    "validate_minterm_range",
]
