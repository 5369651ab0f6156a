"""Tests for coordinates, group enumeration and cover selection."""

import pytest

from kmap_solver.kmap_engine import (
    CellValue,
    GroupRect,
    Matrix,
    code_widths,
    enumerate_all_groups,
    enumerate_groups,
    essential_cells,
    gray_code,
    group_factors,
    idx_to_rc,
    map_dimensions,
    matrix_from_minterms,
    new_matrix,
    permutation_table,
    rect_cells,
    select_cover,
)


def _combined(matrix, r, c):
    cell = matrix.get(r, c)
    return (cell.row_code << matrix.col_bits) | cell.col_code


class TestCoordinates:
    """Tests for Gray-code coordinate assignment."""

    @pytest.mark.parametrize("nvars,shape", [(2, (2, 2)), (3, (2, 4)), (4, (4, 4))])
    def test_map_dimensions(self, nvars, shape):
        assert map_dimensions(nvars) == shape
        assert new_matrix(nvars).shape == shape

    @pytest.mark.parametrize("nvars", [0, 1, 5, 6])
    def test_unsupported_variable_count(self, nvars):
        with pytest.raises(ValueError):
            map_dimensions(nvars)
        with pytest.raises(ValueError):
            new_matrix(nvars)

    def test_code_widths(self):
        assert code_widths(2) == (1, 1)
        assert code_widths(3) == (1, 2)
        assert code_widths(4) == (2, 2)

    def test_gray_code_swaps_last_positions(self):
        assert [gray_code(i) for i in range(4)] == [0, 1, 3, 2]

    def test_permutation_table(self):
        table = permutation_table(3)
        assert table.shape == (8, 3)
        assert list(table[:, 0]) == [0, 0, 0, 0, 1, 1, 1, 1]
        assert list(table[:, 2]) == [0, 1, 0, 1, 0, 1, 0, 1]
        assert list(table[5]) == [1, 0, 1]

    def test_four_variable_codes(self):
        matrix = new_matrix(4)
        assert [matrix.get(r, 0).row_code for r in range(4)] == [0, 1, 3, 2]
        assert [matrix.get(0, c).col_code for c in range(4)] == [0, 1, 3, 2]
        assert matrix.get(2, 3).code == "1110"

    def test_three_variable_codes(self):
        matrix = new_matrix(3)
        assert [matrix.get(r, 0).row_code for r in range(2)] == [0, 1]
        assert [matrix.get(0, c).col_code for c in range(4)] == [0, 1, 3, 2]
        assert matrix.get(1, 2).code == "111"

    @pytest.mark.parametrize("nvars", [2, 3, 4])
    def test_adjacent_cells_differ_by_one_bit(self, nvars):
        matrix = new_matrix(nvars)
        nrows, ncols = matrix.shape
        for r in range(nrows):
            for c in range(ncols):
                here = _combined(matrix, r, c)
                right = _combined(matrix, r, (c + 1) % ncols)
                down = _combined(matrix, (r + 1) % nrows, c)
                assert bin(here ^ right).count("1") == 1
                assert bin(here ^ down).count("1") == 1

    @pytest.mark.parametrize("nvars", [2, 3, 4])
    def test_values_default_to_zero(self, nvars):
        assert all(cell.value is CellValue.ZERO for _, cell in new_matrix(nvars).cells())

    @pytest.mark.parametrize("nvars", [2, 3, 4])
    def test_index_round_trip(self, nvars):
        matrix = new_matrix(nvars)
        for idx in range(2**nvars):
            assert matrix.index_of(*idx_to_rc(nvars, idx)) == idx

    def test_index_of(self):
        assert new_matrix(4).index_of(2, 3) == 14
        assert new_matrix(3).index_of(0, 3) == 2

    def test_idx_out_of_range(self):
        with pytest.raises(ValueError):
            idx_to_rc(3, 8)


class TestMatrix:
    """Tests for Matrix construction and editing."""

    def test_coerce(self):
        assert CellValue.coerce("x") is CellValue.DONT_CARE
        assert CellValue.coerce(1) is CellValue.ONE
        assert CellValue.coerce("0") is CellValue.ZERO
        assert CellValue.coerce(True) is CellValue.ONE
        with pytest.raises(ValueError):
            CellValue.coerce("q")

    def test_set_keeps_coordinates(self):
        matrix = new_matrix(4)
        before = matrix.get(3, 1)
        matrix.set(3, 1, "X")
        after = matrix.get(3, 1)
        assert after.value is CellValue.DONT_CARE
        assert (after.row_code, after.col_code) == (before.row_code, before.col_code)

    def test_set_out_of_bounds(self):
        with pytest.raises(ValueError):
            new_matrix(2).set(2, 0, 1)

    def test_from_values_wrong_shape(self):
        with pytest.raises(ValueError):
            Matrix.from_values(3, [[0, 0], [0, 0]])

    def test_constructor_rejects_wrong_grid(self):
        grid = new_matrix(2).rows()
        with pytest.raises(ValueError):
            Matrix(4, grid)

    def test_copy_is_independent(self):
        matrix = new_matrix(2)
        clone = matrix.copy()
        clone.set(0, 0, 1)
        assert matrix.value(0, 0) is CellValue.ZERO
        assert matrix != clone

    def test_from_minterms(self):
        matrix = matrix_from_minterms(3, [1, 5], [7])
        assert matrix.indices(CellValue.ONE) == [1, 5]
        assert matrix.indices(CellValue.DONT_CARE) == [7]
        assert matrix.value(*idx_to_rc(3, 5)) is CellValue.ONE

    def test_from_minterms_overlap(self):
        with pytest.raises(ValueError):
            matrix_from_minterms(2, [1, 2], [2])

    def test_from_minterms_out_of_range(self):
        with pytest.raises(ValueError):
            matrix_from_minterms(2, [4])

    def test_truth_table(self):
        table = matrix_from_minterms(3, [5], [6]).truth_table()
        assert len(table) == 8
        assert table[5] == ((1, 0, 1), CellValue.ONE)
        assert table[6] == ((1, 1, 0), CellValue.DONT_CARE)
        assert table[0] == ((0, 0, 0), CellValue.ZERO)


class TestGroupEnumerator:
    """Tests for enumerate_groups and friends."""

    def test_group_factors(self):
        assert group_factors(1) == [(1, 1)]
        assert group_factors(4) == [(2, 2), (4, 1), (1, 4)]
        assert group_factors(8) == [(4, 2), (2, 4), (8, 1), (1, 8)]

    def test_rect_cells_wrap(self):
        assert rect_cells(0, 1, 3, 2, 2, 4) == {(0, 3), (0, 0)}
        assert rect_cells(3, 2, 1, 1, 4, 4) == {(3, 1), (0, 1)}

    def test_horizontal_wrap(self):
        matrix = Matrix.from_values(3, [[1, 0, 0, 1], [0, 0, 0, 0]])
        groups = enumerate_groups(matrix, 2, CellValue.ONE)
        assert groups == [
            GroupRect(r0=0, rows=1, c0=3, cols=2, cells=frozenset({(0, 3), (0, 0)}))
        ]

    def test_vertical_wrap(self):
        matrix = new_matrix(4)
        matrix.set(0, 1, 1)
        matrix.set(3, 1, 1)
        groups = enumerate_groups(matrix, 2, CellValue.ONE)
        assert [g.cells for g in groups] == [frozenset({(3, 1), (0, 1)})]

    def test_full_map_single_group(self):
        matrix = Matrix.from_values(2, [[1, 1], [1, "X"]])
        groups = enumerate_groups(matrix, 4, CellValue.ONE)
        assert len(groups) == 1
        assert groups[0].size == 4

    def test_claims_are_local_to_size_pass(self):
        matrix = new_matrix(4)
        for c in range(3):
            matrix.set(0, c, 1)
        pairs = enumerate_groups(matrix, 2, CellValue.ONE)
        assert [g.cells for g in pairs] == [frozenset({(0, 0), (0, 1)})]
        singles = enumerate_groups(matrix, 1, CellValue.ONE)
        assert sorted(g.cells for g in singles) == sorted(
            frozenset({(0, c)}) for c in range(3)
        )

    def test_dont_care_extends_group(self):
        matrix = Matrix.from_values(2, [[1, "X"], [0, 0]])
        groups = enumerate_groups(matrix, 2, CellValue.ONE)
        assert [g.cells for g in groups] == [frozenset({(0, 0), (0, 1)})]

    def test_zero_target(self):
        matrix = Matrix.from_values(2, [[0, 1], [0, 1]])
        groups = enumerate_groups(matrix, 2, CellValue.ZERO)
        assert [g.cells for g in groups] == [frozenset({(0, 0), (1, 0)})]

    def test_no_window_contributes_nothing(self):
        assert enumerate_all_groups(new_matrix(4), CellValue.ONE) == []

    def test_all_groups_largest_first(self):
        matrix = Matrix.from_values(3, [[1, 1, 0, 0], [1, 1, 0, 0]])
        sizes = [g.size for g in enumerate_all_groups(matrix, CellValue.ONE)]
        assert sizes == sorted(sizes, reverse=True)
        assert sizes[0] == 4

    def test_enumeration_is_deterministic(self):
        matrix = Matrix.from_values(4, [[1, "X", 1, 0], [1, 1, 0, 0], [0, 0, "X", 1], [1, 0, 1, 1]])
        assert enumerate_all_groups(matrix, CellValue.ONE) == enumerate_all_groups(
            matrix.copy(), CellValue.ONE
        )


class TestCoverSelector:
    """Tests for the greedy cover."""

    def _rect(self, *cells):
        return GroupRect(r0=0, rows=1, c0=0, cols=len(cells), cells=frozenset(cells))

    def test_empty_essential(self):
        assert select_cover([self._rect((0, 0))], set()) == []

    def test_largest_first_and_skip_redundant(self):
        big = self._rect((0, 0), (0, 1))
        small_a = self._rect((0, 0))
        small_b = self._rect((1, 1))
        chosen = select_cover([small_a, small_b, big], {(0, 0), (0, 1), (1, 1)})
        assert chosen == [big, small_b]

    def test_stops_once_covered(self):
        first = self._rect((0, 0), (0, 1))
        later = self._rect((0, 1), (0, 0))
        assert select_cover([first, later], {(0, 0)}) == [first]

    def test_essential_cells_skip_dont_care(self):
        matrix = Matrix.from_values(2, [[1, "X"], [0, 1]])
        assert essential_cells(matrix, CellValue.ONE) == {(0, 0), (1, 1)}
        assert essential_cells(matrix, CellValue.ZERO) == {(1, 0)}
