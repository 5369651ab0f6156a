"""Convenience exports for the K-Map minimizer."""

from .kmap_engine import (
    Cell,
    CellValue,
    FormType,
    GroupRect,
    Matrix,
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
    validate_minterm_range,
)
from .synthesis import (
    GROUP_COLORS,
    Literal,
    Solution,
    SolutionGroup,
    SolverError,
    minimize,
    solve,
    synthesize,
    trivial_solution,
)
from .logic import (
    get_variables,
    reference_solution,
    solution_to_sympy,
    verify_solution,
)

__all__ = [
    "Cell",
    "CellValue",
    "FormType",
    "GROUP_COLORS",
    "GroupRect",
    "Literal",
    "Matrix",
    "Solution",
    "SolutionGroup",
    "SolverError",
    "enumerate_all_groups",
    "enumerate_groups",
    "essential_cells",
    "get_variables",
    "gray_code",
    "group_factors",
    "idx_to_rc",
    "map_dimensions",
    "matrix_from_minterms",
    "minimize",
    "new_matrix",
    "permutation_table",
    "rect_cells",
    "reference_solution",
    "select_cover",
    "solution_to_sympy",
    "solve",
    "synthesize",
    "trivial_solution",
    "validate_minterm_range",
    "verify_solution",
]
