"""Expression synthesis and the end-to-end K-map solve."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from .kmap_engine import (
    Coord,
    FormType,
    GroupRect,
    Matrix,
    code_widths,
    enumerate_all_groups,
    essential_cells,
    map_dimensions,
    select_cover,
)

logger = logging.getLogger(__name__)

GROUP_COLORS = [
    "#e53935", "#1e88e5", "#43a047", "#f39c12",
    "#8e24aa", "#009688", "#6d4c41", "#2e86c1",
]
VARIABLE_NAMES = "ABCD"
POS_JOINER = " · "


class SolverError(RuntimeError):
    """Raised when the minimization pipeline fails internally."""


@dataclass(frozen=True)
class Literal:
    variable: str
    negated: bool

    def __str__(self) -> str:
        return f"{self.variable}'" if self.negated else self.variable


@dataclass(frozen=True)
class SolutionGroup:
    """A selected group with its display color and synthesized term."""

    id: int
    rect: GroupRect
    color: str
    literals: Tuple[Literal, ...]
    term: str

    @property
    def cells(self) -> List[Coord]:
        return self.rect.sorted_cells()

    @property
    def size(self) -> int:
        return self.rect.size


@dataclass(frozen=True)
class Solution:
    expression: str
    literal_cost: int
    groups: Tuple[SolutionGroup, ...]
    form_type: FormType
    variable_count: int

    @property
    def terms(self) -> List[str]:
        return [group.term for group in self.groups]


def coerce_form(form_type: Union[str, FormType]) -> FormType:
    """Accept "SOP"/"POS" in any case, or a FormType member."""
    if isinstance(form_type, FormType):
        return form_type
    try:
        return FormType(str(form_type).upper())
    except ValueError:
        raise ValueError(f"Unknown form type {form_type!r}; expected 'SOP' or 'POS'.") from None


def variable_names(nvars: int) -> Tuple[str, str]:
    """Return the (row, column) variable letters for the map."""
    row_bits, col_bits = code_widths(nvars)
    return VARIABLE_NAMES[:row_bits], VARIABLE_NAMES[row_bits:row_bits + col_bits]


def group_literals(matrix: Matrix, group: GroupRect, form_type: FormType) -> Tuple[Literal, ...]:
    """Literals for the variables that stay constant across `group`.

    Row-code bits name the leading variables, column-code bits the rest. SOP
    negates a variable held at 0; POS negates a variable held at 1.
    """
    row_vars, col_vars = variable_names(matrix.nvars)
    cells = [matrix.get(r, c) for r, c in group.sorted_cells()]
    negate_on = 0 if form_type is FormType.SOP else 1

    literals: List[Literal] = []
    for pos, var in enumerate(row_vars):
        bits = {cell.row_bit(pos) for cell in cells}
        if len(bits) == 1:
            literals.append(Literal(var, bits.pop() == negate_on))
    for pos, var in enumerate(col_vars):
        bits = {cell.col_bit(pos) for cell in cells}
        if len(bits) == 1:
            literals.append(Literal(var, bits.pop() == negate_on))
    return tuple(literals)


def format_term(literals: Sequence[Literal], form_type: FormType) -> str:
    if form_type is FormType.SOP:
        return "".join(str(lit) for lit in literals) or "1"
    if not literals:
        return "0"
    return "(" + " + ".join(str(lit) for lit in literals) + ")"


def synthesize(
    matrix: Matrix, groups: Sequence[GroupRect], form_type: FormType
) -> Tuple[str, int, List[Tuple[Tuple[Literal, ...], str]]]:
    """Return (expression, literal_cost, [(literals, term), ...])."""
    if not groups:
        return ("0" if form_type is FormType.SOP else "1"), 0, []

    parts = []
    cost = 0
    for group in groups:
        literals = group_literals(matrix, group, form_type)
        cost += len(literals)
        parts.append((literals, format_term(literals, form_type)))

    joiner = " + " if form_type is FormType.SOP else POS_JOINER
    return joiner.join(term for _, term in parts), cost, parts


def trivial_solution(variable_count: int, form_type: Union[str, FormType]) -> Solution:
    """The constant result used when a solve degrades."""
    form = coerce_form(form_type)
    return Solution(
        expression="0" if form is FormType.SOP else "1",
        literal_cost=0,
        groups=(),
        form_type=form,
        variable_count=variable_count,
    )


def minimize(matrix: Matrix, form_type: Union[str, FormType]) -> Solution:
    """Minimize `matrix`, raising SolverError on internal failure."""
    form = coerce_form(form_type)
    target = form.target
    try:
        essential = essential_cells(matrix, target)
        candidates = enumerate_all_groups(matrix, target)
        selected = select_cover(candidates, essential)
        expression, cost, parts = synthesize(matrix, selected, form)
    except Exception as exc:
        raise SolverError(f"{form.value} minimization failed for {matrix!r}") from exc

    logger.debug(
        "%s: %d candidates, %d selected, cost %d",
        form.value, len(candidates), len(selected), cost,
    )
    groups = tuple(
        SolutionGroup(
            id=index,
            rect=rect,
            color=GROUP_COLORS[index % len(GROUP_COLORS)],
            literals=literals,
            term=term,
        )
        for index, (rect, (literals, term)) in enumerate(zip(selected, parts))
    )
    return Solution(
        expression=expression,
        literal_cost=cost,
        groups=groups,
        form_type=form,
        variable_count=matrix.nvars,
    )


def solve(
    matrix: Matrix,
    variable_count: int,
    form_type: Union[str, FormType],
    strict: bool = False,
) -> Solution:
    """Solve a K-map into a minimized SOP/POS expression.

    Contract violations (unsupported variable count, a matrix built for a
    different variable count, an unknown form type) raise ValueError. Internal
    failures degrade to the constant solution unless `strict` is set.
    """
    map_dimensions(variable_count)
    form = coerce_form(form_type)
    if not isinstance(matrix, Matrix):
        raise ValueError(f"Expected a Matrix, got {type(matrix).__name__}.")
    if matrix.nvars != variable_count:
        raise ValueError(
            f"Matrix is a {matrix.nvars}-variable map but {variable_count} variables were requested."
        )

    try:
        return minimize(matrix, form)
    except SolverError:
        if strict:
            raise
        logger.exception("Falling back to constant %s solution", form.value)
        return trivial_solution(variable_count, form)


__all__ = [
    "GROUP_COLORS",
    "Literal",
    "POS_JOINER",
    "Solution",
    "SolutionGroup",
    "SolverError",
    "VARIABLE_NAMES",
    "coerce_form",
    "format_term",
    "group_literals",
    "minimize",
    "solve",
    "synthesize",
    "trivial_solution",
    "variable_names",
]
