"""SymPy helpers for checking K-map solutions."""

from __future__ import annotations

import itertools
from typing import List, Sequence, Tuple

from sympy import And, Not, Or, Symbol, false, symbols, true
from sympy.logic.boolalg import POSform, SOPform

from .kmap_engine import CellValue, Coord, FormType, Matrix
from .synthesis import POS_JOINER, Solution, coerce_form


def get_variables(n: int):
    """Return SymPy symbols (A, B, C, ...) for the requested variable count."""
    if n < 1:
        raise ValueError("Number of variables must be positive.")
    return symbols(" ".join(chr(65 + i) for i in range(n)), seq=True)


def solution_to_sympy(solution: Solution):
    """Rebuild the SymPy expression denoted by a solution's groups."""
    sop = solution.form_type is FormType.SOP
    if not solution.groups:
        return false if sop else true

    lookup = {str(v): v for v in get_variables(solution.variable_count)}
    terms = []
    for group in solution.groups:
        lits = [
            Not(lookup[lit.variable]) if lit.negated else lookup[lit.variable]
            for lit in group.literals
        ]
        terms.append(And(*lits) if sop else Or(*lits))
    return Or(*terms) if sop else And(*terms)


def truth_minterms(expr, vars_tuple) -> Sequence[int]:
    """Return indices whose assignments make the expression evaluate to True."""
    mins = []
    for idx, bits in enumerate(itertools.product([0, 1], repeat=len(vars_tuple))):
        subs = {var: bool(bit) for var, bit in zip(vars_tuple, bits)}
        if bool(expr.xreplace(subs)):
            mins.append(idx)
    return mins


def verify_solution(matrix: Matrix, solution: Solution) -> List[Coord]:
    """Return the cells whose value the solution fails to reproduce.

    Don't-care cells are never reported.
    """
    vars_tuple = get_variables(matrix.nvars)
    ones = set(truth_minterms(solution_to_sympy(solution), vars_tuple))
    mismatches = []
    for (r, c), cell in matrix.cells():
        if cell.value is CellValue.DONT_CARE:
            continue
        expected = cell.value is CellValue.ONE
        if (matrix.index_of(r, c) in ones) != expected:
            mismatches.append((r, c))
    return mismatches


def count_literals(expr) -> int:
    """Count literal occurrences in a two-level SymPy expression."""
    if expr in (true, false):
        return 0
    if isinstance(expr, (Symbol, Not)):
        return 1
    return sum(count_literals(arg) for arg in expr.args)


def _ordered(literals, var_order):
    ordered = []
    for var in var_order:
        for lit in literals:
            if lit == var or (isinstance(lit, Not) and lit.args and lit.args[0] == var):
                ordered.append(lit)
                break
    return ordered


def _lit_to_str(lit) -> str:
    if isinstance(lit, Not):
        return f"{lit.args[0]}'"
    return str(lit)


def prime_format(expr, var_order: Tuple[Symbol, ...]) -> str:
    """Format a DNF expression into SOP text following var_order."""
    if expr is false:
        return "0"
    if expr is true:
        return "1"
    terms = list(expr.args) if isinstance(expr, Or) else [expr]
    result = []
    for term in terms:
        literals = list(term.args) if isinstance(term, And) else [term]
        result.append("".join(_lit_to_str(l) for l in _ordered(literals, var_order)) or "1")
    return " + ".join(result)


def format_pos(expr, var_order: Tuple[Symbol, ...]) -> str:
    """Format a CNF expression as (A + B')(...) clauses joined by the POS joiner."""
    if expr is true:
        return "1"
    if expr is false:
        return "0"
    clauses = list(expr.args) if isinstance(expr, And) else [expr]
    parts = []
    for clause in clauses:
        literals = list(clause.args) if isinstance(clause, Or) else [clause]
        inside = " + ".join(_lit_to_str(l) for l in _ordered(literals, var_order))
        parts.append(f"({inside})")
    return POS_JOINER.join(parts)


def reference_solution(matrix: Matrix, form_type) -> Tuple[object, str, int]:
    """Reference minimization from SymPy: (expression, text, literal cost).

    SymPy runs Quine-McCluskey with prime-implicant selection, which the
    greedy cover does not, so the two costs can differ.
    """
    form = coerce_form(form_type)
    vars_tuple = get_variables(matrix.nvars)
    ones = matrix.indices(CellValue.ONE)
    dcs = matrix.indices(CellValue.DONT_CARE)
    if form is FormType.SOP:
        expr = SOPform(vars_tuple, ones, dcs)
        text = prime_format(expr, vars_tuple)
    else:
        expr = POSform(vars_tuple, ones, dcs)
        text = format_pos(expr, vars_tuple)
    return expr, text, count_literals(expr)


__all__ = [
    "count_literals",
    "format_pos",
    "get_variables",
    "prime_format",
    "reference_solution",
    "solution_to_sympy",
    "truth_minterms",
    "verify_solution",
]
