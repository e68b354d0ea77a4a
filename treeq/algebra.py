"""Structural operations on terms: equality, substitution, variables,
renaming, and path-addressed subterms.

A path is a sequence of ``Step.L`` / ``Step.R`` moves from the root. Its
string form is ``"root"``, ``"root.L"``, ``"root.L.R"``, ...
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import TypeAlias

from .terms import App, DefRef, Equation, Leaf, Term, Var

Substitution: TypeAlias = Mapping[str, Term]


class Step(Enum):
    L = "L"
    R = "R"


Path: TypeAlias = tuple[Step, ...]


class PathMismatchError(ValueError):
    """A path walks through a node that is not an application."""


# ---------------------------------------------------------------------------
# Equality
# ---------------------------------------------------------------------------


def equals(a: Term, b: Term) -> bool:
    match a, b:
        case Leaf(), Leaf():
            return True
        case Var(n1), Var(n2):
            return n1 == n2
        case DefRef(n1), DefRef(n2):
            return n1 == n2
        case App(l1, r1), App(l2, r2):
            return equals(l1, l2) and equals(r1, r2)
        case _:
            return False


def equations_equal(e1: Equation, e2: Equation) -> bool:
    """Both sides structurally equal, in order."""
    return equals(e1.lhs, e2.lhs) and equals(e1.rhs, e2.rhs)


# ---------------------------------------------------------------------------
# Substitution and variables
# ---------------------------------------------------------------------------


def substitute(t: Term, sub: Substitution) -> Term:
    """Replace every variable bound in ``sub``. Not capture-avoiding."""
    match t:
        case Var(name):
            return sub.get(name, t)
        case App(left, right):
            return App(substitute(left, sub), substitute(right, sub))
        case Leaf() | DefRef():
            return t
    raise TypeError(f"Unknown term type: {type(t)}")


def substitute_equation(e: Equation, sub: Substitution) -> Equation:
    return Equation(lhs=substitute(e.lhs, sub), rhs=substitute(e.rhs, sub))


def collect_variables(t: Term, acc: set[str] | None = None) -> set[str]:
    """All variable names occurring in ``t``, added to ``acc`` if given."""
    names = set() if acc is None else acc
    match t:
        case Var(name):
            names.add(name)
        case App(left, right):
            collect_variables(left, names)
            collect_variables(right, names)
        case Leaf() | DefRef():
            pass
        case _:
            raise TypeError(f"Unknown term type: {type(t)}")
    return names


def equation_variables(equations: Iterable[Equation]) -> set[str]:
    names: set[str] = set()
    for e in equations:
        collect_variables(e.lhs, names)
        collect_variables(e.rhs, names)
    return names


def rename_variables(t: Term, renaming: Mapping[str, str]) -> Term:
    """Rename every occurrence of a mapped variable; others pass through."""
    match t:
        case Var(name):
            return Var(renaming[name]) if name in renaming else t
        case App(left, right):
            return App(rename_variables(left, renaming), rename_variables(right, renaming))
        case Leaf() | DefRef():
            return t
    raise TypeError(f"Unknown term type: {type(t)}")


def rename_equation(e: Equation, renaming: Mapping[str, str]) -> Equation:
    return Equation(
        lhs=rename_variables(e.lhs, renaming),
        rhs=rename_variables(e.rhs, renaming),
    )


def fresh_name(base: str, used: set[str]) -> str:
    """``base`` if unused, otherwise the first of base1, base2, ... not in ``used``."""
    name = base
    i = 1
    while name in used:
        name = f"{base}{i}"
        i += 1
    return name


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def subterm_at(root: Term, path: Path) -> Term:
    current = root
    for i, step in enumerate(path):
        if not isinstance(current, App):
            raise PathMismatchError(
                f"Expected App at {format_path(path[:i])}, found {type(current).__name__}"
            )
        current = current.left if step is Step.L else current.right
    return current


def replace_at(root: Term, path: Path, replacement: Term) -> Term:
    """Return ``root`` with the subterm at ``path`` replaced.

    Untouched siblings are shared with the original term.
    """
    if not path:
        return replacement
    if not isinstance(root, App):
        raise PathMismatchError(
            f"Expected App before {format_path(path)}, found {type(root).__name__}"
        )
    step, rest = path[0], path[1:]
    if step is Step.L:
        return App(replace_at(root.left, rest, replacement), root.right)
    return App(root.left, replace_at(root.right, rest, replacement))


def format_path(path: Path) -> str:
    return ".".join(["root", *(s.value for s in path)])


def parse_path(s: str) -> Path:
    """Inverse of ``format_path``. Raises ValueError on a bad segment."""
    parts = s.split(".")
    if parts[0] != "root":
        raise ValueError(f"Path must start with 'root': {s!r}")
    try:
        return tuple(Step(p) for p in parts[1:])
    except ValueError:
        raise ValueError(f"Invalid path segment in {s!r}") from None
