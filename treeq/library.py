"""Definition tables and theorem libraries consumed by the tactics.

A definition table maps a name to the term a ``DefRef`` of that name
stands for. A theorem library is a sequence of already-proved sequents;
the tactics instantiate them without re-checking their proofs.

The built-in prelude provides K, False and I together with their
reduction theorems.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from .helpers import app, ref, var
from .sequent import Sequent, create_sequent
from .terms import LEAF, App, DefRef, Leaf, Term, Var

DefinitionTable: TypeAlias = Mapping[str, Term]


@dataclass(frozen=True)
class Theorem:
    name: str
    sequent: Sequent


def prelude_definitions() -> dict[str, Term]:
    return {
        "K": app(LEAF, LEAF),
        "False": app(LEAF, app(LEAF, ref("K"))),
        "I": app(ref("False"), ref("K")),
    }


def prelude_theorems() -> tuple[Theorem, ...]:
    y, z, x = var("y"), var("z"), var("x")
    return (
        Theorem("K Reduction", create_sequent(app(ref("K"), y, z), y)),
        Theorem("False Reduction", create_sequent(app(ref("False"), y, z), z)),
        Theorem("Identity (I)", create_sequent(app(ref("I"), x), x)),
    )


def find_theorem(library: Sequence[Theorem], name: str) -> Theorem | None:
    return next((t for t in library if t.name == name), None)


class UnfoldDepthError(RecursionError):
    """Definitions refer to each other too deeply (likely a cycle)."""


def unfold_all(t: Term, table: DefinitionTable, max_depth: int = 64) -> Term:
    """Replace every resolvable ``DefRef`` transitively. Unknown names stay."""
    return _unfold(t, table, max_depth)


def _unfold(t: Term, table: DefinitionTable, budget: int) -> Term:
    match t:
        case DefRef(name):
            if name not in table:
                return t
            if budget <= 0:
                raise UnfoldDepthError(f"Definition {name!r} nests too deeply")
            return _unfold(table[name], table, budget - 1)
        case App(left, right):
            return App(_unfold(left, table, budget), _unfold(right, table, budget))
        case Leaf() | Var():
            return t
    raise TypeError(f"Unknown term type: {type(t)}")
