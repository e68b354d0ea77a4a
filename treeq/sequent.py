"""Sequents: hypotheses plus one goal equation.

    h₁, ..., hₙ ⊢ lhs = rhs

A sequent is created once, when a rule produces it, and never changes.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass

from .algebra import Substitution, equation_variables, substitute_equation
from .terms import Equation, Term

_ids = itertools.count(1)


def next_sequent_id() -> str:
    """Process-local, monotonically increasing sequent id."""
    return f"s{next(_ids)}"


@dataclass(frozen=True)
class Sequent:
    id: str
    hypotheses: tuple[Equation, ...]
    goal: Equation


def create_sequent(
    lhs: Term,
    rhs: Term,
    hypotheses: tuple[Equation, ...] | list[Equation] = (),
) -> Sequent:
    return Sequent(
        id=next_sequent_id(),
        hypotheses=tuple(hypotheses),
        goal=Equation(lhs=lhs, rhs=rhs),
    )


def sequent_variables(s: Sequent) -> set[str]:
    """Variables of the goal and of every hypothesis."""
    return equation_variables((s.goal, *s.hypotheses))


def substitute_sequent(s: Sequent, sub: Substitution) -> Sequent:
    """A new sequent with ``sub`` applied to the goal and all hypotheses."""
    return Sequent(
        id=next_sequent_id(),
        hypotheses=tuple(substitute_equation(h, sub) for h in s.hypotheses),
        goal=substitute_equation(s.goal, sub),
    )
