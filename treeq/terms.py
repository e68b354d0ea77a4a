"""Terms of the tree calculus.

A term is built from:
  - the single constant Leaf (written △)
  - free proof variables
  - opaque references to named definitions
  - binary application

Stem and Fork are not constructors but shapes of applications:
  Stem  = △ x     — App(Leaf, x)
  Fork  = △ w x   — App(App(Leaf, w), x)

Terms are immutable and may be shared freely between sequents.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Term AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Leaf:
    """The sole constant △."""


@dataclass(frozen=True)
class Var:
    """A free proof variable. Two variables are equal iff their names match.

    Example: x — Var("x")
    """

    name: str


@dataclass(frozen=True)
class DefRef:
    """A reference to a named definition, resolved only by a definition table.

    The reduction engine never unfolds it.

    Example: <K> — DefRef("K")
    """

    name: str


@dataclass(frozen=True)
class App:
    """Binary application.

    Example: △ x       — App(Leaf(), Var("x"))
    Example: △ △ y     — App(App(Leaf(), Leaf()), Var("y"))
    """

    left: Term
    right: Term


# Union of all term forms
Term = Leaf | Var | DefRef | App

LEAF = Leaf()


class TermKind(Enum):
    LEAF = "Leaf"
    VARIABLE = "Variable"
    DEFINITION_REF = "DefinitionRef"
    APP = "App"


def kind_of(t: Term) -> TermKind:
    match t:
        case Leaf():
            return TermKind.LEAF
        case Var():
            return TermKind.VARIABLE
        case DefRef():
            return TermKind.DEFINITION_REF
        case App():
            return TermKind.APP
    raise TypeError(f"Unknown term type: {type(t)}")


# ---------------------------------------------------------------------------
# Stem / Fork shapes
# ---------------------------------------------------------------------------


def is_stem(t: Term) -> bool:
    return isinstance(t, App) and isinstance(t.left, Leaf)


def is_fork(t: Term) -> bool:
    return isinstance(t, App) and is_stem(t.left)


def stem_arg(t: Term) -> Term | None:
    """Return x for △ x, or None if ``t`` is not a stem."""
    match t:
        case App(Leaf(), x):
            return x
        case _:
            return None


def fork_args(t: Term) -> tuple[Term, Term] | None:
    """Return (w, x) for △ w x, or None if ``t`` is not a fork."""
    match t:
        case App(App(Leaf(), w), x):
            return (w, x)
        case _:
            return None


# ---------------------------------------------------------------------------
# Equations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Equation:
    """An equation between two terms. No orientation is implied.

    Example: <K> y z = y
    """

    lhs: Term
    rhs: Term


# ---------------------------------------------------------------------------
# Printing
# ---------------------------------------------------------------------------


def to_str(t: Term) -> str:
    """Prefix notation; the argument of an application is parenthesized
    iff it is itself an application.

    >>> to_str(App(App(Leaf(), Var("x")), App(Leaf(), Leaf())))
    '△ x (△ △)'
    """
    match t:
        case Leaf():
            return "△"
        case Var(name):
            return name
        case DefRef(name):
            return f"<{name}>"
        case App(left, right):
            right_str = to_str(right)
            if isinstance(right, App):
                right_str = f"({right_str})"
            return f"{to_str(left)} {right_str}"
    raise TypeError(f"Unknown term type: {type(t)}")


def equation_str(e: Equation) -> str:
    return f"{to_str(e.lhs)} = {to_str(e.rhs)}"
