"""One-step and iterated reduction of tree calculus terms.

The five rules, tried in order against the outermost redex ((op y) z):

  1. △ △ y z          ⟶  y
  2. △ (△ x) y z      ⟶  x z (y z)
  3. △ (△ w x) y △    ⟶  w
  4. △ (△ w x) y (△ u)    ⟶  x u
  5. △ (△ w x) y (△ u v)  ⟶  y u v

If the outermost term is not a redex, the left child is tried first, then
the right child. Variables and definition references are never unfolded,
so a normal form may still be open.
"""

from __future__ import annotations

import logging

from .terms import App, DefRef, Leaf, Term, Var

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 1000


def _rewrite_head(t: App) -> Term | None:
    """Apply a rule at the root of ``t`` only."""
    match t:
        case App(App(App(Leaf(), Leaf()), y), _):
            return y
        case App(App(App(Leaf(), App(Leaf(), x)), y), z):
            return App(App(x, z), App(y, z))
        case App(App(App(Leaf(), App(App(Leaf(), w), x)), y), z):
            match z:
                case Leaf():
                    return w
                case App(Leaf(), u):
                    return App(x, u)
                case App(App(Leaf(), u), v):
                    return App(App(y, u), v)
                case _:
                    return None
        case _:
            return None


def reduce_step(t: Term) -> Term | None:
    """Perform at most one rewrite. Returns None if ``t`` has no redex."""
    match t:
        case Leaf() | Var() | DefRef():
            return None
        case App(left, right):
            reduct = _rewrite_head(t)
            if reduct is not None:
                return reduct
            reduced_left = reduce_step(left)
            if reduced_left is not None:
                return App(reduced_left, right)
            reduced_right = reduce_step(right)
            if reduced_right is not None:
                return App(left, reduced_right)
            return None
    raise TypeError(f"Unknown term type: {type(t)}")


def reduce(t: Term, max_steps: int = DEFAULT_MAX_STEPS) -> Term:
    """Iterate ``reduce_step`` until no redex is left or ``max_steps``
    rewrites have been made. The result is not guaranteed to be normal.
    """
    current, _ = reduce_with_count(t, max_steps)
    return current


def reduce_with_count(t: Term, max_steps: int = DEFAULT_MAX_STEPS) -> tuple[Term, int]:
    """Like ``reduce`` but also return the number of rewrites performed."""
    current = t
    steps = 0
    while steps < max_steps:
        nxt = reduce_step(current)
        if nxt is None:
            return current, steps
        current = nxt
        steps += 1
    logger.debug("Reduction stopped at bound of %d steps", max_steps)
    return current, steps


def is_normal(t: Term) -> bool:
    return reduce_step(t) is None
