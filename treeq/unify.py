"""One-directional pattern matching.

Only variables of the pattern may be bound. Variables of the target are
treated like constants and compare by name. Bindings are threaded left to
right, so the first occurrence of a pattern variable fixes its binding for
every later occurrence.
"""

from __future__ import annotations

from .algebra import Substitution, equals
from .terms import App, DefRef, Leaf, Term, Var


def match_pattern(
    pattern: Term,
    target: Term,
    sub: Substitution | None = None,
) -> dict[str, Term] | None:
    """Extend ``sub`` so that ``substitute(pattern, result) == target``.

    Returns a new substitution on success, None on failure. ``sub`` itself is
    never modified.
    """
    return _match(pattern, target, dict(sub) if sub is not None else {})


def _match(pattern: Term, target: Term, sub: dict[str, Term]) -> dict[str, Term] | None:
    match pattern:
        case Var(name):
            if name in sub:
                return sub if equals(sub[name], target) else None
            sub[name] = target
            return sub
        case Leaf():
            return sub if isinstance(target, Leaf) else None
        case DefRef(name):
            return sub if isinstance(target, DefRef) and target.name == name else None
        case App(left, right):
            if not isinstance(target, App):
                return None
            after_left = _match(left, target.left, sub)
            if after_left is None:
                return None
            return _match(right, target.right, after_left)
    raise TypeError(f"Unknown term type: {type(pattern)}")
