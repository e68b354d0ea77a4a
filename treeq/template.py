"""Partially built terms.

A template has the same shape as a term plus a ``Hole`` marker for the
parts not chosen yet. Templates never enter the proof engine: ``to_term``
converts one only when no holes remain.
"""

from __future__ import annotations

from dataclasses import dataclass

from .algebra import Path, PathMismatchError, Step, format_path
from .result import Err, Ok, Result
from .terms import App, DefRef, Leaf, Term, Var


@dataclass(frozen=True)
class Hole:
    """A position still to be filled."""


@dataclass(frozen=True)
class TemplateApp:
    left: Template
    right: Template


Template = Hole | Leaf | Var | DefRef | TemplateApp

HOLE = Hole()


class ConstructionIncomplete(ValueError):
    """The template still contains holes."""


def empty_app() -> TemplateApp:
    """An application with both sides still open."""
    return TemplateApp(HOLE, HOLE)


def first_hole(t: Template) -> Path | None:
    """Path to the leftmost hole, or None if the template is complete."""
    match t:
        case Hole():
            return ()
        case TemplateApp(left, right):
            p = first_hole(left)
            if p is not None:
                return (Step.L, *p)
            p = first_hole(right)
            if p is not None:
                return (Step.R, *p)
            return None
        case Leaf() | Var() | DefRef():
            return None
    raise TypeError(f"Unknown template type: {type(t)}")


def fill_hole(t: Template, path: Path, replacement: Template) -> Template:
    """Replace the hole at ``path``. Raises PathMismatchError if there is none."""
    if not path:
        if not isinstance(t, Hole):
            raise PathMismatchError(f"No hole at {format_path(path)}")
        return replacement
    if not isinstance(t, TemplateApp):
        raise PathMismatchError(f"Expected application before {format_path(path)}")
    step, rest = path[0], path[1:]
    if step is Step.L:
        return TemplateApp(fill_hole(t.left, rest, replacement), t.right)
    return TemplateApp(t.left, fill_hole(t.right, rest, replacement))


def to_term(t: Template) -> Result[Term, ConstructionIncomplete]:
    hole = first_hole(t)
    if hole is not None:
        return Err(ConstructionIncomplete(f"Hole left at {format_path(hole)}"))
    return Ok(_convert(t))


def _convert(t: Template) -> Term:
    match t:
        case TemplateApp(left, right):
            return App(_convert(left), _convert(right))
        case Leaf() | Var() | DefRef():
            return t
    raise TypeError(f"Cannot convert {type(t).__name__} to a term")


def from_term(t: Term) -> Template:
    """Lift a finished term back into a template for editing."""
    match t:
        case App(left, right):
            return TemplateApp(from_term(left), from_term(right))
        case Leaf() | Var() | DefRef():
            return t
    raise TypeError(f"Unknown term type: {type(t)}")
