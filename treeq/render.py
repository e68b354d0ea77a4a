"""Text rendering of proof trees from Jinja2 templates."""

from __future__ import annotations

import typing
from dataclasses import dataclass
from pathlib import Path

import jinja2

from .proof import ProofNode, ProofState
from .terms import equation_str

TEMPLATE_DIR = Path(__file__).parent / "templates"

_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(TEMPLATE_DIR),
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["equation"] = equation_str


def render(template_name: str, **kwargs: typing.Any) -> str:
    return _env.get_template(template_name).render(**kwargs)


@dataclass(frozen=True)
class _Row:
    depth: int
    node: ProofNode


def _rows(node: ProofNode, depth: int = 0) -> list[_Row]:
    rows = [_Row(depth, node)]
    for child in node.children:
        rows.extend(_rows(child, depth + 1))
    return rows


def render_proof(state: ProofState, title: str | None = None) -> str:
    return render(
        "proof.txt.j2",
        title=title,
        rows=_rows(state.root),
        complete=state.is_complete(),
        open_count=len(state.open_nodes()),
    )
