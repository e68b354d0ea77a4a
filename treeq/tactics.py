"""Inference rules that extend a proof tree.

Each tactic works on one open node, checks its precondition, builds the
subgoal sequents and closes the node through ``ProofState.apply_rule``.
A tactic returns ``Ok(node)`` on success or ``Err(TacticError)``; on
``Err`` the proof tree is exactly as it was.

Design principles:
- Rejections are values, not exceptions. Each is logged at WARNING.
- A path that no longer fits the goal is a caller bug and raises
  ``PathMismatchError``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

from .algebra import (
    Path,
    equals,
    fresh_name,
    rename_equation,
    replace_at,
    substitute_equation,
    subterm_at,
)
from .library import DefinitionTable, Theorem
from .proof import ProofNode, ProofState, RuleType
from .reduction import reduce_step
from .result import Err, Ok, Result
from .sequent import Sequent, create_sequent, sequent_variables, substitute_sequent
from .terms import LEAF, App, DefRef, Equation, Term, Var, to_str
from .unify import match_pattern

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors and selections
# ---------------------------------------------------------------------------


class ErrorKind(Enum):
    SHAPE_MISMATCH = "shape_mismatch"   # structural precondition failed
    LOOKUP_FAILURE = "lookup_failure"   # definition or ancestor not found
    NOT_OPEN = "not_open"               # node unknown or already closed


class TacticError(Exception):
    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class Side(Enum):
    LHS = "lhs"
    RHS = "rhs"


@dataclass(frozen=True)
class Selection:
    """A subterm of a goal, addressed by side and path."""

    side: Side
    path: Path = ()


TacticResult: TypeAlias = Result[ProofNode, TacticError]


def _reject(node_id: str, kind: ErrorKind, message: str) -> Err[TacticError]:
    logger.warning("Tactic rejected at %s: %s", node_id, message)
    return Err(TacticError(kind, message))


def _open_node(state: ProofState, node_id: str) -> ProofNode | None:
    node = state.get_node(node_id)
    if node is None or not node.is_open:
        return None
    return node


def _close(
    state: ProofState,
    node: ProofNode,
    rule: RuleType,
    subgoals: Sequence[Sequent],
    back_link_to: str | None = None,
) -> TacticResult:
    closed = state.apply_rule(node.id, rule, subgoals, back_link_to)
    assert closed is node
    return Ok(node)


def _not_open(node_id: str) -> Err[TacticError]:
    return _reject(node_id, ErrorKind.NOT_OPEN, f"Node {node_id!r} is not an open goal")


def _side(goal: Equation, side: Side) -> Term:
    return goal.lhs if side is Side.LHS else goal.rhs


def _selected(goal: Equation, sel: Selection) -> Term:
    return subterm_at(_side(goal, sel.side), sel.path)


def _replace_selected(goal: Equation, sel: Selection, replacement: Term) -> Equation:
    if sel.side is Side.LHS:
        return Equation(replace_at(goal.lhs, sel.path, replacement), goal.rhs)
    return Equation(goal.lhs, replace_at(goal.rhs, sel.path, replacement))


def _child(goal: Equation, hypotheses: tuple[Equation, ...]) -> Sequent:
    return create_sequent(goal.lhs, goal.rhs, hypotheses)


# ---------------------------------------------------------------------------
# Equality rules
# ---------------------------------------------------------------------------


def reflexivity(state: ProofState, node_id: str) -> TacticResult:
    """Close ``t = t``."""
    node = _open_node(state, node_id)
    if node is None:
        return _not_open(node_id)
    goal = node.sequent.goal
    if not equals(goal.lhs, goal.rhs):
        return _reject(node_id, ErrorKind.SHAPE_MISMATCH, "Goal is not reflexive (LHS != RHS)")
    return _close(state, node, RuleType.REFLEXIVITY, [])


def symmetry(state: ProofState, node_id: str) -> TacticResult:
    node = _open_node(state, node_id)
    if node is None:
        return _not_open(node_id)
    seq = node.sequent
    flipped = create_sequent(seq.goal.rhs, seq.goal.lhs, seq.hypotheses)
    return _close(state, node, RuleType.SYMMETRY, [flipped])


def transitivity(state: ProofState, node_id: str, mid: Term) -> TacticResult:
    """Split ``a = c`` into ``a = mid`` and ``mid = c``."""
    node = _open_node(state, node_id)
    if node is None:
        return _not_open(node_id)
    seq = node.sequent
    return _close(
        state,
        node,
        RuleType.TRANSITIVITY,
        [
            create_sequent(seq.goal.lhs, mid, seq.hypotheses),
            create_sequent(mid, seq.goal.rhs, seq.hypotheses),
        ],
    )


def congruence(state: ProofState, node_id: str) -> TacticResult:
    """Split ``a b = c d`` into ``a = c`` and ``b = d``."""
    node = _open_node(state, node_id)
    if node is None:
        return _not_open(node_id)
    seq = node.sequent
    match seq.goal:
        case Equation(App(a, b), App(c, d)):
            return _close(
                state,
                node,
                RuleType.CONGRUENCE,
                [
                    create_sequent(a, c, seq.hypotheses),
                    create_sequent(b, d, seq.hypotheses),
                ],
            )
        case _:
            return _reject(
                node_id,
                ErrorKind.SHAPE_MISMATCH,
                "Congruence needs an application on both sides",
            )


def reduction(state: ProofState, node_id: str, side: Side) -> TacticResult:
    """Rewrite one side of the goal by a single reduction step."""
    node = _open_node(state, node_id)
    if node is None:
        return _not_open(node_id)
    seq = node.sequent
    reduced = reduce_step(_side(seq.goal, side))
    if reduced is None:
        return _reject(
            node_id,
            ErrorKind.SHAPE_MISMATCH,
            f"{side.name} cannot be reduced further",
        )
    if side is Side.LHS:
        goal = Equation(reduced, seq.goal.rhs)
    else:
        goal = Equation(seq.goal.lhs, reduced)
    return _close(state, node, RuleType.REDUCTION, [_child(goal, seq.hypotheses)])


# ---------------------------------------------------------------------------
# Rewriting
# ---------------------------------------------------------------------------


def rewrite_with_hypothesis(
    state: ProofState,
    node_id: str,
    selection: Selection,
    hypothesis_index: int,
) -> TacticResult:
    """Replace the selected subterm, which must equal the hypothesis LHS,
    by the hypothesis RHS."""
    node = _open_node(state, node_id)
    if node is None:
        return _not_open(node_id)
    seq = node.sequent
    if not 0 <= hypothesis_index < len(seq.hypotheses):
        return _reject(
            node_id,
            ErrorKind.LOOKUP_FAILURE,
            f"No hypothesis #{hypothesis_index} in this sequent",
        )
    hyp = seq.hypotheses[hypothesis_index]
    if not equals(hyp.lhs, _selected(seq.goal, selection)):
        return _reject(
            node_id,
            ErrorKind.SHAPE_MISMATCH,
            "Assumption LHS does not match selected subterm",
        )
    goal = _replace_selected(seq.goal, selection, hyp.rhs)
    return _close(state, node, RuleType.REWRITE, [_child(goal, seq.hypotheses)])


def unfold_definition(
    state: ProofState,
    node_id: str,
    selection: Selection,
    definitions: DefinitionTable,
) -> TacticResult:
    """Replace the selected definition reference by its body."""
    node = _open_node(state, node_id)
    if node is None:
        return _not_open(node_id)
    seq = node.sequent
    target = _selected(seq.goal, selection)
    if not isinstance(target, DefRef):
        return _reject(node_id, ErrorKind.SHAPE_MISMATCH, "Selected term is not a definition")
    if target.name not in definitions:
        return _reject(
            node_id,
            ErrorKind.LOOKUP_FAILURE,
            f"Definition {target.name!r} not found",
        )
    goal = _replace_selected(seq.goal, selection, definitions[target.name])
    return _close(state, node, RuleType.REWRITE, [_child(goal, seq.hypotheses)])


# ---------------------------------------------------------------------------
# Case analysis, theorems, induction
# ---------------------------------------------------------------------------


def case_split(state: ProofState, node_id: str, selection: Selection) -> TacticResult:
    """Split on a variable x into the cases △, △ y and △ y z.

    y and z are fresh for the whole sequent and distinct from each other.
    """
    node = _open_node(state, node_id)
    if node is None:
        return _not_open(node_id)
    seq = node.sequent
    target = _selected(seq.goal, selection)
    if not isinstance(target, Var):
        return _reject(node_id, ErrorKind.SHAPE_MISMATCH, "Case split needs a variable")

    used = sequent_variables(seq)
    y = fresh_name("y", used)
    used.add(y)
    z = fresh_name("z", used)

    x = target.name
    cases: list[dict[str, Term]] = [
        {x: LEAF},
        {x: App(LEAF, Var(y))},
        {x: App(App(LEAF, Var(y)), Var(z))},
    ]
    return _close(
        state,
        node,
        RuleType.CASE_SPLIT,
        [substitute_sequent(seq, c) for c in cases],
    )


def apply_theorem(state: ProofState, node_id: str, theorem: Theorem) -> TacticResult:
    """Instantiate a proved theorem against the goal.

    The theorem's variables are renamed apart from the sequent, its goal is
    matched against the current goal (LHS then RHS), and each of its
    hypotheses becomes a subgoal under the resulting substitution.
    """
    node = _open_node(state, node_id)
    if node is None:
        return _not_open(node_id)
    seq = node.sequent
    thm = theorem.sequent

    used = sequent_variables(seq)
    renaming: dict[str, str] = {}
    for v in sorted(sequent_variables(thm)):
        new = fresh_name(v, used)
        renaming[v] = new
        used.add(new)

    thm_goal = rename_equation(thm.goal, renaming)
    sub = match_pattern(thm_goal.lhs, seq.goal.lhs)
    if sub is not None:
        sub = match_pattern(thm_goal.rhs, seq.goal.rhs, sub)
    if sub is None:
        return _reject(
            node_id,
            ErrorKind.SHAPE_MISMATCH,
            f"Theorem {theorem.name!r} does not match the goal",
        )

    subgoals = [
        _child(substitute_equation(rename_equation(h, renaming), sub), seq.hypotheses)
        for h in thm.hypotheses
    ]
    logger.debug(
        "Theorem %r instantiated with %s",
        theorem.name,
        {k: to_str(v) for k, v in sub.items()},
    )
    return _close(state, node, RuleType.HYPOTHESIS, subgoals)


def induction(state: ProofState, node_id: str) -> TacticResult:
    """Close the node by a back-link to the nearest ancestor with the same goal.

    Only textual recurrence is checked; the cycle is not required to pass
    through a reduction or case split.
    """
    node = _open_node(state, node_id)
    if node is None:
        return _not_open(node_id)
    target = state.matching_ancestor(node_id)
    if target is None:
        return _reject(
            node_id,
            ErrorKind.LOOKUP_FAILURE,
            "No matching ancestor found for induction",
        )
    return _close(state, node, RuleType.INDUCTION, [], back_link_to=target.id)
