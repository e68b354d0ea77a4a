"""Tests for treeq/tactics.py — rule application on proof states."""

import logging

import pytest

from treeq.algebra import PathMismatchError, Step, collect_variables, equals
from treeq.helpers import app, eq, fork, ref, stem, var
from treeq.library import Theorem, find_theorem, prelude_definitions, prelude_theorems
from treeq.proof import ROOT_ID, ProofState, RuleType
from treeq.result import Err, Ok
from treeq.sequent import create_sequent, sequent_variables
from treeq.tactics import (
    ErrorKind,
    Selection,
    Side,
    apply_theorem,
    case_split,
    congruence,
    induction,
    reduction,
    reflexivity,
    rewrite_with_hypothesis,
    symmetry,
    transitivity,
    unfold_definition,
)
from treeq.terms import LEAF, App, Equation, Term, Var

L, R = Step.L, Step.R
K = App(LEAF, LEAF)


def _state(lhs: Term, rhs: Term, hyps: list[Equation] | None = None) -> ProofState:
    return ProofState(create_sequent(lhs, rhs, hyps or []))


def _snapshot(state: ProofState) -> tuple:
    return tuple(
        (n.id, n.rule, n.back_link_to, len(n.children)) for n in state.nodes.values()
    )


def _rejected(result, kind: ErrorKind) -> bool:
    match result:
        case Err(e):
            return e.kind == kind
        case _:
            return False


def _goal(state: ProofState, node_id: str) -> Equation:
    return state.get_node(node_id).sequent.goal


# ===========================================================================
# Equality rules
# ===========================================================================


class TestEqualityRules:
    def test_reflexivity_closes(self) -> None:
        state = _state(stem(var("x")), stem(var("x")))
        assert isinstance(reflexivity(state, ROOT_ID), Ok)
        assert state.root.rule == RuleType.REFLEXIVITY
        assert state.root.children == []
        assert state.is_complete()

    def test_reflexivity_rejects_unequal_sides(self) -> None:
        state = _state(var("x"), var("y"))
        before = _snapshot(state)
        assert _rejected(reflexivity(state, ROOT_ID), ErrorKind.SHAPE_MISMATCH)
        assert _snapshot(state) == before
        assert state.root.is_open

    def test_symmetry_flips_and_keeps_hypotheses(self) -> None:
        hyp = eq(var("a"), LEAF)
        state = _state(var("a"), stem(LEAF), [hyp])
        symmetry(state, ROOT_ID)
        child = state.get_node("root.0")
        assert child.sequent.goal == Equation(stem(LEAF), var("a"))
        assert child.sequent.hypotheses == (hyp,)

    def test_transitivity(self) -> None:
        mid = var("m")
        state = _state(var("a"), var("c"))
        transitivity(state, ROOT_ID, mid)
        assert _goal(state, "root.0") == Equation(var("a"), mid)
        assert _goal(state, "root.1") == Equation(mid, var("c"))

    def test_congruence(self) -> None:
        state = _state(App(var("a"), var("b")), App(var("c"), var("d")))
        assert isinstance(congruence(state, ROOT_ID), Ok)
        assert _goal(state, "root.0") == Equation(var("a"), var("c"))
        assert _goal(state, "root.1") == Equation(var("b"), var("d"))

    def test_congruence_needs_applications(self) -> None:
        state = _state(App(var("a"), var("b")), LEAF)
        assert _rejected(congruence(state, ROOT_ID), ErrorKind.SHAPE_MISMATCH)
        assert state.root.is_open

    def test_closed_node_rejected_as_not_open(self) -> None:
        state = _state(LEAF, LEAF)
        reflexivity(state, ROOT_ID)
        assert _rejected(symmetry(state, ROOT_ID), ErrorKind.NOT_OPEN)
        assert _rejected(reflexivity(state, "root.3"), ErrorKind.NOT_OPEN)
        assert state.root.rule == RuleType.REFLEXIVITY


# ===========================================================================
# Reduction
# ===========================================================================


class TestReduction:
    def test_reduces_lhs_one_step(self) -> None:
        inner = app(K, var("a"), LEAF)
        state = _state(app(K, inner, LEAF), var("a"))
        reduction(state, ROOT_ID, Side.LHS)
        assert _goal(state, "root.0") == Equation(inner, var("a"))

    def test_reduces_rhs(self) -> None:
        state = _state(var("a"), app(K, var("a"), LEAF))
        reduction(state, ROOT_ID, Side.RHS)
        assert _goal(state, "root.0") == Equation(var("a"), var("a"))

    def test_normal_form_rejected(self, caplog) -> None:
        state = _state(var("a"), app(K, var("a"), LEAF))
        with caplog.at_level(logging.WARNING, logger="treeq.tactics"):
            result = reduction(state, ROOT_ID, Side.LHS)
        assert _rejected(result, ErrorKind.SHAPE_MISMATCH)
        assert state.root.is_open
        assert any("cannot be reduced" in r.message for r in caplog.records)


# ===========================================================================
# Rewriting
# ===========================================================================


class TestRewrite:
    def test_rewrite_with_hypothesis(self) -> None:
        hyp = eq(app(var("f"), var("a")), LEAF)
        state = _state(App(app(var("f"), var("a")), var("b")), var("c"), [hyp])
        result = rewrite_with_hypothesis(state, ROOT_ID, Selection(Side.LHS, (L,)), 0)
        assert isinstance(result, Ok)
        assert state.root.rule == RuleType.REWRITE
        assert _goal(state, "root.0") == Equation(App(LEAF, var("b")), var("c"))
        assert state.get_node("root.0").sequent.hypotheses == (hyp,)

    def test_rewrite_on_rhs(self) -> None:
        hyp = eq(var("a"), LEAF)
        state = _state(LEAF, stem(var("a")), [hyp])
        rewrite_with_hypothesis(state, ROOT_ID, Selection(Side.RHS, (R,)), 0)
        assert _goal(state, "root.0") == Equation(LEAF, stem(LEAF))

    def test_rewrite_requires_structural_equality(self) -> None:
        # the hypothesis mentions x, the goal mentions a: no instantiation
        hyp = eq(App(var("x"), LEAF), LEAF)
        state = _state(App(var("a"), LEAF), LEAF, [hyp])
        result = rewrite_with_hypothesis(state, ROOT_ID, Selection(Side.LHS), 0)
        assert _rejected(result, ErrorKind.SHAPE_MISMATCH)
        assert state.root.is_open

    def test_rewrite_with_missing_hypothesis(self) -> None:
        state = _state(var("a"), LEAF)
        result = rewrite_with_hypothesis(state, ROOT_ID, Selection(Side.LHS), 0)
        assert _rejected(result, ErrorKind.LOOKUP_FAILURE)

    def test_stale_path_raises(self) -> None:
        state = _state(var("a"), LEAF, [eq(var("a"), LEAF)])
        with pytest.raises(PathMismatchError):
            rewrite_with_hypothesis(state, ROOT_ID, Selection(Side.LHS, (L, R)), 0)
        assert state.root.is_open

    def test_unfold_definition(self) -> None:
        state = _state(app(ref("K"), var("y"), var("z")), var("y"))
        result = unfold_definition(
            state, ROOT_ID, Selection(Side.LHS, (L, L)), prelude_definitions()
        )
        assert isinstance(result, Ok)
        assert _goal(state, "root.0").lhs == app(LEAF, LEAF, var("y"), var("z"))

    def test_unfold_requires_definition_ref(self) -> None:
        state = _state(app(ref("K"), var("y"), var("z")), var("y"))
        result = unfold_definition(
            state, ROOT_ID, Selection(Side.LHS, (L, R)), prelude_definitions()
        )
        assert _rejected(result, ErrorKind.SHAPE_MISMATCH)

    def test_unfold_unknown_definition(self) -> None:
        state = _state(ref("Nope"), LEAF)
        result = unfold_definition(state, ROOT_ID, Selection(Side.LHS), prelude_definitions())
        assert _rejected(result, ErrorKind.LOOKUP_FAILURE)
        assert state.root.is_open


# ===========================================================================
# Case split
# ===========================================================================


class TestCaseSplit:
    def test_three_cases_with_fresh_names(self) -> None:
        x = var("x")
        state = _state(stem(x), x)
        assert isinstance(case_split(state, ROOT_ID, Selection(Side.RHS)), Ok)
        assert state.root.rule == RuleType.CASE_SPLIT
        children = state.root.children
        assert len(children) == 3
        var_sets = [sequent_variables(c.sequent) for c in children]
        assert var_sets == [set(), {"y"}, {"y", "z"}]
        assert children[0].sequent.goal == Equation(stem(LEAF), LEAF)
        assert children[1].sequent.goal == Equation(stem(stem(var("y"))), stem(var("y")))
        assert children[2].sequent.goal.rhs == fork(var("y"), var("z"))

    def test_fresh_names_avoid_hypothesis_variables(self) -> None:
        x = var("x")
        hyp = eq(var("y"), var("z"))
        state = _state(App(x, var("y1")), LEAF, [hyp])
        case_split(state, ROOT_ID, Selection(Side.LHS, (L,)))
        fork_case = state.get_node("root.2").sequent
        new_vars = collect_variables(fork_case.goal.lhs) - {"y1"}
        assert new_vars == {"y2", "z1"}
        assert fork_case.goal.lhs == App(fork(var("y2"), var("z1")), var("y1"))
        # hypotheses are substituted too (x does not occur in them here)
        assert fork_case.hypotheses == (hyp,)

    def test_substitutes_into_hypotheses(self) -> None:
        x = var("x")
        state = _state(x, LEAF, [eq(x, stem(LEAF))])
        case_split(state, ROOT_ID, Selection(Side.LHS))
        assert state.get_node("root.0").sequent.hypotheses == (eq(LEAF, stem(LEAF)),)

    def test_requires_variable(self) -> None:
        state = _state(stem(var("x")), LEAF)
        result = case_split(state, ROOT_ID, Selection(Side.LHS))
        assert _rejected(result, ErrorKind.SHAPE_MISMATCH)
        assert state.root.is_open


# ===========================================================================
# Theorems
# ===========================================================================


class TestApplyTheorem:
    def test_instantiates_prelude_theorem(self) -> None:
        thm = find_theorem(prelude_theorems(), "K Reduction")
        assert thm is not None
        state = _state(app(ref("K"), stem(LEAF), var("w")), stem(LEAF))
        assert isinstance(apply_theorem(state, ROOT_ID, thm), Ok)
        assert state.root.rule == RuleType.HYPOTHESIS
        assert state.root.children == []
        assert state.is_complete()

    def test_rhs_must_agree_with_lhs_binding(self) -> None:
        thm = find_theorem(prelude_theorems(), "K Reduction")
        state = _state(app(ref("K"), stem(LEAF), var("w")), var("w"))
        before = _snapshot(state)
        result = apply_theorem(state, ROOT_ID, thm)
        assert _rejected(result, ErrorKind.SHAPE_MISMATCH)
        assert _snapshot(state) == before

    def test_theorem_variables_renamed_apart(self) -> None:
        # theorem: x = y ⊢ f x = f y ; goal mentions x and y itself
        thm = Theorem(
            "cong",
            create_sequent(
                App(var("f"), var("x")),
                App(var("f"), var("y")),
                [eq(var("x"), var("y"))],
            ),
        )
        goal_hyp = eq(var("y"), LEAF)
        state = _state(App(LEAF, var("y")), App(LEAF, var("x")), [goal_hyp])
        assert isinstance(apply_theorem(state, ROOT_ID, thm), Ok)
        (child,) = state.root.children
        assert child.sequent.goal == Equation(var("y"), var("x"))
        assert child.sequent.hypotheses == (goal_hyp,)

    def test_unbound_theorem_variables_stay_fresh(self) -> None:
        # transitivity-like theorem with a middle variable not in the goal
        thm = Theorem(
            "trans",
            create_sequent(var("a"), var("c"), [eq(var("a"), var("b")), eq(var("b"), var("c"))]),
        )
        state = _state(var("b"), LEAF)
        apply_theorem(state, ROOT_ID, thm)
        first, second = state.root.children
        middle = first.sequent.goal.rhs
        assert isinstance(middle, Var) and middle.name != "b"
        assert first.sequent.goal == Equation(var("b"), middle)
        assert second.sequent.goal == Equation(middle, LEAF)


# ===========================================================================
# Induction
# ===========================================================================


class TestInduction:
    def test_fails_without_matching_ancestor(self) -> None:
        state = _state(var("x"), LEAF)
        symmetry(state, ROOT_ID)
        before = _snapshot(state)
        result = induction(state, "root.0")
        assert _rejected(result, ErrorKind.LOOKUP_FAILURE)
        assert _snapshot(state) == before
        assert state.get_node("root.0").back_link_to is None

    def test_root_has_no_ancestor(self) -> None:
        state = _state(var("x"), var("x"))
        assert _rejected(induction(state, ROOT_ID), ErrorKind.LOOKUP_FAILURE)

    def test_links_to_nearest_matching_ancestor(self) -> None:
        state = _state(var("x"), LEAF)
        symmetry(state, ROOT_ID)       # root.0: △ = x
        symmetry(state, "root.0")      # root.0.0: x = △
        symmetry(state, "root.0.0")    # root.0.0.0: △ = x
        symmetry(state, "root.0.0.0")  # root.0.0.0.0: x = △
        assert isinstance(induction(state, "root.0.0.0.0"), Ok)
        node = state.get_node("root.0.0.0.0")
        assert node.rule == RuleType.INDUCTION
        assert node.back_link_to == "root.0.0"
        assert node.children == []
        assert state.is_complete()
        assert state.invalid_back_links() == []


# ===========================================================================
# End-to-end proofs
# ===========================================================================


def test_k_reduction_proof() -> None:
    """<K> y z = y by unfolding K, one reduction and reflexivity."""
    y, z = var("y"), var("z")
    state = _state(app(ref("K"), y, z), y)
    assert isinstance(
        unfold_definition(state, ROOT_ID, Selection(Side.LHS, (L, L)), prelude_definitions()),
        Ok,
    )
    assert isinstance(reduction(state, "root.0", Side.LHS), Ok)
    assert isinstance(reflexivity(state, "root.0.0"), Ok)
    assert state.is_complete()
    assert state.depth() == 3


def test_k_reduction_with_reducible_argument() -> None:
    """<K> Y z = a where Y = △ △ a b: unfold, two reductions, reflexivity."""
    a = var("a")
    big_y = app(LEAF, LEAF, a, var("b"))
    state = _state(app(ref("K"), big_y, var("z")), a)
    unfold_definition(state, ROOT_ID, Selection(Side.LHS, (L, L)), prelude_definitions())
    assert isinstance(reduction(state, "root.0", Side.LHS), Ok)
    assert equals(_goal(state, "root.0.0").lhs, big_y)
    assert isinstance(reduction(state, "root.0.0", Side.LHS), Ok)
    assert isinstance(reflexivity(state, "root.0.0.0"), Ok)
    assert state.is_complete()
    assert state.depth() == 4
    assert [state.get_node(i).rule for i in state.path_to_root("root.0.0.0")] == [
        RuleType.REFLEXIVITY,
        RuleType.REDUCTION,
        RuleType.REDUCTION,
        RuleType.REWRITE,
    ]


def test_cyclic_proof_by_case_split() -> None:
    """K x = K x closed case by case after a split, and again by a
    back-link to the repeated root goal."""
    x = var("x")
    state = _state(App(K, x), App(K, x))
    symmetry(state, ROOT_ID)
    case_split(state, "root.0", Selection(Side.LHS, (R,)))
    for case in ("root.0.0", "root.0.1", "root.0.2"):
        assert isinstance(reflexivity(state, case), Ok)
    assert state.is_complete()

    state2 = _state(App(K, x), App(K, x))
    symmetry(state2, ROOT_ID)
    assert isinstance(induction(state2, "root.0"), Ok)
    assert state2.root.children[0].back_link_to == ROOT_ID
    assert state2.is_complete()
