"""treeq: tree calculus terms and interactive cyclic equality proofs."""

from .terms import (
    LEAF,
    App,
    DefRef,
    Equation,
    Leaf,
    Term,
    TermKind,
    Var,
    equation_str,
    fork_args,
    is_fork,
    is_stem,
    kind_of,
    stem_arg,
    to_str,
)
from .reduction import reduce, reduce_step
from .algebra import (
    PathMismatchError,
    Step,
    collect_variables,
    equals,
    rename_variables,
    replace_at,
    substitute,
    subterm_at,
)
from .unify import match_pattern
from .sequent import Sequent, create_sequent
from .proof import ProofNode, ProofState, RuleType
from .library import Theorem, prelude_definitions, prelude_theorems
from .serialization import dumps, loads
from .template import ConstructionIncomplete, Hole, TemplateApp, fill_hole, first_hole, to_term
from .helpers import app, eq, fork, leaf, ref, stem, var
from .result import Ok, Err, Result

__all__ = [
    # Terms
    "LEAF", "App", "DefRef", "Equation", "Leaf", "Term", "TermKind", "Var",
    "equation_str", "fork_args", "is_fork", "is_stem", "kind_of", "stem_arg",
    "to_str",
    # Reduction
    "reduce", "reduce_step",
    # Algebra
    "PathMismatchError", "Step", "collect_variables", "equals",
    "rename_variables", "replace_at", "substitute", "subterm_at",
    # Matching
    "match_pattern",
    # Proofs
    "Sequent", "create_sequent", "ProofNode", "ProofState", "RuleType",
    # Library
    "Theorem", "prelude_definitions", "prelude_theorems",
    # Serialization
    "dumps", "loads",
    # Templates
    "ConstructionIncomplete", "Hole", "TemplateApp", "fill_hole", "first_hole",
    "to_term",
    # Helpers
    "app", "eq", "fork", "leaf", "ref", "stem", "var",
    # Result
    "Ok", "Err", "Result",
]
