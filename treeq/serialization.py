"""JSON serialization for terms, sequents and proofs.

Every term serializes to a dict with a "type" discriminator field. A saved
proof has the shape ``{"root": <node>}``; the node index is not stored and
is rebuilt on load.
"""

from __future__ import annotations

import json
from typing import Any

from .proof import ProofNode, ProofState, RuleType
from .sequent import Sequent
from .terms import App, DefRef, Equation, Leaf, Term, Var

# ---------------------------------------------------------------------------
# Terms
# ---------------------------------------------------------------------------


def term_to_json(t: Term) -> dict[str, Any]:
    if isinstance(t, Leaf):
        return {"type": "Leaf"}
    elif isinstance(t, Var):
        return {"type": "Variable", "name": t.name}
    elif isinstance(t, DefRef):
        return {"type": "DefinitionRef", "name": t.name}
    elif isinstance(t, App):
        return {
            "type": "App",
            "left": term_to_json(t.left),
            "right": term_to_json(t.right),
        }
    raise TypeError(f"Unknown term type: {type(t)}")


def term_from_json(d: dict[str, Any]) -> Term:
    t = d["type"]
    if t == "Leaf":
        return Leaf()
    elif t == "Variable":
        return Var(name=d["name"])
    elif t == "DefinitionRef":
        return DefRef(name=d["name"])
    elif t == "App":
        return App(left=term_from_json(d["left"]), right=term_from_json(d["right"]))
    raise ValueError(f"Unknown term type: {t}")


# ---------------------------------------------------------------------------
# Equations and sequents
# ---------------------------------------------------------------------------


def equation_to_json(e: Equation) -> dict[str, Any]:
    return {"lhs": term_to_json(e.lhs), "rhs": term_to_json(e.rhs)}


def equation_from_json(d: dict[str, Any]) -> Equation:
    return Equation(lhs=term_from_json(d["lhs"]), rhs=term_from_json(d["rhs"]))


def sequent_to_json(s: Sequent) -> dict[str, Any]:
    return {
        "id": s.id,
        "hypotheses": [equation_to_json(h) for h in s.hypotheses],
        "goal": equation_to_json(s.goal),
    }


def sequent_from_json(d: dict[str, Any]) -> Sequent:
    return Sequent(
        id=d["id"],
        hypotheses=tuple(equation_from_json(h) for h in d["hypotheses"]),
        goal=equation_from_json(d["goal"]),
    )


# ---------------------------------------------------------------------------
# Proofs
# ---------------------------------------------------------------------------


def node_to_json(n: ProofNode) -> dict[str, Any]:
    d: dict[str, Any] = {
        "id": n.id,
        "sequent": sequent_to_json(n.sequent),
        "rule": n.rule.value if n.rule is not None else None,
        "children": [node_to_json(c) for c in n.children],
    }
    if n.parent_id is not None:
        d["parentId"] = n.parent_id
    if n.back_link_to is not None:
        d["backLinkTo"] = n.back_link_to
    return d


def node_from_json(d: dict[str, Any]) -> ProofNode:
    rule = d.get("rule")
    return ProofNode(
        id=d["id"],
        sequent=sequent_from_json(d["sequent"]),
        rule=RuleType(rule) if rule is not None else None,
        children=[node_from_json(c) for c in d.get("children", [])],
        parent_id=d.get("parentId"),
        back_link_to=d.get("backLinkTo"),
    )


def proof_to_json(state: ProofState) -> dict[str, Any]:
    return {"root": node_to_json(state.root)}


def proof_from_json(d: dict[str, Any]) -> ProofState:
    """Restore a proof. The caller must reject payloads without "root"."""
    return ProofState.from_root(node_from_json(d["root"]))


# ---------------------------------------------------------------------------
# Convenience: dump / load entire proofs as JSON strings
# ---------------------------------------------------------------------------


def dumps(state: ProofState) -> str:
    return json.dumps(proof_to_json(state), indent=2, ensure_ascii=False)


def loads(s: str) -> ProofState:
    return proof_from_json(json.loads(s))
