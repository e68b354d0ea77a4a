"""Proof trees and the proof state.

Every node is either open (``rule is None``) or closed by a rule with zero
or more children. A leaf closed by ``Induction`` carries a back-link to a
proper ancestor whose goal is structurally equal to its own; this is what
makes a proof cyclic.

Node ids encode tree position: the root is ``"root"`` and the i-th child of
node ``n`` is ``f"{n}.{i}"``.

``ProofState.nodes`` is an index over the tree owned by ``root``. It is
rebuilt by traversal and never persisted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from .algebra import equations_equal
from .sequent import Sequent

logger = logging.getLogger(__name__)

ROOT_ID = "root"


class RuleType(Enum):
    REFLEXIVITY = "Reflexivity"
    SYMMETRY = "Symmetry"
    TRANSITIVITY = "Transitivity"
    CONGRUENCE = "Congruence"
    REDUCTION = "Reduction"
    INDUCTION = "Induction"      # cyclic reference to an ancestor
    HYPOTHESIS = "Hypothesis"    # instance of a library theorem
    REWRITE = "Rewrite"          # hypothesis rewrite or definition unfold
    CASE_SPLIT = "CaseSplit"


@dataclass
class ProofNode:
    id: str
    sequent: Sequent
    rule: RuleType | None = None
    children: list[ProofNode] = field(default_factory=list)
    parent_id: str | None = None
    back_link_to: str | None = None

    @property
    def is_open(self) -> bool:
        return self.rule is None


class ProofState:
    """Owns one proof tree; all mutation goes through ``apply_rule``."""

    def __init__(self, initial: Sequent) -> None:
        self.root = ProofNode(id=ROOT_ID, sequent=initial)
        self.nodes: dict[str, ProofNode] = {ROOT_ID: self.root}

    @classmethod
    def from_root(cls, root: ProofNode) -> ProofState:
        """Adopt an existing tree (e.g. a deserialized one) and index it."""
        state = cls.__new__(cls)
        state.root = root
        state.reindex()
        return state

    def reindex(self) -> None:
        """Rebuild the id index and parent links by walking the tree."""
        self.nodes = {}
        for node, parent in _walk(self.root, None):
            node.parent_id = parent.id if parent is not None else None
            self.nodes[node.id] = node

    def get_node(self, node_id: str) -> ProofNode | None:
        return self.nodes.get(node_id)

    def apply_rule(
        self,
        node_id: str,
        rule: RuleType,
        subgoals: Sequence[Sequent],
        back_link_to: str | None = None,
    ) -> ProofNode | None:
        """Close an open node with ``rule`` and attach one child per subgoal.

        Unknown or already-closed nodes are left alone and None is returned.
        """
        node = self.nodes.get(node_id)
        if node is None or not node.is_open:
            logger.debug("apply_rule ignored: node %r is unknown or closed", node_id)
            return None

        node.rule = rule
        node.back_link_to = back_link_to
        for i, sg in enumerate(subgoals):
            child = ProofNode(id=f"{node_id}.{i}", sequent=sg, parent_id=node_id)
            self.nodes[child.id] = child
            node.children.append(child)
        logger.debug(
            "Applied %s at %s (%d subgoals)", rule.value, node_id, len(subgoals)
        )
        return node

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def is_complete(self) -> bool:
        return _complete(self.root)

    def open_nodes(self) -> list[ProofNode]:
        """Open leaves in pre-order."""
        return [n for n, _ in _walk(self.root, None) if n.is_open]

    def ancestors(self, node_id: str) -> Iterator[ProofNode]:
        """Proper ancestors of ``node_id``, nearest first."""
        node = self.nodes.get(node_id)
        parent_id = node.parent_id if node is not None else None
        while parent_id is not None:
            parent = self.nodes.get(parent_id)
            if parent is None:
                return
            yield parent
            parent_id = parent.parent_id

    def path_to_root(self, node_id: str) -> list[str]:
        """Ids from ``node_id`` up to and including the root."""
        if node_id not in self.nodes:
            return []
        return [node_id, *(a.id for a in self.ancestors(node_id))]

    def matching_ancestor(self, node_id: str) -> ProofNode | None:
        """Nearest proper ancestor whose goal equals this node's goal."""
        node = self.nodes.get(node_id)
        if node is None:
            return None
        for anc in self.ancestors(node_id):
            if equations_equal(anc.sequent.goal, node.sequent.goal):
                return anc
        return None

    def invalid_back_links(self) -> list[str]:
        """Ids of nodes whose back-link is not a proper ancestor with an
        equal goal."""
        bad: list[str] = []
        for node, _ in _walk(self.root, None):
            if node.back_link_to is None:
                continue
            target = next(
                (a for a in self.ancestors(node.id) if a.id == node.back_link_to),
                None,
            )
            if target is None or not equations_equal(
                target.sequent.goal, node.sequent.goal
            ):
                bad.append(node.id)
        return bad

    def depth(self) -> int:
        """Number of nodes on the longest root-to-leaf path."""
        return _depth(self.root)


def _walk(
    node: ProofNode, parent: ProofNode | None
) -> Iterator[tuple[ProofNode, ProofNode | None]]:
    yield node, parent
    for child in node.children:
        yield from _walk(child, node)


def _complete(node: ProofNode) -> bool:
    if node.back_link_to is not None:
        return True
    if node.rule is not None:
        return all(_complete(c) for c in node.children)
    return False


def _depth(node: ProofNode) -> int:
    return 1 + max((_depth(c) for c in node.children), default=0)
