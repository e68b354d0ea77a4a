"""Builder helpers for constructing terms and equations.

These are the primary public API for writing terms by hand; ``app`` folds
its arguments to the left the way application is read:

    app(ref("K"), var("y"), var("z"))  ==  App(App(DefRef("K"), Var("y")), Var("z"))
"""

from treeq.terms import LEAF, App, DefRef, Equation, Leaf, Term, Var


def leaf() -> Leaf:
    return LEAF


def var(name: str) -> Var:
    return Var(name=name)


def ref(name: str) -> DefRef:
    return DefRef(name=name)


def app(head: Term, *args: Term) -> Term:
    result = head
    for a in args:
        result = App(result, a)
    return result


def stem(x: Term) -> App:
    """△ x"""
    return App(LEAF, x)


def fork(w: Term, x: Term) -> App:
    """△ w x"""
    return App(App(LEAF, w), x)


def eq(lhs: Term, rhs: Term) -> Equation:
    return Equation(lhs=lhs, rhs=rhs)
