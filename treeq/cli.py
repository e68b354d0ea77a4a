import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from treeq.config import Settings
from treeq.proof import ProofState
from treeq.library import prelude_definitions, prelude_theorems, unfold_all
from treeq.render import render_proof
from treeq.result import Err, Ok
from treeq.serialization import proof_from_json, term_from_json
from treeq.reduction import is_normal, reduce_with_count
from treeq.terms import equation_str, to_str


def _read_json(path: str) -> dict[str, Any] | str:
    """Parsed JSON object, or an error string."""
    try:
        data = json.loads(Path(path).read_text())
    except OSError as e:
        return f"Could not read file: {e}"
    except json.JSONDecodeError as e:
        return f"Invalid JSON: {e}"
    if not isinstance(data, dict):
        return "Expected a JSON object"
    return data


def _read_proof(path: str) -> ProofState | str:
    match _read_json(path):
        case str(err):
            return err
        case dict() as data if "root" not in data:
            return "Not a saved proof (missing 'root')"
        case dict() as data:
            try:
                return proof_from_json(data)
            except (KeyError, ValueError, TypeError) as e:
                return f"Malformed proof: {e}"


def handle_show(path: str) -> int:
    state = _read_proof(path)
    if isinstance(state, str):
        print(f"{path}: {state}", file=sys.stderr)
        return 1
    print(render_proof(state, title=path), end="")
    return 0


def handle_check(files: Sequence[str]) -> int:
    """Report completeness and back-link validity for each saved proof."""
    ok = True
    for path in files:
        state = _read_proof(path)
        if isinstance(state, str):
            print(f"{path}: ERROR {state}")
            ok = False
            continue
        complete = state.is_complete()
        bad_links = state.invalid_back_links()
        status = "COMPLETE" if complete else "INCOMPLETE"
        print(f"{path}: {status} ({len(state.open_nodes())} open goals)")
        for node_id in bad_links:
            print(f"  invalid back-link at {node_id}")
        ok = ok and complete and not bad_links
    return 0 if ok else 1


def handle_normalize(path: str, *, max_steps: int, unfold: bool) -> int:
    match _read_json(path):
        case str(err):
            print(f"{path}: {err}", file=sys.stderr)
            return 1
        case dict() as data:
            try:
                term = term_from_json(data)
            except (KeyError, ValueError, TypeError) as e:
                print(f"{path}: Malformed term: {e}", file=sys.stderr)
                return 1

    print(f"term:   {to_str(term)}")
    if unfold:
        term = unfold_all(term, prelude_definitions())
        print(f"unfold: {to_str(term)}")
    result, steps = reduce_with_count(term, max_steps)
    print(f"result: {to_str(result)}")
    if is_normal(result):
        print(f"normal form after {steps} step{'s' if steps != 1 else ''}")
    else:
        print(f"stopped at bound ({max_steps} steps)")
    return 0


def handle_prelude() -> int:
    print("Definitions:")
    for name, body in prelude_definitions().items():
        print(f"  {name} := {to_str(body)}")
    print("Theorems:")
    for thm in prelude_theorems():
        print(f"  {thm.name}: {equation_str(thm.sequent.goal)}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    match Settings.from_env():
        case Ok(settings):
            pass
        case Err(e):
            print(f"Configuration error: {e}", file=sys.stderr)
            return 2

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    parser = argparse.ArgumentParser(
        prog="treeq",
        description="Tree calculus terms and cyclic equality proofs",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    show_parser = subparsers.add_parser("show", help="Print a saved proof as an outline.")
    show_parser.add_argument("file", metavar="FILE", help="Saved proof (JSON).")

    check_parser = subparsers.add_parser(
        "check",
        help="Check saved proofs for completeness and valid back-links.",
    )
    check_parser.add_argument("files", nargs="+", metavar="FILE", help="Saved proof(s) (JSON).")

    norm_parser = subparsers.add_parser("normalize", help="Reduce a term given as JSON.")
    norm_parser.add_argument("file", metavar="FILE", help="Term (JSON).")
    norm_parser.add_argument(
        "--max-steps",
        type=int,
        default=settings.max_steps,
        help=f"Rewrite bound (default: {settings.max_steps}).",
    )
    norm_parser.add_argument(
        "--unfold",
        action="store_true",
        default=False,
        help="Expand prelude definitions before reducing.",
    )

    subparsers.add_parser("prelude", help="List built-in definitions and theorems.")

    args = parser.parse_args(argv)

    match args.command:
        case "show":
            return handle_show(args.file)
        case "check":
            return handle_check(args.files)
        case "normalize":
            return handle_normalize(args.file, max_steps=args.max_steps, unfold=args.unfold)
        case "prelude":
            return handle_prelude()
        case None:
            parser.print_help()
            return 1
        case _:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            parser.print_help()
            return 1


if __name__ == "__main__":
    sys.exit(main())
