import argparse
import sys
from typing_extensions import *

from graphviz import ExecutableNotFound

from automaton import AutomatonError
from io_utils import load_from_file
from tui import show_tui


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Load an NFA description and test inputs against it interactively."
    )
    p.add_argument("file", help="Automaton description file")
    p.add_argument(
        "--dfa",
        action="store_true",
        help="Determinize with the powerset construction and simulate the DFA",
    )
    p.add_argument("--graph", metavar="PATH", help="Render the automaton with Graphviz")
    p.add_argument(
        "--no-tui",
        action="store_true",
        help="Print the automaton and exit without starting the interactive view",
    )
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    try:
        automaton = load_from_file(args.file)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Couldn't read file {args.file}: {e}", file=sys.stderr)
        return 1
    except AutomatonError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.dfa:
        automaton = automaton.to_DFA()
    print(automaton)

    if args.graph:
        try:
            output = automaton.render_graph(args.graph, view=False)
        except ExecutableNotFound as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Graph written to {output}")

    if args.no_tui:
        return 0

    show_tui(automaton)
    print("Goodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
