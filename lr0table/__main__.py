"""Build an LR(0) table for a grammar file and parse some tokens with it.

The grammar file is JSON:

    {
        "start": "S",
        "eof": "$",
        "rules": [
            ["S", ["a", "S", "b"]],
            ["S", []]
        ]
    }

Anything on the left-hand side of a rule is a nonterminal; everything else is
a terminal.
"""

import argparse
import json
import logging
import sys

from . import export
from .automaton import Grammar
from .runtime import Accepted, MalformedTableError, Parser
from .table import BuiltWithConflicts, MalformedAutomatonError

EXIT_ACCEPTED = 0
EXIT_REJECTED = 1
EXIT_CONFLICTS = 2
EXIT_MALFORMED = 3
EXIT_BAD_GRAMMAR = 4


def load_grammar(path: str) -> Grammar:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    try:
        start = data["start"]
        rules = [(name, list(rule)) for name, rule in data["rules"]]
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"{path}: expected 'start' and a list of [name, [symbols]] rules") from e

    return Grammar.from_rules(
        start,
        rules,
        eof=data.get("eof", "$"),
        extended_start=data.get("extended_start"),
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lr0table",
        description="Build an LR(0) parse table for a grammar and parse tokens with it",
    )
    parser.add_argument("grammar", help="Path to a JSON file containing the grammar")
    parser.add_argument(
        "tokens",
        nargs="*",
        help="The terminals to parse. The end-of-input marker is added if it isn't there.",
    )
    parser.add_argument(
        "--table",
        action="store_true",
        help="Print the action and goto tables.",
    )
    parser.add_argument(
        "--format",
        choices=["text", "latex"],
        default="text",
        help="How to render the table and the parse trace.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat any shift/reduce or reduce/reduce conflict as a failure.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for the table builder and the parser.",
    )
    args = parser.parse_intermixed_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        grammar = load_grammar(args.grammar)
    except (OSError, ValueError) as e:
        print(f"Error loading grammar: {e}", file=sys.stderr)
        return EXIT_BAD_GRAMMAR

    try:
        result = grammar.build_table()
    except MalformedAutomatonError as e:
        print(f"Error building table: {e}", file=sys.stderr)
        return EXIT_MALFORMED

    if isinstance(result, BuiltWithConflicts):
        for conflict in result.conflicts:
            print(conflict, file=sys.stderr)
        if args.strict:
            return EXIT_CONFLICTS

    table = result.table
    latex = args.format == "latex"
    if args.table:
        if latex:
            print(export.table_to_latex(table, nonterminals=grammar.nonterminals()))
        else:
            print(export.format_table(table, nonterminals=grammar.nonterminals()))
        print()

    tokens = list(args.tokens)
    if len(tokens) == 0 or tokens[-1] != grammar.eof:
        tokens.append(grammar.eof)

    engine = Parser(table)
    try:
        outcome = engine.parse(tokens)
    except MalformedTableError as e:
        print(f"Parser is mis-built: {e}", file=sys.stderr)
        return EXIT_MALFORMED

    if latex:
        print(export.trace_to_latex(engine.trace))
    else:
        print(export.format_trace(engine.trace))

    if isinstance(outcome, Accepted):
        return EXIT_ACCEPTED

    print(outcome.failure.message, file=sys.stderr)
    return EXIT_REJECTED


if __name__ == "__main__":
    sys.exit(main())
