"""Turn a canonical LR(0) automaton into action and goto tables.

LR(0) is the simplest of the LR family: a state that contains a completed
item reduces no matter what the next token is, so the only lookahead we ever
consult is the one that picks between shifting and not shifting. The
construction here goes in two passes, and the order of those passes matters:

  1. Every reduce state gets `Reduce(rule)` for *every* terminal.
  2. Every transition on a terminal then installs `Shift`, `Accept`, or
     `Error`, overwriting whatever reduce was already in that cell.

So if a state has both a completed item and a transition on a terminal (a
shift/reduce conflict) the shift wins on that terminal and the reduce wins
everywhere else. That's not what a more careful table would do, which is why
the conflict gets reported; the grammars this is meant for don't have any.
"""

import dataclasses
import enum
import logging
import types
import typing

from .automaton import Automaton, Item, ItemSet, Symbol, SymbolKind, state_key


build_log = logging.getLogger("lr0table.build")


@dataclasses.dataclass(frozen=True)
class Action:
    pass


@dataclasses.dataclass(frozen=True)
class Accept(Action):
    def __str__(self):
        return "Accept"


@dataclasses.dataclass(frozen=True)
class Shift(Action):
    state: int

    def __str__(self):
        return f"Shift({self.state})"


@dataclasses.dataclass(frozen=True)
class Reduce(Action):
    rule: int

    def __str__(self):
        return f"Reduce({self.rule})"


@dataclasses.dataclass(frozen=True)
class Error(Action):
    def __str__(self):
        return "error"


ParseAction = Accept | Shift | Reduce | Error


class MalformedAutomatonError(ValueError):
    """The automaton can't be turned into a table at all."""


class ConflictKind(enum.Enum):
    SHIFT_REDUCE = "shift/reduce"
    REDUCE_REDUCE = "reduce/reduce"


@dataclasses.dataclass(frozen=True)
class Conflict:
    kind: ConflictKind
    state: int
    items: typing.Tuple[Item, ...]

    def __str__(self):
        lines = [f"{self.kind.value.capitalize()} conflict in state {self.state}:"]
        lines.extend(f"  - {item}" for item in self.items)
        return "\n".join(lines)


class ConflictError(Exception):
    conflicts: typing.Tuple[Conflict, ...]

    def __init__(self, conflicts):
        self.conflicts = tuple(conflicts)

    def __str__(self):
        return f"{len(self.conflicts)} conflicts:\n\n" + "\n\n".join(
            str(conflict) for conflict in self.conflicts
        )


@dataclasses.dataclass(frozen=True)
class ParseTable:
    """The finished tables. Don't mutate these; share them.

    `actions` is keyed by (state, terminal) and `gotos` by (state,
    nonterminal), where terminal and nonterminal are symbol payloads and not
    `Symbol` values. `rules[r]` is the completed item that `Reduce(r)`
    reduces.
    """

    actions: typing.Mapping[typing.Tuple[int, typing.Any], ParseAction]
    gotos: typing.Mapping[typing.Tuple[int, typing.Any], int]
    rules: typing.Tuple[Item, ...]
    start_state: int
    state_count: int
    terminals: typing.Tuple[typing.Any, ...]

    def action(self, state: int, terminal) -> ParseAction | None:
        return self.actions.get((state, terminal))

    def goto(self, state: int, nonterminal) -> int | None:
        return self.gotos.get((state, nonterminal))

    def nonterminals(self) -> list[typing.Any]:
        return sorted({nt for _, nt in self.gotos.keys()})


@dataclasses.dataclass(frozen=True)
class Built:
    """The table was built without any conflicts."""

    table: ParseTable

    @property
    def conflicts(self) -> typing.Tuple[Conflict, ...]:
        return ()

    def unwrap(self) -> ParseTable:
        return self.table


@dataclasses.dataclass(frozen=True)
class BuiltWithConflicts:
    """The table was built, but some states had conflicts in them and were
    resolved with the fixed LR(0) tie-break. Whether or not that's acceptable
    is up to the caller.
    """

    table: ParseTable
    conflicts: typing.Tuple[Conflict, ...]

    def unwrap(self) -> ParseTable:
        raise ConflictError(self.conflicts)


BuildResult = Built | BuiltWithConflicts


def build_table(
    automaton: Automaton,
    extended_start,
    start,
    eof,
    terminals: typing.Iterable,
) -> BuildResult:
    """Build the action and goto tables for the given canonical automaton.

    `extended_start`, `start`, and `eof` identify the augmented production
    `extended_start -> start eof`, which must be in exactly one state with the
    dot at the beginning and exactly one state with the dot at the end.
    `terminals` is the full terminal alphabet; every reduce state reduces on
    all of them.

    Raises MalformedAutomatonError if the automaton doesn't have those states,
    or if it has transitions to or from states it doesn't list.
    """
    terminals = tuple(terminals)

    state_numbers: dict[ItemSet, int] = {}
    for number, state in enumerate(automaton.states):
        existing = state_numbers.setdefault(state, number)
        if existing != number:
            raise MalformedAutomatonError(
                f"States {existing} and {number} have the same items; states must be distinct"
            )
    build_log.debug("Numbered %d states", len(automaton.states))

    augmented = (Symbol.nonterm(start), Symbol.term(eof))
    start_item = Item(extended_start, augmented, 0)
    accept_item = Item(extended_start, augmented, 2)

    start_state = _find_unique_state(automaton, start_item, "start")
    _find_unique_state(automaton, accept_item, "accept")

    actions: dict[typing.Tuple[int, typing.Any], ParseAction] = {}
    gotos: dict[typing.Tuple[int, typing.Any], int] = {}
    conflicts: list[Conflict] = []

    # The reduce set: every state with at least one completed item that isn't
    # the accept item, along with the item it reduces.
    reduce_states: list[typing.Tuple[ItemSet, Item]] = []
    for state in automaton.states:
        completed = sorted(item for item in state if item.at_end and item != accept_item)
        if len(completed) == 0:
            continue

        number = state_numbers[state]
        if len(completed) > 1:
            conflict = Conflict(ConflictKind.REDUCE_REDUCE, number, tuple(completed))
        elif len(state) > 1:
            conflict = Conflict(ConflictKind.SHIFT_REDUCE, number, tuple(sorted(state)))
        else:
            conflict = None

        if conflict is not None:
            build_log.warning("%s", conflict)
            conflicts.append(conflict)

        reduce_states.append((state, completed[0]))

    reduce_states.sort(key=lambda entry: state_key(entry[0]))

    rules: list[Item] = []
    for rule_number, (state, item) in enumerate(reduce_states):
        build_log.debug("r%d: %s", rule_number, item)
        rules.append(item)

        number = state_numbers[state]
        for terminal in terminals:
            actions[(number, terminal)] = Reduce(rule_number)

    for (source, symbol), target in sorted(
        automaton.transitions.items(),
        key=lambda entry: (state_key(entry[0][0]), entry[0][1]),
    ):
        source_number = _state_number(state_numbers, source)
        match symbol.kind:
            case SymbolKind.TERMINAL:
                if accept_item in target:
                    action = Accept()
                elif len(target) > 0:
                    action = Shift(_state_number(state_numbers, target))
                else:
                    action = Error()
                actions[(source_number, symbol.value)] = action

            case SymbolKind.NONTERMINAL:
                gotos[(source_number, symbol.value)] = _state_number(state_numbers, target)

            case _:
                typing.assert_never(symbol.kind)

    table = ParseTable(
        actions=types.MappingProxyType(actions),
        gotos=types.MappingProxyType(gotos),
        rules=tuple(rules),
        start_state=start_state,
        state_count=len(automaton.states),
        terminals=terminals,
    )
    if conflicts:
        return BuiltWithConflicts(table=table, conflicts=tuple(conflicts))
    return Built(table=table)


def _find_unique_state(automaton: Automaton, item: Item, what: str) -> int:
    found = [number for number, state in enumerate(automaton.states) if item in state]
    if len(found) == 0:
        raise MalformedAutomatonError(f"No state contains the {what} item `{item}`")
    if len(found) > 1:
        raise MalformedAutomatonError(
            f"The {what} item `{item}` appears in more than one state: {found}"
        )
    return found[0]


def _state_number(state_numbers: dict[ItemSet, int], state: ItemSet) -> int:
    number = state_numbers.get(state)
    if number is None:
        raise MalformedAutomatonError(
            "Transition refers to a state that isn't in the automaton: {{{items}}}".format(
                items=", ".join(str(item) for item in sorted(state))
            )
        )
    return number
