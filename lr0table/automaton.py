"""Grammars, LR(0) items, and the canonical LR(0) automaton.

The table builder in `lr0table.table` doesn't care where its automaton comes
from: anything that gives it an ordered tuple of item sets and a transition
mapping will do. This module is the simple way to get one, starting from a
plain list of productions:

    grammar = Grammar.from_rules(
        "S",
        [
            ("S", ["a", "S", "b"]),
            ("S", []),
        ],
    )
    automaton = grammar.canonical_automaton()

Symbols are either terminals or nonterminals, and carry an arbitrary payload
(usually a string.) The only thing we ask of payloads is that they be hashable
and ordered, since items get sorted all over the place to keep the results
repeatable.
"""

import dataclasses
import enum
import typing


class SymbolKind(enum.IntEnum):
    TERMINAL = 0
    NONTERMINAL = 1


@dataclasses.dataclass(frozen=True, order=True)
class Symbol:
    """A grammar symbol: a kind and a payload.

    Symbols order by kind first (terminals before nonterminals) and then by
    payload, so payloads of the two kinds never get compared against each
    other. A symbol is only ever equal to another symbol.
    """

    kind: SymbolKind
    value: typing.Any

    @classmethod
    def term(cls, value) -> "Symbol":
        return cls(SymbolKind.TERMINAL, value)

    @classmethod
    def nonterm(cls, value) -> "Symbol":
        return cls(SymbolKind.NONTERMINAL, value)

    @property
    def is_terminal(self) -> bool:
        return self.kind == SymbolKind.TERMINAL

    def __str__(self) -> str:
        return str(self.value)


@dataclasses.dataclass(frozen=True, order=True)
class Item:
    """An LR(0) item: a production with a position (the "dot") in it.

    Items are plain values. They hash, compare, and sort by
    `(left, right, dot_pos)`.
    """

    left: typing.Any
    right: typing.Tuple[Symbol, ...]
    dot_pos: int = 0

    def __post_init__(self):
        if not isinstance(self.right, tuple):
            object.__setattr__(self, "right", tuple(self.right))
        if not 0 <= self.dot_pos <= len(self.right):
            raise ValueError(
                f"Dot position {self.dot_pos} is out of range for a production "
                f"with {len(self.right)} symbols"
            )

    @property
    def at_end(self) -> bool:
        return self.dot_pos == len(self.right)

    @property
    def next(self) -> Symbol | None:
        if self.at_end:
            return None
        return self.right[self.dot_pos]

    def advance(self) -> "Item":
        return Item(self.left, self.right, self.dot_pos + 1)

    def __str__(self) -> str:
        bits = [str(sym) for sym in self.right]
        bits.insert(self.dot_pos, "*")
        return "{name} -> {bits}".format(name=self.left, bits=" ".join(bits))


ItemSet = typing.FrozenSet[Item]


def state_key(state: ItemSet) -> typing.Tuple[Item, ...]:
    """The sort key for an item set: its items, in order."""
    return tuple(sorted(state))


@dataclasses.dataclass(frozen=True)
class Automaton:
    """A canonical LR(0) automaton.

    `states` is ordered, and that order is where state numbers come from.
    `transitions` maps (state, symbol) to the successor state; if there is no
    entry there is no transition.
    """

    states: typing.Tuple[ItemSet, ...]
    transitions: typing.Mapping[typing.Tuple[ItemSet, Symbol], ItemSet]

    def successor(self, state: ItemSet, symbol: Symbol) -> ItemSet | None:
        return self.transitions.get((state, symbol))


class Grammar:
    """A context-free grammar, augmented with `extended_start -> start eof`."""

    productions: typing.Tuple[typing.Tuple[typing.Any, typing.Tuple[Symbol, ...]], ...]
    start: typing.Any
    eof: typing.Any
    extended_start: typing.Any

    def __init__(
        self,
        productions: typing.Iterable[typing.Tuple[typing.Any, typing.Iterable[Symbol]]],
        start,
        *,
        eof="$",
        extended_start=None,
    ):
        productions = tuple((name, tuple(rule)) for name, rule in productions)
        if extended_start is None:
            extended_start = f"{start}'"

        names = {name for name, _ in productions}
        if start not in names:
            raise ValueError(f"Start symbol {start!r} has no productions")
        if extended_start in names:
            raise ValueError(
                f"Can't use {extended_start!r} in the grammar, it's reserved for the "
                "augmented start production."
            )

        end = Symbol.term(eof)
        for name, rule in productions:
            for symbol in rule:
                if symbol == end:
                    raise ValueError(
                        f"Can't use {eof!r} in the production for {name!r}, it's reserved "
                        "to mean end-of-stream."
                    )
                if symbol.kind == SymbolKind.NONTERMINAL and symbol.value not in names:
                    raise ValueError(f"Nonterminal {symbol.value!r} has no productions")

        self.productions = productions
        self.start = start
        self.eof = eof
        self.extended_start = extended_start

        # We count on python dictionaries retaining the insertion order.
        self._rules: dict[typing.Any, list[typing.Tuple[Symbol, ...]]] = {}
        for name, rule in productions:
            self._rules.setdefault(name, []).append(rule)
        self._rules[extended_start] = [(Symbol.nonterm(start), end)]

    @classmethod
    def from_rules(
        cls,
        start: str,
        rules: typing.Iterable[typing.Tuple[str, typing.Iterable[str]]],
        *,
        eof: str = "$",
        extended_start: str | None = None,
    ) -> "Grammar":
        """Build a grammar from (name, [symbol names]) pairs.

        Anything that shows up on the left-hand side of a rule is a
        nonterminal, everything else is a terminal. Use an empty list to make
        a nonterminal nullable.
        """
        rules = [(name, list(rule)) for name, rule in rules]
        names = {name for name, _ in rules}
        return cls(
            [
                (
                    name,
                    [Symbol.nonterm(s) if s in names else Symbol.term(s) for s in rule],
                )
                for name, rule in rules
            ],
            start,
            eof=eof,
            extended_start=extended_start,
        )

    @property
    def start_item(self) -> Item:
        return Item(self.extended_start, self._rules[self.extended_start][0], 0)

    def terminals(self) -> list[typing.Any]:
        """All the terminals, end-of-stream included, in sorted order."""
        result = {self.eof}
        for _, rule in self.productions:
            result.update(s.value for s in rule if s.is_terminal)
        return sorted(result)

    def nonterminals(self) -> list[typing.Any]:
        """All the nonterminals of the original grammar, in sorted order."""
        return sorted({name for name, _ in self.productions})

    def closure(self, seeds: typing.Iterable[Item]) -> ItemSet:
        """Compute the closure of the given items.

        If the dot in an item is just before a nonterminal then we must also
        consider every production of that nonterminal, with the dot at the
        beginning.
        """
        closure = set()
        pending = list(seeds)
        while len(pending) > 0:
            item = pending.pop()
            if item in closure:
                continue

            closure.add(item)
            next = item.next
            if next is not None and next.kind == SymbolKind.NONTERMINAL:
                for rule in self._rules[next.value]:
                    pending.append(Item(next.value, rule, 0))

        return frozenset(closure)

    def goto(self, state: ItemSet, symbol: Symbol) -> ItemSet:
        """Compute the successor of `state` after seeing `symbol`. The result
        is empty if nothing in the state expects that symbol.
        """
        return self.closure(item.advance() for item in state if item.next == symbol)

    def canonical_automaton(self) -> Automaton:
        """Generate every item set reachable from the start set.

        States are numbered breadth-first, visiting successors in symbol
        order, so the start set is always state 0.
        """
        initial = self.closure([self.start_item])

        states: list[ItemSet] = []
        seen: set[ItemSet] = set()
        transitions: dict[typing.Tuple[ItemSet, Symbol], ItemSet] = {}

        pending = [initial]
        pending_next: list[ItemSet] = []
        while len(pending) > 0:
            for state in pending:
                if state in seen:
                    continue
                seen.add(state)
                states.append(state)

                possible = sorted({item.next for item in state if item.next is not None})
                for symbol in possible:
                    successor = self.goto(state, symbol)
                    if len(successor) > 0:
                        transitions[(state, symbol)] = successor
                        pending_next.append(successor)

            pending, pending_next = pending_next, []

        return Automaton(states=tuple(states), transitions=transitions)

    def build_table(self):
        """Build the LR(0) parse table for this grammar."""
        from .table import build_table

        return build_table(
            self.canonical_automaton(),
            self.extended_start,
            self.start,
            self.eof,
            self.terminals(),
        )
