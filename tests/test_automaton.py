import pytest

from lr0table.automaton import Automaton, Grammar, Item, Symbol, SymbolKind


a = Symbol.term("a")
b = Symbol.term("b")
eof = Symbol.term("$")
S = Symbol.nonterm("S")


def anbn() -> Grammar:
    return Grammar.from_rules(
        "S",
        [
            ("S", ["a", "S", "b"]),
            ("S", []),
        ],
    )


def test_symbols_order_terminals_first():
    assert Symbol.term("z") < Symbol.nonterm("A")
    assert sorted([S, b, a]) == [a, b, S]
    assert Symbol.term("S") != Symbol.nonterm("S")
    assert S.kind == SymbolKind.NONTERMINAL
    assert a.is_terminal


def test_symbols_only_equal_symbols():
    assert Symbol.term("a") == Symbol(SymbolKind.TERMINAL, "a")
    assert Symbol.term("a") != (SymbolKind.TERMINAL, "a")
    assert Symbol.term("a") != (0, "a")
    assert len({Symbol.term("a"), Symbol.term("a"), Symbol.nonterm("a")}) == 2


def test_item_dot_range():
    Item("S", (a, S, b), 0)
    Item("S", (a, S, b), 3)
    with pytest.raises(ValueError):
        Item("S", (a, S, b), 4)
    with pytest.raises(ValueError):
        Item("S", (a, S, b), -1)


def test_item_basics():
    item = Item("S", [a, S, b], 1)
    assert item.right == (a, S, b)
    assert item.next == S
    assert not item.at_end
    assert item.advance() == Item("S", (a, S, b), 2)
    assert str(item) == "S -> a * S b"

    empty = Item("S", (), 0)
    assert empty.at_end
    assert empty.next is None
    assert str(empty) == "S -> *"

    assert len({item, Item("S", (a, S, b), 1)}) == 1
    assert empty < item


def test_from_rules_classifies_symbols():
    grammar = anbn()
    assert grammar.productions == (("S", (a, S, b)), ("S", ()))
    assert grammar.extended_start == "S'"
    assert grammar.terminals() == ["$", "a", "b"]
    assert grammar.nonterminals() == ["S"]
    assert grammar.start_item == Item("S'", (S, eof), 0)


def test_grammar_rejects_bad_input():
    with pytest.raises(ValueError):
        Grammar.from_rules("X", [("S", ["a"])])

    with pytest.raises(ValueError):
        Grammar.from_rules("S", [("S", ["a", "$"])])

    with pytest.raises(ValueError):
        Grammar.from_rules("S", [("S", ["a"]), ("S'", ["b"])])

    with pytest.raises(ValueError):
        Grammar([("S", [Symbol.nonterm("T")])], "S")


def test_closure():
    grammar = anbn()
    closure = grammar.closure([grammar.start_item])
    assert closure == frozenset(
        {
            Item("S'", (S, eof), 0),
            Item("S", (a, S, b), 0),
            Item("S", (), 0),
        }
    )


def test_goto():
    grammar = anbn()
    start = grammar.closure([grammar.start_item])

    assert grammar.goto(start, a) == frozenset(
        {
            Item("S", (a, S, b), 1),
            Item("S", (a, S, b), 0),
            Item("S", (), 0),
        }
    )
    assert grammar.goto(start, S) == frozenset({Item("S'", (S, eof), 1)})
    assert grammar.goto(start, b) == frozenset()


def test_canonical_automaton():
    grammar = anbn()
    automaton = grammar.canonical_automaton()
    assert isinstance(automaton, Automaton)

    states = automaton.states
    assert len(states) == 6
    assert grammar.start_item in states[0]

    # Breadth first, successors in symbol order.
    assert states[1] == grammar.goto(states[0], a)
    assert states[2] == grammar.goto(states[0], S)
    assert states[3] == grammar.goto(states[1], S)
    assert states[4] == frozenset({Item("S'", (S, eof), 2)})
    assert states[5] == frozenset({Item("S", (a, S, b), 3)})

    assert automaton.successor(states[1], a) == states[1]
    assert automaton.successor(states[3], b) == states[5]
    assert automaton.successor(states[0], b) is None
    assert len(automaton.transitions) == 6


def test_canonical_automaton_is_repeatable():
    assert anbn().canonical_automaton() == anbn().canonical_automaton()
