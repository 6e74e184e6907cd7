from lr0table import export
from lr0table.automaton import Grammar
from lr0table.table import Accept, Error, Reduce, Shift
import lr0table.runtime as runtime


TABLE = (
    Grammar.from_rules(
        "S",
        [
            ("S", ["a", "S", "b"]),
            ("S", []),
        ],
    )
    .build_table()
    .table
)


def test_format_action():
    assert export.format_action(Accept()) == "Accept"
    assert export.format_action(Shift(3)) == "Shift(3)"
    assert export.format_action(Reduce(0)) == "Reduce(0)"
    assert export.format_action(Error()) == "error"
    assert export.format_action(None) == ""


def test_format_table():
    lines = export.format_table(TABLE).splitlines()

    assert len(lines) == 2 + TABLE.state_count
    assert lines[0].split() == ["state", "|", "$", "a", "b", "|", "S"]
    assert set(lines[1]) == {"-"}
    assert lines[2].split() == ["0", "|", "Reduce(1)", "Shift(1)", "Reduce(1)", "|", "2"]
    assert lines[4].startswith("2     | Accept")
    assert lines[7].split() == ["5", "|", "Reduce(2)", "Reduce(2)", "Reduce(2)", "|"]


def test_format_table_with_columns():
    lines = export.format_table(TABLE, terminals=["b"], nonterminals=[]).splitlines()
    assert lines[0].split() == ["state", "|", "b", "|"]
    assert lines[5].split() == ["3", "|", "Shift(5)", "|"]


def test_format_trace_accept():
    parser = runtime.Parser(TABLE)
    parser.parse(["a", "b", "$"])

    lines = export.format_trace(parser.trace).splitlines()
    assert len(lines) == 2 + len(parser.trace)
    assert lines[0].split() == ["step", "remaining", "input", "stack", "action"]
    assert lines[2].split() == ["1", "a", "b", "$", "0", "Shift(1)"]
    assert lines[-1].split() == ["5", "$", "0", "2", "Accept"]


def test_format_trace_failure():
    parser = runtime.Parser(TABLE)
    result = parser.parse(["a", "a", "b", "$"])
    assert isinstance(result, runtime.Failed)

    last = export.format_trace(parser.trace).splitlines()[-1]
    assert last.endswith(result.failure.message)


def test_latex_escape():
    assert export.latex_escape("a_b$") == r"a\_b\$"
    assert export.latex_escape("{x}") == r"\{x\}"
    assert export.latex_escape(12) == "12"


def test_table_to_latex():
    lines = export.table_to_latex(TABLE).splitlines()
    assert lines[0] == r"\begin{tabular}{llllll}"
    assert lines[1] == r"& \multicolumn{3}{c}{Action} & & \multicolumn{1}{c}{Goto} \\ \hline"
    assert lines[2] == r" & \$ & a & b &  & S \\"
    assert (
        lines[3]
        == r"$ q_{0} $ & Reduce( $ r_{1} $ ) & Shift( $ q_{1} $ ) & Reduce( $ r_{1} $ ) &  & $ q_{2} $ \\ \hline"
    )
    assert lines[-1] == r"\end{tabular}"
    assert len(lines) == 4 + TABLE.state_count


def test_trace_to_latex():
    parser = runtime.Parser(TABLE)
    parser.parse(["a", "b", "$"])

    lines = export.trace_to_latex(parser.trace).splitlines()
    assert lines[0] == r"\begin{tabular}{llll}"
    assert lines[2] == r"1 & a b \$ & $ q_{0}\leftarrow $ & Shift( $ q_{1} $ ) \\ \hline"
    assert lines[-2] == r"5 & \$ & $ q_{0}q_{2}\leftarrow $ & Accept \\ \hline"
    assert lines[-1] == r"\end{tabular}"
