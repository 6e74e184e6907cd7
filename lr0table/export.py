"""Render tables and parse traces for people to read.

Nothing consumes these programmatically; they're for debugging and for
pasting into documents. There are two flavors of each: plain text, and a
LaTeX `tabular` snippet you can drop into a `table` environment.
"""

import typing

from . import table as lr0
from .runtime import TraceRecord


def format_action(action: lr0.ParseAction | None) -> str:
    match action:
        case None:
            return ""
        case lr0.Accept():
            return "Accept"
        case lr0.Shift(state=state):
            return f"Shift({state})"
        case lr0.Reduce(rule=rule):
            return f"Reduce({rule})"
        case lr0.Error():
            return "error"
        case _:
            typing.assert_never(action)


def _columns(
    table: lr0.ParseTable,
    terminals: typing.Iterable | None,
    nonterminals: typing.Iterable | None,
) -> typing.Tuple[list, list]:
    if terminals is None:
        terminals = table.terminals
    if nonterminals is None:
        nonterminals = table.nonterminals()
    return list(terminals), list(nonterminals)


def format_table(
    table: lr0.ParseTable,
    terminals: typing.Iterable | None = None,
    nonterminals: typing.Iterable | None = None,
) -> str:
    """Render the action and goto tables as aligned plain text.

    One row per state, the action columns (one per terminal) and then the goto
    columns (one per nonterminal).
    """
    terminals, nonterminals = _columns(table, terminals, nonterminals)

    def format_goto(state: int, nt) -> str:
        index = table.goto(state, nt)
        if index is None:
            return ""
        return str(index)

    action_cells = [
        [format_action(table.action(state, t)) for t in terminals]
        for state in range(table.state_count)
    ]
    goto_cells = [
        [format_goto(state, nt) for nt in nonterminals] for state in range(table.state_count)
    ]

    action_widths = [
        max([len(str(t))] + [len(row[i]) for row in action_cells])
        for i, t in enumerate(terminals)
    ]
    goto_widths = [
        max([len(str(nt))] + [len(row[i]) for row in goto_cells])
        for i, nt in enumerate(nonterminals)
    ]
    index_width = max(len("state"), len(str(table.state_count - 1)))

    def format_row(index: str, actions: list[str], gotos: list[str]) -> str:
        return "{index} | {actions} | {gotos}".format(
            index=index.ljust(index_width),
            actions=" ".join(a.ljust(w) for a, w in zip(actions, action_widths)),
            gotos=" ".join(g.ljust(w) for g, w in zip(gotos, goto_widths)),
        ).rstrip()

    header = format_row(
        "state",
        [str(t) for t in terminals],
        [str(nt) for nt in nonterminals],
    )
    lines = [header, "-" * len(header)] + [
        format_row(str(state), actions, gotos)
        for state, (actions, gotos) in enumerate(zip(action_cells, goto_cells))
    ]
    return "\n".join(lines)


def format_step(record: TraceRecord) -> str:
    if record.failure is not None:
        return record.failure.message
    return format_action(record.action)


def format_trace(trace: typing.Iterable[TraceRecord]) -> str:
    """Format a parse trace, one row per transition."""
    rows = [
        (
            str(record.step),
            " ".join(str(t) for t in record.remaining),
            " ".join(str(s) for s in record.stack),
            format_step(record),
        )
        for record in trace
    ]
    header = ("step", "remaining input", "stack", "action")
    widths = [max(len(row[i]) for row in [header] + rows) for i in range(3)]

    def format_row(row) -> str:
        return "  ".join(
            [cell.ljust(width) for cell, width in zip(row[:3], widths)] + [row[3]]
        ).rstrip()

    lines = [format_row(header)]
    lines.append("-" * len(lines[0]))
    lines.extend(format_row(row) for row in rows)
    return "\n".join(lines)


_LATEX_ESCAPES = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}


def latex_escape(value) -> str:
    return "".join(_LATEX_ESCAPES.get(c, c) for c in str(value))


def _latex_action(action: lr0.ParseAction | None) -> str:
    match action:
        case None:
            return ""
        case lr0.Accept():
            return "Accept"
        case lr0.Shift(state=state):
            return f"Shift( $ q_{{{state}}} $ )"
        case lr0.Reduce(rule=rule):
            return f"Reduce( $ r_{{{rule}}} $ )"
        case lr0.Error():
            return "error"
        case _:
            typing.assert_never(action)


def table_to_latex(
    table: lr0.ParseTable,
    terminals: typing.Iterable | None = None,
    nonterminals: typing.Iterable | None = None,
) -> str:
    """Render the table as a LaTeX `tabular`, with an Action group and a Goto
    group of columns.
    """
    terminals, nonterminals = _columns(table, terminals, nonterminals)

    lines = [
        "\\begin{tabular}{%s}" % ("l" * (1 + len(terminals) + 1 + len(nonterminals))),
        "& \\multicolumn{%d}{c}{Action} & & \\multicolumn{%d}{c}{Goto} \\\\ \\hline"
        % (len(terminals), len(nonterminals)),
        " & "
        + " & ".join(
            [latex_escape(t) for t in terminals] + [""] + [latex_escape(nt) for nt in nonterminals]
        )
        + " \\\\",
    ]
    for state in range(table.state_count):
        cells = [f"$ q_{{{state}}} $"]
        cells.extend(_latex_action(table.action(state, t)) for t in terminals)
        cells.append("")
        for nt in nonterminals:
            goto = table.goto(state, nt)
            cells.append("" if goto is None else f"$ q_{{{goto}}} $")
        lines.append(" & ".join(cells) + " \\\\ \\hline")
    lines.append("\\end{tabular}")
    return "\n".join(lines)


def trace_to_latex(trace: typing.Iterable[TraceRecord]) -> str:
    """Render a parse trace as a LaTeX `tabular`; the top of the stack is
    marked with an arrow.
    """
    lines = [
        "\\begin{tabular}{llll}",
        "step & remaining input & stack & action \\\\ \\hline",
    ]
    for record in trace:
        stack = "".join(f"q_{{{s}}}" for s in record.stack)
        if record.failure is not None:
            action = latex_escape(record.failure.message)
        else:
            action = _latex_action(record.action)
        lines.append(
            "{step} & {remaining} & $ {stack}\\leftarrow $ & {action} \\\\ \\hline".format(
                step=record.step,
                remaining=" ".join(latex_escape(t) for t in record.remaining),
                stack=stack,
                action=action,
            )
        )
    lines.append("\\end{tabular}")
    return "\n".join(lines)
