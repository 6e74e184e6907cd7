"""Build LR(0) parse tables from a canonical automaton, and run them.

Use the [automaton] module to get an automaton from a grammar, the [table]
module to turn that into tables, and the [runtime] module to parse with them.
The [export] module renders tables and traces for humans.
"""
from . import automaton
from . import export
from . import runtime
from . import table

from .automaton import Automaton, Grammar, Item, ItemSet, Symbol, SymbolKind
from .table import (
    Accept,
    Built,
    BuiltWithConflicts,
    Conflict,
    ConflictError,
    ConflictKind,
    Error,
    MalformedAutomatonError,
    ParseTable,
    Reduce,
    Shift,
    build_table,
)
from .runtime import (
    Accepted,
    Continue,
    Failed,
    FailureKind,
    MalformedTableError,
    ParseFailure,
    Parser,
    Status,
    TraceRecord,
)
