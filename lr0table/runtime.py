import dataclasses
import enum
import logging
import typing

from . import table as lr0


action_log = logging.getLogger("lr0table.action")


class MalformedTableError(Exception):
    """The table told us to do something impossible. This is never the input's
    fault: the table was built from an inconsistent automaton.
    """


class Status(enum.Enum):
    RUNNING = "running"
    ACCEPTED = "accepted"
    FAILED = "failed"


class FailureKind(enum.Enum):
    NO_ACTION = "no action"
    ERROR_ACTION = "error action"
    INPUT_EXHAUSTED = "input exhausted"
    REDUCE_CYCLE = "reduce cycle"


@dataclasses.dataclass(frozen=True)
class ParseFailure:
    kind: FailureKind
    state: int
    symbol: typing.Any
    cursor: int

    @property
    def message(self) -> str:
        match self.kind:
            case FailureKind.NO_ACTION:
                return f"Syntax Error: No action for ({self.state}, {self.symbol!r})"
            case FailureKind.ERROR_ACTION:
                return f"Syntax Error: Unexpected {self.symbol!r} in state {self.state}"
            case FailureKind.INPUT_EXHAUSTED:
                return (
                    f"Syntax Error: Ran out of input in state {self.state} "
                    "(missing end-of-input marker?)"
                )
            case FailureKind.REDUCE_CYCLE:
                return (
                    f"Syntax Error: Reductions in state {self.state} loop without "
                    f"consuming {self.symbol!r}"
                )
            case _:
                typing.assert_never(self.kind)

    def __str__(self):
        return f"{self.cursor}: {self.message}"


@dataclasses.dataclass(frozen=True)
class Continue:
    action: lr0.Shift | lr0.Reduce


@dataclasses.dataclass(frozen=True)
class Accepted:
    pass


@dataclasses.dataclass(frozen=True)
class Failed:
    failure: ParseFailure


StepResult = Continue | Accepted | Failed


@dataclasses.dataclass(frozen=True)
class TraceRecord:
    """One transition of the parser.

    `remaining` and `stack` are captured *before* the action is applied.
    `action` is the table entry that was used, if there was one, and `failure`
    is only set on the step where the parse failed.
    """

    step: int
    remaining: typing.Tuple[typing.Any, ...]
    stack: typing.Tuple[int, ...]
    action: lr0.ParseAction | None
    failure: ParseFailure | None = None


class Parser:
    """The shift-reduce machine.

    The table is shared and never modified; the input, cursor, stack, and
    trace belong to this parser alone, so any number of parsers can run off
    of the same table.

    Drive it one transition at a time with `step_once`, or all the way with
    `run_to_completion`:

        parser = Parser(table).with_input(["a", "b", "$"])
        result = parser.run_to_completion()
        match result:
            case Accepted():
                ...
            case Failed(failure=failure):
                print(failure.message)

    The input must end with the end-of-input terminal; it is not added for
    you.
    """

    table: lr0.ParseTable
    input: list[typing.Any]
    cursor: int
    stack: list[int]
    status: Status
    failure: ParseFailure | None
    trace: list[TraceRecord]

    # Every stack we've reduced from since the last shift.
    _reduced: set[typing.Tuple[int, ...]]

    def __init__(self, table: lr0.ParseTable):
        self.table = table
        self.reset()

    def reset(self):
        self.input = []
        self.cursor = 0
        self.stack = [self.table.start_state]
        self.status = Status.RUNNING
        self.failure = None
        self.trace = []
        self._reduced = set()

    def with_input(self, tokens: typing.Iterable) -> "Parser":
        """Rebind the input and rewind the cursor. The stack and the status
        are left alone, so a parser that has accepted or failed stays that
        way; call `reset` first if you're reusing a parser.
        """
        self.input = list(tokens)
        self.cursor = 0
        self._reduced = set()
        return self

    def remaining(self) -> typing.Tuple[typing.Any, ...]:
        return tuple(self.input[self.cursor :])

    def step_once(self) -> StepResult:
        """Perform exactly one transition.

        Once the parser has accepted or failed this does nothing, and keeps
        on returning the same result.

        Raises MalformedTableError if a reduction can't be carried out, in
        which case the parser is left exactly as it was.
        """
        match self.status:
            case Status.ACCEPTED:
                return Accepted()
            case Status.FAILED:
                assert self.failure is not None
                return Failed(self.failure)

        state = self.stack[-1]
        if self.cursor >= len(self.input):
            return self._fail(FailureKind.INPUT_EXHAUSTED, None, None)

        token = self.input[self.cursor]
        action = self.table.action(state, token)
        match action:
            case None:
                return self._fail(FailureKind.NO_ACTION, token, None)

            case lr0.Error():
                return self._fail(FailureKind.ERROR_ACTION, token, action)

            case lr0.Accept():
                self._record(action)
                self.status = Status.ACCEPTED
                return Accepted()

            case lr0.Shift(state=target):
                self._record(action)
                self.stack.append(target)
                self.cursor += 1
                self._reduced.clear()
                return Continue(action)

            case lr0.Reduce(rule=rule_number):
                new_stack = self._reduce(rule_number)

                # Reductions don't move the cursor, so coming back to a stack
                # we've already had since the last shift means we're going
                # around in circles.
                self._reduced.add(tuple(self.stack))
                if tuple(new_stack) in self._reduced:
                    return self._fail(FailureKind.REDUCE_CYCLE, token, action)

                self._record(action)
                self.stack = new_stack
                return Continue(action)

            case _:
                typing.assert_never(action)

    def run_to_completion(self) -> Accepted | Failed:
        """Step until the parse is accepted or fails.

        Every step either consumes a token or reduces, the input is finite,
        and a run of reductions that comes back to a stack it has already
        seen fails with REDUCE_CYCLE, so this always ends.
        """
        while True:
            result = self.step_once()
            match result:
                case Continue():
                    continue
                case Accepted() | Failed():
                    return result
                case _:
                    typing.assert_never(result)

    def parse(self, tokens: typing.Iterable) -> Accepted | Failed:
        """Parse `tokens` from a fresh start."""
        self.reset()
        return self.with_input(tokens).run_to_completion()

    def _reduce(self, rule_number: int) -> list[int]:
        """Compute the stack after reducing by the given rule, without
        touching the real stack.
        """
        if not 0 <= rule_number < len(self.table.rules):
            raise MalformedTableError(f"Can't get r{rule_number} from the rule table")
        item = self.table.rules[rule_number]

        size = len(item.right)
        if size >= len(self.stack):
            raise MalformedTableError(
                f"Reducing r{rule_number} ({item}) pops {size} states, but the stack "
                f"only has {len(self.stack)}: {self.stack}"
            )

        new_stack = self.stack[: len(self.stack) - size]
        exposed = new_stack[-1]
        goto = self.table.goto(exposed, item.left)
        if goto is None:
            raise MalformedTableError(f"({exposed}, {item.left!r}) -> ?")

        new_stack.append(goto)
        return new_stack

    def _fail(
        self,
        kind: FailureKind,
        symbol,
        action: lr0.ParseAction | None,
    ) -> Failed:
        failure = ParseFailure(
            kind=kind,
            state=self.stack[-1],
            symbol=symbol,
            cursor=self.cursor,
        )
        self._record(action, failure)
        self.status = Status.FAILED
        self.failure = failure
        return Failed(failure)

    def _record(self, action: lr0.ParseAction | None, failure: ParseFailure | None = None):
        record = TraceRecord(
            step=len(self.trace) + 1,
            remaining=self.remaining(),
            stack=tuple(self.stack),
            action=action,
            failure=failure,
        )
        self.trace.append(record)

        al = action_log
        if al.isEnabledFor(logging.INFO):
            al.info(
                "{step: <4} {input: <30} {stack: <30} {action}".format(
                    step=record.step,
                    input=" ".join(str(t) for t in record.remaining),
                    stack=repr(list(record.stack)),
                    action=failure.message if failure is not None else str(action),
                )
            )
