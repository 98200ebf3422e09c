from __future__ import annotations

import contextlib
import dataclasses
import io
import sys
from collections import Counter

from . import t

MESSAGE_LEVELS = {
    "everything": 0,
    "lint": 1,
    "fatal": 2,
    "nothing": 3,
}

DEATH_TIMING = [
    "early",  # exit as soon as a message at dieOn or above is reported
    "never",  # only report; rendering user text shouldn't kill the host process
]

PRINT_MODES = [
    "plain",
    "console",
]

# category: (heading, console color code)
HEADINGS = {
    "lint": ("LINT", 33),
    "fatal": ("FATAL ERROR", 31),
}


@dataclasses.dataclass()
class MessagesState:
    # What message category (or higher) to stop processing on
    dieOn: str = "fatal"
    dieWhen: str = "never"
    # What message category (or higher) to print
    printOn: str = "everything"
    silent: bool = False
    printMode: str = "console"
    fh: t.TextIO = t.cast("t.TextIO", sys.stderr)  # noqa: RUF009
    seenMessages: set[str] = dataclasses.field(default_factory=set)
    categoryCounts: Counter[str] = dataclasses.field(default_factory=Counter)

    def replace(self, **kwargs: t.Any) -> MessagesState:
        return dataclasses.replace(self, seenMessages=set(), categoryCounts=Counter(), **kwargs)

    def shouldDie(self, category: str) -> bool:
        if self.dieWhen == "never":
            return False
        return MESSAGE_LEVELS[category] >= MESSAGE_LEVELS[self.dieOn]

    def shouldPrint(self, category: str) -> bool:
        if self.silent:
            return False
        return MESSAGE_LEVELS[category] >= MESSAGE_LEVELS[self.printOn]


state = MessagesState()


def p(msg: str) -> None:
    try:
        print(msg, file=state.fh)
    except UnicodeEncodeError:
        print(msg.encode("ascii", "replace").decode(), file=state.fh)


def formatMessage(category: str, text: str, lineNum: int | None = None) -> str:
    heading, color = HEADINGS[category]
    if lineNum is not None:
        heading = f"LINE {lineNum}"
    heading += ":"
    if state.printMode == "console":
        heading = f"\033[1;{color}m{heading}\033[0m"
    return f"{heading} {text}"


def report(category: str, msg: str, lineNum: int | None = None) -> None:
    # Identical messages are only counted and printed once per state.
    formattedMsg = formatMessage(category, msg, lineNum=lineNum)
    if formattedMsg not in state.seenMessages:
        state.categoryCounts[category] += 1
        state.seenMessages.add(formattedMsg)
        if state.shouldPrint(category):
            p(formattedMsg)
    if state.shouldDie(category):
        sys.exit(2)


def die(msg: str, lineNum: int | None = None) -> None:
    report("fatal", msg, lineNum)


def lint(msg: str, lineNum: int | None = None) -> None:
    report("lint", msg, lineNum)


@contextlib.contextmanager
def withMessageState(fh: t.TextIO, **kwargs: t.Any) -> t.Generator[t.TextIO, None, None]:
    global state
    oldState = state
    state = oldState.replace(fh=fh, **kwargs)
    try:
        yield fh
    finally:
        state = oldState


@contextlib.contextmanager
def messagesSilent() -> t.Generator[io.StringIO, None, None]:
    fh = io.StringIO()
    with withMessageState(fh, silent=True):
        yield fh
