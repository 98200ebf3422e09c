from __future__ import annotations

from dataclasses import dataclass, field

from . import t
from .parts import MAX_TAG_LENGTH, Emote, Escape, Newline, Part, Text, partFromTag


@dataclass
class Parser:
    parts: list[Part] = field(default_factory=list)
    # Untyped text seen since the last emitted part, one char per entry.
    buffer: list[str] = field(default_factory=list)
    # Buffer positions of every [ still waiting for its ].
    brackets: list[int] = field(default_factory=list)
    # Whether the previous character was an unescaped backslash.
    escape: bool = False

    def emit(self, part: Part) -> None:
        self.parts.append(part)

    def flush(self) -> None:
        if self.buffer:
            self.emit(Text("".join(self.buffer)))
            self.buffer = []
        self.brackets = []

    def tag(self) -> bool:
        # Called on an unescaped ].
        # Looks back for the innermost [ and tries to turn the bracketed
        # text into a part. Returns whether the ] was consumed.
        if not self.brackets:
            return False
        index = self.brackets[-1]
        if index == 0 and self.parts and isinstance(self.parts[-1], Escape):
            # The [ itself was escaped.
            return False
        if len(self.buffer) - index - 1 > MAX_TAG_LENGTH:
            return False
        part = partFromTag("".join(self.buffer[index + 1 :]))
        if part is None:
            return False
        del self.buffer[index:]
        self.flush()
        self.emit(part)
        return True

    def feed(self, char: str) -> None:
        if not self.escape:
            if char == "\\":
                self.escape = True
                self.flush()
                self.emit(Escape())
                return
            if char == "]" and self.tag():
                return

        # Escaping only ever covers the one following character.
        self.escape = False

        # Newlines break text even when escaped;
        # the Escape part was already emitted, so the backslash just vanishes.
        if char == "\n":
            self.flush()
            self.emit(Newline())
            return

        if char == "[":
            self.brackets.append(len(self.buffer))
        self.buffer.append(char)

    def finish(self) -> list[Part]:
        self.flush()
        return self.parts


def parse(text: str) -> list[Part]:
    """
    Parses sillycode markup into a flat list of Parts.

    Never fails: anything that isn't a recognizable tag
    (unknown names, bad colors, stray brackets) stays as literal text.
    """
    parser = Parser()
    for char in text:
        parser.feed(char)
    return parser.finish()


def length(parts: t.Iterable[Part]) -> int:
    # The "visible" length, for post length limits.
    # Text counts code points, newlines and emotes count as one,
    # and pure markup counts as nothing.
    total = 0
    for part in parts:
        if isinstance(part, Text):
            total += len(part.text)
        elif isinstance(part, (Newline, Emote)):
            total += 1
    return total
