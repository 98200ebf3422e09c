from __future__ import annotations

import re
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from . import t

HEX_COLOR_RE = re.compile(r"#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})")

# Longest tag body the parser will even look at.
MAX_TAG_LENGTH = 32


class StyleKind(Enum):
    Bold = "b"
    Italic = "i"
    Underline = "u"
    Strikethrough = "s"
    Link = "url"

    @property
    def tag(self) -> str:
        return self.value

    @classmethod
    def fromTag(cls, tag: str) -> StyleKind | None:
        for style in cls:
            if style.value == tag:
                return style
        return None


class EmoteKind(Enum):
    # Values are the asset names in the emoticons directory,
    # without the .png extension.
    Smile = "smile"
    Sad = "sad"
    ColonD = "colond"
    ColonThree = "colonthree"
    Fearful = "fearful"
    Sunglasses = "sunglasses"
    Crying = "crying"
    Winking = "winking"

    @property
    def tag(self) -> str:
        return EMOTE_TAGS[self]

    @property
    def assetName(self) -> str:
        return self.value

    @classmethod
    def fromTag(cls, tag: str) -> EmoteKind | None:
        for emote, emoteTag in EMOTE_TAGS.items():
            if emoteTag == tag:
                return emote
        return None


EMOTE_TAGS: dict[EmoteKind, str] = {
    EmoteKind.Smile: ":)",
    EmoteKind.Sad: ":(",
    EmoteKind.ColonD: ":D",
    EmoteKind.ColonThree: ":3",
    EmoteKind.Fearful: "D:",
    EmoteKind.Sunglasses: "B)",
    EmoteKind.Crying: ";(",
    EmoteKind.Winking: ";)",
}


@dataclass(frozen=True)
class ColorValue:
    r: int = 0
    g: int = 0
    b: int = 0

    def __post_init__(self) -> None:
        for component in (self.r, self.g, self.b):
            if not 0 <= component <= 255:
                msg = f"Color components must be between 0 and 255, got {component}."
                raise ValueError(msg)

    def __str__(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    @classmethod
    def fromHex(cls, text: str) -> ColorValue | None:
        match = HEX_COLOR_RE.fullmatch(text)
        if match is None:
            return None
        return cls(int(match[1], 16), int(match[2], 16), int(match[3], 16))


@dataclass
class Part(metaclass=ABCMeta):
    """
    One classified unit of sillycode markup.

    Parts never refer to each other;
    nesting only exists once the renderer replays them.
    str() turns a part back into the markup it came from.
    """

    @abstractmethod
    def __str__(self) -> str:
        pass


@dataclass
class Text(Part):
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass
class Escape(Part):
    def __str__(self) -> str:
        return "\\"


@dataclass
class Newline(Part):
    def __str__(self) -> str:
        return "\n"


@dataclass
class Style(Part):
    style: StyleKind
    enable: bool

    def __str__(self) -> str:
        if self.enable:
            return f"[{self.style.tag}]"
        return f"[/{self.style.tag}]"


@dataclass
class Color(Part):
    # Disabling a color doesn't care which one, so it carries the zero color.
    color: ColorValue = field(default_factory=ColorValue)
    enable: bool = True

    def __str__(self) -> str:
        if self.enable:
            return f"[color={self.color}]"
        return "[/color]"


@dataclass
class Emote(Part):
    emote: EmoteKind

    def __str__(self) -> str:
        return f"[{self.emote.tag}]"


def styleFromTag(body: str) -> Style | None:
    enable = True
    if body.startswith("/"):
        enable = False
        body = body[1:]
    style = StyleKind.fromTag(body)
    if style is None:
        return None
    return Style(style, enable)


def emoteFromTag(body: str) -> Emote | None:
    emote = EmoteKind.fromTag(body)
    if emote is None:
        return None
    return Emote(emote)


def colorFromTag(body: str) -> Color | None:
    if body == "/color":
        return Color(ColorValue(), enable=False)
    if not body.startswith("color="):
        return None
    color = ColorValue.fromHex(body[len("color=") :])
    if color is None:
        return None
    return Color(color, enable=True)


def partFromTag(body: str) -> Part | None:
    # Classifies the text between [ and ].
    # Order matters only for forward-compat; the vocabularies don't overlap.
    if len(body) == 0 or len(body) > MAX_TAG_LENGTH:
        return None
    part: Part | None = styleFromTag(body)
    if part is None:
        part = emoteFromTag(body)
    if part is None:
        part = colorFromTag(body)
    return part


def strFromParts(parts: t.Iterable[Part]) -> str:
    return "".join(str(part) for part in parts)
