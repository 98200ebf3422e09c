from __future__ import annotations

import re
from dataclasses import dataclass, field

from . import messages as m
from . import t
from .parts import Color, ColorValue, Emote, EmoteKind, Escape, Newline, Part, Style, StyleKind, Text


@dataclass
class RenderConfig:
    emotePath: str = "/static/emoticons/{name}.png"
    metaClass: str = "sillycode-meta"
    emoteClass: str = "sillycode-emote"
    # Prefixed onto finished hrefs that don't start with a scheme like https://.
    defaultScheme: str | None = None
    # Report unbalanced tags thru messages.lint()
    lint: bool = False


DEFAULT_RENDER_CONFIG = RenderConfig()


def escapeHTML(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


class LinkAlreadyTaken(Exception):
    def __init__(self, index: int) -> None:
        super().__init__(f"Link {index} was already finalized.")
        self.index = index


@dataclass
class LinkRecord:
    index: int
    href: str = ""
    taken: bool = False

    @property
    def placeholder(self) -> str:
        # Text always goes thru escapeHTML(), so a raw < can't come from the user.
        return f"<HREF{self.index}>"


PLACEHOLDER_RE = re.compile(r"<HREF(\d+)>")
SCHEME_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9+.-]*://")


@dataclass
class LinkTable:
    # Owns every href accumulator created during one render.
    # Open anchors only hold an index into here,
    # so nested anchors can all feed text to their own records.
    records: list[LinkRecord] = field(default_factory=list)

    def new(self) -> LinkRecord:
        record = LinkRecord(index=len(self.records))
        self.records.append(record)
        return record

    def get(self, index: int) -> LinkRecord:
        record = self.records[index]
        if record.taken:
            m.die(f"PROGRAMMING ERROR: Tried to use link {index} after it was finalized. Please report this!")
            raise LinkAlreadyTaken(index)
        return record

    def append(self, index: int, text: str) -> None:
        self.get(index).href += text

    def take(self, index: int) -> str:
        record = self.get(index)
        record.taken = True
        return record.href

    def takeAll(self) -> list[str]:
        return [self.take(i) for i in range(len(self.records))]


@dataclass(frozen=True)
class StyleElement:
    tag: str
    style: StyleKind

    @property
    def markup(self) -> str:
        return f"[{self.style.tag}]"

    def startTag(self) -> str:
        return f"<{self.tag}>"

    def endTag(self) -> str:
        return f"</{self.tag}>"


@dataclass(frozen=True)
class SpanElement:
    color: ColorValue

    @property
    def markup(self) -> str:
        return f"[color={self.color}]"

    def startTag(self) -> str:
        return f'<span style="color: {self.color}">'

    def endTag(self) -> str:
        return "</span>"


@dataclass(frozen=True)
class AnchorElement:
    link: int
    placeholder: str

    @property
    def markup(self) -> str:
        return "[url]"

    def startTag(self) -> str:
        return f'<a href="{self.placeholder}">'

    def endTag(self) -> str:
        return "</a>"


StackElementT: t.TypeAlias = "StyleElement | SpanElement | AnchorElement"

STYLE_ELEMENTS: dict[StyleKind, StyleElement] = {
    StyleKind.Bold: StyleElement("strong", StyleKind.Bold),
    StyleKind.Italic: StyleElement("em", StyleKind.Italic),
    StyleKind.Underline: StyleElement("ins", StyleKind.Underline),
    StyleKind.Strikethrough: StyleElement("del", StyleKind.Strikethrough),
}


@dataclass
class ElementStack:
    """
    The stack of currently-open HTML elements.

    Sillycode lets tags close in any order ([b][i][/b][/i]),
    but HTML doesn't, so every open and close goes thru here
    and gets written out in a properly-nested way.
    """

    out: list[str] = field(default_factory=list)
    elements: list[StackElementT] = field(default_factory=list)

    def open(self, element: StackElementT) -> None:
        self.out.append(element.startTag())

    def close(self, element: StackElementT) -> None:
        self.out.append(element.endTag())

    def openAll(self) -> None:
        for element in self.elements:
            self.open(element)

    def closeAll(self) -> None:
        for element in reversed(self.elements):
            self.close(element)

    def push(self, element: StackElementT) -> None:
        self.open(element)
        self.elements.append(element)

    def contains(self, element: StackElementT) -> bool:
        return element in self.elements

    def remove(self, pred: t.Callable[[StackElementT], bool]) -> StackElementT | None:
        # Closes the nearest element matching pred.
        # Anything opened after it gets closed first,
        # then reopened once the target is gone.
        for i in range(len(self.elements) - 1, -1, -1):
            if pred(self.elements[i]):
                removed = self.elements.pop(i)
                preserved = self.elements[i:]
                for element in reversed(preserved):
                    self.close(element)
                self.close(removed)
                for element in preserved:
                    self.open(element)
                return removed
        return None

    def anchors(self) -> t.Iterator[AnchorElement]:
        for element in self.elements:
            if isinstance(element, AnchorElement):
                yield element


@dataclass
class Renderer:
    isEditor: bool = False
    config: RenderConfig = field(default_factory=RenderConfig)
    stack: ElementStack = field(default_factory=ElementStack)
    links: LinkTable = field(default_factory=LinkTable)
    lineNum: int = 1

    @property
    def out(self) -> list[str]:
        return self.stack.out

    def meta(self, text: str) -> None:
        # Markup that only shows up in the editor, like [b] or the \ of an escape.
        if self.isEditor:
            self.out.append(f'<span class="{self.config.metaClass}">{text}</span>')

    def lint(self, msg: str) -> None:
        if self.config.lint:
            m.lint(msg, lineNum=self.lineNum)

    def removeOrLint(self, pred: t.Callable[[StackElementT], bool], tag: str) -> None:
        if self.stack.remove(pred) is None:
            self.lint(f"Saw a [/{tag}], but there's no open [{tag}] corresponding to it.")

    def onText(self, part: Text) -> None:
        text = escapeHTML(part.text)
        self.out.append(text)
        for anchor in self.stack.anchors():
            self.links.append(anchor.link, text)

    def onEscape(self, part: Escape) -> None:
        # The parser already ate the backslash, it's only shown in the editor.
        self.meta("\\")

    def onNewline(self, part: Newline) -> None:
        self.stack.closeAll()
        self.out.append("</div><div>")
        self.stack.openAll()
        self.lineNum += 1

    def onStyle(self, part: Style) -> None:
        tag = part.style.tag
        if part.style is StyleKind.Link:
            if part.enable:
                self.meta("[url]")
                record = self.links.new()
                self.stack.push(AnchorElement(record.index, record.placeholder))
            else:
                self.removeOrLint(lambda el: isinstance(el, AnchorElement), tag)
                self.meta("[/url]")
            return

        element = STYLE_ELEMENTS[part.style]
        if part.enable:
            self.meta(f"[{tag}]")
            if not self.stack.contains(element):
                self.stack.push(element)
        else:
            self.removeOrLint(lambda el: el == element, tag)
            self.meta(f"[/{tag}]")

    def onColor(self, part: Color) -> None:
        if part.enable:
            self.meta(f"[color={part.color}]")
            self.stack.push(SpanElement(part.color))
        else:
            self.removeOrLint(lambda el: isinstance(el, SpanElement), "color")
            self.meta("[/color]")

    def onEmote(self, part: Emote) -> None:
        emote: EmoteKind = part.emote
        path = self.config.emotePath.format(name=emote.assetName)
        cls = self.config.emoteClass
        if self.isEditor:
            self.out.append(
                f'<span class="{cls}" style="background-image: url({path})">[{escapeHTML(emote.tag)}]</span>',
            )
        else:
            self.out.append(f'<img class="{cls}" src="{path}" alt="{emote.assetName}">')

    def onPart(self, part: Part) -> None:
        if isinstance(part, Text):
            self.onText(part)
        elif isinstance(part, Escape):
            self.onEscape(part)
        elif isinstance(part, Newline):
            self.onNewline(part)
        elif isinstance(part, Style):
            self.onStyle(part)
        elif isinstance(part, Color):
            self.onColor(part)
        elif isinstance(part, Emote):
            self.onEmote(part)
        else:
            t.assert_never(part)

    def finalHref(self, href: str) -> str:
        href = href.strip()
        scheme = self.config.defaultScheme
        if scheme and not SCHEME_RE.match(href):
            href = scheme + href
        return href

    def render(self, parts: t.Iterable[Part]) -> str:
        self.out.append("<div>")
        for part in parts:
            self.onPart(part)
        if self.stack.elements:
            openTags = ", ".join(el.markup for el in self.stack.elements)
            self.lint(f"Reached the end of the text with unclosed tags: {openTags}")
        self.stack.closeAll()
        self.out.append("</div>")
        html = "".join(self.out)

        # Hrefs are only complete now that every bit of link text has been seen.
        hrefs = [self.finalHref(href) for href in self.links.takeAll()]

        html = PLACEHOLDER_RE.sub(lambda match: hrefs[int(match[1])], html)

        return (
            html.replace("<div> ", "<div>&nbsp;")
            .replace(" </div>", " <br></div>")
            .replace("<div></div>", "<div><br></div>")
        )


def render(parts: t.Iterable[Part], isEditor: bool = False, config: RenderConfig | None = None) -> str:
    """
    Renders Parts as HTML, one <div> per line.

    With isEditor set, the original markup ([b], [/url], the \\ of escapes)
    is also written out, wrapped in meta spans,
    so an editor can show the source alongside its effect.
    """
    if config is None:
        config = DEFAULT_RENDER_CONFIG
    return Renderer(isEditor=isEditor, config=config).render(parts)
