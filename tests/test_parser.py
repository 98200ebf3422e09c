import time

import pytest

from sillycode.parser import length, parse
from sillycode.parts import (
    Color,
    ColorValue,
    Emote,
    EmoteKind,
    Escape,
    Newline,
    Style,
    StyleKind,
    Text,
)


def test_parse_empty_string() -> None:
    assert parse("") == []


def test_parse_text() -> None:
    assert parse("hello") == [Text("hello")]


def test_parse_newline() -> None:
    assert parse("hello\nworld") == [Text("hello"), Newline(), Text("world")]


def test_parse_basic_tags() -> None:
    assert parse("[b]hello[/b] world") == [
        Style(StyleKind.Bold, True),
        Text("hello"),
        Style(StyleKind.Bold, False),
        Text(" world"),
    ]


def test_parse_nested_tags() -> None:
    assert parse("[b]hello [i]world[/i][/b]") == [
        Style(StyleKind.Bold, True),
        Text("hello "),
        Style(StyleKind.Italic, True),
        Text("world"),
        Style(StyleKind.Italic, False),
        Style(StyleKind.Bold, False),
    ]


def test_parse_every_style() -> None:
    assert parse("[u][s][url]") == [
        Style(StyleKind.Underline, True),
        Style(StyleKind.Strikethrough, True),
        Style(StyleKind.Link, True),
    ]


def test_parse_color() -> None:
    assert parse("[color=#a834cf]colored text![/color]") == [
        Color(ColorValue(168, 52, 207), True),
        Text("colored text!"),
        Color(ColorValue(0, 0, 0), False),
    ]


def test_parse_color_is_case_insensitive() -> None:
    assert parse("[color=#A834CF]") == [Color(ColorValue(168, 52, 207), True)]


@pytest.mark.parametrize(
    "text",
    [
        "[color=#a834c]",
        "[color=#a834cff]",
        "[color=#g834cf]",
        "[color=a834cf]",
        "[COLOR=#a834cf]",
        "[/color ]",
    ],
)
def test_parse_bad_colors_are_text(text: str) -> None:
    assert parse(text) == [Text(text)]


def test_parse_emotes() -> None:
    assert parse("[:)][:(][:D][:3][D:][B)][;(][;)]") == [
        Emote(EmoteKind.Smile),
        Emote(EmoteKind.Sad),
        Emote(EmoteKind.ColonD),
        Emote(EmoteKind.ColonThree),
        Emote(EmoteKind.Fearful),
        Emote(EmoteKind.Sunglasses),
        Emote(EmoteKind.Crying),
        Emote(EmoteKind.Winking),
    ]


def test_parse_escaped_tags() -> None:
    assert parse("\\[[b]hello\\[/b]") == [
        Escape(),
        Text("["),
        Style(StyleKind.Bold, True),
        Text("hello"),
        Escape(),
        Text("[/b]"),
    ]


def test_parse_escaped_tag_stays_literal() -> None:
    assert parse("\\[b]x[/b]") == [
        Escape(),
        Text("[b]x"),
        Style(StyleKind.Bold, False),
    ]


def test_parse_escaped_closing_bracket() -> None:
    assert parse("[b\\]") == [Text("[b"), Escape(), Text("]")]


def test_parse_escaped_backslash() -> None:
    assert parse("a\\\\b") == [Text("a"), Escape(), Text("\\b")]


def test_parse_escaped_newline_still_breaks() -> None:
    assert parse("a\\\nb") == [Text("a"), Escape(), Newline(), Text("b")]


def test_parse_incorrectly_nested_tags_and_escapes() -> None:
    assert parse("now [b[url]https://[i]example.com[/url] is \\ wrong here \\ [/i] \\") == [
        Text("now [b"),
        Style(StyleKind.Link, True),
        Text("https://"),
        Style(StyleKind.Italic, True),
        Text("example.com"),
        Style(StyleKind.Link, False),
        Text(" is "),
        Escape(),
        Text(" wrong here "),
        Escape(),
        Text(" "),
        Style(StyleKind.Italic, False),
        Text(" "),
        Escape(),
    ]


def test_parse_a_bunch_of_fake_tags() -> None:
    assert parse("these [tags] are invalid ]") == [Text("these [tags] are invalid ]")]
    assert parse("[url]]teehee[/color ] yea [] ]") == [
        Style(StyleKind.Link, True),
        Text("]teehee[/color ] yea [] ]"),
    ]


def test_parse_unterminated_tag() -> None:
    assert parse("[b") == [Text("[b")]
    assert parse("[") == [Text("[")]


def test_parse_tag_body_length_limit() -> None:
    body = "x" * 33
    assert parse(f"[{body}]") == [Text(f"[{body}]")]


def test_parse_never_fails_on_junk() -> None:
    junk = "[[[]]]\\\\\\[/[/]/][color=#][color=#zzzzzz]" * 20 + "[b]" * 100 + "\\"
    parts = parse(junk)
    assert parts
    assert isinstance(parts[-1], Escape)


def test_length_normal_text() -> None:
    assert length(parse("hello")) == 5
    assert length(parse("hello\nworld")) == 11


def test_length_with_styles() -> None:
    assert length(parse("hello [b]world[/b]")) == 11
    assert length(parse("[i]goodnight [b]world[/b]")) == 15


def test_length_with_colors_and_escapes() -> None:
    assert length(parse("[color=#ffffff]hi[/color] \\[")) == 4


def test_length_with_emotes() -> None:
    assert length(parse("hello world [:D] !")) == 15


def test_length_with_emojis() -> None:
    assert length(parse("🤔☃")) == 2
    assert length(parse("this is a fox 🦊 from canada 🇨🇦")) == 30


def timeParse(text: str) -> float:
    best = float("inf")
    for _ in range(3):
        start = time.perf_counter()
        parse(text)
        best = min(best, time.perf_counter() - start)
    return best


@pytest.mark.parametrize("chunk", ["a", "[b", "[x]", "\\]"])
def test_parse_time_is_linear(chunk: str) -> None:
    small = timeParse(chunk * 50_000)
    large = timeParse(chunk * 200_000)
    # 4x the input; quadratic behavior would be around 16x.
    assert large < small * 9


def test_parse_long_text_between_tags() -> None:
    text = "[b]" + "a[" * 1000 + "[/b]"
    assert parse(text) == [Style(StyleKind.Bold, True), Text("a[" * 1000), Style(StyleKind.Bold, False)]
