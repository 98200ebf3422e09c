from __future__ import annotations

from . import messages
from .dom import diff, parseHTML, reverse
from .parser import length, parse
from .parts import (
    Color,
    ColorValue,
    Emote,
    EmoteKind,
    Escape,
    Newline,
    Part,
    Style,
    StyleKind,
    Text,
    strFromParts,
)
from .renderer import (
    DEFAULT_RENDER_CONFIG,
    LinkAlreadyTaken,
    RenderConfig,
    render,
)
