from __future__ import annotations

import copy

import html5lib
from lxml import etree

from . import t


def parseHTML(text: str) -> t.ElementT:
    # Parses an HTML fragment (like the output of render())
    # and returns the <body> holding it.
    doc = html5lib.parse(text, treebuilder="lxml", namespaceHTMLElements=False)
    return t.cast("t.ElementT", doc.getroot()[1])


def isOddNode(node: t.Any) -> bool:
    # Comments, PIs, etc; lxml gives them a non-string tag.
    return etree.iselement(node) and not isinstance(node.tag, str)


def childNodes(el: t.ElementT) -> list[t.NodeT]:
    """
    Returns the children of el in the DOM sense,
    with text runs as strings mixed in between the elements
    (rather than hung off of .text and .tail like lxml does).
    """
    nodes: list[t.NodeT] = []
    if el.text:
        nodes.append(el.text)
    for child in el:
        nodes.append(child)
        if child.tail:
            nodes.append(child.tail)
    return nodes


def replaceChildNodes(el: t.ElementT, nodes: list[t.NodeT]) -> t.ElementT:
    # Inverse of childNodes(): rebuilds el's contents from a node list.
    for child in list(el):
        el.remove(child)
    el.text = None
    last: t.ElementT | None = None
    for node in nodes:
        if isinstance(node, str):
            if last is None:
                el.text = (el.text or "") + node
            else:
                last.tail = (last.tail or "") + node
        else:
            node.tail = None
            el.append(node)
            last = node
    return el


def textContent(node: t.NodeT) -> str:
    if isinstance(node, str):
        return node
    if isOddNode(node):
        return ""
    return "".join(node.itertext())


def reverse(root: t.ElementT) -> str:
    """
    Regenerates sillycode from rendered editor HTML.

    Every child element of root is a line (a <div> from render());
    loose text directly under root gets glued onto the current line,
    which is what contenteditable hosts produce when typing
    outside of a line container.
    Works because editor-mode output keeps all of the markup as text.
    """
    lines: list[str] = []
    for child in childNodes(root):
        text = textContent(child).replace("\xa0", " ")
        if isinstance(child, str):
            if lines:
                lines[-1] += text
            else:
                lines.append(text)
        elif not isOddNode(child):
            lines.append(text)
    return "\n".join(lines)


def diff(expectedRoot: t.ElementT, actualRoot: t.ElementT) -> bool:
    """
    Patches actualRoot's children in place until they match expectedRoot's.
    Returns whether anything had to change.

    Meant for live previews: re-rendering into a fresh tree and diffing
    keeps untouched nodes (and thus selection/caret state) alive.
    """
    return diffChildren(expectedRoot, actualRoot)


def diffChildren(expected: t.ElementT, actual: t.ElementT) -> bool:
    dirty = False
    expectedNodes = childNodes(expected)
    actualNodes = childNodes(actual)
    newNodes: list[t.NodeT] = []
    for i in range(max(len(expectedNodes), len(actualNodes))):
        expectedChild = expectedNodes[i] if i < len(expectedNodes) else None
        actualChild = actualNodes[i] if i < len(actualNodes) else None

        if expectedChild is None:
            # Left over in the actual tree, drop it.
            dirty = True
            continue
        if actualChild is None:
            newNodes.append(cloneNode(expectedChild))
            dirty = True
            continue
        if isinstance(expectedChild, str) or isinstance(actualChild, str):
            if expectedChild != actualChild:
                dirty = True
            newNodes.append(cloneNode(expectedChild))
            continue
        if isOddNode(expectedChild) or isOddNode(actualChild):
            if expectedChild.tag is not actualChild.tag or expectedChild.text != actualChild.text:
                newNodes.append(cloneNode(expectedChild))
                dirty = True
            else:
                newNodes.append(actualChild)
            continue
        if diffElement(expectedChild, actualChild):
            dirty = True
        newNodes.append(actualChild)

    if dirty:
        replaceChildNodes(actual, newNodes)
    return dirty


def diffElement(expected: t.ElementT, actual: t.ElementT) -> bool:
    dirty = False
    if expected.tag != actual.tag:
        # lxml can rename in place, which keeps the children.
        actual.tag = expected.tag
        dirty = True

    for name, value in expected.attrib.items():
        if actual.get(name) != value:
            actual.set(name, value)
            dirty = True
    for name in list(actual.attrib.keys()):
        if name not in expected.attrib:
            del actual.attrib[name]
            dirty = True

    if diffChildren(expected, actual):
        dirty = True
    return dirty


def cloneNode(node: t.NodeT) -> t.NodeT:
    if isinstance(node, str):
        return node
    clone = copy.deepcopy(node)
    clone.tail = None
    return clone
