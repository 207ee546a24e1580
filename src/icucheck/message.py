"""ICU message parsing and placeholder extraction.

Messages are parsed into a small closed set of node types. The default
:class:`IcuMessageParser` is backed by ``pyicumessageformat``; anything with a
``parse(text) -> list[Node]`` method raising :class:`MessageSyntaxError` can be
used in its place, which keeps the comparison logic independent from the
grammar engine.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from pyicumessageformat import Parser

logger = logging.getLogger(__name__)

CHOICE_TYPES = ("plural", "selectordinal", "select")
ARGUMENT_TYPES = ("number", "date", "time")
TAG_TYPE = "tag"
QUOTABLE = "{}#|<"


class MessageSyntaxError(Exception):
    pass


@dataclass
class TextNode:
    value: str


@dataclass
class ArgumentNode:
    name: str
    kind: str | None = None
    style: str | None = None


@dataclass
class PoundNode:
    name: str


@dataclass
class ChoiceNode:
    name: str
    kind: str
    options: dict[str, list["Node"]] = field(default_factory=dict)
    offset: int = 0


@dataclass
class TagNode:
    name: str
    children: list["Node"] = field(default_factory=list)


Node = TextNode | ArgumentNode | PoundNode | ChoiceNode | TagNode


class MessageParser(Protocol):
    def parse(self, text: str) -> list[Node]: ...


def _skip_quoted(text: str, pos: int) -> int:
    # text[pos] is an apostrophe; '' is a literal apostrophe, '{...' quotes syntax
    if text[pos + 1 : pos + 2] == "'":
        return pos + 2
    if not text[pos + 1 : pos + 2] or text[pos + 1] not in QUOTABLE:
        return pos + 1
    pos += 1
    while pos < len(text):
        if text[pos] == "'":
            if text[pos + 1 : pos + 2] == "'":
                pos += 2
                continue
            return pos + 1
        pos += 1
    return pos


def _skip_spaces(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _scan_message(text: str, pos: int, found: list[tuple[str, str]]) -> int:
    """Scan a (sub-)message, returning the index of its closing brace."""
    while pos < len(text):
        char = text[pos]
        if char == "'":
            pos = _skip_quoted(text, pos)
        elif char == "{":
            pos = _scan_argument(text, pos + 1, found)
        elif char == "}":
            return pos
        else:
            pos += 1
    return pos


def _scan_argument(text: str, pos: int, found: list[tuple[str, str]]) -> int:
    name_end = pos
    while name_end < len(text) and text[name_end] not in ",}":
        name_end += 1
    name = text[pos:name_end].strip()
    if text[name_end : name_end + 1] != ",":
        return name_end + 1

    type_end = name_end + 1
    while type_end < len(text) and text[type_end] not in ",}":
        type_end += 1
    kind = text[name_end + 1 : type_end].strip()
    if kind not in CHOICE_TYPES or text[type_end : type_end + 1] != ",":
        close = text.find("}", type_end)
        return len(text) if close == -1 else close + 1

    seen: set[str] = set()
    pos = type_end + 1
    while True:
        pos = _skip_spaces(text, pos)
        if pos >= len(text) or text[pos] == "}":
            return pos + 1
        label_end = pos
        while label_end < len(text) and not text[label_end].isspace() and text[label_end] != "{":
            label_end += 1
        label = text[pos:label_end]
        pos = _skip_spaces(text, label_end)
        if label.startswith("offset:"):
            if label == "offset:":
                while pos < len(text) and text[pos].isdigit():
                    pos += 1
            continue
        if text[pos : pos + 1] != "{":
            return pos
        if label in seen:
            found.append((name, label))
        seen.add(label)
        pos = _scan_message(text, pos + 1, found) + 1


def find_duplicate_cases(text: str) -> list[tuple[str, str]]:
    """Return ``(argument, case)`` pairs for every case label repeated within
    a plural or select construct. Expects text that already parses."""
    found: list[tuple[str, str]] = []
    _scan_message(text, 0, found)
    return found


class IcuMessageParser:
    def __init__(self, allow_tags: bool = True) -> None:
        self.allow_tags = allow_tags
        self._parser = Parser({"allow_tags": allow_tags})

    def parse(self, text: str) -> list[Node]:
        try:
            raw = self._parser.parse(text)
        except (SyntaxError, ValueError) as ex:
            raise MessageSyntaxError(str(ex)) from ex
        duplicates = find_duplicate_cases(text)
        if duplicates:
            name, label = duplicates[0]
            raise MessageSyntaxError(f'"{name}" has duplicate case "{label}"')
        return self._convert(raw)

    def _convert(self, raw: list[Any]) -> list[Node]:
        return [self._convert_node(item) for item in raw]

    def _convert_node(self, item: Any) -> Node:
        if isinstance(item, str):
            return TextNode(item)

        name = item["name"]
        kind = item.get("type")
        if item.get("hash"):
            return PoundNode(name)
        if kind is None:
            return ArgumentNode(name)
        if kind == TAG_TYPE:
            return TagNode(name, self._convert(item.get("contents") or []))
        if kind in CHOICE_TYPES:
            options = {
                label: self._convert(body) for label, body in item.get("options", {}).items()
            }
            if "other" not in options:
                raise MessageSyntaxError(
                    f'"{name}" {kind} is missing the required "other" case'
                )
            return ChoiceNode(name, kind, options, item.get("offset") or 0)

        if kind not in ARGUMENT_TYPES:
            raise MessageSyntaxError(f'"{name}" has unknown argument type "{kind}"')
        style = item.get("format")
        return ArgumentNode(name, kind, style if isinstance(style, str) else None)


def tag_placeholder(name: str) -> str:
    return f"<{name}>"


def extract_placeholders(nodes: list[Node], out: set[str] | None = None) -> set[str]:
    """Collect the placeholder identifiers referenced by a parsed message.

    Arguments contribute their name, plural/select constructs their
    controlling variable, and tags ``<name>`` so a tag never collides with an
    argument of the same name. Case bodies and tag contents are walked
    recursively; case labels and literal text are never placeholders.
    """
    if out is None:
        out = set()
    for node in nodes:
        if isinstance(node, ArgumentNode):
            out.add(node.name)
        elif isinstance(node, ChoiceNode):
            out.add(node.name)
            for body in node.options.values():
                extract_placeholders(body, out)
        elif isinstance(node, TagNode):
            out.add(tag_placeholder(node.name))
            extract_placeholders(node.children, out)
    return out


def validate_message(parser: MessageParser, text: str) -> str | None:
    """Return the syntax error text for ``text``, or None if it parses."""
    try:
        parser.parse(text)
    except MessageSyntaxError as ex:
        return str(ex)
    return None


def placeholders_of(parser: MessageParser, text: str) -> set[str]:
    # Syntax errors are reported by validate_message, not here
    try:
        nodes = parser.parse(text)
    except MessageSyntaxError as ex:
        logger.debug(f"No placeholders extracted from unparsable message: {ex}")
        return set()
    return extract_placeholders(nodes)
