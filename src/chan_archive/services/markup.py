"""Parser and renderer for the constrained ``[tag]...[/tag]`` markup.

The parser builds a tree stored as a flat list of nodes, each holding the
index of its parent. A child is always created after its parent, so walking
the list backwards settles children before parents and walking it forwards
computes depths; rendering writes into one output list with an explicit
stack. Parsing and rendering stay linear in the input size.

Malformed markup never raises: unknown tags, stray closers and unclosed
openers are kept as literal text.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Tags nested deeper than this render as their bare content.
MAX_TAG_DEPTH = 4

ROOT_CONTENT = "block"
INLINE_CONTENT = "inline"
CODE_CONTENT = "code"

SUBSCRIPT_TAGS = frozenset({"sub", "sup"})

_TAG_TOKEN = re.compile(r"\[(/?)([A-Za-z]+)\]")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class TagSpec:
    """One entry of the markup vocabulary."""

    name: str
    start: str
    end: str
    content_type: str = INLINE_CONTENT
    allowed_in: frozenset[str] = frozenset({ROOT_CONTENT, INLINE_CONTENT})


BASE_TAGS: tuple[TagSpec, ...] = (
    TagSpec("code", "<code>", "</code>", content_type=CODE_CONTENT),
    TagSpec("spoiler", '<span class="spoiler">', "</span>"),
    TagSpec("sub", "<sub>", "</sub>"),
    TagSpec("sup", "<sup>", "</sup>"),
    TagSpec("b", "<b>", "</b>"),
    TagSpec("i", "<em>", "</em>"),
    TagSpec("m", '<tt class="code">', "</tt>"),
    TagSpec("o", '<span class="overline">', "</span>"),
    TagSpec("s", '<span class="strikethrough">', "</span>"),
    TagSpec("u", '<span class="underline">', "</span>"),
    TagSpec("expert", '<span class="expert">', "</span>"),
)

# Only honoured on archive boards, for non-ghost posts.
ARCHIVE_TAGS: tuple[TagSpec, ...] = (
    TagSpec("moot", "", ""),
    TagSpec("banned", '<span class="banned">', "</span>"),
)


@dataclass
class MarkupNode:
    """A tag occurrence in the parsed tree; the root has no spec.

    A reverted node is an opener that was never closed. It stays in the tree
    but renders as its literal opening text followed by its children.
    """

    spec: TagSpec | None
    parent: int | None
    open_text: str = ""
    content_start: int = 0
    content_end: int | None = None
    children: list[str | int] = field(default_factory=list)
    reverted: bool = False
    depth: int = 0
    under_subscript: bool = False

    @property
    def kind(self) -> str | None:
        return self.spec.name if self.spec else None

    @property
    def content_type(self) -> str:
        return self.spec.content_type if self.spec else ROOT_CONTENT

    @property
    def child_subscript(self) -> bool:
        """Whether children of this node sit inside a ``sub`` or ``sup``."""
        if self.reverted:
            return self.under_subscript
        return self.under_subscript or self.kind in SUBSCRIPT_TAGS


@dataclass
class TagTree:
    """Arena holding every node parsed from ``source``; index 0 is the root."""

    source: str
    nodes: list[MarkupNode] = field(default_factory=lambda: [MarkupNode(None, None)])

    def raw_content(self, index: int) -> str:
        """Return the unparsed text between a node's opening and closing tags."""
        node = self.nodes[index]
        end = node.content_end if node.content_end is not None else len(self.source)
        return self.source[node.content_start:end]

    def live_nodes(self) -> list[int]:
        return [i for i, node in enumerate(self.nodes) if i and not node.reverted]

    def _append_text(self, parent: int, text: str) -> None:
        # Pieces are appended, never concatenated in place.
        self.nodes[parent].children.append(text)

    def _open(self, parent: int, spec: TagSpec, open_text: str, content_start: int) -> int:
        index = len(self.nodes)
        self.nodes.append(MarkupNode(spec, parent, open_text, content_start))
        self.nodes[parent].children.append(index)
        return index

    def _compute_depths(self) -> None:
        # Reverted nodes are transparent: they pass their parent's depth on.
        for node in self.nodes[1:]:
            assert node.parent is not None
            parent = self.nodes[node.parent]
            node.under_subscript = parent.child_subscript
            node.depth = parent.depth if node.reverted else parent.depth + 1

    def _nonempty(self) -> list[bool]:
        """Flag, per node, whether it renders any text at all."""
        flags = [False] * len(self.nodes)
        for index in range(len(self.nodes) - 1, -1, -1):
            node = self.nodes[index]
            flags[index] = node.reverted or any(
                flags[child] if isinstance(child, int) else bool(child)
                for child in node.children
            )
        return flags


def _literal_text(node: MarkupNode) -> str:
    return "".join(child for child in node.children if isinstance(child, str))


def _has_multiple_lines(content: str) -> bool:
    return sum(1 for line in _LINE_BREAK.split(content) if line.strip()) > 1


class MarkupParser:
    """Parse and render markup for a fixed tag vocabulary."""

    def __init__(self, tags: tuple[TagSpec, ...] = BASE_TAGS) -> None:
        self.tags = {spec.name: spec for spec in tags}

    def parse(self, text: str) -> TagTree:
        """Build the tag tree for ``text``."""
        tree = TagTree(text)
        stack = [0]
        open_counts: dict[str, int] = {}
        position = 0

        for match in _TAG_TOKEN.finditer(text):
            if match.start() > position:
                tree._append_text(stack[-1], text[position:match.start()])
            position = match.end()

            closing = match.group(1) == "/"
            spec = self.tags.get(match.group(2).lower())
            current = tree.nodes[stack[-1]]

            if spec is None:
                tree._append_text(stack[-1], match.group(0))
            elif not closing:
                if current.content_type not in spec.allowed_in:
                    tree._append_text(stack[-1], match.group(0))
                    continue
                stack.append(tree._open(stack[-1], spec, match.group(0), match.end()))
                open_counts[spec.name] = open_counts.get(spec.name, 0) + 1
            else:
                level = self._find_open(tree, stack, open_counts, spec.name)
                if level is None:
                    tree._append_text(stack[-1], match.group(0))
                    continue
                while len(stack) - 1 > level:
                    unclosed = tree.nodes[stack.pop()]
                    logger.debug("Unclosed [%s] kept as text", unclosed.kind)
                    unclosed.reverted = True
                    open_counts[unclosed.spec.name] -= 1
                closed = tree.nodes[stack.pop()]
                closed.content_end = match.start()
                open_counts[spec.name] -= 1

        if position < len(text):
            tree._append_text(stack[-1], text[position:])
        for index in stack[1:]:
            tree.nodes[index].reverted = True

        tree._compute_depths()
        return tree

    @staticmethod
    def _find_open(
        tree: TagTree, stack: list[int], open_counts: dict[str, int], name: str
    ) -> int | None:
        """Return the stack level of the innermost open ``name`` tag.

        Every node skipped on the way down is reverted by the caller, so the
        walk costs no more than the nodes it closes.
        """
        top = tree.nodes[stack[-1]]
        # Code content is literal: only its own closer ends it.
        if top.content_type == CODE_CONTENT:
            return len(stack) - 1 if top.kind == name else None
        if not open_counts.get(name):
            return None
        for level in range(len(stack) - 1, 0, -1):
            if tree.nodes[stack[level]].kind == name:
                return level
        return None

    @staticmethod
    def wrappers(node: MarkupNode) -> tuple[str, str]:
        """Return the markup placed around a live node's content."""
        assert node.spec is not None
        if node.spec.name == "code" and _has_multiple_lines(_literal_text(node)):
            return "<pre>", "</pre>"
        if node.spec.name in SUBSCRIPT_TAGS and node.under_subscript:
            return "", ""
        if node.depth > MAX_TAG_DEPTH:
            return "", ""
        return node.spec.start, node.spec.end

    def render(self, tree: TagTree) -> str:
        """Render a parsed tree to HTML."""
        nonempty = tree._nonempty()
        output: list[str] = []
        pending: list[str | int] = [0]
        while pending:
            item = pending.pop()
            if isinstance(item, str):
                output.append(item)
                continue
            node = tree.nodes[item]
            if item and not nonempty[item]:
                continue
            if node.reverted:
                output.append(node.open_text)
            elif item:
                start, end = self.wrappers(node)
                output.append(start)
                pending.append(end)
            pending.extend(reversed(node.children))
        return "".join(output)

    def to_html(self, text: str) -> str:
        return self.render(self.parse(text))


_BASE_PARSER = MarkupParser(BASE_TAGS)
_ARCHIVE_PARSER = MarkupParser(BASE_TAGS + ARCHIVE_TAGS)


def get_markup_parser(archive_context: bool = False) -> MarkupParser:
    """Return the shared parser, with the archive-only tags when requested."""
    return _ARCHIVE_PARSER if archive_context else _BASE_PARSER


def render_markup(text: str, *, archive_context: bool = False) -> str:
    """Parse ``text`` and return its HTML rendering."""
    return get_markup_parser(archive_context).to_html(text)
