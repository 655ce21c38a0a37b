"""Parse Markdown documents into a section tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Union

from mx.exceptions import ParseError
from mx.schemas import CodeBlock, Section

try:
    from markdown_it import MarkdownIt
    from markdown_it.token import Token
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise ParseError(
        "markdown-it-py is required for Markdown parsing (pip install markdown-it-py)."
    ) from exc

logger = logging.getLogger(__name__)

ROOT_LEVEL = 0


@dataclass(frozen=True)
class HeadingNode:
    level: int
    text: str


@dataclass(frozen=True)
class CodeBlockNode:
    language: str | None
    body: str


@dataclass(frozen=True)
class ParagraphNode:
    text: str


ParserNode = Union[HeadingNode, CodeBlockNode, ParagraphNode]


def parse_document(text: str) -> Section:
    """Parse Markdown text into a section tree under a synthetic root."""
    return build_sections(iter_nodes(text))


def load_document(path: Path) -> Section:
    """Read and parse a Markdown file.

    Raises:
        ParseError: If the file is missing, unreadable, or not valid UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"Failed to read markdown file {path}: {exc}") from exc
    logger.debug("Parsing %s (%d bytes)", path, len(text))
    return parse_document(text)


def iter_nodes(text: str) -> Iterator[ParserNode]:
    """Flatten the markdown-it token stream into block-level nodes.

    Fences nested in lists or blockquotes are yielded like top-level fences;
    only top-level paragraphs are yielded. Indented code blocks carry no
    language and are dropped.
    """
    tokens = MarkdownIt("commonmark").parse(text)
    for index, token in enumerate(tokens):
        if token.type == "heading_open":
            inline = tokens[index + 1]
            yield HeadingNode(level=int(token.tag[1]), text=_plain_text(inline))
        elif token.type == "fence":
            yield CodeBlockNode(language=_fence_language(token.info), body=token.content)
        elif token.type == "paragraph_open" and token.level == 0:
            yield ParagraphNode(text=_plain_text(tokens[index + 1]))


def build_sections(nodes: Iterable[ParserNode]) -> Section:
    """Nest a flat node sequence into sections keyed by heading level.

    A heading closes every open section of equal or deeper level and becomes a
    child of the nearest shallower one. Code blocks belong to the innermost open
    section; content before the first heading belongs to the root.
    """
    root = Section(title="", level=ROOT_LEVEL)
    stack: list[Section] = [root]

    for node in nodes:
        if isinstance(node, HeadingNode):
            section = Section(title=node.text, level=node.level)
            while stack[-1].level >= node.level:
                stack.pop()
            stack[-1].children.append(section)
            stack.append(section)
        elif isinstance(node, CodeBlockNode):
            stack[-1].code_blocks.append(
                CodeBlock(language=node.language, body=node.body)
            )
        elif isinstance(node, ParagraphNode):
            current = stack[-1]
            # Description is the lead paragraph, before any code or subsection.
            if (
                current.description is None
                and not current.code_blocks
                and not current.children
                and node.text
            ):
                current.description = node.text

    return root


def _plain_text(inline: Token) -> str:
    """Text of an inline token with emphasis, code and link markup removed."""
    parts: list[str] = []
    for child in inline.children or ():
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
    return "".join(parts).strip()


def _fence_language(info: str) -> str | None:
    words = info.strip().split()
    return words[0] if words else None
