"""Markdown post to :class:`ContentRecord`.

Fenced code is highlighted with Pygments, headings get slug ids and links
are checked and rewritten. :class:`Renderer` keeps no state between calls:
each call builds its own ``markdown.Markdown`` (which is not reentrant) and
its own Pygments lexer and formatter, so one renderer may serve many
threads at once.
"""

from __future__ import annotations

import html
import re
import xml.etree.ElementTree as etree
from collections.abc import Collection
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

import markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .errors import PostgenError, RenderError
from .frontmatter import GlobalMetadata, parse_front_matter
from .identity import require_identity, resolve_identity

DESCRIPTION_LENGTH = 100
FENCED_BLOCK_RE = re.compile(
    r"(?P<fence>^(?:~{3,}|`{3,}))[ ]*(?P<lang>[^\s`]*)[^\n]*\n(?P<code>.*?)(?<=\n)(?P=fence)[ ]*$",
    re.MULTILINE | re.DOTALL,
)
TAG_RE = re.compile(r"<[^>]+>")
PRE_RE = re.compile(r"<pre\b.*?</pre>", re.IGNORECASE | re.DOTALL)
NO_HIGHLIGHT = {"no-highlight", "nohighlight"}


@dataclass(frozen=True)
class ContentRecord:
    name: str
    content: str
    metadata: dict
    unlisted: bool = False

    def to_json(self) -> dict:
        data = {"content": self.content, "name": self.name, "metadata": self.metadata}
        if self.unlisted:
            data["unlisted"] = True
        return data


def get_language(info: str) -> Optional[str]:
    if not info or info in NO_HIGHLIGHT:
        return None
    for prefix in ("language-", "lang-"):
        if info.startswith(prefix):
            return info[len(prefix) :]
    return info


def highlight_code(code: str, info: str) -> str:
    """HTML for one fenced block. Unknown languages raise RenderError."""
    if info in NO_HIGHLIGHT:
        return f"<pre><code>{html.escape(code)}</code></pre>"
    lang = get_language(info) or "text"
    try:
        lexer = get_lexer_by_name(lang)
    except ClassNotFound as exc:
        raise RenderError(f"Cannot highlight code block: unknown language '{lang}'") from exc
    formatter = HtmlFormatter(cssclass="codehilite")
    return highlight(code, lexer, formatter)


class HighlightPreprocessor(Preprocessor):
    def run(self, lines: list[str]) -> list[str]:
        text = "\n".join(lines)
        while True:
            m = FENCED_BLOCK_RE.search(text)
            if m is None:
                break
            placeholder = self.md.htmlStash.store(highlight_code(m.group("code"), m.group("lang")))
            text = f"{text[: m.start()]}\n{placeholder}\n{text[m.end() :]}"
        return text.split("\n")


class LinkProcessor(Treeprocessor):
    def __init__(self, md, known_identities: Collection[str]):
        super().__init__(md)
        self.known_identities = known_identities

    def run(self, root: etree.Element) -> None:
        for el in root.iter("a"):
            href = el.get("href")
            if not href or href.startswith("#"):
                continue
            parts = urlsplit(href)
            if parts.scheme or parts.netloc:
                el.set("target", "_blank")
                el.set("rel", "noreferrer noopener")
                el.set("data-extlink", "")
                continue
            el.set("href", self.local_link(href))

    def local_link(self, href: str) -> str:
        decoded = unquote(href)
        name = resolve_identity(decoded)
        if name is None or name not in self.known_identities:
            raise RenderError(f"'{decoded}' is expected to be a valid local path")
        return f"./{name}"


class PostExtension(Extension):
    def __init__(self, known_identities: Collection[str], **kwargs):
        super().__init__(**kwargs)
        self.known_identities = known_identities

    def extendMarkdown(self, md):
        # Ahead of the html_block preprocessor so code is stashed untouched.
        md.preprocessors.register(HighlightPreprocessor(md), "highlight_fenced", 25)
        md.treeprocessors.register(LinkProcessor(md, self.known_identities), "post_links", 5)


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def make_description(html_text: str) -> str:
    text = html.unescape(strip_tags(PRE_RE.sub(" ", html_text)))
    text = re.sub(r"\s*\n\s*", " ", text).strip()
    if len(text) > DESCRIPTION_LENGTH:
        return text[:DESCRIPTION_LENGTH].strip() + "..."
    return text


class Renderer:
    """Turns one markdown source into a ContentRecord, or None for drafts.

    Args:
        metadata: Global series/category declarations that front matter
            must refer to, if any.
        toc_depth: Heading levels that receive slug ids.
    """

    def __init__(self, metadata: Optional[GlobalMetadata] = None, toc_depth: str = "1-6"):
        self.metadata = metadata
        self.toc_depth = toc_depth

    def render(self, path: str | Path, text: str, known_identities: Collection[str]) -> Optional[ContentRecord]:
        name = require_identity(path)
        front_matter, body = parse_front_matter(text, self.metadata)
        if front_matter.skip:
            return None

        md = markdown.Markdown(
            extensions=["tables", "toc", PostExtension(known_identities)],
            extension_configs={"toc": {"toc_depth": self.toc_depth}},
        )
        try:
            content = md.convert(body)
        except PostgenError:
            raise
        except Exception as exc:
            raise RenderError(f"Markdown rendering failed: {exc}") from exc

        description = front_matter.description
        if description is None:
            description = make_description(content)
        return ContentRecord(
            name=name,
            content=content,
            metadata=front_matter.to_metadata(description),
            unlisted=front_matter.unlisted,
        )
