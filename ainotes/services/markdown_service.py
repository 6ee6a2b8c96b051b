# IMPORTS
import re
from html import escape, unescape
from typing import Sequence
from urllib.parse import urlsplit

from ainotes.models.block import Block, CodeBlock, HeadingBlock, ImageBlock, ListBlock
from ainotes.services.render_service import heading_level, list_items

# schémas acceptés pour les liens, le reste est rendu en texte
_LINK_SCHEMES = ("http", "https", "mailto")


def _link(match: re.Match) -> str:
    label, target = match.group(1), match.group(2)
    url = unescape(target).strip()
    if urlsplit(url).scheme.lower() not in _LINK_SCHEMES:
        return label
    return f'<a href="{escape(url)}" target="_blank" rel="noopener noreferrer">{label}</a>'


# (pattern, remplacement), appliqués dans cet ordre
_MARKDOWN_RULES = [
    # Titres
    (re.compile(r"^### (.*)$", re.MULTILINE), r"<h3>\1</h3>"),
    (re.compile(r"^## (.*)$", re.MULTILINE), r"<h2>\1</h2>"),
    (re.compile(r"^# (.*)$", re.MULTILINE), r"<h1>\1</h1>"),
    # Gras puis italique
    (re.compile(r"\*\*(.*?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.*?)\*"), r"<em>\1</em>"),
    # Blocs de code avant le code inline, sinon ``` est mangé par `...`
    (re.compile(r"```([\s\S]*?)```"), r"<pre><code>\1</code></pre>"),
    (re.compile(r"`(.*?)`"), r"<code>\1</code>"),
    # Liens
    (re.compile(r"\[([^\]]+)\]\(([^)]+)\)"), _link),
    # Listes
    (re.compile(r"^\s*\* (.+)$", re.MULTILINE), r"<li>\1</li>"),
    (re.compile(r"^\s*- (.+)$", re.MULTILINE), r"<li>\1</li>"),
]


# func 1: render_markdown()
def render_markdown(text: str) -> str:
    html = escape(text)
    for pattern, replacement in _MARKDOWN_RULES:
        html = pattern.sub(replacement, html)
    return html.replace("\n", "<br />")


# func 2: text_stats()
def text_stats(text: str) -> dict[str, int]:
    return {"characters": len(text), "lines": len(text.split("\n"))}


# func 3: export_markdown()
def block_to_markdown(block: Block) -> str:
    if isinstance(block, HeadingBlock):
        return f"{'#' * heading_level(block)} {block.content}"
    if isinstance(block, ListBlock):
        return "\n".join(f"- {item}" for item in list_items(block.content))
    if isinstance(block, CodeBlock):
        return f"```{block.metadata.language or ''}\n{block.content}\n```"
    if isinstance(block, ImageBlock):
        return f"![{block.metadata.alt or ''}]({block.metadata.url or block.content})"
    return block.content


def export_markdown(blocks: Sequence[Block]) -> str:
    # un bloc markdown par block, séparés par une ligne vide
    return "\n\n".join(block_to_markdown(b) for b in blocks) + ("\n" if blocks else "")
