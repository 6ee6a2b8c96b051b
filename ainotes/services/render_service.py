"""
Rendu HTML des blocks.

Fonctions pures : un block (validé) donne toujours du HTML, jamais d'exception.
Tout le contenu utilisateur est échappé.
"""

import re
from html import escape
from typing import Optional, Sequence

from ainotes.models.block import Block, CodeBlock, HeadingBlock, ImageBlock, ListBlock

_BULLET_RE = re.compile(r"^[•\-\*]\s*")

EMPTY_STATE = (
    '<div class="empty-state">'
    '<div class="empty-state-title">📝 Your canvas awaits</div>'
    "<p>Click the + button to add your first block, or use the prompt bar above</p>"
    "</div>"
)


def heading_level(block: HeadingBlock) -> int:
    # h1..h6, 1 par défaut
    level = block.metadata.level or 1
    return min(max(level, 1), 6)


def list_items(content: str) -> list[str]:
    return [_BULLET_RE.sub("", line.strip()) for line in content.split("\n") if line.strip()]


def _render_content(block: Block) -> str:
    if isinstance(block, HeadingBlock):
        level = heading_level(block)
        return f"<h{level}>{escape(block.content)}</h{level}>"

    if isinstance(block, ListBlock):
        items = "".join(f"<li>{escape(item)}</li>" for item in list_items(block.content))
        return f"<ul>{items}</ul>"

    if isinstance(block, CodeBlock):
        badge = ""
        if block.metadata.language:
            badge = f'<div class="code-language">{escape(block.metadata.language)}</div>'
        return f"{badge}<pre><code>{escape(block.content)}</code></pre>"

    if isinstance(block, ImageBlock):
        src = block.metadata.url or block.content
        alt = block.metadata.alt or "Generated image"
        html = f'<img src="{escape(src)}" alt="{escape(alt)}" />'
        if block.metadata.alt:
            html += f'<p class="caption">{escape(block.metadata.alt)}</p>'
        return html

    # text (et tout le reste)
    return f"<p>{escape(block.content)}</p>"


def format_timestamp(block: Block) -> str:
    return block.updated_at.strftime("%b %d, %I:%M %p")


def render_block(block: Block, selected: bool = False) -> str:
    classes = f"block block-{block.type}" + (" selected" if selected else "")
    return (
        f'<div class="{classes}" data-block-id="{escape(block.id)}">'
        f'<div class="block-content">{_render_content(block)}</div>'
        f'<footer><span>{block.type.capitalize()} block</span>'
        f'<time datetime="{block.updated_at.isoformat()}">{format_timestamp(block)}</time></footer>'
        "</div>"
    )


def render_document(blocks: Sequence[Block], selected_id: Optional[str] = None) -> str:
    if not blocks:
        return EMPTY_STATE
    return "\n".join(render_block(b, selected=b.id == selected_id) for b in blocks)
