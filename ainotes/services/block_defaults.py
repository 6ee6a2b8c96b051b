# Contenu de départ proposé par le sélecteur de type de block

from typing import Any

from ainotes.models.block import BlockType

BLOCK_TYPES = [
    {"type": "text", "label": "Text", "description": "Basic text paragraph"},
    {"type": "heading", "label": "Heading", "description": "Section heading"},
    {"type": "list", "label": "List", "description": "Bulleted list"},
    {"type": "code", "label": "Code", "description": "Code block"},
    {"type": "image", "label": "Image", "description": "Image with caption"},
]

DEFAULT_CONTENT = {
    "text": "Start typing...",
    "heading": "New Heading",
    "list": "• First item\n• Second item\n• Third item",
    "code": "// Enter your code here",
    "image": "https://via.placeholder.com/400x200",
}

DEFAULT_METADATA = {
    "heading": {"level": 1},
    "code": {"language": "javascript"},
}


def default_draft(block_type: BlockType) -> dict[str, Any]:
    return {
        "type": block_type,
        "content": DEFAULT_CONTENT[block_type],
        "metadata": DEFAULT_METADATA.get(block_type),
    }
