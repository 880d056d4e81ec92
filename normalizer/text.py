"""
Styled text segments for TEXT nodes.

Figma's plugin API splits text into runs with ``getStyledTextSegments``.
The REST export only carries a base ``style`` plus per-character override
tables, so a node is rendered as one run covering the whole string and the
override tables are handed through for generators that want to do more.
"""

import re
from typing import Any, Dict, List, Optional

from normalizer.base import OPEN_TYPE_FEATURES, TEXT_STYLE_DEFAULTS
from normalizer.nodes import TextNode, TextSegment

_SEGMENT_NAME_PATTERN = re.compile(r'[^a-zA-Z0-9_-]')


def _segment_id(name: str) -> str:
    return _SEGMENT_NAME_PATTERN.sub('', name or 'text').lower() + '_span'


def build_text_segments(raw: Dict[str, Any],
                        fills: Optional[List[Dict[str, Any]]] = None) -> List[TextSegment]:
    """One segment spanning all of ``raw['characters']``."""
    characters = raw.get('characters') or ''
    if not characters:
        return []

    style = raw.get('style') or {}
    if style.get('fontFamily'):
        font_name = {
            'family': style['fontFamily'],
            'style': style.get('fontStyle') or TEXT_STYLE_DEFAULTS['fontStyle'],
        }
    else:
        font_name = {
            'family': TEXT_STYLE_DEFAULTS['fontFamily'],
            'style': TEXT_STYLE_DEFAULTS['fontStyle'],
        }

    segment = TextSegment(
        characters=characters,
        unique_id=_segment_id(raw.get('name')),
        start=0,
        end=len(characters),
        font_size=style.get('fontSize') or TEXT_STYLE_DEFAULTS['fontSize'],
        font_name=font_name,
        fills=list(fills if fills is not None else raw.get('fills') or []),
        font_weight=style.get('fontWeight') or TEXT_STYLE_DEFAULTS['fontWeight'],
        letter_spacing=style.get('letterSpacing') or TEXT_STYLE_DEFAULTS['letterSpacing'],
        line_height=style.get('lineHeight') or dict(TEXT_STYLE_DEFAULTS['lineHeight']),
        text_case=style.get('textCase') or TEXT_STYLE_DEFAULTS['textCase'],
        text_decoration=style.get('textDecoration') or TEXT_STYLE_DEFAULTS['textDecoration'],
        open_type_features=dict(OPEN_TYPE_FEATURES),
    )
    return [segment]


def apply_text(node: TextNode, raw: Dict[str, Any]) -> None:
    """Fill the text-specific fields of ``node``."""
    node.characters = raw.get('characters') or ''
    if not node.characters:
        return

    node.styled_text_segments = build_text_segments(raw, node.fills)
    node.style = dict(raw.get('style') or {})
    node.character_style_overrides = raw.get('characterStyleOverrides')
    node.style_override_table = raw.get('styleOverrideTable')
    node.line_types = raw.get('lineTypes')
    node.line_indentations = raw.get('lineIndentations')
