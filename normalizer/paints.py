"""Image fill sources and color variable names."""

import copy
import logging
import re
from typing import Any, Dict, List, Optional

from normalizer.base import PLACEHOLDER_FALLBACK_SIZE, PLACEHOLDER_IMAGE_BASE, round_half_up
from normalizer.context import ConversionContext
from normalizer.nodes import NormalizedNode

logger = logging.getLogger(__name__)


def copy_paints(paints: Any) -> List[Dict[str, Any]]:
    """Deep copy of a paint list so annotations never touch the input."""
    if not isinstance(paints, list):
        return []
    return copy.deepcopy(paints)


def placeholder_image_url(width: Optional[float], height: Optional[float]) -> str:
    w = round_half_up(width or PLACEHOLDER_FALLBACK_SIZE)
    h = round_half_up(height or PLACEHOLDER_FALLBACK_SIZE)
    return f"{PLACEHOLDER_IMAGE_BASE}/{w}x{h}"


def image_source(fill: Dict[str, Any], width: Optional[float], height: Optional[float]) -> str:
    """Embedded data, then remote URL, then a placeholder sized to the node."""
    if fill.get('base64Url'):
        return fill['base64Url']
    if fill.get('imageUrl'):
        return fill['imageUrl']
    return placeholder_image_url(width, height)


def resolve_image_fills(node: NormalizedNode) -> None:
    for fill in node.fills:
        if fill and str(fill.get('type', '')).upper() == 'IMAGE':
            fill['resolvedImageUrl'] = image_source(fill, node.width, node.height)


def variable_color_name(variable_id: str, context: ConversionContext) -> str:
    known = context.variable_names.get(variable_id)
    if known:
        return re.sub(r'[^a-zA-Z0-9_-]+', '-', known).strip('-').lower()
    return f"var-{variable_id[-6:]}"


def _resolve_paint_variables(paints: List[Dict[str, Any]], context: ConversionContext,
                             node_id: str) -> None:
    for paint in paints:
        if not paint or paint.get('type') != 'SOLID':
            continue
        binding = (paint.get('boundVariables') or {}).get('color')
        if not binding:
            continue
        try:
            paint['variableColorName'] = variable_color_name(binding['id'], context)
        except (KeyError, TypeError) as e:
            logger.warning(f"Node {node_id}: could not resolve color variable {binding!r}: {e}")


def resolve_color_variables(node: NormalizedNode, context: ConversionContext) -> None:
    """Annotate bound solid fills and strokes with a variable name."""
    _resolve_paint_variables(node.fills, context, node.id)
    _resolve_paint_variables(node.strokes, context, node.id)
