"""
Icon detection and inline SVG synthesis.

Two paths make a node flattenable:

1. a VECTOR with ``fillGeometry`` is always flattenable;
2. any small, near-square node (or one holding a vector) whose parent is
   not flattenable already, since flattening does not nest.

Flattenable nodes with their own geometry get an SVG straight away.
Nodes without geometry pick up the paths of their vector children once
those children are final, and the children are dropped from the tree.
"""

import html
import logging
from typing import Any, Dict, List, Optional

from normalizer.base import (
    DEFAULT_SVG_SIZE, DEFAULT_VECTOR_FILL, SVG_NAMESPACE, NodeType,
    first_solid_fill, format_number, is_visible,
)
from normalizer.nodes import GroupNode, NormalizedNode, VectorNode
from normalizer.settings import ConversionSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def has_vector_geometry(raw: Dict[str, Any]) -> bool:
    return raw.get('type') == NodeType.VECTOR.value and bool(raw.get('fillGeometry'))


def contains_vector(raw: Dict[str, Any]) -> bool:
    """True if ``raw`` or any visible descendant is a VECTOR."""
    if raw.get('type') == NodeType.VECTOR.value:
        return True
    return any(
        contains_vector(child)
        for child in raw.get('children') or []
        if isinstance(child, dict) and is_visible(child)
    )


def is_likely_icon(width: Optional[float], height: Optional[float], raw: Dict[str, Any],
                   settings: ConversionSettings) -> bool:
    """Small and square-ish, or small and vector-bearing."""
    if not width or not height:
        return False

    is_small = width <= settings.icon_max_size and height <= settings.icon_max_size
    if not is_small:
        return False

    is_squareish = abs(width - height) <= max(width, height) * settings.icon_squareness_ratio
    return is_squareish or contains_vector(raw)


def can_be_flattened(node: NormalizedNode, raw: Dict[str, Any],
                     parent: Optional[NormalizedNode], settings: ConversionSettings) -> bool:
    if not settings.embed_vectors:
        return False
    if has_vector_geometry(raw):
        return True
    # Groups are transparent: look through them to the real container
    while isinstance(parent, GroupNode):
        parent = parent.parent
    parent_flattened = parent is not None and parent.can_be_flattened
    if not parent_flattened and is_likely_icon(node.width, node.height, raw, settings):
        logger.debug(f"Detected potential icon: {node.name} ({node.width}x{node.height})")
        return True
    return False


# ---------------------------------------------------------------------------
# SVG synthesis
# ---------------------------------------------------------------------------

def _fill_rule(geometry: Dict[str, Any]) -> str:
    return 'evenodd' if geometry.get('windingRule') == 'EVENODD' else 'nonzero'


def geometry_paths(geometry: List[Dict[str, Any]], fills: Optional[List[Dict[str, Any]]]) -> List[str]:
    """One ``<path>`` element per geometry entry, colored by the first solid fill."""
    color = first_solid_fill(fills)
    fill_color = color.hex if color else DEFAULT_VECTOR_FILL
    paths = []
    for entry in geometry or []:
        data = html.escape(str(entry.get('path', '')), quote=True)
        paths.append(f'<path d="{data}" fill="{fill_color}" fill-rule="{_fill_rule(entry)}"/>')
    return paths


def build_svg(width: Optional[float], height: Optional[float], paths: List[str]) -> str:
    if not paths:
        return ''
    w = format_number(width or DEFAULT_SVG_SIZE)
    h = format_number(height or DEFAULT_SVG_SIZE)
    body = '\n  '.join(paths)
    return (
        f'<svg width="{w}" height="{h}" viewBox="0 0 {w} {h}" fill="none" xmlns="{SVG_NAMESPACE}">\n'
        f'  {body}\n'
        f'</svg>'
    )


def svg_from_own_geometry(node: NormalizedNode, raw: Dict[str, Any]) -> str:
    geometry = raw.get('fillGeometry')
    if not isinstance(geometry, list):
        return ''
    return build_svg(node.width, node.height, geometry_paths(geometry, node.fills))


def flatten_vector_children(node: NormalizedNode) -> None:
    """Merge geometry-bearing VECTOR children into ``node.svg`` and drop them."""
    if not node.can_be_flattened or node.svg or not node.children:
        return

    vectors = [
        child for child in node.children
        if isinstance(child, VectorNode) and child.fill_geometry
    ]
    if not vectors:
        return

    paths: List[str] = []
    for vector in vectors:
        paths.extend(geometry_paths(vector.fill_geometry, vector.fills))

    node.svg = build_svg(node.width, node.height, paths)
    consumed = {id(vector) for vector in vectors}
    node.children = [child for child in node.children if id(child) not in consumed]
    logger.debug(f"Generated SVG for {node.name} from {len(vectors)} vector children")
