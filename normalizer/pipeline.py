"""
Normalization pipeline.

Pass 1 walks the raw tree top-down and builds every node's own fields:
identity, geometry, layout defaults, paints, text runs and flattening
eligibility. Pass 2 walks the result bottom-up and does the work that
needs final children: vector aggregation, group inlining, HUG correction
and the relative-positioning flag.

A node that fails in either pass is logged and dropped on its own; its
siblings are unaffected.
"""

import logging
from typing import Any, Dict, List, Optional

from normalizer.base import PASSTHROUGH_FIELDS, NodeType, is_visible
from normalizer.context import ConversionContext
from normalizer.geometry import apply_geometry, shift_rotation
from normalizer.layout import apply_layout_defaults, finalize_layout
from normalizer.nodes import GroupNode, NormalizedNode, TextNode, VectorNode, node_class_for
from normalizer.paints import copy_paints, resolve_color_variables, resolve_image_fills
from normalizer.settings import ConversionSettings
from normalizer.text import apply_text
from normalizer.vectors import can_be_flattened, flatten_vector_children, svg_from_own_geometry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pass 1: top-down
# ---------------------------------------------------------------------------

def _passthrough(raw: Dict[str, Any]) -> Dict[str, Any]:
    extras = {key: raw[key] for key in PASSTHROUGH_FIELDS if key in raw}
    weights = raw.get('individualStrokeWeights')
    if isinstance(weights, dict):
        extras['strokeTopWeight'] = weights.get('top')
        extras['strokeBottomWeight'] = weights.get('bottom')
        extras['strokeLeftWeight'] = weights.get('left')
        extras['strokeRightWeight'] = weights.get('right')
    return extras


def _link_main_component(node: NormalizedNode, raw: Dict[str, Any],
                         context: ConversionContext) -> None:
    """Name the main component of an instance when the document holds it."""
    component_id = raw.get('componentId')
    if not component_id:
        return
    component = context.get_node_by_id(component_id)
    if component is None:
        logger.debug(f"Main component {component_id} of {node.name} is not in this document")
        return
    node.extras['mainComponentName'] = component.get('name') or ''


def _build_node(raw: Dict[str, Any], parent: Optional[NormalizedNode],
                context: ConversionContext) -> Optional[NormalizedNode]:
    """Build ``raw`` and its visible descendants. None when ``raw`` is skipped."""
    if not raw.get('id'):
        logger.warning("Skipping node without id")
        return None
    if raw.get('visible') is False:
        logger.debug(f"Skipping invisible node: {raw.get('name') or raw['id']}")
        return None

    node_cls = node_class_for(raw.get('type'))
    node = node_cls(id=raw['id'], type=raw.get('type') or '', name=raw.get('name') or '')
    node.parent = parent
    node.unique_name = context.unique_name(raw.get('name'))

    apply_geometry(node, raw, parent)
    apply_layout_defaults(node, raw)

    node.fills = copy_paints(raw.get('fills'))
    node.strokes = copy_paints(raw.get('strokes'))
    node.effects = copy_paints(raw.get('effects'))
    node.extras = _passthrough(raw)
    _link_main_component(node, raw, context)

    if context.settings.use_color_variables:
        resolve_color_variables(node, context)
    resolve_image_fills(node)

    if isinstance(node, TextNode):
        apply_text(node, raw)
    elif isinstance(node, VectorNode):
        node.fill_geometry = list(raw.get('fillGeometry') or [])
        node.stroke_geometry = list(raw.get('strokeGeometry') or [])

    # Groups are never emitted, so they never own markup
    if not isinstance(node, GroupNode):
        node.can_be_flattened = can_be_flattened(node, raw, parent, context.settings)
    if node.can_be_flattened and raw.get('fillGeometry'):
        node.svg = svg_from_own_geometry(node, raw) or None
        logger.debug(f"Generated SVG for {node.name} from own geometry")

    raw_children = raw.get('children')
    if isinstance(raw_children, list) and raw_children:
        node.children = []
        for raw_child in raw_children:
            if not isinstance(raw_child, dict) or not is_visible(raw_child):
                continue
            try:
                child = _build_node(raw_child, node, context)
            except Exception:
                child_id = raw_child.get('id')
                logger.exception(f"Failed to process child node {child_id or 'unknown'}")
                context.record_failure(child_id)
                continue
            if child is not None:
                node.children.append(child)

    return node


# ---------------------------------------------------------------------------
# Pass 2: bottom-up
# ---------------------------------------------------------------------------

def _inline_group(group: GroupNode) -> List[NormalizedNode]:
    """Replace a group by its children, handing them the group's rotation."""
    group.type = NodeType.FRAME.value
    children = group.children or []
    for child in children:
        if group.group_rotation:
            shift_rotation(child, group.group_rotation)
        child.parent = group.parent
    return children


def _finalize_children(node: NormalizedNode, context: ConversionContext) -> None:
    if node.children is None:
        return
    finalized: List[NormalizedNode] = []
    for child in node.children:
        try:
            finalized.extend(_finalize_node(child, context))
        except Exception:
            logger.exception(f"Failed to finalize node {child.id}")
            context.record_failure(child.id)
    node.children = finalized


def _finalize_node(node: NormalizedNode, context: ConversionContext) -> List[NormalizedNode]:
    """Finish ``node`` after its subtree; returns what takes its place."""
    _finalize_children(node, context)

    if isinstance(node, GroupNode):
        return _inline_group(node)

    flatten_vector_children(node)
    finalize_layout(node)
    return [node]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def normalize(raw_nodes: List[Dict[str, Any]], settings: ConversionSettings,
              context: Optional[ConversionContext] = None) -> List[NormalizedNode]:
    """Normalize a list of raw root nodes.

    ``context`` is created fresh when not given; pass one in to read the
    failure ledger afterwards or to supply a color variable table.
    """
    if context is None:
        context = ConversionContext(settings=settings)
    context.populate_node_cache(raw_nodes)
    logger.info(f"Processing {len(raw_nodes)} raw nodes")

    roots: List[NormalizedNode] = []
    for index, raw in enumerate(raw_nodes):
        node_id = raw.get('id') if isinstance(raw, dict) else None
        if not isinstance(raw, dict) or not is_visible(raw):
            continue
        try:
            logger.debug(f"Processing node {index + 1}/{len(raw_nodes)}: {node_id} ({raw.get('type')})")
            root = _build_node(raw, None, context)
            if root is not None:
                roots.extend(_finalize_node(root, context))
        except Exception:
            logger.exception(f"Failed to process node {node_id or 'unknown'}")
            context.record_failure(node_id)

    logger.info(f"Successfully processed {len(roots)} nodes")
    return roots
