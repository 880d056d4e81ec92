"""Parent-relative positions and rotation composition."""

import math
from typing import Any, Dict, Optional

from normalizer.nodes import GroupNode, NormalizedNode


def radians_to_degrees(radians: Optional[float]) -> float:
    """Figma radians (counter-clockwise) to rendering degrees (clockwise)."""
    if not radians:
        return 0
    return -radians * (180 / math.pi)


def apply_geometry(node: NormalizedNode, raw: Dict[str, Any],
                   parent: Optional[NormalizedNode]) -> None:
    """Set position, size and rotation on ``node``.

    Roots are pinned to the origin. Without a bounding box the position and
    size stay unset.
    """
    bbox = raw.get('absoluteBoundingBox')
    if bbox:
        parent_box = parent.absolute_bounding_box if parent else None
        if parent_box:
            node.x = bbox['x'] - parent_box['x']
            node.y = bbox['y'] - parent_box['y']
        else:
            node.x = 0
            node.y = 0
        node.width = bbox.get('width')
        node.height = bbox.get('height')
        node.absolute_bounding_box = bbox

    rotation = radians_to_degrees(raw.get('rotation'))
    inherited = parent.cumulative_rotation if parent else 0

    if isinstance(node, GroupNode):
        # Held back and redistributed to the children when the group is inlined
        node.group_rotation = rotation
        node.rotation = 0
        node.cumulative_rotation = inherited
        return

    node.rotation = rotation
    node.cumulative_rotation = inherited + rotation


def shift_rotation(node: NormalizedNode, degrees: float) -> None:
    """Add ``degrees`` to the cumulative rotation of a whole subtree."""
    node.cumulative_rotation += degrees
    for child in node.children or []:
        shift_rotation(child, degrees)
