"""Layout defaults and the post-children layout corrections."""

from typing import Any, Dict

from normalizer.base import LAYOUT_DEFAULTS, SizingMode
from normalizer.nodes import NormalizedNode

# raw key -> dataclass attribute
_LAYOUT_ATTRIBUTES = {
    'layoutMode': 'layout_mode',
    'layoutSizingHorizontal': 'layout_sizing_horizontal',
    'layoutSizingVertical': 'layout_sizing_vertical',
    'layoutGrow': 'layout_grow',
    'primaryAxisAlignItems': 'primary_axis_align_items',
    'counterAxisAlignItems': 'counter_axis_align_items',
    'paddingLeft': 'padding_left',
    'paddingRight': 'padding_right',
    'paddingTop': 'padding_top',
    'paddingBottom': 'padding_bottom',
    'itemSpacing': 'item_spacing',
    'primaryAxisSizingMode': 'primary_axis_sizing_mode',
    'counterAxisSizingMode': 'counter_axis_sizing_mode',
}


def apply_layout_defaults(node: NormalizedNode, raw: Dict[str, Any]) -> None:
    """Copy layout fields from ``raw``, falling back to the fixed defaults."""
    for key, attribute in _LAYOUT_ATTRIBUTES.items():
        setattr(node, attribute, raw.get(key) or LAYOUT_DEFAULTS[key])
    node.layout_positioning = raw.get('layoutPositioning')


def finalize_layout(node: NormalizedNode) -> None:
    """Corrections that need the final child list."""
    has_children = bool(node.children)

    # Nothing to hug
    if node.layout_sizing_horizontal == SizingMode.HUG.value and not has_children:
        node.layout_sizing_horizontal = SizingMode.FIXED.value
    if node.layout_sizing_vertical == SizingMode.HUG.value and not has_children:
        node.layout_sizing_vertical = SizingMode.FIXED.value

    node.is_relative = node.layout_mode == 'NONE' or any(
        child.layout_positioning == 'ABSOLUTE' for child in node.children or []
    )
