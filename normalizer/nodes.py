"""
Normalized node model.

One dataclass variant per node family the pipeline handles differently;
everything else uses the base ``NormalizedNode``. ``to_dict`` produces the
camelCase shape the code generators index into.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from normalizer.base import NodeType


@dataclass
class TextSegment:
    """A styled run of characters inside a text node."""
    characters: str
    unique_id: str
    start: int
    end: int
    font_size: float
    font_name: Dict[str, str]
    fills: List[Dict[str, Any]]
    font_weight: float
    letter_spacing: Any
    line_height: Any
    text_case: str
    text_decoration: str
    open_type_features: Dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'characters': self.characters,
            'uniqueId': self.unique_id,
            'start': self.start,
            'end': self.end,
            'fontSize': self.font_size,
            'fontName': dict(self.font_name),
            'fills': self.fills,
            'fontWeight': self.font_weight,
            'letterSpacing': self.letter_spacing,
            'lineHeight': self.line_height,
            'textCase': self.text_case,
            'textDecoration': self.text_decoration,
            'openTypeFeatures': dict(self.open_type_features),
        }


@dataclass
class NormalizedNode:
    id: str
    type: str
    name: str = ''
    unique_name: str = ''

    # Geometry
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    absolute_bounding_box: Optional[Dict[str, float]] = None
    rotation: float = 0
    cumulative_rotation: float = 0

    # Layout
    layout_mode: str = 'NONE'
    layout_sizing_horizontal: str = 'FIXED'
    layout_sizing_vertical: str = 'FIXED'
    layout_grow: float = 0
    primary_axis_align_items: str = 'MIN'
    counter_axis_align_items: str = 'MIN'
    padding_left: float = 0
    padding_right: float = 0
    padding_top: float = 0
    padding_bottom: float = 0
    item_spacing: float = 0
    primary_axis_sizing_mode: str = 'AUTO'
    counter_axis_sizing_mode: str = 'AUTO'
    layout_positioning: Optional[str] = None
    is_relative: bool = False

    # Paints
    fills: List[Dict[str, Any]] = field(default_factory=list)
    strokes: List[Dict[str, Any]] = field(default_factory=list)
    effects: List[Dict[str, Any]] = field(default_factory=list)

    # Vectors
    can_be_flattened: bool = False
    svg: Optional[str] = None

    children: Optional[List['NormalizedNode']] = None
    parent: Optional['NormalizedNode'] = field(default=None, repr=False, compare=False)
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the subtree; ``parent`` is dropped."""
        out: Dict[str, Any] = dict(self.extras)
        out.update({
            'id': self.id,
            'type': self.type,
            'name': self.name,
            'uniqueName': self.unique_name,
        })
        for key, value in (('x', self.x), ('y', self.y),
                           ('width', self.width), ('height', self.height)):
            if value is not None:
                out[key] = value

        out.update({
            'rotation': self.rotation,
            'cumulativeRotation': self.cumulative_rotation,
            'layoutMode': self.layout_mode,
            'layoutSizingHorizontal': self.layout_sizing_horizontal,
            'layoutSizingVertical': self.layout_sizing_vertical,
            'layoutGrow': self.layout_grow,
            'primaryAxisAlignItems': self.primary_axis_align_items,
            'counterAxisAlignItems': self.counter_axis_align_items,
            'paddingLeft': self.padding_left,
            'paddingRight': self.padding_right,
            'paddingTop': self.padding_top,
            'paddingBottom': self.padding_bottom,
            'itemSpacing': self.item_spacing,
            'primaryAxisSizingMode': self.primary_axis_sizing_mode,
            'counterAxisSizingMode': self.counter_axis_sizing_mode,
            'isRelative': self.is_relative,
            'fills': self.fills,
            'strokes': self.strokes,
            'effects': self.effects,
            'canBeFlattened': self.can_be_flattened,
        })
        if self.layout_positioning:
            out['layoutPositioning'] = self.layout_positioning
        if self.svg:
            out['svg'] = self.svg
        out.update(self._variant_fields())
        if self.children is not None:
            out['children'] = [child.to_dict() for child in self.children]
        return out

    def _variant_fields(self) -> Dict[str, Any]:
        return {}


@dataclass
class TextNode(NormalizedNode):
    characters: str = ''
    style: Dict[str, Any] = field(default_factory=dict)
    styled_text_segments: List[TextSegment] = field(default_factory=list)
    character_style_overrides: Optional[List[int]] = None
    style_override_table: Optional[Dict[str, Any]] = None
    line_types: Optional[List[str]] = None
    line_indentations: Optional[List[int]] = None

    def _variant_fields(self) -> Dict[str, Any]:
        # Generators read text style keys straight off the node
        out: Dict[str, Any] = dict(self.style)
        out['characters'] = self.characters
        if self.style:
            out['style'] = self.style
        if self.styled_text_segments:
            out['styledTextSegments'] = [s.to_dict() for s in self.styled_text_segments]
        optional = {
            'characterStyleOverrides': self.character_style_overrides,
            'styleOverrideTable': self.style_override_table,
            'lineTypes': self.line_types,
            'lineIndentations': self.line_indentations,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out


@dataclass
class VectorNode(NormalizedNode):
    fill_geometry: List[Dict[str, Any]] = field(default_factory=list)
    stroke_geometry: List[Dict[str, Any]] = field(default_factory=list)

    def _variant_fields(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.fill_geometry:
            out['fillGeometry'] = self.fill_geometry
        if self.stroke_geometry:
            out['strokeGeometry'] = self.stroke_geometry
        return out


@dataclass
class GroupNode(NormalizedNode):
    """Transient: spliced into its parent before anything is emitted."""
    group_rotation: float = 0


NODE_VARIANTS: Dict[str, Type[NormalizedNode]] = {
    NodeType.TEXT.value: TextNode,
    NodeType.VECTOR.value: VectorNode,
    NodeType.GROUP.value: GroupNode,
}


def node_class_for(node_type: Optional[str]) -> Type[NormalizedNode]:
    return NODE_VARIANTS.get(node_type or '', NormalizedNode)


def nodes_to_dicts(nodes: List[NormalizedNode]) -> List[Dict[str, Any]]:
    return [node.to_dict() for node in nodes]
