"""
Shared constants, enums and paint helpers for the normalization pipeline.

Everything here is pure data or pure functions so each pass module can
import it without pulling in the walker.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

UNNAMED = 'unnamed'
NAME_SUFFIX_WIDTH = 2

# Icon heuristic defaults (overridable through ConversionSettings)
ICON_MAX_SIZE = 48
ICON_SQUARENESS_RATIO = 0.5

DEFAULT_SVG_SIZE = 24
DEFAULT_VECTOR_FILL = '#000000'
SVG_NAMESPACE = 'http://www.w3.org/2000/svg'

PLACEHOLDER_IMAGE_BASE = 'https://placehold.co'
PLACEHOLDER_FALLBACK_SIZE = 100

LAYOUT_DEFAULTS: Dict[str, Any] = {
    'layoutMode': 'NONE',
    'layoutSizingHorizontal': 'FIXED',
    'layoutSizingVertical': 'FIXED',
    'layoutGrow': 0,
    'primaryAxisAlignItems': 'MIN',
    'counterAxisAlignItems': 'MIN',
    'paddingLeft': 0,
    'paddingRight': 0,
    'paddingTop': 0,
    'paddingBottom': 0,
    'itemSpacing': 0,
    'primaryAxisSizingMode': 'AUTO',
    'counterAxisSizingMode': 'AUTO',
}

TEXT_STYLE_DEFAULTS: Dict[str, Any] = {
    'fontSize': 16,
    'fontFamily': 'Inter',
    'fontStyle': 'Regular',
    'fontWeight': 400,
    'letterSpacing': 0,
    'lineHeight': {'unit': 'AUTO'},
    'textCase': 'ORIGINAL',
    'textDecoration': 'NONE',
}

OPEN_TYPE_FEATURES: Dict[str, bool] = {
    'SUBS': False,
    'SUPS': False,
    'LIGA': True,
    'KERN': True,
}

# Raw fields copied onto the normalized node untouched
PASSTHROUGH_FIELDS = (
    'absoluteBoundingBox',
    'strokeWeight',
    'strokeAlign',
    'strokeDashes',
    'cornerRadius',
    'rectangleCornerRadii',
    'constraints',
    'componentId',
    'overrides',
    'interactions',
    'opacity',
    'blendMode',
    'clipsContent',
    'layoutWrap',
    'layoutAlign',
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class NodeType(str, Enum):
    """Figma node types the pipeline treats specially."""
    FRAME = "FRAME"
    GROUP = "GROUP"
    TEXT = "TEXT"
    VECTOR = "VECTOR"
    RECTANGLE = "RECTANGLE"
    COMPONENT = "COMPONENT"
    INSTANCE = "INSTANCE"


class SizingMode(str, Enum):
    """Auto-layout sizing of one axis."""
    FIXED = "FIXED"
    HUG = "HUG"
    FILL = "FILL"


# ---------------------------------------------------------------------------
# Paint helpers
# ---------------------------------------------------------------------------

@dataclass
class ColorValue:
    """Figma RGBA color with channels in 0..1."""
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 1.0

    @classmethod
    def from_figma(cls, color: Dict[str, float]) -> 'ColorValue':
        return cls(
            r=color.get('r', 0),
            g=color.get('g', 0),
            b=color.get('b', 0),
            a=color.get('a', 1),
        )

    @property
    def hex(self) -> str:
        """Opaque #rrggbb, alpha ignored."""
        r = round_half_up(self.r * 255)
        g = round_half_up(self.g * 255)
        b = round_half_up(self.b * 255)
        return f"#{r:02x}{g:02x}{b:02x}"


def is_visible(item: Optional[Dict[str, Any]]) -> bool:
    return bool(item) and item.get('visible', True) is not False


def first_solid_fill(fills: Optional[List[Dict[str, Any]]]) -> Optional[ColorValue]:
    """Color of the first visible SOLID paint, if any."""
    for fill in fills or []:
        if not is_visible(fill) or fill.get('type') != 'SOLID':
            continue
        color = fill.get('color')
        if color:
            return ColorValue.from_figma(color)
    return None


def format_number(value: float) -> str:
    """Render a number the way markup expects: 24 not 24.0."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def round_half_up(value: float) -> int:
    """Round with halves going up (``round`` sends 2.5 to 2)."""
    return math.floor(value + 0.5)
