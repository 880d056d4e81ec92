"""Figma scene tree normalization for code generators."""

from normalizer.context import ConversionContext
from normalizer.extraction import extract_nodes
from normalizer.nodes import NormalizedNode, TextNode, TextSegment, VectorNode, nodes_to_dicts
from normalizer.pipeline import normalize
from normalizer.settings import CodeFramework, ConversionSettings

__all__ = [
    'CodeFramework',
    'ConversionContext',
    'ConversionSettings',
    'NormalizedNode',
    'TextNode',
    'TextSegment',
    'VectorNode',
    'extract_nodes',
    'nodes_to_dicts',
    'normalize',
]
