"""Shared test fixtures for normalizer tests."""
import math

import pytest

from normalizer.settings import ConversionSettings


@pytest.fixture
def settings():
    """Plain HTML settings, vectors not embedded."""
    return ConversionSettings(framework='html')


@pytest.fixture
def vector_settings():
    """Settings with vector embedding on."""
    return ConversionSettings(framework='html', embedVectors=True)


@pytest.fixture
def rotated_frame():
    """Frame rotated by pi/2 holding one unrotated rectangle."""
    return {
        'id': '1:1',
        'name': 'Card',
        'type': 'FRAME',
        'rotation': math.pi / 2,
        'absoluteBoundingBox': {'x': 50, 'y': 50, 'width': 200, 'height': 100},
        'children': [
            {
                'id': '1:2',
                'name': 'Background',
                'type': 'RECTANGLE',
                'absoluteBoundingBox': {'x': 60, 'y': 60, 'width': 20, 'height': 20},
            },
        ],
    }


@pytest.fixture
def rotated_group_screen():
    """Screen with a GROUP rotated by pi holding two rectangles."""
    return {
        'id': '2:1',
        'name': 'Screen',
        'type': 'FRAME',
        'absoluteBoundingBox': {'x': 0, 'y': 0, 'width': 400, 'height': 800},
        'children': [
            {
                'id': '2:2',
                'name': 'Group 1',
                'type': 'GROUP',
                'rotation': math.pi,
                'absoluteBoundingBox': {'x': 10, 'y': 10, 'width': 100, 'height': 100},
                'children': [
                    {
                        'id': '2:3',
                        'name': 'Left',
                        'type': 'RECTANGLE',
                        'absoluteBoundingBox': {'x': 10, 'y': 10, 'width': 40, 'height': 40},
                    },
                    {
                        'id': '2:4',
                        'name': 'Right',
                        'type': 'RECTANGLE',
                        'rotation': math.pi / 2,
                        'absoluteBoundingBox': {'x': 60, 'y': 20, 'width': 40, 'height': 40},
                    },
                ],
            },
            {
                'id': '2:5',
                'name': 'Footer',
                'type': 'FRAME',
                'absoluteBoundingBox': {'x': 0, 'y': 700, 'width': 400, 'height': 100},
            },
        ],
    }


@pytest.fixture
def text_node():
    """Styled TEXT node with override tables."""
    return {
        'id': '3:1',
        'name': 'Title Label!',
        'type': 'TEXT',
        'characters': 'Hello world',
        'absoluteBoundingBox': {'x': 0, 'y': 0, 'width': 120, 'height': 24},
        'fills': [{'type': 'SOLID', 'visible': True, 'color': {'r': 0, 'g': 0, 'b': 0, 'a': 1}}],
        'style': {
            'fontFamily': 'Roboto',
            'fontStyle': 'Bold',
            'fontWeight': 700,
            'fontSize': 20,
            'letterSpacing': 0.5,
            'lineHeightPx': 24,
            'textCase': 'UPPER',
        },
        'characterStyleOverrides': [0, 0, 1],
        'styleOverrideTable': {'1': {'fontWeight': 400}},
    }


@pytest.fixture
def vector_geometry():
    """Two fill geometry entries, one even-odd."""
    return [
        {'path': 'M0 0L24 0L24 24L0 24Z', 'windingRule': 'NONZERO'},
        {'path': 'M4 4L20 4L20 20L4 20Z', 'windingRule': 'EVENODD'},
    ]


@pytest.fixture
def icon_frame(vector_geometry):
    """24x24 icon frame with two vector children and one rectangle."""
    return {
        'id': '4:1',
        'name': 'icon/close',
        'type': 'FRAME',
        'absoluteBoundingBox': {'x': 100, 'y': 100, 'width': 24, 'height': 24},
        'children': [
            {
                'id': '4:2',
                'name': 'Vector',
                'type': 'VECTOR',
                'absoluteBoundingBox': {'x': 100, 'y': 100, 'width': 24, 'height': 24},
                'fills': [{'type': 'SOLID', 'visible': True, 'color': {'r': 1, 'g': 0, 'b': 0, 'a': 1}}],
                'fillGeometry': vector_geometry[:1],
            },
            {
                'id': '4:3',
                'name': 'Vector',
                'type': 'VECTOR',
                'absoluteBoundingBox': {'x': 104, 'y': 104, 'width': 16, 'height': 16},
                'fills': [],
                'fillGeometry': vector_geometry[1:],
            },
            {
                'id': '4:4',
                'name': 'Hit area',
                'type': 'RECTANGLE',
                'absoluteBoundingBox': {'x': 100, 'y': 100, 'width': 24, 'height': 24},
            },
        ],
    }
