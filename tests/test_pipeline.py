"""Tests for the walker: group inlining, pruning and failure isolation."""
import math

import pytest

from normalizer.context import ConversionContext
from normalizer.nodes import GroupNode
from normalizer.pipeline import normalize
from normalizer.settings import ConversionSettings


def _ids(nodes):
    return [node.id for node in nodes]


class TestGroupInlining:
    """Groups are replaced by their children, which take over the rotation."""

    def test_group_replaced_by_children(self, settings, rotated_group_screen):
        screen = normalize([rotated_group_screen], settings)[0]
        assert _ids(screen.children) == ['2:3', '2:4', '2:5']
        assert not any(isinstance(child, GroupNode) for child in screen.children)

    def test_group_rotation_moves_to_children(self, settings, rotated_group_screen):
        left, right, footer = normalize([rotated_group_screen], settings)[0].children
        assert left.rotation == 0
        assert left.cumulative_rotation == pytest.approx(-180)
        assert right.rotation == pytest.approx(-90)
        assert right.cumulative_rotation == pytest.approx(-270)
        assert footer.cumulative_rotation == 0

    def test_group_rotation_matches_plain_nesting(self, settings):
        def tree(container_type):
            return {
                'id': '1:1', 'name': 'Root', 'type': 'FRAME',
                'children': [{
                    'id': '1:2', 'name': 'Wrapper', 'type': container_type, 'rotation': math.pi / 2,
                    'children': [{
                        'id': '1:3', 'name': 'Row', 'type': 'FRAME',
                        'children': [{'id': '1:4', 'name': 'Dot', 'type': 'ELLIPSE'}],
                    }],
                }],
            }

        framed = normalize([tree('FRAME')], settings)[0].children[0].children[0]
        grouped = normalize([tree('GROUP')], settings)[0].children[0]
        assert grouped.id == framed.id == '1:3'
        assert grouped.cumulative_rotation == pytest.approx(framed.cumulative_rotation)
        assert grouped.cumulative_rotation == pytest.approx(-90)
        assert grouped.children[0].cumulative_rotation == pytest.approx(-90)

    def test_children_keep_group_relative_positions(self, settings, rotated_group_screen):
        left, right, _ = normalize([rotated_group_screen], settings)[0].children
        assert (left.x, left.y) == (0, 0)
        assert (right.x, right.y) == (50, 10)

    def test_spliced_children_point_at_new_parent(self, settings, rotated_group_screen):
        screen = normalize([rotated_group_screen], settings)[0]
        assert all(child.parent is screen for child in screen.children)

    def test_nested_groups_stack_rotations(self, settings):
        raw = {
            'id': '1:1', 'name': 'Root', 'type': 'FRAME',
            'children': [{
                'id': '1:2', 'name': 'Outer', 'type': 'GROUP', 'rotation': math.pi / 2,
                'children': [{
                    'id': '1:3', 'name': 'Inner', 'type': 'GROUP', 'rotation': math.pi / 2,
                    'children': [{'id': '1:4', 'name': 'Leaf', 'type': 'RECTANGLE'}],
                }],
            }],
        }
        root = normalize([raw], settings)[0]
        assert _ids(root.children) == ['1:4']
        assert root.children[0].cumulative_rotation == pytest.approx(-180)

    def test_root_group_is_spliced(self, settings):
        raw = {
            'id': '1:1', 'name': 'Loose group', 'type': 'GROUP',
            'children': [
                {'id': '1:2', 'name': 'A', 'type': 'RECTANGLE'},
                {'id': '1:3', 'name': 'B', 'type': 'RECTANGLE'},
            ],
        }
        nodes = normalize([raw], settings)
        assert _ids(nodes) == ['1:2', '1:3']
        assert all(node.parent is None for node in nodes)

    def test_empty_group_disappears(self, settings):
        raw = {
            'id': '1:1', 'name': 'Root', 'type': 'FRAME',
            'children': [{'id': '1:2', 'name': 'Empty', 'type': 'GROUP'}],
        }
        assert normalize([raw], settings)[0].children == []

    def test_group_never_serialized(self, settings, rotated_group_screen):
        data = normalize([rotated_group_screen], settings)[0].to_dict()
        assert all(child['type'] != 'GROUP' for child in data['children'])


class TestInvisiblePruning:
    """Hidden nodes and everything under them are dropped."""

    def test_hidden_subtree_removed(self, settings):
        raw = {
            'id': '1:1', 'name': 'Root', 'type': 'FRAME',
            'children': [
                {'id': '1:2', 'name': 'Shown', 'type': 'RECTANGLE'},
                {'id': '1:3', 'name': 'Hidden', 'type': 'FRAME', 'visible': False, 'children': [
                    {'id': '1:4', 'name': 'Visible inside hidden', 'type': 'RECTANGLE', 'visible': True},
                ]},
            ],
        }
        context = ConversionContext(settings=settings)
        root = normalize([raw], settings, context)[0]
        assert _ids(root.children) == ['1:2']
        assert 'Hidden' not in context.name_counters
        assert 'Visible inside hidden' not in context.name_counters

    def test_hidden_root_removed(self, settings):
        assert normalize([{'id': '1:1', 'name': 'Gone', 'type': 'FRAME', 'visible': False}], settings) == []

    def test_node_without_id_is_skipped(self, settings):
        raw = {
            'id': '1:1', 'name': 'Root', 'type': 'FRAME',
            'children': [{'name': 'No id', 'type': 'RECTANGLE'}, {'id': '1:2', 'name': 'Ok', 'type': 'RECTANGLE'}],
        }
        assert _ids(normalize([raw], settings)[0].children) == ['1:2']


class TestFailureIsolation:
    """A failing node is dropped alone; siblings keep their order."""

    def test_broken_child_dropped(self, settings):
        raw = {
            'id': '1:1', 'name': 'Root', 'type': 'FRAME',
            'absoluteBoundingBox': {'x': 0, 'y': 0, 'width': 100, 'height': 100},
            'children': [
                {'id': '1:2', 'name': 'First', 'type': 'RECTANGLE'},
                {'id': '1:3', 'name': 'Broken', 'type': 'RECTANGLE', 'rotation': 'sideways'},
                {'id': '1:4', 'name': 'Third', 'type': 'RECTANGLE',
                 'absoluteBoundingBox': {'x': 'a', 'y': 0, 'width': 1, 'height': 1}},
                {'id': '1:5', 'name': 'Last', 'type': 'RECTANGLE'},
            ],
        }
        context = ConversionContext(settings=settings)
        root = normalize([raw], settings, context)[0]
        assert _ids(root.children) == ['1:2', '1:5']
        assert context.failed_node_ids == ['1:3', '1:4']

    def test_broken_root_does_not_stop_others(self, settings):
        context = ConversionContext(settings=settings)
        nodes = normalize([
            {'id': '1:1', 'name': 'Broken', 'type': 'FRAME', 'rotation': [1]},
            {'id': '1:2', 'name': 'Fine', 'type': 'FRAME'},
        ], settings, context)
        assert _ids(nodes) == ['1:2']
        assert context.failed_node_ids == ['1:1']

    def test_empty_input(self, settings):
        assert normalize([], settings) == []


class TestColorVariables:
    """Bound color variables get a name when enabled."""

    def _raw(self):
        return {
            'id': '1:1', 'name': 'Button', 'type': 'RECTANGLE',
            'fills': [{'type': 'SOLID', 'color': {'r': 1, 'g': 0, 'b': 0, 'a': 1},
                       'boundVariables': {'color': {'type': 'VARIABLE_ALIAS', 'id': 'VariableID:1234:5678'}}}],
            'strokes': [{'type': 'SOLID', 'color': {'r': 0, 'g': 0, 'b': 0, 'a': 1},
                         'boundVariables': {'color': {'type': 'VARIABLE_ALIAS', 'id': 'VariableID:77:123456'}}}],
        }

    def test_disabled_by_default(self, settings):
        node = normalize([self._raw()], settings)[0]
        assert 'variableColorName' not in node.fills[0]

    def test_fallback_name_from_id(self):
        settings = ConversionSettings(framework='tailwind', useColorVariables=True)
        node = normalize([self._raw()], settings)[0]
        assert node.fills[0]['variableColorName'] == 'var-4:5678'
        assert node.strokes[0]['variableColorName'] == 'var-123456'

    def test_known_variable_names(self):
        settings = ConversionSettings(framework='tailwind', useColorVariables=True)
        context = ConversionContext(settings=settings,
                                    variable_names={'VariableID:1234:5678': 'Brand/Primary 500'})
        node = normalize([self._raw()], settings, context)[0]
        assert node.fills[0]['variableColorName'] == 'brand-primary-500'


class TestSerialization:
    """to_dict produces the camelCase shape generators read."""

    def test_shape(self, settings, rotated_frame):
        data = normalize([rotated_frame], settings)[0].to_dict()
        assert data['uniqueName'] == 'Card'
        assert data['cumulativeRotation'] == pytest.approx(-90)
        assert data['canBeFlattened'] is False
        assert 'parent' not in data
        assert 'svg' not in data
        assert data['children'][0]['x'] == 10

    def test_leaf_has_no_children_key(self, settings):
        data = normalize([{'id': '1:1', 'name': 'Leaf', 'type': 'RECTANGLE'}], settings)[0].to_dict()
        assert 'children' not in data

    def test_passthrough_fields(self, settings):
        raw = {
            'id': '1:1', 'name': 'Card', 'type': 'RECTANGLE', 'cornerRadius': 8,
            'strokeWeight': 1, 'strokeAlign': 'INSIDE', 'opacity': 0.5,
            'individualStrokeWeights': {'top': 1, 'bottom': 2, 'left': 0, 'right': 0},
        }
        data = normalize([raw], settings)[0].to_dict()
        assert data['cornerRadius'] == 8
        assert data['strokeAlign'] == 'INSIDE'
        assert data['opacity'] == 0.5
        assert data['strokeBottomWeight'] == 2

    def test_settings_accept_framework_case(self):
        assert ConversionSettings(framework='SwiftUI').framework.value == 'swiftui'


class TestComponentLinks:
    """Instances name their main component through the document's node lookup."""

    def test_instance_names_component_from_later_root(self, settings):
        nodes = normalize([
            {'id': '1:1', 'name': 'Screen', 'type': 'FRAME', 'children': [
                {'id': '1:2', 'name': 'Buy', 'type': 'INSTANCE', 'componentId': '9:1'},
            ]},
            {'id': '9:1', 'name': 'Button/Primary', 'type': 'COMPONENT'},
        ], settings)
        instance = nodes[0].children[0].to_dict()
        assert instance['componentId'] == '9:1'
        assert instance['mainComponentName'] == 'Button/Primary'

    def test_hidden_component_still_resolves(self, settings):
        screen = normalize([{'id': '1:1', 'name': 'Screen', 'type': 'FRAME', 'children': [
            {'id': '1:2', 'name': 'Buy', 'type': 'INSTANCE', 'componentId': '9:1'},
            {'id': '9:1', 'name': 'Button', 'type': 'COMPONENT', 'visible': False},
        ]}], settings)[0]
        assert _ids(screen.children) == ['1:2']
        assert screen.children[0].extras['mainComponentName'] == 'Button'

    def test_external_component_is_left_unnamed(self, settings):
        raw = {'id': '1:2', 'name': 'Buy', 'type': 'INSTANCE', 'componentId': 'lib:42'}
        assert 'mainComponentName' not in normalize([raw], settings)[0].to_dict()
