import os

import pytest

from annotator.annotations import AnnotationError
from annotator.entity_annotator import EntityAnnotator
from annotator.schema_types import AssociationSchema, ColumnSchema
from annotator.sources.class_registry import ClassRegistry
from annotator.type_map import TypeMap
from annotator.writer import DocBlockWriter

WHEEL_COLUMNS = [
    ColumnSchema('id', 'integer'),
    ColumnSchema('car_id', 'integer'),
    ColumnSchema('name', 'string', nullable=True),
    ColumnSchema('content', 'longtext', nullable=True),
    ColumnSchema('created', 'datetime'),
    ColumnSchema('modified', 'datetime', nullable=True),
]

WHEEL_ASSOCIATIONS = [
    AssociationSchema('car', 'Cars', target_entity_type_name='App\\Model\\Entity\\Car'),
    AssociationSchema('owner', 'Garage.Owners'),
]


@pytest.fixture
def annotator():
    return EntityAnnotator(class_registry=ClassRegistry(['App\\Model\\Entity\\Wheel']))


def _property_lines(content):
    return [line.strip() for line in content.splitlines() if '@property' in line]


def test_build_property_hints(annotator, wheel_source):
    hints = annotator.build_property_hints(WHEEL_COLUMNS, WHEEL_ASSOCIATIONS, wheel_source)

    assert list(hints.items()) == [
        ('content', 'string|null'),
        ('id', 'int'),
        ('car_id', 'int'),
        ('name', 'string|null'),
        ('created', '\\Cake\\I18n\\FrozenTime'),
        ('modified', '\\Cake\\I18n\\FrozenTime|null'),
        ('car', '\\App\\Model\\Entity\\Car'),
        ('owner', '\\Cake\\ORM\\Entity'),
        ('virtual_one', 'string|null'),
        ('virtual_two', 'mixed'),
    ]


def test_type_map_overrides_win(wheel_source):
    annotator = EntityAnnotator(type_map=TypeMap({'integer': 'int', 'datetime': 'DateTimeValue'}))
    hints = annotator.build_property_hints(WHEEL_COLUMNS, [], wheel_source)

    assert hints['id'] == 'int'
    assert hints['modified'] == 'DateTimeValue|null'
    assert hints['created'] == 'DateTimeValue'
    assert list(hints)[:5] == ['id', 'car_id', 'content', 'created', 'modified']


def test_shared_type_map():
    type_map = TypeMap()
    annotator = EntityAnnotator(type_map=type_map)
    assert annotator.schema_hints.type_map is type_map


def test_build_annotations_rejects_invalid_types():
    annotator = EntityAnnotator(type_map=TypeMap({'json': 'array<int, string>'}))
    with pytest.raises(AnnotationError):
        annotator.build_annotations([ColumnSchema('data', 'json')], [], '<?php class Foo {}')


def test_annotate_wheel(annotator, cake_app):
    path = os.path.join(cake_app, 'src', 'Model', 'Entity', 'Wheel.php')

    assert annotator.annotate(path, WHEEL_COLUMNS, WHEEL_ASSOCIATIONS) is True

    with open(path, encoding='utf-8') as f:
        content = f.read()
    assert _property_lines(content) == [
        '* @property string|null $content',
        '* @property int $id',
        '* @property int $car_id',
        '* @property string|null $name',
        '* @property \\Cake\\I18n\\FrozenTime $created',
        '* @property \\Cake\\I18n\\FrozenTime|null $modified',
        '* @property \\App\\Model\\Entity\\Car $car',
        '* @property \\Cake\\ORM\\Entity $owner',
        '* @property string|null $virtual_one',
        '* @property mixed $virtual_two',
    ]
    assert ' * Wheel entity.\n' in content

    # A second run finds nothing to do.
    assert annotator.annotate(path, WHEEL_COLUMNS, WHEEL_ASSOCIATIONS) is False


def test_annotate_skips_base_entity(annotator, cake_app):
    path = os.path.join(cake_app, 'src', 'Model', 'Entity', 'Entity.php')
    with open(path, encoding='utf-8') as f:
        before = f.read()

    assert annotator.annotate(path, [ColumnSchema('id', 'integer')], []) is False
    with open(path, encoding='utf-8') as f:
        assert f.read() == before


def test_annotate_missing_file(annotator, tmp_path):
    assert annotator.annotate(str(tmp_path / 'Missing.php'), WHEEL_COLUMNS, []) is False


def test_annotate_dry_run(cake_app):
    annotator = EntityAnnotator(writer=DocBlockWriter(dry_run=True))
    path = os.path.join(cake_app, 'src', 'Model', 'Entity', 'Car.php')
    with open(path, encoding='utf-8') as f:
        before = f.read()

    assert annotator.annotate(path, [ColumnSchema('id', 'integer')], []) is True
    with open(path, encoding='utf-8') as f:
        assert f.read() == before
