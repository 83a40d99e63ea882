import os

import pytest
from sqlalchemy import (
    JSON, BigInteger, Boolean, Column, Date, DateTime, Integer, LargeBinary,
    MetaData, Numeric, String, Table, Text, create_engine,
)

from annotator.schema_types import AssociationSchema, ColumnSchema
from annotator.sources.class_registry import ClassRegistry, declared_classes
from annotator.sources.sqlalchemy_columns import SQLAlchemyColumnSource, storage_type_for
from annotator.sources.table_parser import TableAssociationParser, default_property_name

CAKE_SRC = os.path.join(os.path.dirname(__file__), 'fixtures', 'cake_app', 'src')


def _table_source(body):
    return (
        "<?php\nnamespace App\\Model\\Table;\n\nclass FooTable extends Table {\n"
        "    public function initialize(array $config): void {\n"
        f"{body}\n"
        "    }\n}\n"
    )


# ---------------------------------------------------------------------------
# SQLAlchemy column reflection
# ---------------------------------------------------------------------------

@pytest.fixture
def engine():
    engine = create_engine('sqlite://')
    metadata = MetaData()
    Table(
        'wheels', metadata,
        Column('id', Integer, primary_key=True),
        Column('car_id', Integer, nullable=False),
        Column('name', String(255), nullable=True),
        Column('content', Text, nullable=True),
        Column('active', Boolean, nullable=False),
        Column('created', DateTime, nullable=False),
        Column('modified', DateTime, nullable=True),
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


def test_reflect_columns(engine):
    columns = SQLAlchemyColumnSource(engine).columns('wheels')

    assert columns == [
        ColumnSchema('id', 'integer', nullable=False),
        ColumnSchema('car_id', 'integer', nullable=False),
        ColumnSchema('name', 'string', nullable=True),
        ColumnSchema('content', 'text', nullable=True),
        ColumnSchema('active', 'boolean', nullable=False),
        ColumnSchema('created', 'datetime', nullable=False),
        ColumnSchema('modified', 'datetime', nullable=True),
    ]


def test_reflect_from_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'app.db'}"
    engine = create_engine(url)
    metadata = MetaData()
    Table('cars', metadata,
          Column('id', Integer, primary_key=True),
          Column('options', JSON, nullable=True))
    metadata.create_all(engine)
    engine.dispose()

    assert SQLAlchemyColumnSource(url).columns('cars') == [
        ColumnSchema('id', 'integer', nullable=False),
        ColumnSchema('options', 'json', nullable=True),
    ]


def test_missing_table(engine):
    assert SQLAlchemyColumnSource(engine).columns('bolts') == []


@pytest.mark.parametrize('sql_type, expected', [
    (String(50), 'string'),
    (Text(), 'text'),
    (Integer(), 'integer'),
    (BigInteger(), 'biginteger'),
    (Numeric(10, 2), 'decimal'),
    (Boolean(), 'boolean'),
    (Date(), 'date'),
    (DateTime(), 'datetime'),
    (LargeBinary(), 'binary'),
    (JSON(), 'json'),
])
def test_storage_type_for(sql_type, expected):
    assert storage_type_for(sql_type) == expected


# ---------------------------------------------------------------------------
# Table association parsing
# ---------------------------------------------------------------------------

class TestTableAssociationParser:

    def setup_method(self):
        self.parser = TableAssociationParser()

    def test_wheels_table(self):
        with open(os.path.join(CAKE_SRC, 'Model', 'Table', 'WheelsTable.php'), encoding='utf-8') as f:
            content = f.read()

        assert self.parser.parse(content) == [
            AssociationSchema('car', 'Cars', kind='belongsTo'),
            AssociationSchema('owner', 'Garage.Owners', kind='belongsTo'),
        ]
        assert self.parser.parse_table_name(content) == 'wheels'
        assert self.parser.parse_entity_class(content) is None

    def test_cars_table(self):
        with open(os.path.join(CAKE_SRC, 'Model', 'Table', 'CarsTable.php'), encoding='utf-8') as f:
            content = f.read()

        assert self.parser.parse(content) == [
            AssociationSchema('wheels', 'Wheels', kind='hasMany'),
            AssociationSchema('labels', 'Tags', kind='belongsToMany'),
        ]
        assert self.parser.parse_entity_class(content) == 'App\\Model\\Entity\\Car'
        assert self.parser.parse_table_name(content) is None

    def test_options(self):
        content = _table_source("""
        $this->hasOne('Profiles', ['propertyName' => 'user_profile']);
        $this->belongsTo('Authors', ['className' => 'Users', 'conditions' => ['active;' => 1]]);
        $this->hasMany('Comments')->setClassName('Blog.Comments');
        $this->belongsTo('Owners', ['className' => \\Garage\\Model\\Table\\OwnersTable::class]);
        $this->hasMany('Parts', ['className' => 'Garage\\Model\\Table\\PartsTable']);
""")
        assert self.parser.parse(content) == [
            AssociationSchema('user_profile', 'Profiles', kind='hasOne'),
            AssociationSchema('author', 'Users', kind='belongsTo'),
            AssociationSchema('comments', 'Blog.Comments', kind='hasMany'),
            AssociationSchema('owner', 'Owners', target_namespace='Garage', kind='belongsTo'),
            AssociationSchema('parts', 'Parts', target_namespace='Garage', kind='hasMany'),
        ]

    def test_commented_out_associations(self):
        content = _table_source("""
        /* $this->hasMany('Bolts'); */
        # $this->hasMany('Nuts');
        $this->hasMany('Wheels');
""")
        assert [a.target_alias for a in self.parser.parse(content)] == ['Wheels']

    @pytest.mark.parametrize('statement, expected', [
        ("$this->setEntityClass('App\\Model\\Entity\\Car');", 'App\\Model\\Entity\\Car'),
        ("$this->setEntityClass(\\App\\Model\\Entity\\Car::class);", 'App\\Model\\Entity\\Car'),
        ("$this->setEntityClass('Garage.Owner');", 'Garage.Owner'),
    ])
    def test_entity_class(self, statement, expected):
        assert self.parser.parse_entity_class(_table_source(statement)) == expected

    def test_entity_class_property(self):
        content = "<?php\nclass CarsTable extends Table {\n    protected $_entityClass = 'App\\Model\\Entity\\Car';\n}\n"
        assert self.parser.parse_entity_class(content) == 'App\\Model\\Entity\\Car'


@pytest.mark.parametrize('alias, kind, expected', [
    ('Cars', 'belongsTo', 'car'),
    ('Cars', 'hasOne', 'car'),
    ('Wheels', 'hasMany', 'wheels'),
    ('BlogPosts', 'belongsToMany', 'blog_posts'),
    ('Garage.Owners', 'belongsTo', 'owner'),
    ('People', 'belongsTo', 'person'),
])
def test_default_property_name(alias, kind, expected):
    assert default_property_name(alias, kind) == expected


# ---------------------------------------------------------------------------
# Class registry
# ---------------------------------------------------------------------------

def test_registry_from_source_tree():
    registry = ClassRegistry.from_source_tree(CAKE_SRC)

    assert registry.exists('\\App\\Model\\Entity\\Wheel')
    assert registry.exists('App\\Model\\Entity\\Car')
    assert 'App\\Model\\Table\\CarsTable' in registry
    assert not registry.exists('\\App\\Model\\Entity\\Tag')
    assert len(registry) == 5


def test_registry_add():
    registry = ClassRegistry()
    registry.add('\\App\\Model\\Entity\\Wheel')
    assert registry.exists('app\\model\\entity\\wheel')
    assert len(registry) == 1


def test_declared_classes():
    content = """<?php
namespace Garage\\Model\\Entity;

// class Commented {}
abstract class Part extends Entity {}
final class Owner extends Entity {}
interface Ownable {}
"""
    assert declared_classes(content) == [
        'Garage\\Model\\Entity\\Part',
        'Garage\\Model\\Entity\\Owner',
        'Garage\\Model\\Entity\\Ownable',
    ]


def test_declared_classes_without_namespace():
    assert declared_classes('<?php\nclass Foo {}\n') == ['Foo']
