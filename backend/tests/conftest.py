import os
import shutil

import pytest

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), 'fixtures')
CAKE_APP_DIR = os.path.join(FIXTURES_DIR, 'cake_app')
ENTITY_DIR = os.path.join(CAKE_APP_DIR, 'src', 'Model', 'Entity')
TABLE_DIR = os.path.join(CAKE_APP_DIR, 'src', 'Model', 'Table')


def read_fixture(*parts):
    with open(os.path.join(CAKE_APP_DIR, *parts), encoding='utf-8', newline='') as f:
        return f.read()


@pytest.fixture
def wheel_source():
    """Source of the Wheel entity fixture"""
    return read_fixture('src', 'Model', 'Entity', 'Wheel.php')


@pytest.fixture
def cake_app(tmp_path):
    """Writable copy of the fixture application"""
    target = tmp_path / 'cake_app'
    shutil.copytree(CAKE_APP_DIR, target)
    return str(target)
