import pytest

from paycheck_planner import db


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / 'planner.db'
    db.init_db(path)
    return path
