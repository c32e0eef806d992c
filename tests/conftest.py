"""Shared fixtures for the family-graph test suite."""
import os

# Set env vars BEFORE any familygraph imports
os.environ.setdefault("FAMILYGRAPH_LOG_LEVEL", "WARNING")

import pytest
import kuzu
from fastapi.testclient import TestClient

from familygraph.db import _init_schema, get_conn
from familygraph import crud
from familygraph.models import Person, RelationshipAssertion


# ── CSV constants for import tests ──

SIMPLE_CSV = """\
Person 1,Relation,Person 2,Gender,Details
Grandpa,Earliest Ancestor,,M,The patriarch
Dad,Son,Grandpa,M,
Mom,Wife,Dad,F,
Child1,Son,Dad,M,Young one
"""

NICKNAME_CSV = """\
Person 1,Relation,Person 2,Gender,Details
# comment lines are skipped
Weldeamlak\\n(Geza),Earliest Ancestor,,M,
Abeba,Daughter,Weldeamlak\\n(Geza),F,
"""

UNKNOWN_RELATION_CSV = """\
Person 1,Relation,Person 2,Gender,Details
Alice,Earliest Ancestor,,F,
Bob,Pen Pal,Alice,M,
Carol,Friend,Alice,F,
"""


# ── Engine record helpers ──

def people(*specs):
    """people(("A", "female"), ("B", "male")) -> roster."""
    return [Person(pid, pid, gender) for pid, gender in specs]


def rel(from_id, to_id, relation_type):
    return RelationshipAssertion(from_id, to_id, relation_type)


# ── Database fixtures ──

@pytest.fixture
def db_path(tmp_path):
    """Temp path for a fresh KuzuDB."""
    return tmp_path / "test_db"


@pytest.fixture
def db(db_path):
    """Initialized KuzuDB with the full schema."""
    database = kuzu.Database(str(db_path))
    _init_schema(database)
    yield database
    database.close()


@pytest.fixture
def conn(db):
    """KuzuDB connection for unit tests."""
    connection = kuzu.Connection(db)
    yield connection
    connection.close()


# ── Tree fixtures ──

@pytest.fixture
def tree_one(conn):
    return crud.create_tree(conn, "Tree One")


@pytest.fixture
def tree_two(conn):
    return crud.create_tree(conn, "Tree Two")


@pytest.fixture
def family(conn, tree_one):
    """grandpa -> dad (father), mom -> child (mother), dad <-> mom (spouse)."""
    tid = tree_one["id"]
    grandpa = crud.create_person(conn, "Grandpa", "male", tree_id=tid)
    dad = crud.create_person(conn, "Dad", "male", tree_id=tid)
    mom = crud.create_person(conn, "Mom", "female", tree_id=tid)
    child = crud.create_person(conn, "Child", "unknown", tree_id=tid)
    crud.create_relationship(conn, grandpa["id"], dad["id"], "father")
    crud.create_relationship(conn, dad["id"], child["id"], "father")
    crud.create_relationship(conn, mom["id"], child["id"], "mother")
    crud.create_relationship(conn, dad["id"], mom["id"], "husband")
    return {"grandpa": grandpa, "dad": dad, "mom": mom, "child": child, "tree": tree_one}


# ── FastAPI app fixtures ──

@pytest.fixture
def app_with_db(db):
    """FastAPI app with dependency override pointing at test DB."""
    from familygraph.main import app

    def override_get_conn():
        c = kuzu.Connection(db)
        try:
            yield c
        finally:
            pass

    app.dependency_overrides[get_conn] = override_get_conn
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_with_db):
    return TestClient(app_with_db, raise_server_exceptions=False)
