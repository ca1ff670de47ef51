# File: tests/conftest.py

import pytest
import os
import sys
import logging
import sqlalchemy
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy_utils import database_exists, create_database

# 1. Add project root to path
sys.path.append(os.getcwd())

from project_scopes.core.database.base import Base
from project_scopes.features.configuration.data.repository import SqlConfigRepo
from project_scopes.features.configuration.service.api import ConfigSection
from project_scopes.features.scopes.data.dir_lister import LocalDirectoryLister
from project_scopes.features.scopes.service.compiler import VisibilityCompiler
from project_scopes.features.scopes.service.store import ScopeStore


class RecordingConfigRepo(SqlConfigRepo):
    """SQL backend that remembers every logical write."""
    def __init__(self, session_factory):
        super().__init__(session_factory=session_factory)
        self.writes = []

    def set_many(self, section, values):
        self.writes.append((section, sorted(values)))
        super().set_many(section, values)


@pytest.fixture(scope="session")
def test_engine(tmp_path_factory):
    """
    Runs once per test session.
    Ensures the SQLite test DB exists and has every table.
    """
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    db_path = tmp_path_factory.mktemp("db") / "test_project_scopes.db"
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})

    if not database_exists(engine.url):
        create_database(engine.url)

    # Import all models to ensure they are registered
    import project_scopes.features.configuration.data.sql_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    """
    Runs before EVERY test that needs the DB.
    Cleans all tables so each test starts from a first-run state.
    """
    with test_engine.connect() as conn:
        trans = conn.begin()
        for table in sqlalchemy.inspect(test_engine).get_table_names():
            conn.execute(text(f'DELETE FROM "{table}";'))
        trans.commit()

    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def config_repo(session_factory):
    return RecordingConfigRepo(session_factory)


@pytest.fixture
def project_tree(tmp_path):
    """
    /project
      x/1/keep.txt   x/1b/          x/notes.md
      y/2/           y/2b/
      z.txt
      a/b/c/         a/b/c2.txt     a/b2/       a/a2.txt
      .git/
    """
    root = tmp_path / "project"
    for folder in ["x/1", "x/1b", "y/2", "y/2b", "a/b/c", "a/b2", ".git"]:
        (root / folder).mkdir(parents=True)
    (root / "x/1/keep.txt").write_text("keep")
    (root / "x/notes.md").write_text("notes")
    (root / "z.txt").write_text("z")
    (root / "a/b/c2.txt").write_text("c2")
    (root / "a/a2.txt").write_text("a2")
    return root


@pytest.fixture
def make_store(config_repo, project_tree):
    """Builds a loaded ScopeStore over the SQL test backend."""
    def _make(root=project_tree, include_hidden=True):
        compiler = VisibilityCompiler(LocalDirectoryLister(include_hidden=include_hidden), root)
        store = ScopeStore(
            config=ConfigSection("project-scopes", config_repo),
            host_filter=ConfigSection("files", config_repo),
            compiler=compiler,
            root=root
        )
        return store.load()
    return _make
