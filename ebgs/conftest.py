
from ebgs.db.connection import json_serializer
import ebgs.db.schema as sch

import pytest
import sqlalchemy as sa
import sqlalchemy.orm


@pytest.fixture
def session_factory(tmp_path):
    """Same contract as `ebgs.db.connection.get_session`, backed by a fresh
    sqlite file (a file, so history fan-out threads share it).
    """
    engine = sa.create_engine(f'sqlite:///{tmp_path / "ebgs.db"}',
            connect_args={'check_same_thread': False},
            json_serializer=json_serializer)
    sch.Base.metadata.create_all(engine)
    yield sqlalchemy.orm.sessionmaker(engine).begin
    engine.dispose()


@pytest.fixture
def count_rows(session_factory):
    def count(model, *where):
        with session_factory() as sess:
            return sess.execute(sa.select(sa.func.count())
                    .select_from(model).where(*where)).scalar_one()
    return count
