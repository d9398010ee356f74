from datetime import date
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import SQLAlchemyError

from fitfeed.models import DailyGroupActivity
from fitfeed.services.activity import DailyActivityCounter


def test_increment_inserts_then_adds(session, make_user, make_group):
    group = make_group(make_user())
    counter = DailyActivityCounter(session)

    counter.increment(group.id, date(2024, 6, 1))
    counter.increment(group.id, date(2024, 6, 1))
    counter.increment(group.id, date(2024, 6, 1))
    session.commit()

    row = session.query(DailyGroupActivity).one()
    assert row.value == 3


def test_each_day_and_group_has_its_own_row(session, make_user, make_group):
    first = make_group(make_user())
    second = make_group(make_user())
    counter = DailyActivityCounter(session)

    counter.increment(first.id, date(2024, 6, 1))
    counter.increment(first.id, date(2024, 6, 2))
    counter.increment(second.id, date(2024, 6, 1))
    session.commit()

    values = {
        (row.group_id, row.date): row.value
        for row in session.query(DailyGroupActivity).all()
    }
    assert values == {
        (first.id, date(2024, 6, 1)): 1,
        (first.id, date(2024, 6, 2)): 1,
        (second.id, date(2024, 6, 1)): 1,
    }


class _SessionOn:
    def __init__(self, dialect_name):
        self.dialect_name = dialect_name

    def get_bind(self):
        return SimpleNamespace(dialect=SimpleNamespace(name=self.dialect_name))

    def execute(self, stmt):
        raise AssertionError("nothing should be executed")


def test_unsupported_dialect_raises_database_error():
    counter = DailyActivityCounter(_SessionOn("mssql"))

    with pytest.raises(SQLAlchemyError, match="mssql"):
        counter.increment(1, date(2024, 6, 1))
