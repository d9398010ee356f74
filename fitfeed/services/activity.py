# fitfeed/services/activity.py
import logging
from datetime import date

from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import CompileError

from ..models.statistics import DailyGroupActivity

logger = logging.getLogger(__name__)


class DailyActivityCounter:
    """
    Per (group, day) counter. Each call is a single INSERT .. ON CONFLICT
    statement, so concurrent posts from different members never lose an
    increment and no read is needed.
    """

    def __init__(self, session):
        self.session = session

    def _upsert(self, group_id: int, day: date):
        table = DailyGroupActivity.__table__
        dialect = self.session.get_bind().dialect.name
        values = {"group_id": group_id, "date": day, "value": 1}

        if dialect == "mysql":
            stmt = mysql.insert(table).values(**values)
            return stmt.on_duplicate_key_update(value=table.c.value + 1)

        if dialect == "postgresql":
            stmt = postgresql.insert(table).values(**values)
        elif dialect == "sqlite":
            stmt = sqlite.insert(table).values(**values)
        else:
            raise CompileError(f"no atomic upsert for dialect {dialect!r}")

        return stmt.on_conflict_do_update(
            index_elements=[table.c.group_id, table.c.date],
            set_={"value": table.c.value + 1},
        )

    def increment(self, group_id: int, day: date) -> None:
        self.session.execute(self._upsert(group_id, day))
        logger.debug("daily activity +1 group_id=%s date=%s", group_id, day.isoformat())
