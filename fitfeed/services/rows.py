# fitfeed/services/rows.py
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError


def load_or_create_locked(session, model, defaults=None, **key):
    """
    Load the row identified by ``key`` with a row lock, creating it when it
    does not exist yet.

    Two writers can both miss the row and race to insert it; the insert runs in
    a SAVEPOINT so the loser catches the unique-key violation and re-reads the
    winner's row under the same lock instead of failing the whole transaction.
    The locked read overwrites any copy of the row already in the session.

    Returns ``(row, created)``.
    """
    stmt = (
        select(model)
        .filter_by(**key)
        .with_for_update()
        .execution_options(populate_existing=True)
    )

    row = session.execute(stmt).scalar_one_or_none()
    if row is not None:
        return row, False

    try:
        with session.begin_nested():
            row = model(**key, **(defaults or {}))
            session.add(row)
    except IntegrityError:
        return session.execute(stmt).scalar_one(), False

    return row, True
