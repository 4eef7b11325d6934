from sqlalchemy import event
from sqlalchemy.engine import Engine


def enable_sqlite_transactions(engine: Engine) -> None:
    """Let SQLAlchemy own SQLite transaction boundaries.

    pysqlite defers BEGIN until the first DML statement, which breaks
    SAVEPOINT and makes DELETE+INSERT sequences commit piecemeal. Emitting
    BEGIN ourselves restores proper nesting and rollback.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")
