import pytest
from sqlalchemy import inspect, text


@pytest.mark.asyncio
async def test_db_connection(db_session):
    """
    Test that we can connect to the DB and execute a query.
    """
    result = await db_session.execute(text("SELECT 1"))
    assert result.scalar() == 1


@pytest.mark.asyncio
async def test_all_service_tables_created(test_engine):
    async with test_engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))

    for table in (
        "users",
        "profiles",
        "i9_documents",
        "events",
        "event_teams",
        "time_entries",
        "checkin_codes",
        "event_vendor_payments",
        "sick_leaves",
    ):
        assert table in tables
