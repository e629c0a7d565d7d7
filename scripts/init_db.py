"""
Standalone script that creates every table of the ORM metadata in the
database pointed to by the settings (DATABASE_URL_PROD, or DATABASE_URL_TEST
when TEST_MODE is set). Existing tables are left untouched.
"""
import asyncio

from class_scheduler.common.logger import log
from class_scheduler.database import engine as db_engine
from class_scheduler.database.models import Base


async def main():
    db_engine.create_db_engine_and_session_factory()
    try:
        async with db_engine.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        print(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")
    finally:
        await db_engine.dispose_db_engine()


if __name__ == "__main__":
    log.info("Initializing database schema...")
    asyncio.run(main())
