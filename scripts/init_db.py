#!/usr/bin/env python3
"""
Create the installment tables in the configured database.

Usage:
    DATABASE_URL=postgresql+asyncpg://... python scripts/init_db.py
"""
import asyncio
import os
import sys

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from dotenv import load_dotenv

load_dotenv()

from infrastructure.db.database import create_schema, engine, DATABASE_URL
from infrastructure.logging.structlog_logs import logger


async def main() -> None:
    log = logger.bind(step="init_db", database=DATABASE_URL.rsplit("@", 1)[-1])
    log.info("schema_creation_started")
    try:
        await create_schema()
    finally:
        await engine.dispose()
    log.info("schema_creation_completed")


if __name__ == "__main__":
    asyncio.run(main())
