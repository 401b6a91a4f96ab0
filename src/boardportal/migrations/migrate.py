"""
Database Migration Runner

Simple migration runner for the board portal database.
"""
import asyncio
import asyncpg
import sys
from pathlib import Path

from boardportal.config import Config


async def run_migrations():
    """Run all SQL migrations in order"""
    migrations_dir = Path(__file__).parent
    dsn = Config.get_postgres_dsn()

    print("Connecting to database...")

    try:
        conn = await asyncpg.connect(dsn)
    except (asyncpg.PostgresError, OSError) as e:
        print(f"Connection failed: {e}")
        sys.exit(1)

    print("Connected successfully!")

    # Get all SQL files sorted by name
    sql_files = sorted(migrations_dir.glob("*.sql"))

    try:
        for sql_file in sql_files:
            print(f"\nRunning migration: {sql_file.name}")

            with open(sql_file, "r") as f:
                sql = f.read()

            try:
                await conn.execute(sql)
                print(f"  ✓ {sql_file.name} completed")
            except asyncpg.PostgresError as e:
                print(f"  ✗ Error in {sql_file.name}: {e}")
                # Continue with other migrations
    finally:
        await conn.close()

    print("\nMigrations complete!")


def main():
    asyncio.run(run_migrations())


if __name__ == "__main__":
    main()
