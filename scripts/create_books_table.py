import argparse
import logging

from sqlalchemy import Engine, func, inspect, select

from library_shop_api.config import settings
from library_shop_api.database import engine as default_engine
from library_shop_api.models import books_table

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_books_table(table_name: str, engine: Engine = default_engine) -> bool:
    """Creates the table if missing. Returns True when it was created."""
    if inspect(engine).has_table(table_name):
        logger.info(f"Table {table_name} already exists.")
        return False

    books_table(table_name).create(engine)
    logger.info(f"Created table {table_name}.")
    return True


def check_connection(table_name: str, engine: Engine = default_engine) -> int:
    """Counts the books in the table, failing loudly if the store is unreachable."""
    books = books_table(table_name)
    with engine.connect() as connection:
        count = connection.execute(select(func.count()).select_from(books)).scalar_one()
    logger.info(f"Connected to {engine.url.render_as_string()}: {count} books in {table_name}.")
    return count


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the books table and check the store.")
    parser.add_argument(
        "--table",
        default=settings.books_table_name,
        help="Table name (defaults to BOOKS_TABLE_NAME).",
    )
    parser.add_argument(
        "--check-only", action="store_true", help="Only check connectivity, do not create."
    )
    args = parser.parse_args()
    if not args.table:
        parser.error("a table name is required (--table or BOOKS_TABLE_NAME)")

    if not args.check_only:
        create_books_table(args.table)
    check_connection(args.table)
