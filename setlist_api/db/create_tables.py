"""Create (or recreate) the documents table.

    python -m setlist_api.db.create_tables [--reset]
"""
from __future__ import annotations

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from setlist_api.core.config import get_settings
from setlist_api.core.logging_config import setup_logging

from . import models  # noqa: F401  registers Document on Base.metadata
from .session import Base, get_engine

logger = logging.getLogger(__name__)


def create_all() -> None:
    Base.metadata.create_all(bind=get_engine())


def drop_all() -> None:
    Base.metadata.drop_all(bind=get_engine())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the setlist document table.")
    parser.add_argument("--reset", action="store_true", help="drop every stored document first")
    args = parser.parse_args(argv)

    setup_logging(get_settings().log_level)
    try:
        if args.reset:
            drop_all()
            logger.warning("Dropped the documents table")
        create_all()
    except SQLAlchemyError as exc:
        logger.error("Failed to create tables: %s", exc)
        return 1
    logger.info("Documents table ready at %s", get_engine().url.render_as_string(hide_password=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
