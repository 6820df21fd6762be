from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from smartkid.config import get_settings_module
from smartkid.database.bootstrap import ensure_demo_data

logger = logging.getLogger("smartkid.scripts.seed_db")


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_data(db_config)
    logger.info(
        "Seeded database -> %s@%s:%s/%s",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )


if __name__ == "__main__":
    main()
