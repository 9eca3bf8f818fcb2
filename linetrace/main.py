import logging
from typing import Optional

from .config import OUTPUT_FILE, SOURCE_DIR
from .services import DatasetService


def _setup_logging() -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def main() -> Optional[str]:
    _setup_logging()
    logging.info("Building dataset from sources in %s ...", SOURCE_DIR)
    written = DatasetService().run(SOURCE_DIR, OUTPUT_FILE)
    if written is None:
        return None
    return str(written)
