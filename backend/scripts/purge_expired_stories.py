from __future__ import annotations

import logging
import os
import sys

# Run from backend/ so `motoclub` is importable without installing the package.
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from motoclub.config import log_level  # noqa: E402
from motoclub.db import session_scope  # noqa: E402
from motoclub.policies.social import purge_expired_stories  # noqa: E402


logger = logging.getLogger("purge_expired_stories")


def main() -> None:
    logging.basicConfig(level=log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    with session_scope() as db:
        removed = purge_expired_stories(db)
    logger.info("Removed %d expired stories", removed)


if __name__ == "__main__":
    main()
