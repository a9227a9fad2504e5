from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def replace_literal(path: str | Path, old: str, new: str, *, dry_run: bool = False) -> int:
    """Replace every exact, case-sensitive occurrence of old with new in a file.

    Works on raw bytes like `sed -i s/old/new/g`: line endings and bytes that are
    not valid UTF-8 pass through untouched. Returns the number of replacements.
    """

    if not old:
        raise ValueError("old must be a non-empty string")

    p = Path(path)
    if not p.is_file():
        logger.info("%s not found in %s. Skipping modification.", p.name, p.parent)
        return 0

    needle = old.encode("utf-8")
    data = p.read_bytes()
    count = data.count(needle)
    if count == 0:
        logger.info("%r not found in %s, nothing to replace.", old, p.name)
        return 0

    if dry_run:
        logger.info("Would replace %d occurrence(s) of %r with %r in %s", count, old, new, p)
        return count

    p.write_bytes(data.replace(needle, new.encode("utf-8")))
    logger.info("Replaced %r with %r in %s (%d occurrence(s)).", old, new, p.name, count)
    return count
