"""Parse TestRail identifiers out of test titles.

Conventions:
    C123 / TC123   case id (any number per title)
    S10 / TS10     suite id (first one wins)
    <-chrome->     browser label added to the full title by the runner
"""

from __future__ import annotations

import re

from railsync.core.exceptions import ParseError
from railsync.logging import get_logger

logger = get_logger(__name__)

CASE_ID_PATTERN = re.compile(r"\bT?C(\d+)\b")
SUITE_ID_PATTERN = re.compile(r"\bT?S\d+\b")
BROWSER_PATTERN = re.compile(r"<-(.*)->")
_SUITE_MARKER_PREFIX = re.compile(r"^\D+")


def extract_case_ids(title: str) -> list[int]:
    """Return every case id in ``title`` in order of appearance."""
    return [int(match.group(1)) for match in CASE_ID_PATTERN.finditer(title)]


def extract_suite_id(full_title: str) -> str | None:
    """Return the first suite token in ``full_title`` verbatim, or None."""
    match = SUITE_ID_PATTERN.search(full_title)
    if not match:
        logger.warning("Suite id is not detected in test name", full_title=full_title)
        return None
    return match.group(0)


def extract_browser_name(full_title: str) -> str:
    """Return the browser label enclosed in ``<-`` and ``->``.

    Raises:
        ParseError: If the full title carries no browser label.
    """
    match = BROWSER_PATTERN.search(full_title)
    if not match:
        raise ParseError(f"Browser name is not detected in full test name: {full_title!r}")
    return match.group(1)


def suite_number(suite_id: str) -> str:
    """Strip the leading marker characters: ``"TS10"`` -> ``"10"``."""
    return _SUITE_MARKER_PREFIX.sub("", str(suite_id))
