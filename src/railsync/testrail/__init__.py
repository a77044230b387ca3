"""TestRail API v2 client and the run synchronisation built on top of it."""

from railsync.testrail.client import TestRailClient
from railsync.testrail.sync import DEFAULT_RUN_NAME, TestRailSync

__all__ = ["DEFAULT_RUN_NAME", "TestRailClient", "TestRailSync"]
