"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

# atlassian-python-api logs missing pages at ERROR; lookups expect misses.
logging.getLogger("atlassian").setLevel(logging.WARNING)
