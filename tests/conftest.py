import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_barx_logging():
    """CLI and logging tests attach handlers to the barx logger; drop them between tests."""
    yield
    root = logging.getLogger("barx")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
