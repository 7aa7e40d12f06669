import os
import pytest


def live_enabled():
    return os.getenv("COINBOOK_LIVE", "false").lower() == "true"


def pytest_collection_modifyitems(config, items):
    is_ci = os.getenv("GITHUB_ACTIONS") == "true"
    for item in items:
        if "integration" in item.keywords:
            if is_ci:
                item.add_marker(pytest.mark.skip(reason="Skip integration in CI"))
            elif not live_enabled():
                item.add_marker(
                    pytest.mark.skip(reason="Set COINBOOK_LIVE=true for integration tests")
                )
