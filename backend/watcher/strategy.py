"""
Rebuild Watch Strategy Selector.

Maps the `watcher` option to the polling / events decision.
Requires Python 3.11+.
"""

from collections.abc import Mapping
from typing import Any

POLLING = "polling"
EVENTS = "events"


def polling(config: Any) -> bool:
    """
    Decide whether the polling strategy was requested.

    Args:
        config: None, a mapping, or an object with an optional `watcher` field

    Returns:
        True only when the `watcher` option is exactly "polling"
    """
    if config is None:
        return False

    if isinstance(config, Mapping):
        value = config.get("watcher")
    else:
        value = getattr(config, "watcher", None)

    return value == POLLING
