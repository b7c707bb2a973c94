"""Report operations consumed by routes, the coaching agent and dashboards.

Each family module exposes a "today" operation and a "history over N days"
operation returning JSON-ready dicts with the provider payload under
``raw_data`` and a reserved, currently empty ``insights`` list.  ``summary``
assembles composite reports that tolerate the failure of any one family.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable

from fitgate.fitbit.errors import FitbitError

logger = logging.getLogger("fitgate.fitbit.reports")


async def fetch_or_none(label: str, pending: Awaitable[Any]) -> Any | None:
    """Await a family fetch, downgrading a gateway failure to None.

    Only composite reports use this; single-family operations propagate.
    """
    try:
        return await pending
    except FitbitError as exc:
        logger.warning("%s fetch failed (%s): %s", label, exc.kind, exc.message)
        return None
