# pipeline.py
"""
Load -> aggregate -> render for one date label.

Every load request gets a ticket from ``SnapshotRequests``. Only the newest
ticket may render, so a slow response for an older date can never draw over a
newer one. Rendering goes through a target that is cleared first, so nothing
from the previous snapshot survives a re-render.
"""

import threading
from typing import Callable, Dict, NamedTuple, Optional

import pandas as pd

from aggregation import CountrySummary, Totals, summarize, top_country
from data_loader import SnapshotLoadError
from logging_config import get_logger

logger = get_logger(__name__)


class LoadTicket(NamedTuple):
    generation: int
    date_label: str


class DashboardState(NamedTuple):
    date_label: str
    countries: Dict[str, CountrySummary]
    totals: Totals
    top: Optional[CountrySummary]


class SnapshotRequests:
    """Hands out load tickets; the most recently issued one is the only current ticket."""

    def __init__(self):
        self._lock = threading.Lock()
        self._generation = 0

    def issue(self, date_label: str) -> LoadTicket:
        with self._lock:
            self._generation += 1
            return LoadTicket(self._generation, date_label)

    def is_current(self, ticket: LoadTicket) -> bool:
        with self._lock:
            return ticket.generation == self._generation


def update_dashboard(
    ticket: LoadTicket,
    requests: SnapshotRequests,
    target,
    loader: Callable[[str], pd.DataFrame],
) -> Optional[DashboardState]:
    """
    Loads the snapshot for ``ticket``, summarizes it and renders it on ``target``.

    ``target`` must provide ``clear()`` and ``render(state)``.

    Returns:
        The rendered DashboardState, or None if the ticket was superseded before
        it could render.

    Raises:
        SnapshotLoadError: if the snapshot could not be loaded. The target is
            cleared first when the ticket is still current.
    """
    logger.info("Updating dashboard", date_label=ticket.date_label, generation=ticket.generation)
    try:
        snapshot = loader(ticket.date_label)
    except SnapshotLoadError:
        if requests.is_current(ticket):
            target.clear()
        raise

    if not requests.is_current(ticket):
        logger.info("Dropping superseded load", date_label=ticket.date_label, generation=ticket.generation)
        return None

    summary = summarize(snapshot)
    state = DashboardState(
        date_label=ticket.date_label,
        countries=summary.countries,
        totals=summary.totals,
        top=top_country(summary.countries),
    )

    if not requests.is_current(ticket):
        logger.info("Dropping superseded render", date_label=ticket.date_label, generation=ticket.generation)
        return None

    target.clear()
    target.render(state)
    logger.debug("Dashboard rendered", date_label=ticket.date_label, countries=len(state.countries))
    return state
