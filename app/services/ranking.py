"""Ranking pipeline: window, aggregate, rank, paginate."""

from __future__ import annotations

import logging

from app.models.ranking import RankingFilter
from app.services.aggregation import LedgerReader, aggregate
from app.services.pagination import Connection, PageRequest, paginate
from app.services.ranker import rank
from app.services.window import Clock, resolve_window

logger = logging.getLogger(__name__)


class RankingService:
    def __init__(self, reader: LedgerReader, clock: Clock, default_page_size: int = 10):
        self.reader = reader
        self.clock = clock
        self.default_page_size = default_page_size

    async def get_ranking(
        self,
        ranking_filter: RankingFilter,
        first: int | None = None,
        after: str | None = None,
        last: int | None = None,
        before: str | None = None,
    ) -> Connection:
        # Argument errors are raised before any ledger read.
        page = PageRequest.parse(
            ranking_filter.order,
            first=first,
            after=after,
            last=last,
            before=before,
            default_page_size=self.default_page_size,
        )

        window = resolve_window(ranking_filter.period, self.clock.now(), self.clock.midnight)
        scored = await aggregate(self.reader, ranking_filter.by, window)
        ranked = rank(scored, ranking_filter.order)
        connection = paginate(ranked, page, ranking_filter.order)

        logger.info(
            "ranking by=%s period=%s order=%s window=[%s, %s) total=%d edges=%d",
            ranking_filter.by.value,
            ranking_filter.period.value,
            ranking_filter.order.value,
            window.start.isoformat(),
            window.end.isoformat(),
            connection.total_count,
            len(connection.edges),
        )
        return connection
