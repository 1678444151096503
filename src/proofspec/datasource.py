"""
Data Source interface

The engine never talks to a service directly. It receives an already
authorized DataSource and calls `get_data` for option lists, lookups and the
primary proof data set. Every call runs inside a CLIENT span.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from proofspec.config import get_settings
from proofspec.core.enums import DataSetResultStatus
from proofspec.core.exceptions import PaginationLimitError
from proofspec.core.schemas import DataSetResult, DataValueMap
from proofspec.observability import SpanKind, get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer("proofspec.datasource")


class DataSource(ABC):
    """Collaborator that fetches named, paginated data sets."""

    @abstractmethod
    async def get_data(
        self,
        data_set: str,
        params: DataValueMap | None = None,
        page: str | None = None,
        metadata: Any = None,
    ) -> DataSetResult | dict[str, Any]:
        """
        Retrieve one page of a data set.

        Must be safely callable multiple times with different cursors for the
        same data set and params.

        Args:
            data_set: Name of the data set to retrieve.
            params: Parameter values used when retrieving data. Optional.
            page: Cursor returned as `next_page` by a previous call. Optional.
            metadata: Continuation metadata from a pending result. Optional.
        """


async def fetch_data(
    data_source: DataSource,
    data_set: str,
    params: DataValueMap | None = None,
    page: str | None = None,
    metadata: Any = None,
) -> DataSetResult:
    """Call the data source and validate its result."""
    with tracer.span("get_data", SpanKind.CLIENT, {"data_set": data_set}) as span:
        if page is not None:
            span.set_attribute("page", page)
        raw = await data_source.get_data(data_set, params, page, metadata)
        result = raw if isinstance(raw, DataSetResult) else DataSetResult.model_validate(raw)
        span.set_attribute("status", result.status.value)
        if result.next_page:
            span.set_attribute("next_page", result.next_page)
        return result


async def fetch_all_pages(
    data_source: DataSource,
    data_set: str,
    params: DataValueMap | None = None,
    max_pages: int | None = None,
) -> list[DataSetResult]:
    """
    Fetch every page of a data set, following `next_page` cursors.

    Pending pages are returned to the caller, which decides whether that is
    an error. Raises PaginationLimitError if the data source is still
    returning cursors after `max_pages` pages.
    """
    limit = max_pages or get_settings().pagination.max_pages
    results: list[DataSetResult] = []
    next_page: str | None = None

    while True:
        if len(results) >= limit:
            raise PaginationLimitError(data_set, limit)
        result = await fetch_data(data_source, data_set, params, next_page)
        results.append(result)
        if result.status != DataSetResultStatus.COMPLETE:
            return results

        next_page = result.next_page
        if next_page:
            logger.info(f"[DataSource] {data_set} paging nextPage: {next_page}")
        else:
            logger.info(f"[DataSource] {data_set} has no nextPage to return")
            return results
