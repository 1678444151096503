"""
Proof Document Builder

Turns a proof type definition and a configured sync into proof documents:
compose the specification, run lookups, fetch the primary data set, format
the rows and assemble the document.

A pending primary fetch is not an error. The builder returns an empty
response carrying the cursor and metadata, and the caller re-invokes
`build` with them once the data source is ready.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from proofspec.config import get_settings
from proofspec.core.constants import SAVED_CRITERIA_SUFFIX
from proofspec.core.enums import DataSetResultStatus, ProofFieldType
from proofspec.core.schemas import (
    Hypersync,
    ProofContents,
    ProofDataResponse,
    ProofFile,
    ProofLayout,
    ProofLayoutField,
    ProofTypeDefinition,
    UserContext,
)
from proofspec.criteria.provider import CriteriaProvider
from proofspec.datasource import DataSource, fetch_data
from proofspec.observability import SpanKind, get_tracer
from proofspec.proofs.composer import ProofSpecComposer
from proofspec.proofs.formatting import add_formatted_values, date_to_localized_string
from proofspec.proofs.layout import calc_layout_info
from proofspec.tokens import init_token_context, resolve_params, resolve_tokens

logger = logging.getLogger(__name__)
tracer = get_tracer("proofspec.proofs")


def add_saved_criteria_to_params(
    params: dict[str, Any] | None, criteria_values: Mapping[str, Any]
) -> dict[str, Any] | None:
    """Forward the `data` of saved criteria into data set params."""
    if params is None:
        return None
    for key, value in criteria_values.items():
        if key.endswith(SAVED_CRITERIA_SUFFIX) and isinstance(value, Mapping):
            params[key] = value.get("data")
    return params


class ProofDocumentBuilder:
    """
    Builds proof documents for one proof type.

    Usage:
        builder = ProofDocumentBuilder(data_source, criteria_provider, messages)
        response = await builder.build(definition, hypersync, user, "Jane Doe", now)
        if response.is_pending:
            ...  # re-invoke with response.next_page and response.metadata
    """

    def __init__(
        self,
        data_source: DataSource,
        criteria_provider: CriteriaProvider | None = None,
        messages: Mapping[str, str] | None = None,
        connector_name: str | None = None,
        integration_type: str | None = None,
    ) -> None:
        settings = get_settings()
        self.data_source = data_source
        self.messages = dict(messages or {})
        self.composer = ProofSpecComposer(data_source, criteria_provider)
        self.connector_name = connector_name or settings.engine.connector_name
        self.integration_type = (
            integration_type if integration_type is not None else settings.engine.integration_type
        )

    async def build(
        self,
        definition: ProofTypeDefinition,
        hypersync: Hypersync,
        user: UserContext,
        authorized_user: str,
        sync_start_date: datetime,
        page: str | None = None,
        metadata: Any = None,
    ) -> ProofDataResponse:
        """
        Generate the proof documents of one sync page.

        Args:
            definition: Proof type definition to render.
            hypersync: Sync whose settings hold the criteria values.
            user: Localization preferences for dates and collectedOn.
            authorized_user: Display name of the user the data was read as.
            sync_start_date: When the sync was started.
            page: Cursor of the page to build; None for the first page.
            metadata: Continuation metadata from a pending response.
        """
        settings = hypersync.settings
        criteria_values = settings.criteria

        with tracer.span("build_proof", SpanKind.INTERNAL, {"filename": settings.name}) as span:
            token_context = init_token_context(criteria_values, self.messages)
            spec = self.composer.compose(definition, token_context)
            await self.composer.run_lookups(spec, token_context)

            params = resolve_params(spec.data_set_params, token_context)
            params = add_saved_criteria_to_params(params, criteria_values)

            result = await fetch_data(self.data_source, spec.data_set, params, page, metadata)
            if result.status != DataSetResultStatus.COMPLETE:
                logger.info(f"[Builder] {spec.data_set} is {result.status.value}, deferring proof")
                span.set_attribute("pending", True)
                return ProofDataResponse(
                    data=[],
                    status=result.status,
                    next_page=result.next_page,
                    metadata=result.metadata,
                    delay=result.delay,
                    max_retry=result.max_retry,
                )

            if result.context:
                token_context["dataSource"] = result.context

            # Proof is always stored as a list
            data = result.data
            if data is None:
                rows: list[dict[str, Any]] = []
            elif isinstance(data, list):
                rows = [dict(row) for row in data]
            else:
                rows = [dict(data)]

            date_fields = [f for f in spec.fields if f.type == ProofFieldType.DATE]
            number_fields = [f for f in spec.fields if f.type == ProofFieldType.NUMBER]
            if date_fields or number_fields:
                for row in rows:
                    add_formatted_values(row, date_fields, number_fields, user)

            fields = [
                ProofLayoutField(
                    property=f.property,
                    label=resolve_tokens(f.label, token_context),
                    width=f.width,
                    type=None if f.type in (None, ProofFieldType.TEXT) else f.type,
                    format=f.format,
                )
                for f in spec.fields
            ]

            zoom: float = 1
            if spec.auto_layout:
                layout_info = calc_layout_info(fields, rows)
                fields = layout_info.fields
                zoom = layout_info.zoom

            # Continuation pages skip criteria; only the first page shows them
            criteria = (
                await self.composer.generate_proof_criteria(
                    definition.criteria, criteria_values, token_context
                )
                if page is None
                else []
            )

            # Templates such as webPageUrl may reference the fetched data
            token_context["data"] = rows if isinstance(data, list) else (rows[0] if rows else None)

            contents = ProofContents(
                type=self.integration_type,
                title=resolve_tokens(spec.title, token_context),
                subtitle=resolve_tokens(spec.subtitle, token_context),
                source=result.source or result.api_url,
                web_page_url=(
                    resolve_tokens(spec.web_page_url, token_context) if spec.web_page_url else None
                ),
                orientation=spec.orientation,
                zoom=zoom,
                user_time_zone=user.time_zone,
                criteria=criteria,
                proof_format=settings.proof_format,
                layout=ProofLayout(
                    format=spec.format,
                    no_results_message=(
                        ""
                        if rows or not spec.no_results_message
                        else resolve_tokens(spec.no_results_message, token_context)
                    ),
                    fields=fields,
                ),
                proof=rows,
                authorized_user=authorized_user,
                collector=self.connector_name,
                collected_on=date_to_localized_string(
                    sync_start_date, user.time_zone, user.language, user.locale
                )
                or "",
            )
            span.set_attribute("rows", len(rows))
            logger.info(f"[Builder] Built proof '{settings.name}' with {len(rows)} rows")

            return ProofDataResponse(
                data=[ProofFile(filename=settings.name, contents=contents)],
                next_page=result.next_page,
                combine=True,
            )
