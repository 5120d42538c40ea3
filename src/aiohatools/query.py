"""Fetch, filter and project pipeline shared by every listing tool.

A listing runs in four steps:

1. fetch the summaries of one backend collection,
2. narrow them with the cheap summary filters, then with the
   entity-reference filter (which needs each record's configuration),
3. project every survivor to the compact or verbose output shape,
4. prefix the JSON output with a ``Found N <noun>`` summary.

Per-record configuration fetches run concurrently, bounded by
``max_concurrent_fetches``; results always keep the collection order. A
fetch that fails for one record excludes that record from reference
matches and degrades it to its summary in verbose output, so one broken
resource never hides the others.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from pydantic import BaseModel

from .backends.base import BackendClient
from .exceptions import BackendError
from .models.records import FilterCriteria, ListingKind, Record
from .models.tools import ToolCallResult
from .references import config_references

logger = logging.getLogger(__name__)

VERBOSE_HINT = " (compact output, use verbose=true for full details)"


def _is_empty(value: Any) -> bool:
    if value is None or value == "":
        return True
    return isinstance(value, (list, dict)) and not value


class QueryResult(BaseModel):
    """Projected records of one listing."""

    listing: ListingKind
    records: list[dict[str, Any]]
    verbose: bool = False

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def summary(self) -> str:
        summary = f"Found {self.count} {self.listing.noun}"
        if not self.verbose:
            summary += VERBOSE_HINT
        return summary

    def render(self) -> str:
        output = json.dumps(self.records, indent=2, ensure_ascii=False, default=str)
        return f"{self.summary}\n\n{output}"

    def to_tool_result(self) -> ToolCallResult:
        return ToolCallResult.success(self.render())


class QueryEngine:
    """Runs listings against a :class:`BackendClient`."""

    def __init__(self, client: BackendClient, *, max_concurrent_fetches: int = 8) -> None:
        if max_concurrent_fetches < 1:
            raise ValueError("max_concurrent_fetches must be at least 1")
        self.client = client
        self.max_concurrent_fetches = max_concurrent_fetches

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def fetch(self, listing: ListingKind) -> list[Record]:
        """Return the base collection for *listing*."""
        try:
            return list(await self.client.fetch_all(listing.kind))
        except BackendError:
            raise
        except Exception as exc:
            logger.error("Error fetching %s: %s", listing.noun, exc)
            raise BackendError(str(exc)) from exc

    async def load_configs(self, listing: ListingKind, records: list[Record]) -> list[Record | None]:
        """Return *records* with their configuration loaded, in the same order.

        Records that already carry a configuration are returned as-is. A
        failed fetch yields ``None`` at that position.
        """
        semaphore = asyncio.Semaphore(self.max_concurrent_fetches)

        async def load(record: Record) -> Record | None:
            if record.config is not None:
                return record
            async with semaphore:
                try:
                    full = await self.client.fetch_one(listing.kind, record.entity_id)
                except Exception as exc:
                    logger.warning(
                        "Could not load configuration of %s: %s", record.entity_id, exc
                    )
                    return None
            if full.config is None:
                return None
            return record.model_copy(update={"config": full.config})

        return list(await asyncio.gather(*(load(record) for record in records)))

    # ------------------------------------------------------------------
    # Filter
    # ------------------------------------------------------------------

    @staticmethod
    def filter_summaries(
        records: list[Record],
        criteria: FilterCriteria,
        listing: ListingKind,
    ) -> list[Record]:
        """Apply the filters that only need record summaries."""
        alias = criteria.alias_contains.lower()
        member = criteria.member_contains.lower()
        domain_prefix = f"{criteria.domain}." if criteria.domain else ""

        def has_member(record: Record) -> bool:
            members = record.attributes.get(listing.members_key or "")
            if not isinstance(members, list):
                return False
            return any(member in str(item).lower() for item in members)

        def matches(record: Record) -> bool:
            if criteria.state and record.state != criteria.state:
                return False
            if criteria.state_not and record.state == criteria.state_not:
                return False
            if domain_prefix and not record.entity_id.startswith(domain_prefix):
                return False
            if alias:
                in_name = alias in record.display_name.lower()
                in_id = listing.alias_matches_id and alias in record.entity_id.lower()
                if not (in_name or in_id):
                    return False
            if member and not has_member(record):
                return False
            return True

        return [record for record in records if matches(record)]

    async def filter_references(
        self,
        records: list[Record],
        criteria: FilterCriteria,
        listing: ListingKind,
    ) -> list[Record]:
        """Keep records whose configuration references ``criteria.entity_reference``."""
        if not criteria.entity_reference:
            return records

        loaded = await self.load_configs(listing, records)
        return [
            record
            for record in loaded
            if record is not None
            and config_references(
                record.config, criteria.entity_reference, listing.reference_sections
            )
        ]

    # ------------------------------------------------------------------
    # Project
    # ------------------------------------------------------------------

    @staticmethod
    def project_compact(record: Record, listing: ListingKind) -> dict[str, Any]:
        """Identity and display fields only; empty values are omitted."""
        entry: dict[str, Any] = {
            listing.id_key: record.entity_id,
            "state": record.state,
            listing.name_key: record.display_name,
            "last_changed": record.last_changed,
            "last_triggered": record.last_triggered,
        }
        for key in listing.compact_attributes:
            entry[key] = record.attributes.get(key)
        return {key: value for key, value in entry.items() if not _is_empty(value)}

    @classmethod
    def project_verbose(cls, record: Record, listing: ListingKind) -> dict[str, Any]:
        """Full record, including attributes and configuration when present."""
        entry = cls.project_compact(record, listing)
        if record.attributes:
            entry["attributes"] = record.attributes
        if record.config is not None:
            entry["config"] = record.config
        return entry

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def run(
        self,
        listing: ListingKind,
        criteria: FilterCriteria | None = None,
        *,
        verbose: bool = False,
    ) -> QueryResult:
        """Fetch, filter and project one listing.

        Raises :class:`BackendError` when the base collection cannot be
        fetched.
        """
        criteria = criteria or FilterCriteria()

        records = await self.fetch(listing)
        records = self.filter_summaries(records, criteria, listing)
        records = await self.filter_references(records, criteria, listing)

        if verbose:
            loaded = await self.load_configs(listing, records)
            records = [full or summary for full, summary in zip(loaded, records)]
            projected = [self.project_verbose(record, listing) for record in records]
        else:
            projected = [self.project_compact(record, listing) for record in records]

        logger.debug("Listing %s matched %d records", listing.noun, len(projected))
        return QueryResult(listing=listing, records=projected, verbose=verbose)

    async def list_tool(
        self,
        listing: ListingKind,
        criteria: FilterCriteria | None = None,
        *,
        verbose: bool = False,
    ) -> ToolCallResult:
        """Run a listing and wrap the outcome as a tool result."""
        try:
            result = await self.run(listing, criteria, verbose=verbose)
        except BackendError as exc:
            return ToolCallResult.failure(f"Error listing {listing.noun}: {exc}")
        return result.to_tool_result()
