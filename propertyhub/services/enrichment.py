"""
Batched enrichment of primary rows with their related records.

Rows reference related records by plain foreign keys. For every relation the
enricher loads all referenced records with a single `WHERE id IN (...)` query and
attaches them by id, so a page costs at most one query per relation type.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence
import asyncio
import logging

from propertyhub.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

BatchLoader = Callable[[List[int]], Awaitable[List[Dict[str, Any]]]]


@dataclass(frozen=True)
class RelationSpec:
    """
    One relation to attach.

    Attributes:
        target: Key set on each row
        foreign_key: Key holding the related id on each row
        loader: Loads the related records for a list of distinct ids
    """

    target: str
    foreign_key: str
    loader: BatchLoader


def summary_loader(repository: BaseRepository, columns: Sequence[str]) -> BatchLoader:
    """Batch loader selecting a few columns of a repository's model."""

    async def load(ids: List[int]) -> List[Dict[str, Any]]:
        return await repository.get_summaries(ids, columns)

    return load


class RelatedEntityEnricher:
    """
    Attach related records to a list of row dicts.

    Relations run concurrently when `concurrent` is set; loaders must then use
    independent sessions.
    """

    def __init__(self, concurrent: bool = True):
        self.concurrent = concurrent

    async def enrich(
        self,
        rows: List[Dict[str, Any]],
        relations: Sequence[RelationSpec]
    ) -> List[Dict[str, Any]]:
        """
        Enrich rows in place and return them.

        A relation with no referenced ids issues no query. If a loader fails, the
        failure is logged and every row gets None for that relation.

        Args:
            rows: Primary rows as dicts
            relations: Relations to attach

        Returns:
            The same rows with each relation's target key set
        """
        if not rows or not relations:
            return rows

        pending = []
        for relation in relations:
            ids = sorted({row[relation.foreign_key] for row in rows if row.get(relation.foreign_key) is not None})
            if ids:
                pending.append((relation, ids))
            else:
                for row in rows:
                    row[relation.target] = None

        if self.concurrent:
            results = await asyncio.gather(*[self._load(relation, ids) for relation, ids in pending])
        else:
            results = [await self._load(relation, ids) for relation, ids in pending]

        for (relation, _), by_id in zip(pending, results):
            for row in rows:
                related_id = row.get(relation.foreign_key)
                row[relation.target] = by_id.get(related_id) if by_id and related_id is not None else None

        return rows

    async def _load(self, relation: RelationSpec, ids: List[int]) -> Optional[Dict[int, Dict[str, Any]]]:
        try:
            records = await relation.loader(ids)
        except Exception as e:
            logger.warning(
                f"Failed to load {relation.target} for {len(ids)} rows: {e}",
                extra={"relation": relation.target, "ids": ids}
            )
            return None
        return {record["id"]: record for record in records}
