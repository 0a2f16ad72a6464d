# ============================================================================
# TYPE CATALOG RESOLVER
# ============================================================================
# STATUS: Service - Get-or-create over the shared sld_type catalog
# PURPOSE: Map symbolizer keys to parameter type ids inside one transaction
# CREATED: 18 OCT 2026
# ============================================================================
"""
Type Catalog Resolver

Turns a symbolizer key (e.g. "point-color") into the id of its sld_type row,
creating the row with an empty name when the key is new.

A resolver lives for one transaction. Ids are memoized so that repeated keys
in one upload cost a single lookup and never create two rows.

Race policy:
    default     select, then insert if missing. Two concurrent transactions
                introducing the same key may each append a row; lookups
                always return the lowest id.
    use_upsert  INSERT ... ON CONFLICT DO NOTHING against the unique
                symbolizer index, then select if the row already existed.
"""

import logging
from typing import Dict

from core.errors import StatementError
from repositories import SldRepository

logger = logging.getLogger(__name__)


class TypeCatalogResolver:
    """Get-or-create for parameter types."""

    def __init__(self, repository: SldRepository, use_upsert: bool = False):
        self.repository = repository
        self.use_upsert = use_upsert
        self._resolved: Dict[str, int] = {}
        self.created = 0

    async def resolve(self, symbolizer: str) -> int:
        """
        Return the type id for a symbolizer key, creating it when missing.

        Raises:
            ValueError: Empty symbolizer key
            StatementError: Lookup or insert failed
        """
        if not symbolizer:
            raise ValueError("symbolizer key must not be empty")

        if symbolizer in self._resolved:
            return self._resolved[symbolizer]

        if self.use_upsert:
            type_id = await self._upsert(symbolizer)
        else:
            type_id = await self.repository.find_param_type(symbolizer)
            if type_id is None:
                type_id = await self.repository.insert_param_type(symbolizer)
                self.created += 1

        self._resolved[symbolizer] = type_id
        logger.debug(f"Resolved parameter type {symbolizer} -> {type_id}")
        return type_id

    async def _upsert(self, symbolizer: str) -> int:
        type_id = await self.repository.upsert_param_type(symbolizer)
        if type_id is not None:
            self.created += 1
            return type_id

        type_id = await self.repository.find_param_type(symbolizer)
        if type_id is None:
            raise StatementError(
                f"Parameter type {symbolizer!r} conflicted but is not visible to this transaction",
                operation="resolve_param_type",
                entity_id=symbolizer,
            )
        return type_id


__all__ = ["TypeCatalogResolver"]
