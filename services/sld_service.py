# ============================================================================
# SLD SERVICE
# ============================================================================
# STATUS: Service - Library boundary of the SLD store
# PURPOSE: Compose unit of work, repository, loader and replacer per operation
# CREATED: 18 OCT 2026
# ============================================================================
"""
SLD Service

Each public method is one logical operation with its own unit of work:

    ingest_template        template + hierarchy, all or nothing
    replace_config_values  a config's value set, all or nothing
    get_* / check_*        read-only queries

Usage:
    service = SldService(pool)
    result = await service.ingest_template(content, "roads", lines)
    await service.replace_config_values(config_id, {17: "#ff0000"})
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from psycopg_pool import AsyncConnectionPool
from pydantic import ValidationError

from core.config import Defaults, get_defaults
from core.errors import IngestError
from core.logging import get_logger, log_context, log_checkpoint, ComponentType
from core.models import SldTemplate, SldConfig, FeatureType, ConfigValue, FlatRecord
from repositories import SldRepository, UnitOfWork
from .config_values import ConfigValueReplacer, ValueInput, normalize_values
from .loader import HierarchicalLoader, LoadResult
from .type_catalog import TypeCatalogResolver

logger = get_logger(__name__, ComponentType.SERVICE)


class SldService:
    """Service for template ingestion, config value replacement and reads."""

    def __init__(
        self,
        pool: Optional[AsyncConnectionPool] = None,
        uow_factory: Optional[Callable[[], UnitOfWork]] = None,
        repository_factory: Callable[[UnitOfWork], SldRepository] = SldRepository,
        defaults: Optional[Defaults] = None,
    ):
        """
        Initialize SLD service.

        Args:
            pool: Database connection pool
            uow_factory: Builds a fresh unit of work per operation
                         (defaults to UnitOfWork(pool))
            repository_factory: Builds the repository for an open unit of work
            defaults: Configuration (defaults from environment)
        """
        if pool is None and uow_factory is None:
            raise ValueError("SldService needs a pool or a unit of work factory")

        self.pool = pool
        self.defaults = defaults or get_defaults()
        self._uow_factory = uow_factory or (lambda: UnitOfWork(pool=self.pool))
        self._repository_factory = repository_factory

    def unit_of_work(self) -> UnitOfWork:
        return self._uow_factory()

    # =========================================================================
    # WRITES
    # =========================================================================

    async def ingest_template(
        self,
        content: str,
        name: str,
        lines: Union[str, Iterable[Union[str, FlatRecord]]],
        uuid: Optional[str] = None,
        sld_filename: Optional[str] = None,
        wms_url: Optional[str] = None,
    ) -> LoadResult:
        """
        Store a template and its structure in one transaction.

        Args:
            content: Template text with placeholders
            name: Display name
            lines: Flat records describing the template's structure
            uuid: Optional uploader token
            sld_filename: Original file name
            wms_url: Optional WMS endpoint the template was made for

        Returns:
            LoadResult with the new template id

        Raises:
            IngestError: Template attribute out of bounds, or orphan or
                malformed record (nothing stored)
            StatementError: Insert failed (nothing stored)
            DatabaseConnectionError: No connection
        """
        try:
            template = SldTemplate(
                name=name,
                content=content,
                uuid=uuid,
                sld_filename=sld_filename,
                wms_url=wms_url,
            )
        except ValidationError as e:
            raise IngestError(f"Invalid template attributes: {e}") from e

        with log_context(operation="ingest_template"):
            async with self.unit_of_work() as uow:
                repository = self._repository_factory(uow)
                resolver = TypeCatalogResolver(
                    repository, use_upsert=self.defaults.database.param_type_upsert
                )
                loader = HierarchicalLoader(repository, resolver, self.defaults.ingest)
                result = await loader.load(template, lines)

            with log_context(template_id=result.template_id):
                log_checkpoint("template_ingested", result.to_dict())
        return result

    async def replace_config_values(self, config_id: int, values: ValueInput) -> int:
        """
        Replace the complete value set of a config in one transaction.

        Returns:
            Number of values stored

        Raises:
            DuplicateParamError: Same param_id twice (no statement run)
            StatementError: Delete or insert failed (old values kept)
            DatabaseConnectionError: No connection
        """
        pairs = normalize_values(config_id, values)

        with log_context(config_id=config_id, operation="replace_config_values"):
            async with self.unit_of_work() as uow:
                replacer = ConfigValueReplacer(self._repository_factory(uow))
                count = await replacer.replace(config_id, pairs)

            log_checkpoint("config_values_replaced", {"value_count": count})
        return count

    # =========================================================================
    # READS
    # =========================================================================

    async def get_template(
        self,
        template_id: Optional[int] = None,
        include_content: bool = False,
    ) -> Union[SldTemplate, List[SldTemplate]]:
        """
        One template by id, or all templates when id is None or not positive.

        Raises:
            NotFoundError: Positive id with no template
        """
        async with self.unit_of_work() as uow:
            repository = self._repository_factory(uow)
            if template_id is None or template_id <= 0:
                return await repository.list_templates(include_content)
            return await repository.get_template(template_id, include_content)

    async def get_feature_types(self, template_id: int) -> List[FeatureType]:
        """Feature types of a template in source order."""
        async with self.unit_of_work() as uow:
            return await self._repository_factory(uow).get_feature_types(template_id)

    async def get_config(self, config_id: int) -> Optional[SldConfig]:
        """A config row, None when it does not exist."""
        async with self.unit_of_work() as uow:
            return await self._repository_factory(uow).get_config(config_id)

    async def get_config_owner(self, config_id: int) -> Optional[str]:
        """Owner token of a config, None when the config does not exist."""
        config = await self.get_config(config_id)
        return config.uuid if config else None

    async def check_config_ownership(self, config_id: int, uuid: Optional[str]) -> Optional[bool]:
        """
        Whether uuid owns the config.

        Returns:
            None when the config does not exist, otherwise True/False
        """
        config = await self.get_config(config_id)
        if config is None:
            return None
        return config.uuid is not None and config.uuid == uuid

    async def get_template_tree(self, template_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Templates with their feature types attached under "featuretypes".

        Raises:
            NotFoundError: Positive id with no template
        """
        async with self.unit_of_work() as uow:
            repository = self._repository_factory(uow)
            if template_id is None or template_id <= 0:
                templates = await repository.list_templates()
            else:
                templates = [await repository.get_template(template_id)]

            tree = []
            for template in templates:
                entry = template.model_dump(mode="json", exclude={"content"})
                feature_types = await repository.get_feature_types(template.id)
                entry["featuretypes"] = [ft.model_dump() for ft in feature_types]
                tree.append(entry)
        return tree

    async def get_config_values(self, config_id: int) -> List[ConfigValue]:
        """Current value rows of a config."""
        async with self.unit_of_work() as uow:
            return await self._repository_factory(uow).get_config_values(config_id)


__all__ = ["SldService"]
