# ============================================================================
# HIERARCHICAL LOADER
# ============================================================================
# STATUS: Service - Template ingestion pipeline
# PURPOSE: Turn a flat record stream into template/featuretype/rule/param rows
# CREATED: 18 OCT 2026
# ============================================================================
"""
Hierarchical Loader

Inserts a template and walks its flat records strictly in input order. The
only state carried between records is which feature type and which rule were
inserted last:

    FeatureType  -> new feature type, no current rule
    Rule         -> new rule under the current feature type
    Field        -> new param under the current rule

A Rule before any FeatureType, or a Field with no current Rule, is a
structural error. The loader never commits; the caller's unit of work decides
the outcome, so any error leaves no rows behind.
"""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterable, Optional, Union

from core.config import IngestDefaults, get_defaults
from core.contracts import RecordKind
from core.errors import OrphanFieldError, OrphanRuleError, StatementError
from core.logging import get_logger, log_context, ComponentType
from core.models import SldTemplate, FlatRecord
from core.models.records import coerce_record, split_lines
from repositories import SldRepository
from .type_catalog import TypeCatalogResolver

logger = get_logger(__name__, ComponentType.LOADER)


@dataclass(frozen=True)
class ScanState:
    """Most recently inserted feature type and rule."""
    feature_type_id: Optional[int] = None
    rule_id: Optional[int] = None


@dataclass
class LoadResult:
    """Outcome of one template ingestion."""
    template_id: int
    feature_types: int = 0
    rules: int = 0
    params: int = 0
    param_types_created: int = 0

    def count(self, kind: RecordKind) -> None:
        if kind is RecordKind.FEATURE_TYPE:
            self.feature_types += 1
        elif kind is RecordKind.RULE:
            self.rules += 1
        elif kind is RecordKind.FIELD:
            self.params += 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class HierarchicalLoader:
    """Loads one template hierarchy through a repository bound to an open unit of work."""

    def __init__(
        self,
        repository: SldRepository,
        resolver: Optional[TypeCatalogResolver] = None,
        ingest: Optional[IngestDefaults] = None,
    ):
        self.repository = repository
        self.resolver = resolver or TypeCatalogResolver(repository)
        self.ingest = ingest or get_defaults().ingest

    async def apply(self, state: ScanState, record: FlatRecord, template_id: int) -> ScanState:
        """
        Insert the row for one record and return the next scan state.

        Raises:
            OrphanRuleError: Rule with no current feature type
            OrphanFieldError: Field with no current rule
            StatementError: Insert failed
        """
        if record.kind is RecordKind.FEATURE_TYPE:
            feature_type_id = await self.repository.insert_feature_type(template_id)
            return ScanState(feature_type_id=feature_type_id)

        if record.kind is RecordKind.RULE:
            if state.feature_type_id is None:
                raise OrphanRuleError(
                    f"Line {record.line_number}: Rule before any FeatureType",
                    line_number=record.line_number,
                    kind=record.kind.value,
                )
            rule_id = await self.repository.insert_rule(
                state.feature_type_id, record.name, record.title, record.abstract
            )
            return replace(state, rule_id=rule_id)

        if record.kind is RecordKind.FIELD:
            if state.rule_id is None:
                raise OrphanFieldError(
                    f"Line {record.line_number}: Field with no current Rule",
                    line_number=record.line_number,
                    kind=record.kind.value,
                )
            type_id = await self.resolver.resolve(record.symbolizer)
            await self.repository.insert_param(
                state.rule_id, record.template_offset, type_id, record.default_value
            )
            return state

        return state

    async def load(
        self,
        template: SldTemplate,
        lines: Union[str, Iterable[Union[str, FlatRecord]]],
    ) -> LoadResult:
        """
        Insert the template row and every record of its hierarchy.

        Args:
            template: Template row to insert (id is assigned by the database)
            lines: Raw flat lines, a whole flat file as one string, or
                   already parsed records

        Returns:
            LoadResult with the new template id and per-kind row counts

        Raises:
            IngestError: Orphan or malformed record
            StatementError: Insert failed (carries line number and kind)
        """
        template_id = await self.repository.insert_template(template)
        result = LoadResult(template_id=template_id)
        state = ScanState()

        with log_context(template_id=template_id):
            logger.info(f"Loading hierarchy for template {template_id} ({template.name})")

            for position, item in enumerate(split_lines(lines), start=1):
                record = coerce_record(item, position, self.ingest)
                if record is None:
                    continue

                try:
                    state = await self.apply(state, record, template_id)
                except StatementError as e:
                    raise StatementError(
                        f"Line {record.line_number} ({record.kind.value}): {e}",
                        operation="ingest_template",
                        entity_id=str(template_id),
                        line_number=record.line_number,
                        kind=record.kind.value,
                    ) from e
                result.count(record.kind)

            result.param_types_created = self.resolver.created
            logger.info(
                f"Loaded template {template_id}: {result.feature_types} feature types, "
                f"{result.rules} rules, {result.params} params"
            )

        return result


__all__ = ["ScanState", "LoadResult", "HierarchicalLoader"]
