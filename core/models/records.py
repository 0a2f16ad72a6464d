# ============================================================================
# FLAT RECORD MODELS
# ============================================================================
# STATUS: Domain model - Intermediate line format produced by the SLD parser
# PURPOSE: Typed records for FeatureType / Rule / Field lines and their parser
# CREATED: 18 OCT 2026
# EXPORTS: FlatRecord, FeatureTypeRecord, RuleRecord, FieldRecord,
#          parse_flat_line, parse_flat_records, coerce_record
# DEPENDENCIES: pydantic
# ============================================================================
"""
Flat Record Models

The external SLD parser describes a template's structure as tab-separated
lines, one per structural element, in document order:

    FeatureType
    Rule    <path>  <path>  name;title;abstract  <title>
    Field   <path>  <path>  3   point-color  #ff0000

Column 0 is the kind tag. There is no parent pointer: a Rule belongs to the
most recent FeatureType and a Field to the most recent Rule.

Rule names may also arrive in the compact layout ``Rule\\tname;title;abstract``
where the name list is column 1.
"""

from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, Field

from core.config import IngestDefaults, get_defaults
from core.contracts import RecordKind
from core.errors import MalformedLineError

# Column positions in the parser's full layout
RULE_NAMES_COLUMN = 3
RULE_TITLE_COLUMN = 4
FIELD_OFFSET_COLUMN = 3
FIELD_SYMBOLIZER_COLUMN = 4
FIELD_DEFAULT_COLUMN = 5


class FlatRecord(BaseModel):
    """One structural line of a template description."""
    kind: RecordKind
    line_number: Optional[int] = Field(default=None, description="1-based source line")

    model_config = {"frozen": True}


class FeatureTypeRecord(FlatRecord):
    kind: RecordKind = RecordKind.FEATURE_TYPE


class RuleRecord(FlatRecord):
    kind: RecordKind = RecordKind.RULE
    name: str = ""
    title: str = ""
    abstract: str = ""


class FieldRecord(FlatRecord):
    kind: RecordKind = RecordKind.FIELD
    template_offset: int = Field(..., ge=0)
    symbolizer: str = Field(..., min_length=1)
    default_value: str = ""


# Concrete record class per kind tag
RECORD_TYPES = {
    RecordKind.FEATURE_TYPE: FeatureTypeRecord,
    RecordKind.RULE: RuleRecord,
    RecordKind.FIELD: FieldRecord,
}


def _column(columns: List[str], index: int) -> str:
    return columns[index] if len(columns) > index else ""


def _parse_rule(columns: List[str], line_number: Optional[int], ingest: IngestDefaults) -> RuleRecord:
    if len(columns) > RULE_NAMES_COLUMN:
        raw_names = columns[RULE_NAMES_COLUMN]
    else:
        raw_names = _column(columns, 1)

    names = raw_names.split(ingest.name_separator)
    name = names[0]
    title = names[1] if len(names) > 1 else ""
    if not title:
        title = _column(columns, RULE_TITLE_COLUMN)
    abstract = names[2] if len(names) > 2 else ""

    return RuleRecord(line_number=line_number, name=name, title=title, abstract=abstract)


def _parse_field(columns: List[str], line_number: Optional[int]) -> FieldRecord:
    raw_offset = _column(columns, FIELD_OFFSET_COLUMN).strip()
    try:
        offset = int(raw_offset)
    except ValueError:
        raise MalformedLineError(
            f"Field line {line_number}: template offset {raw_offset!r} is not an integer",
            line_number=line_number,
            kind=RecordKind.FIELD.value,
        )
    if offset < 0:
        raise MalformedLineError(
            f"Field line {line_number}: template offset {offset} is negative",
            line_number=line_number,
            kind=RecordKind.FIELD.value,
        )

    symbolizer = _column(columns, FIELD_SYMBOLIZER_COLUMN)
    if not symbolizer:
        raise MalformedLineError(
            f"Field line {line_number}: missing symbolizer key",
            line_number=line_number,
            kind=RecordKind.FIELD.value,
        )

    return FieldRecord(
        line_number=line_number,
        template_offset=offset,
        symbolizer=symbolizer,
        default_value=_column(columns, FIELD_DEFAULT_COLUMN),
    )


def parse_flat_line(
    line: str,
    line_number: Optional[int] = None,
    ingest: Optional[IngestDefaults] = None,
) -> Optional[FlatRecord]:
    """
    Parse one flat line.

    Args:
        line: Raw line text (trailing newline allowed)
        line_number: 1-based position, carried into the record and errors
        ingest: Separator settings (defaults from environment)

    Returns:
        Parsed record, or None for a blank line

    Raises:
        MalformedLineError: Unknown kind tag or unusable Field columns
    """
    ingest = ingest or get_defaults().ingest
    line = line.rstrip("\r\n")
    if not line.strip():
        return None

    columns = line.split(ingest.field_separator)
    kind = RecordKind.from_tag(columns[0])

    if kind is RecordKind.FEATURE_TYPE:
        return FeatureTypeRecord(line_number=line_number)
    if kind is RecordKind.RULE:
        return _parse_rule(columns, line_number, ingest)
    if kind is RecordKind.FIELD:
        return _parse_field(columns, line_number)

    raise MalformedLineError(
        f"Line {line_number}: unknown record kind {columns[0]!r}",
        line_number=line_number,
        kind=columns[0],
    )


def parse_flat_records(text: str, ingest: Optional[IngestDefaults] = None) -> List[FlatRecord]:
    """Parse a whole flat file, skipping blank lines."""
    records = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        record = parse_flat_line(line, line_number, ingest)
        if record is not None:
            records.append(record)
    return records


def coerce_record(
    item: Union[str, FlatRecord],
    line_number: int,
    ingest: Optional[IngestDefaults] = None,
) -> Optional[FlatRecord]:
    """
    Accept either a raw line or an already parsed record.

    Records without a line number get the position they were supplied at.
    A parsed record must be the concrete class for its kind.
    """
    if isinstance(item, FlatRecord):
        if not isinstance(item, RECORD_TYPES[item.kind]):
            position = item.line_number if item.line_number is not None else line_number
            raise MalformedLineError(
                f"Line {position}: {type(item).__name__} is not a valid {item.kind.value} record",
                line_number=position,
                kind=item.kind.value,
            )
        if item.line_number is None:
            return item.model_copy(update={"line_number": line_number})
        return item
    return parse_flat_line(item, line_number, ingest)


def split_lines(lines: Union[str, Iterable[Union[str, FlatRecord]]]) -> Iterable[Union[str, FlatRecord]]:
    """Treat a single string as a whole flat file."""
    if isinstance(lines, str):
        return lines.splitlines()
    return lines


__all__ = [
    "FlatRecord",
    "FeatureTypeRecord",
    "RuleRecord",
    "FieldRecord",
    "RECORD_TYPES",
    "parse_flat_line",
    "parse_flat_records",
    "coerce_record",
    "split_lines",
]
