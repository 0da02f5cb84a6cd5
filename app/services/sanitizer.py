"""Row sanitization: raw spreadsheet rows to validated records.

Each resource describes its table layout with a ``ColumnMap``; the functions
here are layout-agnostic. Rows whose primary field is blank are treated as
formatting rows of the source table and dropped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from pydantic import BaseModel, HttpUrl, TypeAdapter, ValidationError

from app.schemas.records import BreachRecord, ConferenceRecord
from app.utils.date_normalizer import normalize_date

logger = logging.getLogger(__name__)

DESCRIPTION_SEPARATOR = " | "
DEFAULT_URL_SCHEME = "https://"

_http_url_adapter = TypeAdapter(HttpUrl)
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


@dataclass(frozen=True)
class DescriptionColumn:
    """A column contributing to the joined description.

    Attributes:
        index: Zero-based column position.
        template: Format string applied to the non-empty trimmed value.
    """

    index: int
    template: str = "{value}"


@dataclass(frozen=True)
class ColumnMap:
    """Table layout for one resource.

    Attributes:
        record_type: Pydantic model the sanitized fields are validated into.
        primary_field: Field that must be non-empty for a row to be kept.
        text_columns: Plain text fields by column position.
        date_column: Position of the date column (None when absent).
        url_columns: URL-shaped fields by column position.
        description_columns: Columns joined into ``description``, in order.
        constants: Fields with a fixed value for every record.
        header_rows: Leading rows of the range that are headers, not data.
    """

    record_type: type[BaseModel]
    primary_field: str
    text_columns: Mapping[str, int] = field(default_factory=dict)
    date_column: int | None = None
    url_columns: Mapping[str, int] = field(default_factory=dict)
    description_columns: tuple[DescriptionColumn, ...] = ()
    constants: Mapping[str, str] = field(default_factory=dict)
    header_rows: int = 1


# Columns: A=Company name, C=Incident type, E=Year, J=Source
BREACH_COLUMNS = ColumnMap(
    record_type=BreachRecord,
    primary_field="organization",
    text_columns={"organization": 0, "type": 2},
    date_column=4,
    url_columns={"source": 9},
    header_rows=2,
)

# Columns: A=Name, B=Link, C=Usual time, D=Date start, E=Days, F=Country
CONFERENCE_COLUMNS = ColumnMap(
    record_type=ConferenceRecord,
    primary_field="name",
    text_columns={"name": 0, "location": 5},
    date_column=3,
    url_columns={"website": 1},
    description_columns=(
        DescriptionColumn(index=4, template="{value} days"),
        DescriptionColumn(index=2),
    ),
    constants={"type": "Conference"},
    header_rows=1,
)


def _cell(row: Sequence[str], index: int) -> str:
    """Return the trimmed cell at ``index``; short rows yield ""."""
    if index >= len(row):
        return ""
    value = row[index]
    return value.strip() if isinstance(value, str) else str(value).strip()


def normalize_url(value: str) -> str:
    """Normalize a URL-shaped cell to an absolute URL.

    Values without a scheme get ``https://`` prepended when they look like a
    host name. If strict URL validation fails, the trimmed original is kept:
    a malformed reference is more useful than none.

    Args:
        value: Raw cell value.

    Returns:
        Normalized URL, the trimmed original, or "" for blank input.
    """
    value = value.strip()
    if not value:
        return ""

    candidate = value
    if not _SCHEME.match(value):
        if " " in value or "." not in value:
            return value
        candidate = DEFAULT_URL_SCHEME + value

    try:
        return str(_http_url_adapter.validate_python(candidate))
    except ValidationError:
        return value


def join_description(row: Sequence[str], columns: Sequence[DescriptionColumn]) -> str:
    """Join the non-empty descriptive columns in column-map order."""
    parts = []
    for column in columns:
        value = _cell(row, column.index)
        if value:
            parts.append(column.template.format(value=value))
    return DESCRIPTION_SEPARATOR.join(parts)


def sanitize_row(row: Sequence[str], column_map: ColumnMap) -> BaseModel | None:
    """Map one raw row to a validated record.

    Args:
        row: Raw cell values for a single spreadsheet row.
        column_map: Layout of the resource's table.

    Returns:
        The record, or None when the primary field is blank.
    """
    fields: dict[str, str] = {name: _cell(row, index) for name, index in column_map.text_columns.items()}

    if not fields.get(column_map.primary_field):
        return None

    if column_map.date_column is not None:
        fields["date"] = normalize_date(_cell(row, column_map.date_column))

    for name, index in column_map.url_columns.items():
        fields[name] = normalize_url(_cell(row, index))

    if column_map.description_columns:
        fields["description"] = join_description(row, column_map.description_columns)

    fields.update(column_map.constants)
    return column_map.record_type.model_validate(fields)


def sanitize_rows(rows: Sequence[Sequence[str]], column_map: ColumnMap) -> list[BaseModel]:
    """Sanitize every data row of a range, skipping header rows.

    Args:
        rows: All rows returned by the origin, headers included.
        column_map: Layout of the resource's table.

    Returns:
        Records for the rows that passed validation, in source order.
    """
    data_rows = rows[column_map.header_rows:]
    records = []
    for row in data_rows:
        record = sanitize_row(row, column_map)
        if record is not None:
            records.append(record)

    dropped = len(data_rows) - len(records)
    if dropped:
        logger.info(
            "sanitizer.rows_dropped",
            extra={
                "record_type": column_map.record_type.__name__,
                "rows": len(data_rows),
                "dropped": dropped,
            },
        )
    return records
