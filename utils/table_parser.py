#!/usr/bin/env python3
"""
Key/value table parsing for parameter tables.

Every parameter table on the documentation site has the same column
layout (name, type, description), so query, URL and form tables all go
through build_key_values().

Parameter names may carry a parenthesized annotation such as
"count (optional)" or "projectId (Required)". The annotation is removed
from the key and appended to the description instead:

    ["count (optional)", "number", "Max results"]
    -> Parameter(key="count", type_annotation="<number>",
                 description="Max results (optional)")
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from bs4 import Tag

from models import Parameter

# Greedy: spans from the first "(" to the last ")" of the name cell.
ANNOTATION_PATTERN = re.compile(r'\s*(\(.+\))')

# Cell index -> row field. Cells past the last mapped index are ignored.
ROW_FIELDS: Dict[int, str] = {
    0: "name",
    1: "type",
    2: "description",
}


@dataclass
class ParameterRow:
    """One table row, by field name instead of by cell position"""
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None


def map_cells(cells: Sequence[str]) -> ParameterRow:
    """Apply ROW_FIELDS to a row's cell texts. Absent cells stay None."""
    row = ParameterRow()
    for index, text in enumerate(cells):
        field_name = ROW_FIELDS.get(index)
        if field_name:
            setattr(row, field_name, text.strip())
    return row


def split_annotation(name: str):
    """Return (key, annotation) for a name cell; annotation is "" when absent."""
    match = ANNOTATION_PATTERN.search(name)
    if not match:
        return name, ""
    return ANNOTATION_PATTERN.sub("", name), match.group(1)


def build_parameter(row: ParameterRow) -> Parameter:
    key, annotation = split_annotation(row.name or "")

    type_annotation = f"<{row.type}>" if row.type is not None else ""

    description = row.description if row.description is not None else ""
    if annotation:
        # Rows without a description cell still keep the annotation.
        description = f"{description} {annotation}" if description else annotation

    return Parameter(key=key, type_annotation=type_annotation, description=description)


def row_cells(row: Tag) -> List[str]:
    return [td.get_text().strip() for td in row.find_all('td', recursive=False)]


def table_rows(table: Optional[Tag]) -> List[Tag]:
    """
    Data rows of a table: the <tbody> rows when present, otherwise every
    <tr> that has at least one <td> (header rows made of <th> are skipped).
    """
    if table is None:
        return []

    bodies = table.find_all('tbody', recursive=False)
    if bodies:
        return [tr for body in bodies for tr in body.find_all('tr', recursive=False)]

    return [tr for tr in table.find_all('tr') if tr.find('td', recursive=False) is not None]


def build_key_values(rows: Iterable[Tag]) -> List[Parameter]:
    """One Parameter per row, in row order."""
    return [build_parameter(map_cells(row_cells(row))) for row in rows]


def parse_parameter_table(table: Optional[Tag]) -> List[Parameter]:
    return build_key_values(table_rows(table))
