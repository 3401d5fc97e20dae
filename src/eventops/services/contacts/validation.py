"""Row validation ahead of the import pipeline.

Rows arrive loosely typed (CSV cells or JSON objects). Each one is turned
into a tagged ``RowValidation`` so the import algorithm only ever sees
``CsvContactRow`` instances.
"""

import csv
import io

from pydantic import ValidationError as PydanticValidationError

from eventops.models.contact import CsvContactRow, RowValidation

# Data row N is reported as N + 1 so that row 1 is the CSV header.
HEADER_OFFSET = 2


def report_row(index: int) -> int:
    return index + HEADER_OFFSET


def normalize_header(header: str) -> str:
    return "_".join(header.strip().lower().split())


def parse_csv(text: str) -> list[dict]:
    """Parse CSV text into dict rows with normalized headers, skipping blank lines."""
    reader = csv.DictReader(io.StringIO(text))
    if reader.fieldnames is None:
        return []
    reader.fieldnames = [normalize_header(h) for h in reader.fieldnames]
    return [
        row for row in reader
        if any((value or "").strip() for value in row.values() if isinstance(value, str))
    ]


def _format_errors(exc: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'row'}: {err['msg']}"
        for err in exc.errors()
    )


def validate_rows(raw_rows: list[dict]) -> list[RowValidation]:
    results = []
    for index, raw in enumerate(raw_rows):
        row_number = report_row(index)
        try:
            value = CsvContactRow.model_validate(raw)
        except PydanticValidationError as exc:
            results.append(RowValidation(kind="invalid", row=row_number, error=_format_errors(exc)))
            continue
        results.append(RowValidation(kind="valid", row=row_number, value=value))
    return results
