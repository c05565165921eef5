# SPDX-License-Identifier: Apache-2.0
"""Upload storage and CSV profiling (row/column counts, completeness, sample rows)."""
from __future__ import annotations

import csv
import io
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from arbase.config import MAX_CSV_COLUMNS, UPLOADS_DIR, settings
from arbase.core.exceptions import ValidationError
from arbase.core.security import secure_filename

PROFILE_SAMPLE_ROWS = 100
PROMPT_SAMPLE_ROWS = 5


@dataclass
class TableProfile:
    row_count: int = 0
    column_count: int = 0
    columns: list[str] = field(default_factory=list)
    sample_rows: list[dict] = field(default_factory=list)
    completeness: float | None = None


@dataclass
class StoredFile:
    path: Path
    stored_name: str
    url: str


def store_upload(contents: bytes, original_name: str) -> StoredFile:
    """Write bytes under UPLOADS_DIR with a unique, sanitized name."""
    safe_name = secure_filename(original_name)
    stored_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:16]}-{safe_name}"
    file_path = (UPLOADS_DIR / stored_name).resolve()
    uploads_resolved = UPLOADS_DIR.resolve()
    try:
        file_path.relative_to(uploads_resolved)
    except ValueError:
        raise ValidationError("Invalid upload path")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(contents)
    url = f"{settings.public_base_url.rstrip('/')}/uploads/{stored_name}"
    return StoredFile(path=file_path, stored_name=stored_name, url=url)


def profile_csv(contents: bytes) -> TableProfile:
    """Count rows and columns; completeness is the filled-cell share of the first 100 rows."""
    text = contents.decode("utf-8-sig", errors="replace")
    reader = csv.DictReader(io.StringIO(text))
    try:
        columns = [c.strip() for c in (reader.fieldnames or []) if c is not None]
        if len(columns) > MAX_CSV_COLUMNS:
            raise ValidationError(f"Too many columns (maximum {MAX_CSV_COLUMNS})")
        row_count = 0
        sample: list[dict] = []
        total_cells = 0
        filled_cells = 0
        for row in reader:
            if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
                continue
            row_count += 1
            if len(sample) < PROFILE_SAMPLE_ROWS:
                sample.append(row)
                for name in reader.fieldnames or []:
                    total_cells += 1
                    value = row.get(name)
                    if isinstance(value, str) and value.strip():
                        filled_cells += 1
    except csv.Error as e:
        raise ValidationError(f"Could not parse CSV file: {e}")
    completeness = round(filled_cells / total_cells * 100, 2) if total_cells else None
    return TableProfile(
        row_count=row_count,
        column_count=len(columns),
        columns=columns,
        sample_rows=[{k: v for k, v in r.items() if k is not None} for r in sample[:PROMPT_SAMPLE_ROWS]],
        completeness=completeness,
    )


def read_stored_file(path: str) -> bytes | None:
    p = Path(path)
    if not path or not p.is_file():
        return None
    return p.read_bytes()
