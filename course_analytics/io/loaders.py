from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from course_analytics.config.constants import (
    ID_COLUMNS,
    POST_COLUMNS,
    POSTMETA_COLUMNS,
    QUIZ_ATTEMPT_COLUMNS,
    TABLE_NAMES,
    USER_COLUMNS,
    USERMETA_COLUMNS,
)

logger = logging.getLogger(__name__)

TABLE_COLUMNS = {
    "users": USER_COLUMNS,
    "posts": POST_COLUMNS,
    "usermeta": USERMETA_COLUMNS,
    "postmeta": POSTMETA_COLUMNS,
    "quiz_attempts": QUIZ_ATTEMPT_COLUMNS,
}
RAW_COLUMNS = {"earned_marks", "total_marks"}
EXPORT_ENTRY_TYPES = {"header", "database", "table"}
# Largest epoch second that still formats in any display timezone.
MAX_UNIX_SECONDS = (pd.Timestamp.max - pd.Timedelta(days=1)).timestamp()


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def normalize_id(value: object) -> str | None:
    """Canonical string form of an id; empty, zero and NaN ids are absent."""
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    if not text or text == "0" or text.lower() in {"nan", "none", "null"}:
        return None
    return text


def _to_text(value: object) -> str | None:
    if _is_missing(value):
        return None
    return str(value)


def _to_raw(value: object) -> object:
    return None if _is_missing(value) else value


def read_json_blob(path: Path) -> Any | None:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Source file missing: %s", path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Could not parse %s: %s", path, exc)
    return None


def extract_rows(blob: Any) -> list[dict] | None:
    """
    Row array from one export blob, or None when the shape is not recognized.

    Accepted shapes:
    - a plain array of rows
    - an object whose ``data`` field is the row array
    - a phpMyAdmin export array (header/database entries plus one entry carrying ``data``)
    """
    if isinstance(blob, dict):
        data = blob.get("data")
        rows = data if isinstance(data, list) else None
    elif isinstance(blob, list):
        wrapped = next((e["data"] for e in blob if isinstance(e, dict) and isinstance(e.get("data"), list)), None)
        if wrapped is not None:
            rows = wrapped
        elif blob and all(isinstance(e, dict) and e.get("type") in EXPORT_ENTRY_TYPES for e in blob):
            rows = []
        else:
            rows = blob
    else:
        rows = None

    if rows is None:
        return None
    return [row for row in rows if isinstance(row, dict)]


def split_export(blob: Any) -> dict[str, list[dict]]:
    """Split a full-database export into ``{table_name: rows}``, skipping empty tables."""
    tables: dict[str, list[dict]] = {}
    if not isinstance(blob, list):
        return tables
    for entry in blob:
        if not isinstance(entry, dict) or entry.get("type") != "table":
            continue
        name = entry.get("name")
        rows = entry.get("data") or []
        if name and isinstance(rows, list) and rows:
            tables[str(name)] = [row for row in rows if isinstance(row, dict)]
    return tables


def _pick(raw: pd.DataFrame, aliases: list[str]) -> pd.Series:
    for name in aliases:
        if name in raw.columns:
            return raw[name]
    return pd.Series([None] * len(raw), index=raw.index, dtype=object)


def frame_from_rows(rows: list[dict], columns: dict[str, list[str]]) -> pd.DataFrame:
    raw = pd.DataFrame.from_records(rows) if rows else pd.DataFrame()
    frame = pd.DataFrame(index=raw.index)
    for col, aliases in columns.items():
        if col in ID_COLUMNS:
            convert = normalize_id
        elif col in RAW_COLUMNS:
            convert = _to_raw
        else:
            convert = _to_text
        frame[col] = _pick(raw, aliases).map(convert).astype(object)
    return frame.reset_index(drop=True)


def prepare_table(name: str, blob: Any) -> pd.DataFrame:
    rows = extract_rows(blob) if blob is not None else []
    if rows is None:
        logger.warning("Unrecognized export shape for %s; using an empty table", name)
        rows = []
    return frame_from_rows(rows, TABLE_COLUMNS[name])


def prepare_tables(blobs: dict[str, Any]) -> dict[str, pd.DataFrame]:
    return {name: prepare_table(name, blobs.get(name)) for name in TABLE_COLUMNS}


def source_flags(tables: dict[str, pd.DataFrame]) -> dict[str, bool]:
    return {name: not tables.get(name, pd.DataFrame()).empty for name in TABLE_COLUMNS}


async def load_all(data_dir: Path, export_file: Path | None = None) -> dict[str, pd.DataFrame]:
    if export_file is not None:
        blob = await asyncio.to_thread(read_json_blob, export_file)
        tables = split_export(blob)
        blobs = {name: tables.get(table, []) for name, table in TABLE_NAMES.items()}
    else:
        names = list(TABLE_NAMES)
        loaded = await asyncio.gather(
            *(asyncio.to_thread(read_json_blob, data_dir / f"{TABLE_NAMES[name]}.json") for name in names)
        )
        blobs = dict(zip(names, loaded))

    data = prepare_tables(blobs)
    for name, df in data.items():
        logger.info("Loaded %s: %d rows", name, len(df))
    return data


def format_unix_timestamps(series: pd.Series, timezone: str, fmt: str) -> pd.Series:
    if series.empty:
        return pd.Series([], index=series.index, dtype=object)
    seconds = pd.to_numeric(series, errors="coerce")
    seconds = seconds.where((seconds > 0) & (seconds < MAX_UNIX_SECONDS))
    stamps = pd.to_datetime(seconds, unit="s", utc=True, errors="coerce").dt.tz_convert(timezone)
    return stamps.dt.strftime(fmt).where(stamps.notna(), "").astype(object)


def date_part(series: pd.Series) -> pd.Series:
    return series.map(lambda v: v.strip().split(" ")[0] if isinstance(v, str) and v.strip() else None)
