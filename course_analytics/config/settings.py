from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from course_analytics.features.filters import ALL, CompletionFilter


def _load_env(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip().lstrip("\ufeff")
        value = value.strip().strip("\"").strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


@dataclass(frozen=True)
class Settings:
    base_dir: Path
    data_dir: Path
    export_file: Path | None
    output_dir: Path
    table_dir: Path
    display_timezone: str
    timestamp_format: str
    top_n: int
    log_level: str
    record_filter: CompletionFilter | None


def _record_filter() -> CompletionFilter | None:
    flt = CompletionFilter(
        search_term=os.getenv("FILTER_SEARCH", ""),
        status=os.getenv("FILTER_STATUS") or ALL,
        user=os.getenv("FILTER_USER") or ALL,
        course=os.getenv("FILTER_COURSE") or ALL,
        upload_date=os.getenv("FILTER_UPLOAD_DATE") or ALL,
        instructor=os.getenv("FILTER_INSTRUCTOR") or ALL,
        audience=os.getenv("FILTER_AUDIENCE") or ALL,
    )
    return None if flt == CompletionFilter() else flt


def get_settings() -> Settings:
    base_dir = Path(os.getenv("ANALYTICS_BASE_DIR", Path.cwd())).resolve()
    _load_env(base_dir / ".env")
    output_dir = Path(os.getenv("OUTPUT_DIR", base_dir / "output"))
    export_file = os.getenv("EXPORT_FILE")

    return Settings(
        base_dir=base_dir,
        data_dir=Path(os.getenv("DATA_DIR", base_dir / "db")),
        export_file=Path(export_file) if export_file else None,
        output_dir=output_dir,
        table_dir=output_dir / "tables",
        display_timezone=os.getenv("DISPLAY_TIMEZONE", "UTC"),
        timestamp_format=os.getenv("TIMESTAMP_FORMAT", "%Y-%m-%d %H:%M:%S"),
        top_n=int(os.getenv("TOP_N", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        record_filter=_record_filter(),
    )
