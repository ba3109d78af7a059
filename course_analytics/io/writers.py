from __future__ import annotations

import csv
from pathlib import Path
import pandas as pd


def ensure_dirs(*dirs: Path) -> None:
    for path in dirs:
        path.mkdir(parents=True, exist_ok=True)


def save_table(df: pd.DataFrame, path: Path) -> None:
    # Every value quoted, embedded quotes doubled.
    df.to_csv(path, index=False, quoting=csv.QUOTE_ALL, doublequote=True)


def md_table(headers: list[str], rows: list[list[str]]) -> str:
    lines = ["| " + " | ".join(headers) + " |", "| " + " | ".join(["---"] * len(headers)) + " |"]
    for row in rows:
        lines.append("| " + " | ".join(cell.replace("|", "\\|") for cell in row) + " |")
    return "\n".join(lines)


def fmt_pct(value: float | int | None) -> str:
    if value is None or pd.isna(value):
        return "n/a"
    return f"{value * 100:.1f}%"


def fmt_int(value: float | int | None) -> str:
    if value is None or pd.isna(value):
        return "n/a"
    return f"{int(value)}"


def clean_text(val: object) -> str | None:
    if isinstance(val, (int, float)) and not isinstance(val, bool) and not pd.isna(val):
        val = str(int(val)) if float(val).is_integer() else str(val)
    if not isinstance(val, str):
        return None
    # Normalize common messy whitespace/encoding artifacts from exports.
    # - NBSP (\u00a0) -> space
    # - "Â" (\u00c2) can appear when NBSP is mis-decoded in upstream exports
    val = val.replace("\u00c2", "").replace("\u00a0", " ").strip()
    val = " ".join(val.split())
    if not val or val.lower() in {"nan", "none"}:
        return None
    return val


def safe_label(*candidates: object, default: str = "Unknown") -> str:
    """First candidate that cleans to a non-empty label, else ``default``."""
    for candidate in candidates:
        cleaned = clean_text(candidate)
        if cleaned:
            return cleaned
    return default
