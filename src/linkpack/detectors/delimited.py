"""Delimited-text (CSV/TSV/semicolon) URL extraction.

No schema is trusted: the delimiter is sniffed, the header row is guessed,
and the URL column is chosen by header label or by URL-likeness scoring.
"""

from typing import Optional

from linkpack.core.constants import (
    CSV_DELIMITERS,
    CSV_HEADER_KEYS,
    CSV_SCORE_ROWS,
    CSV_SNIFF_CHARS,
)
from linkpack.detectors.base import Detection, Payload, looks_url_like, url_detection


SOURCE_LABEL = "CSV file"


def sniff_delimiter(sample: str, candidates: tuple[str, ...] = CSV_DELIMITERS) -> str:
    """Pick the candidate occurring most often outside double quotes.

    Ties go to the earlier candidate, so comma wins when nothing else does.
    """
    best = candidates[0]
    best_score = -1

    for delimiter in candidates:
        in_quotes = False
        count = 0
        i = 0
        while i < len(sample):
            ch = sample[i]
            if ch == '"':
                if in_quotes and i + 1 < len(sample) and sample[i + 1] == '"':
                    i += 1
                else:
                    in_quotes = not in_quotes
            elif not in_quotes and ch == delimiter:
                count += 1
            i += 1
        if count > best_score:
            best_score = count
            best = delimiter

    return best


def parse_delimited(text: str, delimiter: str) -> list[list[str]]:
    """Quote-aware parse supporting doubled-quote escapes and embedded newlines.

    Rows whose cells are all blank are dropped; cells are trimmed.
    """
    rows: list[list[str]] = []
    row: list[str] = []
    cell: list[str] = []
    in_quotes = False

    s = text.replace("\r\n", "\n").replace("\r", "\n")

    def flush_row() -> None:
        row.append("".join(cell))
        cell.clear()
        if any(c.strip() for c in row):
            rows.append([c.strip() for c in row])
        row.clear()

    i = 0
    while i < len(s):
        ch = s[i]
        if ch == '"':
            if in_quotes and i + 1 < len(s) and s[i + 1] == '"':
                cell.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif not in_quotes and ch == delimiter:
            row.append("".join(cell))
            cell.clear()
        elif not in_quotes and ch == "\n":
            flush_row()
        else:
            cell.append(ch)
        i += 1

    flush_row()
    return rows


def looks_like_header_row(rows: list[list[str]]) -> bool:
    """Row 0 is a header when it has no URL-like cell and row 1 does."""
    if len(rows) < 2:
        return False
    return not any(looks_url_like(c) for c in rows[0]) and any(looks_url_like(c) for c in rows[1])


def find_url_column(rows: list[list[str]]) -> int:
    """Choose the URL column by header label, else by URL-likeness score."""
    header = [c.lower() for c in rows[0]]

    for key in CSV_HEADER_KEYS:
        for idx, label in enumerate(header):
            if label == key or key in label:
                return idx

    sample = rows[1:CSV_SCORE_ROWS]
    column_count = max(len(r) for r in rows)
    best_idx = 0
    best_score = -1
    for col in range(column_count):
        score = sum(1 for r in sample if col < len(r) and looks_url_like(r[col]))
        if score > best_score:
            best_score = score
            best_idx = col
    return best_idx


def extract_delimited_urls(text: str) -> list[str]:
    """Return URL-like cells of the chosen column, in row order."""
    if not text or not text.strip():
        return []

    delimiter = sniff_delimiter(text[:CSV_SNIFF_CHARS])
    rows = parse_delimited(text, delimiter)
    if not rows:
        return []

    column = find_url_column(rows)
    start = 1 if looks_like_header_row(rows) else 0

    urls = []
    for row in rows[start:]:
        value = row[column] if column < len(row) else ""
        if looks_url_like(value):
            urls.append(value)
    return urls


def detect_delimited(payload: Payload) -> Optional[Detection]:
    urls = extract_delimited_urls(payload.clean_text)
    if not urls:
        return None
    return url_detection(SOURCE_LABEL, urls)
