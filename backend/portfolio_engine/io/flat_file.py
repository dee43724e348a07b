"""Comma-delimited flat-file reader for core-banking extracts.

The first non-blank line holds the headers; each following non-blank line is
one record.  Lines break on LF or CRLF only.  Values are kept as text and
trimmed, short rows are padded with "" and fields beyond the header are
dropped.  Quoted fields may contain commas.
"""

from __future__ import annotations

import io
import re

import pandas as pd

_BOM = "\ufeff"
_LINE_BREAK = re.compile(r"\r?\n")


def _non_blank_lines(text: str) -> list[str]:
    return [line for line in _LINE_BREAK.split(text) if line.strip() != ""]


def _read_frame(text: str, **kwargs) -> pd.DataFrame:
    df = pd.read_csv(
        io.StringIO(text),
        sep=",",
        header=None,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        skipinitialspace=True,
        lineterminator="\n",
        **kwargs,
    )
    return df.fillna("")


def read_headers(text: str) -> list[str]:
    """Return the trimmed header row, or [] for an empty file."""
    lines = _non_blank_lines(text)
    if not lines:
        return []
    header_line = lines[0].lstrip(_BOM)
    if header_line.strip() == "":
        return []
    frame = _read_frame(header_line, nrows=1)
    return [str(h).strip() for h in frame.iloc[0].tolist()]


def parse_flat_file(text: str) -> list[dict[str, str]]:
    """Parse delimited text into one ``{header: value}`` dict per data line."""
    lines = _non_blank_lines(text)
    if len(lines) < 2:
        return []

    headers = read_headers(lines[0])
    if not headers:
        return []

    # Column names must cover the widest row, or pandas rejects it; an
    # unquoted comma count is an upper bound on the field count.
    data_lines = lines[1:]
    span = max(len(headers), max(line.count(",") for line in data_lines) + 1)
    frame = _read_frame(
        "\n".join(data_lines),
        names=list(range(span)),
        index_col=False,
    )

    rows: list[dict[str, str]] = []
    for values in frame.itertuples(index=False, name=None):
        rows.append({header: str(values[j]).strip() for j, header in enumerate(headers)})
    return rows
