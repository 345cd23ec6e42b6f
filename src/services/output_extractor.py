"""Recover a title line and a table/file directive from advisor text.

The advisor mixes prose with an optional machine-readable directive and
there is no strict delimiter contract, so every stage here is best-effort
and returns None instead of raising.

Directive strategies, first success wins:

1. A fenced code block (```json preferred, then a bare fence) holding
   {"output_format": ..., "table": {"headers": [...], "rows": [[...]]}}
2. The span from the first '{' to the last '}' parsed the same way
3. A literal markdown table; the format is then inferred from the
   user's own message

Example:
    extracted = extract_structured_output(raw_text, user_text="make me a csv")
    if extracted.directive:
        encode_table(extracted.directive.output_format, extracted.directive.table)
"""

from dataclasses import dataclass

from pydantic import BaseModel, ValidationError

TITLE_MARKER = "TITLE:"
TITLE_MAX_LENGTH = 80
DEFAULT_OUTPUT_FORMAT = "xlsx"

_FENCE = "```"
_FENCE_MARKERS = ("```json", "```")


class TableSpec(BaseModel):
    """Plain string table: one header row plus data rows."""

    headers: list[str]
    rows: list[list[str]]


class FileIntent(BaseModel):
    """JSON directive the advisor appends when its answer holds a table."""

    output_format: str
    table: TableSpec


@dataclass(frozen=True)
class FileDirective:
    """Resolved instruction to render a table as a downloadable file."""

    output_format: str
    table: TableSpec


@dataclass(frozen=True)
class ExtractedOutput:
    title: str | None
    body: str
    directive: FileDirective | None


def _truncate(value: str, limit: int = TITLE_MAX_LENGTH) -> str:
    return value[:limit]


def extract_title(raw: str) -> tuple[str | None, str]:
    """Split an optional leading 'TITLE: ...' line from the advisor text.

    Args:
        raw: Raw advisor text.

    Returns:
        (title, body). The title is trimmed and capped at 80 characters;
        an empty marker yields no title. A blank line directly after the
        marker line is dropped. Without a marker the body is the whole text.
    """
    lines = raw.splitlines()
    if not lines:
        return None, raw

    first = lines[0].strip()
    if not first.startswith(TITLE_MARKER):
        return None, raw

    remainder = first[len(TITLE_MARKER):].strip()
    title = _truncate(remainder) if remainder else None

    rest = lines[1:]
    if rest and not rest[0].strip():
        rest = rest[1:]
    return title, "\n".join(rest)


def derive_title(body: str) -> str | None:
    """Use the first non-blank line of body, capped at 80 characters."""
    for line in body.splitlines():
        stripped = line.strip()
        if stripped:
            return _truncate(stripped)
    return None


def _parse_intent(candidate: str) -> FileIntent | None:
    try:
        return FileIntent.model_validate_json(candidate.strip())
    except ValidationError:
        return None


def extract_file_intent(text: str) -> FileIntent | None:
    """Find a JSON file directive in a fenced block or a bare brace span."""
    for marker in _FENCE_MARKERS:
        start = text.find(marker)
        if start == -1:
            continue
        after = text[start + len(marker):]
        end = after.find(_FENCE)
        if end == -1:
            continue
        intent = _parse_intent(after[:end])
        if intent is not None:
            return intent

    first_open = text.find("{")
    last_close = text.rfind("}")
    if first_open != -1 and first_open < last_close:
        return _parse_intent(text[first_open:last_close + 1])
    return None


def _split_cells(line: str) -> list[str]:
    # Only the empty edge tokens go; blank inner cells keep their column
    tokens = line.split("|")
    if tokens and not tokens[0].strip():
        tokens = tokens[1:]
    if tokens and not tokens[-1].strip():
        tokens = tokens[:-1]
    return [cell.strip() for cell in tokens]


def parse_markdown_table(text: str) -> TableSpec | None:
    """Parse the first contiguous run of '|'-delimited lines as a table.

    The first line holds headers and the second is the separator. Data
    rows are padded with empty strings or truncated to the header width.

    Returns:
        TableSpec with at least one data row, else None.
    """
    table_lines: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("|") and stripped.endswith("|"):
            table_lines.append(stripped)
        elif table_lines:
            break

    if len(table_lines) < 2:
        return None

    headers = _split_cells(table_lines[0])
    if not any(headers):
        return None

    rows: list[list[str]] = []
    for line in table_lines[2:]:
        cells = _split_cells(line)
        if not any(cells):
            continue
        cells = cells[: len(headers)]
        cells.extend([""] * (len(headers) - len(cells)))
        rows.append(cells)

    if not rows:
        return None
    return TableSpec(headers=headers, rows=rows)


def detect_format_from_message(message: str) -> str:
    """Infer csv/xlsx from keywords in the user's message, xlsx by default."""
    lowered = message.lower()
    if "csv" in lowered or "comma-separated" in lowered:
        return "csv"
    if "excel" in lowered or "xlsx" in lowered or "spreadsheet" in lowered:
        return "xlsx"
    return DEFAULT_OUTPUT_FORMAT


def extract_directive(
    text: str,
    user_text: str,
    output_format: str | None = None,
    table: TableSpec | None = None,
) -> FileDirective | None:
    """Complete a caller-supplied format/table pair from the advisor text.

    A JSON intent replaces both values when either is missing. A markdown
    table fills a still-missing table, and only then is a still-missing
    format inferred from the user's message.
    """
    if not output_format or table is None:
        intent = extract_file_intent(text)
        if intent is not None:
            output_format, table = intent.output_format, intent.table

    if table is None:
        table = parse_markdown_table(text)
        if table is not None and not output_format:
            output_format = detect_format_from_message(user_text)

    if not output_format or table is None:
        return None
    return FileDirective(output_format=output_format, table=table)


def extract_structured_output(
    raw: str,
    user_text: str,
    output_format: str | None = None,
    table: TableSpec | None = None,
) -> ExtractedOutput:
    """Extract the explicit title, the body and an optional file directive.

    Args:
        raw: Raw advisor text.
        user_text: The user's original message, used only to infer the
            output format for a bare markdown table.
        output_format: Format requested explicitly by the caller, if any.
        table: Table supplied explicitly by the caller, if any.

    Returns:
        ExtractedOutput. Never raises; no directive means no file intended.
    """
    title, body = extract_title(raw)
    return ExtractedOutput(
        title=title,
        body=body,
        directive=extract_directive(body, user_text, output_format, table),
    )
