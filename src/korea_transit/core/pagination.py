"""Index-range pagination over the Seoul open-data datasets.

The portal serves every dataset as `{endpoint}/{start}/{end}/...` with at
most 1000 rows per request, wrapped in a result envelope that carries a
status code, a message and the dataset's total row count.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from pydantic import ValidationError as PydanticValidationError

from .constants import (
    BUS_HEADER_NO_DATA,
    BUS_HEADER_SUCCESS,
    MAX_LIMIT,
    PAGE_SIZE,
    RESULT_NO_DATA,
    RESULT_SUCCESS,
)
from .exceptions import TransitError, UpstreamError
from .models import PageRequest, PageResponse, PageResult, RowT

logger = logging.getLogger(__name__)


class JsonFetcher(Protocol):
    async def fetch_json(self, url: str, timeout: float | None = None) -> Any: ...


def read_envelope(
    payload: Any, envelope_key: str, rows_key: str | None = None
) -> PageResponse | None:
    """Normalise an upstream payload into a PageResponse.

    Handles the shapes the portal uses:

    * `{key: {list_total_count, RESULT: {CODE, MESSAGE}, row: [...]}}`
    * `{key: {code, message, total}, rows_key: [...]}` (realtime subway API)
    * a bare top-level `RESULT` block or `code`/`message` pair, which is how
      errors and "no data" are reported

    Returns:
        The normalised envelope, or None when the payload carries none
    """
    if not isinstance(payload, dict):
        return None

    nested = payload.get(envelope_key)
    if isinstance(nested, dict):
        status = nested.get("RESULT", nested)
        rows = payload.get(rows_key) if rows_key else nested.get("row")
        return PageResponse(
            code=_status_field(status, "CODE", "code") or RESULT_SUCCESS,
            message=_status_field(status, "MESSAGE", "message"),
            total_count=_to_int(
                nested.get("list_total_count", nested.get("total"))
            ),
            rows=as_row_list(rows),
        )

    status = payload.get("RESULT")
    if isinstance(status, dict):
        return PageResponse(
            code=_status_field(status, "CODE", "code"),
            message=_status_field(status, "MESSAGE", "message"),
        )
    if "code" in payload:
        return PageResponse(
            code=str(payload["code"]),
            message=str(payload.get("message", "")),
            total_count=_to_int(payload.get("total")),
        )
    return None


def read_bus_envelope(payload: Any) -> PageResponse:
    """Normalise a ws.bus.go.kr payload (`msgHeader` + `msgBody.itemList`).

    Header code "0" maps to success and "4" (no results) to no data.
    """
    if not isinstance(payload, dict):
        raise UpstreamError("버스 API 응답 형식이 올바르지 않습니다")

    header = payload.get("msgHeader") or {}
    header_code = str(header.get("headerCd", ""))
    if header_code == BUS_HEADER_SUCCESS:
        code = RESULT_SUCCESS
    elif header_code == BUS_HEADER_NO_DATA:
        code = RESULT_NO_DATA
    else:
        code = header_code or "UNKNOWN"

    body = payload.get("msgBody") or {}
    rows = as_row_list(body.get("itemList"))
    return PageResponse(
        code=code,
        message=str(header.get("headerMsg", "")),
        total_count=_to_int(header.get("itemCount")) or len(rows),
        rows=rows,
    )


def has_rows(envelope: PageResponse) -> bool:
    """Check an envelope's status.

    Returns:
        True on success, False when the upstream reports no matching rows

    Raises:
        UpstreamError: For any other status code
    """
    if envelope.code == RESULT_SUCCESS:
        return True
    if envelope.code == RESULT_NO_DATA:
        return False
    raise UpstreamError(f"API 오류: {envelope.message}", code=envelope.code)


def parse_rows(rows: Iterable[dict], row_model: type[RowT]) -> list[RowT]:
    """Validate raw rows into typed models, skipping rows that do not fit."""
    parsed: list[RowT] = []
    for raw in rows:
        try:
            parsed.append(row_model.model_validate(raw))
        except PydanticValidationError as e:
            logger.warning(f"Dropping malformed {row_model.__name__} row: {e}")
    return parsed


async def fetch_page(
    client: JsonFetcher,
    endpoint: str,
    row_model: type[RowT],
    envelope_key: str,
    *,
    limit: int = MAX_LIMIT,
    rows_key: str | None = None,
    suffix: str = "",
    timeout: float | None = None,
) -> PageResult[RowT]:
    """Fetch the first `min(limit, 20)` rows of a dataset.

    Args:
        client: Object providing `fetch_json`
        endpoint: Dataset URL without the index segments
        row_model: Model each row is validated into
        envelope_key: Top-level key holding the result envelope
        limit: Number of rows wanted, capped at 20
        rows_key: Top-level key of the row list when it sits beside the envelope
        suffix: Path segment appended after the index range (e.g. a station name)
        timeout: Request timeout in seconds

    Returns:
        Result set; empty when the upstream reports no rows

    Raises:
        UpstreamError: If the envelope reports a failure
        NetworkError: If the request itself fails
    """
    effective_limit = max(1, min(limit, MAX_LIMIT))
    request = PageRequest(
        endpoint=endpoint, start=1, end=effective_limit, suffix=suffix
    )

    payload = await client.fetch_json(request.url, timeout=timeout)
    envelope = read_envelope(payload, envelope_key, rows_key)
    if envelope is None or not has_rows(envelope):
        return PageResult[row_model].empty()  # type: ignore[valid-type]

    items = parse_rows(envelope.rows, row_model)[:effective_limit]
    return PageResult[row_model](  # type: ignore[valid-type]
        items=items, total_count=envelope.total_count
    )


async def fetch_pages(
    client: JsonFetcher,
    endpoint: str,
    row_model: type[RowT],
    envelope_key: str,
    *,
    limit: int,
    max_pages: int,
    predicate: Callable[[RowT], bool] | None = None,
    page_size: int = PAGE_SIZE,
    rows_key: str | None = None,
    suffix: str = "",
    timeout: float | None = None,
) -> PageResult[RowT]:
    """Walk consecutive page windows until enough matching rows are found.

    Pages are requested one after another. The walk stops when `limit`
    matching rows have been gathered, when a page comes back short (end of
    data), or after `max_pages` requests. A failing page after the first one
    ends the walk and keeps what was gathered; a failing first page raises.

    Args:
        predicate: Row filter applied before the limit slice
        page_size: Rows per request, at most 1000

    Returns:
        At most `limit` matching rows in upstream order
    """
    items: list[RowT] = []
    total_count = 0

    for page in range(1, max_pages + 1):
        request = PageRequest(
            endpoint=endpoint,
            start=(page - 1) * page_size + 1,
            end=page * page_size,
            suffix=suffix,
        )
        try:
            payload = await client.fetch_json(request.url, timeout=timeout)
            envelope = read_envelope(payload, envelope_key, rows_key)
            if envelope is None or not has_rows(envelope):
                break
        except TransitError as e:
            if page == 1:
                raise
            logger.warning(
                f"{envelope_key} page {page} failed, keeping {len(items)} rows: {e}"
            )
            break

        total_count = envelope.total_count
        rows = parse_rows(envelope.rows, row_model)
        items.extend(row for row in rows if predicate is None or predicate(row))

        if len(items) >= limit or len(envelope.rows) < page_size:
            break
        if total_count and request.end >= total_count:
            break

    return PageResult[row_model](  # type: ignore[valid-type]
        items=items[:limit], total_count=total_count
    )


def _status_field(status: Any, upper: str, lower: str) -> str:
    if not isinstance(status, dict):
        return ""
    value = status.get(upper, status.get(lower, ""))
    return "" if value is None else str(value)


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def as_row_list(rows: Any) -> list[dict]:
    if isinstance(rows, dict):
        return [rows]
    if isinstance(rows, list):
        return [row for row in rows if isinstance(row, dict)]
    return []
