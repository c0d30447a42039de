"""Thin async client for a PostgREST backend (Supabase-style hosting).

Only the pieces the gateways need: table reads with exact counts, inserts
and updates returning the stored representation, filtered deletes, and the
signed-in user lookup on the auth endpoint.
"""

from typing import Any, Optional

import httpx
import logfire

from eventtalk.adapter.error import PostgrestError
from eventtalk.config import GatewaySettings
from eventtalk.domain.error import AuthorizationError

Params = dict[str, str]
Row = dict[str, Any]


def parse_content_range(header: Optional[str]) -> Optional[int]:
    """Extract the total from a Content-Range header.

    PostgREST answers ``0-19/57`` (or ``*/57`` for an empty range) when an
    exact count was requested, and ``*`` as the total when it was not.

    Returns:
        Total row count, or None if the header carries none
    """
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1].strip()
    if not total.isdigit():
        return None
    return int(total)


def _error_reason(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("msg") or body)
    return str(body)


class PostgrestClient:
    """Issues authenticated requests against the REST and auth endpoints."""

    def __init__(self, http: httpx.AsyncClient, settings: GatewaySettings) -> None:
        """Initialize the client.

        Args:
            http: Shared HTTP client; its lifetime is managed by the caller
            settings: Backend URL, keys and timeout
        """
        self.http = http
        self.settings = settings

    def _headers(self, prefer: Optional[str] = None) -> dict[str, str]:
        token = self.settings.access_token or self.settings.api_key
        headers = {
            "apikey": self.settings.api_key,
            "Authorization": f"Bearer {token}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _send(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        params: Optional[Params] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> httpx.Response:
        try:
            response = await self.http.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(prefer),
                timeout=self.settings.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            logfire.error("Backend request timed out", operation=operation, url=url)
            raise PostgrestError(operation, "request timed out") from e
        except httpx.HTTPError as e:
            logfire.error(
                "Backend request failed", operation=operation, url=url, error=str(e)
            )
            raise PostgrestError(operation, str(e) or type(e).__name__) from e

        if response.status_code in (401, 403):
            logfire.warn(
                "Backend rejected credentials",
                operation=operation,
                status_code=response.status_code,
            )
            raise AuthorizationError(operation)
        if response.is_error:
            reason = _error_reason(response)
            logfire.error(
                "Backend returned an error",
                operation=operation,
                status_code=response.status_code,
                reason=reason,
            )
            raise PostgrestError(operation, reason, response.status_code)
        return response

    def _table_url(self, table: str) -> str:
        return f"{self.settings.rest_url}/{table}"

    async def select(
        self,
        table: str,
        operation: str,
        params: Params,
        *,
        count: bool = False,
    ) -> tuple[list[Row], Optional[int]]:
        """Read rows from a table.

        Args:
            table: Table or view name
            operation: Human readable operation name used in errors
            params: PostgREST query parameters (select, filters, order, ...)
            count: Ask for the exact total row count of the query

        Returns:
            Tuple of (rows, total); total is None unless counted
        """
        response = await self._send(
            operation,
            "GET",
            self._table_url(table),
            params=params,
            prefer="count=exact" if count else None,
        )
        total = (
            parse_content_range(response.headers.get("content-range"))
            if count
            else None
        )
        return response.json(), total

    async def count(self, table: str, operation: str, params: Params) -> int:
        """Count the rows matching ``params`` without transferring them."""
        response = await self._send(
            operation,
            "HEAD",
            self._table_url(table),
            params=params,
            prefer="count=exact",
        )
        total = parse_content_range(response.headers.get("content-range"))
        if total is None:
            raise PostgrestError(operation, "response carried no row count")
        return total

    async def insert(
        self, table: str, operation: str, row: Row, *, select: str = "*"
    ) -> Row:
        """Insert one row and return its stored representation."""
        response = await self._send(
            operation,
            "POST",
            self._table_url(table),
            params={"select": select},
            json=row,
            prefer="return=representation",
        )
        rows = response.json()
        if not rows:
            raise PostgrestError(operation, "insert returned no row")
        return rows[0]

    async def update(
        self,
        table: str,
        operation: str,
        params: Params,
        values: Row,
        *,
        select: Optional[str] = None,
    ) -> list[Row]:
        """Update the rows matching ``params``.

        Returns:
            The updated rows when ``select`` is given, else an empty list
        """
        if select is not None:
            params = {**params, "select": select}
        returning = select is not None
        response = await self._send(
            operation,
            "PATCH",
            self._table_url(table),
            params=params,
            json=values,
            prefer="return=representation" if returning else "return=minimal",
        )
        return response.json() if returning else []

    async def delete(self, table: str, operation: str, params: Params) -> None:
        """Delete the rows matching ``params``."""
        await self._send(
            operation,
            "DELETE",
            self._table_url(table),
            params=params,
            prefer="return=minimal",
        )

    async def current_user_id(self, operation: str) -> str:
        """Id of the user the access token belongs to.

        Raises:
            AuthorizationError: If there is no session token or it is rejected
        """
        if not self.settings.access_token:
            raise AuthorizationError(operation)
        response = await self._send(
            operation, "GET", f"{self.settings.url.rstrip('/')}/auth/v1/user"
        )
        user_id = response.json().get("id")
        if not user_id:
            raise AuthorizationError(operation)
        return user_id
