"""httpx-backed transport."""

import httpx

from src.config.settings import get_settings
from src.logging.structured import (
    RequestTimer,
    generate_request_id,
    get_logger,
    request_id_var,
)
from src.transport.base import HTTPResponse, Transport

logger = get_logger("transport")


class HttpxTransport(Transport):
    """Synchronous transport over a lazily created httpx.Client.

    Redirects are not followed: the login POST answers with a 303 whose
    Set-Cookie headers carry the session.
    """

    def __init__(self, timeout: float | None = None, connect_timeout: float | None = None):
        settings = get_settings()
        self._timeout = timeout if timeout is not None else settings.request_timeout
        self._connect_timeout = (
            connect_timeout if connect_timeout is not None else settings.connect_timeout
        )
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self._timeout, connect=self._connect_timeout),
                follow_redirects=False,
            )
        return self._client

    def get(self, url: str, headers: dict[str, str] | None = None) -> HTTPResponse | None:
        return self._send("GET", url, headers=headers)

    def post(
        self,
        url: str,
        fields: list[tuple[str, str]],
        headers: dict[str, str] | None = None,
    ) -> HTTPResponse | None:
        # (None, value) tuples force multipart encoding without filenames
        files = [(name, (None, value)) for name, value in fields]
        return self._send("POST", url, headers=headers, files=files)

    def _send(self, method: str, url: str, **kwargs) -> HTTPResponse | None:
        client = self._get_client()
        token = request_id_var.set(generate_request_id())
        try:
            with RequestTimer() as timer:
                response = client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            logger.warning(
                "Request timed out",
                extra={"event_data": {"method": method, "url": url}},
            )
            return None
        except httpx.HTTPError as e:
            logger.warning(
                "Request failed",
                extra={"event_data": {"method": method, "url": url, "error": str(e)}},
            )
            return None
        else:
            logger.debug(
                "Request completed",
                extra={"event_data": {
                    "method": method,
                    "url": url,
                    "status_code": response.status_code,
                    "latency_ms": timer.elapsed_ms,
                }},
            )
            return _to_response(response)
        finally:
            request_id_var.reset(token)

    def close(self) -> None:
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None


def _to_response(response: httpx.Response) -> HTTPResponse:
    return HTTPResponse(
        status_code=response.status_code,
        text=response.text,
        headers=dict(response.headers),
        set_cookies=response.headers.get_list("set-cookie"),
    )
