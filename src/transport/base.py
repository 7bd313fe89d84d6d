"""Abstract base for the HTTP transport used by the account client."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class HTTPResponse:
    status_code: int
    text: str
    headers: dict[str, str] = field(default_factory=dict)
    set_cookies: list[str] = field(default_factory=list)  # raw Set-Cookie header values

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299


class Transport(ABC):
    """Issues requests and returns the response, or None when the request never completed."""

    @abstractmethod
    def get(self, url: str, headers: dict[str, str] | None = None) -> HTTPResponse | None:
        ...

    @abstractmethod
    def post(
        self,
        url: str,
        fields: list[tuple[str, str]],
        headers: dict[str, str] | None = None,
    ) -> HTTPResponse | None:
        """POST `fields` as multipart/form-data."""
        ...

    def close(self) -> None:
        """Cleanup resources. Override if the transport holds connections."""
        pass
