"""Upstream client abstractions shared by the sales and employee endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from sales_aggregator.domain.exceptions import UpstreamError, UpstreamTimeoutError


@dataclass(frozen=True)
class UpstreamConfig:
    """Connection settings for the upstream commerce API."""

    base_url: str
    access_token: Optional[str] = None
    secret_access_token: Optional[str] = None
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must be provided")
        if self.timeout <= 0:
            raise ValueError("timeout must be greater than zero")

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["access-token"] = self.access_token
        if self.secret_access_token:
            headers["secret-access-token"] = self.secret_access_token
        return headers


class BaseUpstreamClient:
    """Issues GET requests upstream and maps every failure onto ``UpstreamError``.

    Requests are never retried: a non-2xx status, a transport fault, a timeout
    or an undecodable body all surface immediately to the caller.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        config: UpstreamConfig,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._http = http_client
        self.config = config
        self.logger = logger or logging.getLogger(
            f"{__name__}.{self.__class__.__name__}"
        )

    async def get_json(self, path: str, params: Mapping[str, Any]) -> Any:
        url = f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"
        self.log_request(path, params)
        try:
            http_response = await self._http.get(
                url,
                params=dict(params),
                headers=self.config.headers(),
                timeout=self.config.timeout,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(
                f"Upstream request to {path} timed out",
                context={"path": path, "timeout": self.config.timeout},
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UpstreamError(
                str(exc) or "Upstream transport failure",
                context={"path": path},
            ) from exc

        return self._map_response(path, http_response)

    def log_request(self, path: str, params: Mapping[str, Any]) -> None:
        self.logger.debug(
            "upstream_request",
            extra={
                "path": path,
                "params": dict(params),
                "client": self.__class__.__name__,
            },
        )

    def log_response(self, path: str, http_response: httpx.Response) -> None:
        self.logger.debug(
            "upstream_response",
            extra={
                "path": path,
                "status_code": http_response.status_code,
                "latency": self._safe_elapsed(http_response),
                "client": self.__class__.__name__,
            },
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _map_response(self, path: str, http_response: httpx.Response) -> Any:
        status = http_response.status_code
        self.log_response(path, http_response)

        if not 200 <= status < 300:
            body = self._safe_body(http_response)
            message = None
            if isinstance(body, Mapping):
                message = body.get("message") or body.get("error")
            raise UpstreamError(
                str(message) if message else f"Upstream responded with HTTP {status}",
                status_code=status,
                body=body,
                context={"path": path, "status_code": status},
            )

        try:
            return http_response.json()
        except ValueError as exc:
            raise UpstreamError(
                "Upstream returned a non-JSON body",
                status_code=status,
                body=http_response.text,
                context={"path": path},
            ) from exc

    @staticmethod
    def _safe_body(http_response: httpx.Response) -> Any:
        try:
            return http_response.json()
        except ValueError:
            return http_response.text or None

    @staticmethod
    def _safe_elapsed(http_response: httpx.Response) -> float:
        try:
            elapsed = http_response.elapsed
        except RuntimeError:
            return 0.0
        return elapsed.total_seconds() if elapsed else 0.0
