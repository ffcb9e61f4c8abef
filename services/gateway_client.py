"""Remote gateway client for Gateway Mirror.

This module handles all communication with registered gateways. Each
operation performs exactly one authenticated HTTP call; retrying is left
to whoever triggers the next sync.
"""

from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from config import ApplicationConfig
from models import Gateway
from utils import create_contextual_logger, get_correlation_id

from .errors import RemoteCallFailed, RemoteProtocolError, RemoteUnreachable


class GatewayClient:
    """Blocking HTTP client for the gateway API, shared by all gateways."""

    def __init__(self, config: ApplicationConfig) -> None:
        self.config = config
        self.logger = create_contextual_logger(__name__, service="gateway_client")

    def _execute_request(
        self,
        gateway: Gateway,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Any] = None,
    ) -> requests.Response:
        """Send one request to the gateway. Transport failures raise RemoteUnreachable."""
        full_url = gateway.url + endpoint
        headers = {
            "User-Agent": f"Gateway-Mirror/{self.config.app_version}",
            "Accept": "application/json",
            "Authorization": f"Bearer {gateway.token}",
        }
        if data is not None:
            headers["Content-Type"] = "application/json"
        correlation_id = get_correlation_id()
        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id

        self.logger.debug("Calling gateway", gateway_id=gateway.id, method=method, endpoint=endpoint)
        try:
            with requests.Session() as session:
                return session.request(
                    method=method.upper(),
                    url=full_url,
                    params=params,
                    json=data,
                    timeout=self.config.gateway_request_timeout,
                    headers=headers,
                )
        except requests.exceptions.RequestException as e:
            self.logger.warning("Gateway unreachable", gateway_id=gateway.id, endpoint=endpoint, error=str(e))
            raise RemoteUnreachable(e) from e

    def _decode(self, gateway: Gateway, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            self.logger.warning("Gateway returned malformed JSON", gateway_id=gateway.id, url=response.url)
            raise RemoteProtocolError("body is not valid JSON", cause=e) from e

    def _get_json(
        self, gateway: Gateway, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        response = self._execute_request(gateway, "GET", endpoint, params=params)
        if not 200 <= response.status_code < 300:
            self.logger.warning(
                "Gateway call failed", gateway_id=gateway.id, endpoint=endpoint, status_code=response.status_code
            )
            raise RemoteCallFailed(response.status_code)

        body = self._decode(gateway, response)
        if not isinstance(body, dict):
            raise RemoteProtocolError(f"expected a JSON object from {endpoint}")
        return body

    @staticmethod
    def _records(body: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        """Extract the list under ``key``; a missing list means no records."""
        records = body.get(key)
        if records is None:
            return []
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise RemoteProtocolError(f"'{key}' must be a list of objects")
        return records

    # --- Sync operations ---
    def list_sessions(self, gateway: Gateway) -> List[Dict[str, Any]]:
        return self._records(self._get_json(gateway, "/sessions"), "sessions")

    def list_cron(self, gateway: Gateway) -> List[Dict[str, Any]]:
        body = self._get_json(gateway, "/cron", params={"includeDisabled": "true"})
        return self._records(body, "jobs")

    def fetch_history(self, gateway: Gateway, session_key: str, limit: int) -> List[Dict[str, Any]]:
        endpoint = f"/sessions/{quote(session_key, safe='')}/history"
        body = self._get_json(gateway, endpoint, params={"limit": limit})
        return self._records(body, "messages")

    def fetch_status(self, gateway: Gateway) -> Dict[str, Any]:
        return self._get_json(gateway, "/status")

    # --- Pass-through ---
    def request(
        self, gateway: Gateway, method: str, endpoint: str, body: Optional[Any] = None
    ) -> Tuple[int, Any]:
        """Forward an arbitrary request and return (status_code, decoded body).

        Non-2xx responses are returned rather than raised so they can be
        relayed to the caller unchanged.
        """
        data = body if method.upper() != "GET" else None
        response = self._execute_request(gateway, method, endpoint, data=data)
        if not response.content:
            return response.status_code, None
        return response.status_code, self._decode(gateway, response)
