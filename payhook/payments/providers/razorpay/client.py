"""Razorpay REST client."""

from typing import Any

import httpx

from payhook.core.exceptions import ArtifactCreationError, ArtifactGatewayTimeoutError
from payhook.core.logging import get_logger

logger = get_logger(__name__)


class RazorpayClient:
    """Minimal async client for the Razorpay REST API.

    Only the "create" calls used by the gateways are implemented.
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body and return the decoded response.

        Raises:
            ArtifactGatewayTimeoutError: On connect/read timeout
            ArtifactCreationError: On transport errors or non-2xx responses
        """
        url = f"{self.base_url}/{path.lstrip('/')}"

        try:
            async with httpx.AsyncClient(
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(url, json=payload)
        except httpx.TimeoutException as e:
            logger.error("Razorpay timeout: path=%s, error=%s", path, e)
            raise ArtifactGatewayTimeoutError(
                message=f"Razorpay did not respond within {self.timeout}s",
                details={"path": path},
            ) from e
        except httpx.HTTPError as e:
            logger.error("Razorpay unreachable: path=%s, error=%s", path, e)
            raise ArtifactCreationError(
                message=f"Razorpay unreachable: {e}",
                details={"path": path},
            ) from e

        if response.is_error:
            code, description = self._error_from_response(response)
            logger.error(
                "Razorpay error: path=%s, status=%d, code=%s, description=%s",
                path,
                response.status_code,
                code,
                description,
            )
            raise ArtifactCreationError(
                message=description,
                details={"status_code": response.status_code, "code": code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ArtifactCreationError(
                message="Razorpay returned a non-JSON response",
                details={"status_code": response.status_code},
            ) from e

        if not isinstance(data, dict):
            raise ArtifactCreationError(
                message="Razorpay returned an unexpected response body",
                details={"status_code": response.status_code},
            )
        return data

    @staticmethod
    def _error_from_response(response: httpx.Response) -> tuple[str | None, str]:
        """Extract (code, description) from a Razorpay error body."""
        try:
            error = response.json().get("error") or {}
        except (ValueError, AttributeError):
            error = {}

        if not isinstance(error, dict):
            error = {}

        description = error.get("description") or f"Razorpay returned HTTP {response.status_code}"
        return error.get("code"), description
