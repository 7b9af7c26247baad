"""Send test events to the data-plane ingestion API."""

import base64
from typing import Any, Dict, Optional

import httpx

from dpcheck.core import constants
from dpcheck.core.context import TestContext
from dpcheck.core.exceptions import ApiException, NetworkException, ValidationException
from dpcheck.core.payload import PathLike, PayloadLoader
from dpcheck.utils.logging import get_logger, mask


def basic_auth_header(write_key: str) -> str:
    """Basic auth value with the write key as username and an empty password."""
    token = base64.b64encode(f"{write_key}:".encode()).decode()
    return f"Basic {token}"


def build_headers(write_key: str) -> Dict[str, str]:
    return {
        "Authorization": basic_auth_header(write_key),
        "Content-Type": constants.CONTENT_TYPE,
        "User-Agent": constants.USER_AGENT,
    }


class EventDispatcher:
    """Posts payload fixtures to ``{data_plane_url}/v1/<event type>``.

    Credentials are read from the run's ``TestContext`` at send time. The
    dispatcher never retries; wrap ``send`` in the retry executor instead.
    """

    def __init__(
        self,
        context: TestContext,
        loader: Optional[PayloadLoader] = None,
        timeout: float = constants.API_REQUEST_MS / 1000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the dispatcher.

        Args:
            context: Run context holding the write key and data-plane URL
            loader: Payload loader (default: loader rooted at the working directory)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self.context = context
        self.loader = loader or PayloadLoader()
        self.timeout = timeout
        self.transport = transport
        self.logger = get_logger("event_dispatcher")

    def endpoint_url(self, event_type: str = "identify") -> str:
        try:
            path = constants.EVENT_ENDPOINTS[event_type]
        except KeyError:
            raise ValidationException(
                f"Unknown event type '{event_type}'. "
                f"Expected one of: {', '.join(constants.EVENT_ENDPOINTS)}"
            ) from None
        return f"{self.context.get_data_plane_url().rstrip('/')}{path}"

    async def send(self, payload_path: PathLike, event_type: str = "identify") -> httpx.Response:
        """Load ``payload_path`` and post it as a ``event_type`` event.

        Returns:
            The HTTP response for any non-error status

        Raises:
            ValueNotSetException: write key or data-plane URL missing from the context
            NetworkException: no response was received
            ApiException: the endpoint answered with a 4xx/5xx status
        """
        write_key = self.context.get_write_key()
        url = self.endpoint_url(event_type)
        payload = self.loader.load(payload_path)

        self.logger.info(f"📤 Sending {event_type} event to: {url}")
        self.logger.info(f"🔑 Using write key: {mask(write_key)}")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(url, json=payload, headers=build_headers(write_key))
            except httpx.RequestError as e:
                self.logger.error(f"❌ Failed to send {event_type} event: Network Error: {e}")
                raise NetworkException(e, url=url) from e

        if response.is_error:
            error = ApiException(response.status_code, response.text, url=url)
            self.logger.error(f"❌ Failed to send {event_type} event: {error.message}")
            raise error

        self.logger.info(f"✅ Event sent successfully - Status: {response.status_code}")
        if response.content:
            self.logger.debug(f"📥 Response data: {_body_preview(response)}")
        return response


def _body_preview(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
