"""
Pirate Metrics client.

This module contains the PirateMetricsClient which validates acquisition,
activation, retention, referral and revenue events and posts them to the
Pirate Metrics API.
"""

import json
import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

import httpx

from blackbeard.config import ClientSettings, load_settings
from blackbeard.constants import (
    MSG_BULK_EMPTY,
    MSG_BULK_INVALID,
    MSG_NOT_SERIALIZABLE,
    MSG_UNKNOWN_EVENT_TYPE,
)
from blackbeard.errors import (
    InvalidEventError,
    MissingApiKeyError,
    NetworkConnectionError,
    RequestTimeoutError,
    UnexpectedResponseError,
)
from blackbeard.events import (
    EventType,
    Record,
    get_schema,
    validate_batch,
    validate_event,
)
from blackbeard.meta import get_meta_http_headers

logger = logging.getLogger(__name__)


def _resolve_event_type(event_type: Union[str, EventType]) -> EventType:
    try:
        return EventType.parse(event_type)
    except ValueError as e:
        raise InvalidEventError(f"{MSG_UNKNOWN_EVENT_TYPE} {event_type!r}") from e


class PirateMetricsClient:
    """
    Asynchronous client for the Pirate Metrics API.

    Every submission validates its records before touching the network and
    either returns the response body or raises a BlackbeardError.
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or ClientSettings()

        # An injected client belongs to the caller
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.timeout),
            transport=transport,
        )

    @classmethod
    def from_config(cls, **kwargs: Any) -> "PirateMetricsClient":
        """
        Build a client from explicit values, the environment and config.ini.

        Keyword arguments are passed to ``load_settings``.
        """
        return cls(load_settings(**kwargs))

    async def __aenter__(self) -> "PirateMetricsClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def send(self, endpoint: str, data: List[Record]) -> str:
        """
        Post already validated records to the API.

        Args:
            endpoint (str): The trailing part of the URL, e.g. ``acquisitions``.
            data (List[Record]): The records to send.

        Returns:
            str: The response body.

        Raises:
            MissingApiKeyError: If no API key is configured. Nothing is sent.
            InvalidEventError: If the data cannot be encoded as JSON. Nothing is sent.
            RequestTimeoutError: If the request timed out.
            NetworkConnectionError: On any other transport failure.
            UnexpectedResponseError: If the API did not answer with HTTP 200.
        """
        if not self.settings.has_api_key:
            raise MissingApiKeyError()

        url = self.settings.url_for(endpoint)

        try:
            body = json.dumps(
                {"api_key": self.settings.api_key, "data": data}, allow_nan=False
            )
        except (TypeError, ValueError) as e:
            raise InvalidEventError(f"{MSG_NOT_SERIALIZABLE} {e}") from e

        if self.settings.debug:
            logger.info("%s %s", url, body)

        try:
            response = await self._http_client.post(
                url, content=body, headers=get_meta_http_headers()
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError() from e
        except httpx.HTTPError as e:
            raise NetworkConnectionError() from e

        if response.status_code != 200:
            logger.debug(
                "Pirate Metrics answered %s for %s", response.status_code, url
            )
            raise UnexpectedResponseError(response.status_code, response.text)

        return response.text

    async def submit(
        self, event_type: Union[str, EventType], record: Mapping[str, Any]
    ) -> str:
        """
        Validate a single record and send it.

        Raises:
            InvalidEventError: If the record was rejected or the event type is
                unknown. Nothing is sent.
        """
        event_type = _resolve_event_type(event_type)
        validated = validate_event(event_type, record)

        if validated is None:
            raise InvalidEventError(get_schema(event_type).rejection_message)

        return await self.send(event_type.endpoint, [validated])

    async def submit_many(
        self, event_type: Union[str, EventType], records: Iterable[Mapping[str, Any]]
    ) -> str:
        """
        Validate a batch of records and send them in one request.

        The batch is all-or-nothing: validation stops at the first rejected
        record and nothing is sent. Caller records are never modified.

        Raises:
            InvalidEventError: If the event type is unknown, the batch is empty or
                a record was rejected.
        """
        event_type = _resolve_event_type(event_type)
        validated, failed_index = validate_batch(event_type, records)

        if validated is None:
            raise InvalidEventError(MSG_BULK_INVALID, index=failed_index)

        if not validated:
            raise InvalidEventError(MSG_BULK_EMPTY)

        return await self.send(event_type.endpoint, validated)

    async def acquisition(
        self,
        email: str,
        *,
        level: Optional[Union[int, float]] = None,
        occurred_at: Optional[str] = None,
    ) -> str:
        """
        Send a single acquisition.

        Args:
            email (str): Email for the acquisition.
            level (Optional[Union[int, float]]): Any important numerical value to track.
            occurred_at (Optional[str]): When the acquisition occurred.
        """
        return await self.submit(
            EventType.ACQUISITION,
            {"email": email, "level": level, "occurred_at": occurred_at},
        )

    async def acquisitions(self, records: Iterable[Mapping[str, Any]]) -> str:
        return await self.submit_many(EventType.ACQUISITION, records)

    async def activation(self, email: str, *, occurred_at: Optional[str] = None) -> str:
        """
        Send a single activation.

        Args:
            email (str): Email to activate.
            occurred_at (Optional[str]): When the activation occurred.
        """
        return await self.submit(
            EventType.ACTIVATION, {"email": email, "occurred_at": occurred_at}
        )

    async def activations(self, records: Iterable[Mapping[str, Any]]) -> str:
        return await self.submit_many(EventType.ACTIVATION, records)

    async def retention(self, email: str, *, occurred_at: Optional[str] = None) -> str:
        """
        Send a single retention.

        Args:
            email (str): Email that has performed a key event.
            occurred_at (Optional[str]): When the retention occurred.
        """
        return await self.submit(
            EventType.RETENTION, {"email": email, "occurred_at": occurred_at}
        )

    async def retentions(self, records: Iterable[Mapping[str, Any]]) -> str:
        return await self.submit_many(EventType.RETENTION, records)

    async def referral(
        self,
        customer_email: str,
        referree_email: str,
        *,
        occurred_at: Optional[str] = None,
    ) -> str:
        """
        Send a single referral.

        Args:
            customer_email (str): Email of the referrer.
            referree_email (str): Email of the new customer.
            occurred_at (Optional[str]): When the referral occurred.
        """
        return await self.submit(
            EventType.REFERRAL,
            {
                "customer_email": customer_email,
                "referree_email": referree_email,
                "occurred_at": occurred_at,
            },
        )

    async def referrals(self, records: Iterable[Mapping[str, Any]]) -> str:
        return await self.submit_many(EventType.REFERRAL, records)

    async def revenue(
        self,
        email: str,
        amount_in_cents: Union[int, float],
        *,
        occurred_at: Optional[str] = None,
    ) -> str:
        """
        Send a single revenue.

        Args:
            email (str): Email of the payer.
            amount_in_cents (Union[int, float]): Amount paid, in cents.
            occurred_at (Optional[str]): When the payment occurred.
        """
        return await self.submit(
            EventType.REVENUE,
            {
                "email": email,
                "amount_in_cents": amount_in_cents,
                "occurred_at": occurred_at,
            },
        )

    async def revenues(self, records: Iterable[Mapping[str, Any]]) -> str:
        return await self.submit_many(EventType.REVENUE, records)
