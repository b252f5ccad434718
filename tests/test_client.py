import datetime
import json
import logging
from unittest.mock import Mock

import httpx
import pytest

from blackbeard.client import PirateMetricsClient
from blackbeard.config import ClientSettings
from blackbeard.errors import (
    ConfigurationError,
    InvalidEventError,
    MissingApiKeyError,
    NetworkConnectionError,
    RequestTimeoutError,
    UnexpectedResponseError,
)
from blackbeard.events import EventType

MSG_GOOD = "Go Good"
TEST_API_KEY = "KEY1234567890"
TEST_BASE_URL = "http://localhost:9001/"

EMAIL = "usr1.2.3.4@example.com"


def make_client(server, **settings) -> PirateMetricsClient:
    values = {"api_key": TEST_API_KEY, "base_url": TEST_BASE_URL}
    values.update(settings)
    return PirateMetricsClient(ClientSettings(**values), transport=server.transport)


@pytest.mark.unit
class TestSend:
    @pytest.mark.asyncio
    async def test_posts_api_key_and_data(self, mock_server):
        client = make_client(mock_server)

        result = await client.send("acquisitions", [{"email": EMAIL}])

        assert result == MSG_GOOD
        assert len(mock_server.requests) == 1
        request = mock_server.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "http://localhost:9001/acquisitions"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["user-agent"].startswith("blackbeard/")
        assert mock_server.payloads[0] == {
            "api_key": TEST_API_KEY,
            "data": [{"email": EMAIL}],
        }

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_before_network(self, mock_server):
        client = make_client(mock_server, api_key="")

        with pytest.raises(MissingApiKeyError, match="API key required!"):
            await client.acquisition("a@b.com")

        assert mock_server.requests == []

    def test_missing_api_key_is_a_configuration_error(self):
        assert issubclass(MissingApiKeyError, ConfigurationError)

    @pytest.mark.asyncio
    async def test_non_200_raises(self, mock_server_factory):
        server = mock_server_factory(status_code=201, body="Created")
        client = make_client(server)

        with pytest.raises(UnexpectedResponseError) as exc_info:
            await client.activation(EMAIL)

        assert exc_info.value.status_code == 201
        assert exc_info.value.body == "Created"
        assert len(server.requests) == 1

    @pytest.mark.asyncio
    async def test_server_error_raises(self, mock_server_factory):
        server = mock_server_factory(status_code=500, body="")
        client = make_client(server)

        with pytest.raises(UnexpectedResponseError) as exc_info:
            await client.retention(EMAIL)

        assert exc_info.value.status_code == 500
        assert exc_info.value.get_exit_code() == 1

    @pytest.mark.asyncio
    async def test_connection_error_is_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = PirateMetricsClient(
            ClientSettings(api_key=TEST_API_KEY),
            transport=httpx.MockTransport(handler),
        )

        with pytest.raises(NetworkConnectionError) as exc_info:
            await client.activation(EMAIL)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_is_wrapped(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        client = PirateMetricsClient(
            ClientSettings(api_key=TEST_API_KEY),
            transport=httpx.MockTransport(handler),
        )

        with pytest.raises(RequestTimeoutError) as exc_info:
            await client.activation(EMAIL)

        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    @pytest.mark.asyncio
    async def test_debug_logs_url_and_body(self, mock_server, caplog):
        client = make_client(mock_server, debug=True)

        with caplog.at_level(logging.INFO, logger="blackbeard.client"):
            await client.retention(EMAIL)

        messages = [r.getMessage() for r in caplog.records if r.name == "blackbeard.client"]
        assert len(messages) == 1
        assert messages[0].startswith("http://localhost:9001/retentions ")
        body = json.loads(messages[0].split(" ", 1)[1])
        assert body == {"api_key": TEST_API_KEY, "data": [{"email": EMAIL}]}

    @pytest.mark.asyncio
    async def test_no_trace_without_debug(self, mock_server, caplog):
        client = make_client(mock_server)

        with caplog.at_level(logging.INFO, logger="blackbeard.client"):
            await client.retention(EMAIL)

        assert [r for r in caplog.records if r.name == "blackbeard.client"] == []

    @pytest.mark.asyncio
    async def test_unserializable_extra_field_sends_nothing(self, mock_server):
        client = make_client(mock_server)
        records = [{"email": EMAIL, "signed_up": datetime.date(2024, 1, 1)}]

        with pytest.raises(InvalidEventError, match="Unable to encode data as JSON") as exc_info:
            await client.activations(records)

        assert isinstance(exc_info.value.__cause__, TypeError)
        assert mock_server.requests == []

    @pytest.mark.asyncio
    async def test_non_finite_extra_field_sends_nothing(self, mock_server):
        client = make_client(mock_server)

        with pytest.raises(InvalidEventError, match="Unable to encode data as JSON"):
            await client.activations([{"email": EMAIL, "score": float("nan")}])

        assert mock_server.requests == []


@pytest.mark.unit
class TestSingleEvents:
    @pytest.mark.asyncio
    async def test_acquisition(self, mock_server):
        client = make_client(mock_server)

        assert await client.acquisition("a@b.com") == MSG_GOOD
        assert await client.acquisition(EMAIL, level=1) == MSG_GOOD
        assert await client.acquisition(EMAIL, level=1, occurred_at="DATE") == MSG_GOOD
        assert await client.acquisition(EMAIL, occurred_at="DATE") == MSG_GOOD

        assert [p["data"] for p in mock_server.payloads] == [
            [{"email": "a@b.com"}],
            [{"email": EMAIL, "level": 1}],
            [{"email": EMAIL, "level": 1, "occurred_at": "DATE"}],
            [{"email": EMAIL, "occurred_at": "DATE"}],
        ]
        assert all(r.url.path == "/acquisitions" for r in mock_server.requests)

    @pytest.mark.asyncio
    async def test_acquisition_drops_invalid_level(self, mock_server):
        client = make_client(mock_server)

        await client.acquisition(EMAIL, level="high")

        assert mock_server.payloads[0]["data"] == [{"email": EMAIL}]

    @pytest.mark.asyncio
    async def test_acquisition_requires_email(self, mock_server):
        client = make_client(mock_server)

        with pytest.raises(InvalidEventError, match="At least email is required."):
            await client.acquisition(1)

        assert mock_server.requests == []

    @pytest.mark.asyncio
    async def test_activation_and_retention(self, mock_server):
        client = make_client(mock_server)

        await client.activation(EMAIL, occurred_at="DATE")
        await client.retention(EMAIL)

        assert [r.url.path for r in mock_server.requests] == [
            "/activations",
            "/retentions",
        ]
        assert mock_server.payloads[0]["data"] == [{"email": EMAIL, "occurred_at": "DATE"}]
        assert mock_server.payloads[1]["data"] == [{"email": EMAIL}]

    @pytest.mark.asyncio
    async def test_referral(self, mock_server):
        client = make_client(mock_server)

        await client.referral(EMAIL, "new@example.com", occurred_at="DATE")

        assert mock_server.requests[0].url.path == "/referrals"
        assert mock_server.payloads[0]["data"] == [
            {
                "customer_email": EMAIL,
                "referree_email": "new@example.com",
                "occurred_at": "DATE",
            }
        ]

    @pytest.mark.asyncio
    async def test_referral_requires_both_emails(self, mock_server):
        client = make_client(mock_server)

        with pytest.raises(
            InvalidEventError, match="Customer and referree emails are required."
        ):
            await client.referral(EMAIL, None)

        assert mock_server.requests == []

    @pytest.mark.asyncio
    async def test_revenue(self, mock_server):
        client = make_client(mock_server)

        await client.revenue(EMAIL, 1000)

        assert mock_server.requests[0].url.path == "/revenues"
        assert mock_server.payloads[0]["data"] == [
            {"email": EMAIL, "amount_in_cents": 1000}
        ]

    @pytest.mark.asyncio
    async def test_revenue_requires_numeric_amount(self, mock_server):
        client = make_client(mock_server)

        with pytest.raises(
            InvalidEventError, match="Email and an amount in cents are required."
        ):
            await client.revenue(EMAIL, "bad")

        assert mock_server.requests == []

    @pytest.mark.asyncio
    async def test_submit_by_name(self, mock_server):
        client = make_client(mock_server)

        await client.submit("activation", {"email": EMAIL})

        assert mock_server.requests[0].url.path == "/activations"

    @pytest.mark.parametrize("event_type", ["signup", "signups", ""])
    @pytest.mark.asyncio
    async def test_submit_unknown_event_type(self, mock_server, event_type):
        client = make_client(mock_server)

        with pytest.raises(InvalidEventError, match="Unknown event type"):
            await client.submit(event_type, {"email": EMAIL})

        assert mock_server.requests == []

    @pytest.mark.asyncio
    async def test_acquisition_drops_non_finite_level(self, mock_server):
        client = make_client(mock_server)

        await client.acquisition(EMAIL, level=float("nan"))

        assert mock_server.payloads[0]["data"] == [{"email": EMAIL}]

    @pytest.mark.asyncio
    async def test_revenue_rejects_infinite_amount(self, mock_server):
        client = make_client(mock_server)

        with pytest.raises(InvalidEventError, match="Email and an amount in cents are required."):
            await client.revenue(EMAIL, float("inf"))

        assert mock_server.requests == []


@pytest.mark.unit
class TestBulkEvents:
    @pytest.mark.asyncio
    async def test_four_valid_records_one_request(self, mock_server):
        client = make_client(mock_server)
        records = [{"email": f"{i}{EMAIL}", "level": i} for i in range(4)]

        result = await client.acquisitions(records)

        assert result == MSG_GOOD
        assert len(mock_server.requests) == 1
        assert mock_server.payloads[0]["data"] == records

    @pytest.mark.parametrize("bad_index", [0, 1, 2, 3])
    @pytest.mark.asyncio
    async def test_any_invalid_record_sends_nothing(self, mock_server, bad_index):
        client = make_client(mock_server)
        records = [{"email": EMAIL, "amount_in_cents": 100} for _ in range(4)]
        records[bad_index] = {"email": EMAIL, "amount_in_cents": "100"}

        with pytest.raises(InvalidEventError, match="Unable to validate data.") as exc_info:
            await client.revenues(records)

        assert exc_info.value.index == bad_index
        assert mock_server.requests == []

    @pytest.mark.asyncio
    async def test_does_not_mutate_records_on_failure(self, mock_server):
        client = make_client(mock_server)
        records = [
            {"email": EMAIL, "occurred_at": 1},
            {"email": EMAIL, "occurred_at": 2},
            {"email": None},
        ]
        snapshot = [dict(r) for r in records]

        with pytest.raises(InvalidEventError):
            await client.activations(records)

        assert records == snapshot

    @pytest.mark.asyncio
    async def test_sanitizes_records_on_success(self, mock_server):
        client = make_client(mock_server)
        records = [
            {"customer_email": EMAIL, "referree_email": EMAIL, "occurred_at": 1},
            {"customer_email": EMAIL, "referree_email": EMAIL},
        ]

        await client.referrals(records)

        assert mock_server.payloads[0]["data"] == [
            {"customer_email": EMAIL, "referree_email": EMAIL},
            {"customer_email": EMAIL, "referree_email": EMAIL},
        ]
        assert records[0]["occurred_at"] == 1

    @pytest.mark.asyncio
    async def test_retentions_endpoint(self, mock_server):
        client = make_client(mock_server)

        await client.retentions([{"email": EMAIL}, {"email": EMAIL}])

        assert mock_server.requests[0].url.path == "/retentions"

    @pytest.mark.asyncio
    async def test_empty_batch_is_rejected(self, mock_server):
        client = make_client(mock_server)

        with pytest.raises(InvalidEventError):
            await client.submit_many(EventType.ACTIVATION, [])

        assert mock_server.requests == []

    @pytest.mark.asyncio
    async def test_unknown_event_type(self, mock_server):
        client = make_client(mock_server)

        with pytest.raises(InvalidEventError, match="Unknown event type"):
            await client.submit_many("signups", [{"email": EMAIL}])

        assert mock_server.requests == []


@pytest.mark.unit
class TestLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_closes_owned_client(self, mock_server):
        async with make_client(mock_server) as client:
            await client.activation(EMAIL)

        assert client._http_client.is_closed

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self):
        http_client = Mock(spec=httpx.AsyncClient)

        async with PirateMetricsClient(http_client=http_client):
            pass

        http_client.aclose.assert_not_called()

    @pytest.mark.asyncio
    async def test_injected_client_is_used(self, mock_server):
        http_client = httpx.AsyncClient(transport=mock_server.transport)
        client = PirateMetricsClient(
            ClientSettings(api_key=TEST_API_KEY, base_url=TEST_BASE_URL),
            http_client=http_client,
        )

        await client.activation(EMAIL)
        await client.aclose()

        assert len(mock_server.requests) == 1
        assert not http_client.is_closed
        await http_client.aclose()

    def test_from_config(self, clean_env, monkeypatch):
        monkeypatch.setenv("BLACKBEARD_API_KEY", "env-key")

        client = PirateMetricsClient.from_config(base_url="http://example.com/api")

        assert client.settings.api_key == "env-key"
        assert client.settings.base_url == "http://example.com/api/"

    def test_default_settings(self):
        client = PirateMetricsClient()

        assert client.settings.api_key == ""
        assert client.settings.base_url == "http://piratemetrics.com/api/v1/"
        assert client.settings.debug is False
