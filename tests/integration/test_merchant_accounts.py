"""Tests of sweeping, transactions, payment sources and provider lookups."""

import json
from datetime import datetime, timezone

import pytest
from conftest import respond

from truelayer_client import ApiError, StaticTokenCredentials
from truelayer_client.models import (
    Currency,
    ExternalPaymentTransaction,
    ListPaymentSourcesRequest,
    ListTransactionsRequest,
    MerchantAccountPaymentTransaction,
    PayoutTransaction,
    ReleaseChannel,
    SetupSweepingRequest,
    SweepingFrequency,
    TransactionTypeFilter,
)
from truelayer_client.signing import SIGNATURE_HEADER, SigningContext, verify_signature

pytestmark = pytest.mark.integration

SORT_CODE_ACCOUNT = {
    "type": "sort_code_account_number",
    "sort_code": "040668",
    "account_number": "00000871",
}

SWEEPING_PATH = "/merchant-accounts/ma-1/sweeping"


class TestSweeping:
    """Test automatic sweeping of merchant account balances."""

    @pytest.mark.asyncio
    async def test_setup_sweeping(self, make_client, mock_truelayer, signing_key):
        """Test the sweeping request is signed and carries the settings."""
        mock_truelayer.route("POST", SWEEPING_PATH, respond(204))
        request = SetupSweepingRequest(
            max_amount_in_minor=5000,
            currency=Currency.GBP,
            frequency=SweepingFrequency.DAILY,
        )

        async with make_client(mock_truelayer) as tl:
            result = await tl.merchant_accounts.setup_sweeping("ma-1", request)

        assert result is None
        sent = mock_truelayer.api_requests[0]
        assert json.loads(sent.content) == {
            "max_amount_in_minor": 5000,
            "currency": "GBP",
            "frequency": "daily",
        }
        assert sent.headers["Idempotency-Key"]
        assert verify_signature(
            sent.headers[SIGNATURE_HEADER],
            SigningContext.from_request(sent),
            signing_key.public_key(),
        )

    @pytest.mark.asyncio
    async def test_disable_sweeping(self, make_client, mock_truelayer):
        """Test disabling sweeping sends a signed DELETE."""
        mock_truelayer.route("DELETE", SWEEPING_PATH, respond(204))

        async with make_client(mock_truelayer) as tl:
            await tl.merchant_accounts.disable_sweeping("ma-1")

        sent = mock_truelayer.api_requests[0]
        assert sent.method == "DELETE"
        assert SIGNATURE_HEADER in sent.headers
        assert sent.headers["Idempotency-Key"]

    @pytest.mark.asyncio
    async def test_setup_sweeping_rejected(self, make_client, mock_truelayer):
        """Test a rejected sweeping setup raises ApiError."""
        mock_truelayer.route(
            "POST",
            SWEEPING_PATH,
            respond(400, {"type": "invalid-parameters", "title": "Invalid Parameters", "status": 400}),
        )
        request = SetupSweepingRequest(
            max_amount_in_minor=5000, currency=Currency.EUR, frequency="weekly"
        )

        async with make_client(mock_truelayer) as tl:
            with pytest.raises(ApiError) as exc_info:
                await tl.merchant_accounts.setup_sweeping("ma-1", request)

        assert exc_info.value.status == 400

    @pytest.mark.asyncio
    async def test_get_sweeping_settings(self, make_client, mock_truelayer):
        """Test active settings are decoded and a missing configuration is None."""
        mock_truelayer.route(
            "GET",
            SWEEPING_PATH,
            respond(
                200,
                {
                    "max_amount_in_minor": 5000,
                    "currency": "GBP",
                    "frequency": "fortnightly",
                    "destination": SORT_CODE_ACCOUNT,
                },
            ),
        )

        async with make_client(mock_truelayer) as tl:
            settings = await tl.merchant_accounts.get_sweeping_settings("ma-1")
            missing = await tl.merchant_accounts.get_sweeping_settings("ma-2")

        assert settings.frequency == SweepingFrequency.FORTNIGHTLY
        assert settings.destination.account_number == "00000871"
        assert missing is None
        assert SIGNATURE_HEADER not in mock_truelayer.api_requests[0].headers


class TestTransactions:
    """Test listing merchant account transactions."""

    @pytest.mark.asyncio
    async def test_list_transactions(self, make_client, mock_truelayer):
        """Test the time window is sent as a query and each kind is decoded."""
        settled = "2026-02-01T12:00:00Z"
        items = [
            {
                "id": "tx-1",
                "currency": "GBP",
                "amount_in_minor": 100,
                "type": "merchant_account_payment",
                "status": "settled",
                "settled_at": settled,
                "payment_source": {
                    "id": "ps-1",
                    "account_identifiers": [SORT_CODE_ACCOUNT],
                    "account_holder_name": "Jane Doe",
                },
                "payment_id": "pay-1",
            },
            {
                "id": "tx-2",
                "currency": "GBP",
                "amount_in_minor": 200,
                "type": "external_payment",
                "status": "settled",
                "settled_at": settled,
                "remitter": {
                    "account_identifier": SORT_CODE_ACCOUNT,
                    "account_holder_name": "John Doe",
                    "reference": "ext-ref",
                },
            },
            {
                "id": "tx-3",
                "currency": "GBP",
                "amount_in_minor": 300,
                "type": "payout",
                "status": "executed",
                "created_at": settled,
                "executed_at": settled,
                "beneficiary": {
                    "type": "payment_source",
                    "user_id": "user-1",
                    "payment_source_id": "ps-1",
                    "reference": "payout-ref",
                },
                "context_code": "internal",
                "payout_id": "po-1",
            },
        ]
        mock_truelayer.route(
            "GET", "/merchant-accounts/ma-1/transactions", respond(200, {"items": items})
        )
        request = ListTransactionsRequest.model_validate(
            {
                "from": datetime(2026, 1, 1, tzinfo=timezone.utc),
                "to": datetime(2026, 3, 1, tzinfo=timezone.utc),
                "type": "payin",
            }
        )

        async with make_client(mock_truelayer) as tl:
            transactions = await tl.merchant_accounts.list_transactions("ma-1", request)

        params = mock_truelayer.api_requests[0].url.params
        assert params["from"] == "2026-01-01T00:00:00.000Z"
        assert params["to"] == "2026-03-01T00:00:00.000Z"
        assert params["type"] == "payin"

        payment, external, payout = transactions
        assert isinstance(payment, MerchantAccountPaymentTransaction)
        assert payment.payment_source.account_holder_name == "Jane Doe"
        assert isinstance(external, ExternalPaymentTransaction)
        assert external.remitter.reference == "ext-ref"
        assert isinstance(payout, PayoutTransaction)
        assert payout.beneficiary.payment_source_id == "ps-1"

    def test_query_without_type(self):
        """Test naive datetimes are treated as UTC and the type filter is optional."""
        request = ListTransactionsRequest.model_validate(
            {"from": datetime(2026, 1, 1, 8, 30), "to": datetime(2026, 1, 2)}
        )

        assert request.to_query() == {
            "from": "2026-01-01T08:30:00.000Z",
            "to": "2026-01-02T00:00:00.000Z",
        }
        assert TransactionTypeFilter("payout") == TransactionTypeFilter.PAYOUT

    @pytest.mark.asyncio
    async def test_list_payment_sources(self, make_client, mock_truelayer):
        """Test payment sources are filtered by user id."""
        mock_truelayer.route(
            "GET",
            "/merchant-accounts/ma-1/payment-sources",
            respond(
                200,
                {
                    "items": [
                        {
                            "id": "ps-1",
                            "user_id": "user-1",
                            "account_identifiers": [SORT_CODE_ACCOUNT],
                            "account_holder_name": "Jane Doe",
                        }
                    ]
                },
            ),
        )

        async with make_client(mock_truelayer) as tl:
            sources = await tl.merchant_accounts.list_payment_sources(
                "ma-1", ListPaymentSourcesRequest(user_id="user-1")
            )

        assert mock_truelayer.api_requests[0].url.params["user_id"] == "user-1"
        assert [s.id for s in sources] == ["ps-1"]
        assert sources[0].account_identifiers[0].sort_code == "040668"


PROVIDER = {
    "id": "mock-payments-gb-redirect",
    "display_name": "Mock UK Payments",
    "icon_uri": "https://icon.example",
    "logo_uri": "https://logo.example",
    "bg_color": "#FFFFFF",
    "country_code": "GB",
    "capabilities": {
        "payments": {
            "bank_transfer": {
                "release_channel": "general_availability",
                "schemes": [{"id": "faster_payments_service"}],
            }
        }
    },
}


class TestPaymentsProviders:
    """Test provider lookups."""

    @pytest.mark.asyncio
    async def test_get_provider(self, make_client, mock_truelayer):
        """Test a provider is fetched for this client id."""
        mock_truelayer.route(
            "GET", "/payments-providers/mock-payments-gb-redirect", respond(200, PROVIDER)
        )

        async with make_client(mock_truelayer) as tl:
            provider = await tl.payments_providers.get_by_id("mock-payments-gb-redirect")
            missing = await tl.payments_providers.get_by_id("unknown")

        assert mock_truelayer.api_requests[0].url.params["client_id"] == "test-client-id"
        assert provider.display_name == "Mock UK Payments"
        bank_transfer = provider.capabilities.payments.bank_transfer
        assert bank_transfer.release_channel == ReleaseChannel.GENERAL_AVAILABILITY
        assert [s.id for s in bank_transfer.schemes] == ["faster_payments_service"]
        assert missing is None

    @pytest.mark.asyncio
    async def test_static_token_client_omits_client_id(self, make_client, mock_truelayer):
        """Test a client without a client id looks providers up unscoped."""
        mock_truelayer.route(
            "GET", "/payments-providers/mock-payments-gb-redirect", respond(200, PROVIDER)
        )
        credentials = StaticTokenCredentials(access_token="prefetched")

        async with make_client(mock_truelayer, credentials=credentials) as tl:
            await tl.payments_providers.get_by_id("mock-payments-gb-redirect")

        assert "client_id" not in mock_truelayer.api_requests[0].url.params
        assert mock_truelayer.auth_requests == []
