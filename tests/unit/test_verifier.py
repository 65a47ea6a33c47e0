"""Unit tests for badge_insights.verification — OwnershipVerifier and retries."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from badge_insights.models import NOT_SATISFIED_MESSAGE, SATISFIED_MESSAGE, ExpectedBalanceRule
from badge_insights.verification import OwnershipVerifier, with_async_retries

ADDR_A = "0x" + "a" * 40
ADDR_B = "0x" + "b" * 40
ADDR_C = "0x" + "c" * 40

BADGE_RULE = ExpectedBalanceRule(label="Badge Holder", asset_ownership_requirements={"$and": [{"badge": 1}]})
NFT_RULE = ExpectedBalanceRule(label="NFT Owner", asset_ownership_requirements={"$or": [{"nft": 7}]})


class TestVerifyOrdering:
    @pytest.mark.anyio
    async def test_no_rules_makes_no_calls(self, fake_service, make_verifier) -> None:
        verifier = make_verifier(fake_service)
        insights = await verifier.verify([ADDR_A], [])
        assert len(insights) == 1
        assert insights[0].value == ADDR_A
        assert insights[0].balance_checks == []
        assert fake_service.calls == []
        await verifier.aclose()

    @pytest.mark.anyio
    async def test_one_rule_two_addresses(self, fake_service, make_verifier) -> None:
        verifier = make_verifier(fake_service)
        insights = await verifier.verify([ADDR_A, ADDR_B], [BADGE_RULE])
        assert len(fake_service.calls) == 2
        assert [i.value for i in insights] == [ADDR_A, ADDR_B]
        for insight in insights:
            assert [c.label for c in insight.balance_checks] == ["Badge Holder"]
            assert insight.balance_checks[0].message == SATISFIED_MESSAGE

    @pytest.mark.anyio
    async def test_request_body(self, fake_service, make_verifier) -> None:
        verifier = make_verifier(fake_service)
        await verifier.verify([ADDR_A], [BADGE_RULE])
        assert fake_service.calls == [
            {"address": ADDR_A, "assetOwnershipRequirements": {"$and": [{"badge": 1}]}},
        ]

    @pytest.mark.anyio
    async def test_checks_follow_rule_order(self, make_service, make_verifier) -> None:
        service = make_service(lambda address, req: "$and" in req)
        verifier = make_verifier(service)
        insights = await verifier.verify([ADDR_A, ADDR_B], [BADGE_RULE, NFT_RULE])

        assert len(service.calls) == 4
        for insight in insights:
            assert [c.label for c in insight.balance_checks] == ["Badge Holder", "NFT Owner"]
            assert [c.satisfied for c in insight.balance_checks] == [True, False]

    @pytest.mark.anyio
    async def test_order_kept_when_responses_finish_out_of_order(self) -> None:
        delays = {ADDR_A: 0.05, ADDR_B: 0.0, ADDR_C: 0.02}

        async def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            await asyncio.sleep(delays[body["address"]])
            return httpx.Response(200, json={"success": body["address"] != ADDR_B})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        verifier = OwnershipVerifier(endpoint_url="https://verify.test", client=client, max_retries=0)
        insights = await verifier.verify([ADDR_A, ADDR_B, ADDR_C], [BADGE_RULE])

        assert [i.value for i in insights] == [ADDR_A, ADDR_B, ADDR_C]
        assert [i.balance_checks[0].satisfied for i in insights] == [True, False, True]
        await client.aclose()

    @pytest.mark.anyio
    async def test_no_addresses(self, fake_service, make_verifier) -> None:
        verifier = make_verifier(fake_service)
        assert await verifier.verify([], [BADGE_RULE]) == []
        assert fake_service.calls == []


class TestPerPairFailures:
    @pytest.mark.anyio
    async def test_false_success(self, make_service, make_verifier) -> None:
        verifier = make_verifier(make_service(lambda a, r: False))
        result = await verifier.check(ADDR_A, BADGE_RULE)
        assert result.message == NOT_SATISFIED_MESSAGE
        assert result.label == "Badge Holder"

    @pytest.mark.anyio
    async def test_http_error_marks_only_that_pair(self, make_service, make_verifier) -> None:
        def decide(address, requirements):
            if address == ADDR_B:
                return httpx.Response(500, json={"error": "boom"})
            return True

        verifier = make_verifier(make_service(decide))
        insights = await verifier.verify([ADDR_A, ADDR_B, ADDR_C], [BADGE_RULE])
        assert [i.balance_checks[0].satisfied for i in insights] == [True, False, True]
        assert insights[1].balance_checks[0].message == NOT_SATISFIED_MESSAGE

    @pytest.mark.anyio
    async def test_non_json_body(self, make_service, make_verifier) -> None:
        service = make_service(lambda a, r: httpx.Response(200, text="<html>oops</html>"))
        result = await make_verifier(service).check(ADDR_A, BADGE_RULE)
        assert result.satisfied is False

    @pytest.mark.anyio
    async def test_body_without_success(self, make_service, make_verifier) -> None:
        service = make_service(lambda a, r: httpx.Response(200, json={"ok": True}))
        result = await make_verifier(service).check(ADDR_A, BADGE_RULE)
        assert result.satisfied is False

    @pytest.mark.anyio
    @pytest.mark.parametrize("success", ["false", "true", 1, {"x": 1}, [True], None])
    async def test_non_boolean_success(self, make_service, make_verifier, success) -> None:
        service = make_service(lambda a, r: httpx.Response(200, json={"success": success}))
        result = await make_verifier(service).check(ADDR_A, BADGE_RULE)
        assert result.satisfied is False
        assert result.message == NOT_SATISFIED_MESSAGE

    @pytest.mark.anyio
    async def test_persistent_timeout_marks_only_that_pair(self, monkeypatch) -> None:
        monkeypatch.setenv("INSIGHTS_VERIFIER__BACKOFF_SECONDS", "0")
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            if body["address"] == ADDR_B:
                attempts.append(request)
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, json={"success": True})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        verifier = OwnershipVerifier(endpoint_url="https://verify.test", client=client, max_retries=1)
        insights = await verifier.verify([ADDR_A, ADDR_B, ADDR_C], [BADGE_RULE])

        assert [i.balance_checks[0].satisfied for i in insights] == [True, False, True]
        assert insights[1].balance_checks[0].message == NOT_SATISFIED_MESSAGE
        assert len(attempts) == 2
        await client.aclose()

    @pytest.mark.anyio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        verifier = OwnershipVerifier(endpoint_url="https://verify.test", client=client, max_retries=0)
        insights = await verifier.verify([ADDR_A], [BADGE_RULE, NFT_RULE])
        assert [c.satisfied for c in insights[0].balance_checks] == [False, False]
        await client.aclose()

    @pytest.mark.anyio
    async def test_transport_error_retried(self, monkeypatch) -> None:
        monkeypatch.setenv("INSIGHTS_VERIFIER__BACKOFF_SECONDS", "0")
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, json={"success": True})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        verifier = OwnershipVerifier(endpoint_url="https://verify.test", client=client, max_retries=1)
        result = await verifier.check(ADDR_A, BADGE_RULE)
        assert result.satisfied is True
        assert len(attempts) == 2
        await client.aclose()


class TestVerifierConfig:
    def test_defaults_from_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("INSIGHTS_VERIFIER__TIMEOUT_SEC", "3.5")
        monkeypatch.setenv("INSIGHTS_VERIFIER__MAX_CONCURRENCY", "2")
        verifier = OwnershipVerifier()
        assert verifier.endpoint_url == "https://api.bitbadges.io/api/v0/verifyOwnershipRequirements"
        assert verifier.timeout == 3.5
        assert verifier.max_concurrency == 2

    @pytest.mark.anyio
    async def test_context_manager_closes_owned_client(self) -> None:
        async with OwnershipVerifier(endpoint_url="https://verify.test") as verifier:
            client = verifier._client
        assert client.is_closed

    @pytest.mark.anyio
    async def test_owned_client_follows_redirects(self) -> None:
        async with OwnershipVerifier(endpoint_url="https://verify.test") as verifier:
            assert verifier._client.follow_redirects is True

    @pytest.mark.anyio
    async def test_redirected_endpoint_is_followed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(308, headers={"Location": "https://verify.test/new"})
            return httpx.Response(200, json={"success": True})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
        verifier = OwnershipVerifier(endpoint_url="https://verify.test/old", client=client, max_retries=0)
        result = await verifier.check(ADDR_A, BADGE_RULE)
        assert result.satisfied is True
        await client.aclose()

    @pytest.mark.anyio
    async def test_injected_client_left_open(self, fake_service, make_verifier) -> None:
        verifier = make_verifier(fake_service)
        await verifier.aclose()
        assert verifier._client.is_closed is False


class TestWithAsyncRetries:
    @pytest.mark.anyio
    async def test_retries_then_succeeds(self) -> None:
        calls = []

        @with_async_retries(max_retries=2, backoff_seconds=0, retryable_exceptions=(ConnectionError,))
        async def flaky() -> str:
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError("down")
            return "ok"

        assert await flaky() == "ok"
        assert len(calls) == 3

    @pytest.mark.anyio
    async def test_gives_up(self) -> None:
        @with_async_retries(max_retries=1, backoff_seconds=0, retryable_exceptions=(ConnectionError,))
        async def always_down() -> None:
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            await always_down()

    @pytest.mark.anyio
    async def test_non_retryable_raised_immediately(self) -> None:
        calls = []

        @with_async_retries(max_retries=3, backoff_seconds=0, retryable_exceptions=(ConnectionError,))
        async def broken() -> None:
            calls.append(1)
            raise ValueError("bad")

        with pytest.raises(ValueError):
            await broken()
        assert len(calls) == 1
