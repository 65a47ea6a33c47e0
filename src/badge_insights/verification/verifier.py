"""Remote asset-ownership verification.

Each stored ``ExpectedBalanceRule`` is checked against each discovered
address with one ``POST`` to the verification endpoint::

    {"address": "0x…", "assetOwnershipRequirements": {...}}

The service answers with a JSON body carrying a boolean ``success``.
A call that cannot produce a verdict (transport error, timeout, non-2xx
status, malformed body) is recorded as not satisfied for that pair only.

Usage::

    async with OwnershipVerifier() as verifier:
        insights = await verifier.verify(addresses, rules)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

import httpx

from badge_insights.exceptions import VerificationError
from badge_insights.models import BalanceCheckResult, ExpectedBalanceRule, Insight
from badge_insights.verification.retry import with_async_retries

logger = logging.getLogger(__name__)


class OwnershipVerifier:
    """Evaluate ownership rules for discovered addresses.

    Calls run concurrently, bounded by *max_concurrency*, but results are
    always recorded rules-outer / addresses-inner so the display order is
    stable.

    Args:
        endpoint_url: Verification endpoint. Defaults to ``verifier.endpoint_url``.
        timeout: Per-call timeout in seconds. Defaults to ``verifier.timeout_sec``.
        max_concurrency: Maximum in-flight calls. Defaults to ``verifier.max_concurrency``.
        max_retries: Retries on transport errors. Defaults to ``verifier.max_retries``.
        client: Pre-built ``httpx.AsyncClient`` (not closed by ``aclose``).
    """

    def __init__(
        self,
        endpoint_url: str | None = None,
        timeout: float | None = None,
        max_concurrency: int | None = None,
        max_retries: int | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        from badge_insights.settings import get_settings

        cfg = get_settings().verifier
        self.endpoint_url = endpoint_url or cfg.endpoint_url
        self.timeout = timeout if timeout is not None else cfg.timeout_sec
        self.max_concurrency = max_concurrency or cfg.max_concurrency
        retries = max_retries if max_retries is not None else cfg.max_retries

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        self._post = with_async_retries(
            max_retries=retries,
            backoff_seconds=cfg.backoff_seconds,
            retryable_exceptions=(httpx.TransportError,),
        )(self._post_once)

    async def __aenter__(self) -> "OwnershipVerifier":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this verifier created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    async def verify(
        self,
        addresses: Sequence[str],
        rules: Sequence[ExpectedBalanceRule],
    ) -> list[Insight]:
        """Return one ``Insight`` per address with a check per rule.

        With no rules, no calls are made and every insight has an empty
        check list.
        """
        insights = [Insight(value=addr) for addr in addresses]
        if not rules or not addresses:
            return insights

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(addr: str, rule: ExpectedBalanceRule) -> BalanceCheckResult:
            async with semaphore:
                return await self.check(addr, rule)

        logger.info("Verifying %d address(es) against %d rule(s)", len(addresses), len(rules))
        results = await asyncio.gather(*(bounded(addr, rule) for rule in rules for addr in addresses))

        # gather keeps submission order: index = rule_idx * len(addresses) + addr_idx
        for idx, result in enumerate(results):
            insights[idx % len(addresses)].balance_checks.append(result)
        return insights

    async def check(self, address: str, rule: ExpectedBalanceRule) -> BalanceCheckResult:
        """Evaluate a single rule against a single address."""
        try:
            satisfied = await self._fetch_verdict(address, rule)
        except (httpx.HTTPError, VerificationError) as exc:
            logger.warning("Ownership check '%s' for %s failed: %s", rule.label, address, exc)
            satisfied = False
        return BalanceCheckResult.from_verdict(rule.label, satisfied)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _post_once(self, payload: dict[str, Any]) -> httpx.Response:
        return await self._client.post(self.endpoint_url, json=payload, timeout=self.timeout)

    async def _fetch_verdict(self, address: str, rule: ExpectedBalanceRule) -> bool:
        payload = {
            "address": address,
            "assetOwnershipRequirements": rule.asset_ownership_requirements,
        }
        resp = await self._post(payload)
        resp.raise_for_status()

        try:
            body = resp.json()
        except ValueError as exc:
            raise VerificationError(address, rule.label, "response is not JSON") from exc

        if not isinstance(body, dict) or "success" not in body:
            raise VerificationError(address, rule.label, "response has no 'success' field")
        success = body["success"]
        if not isinstance(success, bool):
            raise VerificationError(address, rule.label, "'success' is not a boolean")
        return success
