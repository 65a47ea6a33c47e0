"""Lifecycle handlers invoked by the host wallet runtime.

``SnapHandlers`` wires the address extractor, the ownership verifier and
the presenter to the four host hooks: install, signature request,
transaction request and custom RPC request. The handlers keep no state
between events; configuration lives in the injected ``StateStore`` and is
only mutated by ``set_expected`` (clear, then write).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from badge_insights.exceptions import InsightsError
from badge_insights.extraction import AddressExtractor
from badge_insights.models import ExpectedBalanceRule, GetExpectedRequest, SnapState, parse_rpc_request
from badge_insights.snap.host import HostCapabilities, LoggingHost
from badge_insights.store import StateStore
from badge_insights.ui import DisplayDocument, render_insights, render_install_dialog
from badge_insights.verification import OwnershipVerifier

logger = logging.getLogger(__name__)


class SnapHandlers:
    """Dispatch host lifecycle events.

    Args:
        store: Persistent configuration store.
        verifier: Ownership verifier used to enrich discovered addresses.
        host: Host capabilities (alerts). Defaults to a ``LoggingHost``.
        extractor: Address extractor. Defaults to one bound to settings.
    """

    def __init__(
        self,
        store: StateStore,
        verifier: OwnershipVerifier,
        host: HostCapabilities | None = None,
        extractor: AddressExtractor | None = None,
    ) -> None:
        self.store = store
        self.verifier = verifier
        self.host = host or LoggingHost()
        self.extractor = extractor or AddressExtractor()

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    async def on_install(self) -> None:
        """Show the onboarding alert."""
        await self.host.show_alert(render_install_dialog())

    async def on_signature(
        self,
        signature: Mapping[str, Any],
        signature_origin: str | None = None,
    ) -> DisplayDocument:
        """Build insights for the ``data`` field of a signature request."""
        data = signature.get("data") if isinstance(signature, Mapping) else None
        return await self.build_insights(data)

    async def on_transaction(
        self,
        transaction: Any,
        chain_id: str | None = None,
        transaction_origin: str | None = None,
    ) -> DisplayDocument:
        """Build insights for a whole transaction object."""
        return await self.build_insights(transaction)

    async def on_rpc_request(self, request: Mapping[str, Any], origin: str | None = None) -> Any:
        """Handle ``get_expected`` / ``set_expected``.

        Raises:
            MethodNotFoundError: For any other method name.
            InvalidParamsError: If ``set_expected`` params are malformed.
        """
        rpc = parse_rpc_request(request)
        if isinstance(rpc, GetExpectedRequest):
            return self.store.get()

        self.store.clear()
        self.store.update(rpc.params)
        logger.info("Stored %d expected balance rule(s)", len(rpc.params.get("expectedBalances") or []))
        return None

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def build_insights(self, payload: Any) -> DisplayDocument:
        """Extract, verify and render insights for *payload*."""
        addresses = self.extractor.extract(payload)
        rules = self.load_rules()
        logger.debug("Found %d address(es); %d rule(s) configured", len(addresses), len(rules))
        insights = await self.verifier.verify(addresses, rules)
        return render_insights(insights)

    def load_rules(self) -> list[ExpectedBalanceRule]:
        """Return the stored rules, or an empty list if none are configured."""
        state = self.store.get()
        if not state:
            return []
        try:
            return SnapState.model_validate(state).expected_balances
        except ValidationError as exc:
            raise InsightsError(f"Stored configuration is malformed: {exc.error_count()} error(s)") from exc
