"""HTTP routes that forward host lifecycle events to ``SnapHandlers``."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from badge_insights.exceptions import InsightsError, InvalidParamsError, MethodNotFoundError, StoreUnavailableError
from badge_insights.snap import SnapHandlers
from badge_insights.ui import DisplayDocument

router = APIRouter()


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class SignatureRequest(BaseModel):
    """Body of ``POST /signature``."""

    model_config = ConfigDict(populate_by_name=True)

    signature: dict[str, Any] = Field(..., description="Signature request; addresses are read from its 'data'.")
    signature_origin: str | None = Field(None, alias="signatureOrigin")


class TransactionRequest(BaseModel):
    """Body of ``POST /transaction``."""

    model_config = ConfigDict(populate_by_name=True)

    transaction: dict[str, Any] = Field(..., description="Transaction object to inspect.")
    chain_id: str | None = Field(None, alias="chainId")
    transaction_origin: str | None = Field(None, alias="transactionOrigin")


class RpcBody(BaseModel):
    """Body of ``POST /rpc``."""

    method: str
    params: Any = None
    origin: str | None = None


class RpcResponse(BaseModel):
    result: Any = None


def _handlers(request: Request) -> SnapHandlers:
    return request.app.state.handlers


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/install")
async def install(request: Request) -> dict[str, str]:
    """Show the onboarding alert."""
    await _handlers(request).on_install()
    return {"status": "ok"}


@router.post("/signature", response_model=DisplayDocument)
async def signature_insights(body: SignatureRequest, request: Request) -> DisplayDocument:
    """Return the insight panel for a signature request."""
    try:
        return await _handlers(request).on_signature(body.signature, body.signature_origin)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.post("/transaction", response_model=DisplayDocument)
async def transaction_insights(body: TransactionRequest, request: Request) -> DisplayDocument:
    """Return the insight panel for a transaction request."""
    try:
        return await _handlers(request).on_transaction(body.transaction, body.chain_id, body.transaction_origin)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.post("/rpc", response_model=RpcResponse)
async def rpc(body: RpcBody, request: Request) -> RpcResponse:
    """Handle a custom RPC call (``get_expected`` / ``set_expected``)."""
    try:
        result = await _handlers(request).on_rpc_request(body.model_dump(include={"method", "params"}), body.origin)
    except MethodNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except InvalidParamsError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except InsightsError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return RpcResponse(result=result)
