"""
QuickBooks OAuth and accounting lookups
Connection management plus the invoice, customer and item lists used by
the approval screens
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..config import QUICKBOOKS_CLIENT_ID, QUICKBOOKS_CLIENT_SECRET, QUICKBOOKS_ENVIRONMENT
from ..database import get_db
from ..models import User
from ..services.quickbooks_service import (
    QuickBooksClient,
    QuickBooksError,
    QuickBooksNotConnected,
    accounting_http_error,
    build_authorization_url,
    create_oauth_state,
    verify_oauth_state,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quickbooks", tags=["quickbooks"])


class QuickBooksStatusResponse(BaseModel):
    connected: bool
    realm_id: Optional[str] = None
    company_name: Optional[str] = None
    environment: Optional[str] = None


def get_quickbooks_client(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> QuickBooksClient:
    """One client per request, so the token is refreshed at most once per operation"""
    return QuickBooksClient(db, current_user.id)


@router.post("/oauth/initiate")
async def initiate_oauth(current_user: User = Depends(require_admin)):
    """
    Initiate QuickBooks OAuth 2.0 flow
    Returns authorization URL
    """
    if not QUICKBOOKS_CLIENT_ID:
        raise HTTPException(status_code=500, detail="QuickBooks not configured")

    # Signed state, echoed back by the provider and checked on the callback
    state = create_oauth_state(current_user.id)
    oauth_url = build_authorization_url(state)

    logger.info(f"QuickBooks OAuth initiated for user: {current_user.email}")
    logger.info(f"Environment: {QUICKBOOKS_ENVIRONMENT}")

    return {"oauth_url": oauth_url, "state": state}


@router.get("/callback-handler")
async def oauth_callback_handler(
    code: str,
    realmId: str,
    state: Optional[str] = None,
    current_user: User = Depends(require_admin),
    client: QuickBooksClient = Depends(get_quickbooks_client),
):
    """
    Complete QuickBooks OAuth 2.0 flow
    Called by frontend after QuickBooks redirects with authorization code
    """
    if not verify_oauth_state(state, current_user.id):
        logger.warning(f"⚠️ QuickBooks callback with invalid state for user {current_user.id}")
        raise HTTPException(status_code=400, detail="Invalid or expired OAuth state")

    if not QUICKBOOKS_CLIENT_ID or not QUICKBOOKS_CLIENT_SECRET:
        raise HTTPException(status_code=500, detail="QuickBooks not configured")

    logger.info(f"QuickBooks OAuth callback for realm {realmId}")
    try:
        await client.exchange_token(code, realmId)
    except QuickBooksError as e:
        logger.error(f"QuickBooks token exchange failed: {e.message}")
        raise HTTPException(
            status_code=400, detail=f"Failed to exchange authorization code: {e.message}"
        ) from e

    token_row = client.get_token_row()
    return {"success": True, "realm_id": realmId, "company_name": token_row.company_name}


@router.get("/status", response_model=QuickBooksStatusResponse)
async def get_status(client: QuickBooksClient = Depends(get_quickbooks_client)):
    """Check if the user has QuickBooks connected"""
    token_row = client.get_token_row()
    if token_row and token_row.is_connected:
        return QuickBooksStatusResponse(
            connected=True,
            realm_id=token_row.realm_id,
            company_name=token_row.company_name,
            environment=token_row.environment,
        )
    return QuickBooksStatusResponse(connected=False)


@router.post("/refresh-token")
async def refresh_token(client: QuickBooksClient = Depends(get_quickbooks_client)):
    """Force a token refresh"""
    try:
        tokens = await client.refresh_token()
    except QuickBooksError as e:
        raise accounting_http_error(e) from e
    return {"success": True, "expires_in": tokens["expires_in"]}


@router.post("/disconnect")
async def disconnect(client: QuickBooksClient = Depends(get_quickbooks_client)):
    """Disconnect QuickBooks integration"""
    try:
        await client.revoke()
    except QuickBooksNotConnected as e:
        raise HTTPException(status_code=404, detail="QuickBooks not connected") from e

    logger.info(f"✅ QuickBooks disconnected for user: {client.user_id}")
    return {"success": True}


@router.get("/invoices")
async def list_invoices(
    page: int = Query(1, ge=1),
    items_per_page: int = Query(25, ge=1, le=1000),
    client: QuickBooksClient = Depends(get_quickbooks_client),
):
    try:
        return await client.get_invoices(page, items_per_page)
    except QuickBooksError as e:
        raise accounting_http_error(e) from e


@router.get("/customers")
async def list_customers(client: QuickBooksClient = Depends(get_quickbooks_client)):
    try:
        return {"customers": await client.get_customers()}
    except QuickBooksError as e:
        raise accounting_http_error(e) from e


@router.get("/items")
async def list_items(client: QuickBooksClient = Depends(get_quickbooks_client)):
    try:
        return {"items": await client.get_items()}
    except QuickBooksError as e:
        raise accounting_http_error(e) from e
