"""
QuickBooks Online client
Token exchange/refresh and the invoice, customer and item calls used by the
approval workflow
"""

import base64
import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Optional
from urllib.parse import quote

import httpx
from cryptography.fernet import Fernet
from fastapi import HTTPException
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ..config import (
    QUICKBOOKS_CLIENT_ID,
    QUICKBOOKS_CLIENT_SECRET,
    QUICKBOOKS_ENVIRONMENT,
    QUICKBOOKS_REDIRECT_URI,
    QUICKBOOKS_SCOPES,
    SECRET_KEY,
)
from ..models import Shoeing
from ..models_quickbooks import QuickBooksToken
from ..shared.validators import parse_cost
from .mentions import strip_mentions

logger = logging.getLogger(__name__)

QUICKBOOKS_AUTH_URL = "https://appcenter.intuit.com/connect/oauth2"
QUICKBOOKS_TOKEN_URL = "https://oauth.platform.intuit.com/oauth2/v1/tokens/bearer"
QUICKBOOKS_REVOKE_URL = "https://developer.api.intuit.com/v2/oauth2/tokens/revoke"
if QUICKBOOKS_ENVIRONMENT == "production":
    QUICKBOOKS_API_BASE_URL = "https://quickbooks.api.intuit.com/v3"
else:
    QUICKBOOKS_API_BASE_URL = "https://sandbox-quickbooks.api.intuit.com/v3"

QUICKBOOKS_MINOR_VERSION = "70"

OAUTH_STATE_PURPOSE = "quickbooks_oauth"
OAUTH_STATE_TTL_MINUTES = 10

# Encryption for tokens
cipher_suite = Fernet(base64.urlsafe_b64encode(hashlib.sha256(SECRET_KEY.encode()).digest()))


class QuickBooksError(Exception):
    """The provider rejected a call; message is the provider's text"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class QuickBooksNotConnected(QuickBooksError):
    """No usable token: never connected, disconnected, or refresh failed"""

    def __init__(self, message: str = "QuickBooks is not connected"):
        super().__init__(message, status_code=401)


def encrypt_token(token: str) -> str:
    """Encrypt a token for storage"""
    return cipher_suite.encrypt(token.encode()).decode()


def decrypt_token(encrypted_token: str) -> str:
    """Decrypt a stored token"""
    return cipher_suite.decrypt(encrypted_token.encode()).decode()


def get_basic_auth_header() -> str:
    """Generate Basic Auth header for QuickBooks"""
    credentials = f"{QUICKBOOKS_CLIENT_ID}:{QUICKBOOKS_CLIENT_SECRET}"
    return base64.b64encode(credentials.encode()).decode()


def create_oauth_state(user_id: str) -> str:
    """Signed, short-lived state tying the OAuth redirect to the user who started it"""
    claims = {
        "sub": user_id,
        "purpose": OAUTH_STATE_PURPOSE,
        "nonce": secrets.token_urlsafe(16),
        "exp": datetime.utcnow() + timedelta(minutes=OAUTH_STATE_TTL_MINUTES),
    }
    return jwt.encode(claims, SECRET_KEY, algorithm="HS256")


def verify_oauth_state(state: Optional[str], user_id: str) -> bool:
    if not state:
        return False
    try:
        claims = jwt.decode(state, SECRET_KEY, algorithms=["HS256"])
    except JWTError as e:
        logger.warning(f"⚠️ Rejected QuickBooks OAuth state: {e}")
        return False
    return claims.get("purpose") == OAUTH_STATE_PURPOSE and claims.get("sub") == user_id


def build_authorization_url(state: str) -> str:
    """Authorize URL the browser is redirected to"""
    return (
        f"{QUICKBOOKS_AUTH_URL}"
        f"?client_id={QUICKBOOKS_CLIENT_ID}"
        f"&response_type=code"
        f"&scope={quote(QUICKBOOKS_SCOPES)}"
        f"&redirect_uri={quote(QUICKBOOKS_REDIRECT_URI)}"
        f"&state={state}"
    )


def build_invoice_line(shoeing: Shoeing, items_by_name: dict[str, dict]) -> dict:
    """One invoice line per service record"""
    amount = parse_cost(shoeing.total_cost) or 0.0
    description = strip_mentions(shoeing.description or "").strip()
    if not description:
        description = " - ".join(
            part for part in (shoeing.horse_name, shoeing.base_service) if part
        )

    detail: dict[str, Any] = {"Qty": 1, "UnitPrice": amount}
    item = items_by_name.get((shoeing.base_service or "").strip().lower())
    if item:
        detail["ItemRef"] = {"value": item["id"], "name": item["name"]}
    if shoeing.date_of_service:
        detail["ServiceDate"] = shoeing.date_of_service.isoformat()

    return {
        "Amount": amount,
        "DetailType": "SalesItemLineDetail",
        "Description": description,
        "SalesItemLineDetail": detail,
    }


class QuickBooksClient:
    """
    QuickBooks API access for one user, scoped to a single operation.

    An expired token is refreshed before the first call, and a 401 from the
    API triggers a refresh and one retry. Either way the refresh happens at
    most once per client instance.
    """

    def __init__(self, db: Session, user_id: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.db = db
        self.user_id = user_id
        self._transport = transport
        self._refreshed = False
        self._access_token: Optional[str] = None

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=30.0, transport=self._transport)

    def get_token_row(self) -> Optional[QuickBooksToken]:
        return self.db.query(QuickBooksToken).filter(QuickBooksToken.user_id == self.user_id).first()

    def _require_token_row(self) -> QuickBooksToken:
        token_row = self.get_token_row()
        if not token_row or not token_row.is_connected:
            raise QuickBooksNotConnected()
        return token_row

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    async def _post_token_endpoint(self, data: dict) -> dict:
        try:
            async with self._http() as client:
                response = await client.post(
                    QUICKBOOKS_TOKEN_URL,
                    headers={
                        "Accept": "application/json",
                        "Content-Type": "application/x-www-form-urlencoded",
                        "Authorization": f"Basic {get_basic_auth_header()}",
                    },
                    data=data,
                )
        except httpx.HTTPError as e:
            raise QuickBooksError(f"Could not reach QuickBooks: {e}", status_code=502) from e
        if response.status_code != 200:
            raise QuickBooksError(response.text, status_code=response.status_code)
        return response.json()

    async def exchange_token(self, code: str, realm_id: str) -> dict:
        """Exchange an authorization code and store the resulting tokens"""
        token_data = await self._post_token_endpoint(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": QUICKBOOKS_REDIRECT_URI,
            }
        )

        access_token = token_data.get("access_token")
        refresh_token = token_data.get("refresh_token")
        expires_in = token_data.get("expires_in", 3600)
        if not access_token or not refresh_token:
            raise QuickBooksError("Invalid token response from QuickBooks")

        company_name = await self._fetch_company_name(realm_id, access_token)

        token_row = self.get_token_row()
        if token_row is None:
            token_row = QuickBooksToken(user_id=self.user_id)
            self.db.add(token_row)
        token_row.access_token = encrypt_token(access_token)
        token_row.refresh_token = encrypt_token(refresh_token)
        token_row.expires_at = datetime.utcnow() + timedelta(seconds=expires_in)
        token_row.realm_id = realm_id
        token_row.company_name = company_name
        token_row.environment = QUICKBOOKS_ENVIRONMENT
        token_row.is_connected = True
        self.db.commit()

        self._access_token = access_token
        logger.info(f"✅ QuickBooks connected for user {self.user_id} (realm {realm_id})")
        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "expires_in": expires_in,
        }

    async def _fetch_company_name(self, realm_id: str, access_token: str) -> Optional[str]:
        try:
            async with self._http() as client:
                response = await client.get(
                    f"{QUICKBOOKS_API_BASE_URL}/company/{realm_id}/companyinfo/{realm_id}",
                    headers={"Accept": "application/json", "Authorization": f"Bearer {access_token}"},
                )
            if response.status_code == 200:
                return response.json().get("CompanyInfo", {}).get("CompanyName")
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch company info: {e}")
        return None

    async def refresh_token(self) -> dict:
        """
        Refresh the stored tokens. A failed refresh marks the connection as
        disconnected and raises QuickBooksNotConnected.
        """
        token_row = self._require_token_row()
        self._refreshed = True

        try:
            token_data = await self._post_token_endpoint(
                {"grant_type": "refresh_token", "refresh_token": decrypt_token(token_row.refresh_token)}
            )
        except QuickBooksError as e:
            logger.error(f"Token refresh failed for user {self.user_id}: {e}")
            token_row.is_connected = False
            self.db.commit()
            raise QuickBooksNotConnected(
                "QuickBooks session expired. Please reconnect QuickBooks."
            ) from e

        access_token = token_data["access_token"]
        refresh_token = token_data.get("refresh_token") or decrypt_token(token_row.refresh_token)
        expires_in = token_data.get("expires_in", 3600)

        token_row.access_token = encrypt_token(access_token)
        token_row.refresh_token = encrypt_token(refresh_token)
        token_row.expires_at = datetime.utcnow() + timedelta(seconds=expires_in)
        self.db.commit()

        self._access_token = access_token
        logger.info(f"🔄 QuickBooks token refreshed for user {self.user_id}")
        return {"access_token": access_token, "refresh_token": refresh_token, "expires_in": expires_in}

    async def _get_access_token(self) -> str:
        if self._access_token:
            return self._access_token
        token_row = self._require_token_row()
        if token_row.expires_at <= datetime.utcnow() and not self._refreshed:
            logger.info(f"QuickBooks token expired for user {self.user_id}, refreshing")
            return (await self.refresh_token())["access_token"]
        self._access_token = decrypt_token(token_row.access_token)
        return self._access_token

    async def revoke(self) -> None:
        """Revoke the token with the provider and forget it locally"""
        token_row = self.get_token_row()
        if not token_row:
            raise QuickBooksNotConnected()
        try:
            async with self._http() as client:
                await client.post(
                    QUICKBOOKS_REVOKE_URL,
                    headers={
                        "Accept": "application/json",
                        "Content-Type": "application/json",
                        "Authorization": f"Basic {get_basic_auth_header()}",
                    },
                    json={"token": decrypt_token(token_row.refresh_token)},
                )
        except httpx.HTTPError as e:
            logger.warning(f"QuickBooks revoke call failed, removing token anyway: {e}")
        self.db.delete(token_row)
        self.db.commit()

    # ------------------------------------------------------------------
    # API calls
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        token_row = self._require_token_row()
        url = f"{QUICKBOOKS_API_BASE_URL}/company/{token_row.realm_id}/{path}"
        params = kwargs.pop("params", {}) or {}
        params.setdefault("minorversion", QUICKBOOKS_MINOR_VERSION)

        access_token = await self._get_access_token()
        while True:
            try:
                async with self._http() as client:
                    response = await client.request(
                        method,
                        url,
                        params=params,
                        headers={
                            "Accept": "application/json",
                            "Content-Type": "application/json",
                            "Authorization": f"Bearer {access_token}",
                        },
                        **kwargs,
                    )
            except httpx.HTTPError as e:
                logger.error(f"QuickBooks request to {path} failed: {e}")
                raise QuickBooksError(f"Could not reach QuickBooks: {e}", status_code=502) from e

            if response.status_code == 401 and not self._refreshed:
                logger.info("QuickBooks rejected the access token, refreshing once")
                self._access_token = None
                access_token = (await self.refresh_token())["access_token"]
                continue

            if response.status_code not in (200, 201):
                logger.error(f"QuickBooks API error on {path}: {response.status_code} {response.text}")
                raise QuickBooksError(
                    f"QuickBooks API error: {response.status_code} {response.text}",
                    status_code=response.status_code,
                )
            return response.json()

    async def query(self, statement: str) -> dict:
        data = await self._request("GET", "query", params={"query": statement})
        return data.get("QueryResponse", {})

    async def get_customers(self) -> list[dict]:
        result = await self.query("select * from Customer where Active = true MAXRESULTS 1000")
        return [
            {
                "id": customer.get("Id"),
                "display_name": customer.get("DisplayName") or "",
                "company_name": customer.get("CompanyName"),
                "email": (customer.get("PrimaryEmailAddr") or {}).get("Address"),
            }
            for customer in result.get("Customer", [])
        ]

    async def get_items(self) -> list[dict]:
        result = await self.query("select * from Item where Active = true MAXRESULTS 1000")
        return [
            {"id": item.get("Id"), "name": item.get("Name"), "description": item.get("Description")}
            for item in result.get("Item", [])
        ]

    async def get_invoices(self, page: int = 1, items_per_page: int = 25) -> dict:
        start_position = (page - 1) * items_per_page + 1
        count_result = await self.query("select count(*) from Invoice")
        total_count = count_result.get("totalCount", 0)
        result = await self.query(
            f"select * from Invoice ORDERBY TxnDate DESC "
            f"startPosition {start_position} maxResults {items_per_page}"
        )
        return {"invoices": result.get("Invoice", []), "totalCount": total_count}

    async def create_invoice(self, shoeings: list[Shoeing], customer_id: str) -> dict:
        """Create one invoice with a line per service record"""
        items = await self.get_items()
        customers = await self.get_customers()
        items_by_name = {(item["name"] or "").strip().lower(): item for item in items}

        payload = {
            "CustomerRef": {"value": customer_id},
            "Line": [build_invoice_line(shoeing, items_by_name) for shoeing in shoeings],
        }
        data = await self._request("POST", "invoice", json=payload)
        invoice = data.get("Invoice", {})
        logger.info(
            f"✅ QuickBooks invoice {invoice.get('DocNumber') or invoice.get('Id')} created "
            f"with {len(shoeings)} line(s)"
        )
        return {"invoice": invoice, "items": items, "customers": customers}


def accounting_http_error(error: QuickBooksError) -> HTTPException:
    """Provider failures surface with the provider's message unchanged"""
    if isinstance(error, QuickBooksNotConnected):
        return HTTPException(status_code=401, detail=error.message)
    return HTTPException(status_code=400, detail=error.message)
