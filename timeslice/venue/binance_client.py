"""Binance spot REST client for balances, prices and market orders."""

import hashlib
import hmac
import logging
import os
import time
from decimal import Decimal
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)

BINANCE_API_BASE = "https://api.binance.com"
DEFAULT_TIMEOUT = 10.0
DEFAULT_RECV_WINDOW_MS = 5000


class BinanceClientError(Exception):
    """Raised when the Binance API returns an error or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BinanceTimeout(BinanceClientError):
    """Raised when a request exceeds the client timeout."""


class BinanceClient:
    """Thin wrapper around the Binance spot REST API.

    Signed endpoints carry a millisecond timestamp, a recvWindow and an
    HMAC-SHA256 signature of the encoded query string.
    """

    def __init__(
        self,
        api_key: str | None = None,
        secret_key: str | None = None,
        base_url: str = BINANCE_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        recv_window_ms: int = DEFAULT_RECV_WINDOW_MS,
    ):
        self.api_key = api_key or os.environ.get("BINANCE_API_KEY", "")
        self.secret_key = secret_key or os.environ.get("BINANCE_SECRET_KEY", "")
        if not self.api_key or not self.secret_key:
            raise BinanceClientError("API key and secret key are required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.recv_window_ms = recv_window_ms

    def _sign(self, query: str) -> str:
        return hmac.new(
            self.secret_key.encode(), query.encode(), hashlib.sha256
        ).hexdigest()

    def _signed_query(self, params: dict[str, str]) -> str:
        params = dict(params)
        params["timestamp"] = str(int(time.time() * 1000))
        params["recvWindow"] = str(self.recv_window_ms)
        query = urlencode(params)
        return f"{query}&signature={self._sign(query)}"

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, str] | None = None,
        signed: bool = False,
    ) -> dict | list:
        params = params or {}
        headers = {}
        if signed:
            query = self._signed_query(params)
            headers["X-MBX-APIKEY"] = self.api_key
        else:
            query = urlencode(params)
        url = f"{self.base_url}{endpoint}"
        if query:
            url = f"{url}?{query}"
        try:
            resp = httpx.request(method, url, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.error("Binance API timeout: %s %s -> %s", method, endpoint, e)
            raise BinanceTimeout(f"Request timed out after {self.timeout}s: {e}") from e
        except httpx.RequestError as e:
            logger.error("Binance API request failed: %s %s -> %s", method, endpoint, e)
            raise BinanceClientError(f"Request failed: {e}") from e

        if resp.status_code >= 400:
            body = resp.text
            logger.error("Binance API %d: %s %s -> %s", resp.status_code, method, endpoint, body)
            raise BinanceClientError(f"HTTP {resp.status_code}: {body}", resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise BinanceClientError(f"Error parsing response: {e}") from e

    # --- Account ---

    def get_account(self) -> dict:
        """Get account information including balances."""
        return self._request("GET", "/api/v3/account", signed=True)

    def get_asset_balance(self, asset: str) -> Decimal:
        """Get the free balance of an asset (e.g. USDT, BTC)."""
        account = self.get_account()
        for balance in account.get("balances", []):
            if balance.get("asset") == asset:
                try:
                    return Decimal(balance["free"])
                except (KeyError, ArithmeticError) as e:
                    raise BinanceClientError(f"Error parsing {asset} balance: {e}") from e
        raise BinanceClientError(f"{asset} balance not found")

    # --- Market data ---

    def get_ticker_price(self, symbol: str) -> Decimal:
        """Get the latest price of a symbol."""
        data = self._request("GET", "/api/v3/ticker/price", {"symbol": symbol})
        try:
            return Decimal(data["price"])
        except (KeyError, TypeError, ArithmeticError) as e:
            raise BinanceClientError(f"Error parsing price: {e}") from e

    # --- Trading ---

    def place_market_order(self, symbol: str, side: str, quote_quantity: Decimal) -> dict:
        """Place a MARKET order sized by quote quantity.

        Args:
            symbol: Trading pair, e.g. BTCUSDT.
            side: BUY or SELL.
            quote_quantity: Amount of quote asset to spend (BUY) or receive (SELL).

        Returns:
            Order response dict with orderId, status, executedQty, etc.
        """
        return self._request(
            "POST",
            "/api/v3/order",
            {
                "symbol": symbol,
                "side": side.upper(),
                "type": "MARKET",
                "quoteOrderQty": f"{quote_quantity:.8f}",
            },
            signed=True,
        )
