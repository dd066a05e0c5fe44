import logging
from typing import Optional

import httpx

from config.settings import settings
from core.services.geo_provider import GeoProvider, GeoResult, GeoLookupError

logger = logging.getLogger(__name__)


class VpnApiGeoProvider(GeoProvider):
    """Country and VPN/proxy/Tor detection through vpnapi.io."""

    def __init__(self, api_key: str, base_url: str, timeout: float = 5.0,
                 client: Optional[httpx.Client] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _get(self, url: str, params: dict) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, params=params, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(url, params=params)

    def lookup(self, ip: str) -> GeoResult:
        if not self.api_key or not self.api_key.strip():
            raise GeoLookupError("VPN API key is not configured. Please set VPNAPI_KEY.")
        if not ip:
            raise GeoLookupError("Unable to detect IP address")

        try:
            response = self._get(f"{self.base_url}/{ip}", {"key": self.api_key})
        except httpx.HTTPError as e:
            raise GeoLookupError(f"VPN API request failed: {e}") from e

        if response.status_code == 401:
            raise GeoLookupError("Invalid VPN API key. Please check your VPNAPI_KEY configuration.")
        if response.status_code == 429:
            raise GeoLookupError("VPN API rate limit exceeded. Please try again later.")
        if response.status_code >= 400:
            raise GeoLookupError(f"VPN API error: {response.status_code} {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise GeoLookupError("VPN API returned invalid JSON") from e
        if data.get("error"):
            raise GeoLookupError(f"VPN API error: {data['error']}")

        security = data.get("security") or {}
        location = data.get("location") or {}
        result = GeoResult(
            ip=ip,
            country=location.get("country") or "Unknown",
            country_code=location.get("country_code") or "XX",
            is_vpn=security.get("vpn") is True,
            is_proxy=security.get("proxy") is True,
            is_tor=security.get("tor") is True,
            is_relay=security.get("relay") is True,
        )
        logger.info("Geo lookup %s -> %s, blocked=%s", ip, result.country_code, result.is_blocked)
        return result


def build_geo_provider() -> VpnApiGeoProvider:
    return VpnApiGeoProvider(
        api_key=settings.VPNAPI_KEY,
        base_url=settings.VPNAPI_BASE,
        timeout=settings.GEO_TIMEOUT_SECONDS,
    )
