from abc import ABC, abstractmethod
from dataclasses import dataclass


class GeoLookupError(Exception):
    pass


@dataclass
class GeoResult:
    ip: str
    country: str
    country_code: str
    is_vpn: bool = False
    is_proxy: bool = False
    is_tor: bool = False
    is_relay: bool = False

    @property
    def is_blocked(self) -> bool:
        return self.is_vpn or self.is_proxy or self.is_tor or self.is_relay


VPN_BLOCK_MESSAGE = "VPN, Proxy, or Tor usage is not allowed. Please disable your VPN and try again."


class GeoProvider(ABC):
    @abstractmethod
    def lookup(self, ip: str) -> GeoResult:...
