"""
GeoIP lookup for request-to-location mapping.

Uses a MaxMind GeoLite2 City database when GEOIP_DATABASE_PATH is set.
Without one, or for private and loopback addresses, every field is "Unknown".
"""

import ipaddress
import logging

import geoip2.database
import geoip2.errors
from pydantic import BaseModel
from starlette.requests import Request

from portal_auth.config import get_settings
from portal_auth.models.user import UNKNOWN

logger = logging.getLogger("portal_auth")


class Location(BaseModel):
    city: str = UNKNOWN
    state: str = UNKNOWN
    country: str = UNKNOWN


def client_ip(request: Request) -> str | None:
    """Best guess at the caller's address, honouring reverse-proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None


class GeolocationService:
    """Derives a coarse location from the request's client address."""

    def __init__(self, database_path: str | None = None) -> None:
        self._reader: geoip2.database.Reader | None = None
        if database_path:
            self._reader = geoip2.database.Reader(database_path)
            logger.info("GeoIP database loaded from %s", database_path)

    def locate(self, request: Request) -> Location:
        ip = client_ip(request)
        if not ip or self._reader is None or not self._is_public(ip):
            return Location()

        try:
            response = self._reader.city(ip)
        except (geoip2.errors.AddressNotFoundError, ValueError) as e:
            logger.debug("GeoIP lookup failed for %s: %s", ip, e)
            return Location()

        return Location(
            city=response.city.name or UNKNOWN,
            state=response.subdivisions.most_specific.name or UNKNOWN,
            country=response.country.name or UNKNOWN,
        )

    @staticmethod
    def _is_public(ip: str) -> bool:
        try:
            address = ipaddress.ip_address(ip)
        except ValueError:
            return False
        return address.is_global

    def close(self) -> None:
        if self._reader:
            self._reader.close()
            self._reader = None


_geolocation_service: GeolocationService | None = None


def get_geolocation_service() -> GeolocationService:
    """Get singleton geolocation service instance."""
    global _geolocation_service
    if _geolocation_service is None:
        _geolocation_service = GeolocationService(get_settings().GEOIP_DATABASE_PATH)
    return _geolocation_service


def close_geolocation_service() -> None:
    """Release the GeoLite2 reader held by the singleton, if one was opened."""
    global _geolocation_service
    if _geolocation_service is not None:
        _geolocation_service.close()
        _geolocation_service = None
