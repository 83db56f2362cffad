"""
Postal code -> coordinates lookup over an HTTP geocoding API
(Google Geocoding API response format).
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from homestay.core.config import Settings
from homestay.core.errors import UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class Coordinates:
    latitude: float
    longitude: float


class GeocodingService:
    def __init__(self, settings: Settings):
        self.url = settings.geocoder_url
        self.api_key = settings.geocoder_api_key
        self.region = settings.geocoder_region
        self.timeout = settings.geocoder_timeout_seconds

    def _geocode_sync(self, zip_code: str) -> Optional[Coordinates]:
        if not self.api_key:
            raise UpstreamError("Geocoder API key is not configured")

        params = {"components": f"postal_code:{zip_code}", "key": self.api_key}
        if self.region:
            params["region"] = self.region

        try:
            response = requests.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Geocoder request failed for {zip_code}: {e}")
            raise UpstreamError("Geocoding service unavailable") from e
        except ValueError as e:
            logger.error(f"Geocoder returned invalid JSON for {zip_code}: {e}")
            raise UpstreamError("Geocoding service returned an invalid response") from e

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return None
        if status != "OK" or not data.get("results"):
            logger.error(
                f"Geocoder status {status} for {zip_code}: {data.get('error_message')}"
            )
            raise UpstreamError(f"Geocoding failed with status {status}")

        loc = data["results"][0]["geometry"]["location"]
        return Coordinates(latitude=float(loc["lat"]), longitude=float(loc["lng"]))

    async def geocode(self, zip_code: str) -> Optional[Coordinates]:
        """Coordinates of the postal code, or None if the geocoder does not know it."""
        # requests is blocking; keep it off the event loop
        return await asyncio.to_thread(self._geocode_sync, zip_code)
