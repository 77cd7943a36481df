"""Client side of the external weather-analysis service."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from ..errors import WeatherServiceError
from ..models import QueryParameters

logger = logging.getLogger(__name__)


class WeatherAnalysisAdapter(ABC):
    """Returns computed or fetched weather facts for resolved parameters."""

    @abstractmethod
    async def analyze(self, intent: str, parameters: QueryParameters) -> Any:
        """Return an opaque, JSON-serializable analysis.

        Raises:
            WeatherServiceError: If the service fails or is unreachable.
        """
        ...


class HttpWeatherAnalysisAdapter(WeatherAnalysisAdapter):
    """Posts resolved queries to the weather-analysis HTTP service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def analyze(self, intent: str, parameters: QueryParameters) -> Any:
        payload = {"intent": intent, "parameters": parameters.to_dict()}
        url = f"{self.base_url}/api/weather/analyze"
        logger.info(f"Requesting weather analysis for {', '.join(parameters.locations)}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            raise WeatherServiceError(
                f"Weather service returned {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise WeatherServiceError(f"Weather service timed out after {self.timeout}s") from e
        except (httpx.HTTPError, ValueError) as e:
            raise WeatherServiceError(f"Weather service unavailable: {e}") from e

        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body
