"""
Distance lookup against a DistanceMatrix-compatible routing service.

Every upstream failure (transport, status code, payload shape) surfaces as
RouteUnavailable. Nothing is retried here.
"""
from decimal import Decimal

import httpx

from app.core.config import RoutingConfig
from app.core.errors import InvalidInput, RouteUnavailable
from app.core.logging_config import get_logger
from app.core.redis import cache_key, get_cache, set_cache
from app.schemas.fare import RouteInfo

logger = get_logger().bind(log_type="routing")

DISTANCE_MATRIX_PATH = "/maps/api/distancematrix/json"


class RouteResolver:
    def __init__(self, config: RoutingConfig, http_client: httpx.Client | None = None):
        self.config = config
        self.http_client = http_client

    def resolve(self, origin: str, destination: str) -> RouteInfo:
        origin = (origin or "").strip()
        destination = (destination or "").strip()
        if not origin or not destination:
            raise InvalidInput("origin and destination are required")

        key = cache_key("route", origin, destination)
        cached = get_cache(key)
        if cached:
            return RouteInfo(**cached)

        data = self._request(origin, destination)
        route = self._parse(data)

        logger.info(
            f"Route resolved | {origin} -> {destination} | "
            f"{route.distance_km} km | {route.duration_seconds}s"
        )
        set_cache(key, route.model_dump(mode="json"), ttl=self.config.cache_ttl_seconds)
        return route

    # -----------------------------------------------------------------
    # UPSTREAM CALL
    # -----------------------------------------------------------------
    def _request(self, origin: str, destination: str) -> dict:
        url = f"{self.config.base_url.rstrip('/')}{DISTANCE_MATRIX_PATH}"
        params = {
            "origins": origin,
            "destinations": destination,
            "key": self.config.api_key,
        }

        try:
            if self.http_client is not None:
                response = self.http_client.get(
                    url, params=params, timeout=self.config.timeout_seconds
                )
            else:
                response = httpx.get(url, params=params, timeout=self.config.timeout_seconds)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            logger.error(f"Routing service HTTP {e.response.status_code}")
            raise RouteUnavailable(
                "Routing service returned an error",
                upstream_status=e.response.status_code,
            )
        except httpx.TimeoutException:
            logger.error(f"Routing service timed out after {self.config.timeout_seconds}s")
            raise RouteUnavailable("Routing service timed out")
        except httpx.HTTPError as e:
            logger.error(f"Routing service network error: {e}")
            raise RouteUnavailable("Routing service unreachable")
        except ValueError:
            logger.error("Routing service returned a non-JSON body")
            raise RouteUnavailable("Routing service returned a malformed response")

    # -----------------------------------------------------------------
    # RESPONSE NORMALISATION
    # -----------------------------------------------------------------
    def _parse(self, data) -> RouteInfo:
        if not isinstance(data, dict):
            raise RouteUnavailable("Routing service returned a malformed response")

        status = data.get("status")
        if status is not None and status != "OK":
            logger.error(f"Routing service status {status}")
            raise RouteUnavailable("Routing service rejected the request", upstream_status=status)

        try:
            element = data["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError):
            raise RouteUnavailable("Distance data not found in routing response")

        if not isinstance(element, dict):
            raise RouteUnavailable("Distance data not found in routing response")

        element_status = element.get("status", "OK")
        if element_status != "OK":
            raise RouteUnavailable("No route between the given points", upstream_status=element_status)

        distance = element.get("distance") or {}
        meters = distance.get("value") if isinstance(distance, dict) else None
        if isinstance(meters, bool) or not isinstance(meters, (int, float)) or meters < 0:
            raise RouteUnavailable("Distance data not found in routing response")

        duration = element.get("duration") or {}
        seconds = duration.get("value", 0) if isinstance(duration, dict) else 0
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            seconds = 0

        return RouteInfo(
            distance_km=Decimal(str(meters)) / 1000,
            distance_text=distance.get("text"),
            duration_seconds=int(seconds),
            duration_text=duration.get("text") if isinstance(duration, dict) else None,
        )
