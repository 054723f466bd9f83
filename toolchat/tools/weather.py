"""Current weather lookup via the Open-Meteo geocoding and forecast APIs."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# --- API Configuration ---
GEOCODING_API_URL = "https://geocoding-api.open-meteo.com/v1/search"
WEATHER_API_URL = "https://api.open-meteo.com/v1/forecast"
CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,weather_code,wind_speed_10m"
)

# WMO weather interpretation codes
WEATHER_DESCRIPTIONS: dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


async def _geocode(client: httpx.AsyncClient, location: str) -> dict[str, Any] | None:
    """Resolve a place name to its best geocoding match, or None."""
    response = await client.get(GEOCODING_API_URL, params={"name": location, "count": 1})
    response.raise_for_status()
    results = response.json().get("results")
    if not results:
        return None
    return results[0]


async def get_weather(client: httpx.AsyncClient, location: str) -> str:
    """Get current weather conditions for a location.

    Args:
        client: Shared HTTP client.
        location: The city or place name.

    Returns:
        A multi-line weather report, or an explanatory failure string.
    """
    try:
        place = await _geocode(client, location)
        if place is None:
            return f"Could not find location: {location}"

        response = await client.get(
            WEATHER_API_URL,
            params={
                "latitude": place["latitude"],
                "longitude": place["longitude"],
                "current": CURRENT_FIELDS,
                "timezone": "auto",
            },
        )
        response.raise_for_status()
        current = response.json()["current"]
    except (httpx.HTTPError, ValueError, KeyError) as e:
        logger.warning(f"Weather lookup failed for {location!r}: {e}")
        return f"Weather lookup failed: {e}"

    description = WEATHER_DESCRIPTIONS.get(current.get("weather_code"), "Unknown")
    return (
        f"Weather in {place.get('name', location)}, {place.get('country', 'N/A')}:\n"
        f"- Condition: {description}\n"
        f"- Temperature: {current.get('temperature_2m')}°C\n"
        f"- Feels like: {current.get('apparent_temperature')}°C\n"
        f"- Humidity: {current.get('relative_humidity_2m')}%\n"
        f"- Wind speed: {current.get('wind_speed_10m')} km/h"
    )
