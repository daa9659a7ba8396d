"""Gemini (search-grounded) price and commentary fetcher."""

import logging
import math
import re
import time

import httpx

from gold_silver_monitor.config import Settings, REQUEST_TIMEOUT
from gold_silver_monitor.models import AnalysisResult, GroundingSource, PriceSample


logger = logging.getLogger(__name__)


# Structured output can't be combined with the search tool, so the price
# answer is requested in a fixed textual pattern and parsed back out.
PRICE_PROMPT = (
    "Find the current live spot price of Gold (XAU) and Silver (XAG) per ounce in USD. "
    "Return the output strictly in this format: 'Gold: <price_number>, Silver: <price_number>'. "
    "Do not include any other text or currency symbols like $."
)

ANALYSIS_PROMPT = (
    "The current Gold/Silver ratio is {ratio:.2f}. Briefly analyze what this level "
    "implies historically (e.g., is silver undervalued relative to gold?). "
    "Keep it under 100 words. "
    'Search for "current historical context gold silver ratio".'
)

NO_ANALYSIS_TEXT = "No analysis available."
ANALYSIS_UNAVAILABLE_TEXT = "Analysis currently unavailable."

# Thousands separators are allowed, e.g. "Gold: 2,500.00"
GOLD_PATTERN = re.compile(r"Gold:\s*([\d,.]+)", re.IGNORECASE)
SILVER_PATTERN = re.compile(r"Silver:\s*([\d,.]+)", re.IGNORECASE)


# Leading numeric part of a captured token, so "29.10." still reads as 29.1
NUMBER_PREFIX = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def _parse_number(match: re.Match | None) -> float | None:
    if match is None:
        return None
    number = NUMBER_PREFIX.match(match.group(1).replace(",", ""))
    if number is None:
        return None
    value = float(number.group(0))
    return value if math.isfinite(value) else None


def parse_price_response(text: str, timestamp: int) -> PriceSample | None:
    """
    Extract gold and silver prices from a 'Gold: <n>, Silver: <n>' answer.

    Args:
        text: Raw response text
        timestamp: Epoch milliseconds to stamp the sample with

    Returns:
        PriceSample, or None if either price is missing, unparseable,
        or silver is zero
    """
    gold = _parse_number(GOLD_PATTERN.search(text or ""))
    silver = _parse_number(SILVER_PATTERN.search(text or ""))

    if gold is None or silver is None or silver == 0:
        return None
    return PriceSample.create(gold, silver, timestamp)


def extract_text(data: dict) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def extract_sources(data: dict) -> list[GroundingSource]:
    """Collect web citations that carry both a title and a URI."""
    candidates = data.get("candidates") or []
    if not candidates:
        return []
    metadata = candidates[0].get("groundingMetadata") or {}
    sources = []
    for chunk in metadata.get("groundingChunks") or []:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if web and web.get("uri") and web.get("title"):
            sources.append(GroundingSource(title=web["title"], uri=web["uri"]))
    return sources


def _now_ms() -> int:
    return int(time.time() * 1000)


class GeminiFetcher:
    """Fetches spot prices and market commentary from the Gemini API."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
        clock=None,
    ) -> None:
        self.settings = settings or Settings()
        self.settings.validate()
        self.clock = clock or _now_ms
        self._client: httpx.Client | None = client

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialize HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=REQUEST_TIMEOUT)
        return self._client

    def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "GeminiFetcher":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _generate(self, prompt: str, temperature: float | None = None) -> dict:
        """Call generateContent with the Google Search tool enabled."""
        body: dict = {
            "contents": [{"parts": [{"text": prompt}]}],
            "tools": [{"google_search": {}}],
        }
        if temperature is not None:
            body["generationConfig"] = {"temperature": temperature}

        response = self.client.post(
            f"{self.settings.base_url}/models/{self.settings.model}:generateContent",
            headers={"x-goog-api-key": self.settings.gemini_api_key},
            json=body,
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected response type: {type(data).__name__}")
        return data

    def fetch_live_prices(self) -> PriceSample | None:
        """
        Ask for current gold and silver spot prices.

        Returns:
            PriceSample on success, None on any parse or transport failure
        """
        try:
            text = extract_text(self._generate(PRICE_PROMPT, temperature=0.1))
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error fetching market data: {e.response.status_code}")
            return None
        except Exception as e:
            logger.error(f"Error fetching market data: {e}")
            return None

        sample = parse_price_response(text, self.clock())
        if sample is None:
            logger.warning(f"Failed to parse market data from Gemini response: {text!r}")
            return None

        logger.info(
            f"Gold {sample.gold_price:.2f}, Silver {sample.silver_price:.2f}, "
            f"ratio {sample.ratio:.2f}"
        )
        return sample

    def fetch_market_analysis(self, ratio: float) -> AnalysisResult:
        """Ask for a short historical reading of the given ratio."""
        try:
            data = self._generate(ANALYSIS_PROMPT.format(ratio=ratio))
            text = extract_text(data) or NO_ANALYSIS_TEXT
            return AnalysisResult(text=text, sources=extract_sources(data))
        except Exception as e:
            logger.error(f"Error fetching analysis: {e}")
            return AnalysisResult(text=ANALYSIS_UNAVAILABLE_TEXT, sources=[])
