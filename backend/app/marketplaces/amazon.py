import json
from datetime import datetime, timezone

import httpx
import structlog
from bs4 import BeautifulSoup

from app.core.config import ScraperOptions
from app.core.exceptions import ParseError, TransportError
from app.core.pricing import normalize_price
from app.db.models.product import Product
from app.db.models.product_source import ProductSource
from app.marketplaces.base import FetchResult, PriceFetcher, resolve_source_url

logger = structlog.get_logger(__name__)


class AmazonScraperFetcher(PriceFetcher):
    # most specific first; the first node with text wins
    PRICE_SELECTORS = [
        "#priceblock_ourprice",
        "#priceblock_dealprice",
        "span.a-price > span.a-offscreen",
        "span[data-a-color*=price] > span.a-offscreen",
    ]
    TITLE_SELECTOR = "#productTitle"
    IMAGE_SELECTOR = "img#landingImage"

    def __init__(
        self,
        options: ScraperOptions | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.options = options or ScraperOptions()
        self._transport = transport

    async def fetch(self, product: Product, source: ProductSource) -> FetchResult:
        url = resolve_source_url(product, source, self.options.base_url)

        logger.info(
            "amazon.fetch_started",
            product_id=product.id,
            source_id=source.id,
            url=url,
        )

        response = await self._get(url)
        soup = BeautifulSoup(response.text, "html.parser")

        selector, price_raw = self._extract_price_raw(soup)
        if price_raw is None:
            raise ParseError(f"No price found on Amazon page {url}")

        price, currency = normalize_price(price_raw)

        title = self._safe_text(soup, self.TITLE_SELECTOR) or product.title
        image = (
            self._safe_attr(soup, self.IMAGE_SELECTOR, "src")
            or product.image_path_in_storage
        )

        return FetchResult(
            price=price,
            currency=currency,
            collected_at=datetime.now(timezone.utc),
            description=title,
            image_path=image,
            raw_payload=json.dumps(
                {
                    "url": str(response.url),
                    "status_code": response.status_code,
                    "selector": selector,
                    "price_text": price_raw,
                }
            ),
        )

    # -------------------------
    # Transport layer
    # -------------------------

    def _build_headers(self) -> dict:
        return {
            "User-Agent": self.options.user_agent,
            "Accept-Language": self.options.accept_language,
        }

    async def _get(self, url: str) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                headers=self._build_headers(),
                timeout=self.options.timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response
        except httpx.TimeoutException as exc:
            raise TransportError(f"Timed out fetching {url}", timeout=True) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise TransportError(
                f"Amazon responded with HTTP {status} for {url}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc

    # -------------------------
    # Parsing helpers
    # -------------------------

    def _extract_price_raw(self, soup: BeautifulSoup) -> tuple[str | None, str | None]:
        for selector in self.PRICE_SELECTORS:
            text = self._safe_text(soup, selector)
            if text:
                return selector, text
        return None, None

    def _safe_text(self, soup: BeautifulSoup, selector: str) -> str | None:
        el = soup.select_one(selector)
        if not el:
            return None
        text = el.get_text().strip()
        return text or None

    def _safe_attr(self, soup: BeautifulSoup, selector: str, attr: str) -> str | None:
        el = soup.select_one(selector)
        if not el:
            return None
        value = el.get(attr)
        return value.strip() if value and value.strip() else None
