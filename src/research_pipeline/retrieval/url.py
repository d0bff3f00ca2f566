"""URL admissibility checks.

Decides, before any network I/O, whether a locator is worth fetching.
Rejections are classifications with a human-readable reason, not errors.
"""

import ipaddress
import re
from typing import List, Iterable, Optional, Tuple
from urllib.parse import urlsplit

from ..config import load_admissibility_rules
from ..log import get_logger
from ..schemas.evidence import Admissibility, Source

logger = get_logger("admissibility")

DEFAULT_BLOCKED_DOMAINS = [
    "facebook.com",
    "instagram.com",
    "twitter.com",
    "x.com",
    "linkedin.com",
    "pinterest.com",
    "tiktok.com",
    "reddit.com",
    "medium.com",
    "substack.com",
    "patreon.com",
    "discord.com",
    "slack.com",
    "notion.so",
    "drive.google.com",
    "docs.google.com",
    "dropbox.com",
]

DEFAULT_ANTI_SCRAPING_DOMAINS = [
    "cloudflare.com",
    "amazon.com",
    "ebay.com",
    "walmart.com",
    "bestbuy.com",
    "target.com",
    "homedepot.com",
    "lowes.com",
    "netflix.com",
    "hulu.com",
    "disney.com",
    "hbo.com",
    "spotify.com",
]

PRIVATE_HOST_PATTERNS = [
    re.compile(r"^localhost$", re.IGNORECASE),
    re.compile(r"^127\."),
    re.compile(r"^192\.168\."),
    re.compile(r"^10\."),
    re.compile(r"^172\.(1[6-9]|2[0-9]|3[0-1])\."),
    re.compile(r"\.local$", re.IGNORECASE),
]


def is_non_public_ip(hostname: str) -> bool:
    """True for IP literals that are private, loopback, link-local or unspecified."""
    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_unspecified


class AdmissibilityFilter:
    def __init__(self, blocked_domains: Optional[Iterable[str]] = None,
                 anti_scraping_domains: Optional[Iterable[str]] = None):
        rules = {}
        if blocked_domains is None or anti_scraping_domains is None:
            rules = load_admissibility_rules()
        if blocked_domains is None:
            blocked_domains = rules.get("blocked_domains") or DEFAULT_BLOCKED_DOMAINS
        if anti_scraping_domains is None:
            anti_scraping_domains = rules.get("anti_scraping_domains") or DEFAULT_ANTI_SCRAPING_DOMAINS
        self.blocked_domains = [d.lower() for d in blocked_domains]
        self.anti_scraping_domains = [d.lower() for d in anti_scraping_domains]

    def classify(self, locator: Optional[str]) -> Admissibility:
        if not locator or locator.startswith("#"):
            return Admissibility(valid=False, skip=True, reason="internal reference")

        try:
            parsed = urlsplit(locator.strip())
            hostname = parsed.hostname or ""
            parsed.port  # raises ValueError on a malformed port
        except ValueError:
            return Admissibility(valid=False, skip=True, reason="invalid format")

        scheme = parsed.scheme.lower()
        if not scheme:
            return Admissibility(valid=False, skip=True, reason="invalid format")
        if scheme == "file":
            return Admissibility(valid=False, skip=True, reason="file URLs not supported")
        if scheme not in ("http", "https"):
            return Admissibility(valid=False, skip=True, reason=f"unsupported scheme: {scheme}")
        if not hostname:
            return Admissibility(valid=False, skip=True, reason="invalid format")

        if any(domain in hostname for domain in self.blocked_domains):
            return Admissibility(
                valid=False,
                skip=True,
                reason=f"blocked domain ({hostname} typically requires authentication)",
            )

        if any(p.search(hostname) for p in PRIVATE_HOST_PATTERNS) or is_non_public_ip(hostname):
            return Admissibility(valid=False, skip=True, reason="private/local address not accessible")

        return Admissibility(valid=True)

    def has_anti_scraping_measures(self, locator: str) -> bool:
        """Advisory: the host is fetchable but known to block scrapers."""
        try:
            hostname = urlsplit(locator).hostname or ""
        except ValueError:
            return False
        return any(domain in hostname for domain in self.anti_scraping_domains)

    def filter_fetchable(self, sources: List[Source]) -> Tuple[List[Source], List[Source]]:
        """
        Splits sources into (fetchable, skipped).
        Skipped sources come back as copies carrying their skip_reason.
        """
        fetchable = []
        skipped = []
        for source in sources:
            verdict = self.classify(source.locator)
            if verdict.valid:
                fetchable.append(source)
            else:
                skipped.append(source.model_copy(update={"skip_reason": verdict.reason}))

        logger.info(
            f"URL filtering: total={len(sources)} fetchable={len(fetchable)} skipped={len(skipped)}"
        )
        for s in skipped:
            logger.debug(f"Skipped {s.locator}: {s.skip_reason}")
        return fetchable, skipped


def classify(locator: Optional[str]) -> Admissibility:
    return admissibility_filter.classify(locator)

admissibility_filter = AdmissibilityFilter()
