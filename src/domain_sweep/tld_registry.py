"""
TLD Registry - supported TLDs, their WHOIS servers, and domain addressing.

The registry is a closed list: it turns a base name plus TLDs into full
domain names and back again by longest-suffix match, and does not try to be a
general public-suffix parser.
"""

from typing import Iterable, Optional

from .enums import DomainValidationErrorCode
from .exceptions import ValidationError

# ============================================================================
# TLD TABLES
# ============================================================================
DEFAULT_TLDS = (".com", ".net", ".org", ".ai", ".dev", ".io", ".co")

EXTENDED_TLDS = DEFAULT_TLDS + (
    ".app", ".tech", ".online", ".store", ".shop", ".site",
    ".blog", ".news", ".info", ".biz", ".me", ".tv",
)

# Port-43 WHOIS servers, keyed by TLD with leading dot
WHOIS_SERVERS: dict[str, str] = {
    ".com": "whois.verisign-grs.com",
    ".net": "whois.verisign-grs.com",
    ".org": "whois.pir.org",
    ".ai": "whois.nic.ai",
    ".dev": "whois.nic.google",
    ".app": "whois.nic.google",
    ".io": "whois.nic.io",
    ".co": "whois.nic.co",
    ".tech": "whois.nic.tech",
    ".online": "whois.nic.online",
    ".store": "whois.nic.store",
    ".shop": "whois.nic.shop",
    ".site": "whois.nic.site",
    ".blog": "whois.nic.blog",
    ".news": "whois.nic.news",
    ".info": "whois.nic.info",
    ".biz": "whois.nic.biz",
    ".me": "whois.nic.me",
    ".tv": "whois.nic.tv",
}


def normalize_tld(tld: str) -> str:
    """Lowercase a TLD and make sure it carries exactly one leading dot."""
    cleaned = tld.strip().lower().lstrip(".")
    if not cleaned:
        raise ValidationError(
            code=DomainValidationErrorCode.INVALID_FORMAT.value,
            message="TLD cannot be empty",
            details={"tld": tld},
        )
    return f".{cleaned}"


class TLDRegistry:
    """
    Closed-list TLD addressing.

    The TLD table is injected so callers (and tests) can substitute their own
    set; it defaults to DEFAULT_TLDS.
    """

    def __init__(self, tlds: Optional[Iterable[str]] = None) -> None:
        """
        Initialize the registry.

        Args:
            tlds: Known TLDs, with or without leading dot. None or an empty
                  list falls back to DEFAULT_TLDS.
        """
        source = list(tlds) if tlds is not None else []
        if not source:
            source = list(DEFAULT_TLDS)
        self._tlds = self._dedupe(normalize_tld(t) for t in source)
        # Longest suffix first so ".co.uk"-style entries win over ".uk"
        self._by_length = sorted(self._tlds, key=len, reverse=True)

    @property
    def supported_tlds(self) -> list[str]:
        """Return a copy of the known TLD list."""
        return list(self._tlds)

    def construct_domains(
        self, base_domain: str, tlds: Optional[Iterable[str]] = None
    ) -> list[str]:
        """
        Build full domain names from a base name and a TLD list.

        Args:
            base_domain: Base name, e.g. 'example'
            tlds: TLDs to combine with; None or empty falls back to the registry list

        Returns:
            Full domain names in TLD order, without duplicates

        Raises:
            ValidationError: If the base name is empty after trimming
        """
        if not isinstance(base_domain, str):
            raise ValidationError(
                code=DomainValidationErrorCode.EMPTY_INPUT.value,
                message="Base domain must be a non-empty string",
                details={"base_domain": repr(base_domain)},
            )

        sanitized = base_domain.strip().lower()
        if not sanitized:
            raise ValidationError(
                code=DomainValidationErrorCode.EMPTY_INPUT.value,
                message="Base domain cannot be empty after sanitization",
                details={"base_domain": base_domain},
            )

        target = self.resolve_tlds(tlds)
        return [f"{sanitized}{tld}" for tld in target]

    def resolve_tlds(self, tlds: Optional[Iterable[str]] = None) -> list[str]:
        """Normalize a requested TLD list, falling back to the registry list."""
        requested = list(tlds) if tlds is not None else []
        if not requested:
            return list(self._tlds)
        return self._dedupe(normalize_tld(t) for t in requested)

    def is_supported_domain(self, domain: str) -> bool:
        """Check whether a domain ends with one of the known TLDs."""
        return self.extract_tld(domain) is not None

    def extract_base_domain(self, domain: str) -> Optional[str]:
        """Return the part before the matched TLD, or None when no TLD matches."""
        tld = self.extract_tld(domain)
        if tld is None:
            return None
        return domain.lower()[: -len(tld)]

    def extract_tld(self, domain: str) -> Optional[str]:
        """Return the longest known TLD the domain ends with, or None."""
        lower = domain.lower()
        for tld in self._by_length:
            if lower.endswith(tld) and len(lower) > len(tld):
                return tld
        return None

    @staticmethod
    def _dedupe(tlds: Iterable[str]) -> list[str]:
        seen: set[str] = set()
        out: list[str] = []
        for tld in tlds:
            if tld not in seen:
                seen.add(tld)
                out.append(tld)
        return out
