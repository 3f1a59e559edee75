"""
Domain validation and normalization module.

Two validators live here:

- InputValidator checks a *base name* (the label a user types, e.g. 'test123')
  before any network work starts, reporting every rule it breaks.
- DomainValidator checks a *full domain* (e.g. 'test123.com') inside the core,
  normalizing international input to its IDNA form first.
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

import idna

from .enums import DomainValidationErrorCode
from .exceptions import ValidationError

if TYPE_CHECKING:
    from .tld_registry import TLDRegistry


MAX_LABEL_LENGTH = 63
MAX_DOMAIN_LENGTH = 253

# Control characters, whitespace and symbols that can never appear in a hostname
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~_]'
)

BASE_NAME_CHARS = re.compile(r"^[a-z0-9-]+$")
SANITIZE_PATTERN = re.compile(r"[^a-z0-9-]")

# Labels: alphanumeric with internal hyphens, 1-63 chars; final label >= 2 letters
FULL_DOMAIN_PATTERN = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}$"
)


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict = field(default_factory=dict)


@dataclass
class NameValidationResult:
    """Result of validating a base name; lists every rule that failed."""

    valid: bool
    sanitized_input: Optional[str]
    errors: list[DomainValidationError]

    @property
    def error_message(self) -> Optional[str]:
        return self.errors[0].message if self.errors else None

    @property
    def error_codes(self) -> list[DomainValidationErrorCode]:
        return [e.code for e in self.errors]


@dataclass
class DomainValidationResult:
    """Result of validating a full domain."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]


class InputValidator:
    """
    Validates base names typed by a user.

    Rules: 1-63 characters; letters, digits and hyphens only; no leading or
    trailing hyphen; no '--' at positions 3-4 (reserved for IDN A-labels);
    not all numeric.
    """

    def validate_domain_name(self, name: object) -> NameValidationResult:
        """
        Validate a base name.

        Args:
            name: Raw input; anything other than a non-blank string is empty input

        Returns:
            NameValidationResult with the lowercased name or the list of errors
        """
        if not isinstance(name, str) or not name.strip():
            return NameValidationResult(
                valid=False,
                sanitized_input=None,
                errors=[
                    DomainValidationError(
                        code=DomainValidationErrorCode.EMPTY_INPUT,
                        message="Domain name cannot be empty",
                    )
                ],
            )

        candidate = name.strip().lower()
        errors: list[DomainValidationError] = []

        if not self.is_valid_length(candidate):
            errors.append(DomainValidationError(
                code=DomainValidationErrorCode.INVALID_LENGTH,
                message=f"Domain name must be no more than {MAX_LABEL_LENGTH} characters long",
                details={"length": len(candidate)},
            ))

        if not self.has_valid_characters(candidate):
            errors.append(DomainValidationError(
                code=DomainValidationErrorCode.INVALID_CHARACTERS,
                message="Domain name can only contain letters, numbers, and hyphens",
                details={"invalid": sorted(set(SANITIZE_PATTERN.findall(candidate)))},
            ))

        if not self.has_valid_format(candidate):
            errors.append(DomainValidationError(
                code=DomainValidationErrorCode.INVALID_FORMAT,
                message="Domain name cannot start or end with a hyphen",
            ))

        if candidate[2:4] == "--":
            errors.append(DomainValidationError(
                code=DomainValidationErrorCode.RESERVED_FORMAT,
                message=(
                    "Domain name cannot have consecutive hyphens at positions 3-4 "
                    "(reserved for internationalized domains)"
                ),
            ))

        if candidate.isdigit():
            errors.append(DomainValidationError(
                code=DomainValidationErrorCode.ALL_NUMERIC,
                message="Domain name cannot be all numeric",
            ))

        return NameValidationResult(
            valid=not errors,
            sanitized_input=None if errors else candidate,
            errors=errors,
        )

    def sanitize_input(self, raw: object) -> str:
        """Trim, lowercase and strip every character that is not a-z, 0-9 or '-'."""
        if not isinstance(raw, str):
            return ""
        return SANITIZE_PATTERN.sub("", raw.strip().lower())

    def is_valid_length(self, name: str) -> bool:
        return 1 <= len(name) <= MAX_LABEL_LENGTH

    def has_valid_characters(self, name: str) -> bool:
        return bool(BASE_NAME_CHARS.match(name.lower()))

    def has_valid_format(self, name: str) -> bool:
        return bool(name) and not name.startswith("-") and not name.endswith("-")


class DomainValidator:
    """
    Validates and normalizes full domain names.

    Handles:
    - Conversion to lowercase canonical form
    - IDNA encoding for international characters
    - Rejection of forbidden characters
    - Label rules (alphanumeric with internal hyphens, 1-63 chars per label,
      final label of at least two letters)
    - Optional restriction to an allowed TLD list
    """

    def __init__(self, allowed_tlds: Optional[list[str]] = None) -> None:
        """
        Initialize validator.

        Args:
            allowed_tlds: Optional allowed TLDs (e.g. ['com', '.io']); None allows any
        """
        self._allowed_tlds = (
            {tld.lower().lstrip(".") for tld in allowed_tlds}
            if allowed_tlds is not None
            else None
        )

    def validate(self, raw_domain: object) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with validation status and canonical form or error
        """
        if not isinstance(raw_domain, str) or not raw_domain.strip():
            return self._invalid(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain input is empty",
                {"raw_input": repr(raw_domain)},
            )

        domain = raw_domain.strip()

        if FORBIDDEN_CHARS_PATTERN.search(domain):
            return self._invalid(
                DomainValidationErrorCode.INVALID_CHARACTERS,
                f"Invalid domain format: {raw_domain}",
                {
                    "raw_input": raw_domain,
                    "forbidden_chars": FORBIDDEN_CHARS_PATTERN.findall(domain),
                },
            )

        try:
            canonical = self.normalize_to_canonical(domain)
        except ValidationError as e:
            return self._invalid(DomainValidationErrorCode.IDNA_ERROR, e.message, e.details)

        if len(canonical) > MAX_DOMAIN_LENGTH or not FULL_DOMAIN_PATTERN.match(canonical):
            return self._invalid(
                DomainValidationErrorCode.INVALID_FORMAT,
                f"Invalid domain format: {raw_domain}",
                {"raw_input": raw_domain, "canonical": canonical},
            )

        tld = canonical.rsplit(".", 1)[1]
        if self._allowed_tlds is not None and tld not in self._allowed_tlds:
            return self._invalid(
                DomainValidationErrorCode.INVALID_FORMAT,
                f"TLD '.{tld}' is not in the configured allowed list",
                {"raw_input": raw_domain, "tld": tld},
            )

        return DomainValidationResult(valid=True, canonical_domain=canonical, error=None)

    def is_valid(self, raw_domain: object) -> bool:
        return self.validate(raw_domain).valid

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, IDNA-encoded).

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()

        if any(ord(c) > 127 for c in domain_lower):
            try:
                return idna.encode(domain_lower, uts46=True).decode("ascii")
            except idna.IDNAError as e:
                raise ValidationError(
                    code=DomainValidationErrorCode.IDNA_ERROR.value,
                    message=f"IDNA encoding failed: {e}",
                    details={"domain": domain, "idna_error": str(e)},
                )

        return domain_lower

    @staticmethod
    def _invalid(
        code: DomainValidationErrorCode, message: str, details: dict
    ) -> DomainValidationResult:
        return DomainValidationResult(
            valid=False,
            canonical_domain=None,
            error=DomainValidationError(code=code, message=message, details=details),
        )


_default_validator = DomainValidator()


def parse_domain(
    domain: str, registry: Optional["TLDRegistry"] = None
) -> tuple[str, str]:
    """
    Split a full domain into (base_domain, tld).

    The TLD is matched against the registry when one is given (longest known
    suffix), otherwise the last label is used.

    Raises:
        ValidationError: If the domain is malformed
    """
    validation = _default_validator.validate(domain)
    if not validation.valid:
        raise ValidationError(
            code=validation.error.code.value,
            message=validation.error.message,
            details=validation.error.details,
        )

    canonical = validation.canonical_domain
    tld = registry.extract_tld(canonical) if registry is not None else None
    if tld is None:
        tld = "." + canonical.rsplit(".", 1)[1]
    return canonical[: -len(tld)], tld


def split_domain_lenient(domain: str) -> tuple[str, str]:
    """Split at the last dot without validating; used to describe failed input."""
    base, dot, tld = domain.rpartition(".")
    if not dot:
        return domain, ""
    return base, f".{tld}"
