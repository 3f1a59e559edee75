"""
Property-based tests for TLD addressing.

Uses Hypothesis to check that domain construction and suffix extraction are
inverse operations over the known TLD list.
"""

import string

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_sweep.enums import DomainValidationErrorCode
from domain_sweep.exceptions import ValidationError
from domain_sweep.tld_registry import (
    DEFAULT_TLDS,
    EXTENDED_TLDS,
    WHOIS_SERVERS,
    TLDRegistry,
    normalize_tld,
)


def base_name() -> st.SearchStrategy[str]:
    return st.text(alphabet=string.ascii_lowercase + string.digits, min_size=1, max_size=20)


class TestConstructDomainsProperty:
    """N requested TLDs give N unique domains, one per TLD, in order."""

    @given(
        base=base_name(),
        tlds=st.lists(st.sampled_from(list(EXTENDED_TLDS)), min_size=1, max_size=10, unique=True),
    )
    @settings(max_examples=100)
    def test_one_domain_per_tld(self, base: str, tlds: list[str]) -> None:
        domains = TLDRegistry(EXTENDED_TLDS).construct_domains(base, tlds)

        assert domains == [f"{base}{tld}" for tld in tlds]
        assert len(set(domains)) == len(tlds)

    @given(base=base_name(), tlds=st.lists(st.sampled_from(list(DEFAULT_TLDS)), min_size=1, max_size=12))
    @settings(max_examples=100)
    def test_duplicates_removed_in_order(self, base: str, tlds: list[str]) -> None:
        domains = TLDRegistry().construct_domains(base, tlds)

        expected = list(dict.fromkeys(tlds))
        assert domains == [f"{base}{tld}" for tld in expected]

    @given(base=base_name(), tlds=st.lists(st.sampled_from(list(EXTENDED_TLDS)), min_size=1, max_size=8))
    @settings(max_examples=100)
    def test_extraction_inverts_construction(self, base: str, tlds: list[str]) -> None:
        registry = TLDRegistry(EXTENDED_TLDS)
        for domain in registry.construct_domains(base, tlds):
            tld = registry.extract_tld(domain)
            assert tld is not None
            assert registry.extract_base_domain(domain) == base
            assert domain == f"{base}{tld}"

    @pytest.mark.parametrize("tlds", [None, []])
    def test_missing_or_empty_tlds_fall_back_to_defaults(self, tlds) -> None:
        domains = TLDRegistry().construct_domains("test123", tlds)

        assert domains == [f"test123{tld}" for tld in DEFAULT_TLDS]

    def test_empty_registry_falls_back_to_defaults(self) -> None:
        registry = TLDRegistry([])

        assert registry.supported_tlds == list(DEFAULT_TLDS)
        assert registry.construct_domains("test", []) == [f"test{tld}" for tld in DEFAULT_TLDS]

    def test_tlds_normalized(self) -> None:
        domains = TLDRegistry().construct_domains("  Test123 ", ["COM", ".Net", "  io "])

        assert domains == ["test123.com", "test123.net", "test123.io"]

    @pytest.mark.parametrize("base", ["", "   ", None])
    def test_empty_base_rejected(self, base) -> None:
        with pytest.raises(ValidationError) as exc_info:
            TLDRegistry().construct_domains(base, [".com"])

        assert exc_info.value.code == DomainValidationErrorCode.EMPTY_INPUT.value


class TestSuffixMatching:
    def test_unknown_suffix(self) -> None:
        registry = TLDRegistry()

        assert registry.extract_tld("example.xyz") is None
        assert registry.extract_base_domain("example.xyz") is None
        assert not registry.is_supported_domain("example.xyz")

    def test_bare_tld_is_not_a_domain(self) -> None:
        assert TLDRegistry().extract_tld(".com") is None

    def test_longest_suffix_wins(self) -> None:
        registry = TLDRegistry([".uk", ".co.uk"])

        assert registry.extract_tld("shop.co.uk") == ".co.uk"
        assert registry.extract_tld("shop.uk") == ".uk"

    def test_injected_table(self) -> None:
        registry = TLDRegistry(["app", "dev"])

        assert registry.supported_tlds == [".app", ".dev"]
        assert registry.is_supported_domain("x.app")
        assert not registry.is_supported_domain("x.com")


class TestTables:
    def test_default_tlds_are_a_prefix_of_extended(self) -> None:
        assert EXTENDED_TLDS[:len(DEFAULT_TLDS)] == DEFAULT_TLDS
        assert len(set(EXTENDED_TLDS)) == len(EXTENDED_TLDS)

    def test_whois_server_for_every_default_tld(self) -> None:
        for tld in DEFAULT_TLDS:
            assert tld in WHOIS_SERVERS

    def test_normalize_tld_rejects_empty(self) -> None:
        with pytest.raises(ValidationError):
            normalize_tld(" . ")
