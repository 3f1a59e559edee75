"""
Property-based tests for simulation mode.

Uses Hypothesis to verify that simulation mode never touches the network
while still producing complete, well-formed responses, including through the
command-line interface.
"""

import asyncio
import json
import string
from unittest.mock import patch

from hypothesis import given, settings
from hypothesis import strategies as st

from domain_sweep.cli import main
from domain_sweep.config import BatchConfig, SystemConfig
from domain_sweep.enums import AvailabilityStatus, CheckMethod
from domain_sweep.models import CheckRequest
from domain_sweep.orchestrator import DomainQueryEngine
from domain_sweep.tld_registry import DEFAULT_TLDS, EXTENDED_TLDS


def label_strategy() -> st.SearchStrategy[str]:
    return st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=12)


class TestNoNetworkProperty:
    @given(
        label=label_strategy(),
        method=st.sampled_from(list(CheckMethod)),
        tlds=st.lists(st.sampled_from(list(EXTENDED_TLDS)), min_size=1, max_size=6, unique=True),
    )
    @settings(max_examples=30, deadline=None)
    def test_no_sockets_or_resolvers(self, label: str, method: CheckMethod, tlds: list[str]) -> None:
        config = SystemConfig(simulation_mode=True, batch=BatchConfig(batch_delay_seconds=0.0))

        with patch("socket.create_connection") as connect, \
                patch("dns.asyncresolver.Resolver") as resolver:
            engine = DomainQueryEngine(config, method=method)
            response = asyncio.run(engine.handle_request(CheckRequest(base_domain=label, tlds=tlds)))

        connect.assert_not_called()
        resolver.assert_not_called()
        assert [r.tld for r in response.results] == tlds
        assert response.summary.taken == len(tlds)
        assert all(r.check_method == method for r in response.results)

    @given(label=label_strategy())
    @settings(max_examples=30, deadline=None)
    def test_available_prefix(self, label: str) -> None:
        engine = DomainQueryEngine(SystemConfig(simulation_mode=True))

        response = asyncio.run(engine.handle_request(CheckRequest(base_domain=f"available-{label}")))

        assert response.summary.available == len(DEFAULT_TLDS)
        assert all(r.status == AvailabilityStatus.AVAILABLE for r in response.results)


class TestDryRunCommand:
    def test_check_json(self, capsys) -> None:
        exit_code = main(["check", "Example", "--tlds", ".com", "net", "--dry-run", "--json"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 1
        assert output["base_domain"] == "example"
        assert [r["domain"] for r in output["results"]] == ["example.com", "example.net"]
        assert output["summary"] == {"total": 2, "available": 0, "taken": 2, "errors": 0, "unknown": 0}
        assert output["results"][0]["whois_data"]["registrar"] == "Example Registrar"

    def test_check_text_with_available_domain(self, capsys) -> None:
        exit_code = main(["check", "available-thing", "--tlds", ".io", "--dry-run", "--method", "dns", "--verbose"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Simulation mode" in out
        assert "available-thing.io" in out
        assert "1/1 available" in out

    def test_invalid_base_fails(self, capsys) -> None:
        exit_code = main(["check", "bad@name", "--dry-run"])

        assert exit_code == 1
        assert "Error:" in capsys.readouterr().err

    def test_check_list(self, tmp_path, capsys) -> None:
        domains_file = tmp_path / "domains.txt"
        domains_file.write_text("# watch list\nexample.com\navailable-x.dev\nbad@domain\n", encoding="utf-8")
        output_file = tmp_path / "out" / "results.json"

        exit_code = main([
            "check-list", str(domains_file), "--dry-run", "--output", str(output_file),
        ])

        assert exit_code == 0
        written = json.loads(output_file.read_text(encoding="utf-8"))
        assert written["total_domains"] == 3
        assert [f["domain"] for f in written["failed"]] == ["bad@domain"]
        assert "1/3 domain(s) available" in capsys.readouterr().out

    def test_check_list_missing_file(self, tmp_path) -> None:
        assert main(["check-list", str(tmp_path / "none.txt"), "--dry-run"]) == 1
