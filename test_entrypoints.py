"""Offline tests for the four command-line entrypoints.

No AWS credentials, network access or root privileges are needed: sessions,
clients and host probes are replaced with small fakes.

Run these tests locally with::

    python -m unittest -v test_entrypoints
"""

from __future__ import annotations

import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from typing import Any, Dict, List
from unittest import mock

from botocore.exceptions import ClientError, ProfileNotFound

import aws_cost_analysis
import aws_resource_scanner
import cost_dashboard
import server_security_inspector
from aws_checkers.common import ResourceListing
from finops_toolset.console import ReportConsole
from host_checks.authlog import AuthLogStats
from host_checks.findings import SecurityFindings
from host_checks.firewall import FirewallStatus
from host_checks.sshd import SshdConfig


# -------------------- Stubs & utilities --------------------

def _console() -> tuple[ReportConsole, io.StringIO]:
    out = io.StringIO()
    return ReportConsole(stream=out, color=False), out


class FakeSts:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail

    def get_caller_identity(self) -> Dict[str, str]:
        if self.fail:
            raise ClientError({"Error": {"Code": "InvalidClientTokenId", "Message": "bad token"}},
                              "GetCallerIdentity")
        return {"Account": "123456789012", "Arn": "arn:aws:iam::123456789012:user/ops"}


class FakeCostExplorer:
    """Returns a DAILY and a MONTHLY response keyed by granularity."""

    def __init__(self, daily: Dict[str, float], monthly: Dict[str, float]) -> None:
        self.responses = {"DAILY": daily, "MONTHLY": monthly}
        self.calls: List[Dict[str, Any]] = []

    def get_cost_and_usage(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(kwargs)
        costs = self.responses[kwargs["Granularity"]]
        return {"ResultsByTime": [{
            "TimePeriod": kwargs["TimePeriod"],
            "Groups": [
                {"Keys": [svc], "Metrics": {"UnblendedCost": {"Amount": str(amt), "Unit": "USD"}}}
                for svc, amt in costs.items()
            ],
        }]}


class FakeSession:
    """Hands out pre-built clients by service name."""

    def __init__(self, clients: Dict[str, Any], credentials: Any = object()) -> None:
        self.clients = clients
        self.credentials = credentials

    def get_credentials(self) -> Any:
        return self.credentials

    def client(self, name: str, **_kwargs: Any) -> Any:
        return self.clients.get(name, object())


# -------------------- Resource scanner --------------------

def _listing(kind: str, rows: List[List[Any]]) -> ResourceListing:
    return ResourceListing(
        kind=kind,
        title=f"Checking {kind}...",
        headers=("Id",),
        message=f"Found {{count}} {kind}",
        empty_message=f"No {kind}",
        rows=rows,
    )


class TestResourceScanner(unittest.TestCase):
    def test_empty_account_reports_great(self) -> None:
        console, out = _console()
        result = aws_resource_scanner.scan(
            FakeSession({"sts": FakeSts()}), console,
            region="eu-west-1", profile="default", plan=[],
        )
        text = out.getvalue()
        self.assertEqual(result.total, 0)
        self.assertEqual(result.account_id, "123456789012")
        self.assertIn("Region: eu-west-1 | Profile: default", text)
        self.assertIn("Total billable resources found: 0", text)
        self.assertIn("✅ Great! No costly resources found.", text)

    def test_totals_accumulate_across_kinds(self) -> None:
        plan = [
            ("check_a", lambda ec2: _listing("ec2", [["i-1"], ["i-2"]]), "ec2", "ec2"),
            ("check_b", lambda rds: _listing("rds", [["db-1"]]), "rds", "rds"),
            ("check_c", lambda s3: _listing("s3", []), "s3", "s3"),
        ]
        console, out = _console()
        result = aws_resource_scanner.scan(
            FakeSession({"sts": FakeSts(fail=True)}), console,
            region="us-east-1", profile="prod", report_path="r.txt", plan=plan,
        )
        text = out.getvalue()
        self.assertEqual(result.counts(), {"ec2": 2, "rds": 1, "s3": 0})
        self.assertEqual(result.account_id, "")
        self.assertIn("Found 2 ec2", text)
        self.assertIn("No s3", text)
        self.assertIn("WARNING: You have 3 resources that may be costing money!", text)
        self.assertIn("💾 Report saved to: r.txt", text)

    def test_safe_aws_call_swallows_only_provider_errors(self) -> None:
        def _denied():
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "no"}}, "GetCallerIdentity")

        def _bug():
            raise ValueError("bug")

        self.assertEqual(aws_resource_scanner.safe_aws_call(_denied, default={}), {})
        self.assertEqual(aws_resource_scanner.safe_aws_call(lambda: 7), 7)
        with self.assertRaises(ValueError):
            aws_resource_scanner.safe_aws_call(_bug)

    def test_unknown_profile_exits_one(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, \
                mock.patch.object(aws_resource_scanner, "make_session",
                                  side_effect=ProfileNotFound(profile="ghost")), \
                mock.patch.object(aws_resource_scanner, "ReportConsole",
                                  return_value=_console()[0]):
            code = aws_resource_scanner.main(["--profile", "ghost", "--output-dir", tmp])
        self.assertEqual(code, 1)

    def test_default_profile_uses_credential_chain(self) -> None:
        with mock.patch.object(aws_resource_scanner.boto3, "Session") as session:
            aws_resource_scanner.make_session("eu-west-1", "default")
        session.assert_called_once_with(region_name="eu-west-1", profile_name=None)


# -------------------- Cost analysis --------------------

EC2 = "Amazon Elastic Compute Cloud - Compute"
S3 = "Amazon Simple Storage Service"


class TestCostAnalysis(unittest.TestCase):
    def _run(self, argv: List[str], session: FakeSession, read=None) -> tuple[int, str]:
        console, out = _console()
        kwargs = {"read": read} if read else {}
        with mock.patch.object(aws_cost_analysis, "make_session", return_value=session):
            code = aws_cost_analysis.main(argv, console=console, **kwargs)
        return code, out.getvalue()

    def test_full_report_and_csv(self) -> None:
        ce = FakeCostExplorer(daily={EC2: 60.0, S3: 40.0}, monthly={EC2: 90.0})
        session = FakeSession({"sts": FakeSts(), "ce": ce})
        with tempfile.TemporaryDirectory() as tmp:
            csv_path = os.path.join(tmp, "costs.csv")
            code, text = self._run(
                ["2025-10-01", "2025-10-31", "2025-11-01", "2025-11-11", "--csv", csv_path], session)
            self.assertTrue(os.path.exists(csv_path))

        self.assertEqual(code, 0)
        self.assertEqual([c["Granularity"] for c in ce.calls], ["DAILY", "MONTHLY"])
        self.assertIn("Authenticated as: arn:aws:iam::123456789012:user/ops", text)
        self.assertIn("Month-to-Date: 10 days", text)
        self.assertIn("Projected Month:     $    300.00", text)
        self.assertIn("Expected Change:     $   +210.00 (+233.3%)", text)
        self.assertIn(f"  ↑ {EC2:48s} $  90.00 → $ 180.00 ( +90.00)", text)
        self.assertIn(f"{EC2} accounts for 60.0% of costs - review for optimization", text)
        self.assertIn("Analysis complete!", text)

    def test_range_derives_previous_period(self) -> None:
        ce = FakeCostExplorer(daily={}, monthly={})
        code, text = self._run(["--range", "2025-11-01", "2025-11-07"],
                               FakeSession({"sts": FakeSts(), "ce": ce}))
        self.assertEqual(code, 0)
        self.assertEqual(ce.calls[1]["TimePeriod"], {"Start": "2025-10-26", "End": "2025-11-01"})
        self.assertIn("No significant costs recorded", text)
        self.assertIn("  No significant changes detected", text)
        self.assertIn("• No immediate optimization opportunities detected", text)

    def test_range_with_one_date_exits_one(self) -> None:
        ce = FakeCostExplorer(daily={}, monthly={})
        code, text = self._run(["--range", "2025-11-01"], FakeSession({"sts": FakeSts(), "ce": ce}))
        self.assertEqual(code, 1)
        self.assertEqual(ce.calls, [])
        self.assertIn("--range requires exactly two dates", text)

    def test_invalid_dates_exit_one(self) -> None:
        ce = FakeCostExplorer(daily={}, monthly={})
        code, text = self._run(["2025-13-01", "2025-11-07"], FakeSession({"sts": FakeSts(), "ce": ce}))
        self.assertEqual(code, 1)
        self.assertEqual(ce.calls, [])
        self.assertIn("Invalid date", text)

    def test_three_dates_exit_one(self) -> None:
        code, text = self._run(["2025-10-01", "2025-11-01", "2025-11-07"],
                               FakeSession({"sts": FakeSts()}))
        self.assertEqual(code, 1)
        self.assertIn("Provide four dates or use --range", text)

    def test_missing_credentials_exit_before_prompt(self) -> None:
        def _never(_prompt: str) -> str:
            raise AssertionError("prompted without credentials")

        code, text = self._run([], FakeSession({}, credentials=None), read=_never)
        self.assertEqual(code, 1)
        self.assertIn("AWS credentials not configured or invalid", text)

    def test_interactive_prompt(self) -> None:
        answers = iter(["2025-11-01 2025-11-07"])
        ce = FakeCostExplorer(daily={S3: 6.0}, monthly={S3: 20.0})
        code, text = self._run([], FakeSession({"sts": FakeSts(), "ce": ce}),
                               read=lambda _p: next(answers))
        self.assertEqual(code, 0)
        self.assertIn("AWS COST ANALYSIS - DATE SELECTION", text)
        self.assertIn("Previous Period: 2025-10-26 to 2025-11-01 (6 days)", text)


# -------------------- Dashboard --------------------

class TestCostDashboard(unittest.TestCase):
    def test_dashboard_from_csv(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            csv_path = Path(tmp) / "costs.csv"
            csv_path.write_text(
                "Service,Previous_Cost_USD,Current_Cost_USD,Projected_Cost_USD,Delta_USD\n"
                f"{EC2},90.00,60.00,180.00,90.00\n"
                f"{S3},0.00,40.00,120.00,120.00\n",
                encoding="utf-8",
            )
            out_html = Path(tmp) / "dash.html"
            buf = io.StringIO()
            with redirect_stdout(buf):
                code = cost_dashboard.main([str(csv_path), "-o", str(out_html), "--title", "Nov"])
            html = out_html.read_text(encoding="utf-8")

        self.assertEqual(code, 0)
        self.assertIn("<h1 style='font-family:sans-serif'>Nov</h1>", html)
        self.assertIn(EC2, html)
        self.assertIn("Wrote", buf.getvalue())

    def test_missing_delta_is_derived(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            csv_path = Path(tmp) / "costs.csv"
            csv_path.write_text("Service,Previous_Cost_USD,Projected_Cost_USD\nA,10,25\n", encoding="utf-8")
            frame = cost_dashboard.load_csv(csv_path)
        self.assertEqual(frame.loc[0, "Delta_USD"], 15.0)
        self.assertEqual(frame.loc[0, "Current_Cost_USD"], 0.0)


# -------------------- Security inspector --------------------

class TestSecurityInspector(unittest.TestCase):
    def test_requires_root(self) -> None:
        console, out = _console()
        collect = mock.Mock()
        code = server_security_inspector.main([], console=console, euid=lambda: 1000, collect=collect)
        self.assertEqual(code, 1)
        self.assertEqual(out.getvalue().strip(), "Run as root")
        collect.assert_not_called()

    def test_root_run_prints_full_report(self) -> None:
        findings = SecurityFindings(
            generated_at="2025-11-10 10:00:00 UTC",
            host_ip="10.0.0.5",
            sshd=SshdConfig(port="22", permit_root_login="no", password_authentication="no",
                            pubkey_authentication="yes"),
            firewall=FirewallStatus(ufw_status="Status: active"),
            auth=AuthLogStats(failed_total=12, failed_recent=3,
                              top_usernames=[("admin", 7)], top_ips=[("203.0.113.5", 12)]),
            locations={"203.0.113.5": "Netherlands (NL) | Example"},
        )
        collect = mock.Mock(return_value=findings)
        console, out = _console()
        code = server_security_inspector.main(["--no-geo"], console=console, euid=lambda: 0, collect=collect)
        text = out.getvalue()

        self.assertEqual(code, 0)
        collect.assert_called_once_with(geo=False)
        self.assertIn("Overall Security Score: 5.50/10. Needs Attention", text)
        self.assertIn("Threat Level: LOW | Security Score: 5.50/10", text)
        self.assertIn("•  203.0.113.5 (12 attempts) - Netherlands (NL) | Example", text)
        for heading in ("🔴 CRITICAL PRIORITY:", "🟠 HIGH PRIORITY:", "🟡 MEDIUM PRIORITY:", "🟢 LOW PRIORITY:"):
            self.assertIn(heading, text)
        self.assertIn("• Docker not running or not installed", text)
        self.assertIn("⚠️  NEEDS ATTENTION", text)


if __name__ == "__main__":
    unittest.main(verbosity=2)
