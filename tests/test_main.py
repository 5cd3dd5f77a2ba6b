import json
from unittest.mock import patch

import httpx
import pytest

from captivedetect import main as cli
from captivedetect.core.engine import Detector
from captivedetect.probes.http import CaptiveProbe


@pytest.fixture
def run(make_resolver, respond):
    """Run the CLI with DNS and HTTP replaced by fakes."""
    def _run(argv, records=None, handler=None):
        handler = handler or respond(200, "success")

        def factory(config, proxy=None, logger=None):
            client = httpx.Client(transport=httpx.MockTransport(handler))
            probe = CaptiveProbe(config, client=client, logger=logger)
            resolver = make_resolver(records or [], cfg=config)
            return Detector(config, resolver=resolver, probe=probe, logger=logger)

        with patch.object(cli, "Detector", side_effect=factory):
            return cli.main(argv)

    return _run


def test_open_exit_code(run, capsys):
    assert run([]) == cli.EXIT_OPEN
    assert "Not captive" in capsys.readouterr().out


def test_captive_exit_code(run, respond, capsys):
    code = run(["-q"], handler=respond(302, "", location="http://gw.local/login"))
    assert code == cli.EXIT_CAPTIVE
    assert "http://gw.local/login" in capsys.readouterr().out


def test_inconclusive_exit_code(run):
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    assert run(["-q"], handler=handler) == cli.EXIT_INCONCLUSIVE


def test_json_output(run, capsys):
    assert run(["--json", "-q"], records=[b"dot-browser-captive"]) == cli.EXIT_OPEN
    data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert data["signal"] == "token_confirmed"
    assert data["is_captive"] is False


def test_count_without_watch(run, capsys):
    assert run(["--json", "-q", "--count", "3"]) == cli.EXIT_OPEN
    lines = [l for l in capsys.readouterr().out.splitlines() if l.startswith("{")]
    assert len(lines) == 3


def test_allow_host_flag(run, respond):
    code = run(["-q", "--allow-host", "portal.example.net"],
               records=[b"dot-browser-captive=1,portal.example.net"],
               handler=respond(302, "", location="http://portal.example.net/login"))
    assert code == cli.EXIT_CAPTIVE


def test_override_refused_without_allow_host(run, respond):
    code = run(["-q"], records=[b"dot-browser-captive=1,portal.example.net"],
               handler=respond(302, "", location="http://portal.example.net/login"))
    assert code == cli.EXIT_OPEN


@pytest.mark.parametrize("argv", [
    ["--timeout", "0"],
    ["--detect-host", "bad host"],
    ["--token", "a=b"],
    ["--watch", "-1"],
])
def test_config_errors(run, argv):
    assert run(argv) == cli.EXIT_CONFIG


def test_env_config(run, monkeypatch, capsys):
    monkeypatch.setenv("CAPTIVE_TXT_TOKEN", "lan-token")
    assert run(["--json", "-q"], records=[b"lan-token"]) == cli.EXIT_OPEN
    data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert data["txt_token"] == "lan-token"
    assert data["signal"] == "token_confirmed"


def test_json_stdout_has_only_records(run, respond, capsys):
    # default verbosity plus a refused override: INFO and WARNING are logged
    code = run(["--json"], records=[b"dot-browser-captive=1,attacker.example"],
               handler=respond(302, "", location="http://attacker.example/"))
    assert code == cli.EXIT_OPEN

    out, err = capsys.readouterr()
    lines = out.strip().splitlines()
    assert len(lines) == 1
    for line in lines:
        json.loads(line)
    assert json.loads(lines[0])["probe_status"] == "refused"
    assert "[INFO]" in err
    assert "[WARNING]" in err


def test_json_inconclusive_with_quiet(run, capsys):
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    assert run(["--json", "-q"], handler=handler) == cli.EXIT_INCONCLUSIVE
    out, err = capsys.readouterr()
    assert json.loads(out)["inconclusive"] is True
    assert "[WARNING]" in err


@pytest.mark.parametrize("count", ["0", "-2"])
def test_count_must_be_positive(run, capsys, count):
    assert run(["--count", count]) == cli.EXIT_CONFIG
    assert "--count must be >= 1" in capsys.readouterr().out


def test_messages_are_english(run, capsys):
    assert run(["--timeout", "0"]) == cli.EXIT_CONFIG
    assert "Invalid configuration" in capsys.readouterr().out
