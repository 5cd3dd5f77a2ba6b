"""TXT Signal Resolver: reads the captive-portal side channel from DNS.

The ping host normally publishes a TXT record equal to the bare token.
A network that rewrites it to ``<token>=<flag>,<host>`` (or the legacy
``<token>=<host>``) is asking for a follow-up HTTP probe against ``<host>``.
"""

from typing import List, Optional, Sequence

import dns.exception
import dns.resolver

from captivedetect.core.config import DetectionConfig, is_valid_hostname, normalize_host
from captivedetect.core.models import SignalKind, TxtSignal


_TRUTHY = {"1", "true", "yes", "on", "captive"}
_FALSY = {"0", "false", "no", "off"}


def _parse_flag(raw: str) -> Optional[bool]:
    word = raw.strip().lower()
    if word in _TRUTHY:
        return True
    if word in _FALSY:
        return False
    return None


def classify_records(records: Sequence[str], token: str) -> TxtSignal:
    """Classify raw TXT strings against *token*. Never raises."""
    records = tuple(records)
    if not records:
        return TxtSignal(SignalKind.NO_RECORDS, reason="no TXT records")

    # text after the token, for every record that starts with it
    tails = [r.strip()[len(token):].lstrip() for r in records
             if r.strip().startswith(token)]

    if any(not t.startswith("=") for t in tails):
        return TxtSignal(SignalKind.TOKEN_CONFIRMED, records,
                         reason="bare token present")
    if not tails:
        return TxtSignal(SignalKind.MALFORMED, records,
                         reason="no record carries the token")

    value = tails[0][1:]
    if "," in value:
        raw_flag, raw_host = value.split(",", 1)
        flag = _parse_flag(raw_flag)
        if flag is None:
            return TxtSignal(SignalKind.MALFORMED, records,
                             reason=f"unknown flag {raw_flag.strip()!r}")
    else:
        # legacy "<token>=<host>": the override itself implies a probe
        flag, raw_host = True, value

    host = normalize_host(raw_host)
    if not is_valid_hostname(host):
        return TxtSignal(SignalKind.MALFORMED, records,
                         reason=f"invalid override host {raw_host.strip()!r}")

    return TxtSignal(SignalKind.TOKEN_AMBIGUOUS, records,
                     possibly_captive=flag, override_host=host,
                     reason=f"override to {host} (flag={flag})")


class TxtSignalResolver:
    """Look up the ping host's TXT records and classify them."""

    def __init__(self, config: Optional[DetectionConfig] = None,
                 resolver: Optional[dns.resolver.Resolver] = None, logger=None):
        self.config = config or DetectionConfig()
        self.logger = logger
        if resolver is None:
            try:
                resolver = dns.resolver.Resolver(configure=True)
            except dns.resolver.NoResolverConfiguration as e:
                # no usable resolv.conf: every lookup counts as "no records"
                if logger:
                    logger.warn(f"No DNS resolver configured ({e}), TXT signal disabled")
            else:
                resolver.timeout = self.config.dns_timeout
                resolver.lifetime = self.config.dns_timeout
        self.resolver = resolver

    def lookup(self, host: str) -> List[str]:
        """TXT strings for *host* in answer order; [] on any DNS failure."""
        if self.resolver is None:
            return []
        try:
            answer = self.resolver.resolve(host, "TXT", raise_on_no_answer=False,
                                           lifetime=self.config.dns_timeout)
        except dns.exception.DNSException as e:
            if self.logger:
                self.logger.debug(f"TXT {host}: {type(e).__name__} ({e})")
            return []

        values: List[str] = []
        if answer.rrset:
            for rdata in answer:
                values.append(b"".join(rdata.strings).decode("utf-8", errors="replace"))
        return values

    def resolve(self, host: Optional[str] = None) -> TxtSignal:
        host = host or self.config.ping_host
        records = self.lookup(host)
        signal = classify_records(records, self.config.txt_token)
        if self.logger:
            self.logger.debug(f"TXT {host}: {len(records)} record(s) → {signal.kind.value}")
            if signal.kind is SignalKind.MALFORMED:
                self.logger.warn(f"Ignoring TXT records for {host}: {signal.reason}")
        return signal
