"""Captive Probe Executor: one non-redirect-following GET against the detect host."""

from typing import Optional

import httpx

from captivedetect.core.config import DetectionConfig, normalize_host
from captivedetect.core.models import ProbeEvidence, ProbeStatus, REDIRECT_STATUSES
from captivedetect.parsers.html import is_success_body


class CaptiveProbe:
    """
    Issue the detection GET and classify the answer.

    Usage:
        with CaptiveProbe(config, logger=log) as probe:
            evidence = probe.probe()            # default detect host
            evidence = probe.probe("portal.example.net")
    """

    def __init__(self, config: Optional[DetectionConfig] = None,
                 client: Optional[httpx.Client] = None,
                 proxy: str | None = None, logger=None):
        self.config = config or DetectionConfig()
        self.logger = logger
        self._owns_client = client is None
        self.client = client or httpx.Client(
            proxy=proxy, follow_redirects=False, timeout=self.config.timeout)

    # ── guard ───────────────────────────────────────────────────

    def is_allowed(self, host: str) -> bool:
        """Only allow-listed hostnames may be dereferenced over HTTP."""
        return self.config.allows(host)

    # ── public API ──────────────────────────────────────────────

    def probe(self, host: Optional[str] = None) -> ProbeEvidence:
        host = normalize_host(host) if host else self.config.detect_host

        if not self.is_allowed(host):
            if self.logger:
                self.logger.warn(f"Refusing to probe non allow-listed host {host!r}")
            return ProbeEvidence(ProbeStatus.REFUSED, host,
                                 error="host not in allow-list")

        url = f"http://{host}"
        if self.logger:
            self.logger.debug(f"→ GET {url} (timeout {self.config.timeout:g}s)")

        try:
            # redirects must be observed, never followed, even on an injected client
            resp = self.client.get(url, follow_redirects=False,
                                   timeout=self.config.timeout)
        except httpx.RequestError as e:
            if self.logger:
                self.logger.warn(f"Probe of {url} failed: {type(e).__name__} {e}")
            return ProbeEvidence(ProbeStatus.FAILED, host,
                                 error=f"{type(e).__name__}: {e}")

        return self._classify(host, resp)

    def _classify(self, host: str, resp: httpx.Response) -> ProbeEvidence:
        location = (resp.headers.get("location") or "").strip()
        evidence = ProbeEvidence(
            ProbeStatus.COMPLETED, host,
            status_code=resp.status_code,
            had_location_header=bool(location),
            had_3xx_status=resp.status_code in REDIRECT_STATUSES,
            had_success_body=is_success_body(resp.text),
            location=location or None,
        )
        if self.logger:
            self.logger.debug(str(evidence))
        return evidence

    # ── lifecycle ───────────────────────────────────────────────

    def close(self):
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
