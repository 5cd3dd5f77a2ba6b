from dataclasses import replace
from typing import Callable, Iterator, Optional
import time

from captivedetect.core.config import DetectionConfig
from captivedetect.core.models import (
    DetectionResult, ProbeEvidence, ProbeStatus, SignalKind, TxtSignal,
)
from captivedetect.probes.http import CaptiveProbe
from captivedetect.resolvers.txt import TxtSignalResolver


class Detector:
    """Runs the TXT → probe pipeline. Constructing it does no network I/O."""

    def __init__(self, config: Optional[DetectionConfig] = None,
                 resolver: Optional[TxtSignalResolver] = None,
                 probe: Optional[CaptiveProbe] = None,
                 proxy: str | None = None, logger=None):
        self.name = "CaptiveDetect"
        self.version = "1.0.0"
        self.config = config or DetectionConfig()
        self.logger = logger
        self.resolver = resolver or TxtSignalResolver(self.config, logger=logger)
        self.probe = probe or CaptiveProbe(self.config, proxy=proxy, logger=logger)

    # ---------- stages ----------
    def _initial(self) -> DetectionResult:
        return DetectionResult(
            ping_host=self.config.ping_host,
            txt_token=self.config.txt_token,
            detect_host=self.config.detect_host,
        )

    @staticmethod
    def _apply_signal(result: DetectionResult, signal: TxtSignal) -> DetectionResult:
        return replace(
            result,
            was_record_found=signal.was_record_found,
            records=signal.records,
            signal=signal.kind,
            detect_host=signal.override_host or result.detect_host,
            requested_further_investigation=(
                signal.kind is SignalKind.TOKEN_AMBIGUOUS and signal.possibly_captive),
        )

    @staticmethod
    def _apply_evidence(result: DetectionResult, evidence: ProbeEvidence) -> DetectionResult:
        if evidence.status is not ProbeStatus.COMPLETED:
            return replace(result, probe_status=evidence.status, error=evidence.error,
                           is_captive=False, destination_uri=None)
        captive = evidence.is_captive
        return replace(
            result,
            probe_status=evidence.status,
            status_code=evidence.status_code,
            had_location_header=evidence.had_location_header,
            had_3xx_status=evidence.had_3xx_status,
            had_success_body=evidence.had_success_body,
            is_captive=captive,
            destination_uri=evidence.location if captive else None,
        )
    # -----------------------------

    def detect(self) -> DetectionResult:
        """One detection tick: a TXT lookup and at most one HTTP probe."""
        if self.logger:
            self.logger.info(f"Checking {self.config.ping_host} for captive-portal signal")

        signal = self.resolver.resolve(self.config.ping_host)
        result = self._apply_signal(self._initial(), signal)

        if signal.kind is SignalKind.TOKEN_CONFIRMED:
            if self.logger:
                self.logger.debug("TXT token confirmed, skipping probe")
            return result

        if signal.kind is SignalKind.TOKEN_AMBIGUOUS and not signal.possibly_captive:
            if self.logger:
                self.logger.debug(f"TXT override {signal.override_host} not flagged captive")
            return result

        # NO_RECORDS and MALFORMED probe the default host; a flagged override probes its own
        evidence = self.probe.probe(result.detect_host)
        return self._apply_evidence(result, evidence)

    tick = detect

    def watch(self, interval: float, count: Optional[int] = None,
              sleep: Callable[[float], None] = time.sleep) -> Iterator[DetectionResult]:
        """Yield a fresh result every *interval* seconds (*count* ticks, or forever)."""
        if interval < 0:
            raise ValueError(f"interval must be >= 0, got {interval!r}")
        return self._ticks(interval, count, sleep)

    def _ticks(self, interval, count, sleep):
        n = 0
        while count is None or n < count:
            if n:
                sleep(interval)
            yield self.detect()
            n += 1

    def close(self):
        self.probe.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
