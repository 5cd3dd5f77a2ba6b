"""Shared data models for captive-portal detection."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class SignalKind(str, Enum):
    """How the TXT lookup of the ping host was classified."""
    NO_RECORDS = "no_records"
    TOKEN_CONFIRMED = "token_confirmed"
    TOKEN_AMBIGUOUS = "token_ambiguous"
    MALFORMED = "malformed"


class ProbeStatus(str, Enum):
    NOT_RUN = "not_run"
    COMPLETED = "completed"
    REFUSED = "refused"      # host failed the allow-list guard
    FAILED = "failed"        # transport error or timeout


REDIRECT_STATUSES = frozenset({301, 302, 307, 308})


@dataclass(frozen=True)
class TxtSignal:
    """Outcome of the TXT Signal Resolver."""
    kind: SignalKind
    records: Tuple[str, ...] = ()
    possibly_captive: bool = False
    override_host: Optional[str] = None
    reason: str = ""

    @property
    def was_record_found(self) -> bool:
        return bool(self.records)


@dataclass(frozen=True)
class ProbeEvidence:
    """What a single HTTP probe observed."""
    status: ProbeStatus
    detect_host: str
    status_code: Optional[int] = None
    had_location_header: bool = False
    had_3xx_status: bool = False
    had_success_body: bool = False
    location: Optional[str] = None
    error: str = ""

    @property
    def is_captive(self) -> bool:
        return (self.status is ProbeStatus.COMPLETED
                and self.had_location_header
                and not self.had_success_body
                and self.had_3xx_status)

    def __str__(self):
        if self.status is not ProbeStatus.COMPLETED:
            return f"probe {self.status.value} @ {self.detect_host} {self.error}".rstrip()
        return (f"probe @ {self.detect_host} (HTTP {self.status_code}) "
                f"location={self.had_location_header} 3xx={self.had_3xx_status} "
                f"success_body={self.had_success_body}")


@dataclass(frozen=True)
class DetectionResult:
    """Verdict and evidence of one detection tick.

    Built fresh per tick and rebuilt (``dataclasses.replace``) by each
    stage; ``destination_uri`` is set if and only if ``is_captive``.
    """
    ping_host: str
    txt_token: str
    detect_host: str
    was_record_found: bool = False
    records: Tuple[str, ...] = field(default_factory=tuple)
    signal: SignalKind = SignalKind.NO_RECORDS
    requested_further_investigation: bool = False
    had_location_header: bool = False
    had_3xx_status: bool = False
    had_success_body: bool = False
    status_code: Optional[int] = None
    destination_uri: Optional[str] = None
    is_captive: bool = False
    probe_status: ProbeStatus = ProbeStatus.NOT_RUN
    error: str = ""

    def __post_init__(self):
        if (self.destination_uri is not None) != self.is_captive:
            raise ValueError(
                "destination_uri must be set exactly when is_captive is true "
                f"(is_captive={self.is_captive}, destination_uri={self.destination_uri!r})")

    @property
    def inconclusive(self) -> bool:
        """True when the probe could not reach a verdict (network failure)."""
        return self.probe_status is ProbeStatus.FAILED

    def to_dict(self) -> dict:
        return {
            "ping_host": self.ping_host,
            "txt_token": self.txt_token,
            "detect_host": self.detect_host,
            "was_record_found": self.was_record_found,
            "records": list(self.records),
            "signal": self.signal.value,
            "requested_further_investigation": self.requested_further_investigation,
            "had_location_header": self.had_location_header,
            "had_3xx_status": self.had_3xx_status,
            "had_success_body": self.had_success_body,
            "status_code": self.status_code,
            "destination_uri": self.destination_uri,
            "is_captive": self.is_captive,
            "probe_status": self.probe_status.value,
            "inconclusive": self.inconclusive,
            "error": self.error,
        }

    def __str__(self):
        if self.inconclusive:
            verdict = "INCONCLUSIVE"
        elif self.is_captive:
            verdict = f"CAPTIVE → {self.destination_uri}"
        else:
            verdict = "not captive"
        return (f"[{self.signal.value}] {verdict} "
                f"(detect={self.detect_host}, probe={self.probe_status.value})")
