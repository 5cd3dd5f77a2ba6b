"""Detection configuration: hosts, TXT token, allow-list and timeouts.

Values come from (lowest to highest priority) the built-in defaults, the
``CAPTIVE_*`` environment variables and explicit overrides (the CLI).
"""

import math
import os
import re
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Mapping, Optional, Tuple


DEFAULT_PING_HOST = "captive.dotusercontent.com"
DEFAULT_DETECT_HOST = "captivedetect.dotusercontent.com"
DEFAULT_TXT_TOKEN = "dot-browser-captive"
DEFAULT_TIMEOUT = 5.0
DEFAULT_DNS_TIMEOUT = 2.0

_ENV_PREFIX = "CAPTIVE_"

_LABEL_RE = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")


def normalize_host(host: str) -> str:
    """Lower-case *host* and drop surrounding blanks and a trailing dot."""
    return (host or "").strip().lower().rstrip(".")


def is_valid_hostname(host: str) -> bool:
    """Plain DNS hostname check: no scheme, port, path or userinfo."""
    if not host or len(host) > 253:
        return False
    return all(_LABEL_RE.match(label) for label in host.split("."))


def host_matches(host: str, pattern: str) -> bool:
    """Exact match, or ``*.suffix`` matching strictly deeper names."""
    if pattern.startswith("*."):
        return fnmatchcase(host, pattern)
    return host == pattern


@dataclass(frozen=True)
class DetectionConfig:
    """Process-wide detection settings. Immutable once built."""
    ping_host: str = DEFAULT_PING_HOST
    detect_host: str = DEFAULT_DETECT_HOST
    txt_token: str = DEFAULT_TXT_TOKEN
    allowed_hosts: Tuple[str, ...] = field(default_factory=tuple)
    timeout: float = DEFAULT_TIMEOUT       # HTTP probe, seconds
    dns_timeout: float = DEFAULT_DNS_TIMEOUT

    def __post_init__(self):
        ping = normalize_host(self.ping_host)
        detect = normalize_host(self.detect_host)
        token = (self.txt_token or "").strip()

        if not is_valid_hostname(ping):
            raise ValueError(f"Invalid ping host: {self.ping_host!r}")
        if not is_valid_hostname(detect):
            raise ValueError(f"Invalid detect host: {self.detect_host!r}")
        if not token or "=" in token:
            raise ValueError(f"Invalid TXT token: {self.txt_token!r}")
        for name in ("timeout", "dns_timeout"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a finite number > 0, got {value!r}")

        allowed = [detect]
        for entry in self.allowed_hosts:
            entry = normalize_host(entry)
            if not entry:
                continue
            bare = entry[2:] if entry.startswith("*.") else entry
            if not is_valid_hostname(bare):
                raise ValueError(f"Invalid allow-list entry: {entry!r}")
            if entry not in allowed:
                allowed.append(entry)

        # frozen: assign the normalised values through object.__setattr__
        object.__setattr__(self, "ping_host", ping)
        object.__setattr__(self, "detect_host", detect)
        object.__setattr__(self, "txt_token", token)
        object.__setattr__(self, "allowed_hosts", tuple(allowed))
        object.__setattr__(self, "timeout", float(self.timeout))
        object.__setattr__(self, "dns_timeout", float(self.dns_timeout))

    def allows(self, host: str) -> bool:
        host = normalize_host(host)
        if not is_valid_hostname(host):
            return False
        return any(host_matches(host, pattern) for pattern in self.allowed_hosts)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "DetectionConfig":
        """Build a config from ``CAPTIVE_*`` variables; non-None overrides win."""
        env = os.environ if environ is None else environ
        values = {}

        for name in ("ping_host", "detect_host", "txt_token"):
            raw = env.get(_ENV_PREFIX + name.upper())
            if raw:
                values[name] = raw

        raw = env.get(_ENV_PREFIX + "ALLOWED_HOSTS")
        if raw:
            values["allowed_hosts"] = tuple(h for h in raw.split(",") if h.strip())

        for name in ("timeout", "dns_timeout"):
            raw = env.get(_ENV_PREFIX + name.upper())
            if raw:
                try:
                    values[name] = float(raw)
                except ValueError:
                    raise ValueError(
                        f"{_ENV_PREFIX}{name.upper()} is not a number: {raw!r}") from None

        for k, v in overrides.items():
            if v is None:
                continue
            if k == "allowed_hosts":
                v = tuple(values.get("allowed_hosts", ())) + tuple(v)
            values[k] = v

        return cls(**values)
