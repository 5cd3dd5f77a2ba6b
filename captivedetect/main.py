import argparse
import json
import sys

from captivedetect.core.config import DetectionConfig
from captivedetect.core.engine import Detector
from captivedetect.reporters.console import Log

EXIT_OPEN = 0
EXIT_CAPTIVE = 1
EXIT_INCONCLUSIVE = 2
EXIT_CONFIG = 3


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Captive portal detector")
    p.add_argument("--ping-host", help="Host queried for the TXT signal")
    p.add_argument("--detect-host", help="Default host for the HTTP probe")
    p.add_argument("--token", dest="txt_token", help="Expected TXT token")
    p.add_argument("--allow-host", dest="allowed_hosts", action="append",
                   help="Extra probe host allowed from TXT overrides (repeatable, *.suffix ok)")
    p.add_argument("--timeout", type=float, help="HTTP probe timeout in seconds")
    p.add_argument("--dns-timeout", type=float, help="DNS lookup timeout in seconds")
    p.add_argument("--proxy", help="Proxy (e.g. http://127.0.0.1:8080)")
    p.add_argument("--watch", type=float, metavar="SECONDS",
                   help="Repeat detection every SECONDS")
    p.add_argument("--count", type=int, help="Number of ticks in --watch mode")
    p.add_argument("--json", action="store_true", help="Print results as JSON lines")
    p.add_argument("-v", "--verbose", action="count", default=1,
                   help="-v, -vv")
    p.add_argument("-q", "--quiet", action="store_true",
                   help="Only print the verdict")
    return p


def exit_code(result) -> int:
    if result.inconclusive:
        return EXIT_INCONCLUSIVE
    return EXIT_CAPTIVE if result.is_captive else EXIT_OPEN


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    # --json keeps stdout for result records; log lines go to stderr
    log = Log(verbose=0 if args.quiet else args.verbose,
              stream=sys.stderr if args.json else None)

    try:
        config = DetectionConfig.from_env(
            ping_host=args.ping_host,
            detect_host=args.detect_host,
            txt_token=args.txt_token,
            allowed_hosts=args.allowed_hosts,
            timeout=args.timeout,
            dns_timeout=args.dns_timeout,
        )
    except ValueError as e:
        log.fail(f"Invalid configuration: {e}")
        return EXIT_CONFIG

    if args.count is not None and args.watch is None:
        args.watch = 0.0
    if args.watch is not None and args.watch < 0:
        log.fail(f"--watch must be >= 0 (got {args.watch})")
        return EXIT_CONFIG
    if args.count is not None and args.count < 1:
        log.fail(f"--count must be >= 1 (got {args.count})")
        return EXIT_CONFIG

    code = EXIT_OPEN
    with Detector(config, proxy=args.proxy, logger=log) as detector:
        if args.watch is None:
            results = [detector.detect()]
        else:
            results = detector.watch(args.watch, count=args.count)

        try:
            for result in results:
                if args.json:
                    print(json.dumps(result.to_dict()), flush=True)
                else:
                    log.result(result)
                code = exit_code(result)
        except KeyboardInterrupt:
            log.info("Interrupted")
    return code


if __name__ == "__main__":
    sys.exit(main())
