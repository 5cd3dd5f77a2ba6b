from colorama import init as colorama_init, Fore, Style
from datetime import datetime
import sys
colorama_init(autoreset=True)


class Log:
    def __init__(self, verbose: int = 1, stream=None):
        self.verbose = verbose
        self.stream = stream  # None: whatever sys.stdout is at print time
        self.HOST = Fore.MAGENTA

    def _print(self, line: str):
        print(line, file=self.stream or sys.stdout)

    def _time(self):
        return datetime.now().strftime("[%H:%M:%S]")

    def _fmt(self, level: str, color: str):
        return f"{self._time()} {color}[{level}]{Style.RESET_ALL}"

    def info(self, msg: str):
        if self.verbose >= 1:
            self._print(f"{self._fmt('INFO', Fore.CYAN)} {msg}")

    def warn(self, msg: str):
        if self.verbose >= 0:
            self._print(f"{self._fmt('WARNING', Fore.YELLOW)} {msg}")

    def ok(self, msg: str):
        self._print(f"{self._fmt('SUCCESS', Fore.GREEN)} {msg}")

    def fail(self, msg: str):
        self._print(f"{self._fmt('FAIL', Fore.RED)} {msg}")

    def debug(self, msg: str):
        if self.verbose >= 2:
            self._print(f"{self._fmt('DEBUG', Fore.MAGENTA)} {msg}")

    def result(self, result):
        """Print the verdict of a DetectionResult, plus evidence when verbose."""
        if result.inconclusive:
            self._print(f"{self._fmt('INCONCLUSIVE', Fore.YELLOW)} "
                        f"{self.HOST}{result.detect_host}{Style.RESET_ALL} "
                        f"unreachable: {result.error}")
        elif result.is_captive:
            self._print(f"{self._fmt('CAPTIVE', Fore.RED)} "
                        f"{self.HOST}{result.detect_host}{Style.RESET_ALL} "
                        f"redirects to {result.destination_uri} "
                        f"{Style.DIM}(HTTP {result.status_code}){Style.RESET_ALL}")
        else:
            self.ok(f"Not captive {Style.DIM}({result.signal.value}, "
                    f"probe {result.probe_status.value}){Style.RESET_ALL}")

        if self.verbose >= 2:
            self.debug(f"  records  = {list(result.records)}")
            self.debug(f"  location = {result.had_location_header}  "
                       f"3xx = {result.had_3xx_status}  "
                       f"success body = {result.had_success_body}")
            if result.requested_further_investigation:
                self.debug("  TXT signal requested further investigation")
