from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class SuiteState:
    """
    Running totals for one pass over the input files.
    """
    passed: int = 0
    failed: int = 0
    ignored: int = 0
    errored: int = 0
    # (path, status word) in the order results arrived
    results: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        """Returns True if any file failed or errored."""
        return self.failed > 0 or self.errored > 0

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.ignored + self.errored

    def record(self, path: str, status: str):
        if status == "ok":
            self.passed += 1
        elif status == "FAILED":
            self.failed += 1
        elif status == "ignored":
            self.ignored += 1
        elif status == "ERROR":
            self.errored += 1
        else:
            raise ValueError(f"unknown status {status!r}")
        self.results.append((path, status))

    def summary(self) -> str:
        return (f"{self.passed} passed; {self.failed} failed; "
                f"{self.ignored} ignored; {self.errored} errored")
