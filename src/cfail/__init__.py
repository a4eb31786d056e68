"""
cfail: checks that a compiler reports exactly the diagnostics annotated in a
source file with `//~` comments.
"""
from typing import Optional

from .engine import CfailEngine, Outcome, Status
from .matching import format_mismatches, match
from .parsing import parse_annotations, parse_diagnostics
from .utils.config import ConfigManager


def check_file(path: str, config: Optional[ConfigManager] = None) -> Outcome:
    """
    Pipeline: Source -> Annotations + Compiler Messages -> Mismatches
    """
    return CfailEngine(config).check(path)
