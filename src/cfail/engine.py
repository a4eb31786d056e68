import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .compiler.rust_driver import RustCompilerDriver
from .errors import AnnotationSyntaxError, Feature, SourceReadError, UnsupportedFeature
from .matching import format_mismatches, is_passing, match
from .parsing.annotations import format_annotation_error, parse_annotations
from .utils.config import ConfigManager

logger = logging.getLogger(__name__)

IGNORE_DIRECTIVE = "// ignore-test"


class Status(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    IGNORED = "ignored"


@dataclass
class Outcome:
    status: Status
    report: str = ""


def read_source(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(path, e) from e


class CfailEngine:
    """
    Runs the whole check for one file: read, parse annotations, compile,
    parse diagnostics, match. Holds no per-file state, so one engine can be
    shared by every worker.
    """

    def __init__(self, config: Optional[ConfigManager] = None,
                 driver: Optional[RustCompilerDriver] = None):
        self.config = config if config else ConfigManager()
        self.driver = driver if driver else RustCompilerDriver(self.config.get("compiler", "rustc"))

    def check(self, path: str) -> Outcome:
        """
        Returns PASSED / FAILED / IGNORED. Every other result is a CfailError
        raised to the caller.
        """
        source = read_source(path)

        if IGNORE_DIRECTIVE in source:
            return Outcome(Status.IGNORED)
        for feature in (Feature.AUX_BUILD, Feature.ERROR_PATTERN):
            if feature.directive in source:
                raise UnsupportedFeature(feature)

        try:
            annotations = parse_annotations(source)
        except AnnotationSyntaxError as e:
            e.rendered = format_annotation_error(path, source, e)
            raise

        output = self.driver.compile(path, self.config.get("library_path", ""))
        messages = output.parse()
        logger.debug("%s: %d annotated lines, %d lines with messages",
                     path, len(annotations), len(messages))

        mismatches = match(annotations, messages)
        if is_passing(mismatches):
            return Outcome(Status.PASSED)
        return Outcome(Status.FAILED, format_mismatches(mismatches))
