"""
Runs rustc on a file that is expected to fail to compile and hands back its
stderr for the diagnostic parser.
"""
import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..errors import CompilerError, SuccessfulCompilation
from ..records import Messages
from ..parsing.diagnostics import parse_diagnostics
from ..utils.span import LineMap

logger = logging.getLogger(__name__)


@dataclass
class CompilerOutput:
    """stderr of a failed compilation, and the path the compiler was given."""
    source: str
    stderr: str

    def parse(self) -> LineMap[Messages]:
        return parse_diagnostics(self.stderr, self.source)


class RustCompilerDriver:
    """Handles rustc invocation."""

    def __init__(self, compiler: str = "rustc"):
        self.compiler = compiler
        self.compiler_path: Optional[str] = shutil.which(compiler)

    def build_command(self, source: Path, library_path: str) -> List[str]:
        cwd = Path.cwd()
        command = [self.compiler_path or self.compiler]
        for entry in library_path.split(":"):
            command.extend(["-L", str(cwd / entry)])
        command.append(str(source))
        return command

    def compile(self, source_file: str, library_path: str = "") -> CompilerOutput:
        """
        Compile `source_file` in a private scratch directory so concurrent
        runs never see each other's artifacts.
        Raises SuccessfulCompilation if rustc exits with status 0.
        """
        if not self.compiler_path:
            raise CompilerError(f"compiler '{self.compiler}' not found")

        cwd = Path.cwd()
        source = cwd / source_file
        command = self.build_command(source, library_path)
        logger.debug("running %s", " ".join(command))

        with tempfile.TemporaryDirectory(prefix="cfail", dir=cwd) as scratch:
            try:
                result = subprocess.run(
                    command, cwd=scratch, capture_output=True, check=False
                )
            except OSError as e:
                raise CompilerError(f"couldn't run {self.compiler}: {e}") from e

        if result.returncode == 0:
            raise SuccessfulCompilation()

        return CompilerOutput(
            source=os.fspath(source),
            stderr=result.stderr.decode("utf-8", errors="replace"),
        )
