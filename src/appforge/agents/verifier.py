"""
Build Verification
Optional feedback loop: compile a generated project and collect diagnostics.
Never called by the orchestrator.
"""

import re
import subprocess
import time
from pathlib import Path
from typing import Dict, List, Literal, Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict

from appforge.core import get_logger
from .models import Target


logger = get_logger(__name__)

DIAGNOSTIC_PATTERN = re.compile(r"^(.+?):(\d+):(\d+):\s*(error|warning):\s*(.+)$")

DEFAULT_COMMANDS: Dict[Target, tuple[str, ...]] = {
    Target.IOS: ("xcodebuild", "-configuration", "Debug", "-sdk", "iphonesimulator", "build"),
    Target.ANDROID: ("./gradlew", "assembleDebug"),
    Target.REACT_NATIVE: ("npx", "tsc", "--noEmit"),
    Target.WEB: ("npm", "run", "build"),
}


class BuildDiagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    file: str
    line: int
    column: int
    message: str
    severity: Literal["error", "warning"]


class VerificationReport(BaseModel):
    """Outcome of one build."""

    model_config = ConfigDict(frozen=True)

    success: bool
    duration_ms: float
    errors: tuple[BuildDiagnostic, ...] = ()
    warnings: tuple[BuildDiagnostic, ...] = ()
    output: str = ""

    @classmethod
    def failed(cls, message: str, duration_ms: float = 0.0, output: str = "") -> "VerificationReport":
        """Report for a build that produced no diagnostics of its own."""
        error = BuildDiagnostic(file="N/A", line=0, column=0, message=message, severity="error")
        return cls(success=False, duration_ms=duration_ms, errors=(error,), output=output or message)


class BuildVerifier(Protocol):
    """Anything that can compile a source bundle for a target."""

    def verify(self, target: Target, source_dir: Path) -> VerificationReport:
        ...


def parse_diagnostics(output: str) -> tuple[List[BuildDiagnostic], List[BuildDiagnostic]]:
    """Split ``file:line:col: error|warning: message`` lines into (errors, warnings)."""
    errors: List[BuildDiagnostic] = []
    warnings: List[BuildDiagnostic] = []

    for line in output.splitlines():
        match = DIAGNOSTIC_PATTERN.match(line.strip())
        if not match:
            continue
        file, line_no, column, severity, message = match.groups()
        diagnostic = BuildDiagnostic(
            file=file, line=int(line_no), column=int(column), message=message, severity=severity
        )
        (errors if severity == "error" else warnings).append(diagnostic)

    return errors, warnings


class CommandBuildVerifier:
    """Runs a configured build command per target inside the source directory."""

    def __init__(
        self,
        commands: Optional[Dict[Target, Sequence[str]]] = None,
        timeout: float = 300.0,
    ) -> None:
        self.commands = dict(DEFAULT_COMMANDS if commands is None else commands)
        self.timeout = timeout

    def verify(self, target: Target, source_dir: Path) -> VerificationReport:
        command = self.commands.get(target)
        if not command:
            return VerificationReport.failed(f"No build command configured for {target.value}")

        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            return VerificationReport.failed(f"Source directory not found: {source_dir}")

        start_time = time.time()
        try:
            completed = subprocess.run(
                list(command),
                cwd=source_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError:
            return VerificationReport.failed(f"Build tool not installed: {command[0]}")
        except subprocess.TimeoutExpired as e:
            duration_ms = (time.time() - start_time) * 1000
            output = e.stdout if isinstance(e.stdout, str) else ""
            return VerificationReport.failed(
                f"Build timed out after {self.timeout:.0f}s", duration_ms, output
            )

        duration_ms = (time.time() - start_time) * 1000
        output = "\n".join(part for part in (completed.stdout, completed.stderr) if part)
        errors, warnings = parse_diagnostics(output)

        if completed.returncode != 0 and not errors:
            # Failed without parseable diagnostics
            errors = [
                BuildDiagnostic(
                    file="N/A", line=0, column=0, severity="error",
                    message=f"Build exited with status {completed.returncode}",
                )
            ]

        report = VerificationReport(
            success=completed.returncode == 0 and not errors,
            duration_ms=duration_ms,
            errors=tuple(errors),
            warnings=tuple(warnings),
            output=output,
        )
        logger.info(
            "build_verified",
            target=target.value,
            success=report.success,
            errors=len(report.errors),
            warnings=len(report.warnings),
            duration_ms=duration_ms,
        )
        return report
