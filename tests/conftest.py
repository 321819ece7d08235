import os
import sys
from pathlib import Path
from trace import PRAGMA_NOCOVER, Trace, _find_executable_linenos

import pytest


COVERAGE_THRESHOLD = float(os.getenv("CODING_WITH_YOU_COVERAGE_MIN", "80"))
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_ROOT = PROJECT_ROOT / "src"
TESTS_ROOT = PROJECT_ROOT / "tests"


def _executable_lines(file_path: Path) -> set[int]:
    executable = set(_find_executable_linenos(str(file_path)))
    if not executable:
        return set()

    try:
        source_lines = file_path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return executable

    return {
        lineno
        for lineno in executable
        if lineno <= len(source_lines) and PRAGMA_NOCOVER not in source_lines[lineno - 1]
    }


def _coverage_by_file(counts: dict) -> dict[Path, tuple[int, int]]:
    """Map each source file to (executed, executable) line counts."""

    executed_by_file: dict[Path, set[int]] = {}
    for (filename, lineno), hits in counts.items():
        if hits > 0:
            executed_by_file.setdefault(Path(filename).resolve(), set()).add(lineno)

    coverage: dict[Path, tuple[int, int]] = {}
    for file_path in SRC_ROOT.rglob("*.py"):
        executable = _executable_lines(file_path)
        if not executable:
            continue
        executed = executed_by_file.get(file_path.resolve(), set()) & executable
        coverage[file_path] = (len(executed), len(executable))
    return coverage


def _overall_percent(coverage: dict[Path, tuple[int, int]]) -> float:
    executed = sum(hit for hit, _ in coverage.values())
    executable = sum(total for _, total in coverage.values())
    return (executed / executable) * 100 if executable else 100.0


def _is_full_run(config: pytest.Config) -> bool:
    """Only gate coverage when the whole suite runs without selection filters."""

    if config.getoption("keyword") or config.getoption("markexpr"):
        return False
    targets = [Path(arg.split("::")[0]).resolve() for arg in config.args] or [TESTS_ROOT]
    return all(target in (TESTS_ROOT, PROJECT_ROOT) for target in targets)


def pytest_sessionstart(session: pytest.Session) -> None:
    # trace caches ignore decisions by bare module name, so ignoring sys.prefix would
    # also hide src modules that share a name with a library module (e.g. main.py).
    tracer = Trace(count=True, trace=False)
    session.config._coding_with_you_tracer = tracer
    sys.settrace(tracer.globaltrace)


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    tracer = getattr(session.config, "_coding_with_you_tracer", None)
    sys.settrace(None)

    if tracer is None:
        return

    coverage = _coverage_by_file(tracer.results().counts)
    percent = _overall_percent(coverage)
    session.config._coding_with_you_coverage = percent
    session.config._coding_with_you_file_coverage = coverage

    if percent < COVERAGE_THRESHOLD and exitstatus == 0 and _is_full_run(session.config):
        session.exitstatus = pytest.ExitCode.TESTS_FAILED


def pytest_terminal_summary(terminalreporter, exitstatus: int, config: pytest.Config) -> None:
    percent = getattr(config, "_coding_with_you_coverage", None)
    coverage = getattr(config, "_coding_with_you_file_coverage", {})

    if percent is None:
        return

    terminalreporter.section("coverage summary")
    terminalreporter.write_line(f"Total coverage across src/: {percent:.2f}%")
    if _is_full_run(config):
        terminalreporter.write_line(f"Required threshold: {COVERAGE_THRESHOLD:.0f}%")
        if percent < COVERAGE_THRESHOLD:
            terminalreporter.write_line("Coverage below required threshold")
    else:
        terminalreporter.write_line("Partial run: coverage threshold not enforced")

    for file_path in sorted(coverage):
        hit, total = coverage[file_path]
        terminalreporter.write_line(f"{file_path.relative_to(PROJECT_ROOT)}: {hit}/{total} lines")
