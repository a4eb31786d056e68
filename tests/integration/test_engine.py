"""
End-to-end tests of the per-file pipeline with the compiler mocked out.
"""
import pytest
from unittest.mock import MagicMock
from cfail.compiler.rust_driver import CompilerOutput
from cfail.engine import CfailEngine, Outcome, Status
from cfail.errors import (
    AnnotationSyntaxError,
    DiagnosticSyntaxError,
    SourceReadError,
    SuccessfulCompilation,
    UnsupportedFeature,
    Feature,
)
from cfail.utils.config import ConfigManager

SUMMARY = "error: aborting due to previous error\n"


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.delenv("CFAIL_LIBRARY_PATH", raising=False)
    return ConfigManager(tmp_path / "cfg")


def write(tmp_path, text):
    path = tmp_path / "t.rs"
    path.write_text(text)
    return str(path)


def engine_with_stderr(config, path, stderr):
    driver = MagicMock()
    driver.compile.return_value = CompilerOutput(source=path, stderr=stderr)
    return CfailEngine(config, driver)


class TestPassing:
    def test_annotation_contained_in_message(self, tmp_path, config):
        path = write(tmp_path, "fn main() {\n\n\n\n    let x: Foo = 1; //~ ERROR cannot find type\n}\n")
        stderr = f"{path}:5:12: 5:15 error: cannot find type `Foo` in this scope\n{SUMMARY}"
        engine = engine_with_stderr(config, path, stderr)
        assert engine.check(path) == Outcome(Status.PASSED)
        engine.driver.compile.assert_called_once_with(path, "")

    def test_multiline_annotation(self, tmp_path, config):
        path = write(tmp_path, (
            "fn main() {\n"
            "    let _: i8 = 0u8;\n"
            "    //~^ ERROR mismatched types\n"
            "    //~| found u8\n"
            "}\n"
        ))
        stderr = (
            f"{path}:2:17: 2:20 error: mismatched types:\n"
            " expected `i8`,\n"
            "    found `u8`\n"
            "(expected i8,\n"
            "    found u8) [E0308]\n"
            f"{path}:2     let _: i8 = 0u8;\n"
            "                        ^~~\n"
            f"{SUMMARY}"
        )
        assert engine_with_stderr(config, path, stderr).check(path).status is Status.PASSED

    def test_unannotated_note_does_not_fail(self, tmp_path, config):
        path = write(tmp_path, "x; //~ ERROR oops\n")
        stderr = (
            f"{path}:1:1: 1:2 error: oops\n"
            f"{path}:1:1: 1:2 note: some context\n"
            f"{SUMMARY}"
        )
        assert engine_with_stderr(config, path, stderr).check(path).status is Status.PASSED


class TestFailing:
    def test_missing_warning(self, tmp_path, config):
        path = write(tmp_path, "x; //~ ERROR oops\nlet y = 1; //~ WARNING unused variable\n")
        stderr = f"{path}:1:1: 1:2 error: oops\n{SUMMARY}"
        outcome = engine_with_stderr(config, path, stderr).check(path)
        assert outcome.status is Status.FAILED
        assert outcome.report == '2: unmatched warning annotations\n "unused variable"\n'

    def test_unexpected_error(self, tmp_path, config):
        path = write(tmp_path, "x;\n")
        stderr = f"{path}:1:1: 1:2 error: surprise\n{SUMMARY}"
        outcome = engine_with_stderr(config, path, stderr).check(path)
        assert outcome.status is Status.FAILED
        assert "1: unmatched error messages" in outcome.report


class TestShortCircuits:
    def test_ignore_test(self, tmp_path, config):
        path = write(tmp_path, "// ignore-test\nx; //~ bogus\n")
        engine = engine_with_stderr(config, path, "")
        assert engine.check(path) == Outcome(Status.IGNORED)
        engine.driver.compile.assert_not_called()

    @pytest.mark.parametrize("directive,feature", [
        ("// aux-build:lib.rs", Feature.AUX_BUILD),
        ("// error-pattern:oops", Feature.ERROR_PATTERN),
    ])
    def test_unsupported(self, tmp_path, config, directive, feature):
        path = write(tmp_path, directive + "\n")
        with pytest.raises(UnsupportedFeature) as exc:
            engine_with_stderr(config, path, "").check(path)
        assert exc.value.feature is feature
        assert str(exc.value).endswith("are not currently supported")

    def test_missing_file(self, tmp_path, config):
        with pytest.raises(SourceReadError):
            engine_with_stderr(config, "", "").check(str(tmp_path / "nope.rs"))


class TestErrors:
    def test_successful_compilation(self, tmp_path, config):
        path = write(tmp_path, "x; //~ ERROR oops\n")
        driver = MagicMock()
        driver.compile.side_effect = SuccessfulCompilation()
        with pytest.raises(SuccessfulCompilation) as exc:
            CfailEngine(config, driver).check(path)
        assert str(exc.value) == "compilation succeeded"

    def test_annotation_error_is_rendered(self, tmp_path, config):
        path = write(tmp_path, "x; //~ ERRR oops\n")
        engine = engine_with_stderr(config, path, "")
        with pytest.raises(AnnotationSyntaxError) as exc:
            engine.check(path)
        assert str(exc.value).startswith(f"{path}:1:7: 1:11 error: unknown kind `ERRR`")
        engine.driver.compile.assert_not_called()

    def test_bad_stderr(self, tmp_path, config):
        path = write(tmp_path, "x; //~ ERROR oops\n")
        stderr = f"{path}:one\n"
        with pytest.raises(DiagnosticSyntaxError):
            engine_with_stderr(config, path, stderr).check(path)
