"""Tests for the error code registry and exception hierarchy."""
from __future__ import annotations

import io

import pytest

from gotestreport.errors import (
    ERROR_TEMPLATES,
    ConfigError,
    EmptyInputError,
    ErrorCode,
    MalformedEventError,
    RenderError,
    ReportError,
    SourceReadError,
    StructuredError,
    handle_exception,
    make_error,
)


class TestMakeError:
    """Tests for make_error()."""

    def test_every_code_has_a_template(self) -> None:
        assert set(ERROR_TEMPLATES) == set(ErrorCode)

    def test_details_substituted(self) -> None:
        err = make_error(ErrorCode.E302, "run.jsonl: no such file")
        assert err.message == "Cannot read input: run.jsonl: no such file"
        assert err.details is None

    def test_without_details(self) -> None:
        err = make_error(ErrorCode.E302)
        assert err.message == "Cannot read input"

    def test_details_appended_when_template_has_no_slot(self) -> None:
        err = make_error(ErrorCode.E204, "stdin")
        assert err.message == "No test events found in input: stdin"
        assert err.details == "stdin"

    def test_str_format(self) -> None:
        err = StructuredError(ErrorCode.E303, "Cannot write report", "Check permissions")
        assert str(err) == "GTR-E303: Cannot write report\n  Next step: Check permissions"

    def test_print_to_file(self) -> None:
        buf = io.StringIO()
        make_error(ErrorCode.E204).print(file=buf)
        assert buf.getvalue().startswith("GTR-E204: No test events found in input")


class TestExceptions:
    """Tests for ReportError subclasses."""

    @pytest.mark.parametrize(
        "exc, code",
        [
            (ConfigError("bad"), ErrorCode.E001),
            (SourceReadError("x"), ErrorCode.E302),
            (MalformedEventError(3, "oops"), ErrorCode.E202),
            (EmptyInputError(), ErrorCode.E204),
            (RenderError("x"), ErrorCode.E303),
        ],
    )
    def test_codes(self, exc: ReportError, code: ErrorCode) -> None:
        assert isinstance(exc, ReportError)
        assert exc.code == code

    def test_code_override(self) -> None:
        exc = MalformedEventError(3, "missing Action", code=ErrorCode.E203)
        assert exc.code == ErrorCode.E203
        assert exc.line_number == 3
        assert exc.reason == "missing Action"

    def test_message(self) -> None:
        exc = MalformedEventError(9, "Expecting value")
        assert str(exc) == "Test event is not valid JSON: line 9: Expecting value"

    def test_to_structured(self) -> None:
        structured = SourceReadError("in.jsonl").to_structured()
        assert str(structured).startswith("GTR-E302: Cannot read input: in.jsonl")


class TestHandleException:
    """Tests for handle_exception()."""

    def test_prints_structured_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        handle_exception(EmptyInputError())
        err = capsys.readouterr().err
        assert "GTR-E204" in err
        assert "Full Traceback" not in err

    def test_verbose_prints_traceback(self, capsys: pytest.CaptureFixture[str]) -> None:
        try:
            raise RenderError("out/report.html")
        except RenderError as e:
            handle_exception(e, verbose=True)
        err = capsys.readouterr().err
        assert "Full Traceback" in err
        assert "RenderError" in err

    def test_unexpected_exception(self, capsys: pytest.CaptureFixture[str]) -> None:
        handle_exception(ValueError("boom"))
        assert "Unexpected error: boom" in capsys.readouterr().err

    def test_logs_message(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("ERROR", logger="gotestreport"):
            handle_exception(SourceReadError("missing.jsonl"))
        assert "Cannot read input: missing.jsonl" in caplog.text
