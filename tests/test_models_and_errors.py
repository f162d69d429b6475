from deno2nix.errors import (
    ConfigError,
    Deno2NixError,
    ErrorCode,
    FormatError,
    IntegrityFormatError,
    ManifestIOError,
    MetadataLookupError,
    PolicyError,
    SourceConflictError,
)
from deno2nix.observability import GenerationReport, StructuredLogger


def test_error_codes_are_stable_and_machine_readable() -> None:
    errors = [
        FormatError("bad lock"),
        IntegrityFormatError("bad hash"),
        MetadataLookupError("mirror down"),
        SourceConflictError("hash mismatch"),
        ConfigError("bad config"),
        PolicyError("offline"),
        ManifestIOError("unreadable"),
    ]
    assert [error.code for error in errors] == [
        ErrorCode.FORMAT.value,
        ErrorCode.INTEGRITY.value,
        ErrorCode.METADATA.value,
        ErrorCode.CONFLICT.value,
        ErrorCode.CONFIG.value,
        ErrorCode.POLICY.value,
        ErrorCode.IO.value,
    ]


def test_base_error_takes_explicit_code_and_omits_empty_context() -> None:
    error = Deno2NixError(
        "write failed",
        code=ErrorCode.IO,
        context={"path": "deps.nix", "reason": ""},
    )

    assert error.code == "E_IO"
    assert str(error) == "write failed\n  path: deps.nix"


def test_error_to_dict_includes_hint_and_context() -> None:
    error = FormatError("bad lock", hint="regenerate it", context={"version": "4"})

    payload = error.to_dict()

    assert payload["code"] == "E_FORMAT"
    assert payload["hint"] == "regenerate it"
    assert payload["context"] == {"version": "4"}
    assert "Hint: regenerate it" in str(error)
    assert "  version: 4" in str(error)


def test_structured_logger_filters_by_family_and_level() -> None:
    logger = StructuredLogger()
    logger.log(operation="resolve", family="npm", key="a", message="one", level="warning")
    logger.log(operation="resolve", family="jsr", key="b", message="two")

    assert [record["key"] for record in logger.warnings()] == ["a"]
    assert [record["key"] for record in logger.records_for_family("jsr")] == ["b"]


def test_report_summary_lines_include_skips() -> None:
    report = GenerationReport()
    report.counts("npm").seen = 3
    report.counts("npm").emitted = 2
    report.skip(family="npm", key="broken", message="Could not parse NPM package key: broken")

    assert report.summary_lines() == [
        "  NPM packages: 3 (2 emitted, 1 skipped)",
        "  JSR packages: 0",
        "  Remote URLs:  0",
    ]
