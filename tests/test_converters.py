"""
test_converters.py - Testes para conversão de tipos do engine → LSP

Componentes testados:
    - convert_severity: DiagnosticKind → DiagnosticSeverity
    - build_diagnostic: EngineDiagnostic + Range → Diagnostic
    - convert_suggestion: Suggestion → CompletionItem
    - build_location / path_to_uri
"""

from __future__ import annotations

from pathlib import Path

from lsprotocol.types import CompletionItemKind, DiagnosticSeverity, Position, Range

from javacs_lsp.converters import (
    build_diagnostic,
    build_location,
    convert_completion_kind,
    convert_severity,
    convert_suggestion,
    path_to_uri,
)
from javacs_lsp.engine import DiagnosticKind, EngineDiagnostic, Suggestion

RANGE = Range(start=Position(line=1, character=2), end=Position(line=1, character=5))


def test_convert_severity_error():
    assert convert_severity(DiagnosticKind.ERROR) == DiagnosticSeverity.Error


def test_convert_severity_warnings():
    assert convert_severity(DiagnosticKind.WARNING) == DiagnosticSeverity.Warning
    assert convert_severity(DiagnosticKind.MANDATORY_WARNING) == DiagnosticSeverity.Warning


def test_convert_severity_note_and_other():
    assert convert_severity(DiagnosticKind.NOTE) == DiagnosticSeverity.Information
    assert convert_severity(DiagnosticKind.OTHER) == DiagnosticSeverity.Hint


def test_build_diagnostic():
    error = EngineDiagnostic(
        kind=DiagnosticKind.ERROR,
        source_path=Path("/ws/A.java"),
        start=12,
        end=15,
        code="compiler.err.cant.resolve",
        message="cannot find symbol",
    )
    diagnostic = build_diagnostic(error, RANGE)

    assert diagnostic.range == RANGE
    assert diagnostic.severity == DiagnosticSeverity.Error
    assert diagnostic.code == "compiler.err.cant.resolve"
    assert diagnostic.message == "cannot find symbol"
    assert diagnostic.source == "javac"


def test_convert_suggestion_minimal():
    item = convert_suggestion(Suggestion(label="toString"))
    assert item.label == "toString"
    assert item.kind is None
    assert item.detail is None


def test_convert_suggestion_full():
    item = convert_suggestion(
        Suggestion(
            label="size",
            kind="method",
            detail="int size()",
            documentation="Número de elementos",
            insert_text="size()",
            sort_text="0001",
        )
    )
    assert item.kind == CompletionItemKind.Method
    assert item.detail == "int size()"
    assert item.documentation == "Número de elementos"
    assert item.insert_text == "size()"
    assert item.sort_text == "0001"


def test_completion_kind_mapping():
    assert convert_completion_kind("FIELD") == CompletionItemKind.Field
    assert convert_completion_kind("local_variable") == CompletionItemKind.Variable
    assert convert_completion_kind("desconhecido") is None
    assert convert_completion_kind(None) is None


def test_build_location(tmp_path):
    location = build_location(tmp_path / "A.java", RANGE)
    assert location.uri == (tmp_path / "A.java").as_uri()
    assert location.range == RANGE


def test_path_to_uri_roundtrip(tmp_path):
    from javacs_lsp.context import path_from_uri

    path = tmp_path / "com pasta" / "A.java"
    assert path_from_uri(path_to_uri(path)) == path
