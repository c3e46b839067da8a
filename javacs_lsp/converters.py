"""
converters.py - Conversão entre tipos do engine e tipos LSP

Propósito:
    Converter diagnósticos, sugestões e localizações produzidos pelo engine
    para os tipos do protocolo LSP.

Componentes principais:
    - convert_severity: DiagnosticKind → DiagnosticSeverity
    - build_diagnostic: EngineDiagnostic + Range → Diagnostic
    - convert_suggestion: Suggestion → CompletionItem
    - path_to_uri: Path → file URI

Notas de implementação:
    - Ranges vêm de positions.find_range (offsets → 0-based)
    - Kinds de sugestão desconhecidos ficam sem CompletionItemKind
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from lsprotocol.types import (
    CompletionItem,
    CompletionItemKind,
    Diagnostic,
    DiagnosticSeverity,
    Location,
    Range,
)

from javacs_lsp.engine import DiagnosticKind, EngineDiagnostic, Suggestion

logger = logging.getLogger(__name__)

DIAGNOSTIC_SOURCE = "javac"


def convert_severity(kind: DiagnosticKind) -> DiagnosticSeverity:
    """
    Mapeia DiagnosticKind do engine para DiagnosticSeverity do LSP.

    Mapeamento:
        ERROR                      → Error (1)
        WARNING, MANDATORY_WARNING → Warning (2)
        NOTE                       → Information (3)
        OTHER                      → Hint (4)
    """
    mapping = {
        DiagnosticKind.ERROR: DiagnosticSeverity.Error,
        DiagnosticKind.WARNING: DiagnosticSeverity.Warning,
        DiagnosticKind.MANDATORY_WARNING: DiagnosticSeverity.Warning,
        DiagnosticKind.NOTE: DiagnosticSeverity.Information,
        DiagnosticKind.OTHER: DiagnosticSeverity.Hint,
    }
    return mapping.get(kind, DiagnosticSeverity.Error)


def build_diagnostic(error: EngineDiagnostic, range_: Range) -> Diagnostic:
    return Diagnostic(
        range=range_,
        severity=convert_severity(error.kind),
        code=error.code,
        source=DIAGNOSTIC_SOURCE,
        message=error.message,
    )


_COMPLETION_KINDS = {
    "class": CompletionItemKind.Class,
    "interface": CompletionItemKind.Interface,
    "enum": CompletionItemKind.Enum,
    "enum_constant": CompletionItemKind.EnumMember,
    "method": CompletionItemKind.Method,
    "constructor": CompletionItemKind.Constructor,
    "field": CompletionItemKind.Field,
    "local_variable": CompletionItemKind.Variable,
    "parameter": CompletionItemKind.Variable,
    "package": CompletionItemKind.Module,
    "keyword": CompletionItemKind.Keyword,
    "type_parameter": CompletionItemKind.TypeParameter,
}


def convert_completion_kind(kind: Optional[str]) -> Optional[CompletionItemKind]:
    if not kind:
        return None
    return _COMPLETION_KINDS.get(kind.lower())


def convert_suggestion(suggestion: Suggestion) -> CompletionItem:
    return CompletionItem(
        label=suggestion.label,
        kind=convert_completion_kind(suggestion.kind),
        detail=suggestion.detail,
        documentation=suggestion.documentation,
        insert_text=suggestion.insert_text,
        sort_text=suggestion.sort_text,
    )


def path_to_uri(path: Path) -> str:
    return Path(path).absolute().as_uri()


def build_location(path: Path, range_: Range) -> Location:
    return Location(uri=path_to_uri(path), range=range_)
