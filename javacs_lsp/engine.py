"""
engine.py - Contrato com o engine de análise semântica

Propósito:
    O parser, o type checker e a tabela de símbolos da linguagem-alvo ficam
    fora deste pacote. Este módulo define o que o servidor consome deles e
    como um engine é carregado.

Componentes principais:
    - SourceFile: arquivo legível (path + open_reader)
    - AnalysisEngine: parse, compile, register_post_analysis_hook, open_file
    - EngineDiagnostic: diagnóstico com offsets absolutos
    - DefinitionQuery / SymbolLocation: goto-definition
    - CompletionQuery / Suggestion: autocomplete
    - load_engine_factory: resolve "modulo:fabrica" ou entry point

Notas de implementação:
    - Hooks registrados valem para a PRÓXIMA compilação e são consumidos por ela
    - O callback é chamado uma vez por símbolo/sugestão encontrado
    - DefinitionQuery recebe o cursor no buffer original;
      CompletionQuery recebe o cursor no buffer corrigido (com ';')
    - Engines não são reentrantes: Session.lock serializa compilações
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from importlib import import_module, metadata
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Protocol, TextIO, Union

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "javacs_lsp.engines"
ENGINE_ENV_VAR = "JAVACS_ENGINE"


class SourceFile(Protocol):
    path: Path

    def open_reader(self) -> TextIO: ...


class DiagnosticKind(enum.Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    MANDATORY_WARNING = "MANDATORY_WARNING"
    NOTE = "NOTE"
    OTHER = "OTHER"


@dataclass(frozen=True)
class EngineDiagnostic:
    """Diagnóstico do compilador. start=None significa sem posição."""

    kind: DiagnosticKind
    source_path: Optional[Path]
    start: Optional[int]
    end: Optional[int]
    code: Optional[str]
    message: str


@dataclass(frozen=True)
class DefinitionQuery:
    source: SourceFile
    cursor: int


@dataclass(frozen=True)
class SymbolLocation:
    file: Path
    start: int
    end: int


@dataclass(frozen=True)
class CompletionQuery:
    source: SourceFile
    cursor: int


@dataclass(frozen=True)
class Suggestion:
    label: str
    kind: Optional[str] = None
    detail: Optional[str] = None
    documentation: Optional[str] = None
    insert_text: Optional[str] = None
    sort_text: Optional[str] = None


Query = Union[DefinitionQuery, CompletionQuery]


class AnalysisEngine(Protocol):
    """Instância do engine configurada para uma Configuration."""

    def parse(self, source: SourceFile) -> Any: ...

    def compile(self, tree: Any) -> Iterable[EngineDiagnostic]: ...

    def register_post_analysis_hook(
        self, query: Query, callback: Callable[[Any], None]
    ) -> None: ...

    def open_file(self, path: Path) -> SourceFile: ...


# Configuration → AnalysisEngine
EngineFactory = Callable[[Any], AnalysisEngine]


def _import_path(spec: str) -> EngineFactory:
    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Engine inválido (esperado 'modulo:fabrica'): {spec}")
    module = import_module(module_name)
    factory = module
    for part in attr.split("."):
        factory = getattr(factory, part)
    return factory


def load_engine_factory(spec: Optional[str] = None) -> Optional[EngineFactory]:
    """
    Resolve a fábrica de engines.

    Estratégia:
        1. `spec` explícito ("pacote.modulo:fabrica")
        2. Variável de ambiente JAVACS_ENGINE
        3. Primeiro entry point do grupo javacs_lsp.engines

    Returns:
        Fábrica, ou None se nenhum engine estiver disponível
    """
    spec = spec or os.environ.get(ENGINE_ENV_VAR)
    if spec:
        logger.info(f"Carregando engine: {spec}")
        return _import_path(spec)

    entry_points = sorted(
        metadata.entry_points(group=ENTRY_POINT_GROUP), key=lambda ep: ep.name
    )
    if entry_points:
        ep = entry_points[0]
        logger.info(f"Carregando engine do entry point: {ep.name} ({ep.value})")
        return ep.load()

    logger.warning("Nenhum engine de análise configurado")
    return None
