"""
lint.py - Diagnósticos de compilação para um arquivo

Propósito:
    Compila o arquivo (overlay ou disco) na sessão que o governa e converte
    os diagnósticos do engine em Diagnostic LSP.

Notas de implementação:
    - Descarta diagnósticos sem posição
    - Descarta diagnósticos de OUTROS arquivos (dependências carregadas
      transitivamente pela compilação)
    - Ranges calculados varrendo o próprio conteúdo analisado
    - Lista vazia não é publicada (a menos que diagnostics.publishEmpty)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from lsprotocol.types import Diagnostic

from javacs_lsp.context import ServerContext, path_from_uri
from javacs_lsp.converters import build_diagnostic
from javacs_lsp.positions import find_range

logger = logging.getLogger(__name__)


def lint(context: ServerContext, path: Path) -> List[Diagnostic]:
    """
    Compila `path` e retorna seus diagnósticos.

    Raises:
        ShowMessageError: configuração ausente/ilegível ou engine indisponível
    """
    logger.info(f"Lint {path}")

    session = context.session_for(path)
    source_file = context.find_file(session, path)

    with session.lock:
        tree = session.engine.parse(source_file)
        errors = list(session.engine.compile(tree))

    diagnostics: List[Diagnostic] = []
    for error in errors:
        if error.start is None or error.start < 0:
            continue
        if error.source_path is None or Path(error.source_path) != path:
            continue
        end = error.end if error.end is not None and error.end >= error.start else error.start
        range_ = find_range(source_file, error.start, end)
        diagnostics.append(build_diagnostic(error, range_))

    logger.debug(
        f"Lint {path}: {len(diagnostics)} de {len(errors)} diagnósticos do engine"
    )
    return diagnostics


def publish_lint(ls, context: ServerContext, uri: str) -> None:
    """
    Executa lint e publica os diagnósticos via ls.publish_diagnostics.

    Não publica nada para lista vazia, exceto com diagnostics.publishEmpty.
    """
    path = path_from_uri(uri)
    if path is None:
        return

    diagnostics = lint(context, path)
    if diagnostics or context.settings.publish_empty_diagnostics:
        ls.publish_diagnostics(uri, diagnostics)
