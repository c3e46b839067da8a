"""
completion.py - Autocomplete semântico

Propósito:
    Propõe identificadores e membros visíveis no cursor. O buffer é
    corrigido com ';' no cursor para que o parser se recupere da instrução
    incompleta, e o engine recebe uma CompletionQuery antes da compilação.

Notas de implementação:
    - Cursor calculado sobre o conteúdo NÃO modificado; como o ';' entra
      exatamente no cursor, o mesmo offset vale no buffer corrigido
    - Ordem e duplicatas definidas pelo engine (sem reordenar/filtrar)
    - Esquema não-file → lista vazia
"""

from __future__ import annotations

import logging
from typing import List

from lsprotocol.types import CompletionItem, Position

from javacs_lsp.context import ServerContext, path_from_uri
from javacs_lsp.converters import convert_suggestion
from javacs_lsp.engine import CompletionQuery, Suggestion
from javacs_lsp.patcher import with_terminator_after_cursor
from javacs_lsp.positions import find_offset

logger = logging.getLogger(__name__)


def autocomplete(
    context: ServerContext, uri: str, position: Position
) -> List[CompletionItem]:
    path = path_from_uri(uri)
    if path is None:
        return []

    session = context.session_for(path)
    source_file = context.find_file(session, path)
    cursor = find_offset(source_file, position.line, position.character)
    patched = with_terminator_after_cursor(source_file, cursor)

    suggestions: List[Suggestion] = []
    with session.lock:
        tree = session.engine.parse(patched)
        session.engine.register_post_analysis_hook(
            CompletionQuery(source=patched, cursor=cursor), suggestions.append
        )
        for _ in session.engine.compile(tree):
            pass

    logger.debug(f"Completion {path}@{cursor}: {len(suggestions)} sugestões")
    return [convert_suggestion(s) for s in suggestions]
