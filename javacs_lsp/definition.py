"""
definition.py - Go-to-definition via hook pós-análise do engine

Propósito:
    Resolve a definição do símbolo sob o cursor. O engine recebe uma
    DefinitionQuery antes da compilação e, após a análise semântica,
    chama o callback uma vez para cada definição encontrada.

Notas de implementação:
    - Cursor calculado sobre o conteúdo NÃO modificado
    - Offsets de cada SymbolLocation são traduzidos contra o arquivo que
      contém a definição (que pode não ser o arquivo da requisição),
      respeitando overlays abertos
    - Zero ou mais resultados; "nada encontrado" é lista vazia, não erro
    - Mais de um resultado só ocorre se a resolução do engine for ambígua
"""

from __future__ import annotations

import logging
from typing import List

from lsprotocol.types import Location, Position

from javacs_lsp.context import ServerContext, path_from_uri
from javacs_lsp.converters import build_location
from javacs_lsp.engine import DefinitionQuery, SymbolLocation
from javacs_lsp.positions import find_offset, find_range

logger = logging.getLogger(__name__)


def goto_definition(
    context: ServerContext, uri: str, position: Position
) -> List[Location]:
    """
    Args:
        context: Estado do servidor
        uri: Documento da requisição
        position: Posição do cursor (0-based)

    Returns:
        Lista de Location (possivelmente vazia)
    """
    path = path_from_uri(uri)
    if path is None:
        return []

    session = context.session_for(path)
    source_file = context.find_file(session, path)
    cursor = find_offset(source_file, position.line, position.character)

    definitions: List[SymbolLocation] = []
    with session.lock:
        tree = session.engine.parse(source_file)
        # Hook só depois do parse: se o parse falhar, nada fica pendente no engine
        session.engine.register_post_analysis_hook(
            DefinitionQuery(source=source_file, cursor=cursor), definitions.append
        )
        # Diagnósticos são irrelevantes aqui; a compilação só dispara o hook
        for _ in session.engine.compile(tree):
            pass

    locations: List[Location] = []
    for symbol in definitions:
        symbol_file = context.find_file(session, symbol.file)
        range_ = find_range(symbol_file, symbol.start, symbol.end)
        locations.append(build_location(symbol.file, range_))

    logger.debug(f"Definition {path}@{cursor}: {len(locations)} resultados")
    return locations
