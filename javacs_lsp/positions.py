"""
positions.py - Tradução entre offsets e posições (linha, caractere)

Propósito:
    O engine reporta posições como offsets absolutos de caractere; o LSP
    exige pares (line, character) 0-based. Este módulo converte nos dois
    sentidos varrendo o stream da esquerda para a direita.

Componentes principais:
    - offset_of: (linha, caractere) → offset
    - position_of: (offset inicial, offset final) → (Position, Position)
    - find_offset / find_range: mesmas operações sobre um SourceFile

Notas de implementação:
    - Leitura caractere a caractere (stream.read(1)), sem acesso aleatório
    - Fim do stream não é erro: devolve a posição alcançada
    - Nunca retorna posição menor que (0, 0)
    - Offsets de definição devem ser traduzidos contra o arquivo ALVO
"""

from __future__ import annotations

import logging
from typing import TextIO

from lsprotocol.types import Position, Range

from javacs_lsp.errors import ShowMessageError

logger = logging.getLogger(__name__)


def offset_of(stream: TextIO, target_line: int, target_character: int) -> int:
    """
    Converte (linha, caractere) em offset absoluto.

    Conta caracteres até atravessar `target_line` quebras de linha e então
    avança `target_character` caracteres na linha alvo.

    Returns:
        Offset alcançado (menor que o pedido se o stream terminar antes)
    """
    offset = 0
    line = 0
    character = 0

    while line < target_line:
        next_char = stream.read(1)
        if not next_char:
            return offset
        offset += 1
        if next_char == "\n":
            line += 1

    while character < target_character:
        next_char = stream.read(1)
        if not next_char:
            return offset
        offset += 1
        character += 1

    return offset


def _advance(stream: TextIO, offset: int, target: int, line: int, character: int):
    while offset < target:
        next_char = stream.read(1)
        if not next_char:
            break
        offset += 1
        character += 1
        if next_char == "\n":
            line += 1
            character = 0
    return offset, line, character


def position_of(
    stream: TextIO, start_offset: int, end_offset: int
) -> tuple[Position, Position]:
    """
    Converte um intervalo de offsets em (Position inicial, Position final).

    Uma única varredura: registra a posição ao atingir `start_offset` e
    continua até `end_offset`. Se `end_offset` < `start_offset`, o fim é
    igual ao início.
    """
    offset, line, character = _advance(stream, 0, max(0, start_offset), 0, 0)
    start = Position(line=line, character=character)

    offset, line, character = _advance(stream, offset, end_offset, line, character)
    end = Position(line=line, character=character)

    return start, end


def find_offset(source_file, line: int, character: int) -> int:
    """offset_of sobre um SourceFile (abre um leitor novo)."""
    try:
        with source_file.open_reader() as reader:
            return offset_of(reader, line, character)
    except (OSError, UnicodeDecodeError) as e:
        raise ShowMessageError(f"Erro ao ler {source_file.path}: {e}") from e


def find_range(source_file, start_offset: int, end_offset: int) -> Range:
    """position_of sobre um SourceFile, devolvendo um Range LSP."""
    try:
        with source_file.open_reader() as reader:
            start, end = position_of(reader, start_offset, end_offset)
    except (OSError, UnicodeDecodeError) as e:
        raise ShowMessageError(f"Erro ao ler {source_file.path}: {e}") from e
    return Range(start=start, end=end)
