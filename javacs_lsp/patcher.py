"""
patcher.py - Recuperação de erro de sintaxe para autocomplete

Propósito:
    Enquanto o usuário digita, a instrução sob o cursor está incompleta
    (ex: "this.") e o parser não produz árvore utilizável. Inserir um ';'
    no cursor fecha a instrução e permite a análise semântica do escopo.

Notas de implementação:
    - Conteúdo antes e depois do cursor é copiado sem alteração
    - Tamanho do buffer corrigido = original + 1
    - Fim do arquivo antes do cursor é CursorError (overlay dessincronizado)
"""

from __future__ import annotations

from javacs_lsp.errors import CursorError, ShowMessageError
from javacs_lsp.overlay import StringSourceFile

TERMINATOR = ";"


def with_terminator_after_cursor(
    source_file, cursor: int, terminator: str = TERMINATOR
) -> StringSourceFile:
    """Copia o arquivo inserindo `terminator` na posição `cursor`."""
    try:
        with source_file.open_reader() as reader:
            before = reader.read(cursor) if cursor > 0 else ""
            if len(before) < cursor:
                raise CursorError(
                    f"Fim do arquivo {source_file.path} antes do cursor {cursor}"
                )
            after = reader.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ShowMessageError(f"Erro ao ler {source_file.path}: {e}") from e

    return StringSourceFile(path=source_file.path, text=before + terminator + after)
