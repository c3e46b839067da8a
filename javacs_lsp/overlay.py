"""
overlay.py - Texto em edição sobrepondo o conteúdo em disco

Propósito:
    Guarda o texto mais recente enviado pelo editor para cada arquivo e
    representa arquivos-fonte (em memória ou em disco) como objetos que o
    engine consegue ler.

Componentes principais:
    - DocumentOverlayStore: path absoluto → texto completo
    - StringSourceFile: arquivo em memória (overlay ou buffer corrigido)
    - DiskSourceFile: arquivo em disco lido sob demanda

Notas de implementação:
    - put() substitui o texto inteiro (sem edição incremental)
    - didSave NÃO limpa o overlay; didClose remove conforme configuração
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StringSourceFile:
    """Arquivo-fonte cujo conteúdo está em memória."""

    path: Path
    text: str

    def open_reader(self) -> io.StringIO:
        return io.StringIO(self.text)

    def read_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class DiskSourceFile:
    """Arquivo-fonte lido do disco a cada abertura."""

    path: Path
    encoding: str = "utf-8"

    def open_reader(self):
        # newline="" preserva \r\n; offsets do engine contam cada caractere
        return open(self.path, "r", encoding=self.encoding, newline="")

    def read_text(self) -> str:
        with self.open_reader() as reader:
            return reader.read()


class DocumentOverlayStore:
    """Overlays de documentos abertos no editor, por path absoluto."""

    def __init__(self):
        self._texts: dict[Path, str] = {}

    def put(self, path: Path, text: str) -> None:
        """Substitui incondicionalmente o texto guardado para o path."""
        self._texts[path] = text
        logger.debug(f"Overlay atualizado: {path} ({len(text)} caracteres)")

    def get(self, path: Path) -> Optional[str]:
        """Retorna o overlay, ou None quando o disco deve ser usado."""
        return self._texts.get(path)

    def remove(self, path: Path) -> bool:
        if self._texts.pop(path, None) is not None:
            logger.debug(f"Overlay removido: {path}")
            return True
        return False

    def paths(self) -> Iterator[Path]:
        return iter(list(self._texts))

    def __contains__(self, path) -> bool:
        return path in self._texts

    def __len__(self) -> int:
        return len(self._texts)
