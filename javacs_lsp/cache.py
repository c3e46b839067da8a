"""
cache.py - Cache de sessões de análise por Configuration

Propósito:
    Mantém uma sessão (instância configurada do engine) por Configuration
    distinta, criada sob demanda e reutilizada pelas requisições seguintes.

Componentes principais:
    - Session: engine + Configuration + lock de compilação
    - SessionCache: Configuration → Session, com LRU opcional

Notas de implementação:
    - Construir um engine é caro (tabelas de símbolos); cache é essencial
    - Falha na construção não deixa sessão parcial no cache
    - capacity=None: sessões vivem enquanto o processo viver
    - Não há invalidação quando javaconfig.json muda
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Optional

from javacs_lsp.config import Configuration
from javacs_lsp.engine import AnalysisEngine, EngineFactory
from javacs_lsp.errors import SessionError, ShowMessageError

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Session:
    """Engine vinculado a exatamente uma Configuration."""

    config: Configuration
    engine: AnalysisEngine
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class SessionCache:
    """Sessões por Configuration."""

    def __init__(self, engine_factory: EngineFactory, capacity: Optional[int] = None):
        self.engine_factory = engine_factory
        self.capacity = capacity
        self._sessions: OrderedDict[Configuration, Session] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, config: Configuration) -> Session:
        """
        Retorna a sessão da configuração, criando-a na primeira chamada.

        Raises:
            SessionError: a fábrica de engines falhou
        """
        with self._lock:
            session = self._sessions.get(config)
            if session is not None:
                self._sessions.move_to_end(config)
                return session

            session = Session(config=config, engine=self._new_engine(config))
            self._sessions[config] = session
            logger.info(
                f"Sessão criada: {len(config.source_path)} source roots, "
                f"{len(config.class_path)} dependências, saída {config.output_directory}"
            )
            self._evict()
            return session

    def _new_engine(self, config: Configuration) -> AnalysisEngine:
        try:
            return self.engine_factory(config)
        except ShowMessageError:
            raise
        except Exception as e:
            logger.error(f"Falha ao criar engine: {e}", exc_info=True)
            raise SessionError(f"Falha ao iniciar o compilador: {e}") from e

    def _evict(self) -> None:
        """
        Remove as sessões menos recentes acima de `capacity`.

        Sessões compilando (lock ocupado) não são removidas: uma nova sessão
        para a mesma Configuration rodaria em paralelo com o engine antigo.
        Se todas estiverem ocupadas o cache fica acima do limite até a
        próxima inserção.
        """
        if not self.capacity or self.capacity <= 0:
            return
        excess = len(self._sessions) - self.capacity
        for config, session in list(self._sessions.items()):
            if excess <= 0:
                break
            if session.lock.locked():
                logger.debug(f"Sessão ocupada, mantida no cache: {config.output_directory}")
                continue
            del self._sessions[config]
            excess -= 1
            logger.info(f"Sessão removida do cache (LRU): {config.output_directory}")

    def set_capacity(self, capacity: Optional[int]) -> None:
        with self._lock:
            self.capacity = capacity
            self._evict()

    def has(self, config: Configuration) -> bool:
        return config in self._sessions

    def invalidate(self, config: Configuration) -> None:
        with self._lock:
            if self._sessions.pop(config, None):
                logger.info(f"Sessão invalidada: {config.output_directory}")

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
