"""
context.py - Estado do servidor e preâmbulo comum das consultas

Propósito:
    Reúne todo o estado mutável de longa duração (overlays, memo de
    configuração, cache de sessões, configurações) em um único objeto
    injetado nos pipelines, em vez de variáveis globais.

Componentes principais:
    - ServerContext: estado + path_from_uri, session_for, find_file

Notas de implementação:
    - Apenas o esquema file: é suportado; outros URIs → None (sem erro)
    - O ConfigResolver é recriado quando o workspace root muda
    - Sem engine configurado, session_for levanta SessionError
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import unquote, urlparse

from javacs_lsp.cache import Session, SessionCache
from javacs_lsp.config import ConfigResolver, DescriptorReader
from javacs_lsp.engine import EngineFactory
from javacs_lsp.errors import MissingConfigurationError, SessionError
from javacs_lsp.overlay import DocumentOverlayStore, StringSourceFile
from javacs_lsp.settings import ServerSettings

logger = logging.getLogger(__name__)


def path_from_uri(uri: str) -> Optional[Path]:
    """
    Converte file URI em Path absoluto.

    Retorna None para esquemas diferentes de file: (ex: untitled:).
    """
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return None

    path_str = unquote(parsed.path or "")

    # UNC paths: file://server/share/path -> //server/share/path
    if parsed.netloc:
        path_str = f"//{parsed.netloc}{path_str}"

    # Windows drive: /d:/path -> d:/path
    if len(path_str) >= 3 and path_str[0] == "/" and path_str[2] == ":":
        path_str = path_str[1:]

    return Path(path_str)


def _no_engine(config):
    raise SessionError(
        "Nenhum engine de análise configurado. "
        "Defina 'javacs.engine' ou a variável JAVACS_ENGINE."
    )


class ServerContext:
    """
    Estado de longa duração do servidor.

    Attributes:
        workspace_root: Limite da busca por configuração
        overlays: Texto em edição por path
        resolver: Diretório → Configuration (memorizado)
        sessions: Configuration → Session
        settings: Opções vindas do cliente
    """

    def __init__(
        self,
        workspace_root: Optional[Path] = None,
        engine_factory: Optional[EngineFactory] = None,
        settings: Optional[ServerSettings] = None,
        readers: Optional[Mapping[str, DescriptorReader]] = None,
    ):
        self.settings = settings or ServerSettings()
        self.overlays = DocumentOverlayStore()
        self._readers = readers
        self.workspace_root = workspace_root or Path.cwd()
        self.resolver = ConfigResolver(self.workspace_root, readers)
        self.sessions = SessionCache(
            engine_factory or _no_engine, capacity=self.settings.session_cache_capacity
        )

    def set_workspace_root(self, workspace_root: Path) -> None:
        if workspace_root == self.workspace_root:
            return
        self.workspace_root = workspace_root
        self.resolver = ConfigResolver(workspace_root, self._readers)
        logger.info(f"Workspace root: {workspace_root}")

    def set_engine_factory(self, engine_factory: EngineFactory) -> None:
        self.sessions.engine_factory = engine_factory

    def apply_settings(self, settings: ServerSettings) -> None:
        self.settings = settings
        self.sessions.set_capacity(settings.session_cache_capacity)

    def session_for(self, path: Path) -> Session:
        """
        Resolve a sessão que governa `path`.

        Raises:
            MissingConfigurationError: nenhum descritor até o workspace root
            ConfigurationError: descritor ilegível
            SessionError: engine não pôde ser construído
        """
        config = self.resolver.find_config_for_file(path)
        if config is None:
            raise MissingConfigurationError(
                f"Arquivo de configuração não encontrado para {path}"
            )
        return self.sessions.get(config)

    def find_file(self, session: Session, path: Path):
        """Overlay do editor, se houver; senão o arquivo em disco via engine."""
        text = self.overlays.get(path)
        if text is not None:
            return StringSourceFile(path=path, text=text)
        return session.engine.open_file(path)
