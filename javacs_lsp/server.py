"""
server.py - Servidor LSP principal usando pygls

Propósito:
    Servidor Language Server Protocol que fornece diagnósticos,
    go-to-definition e autocomplete para arquivos Java, delegando a análise
    semântica a um engine externo configurado por javaconfig.json.

Componentes principais:
    - JavaLanguageServer: Servidor pygls com ServerContext próprio
    - _report_errors: ÚNICO ponto que converte ShowMessageError em mensagem
    - Event handlers: initialize, did_open, did_change, did_save, did_close
    - Requests: definition, completion, javacs/debug/status

Dependências críticas:
    - pygls: Framework LSP
    - lsprotocol: Tipos do protocolo
    - Engine de análise: carregado via javacs.engine / JAVACS_ENGINE /
      entry point javacs_lsp.engines

Exemplo de uso:
    python -m javacs_lsp

Notas de implementação:
    - Comunica via STDIO
    - Sincronização FULL: cada didChange substitui o texto inteiro
    - Lint em didOpen/didSave (não em didChange)
    - definition/completion rodam no pool de threads do pygls; caches e
      sessões têm lock próprio
    - Nenhum erro derruba o servidor
"""

from __future__ import annotations

import functools
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from lsprotocol.types import (
    INITIALIZE,
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DEFINITION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_SAVE,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    DefinitionParams,
    DidChangeConfigurationParams,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DidSaveTextDocumentParams,
    InitializeParams,
    MessageType,
    TextDocumentSyncKind,
)
from pygls.server import LanguageServer

from javacs_lsp import __version__
from javacs_lsp.completion import autocomplete
from javacs_lsp.context import ServerContext, path_from_uri
from javacs_lsp.definition import goto_definition
from javacs_lsp.engine import load_engine_factory
from javacs_lsp.errors import ShowMessageError
from javacs_lsp.lint import publish_lint
from javacs_lsp.settings import apply_log_level, parse_settings

# Configuração de logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class JavaLanguageServer(LanguageServer):
    """
    Servidor LSP com estado explícito.

    Attributes:
        context: ServerContext com overlays, configurações e sessões
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.context: ServerContext = ServerContext()


# Instância global do servidor
server = JavaLanguageServer(
    "javacs-lsp",
    f"v{__version__}",
    text_document_sync_kind=TextDocumentSyncKind.Full,
)


def _report_errors(default: Optional[Callable[[], object]] = None):
    """
    Converte falhas de um handler em window/showMessage.

    ShowMessageError usa a própria severidade e mensagem; qualquer outra
    exceção é logada e exibida como erro genérico. O handler então
    retorna `default()` (ou None).
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(ls, params):
            try:
                return func(ls, params)
            except ShowMessageError as e:
                logger.warning(f"{func.__name__}: {e.message}")
                ls.show_message(e.message, msg_type=e.severity)
            except Exception as e:
                logger.error(f"Erro em {func.__name__}: {e}", exc_info=True)
                ls.show_message(
                    f"Erro interno do javacs-lsp: {e}", msg_type=MessageType.Error
                )
            return default() if default else None

        return wrapper

    return decorator


def _workspace_root_from(params: InitializeParams) -> Optional[Path]:
    """rootUri, depois rootPath, depois a primeira workspace folder."""
    if params.root_uri:
        path = path_from_uri(params.root_uri)
        if path:
            return path
    if params.root_path:
        return Path(params.root_path)
    if params.workspace_folders:
        return path_from_uri(params.workspace_folders[0].uri)
    return None


@server.feature(INITIALIZE)
@_report_errors()
def initialize(ls: JavaLanguageServer, params: InitializeParams) -> None:
    """Registra workspace root, configurações e fábrica do engine."""
    workspace_root = _workspace_root_from(params)
    if workspace_root:
        ls.context.set_workspace_root(workspace_root)

    settings = parse_settings(params.initialization_options, ls.context.settings)
    apply_log_level(settings.log_level)
    ls.context.apply_settings(settings)
    _load_engine(ls, settings.engine)


def _load_engine(ls: JavaLanguageServer, spec: Optional[str]) -> None:
    try:
        factory = load_engine_factory(spec)
    except Exception as e:
        logger.error(f"Falha ao carregar engine {spec}: {e}", exc_info=True)
        raise ShowMessageError(f"Falha ao carregar engine de análise: {e}") from e
    if factory is not None:
        ls.context.set_engine_factory(factory)
        ls.context.sessions.clear()


def validate_document(ls: JavaLanguageServer, uri: str) -> None:
    """Lint + publicação, respeitando validation.enabled."""
    if not ls.context.settings.validation_enabled:
        logger.debug(f"Validação desabilitada, pulando: {uri}")
        return
    publish_lint(ls, ls.context, uri)


@server.feature(TEXT_DOCUMENT_DID_OPEN)
@_report_errors()
def did_open(ls: JavaLanguageServer, params: DidOpenTextDocumentParams) -> None:
    """Guarda o texto aberto como overlay e valida."""
    uri = params.text_document.uri
    logger.info(f"Documento aberto: {uri}")

    path = path_from_uri(uri)
    if path is None:
        return
    ls.context.overlays.put(path, params.text_document.text)
    validate_document(ls, uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
@_report_errors()
def did_change(ls: JavaLanguageServer, params: DidChangeTextDocumentParams) -> None:
    """
    Substitui o overlay pelo texto completo recebido.

    Sem edição incremental: cada mudança carrega o documento inteiro e a
    última vence.
    """
    uri = params.text_document.uri
    path = path_from_uri(uri)
    if path is None:
        return
    for change in params.content_changes:
        ls.context.overlays.put(path, change.text)


@server.feature(TEXT_DOCUMENT_DID_SAVE)
@_report_errors()
def did_save(ls: JavaLanguageServer, params: DidSaveTextDocumentParams) -> None:
    """
    Valida o documento salvo.

    O overlay é mantido: o conteúdo em memória continua sendo a referência.
    """
    uri = params.text_document.uri
    logger.info(f"Documento salvo: {uri}")
    validate_document(ls, uri)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
@_report_errors()
def did_close(ls: JavaLanguageServer, params: DidCloseTextDocumentParams) -> None:
    """Descarta o overlay, a menos que overlay.dropOnClose seja false."""
    uri = params.text_document.uri
    logger.info(f"Documento fechado: {uri}")

    path = path_from_uri(uri)
    if path is not None and ls.context.settings.drop_overlay_on_close:
        ls.context.overlays.remove(path)


@server.feature(TEXT_DOCUMENT_DEFINITION)
@server.thread()
@_report_errors(default=list)
def definition(ls: JavaLanguageServer, params: DefinitionParams):
    """Go-to-definition: zero ou mais Locations."""
    return goto_definition(ls.context, params.text_document.uri, params.position)


@server.feature(
    TEXT_DOCUMENT_COMPLETION,
    CompletionOptions(trigger_characters=["."]),
)
@server.thread()
@_report_errors(default=lambda: CompletionList(is_incomplete=False, items=[]))
def completion(ls: JavaLanguageServer, params: CompletionParams):
    """Autocomplete: sugestões do engine na ordem em que foram propostas."""
    items = autocomplete(ls.context, params.text_document.uri, params.position)
    return CompletionList(is_incomplete=False, items=items)


@server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
@_report_errors()
def did_change_configuration(
    ls: JavaLanguageServer, params: DidChangeConfigurationParams
) -> None:
    """
    Atualiza configurações do servidor.

    Nota: settings pode vir como {'javacs': {...}} ou diretamente {...}.
    Trocar o engine descarta as sessões existentes.
    """
    old_engine = ls.context.settings.engine
    settings = parse_settings(params.settings, ls.context.settings)
    apply_log_level(settings.log_level)
    ls.context.apply_settings(settings)
    logger.info(f"Configuração atualizada: {settings}")

    if settings.engine != old_engine:
        _load_engine(ls, settings.engine)


@server.command("javacs/debug/status")
def debug_status(ls: JavaLanguageServer, params) -> dict:
    """Estado interno: workspace, overlays, memo de configuração e sessões."""
    context = ls.context
    return {
        "success": True,
        "status": {
            "workspace_root": str(context.workspace_root),
            "validation_enabled": context.settings.validation_enabled,
            "overlays": sorted(str(p) for p in context.overlays.paths()),
            "cached_directories": context.resolver.cached_directories(),
            "sessions": len(context.sessions),
            "session_cache_capacity": context.sessions.capacity,
        },
    }


def main() -> None:
    """
    Ponto de entrada principal do servidor.

    Inicia servidor LSP em modo STDIO.
    """
    logger.info("Iniciando javacs Language Server...")
    logger.info("Python executable: %s", sys.executable)
    logger.info("javacs-lsp package: %s", __version__)
    server.start_io()


if __name__ == "__main__":
    main()
