"""
errors.py - Erros exibidos ao usuário como mensagens do editor

Propósito:
    Família única de exceções que abortam uma requisição e carregam a
    mensagem e a severidade que o editor deve mostrar.

Componentes principais:
    - ShowMessageError: Base (mensagem + MessageType)
    - ConfigurationError: javaconfig.json / classpath ilegível
    - MissingConfigurationError: nenhum descritor até o workspace root
    - CursorError: cursor inconsistente com o conteúdo do documento
    - SessionError: engine não pôde ser construído

Notas de implementação:
    - Apenas server._report_errors converte esses erros em window/showMessage
    - Diagnósticos do compilador NÃO são erros; são a saída do lint
"""

from __future__ import annotations

from lsprotocol.types import MessageType


class ShowMessageError(Exception):
    """Erro que aborta a requisição e vira uma mensagem para o usuário."""

    severity: MessageType = MessageType.Error

    def __init__(self, message: str, severity: MessageType | None = None):
        super().__init__(message)
        self.message = message
        if severity is not None:
            self.severity = severity


class ConfigurationError(ShowMessageError):
    """Descritor de configuração ou arquivo de classpath ilegível."""


class MissingConfigurationError(ShowMessageError):
    """Nenhum descritor encontrado entre o arquivo e o workspace root."""

    severity = MessageType.Warning


class CursorError(ShowMessageError):
    """Cursor além do fim do documento (overlay dessincronizado)."""


class SessionError(ShowMessageError):
    """Falha ao construir a sessão de análise."""
