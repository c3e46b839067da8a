"""
javacs_lsp - Language Server Protocol para Java

Propósito:
    Servidor LSP que fornece diagnósticos, go-to-definition e autocomplete
    para arquivos Java, delegando a análise semântica a um engine externo.

Componentes principais:
    - server: Servidor principal usando pygls
    - context: Estado do servidor (overlays, configurações, sessões)
    - config: Descoberta de javaconfig.json / .classpath
    - cache: Uma sessão de análise por configuração
    - positions: Conversão offset ⇄ (linha, caractere)
    - lint, definition, completion: Pipelines de consulta

Dependências críticas:
    - pygls: Framework LSP
    - lsprotocol: Tipos do protocolo

Exemplo de uso:
    python -m javacs_lsp
"""
from importlib import metadata

try:
    __version__ = metadata.version("javacs-lsp")
except metadata.PackageNotFoundError:
    # Checkout sem instalação; `pip install -e .` registra a versão real
    __version__ = "0.0.0.dev0"

__all__ = ["server", "context", "config", "cache", "positions"]
