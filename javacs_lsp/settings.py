"""
settings.py - Configurações do servidor vindas do cliente

Propósito:
    Lê as opções do servidor a partir de initializationOptions (initialize)
    ou de workspace/didChangeConfiguration (seção "javacs").

Opções:
    - validation.enabled (bool, padrão True): lint em didOpen/didSave
    - diagnostics.publishEmpty (bool, padrão False): publica lista vazia
    - overlay.dropOnClose (bool, padrão True): didClose descarta overlay
    - sessionCache.capacity (int ou None): limite LRU de sessões
    - engine (str): fábrica do engine, "pacote.modulo:fabrica"
    - logLevel (str): nível do logger raiz

Notas de implementação:
    - settings pode vir como {'javacs': {...}} ou diretamente {...}
    - Valores malformados mantêm o padrão e geram warning no log
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

SECTION = "javacs"


@dataclass
class ServerSettings:
    validation_enabled: bool = True
    publish_empty_diagnostics: bool = False
    drop_overlay_on_close: bool = True
    session_cache_capacity: Optional[int] = None
    engine: Optional[str] = None
    log_level: Optional[str] = None


def _section(raw: Any, name: str) -> dict:
    value = raw.get(name, {}) if isinstance(raw, dict) else {}
    if not isinstance(value, dict):
        logger.warning(f"Configuração '{name}' ignorada: esperado objeto")
        return {}
    return value


def _bool(raw: dict, key: str, default: bool) -> bool:
    value = raw.get(key, default)
    if isinstance(value, bool):
        return value
    logger.warning(f"Configuração '{key}' ignorada: esperado booleano, recebido {value!r}")
    return default


def parse_settings(raw: Any, base: Optional[ServerSettings] = None) -> ServerSettings:
    """
    Constrói ServerSettings a partir do payload do cliente.

    Args:
        raw: initializationOptions ou params.settings
        base: Valores atuais (chaves ausentes são preservadas)
    """
    settings = ServerSettings(**vars(base)) if base else ServerSettings()
    if not isinstance(raw, dict):
        return settings

    raw = raw.get(SECTION, raw)
    if not isinstance(raw, dict):
        return settings

    settings.validation_enabled = _bool(
        _section(raw, "validation"), "enabled", settings.validation_enabled
    )
    settings.publish_empty_diagnostics = _bool(
        _section(raw, "diagnostics"), "publishEmpty", settings.publish_empty_diagnostics
    )
    settings.drop_overlay_on_close = _bool(
        _section(raw, "overlay"), "dropOnClose", settings.drop_overlay_on_close
    )

    cache_section = _section(raw, "sessionCache")
    if "capacity" in cache_section:
        capacity = cache_section["capacity"]
        if capacity is None or (
            isinstance(capacity, int) and not isinstance(capacity, bool) and capacity > 0
        ):
            settings.session_cache_capacity = capacity
        else:
            logger.warning(f"sessionCache.capacity inválido: {capacity!r}")

    engine = raw.get("engine")
    if isinstance(engine, str) and engine:
        settings.engine = engine

    log_level = raw.get("logLevel")
    if isinstance(log_level, str) and log_level:
        settings.log_level = log_level

    return settings


def apply_log_level(level_name: Optional[str]) -> None:
    """Ajusta o nível do logger raiz a partir de 'debug', 'info', etc."""
    if not level_name:
        return
    level = getattr(logging, level_name.upper(), None)
    if isinstance(level, int):
        logging.getLogger().setLevel(level)
    else:
        logger.warning(f"logLevel desconhecido: {level_name}")
