"""
config.py - Descoberta da configuração de build que governa um arquivo

Propósito:
    Procura, a partir do diretório de um arquivo-fonte, o descritor de
    configuração mais próximo (javaconfig.json ou .classpath do Eclipse),
    subindo até o workspace root, e memoriza o resultado por diretório.

Componentes principais:
    - Configuration: valor imutável (source path, class path, output, precedência)
    - read_javaconfig_json / read_eclipse_classpath: leitores de descritores
    - read_class_path_file: lista de dependências separadas por os.pathsep
    - ConfigResolver: busca ascendente com memo por diretório

Exemplo de uso:
    resolver = ConfigResolver(Path("/ws"))
    config = resolver.find_config(Path("/ws/moduleA/src"))

Notas de implementação:
    - Listagem de diretório e conteúdo dos descritores lidos de uma vez
    - Vários descritores no mesmo diretório: menor precedência vence;
      empate decidido pela ordem alfabética do nome do arquivo
    - Falha de leitura/parse é ConfigurationError (nunca é memorizada)
    - "Nenhuma configuração" (None) é memorizado normalmente
    - O memo nunca é invalidado durante a vida do servidor
"""

from __future__ import annotations

import json
import logging
import os
import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional

from javacs_lsp.errors import ConfigurationError

logger = logging.getLogger(__name__)

JAVACONFIG_JSON = "javaconfig.json"
ECLIPSE_CLASSPATH = ".classpath"


@dataclass(frozen=True)
class Configuration:
    """Configuração de build resolvida. Igualdade por valor."""

    source_path: frozenset[Path]
    class_path: frozenset[Path]
    output_directory: Path
    precedence: int = 0


DescriptorReader = Callable[[Path], Configuration]


def _error_reading(path: Path, exc: Exception) -> ConfigurationError:
    logger.error(f"Erro ao ler {path}: {exc}")
    return ConfigurationError(f"Erro ao ler {path}")


def read_class_path_file(class_path_file: Path) -> frozenset[Path]:
    """
    Lê arquivo de classpath (ex: "lib/a.jar:lib/b.jar").

    Paths são relativos ao diretório do próprio arquivo de classpath.
    Entradas vazias são ignoradas; linhas múltiplas são concatenadas.
    """
    try:
        text = class_path_file.read_text(encoding="utf-8")
    except OSError as e:
        raise _error_reading(class_path_file, e) from e

    directory = class_path_file.parent
    entries = []
    for line in text.splitlines():
        entries.extend(part.strip() for part in line.split(os.pathsep))
    return frozenset(directory / entry for entry in entries if entry)


def read_javaconfig_json(config_file: Path) -> Configuration:
    """
    Lê javaconfig.json.

    Formato:
        {
            "sourcePath": ["src/main/java"],
            "classPathFile": "classpath.txt",
            "outputDirectory": "target/classes"
        }
    """
    try:
        raw = json.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise _error_reading(config_file, e) from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Erro ao ler {config_file}: esperado objeto JSON")

    source_path = raw.get("sourcePath")
    output_directory = raw.get("outputDirectory")
    if not isinstance(source_path, list) or not all(isinstance(p, str) for p in source_path):
        raise ConfigurationError(
            f"Erro ao ler {config_file}: 'sourcePath' deve ser lista de diretórios"
        )
    if not isinstance(output_directory, str):
        raise ConfigurationError(
            f"Erro ao ler {config_file}: 'outputDirectory' ausente"
        )

    directory = config_file.parent
    class_path: frozenset[Path] = frozenset()
    class_path_file = raw.get("classPathFile")
    if class_path_file:
        class_path = read_class_path_file(directory / class_path_file)

    return Configuration(
        source_path=frozenset(directory / p for p in source_path),
        class_path=class_path,
        output_directory=directory / output_directory,
        precedence=0,
    )


def read_eclipse_classpath(config_file: Path) -> Configuration:
    """
    Lê .classpath do Eclipse.

    classpathentry kind="src" → source path, kind="lib" → class path,
    kind="output" → diretório de saída (padrão: bin).
    """
    try:
        root = ET.fromstring(config_file.read_text(encoding="utf-8"))
    except (OSError, ET.ParseError) as e:
        raise _error_reading(config_file, e) from e

    directory = config_file.parent
    source_path = set()
    class_path = set()
    output_directory = directory / "bin"

    for entry in root.iter("classpathentry"):
        kind = entry.get("kind")
        path = entry.get("path")
        if not path:
            continue
        if kind == "src":
            source_path.add(directory / path)
        elif kind == "lib":
            class_path.add(directory / path)
        elif kind == "output":
            output_directory = directory / path

    return Configuration(
        source_path=frozenset(source_path),
        class_path=frozenset(class_path),
        output_directory=output_directory,
        precedence=1,
    )


# Nome do arquivo → leitor. A precedência vem da Configuration lida.
DEFAULT_READERS: dict[str, DescriptorReader] = {
    JAVACONFIG_JSON: read_javaconfig_json,
    ECLIPSE_CLASSPATH: read_eclipse_classpath,
}


class ConfigResolver:
    """
    Busca ascendente de configuração, memorizada por diretório.

    Attributes:
        workspace_root: Limite superior da busca (inclusivo)
        readers: Mapeamento nome de arquivo → leitor de descritor
    """

    def __init__(
        self,
        workspace_root: Path,
        readers: Optional[Mapping[str, DescriptorReader]] = None,
    ):
        self.workspace_root = workspace_root
        self.readers = dict(DEFAULT_READERS if readers is None else readers)
        self._cache: dict[Path, Optional[Configuration]] = {}
        self._lock = threading.Lock()

    def find_config_for_file(self, path: Path) -> Optional[Configuration]:
        return self.find_config(path.parent)

    def find_config(self, directory: Path) -> Optional[Configuration]:
        """
        Retorna a configuração que governa `directory`, ou None.

        Raises:
            ConfigurationError: descritor ou diretório ilegível
        """
        with self._lock:
            if directory in self._cache:
                return self._cache[directory]

            visited: list[Path] = []
            config = self._search(directory, visited)
            for visited_dir in visited:
                self._cache[visited_dir] = config
            return config

    def cached_directories(self) -> int:
        return len(self._cache)

    def _search(self, directory: Path, visited: list[Path]) -> Optional[Configuration]:
        while True:
            if directory in self._cache:
                return self._cache[directory]

            visited.append(directory)
            found = self._read_directory(directory)
            if found is not None:
                logger.info(f"Configuração encontrada em {directory}")
                return found

            if self._at_boundary(directory):
                logger.debug(f"Nenhuma configuração até {directory}")
                return None

            directory = directory.parent

    def _at_boundary(self, directory: Path) -> bool:
        if directory.parent == directory:
            return True
        # workspace root ou um de seus ancestrais
        return self.workspace_root == directory or directory in self.workspace_root.parents

    def _read_directory(self, directory: Path) -> Optional[Configuration]:
        try:
            names = sorted(entry.name for entry in directory.iterdir())
        except OSError as e:
            raise _error_reading(directory, e) from e

        candidates = [
            self.readers[name](directory / name)
            for name in names
            if name in self.readers and (directory / name).is_file()
        ]
        if not candidates:
            return None
        # sorted() é estável: empate mantém a ordem alfabética dos nomes
        return sorted(candidates, key=lambda c: c.precedence)[0]
