"""
conftest.py - Fixtures compartilhadas

Propósito:
    Fornece um engine de análise falso (linguagem de brinquedo com sintaxe
    Java) e um workspace em disco com javaconfig.json, para exercitar os
    pipelines de ponta a ponta sem um compilador real.
"""

from __future__ import annotations

import json
import os
import re

import pytest

from javacs_lsp.context import ServerContext
from javacs_lsp.engine import (
    CompletionQuery,
    DefinitionQuery,
    DiagnosticKind,
    EngineDiagnostic,
    Suggestion,
    SymbolLocation,
)
from javacs_lsp.overlay import DiskSourceFile

_DECLARATION = re.compile(r"\b(class|interface|void|int|String|boolean)\s+([A-Za-z_]\w*)")
_UNRESOLVED = "undefinedSymbol"


class FakeTree:
    def __init__(self, path, text):
        self.path = path
        self.text = text


class FakeEngine:
    """
    Engine de brinquedo.

    - Declarações: "class X", "void m", "int f", ...
    - Cada "undefinedSymbol" gera um ERROR no arquivo compilado
    - Toda compilação também gera um ERROR em Dep.java (outro arquivo)
      e um WARNING sem posição
    """

    def __init__(self, config):
        self.config = config
        self.parsed: list[str] = []
        self._hooks = []

    def open_file(self, path):
        return DiskSourceFile(path)

    def parse(self, source):
        with source.open_reader() as reader:
            text = reader.read()
        self.parsed.append(text)
        return FakeTree(source.path, text)

    def register_post_analysis_hook(self, query, callback):
        self._hooks.append((query, callback))

    def compile(self, tree):
        diagnostics = [
            EngineDiagnostic(
                kind=DiagnosticKind.ERROR,
                source_path=tree.path,
                start=m.start(),
                end=m.end(),
                code="compiler.err.cant.resolve",
                message=f"cannot find symbol: {_UNRESOLVED}",
            )
            for m in re.finditer(_UNRESOLVED, tree.text)
        ]
        diagnostics.append(
            EngineDiagnostic(
                kind=DiagnosticKind.ERROR,
                source_path=tree.path.parent / "Dep.java",
                start=0,
                end=3,
                code="compiler.err.dep",
                message="error in dependency",
            )
        )
        diagnostics.append(
            EngineDiagnostic(
                kind=DiagnosticKind.WARNING,
                source_path=tree.path,
                start=None,
                end=None,
                code="compiler.warn.nopos",
                message="warning without position",
            )
        )

        hooks, self._hooks = self._hooks, []
        for query, callback in hooks:
            if isinstance(query, DefinitionQuery):
                self._definitions(tree, query, callback)
            elif isinstance(query, CompletionQuery):
                self._completions(tree, query, callback)
        return diagnostics

    def _definitions(self, tree, query, callback):
        name = _word_at(tree.text, query.cursor)
        if not name:
            return
        for path, text in self._visible_files(tree):
            for m in _DECLARATION.finditer(text):
                if m.group(2) == name:
                    callback(SymbolLocation(file=path, start=m.start(2), end=m.end(2)))

    def _completions(self, tree, query, callback):
        text = tree.text
        assert text[query.cursor] == ";"
        prefix = text[: query.cursor]
        declarations = list(_DECLARATION.finditer(text))

        if prefix.endswith("this."):
            for m in declarations:
                if m.group(1) == "class":
                    continue
                is_method = m.group(1) == "void" or text[m.end(2):].lstrip().startswith("(")
                callback(Suggestion(label=m.group(2), kind="method" if is_method else "field"))
            return

        partial = re.search(r"(\w*)$", prefix).group(1)
        for m in declarations:
            if m.group(2).startswith(partial):
                callback(Suggestion(label=m.group(2), kind="class" if m.group(1) == "class" else None))

    def _visible_files(self, tree):
        yield tree.path, tree.text
        for root in sorted(self.config.source_path):
            for path in sorted(root.rglob("*.java")):
                if path != tree.path:
                    yield path, path.read_text(encoding="utf-8")


def _word_at(text, offset):
    start = offset
    while start > 0 and (text[start - 1].isalnum() or text[start - 1] == "_"):
        start -= 1
    end = offset
    while end < len(text) and (text[end].isalnum() or text[end] == "_"):
        end += 1
    return text[start:end]


@pytest.fixture
def engine_factory():
    """Fábrica que registra cada engine criado em factory.created."""
    created = []

    def factory(config):
        engine = FakeEngine(config)
        created.append(engine)
        return engine

    factory.created = created
    return factory


def write_javaconfig(directory, source_path=("src",), class_path=("lib/a.jar", "lib/b.jar"), output="out"):
    directory.mkdir(parents=True, exist_ok=True)
    config = {"sourcePath": list(source_path), "outputDirectory": output}
    if class_path is not None:
        (directory / "classpath.txt").write_text(os.pathsep.join(class_path) + "\n")
        config["classPathFile"] = "classpath.txt"
    (directory / "javaconfig.json").write_text(json.dumps(config))
    return directory / "javaconfig.json"


@pytest.fixture
def workspace(tmp_path):
    """
    root/
        moduleA/javaconfig.json, classpath.txt
        moduleA/src/
        moduleB/javaconfig.json (outputDirectory diferente)
        moduleB/src/
    """
    root = tmp_path / "root"
    write_javaconfig(root / "moduleA")
    (root / "moduleA" / "src").mkdir()
    write_javaconfig(root / "moduleB", output="build")
    (root / "moduleB" / "src").mkdir()
    return root


@pytest.fixture
def context(workspace, engine_factory):
    return ServerContext(workspace_root=workspace, engine_factory=engine_factory)


@pytest.fixture
def make_javaconfig():
    return write_javaconfig
