"""
test_config.py - Testes para descoberta de configuração

Cobertura:
- javaconfig.json: source path, classpath, output relativos ao descritor
- Arquivo de classpath com duas entradas
- .classpath do Eclipse
- Descritor mais próximo vence; busca para no workspace root
- Precedência entre descritores no mesmo diretório
- Memo por diretório (idempotência, uma varredura por diretório)
- Erros de leitura → ConfigurationError
"""

from __future__ import annotations

import os

import pytest

from javacs_lsp.config import (
    ConfigResolver,
    Configuration,
    read_class_path_file,
    read_eclipse_classpath,
    read_javaconfig_json,
)
from javacs_lsp.errors import ConfigurationError

ECLIPSE_CLASSPATH = """<?xml version="1.0" encoding="UTF-8"?>
<classpath>
    <classpathentry kind="src" path="java"/>
    <classpathentry kind="lib" path="libs/x.jar"/>
    <classpathentry kind="con" path="org.eclipse.jdt.launching.JRE_CONTAINER"/>
    <classpathentry kind="output" path="classes"/>
</classpath>
"""


class TestReaders:
    def test_javaconfig_json(self, tmp_path, make_javaconfig):
        config_file = make_javaconfig(tmp_path / "m")
        config = read_javaconfig_json(config_file)

        assert config.source_path == frozenset({tmp_path / "m" / "src"})
        assert config.class_path == frozenset(
            {tmp_path / "m" / "lib" / "a.jar", tmp_path / "m" / "lib" / "b.jar"}
        )
        assert config.output_directory == tmp_path / "m" / "out"
        assert config.precedence == 0

    def test_javaconfig_without_class_path_file(self, tmp_path, make_javaconfig):
        config = read_javaconfig_json(make_javaconfig(tmp_path, class_path=None))
        assert config.class_path == frozenset()

    @pytest.mark.skipif(os.pathsep != ":", reason="separador de classpath do POSIX")
    def test_class_path_file_two_entries(self, tmp_path):
        (tmp_path / "deps").mkdir()
        cp = tmp_path / "deps" / "classpath.txt"
        cp.write_text("lib/a.jar:lib/b.jar")

        entries = read_class_path_file(cp)
        assert entries == frozenset(
            {tmp_path / "deps" / "lib" / "a.jar", tmp_path / "deps" / "lib" / "b.jar"}
        )

    def test_class_path_file_ignores_blank_entries(self, tmp_path):
        cp = tmp_path / "classpath.txt"
        cp.write_text(f"a.jar{os.pathsep}{os.pathsep}\n\n")
        assert read_class_path_file(cp) == frozenset({tmp_path / "a.jar"})

    def test_missing_class_path_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            read_class_path_file(tmp_path / "nope.txt")

    def test_malformed_json(self, tmp_path):
        config_file = tmp_path / "javaconfig.json"
        config_file.write_text("{not json")
        with pytest.raises(ConfigurationError) as exc_info:
            read_javaconfig_json(config_file)
        assert str(config_file) in exc_info.value.message

    def test_json_missing_fields(self, tmp_path):
        config_file = tmp_path / "javaconfig.json"
        config_file.write_text('{"sourcePath": "src"}')
        with pytest.raises(ConfigurationError):
            read_javaconfig_json(config_file)

    def test_eclipse_classpath(self, tmp_path):
        config_file = tmp_path / ".classpath"
        config_file.write_text(ECLIPSE_CLASSPATH)
        config = read_eclipse_classpath(config_file)

        assert config.source_path == frozenset({tmp_path / "java"})
        assert config.class_path == frozenset({tmp_path / "libs" / "x.jar"})
        assert config.output_directory == tmp_path / "classes"
        assert config.precedence == 1


class TestConfigResolver:
    def test_nearest_descriptor_wins(self, tmp_path, make_javaconfig):
        """root/moduleA/javaconfig.json governa root/moduleA/src, não root."""
        root = tmp_path / "root"
        make_javaconfig(root, output="root-out")
        make_javaconfig(root / "moduleA")
        (root / "moduleA" / "src").mkdir()

        config = ConfigResolver(root).find_config(root / "moduleA" / "src")
        assert config.output_directory == root / "moduleA" / "out"

    def test_no_configuration_returns_none(self, tmp_path):
        (tmp_path / "ws" / "src").mkdir(parents=True)
        assert ConfigResolver(tmp_path / "ws").find_config(tmp_path / "ws" / "src") is None

    def test_search_stops_at_workspace_root(self, tmp_path, make_javaconfig):
        make_javaconfig(tmp_path, output="outside")
        (tmp_path / "ws" / "src").mkdir(parents=True)
        assert ConfigResolver(tmp_path / "ws").find_config(tmp_path / "ws" / "src") is None

    def test_workspace_root_itself_is_searched(self, tmp_path, make_javaconfig):
        make_javaconfig(tmp_path / "ws")
        (tmp_path / "ws" / "src").mkdir()
        config = ConfigResolver(tmp_path / "ws").find_config(tmp_path / "ws" / "src")
        assert config.output_directory == tmp_path / "ws" / "out"

    def test_lowest_precedence_wins(self, tmp_path, make_javaconfig):
        make_javaconfig(tmp_path)
        (tmp_path / ".classpath").write_text(ECLIPSE_CLASSPATH)

        config = ConfigResolver(tmp_path).find_config(tmp_path)
        assert config.precedence == 0
        assert config.output_directory == tmp_path / "out"

    def test_custom_reader_precedence(self, tmp_path):
        """Leitores extras participam do desempate por precedência."""
        low = Configuration(frozenset(), frozenset(), tmp_path / "low", precedence=0)
        high = Configuration(frozenset(), frozenset(), tmp_path / "high", precedence=3)
        (tmp_path / "a.cfg").write_text("")
        (tmp_path / "b.cfg").write_text("")

        resolver = ConfigResolver(
            tmp_path, readers={"a.cfg": lambda p: high, "b.cfg": lambda p: low}
        )
        assert resolver.find_config(tmp_path) == low

    def test_find_config_for_file(self, workspace):
        resolver = ConfigResolver(workspace)
        config = resolver.find_config_for_file(workspace / "moduleB" / "src" / "Bar.java")
        assert config.output_directory == workspace / "moduleB" / "build"

    def test_idempotent_with_single_scan_per_directory(self, workspace, monkeypatch):
        resolver = ConfigResolver(workspace)
        scans = []
        original = resolver._read_directory

        def counting(directory):
            scans.append(directory)
            return original(directory)

        monkeypatch.setattr(resolver, "_read_directory", counting)

        src = workspace / "moduleA" / "src"
        first = resolver.find_config(src)
        second = resolver.find_config(src)

        assert first == second
        assert first is not None
        assert scans == [src, workspace / "moduleA"]

    def test_visited_directories_are_memoized(self, workspace, monkeypatch):
        resolver = ConfigResolver(workspace)
        deep = workspace / "moduleA" / "src" / "org" / "example"
        deep.mkdir(parents=True)
        resolver.find_config(deep)

        scans = []
        original = resolver._read_directory
        monkeypatch.setattr(
            resolver, "_read_directory", lambda d: scans.append(d) or original(d)
        )
        config = resolver.find_config(workspace / "moduleA" / "src")

        assert config.output_directory == workspace / "moduleA" / "out"
        assert scans == []

    def test_value_equality(self, workspace):
        resolver_a = ConfigResolver(workspace)
        resolver_b = ConfigResolver(workspace)
        a = resolver_a.find_config(workspace / "moduleA" / "src")
        b = resolver_b.find_config(workspace / "moduleA" / "src")
        assert a == b
        assert a is not b
        assert hash(a) == hash(b)

    def test_broken_descriptor_not_memoized(self, tmp_path, make_javaconfig):
        config_file = tmp_path / "javaconfig.json"
        config_file.write_text("{broken")
        resolver = ConfigResolver(tmp_path)

        with pytest.raises(ConfigurationError):
            resolver.find_config(tmp_path)

        make_javaconfig(tmp_path)
        assert resolver.find_config(tmp_path) is not None

    def test_missing_directory_is_configuration_error(self, tmp_path):
        resolver = ConfigResolver(tmp_path)
        with pytest.raises(ConfigurationError):
            resolver.find_config(tmp_path / "does-not-exist")
