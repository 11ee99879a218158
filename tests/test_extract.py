import pytest

pytest.importorskip("tree_sitter_language_pack")

from codechunk.chunking import extract_entities  # noqa: E402
from codechunk.chunking.imports import extract_import_symbols  # noqa: E402
from codechunk.models import EntityType, Language  # noqa: E402
from codechunk.parser import parse  # noqa: E402

PYTHON_SOURCE = '''import os
from pathlib import Path as P, PurePath


class Greeter:
    """Says hello."""

    def hello(self, name: str) -> str:
        """
        Return a greeting.
        """
        return f"hi {name}"


def helper():
    x = 1
    return x
'''


def _entities(source: str, language: Language):
    code = source.encode("utf-8")
    tree = parse(code, language).tree
    return extract_entities(tree.root_node, language, code)


def _imports(source: str, language: Language):
    return [
        (entity.name, entity.source)
        for entity in _entities(source, language)
        if entity.type == EntityType.IMPORT
    ]


def test_python_entities_in_document_order() -> None:
    entities = _entities(PYTHON_SOURCE, Language.PYTHON)
    assert [(entity.type, entity.name) for entity in entities] == [
        (EntityType.IMPORT, "os"),
        (EntityType.IMPORT, "P"),
        (EntityType.IMPORT, "PurePath"),
        (EntityType.CLASS, "Greeter"),
        (EntityType.FUNCTION, "hello"),
        (EntityType.FUNCTION, "helper"),
    ]


def test_python_signatures_and_parents() -> None:
    by_name = {entity.name: entity for entity in _entities(PYTHON_SOURCE, Language.PYTHON)}
    assert by_name["Greeter"].signature == "class Greeter"
    assert by_name["hello"].signature == "def hello(self, name: str) -> str"
    assert by_name["hello"].parent == "Greeter"
    assert by_name["helper"].parent is None
    assert by_name["helper"].line_range.start == 14


def test_python_docstrings() -> None:
    by_name = {entity.name: entity for entity in _entities(PYTHON_SOURCE, Language.PYTHON)}
    assert by_name["Greeter"].docstring == "Says hello."
    assert by_name["hello"].docstring == "Return a greeting."
    assert by_name["helper"].docstring is None


def test_python_import_sources() -> None:
    assert _imports(PYTHON_SOURCE, Language.PYTHON) == [
        ("os", "os"),
        ("P", "pathlib"),
        ("PurePath", "pathlib"),
    ]


def test_typescript_aliased_import() -> None:
    assert _imports("import { a as b } from 'mod';\n", Language.TYPESCRIPT) == [("b", "mod")]


def test_typescript_default_named_and_namespace_imports() -> None:
    source = 'import React, { useState } from "react";\nimport * as path from "path";\n'
    assert _imports(source, Language.TYPESCRIPT) == [
        ("React", "react"),
        ("useState", "react"),
        ("path", "path"),
    ]


def test_typescript_side_effect_import_uses_placeholder() -> None:
    assert _imports('import "./polyfills";\n', Language.TYPESCRIPT) == [("import", "./polyfills")]


def test_typescript_entities_and_doc_comment() -> None:
    source = (
        "/** Greets someone. */\n"
        "function greet(name: string): string {\n"
        "  return `hi ${name}`;\n"
        "}\n\n"
        "interface Shape {\n  area(): number;\n}\n"
    )
    by_name = {entity.name: entity for entity in _entities(source, Language.TYPESCRIPT)}
    assert by_name["greet"].signature == "function greet(name: string): string"
    assert by_name["greet"].docstring == "Greets someone."
    assert by_name["Shape"].type == EntityType.INTERFACE
    assert by_name["Shape"].signature == "interface Shape"


def test_go_imports_functions_and_types() -> None:
    source = (
        "package main\n\n"
        'import (\n\t"fmt"\n\tstr "strings"\n)\n\n'
        "// Point is a location.\n"
        "type Point struct {\n\tX int\n}\n\n"
        "// Run starts everything.\n"
        "func Run() error {\n\treturn nil\n}\n"
    )
    entities = _entities(source, Language.GO)
    assert [(e.name, e.source) for e in entities if e.type == EntityType.IMPORT] == [
        ("fmt", "fmt"),
        ("str", "strings"),
    ]
    by_name = {entity.name: entity for entity in entities}
    assert by_name["Point"].type == EntityType.TYPE
    assert by_name["Point"].docstring == "Point is a location."
    assert by_name["Run"].signature == "func Run() error"
    assert by_name["Run"].docstring == "Run starts everything."


def test_rust_use_trees() -> None:
    source = "use std::collections::{HashMap, HashSet as Set};\nuse std::io;\n"
    assert _imports(source, Language.RUST) == [
        ("HashMap", "std::collections"),
        ("Set", "std::collections"),
        ("io", "std::io"),
    ]


def test_rust_items_and_doc_comments() -> None:
    source = (
        "/// A counter.\n"
        "struct Counter {\n    n: u32,\n}\n\n"
        "impl Counter {\n"
        "    fn bump(&mut self) -> u32 {\n        self.n += 1;\n        self.n\n    }\n"
        "}\n"
    )
    entities = _entities(source, Language.RUST)
    by_name = {(entity.type, entity.name): entity for entity in entities}
    assert by_name[(EntityType.TYPE, "Counter")].docstring == "A counter."
    assert (EntityType.CLASS, "Counter") in by_name
    bump = by_name[(EntityType.FUNCTION, "bump")]
    assert bump.signature == "fn bump(&mut self) -> u32"
    assert bump.parent == "Counter"


def test_java_imports_and_methods() -> None:
    source = (
        "import java.util.List;\n\n"
        "public class Box {\n"
        "    /** Size of the box. */\n"
        "    public int size() {\n        return 0;\n    }\n"
        "}\n"
    )
    entities = _entities(source, Language.JAVA)
    assert [(e.name, e.source) for e in entities if e.type == EntityType.IMPORT] == [
        ("List", "java.util.List")
    ]
    by_name = {entity.name: entity for entity in entities}
    assert by_name["Box"].signature == "public class Box"
    assert by_name["size"].type == EntityType.METHOD
    assert by_name["size"].docstring == "Size of the box."
    assert by_name["size"].parent == "Box"


def test_import_expansion_spans_whole_statement() -> None:
    code = b"from os import path, sep\n"
    tree = parse(code, Language.PYTHON).tree
    statement = tree.root_node.child(0)
    entities = extract_import_symbols(statement, Language.PYTHON, code)
    assert [entity.name for entity in entities] == ["path", "sep"]
    assert all(entity.byte_range.start == 0 for entity in entities)
    assert all(entity.byte_range.end == len(code) - 1 for entity in entities)
    assert all(entity.signature == "from os import path, sep" for entity in entities)
