"""
Static per-language configuration.

Each supported language carries one constant :class:`LanguageConfig` record:
which syntax node kinds count as entities, which delimiter opens a body,
which comment prefixes mark documentation and how docstrings are found.
Algorithms look these records up instead of branching on the language.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import PurePath
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from .models import EntityType, Language


class DocstringStyle(StrEnum):
    LEADING_COMMENT = "leading_comment"
    BODY_STRING = "body_string"


@dataclass(frozen=True)
class LanguageConfig:
    language: Language
    grammar: str
    extensions: Tuple[str, ...]
    entity_node_types: FrozenSet[str]
    doc_comment_prefixes: Tuple[str, ...]
    doc_comment_markers: Tuple[str, ...]
    body_delimiter: str
    docstring_style: DocstringStyle = DocstringStyle.LEADING_COMMENT

    @property
    def indentation_based(self) -> bool:
        return self.body_delimiter == ":"


NODE_TYPE_TO_ENTITY_TYPE: Mapping[str, EntityType] = {
    # functions
    "function_declaration": EntityType.FUNCTION,
    "function_definition": EntityType.FUNCTION,
    "function_item": EntityType.FUNCTION,
    "generator_function_declaration": EntityType.FUNCTION,
    "arrow_function": EntityType.FUNCTION,
    # methods
    "method_definition": EntityType.METHOD,
    "method_declaration": EntityType.METHOD,
    "constructor_declaration": EntityType.METHOD,
    # classes
    "class_declaration": EntityType.CLASS,
    "class_definition": EntityType.CLASS,
    "abstract_class_declaration": EntityType.CLASS,
    "impl_item": EntityType.CLASS,
    # interfaces
    "interface_declaration": EntityType.INTERFACE,
    "trait_item": EntityType.INTERFACE,
    # types
    "type_alias_declaration": EntityType.TYPE,
    "type_item": EntityType.TYPE,
    "type_declaration": EntityType.TYPE,
    "struct_item": EntityType.TYPE,
    # enums
    "enum_declaration": EntityType.ENUM,
    "enum_item": EntityType.ENUM,
    # imports
    "import_statement": EntityType.IMPORT,
    "import_declaration": EntityType.IMPORT,
    "import_from_statement": EntityType.IMPORT,
    "use_declaration": EntityType.IMPORT,
    # exports
    "export_statement": EntityType.EXPORT,
}

_BLOCK_DOC_PREFIXES = ("/**", "///")

LANGUAGE_CONFIGS: Dict[Language, LanguageConfig] = {
    Language.TYPESCRIPT: LanguageConfig(
        language=Language.TYPESCRIPT,
        grammar="tsx",
        extensions=(".ts", ".tsx", ".mts", ".cts"),
        entity_node_types=frozenset(
            {
                "function_declaration",
                "method_definition",
                "class_declaration",
                "abstract_class_declaration",
                "interface_declaration",
                "type_alias_declaration",
                "enum_declaration",
                "import_statement",
                "export_statement",
            }
        ),
        doc_comment_prefixes=_BLOCK_DOC_PREFIXES,
        doc_comment_markers=("/**", "///"),
        body_delimiter="{",
    ),
    Language.JAVASCRIPT: LanguageConfig(
        language=Language.JAVASCRIPT,
        grammar="javascript",
        extensions=(".js", ".jsx", ".mjs", ".cjs"),
        entity_node_types=frozenset(
            {
                "function_declaration",
                "generator_function_declaration",
                "method_definition",
                "class_declaration",
                "import_statement",
                "export_statement",
            }
        ),
        doc_comment_prefixes=_BLOCK_DOC_PREFIXES,
        doc_comment_markers=("/**", "///"),
        body_delimiter="{",
    ),
    Language.PYTHON: LanguageConfig(
        language=Language.PYTHON,
        grammar="python",
        extensions=(".py", ".pyi"),
        entity_node_types=frozenset(
            {
                "function_definition",
                "class_definition",
                "import_statement",
                "import_from_statement",
            }
        ),
        doc_comment_prefixes=('"""', "'''"),
        doc_comment_markers=(),
        body_delimiter=":",
        docstring_style=DocstringStyle.BODY_STRING,
    ),
    Language.RUST: LanguageConfig(
        language=Language.RUST,
        grammar="rust",
        extensions=(".rs",),
        entity_node_types=frozenset(
            {
                "function_item",
                "impl_item",
                "struct_item",
                "enum_item",
                "trait_item",
                "type_item",
                "use_declaration",
            }
        ),
        doc_comment_prefixes=("///", "//!", "/**", "/*!"),
        doc_comment_markers=("///", "//!", "/**", "/*!"),
        body_delimiter="{",
    ),
    Language.GO: LanguageConfig(
        language=Language.GO,
        grammar="go",
        extensions=(".go",),
        entity_node_types=frozenset(
            {
                "function_declaration",
                "method_declaration",
                "type_declaration",
                "import_declaration",
            }
        ),
        doc_comment_prefixes=("//", "/*"),
        doc_comment_markers=("//", "/*"),
        body_delimiter="{",
    ),
    Language.JAVA: LanguageConfig(
        language=Language.JAVA,
        grammar="java",
        extensions=(".java",),
        entity_node_types=frozenset(
            {
                "method_declaration",
                "constructor_declaration",
                "class_declaration",
                "interface_declaration",
                "enum_declaration",
                "import_declaration",
            }
        ),
        doc_comment_prefixes=_BLOCK_DOC_PREFIXES,
        doc_comment_markers=("/**", "///"),
        body_delimiter="{",
    ),
}

LANGUAGE_EXTENSIONS: Dict[str, Language] = {
    extension: config.language
    for config in LANGUAGE_CONFIGS.values()
    for extension in config.extensions
}


def detect_language(path: str) -> Optional[Language]:
    """Return the language for ``path`` based on its extension, or None."""
    return LANGUAGE_EXTENSIONS.get(PurePath(path).suffix.lower())


def coerce_language(value: "str | Language | None") -> Optional[Language]:
    """Map a language tag onto :class:`Language`; unknown tags yield None."""
    if value is None or isinstance(value, Language):
        return value
    try:
        return Language(value.strip().lower())
    except ValueError:
        return None


def is_language_supported(value: "str | Language | None") -> bool:
    return coerce_language(value) in LANGUAGE_CONFIGS


def get_language_config(language: Language) -> LanguageConfig:
    return LANGUAGE_CONFIGS[language]


def supported_languages() -> List[Language]:
    return list(LANGUAGE_CONFIGS)


def infer_entity_type(node_type: str) -> Optional[EntityType]:
    """Guess an entity kind from a node kind's name when the table has no entry."""
    lowered = node_type.lower()
    if "function" in lowered or "arrow" in lowered:
        return EntityType.FUNCTION
    if "method" in lowered:
        return EntityType.METHOD
    if "class" in lowered:
        return EntityType.CLASS
    if "interface" in lowered or "trait" in lowered:
        return EntityType.INTERFACE
    if "type" in lowered or "struct" in lowered:
        return EntityType.TYPE
    if "enum" in lowered:
        return EntityType.ENUM
    if "import" in lowered or "use" in lowered:
        return EntityType.IMPORT
    if "export" in lowered:
        return EntityType.EXPORT
    return None


def resolve_entity_type(node_type: str, config: LanguageConfig) -> Optional[EntityType]:
    """Entity kind for ``node_type`` in ``config``'s language, or None when it is not an entity."""
    if node_type not in config.entity_node_types:
        return None
    entity_type = NODE_TYPE_TO_ENTITY_TYPE.get(node_type)
    if entity_type is None:
        entity_type = infer_entity_type(node_type)
    return entity_type
