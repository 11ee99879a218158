from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest

from codechunk.models import ByteRange, EntityType, ExtractedEntity, LineRange


@dataclass
class FakeNode:
    """Just enough of a tree-sitter node to drive windowing and naming."""

    type: str
    start_byte: int
    end_byte: int
    children: List["FakeNode"] = field(default_factory=list)
    fields: Dict[str, "FakeNode"] = field(default_factory=dict)

    @property
    def child_count(self) -> int:
        return len(self.children)

    def child(self, index: int) -> Optional["FakeNode"]:
        return self.children[index] if 0 <= index < len(self.children) else None

    def child_by_field_name(self, name: str) -> Optional["FakeNode"]:
        return self.fields.get(name)


def _make_entity(
    name: str,
    start: int,
    end: int,
    entity_type: EntityType = EntityType.FUNCTION,
    signature: Optional[str] = None,
    source: Optional[str] = None,
    lines: tuple[int, int] = (0, 0),
) -> ExtractedEntity:
    return ExtractedEntity(
        type=entity_type,
        name=name,
        signature=signature if signature is not None else name,
        byte_range=ByteRange(start, end),
        line_range=LineRange(*lines),
        source=source,
    )


@pytest.fixture
def fake_node():
    return FakeNode


@pytest.fixture
def make_entity():
    return _make_entity


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep a developer's codechunk.toml or CODECHUNK_* variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CODECHUNK_CONFIG_PATH", raising=False)
