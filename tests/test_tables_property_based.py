"""Property-based checks for the definition-table monoid."""

from __future__ import annotations

import pytest

from tweakable.descriptor import EditorDescriptor
from tweakable.site_key import SiteKey
from tweakable.tables import EMPTY_DEFINITIONS, DefinitionTable

try:
    from hypothesis import given
    from hypothesis import strategies as st
except ModuleNotFoundError:  # pragma: no cover - environment-specific fallback
    pytest.skip("hypothesis is required for property-based tests", allow_module_level=True)


SITE_KEYS = st.builds(
    SiteKey,
    st.sampled_from(["a.py", "b.py", "views/c.py"]),
    st.integers(min_value=1, max_value=6),
    st.integers(min_value=0, max_value=3),
)
TABLES = st.lists(SITE_KEYS, max_size=6).map(
    lambda keys: DefinitionTable(
        {key: EditorDescriptor.create(i, f"site{i}", lambda label, cell: None) for i, key in enumerate(keys)}
    )
)


def _identity(table: DefinitionTable) -> list[tuple[SiteKey, int]]:
    return [(key, id(desc)) for key, desc in table.items()]


@given(a=TABLES, b=TABLES, c=TABLES)
def test_merge_is_associative(a: DefinitionTable, b: DefinitionTable, c: DefinitionTable) -> None:
    """Grouping never changes the merged table, even with shared keys."""
    assert _identity(a.merge(b).merge(c)) == _identity(a.merge(b.merge(c)))


@given(table=TABLES)
def test_empty_table_is_two_sided_identity(table: DefinitionTable) -> None:
    assert _identity(EMPTY_DEFINITIONS.merge(table)) == _identity(table)
    assert _identity(table.merge(EMPTY_DEFINITIONS)) == _identity(table)


@given(tables=st.lists(TABLES, max_size=5))
def test_reduce_keeps_the_last_descriptor_per_key(tables: list[DefinitionTable]) -> None:
    expected = {}
    for table in tables:
        for key, desc in table.items():
            expected[key] = desc

    merged = DefinitionTable.reduce(tables)

    assert {key: id(desc) for key, desc in merged.items()} == {key: id(desc) for key, desc in expected.items()}
