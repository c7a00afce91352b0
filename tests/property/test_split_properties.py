from hypothesis import given, settings, strategies as st

from bundle_splitter.classifier import split_chunks
from bundle_splitter.units import ModuleDescriptor

chunk = st.binary(max_size=24)


@st.composite
def streams(draw):
    """A chunk stream plus a descriptor list no longer than its module zone."""
    chunks = draw(st.lists(chunk, min_size=2, max_size=12))
    n = draw(st.integers(min_value=0, max_value=len(chunks) - 2))
    return chunks, [ModuleDescriptor(f"m{i}", f"./src/m{i}") for i in range(n)]


@given(streams())
@settings(deadline=None)
def test_partition_matches_positions(case) -> None:
    chunks, descriptors = case
    n = len(descriptors)
    units = list(split_chunks(chunks, descriptors))
    modules, (prelude, postlude) = units[:-2], units[-2:]

    assert [u.name for u in modules] == [f"m{i}.js" for i in range(n)]
    assert [u.label for u in modules] == [d.source_label for d in descriptors]
    if modules:
        assert modules[0].content == b"," + chunks[2]
    assert all(u.content == c for u, c in zip(modules[1:], chunks[3 : 2 + n]))
    assert prelude.content == chunks[0] + chunks[1] + b"0:[]"
    assert postlude.content == b"".join(chunks[2 + n :]) + b";"


@given(streams())
@settings(deadline=None)
def test_first_module_unit_starts_with_separator(case) -> None:
    chunks, descriptors = case
    units = [u for u in split_chunks(chunks, descriptors) if u.kind == "module"]
    assert all(u.content.startswith(b",") for u in units[:1])


@given(streams())
@settings(deadline=None)
def test_classification_is_repeatable(case) -> None:
    chunks, descriptors = case
    assert list(split_chunks(chunks, descriptors)) == list(split_chunks(chunks, descriptors))
