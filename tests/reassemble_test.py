import pytest

from bundle_splitter.adapters.reassemble import module_ids, reassemble
from bundle_splitter.adapters.sinks import FileSink, write_units
from bundle_splitter.classifier import split_chunks
from bundle_splitter.collector import descriptors_from_rows
from bundle_splitter.packer import RUNTIME_PRELUDE, pack_chunks
from bundle_splitter.units import ModuleDescriptor


@pytest.fixture
def units_dir(tmp_path, module_rows):
    descriptors = descriptors_from_rows(module_rows)
    write_units(split_chunks(pack_chunks(module_rows), descriptors), FileSink(tmp_path))
    return tmp_path


def test_module_ids_skip_wrappers(units_dir):
    assert module_ids(units_dir) == ["1", "2", "3"]


def test_full_reassembly_matches_packed_bundle(units_dir, module_rows):
    chunks = [c.decode() for c in pack_chunks(module_rows)]
    expected = "".join(chunks[:2]) + "0:[]," + "".join(chunks[2:]) + ";"
    assert reassemble(units_dir).decode() == expected


def test_subset_in_any_order(units_dir):
    out = reassemble(units_dir, ["3", "1"]).decode()
    assert out.startswith(RUNTIME_PRELUDE + "({0:[],3:[")
    assert ",1:[function" in out
    assert "2:[" not in out
    assert out.endswith("},{},[1]);")


def test_no_modules_is_still_well_formed(units_dir):
    assert reassemble(units_dir, []).decode() == RUNTIME_PRELUDE + "({0:[]},{},[1]);"


def test_missing_unit_raises(units_dir):
    with pytest.raises(FileNotFoundError):
        reassemble(units_dir, ["nope"])


def _split_into(directory, ids, chunks):
    descriptors = [ModuleDescriptor(i) for i in ids]
    write_units(split_chunks(chunks, descriptors), FileSink(directory))
    return directory


def test_nested_module_ids_are_listed(tmp_path):
    units = _split_into(tmp_path, ["lib/a", "b"], [b"p", b"{", b"A", b",B", b"}"])
    assert module_ids(units) == ["b", "lib/a"]
    assert reassemble(units) == b"p{0:[],B,A};"
    assert reassemble(units, ["lib/a", "b"]) == b"p{0:[],A,B};"


def test_absolute_module_id_reads_back(tmp_path):
    out = tmp_path / "out"
    abs_id = str(tmp_path / "src" / "a")
    _split_into(out, [abs_id], [b"p", b"{", b"A", b"}"])
    assert reassemble(out, [abs_id]) == b"p{0:[],A};"
    assert module_ids(out) == [abs_id.lstrip("/")]


def test_module_id_outside_directory_is_rejected(units_dir):
    with pytest.raises(ValueError, match="outside"):
        reassemble(units_dir, ["../1"])
