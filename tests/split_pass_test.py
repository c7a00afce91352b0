import logging

import pytest

from bundle_splitter.core import configure_pass
from bundle_splitter.framework import Artifact, registry, run_pipeline, run_step
from bundle_splitter.packer import pack_chunks
from bundle_splitter.passes.split_bundle import split_bundle
from bundle_splitter.units import DescriptorSequencingError


def _rows_artifact(rows, **extra):
    return Artifact({"type": "module_rows", "rows": rows, **extra}, meta={"metrics": {}})


def test_pipeline_splits_packed_rows(module_rows):
    out, timings = run_pipeline(
        ["collect_modules", "pack_bundle", "split_bundle"], _rows_artifact(module_rows)
    )
    units = out.payload["units"]
    assert out.kind == "output_units"
    assert [u.name for u in units] == ["1.js", "2.js", "3.js", "prelude.js", "postlude.js"]
    assert [u.label for u in units[:3]] == ["./src/main.js", "./src/a.js", "./src/b.js"]
    assert set(timings) == {"collect_modules", "pack_bundle", "split_bundle"}
    metrics = out.meta["metrics"]
    assert metrics["collect_modules"] == {"modules": 3}
    assert metrics["pack_bundle"] == {"chunks": 6, "packed": True}
    assert metrics["split_bundle"]["module_units"] == 3
    assert metrics["split_bundle"]["postlude_bytes"] == len(b"},{},[1]);")


def test_pack_bundle_keeps_supplied_chunks():
    chunks = [b"preludeA", b"preludeB", b"moduleA", b",moduleB", b"postlude"]
    rows = [{"id": "moduleA", "file": "./src/moduleA"}, {"id": "moduleB", "file": "./src/moduleB"}]
    out, _ = run_pipeline(
        ["collect_modules", "pack_bundle", "split_bundle"], _rows_artifact(rows, chunks=chunks)
    )
    contents = {u.name: u.content for u in out.payload["units"]}
    assert contents == {
        "moduleA.js": b",moduleA",
        "moduleB.js": b",moduleB",
        "prelude.js": b"preludeApreludeB0:[]",
        "postlude.js": b"postlude;",
    }
    assert out.meta["metrics"]["pack_bundle"]["packed"] is False


def test_passes_ignore_foreign_payloads():
    a = Artifact({"type": "something_else"})
    assert all(run_step(name, a) is a for name in registry())


def test_split_without_collected_modules_treats_all_as_postlude(module_rows):
    a = _rows_artifact(module_rows, chunks=list(pack_chunks(module_rows)))
    out = run_step("split_bundle", a)
    assert [u.kind for u in out.payload["units"]] == ["prelude", "postlude"]


def test_expected_modules_option_enforces_sequencing(module_rows):
    collected = run_step("pack_bundle", run_step("collect_modules", _rows_artifact(module_rows)))
    short = collected.evolve(modules=collected.payload["modules"][:2])
    strict = configure_pass(split_bundle, {"expected_modules": 3})
    with pytest.raises(DescriptorSequencingError):
        strict(short)
    assert split_bundle.expected_modules is None


def test_pipeline_accepts_configured_pass_objects(module_rows):
    strict = configure_pass(split_bundle, {"expected_modules": 3})
    out, timings = run_pipeline(
        ["collect_modules", "pack_bundle", strict], _rows_artifact(module_rows)
    )
    assert list(timings) == ["collect_modules", "pack_bundle", "split_bundle"]
    assert out.meta["metrics"]["split_bundle"]["module_units"] == 3


def test_failing_pass_is_logged(module_rows, caplog):
    collected = run_step("pack_bundle", run_step("collect_modules", _rows_artifact(module_rows)))
    short = collected.evolve(modules=collected.payload["modules"][:2])
    strict = configure_pass(split_bundle, {"expected_modules": 3})
    with caplog.at_level(logging.ERROR, logger="bundle_splitter.framework"):
        with pytest.raises(DescriptorSequencingError):
            run_pipeline([strict], short)
    assert any(m.startswith("pass split_bundle failed after") for m in caplog.messages)
