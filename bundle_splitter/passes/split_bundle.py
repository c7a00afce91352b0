from __future__ import annotations

import logging
from dataclasses import dataclass

from bundle_splitter.classifier import split_chunks
from bundle_splitter.collector import ModuleCollector
from bundle_splitter.framework import Artifact, register

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _SplitBundlePass:
    name: str = "split_bundle"
    input_type: str = "module_rows"
    output_type: str = "output_units"
    expected_modules: int | None = None

    def __call__(self, a: Artifact) -> Artifact:
        if a.kind != "module_rows":
            return a
        payload = a.payload
        modules = payload.get("modules")
        if modules is None:
            modules = ModuleCollector().close()
        units = list(split_chunks(payload.get("chunks", []), modules, self.expected_modules))
        kinds = [u.kind for u in units]
        sizes = {k: sum(len(u.content) for u in units if u.kind == k) for k in set(kinds)}
        logger.info(
            "split %d chunk(s) into %d module unit(s)",
            len(payload.get("chunks", [])),
            kinds.count("module"),
        )
        out = {
            "type": "output_units",
            "source_path": payload.get("source_path"),
            "units": units,
        }
        return Artifact(payload=out, meta=a.meta).with_metrics(
            self.name,
            {
                "module_units": kinds.count("module"),
                "module_bytes": sizes.get("module", 0),
                "prelude_bytes": sizes.get("prelude", 0),
                "postlude_bytes": sizes.get("postlude", 0),
            },
        )


split_bundle = register(_SplitBundlePass())
