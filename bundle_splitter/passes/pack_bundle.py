from __future__ import annotations

import logging

from bundle_splitter.framework import Artifact, register
from bundle_splitter.packer import pack_chunks

logger = logging.getLogger(__name__)


class _PackBundlePass:
    name = "pack_bundle"
    input_type = "module_rows"
    output_type = "module_rows"

    def __call__(self, a: Artifact) -> Artifact:
        if a.kind != "module_rows":
            return a
        if "chunks" in a.payload:
            logger.debug("input already carries a packed stream; not repacking")
            return a.with_metrics(self.name, {"chunks": len(a.payload["chunks"]), "packed": False})
        chunks = list(pack_chunks(a.payload.get("rows", [])))
        return a.evolve(chunks=chunks).with_metrics(
            self.name, {"chunks": len(chunks), "packed": True}
        )


pack_bundle = register(_PackBundlePass())
