from __future__ import annotations

import logging

from bundle_splitter.collector import descriptors_from_rows
from bundle_splitter.framework import Artifact, register

logger = logging.getLogger(__name__)


class _CollectModulesPass:
    name = "collect_modules"
    input_type = "module_rows"
    output_type = "module_rows"

    def __call__(self, a: Artifact) -> Artifact:
        if a.kind != "module_rows":
            return a
        modules = descriptors_from_rows(a.payload.get("rows", []))
        logger.info("collected %d module(s)", len(modules))
        return a.evolve(modules=modules).with_metrics(self.name, {"modules": len(modules)})


collect_modules = register(_CollectModulesPass())
