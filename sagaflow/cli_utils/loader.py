"""Helpers to locate workflow objects from the command line."""

from __future__ import annotations

import sys
from importlib import import_module
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from types import ModuleType
from typing import Any

from sagaflow.builder import WorkflowBuilder
from sagaflow.workflow import Workflow


def _load_module(module_ref: str) -> ModuleType:
    path = Path(module_ref)
    if path.suffix == ".py":
        if not path.exists():
            raise FileNotFoundError(f"No such file: {module_ref}")
        module_name = path.stem
        spec = spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load module from {module_ref}")
        module = module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
        return module
    return import_module(module_ref)


def load_workflow(target: str) -> Workflow:
    """Return the workflow referenced by ``module:attribute``.

    ``module`` is a dotted import path or a path to a ``.py`` file. The
    attribute may be a :class:`Workflow`, a :class:`WorkflowBuilder` (which
    is built) or a zero-argument callable returning either.
    """

    module_ref, sep, attr = target.rpartition(":")
    if not sep or not module_ref or not attr:
        raise ValueError(f"Expected 'module:attribute', got {target!r}")

    module = _load_module(module_ref)
    try:
        obj: Any = getattr(module, attr)
    except AttributeError:
        raise ValueError(f"{module_ref} has no attribute {attr!r}") from None

    if callable(obj) and not isinstance(obj, (Workflow, WorkflowBuilder)):
        obj = obj()
    if isinstance(obj, WorkflowBuilder):
        obj = obj.build()
    if not isinstance(obj, Workflow):
        raise ValueError(f"{target} is not a workflow (got {type(obj).__name__})")
    return obj
