from __future__ import annotations

import importlib.metadata
import importlib.util
import sys
import types
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
MODULE_PATH = ROOT / "src" / "qflow" / "__init__.py"


def test_qflow_version_falls_back_when_version_module_is_absent(monkeypatch) -> None:
    spec = importlib.util.spec_from_file_location("qflow_init_under_test", MODULE_PATH)
    assert spec and spec.loader

    module = importlib.util.module_from_spec(spec)
    core_stub = types.ModuleType("question_flow")
    core_stub.__all__ = []  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "question_flow", core_stub)

    def _raise_not_found(_: str) -> str:
        raise importlib.metadata.PackageNotFoundError

    monkeypatch.setattr(importlib.metadata, "version", _raise_not_found)

    spec.loader.exec_module(module)

    assert module.__version__ == "0+unknown"


def test_qflow_reexports_core_api() -> None:
    import qflow

    applier = qflow.use(qflow.define(["q1", "q2"]))

    assert applier.apply("q1") == qflow.Action()
    assert "define" in qflow.__all__
    assert "__version__" in qflow.__all__
