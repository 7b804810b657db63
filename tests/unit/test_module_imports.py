"""Every module of the package must import on the oldest supported interpreter."""

import importlib
import pkgutil
import typing

import pytest

import customs_ops

MODULES = sorted(
    info.name
    for info in pkgutil.walk_packages(customs_ops.__path__, prefix="customs_ops.")
)


def test_walk_finds_the_repositories():
    assert "customs_ops.application.interfaces.failure_repo" in MODULES
    assert "customs_ops.infrastructure.db.repositories.package_repo_sql" in MODULES


@pytest.mark.parametrize("module_name", MODULES)
def test_module_imports(module_name):
    importlib.import_module(module_name)


def test_annotations_after_list_method_resolve_to_builtin():
    from customs_ops.application.interfaces.failure_repo import FailureRepo
    from customs_ops.domain.entities.failure_record import FailureRecord

    hints = typing.get_type_hints(FailureRepo.list_retryable)

    assert hints["return"] == list[FailureRecord]
