"""Tests to verify hexagonal architecture structure."""

from pathlib import Path

import pytest

# Compute project root relative to this test file
PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def src_path() -> Path:
    """Return the src directory path."""
    return PROJECT_ROOT / "src"


def _import_lines(py_file: Path, prefix: str) -> list[str]:
    return [
        line.strip()
        for line in py_file.read_text().split("\n")
        if line.strip().startswith((f"from {prefix}", f"import {prefix}"))
    ]


def test_main_layers_exist(src_path: Path) -> None:
    """Verify all main layer directories exist."""
    layers = ["domain", "application", "infrastructure", "api", "bootstrap", "config"]
    for layer in layers:
        assert (src_path / layer).is_dir(), f"Missing layer: {layer}"
        assert (src_path / layer / "__init__.py").is_file(), (
            f"Missing {layer}/__init__.py"
        )


def test_domain_subdirectories_exist(src_path: Path) -> None:
    """Verify domain layer has required subdirectories."""
    domain = src_path / "domain"
    for subdir in ["errors", "models", "services"]:
        assert (domain / subdir).is_dir(), f"Missing domain subdir: {subdir}"
        assert (domain / subdir / "__init__.py").is_file(), (
            f"Missing {subdir}/__init__.py"
        )


def test_application_has_ports_services_and_dtos(src_path: Path) -> None:
    application = src_path / "application"
    for subdir in ["ports", "services", "dtos"]:
        assert (application / subdir / "__init__.py").is_file(), (
            f"Missing application/{subdir}/__init__.py"
        )


def test_domain_has_no_external_layer_imports(src_path: Path) -> None:
    """Verify domain layer imports NOTHING from other layers.

    Domain is the innermost layer and must remain pure: recurrence,
    time-budget and scoring rules take plain values and return plain values.
    """
    for py_file in (src_path / "domain").rglob("*.py"):
        offending = [
            line
            for line in _import_lines(py_file, "src.")
            if not line.startswith(("from src.domain", "import src.domain"))
        ]
        assert not offending, f"{py_file} imports outside the domain: {offending}"


def test_application_has_no_forbidden_imports(src_path: Path) -> None:
    """Verify application layer doesn't import from infrastructure, api or bootstrap.

    Services receive repositories, clocks and dispatchers through ports;
    only the bootstrap package knows the concrete adapters.
    """
    forbidden = ("src.infrastructure", "src.api", "src.bootstrap")
    for py_file in (src_path / "application").rglob("*.py"):
        for prefix in forbidden:
            lines = _import_lines(py_file, prefix)
            assert not lines, f"{py_file} contains forbidden import: {lines}"


def test_api_has_no_direct_infrastructure_imports(src_path: Path) -> None:
    """Verify api layer reaches adapters through the bootstrap package only."""
    for py_file in (src_path / "api").rglob("*.py"):
        lines = _import_lines(py_file, "src.infrastructure")
        assert not lines, (
            f"{py_file} imports infrastructure directly (use src.bootstrap): {lines}"
        )


def test_config_is_self_contained(src_path: Path) -> None:
    for py_file in (src_path / "config").rglob("*.py"):
        offending = [
            line
            for line in _import_lines(py_file, "src.")
            if not line.startswith(("from src.config", "import src.config"))
        ]
        assert not offending, f"{py_file} imports other layers: {offending}"


def test_task_engine_error_exists() -> None:
    """Verify base exception class is defined."""
    from src.domain.exceptions import TaskEngineError

    assert issubclass(TaskEngineError, Exception)


def test_task_engine_error_importable_from_domain() -> None:
    """Verify TaskEngineError is exported from domain __init__."""
    from src.domain import TaskEngineError

    assert issubclass(TaskEngineError, Exception)


def test_task_engine_error_accepts_message() -> None:
    """Verify TaskEngineError can be instantiated with a message."""
    from src.domain.exceptions import TaskEngineError

    error = TaskEngineError("test message")
    assert str(error) == "test message"

    # Also verify default empty message works
    error_default = TaskEngineError()
    assert str(error_default) == ""


def test_every_engine_error_derives_from_base() -> None:
    from src.domain.errors import task as task_errors
    from src.domain.exceptions import TaskEngineError

    error_classes = [
        value
        for name, value in vars(task_errors).items()
        if isinstance(value, type) and name.endswith("Error")
    ]

    assert error_classes
    for error_class in error_classes:
        assert issubclass(error_class, TaskEngineError), error_class.__name__
