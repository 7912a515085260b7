import tomllib
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _pyproject() -> dict:
    with open(PROJECT_ROOT / "pyproject.toml", "rb") as f:
        return tomllib.load(f)


def test_package_discovery_includes_namespace_packages():
    """Test that resume_api, which has no top-level __init__.py, is discovered."""
    find = _pyproject()["tool"]["setuptools"]["packages"]["find"]

    assert find["include"] == ["resume_api*"]
    assert find["namespaces"] is True
    assert not (PROJECT_ROOT / "resume_api" / "__init__.py").exists()
    assert (PROJECT_ROOT / "resume_api" / "app" / "__init__.py").exists()


def test_cli_module_and_script_are_declared():
    """Test that the manage module ships and backs the console script."""
    pyproject = _pyproject()

    assert pyproject["tool"]["setuptools"]["py-modules"] == ["manage"]
    assert pyproject["project"]["scripts"]["resume-api"] == "manage:main"
