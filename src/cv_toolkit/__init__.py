"""Top-level package for the CV page composition toolkit.

Provides subpackages:
- cv_toolkit.core – document models, validation and serialization
- cv_toolkit.extractor – canvas dump -> DocumentDefinition
- cv_toolkit.layout – pagination engine (compose)
- cv_toolkit.output – page rendering and proofs
- cv_toolkit.planning – layout warning planner and plan diff
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text(encoding="utf-8")
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("cv-toolkit")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
