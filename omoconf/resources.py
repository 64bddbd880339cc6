from __future__ import annotations

from pathlib import Path


def _package_dir(package_name: str) -> Path:
    """
    Return the on-disk directory for an imported package.

    Note:
    This assumes a filesystem-backed install (wheel or editable). A
    zipimport-style environment may not provide a real directory.
    """
    module = __import__(package_name, fromlist=["__file__"])
    p = getattr(module, "__file__", None)
    if not isinstance(p, str) or not p:
        raise RuntimeError(f"Cannot resolve package directory for: {package_name}")
    return Path(p).resolve().parent


def contracts_dir() -> Path:
    """
    Directory that contains shipped contract artifacts (JSON Schemas).
    """
    return _package_dir("omoconf.contracts")


def contracts_schemas_dir() -> Path:
    return contracts_dir() / "schemas"
