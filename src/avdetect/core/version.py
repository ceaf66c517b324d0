"""Version information for avdetect."""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Get version from installed package metadata.

    Falls back to reading pyproject.toml when running from a source checkout
    that has not been installed.

    Returns:
        Version string (e.g., "0.1.0") or "unknown" if not found
    """
    try:
        return version("avdetect")
    except PackageNotFoundError:
        try:
            import tomllib
            from pathlib import Path

            project_root = Path(__file__).parent.parent.parent.parent
            pyproject_path = project_root / "pyproject.toml"

            if pyproject_path.exists():
                with open(pyproject_path, "rb") as f:
                    data = tomllib.load(f)
                return data.get("project", {}).get("version", "unknown")
            else:
                return "unknown"

        except Exception:
            return "unknown"


__version__ = get_version()
