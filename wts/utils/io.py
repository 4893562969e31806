from __future__ import annotations
from pathlib import Path
import yaml

DEFAULT_CONFIG = "configs/config.yaml"


def load_config(path: str | Path = DEFAULT_CONFIG) -> dict:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r") as f:
        cfg = yaml.safe_load(f)
    if not isinstance(cfg, dict):
        raise ValueError(f"{path} must hold a YAML mapping, got {type(cfg).__name__}")
    return cfg


def resolve_path(base_dir: Path, p: str) -> Path:
    """
    Resolves a path string to a Path.

    Rules:
    - If p is absolute -> return it.
    - If p starts with "artifacts" or "runs" (repo-local) -> resolve relative to repo root.
    - Else -> resolve relative to base_dir (the study data folder).
    """
    pth = Path(p)

    if pth.is_absolute():
        return pth

    # repo root = directory containing configs/ (assumes scripts run from repo root)
    repo_root = Path.cwd()

    if str(pth).startswith("artifacts") or str(pth).startswith("runs"):
        return (repo_root / pth).resolve()

    return (Path(base_dir) / pth).resolve()


def data_path(cfg: dict, key: str) -> Path:
    """Resolve cfg["data"][key] against cfg["data"]["base_dir"]."""
    data = cfg["data"]
    if key not in data:
        raise KeyError(f"config has no data.{key}")
    return resolve_path(Path(data.get("base_dir", ".")), data[key])


def ensure_dir(p: Path) -> Path:
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p
