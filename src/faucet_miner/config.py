from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .difficulty import DEFAULT_ASSUMED_HASH_RATE


@dataclass(frozen=True)
class SearchConfig:
    batch_size: int = 1000
    progress_interval_s: float = 0.5
    assumed_hash_rate: float = DEFAULT_ASSUMED_HASH_RATE
    workers: int = 1

    # Multi-candidate window
    window: int = 3
    per_candidate_cap: int = 100_000

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        if self.progress_interval_s < 0:
            raise ValueError("progress_interval_s must be >= 0")
        if not self.assumed_hash_rate > 0:
            raise ValueError("assumed_hash_rate must be > 0")
        if self.workers <= 0:
            raise ValueError("workers must be > 0")
        if self.window <= 0:
            raise ValueError("window must be > 0")
        if self.per_candidate_cap <= 0:
            raise ValueError("per_candidate_cap must be > 0")


DEFAULT_CONFIG = SearchConfig()


def _load_toml(path: str) -> Dict[str, Any]:
    try:
        import toml  # type: ignore
    except ImportError as e:
        raise RuntimeError(
            "Config requires 'toml'. Install it with: pip install toml"
        ) from e
    return toml.load(path)


def cfg_get(cfg: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    cur: Any = cfg
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def config_from_dict(cfg: Dict[str, Any]) -> SearchConfig:
    d = DEFAULT_CONFIG
    return SearchConfig(
        batch_size=int(cfg_get(cfg, "search", "batch_size", default=d.batch_size)),
        progress_interval_s=float(cfg_get(cfg, "search", "progress_interval", default=d.progress_interval_s)),
        assumed_hash_rate=float(cfg_get(cfg, "search", "assumed_hash_rate", default=d.assumed_hash_rate)),
        workers=int(cfg_get(cfg, "search", "workers", default=d.workers)),
        window=int(cfg_get(cfg, "window", "size", default=d.window)),
        per_candidate_cap=int(cfg_get(cfg, "window", "per_candidate_cap", default=d.per_candidate_cap)),
    )


def load_config(path: str) -> Tuple[SearchConfig, Dict[str, Any]]:
    """
    Read a TOML file. Returns the parsed SearchConfig plus the raw mapping,
    which still holds the [claim] section for the CLI.
    """
    raw = _load_toml(path)
    return config_from_dict(raw), raw
