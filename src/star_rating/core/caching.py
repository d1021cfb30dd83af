# caching.py
from __future__ import annotations

import hashlib
import json
import pickle
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import joblib
import pandas as pd


class CacheMissError(LookupError):
    """Raised when a cached artifact is required but not available."""


def data_fingerprint(data: Optional[pd.DataFrame]) -> str:
    """Content hash of a DataFrame (values and index), order sensitive."""
    if data is None:
        return "none"
    hashed = pd.util.hash_pandas_object(data, index=True).to_numpy()
    h = hashlib.sha1(hashed.tobytes())
    h.update(",".join(map(str, data.columns)).encode("utf-8"))
    return h.hexdigest()


class ResultCache:
    """
    Memoization of expensive results on disk.

    Artifacts are keyed by (kind, configuration, data version) and stored as
    ``<kind>_<key>.joblib``. A cached object is returned as-is, so callers get
    the same structure whether it was loaded or freshly computed.
    """

    def __init__(self, cache_dir: str | Path = "cache", enabled: bool = True):
        self.cache_dir = Path(cache_dir)
        self.enabled = enabled

    def key(self, kind: str, config: Dict[str, Any], data: Optional[pd.DataFrame] = None) -> str:
        payload = json.dumps(
            {"kind": kind, "config": config, "data": data_fingerprint(data)},
            sort_keys=True,
            default=str,
        )
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:16]

    def path_for(self, kind: str, key: str) -> Path:
        return self.cache_dir / f"{kind}_{key}.joblib"

    def load(self, kind: str, key: str) -> Any:
        path = self.path_for(kind, key)
        if not path.exists():
            raise CacheMissError(f"No cached {kind} at {path}")
        try:
            return joblib.load(path)
        except (OSError, EOFError, KeyError, ValueError, pickle.UnpicklingError, ImportError) as e:
            print(f"[warn] cached {kind} at {path} is unreadable ({e}); ignoring it")
            raise CacheMissError(f"Unreadable cached {kind} at {path}") from e

    def save(self, kind: str, key: str, obj: Any) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(kind, key)
        joblib.dump(obj, path)
        print(f"[cache] saved {kind} -> {path}")
        return path

    def get_or_compute(
        self,
        kind: str,
        config: Dict[str, Any],
        data: Optional[pd.DataFrame],
        compute: Callable[[], Any],
        recompute: bool = True,
    ) -> Any:
        """
        Return the cached artifact, computing and storing it when missing.

        Args:
            kind: Artifact type, part of the file name
            config: Configuration the artifact depends on
            data: Data the artifact was computed from
            compute: Zero-argument function producing the artifact
            recompute: If False a missing artifact raises CacheMissError
        """
        if not self.enabled:
            if not recompute:
                raise CacheMissError(f"Cache disabled and recompute not allowed for {kind}")
            return compute()

        key = self.key(kind, config, data)
        try:
            obj = self.load(kind, key)
            print(f"[cache] loaded {kind} from {self.path_for(kind, key)}")
            return obj
        except CacheMissError:
            if not recompute:
                raise

        obj = compute()
        self.save(kind, key, obj)
        return obj
