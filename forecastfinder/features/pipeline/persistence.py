"""Save and load fitted model collections.

A collection pickles one refit forecaster per entity, which may be a
statsmodels results object or a LightGBM regressor. Unpickling those under
different library versions can fail or silently change predictions, so the
bundle records the version of every backend and warns on load when any of
them differs.
"""

from __future__ import annotations

import hashlib
import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import joblib  # type: ignore[import-untyped]
import lightgbm
import sklearn  # type: ignore[import-untyped]
import statsmodels  # type: ignore[import-untyped]
import structlog

if TYPE_CHECKING:
    from forecastfinder.features.pipeline.service import ForecastPipelineModel

logger = structlog.get_logger()


def library_versions() -> dict[str, str]:
    """Versions of the interpreter and every library a collection may pickle."""
    return {
        "python": f"{sys.version_info.major}.{sys.version_info.minor}",
        "scikit-learn": sklearn.__version__,
        "statsmodels": statsmodels.__version__,
        "lightgbm": lightgbm.__version__,
    }


@dataclass
class ModelCollectionBundle:
    """Fitted pipeline model plus what is needed to trust it after loading.

    Attributes:
        model: Pipeline model with every entity's winning forecaster.
        metadata: Caller-supplied context (algorithm, entity counts, ...).
        created_at: Save time, set by save_model_collection.
        versions: Library versions at save time.
        bundle_hash: Hash of the winning configurations, set on save.
    """

    model: ForecastPipelineModel
    metadata: dict[str, object] = field(default_factory=lambda: {})
    created_at: datetime | None = None
    versions: dict[str, str] = field(default_factory=lambda: {})
    bundle_hash: str | None = None

    def compute_hash(self) -> str:
        """16-character hash of the pipeline config and each entity's winner."""
        winners = {
            str(key): [record.family, record.config.config_hash()]
            for key, record in self.model.best_records.items()
        }
        content = {
            "pipeline_config": self.model.config.model_dump(mode="json"),
            "winners": winners,
            "metadata": self.metadata,
        }
        return hashlib.sha256(
            json.dumps(content, sort_keys=True, default=str).encode()
        ).hexdigest()[:16]

    def version_mismatches(self) -> dict[str, tuple[str, str]]:
        """Saved and current version of every library that changed since save."""
        current = library_versions()
        return {
            name: (saved, current[name])
            for name, saved in self.versions.items()
            if name in current and saved != current[name]
        }


def save_model_collection(bundle: ModelCollectionBundle, path: str | Path) -> Path:
    """Stamp and write bundle with joblib.

    Args:
        bundle: Bundle to save. created_at, versions and bundle_hash are set.
        path: Destination; ".joblib" is appended when it has no suffix.

    Returns:
        Path written.
    """
    path = Path(path)
    if not path.suffix:
        path = path.with_suffix(".joblib")
    path.parent.mkdir(parents=True, exist_ok=True)

    bundle.created_at = datetime.now(UTC)
    bundle.versions = library_versions()
    bundle.bundle_hash = bundle.compute_hash()

    joblib.dump(bundle, path, compress=3)  # pyright: ignore[reportUnknownMemberType]

    logger.info(
        "pipeline.model_collection_saved",
        path=str(path),
        bundle_hash=bundle.bundle_hash,
        n_entities=len(bundle.model.best_records),
        versions=bundle.versions,
    )
    return path


def _check_within(path: Path, base_dir: str | Path) -> None:
    base_path = Path(base_dir).resolve()
    if path.is_relative_to(base_path):
        return
    logger.warning(
        "pipeline.model_load_rejected",
        path=str(path),
        base_dir=str(base_path),
    )
    raise ValueError(
        f"Model path '{path}' is outside the allowed artifacts directory '{base_path}'."
    )


def load_model_collection(
    path: str | Path, base_dir: str | Path | None = None
) -> ModelCollectionBundle:
    """Read a bundle written by save_model_collection.

    Every library whose version differs from the one recorded at save time
    is logged as a warning; loading still proceeds.

    Args:
        path: Bundle file.
        base_dir: When given, path must resolve inside this directory.

    Raises:
        FileNotFoundError: If path does not exist.
        ValueError: If path is outside base_dir or the file holds no bundle.
    """
    path = Path(path).resolve()
    if base_dir is not None:
        _check_within(path, base_dir)
    if not path.exists():
        raise FileNotFoundError(f"Model collection not found: {path}")

    bundle = joblib.load(path)  # pyright: ignore[reportUnknownMemberType]
    if not isinstance(bundle, ModelCollectionBundle):
        raise ValueError(f"{path} does not contain a model collection")

    for name, (saved, current) in bundle.version_mismatches().items():
        logger.warning(
            "pipeline.library_version_mismatch",
            library=name,
            saved_version=saved,
            current_version=current,
        )

    logger.info(
        "pipeline.model_collection_loaded",
        path=str(path),
        bundle_hash=bundle.bundle_hash,
        algorithm=bundle.model.config.algorithm.value,
        n_entities=len(bundle.model.best_records),
    )
    return bundle
