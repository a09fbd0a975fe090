"""Classification orchestration: validate, look up, detect, store."""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from .cache import ClassificationCache
from .detection.detector import is_mutant
from .detection.grid import Grid, validate_grid
from .exceptions import DetectionError, ErrorCode, PersistenceError
from .logging_config import get_logger

logger = get_logger(__name__)

Detector = Callable[[Grid], bool]


class ClassifierService:
    """Classifies grids as mutant or human, memoized by fingerprint.

    Validation errors propagate unchanged and touch nothing in the cache.
    A cached record is returned verbatim without running the detector. On a
    miss the detector runs and the result is stored best-effort: if the
    store fails the computed value is still returned.

    Detector failures follow ``fail_fatal``:

    - ``False`` (default): logged, classified human and cached.
    - ``True``: raised as :class:`DetectionError`; nothing is cached.
    """

    def __init__(
        self,
        cache: ClassificationCache,
        detector: Optional[Detector] = None,
        fail_fatal: bool = False,
    ) -> None:
        self.cache = cache
        self.detector: Detector = detector or is_mutant
        self.fail_fatal = fail_fatal

    def classify(self, rows: Optional[Sequence[Any]]) -> bool:
        """Return True for a mutant grid, False for a human one.

        Raises:
            ValidationError: ``rows`` is not a valid grid.
            DetectionError: the detector failed and ``fail_fatal`` is set.
        """
        grid = validate_grid(rows)
        fingerprint = grid.fingerprint
        logger.debug("Classifying grid %s... (%dx%d)", fingerprint[:16], grid.size, grid.size)

        cached = self.cache.lookup(fingerprint)
        if cached is not None:
            return cached.is_mutant

        result = self._detect(grid, fingerprint)

        try:
            record = self.cache.store_if_absent(fingerprint, result)
        except PersistenceError as e:
            logger.warning("Classification for %s... not cached: %s", fingerprint[:16], e)
            return result
        return record.is_mutant

    def _detect(self, grid: Grid, fingerprint: str) -> bool:
        try:
            return bool(self.detector(grid))
        except Exception as e:
            if self.fail_fatal:
                raise DetectionError(
                    message=f"Run detection failed: {e}",
                    code=ErrorCode.DNA800,
                    context={"fingerprint": fingerprint},
                    recoverable=False,
                ) from e
            logger.exception(
                "Run detection failed for %s..., classifying as human", fingerprint[:16]
            )
            return False
