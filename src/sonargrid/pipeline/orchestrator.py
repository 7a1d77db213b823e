"""Survey-level pipeline orchestration.

Splits a survey into transects, processes them in a thread pool, waits for
all of them, and folds the finished rasters into one table in transect
order. Also owns logging setup and output persistence.
"""

import json
import time
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional, TYPE_CHECKING

import pandas as pd

from sonargrid.contracts import ContractViolation
from sonargrid.pipeline.merger import GridMerger
from sonargrid.pipeline.processor import TransectProcessor, TransectResult, TransectState
from sonargrid.setup_directories import get_analysis_path, get_log_path
from sonargrid.survey.grid_rasterizer import GridSpec
from sonargrid.survey.loader import SurveyDataLoader

if TYPE_CHECKING:
    from sonargrid.schemas import InternalConfig
    from sonargrid.survey.bathymetry import BathymetryLookup

__all__ = ['SurveyOrchestrator']

logger = logging.getLogger(__name__)


class SurveyOrchestrator:
    """Run the thickness pipeline over every transect of a survey.

    This is the main entry point for running ``sonargrid``. Given loaded
    inputs (or paths in the config), it processes transects in parallel,
    merges the results and optionally writes them to disk.

    **Pipeline Architecture:**

    1. **Load**: SurveyDataLoader reads samples, track and bathymetry.

    2. **Map**: one TransectProcessor task per transect id on a
       ``ThreadPoolExecutor`` (``processor.max_workers``). Transects share
       only the read-only bathymetry and the fixed grid.

    3. **Barrier**: all tasks finish before merging starts.

    4. **Reduce**: GridMerger folds DONE rasters in transect-id order.

    5. **Persist**: merged table (Parquet or CSV) and the resolved runtime
       config (JSON) under ``analysis/``.

    **Failure isolation:**

    A transect that raises an unexpected error is logged with traceback and
    recorded as SKIPPED; the others continue. A ContractViolation aborts the
    whole run.

    Example usage::

        from sonargrid.pipeline.orchestrator import SurveyOrchestrator

        orch = SurveyOrchestrator(config, output_dirs)
        table = orch.start()

        # or, with inputs already in memory
        table = SurveyOrchestrator(config).run(samples, track, bathymetry)
    """

    def __init__(self, config: "InternalConfig", output_dirs: Optional[Dict[str, Path]] = None):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.

        output_dirs : dict, optional
            Output directory paths (from setup_output_directories):
            - analysis: merged tables and runtime config
            - logs: log files
            If None, nothing is written to disk.
        """
        self.config = config
        self.output_dirs = output_dirs
        self.grid = GridSpec.from_config(config)
        self.max_workers = config.processor.max_workers

        self.results: List[TransectResult] = []
        self._start_time = None

    def _setup_logging(self):
        """Configure root logger with console and (optionally) file handlers.

        Log level comes from config.logging.level.
        """
        log_level = getattr(logging, self.config.logging.level.upper(), logging.INFO)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear existing handlers and add new ones
        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        log_path = None
        if self.output_dirs:
            log_path = get_log_path(self.output_dirs, self.config.survey.site_code)
            fh = logging.FileHandler(log_path)
            fh.setLevel(log_level)
            fh.setFormatter(formatter)
            root.addHandler(fh)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_path)

    # ------------------------------------------------------------------
    # Map / reduce
    # ------------------------------------------------------------------

    @staticmethod
    def split_by_transect(samples: pd.DataFrame, track: pd.DataFrame) -> Dict[str, tuple]:
        """Map transect id -> (samples, track); ids from either input."""
        sample_groups = {str(k): g for k, g in samples.groupby("transect_id", sort=False)}
        track_groups = {str(k): g for k, g in track.groupby("transect_id", sort=False)}
        ids = sorted(set(sample_groups) | set(track_groups))
        return {
            tid: (
                sample_groups.get(tid, samples.iloc[0:0]),
                track_groups.get(tid, track.iloc[0:0]),
            )
            for tid in ids
        }

    def _process_one(self, processor: TransectProcessor, transect_id: str,
                     samples: pd.DataFrame, track: pd.DataFrame) -> TransectResult:
        try:
            return processor.process(transect_id, samples, track)
        except ContractViolation:
            raise
        except Exception as e:
            logger.exception("Error processing transect %s", transect_id)
            return TransectResult(
                transect_id=transect_id,
                state=TransectState.SKIPPED,
                reason=f"error: {e}",
                n_samples=len(samples),
                history=(TransectState.LOADED, TransectState.SKIPPED),
            )

    def process_transects(self, samples: pd.DataFrame, track: pd.DataFrame,
                          bathymetry: "BathymetryLookup") -> List[TransectResult]:
        """Process every transect; results in transect-id order.

        Raises
        ------
        ContractViolation
            If any transect violates a pipeline contract. Pending transects
            are cancelled.
        """
        processor = TransectProcessor(self.config, self.grid, bathymetry)
        work = self.split_by_transect(samples, track)
        logger.info("Processing %d transects with %d workers", len(work), self.max_workers)

        results = {}
        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix="transect") as pool:
            futures = {
                pool.submit(self._process_one, processor, tid, s, t): tid
                for tid, (s, t) in work.items()
            }
            try:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
            except ContractViolation as e:
                for future in futures:
                    future.cancel()
                logger.critical("CRITICAL: Pipeline contract violated: %s", e)
                logger.critical("This indicates a bug in pipeline logic. Stopping pipeline.")
                raise

        return [results[tid] for tid in sorted(results)]

    def run(self, samples: pd.DataFrame, track: pd.DataFrame,
            bathymetry: "BathymetryLookup") -> pd.DataFrame:
        """Process all transects and return the merged table."""
        self.results = self.process_transects(samples, track, bathymetry)

        merger = GridMerger(self.grid, bathymetry, self.config)
        try:
            return merger.merge(r.raster for r in self.results if r.done)
        except ContractViolation as e:
            logger.critical("CRITICAL: Merge contract violated: %s", e)
            raise

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    def start(self) -> pd.DataFrame:
        """Load inputs, run the survey, write outputs and log a summary.

        Returns
        -------
        pd.DataFrame
            The merged thickness table.

        Raises
        ------
        FileNotFoundError, ValueError
            If inputs cannot be loaded.
        ContractViolation
            If a pipeline contract is violated.
        """
        self._setup_logging()
        self._start_time = time.time()

        logger.info("=" * 60)
        logger.info("Starting Survey Thickness Pipeline")
        logger.info("Site: %s  Date: %s", self.config.survey.site_code,
                    self.config.survey.survey_date)
        logger.info("Grid: %d x %d cells of %.2f m, origin (%.2f, %.2f)",
                    self.grid.ncols, self.grid.nrows, self.grid.cell_size,
                    self.grid.origin_x, self.grid.origin_y)
        logger.info("=" * 60)

        samples, track, bathymetry = SurveyDataLoader(self.config).load_all()
        table = self.run(samples, track, bathymetry)

        if self.output_dirs:
            self.save_results(table)
            self._persist_runtime_config()

        self._log_summary(table)
        return table

    def save_results(self, table: pd.DataFrame, filepath=None) -> Path:
        """Write the merged table as Parquet or CSV (config.output.format).

        Parameters
        ----------
        table : pd.DataFrame
            Output of run().
        filepath : str or Path, optional
            Output file. If None, built from the site code, survey date and
            ``output.filename_pattern`` under ``analysis/``.
        """
        fmt = self.config.output.format
        if filepath is None:
            filepath = get_analysis_path(
                self.output_dirs,
                site_code=self.config.survey.site_code,
                survey_date=self.config.survey.survey_date,
                analysis_type=fmt,
                filename_pattern=self.config.output.filename_pattern,
            )
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        if fmt == "parquet":
            compression = self.config.output.compression
            table.to_parquet(filepath, engine='pyarrow',
                             compression=None if compression == "none" else compression,
                             index=False)
        else:
            table.to_csv(filepath, index=False)

        logger.info("Exported %d rows to: %s", len(table), filepath)
        return filepath

    def _persist_runtime_config(self) -> Path:
        """Write the resolved InternalConfig next to the results."""
        path = get_analysis_path(
            self.output_dirs,
            site_code=self.config.survey.site_code,
            survey_date=self.config.survey.survey_date,
            analysis_type="json",
            filename_pattern="{site_code}_{survey_date}_runtime_config",
        )
        with open(path, "w") as f:
            json.dump(self.config.model_dump(), f, indent=2, default=str)
        logger.info("Runtime config saved: %s", path)
        return path

    def _log_summary(self, table: pd.DataFrame):
        done = [r for r in self.results if r.state == TransectState.DONE]
        skipped = [r for r in self.results if r.state == TransectState.SKIPPED]
        elapsed = time.time() - self._start_time if self._start_time else 0

        logger.info("=" * 60)
        logger.info("Survey complete. Runtime: %.1f seconds", elapsed)
        logger.info("Transects: %d done, %d skipped; merged rows: %d",
                    len(done), len(skipped), len(table))
        for r in skipped:
            logger.info("  skipped %s: %s", r.transect_id, r.reason)
        logger.info("=" * 60)
