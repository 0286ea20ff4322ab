"""Per-file processing, exports and concurrent batch runs."""

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from config.config_loader import load_config

from ..analyzer import GasResponseAnalyzer, ProcessingSettings
from ..data_loader import load_resistance_data
from ..exceptions import BaselineError, FileTimeoutError, FormatError, SelectionError
from ..profiles import ConcentrationProfile, parse_profile
from ..visualization import render_response_chart
from .dynamics import ResponsePoint, responses_to_frame

logger = logging.getLogger(__name__)

CONFIG = load_config()

STATUS_PROCESSED = 'processed'
STATUS_INVALID = 'invalid'
STATUS_FAILED = 'failed'

INFO_PROCESSED_FILES = "Processed File(s): \n"
ERROR_INVALID_FILES = "Error: Invalid file(s): \n"
ERROR_FAILED_FILES = "Error: Error reading or writing data file(s): \n"


@dataclass
class FileResult:
    path: Path
    status: str
    image_path: Optional[Path] = None
    table_path: Optional[Path] = None
    responses: List[ResponsePoint] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_PROCESSED


@dataclass
class RunReport:
    results: List[FileResult] = field(default_factory=list)

    def _paths(self, status: str) -> List[Path]:
        return [r.path for r in self.results if r.status == status]

    @property
    def processed(self) -> List[Path]:
        return self._paths(STATUS_PROCESSED)

    @property
    def invalid(self) -> List[Path]:
        return self._paths(STATUS_INVALID)

    @property
    def failed(self) -> List[Path]:
        return self._paths(STATUS_FAILED)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    def messages(self) -> List[str]:
        """User-facing summary: processed files, then invalid and failed files if any."""
        messages = [INFO_PROCESSED_FILES + ''.join(f"{p}\n" for p in self.processed)]
        if self.invalid:
            messages.append(ERROR_INVALID_FILES + ''.join(f"{p}\n" for p in self.invalid))
        failed = [r for r in self.results if r.status == STATUS_FAILED]
        if failed:
            messages.append(ERROR_FAILED_FILES + ''.join(f"{r.path}: {r.error}\n" for r in failed))
        return messages


class RunContext:
    """Tracks the in-flight files of one run.

    Each task calls :meth:`task_done` once when it ends; the call that
    completes the run sets :attr:`finished` and fires ``on_finished``.
    """

    def __init__(self, total: int, on_finished: Optional[Callable[[], None]] = None):
        self._lock = threading.Lock()
        self._pending = total
        self._on_finished = on_finished
        self.finished = threading.Event()
        if total <= 0:
            self.finished.set()

    @property
    def pending(self) -> int:
        with self._lock:
            return self._pending

    def task_done(self) -> bool:
        with self._lock:
            self._pending -= 1
            last = self._pending == 0
        if last:
            self.finished.set()
            if self._on_finished is not None:
                try:
                    self._on_finished()
                except Exception:
                    logger.exception("Run completion callback failed")
        return last


def output_paths(data_path: Union[str, Path],
                 output_dir: Optional[Union[str, Path]] = None,
                 image_format: str = 'png',
                 response_format: str = 'txt') -> Tuple[Path, Path]:
    """Chart and response table paths for ``data_path`` (``<folder>/<stem>.<ext>``).

    A table path that would overwrite the data file itself becomes
    ``<folder>/<stem>-response.<ext>``.
    """
    data_path = Path(data_path)
    folder = Path(output_dir) if output_dir is not None else data_path.parent
    image_path = folder / f"{data_path.stem}.{image_format}"
    table_path = folder / f"{data_path.stem}.{response_format}"
    if table_path.resolve() == data_path.resolve():
        table_path = folder / f"{data_path.stem}-response.{response_format}"
        logger.warning(f"Response table would overwrite {data_path}; writing {table_path.name} instead")
    return image_path, table_path


def write_response_table(points: Sequence[ResponsePoint], path: Union[str, Path]) -> Path:
    """Write one ``<concentration>\\t<peak response>`` line per exposure."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    responses_to_frame(list(points)).to_csv(
        path, sep='\t', header=False, index=False, lineterminator='\n'
    )
    return path


def _check_deadline(path: Path, started: float, timeout: Optional[float], stage: str):
    if timeout is not None and time.monotonic() - started > timeout:
        raise FileTimeoutError(path, timeout, stage)


def process_file(data_path: Union[str, Path],
                 profile: ConcentrationProfile,
                 analyzer: GasResponseAnalyzer,
                 output_dir: Optional[Union[str, Path]] = None,
                 timeout: Optional[float] = None) -> FileResult:
    """
    Load, analyze and export one data file.

    Args:
        data_path: Tab-separated ``time\\tresistance`` file
        profile: Gas concentration profile
        analyzer: Configured analyzer
        output_dir: Folder for the outputs (the data file's folder when None)
        timeout: Seconds allowed for this file; None disables the check

    Returns:
        FileResult with the output paths and peak responses

    Raises:
        FormatError, BaselineError, FileTimeoutError, OSError
    """
    data_path = Path(data_path)
    started = time.monotonic()
    out_cfg = analyzer.config.get('output', {}) or {}

    samples = load_resistance_data(data_path)
    _check_deadline(data_path, started, timeout, 'load')

    result = analyzer.analyze(samples, profile)
    _check_deadline(data_path, started, timeout, 'analysis')

    image_path, table_path = output_paths(
        data_path,
        output_dir if output_dir is not None else out_cfg.get('directory'),
        image_format=out_cfg.get('image_format', 'png'),
        response_format=out_cfg.get('response_format', 'txt'),
    )
    render_response_chart(
        result,
        data_path.name,
        image_path,
        protocol=analyzer.protocol,
        dpi=int(out_cfg.get('dpi', 100)),
        figure_size=out_cfg.get('figure_size', (10, 10)),
    )
    _check_deadline(data_path, started, timeout, 'render')
    write_response_table(result.responses, table_path)

    logger.info(f"Processed {data_path} in {time.monotonic() - started:.2f}s")
    return FileResult(
        path=data_path,
        status=STATUS_PROCESSED,
        image_path=image_path,
        table_path=table_path,
        responses=result.responses,
    )


def _run_task(data_path: Path,
              profile: ConcentrationProfile,
              analyzer: GasResponseAnalyzer,
              context: RunContext,
              output_dir: Optional[Union[str, Path]],
              timeout: Optional[float]) -> FileResult:
    try:
        return process_file(data_path, profile, analyzer, output_dir=output_dir, timeout=timeout)
    except (FormatError, BaselineError) as e:
        logger.warning(f"Invalid file {data_path}: {e}")
        return FileResult(path=data_path, status=STATUS_INVALID, error=str(e))
    except (OSError, FileTimeoutError) as e:
        logger.error(f"Failed to process {data_path}: {e}")
        return FileResult(path=data_path, status=STATUS_FAILED, error=str(e))
    except Exception as e:
        logger.exception(f"Unexpected error while processing {data_path}")
        return FileResult(path=data_path, status=STATUS_FAILED, error=f"{type(e).__name__}: {e}")
    finally:
        context.task_done()


def run_batch(paths: Optional[Sequence[Union[str, Path]]],
              profile: Union[str, ConcentrationProfile, None],
              config: Optional[Dict] = None,
              settings: Optional[ProcessingSettings] = None,
              output_dir: Optional[Union[str, Path]] = None,
              max_workers: Optional[int] = None,
              file_timeout: Optional[float] = None,
              on_finished: Optional[Callable[[], None]] = None) -> RunReport:
    """
    Process every file concurrently, one task per file.

    Selection and profile problems are raised before any task starts. A
    failing file never stops the others; its error lands in the report.

    Args:
        paths: Data files to process
        profile: Profile string or parsed ConcentrationProfile
        config: Configuration dictionary (module CONFIG when None)
        settings: Processing options overriding the configuration
        output_dir: Output folder overriding the configuration
        max_workers: Worker threads overriding the configuration
        file_timeout: Per-file seconds overriding the configuration
        on_finished: Called once, from the thread that finishes the last file

    Returns:
        RunReport with one FileResult per input file, in input order
    """
    if not paths:
        raise SelectionError()
    if not isinstance(profile, ConcentrationProfile):
        profile = parse_profile(profile)

    config = config if config is not None else CONFIG
    conc_cfg = config.get('concurrency', {}) or {}
    workers = max_workers or conc_cfg.get('max_workers') or min(32, (os.cpu_count() or 1) + 4)
    timeout = file_timeout if file_timeout is not None else conc_cfg.get('file_timeout_s')

    analyzer = GasResponseAnalyzer(config, settings=settings)
    paths = [Path(p) for p in paths]
    context = RunContext(len(paths), on_finished=on_finished)
    logger.info(f"Processing {len(paths)} file(s) for {profile} with {workers} worker(s)")

    results: List[Optional[FileResult]] = [None for _ in paths]
    with ThreadPoolExecutor(max_workers=int(workers)) as executor:
        future_map = {
            executor.submit(_run_task, path, profile, analyzer, context, output_dir, timeout): idx
            for idx, path in enumerate(paths)
        }
        for future in as_completed(future_map):
            results[future_map[future]] = future.result()

    report = RunReport(results=[r for r in results if r is not None])
    logger.info(
        f"Run finished: {len(report.processed)} processed, "
        f"{len(report.invalid)} invalid, {len(report.failed)} failed"
    )
    return report


def run_from_collaborators(select_files: Callable[[], Optional[Sequence[Union[str, Path]]]],
                           select_gas_profile: Callable[[], Optional[str]],
                           **kwargs) -> RunReport:
    """Run a batch with the files and profile supplied by an input provider."""
    files = select_files()
    if not files:
        raise SelectionError()
    profile = parse_profile(select_gas_profile())
    return run_batch(files, profile, **kwargs)
