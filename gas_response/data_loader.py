import re
import pandas as pd
from pathlib import Path
from typing import Iterable, List, Union
import logging

from .exceptions import FormatError

# Set up logging
logger = logging.getLogger(__name__)

COLUMNS = ['time', 'resistance']

# "<name>-<number>.<ext>", e.g. "sensor-1.txt"
SEQUENCE_PATTERN = re.compile(r'^(?P<stem>.*)-(?P<index>\d+)(?P<suffix>\..*)$')
MAX_SEQUENCE_INDEX = 1000


def parse_sample_lines(lines: Iterable[str]) -> pd.DataFrame:
    """
    Parse ``<time_s>\\t<resistance_ohm>`` records.

    Blank lines are skipped. Any other line must hold exactly two
    tab-separated numbers; the first line that does not aborts parsing.

    Args:
        lines: Text lines, with or without trailing newlines

    Returns:
        pd.DataFrame: Samples with float columns ['time', 'resistance']

    Raises:
        FormatError: on the first malformed line
    """
    times: List[float] = []
    resistances: List[float] = []
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        fields = line.split('\t')
        if len(fields) != 2:
            raise FormatError(line_number, line)
        try:
            time_s = float(fields[0])
            resistance = float(fields[1])
        except ValueError:
            raise FormatError(line_number, line) from None
        times.append(time_s)
        resistances.append(resistance)

    return pd.DataFrame({'time': times, 'resistance': resistances}, columns=COLUMNS, dtype=float)


def load_resistance_data(file_path: Union[str, Path]) -> pd.DataFrame:
    """
    Load a single sensor data file.

    Args:
        file_path: Path to the tab-separated text file

    Returns:
        pd.DataFrame: Loaded samples with columns ['time', 'resistance']
    """
    file_path = Path(file_path)
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = parse_sample_lines(f)
    except FormatError as e:
        logger.warning(f"Invalid data file {file_path}: {e}")
        raise e.with_path(file_path) from None
    except OSError as e:
        logger.error(f"Error loading data from {file_path}: {str(e)}")
        raise
    logger.info(f"Successfully loaded {len(data)} samples from {file_path}")
    return data


def expand_file_sequence(file_path: Union[str, Path]) -> List[Path]:
    """
    Select a numbered file sequence starting at ``file_path``.

    For ``run-1.txt`` this returns ``run-1.txt`` followed by every existing
    ``run-2.txt`` ... ``run-999.txt`` in the same folder. Gaps are skipped.
    A file name without the ``-<number>.<ext>`` pattern selects only itself.
    """
    file_path = Path(file_path)
    match = SEQUENCE_PATTERN.match(file_path.name)
    if match is None:
        logger.warning(f"Invalid file name for sequential selection: {file_path.name}")
        return [file_path]

    selected = [file_path]
    stem, suffix = match.group('stem'), match.group('suffix')
    for i in range(int(match.group('index')) + 1, MAX_SEQUENCE_INDEX):
        candidate = file_path.with_name(f"{stem}-{i}{suffix}")
        if candidate.is_file():
            selected.append(candidate)
        else:
            logger.debug(f"{candidate} not found")
    return selected


def list_folder_files(path: Union[str, Path]) -> List[Path]:
    """Return every regular file in ``path`` (or in the folder of the file ``path``)."""
    path = Path(path)
    folder = path.parent if path.is_file() else path
    if not folder.is_dir():
        raise FileNotFoundError(f"Directory not found: {folder}")
    return sorted(p for p in folder.iterdir() if p.is_file())


def resolve_input_files(path: Union[str, Path, None],
                        sequence: bool = False,
                        folder: bool = False) -> List[Path]:
    """
    Turn a user selection into the list of files to process.

    Args:
        path: Selected file or folder (None when nothing was selected)
        sequence: Expand a ``name-N.ext`` file sequence
        folder: Take every file in the folder

    Returns:
        List of file paths, empty when nothing was selected
    """
    if path is None or str(path) == '':
        return []
    if sequence and folder:
        raise ValueError("Choose either a file sequence or a folder, not both")
    if folder:
        return list_folder_files(path)
    if sequence:
        return expand_file_sequence(path)
    return [Path(path)]
