import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running from anywhere
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config.config_loader import load_config  # noqa: E402
from gas_response.core.outliers import REFERENCE_PERIOD_THRESHOLDS  # noqa: E402
from gas_response.core.pipeline import run_from_collaborators  # noqa: E402
from gas_response.data_loader import resolve_input_files  # noqa: E402
from gas_response.exceptions import ProfileParseError, SelectionError  # noqa: E402
from gas_response.logging_config import setup_logging  # noqa: E402
from gas_response.profiles import GAS_PRESETS  # noqa: E402


def _apply_overrides(config, args):
    proc = config.setdefault('processing', {})
    if args.passes is not None:
        proc['outlier_passes'] = args.passes
    if args.std_threshold is not None:
        proc['std_threshold'] = args.std_threshold
        proc['period_thresholds'] = None
    if args.per_period_thresholds:
        proc['period_thresholds'] = dict(REFERENCE_PERIOD_THRESHOLDS)
    if args.smooth is not None:
        proc['smooth_period'] = args.smooth
    if args.baseline_drift:
        proc['baseline_drift'] = True
    conc = config.setdefault('concurrency', {})
    if args.workers is not None:
        conc['max_workers'] = args.workers
    if args.timeout is not None:
        conc['file_timeout_s'] = args.timeout if args.timeout > 0 else None
    if args.out is not None:
        config.setdefault('output', {})['directory'] = args.out
    return config


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Gas sensor response: normalize → remove outliers → smooth → chart + peak response table"
    )
    parser.add_argument("input", nargs="?", help="Data file (or folder with --folder)")
    parser.add_argument("--sequence", action="store_true",
                        help="Also load the numbered sequence name-2.ext, name-3.ext, ... after name-1.ext")
    parser.add_argument("--folder", action="store_true", help="Load every file in the folder")
    parser.add_argument("--gas", type=str, help='Gas profile, e.g. "CO 5 25 50 75 100"')
    parser.add_argument("--preset", type=str, choices=sorted(GAS_PRESETS.keys()),
                        help="Use a built-in gas profile")
    parser.add_argument("--passes", type=int, default=None,
                        help="Outlier removal passes (0 for no outlier removal)")
    parser.add_argument("--std-threshold", type=float, default=None,
                        help="Standard deviation threshold for outliers")
    parser.add_argument("--per-period-thresholds", action="store_true",
                        help="Use the tuned per-period thresholds instead of a single threshold")
    parser.add_argument("--smooth", type=int, default=None,
                        help="Moving average period (0 for no smoothing)")
    parser.add_argument("--baseline-drift", action="store_true",
                        help="Remove a linear baseline drift fitted before the first exposure")
    parser.add_argument("--out", type=str, default=None,
                        help="Output directory (default: next to each input file)")
    parser.add_argument("--workers", type=int, default=None, help="Number of files processed in parallel")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Seconds allowed per file (0 disables the limit)")
    parser.add_argument("--config", type=str, default=None, help="YAML file overriding config/config.yaml")
    parser.add_argument("--log-file", type=str, default=None, help="Also write the log to this file")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG")

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    if args.gas and args.preset:
        parser.error("use either --gas or --preset, not both")
    if args.sequence and args.folder:
        parser.error("use either --sequence or --folder, not both")

    config = _apply_overrides(load_config(args.config), args)

    def select_files():
        return resolve_input_files(args.input, sequence=args.sequence, folder=args.folder)

    def select_gas_profile():
        return GAS_PRESETS[args.preset] if args.preset else args.gas

    try:
        report = run_from_collaborators(
            select_files,
            select_gas_profile,
            config=config,
        )
    except SelectionError:
        print("Error: No file selected")
        return 2
    except ProfileParseError as e:
        print(f"Error: {e}")
        return 2
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 2

    for message in report.messages():
        print(message)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
