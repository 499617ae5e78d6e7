"""CLI entry point for the scream detection feature pipeline.

Usage:
    scream-detection info
    scream-detection extract FILE [--output OUT.npy] [--json]
    scream-detection classify FILE --model MODEL.pkl [--threshold 0.7]
    scream-detection batch DIR [--workers N] [--output OUT.npz]
"""

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional

import numpy as np

from .constants import get_audio_processing_config, get_config
from .errors import ExtractionError, ExtractionResult

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _setup(args) -> None:
    """Apply global options shared by all commands."""
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    if args.config:
        path = Path(args.config)
        if not path.exists():
            logger.warning(f"Config file not found: {args.config}")
        get_config().reload(path)


def cmd_info(args):
    """Show working parameters and the feature layout."""
    from .audio import FeaturePipeline

    config = get_audio_processing_config()
    pipeline = FeaturePipeline()
    layout = pipeline.layout

    logger.info(f"Sample rate:  {config.sample_rate} Hz")
    logger.info(f"FFT size:     {config.n_fft} (hop {config.hop_length})")
    logger.info(f"Mel filters:  {pipeline.filter_bank.n_filters}")
    logger.info(f"Silence:      |x| < {config.silence_threshold}")
    logger.info(
        f"Features:     {layout.size} = mfcc[{layout.mfcc.start}:{layout.mfcc.stop}] "
        f"+ chroma[{layout.chroma.start}:{layout.chroma.stop}] "
        f"+ mel[{layout.mel.start}:{layout.mel.stop}]"
    )


def cmd_extract(args):
    """Extract the feature vector of one audio file."""
    from .audio import FeaturePipeline

    pipeline = FeaturePipeline()
    try:
        vector = pipeline.extract_file(args.file)
    except ExtractionError as e:
        logger.error(f"✗ {args.file}: {e} [{e.kind.value}]")
        sys.exit(1)

    logger.info(f"✓ Extracted {len(vector)} features from {args.file}")

    if args.output:
        np.save(args.output, vector)
        logger.info(f"Saved: {args.output}")

    if args.json:
        families = pipeline.layout.split(vector)
        print(json.dumps({name: values.tolist() for name, values in families.items()}))
    elif not args.output:
        print(" ".join(f"{v:.6g}" for v in vector))


def cmd_classify(args):
    """Classify one audio file with a pickled model."""
    from .audio import ScreamClassifier

    try:
        classifier = ScreamClassifier(
            model_path=args.model,
            input_size=args.input_size,
            threshold=args.threshold,
        )
        result = classifier.detect_file(args.file)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except ExtractionError as e:
        logger.error(f"✗ {args.file}: {e} [{e.kind.value}]")
        sys.exit(1)

    scores = ", ".join(f"{name}: {p:.2%}" for name, p in result.probabilities.items())
    logger.info(scores)
    if result.is_scream:
        logger.info(f"⚠️  Scream detected ({result.scream_probability:.0%} confidence)")
    else:
        logger.info(f"No scream detected ({result.scream_probability:.0%} confidence)")


def extract_many(paths: List[Path], workers: int = 4) -> List[ExtractionResult]:
    """Extract feature vectors of many files in parallel, in input order."""
    from .audio import FeaturePipeline

    pipeline = FeaturePipeline()
    results: List[Optional[ExtractionResult]] = [None] * len(paths)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_idx = {
            executor.submit(pipeline.extract_file_result, path): idx
            for idx, path in enumerate(paths)
        }
        for future in as_completed(future_to_idx):
            results[future_to_idx[future]] = future.result()

    return results


def cmd_batch(args):
    """Extract features for every supported file in a directory."""
    from .audio import AudioLoader

    directory = Path(args.directory)
    if not directory.is_dir():
        logger.error(f"Not a directory: {directory}")
        sys.exit(1)

    paths = sorted(p for p in directory.iterdir() if p.is_file() and AudioLoader.is_supported(p))
    if not paths:
        logger.error(f"No audio files found in {directory}")
        sys.exit(1)

    logger.info(f"Extracting {len(paths)} files with {args.workers} workers")
    results = extract_many(paths, workers=args.workers)

    names, vectors = [], []
    for path, result in zip(paths, results):
        if result.ok:
            names.append(path.name)
            vectors.append(result.vector)
            logger.info(f"  ✓ {path.name}")
        else:
            logger.info(f"  ✗ {path.name}: {result.kind.value}")

    logger.info(f"\nResult: {len(vectors)}/{len(paths)} files extracted")

    if args.output and vectors:
        np.savez(args.output, names=np.array(names), features=np.stack(vectors))
        logger.info(f"Saved: {args.output}")

    if not vectors:
        sys.exit(1)


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="scream-detection",
        description="Scream detection feature pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  scream-detection info                         Show working parameters
  scream-detection extract clip.wav --json      Print feature families
  scream-detection classify clip.wav -m m.pkl   Run a pickled model
  scream-detection batch recordings/ -o f.npz   Extract a whole directory
        """,
    )

    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument("-c", "--config", help="Config file")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # info
    subparsers.add_parser("info", help="Show working parameters")

    # extract
    extract_p = subparsers.add_parser("extract", help="Extract one file")
    extract_p.add_argument("file", help="Audio file")
    extract_p.add_argument("-o", "--output", help="Save vector as .npy")
    extract_p.add_argument("--json", action="store_true", help="Print families as JSON")

    # classify
    classify_p = subparsers.add_parser("classify", help="Classify one file")
    classify_p.add_argument("file", help="Audio file")
    classify_p.add_argument("-m", "--model", required=True, help="Pickled model")
    classify_p.add_argument("-t", "--threshold", type=float, default=None,
                            help="Scream probability threshold (0.0-1.0)")
    classify_p.add_argument("--input-size", type=int, default=None,
                            help="Feature count the model expects")

    # batch
    batch_p = subparsers.add_parser("batch", help="Extract a directory")
    batch_p.add_argument("directory", help="Directory of audio files")
    batch_p.add_argument("-w", "--workers", type=_positive_int, default=4, help="Worker threads")
    batch_p.add_argument("-o", "--output", help="Save names and features as .npz")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    _setup(args)

    commands = {
        "info": cmd_info,
        "extract": cmd_extract,
        "classify": cmd_classify,
        "batch": cmd_batch,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
