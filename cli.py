# cli.py

import argparse
import json
import logging
from pathlib import Path

from config import SystemConfig
from core.batch_processor import BatchProcessor
from core.corpus import CorpusIndex
from core.database import FingerprintCache
from core.deadline import Deadline
from core.decision_engine import DecisionEngine
from core.errors import VerificationError
from core.perceptual_hash import PerceptualHasher
from security.input_validation import SecurityValidator
from utils.file_utils import format_file_size
from utils.image_utils import describe_image
from utils.logging_config import VerificationLogger

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BAD_INPUT = 2


def _open_cache(config: SystemConfig):
    if not config.verification.use_cache:
        return None
    return FingerprintCache(config.cache_path)


def verify_command(args, config: SystemConfig) -> int:
    """Verify one document image against the genuine corpus"""
    upload = Path(args.image)
    settings = config.verification

    # Upload receiver checks happen before the engine is involved
    problem = SecurityValidator.validate_upload(str(upload), settings.max_upload_bytes)
    if problem:
        print(f"Error: {problem}")
        return EXIT_BAD_INPUT

    try:
        data = upload.read_bytes()
    except OSError as e:
        print(f"Error: cannot read {upload}: {e}")
        return EXIT_BAD_INPUT

    original_name = args.name or upload.name
    storage_path = args.storage_path or str(upload.resolve())
    timeout = args.timeout if args.timeout is not None else settings.upload_timeout_seconds

    cache = _open_cache(config)
    try:
        engine = DecisionEngine(args.corpus or config.corpus_dir, config=settings, cache=cache)
        verdict = engine.verify(data, original_name, storage_path, deadline=Deadline(timeout))
    finally:
        if cache is not None:
            cache.close()

    result = {
        'file_name': original_name,
        'storage_path': storage_path,
        **verdict.to_dict()
    }

    audit = VerificationLogger(log_dir=config.log_dir)
    audit.log_verdict(original_name, storage_path, verdict.to_dict())
    audit.close()

    print(json.dumps(result, indent=2))

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(result, f, indent=2)
        print(f"\nResult saved to: {args.output}")

    return EXIT_OK


def add_command(args, config: SystemConfig) -> int:
    """Register a genuine reference document"""
    source = Path(args.image)

    problem = SecurityValidator.validate_upload(str(source), config.verification.max_upload_bytes)
    if problem:
        print(f"Error: {problem}")
        return EXIT_BAD_INPUT

    try:
        data = source.read_bytes()
    except OSError as e:
        print(f"Error: cannot read {source}: {e}")
        return EXIT_BAD_INPUT

    name = args.name or source.name

    try:
        # Refuse anything that could never be compared
        PerceptualHasher(config.verification.hash_size).hash(data)
        reference = CorpusIndex(args.corpus or config.corpus_dir).add_reference(data, name)
    except VerificationError as e:
        print(f"Error: {e}")
        return EXIT_BAD_INPUT

    print(f"Added reference: {reference.name} ({format_file_size(reference.size_bytes)})")
    return EXIT_OK


def list_command(args, config: SystemConfig) -> int:
    """List genuine references"""
    corpus_dir = args.corpus or config.corpus_dir
    references = CorpusIndex(corpus_dir).list_references()

    if not references:
        print(f"No references in {corpus_dir}")
        return EXIT_OK

    print(f"{len(references)} references in {corpus_dir}:")
    for i, reference in enumerate(references, 1):
        details = describe_image(str(reference.path))
        print(f"{i}. {reference.name} ({format_file_size(reference.size_bytes)}, {details})")

    return EXIT_OK


def index_command(args, config: SystemConfig) -> int:
    """Pre-compute reference fingerprints into the cache"""
    settings = config.verification
    cache = FingerprintCache(config.cache_path)

    try:
        engine = DecisionEngine(args.corpus or config.corpus_dir, config=settings, cache=cache)
        # Indexing always goes through the cache
        engine.cache = cache
        references = engine.corpus.list_references()

        if not references:
            print("No references to index.")
            return EXIT_OK

        print(f"Indexing {len(references)} references...")
        failures = []

        def index_one(reference):
            try:
                engine.reference_fingerprint(reference)
            except VerificationError as e:
                failures.append((reference.name, str(e)))

        BatchProcessor(n_workers=settings.n_workers, show_progress=True).map_ordered(
            index_one, references, desc="Hashing references"
        )

        print(f"Indexed {len(references) - len(failures)} references "
              f"({cache.count()} cached fingerprints)")
        for name, error in failures:
            print(f"  Failed: {name}: {error}")
    finally:
        cache.close()

    return EXIT_ERROR if failures else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Document Forgery Verifier - Command Line Interface"
    )
    parser.add_argument('-c', '--config', default='config.yaml',
                        help='Path to YAML configuration')
    parser.add_argument('--corpus', help='Genuine corpus directory (overrides config)')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Verify command
    verify_parser = subparsers.add_parser('verify', help='Verify a document image')
    verify_parser.add_argument('image', help='Path to the uploaded image')
    verify_parser.add_argument('--name', help='Original filename (defaults to the file name)')
    verify_parser.add_argument('--storage-path',
                               help='Storage path used for path heuristics '
                                    '(defaults to the absolute image path)')
    verify_parser.add_argument('-t', '--timeout', type=float,
                               help='Verification deadline in seconds')
    verify_parser.add_argument('-o', '--output', help='Output JSON file for the verdict')
    verify_parser.set_defaults(func=verify_command)

    # Add reference command
    add_parser = subparsers.add_parser('add', help='Add a genuine reference document')
    add_parser.add_argument('image', help='Path to the genuine image')
    add_parser.add_argument('--name', help='Name to store the reference under')
    add_parser.set_defaults(func=add_command)

    # List command
    list_parser = subparsers.add_parser('list', help='List genuine references')
    list_parser.set_defaults(func=list_command)

    # Index command
    index_parser = subparsers.add_parser('index', help='Cache reference fingerprints')
    index_parser.set_defaults(func=index_command)

    return parser


def run(args, config: SystemConfig) -> int:
    """Execute a parsed command"""
    try:
        return args.func(args, config)
    except VerificationError as e:
        logger.error(f"Command {args.command} failed: {e}")
        print(f"Error: {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    import sys
    from main import main
    sys.exit(main())
