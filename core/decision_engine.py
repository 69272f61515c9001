# core/decision_engine.py

"""
Genuine / forged decision for uploaded document images.

The engine runs a single pass per upload:

1. empty corpus        -> bootstrap policy
2. exact name match    -> genuine
3. fraud keyword/path  -> forged
4. perceptual hash comparison against every reference
5. fusion of the combined similarity with the filename signals

Anything that goes wrong along the way turns into a forged verdict; the
engine never raises to its caller.
"""

import logging
import time
from pathlib import Path
from typing import List, Optional, Union

from config import VerificationConfig
from core.batch_processor import BatchProcessor
from core.corpus import CorpusIndex, ReferenceImage
from core.database import FingerprintCache
from core.deadline import Deadline
from core.errors import (ComparisonFailed, DeadlineExceeded, IOFailure,
                         VerificationError)
from core.perceptual_hash import ImageFingerprint, PerceptualHasher
from core.signals import SignalCollector, Signals
from core.similarity import SimilarityScorer
from core.verdict import ComparisonResult, Evidence, Rule, Verdict

logger = logging.getLogger(__name__)


class DecisionEngine:
    """
    Compares uploads against a directory of genuine references
    """

    def __init__(self,
                 corpus_dir: Union[str, Path],
                 config: Optional[VerificationConfig] = None,
                 cache: Optional[FingerprintCache] = None):
        self.config = config or VerificationConfig()
        self.corpus = CorpusIndex(corpus_dir)
        self.cache = cache if self.config.use_cache else None

        self.hasher = PerceptualHasher(hash_size=self.config.hash_size)
        self.scorer = SimilarityScorer(
            hash_weight=self.config.hash_weight,
            size_weight=self.config.size_weight
        )
        self.signal_collector = SignalCollector(self.config.fraud_path_markers)
        self.batch_processor = BatchProcessor(n_workers=self.config.n_workers)

    def verify(self,
               upload_bytes: bytes,
               original_filename: str,
               storage_path: str = "",
               deadline: Optional[Deadline] = None) -> Verdict:
        """
        Decide whether an upload is genuine.

        Args:
            upload_bytes: Encoded image as received
            original_filename: Name the client submitted the file under
            storage_path: Where the upload receiver stored the file
            deadline: Optional time budget for the whole call

        Returns:
            Verdict; failures resolve to a forged verdict with similarity 0
        """
        start = time.perf_counter()
        deadline = deadline or Deadline.never()
        signals = self.signal_collector.collect(original_filename, storage_path)

        try:
            verdict = self._decide(upload_bytes, original_filename, signals, deadline)
        except DeadlineExceeded as e:
            logger.warning(f"Deadline exceeded for {original_filename}: {e}")
            verdict = self._forged(f"deadline exceeded: {e}", Rule.DEADLINE_EXCEEDED, signals)
        except VerificationError as e:
            logger.error(f"Verification of {original_filename} failed: {e}")
            verdict = self._forged(f"processing error: {e}", Rule.PROCESSING_ERROR, signals)
        except Exception as e:
            logger.exception(f"Unexpected error verifying {original_filename}")
            verdict = self._forged(f"processing error: {e}", Rule.PROCESSING_ERROR, signals)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Verdict for {original_filename}: "
            f"{'FORGED' if verdict.is_forged else 'GENUINE'} "
            f"similarity={verdict.similarity:.1f} rule={verdict.evidence.rule.value} "
            f"({elapsed_ms:.1f} ms)"
        )
        return verdict

    def _decide(self, upload_bytes: bytes, original_filename: str,
                signals: Signals, deadline: Deadline) -> Verdict:
        self.config.validate()

        references = self.corpus.list_references()

        # 1. Empty corpus
        if not references:
            return self._bootstrap(upload_bytes, original_filename, signals)

        # 2. Exact filename match outranks every keyword signal
        upload_stem = Path(original_filename or "").stem
        exact = self.corpus.find_by_stem(upload_stem, references) if upload_stem else None
        if exact is not None:
            logger.info(f"EXACT MATCH: {original_filename} matches reference {exact.name}")
            return Verdict(
                is_forged=False,
                similarity=100.0,
                best_match=exact.name,
                reason="Exact filename match with a genuine document",
                evidence=self._evidence(Rule.EXACT_NAME, signals,
                                        references_compared=len(references))
            )

        # 3. Fraud keywords or a known-forgery storage location
        if signals.fraud_signal:
            logger.info(f"STRONG EVIDENCE: fraud signal for {original_filename}")
            return self._forged(self._fraud_reason(signals), Rule.FRAUD_SIGNAL, signals)

        # 4. Pixel comparison
        deadline.check("upload hashing")
        upload_fp = self.hasher.hash(upload_bytes)
        comparisons = self.compare(upload_fp, references, deadline)
        best = self.best_match(comparisons)

        size_score = self.scorer.size_similarity(len(upload_bytes), best.reference.size_bytes)
        combined = self.scorer.combined_similarity(best.hash_similarity, size_score)

        # 5. Fusion
        return self._fuse(combined, best, size_score, signals, len(references))

    def _bootstrap(self, upload_bytes: bytes, original_filename: str,
                   signals: Signals) -> Verdict:
        if not signals.trusted_genuine:
            logger.info("No genuine images found for comparison")
            return self._forged("no references available", Rule.NO_REFERENCES, signals)

        # Only a decodable image may seed the corpus
        self.hasher.hash(upload_bytes)

        reference = self.corpus.add_reference(upload_bytes, Path(original_filename).name)
        logger.info(f"Corpus was empty; registered {reference.name} as first reference")
        return Verdict(
            is_forged=False,
            similarity=100.0,
            best_match=reference.name,
            reason="added as first reference",
            evidence=self._evidence(Rule.BOOTSTRAP_REGISTERED, signals)
        )

    def compare(self, upload_fp: ImageFingerprint,
                references: List[ReferenceImage],
                deadline: Optional[Deadline] = None) -> List[ComparisonResult]:
        """Hash similarity against every reference, in corpus order"""

        def compare_one(reference: ReferenceImage) -> ComparisonResult:
            try:
                reference_fp = self.reference_fingerprint(reference)
            except VerificationError as e:
                raise ComparisonFailed(reference.name, e) from e
            return ComparisonResult(
                reference=reference,
                hash_similarity=self.scorer.hash_similarity(upload_fp, reference_fp)
            )

        return self.batch_processor.map_ordered(
            compare_one, references, deadline=deadline, desc="Comparing references"
        )

    @staticmethod
    def best_match(comparisons: List[ComparisonResult]) -> ComparisonResult:
        """Highest hash similarity; ties go to the earliest reference"""
        best = comparisons[0]
        for comparison in comparisons[1:]:
            if comparison.hash_similarity > best.hash_similarity:
                best = comparison
        return best

    def reference_fingerprint(self, reference: ReferenceImage) -> ImageFingerprint:
        """Fingerprint of a reference, through the cache when enabled"""
        if self.cache is None:
            return self.hasher.hash_file(reference.path)

        try:
            stat = reference.path.stat()
        except OSError as e:
            raise IOFailure(f"Cannot stat {reference.name}: {e}") from e

        key = str(reference.path.resolve())
        cached = self.cache.get(key, stat.st_size, stat.st_mtime, self.hasher.hash_size)
        if cached is not None:
            return cached

        fingerprint = self.hasher.hash_file(reference.path)
        self.cache.put(key, stat.st_size, stat.st_mtime, self.hasher.hash_size, fingerprint)
        return fingerprint

    def _fuse(self, combined: float, best: ComparisonResult, size_score: float,
              signals: Signals, references_compared: int) -> Verdict:
        threshold = self.config.similarity_threshold
        # The forgery cut-off never rises above the genuineness threshold
        pixel_threshold = min(self.config.pixel_forgery_threshold, threshold)

        is_genuine = combined >= threshold or signals.genuine_hint

        if signals.fraud_signal:
            is_genuine = False
            rule = Rule.FRAUD_SIGNAL
            reason = self._fraud_reason(signals)
        elif combined < pixel_threshold:
            is_genuine = False
            rule = Rule.PIXEL_FORGERY
            reason = (f"Similarity ({combined:.1f}%) below pixel forgery "
                      f"threshold ({pixel_threshold:g}%)")
        elif combined >= threshold:
            rule = Rule.SIMILARITY
            reason = f"High similarity ({combined:.1f}%) with genuine document"
        elif is_genuine:
            rule = Rule.GENUINE_HINT
            reason = (f"Filename indicates a genuine document; similarity "
                      f"({combined:.1f}%) below threshold ({threshold:g}%)")
        else:
            rule = Rule.BELOW_THRESHOLD
            reason = f"Similarity ({combined:.1f}%) below threshold ({threshold:g}%)"

        return Verdict(
            is_forged=not is_genuine,
            similarity=combined,
            best_match=best.reference.name,
            reason=reason,
            evidence=self._evidence(
                rule, signals,
                hash_similarity=best.hash_similarity,
                size_similarity=size_score,
                references_compared=references_compared
            )
        )

    @staticmethod
    def _fraud_reason(signals: Signals) -> str:
        if signals.fraud_path_hint:
            return "fraud signal: file is located in a directory known to contain forged documents"
        return "fraud signal: filename contains fraud-related keywords"

    @staticmethod
    def _evidence(rule: Rule, signals: Signals, **scores) -> Evidence:
        return Evidence(
            rule=rule,
            genuine_hint=signals.genuine_hint,
            fraud_hint=signals.fraud_hint,
            fraud_path_hint=signals.fraud_path_hint,
            **scores
        )

    def _forged(self, reason: str, rule: Rule, signals: Signals) -> Verdict:
        return Verdict(
            is_forged=True,
            similarity=0.0,
            reason=reason,
            evidence=self._evidence(rule, signals)
        )


def verify(upload_bytes: bytes,
           original_filename: str,
           storage_path: str,
           corpus_dir: Union[str, Path],
           config: Optional[VerificationConfig] = None,
           deadline: Optional[Deadline] = None,
           cache: Optional[FingerprintCache] = None) -> Verdict:
    """Verify one upload against the references in corpus_dir"""
    try:
        engine = DecisionEngine(corpus_dir, config=config, cache=cache)
    except Exception as e:
        logger.exception(f"Cannot set up verification of {original_filename}")
        return Verdict(
            is_forged=True,
            similarity=0.0,
            reason=f"processing error: {e}",
            evidence=Evidence(rule=Rule.PROCESSING_ERROR)
        )
    return engine.verify(upload_bytes, original_filename, storage_path, deadline=deadline)
