import time
from typing import List, Optional, Tuple

from pydantic import BaseModel

from ..documents.preflight import validate_upload
from ..documents.processor import DocumentProcessor
from ..log import get_logger
from ..quality import gates
from ..quality.adequacy import AdequacyScorer
from ..quality.duplicates import detect_duplicate_content
from ..quality.merge import merge_research_sources
from ..retrieval.enrich import ContentEnricher
from ..schemas.documents import BatchDocumentStats, DocumentFailure, FileDescriptor, ProcessedDocument
from ..schemas.evidence import EnrichmentStats, Source
from ..schemas.outputs import AdequacyScore, DuplicatePair, MergeResult, MergeStats, VerificationReport

logger = get_logger("pipeline")

Upload = Tuple[FileDescriptor, bytes]


class ResearchBundle(BaseModel):
    sources: List[Source]
    enrichment: EnrichmentStats
    documents: BatchDocumentStats
    document_failures: List[DocumentFailure] = []
    adequacy: Optional[AdequacyScore] = None
    duplicates: List[DuplicatePair] = []
    merge: Optional[MergeStats] = None
    warnings: List[str] = []


class ResearchPipeline:
    """
    Runs the research stages for one request.
    It only reports; whether to generate on thin research or release a
    failed script is the caller's decision.
    """

    def __init__(self, enricher: Optional[ContentEnricher] = None,
                 processor: Optional[DocumentProcessor] = None,
                 scorer: Optional[AdequacyScorer] = None):
        self.enricher = enricher or ContentEnricher()
        self.processor = processor or DocumentProcessor()
        self.scorer = scorer or AdequacyScorer()

    async def enrich(self, sources: List[Source]):
        return await self.enricher.fetch_batch(sources)

    def ingest(self, uploads: List[Upload]) -> Tuple[List[Source], List[DocumentFailure], BatchDocumentStats]:
        accepted: List[Upload] = []
        failures: List[DocumentFailure] = []

        for file, data in uploads:
            preflight = validate_upload(file)
            if preflight.is_valid:
                accepted.append((file, data))
            else:
                logger.warning(f"Upload {file.file_name} rejected: {preflight.errors}")
                failures.append(DocumentFailure(
                    file_name=file.file_name,
                    error="; ".join(preflight.errors),
                    error_type="preflight",
                ))

        results, stats = self.processor.process_batch(accepted)
        sources = []
        now = time.time()
        for result in results:
            if isinstance(result, ProcessedDocument):
                sources.append(self.processor.to_source(result, now=now, sequence=len(sources)))
            else:
                failures.append(result)

        stats = stats.model_copy(update={"total": len(uploads), "failed": len(failures)})
        logger.info(f"Documents: {stats.successful}/{stats.total} ingested, {stats.total_words} words")
        return sources, failures, stats

    def merge(self, web_sources: List[Source], documents: List[Source]) -> MergeResult:
        return merge_research_sources(web_sources, documents)

    def assess(self, sources: List[Source], target_duration_seconds: float) -> Optional[AdequacyScore]:
        return self.scorer.score(sources, target_duration_seconds)

    def verify(self, generated_text: str) -> VerificationReport:
        report = gates.validate(generated_text)
        if not report.passed:
            logger.warning(f"Verification gate failed: {report.errors}")
        return report

    async def prepare(self, candidates: List[Source], uploads: List[Upload],
                      target_duration_seconds: float, merge: bool = False) -> ResearchBundle:
        logger.info(f"Preparing research: {len(candidates)} candidates, {len(uploads)} uploads")

        # 1. Fetch web content
        batch = await self.enrich(candidates)

        # 2. Ingest documents
        documents, failures, doc_stats = self.ingest(uploads)

        # 3. Combine; merging drops repeated content and reorders by trust
        merge_stats = None
        if merge:
            merged = self.merge(batch.sources, documents)
            sources, merge_stats = merged.sources, merged.stats
        else:
            sources = batch.sources + documents

        # 4. Adequacy
        adequacy = self.assess(sources, target_duration_seconds)
        if adequacy is None:
            logger.info("Adequacy check not applicable for short-form target")
        elif adequacy.status == "insufficient":
            logger.warning(f"Research insufficient: {[r.text for r in adequacy.recommendations]}")

        # 5. Overlap between sources
        duplicates = detect_duplicate_content(sources)
        if duplicates:
            logger.warning(f"{len(duplicates)} near-duplicate source pairs found")

        return ResearchBundle(
            sources=sources,
            enrichment=batch.stats,
            documents=doc_stats,
            document_failures=failures,
            adequacy=adequacy,
            duplicates=duplicates,
            merge=merge_stats,
            warnings=batch.warnings,
        )

pipeline = ResearchPipeline()
