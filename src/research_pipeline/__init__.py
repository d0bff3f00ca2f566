"""Research Pipeline - ingestion and verification of research material.

Turns untrusted URLs and uploaded documents into quality-scored sources,
judges whether they are adequate for a long-form target, and gates
generated scripts on their fact-checking documentation.

Components:
- retrieval: URL admissibility, resilient fetching, batch enrichment
- documents: upload preflight, text extraction, chunking and scoring
- quality: adequacy scoring, duplicate detection, verification gate
- pipeline: per-request orchestration of the stages above
"""
