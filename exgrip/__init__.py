"""EXGRIP tool-holder combination search with 3D file links.

Submodules:
    models       — Pydantic schemas (QueryCriteria, CombinationRecord, ArtifactAccess)
    filters      — QueryCriteria → DynamoDB filter expression
    record_store — DynamoDB scan adapter and typed item decoding
    scanner      — paginated scan with throttling backoff
    paths        — STL/STEP object keys for a combination
    object_store — S3 existence checks and presigned URLs
    artifacts    — concurrent, bounded artifact resolution
    products     — Shopify product handle lookup
    pipeline     — orchestrator (filter → scan → artifacts → results)
    main         — FastAPI entry point
"""
