"""
Catalog ingestion building blocks shared by the bulk import paths.

- `keys`: natural-key canonicalization
- `dedup`: last-occurrence-wins batch deduplication
- `precedence`: per-field merge policy (fallback vs authoritative)
- `upsert`: chunked, chunk-atomic upsert execution
"""
