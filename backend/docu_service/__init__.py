"""Document service backend: ingestion job lifecycle, worker dispatch and reconciliation."""
