"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Custom storage backend (S3/MinIO/R2) issuing presigned URLs
- Storage key generation and name validation

Keep infrastructure concerns separate from business logic.
"""
