"""Business logic layer for files app.

This package contains all business logic for the file hierarchy:
- Upload grants, file registration and deletion
- Folder creation, listing and deletion policies
- Reconciliation between metadata rows and stored blobs

All business logic should be implemented here, separate from
models (data layer), views (HTTP layer) and infrastructure
(external systems).
"""
