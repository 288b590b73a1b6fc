"""Settings for the files app (presigned URLs, deletion policy, sweeps)."""

from server.settings.components import config

# Lifetime of every presigned upload and download URL, in seconds
FILES_PRESIGNED_URL_EXPIRY = config(
    'FILES_PRESIGNED_URL_EXPIRY',
    cast=int,
    default=3600,
)

# Thread pool size used to presign download URLs while listing a folder
FILES_PRESIGN_MAX_WORKERS = config(
    'FILES_PRESIGN_MAX_WORKERS',
    cast=int,
    default=8,
)

# Check that the blob exists before registering file metadata
FILES_VERIFY_UPLOADS = config('FILES_VERIFY_UPLOADS', cast=bool, default=False)

# One of: orphan, reject, cascade
FILES_FOLDER_DELETE_POLICY = config(
    'FILES_FOLDER_DELETE_POLICY',
    default='orphan',
)

# Blobs without metadata younger than this are uploads still in flight
FILES_ORPHAN_BLOB_GRACE = config(
    'FILES_ORPHAN_BLOB_GRACE',
    cast=int,
    default=3600,
)
