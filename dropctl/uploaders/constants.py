"""Shared constants for uploader modules."""

from dropctl.core.config import DEFAULT_CHUNK_SIZE, DEFAULT_SAMPLE_INTERVAL

# =============================================================================
# Transfer Defaults
# =============================================================================

# Bytes read from a source per chunk handed to the HTTP transport
CHUNK_SIZE = DEFAULT_CHUNK_SIZE

# Seconds between throughput samples
SAMPLE_INTERVAL = DEFAULT_SAMPLE_INTERVAL

# Stop the run at the first failed item
STOP_ON_ERROR = True

# =============================================================================
# Collection Defaults
# =============================================================================

# Children returned per directory listing page, matching what browsers hand
# out per readEntries() call
LISTING_BATCH_SIZE = 100
