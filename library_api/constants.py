"""
Application-level constants for hardcoded business logic.

These values represent core application behavior and should NEVER be changed
via environment variables or configuration.

For configurable values (connection pools, cache backend, default page size,
etc.), see library_api/settings.py.
"""

# ============================================================================
# Pagination Safety Limits
# ============================================================================

# First page served when the client does not ask for one
DEFAULT_PAGE = 1

# Maximum allowed page size to prevent unbounded responses.
# Larger client requests are capped, not rejected.
# For default page size, see library_api/settings.py (DEFAULT_PAGE_SIZE)
MAX_PAGE_SIZE = 100

# Primary keys are 32-bit INTEGER columns; ids outside this range match no row
MIN_ROW_ID = -(2**31)
MAX_ROW_ID = 2**31 - 1

# Highest page number whose offset ((page - 1) * MAX_PAGE_SIZE) still fits in
# a signed 64-bit OFFSET
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE


# ============================================================================
# Response Cache
# ============================================================================

# Operation name used to build book list cache keys ("getAllBooks-1-10")
BOOK_LIST_OPERATION = "getAllBooks"

# Tag carried by every cached book list page. Create, update and delete
# invalidate it.
BOOK_LIST_CACHE_TAG = "getAllBooksCache"

# Redis key namespaces for the redis cache backend
CACHE_ITEM_PREFIX = "cache:item"
CACHE_TAG_PREFIX = "cache:tag"


# ============================================================================
# Domain
# ============================================================================

# Author id resolved when a book payload carries no idAuthor. Never matches a
# row, so the book ends up without an author.
UNRESOLVED_AUTHOR_ID = -1

# Role tags
ROLE_USER = "ROLE_USER"
ROLE_ADMIN = "ROLE_ADMIN"

# Lifetime (seconds) reported for sessions of locally authenticated users
LOCAL_SESSION_TTL_SECONDS = 3600


# ============================================================================
# Logging
# ============================================================================

# Maximum size (bytes) of a single structured JSON log line
MAX_LOG_SIZE_BYTES = 64 * 1024

# Request header carrying the correlation id, and the length ids are cut to
CORRELATION_ID_HEADER = "X-Correlation-ID"
CORRELATION_ID_LENGTH = 8
