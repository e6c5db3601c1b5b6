"""
Core Module - Constants.

============================================================
RESPONSIBILITY
============================================================
Defines all indexer-wide constants.

- Provides single source of truth for magic values
- Keeps entity key formats in one place
- Prevents hardcoding throughout codebase

============================================================
"""

# ============================================================
# ADDRESSES AND FIXED-WIDTH VALUES
# ============================================================

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

TAG_WIDTH_BYTES = 32

ADDRESS_HEX_LENGTH = 42

# ============================================================
# WELL-KNOWN ENTITY KEYS
# ============================================================

GLOBAL_STATS_ID = "global"

KEY_SEPARATOR = ":"

# ============================================================
# SCORE HISTOGRAM
# ============================================================

# Inclusive upper bound of each bucket: 0-20, 21-40, 41-60, 61-80, 81-100
SCORE_BUCKET_UPPER_BOUNDS = (20, 40, 60, 80)

MIN_SCORE = 0
MAX_SCORE = 100

# Significant digits kept by running means (decimal128)
DECIMAL_PRECISION = 34

# ============================================================
# URI TYPES
# ============================================================

URI_TYPE_IPFS = "ipfs"
URI_TYPE_ARWEAVE = "arweave"
URI_TYPE_UNKNOWN = "unknown"

# ============================================================
# OFF-CHAIN FETCH CONTEXT KEYS
# ============================================================

CONTEXT_AGENT_ID = "agentId"
CONTEXT_FEEDBACK_ID = "feedbackId"
CONTEXT_CID = "cid"
CONTEXT_TX_HASH = "txHash"
CONTEXT_TIMESTAMP = "timestamp"
CONTEXT_TAG1 = "tag1OnChain"
CONTEXT_TAG2 = "tag2OnChain"
