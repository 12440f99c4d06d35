"""Default chunking and aggregation constants."""

# Window overlap is max_seq_len // DEFAULT_OVERLAP_DIVISOR
DEFAULT_OVERLAP_DIVISOR = 10

# Aggregation weight of the opening window, which usually carries title and lead
DEFAULT_FIRST_CHUNK_WEIGHT = 1.2

# Aggregation weight of every window after the first
DEFAULT_CHUNK_WEIGHT = 1.0

# The aggregate is a mean of unit vectors and is not rescaled unless asked to
DEFAULT_NORMALIZE_OUTPUT = False
