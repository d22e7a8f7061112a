from prometheus_client import Counter, Histogram

# -------------------------
# HTTP
# -------------------------

HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["path", "method", "status"],
)

# -------------------------
# Vision collaborator
# -------------------------

VISION_REQUESTS_TOTAL = Counter(
    "vision_requests_total",
    "Total annotate calls to the vision service",
    ["provider", "result"],
)

VISION_ANNOTATE_SECONDS = Histogram(
    "vision_annotate_seconds",
    "Vision annotate latency in seconds",
    ["provider"],
)

# -------------------------
# Rendering + metadata writes
# -------------------------

METADATA_RENDERS_TOTAL = Counter(
    "metadata_renders_total",
    "Rendered metadata payloads",
    ["template", "result"],
)

METADATA_WRITES_TOTAL = Counter(
    "metadata_writes_total",
    "Metadata store writes",
    ["template", "result"],
)
