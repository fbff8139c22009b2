"""Prometheus metrics for monitoring.

Tracks request latency, GitHub API usage, analysis durations and
roadmap generation counts.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram, Info

# Application info
APP_INFO = Info("devpath_app", "DevPath application info")

# HTTP metrics
HTTP_REQUESTS_TOTAL = Counter(
    "devpath_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "devpath_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# GitHub API metrics
GITHUB_API_CALLS = Counter(
    "devpath_github_api_calls_total",
    "Total GitHub API calls",
    ["endpoint", "status"],
)

GITHUB_API_DURATION = Histogram(
    "devpath_github_api_duration_seconds",
    "GitHub API call duration",
    ["endpoint"],
)

GITHUB_CACHE_HITS = Counter(
    "devpath_github_cache_hits_total",
    "GitHub data cache hits",
)

GITHUB_CACHE_MISSES = Counter(
    "devpath_github_cache_misses_total",
    "GitHub data cache misses",
)

# Rate limiting
RATE_LIMIT_HITS = Counter(
    "devpath_rate_limit_hits_total",
    "Total rate limit hits",
    ["endpoint", "limit_type"],
)

# Inference metrics
ANALYSIS_DURATION = Histogram(
    "devpath_analysis_duration_seconds",
    "Rule-based profile analysis duration",
)

PROJECT_TYPES_ASSIGNED = Counter(
    "devpath_project_types_assigned_total",
    "Repository project types assigned",
    ["project_type"],
)

ROADMAPS_GENERATED = Counter(
    "devpath_roadmaps_generated_total",
    "Skill-gap roadmaps generated",
    ["role", "status"],
)
