"""
jvmdeps Repository
Introductory remarks: This module is part of the jvmdeps codebase.

Central configuration constants for the resolver and its repository client.
"""

from __future__ import annotations

# Resolution ----------------------------------------------------------------

DEFAULT_MAX_WORKERS = 8
"""Upper bound on concurrently running exploration units."""

# Repositories --------------------------------------------------------------

MAVEN_CENTRAL_URL = "https://repo.maven.apache.org/maven2"
"""Repository consulted when none is configured."""

DEFAULT_REPOSITORIES = (MAVEN_CENTRAL_URL,)

DEFAULT_HTTP_TIMEOUT = 30
"""Per-request timeout in seconds for descriptor downloads."""

DEFAULT_MAX_RETRIES = 2
"""Retries after the first attempt for transient transport failures."""

DEFAULT_RETRY_BACKOFF_SECONDS = 0.5
"""Linear backoff step between retries."""

DEFAULT_RATE_LIMIT = 20
"""Outbound repository requests allowed per second."""

USER_AGENT = "jvmdeps/0.2.0 (+https://pypi.org/project/jvmdeps/)"
