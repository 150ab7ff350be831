"""Content inspection engine boundary.

The service treats inspection as a single opaque call: diff text in,
verdict and warnings out. :class:`DetectSecretsEngine` fulfils that call
with Yelp's detect-secrets; anything with an ``inspect`` method of the same
shape can replace it.
"""

from __future__ import annotations

import threading
from typing import Protocol

from detect_secrets import SecretsCollection
from detect_secrets.settings import default_settings
from unidiff.errors import UnidiffParseError

from diffcheck_service.models.inspection import InspectionReport, InspectionWarning

SECRET_CATEGORY = "secret"

# Skips any file that is not present in the working directory
LOCAL_FILE_FILTER = "detect_secrets.filters.common.is_invalid_file"


class InspectionError(Exception):
    """Raised when a diff cannot be inspected at all."""

    pass


class InspectionEngine(Protocol):
    """Decides whether a diff contains sensitive material."""

    def inspect(self, diff: str) -> InspectionReport:
        """Inspect a unified diff.

        Raises:
            InspectionError: If the diff cannot be inspected.
        """
        ...


class DetectSecretsEngine:
    """Inspection backed by detect-secrets' default plugin set.

    detect-secrets keeps its plugin settings in process-global state that
    ``default_settings()`` swaps in and out, so scans are serialised on a
    lock owned by this adapter.
    """

    _settings_lock = threading.Lock()

    def inspect(self, diff: str) -> InspectionReport:
        """Scan the added lines of ``diff`` for secrets.

        Args:
            diff: Unified diff with file headers.

        Returns:
            InspectionReport; one warning per potential secret.

        Raises:
            InspectionError: If the diff cannot be parsed.
        """
        collection = SecretsCollection()
        try:
            with self._settings_lock, default_settings() as settings:
                # diff paths name files in the pushed repo, not on local disk
                settings.disable_filters(LOCAL_FILE_FILTER)
                collection.scan_diff(diff)
        except UnidiffParseError as e:
            raise InspectionError(f"Malformed diff: {e}") from e

        warnings = tuple(
            InspectionWarning(
                description=f"Potential {secret.type} in {filename}",
                category=SECRET_CATEGORY,
                line=secret.line_number,
            )
            for filename, secret in collection
        )

        return InspectionReport(passed=not warnings, warnings=warnings)
