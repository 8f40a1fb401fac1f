# folio/version.py

from datetime import UTC, datetime

SERVICE_NAME = "folio-quotes"
SERVICE_VERSION = "0.3.0"
BUILD_TIME = datetime.now(UTC).isoformat()  # process start stands in for build time locally


def service_version_payload() -> dict:
    """Used by /version."""
    return {
        "service": f"{SERVICE_NAME}:{SERVICE_VERSION}",
        "service_version": SERVICE_VERSION,
        "build_time": BUILD_TIME,
    }
