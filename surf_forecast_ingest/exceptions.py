"""
Error types raised by the forecast ingestion pipeline.

Provider errors are scoped to one (spot, provider) call. The orchestrator
turns them into spot-level failures: fatal for the marine series, a soft
degradation for the weather series.
"""
from typing import Any, Dict, Optional


class IngestionError(Exception):
    """Base class for all ingestion errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INGESTION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ProviderError(IngestionError):
    """A provider call did not produce a usable series."""

    def __init__(
        self,
        message: str,
        provider: str,
        error_code: str = "PROVIDER_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)
        self.provider = provider


class ProviderUnavailable(ProviderError):
    """Network, HTTP status or timeout failure talking to a provider."""

    def __init__(self, message: str, provider: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, provider, "PROVIDER_UNAVAILABLE", details)


class MalformedResponse(ProviderError):
    """Provider answered, but the payload is not a valid hourly series."""

    def __init__(self, message: str, provider: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, provider, "MALFORMED_RESPONSE", details)


class SpotIngestionError(IngestionError):
    """Failure attributed to a single spot within a run."""

    def __init__(
        self,
        message: str,
        spot_id: str,
        error_code: str = "SPOT_INGESTION_ERROR",
        cause: Optional[BaseException] = None,
    ):
        details = {"spot_id": spot_id}
        if cause is not None:
            details["cause"] = str(cause)
        super().__init__(message, error_code, details)
        self.spot_id = spot_id
        self.cause = cause


class PrimarySeriesFailure(SpotIngestionError):
    """The marine series could not be fetched; the spot is skipped for this run."""

    def __init__(self, spot_id: str, cause: ProviderError):
        super().__init__(
            f"Marine series unavailable for spot {spot_id}: {cause.message}",
            spot_id,
            "PRIMARY_SERIES_FAILURE",
            cause,
        )


class SecondarySeriesFailure(SpotIngestionError):
    """The weather series could not be fetched; wind fields degrade to null."""

    def __init__(self, spot_id: str, cause: ProviderError):
        super().__init__(
            f"Weather series unavailable for spot {spot_id}: {cause.message}",
            spot_id,
            "SECONDARY_SERIES_FAILURE",
            cause,
        )


class StoreWriteFailure(SpotIngestionError):
    """A spot's batch could not be written to the forecast store."""

    def __init__(self, spot_id: str, attempts: int, cause: Optional[BaseException] = None):
        super().__init__(
            f"Forecast store write failed for spot {spot_id} after {attempts} attempt(s)",
            spot_id,
            "STORE_WRITE_FAILURE",
            cause,
        )
        self.attempts = attempts


class IngestionAlreadyRunning(IngestionError):
    """A run was requested while another run is still in progress."""

    def __init__(self, message: str = "An ingestion run is already in progress"):
        super().__init__(message, "INGESTION_ALREADY_RUNNING")
