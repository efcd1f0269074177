"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ContractError(PipelineError):
    """Raised when the processed snapshot breaks its output contract."""

    error_code = "CONTRACT_ERROR"


class StageError(PipelineError):
    """Raised for stage failures that abort the run."""

    error_code = "STAGE_ERROR"


class CatalogFetchError(StageError):
    """Raised when the school unit listing cannot be paged to completion."""

    error_code = "CATALOG_FETCH_ERROR"


class RawDataMissingError(PipelineError):
    """Raised when processing is requested before a raw snapshot exists."""

    error_code = "RAW_DATA_MISSING"
