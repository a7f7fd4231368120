from .health_data import (
    EMPTY_RECORD_JSON,
    PROVIDER_RESOURCES,
    HealthDataAccessor,
    HealthDataConfig,
    HealthDataError,
    NoRecordAvailable,
    TransportFailure,
)
from .prompt_functions import PROMPT_FUNCTION_RESOURCES, register_prompt_functions
from .sanitizer import is_sanitized, remove_string_fields_and_arrays

__all__ = [
    "EMPTY_RECORD_JSON",
    "PROMPT_FUNCTION_RESOURCES",
    "PROVIDER_RESOURCES",
    "HealthDataAccessor",
    "HealthDataConfig",
    "HealthDataError",
    "NoRecordAvailable",
    "TransportFailure",
    "is_sanitized",
    "register_prompt_functions",
    "remove_string_fields_and_arrays",
]
