"""Configuration of the external impacted-test engine."""

from impactplane.engine.properties import (
    PROPERTY_PREFIX,
    EngineProperties,
    EngineSettings,
    emit_engine_properties,
    env_var_name,
)
from impactplane.engine.validation import (
    validate_engines,
    validate_impacted_config,
    validate_test_framework,
)

__all__ = [
    "PROPERTY_PREFIX",
    "EngineProperties",
    "EngineSettings",
    "emit_engine_properties",
    "env_var_name",
    "validate_engines",
    "validate_impacted_config",
    "validate_test_framework",
]
