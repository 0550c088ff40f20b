"""Central versioning and schema constants for the ingestion pipeline."""

__all__ = ["__version__", "CONFIG_SCHEMA_VERSION"]

#: Semantic version of this codebase (bump using SemVer).
__version__ = "0.3.0"

#: Configuration schema version (increment if breaking changes to config format).
#: v2 moved the per-field selector overrides under a single ``selectors`` mapping.
CONFIG_SCHEMA_VERSION = 2
