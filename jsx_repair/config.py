"""
Configuration module - settings and fixed lookup tables for the pipeline.

Two kinds of configuration live here:
1. Settings: runtime switches loaded by pydantic-settings from environment
   variables (prefix JSX_REPAIR_) and an optional .env file.
2. RepairTables: the immutable naming conventions and substitution maps the
   repair stages consult. Built once per process (DEFAULT_TABLES) and passed
   by reference; tests swap in their own instance via with_overrides().
"""

import logging
import re
import sys
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Pipeline settings loaded from environment variables.

    Pydantic-settings resolution order:
    1. Environment variables (highest priority), e.g. JSX_REPAIR_CHECKER_STRICT=true
    2. .env file values
    3. Defaults below
    """

    model_config = SettingsConfigDict(
        env_prefix="JSX_REPAIR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------------------------------------------------------------------------
    # PIPELINE SWITCHES
    # ---------------------------------------------------------------------------
    # STRIP_MARKDOWN: extract the code block when generator output is fenced
    STRIP_MARKDOWN: bool = True

    # VERIFY_IMPORTS: check local alias imports on disk when a project root is given
    VERIFY_IMPORTS: bool = True

    # ---------------------------------------------------------------------------
    # TYPE CHECKER
    # ---------------------------------------------------------------------------
    # CHECKER_JSX: accept JSX markup (disable only for plain .ts modules)
    CHECKER_JSX: bool = True

    # CHECKER_STRICT: report implicit-any parameters
    CHECKER_STRICT: bool = False

    # ---------------------------------------------------------------------------
    # LOGGING
    # ---------------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the level name and reject unknown ones."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v!r}")
        return level


settings = Settings()


def _framework_imports() -> Mapping[str, Tuple[str, bool]]:
    # identifier -> (module path, is default import)
    return MappingProxyType({
        "React": ("react", True),
        "Link": ("next/link", True),
        "Image": ("next/image", True),
        "Script": ("next/script", True),
    })


@dataclass(frozen=True)
class RepairTables:
    """
    Fixed configuration tables consulted by the repair stages.

    Every field is immutable (str, tuple, frozenset, mappingproxy), so one
    instance can be shared by concurrent validate() calls without locking.
    """

    # Import synthesis
    component_alias: str = "@/components/ui"
    """Directory alias synthesized component imports are rooted under."""

    local_alias_prefix: str = "@/"
    """Prefix marking project-local imports for on-disk verification."""

    candidate_suffixes: Tuple[str, ...] = (".tsx", ".ts", "/index.tsx", "/index.ts")
    """Suffixes tried, in order, when resolving a local import on disk."""

    framework_imports: Mapping[str, Tuple[str, bool]] = field(default_factory=_framework_imports)
    """Known framework components and the module each is imported from."""

    # Client directive
    client_directive: str = "use client"
    hook_pattern: str = r"^use[A-Z]"
    event_handler_pattern: str = r"^on[A-Z]"
    browser_globals: FrozenSet[str] = frozenset(
        {"window", "document", "localStorage", "sessionStorage", "navigator"}
    )

    # Metadata
    metadata_identifier: str = "metadata"
    metadata_fields: FrozenSet[str] = frozenset(
        {"title", "description", "keywords", "applicationName"}
    )

    # Namespace remapping, first matching rule wins
    namespace_map: Tuple[Tuple[str, str], ...] = (
        ("@/components/magicui/", "@/components/ui/"),
        ("@/components/aceternity/", "@/components/ui/"),
        ("magicui", "@/components/ui"),
        ("aceternity", "@/components/ui"),
    )

    # Modules a client component must never import
    server_only_modules: FrozenSet[str] = frozenset({
        "fs", "path", "child_process", "os", "net", "http", "https",
        "tailwindcss", "postcss", "webpack", "next/config",
    })

    def with_overrides(self, **changes) -> "RepairTables":
        """Copy of these tables with some fields replaced."""
        return replace(self, **changes)

    def synthesized_path(self, identifier: str) -> str:
        """
        Module path for a synthesized component import.

        Each internal uppercase letter starts a new hyphen segment:
        StatCard -> @/components/ui/stat-card
        """
        hyphenated = re.sub(r"(?<!^)([A-Z])", r"-\1", identifier).lower()
        return f"{self.component_alias}/{hyphenated}"

    @property
    def client_directive_literals(self) -> Tuple[str, str]:
        """Both quotings of the pragma, for raw substring checks."""
        return (f"'{self.client_directive}'", f'"{self.client_directive}"')


DEFAULT_TABLES = RepairTables()


def configure_logging(level: str = None) -> logging.Logger:
    """
    Install a stdout handler on the package logger if none exists.

    Library code only creates loggers; call this from the host process.
    """
    logger = logging.getLogger("jsx_repair")
    logger.setLevel(level or settings.LOG_LEVEL)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
