"""Runtime settings from environment variables and CLI flags."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

ENV_JAVA_HOME = "MAVEN_BUILD_JAVA_HOME"
ENV_SKIP_TESTS = "MAVEN_BUILD_SKIP_TESTS"
ENV_LOG_DIR = "MAVEN_BUILD_LOG_DIR"
ENV_OUTPUT_CAP = "MAVEN_BUILD_OUTPUT_CAP"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class BuildSettings:
    """Defaults applied to new transformation sessions."""

    java_home: str | None = None
    skip_tests: bool = False
    log_dir: str | None = None
    output_cap: int | None = None  # None: runner default

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BuildSettings:
        """Read settings from the environment.

        Raises:
            ValueError: If MAVEN_BUILD_OUTPUT_CAP is not a positive integer
        """
        env = os.environ if environ is None else environ
        output_cap = None
        if env.get(ENV_OUTPUT_CAP):
            output_cap = int(env[ENV_OUTPUT_CAP])
            if output_cap <= 0:
                raise ValueError(f"{ENV_OUTPUT_CAP} must be positive: {output_cap}")
        return cls(
            java_home=env.get(ENV_JAVA_HOME) or None,
            skip_tests=env.get(ENV_SKIP_TESTS, "").strip().lower() in _TRUE_VALUES,
            log_dir=env.get(ENV_LOG_DIR) or None,
            output_cap=output_cap,
        )

    def with_overrides(
        self,
        java_home: str | None = None,
        skip_tests: bool | None = None,
        log_dir: str | None = None,
    ) -> BuildSettings:
        """Return a copy with CLI values applied over these settings."""
        return replace(
            self,
            java_home=java_home if java_home is not None else self.java_home,
            skip_tests=skip_tests if skip_tests is not None else self.skip_tests,
            log_dir=log_dir if log_dir is not None else self.log_dir,
        )
