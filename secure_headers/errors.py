"""Exception types for secure_headers.

Two failure kinds exist:

- `ConfigurationError`: raised while a configuration is being built, when a
  required value is missing or fails validation. It always names the
  offending parameter so start-up failures point straight at the bad call.
- `RenderInvariantViolation`: an enabled header has no sub-configuration,
  or a disabled header still carries one.
  This only happens if a `HeaderConfiguration` is assembled by hand,
  bypassing the builder, and should be treated as a bug.

Rendering has no other error path.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """A configuration value was rejected at build time.

    Attributes:
        parameter: Name of the argument that failed validation.
        reason: Human readable explanation.

    """

    def __init__(self, parameter: str, reason: str) -> None:
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Invalid value for '{parameter}': {reason}")


class RenderInvariantViolation(RuntimeError):
    """A header's enabled flag disagrees with its sub-configuration."""

    def __init__(
        self, header: str, reason: str = "is enabled but has no configuration attached"
    ) -> None:
        self.header = header
        super().__init__(f"Header '{header}' {reason}")
