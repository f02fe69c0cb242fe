"""Configuration port for the Orders API.

The application reads its Redis location, listing defaults and record
format through this protocol; adapters decide where the values come from.
"""

from __future__ import annotations

from typing import Protocol

from ..domain.models import ServiceConfiguration, ValidationResult


class ConfigurationPort(Protocol):
    """Source of the service's runtime settings."""

    def load_configuration(self) -> ServiceConfiguration:
        """Build the settings used at startup.

        The result carries the Redis URL and socket timeout, the default
        FindAll page size, the order id strategy, the stored record codec and
        the malformed-record policy for listings.

        Raises:
            ConfigurationException: If a value is missing, unparsable or rejected
        """
        ...

    def validate_configuration(self, config: ServiceConfiguration) -> ValidationResult:
        """Check settings that parse but are unsafe to run with.

        Errors make ``load_configuration`` fail; warnings (for example a
        localhost Redis in production) are only reported.
        """
        ...
