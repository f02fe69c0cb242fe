"""Configuration adapter implementation.

Concrete implementation of the ConfigurationPort interface.
Loads configuration from environment variables.
"""

from __future__ import annotations

import os

from ..domain.exceptions import ConfigurationException
from ..domain.models import ServiceConfiguration, ValidationIssue, ValidationLevel, ValidationResult
from ..ports.configuration import ConfigurationPort

TRUE_VALUES = ("1", "true", "yes", "on")


class EnvironmentConfigurationAdapter(ConfigurationPort):
    """Adapter that loads configuration from environment variables."""

    def load_configuration(self) -> ServiceConfiguration:
        """Load service configuration from environment variables.

        Returns:
            ServiceConfiguration: Validated configuration

        Raises:
            ConfigurationException: If configuration is invalid
        """
        try:
            redis_addr = os.getenv("REDIS_ADDR", "localhost:6379")
            redis_url = os.getenv("REDIS_URL", f"redis://{redis_addr}")
            server_port = int(os.getenv("SERVER_PORT", "3000"))
            log_level = os.getenv("LOG_LEVEL", "INFO").upper()
            environment = os.getenv("ENVIRONMENT", "development").lower()
            page_size = int(os.getenv("PAGE_SIZE", "50"))
            store_timeout_seconds = float(os.getenv("STORE_TIMEOUT_SECONDS", "5.0"))
            order_id_strategy = os.getenv("ORDER_ID_STRATEGY", "sequence").lower()
            order_codec = os.getenv("ORDER_CODEC", "json").lower()
            skip_malformed_orders = (
                os.getenv("SKIP_MALFORMED_ORDERS", "false").lower() in TRUE_VALUES
            )

            config = ServiceConfiguration(
                redis_url=redis_url,
                server_port=server_port,
                log_level=log_level,
                environment=environment,
                page_size=page_size,
                store_timeout_seconds=store_timeout_seconds,
                order_id_strategy=order_id_strategy,
                order_codec=order_codec,
                skip_malformed_orders=skip_malformed_orders,
            )

            validation_result = self.validate_configuration(config)
            if not validation_result.is_valid:
                error_messages = [
                    issue.message
                    for issue in validation_result.get_issues_by_level(ValidationLevel.ERROR)
                ]
                raise ConfigurationException(
                    f"Configuration validation failed: {'; '.join(error_messages)}"
                )
            return config

        except ConfigurationException:
            raise
        except Exception as e:
            raise ConfigurationException(f"Failed to load configuration: {str(e)}") from e

    def validate_configuration(self, config: ServiceConfiguration) -> ValidationResult:
        """Validate a configuration object.

        Args:
            config: Configuration to validate

        Returns:
            ValidationResult: Result with validation status and any issues
        """
        result = ValidationResult(context="ServiceConfiguration")

        # Check port privileges
        if config.server_port < 1024 and hasattr(os, "getuid") and os.getuid() != 0:
            result.add_issue(
                ValidationIssue(
                    level=ValidationLevel.ERROR,
                    category="CONFIG",
                    message=f"Port {config.server_port} requires root privileges",
                    resolution="Use a port >= 1024 or run with root privileges",
                    details={"port": config.server_port, "uid": os.getuid()},
                )
            )

        if config.environment == "production":
            for host in ("localhost", "127.0.0.1"):
                if host in config.redis_url:
                    result.add_issue(
                        ValidationIssue(
                            level=ValidationLevel.WARNING,
                            category="REDIS",
                            message=f"Production environment is using {host} for Redis",
                            resolution="Point REDIS_URL at the production Redis server",
                            details={"host": host, "redis_url": config.redis_url},
                        )
                    )

        if config.order_id_strategy == "random" and config.environment == "production":
            result.add_issue(
                ValidationIssue(
                    level=ValidationLevel.WARNING,
                    category="CONFIG",
                    message="Random order ids can collide and rely on insert retries",
                    resolution="Use ORDER_ID_STRATEGY=sequence",
                )
            )

        # Add diagnostic information
        result.diagnostics["environment"] = config.environment
        result.diagnostics["redis_url"] = config.redis_url
        result.diagnostics["server_port"] = config.server_port

        return result
