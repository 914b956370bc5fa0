"""Configuration for breach notification delivery."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class DeliveryMethod(Enum):
    """Supported notification delivery methods."""
    WEBHOOK = "webhook"
    FILE_OUTPUT = "file_output"
    STDOUT = "stdout"


@dataclass(frozen=True)
class WebhookDeliveryConfig:
    """Configuration for HTTP webhook delivery (push relay, chat bot, etc.)."""
    url: str
    method: str = "POST"
    headers: Optional[dict[str, str]] = None
    timeout_seconds: int = 10


@dataclass(frozen=True)
class FileDeliveryConfig:
    """Configuration for file-based delivery."""
    output_path: str
    format: str = "jsonl"  # json, jsonl
    create_dirs: bool = True


@dataclass(frozen=True)
class StdoutDeliveryConfig:
    """Configuration for stdout delivery."""
    format: str = "pretty"  # json, pretty
    include_timestamp: bool = True


@dataclass(frozen=True)
class DeliveryDestination:
    """Single notification delivery destination."""
    name: str
    method: DeliveryMethod
    config: Any  # WebhookDeliveryConfig | FileDeliveryConfig | StdoutDeliveryConfig
    enabled: bool = True

    # Only deliver these severities; None delivers everything
    severities_filter: Optional[list[str]] = None


@dataclass(frozen=True)
class NotificationDeliveryConfig:
    """Complete notification delivery configuration."""
    destinations: list[DeliveryDestination] = field(default_factory=list)
    enabled: bool = True

    # Deliver on a background executor so metric refreshes never wait on I/O
    async_dispatch: bool = True
    max_workers: int = 2

    retry_attempts: int = 2
    retry_delay_seconds: float = 1.0
    retry_backoff: float = 2.0


def get_default_delivery_config() -> NotificationDeliveryConfig:
    """Pretty stdout delivery on a background executor."""
    return NotificationDeliveryConfig(destinations=[create_stdout_destination()])


def create_webhook_destination(
    name: str,
    url: str,
    headers: Optional[dict[str, str]] = None,
    enabled: bool = True,
    **kwargs
) -> DeliveryDestination:
    """Create webhook delivery destination."""
    return DeliveryDestination(
        name=name,
        method=DeliveryMethod.WEBHOOK,
        config=WebhookDeliveryConfig(
            url=url,
            headers=headers or {},
            **kwargs
        ),
        enabled=enabled
    )


def create_file_destination(
    name: str,
    output_path: str,
    format: str = "jsonl",
    enabled: bool = True,
    **kwargs
) -> DeliveryDestination:
    """Create file delivery destination."""
    return DeliveryDestination(
        name=name,
        method=DeliveryMethod.FILE_OUTPUT,
        config=FileDeliveryConfig(
            output_path=output_path,
            format=format,
            **kwargs
        ),
        enabled=enabled
    )


def create_stdout_destination(
    name: str = "stdout",
    format: str = "pretty",
    include_timestamp: bool = True,
    severities_filter: Optional[list[str]] = None
) -> DeliveryDestination:
    """Create stdout delivery destination."""
    return DeliveryDestination(
        name=name,
        method=DeliveryMethod.STDOUT,
        config=StdoutDeliveryConfig(
            format=format,
            include_timestamp=include_timestamp
        ),
        severities_filter=severities_filter
    )
