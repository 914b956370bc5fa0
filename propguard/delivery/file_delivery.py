"""File-based notification delivery."""

import fcntl
import json
from datetime import datetime, timezone
from pathlib import Path

from ..config.notification_delivery import FileDeliveryConfig
from .base import (
    BaseNotificationDelivery,
    DeliveryResult,
    DeliveryStatus,
    Notification,
    NotificationDeliveryPermanentError,
)


class FileNotificationDelivery(BaseNotificationDelivery):
    """Appends notifications to a JSON or JSONL file."""

    def __init__(self, name: str, config: FileDeliveryConfig):
        super().__init__(name, config)
        self.config: FileDeliveryConfig = config
        self.output_path = Path(config.output_path)

        if config.create_dirs:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

        if config.format not in ("json", "jsonl"):
            raise NotificationDeliveryPermanentError(f"Unsupported format: {config.format}")

    def deliver(self, notifications: list[Notification]) -> list[DeliveryResult]:
        records = []
        for notification in notifications:
            record = notification.to_dict()
            record["delivered_at"] = datetime.now(timezone.utc).isoformat()
            records.append(record)

        try:
            if self.config.format == "json":
                self._write_json_format(records)
            else:
                self._write_jsonl_format(records)

        except OSError as e:
            self.logger.warning(
                "Notification file write failed",
                delivery_name=self.name,
                output_path=str(self.output_path),
                error=str(e)
            )
            return [DeliveryResult(
                status=DeliveryStatus.FAILED,
                message=f"File system error: {e}",
                error=e
            ) for _ in notifications]

        for notification in notifications:
            self.logger.debug(
                "Notification written to file",
                delivery_name=self.name,
                tag=notification.tag,
                output_path=str(self.output_path)
            )

        return [DeliveryResult(
            status=DeliveryStatus.SUCCESS,
            message=f"Written to {self.output_path}"
        ) for _ in notifications]

    def _write_json_format(self, records: list[dict]) -> None:
        """Rewrite the file as a single JSON array."""
        existing = []
        if self.output_path.exists():
            try:
                with open(self.output_path) as f:
                    existing = json.load(f)
                if not isinstance(existing, list):
                    existing = []
            except (OSError, json.JSONDecodeError):
                existing = []

        with open(self.output_path, "w") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            json.dump(existing + records, f, indent=2, default=str)

    def _write_jsonl_format(self, records: list[dict]) -> None:
        """Append one JSON object per line."""
        with open(self.output_path, "a") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            for record in records:
                json.dump(record, f, default=str)
                f.write("\n")

    def health_check(self) -> bool:
        """Check if the output directory is writable."""
        try:
            test_file = self.output_path.parent / ".health_check_test"
            test_file.write_text("test")
            test_file.unlink()
            return True
        except OSError as e:
            self.logger.warning(
                "Health check failed",
                delivery_name=self.name,
                error=str(e)
            )
            return False
