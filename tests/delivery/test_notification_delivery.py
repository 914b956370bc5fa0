"""Tests for notification delivery and dispatch."""

import json
import os
import shutil
import tempfile
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from propguard.config.notification_delivery import (
    DeliveryDestination,
    DeliveryMethod,
    FileDeliveryConfig,
    NotificationDeliveryConfig,
    StdoutDeliveryConfig,
    WebhookDeliveryConfig,
    create_file_destination,
    create_stdout_destination,
    create_webhook_destination,
    get_default_delivery_config,
)
from propguard.delivery import (
    DeliveryStatus,
    FileNotificationDelivery,
    Notification,
    NotificationDeliveryPermanentError,
    NotificationDeliveryRetryableError,
    NotificationDispatcher,
    StdoutNotificationDelivery,
    WebhookNotificationDelivery,
)
from propguard.errors import DeliveryError


def make_notification(**overrides) -> Notification:
    values = dict(
        title="Main - CRITICAL",
        body="Daily drawdown at 95.0%. $25 remaining.",
        tag="Daily_90",
        require_interaction=True,
        severity="critical",
        account_id="acct-1",
    )
    values.update(overrides)
    return Notification(**values)


class TestStdoutDelivery:
    """Test stdout delivery."""

    def test_pretty_output(self, capsys):
        delivery = StdoutNotificationDelivery("stdout", StdoutDeliveryConfig(format="pretty", include_timestamp=False))

        results = delivery.deliver([make_notification()])

        assert results[0].status == DeliveryStatus.SUCCESS
        assert capsys.readouterr().out.splitlines()[0] == "Main - CRITICAL: Daily drawdown at 95.0%. $25 remaining."

    def test_json_output(self, capsys):
        delivery = StdoutNotificationDelivery("stdout", StdoutDeliveryConfig(format="json", include_timestamp=True))

        delivery.deliver([make_notification()])
        payload = json.loads(capsys.readouterr().out.splitlines()[0])

        assert payload["tag"] == "Daily_90"
        assert payload["require_interaction"] is True
        assert "stdout_timestamp" in payload


class TestFileDelivery:
    """Test file delivery."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_jsonl_appends(self):
        path = os.path.join(self.temp_dir, "out", "alerts.jsonl")
        delivery = FileNotificationDelivery("file", FileDeliveryConfig(output_path=path))

        delivery.deliver([make_notification()])
        delivery.deliver([make_notification(tag="Daily_50", severity="warning")])

        with open(path) as f:
            lines = [json.loads(line) for line in f]
        assert [line["tag"] for line in lines] == ["Daily_90", "Daily_50"]
        assert "delivered_at" in lines[0]

    def test_json_array(self):
        path = os.path.join(self.temp_dir, "alerts.json")
        delivery = FileNotificationDelivery("file", FileDeliveryConfig(output_path=path, format="json"))

        delivery.deliver([make_notification()])
        delivery.deliver([make_notification(tag="Total_75")])

        with open(path) as f:
            data = json.load(f)
        assert [item["tag"] for item in data] == ["Daily_90", "Total_75"]

    def test_unsupported_format(self):
        with pytest.raises(NotificationDeliveryPermanentError):
            FileNotificationDelivery("file", FileDeliveryConfig(
                output_path=os.path.join(self.temp_dir, "x.csv"), format="csv"
            ))

    def test_write_failure_reported(self):
        path = os.path.join(self.temp_dir, "alerts.jsonl")
        delivery = FileNotificationDelivery("file", FileDeliveryConfig(output_path=path))

        with patch("builtins.open", side_effect=OSError("read-only file system")):
            results = delivery.deliver([make_notification()])

        assert results[0].status == DeliveryStatus.FAILED

    def test_health_check(self):
        delivery = FileNotificationDelivery("file", FileDeliveryConfig(
            output_path=os.path.join(self.temp_dir, "alerts.jsonl")
        ))
        assert delivery.health_check() is True


class TestWebhookDelivery:
    """Test webhook delivery."""

    def setup_method(self):
        self.config = WebhookDeliveryConfig(url="https://push.example.com/notify", headers={"X-Key": "k"})
        self.delivery = WebhookNotificationDelivery("push", self.config)

    def test_invalid_url(self):
        with pytest.raises(NotificationDeliveryPermanentError):
            WebhookNotificationDelivery("push", WebhookDeliveryConfig(url="not-a-url"))

    @patch("propguard.delivery.webhook_delivery.urlopen")
    def test_successful_post(self, mock_urlopen):
        response = MagicMock()
        response.getcode.return_value = 200
        response.read.return_value = b"ok"
        mock_urlopen.return_value.__enter__.return_value = response

        results = self.delivery.deliver([make_notification()])

        assert results[0].status == DeliveryStatus.SUCCESS
        request = mock_urlopen.call_args.args[0]
        assert json.loads(request.data)["tag"] == "Daily_90"
        assert request.get_header("X-key") == "k"

    @patch("propguard.delivery.webhook_delivery.urlopen")
    def test_client_error_is_permanent(self, mock_urlopen):
        mock_urlopen.side_effect = HTTPError(self.config.url, 400, "Bad Request", {}, None)

        results = self.delivery.deliver_with_retry([make_notification()], max_retries=3, retry_delay=0)

        assert results[0].status == DeliveryStatus.FAILED
        assert mock_urlopen.call_count == 1

    @patch("propguard.delivery.webhook_delivery.urlopen")
    def test_network_error_is_retried(self, mock_urlopen):
        mock_urlopen.side_effect = URLError("connection refused")

        results = self.delivery.deliver_with_retry([make_notification()], max_retries=2, retry_delay=0)

        assert results[0].status == DeliveryStatus.DEAD_LETTER
        assert results[0].attempt_count == 3
        assert mock_urlopen.call_count == 3
        assert isinstance(results[0].error, DeliveryError)
        assert results[0].error.tag == "Daily_90"
        assert results[0].error.context == {"attempts": 3}
        assert isinstance(results[0].error.__cause__, NotificationDeliveryRetryableError)
        assert self.delivery.get_stats()["error_count"] == 1

    @patch("propguard.delivery.base.time.sleep")
    @patch("propguard.delivery.webhook_delivery.urlopen")
    def test_retry_delay_backs_off(self, mock_urlopen, mock_sleep):
        mock_urlopen.side_effect = URLError("connection refused")

        self.delivery.deliver_with_retry([make_notification()], max_retries=3, retry_delay=0.5, backoff=2.0)

        assert [c.args[0] for c in mock_sleep.call_args_list] == [0.5, 1.0, 2.0]

    @patch("propguard.delivery.webhook_delivery.urlopen")
    def test_recovers_on_later_attempt(self, mock_urlopen):
        response = MagicMock()
        response.getcode.return_value = 200
        response.read.return_value = b"ok"
        mock_urlopen.return_value.__enter__.return_value = response
        mock_urlopen.side_effect = [URLError("reset"), mock_urlopen.return_value]

        results = self.delivery.deliver_with_retry([make_notification()], max_retries=2, retry_delay=0)

        assert results[0].status == DeliveryStatus.SUCCESS
        assert results[0].attempt_count == 2


class TestNotificationDispatcher:
    """Test dispatcher fan-out."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, "alerts.jsonl")

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def read_tags(self):
        if not os.path.exists(self.path):
            return []
        with open(self.path) as f:
            return [json.loads(line)["tag"] for line in f]

    def test_synchronous_dispatch(self):
        config = NotificationDeliveryConfig(
            destinations=[create_file_destination("file", self.path)],
            async_dispatch=False,
        )
        dispatcher = NotificationDispatcher(config)

        assert dispatcher.notify("Main - WARNING", "body", "Daily_50", False) is None
        assert self.read_tags() == ["Daily_50"]

    def test_async_dispatch_returns_future(self):
        config = NotificationDeliveryConfig(
            destinations=[create_file_destination("file", self.path)],
            async_dispatch=True,
        )
        dispatcher = NotificationDispatcher(config)

        future = dispatcher.notify("Main - WARNING", "body", "Daily_50", False)
        outcome = future.result(timeout=5)
        dispatcher.shutdown()

        assert outcome == {"file": True}
        assert self.read_tags() == ["Daily_50"]

    def test_severity_filter(self):
        destination = DeliveryDestination(
            name="file",
            method=DeliveryMethod.FILE_OUTPUT,
            config=FileDeliveryConfig(output_path=self.path),
            severities_filter=["critical"],
        )
        dispatcher = NotificationDispatcher(NotificationDeliveryConfig(
            destinations=[destination], async_dispatch=False
        ))

        dispatcher.notify("t", "b", "Daily_50", False, severity="warning")
        dispatcher.notify("t", "b", "Daily_90", True, severity="critical")

        assert self.read_tags() == ["Daily_90"]

    def test_delivery_failure_never_raises(self):
        config = NotificationDeliveryConfig(
            destinations=[create_webhook_destination("push", "https://push.example.com/notify")],
            async_dispatch=False,
            retry_attempts=0,
        )
        dispatcher = NotificationDispatcher(config)

        with patch("propguard.delivery.webhook_delivery.urlopen", side_effect=URLError("down")):
            dispatcher.notify("t", "b", "Daily_90", True, severity="critical")

        assert dispatcher.get_stats()["push"]["error_count"] == 1

    def test_disabled_destination_skipped(self):
        destination = create_file_destination("file", self.path, enabled=False)
        dispatcher = NotificationDispatcher(NotificationDeliveryConfig(
            destinations=[destination], async_dispatch=False
        ))

        dispatcher.notify("t", "b", "Daily_50", False)

        assert dispatcher.delivery_handlers == {}
        assert self.read_tags() == []

    def test_bad_destination_logged_not_raised(self):
        config = NotificationDeliveryConfig(
            destinations=[create_webhook_destination("push", "nope")],
            async_dispatch=False,
        )
        dispatcher = NotificationDispatcher(config)

        assert "push" not in dispatcher.delivery_handlers

    def test_notify_after_shutdown_is_dropped(self):
        config = NotificationDeliveryConfig(
            destinations=[create_file_destination("file", self.path)],
            async_dispatch=True,
        )
        dispatcher = NotificationDispatcher(config)
        dispatcher._executor.shutdown(wait=True)

        assert dispatcher.notify("t", "b", "Daily_50", False) is None

    def test_default_config_is_stdout(self):
        config = get_default_delivery_config()

        assert config.destinations[0].method == DeliveryMethod.STDOUT
        assert config.async_dispatch is True

    def test_stdout_destination_filter(self, capsys):
        destination = create_stdout_destination(format="json", severities_filter=["critical"])
        dispatcher = NotificationDispatcher(NotificationDeliveryConfig(
            destinations=[destination], async_dispatch=False
        ))

        dispatcher.notify("t", "b", "Daily_50", False, severity="warning")
        dispatcher.notify("t", "b", "Daily_90", True, severity="critical")

        tags = [json.loads(line)["tag"] for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
        assert tags == ["Daily_90"]
