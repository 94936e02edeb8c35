"""
Webhook Alert Dispatcher for hostwatch

Builds the structured alert payload and POSTs it to the configured
endpoint. Delivery is best effort: one attempt per alert, no retry.

Author: Hostwatch Team
SPDX-License-Identifier: BUSL-1.1
"""

import json
import logging
from dataclasses import dataclass

import requests

from hostwatch.config import ThresholdConfig
from hostwatch.monitor.sampler import round_half_away
from hostwatch.output import now_timestamp, print_line

logger = logging.getLogger(__name__)

PAYLOAD_PRECISION = 2


@dataclass(frozen=True)
class Alert:
    """A single threshold violation."""

    resource: str
    actual: float
    threshold: float
    reason: str


def build_payload(config: ThresholdConfig, alert: Alert, timestamp: str) -> dict:
    """
    Build the webhook payload for one alert.

    Args:
        config: Supplies service, type, status, platform, host and account fields
        alert: The violation being reported
        timestamp: RFC 3339 timestamp used for both envelope and data

    Returns:
        JSON-serializable payload dict
    """
    data = {
        "resource": alert.resource,
        "actual": round_half_away(alert.actual, PAYLOAD_PRECISION),
        "threshold": round_half_away(alert.threshold, PAYLOAD_PRECISION),
        "status": config.alert_status,
        "reason": alert.reason,
        "platform": config.platform,
        "host": config.hostname,
        "timestamp": timestamp,
    }
    if config.account_id:
        data["accountId"] = config.account_id
    if config.account_name:
        data["accountName"] = config.account_name

    return {
        "type": config.alert_type,
        "service": config.service_name,
        "timestamp": timestamp,
        "data": data,
    }


class WebhookDispatcher:
    """
    Delivers alerts to an HTTP endpoint.

    When no webhook URL is configured, dispatch() is a no-op: nothing is
    printed, no request is made and no error is raised.
    """

    def __init__(self, config: ThresholdConfig, session: requests.Session | None = None):
        self.config = config
        self._session = session
        self._owns_session = session is None

    @property
    def enabled(self) -> bool:
        return bool(self.config.webhook_url)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def dispatch(self, alert: Alert) -> bool:
        """
        Send one alert.

        Returns:
            True if the endpoint accepted it with a 2xx status, False if the
            dispatcher is disabled or delivery failed
        """
        if not self.enabled:
            return False

        payload = build_payload(self.config, alert, now_timestamp())
        print_line(f"Webhook Payload: {json.dumps(payload)}")

        try:
            response = self.session.post(
                self.config.webhook_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.config.webhook_timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"webhook request failed for {alert.resource}: {e}")
            return False

        try:
            if not 200 <= response.status_code < 300:
                logger.warning(
                    f"webhook responded with status {response.status_code} {response.reason}"
                )
                return False
        finally:
            response.close()

        logger.debug(f"webhook delivered alert for {alert.resource}")
        return True

    def close(self) -> None:
        """Close the HTTP session if this dispatcher created it."""
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None
