#!/usr/bin/env python3
"""Seed a Mailpit inbox with realistic demo alert emails over SMTP.

Usage::

    # Mailpit's SMTP listener defaults to localhost:1025
    python scripts/send_test_alerts.py
    python scripts/send_test_alerts.py --host mailpit.internal --port 1025 --count 3
"""

from __future__ import annotations

import argparse
import smtplib
import sys
from email.message import EmailMessage

DEMO_ALERTS: list[dict[str, str]] = [
    {
        "from": "Grafana <grafana-alerts@example.com>",
        "subject": "[FIRING] High CPU Usage - production-web-01",
        "body": (
            "CPU usage has exceeded 90% on production-web-01 for 10 minutes.\n\n"
            "Current: 95.2%\nThreshold: 90%\n\n"
            "Check running processes and scale out if needed."
        ),
    },
    {
        "from": "kibana-monitoring@example.com",
        "subject": "[ALERT] Elevated Error Rate in payment-api logs",
        "body": (
            "Error rate in payment-api is 5.2% over the last 30 minutes (normal < 1%).\n"
            "Top errors: connection pool exhausted, validation errors."
        ),
    },
    {
        "from": "Jenkins <jenkins@example.com>",
        "subject": "[BUILD FAILED] production-deployment #1247",
        "body": (
            "Stage: Unit Tests\n3 test failures in the payment module.\n"
            "Branch: main, commit abc123def456."
        ),
    },
    {
        "from": "uptimekube@example.com",
        "subject": "Payment Service Unavailable",
        "body": "https://payments.example.com has been down for 5 minutes (HTTP 503).",
    },
    {
        "from": "Prometheus <alertmanager@example.com>",
        "subject": "prometheus: disk space approaching capacity on db-02",
        "body": "/var/lib/postgresql is at 85% usage. Projected full in 6 days.",
    },
    {
        "from": "certbot@example.com",
        "subject": "SSL certificate expiring in 14 days for api.example.com",
        "body": "Renewal is scheduled automatically. No action needed unless renewal fails.",
    },
    {
        "from": "ops-notify@example.com",
        "subject": "Scheduled maintenance window tonight",
        "body": "Database failover test between 02:00 and 03:00 UTC.",
    },
]


def build_message(alert: dict[str, str], to_address: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = alert["from"]
    msg["To"] = to_address
    msg["Subject"] = alert["subject"]
    msg.set_content(alert["body"])
    return msg


def main() -> None:
    parser = argparse.ArgumentParser(description="Send demo alert emails into Mailpit.")
    parser.add_argument("--host", default="localhost", help="SMTP host (default: localhost)")
    parser.add_argument("--port", type=int, default=1025, help="SMTP port (default: 1025)")
    parser.add_argument("--to", default="devops@example.com", help="Recipient address")
    parser.add_argument(
        "--count", type=int, default=len(DEMO_ALERTS),
        help="Number of demo alerts to send",
    )
    args = parser.parse_args()

    alerts = DEMO_ALERTS[: max(args.count, 0)]
    try:
        with smtplib.SMTP(args.host, args.port, timeout=10) as server:
            for alert in alerts:
                server.send_message(build_message(alert, args.to))
                print(f"sent: {alert['subject']}")
    except (smtplib.SMTPException, OSError) as exc:
        print(f"SMTP error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"{len(alerts)} demo alert(s) sent to {args.host}:{args.port}")


if __name__ == "__main__":
    main()
