#!/usr/bin/env python3
"""Send one sample CI notification to a webhook — for checking a URL by hand.

Usage::

    # Build-started notification to a single webhook
    python scripts/send_test_notification.py --webhook-url https://discord.com/api/webhooks/...

    # Another event kind, with a display-name override
    python scripts/send_test_notification.py --webhook-url ... --event BUILD_FAILED \\
        --username "CI Bot" --branch feature/x --comment "flaky test"
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from src.core.config import load_settings
from src.core.logging import setup_logging
from src.core.types import (
    DEFAULT_BRANCH_NAME,
    Branch,
    BuildContext,
    BuildTypeRef,
    CIEvent,
    CIEventType,
    ProjectRef,
)
from src.notifier.factory import create_notifier
from src.notifier.ports import (
    WEBHOOK_URL_KEY,
    WEBHOOK_USERNAME_KEY,
    InMemoryProjectRegistry,
    UserPropertyStore,
)

logger = structlog.get_logger(__name__)

_RECIPIENT = "smoke-test"
_PROJECT_ID = "SampleProject"


def _sample_event(args: argparse.Namespace) -> CIEvent:
    branch_name = args.branch or DEFAULT_BRANCH_NAME
    return CIEvent(
        event_type=CIEventType(args.event),
        build=BuildContext(
            build_id=args.build_id,
            project_id=_PROJECT_ID,
            build_type_name="Sample Build",
            branch=Branch(name=branch_name, display_name=branch_name),
            comment=args.comment,
        ),
        build_type=BuildTypeRef(
            build_type_id="SampleProject_Build",
            extended_full_name="Sample Project / Sample Build",
        ),
        project=ProjectRef(project_id=_PROJECT_ID, full_name="Sample Project"),
    )


async def run(args: argparse.Namespace) -> int:
    """Wire the notifier against in-memory collaborators and send one event."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level, fmt="console")

    users = UserPropertyStore()
    users.set_property(_RECIPIENT, WEBHOOK_URL_KEY, args.webhook_url)
    if args.username:
        users.set_property(_RECIPIENT, WEBHOOK_USERNAME_KEY, args.username)
    projects = InMemoryProjectRegistry({_PROJECT_ID: "Sample Project"})

    notifier = create_notifier(settings, users=users, projects=projects)
    try:
        outcomes = await notifier.handle(_sample_event(args), [_RECIPIENT])
    finally:
        await notifier.close()

    for outcome in outcomes:
        logger.info(
            "smoke_test_outcome",
            recipient=outcome.recipient,
            status=outcome.status.value,
            http_status=outcome.http_status,
            error=outcome.error,
        )
    return 0 if outcomes and all(o.ok for o in outcomes) else 1


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Send a sample CI notification to a webhook URL.",
    )
    parser.add_argument("--webhook-url", required=True, help="Target webhook URL")
    parser.add_argument("--username", default=None, help="Display-name override")
    parser.add_argument(
        "--event",
        default=CIEventType.BUILD_STARTED.value,
        choices=[t.value for t in CIEventType],
        help="Event kind to send (default: BUILD_STARTED)",
    )
    parser.add_argument("--build-id", type=int, default=42)
    parser.add_argument("--branch", default=None, help="Branch name (default branch if unset)")
    parser.add_argument("--comment", default=None, help="Build comment")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
