"""Pure functions that convert CI events into NotificationMessage objects."""

from __future__ import annotations

from typing import NamedTuple

from src.core.types import MUTE_EVENT_TYPES, CIEvent, CIEventType
from src.notifier.payload import build_context_fields
from src.notifier.ports import ProjectRegistry
from src.notifier.types import EmbedColor, EmbedField, NotificationMessage


class _Template(NamedTuple):
    title: str
    description: str
    color: EmbedColor
    with_build_fields: bool = False


# ── Event table ─────────────────────────────────────────────────
#
# Descriptions are str.format templates over {build_id}, {build_type}
# and {project}.

_TEMPLATES: dict[CIEventType, _Template] = {
    CIEventType.BUILD_STARTED: _Template(
        "Build started",
        "The build with the ID {build_id} has started.",
        EmbedColor.BLUE,
        with_build_fields=True,
    ),
    CIEventType.BUILD_SUCCESSFUL: _Template(
        "Build successful",
        "The build with the ID {build_id} was successful!",
        EmbedColor.GREEN,
        with_build_fields=True,
    ),
    CIEventType.BUILD_FAILED: _Template(
        "Build failed",
        "The build with the ID {build_id} has failed.",
        EmbedColor.RED,
        with_build_fields=True,
    ),
    CIEventType.BUILD_FAILED_TO_START: _Template(
        "Build failed to start",
        "The build with the ID {build_id} failed to start!",
        EmbedColor.RED,
        with_build_fields=True,
    ),
    CIEventType.BUILD_FAILING: _Template(
        "Build is failing",
        "The build with the ID {build_id} is failing!",
        EmbedColor.RED,
        with_build_fields=True,
    ),
    CIEventType.BUILD_PROBABLY_HANGING: _Template(
        "Build is probably hanging",
        "The build with the ID {build_id} is probably hanging!",
        EmbedColor.ORANGE,
        with_build_fields=True,
    ),
    CIEventType.LABELING_FAILED: _Template(
        "Labeling failed",
        "Labeling of build with the ID {build_id} has failed!",
        EmbedColor.RED,
    ),
    CIEventType.RESPONSIBLE_CHANGED: _Template(
        "Responsibility for build type has changed",
        "The responsibility for the build type {build_type} has changed!",
        EmbedColor.ORANGE,
    ),
    CIEventType.RESPONSIBLE_ASSIGNED: _Template(
        "Responsibility assigned",
        "Responsibility for build type {build_type} has been assigned!",
        EmbedColor.ORANGE,
    ),
    CIEventType.TEST_RESPONSIBLE_CHANGED: _Template(
        "Responsibility changed",
        "Responsibility for the project {project} has changed!",
        EmbedColor.ORANGE,
    ),
    CIEventType.TEST_RESPONSIBLE_ASSIGNED: _Template(
        "Responsibility assigned",
        "Responsibility for project {project} has been assigned!",
        EmbedColor.ORANGE,
    ),
    CIEventType.TESTS_RESPONSIBLE_CHANGED: _Template(
        "Responsibility changed",
        "Responsibility for project {project} has been changed!",
        EmbedColor.ORANGE,
    ),
    CIEventType.TESTS_RESPONSIBLE_ASSIGNED: _Template(
        "Responsibility assigned",
        "Responsibility for one or more tests of project {project} have been assigned!",
        EmbedColor.ORANGE,
    ),
    CIEventType.BUILD_PROBLEM_RESPONSIBLE_ASSIGNED: _Template(
        "Responsibility assigned",
        "Responsibility for one or more build problems of project {project} "
        "have been assigned!",
        EmbedColor.ORANGE,
    ),
    # The TeamCity plugin sent the "assigned" title and a tests description
    # here; this entry names the change and the build problems instead.
    CIEventType.BUILD_PROBLEM_RESPONSIBLE_CHANGED: _Template(
        "Responsibility changed",
        "Responsibility for one or more build problems of project {project} "
        "has been changed!",
        EmbedColor.ORANGE,
    ),
    CIEventType.TESTS_MUTED: _Template(
        "Tests muted",
        "One or more tests of the project {project} have been muted!",
        EmbedColor.ORANGE,
    ),
    CIEventType.TESTS_UNMUTED: _Template(
        "Tests unmuted",
        "One or more tests of the project {project} have been unmuted!",
        EmbedColor.ORANGE,
    ),
    CIEventType.BUILD_PROBLEMS_MUTED: _Template(
        "Build problems muted",
        "One or more build problems of the project {project} have been muted!",
        EmbedColor.ORANGE,
    ),
    CIEventType.BUILD_PROBLEMS_UNMUTED: _Template(
        "Build problems unmuted",
        "One or more build problems of the project {project} have been unmuted!",
        EmbedColor.ORANGE,
    ),
}


def color_for(event_type: CIEventType) -> EmbedColor:
    """Embed colour used for *event_type*."""
    return _TEMPLATES[event_type].color


# ── Formatter ───────────────────────────────────────────────────


def format_event(event: CIEvent, projects: ProjectRegistry) -> NotificationMessage | None:
    """Convert a CIEvent to a NotificationMessage.

    Returns None for mute/unmute events without an associated project;
    those are not notified at all.
    """
    if event.event_type in MUTE_EVENT_TYPES and event.project is None:
        return None

    template = _TEMPLATES[event.event_type]
    description = template.description.format(
        build_id=event.build.build_id if event.build else "",
        build_type=event.build_type.extended_full_name if event.build_type else "",
        project=event.project.full_name if event.project else "",
    )

    fields: list[EmbedField] = []
    if template.with_build_fields and event.build is not None:
        fields = build_context_fields(event.build, projects)

    return NotificationMessage(
        title=template.title,
        description=description,
        color=template.color,
        fields=fields,
        source_event_type=event.event_type.value,
    )
