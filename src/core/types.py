"""Domain types for CI server events handed to the notifier."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, model_validator

# Name the CI server gives the branch a build runs on when no branch is set.
DEFAULT_BRANCH_NAME = "<default>"


class Branch(BaseModel):
    """VCS branch a build ran on."""

    name: str
    display_name: str

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_BRANCH_NAME


class BuildContext(BaseModel):
    """Snapshot of a (running or finished) build."""

    build_id: int
    project_id: str
    build_type_name: str
    branch: Branch | None = None
    comment: str | None = None


class BuildTypeRef(BaseModel):
    """A build configuration, identified for display purposes."""

    build_type_id: str
    extended_full_name: str


class ProjectRef(BaseModel):
    """A CI project, identified for display purposes."""

    project_id: str
    full_name: str


class CIEventType(StrEnum):
    """Every lifecycle event the CI server notifies about."""

    BUILD_STARTED = "BUILD_STARTED"
    BUILD_SUCCESSFUL = "BUILD_SUCCESSFUL"
    BUILD_FAILED = "BUILD_FAILED"
    BUILD_FAILED_TO_START = "BUILD_FAILED_TO_START"
    BUILD_FAILING = "BUILD_FAILING"
    BUILD_PROBABLY_HANGING = "BUILD_PROBABLY_HANGING"
    LABELING_FAILED = "LABELING_FAILED"
    # Responsibility for a whole build type
    RESPONSIBLE_CHANGED = "RESPONSIBLE_CHANGED"
    RESPONSIBLE_ASSIGNED = "RESPONSIBLE_ASSIGNED"
    # Responsibility for a single test name
    TEST_RESPONSIBLE_CHANGED = "TEST_RESPONSIBLE_CHANGED"
    TEST_RESPONSIBLE_ASSIGNED = "TEST_RESPONSIBLE_ASSIGNED"
    # Responsibility for a collection of tests
    TESTS_RESPONSIBLE_CHANGED = "TESTS_RESPONSIBLE_CHANGED"
    TESTS_RESPONSIBLE_ASSIGNED = "TESTS_RESPONSIBLE_ASSIGNED"
    BUILD_PROBLEM_RESPONSIBLE_ASSIGNED = "BUILD_PROBLEM_RESPONSIBLE_ASSIGNED"
    BUILD_PROBLEM_RESPONSIBLE_CHANGED = "BUILD_PROBLEM_RESPONSIBLE_CHANGED"
    TESTS_MUTED = "TESTS_MUTED"
    TESTS_UNMUTED = "TESTS_UNMUTED"
    BUILD_PROBLEMS_MUTED = "BUILD_PROBLEMS_MUTED"
    BUILD_PROBLEMS_UNMUTED = "BUILD_PROBLEMS_UNMUTED"


BUILD_EVENT_TYPES: frozenset[CIEventType] = frozenset(
    {
        CIEventType.BUILD_STARTED,
        CIEventType.BUILD_SUCCESSFUL,
        CIEventType.BUILD_FAILED,
        CIEventType.BUILD_FAILED_TO_START,
        CIEventType.BUILD_FAILING,
        CIEventType.BUILD_PROBABLY_HANGING,
        CIEventType.LABELING_FAILED,
    }
)

BUILD_TYPE_EVENT_TYPES: frozenset[CIEventType] = frozenset(
    {
        CIEventType.RESPONSIBLE_CHANGED,
        CIEventType.RESPONSIBLE_ASSIGNED,
    }
)

PROJECT_EVENT_TYPES: frozenset[CIEventType] = frozenset(
    {
        CIEventType.TEST_RESPONSIBLE_CHANGED,
        CIEventType.TEST_RESPONSIBLE_ASSIGNED,
        CIEventType.TESTS_RESPONSIBLE_CHANGED,
        CIEventType.TESTS_RESPONSIBLE_ASSIGNED,
        CIEventType.BUILD_PROBLEM_RESPONSIBLE_ASSIGNED,
        CIEventType.BUILD_PROBLEM_RESPONSIBLE_CHANGED,
    }
)

# The CI server may report mutes without a project; those are not notified.
MUTE_EVENT_TYPES: frozenset[CIEventType] = frozenset(
    {
        CIEventType.TESTS_MUTED,
        CIEventType.TESTS_UNMUTED,
        CIEventType.BUILD_PROBLEMS_MUTED,
        CIEventType.BUILD_PROBLEMS_UNMUTED,
    }
)


class CIEvent(BaseModel):
    """A CI lifecycle event, tagged by ``event_type``.

    Only the context relevant to the kind is populated:

    - build kinds (including LABELING_FAILED) carry ``build``
    - build-type responsibility kinds carry ``build_type``
    - project responsibility kinds carry ``project``
    - mute kinds carry ``project`` when the mute is scoped to one
    """

    event_type: CIEventType
    build: BuildContext | None = None
    build_type: BuildTypeRef | None = None
    project: ProjectRef | None = None

    @model_validator(mode="after")
    def _check_context(self) -> CIEvent:
        if self.event_type in BUILD_EVENT_TYPES and self.build is None:
            raise ValueError(f"{self.event_type} requires build context")
        if self.event_type in BUILD_TYPE_EVENT_TYPES and self.build_type is None:
            raise ValueError(f"{self.event_type} requires build_type context")
        if self.event_type in PROJECT_EVENT_TYPES and self.project is None:
            raise ValueError(f"{self.event_type} requires project context")
        return self
