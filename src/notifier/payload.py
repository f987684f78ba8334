"""Contextual embed fields shared by all build notifications."""

from __future__ import annotations

from src.core.types import BuildContext
from src.notifier.ports import ProjectRegistry
from src.notifier.types import EmbedField

NO_DATA = "<No data available>"
DEFAULT_BRANCH_LABEL = "Default"


def build_context_fields(build: BuildContext, projects: ProjectRegistry) -> list[EmbedField]:
    """Return the Project, Build, Branch and (optional) Comment fields.

    The order is the display order. An unknown project is shown as
    ``NO_DATA``; a missing or default branch as ``"Default"``.
    """
    project_name = projects.lookup(build.project_id)

    branch_name = DEFAULT_BRANCH_LABEL
    if build.branch is not None and not build.branch.is_default:
        branch_name = build.branch.display_name

    fields = [
        EmbedField(name="Project", value=project_name or NO_DATA, inline=True),
        EmbedField(name="Build", value=build.build_type_name, inline=True),
        EmbedField(name="Branch", value=branch_name, inline=True),
    ]
    if build.comment is not None:
        fields.append(EmbedField(name="Comment", value=build.comment, inline=False))
    return fields
