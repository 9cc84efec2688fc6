"""
taskboard/derived_views.py

Feature-specific views over a ProjectPermissions matrix.

Every function here is a pure function of the base matrix; none of them look
at roles or memberships again.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taskboard.capabilities import ProjectPermissions

ANONYMIZED_ASSIGNEE = "Team Member"
UNASSIGNED = "Unassigned"

# Payloads arrive in either the Python (snake_case) or the wire (camelCase) shape
ASSIGNEE_SECTION_KEYS = ("cards_by_assignee", "cardsByAssignee")
PRODUCTIVITY_SECTION_KEYS = ("team_productivity", "teamProductivity")
ASSIGNEE_NAME_KEYS = ("assignee_name", "assigneeName")
ASSIGNEE_ID_KEYS = ("assignee_id", "assigneeId")


# ============================================================================
# Analytics
# ============================================================================

class AnalyticsPermissions(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    can_view_basic_metrics: bool
    can_view_team_performance: bool
    can_view_detailed_analytics: bool
    can_export_data: bool


def derive_analytics_permissions(base: ProjectPermissions) -> AnalyticsPermissions:
    return AnalyticsPermissions(
        can_view_basic_metrics=base.can_view_project,
        can_view_team_performance=base.can_view_project and base.can_manage_teams,
        can_view_detailed_analytics=base.can_edit_project or base.can_manage_teams,
        can_export_data=base.can_edit_project,
    )


def can_view_analytics(base: ProjectPermissions) -> bool:
    """Analytics page access."""
    return base.can_view_project


def redact_analytics(payload: Dict[str, Any], base: ProjectPermissions) -> Dict[str, Any]:
    """
    Return a copy of an analytics payload with what the caller may not see removed.

    - No project view: cards_by_assignee and team_productivity are emptied.
    - No detailed analytics: team_productivity is emptied and every assignee
      in cards_by_assignee other than the "Unassigned" bucket loses its id
      and has its name replaced by ANONYMIZED_ASSIGNEE. The number of
      entries is kept.

    Both snake_case and camelCase spellings of these keys are handled. The
    input is never modified. Unknown keys pass through untouched.
    """
    redacted = copy.deepcopy(payload)

    if not can_view_analytics(base):
        _empty_sections(redacted, ASSIGNEE_SECTION_KEYS + PRODUCTIVITY_SECTION_KEYS)
        return redacted

    if not derive_analytics_permissions(base).can_view_detailed_analytics:
        _empty_sections(redacted, PRODUCTIVITY_SECTION_KEYS)
        for key in ASSIGNEE_SECTION_KEYS:
            if redacted.get(key):
                redacted[key] = _anonymize_assignees(redacted[key])

    return redacted


def _empty_sections(payload: Dict[str, Any], keys) -> None:
    for key in keys:
        if key in payload:
            payload[key] = []


def _is_unassigned_bucket(entry: Dict[str, Any]) -> bool:
    return any(entry.get(key) == UNASSIGNED for key in ASSIGNEE_NAME_KEYS)


def _anonymize_assignees(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    anonymized = []
    for entry in entries:
        item = dict(entry)
        if not _is_unassigned_bucket(item):
            for key in ASSIGNEE_NAME_KEYS:
                if key in item:
                    item[key] = ANONYMIZED_ASSIGNEE
            # The id re-identifies the person even without a name
            for key in ASSIGNEE_ID_KEYS:
                if key in item:
                    item[key] = None
        anonymized.append(item)
    return anonymized


# ============================================================================
# Convenience aggregates (UI guardrails)
# ============================================================================

def has_any_edit_permission(base: ProjectPermissions) -> bool:
    return base.can_edit_project or base.can_edit_cards or base.can_edit_columns


def has_any_management_permission(base: ProjectPermissions) -> bool:
    return base.can_edit_project or base.can_manage_teams or base.can_delete_project


def can_view_settings(base: ProjectPermissions) -> bool:
    return base.can_edit_project or base.can_manage_teams


def ui_flags(base: ProjectPermissions) -> Dict[str, bool]:
    """Aggregates plus analytics flags in the camelCase shape the UI consumes."""
    flags = {
        "hasAnyEditPermission": has_any_edit_permission(base),
        "hasAnyManagementPermission": has_any_management_permission(base),
        "canViewSettings": can_view_settings(base),
    }
    flags.update(derive_analytics_permissions(base).model_dump(by_alias=True))
    return flags
