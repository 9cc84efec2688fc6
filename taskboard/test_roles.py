"""
taskboard/test_roles.py

Tests for the role catalog and capability matrix.

Run:
    pytest taskboard/test_roles.py -v
"""

import pytest

from taskboard.capabilities import CAPABILITY_FIELDS, Capability, ProjectPermissions
from taskboard.matrix import build_permissions
from taskboard.roles import (
    ProjectRole,
    TeamRole,
    base_capabilities,
    parse_project_role,
    parse_team_role,
    project_role_for_rank,
    rank,
    role_at_least,
    team_role_ceiling,
)

PROJECT_ORDER = [ProjectRole.none, ProjectRole.viewer, ProjectRole.editor, ProjectRole.admin, ProjectRole.owner]


class TestRoleOrdering:

    def test_project_order_is_strict(self):
        ranks = [rank(role) for role in PROJECT_ORDER]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == len(ranks)

    def test_team_order_is_strict(self):
        assert rank(TeamRole.owner) > rank(TeamRole.admin) > rank(TeamRole.member)

    def test_unknown_ranks_zero(self):
        assert rank(None) == 0
        assert rank("owner") == 0  # plain strings are not roles

    def test_rank_round_trip(self):
        for role in PROJECT_ORDER:
            assert project_role_for_rank(rank(role)) is role
        assert project_role_for_rank(99) is ProjectRole.none

    def test_team_role_ceiling(self):
        assert team_role_ceiling(TeamRole.owner) is ProjectRole.owner
        assert team_role_ceiling(TeamRole.admin) is ProjectRole.admin
        assert team_role_ceiling(TeamRole.member) is ProjectRole.editor

    def test_role_at_least(self):
        assert role_at_least(ProjectRole.admin, ProjectRole.editor)
        assert role_at_least(ProjectRole.editor, ProjectRole.editor)
        assert not role_at_least(ProjectRole.viewer, ProjectRole.editor)


class TestRoleParsing:

    @pytest.mark.parametrize("raw,expected", [
        ("owner", TeamRole.owner),
        (" Admin ", TeamRole.admin),
        ("member", TeamRole.member),
        ("viewer", None),
        ("", None),
        (None, None),
    ])
    def test_parse_team_role(self, raw, expected):
        assert parse_team_role(raw) is expected

    @pytest.mark.parametrize("raw,expected", [
        ("owner", ProjectRole.owner),
        ("EDITOR", ProjectRole.editor),
        ("viewer", ProjectRole.viewer),
        ("none", None),
        ("superuser", None),
        (None, None),
    ])
    def test_parse_project_role(self, raw, expected):
        assert parse_project_role(raw) is expected


class TestCapabilityMatrix:

    def test_every_capability_has_a_field(self):
        assert set(CAPABILITY_FIELDS) == set(Capability)
        assert set(CAPABILITY_FIELDS.values()) == set(ProjectPermissions.model_fields)

    def test_monotonic_along_role_order(self):
        """Every capability held by a lower role is held by every higher role."""
        for lower_index, lower in enumerate(PROJECT_ORDER):
            for higher in PROJECT_ORDER[lower_index:]:
                assert base_capabilities(lower).granted() <= base_capabilities(higher).granted(), (
                    f"{higher.value} is missing capabilities of {lower.value}"
                )

    def test_none_is_all_false(self):
        matrix = base_capabilities(ProjectRole.none)
        assert not any(matrix.model_dump().values())
        assert matrix == ProjectPermissions.none()

    def test_viewer_row(self):
        assert base_capabilities(ProjectRole.viewer).granted() == {
            Capability.PROJECT_VIEW,
            Capability.COMMENT_CREATE,
        }

    def test_editor_row(self):
        editor = base_capabilities(ProjectRole.editor)
        assert editor.can_edit_project
        assert editor.can_move_cards
        assert editor.can_reorder_columns
        assert not editor.can_delete_project
        assert not editor.can_manage_teams
        assert not editor.can_delete_cards
        assert not editor.can_archive_project

    def test_admin_cannot_delete_project(self):
        admin = base_capabilities(ProjectRole.admin)
        assert admin.can_manage_teams
        assert admin.can_archive_project
        assert not admin.can_delete_project
        assert admin.granted() == set(Capability) - {Capability.PROJECT_DELETE}

    def test_owner_holds_everything(self):
        assert base_capabilities(ProjectRole.owner).granted() == set(Capability)

    def test_camel_case_serialization(self):
        dumped = base_capabilities(ProjectRole.viewer).model_dump(by_alias=True)
        assert dumped["canViewProject"] is True
        assert dumped["canDeleteAttachments"] is False
        assert len(dumped) == 22


class TestMatrixBuilder:

    def test_non_owner_gets_catalog_row(self):
        assert build_permissions(ProjectRole.editor, False) == base_capabilities(ProjectRole.editor)

    def test_direct_owner_overrides_apply_to_any_row(self):
        matrix = build_permissions(ProjectRole.viewer, True)
        assert matrix.can_manage_teams
        assert matrix.can_archive_project
        assert matrix.can_view_project
        assert not matrix.can_edit_cards

    def test_output_is_total(self):
        for role in PROJECT_ORDER:
            for owner in (True, False):
                dumped = build_permissions(role, owner).model_dump()
                assert len(dumped) == len(Capability)
                assert all(isinstance(value, bool) for value in dumped.values())

    def test_matrix_is_immutable(self):
        matrix = build_permissions(ProjectRole.viewer, False)
        with pytest.raises(Exception):
            matrix.can_delete_project = True
