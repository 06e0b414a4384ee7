"""
Tests for principal resolution and role checks.
"""

from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from docu_service.auth.principal import (
    ActingPrincipal,
    Role,
    get_current_principal,
    require_elevated_principal,
)


def _request(principal=None):
    state = SimpleNamespace()
    if principal is not None:
        state.principal = principal
    return SimpleNamespace(state=state)


class TestGetCurrentPrincipal:

    def test_missing_principal(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_principal(_request())
        assert exc_info.value.status_code == 401

    def test_principal_instance(self):
        principal = ActingPrincipal(id="u-1", role=Role.ADMIN)
        assert get_current_principal(_request(principal)) is principal

    def test_mapping(self):
        principal = get_current_principal(_request({"id": "u-2", "role": "editor"}))
        assert principal == ActingPrincipal(id="u-2", role=Role.EDITOR)

    def test_malformed_mapping(self):
        with pytest.raises(HTTPException) as exc_info:
            get_current_principal(_request({"role": "editor"}))
        assert exc_info.value.status_code == 401


class TestRequireElevatedPrincipal:

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.EDITOR])
    def test_elevated_roles(self, role):
        principal = ActingPrincipal(id="u-1", role=role)
        assert require_elevated_principal(principal) is principal

    def test_viewer_forbidden(self):
        with pytest.raises(HTTPException) as exc_info:
            require_elevated_principal(ActingPrincipal(id="u-1", role=Role.VIEWER))
        assert exc_info.value.status_code == 403
