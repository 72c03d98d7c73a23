"""
Unit tests for upload quota enforcement.

Tests the size check that runs before anything is sent to storage.
"""
import pytest

from vidlinkgen.core.exceptions import UploadLimitExceeded
from vidlinkgen.core.pricing import GB, MB, TB
from vidlinkgen.core.quota import check_upload_size, get_upload_limit_for


class TestUploadLimitLookup:
    def test_free_user(self, free_user, identity_for):
        assert get_upload_limit_for(identity_for(free_user)) == 200 * MB

    def test_premium_tiers(self, individual_user, team_user, identity_for):
        assert get_upload_limit_for(identity_for(individual_user)) == 100 * GB
        assert get_upload_limit_for(identity_for(team_user)) == 2 * TB

    def test_admin_has_no_ceiling(self, admin_user, identity_for):
        assert get_upload_limit_for(identity_for(admin_user)) is None


class TestUploadSizeCheck:
    def test_free_user_within_limit_passes(self, free_user, identity_for):
        """Free user at exactly 200MB passes check."""
        check_upload_size(identity_for(free_user), 200 * MB)

    def test_free_user_over_limit_blocked(self, free_user, identity_for):
        with pytest.raises(UploadLimitExceeded) as exc:
            check_upload_size(identity_for(free_user), 200 * MB + 1)
        assert exc.value.status_code == 413
        assert exc.value.to_detail()["error"] == "upload_limit_exceeded"
        assert exc.value.to_detail()["limit"] == "200MB"
        assert "Upgrade to premium" in exc.value.message

    def test_team_user_over_limit_blocked(self, team_user, identity_for):
        with pytest.raises(UploadLimitExceeded) as exc:
            check_upload_size(identity_for(team_user), 2 * TB + 1)
        assert exc.value.message == "File too large. Your current plan limit is 2TB."

    def test_admin_bypasses_quota(self, admin_user, identity_for):
        """Admin users bypass all upload limits."""
        check_upload_size(identity_for(admin_user), 10 * TB)
