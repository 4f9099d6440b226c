"""Unit tests for claim merge policies."""

from tether.domain.model import Profile
from tether.domain.service import (
    build_association_metadata,
    merge_avatar,
    merge_email,
    merge_profile,
)
from tether.domain.value import LinkProvenance
from tests.conftest import make_assertion, make_user


class TestMergeProfile:
    """Tests for merge_profile()."""

    def test_fills_blank_fields_from_claims(self):
        """Should propose claim values for fields that are empty."""
        assertion = make_assertion(bio="Mathematician", location="London")

        changes = merge_profile(Profile(), assertion)

        assert changes.bio == "Mathematician"
        assert changes.location == "London"

    def test_never_overwrites_user_entered_values(self):
        """Should leave non-blank stored fields alone."""
        profile = Profile(bio="Wrote the first program", location="Marylebone")
        assertion = make_assertion(bio="Mathematician", location="London")

        changes = merge_profile(profile, assertion)

        assert changes.is_empty

    def test_fields_are_merged_independently(self):
        """Should fill one field even when the other is already set."""
        profile = Profile(bio="Wrote the first program", location="   ")
        assertion = make_assertion(bio="Mathematician", location="London")

        changes = merge_profile(profile, assertion)

        assert changes.bio is None
        assert changes.location == "London"

    def test_blank_claims_are_ignored(self):
        """Should not propose whitespace-only claim values."""
        assertion = make_assertion(bio="  ", location=None)

        changes = merge_profile(Profile(), assertion)

        assert changes.is_empty

    def test_apply_keeps_untouched_fields(self):
        """ProfileChanges.apply should only replace proposed fields."""
        profile = Profile(bio="Wrote the first program")
        changes = merge_profile(profile, make_assertion(location="London"))

        merged = changes.apply(profile)

        assert merged == Profile(bio="Wrote the first program", location="London")


class TestMergeAvatar:
    """Tests for merge_avatar()."""

    def test_no_picture_means_no_job(self):
        """Should return None without a picture claim."""
        assert merge_avatar(make_user(), make_assertion(), False) is None

    def test_job_for_user_without_custom_avatar(self):
        """Should retrieve the picture for users with no avatar of their own."""
        user = make_user()
        assertion = make_assertion(picture="https://idp.example.com/ada.png")

        job = merge_avatar(user, assertion, override_allowed=False)

        assert job is not None
        assert job.url == "https://idp.example.com/ada.png"
        assert job.user_id == user.id
        assert job.override_gravatar is False

    def test_custom_avatar_kept_without_override(self):
        """Should not replace a custom avatar unless override is allowed."""
        user = make_user(avatar_url="https://cdn.example.com/mine.png")
        assertion = make_assertion(picture="https://idp.example.com/ada.png")

        assert merge_avatar(user, assertion, override_allowed=False) is None

    def test_custom_avatar_replaced_with_override(self):
        """Should schedule a job flagged as override when allowed."""
        user = make_user(avatar_url="https://cdn.example.com/mine.png")
        assertion = make_assertion(picture="https://idp.example.com/ada.png")

        job = merge_avatar(user, assertion, override_allowed=True)

        assert job is not None
        assert job.override_gravatar is True


class TestMergeEmail:
    """Tests for merge_email()."""

    def test_disabled_sync_never_proposes(self):
        """Should keep the stored email when sync is off."""
        user = make_user(email="old@example.com")
        assertion = make_assertion(email="new@example.com")

        assert merge_email(user, assertion, sync_enabled=False) is None

    def test_verified_different_email_is_proposed_normalized(self):
        """Should propose the normalized claim when it differs."""
        user = make_user(email="old@example.com")
        assertion = make_assertion(email="  New@Example.COM ")

        assert merge_email(user, assertion, sync_enabled=True) == "new@example.com"

    def test_unverified_email_is_not_synced(self):
        """Should ignore unverified email claims."""
        user = make_user(email="old@example.com")
        assertion = make_assertion(email="new@example.com", email_verified=False)

        assert merge_email(user, assertion, sync_enabled=True) is None

    def test_same_email_after_normalization(self):
        """Should not propose an email equal to the stored one."""
        user = make_user(email="ada@example.com")
        assertion = make_assertion(email="ADA@example.com")

        assert merge_email(user, assertion, sync_enabled=True) is None


class TestBuildAssociationMetadata:
    """Tests for build_association_metadata()."""

    def test_snapshots_claims_and_provenance(self):
        """Should copy display claims and verification into the records."""
        assertion = make_assertion(
            email="ada@example.com",
            name="Ada Lovelace",
            picture="https://idp.example.com/ada.png",
        )

        metadata = build_association_metadata(assertion, LinkProvenance.EMAIL)

        assert metadata.info.email == "ada@example.com"
        assert metadata.info.name == "Ada Lovelace"
        assert metadata.info.picture == "https://idp.example.com/ada.png"
        assert metadata.extra.email_verified is True
        assert metadata.extra.link_provenance == LinkProvenance.EMAIL
        assert metadata.credentials.model_dump() == {}
