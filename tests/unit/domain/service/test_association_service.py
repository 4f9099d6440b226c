"""Unit tests for AssociationService."""

from datetime import datetime, timezone

import pytest

from tether.domain.error import ConstraintViolationError
from tether.domain.service import AssociationService, build_association_metadata
from tether.domain.value import LinkProvenance
from tether.persistence.repository.inmemory import InMemoryAssociationRepository
from tether.persistence.tables import UQ_ASSOCIATION_USER_PROVIDER
from tests.conftest import make_assertion, make_user


def metadata(provenance: LinkProvenance = LinkProvenance.CREATED):
    return build_association_metadata(make_assertion(), provenance)


class TestLink:
    """Tests for AssociationService.link()."""

    @pytest.mark.asyncio
    async def test_link_creates_association(self):
        """Should insert a new association with last_used set."""
        # Arrange
        service = AssociationService(InMemoryAssociationRepository())
        user = make_user()
        now = datetime.now(timezone.utc)

        # Act
        association = await service.link("oidc", "sub-1", user.id, metadata(), now)

        # Assert
        assert association.user_id == user.id
        assert association.last_used == now
        found = await service.get_by_external_identity("oidc", "sub-1")
        assert found == association

    @pytest.mark.asyncio
    async def test_link_refreshes_existing_row(self):
        """Should update metadata and last_used in place."""
        service = AssociationService(InMemoryAssociationRepository())
        user = make_user()
        first = await service.link(
            "oidc", "sub-1", user.id, metadata(), datetime.now(timezone.utc)
        )

        later = datetime.now(timezone.utc)
        refreshed = await service.link(
            "oidc", "sub-1", user.id, metadata(LinkProvenance.EMAIL), later
        )

        assert refreshed.id == first.id
        assert refreshed.created_at == first.created_at
        assert refreshed.last_used == later
        assert refreshed.extra.link_provenance == LinkProvenance.EMAIL
        assert len(await service.get_all_for_user(user.id)) == 1

    @pytest.mark.asyncio
    async def test_second_identity_for_same_user_and_provider_rejected(self):
        """Should raise when a user would get two associations per provider."""
        service = AssociationService(InMemoryAssociationRepository())
        user = make_user()
        now = datetime.now(timezone.utc)
        await service.link("oidc", "sub-1", user.id, metadata(), now)

        with pytest.raises(ConstraintViolationError) as exc_info:
            await service.link("oidc", "sub-2", user.id, metadata(), now)

        assert exc_info.value.constraint == UQ_ASSOCIATION_USER_PROVIDER

    @pytest.mark.asyncio
    async def test_other_providers_are_independent(self):
        """Should allow one association per provider for the same user."""
        service = AssociationService(InMemoryAssociationRepository())
        user = make_user()
        now = datetime.now(timezone.utc)

        await service.link("oidc", "sub-1", user.id, metadata(), now)
        await service.link("github", "sub-1", user.id, metadata(), now)

        assert len(await service.get_all_for_user(user.id)) == 2


class TestUnlink:
    """Tests for AssociationService.unlink()."""

    @pytest.mark.asyncio
    async def test_unlink_is_idempotent(self):
        """Should remove the association once and then report zero."""
        service = AssociationService(InMemoryAssociationRepository())
        user = make_user()
        await service.link(
            "oidc", "sub-1", user.id, metadata(), datetime.now(timezone.utc)
        )

        assert await service.unlink(user.id, "oidc") == 1
        assert await service.unlink(user.id, "oidc") == 0
        assert await service.get_for_user(user.id, "oidc") is None

    @pytest.mark.asyncio
    async def test_unlink_then_link_new_identity(self):
        """Should allow re-linking the user to a different subject."""
        service = AssociationService(InMemoryAssociationRepository())
        user = make_user()
        now = datetime.now(timezone.utc)
        await service.link("oidc", "old-sub", user.id, metadata(), now)

        await service.unlink(user.id, "oidc")
        association = await service.link("oidc", "new-sub", user.id, metadata(), now)

        assert (await service.get_for_user(user.id, "oidc")) == association
        assert await service.get_by_external_identity("oidc", "old-sub") is None
