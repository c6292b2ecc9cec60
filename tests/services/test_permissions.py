"""Authorization guard tests."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from setlist.exceptions import ForbiddenError, MalformedInputError, NotFoundError, UnauthenticatedError
from setlist.models import Band, BandMember, BandRole, User
from setlist.services import bands
from setlist.services.permissions import (
    REQUIRED_ROLE,
    BandAction,
    authorize,
    authorize_invite,
    authorize_member_removal,
    has_permission,
    parse_invite_role,
    require_member,
    role_at_least,
)


class TestRoleHierarchy:
    """Tests for role ranking."""

    @pytest.mark.parametrize(
        ("role", "minimum", "expected"),
        [
            (BandRole.OWNER, BandRole.ADMIN, True),
            (BandRole.OWNER, BandRole.MEMBER, True),
            (BandRole.ADMIN, BandRole.ADMIN, True),
            (BandRole.ADMIN, BandRole.OWNER, False),
            (BandRole.MEMBER, BandRole.ADMIN, False),
            ("member", BandRole.MEMBER, True),
            ("roadie", BandRole.MEMBER, False),
        ],
    )
    def test_role_at_least(self, role, minimum, expected):
        assert role_at_least(role, minimum) is expected

    def test_member_management_needs_admin(self):
        assert REQUIRED_ROLE[BandAction.INVITE_MEMBER] == BandRole.ADMIN
        assert REQUIRED_ROLE[BandAction.REMOVE_MEMBER] == BandRole.ADMIN

    @pytest.mark.parametrize("action", list(BandAction))
    def test_owner_can_do_everything(self, action: BandAction):
        member = BandMember(band_id="b", user_id="u", role=BandRole.OWNER.value)
        assert has_permission(member, action)

    @pytest.mark.parametrize(
        ("action", "expected"),
        [
            (BandAction.VIEW, True),
            (BandAction.EDIT_SONGS, True),
            (BandAction.EDIT_SECTIONS, True),
            (BandAction.REORDER, True),
            (BandAction.INVITE_MEMBER, False),
            (BandAction.REMOVE_MEMBER, False),
        ],
    )
    def test_member_permissions(self, action: BandAction, expected: bool):
        member = BandMember(band_id="b", user_id="u", role=BandRole.MEMBER.value)
        assert has_permission(member, action) is expected

    def test_inactive_membership_grants_nothing(self):
        member = BandMember(band_id="b", user_id="u", role=BandRole.OWNER.value, is_active=False)
        assert not has_permission(member, BandAction.VIEW)


class TestRequireMember:
    """Tests for membership checks."""

    @pytest.mark.asyncio
    async def test_member_passes(self, session: AsyncSession, band: Band, user: User):
        member = await require_member(session, band.id, user.id)
        assert member.role == BandRole.OWNER

    @pytest.mark.asyncio
    async def test_non_member_forbidden(self, session: AsyncSession, band: Band, other_user: User):
        with pytest.raises(ForbiddenError):
            await require_member(session, band.id, other_user.id)

    @pytest.mark.asyncio
    async def test_unknown_band_forbidden(self, session: AsyncSession, user: User):
        with pytest.raises(ForbiddenError):
            await require_member(session, "no-such-band", user.id)


class TestAuthorize:
    """Tests for action authorization."""

    @pytest.mark.asyncio
    async def test_unauthenticated_checked_first(self, session: AsyncSession):
        # Band does not exist: the auth failure must still win
        with pytest.raises(UnauthenticatedError):
            await authorize(session, "no-such-band", None, BandAction.VIEW)

    @pytest.mark.asyncio
    async def test_member_can_view(self, session: AsyncSession, band: Band, member_user: User):
        member = await authorize(session, band.id, member_user, BandAction.VIEW)
        assert member.user_id == member_user.id

    @pytest.mark.asyncio
    async def test_member_cannot_invite(self, session: AsyncSession, band: Band, member_user: User):
        with pytest.raises(ForbiddenError):
            await authorize(session, band.id, member_user, BandAction.INVITE_MEMBER)

    @pytest.mark.asyncio
    async def test_admin_can_invite(self, session: AsyncSession, band: Band, admin_user: User):
        await authorize(session, band.id, admin_user, BandAction.INVITE_MEMBER)


class TestInvite:
    """Tests for invitation checks."""

    @pytest.mark.parametrize(
        ("role", "expected"),
        [(None, BandRole.MEMBER), ("member", BandRole.MEMBER), ("admin", BandRole.ADMIN)],
    )
    def test_parse_invite_role(self, role, expected):
        assert parse_invite_role(role) == expected

    @pytest.mark.parametrize("role", ["owner", "roadie"])
    def test_parse_invite_role_rejects(self, role):
        with pytest.raises(MalformedInputError):
            parse_invite_role(role)

    @pytest.mark.asyncio
    async def test_authorize_invite(self, session: AsyncSession, band: Band, admin_user: User):
        assert await authorize_invite(session, band.id, admin_user, "admin") == BandRole.ADMIN

    @pytest.mark.asyncio
    async def test_authorize_invite_checks_role_before_payload(
        self, session: AsyncSession, band: Band, member_user: User
    ):
        with pytest.raises(ForbiddenError):
            await authorize_invite(session, band.id, member_user, "owner")


class TestMemberRemoval:
    """Tests for member removal checks."""

    @pytest.mark.asyncio
    async def test_owner_removes_member(
        self, session: AsyncSession, band: Band, user: User, member_user: User
    ):
        target = await authorize_member_removal(session, band.id, user, member_user.id)
        assert target.user_id == member_user.id

    @pytest.mark.asyncio
    async def test_admin_removes_member(
        self, session: AsyncSession, band: Band, admin_user: User, member_user: User
    ):
        await authorize_member_removal(session, band.id, admin_user, member_user.id)

    @pytest.mark.asyncio
    async def test_member_cannot_remove(
        self, session: AsyncSession, band: Band, admin_user: User, member_user: User
    ):
        with pytest.raises(ForbiddenError):
            await authorize_member_removal(session, band.id, member_user, admin_user.id)

    @pytest.mark.asyncio
    async def test_owner_cannot_remove_self(self, session: AsyncSession, band: Band, user: User):
        with pytest.raises(ForbiddenError):
            await authorize_member_removal(session, band.id, user, user.id)

    @pytest.mark.asyncio
    async def test_admin_cannot_remove_self(self, session: AsyncSession, band: Band, admin_user: User):
        with pytest.raises(ForbiddenError):
            await authorize_member_removal(session, band.id, admin_user, admin_user.id)

    @pytest.mark.asyncio
    async def test_admin_cannot_remove_owner(
        self, session: AsyncSession, band: Band, user: User, admin_user: User
    ):
        with pytest.raises(ForbiddenError):
            await authorize_member_removal(session, band.id, admin_user, user.id)

    @pytest.mark.asyncio
    async def test_target_not_member(
        self, session: AsyncSession, band: Band, user: User, other_user: User
    ):
        with pytest.raises(NotFoundError):
            await authorize_member_removal(session, band.id, user, other_user.id)

    @pytest.mark.asyncio
    async def test_unauthenticated(self, session: AsyncSession, band: Band, user: User):
        with pytest.raises(UnauthenticatedError):
            await authorize_member_removal(session, band.id, None, user.id)


class TestBands:
    """Tests for the membership provider."""

    @pytest.mark.asyncio
    async def test_creator_is_owner(self, session: AsyncSession, band: Band, user: User):
        members = await bands.list_members(session, band.id)
        assert [(m.user_id, m.role) for m, _ in members] == [(user.id, BandRole.OWNER.value)]

    @pytest.mark.asyncio
    async def test_default_band_created_once(self, session: AsyncSession, other_user: User):
        created = await bands.ensure_default_band(session, other_user)
        await session.commit()
        assert created is not None
        assert created.name == bands.DEFAULT_BAND_NAME

        assert await bands.ensure_default_band(session, other_user) is None
        assert len(await bands.list_bands_for_user(session, other_user.id)) == 1

    @pytest.mark.asyncio
    async def test_remove_member(self, session: AsyncSession, band: Band, member_user: User):
        await bands.remove_member(session, band.id, member_user.id)
        await session.commit()
        assert await bands.get_member(session, band.id, member_user.id) is None
