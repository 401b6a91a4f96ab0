"""
User Directory

Merged view of onboarded profiles and pending invitations, plus the
administrative actions on them (invite, edit, revoke/cancel, approve).
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Union
from uuid import UUID

import asyncpg

from ..models.change_event import ChangeEvent
from ..models.directory import (
    INVITE_ID_PREFIX,
    INVITED_STATUS,
    DirectoryEntry,
    DirectoryStats,
    Invite,
    InviteEntry,
    MemberRole,
    Profile,
    ProfileEntry,
    ProfileStatus,
    is_invite_entry_id,
)
from ..models.fields import as_uuid
from ..models.notification import NotificationType
from ..storage.base import STORAGE_ERRORS
from ..storage.invite_storage import InviteStorage
from ..storage.profile_storage import ProfileStorage
from .audit_service import AuditService
from .context import SessionContext
from .errors import RemoteOperationError
from .notification_service import NotificationService
from .reducers import ChangeSequence, apply_change, remove, upsert
from .scope import OperationScope

logger = logging.getLogger("boardportal.services.user_directory")

ALL_ROLES = "All Roles"
ACTIVE_NOW_WINDOW = timedelta(minutes=5)


def merge_directory(profiles: Iterable[Profile], invites: Iterable[Invite]) -> List[DirectoryEntry]:
    """Profiles and projected invitations as one list sorted by display name"""
    entries: List[DirectoryEntry] = [ProfileEntry(p) for p in profiles]
    entries.extend(InviteEntry(i) for i in invites)
    return sorted(entries, key=lambda e: e.display_name.lower())


def matches_filters(
    entry: DirectoryEntry,
    query: str = "",
    role: Optional[str] = None,
    status: Optional[str] = None,
) -> bool:
    """
    Search predicate shared by both entry kinds.

    query: case-insensitive substring of name, email or department
    role: exact role; None or "All Roles" matches any, "Invited" matches
          pending invitations
    status: exact status
    """
    needle = (query or "").strip().lower()
    if needle:
        haystack = (entry.display_name, entry.email, entry.department)
        if not any(needle in (value or "").lower() for value in haystack):
            return False

    if role and role != ALL_ROLES:
        if role == INVITED_STATUS:
            if not isinstance(entry, InviteEntry):
                return False
        elif entry.role != role:
            return False

    if status and entry.status != status:
        return False
    return True


def directory_stats(entries: Iterable[DirectoryEntry], now: datetime) -> DirectoryStats:
    stats = DirectoryStats()
    for entry in entries:
        if entry.status == ProfileStatus.ACTIVE.value:
            stats.active_members += 1
        if entry.status == ProfileStatus.PENDING.value:
            stats.pending_approvals += 1
        last_active = entry.last_active
        if last_active is not None:
            if last_active.tzinfo is None:
                last_active = last_active.replace(tzinfo=timezone.utc)
            if now - last_active < ACTIVE_NOW_WINDOW:
                stats.active_now += 1
    return stats


class UserDirectory:
    """
    Mirror of `profiles` and `user_invites` for one portal session.

    Actions branch on the entry variant: invitation ids look like
    "invite-<email>" and target `user_invites`; anything else is a
    profile id and targets `profiles`.
    """

    profiles_table = "profiles"
    invites_table = "user_invites"

    def __init__(
        self,
        context: SessionContext,
        profile_storage: ProfileStorage,
        invite_storage: InviteStorage,
        notification_service: NotificationService,
        audit_service: AuditService,
        scope: OperationScope,
    ):
        self.context = context
        self.profile_storage = profile_storage
        self.invite_storage = invite_storage
        self.notification_service = notification_service
        self.audit_service = audit_service
        self.scope = scope
        self.profiles: List[Profile] = []
        self.invites: List[Invite] = []
        self.loading = False
        self._sequence = ChangeSequence()

    @property
    def entries(self) -> List[DirectoryEntry]:
        return merge_directory(self.profiles, self.invites)

    def get_entry(self, entry_id: str) -> Optional[DirectoryEntry]:
        return next((e for e in self.entries if e.id == entry_id), None)

    def search(
        self,
        query: str = "",
        role: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[DirectoryEntry]:
        return [e for e in self.entries if matches_filters(e, query, role, status)]

    def stats(self, now: Optional[datetime] = None) -> DirectoryStats:
        return directory_stats(self.entries, now or datetime.now(timezone.utc))

    # ============================================
    # Loading
    # ============================================

    async def fetch_directory(self) -> List[DirectoryEntry]:
        """Load profiles and invitations"""
        self.loading = True
        try:
            profiles = await self.scope.run(self.profile_storage.list_all())
            try:
                invites = await self.scope.run(self.invite_storage.list_all())
            except asyncpg.UndefinedTableError:
                # invites migration not applied yet
                logger.warning("user_invites table missing; listing profiles only")
                invites = []
        except STORAGE_ERRORS as e:
            logger.error(f"Error fetching users: {e}")
            raise RemoteOperationError("load members", e) from e
        finally:
            self.loading = False

        if self.scope.is_active:
            self.profiles = profiles
            self.invites = invites
        return self.entries

    # ============================================
    # Actions
    # ============================================

    async def invite_member(
        self,
        email: str,
        role: MemberRole,
        department: Optional[str] = None,
    ) -> InviteEntry:
        """
        Create or update a pending invitation.

        New addresses are stored lower-cased; re-inviting an address that
        is already pending keeps the stored spelling so the row is updated.
        """
        email = email.strip().lower()
        if not email:
            raise ValueError("Email is required")

        existing = next((i for i in self.invites if i.email.lower() == email), None)
        if existing is not None:
            email = existing.email
        return await self._save_invite(email, role, department)

    async def _save_invite(
        self,
        email: str,
        role: MemberRole,
        department: Optional[str],
    ) -> InviteEntry:
        invite = Invite(
            email=email,
            role=MemberRole(role),
            department=department or None,
            invited_by=self.context.user_id,
        )
        try:
            saved = await self.scope.run(self.invite_storage.upsert(invite))
        except STORAGE_ERRORS as e:
            logger.error(f"Error saving invitation: {e}")
            raise RemoteOperationError("send invitation", e) from e

        if self.scope.is_active:
            self.invites = upsert(self.invites, saved, key=lambda i: i.email)
        logger.info(f"Invitation saved for {saved.email}")
        return InviteEntry(saved)

    async def update_entry(
        self,
        entry_id: str,
        full_name: Optional[str] = None,
        role: Optional[MemberRole] = None,
        department: Optional[str] = None,
        status: Optional[ProfileStatus] = None,
    ) -> Optional[DirectoryEntry]:
        """Edit a member; for invitations only role and department apply"""
        if is_invite_entry_id(entry_id):
            email = entry_id[len(INVITE_ID_PREFIX):]
            current = next((i for i in self.invites if i.email == email), None)
            if current is None:
                return None
            return await self._save_invite(
                current.email,
                role or current.role,
                department if department is not None else current.department,
            )

        profile_id = UUID(entry_id)
        fields = {
            "full_name": full_name,
            "role": MemberRole(role) if role else None,
            "department": department,
            "status": ProfileStatus(status) if status else None,
        }
        try:
            updated = await self.scope.run(self.profile_storage.update(profile_id, fields))
        except STORAGE_ERRORS as e:
            logger.error(f"Error updating profile: {e}")
            raise RemoteOperationError("sync profile change", e) from e

        if updated is None:
            return None
        if self.scope.is_active:
            self.profiles = upsert(self.profiles, updated)
        return ProfileEntry(updated)

    async def revoke_access(self, entry_id: str) -> DirectoryEntry:
        """
        Revoke a member or withdraw an invitation.

        Invitation: the invite row is deleted.
        Profile: status becomes Inactive; the row is kept.
        """
        entry = self.get_entry(entry_id)
        if entry is None:
            raise LookupError(f"Directory entry not found: {entry_id}")

        if isinstance(entry, InviteEntry):
            return await self._cancel_invite(entry)
        return await self._revoke_profile(entry)

    async def _cancel_invite(self, entry: InviteEntry) -> InviteEntry:
        email = entry.invite.email
        try:
            await self.scope.run(self.invite_storage.delete_by_email(email))
        except STORAGE_ERRORS as e:
            logger.error(f"Error cancelling invitation: {e}")
            raise RemoteOperationError("withdraw invitation", e) from e

        if self.scope.is_active:
            self.invites = remove(self.invites, email, key=lambda i: i.email)
        logger.info(f"Invitation for {email} withdrawn")
        return entry

    async def _revoke_profile(self, entry: ProfileEntry) -> ProfileEntry:
        profile = entry.profile
        try:
            found = await self.scope.run(
                self.profile_storage.set_status(profile.id, ProfileStatus.INACTIVE)
            )
        except STORAGE_ERRORS as e:
            logger.error(f"Error revoking access: {e}")
            raise RemoteOperationError("revoke institutional access", e) from e
        if not found:
            raise LookupError(f"Profile not found: {profile.id}")

        revoked = Profile(**{**profile.__dict__, "status": ProfileStatus.INACTIVE})
        if self.scope.is_active:
            self.profiles = upsert(self.profiles, revoked)

        name = entry.display_name
        await self.audit_service.log_action(
            self.context.user_id,
            "ACCESS_REVOKED",
            "user",
            str(profile.id),
            {"revoked_user": name, "timestamp": datetime.now(timezone.utc).isoformat()},
        )
        await self.notification_service.create_notification(
            self.context.user_id,
            "Access Revoked",
            f"Institutional access for {name} has been suspended.",
            NotificationType.WARNING,
        )
        logger.info(f"Access revoked for {name}")
        return ProfileEntry(revoked)

    async def approve_member(self, profile_id: Union[str, UUID]) -> ProfileEntry:
        """Activate a pending profile and notify both sides"""
        if isinstance(profile_id, str) and is_invite_entry_id(profile_id):
            raise ValueError("Invitations cannot be approved; the member must join first")
        profile_id = as_uuid(profile_id)

        try:
            found = await self.scope.run(
                self.profile_storage.set_status(profile_id, ProfileStatus.ACTIVE)
            )
        except STORAGE_ERRORS as e:
            logger.error(f"Error approving user: {e}")
            raise RemoteOperationError("approve member", e) from e
        if not found:
            raise LookupError(f"Profile not found: {profile_id}")

        current = next((p for p in self.profiles if p.id == profile_id), None)
        if current is None:
            current = await self._reload_profile(profile_id)
        approved = Profile(**{**current.__dict__, "status": ProfileStatus.ACTIVE})
        if self.scope.is_active:
            self.profiles = upsert(self.profiles, approved)

        name = approved.full_name or approved.email or str(profile_id)
        await self.audit_service.log_action(
            self.context.user_id,
            "USER_APPROVAL",
            "user",
            str(profile_id),
            {"approved_user": name, "timestamp": datetime.now(timezone.utc).isoformat()},
        )
        await self.notification_service.create_notification(
            profile_id,
            "Institutional Access Approved",
            "Your application for the Board Portal has been approved. "
            "You now have full access to your assigned resources.",
            NotificationType.SUCCESS,
        )
        await self.notification_service.create_notification(
            self.context.user_id,
            "Member Approved",
            f"{name} has been successfully authorized.",
            NotificationType.INFO,
        )
        logger.info(f"Approved member {name}")
        return ProfileEntry(approved)

    # ============================================
    # Change feed
    # ============================================

    def apply_profile_change(self, change: ChangeEvent):
        if not self.scope.is_active:
            return None
        profile_id = as_uuid(change.record.get("id"))
        ticket = self._sequence.bump(("profile", profile_id))
        if change.needs_reload:
            return self._reload_pushed_profile(profile_id, ticket)
        self.profiles = apply_change(
            self.profiles,
            change,
            parse=Profile.from_dict,
            record_key=lambda r: as_uuid(r.get("id")),
        )
        return None

    def apply_invite_change(self, change: ChangeEvent):
        if not self.scope.is_active:
            return None
        email = change.record.get("email")
        ticket = self._sequence.bump(("invite", email))
        if change.needs_reload:
            return self._reload_pushed_invite(email, ticket)
        self.invites = apply_change(
            self.invites,
            change,
            parse=Invite.from_dict,
            key=lambda i: i.email,
            record_key=lambda r: r.get("email"),
        )
        return None

    async def _reload_profile(self, profile_id: UUID) -> Profile:
        try:
            profile = await self.scope.run(self.profile_storage.get_by_id(profile_id))
        except STORAGE_ERRORS as e:
            logger.warning(f"Could not reload profile {profile_id}: {e}")
            profile = None
        return profile or Profile(id=profile_id)

    async def _reload_pushed_profile(self, profile_id: UUID, ticket: int):
        try:
            profile = await self.scope.run(self.profile_storage.get_by_id(profile_id))
        except STORAGE_ERRORS as e:
            logger.warning(f"Could not reload pushed profile {profile_id}: {e}")
            return
        if profile is None or not self.scope.is_active:
            return
        if not self._sequence.is_current(("profile", profile_id), ticket):
            return
        self.profiles = upsert(self.profiles, profile)

    async def _reload_pushed_invite(self, email: str, ticket: int):
        try:
            invite = await self.scope.run(self.invite_storage.get_by_email(email))
        except STORAGE_ERRORS as e:
            logger.warning(f"Could not reload pushed invitation {email}: {e}")
            return
        if invite is None or not self.scope.is_active:
            return
        if not self._sequence.is_current(("invite", email), ticket):
            return
        self.invites = upsert(self.invites, invite, key=lambda i: i.email)
