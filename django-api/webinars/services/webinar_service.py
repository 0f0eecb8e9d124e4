"""Webinar service - catalog reads, admin authoring and per-requester projection.

Status is derived from the clock on every read. The meeting link and the
attendee list are stripped here, before any serializer sees the webinar.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from typing import Any

from webinars.domain import (
    AttendeeView,
    Requester,
    Resource,
    ResourceType,
    Webinar,
    WebinarDraft,
    WebinarGroup,
    WebinarStatus,
    WebinarView,
)
from webinars.domain.errors import (
    HasAttendeesError,
    InvalidWebinarIdError,
    PermissionDeniedError,
    ValidationError,
    WebinarNotFoundError,
)
from webinars.domain.links import normalize_meeting_link
from webinars.domain.status import calculated_status
from webinars.services.registration_service import parse_webinar_id
from webinars.stores.interfaces import UserStore, WebinarStore

logger = logging.getLogger(__name__)

# Fields an admin update may change. Attendees and identity never move.
EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "presenter",
        "date",
        "group",
        "price",
        "publication_status",
        "meeting_link",
        "image_url",
        "linked_content_ids",
    }
)

_LINK_VISIBLE_STATUSES = (WebinarStatus.UPCOMING, WebinarStatus.LIVE)


def parse_group(raw: str | None) -> WebinarGroup | None:
    if raw in (None, ""):
        return None
    try:
        return WebinarGroup(raw)
    except ValueError:
        raise ValidationError("Groupe de webinaire inconnu.") from None


class WebinarService:
    """Service for webinar catalog and authoring operations."""

    def __init__(self, webinars: WebinarStore, users: UserStore, clock: Callable[[], datetime]) -> None:
        self._webinars = webinars
        self._users = users
        self._clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_webinars(self, requester: Requester | None, group: str | None = None) -> list[WebinarView]:
        """Return webinars, newest first. Non-admins only see published ones."""
        is_admin = requester is not None and requester.is_admin
        webinars = self._webinars.list_webinars(group=parse_group(group), published_only=not is_admin)
        return self._project_all(webinars, requester)

    def my_webinars(self, requester: Requester) -> list[WebinarView]:
        """Return the webinars the requester is registered to. Admins get all of them."""
        if requester.is_admin:
            webinars = self._webinars.list_webinars()
        else:
            webinars = self._webinars.list_webinars_for_user(requester.user_id)
        return self._project_all(webinars, requester)

    def get_webinar(self, webinar_id: str, requester: Requester | None) -> WebinarView:
        """Return one webinar projected for the requester.

        Raises:
            InvalidWebinarIdError: If webinar_id is not a valid UUID.
            WebinarNotFoundError: If it does not exist or is not visible.
        """
        webinar = self._require_webinar(webinar_id)
        if not webinar.is_published and not (requester and requester.is_admin):
            raise WebinarNotFoundError()
        return self._project_all([webinar], requester)[0]

    def get_catalog(self, raw_ids: Iterable[str]) -> list[WebinarView]:
        """Public projection for a list of ids, as used by the cart.

        Malformed and unknown ids are skipped.
        """
        ids = []
        for raw in raw_ids:
            try:
                ids.append(parse_webinar_id(raw))
            except InvalidWebinarIdError:
                logger.debug("Skipping malformed webinar id %r", raw)
        if not ids:
            return []
        now = self._clock()
        return [
            self.project(webinar, None, now)
            for webinar in self._webinars.get_webinars_by_ids(ids)
            if webinar.is_published
        ]

    def project(
        self,
        webinar: Webinar,
        requester: Requester | None,
        now: datetime,
        accounts: dict | None = None,
    ) -> WebinarView:
        """Build the view of a webinar for one requester at one instant."""
        status = calculated_status(webinar.date, webinar.group, now)
        attendee = webinar.attendee_for(requester.user_id) if requester else None
        registration_status = attendee.status if attendee else None

        if requester is not None and requester.is_admin:
            accounts = accounts or {}
            return WebinarView(
                webinar=webinar,
                calculated_status=status,
                is_registered=attendee is not None,
                registration_status=registration_status,
                meeting_link=webinar.meeting_link,
                attendees=tuple(AttendeeView(a, accounts.get(a.user_id)) for a in webinar.attendees),
            )

        link = None
        if attendee is not None and attendee.is_confirmed and status in _LINK_VISIBLE_STATUSES:
            link = webinar.meeting_link
        return WebinarView(
            webinar=replace(webinar, attendees=(), meeting_link=None),
            calculated_status=status,
            is_registered=attendee is not None,
            registration_status=registration_status,
            meeting_link=link,
        )

    # ------------------------------------------------------------------
    # Authoring (admin)
    # ------------------------------------------------------------------

    def create_webinar(self, draft: WebinarDraft) -> Webinar:
        if not draft.title.strip():
            raise ValidationError("Le titre est obligatoire.")
        draft = replace(draft, meeting_link=normalize_meeting_link(draft.meeting_link))
        webinar = self._webinars.create_webinar(draft)
        logger.info("Created webinar %s (%s)", webinar.id, webinar.group)
        return webinar

    def update_webinar(self, webinar_id: str, changes: dict[str, Any]) -> Webinar:
        """Apply an admin edit. Unknown fields are ignored."""
        wid = parse_webinar_id(webinar_id)
        changes = {field: value for field, value in changes.items() if field in EDITABLE_FIELDS}
        if "title" in changes and not str(changes["title"]).strip():
            raise ValidationError("Le titre est obligatoire.")
        if "meeting_link" in changes:
            changes["meeting_link"] = normalize_meeting_link(changes["meeting_link"])
        webinar = self._webinars.update_webinar(wid, changes)
        if webinar is None:
            raise WebinarNotFoundError()
        logger.info("Updated webinar %s fields %s", wid, sorted(changes))
        return webinar

    def delete_webinar(self, webinar_id: str, force: bool = False) -> None:
        """Delete a webinar. Refuses when attendees exist unless forced.

        Raises:
            HasAttendeesError: If attendees exist and force is False.
        """
        webinar = self._require_webinar(webinar_id)
        if webinar.attendees and not force:
            raise HasAttendeesError()
        self._webinars.delete_webinar(webinar.id)
        logger.info("Deleted webinar %s with %d attendee(s)", webinar.id, len(webinar.attendees))

    def update_resources(self, webinar_id: str, requester: Requester, resources: list[dict[str, str]]) -> Webinar:
        """Replace the resources of a webinar.

        ADMIN may always do it. ADMIN_WEBINAR may do it until the webinar is past.
        """
        parsed = [_parse_resource(item) for item in resources]
        webinar = self._require_webinar(webinar_id)
        if not requester.is_admin:
            raise PermissionDeniedError()
        if not requester.is_superadmin:
            status = calculated_status(webinar.date, webinar.group, self._clock())
            if status == WebinarStatus.PAST:
                raise PermissionDeniedError("Les ressources d'un webinaire passé sont réservées aux administrateurs.")
        self._webinars.set_resources(webinar.id, parsed)
        logger.info("Replaced %d resource(s) on webinar %s", len(parsed), webinar.id)
        return replace(webinar, resources=tuple(parsed))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_webinar(self, webinar_id: str) -> Webinar:
        webinar = self._webinars.get_webinar(parse_webinar_id(webinar_id))
        if webinar is None:
            raise WebinarNotFoundError()
        return webinar

    def _project_all(self, webinars: list[Webinar], requester: Requester | None) -> list[WebinarView]:
        now = self._clock()
        accounts = None
        if requester is not None and requester.is_admin:
            user_ids = {a.user_id for webinar in webinars for a in webinar.attendees}
            accounts = self._users.get_users(user_ids) if user_ids else {}
        return [self.project(webinar, requester, now, accounts) for webinar in webinars]


def _parse_resource(item: dict[str, str]) -> Resource:
    if not isinstance(item, dict):
        raise ValidationError("Ressource invalide.")
    try:
        kind = ResourceType(item.get("type"))
    except ValueError:
        raise ValidationError("Type de ressource inconnu.") from None
    source = item.get("source") or item.get("url") or ""
    if not source:
        raise ValidationError("La source de la ressource est obligatoire.")
    return Resource(type=kind, title=item.get("title") or "", source=source)
