"""
Domain operations for tracking-plan events.

Creating an event opens version 1 with one platform status per platform.
Updating an event either bumps the version (when a field that changes
what is sent to analytics is modified) or edits the current version in
place.  Bulk import and the status summary live here as well so views
stay thin.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, F
from rest_framework.exceptions import ValidationError

from .models import (
    IMPLEMENTATION_STATUSES,
    VALIDATION_STATUSES,
    Category,
    Event,
    EventPlatformStatus,
    EventVersion,
)

logger = logging.getLogger(__name__)

# A change to any of these opens a new version.
VERSIONED_FIELDS = ("category", "action", "name", "value_description", "properties")

EDITABLE_FIELDS = (
    "block", "action", "action_description", "name", "value_description",
    "owner", "platforms", "properties", "notes",
)

INITIAL_VERSION_NOTE = "Initial version"
IMPORT_CREATE_NOTE = "Imported from CSV"
IMPORT_UPDATE_NOTE = "Updated from CSV import"


def get_or_create_category(name) -> Category:
    name = (name or "").strip() if isinstance(name, str) else ""
    if not name:
        raise ValidationError({"category": ["Event category is required."]})
    category, _ = Category.objects.get_or_create(name=name)
    return category


def _unique_platforms(platforms) -> list[str]:
    seen = []
    for platform in platforms or []:
        if platform not in seen:
            seen.append(platform)
    return seen


def _clean_action(value) -> str:
    action = (value or "").strip() if isinstance(value, str) else ""
    if not action:
        raise ValidationError({"action": ["Event action is required."]})
    return action


def _ensure_unique(category: Category, action: str, exclude_pk=None) -> None:
    qs = Event.objects.filter(category=category, action=action)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise ValidationError(
            {"action": [f'An event with category "{category.name}" and action "{action}" already exists.']}
        )


def _snapshot_fields(event: Event) -> dict:
    return {
        "category_name": event.category.name,
        "block": event.block,
        "action": event.action,
        "action_description": event.action_description,
        "name": event.name,
        "value_description": event.value_description,
        "owner": event.owner,
        "platforms": list(event.platforms or []),
        "properties": list(event.properties or []),
        "notes": event.notes,
    }


def _open_platform_statuses(event: Event, version: int, platforms) -> None:
    for platform in _unique_platforms(platforms):
        EventPlatformStatus.objects.get_or_create(event=event, version_number=version, platform=platform)


def _sync_platform_statuses(event: Event, version: int, platforms) -> None:
    platforms = _unique_platforms(platforms)
    EventPlatformStatus.objects.filter(event=event, version_number=version).exclude(
        platform__in=platforms
    ).delete()
    _open_platform_statuses(event, version, platforms)


@transaction.atomic
def create_event(data: dict, author=None, change_description: str = INITIAL_VERSION_NOTE) -> Event:
    """Create an event with version 1 and its platform statuses."""
    category = get_or_create_category(data.get("category"))
    action = _clean_action(data.get("action"))
    _ensure_unique(category, action)

    platforms = _unique_platforms(data.get("platforms"))
    event = Event.objects.create(
        category=category,
        action=action,
        block=data.get("block") or "",
        action_description=data.get("action_description") or "",
        name=data.get("name") or "",
        value_description=data.get("value_description") or "",
        owner=data.get("owner"),
        author=author,
        platforms=platforms,
        properties=[dict(p) for p in data.get("properties") or []],
        notes=data.get("notes") or "",
        current_version=1,
    )
    EventVersion.objects.create(
        event=event, version=1, change_description=change_description, author=author, **_snapshot_fields(event)
    )
    _open_platform_statuses(event, 1, platforms)
    logger.info("Created event %s (%s)", event.pk, event)
    return event


def requires_new_version(event: Event, data: dict) -> bool:
    for field in VERSIONED_FIELDS:
        if field not in data:
            continue
        if field == "category":
            if (data["category"] or "").strip() != event.category.name:
                return True
        elif field == "properties":
            if [dict(p) for p in data["properties"] or []] != list(event.properties or []):
                return True
        elif (data[field] or "") != (getattr(event, field) or ""):
            return True
    return False


@transaction.atomic
def update_event(event: Event, data: dict, author=None, change_description: str | None = None,
                 force_new_version: bool = False) -> Event:
    """
    Apply ``data`` to ``event``.

    Only keys present in ``data`` are changed.  A versioned-field change
    (or ``force_new_version``) bumps ``current_version``, snapshots the
    new version and opens fresh platform statuses for it.  Otherwise the
    current version snapshot is refreshed and its platform statuses are
    synced with the platform list.
    """
    if "action" in data:
        data = {**data, "action": _clean_action(data["action"])}
    new_version = force_new_version or requires_new_version(event, data)

    if "category" in data:
        event.category = get_or_create_category(data["category"])
    for field in EDITABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == "platforms":
            value = _unique_platforms(value)
        elif field == "properties":
            value = [dict(p) for p in value or []]
        elif field != "owner":
            value = value or ""
        setattr(event, field, value)

    if "category" in data or "action" in data:
        _ensure_unique(event.category, event.action, exclude_pk=event.pk)

    if new_version:
        event.current_version += 1
        event.save()
        EventVersion.objects.create(
            event=event,
            version=event.current_version,
            change_description=change_description or f"Updated to version {event.current_version}",
            author=author,
            **_snapshot_fields(event),
        )
        _open_platform_statuses(event, event.current_version, event.platforms)
        logger.info("Event %s moved to version %s", event.pk, event.current_version)
    else:
        event.save()
        EventVersion.objects.update_or_create(
            event=event, version=event.current_version, defaults=_snapshot_fields(event)
        )
        _sync_platform_statuses(event, event.current_version, event.platforms)
    return event


def get_stats() -> dict:
    """Status counters over the platform statuses of each event's current version."""
    current = EventPlatformStatus.objects.filter(version_number=F("event__current_version"))

    by_implementation = {status: 0 for status in IMPLEMENTATION_STATUSES}
    for row in current.values("implementation_status").annotate(n=Count("id")):
        by_implementation[row["implementation_status"]] = row["n"]

    by_validation = {status: 0 for status in VALIDATION_STATUSES}
    for row in current.values("validation_status").annotate(n=Count("id")):
        by_validation[row["validation_status"]] = row["n"]

    return {
        "total": Event.objects.count(),
        "by_implementation_status": by_implementation,
        "by_validation_status": by_validation,
    }


def _error_text(exc: Exception) -> str:
    detail = getattr(exc, "detail", None)
    if isinstance(detail, dict):
        parts = []
        for messages in detail.values():
            if isinstance(messages, (list, tuple)):
                parts.extend(str(m) for m in messages)
            else:
                parts.append(str(messages))
        return "; ".join(parts)
    if isinstance(detail, (list, tuple)):
        return "; ".join(str(m) for m in detail)
    return str(exc) or exc.__class__.__name__


def preview_import(rows: list[dict]) -> dict:
    """Split parsed rows into new events, events that already exist, and errors."""
    new_events, existing_events, errors = [], [], []
    valid = []
    for row in rows:
        if not (row.get("category") or "").strip() or not (row.get("action") or "").strip():
            errors.append("Row without category or action skipped")
            continue
        valid.append(row)

    existing = {
        (e.category.name, e.action): e
        for e in Event.objects.select_related("category").filter(
            category__name__in={r["category"].strip() for r in valid},
            action__in={r["action"] for r in valid},
        )
    }
    for row in valid:
        match = existing.get((row["category"].strip(), row["action"]))
        if match:
            existing_events.append({
                "parsed": row,
                "existing_id": match.pk,
                "existing_version": match.current_version,
            })
        else:
            new_events.append(row)
    return {"new_events": new_events, "existing_events": existing_events, "errors": errors}


def import_events(new_events: list[dict], update_events: list[dict], author=None) -> dict:
    """Create and update events in bulk; per-row failures are collected."""
    created = updated = skipped = 0
    errors = []

    for row in new_events:
        try:
            create_event(row, author=author, change_description=IMPORT_CREATE_NOTE)
            created += 1
        except (ValidationError, IntegrityError, KeyError) as exc:
            errors.append(f"Failed to create {row.get('category')}/{row.get('action')}: {_error_text(exc)}")

    for item in update_events:
        parsed = item.get("parsed") or {}
        event = Event.objects.select_related("category").filter(pk=item.get("existing_id")).first()
        if event is None:
            skipped += 1
            continue
        data = {k: parsed[k] for k in ("category", "action", "name", "block", "action_description",
                                       "value_description", "platforms", "properties") if k in parsed}
        try:
            update_event(event, data, author=author, change_description=IMPORT_UPDATE_NOTE,
                         force_new_version=True)
            updated += 1
        except (ValidationError, IntegrityError) as exc:
            errors.append(f"Failed to update {parsed.get('category')}/{parsed.get('action')}: {_error_text(exc)}")

    logger.info("Import finished: %s created, %s updated, %s skipped, %s errors",
                created, updated, skipped, len(errors))
    return {"created": created, "updated": updated, "skipped": skipped, "errors": errors}
