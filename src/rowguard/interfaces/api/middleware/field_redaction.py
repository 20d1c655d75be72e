"""Field redaction middleware - strips unreadable fields from response bodies."""

import falcon
import falcon.asgi

from rowguard.domain.value_objects import Action, SubjectType
from rowguard.infrastructure.permission.field_redaction import redact_payload

_SUBJECTS = {s.value for s in SubjectType} - {SubjectType.ALL.value}


def subject_from_template(template: str | None) -> str | None:
    """``/v1/articles/{id}`` -> ``Article``; None if the segment names no subject."""
    if not template:
        return None
    for segment in template.strip("/").split("/"):
        if not segment or segment.startswith("{"):
            continue
        if segment[0] == "v" and segment[1:].isdigit():
            continue
        name = segment.capitalize()
        if name in _SUBJECTS:
            return name
        name = name.removesuffix("s")
        return name if name in _SUBJECTS else None
    return None


class FieldRedactionMiddleware:
    """Redacts resp.media with the request ability for the resource's subject.

    The subject is the resource's ``subject_type`` attribute, else derived
    from the route template. Responses without a user pass through.
    """

    def __init__(self, action: str = Action.READ) -> None:
        self._action = action

    async def process_response(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        resource,
        req_succeeded: bool,
    ) -> None:
        ability = getattr(req.context, "ability", None)
        if not req_succeeded or ability is None or resp.media is None:
            return
        if not 200 <= falcon.http_status_to_code(resp.status) < 300:
            return
        subject = getattr(resource, "subject_type", None) or subject_from_template(
            req.uri_template
        )
        if not subject:
            return
        resp.media = redact_payload(resp.media, ability, str(subject), self._action)
