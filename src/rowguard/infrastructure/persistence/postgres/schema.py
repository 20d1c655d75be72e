"""Entity metadata for the PostgreSQL schema, keyed by subject type."""

from rowguard.domain.value_objects import EntityMetadata, RelationMetadata, SubjectType

USER = EntityMetadata(
    subject=SubjectType.USER,
    table="users",
    primary_key="id",
    columns=(
        "id",
        "email",
        "first_name",
        "last_name",
        "is_admin",
        "created_at",
        "updated_at",
    ),
    relations=(
        RelationMetadata("articles", SubjectType.ARTICLE, "id", "author_id", many=True),
        RelationMetadata("files", SubjectType.FILE, "id", "owner_id", many=True),
    ),
)

ROLE = EntityMetadata(
    subject=SubjectType.ROLE,
    table="role",
    primary_key="id",
    columns=("id", "name"),
)

PERMISSION = EntityMetadata(
    subject=SubjectType.PERMISSION,
    table="permission",
    primary_key="id",
    columns=(
        "id",
        "action",
        "subject",
        "fields",
        "conditions",
        "inverted",
        "reason",
        "created_at",
        "updated_at",
    ),
)

ARTICLE = EntityMetadata(
    subject=SubjectType.ARTICLE,
    table="article",
    primary_key="id",
    columns=(
        "id",
        "title",
        "summary",
        "content",
        "status",
        "author_id",
        "created_at",
        "updated_at",
    ),
    relations=(RelationMetadata("author", SubjectType.USER, "author_id", "id"),),
)

FILE = EntityMetadata(
    subject=SubjectType.FILE,
    table="file",
    primary_key="id",
    columns=(
        "id",
        "name",
        "bucket",
        "object_key",
        "mime_type",
        "size",
        "owner_id",
        "created_at",
    ),
    relations=(RelationMetadata("owner", SubjectType.USER, "owner_id", "id"),),
)

ENTITY_METADATA: dict[str, EntityMetadata] = {
    m.subject.value: m for m in (USER, ROLE, PERMISSION, ARTICLE, FILE)
}


def get_entity_metadata(subject: str) -> EntityMetadata | None:
    """Metadata for a subject type, or None if the subject has no table."""
    return ENTITY_METADATA.get(str(subject))
