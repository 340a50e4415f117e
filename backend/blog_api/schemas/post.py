"""Post Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class PostWriteSchema(Schema):
    """Input payload for creating or replacing a post."""

    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    content = fields.String(required=True, validate=validate.Length(min=1))


class PostSchema(Schema):
    """Serialized representation of a post."""

    id = fields.Integer(required=True)
    title = fields.String(required=True)
    content = fields.String(required=True)
    author_id = fields.Integer(required=True)
    author_name = fields.String(allow_none=True)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
