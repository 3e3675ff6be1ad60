# marketplace/core/pagination.py
from flask import current_app, jsonify, request
from marshmallow import Schema, fields, validate, EXCLUDE
from sqlalchemy import or_


class PaginationSchema(Schema):
    """``page`` and ``limit`` query parameters shared by every list endpoint"""

    class Meta:
        unknown = EXCLUDE

    page = fields.Int(load_default=1, validate=validate.Range(min=1))
    limit = fields.Int(load_default=10, validate=validate.Range(min=1, max=1000))


def get_pagination_args(args=None):
    params = PaginationSchema().load(args if args is not None else request.args)
    max_size = current_app.config.get("MAX_PAGE_SIZE", 1000)
    return params["page"], min(params["limit"], max_size)


def paginate(query, items_key, serializer=None, page=None, limit=None):
    """Paginate a query and build the standard list response"""
    if page is None or limit is None:
        page, limit = get_pagination_args()

    pagination = query.paginate(page=page, per_page=limit, error_out=False)
    serializer = serializer or (lambda item: item.to_dict())

    return jsonify(
        {
            items_key: [serializer(item) for item in pagination.items],
            "total": pagination.total,
            "page": page,
            "limit": limit,
            "totalPages": pagination.pages,
            "hasNextPage": page < pagination.pages,
            "hasPreviousPage": page > 1,
        }
    )


def apply_search(query, term, *columns):
    """Case-insensitive substring match of ``term`` against any of ``columns``.

    ``%`` and ``_`` in ``term`` match themselves, not any character.
    """
    term = (term or "").strip()
    if not term:
        return query
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return query.filter(or_(*(column.ilike(pattern, escape="\\") for column in columns)))
