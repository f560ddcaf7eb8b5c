import math


def pagination_envelope(page, per_page, total):
    total_pages = math.ceil(total / per_page) if per_page else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_records": total,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def paginate(query, page, per_page):
    """Run a count and a LIMIT/OFFSET page over the same query."""
    page = max(int(page or 1), 1)
    total = query.order_by(None).count()
    items = query.limit(per_page).offset((page - 1) * per_page).all()
    return items, pagination_envelope(page, per_page, total)
