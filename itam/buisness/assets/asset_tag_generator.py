"""
Asset tag generation from per-category tag formats
"""

import re
from typing import Iterable, Optional
from itam.data.assets.asset import Asset
from itam import db
from itam.data.assets.category_tag_format import CategoryTagFormat
from itam.data.assets.lookups import Category

TAG_FORMAT_MISSING = (
    'Tag Format not configured for this Category. '
    'Please configure it under Setup → Tag Format.'
)

DEFAULT_ZERO_PADDING = 2
MIN_ZERO_PADDING = 1
MAX_ZERO_PADDING = 10

_LEADING_DIGITS = re.compile(r'^\d+')


def used_numbers(tags: Iterable[Optional[str]], prefix: str) -> set:
    """Positive numbers following the prefix in the given tags"""
    numbers = set()
    for tag in tags:
        if not tag or not tag.startswith(prefix):
            continue
        match = _LEADING_DIGITS.match(tag[len(prefix):])
        if match and int(match.group()) > 0:
            numbers.add(int(match.group()))
    return numbers


def format_tag(prefix: str, number: int, zero_padding: Optional[int]) -> str:
    return f'{prefix}{str(number).zfill(zero_padding or DEFAULT_ZERO_PADDING)}'


def first_free_number(numbers: set) -> int:
    """Smallest positive integer not in numbers (gaps are reused)"""
    candidate = 1
    while candidate in numbers:
        candidate += 1
    return candidate


def next_asset_tag(tenant_id: int, category_id: int) -> str:
    """
    Next free asset tag for a category.

    Raises:
        ValueError: If the category has no tag format configured
    """
    if not category_id:
        raise ValueError('Please select a category first')

    tag_format = CategoryTagFormat.query.filter_by(
        tenant_id=tenant_id, category_id=category_id
    ).first()
    if tag_format is None:
        raise ValueError(TAG_FORMAT_MISSING)

    rows = Asset.query.with_entities(Asset.asset_tag).filter(
        Asset.tenant_id == tenant_id,
        Asset.asset_tag.like(f'{tag_format.prefix}%'),
    ).all()
    numbers = used_numbers((row.asset_tag for row in rows), tag_format.prefix)
    return format_tag(tag_format.prefix, first_free_number(numbers), tag_format.zero_padding)


def tag_formats(tenant_id: int):
    """(category, tag format or None) for every active category of the tenant"""
    formats = {
        row.category_id: row
        for row in CategoryTagFormat.query.filter_by(tenant_id=tenant_id).all()
    }
    categories = Category.query.filter(
        Category.tenant_id == tenant_id, Category.is_active.is_(True),
    ).order_by(Category.name).all()
    return [(category, formats.get(category.id)) for category in categories]


def save_tag_format(tenant_id: int, category_id, prefix, zero_padding, user_id=None) -> CategoryTagFormat:
    """
    Create or update the tag format of a category.

    Raises:
        ValueError: Missing category or prefix, or padding outside 1..10
    """
    if not category_id:
        raise ValueError('Please select a category')
    prefix = (prefix or '').strip().upper()
    if not prefix:
        raise ValueError('Prefix is required')
    try:
        padding = int(zero_padding) if zero_padding not in (None, '') else DEFAULT_ZERO_PADDING
    except (TypeError, ValueError):
        raise ValueError('Zero padding must be a number')
    if not MIN_ZERO_PADDING <= padding <= MAX_ZERO_PADDING:
        raise ValueError(f'Zero padding must be between {MIN_ZERO_PADDING} and {MAX_ZERO_PADDING}')

    category = Category.query.filter_by(id=int(category_id), tenant_id=tenant_id).first()
    if category is None:
        raise ValueError('Category not found')

    tag_format = CategoryTagFormat.query.filter_by(tenant_id=tenant_id, category_id=category.id).first()
    if tag_format is None:
        tag_format = CategoryTagFormat(tenant_id=tenant_id, category_id=category.id, created_by_id=user_id)
        db.session.add(tag_format)
    tag_format.prefix = prefix
    tag_format.zero_padding = padding
    tag_format.updated_by_id = user_id
    db.session.commit()
    return tag_format
