"""
Asset tag generation and per-category tag formats
"""
import pytest
from itam.buisness.assets import asset_tag_generator as tags


def test_used_numbers_ignores_other_prefixes_and_zero():
    numbers = tags.used_numbers(['LAP001', 'LAP003-COPY-1', 'LAP000', 'DSK002', None, 'LAPX'], 'LAP')
    assert numbers == {1, 3}


def test_first_free_number_reuses_gaps():
    assert tags.first_free_number(set()) == 1
    assert tags.first_free_number({1, 2, 4}) == 3


def test_format_tag_pads():
    assert tags.format_tag('LAP', 7, 3) == 'LAP007'
    assert tags.format_tag('LAP', 1234, 3) == 'LAP1234'
    assert tags.format_tag('NET', 5, None) == 'NET05'


def test_next_asset_tag(seed, make_asset):
    make_asset('LAP003')
    assert tags.next_asset_tag(seed['tenant'].id, seed['laptops'].id) == 'LAP002'


def test_next_asset_tag_requires_format(seed):
    with pytest.raises(ValueError, match='Tag Format not configured'):
        tags.next_asset_tag(seed['tenant'].id, seed['monitors'].id)
    with pytest.raises(ValueError, match='Please select a category first'):
        tags.next_asset_tag(seed['tenant'].id, None)


def test_save_tag_format_creates_and_updates(seed):
    tenant_id = seed['tenant'].id
    saved = tags.save_tag_format(tenant_id, seed['monitors'].id, ' mon ', '4', user_id=seed['admin'].id)
    assert saved.prefix == 'MON'
    assert saved.zero_padding == 4
    assert tags.next_asset_tag(tenant_id, seed['monitors'].id) == 'MON0001'

    tags.save_tag_format(tenant_id, seed['monitors'].id, 'SCR', 2)
    formats = dict((category.name, fmt) for category, fmt in tags.tag_formats(tenant_id))
    assert formats['Monitor'].prefix == 'SCR'
    assert formats['Laptop'].prefix == 'LAP'


@pytest.mark.parametrize('prefix, padding, message', [
    ('', '3', 'Prefix is required'),
    ('MON', 'x', 'Zero padding must be a number'),
    ('MON', '0', 'Zero padding must be between 1 and 10'),
    ('MON', '11', 'Zero padding must be between 1 and 10'),
])
def test_save_tag_format_validation(seed, prefix, padding, message):
    with pytest.raises(ValueError, match=message):
        tags.save_tag_format(seed['tenant'].id, seed['monitors'].id, prefix, padding)
