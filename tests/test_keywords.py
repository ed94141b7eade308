"""
キーワード判定のテスト
"""
from inspection_analysis.keywords import (
    DEFAULT_KEYWORDS, add_keywords, filter_special, matches_keywords,
    parse_keywords, remove_keyword
)


def test_parse_mixed_separators():
    """半角・全角カンマと空白で区切る"""
    assert parse_keywords('更換, 漏水，裂縫  除鏽') == ('更換', '漏水', '裂縫', '除鏽')


def test_parse_drops_empty_and_duplicates():
    assert parse_keywords(' ,, 更換 更換 ，') == ('更換',)
    assert parse_keywords('') == ()


def test_add_and_remove():
    current = add_keywords(DEFAULT_KEYWORDS, '生鏽, 更換')
    assert current == DEFAULT_KEYWORDS + ('生鏽',)
    assert remove_keyword(current, '更換') == ('鬆脫', '除鏽', '漏水', '破裂', '裂縫', '生鏽')


def test_matches_substring(make_record):
    record = make_record(improvement='天線支架更換完成')
    assert matches_keywords(record, DEFAULT_KEYWORDS)
    assert not matches_keywords(record, ('漏水',))


def test_missing_improvement_text_never_matches(make_record):
    assert not matches_keywords(make_record(improvement=None), DEFAULT_KEYWORDS)


def test_filter_special_keeps_order(sample_records):
    special = filter_special(sample_records, DEFAULT_KEYWORDS)
    assert [r.name for r in special] == ['北一', '南一', '無轄區']
