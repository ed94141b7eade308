"""
特殊改善情形のキーワード判定
"""
import re
from typing import Iterable, List, Sequence, Tuple

from inspection_data.models import StationRecord

DEFAULT_KEYWORDS: Tuple[str, ...] = ('更換', '鬆脫', '除鏽', '漏水', '破裂', '裂縫')

# 半角カンマ・全角カンマ・空白で区切る
_KEYWORD_SEPARATOR = re.compile(r'[,，\s]+')


def parse_keywords(text: str) -> Tuple[str, ...]:
    """
    入力文字列をキーワードに分割

    Args:
        text: "更換, 漏水 裂縫" のような入力

    Returns:
        重複を除いたキーワード（入力順）
    """
    if not text:
        return ()
    keywords = [k.strip() for k in _KEYWORD_SEPARATOR.split(text)]
    return tuple(dict.fromkeys(k for k in keywords if k))


def add_keywords(current: Sequence[str], text: str) -> Tuple[str, ...]:
    return tuple(dict.fromkeys([*current, *parse_keywords(text)]))


def remove_keyword(current: Sequence[str], keyword: str) -> Tuple[str, ...]:
    return tuple(k for k in current if k != keyword)


def matches_keywords(record: StationRecord, keywords: Iterable[str]) -> bool:
    """檢查與改善の欄にいずれかのキーワードが含まれるか"""
    text = record.improvement
    if not text:
        return False
    return any(keyword in text for keyword in keywords)


def filter_special(records: Iterable[StationRecord],
                   keywords: Sequence[str]) -> List[StationRecord]:
    return [record for record in records if matches_keywords(record, keywords)]
