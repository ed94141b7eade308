"""
民國紀年の日付文字列を西暦の日時に変換する
"""
import re
import logging
from datetime import datetime, timedelta
from typing import Optional

logger = logging.getLogger(__name__)

# 民國元年 = 西暦1912年
ROC_EPOCH_OFFSET = 1911

_SEPARATOR = re.compile(r'[/\-]')
_LEADING_INT = re.compile(r'\s*([+-]?[0-9]+)')


def _leading_int(segment: str) -> Optional[int]:
    """先頭の整数部分を読み取る（数字で始まらない場合はNone）"""
    match = _LEADING_INT.match(segment)
    if not match:
        return None
    return int(match.group(1))


def _rollover_date(year: int, month: int, day: int) -> Optional[datetime]:
    """
    範囲外の月・日を隣接する月・年へ繰り越して日付を作る

    13月は翌年1月、0月は前年12月、0日は前月末日になる。
    datetimeで表現できない年はNone。
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        return datetime(year, month, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Date out of range ({year}/{month}/{day}): {e}")
        return None


def roc_to_gregorian(roc_date: Optional[str]) -> Optional[datetime]:
    """
    民國紀年の日付文字列を西暦に変換

    "113/05/20" や "113-05-20" の形式を受け付ける（区切り文字は混在可）。
    月・日の範囲チェックは行わず、範囲外の値は繰り越す。

    Args:
        roc_date: 民國紀年の日付文字列 (YYY/MM/DD)

    Returns:
        その日の0時のdatetime。解析できない場合はNone
    """
    if not roc_date or not isinstance(roc_date, str):
        return None

    parts = _SEPARATOR.split(roc_date)
    if len(parts) != 3:
        return None

    values = [_leading_int(part) for part in parts]
    if any(value is None for value in values):
        return None

    roc_year, month, day = values
    return _rollover_date(roc_year + ROC_EPOCH_OFFSET, month, day)
