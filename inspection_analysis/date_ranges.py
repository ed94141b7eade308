"""
分析期間の決定
プリセット（本週・本月・上月・本年）と自訂期間から選択期間を作り、
年度累計の期間を導出する
"""
from datetime import date, datetime, timedelta
from typing import Optional, Union

from inspection_data.models import TimeWindow

DateLike = Union[datetime, date, str]

PRESETS = ('week', 'month', 'month-last', 'year', 'custom')


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999000)


def _to_datetime(value: DateLike) -> datetime:
    """datetime / date / 'YYYY-MM-DD' 文字列をdatetimeに変換"""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.strptime(value.strip(), '%Y-%m-%d')


def normalize_day_bounds(start: DateLike, end: DateLike) -> TimeWindow:
    """
    開始日の0時から終了日の23:59:59.999までの期間を作る

    Raises:
        ValueError: 開始日が終了日より後の場合
    """
    window = TimeWindow(start_of_day(_to_datetime(start)),
                        end_of_day(_to_datetime(end)))
    if window.start > window.end:
        raise ValueError("start date must not be after end date")
    return window


def resolve_date_range(preset: str,
                       now: Optional[datetime] = None,
                       start: Optional[DateLike] = None,
                       end: Optional[DateLike] = None) -> TimeWindow:
    """
    選択された期間を返す

    Args:
        preset: 'week', 'month', 'month-last', 'year', 'custom'
        now: 基準日時（省略時は現在時刻）
        start: 自訂期間の開始日
        end: 自訂期間の終了日

    Returns:
        選択期間

    Raises:
        ValueError: 不明なプリセット、または自訂期間が不正な場合
    """
    now = now or datetime.now()

    if preset == 'week':
        # 日曜始まり
        days_since_sunday = (now.weekday() + 1) % 7
        return TimeWindow(start_of_day(now - timedelta(days=days_since_sunday)), now)

    if preset == 'month':
        return TimeWindow(datetime(now.year, now.month, 1), now)

    if preset == 'month-last':
        first_of_month = datetime(now.year, now.month, 1)
        last_month_end = first_of_month - timedelta(days=1)
        return TimeWindow(last_month_end.replace(day=1), end_of_day(last_month_end))

    if preset == 'year':
        return TimeWindow(datetime(now.year, 1, 1), now)

    if preset == 'custom':
        if not start or not end:
            raise ValueError("custom range requires start and end")
        return normalize_day_bounds(start, end)

    raise ValueError(f"Invalid preset. Use one of {list(PRESETS)}")


def year_to_date_window(selection: TimeWindow,
                        now: Optional[datetime] = None) -> TimeWindow:
    """
    年度累計の期間（今年1月1日から選択期間開始の前日まで）

    選択期間が1月1日から始まる場合は開始 > 終了となり、何も含まない。
    """
    now = now or datetime.now()
    return TimeWindow(datetime(now.year, 1, 1),
                      end_of_day(selection.start - timedelta(days=1)))
