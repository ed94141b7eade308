"""
轄區別の件数集計と目標達成率の計算
入力レコード・期間は変更せず、毎回新しい結果を返す
"""
import logging
from numbers import Real
from typing import Any, Iterable, List, Mapping, Optional

from inspection_data.models import (
    CompletionEntry, DistrictCounts, DistrictStats, StationRecord, TimeWindow
)
from inspection_analysis.roc_calendar import roc_to_gregorian

logger = logging.getLogger(__name__)

# 全轄區の集計行ラベル
AGGREGATE_LABEL = '總轄區'


def aggregate(records: Iterable[StationRecord],
              window_a: TimeWindow,
              window_b: TimeWindow) -> DistrictStats:
    """
    レコードを期間A（年度累計）・期間B（選択期間）に分類して轄區別に集計

    期間Aの判定が優先され、1レコードはA・Bのどちらか一方にのみ数える。
    轄區が空のレコードは除外し、日付が解析できないレコードは件数に含めない
    （轄區自体は0件として結果に残る）。

    Args:
        records: 検査レコード
        window_a: 年度累計の期間
        window_b: 選択期間

    Returns:
        轄區名をキーとした件数の辞書
    """
    stats: DistrictStats = {}
    skipped = 0

    for record in records:
        district = record.district
        if not district:
            continue

        counts = stats.setdefault(district, DistrictCounts())

        inspected = roc_to_gregorian(record.inspection_date)
        if inspected is None:
            skipped += 1
            continue

        if window_a.contains(inspected):
            counts.count_a += 1
        elif window_b.contains(inspected):
            counts.count_b += 1

    # C = A + B
    for counts in stats.values():
        counts.count_c = counts.count_a + counts.count_b

    if skipped:
        logger.debug(f"Skipped {skipped} records with unparseable inspection date")
    return stats


def _positive_target(value: Any) -> Optional[float]:
    """目標値として有効な正の数値を返す（それ以外はNone）"""
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if value > 0:
        return value
    return None


def targets_complete(stats: DistrictStats, targets: Mapping[str, Any]) -> bool:
    """
    全轄區に正の目標値が設定されているか

    達成率グラフを表示するかどうかの判定に使う。
    """
    if not stats:
        return False
    return all(_positive_target(targets.get(district)) is not None
               for district in stats)


def completion(stats: DistrictStats,
               targets: Mapping[str, Any]) -> List[CompletionEntry]:
    """
    轄區別の目標達成率を計算

    目標値が未設定・0以下の轄區は除外する。全轄區の集計行は
    目標合計が正の場合のみ最後に追加する。丸めは行わない。

    Args:
        stats: aggregate() の結果
        targets: 轄區名 → 年度目標

    Returns:
        轄區名順の達成率リスト（集計行は常に最後）
    """
    entries = []
    total_c = 0
    total_target = 0

    for district in sorted(stats):
        target = _positive_target(targets.get(district))
        if target is None:
            continue
        count_c = stats[district].count_c
        entries.append(CompletionEntry(district, count_c / target * 100))
        total_c += count_c
        total_target += target

    if total_target > 0:
        entries.append(
            CompletionEntry(AGGREGATE_LABEL, total_c / total_target * 100,
                            is_aggregate=True)
        )
    return entries
