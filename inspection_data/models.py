"""
データモデル定義
基地台検査レコードと集計結果の型
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


# JSON上のフィールド名 → 属性名
FIELD_NAMES = {
    '基地台名稱': 'name',
    '轄區': 'district',
    '型式': 'station_type',
    '高度(米)': 'height',
    '上期維護': 'previous_maintenance',
    '本次檢查': 'inspection_date',
    '檢查與改善': 'improvement',
    '備 註': 'notes',
}

# 読み込み時に必須となるフィールド
REQUIRED_FIELDS = ('基地台名稱', '轄區', '本次檢查')


def _parse_height(value: Any) -> Optional[float]:
    """高度を数値に変換（変換できない場合はNone）"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def _parse_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class StationRecord:
    """基地台検査レコード（読み込み後は不変）"""
    name: Optional[str]                  # 基地台名稱
    district: Optional[str]              # 轄區（集計キー）
    station_type: Optional[str] = None   # 型式
    height: Optional[float] = None       # 高度(米)
    previous_maintenance: Optional[str] = None  # 上期維護 (民國 YYY/MM/DD)
    inspection_date: Optional[str] = None       # 本次檢查 (民國 YYY/MM/DD)
    improvement: Optional[str] = None    # 檢查與改善（キーワード判定対象）
    notes: Optional[str] = None          # 備 註

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StationRecord':
        """
        JSONオブジェクトからレコードを生成

        Args:
            data: 中文フィールド名をキーとした辞書

        Returns:
            StationRecord
        """
        values = {attr: data.get(key) for key, attr in FIELD_NAMES.items()}
        values['height'] = _parse_height(values['height'])
        for attr in ('name', 'district', 'station_type', 'previous_maintenance',
                     'inspection_date', 'improvement', 'notes'):
            values[attr] = _parse_text(values[attr])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """元のフィールド名で辞書化（エクスポート用）"""
        return {key: getattr(self, attr) for key, attr in FIELD_NAMES.items()}

    def get(self, key: str) -> Any:
        """中文フィールド名または属性名で値を取得"""
        return getattr(self, FIELD_NAMES.get(key, key))


@dataclass(frozen=True)
class TimeWindow:
    """期間（開始・終了とも含む）"""
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass
class DistrictCounts:
    """轄區ごとの件数 (C = A + B)"""
    count_a: int = 0   # 年度累計（選択期間より前）
    count_b: int = 0   # 本期新增（選択期間）
    count_c: int = 0   # 総計


@dataclass(frozen=True)
class CompletionEntry:
    """目標達成率"""
    label: str
    percentage: float
    is_aggregate: bool = field(default=False)


DistrictStats = Dict[str, DistrictCounts]
