"""
基地台検査データの読み込みと管理
JSON（ファイルまたは貼り付けテキスト）を検証してレコードに変換する
"""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from inspection_data.models import FIELD_NAMES, REQUIRED_FIELDS, StationRecord
from inspection_analysis.roc_calendar import roc_to_gregorian

logger = logging.getLogger(__name__)


class InvalidDatasetError(ValueError):
    """データセット全体が不正な場合のエラー"""


def parse_records(text: str) -> List[StationRecord]:
    """
    JSON文字列をレコードのリストに変換

    先頭要素のみ必須フィールドを検証し、以降の要素は欠損を許容する。

    Args:
        text: JSON配列の文字列

    Returns:
        レコードのリスト（空白のみの入力は空リスト）

    Raises:
        InvalidDatasetError: JSONが配列でない・空・必須フィールド欠落の場合
    """
    if not text or not text.strip():
        return []

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidDatasetError(f"Invalid JSON: {e}") from e

    if not isinstance(parsed, list) or len(parsed) == 0:
        raise InvalidDatasetError("JSON is not a valid array or is empty.")

    first = parsed[0]
    if not isinstance(first, dict) or not all(key in first for key in REQUIRED_FIELDS):
        raise InvalidDatasetError("JSON structure is incorrect. Missing required fields.")

    return [StationRecord.from_dict(item if isinstance(item, dict) else {})
            for item in parsed]


def load_records(path: Union[str, Path]) -> List[StationRecord]:
    """UTF-8のJSONファイルからレコードを読み込む"""
    text = Path(path).read_text(encoding='utf-8')
    return parse_records(text)


class StationDataStore:
    """
    読み込んだ検査レコードを保持するクラス
    """

    def __init__(self, records: Optional[List[StationRecord]] = None):
        """
        Args:
            records: 初期レコード
        """
        self.records: List[StationRecord] = list(records or [])
        logger.info(f"Data store initialized with {len(self.records)} records")

    def load_text(self, text: str) -> int:
        """
        貼り付けられたJSONを読み込む

        不正なデータの場合は保持しているレコードを破棄してから例外を送出する。

        Returns:
            読み込んだ件数
        """
        try:
            self.records = parse_records(text)
        except InvalidDatasetError as e:
            logger.error(f"JSON processing error: {e}")
            self.records = []
            raise

        if self.records:
            logger.info(f"Loaded {len(self.records)} records")
        return len(self.records)

    def load_file(self, path: Union[str, Path]) -> int:
        """JSONファイルを読み込む"""
        text = Path(path).read_text(encoding='utf-8')
        return self.load_text(text)

    def clear(self):
        """保持しているレコードを破棄"""
        self.records = []

    def districts(self) -> List[str]:
        """
        轄區の一覧（出現順・空値を除く）

        Returns:
            轄區名のリスト
        """
        return list(dict.fromkeys(r.district for r in self.records if r.district))

    def to_frame(self) -> pd.DataFrame:
        """
        レコードをDataFrameに変換（列名は元のフィールド名）

        Returns:
            DataFrame
        """
        return pd.DataFrame([r.to_dict() for r in self.records],
                            columns=list(FIELD_NAMES))

    def get_statistics(self) -> Dict:
        """
        読み込んだデータの統計情報を取得

        Returns:
            統計情報の辞書
        """
        dates = [d for d in (roc_to_gregorian(r.inspection_date) for r in self.records)
                 if d is not None]

        return {
            'records': len(self.records),
            'districts': len(self.districts()),
            'unparseable_dates': len(self.records) - len(dates),
            'inspection_date_range': (min(dates), max(dates)) if dates else (None, None),
        }
