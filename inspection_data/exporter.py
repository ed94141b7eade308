"""
検査レコードのCSV / JSONエクスポート
"""
import json
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from inspection_data.models import StationRecord

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ('csv', 'json')
EXPORT_KINDS = ('special', 'all')


def export_filename(kind: str, fmt: str, today: Optional[date] = None) -> str:
    """例: special_export_2024-05-20.csv"""
    today = today or date.today()
    return f"{kind}_export_{today.isoformat()}.{fmt}"


def to_json(records: List[StationRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)


def to_csv(records: List[StationRecord]) -> str:
    """
    CSV文字列に変換（改行はCRLF、カンマを含む値は引用符で囲む）

    Args:
        records: レコード

    Returns:
        CSV文字列（ヘッダー行付き、末尾改行なし）
    """
    if not records:
        return ''
    # object型のまま保持し、整数の高度が "35.0" にならないようにする
    df = pd.DataFrame([r.to_dict() for r in records], dtype=object)
    csv_text = df.to_csv(index=False, lineterminator='\r\n', na_rep='')
    return csv_text[:-len('\r\n')]


def export_records(records: List[StationRecord],
                   kind: str,
                   fmt: str,
                   out_dir: Union[str, Path],
                   today: Optional[date] = None) -> Optional[Path]:
    """
    レコードをファイルに書き出す

    Args:
        records: レコード
        kind: 'special' または 'all'
        fmt: 'csv' または 'json'
        out_dir: 出力先ディレクトリ
        today: ファイル名に使う日付

    Returns:
        書き出したファイルのパス（データがない場合はNone）
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Invalid format. Use one of {list(EXPORT_FORMATS)}")
    if kind not in EXPORT_KINDS:
        raise ValueError(f"Invalid kind. Use one of {list(EXPORT_KINDS)}")

    if not records:
        logger.info("No data to export")
        return None

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / export_filename(kind, fmt, today)

    content = to_json(records) if fmt == 'json' else to_csv(records)
    # CRLFをそのまま書くため改行変換を無効化
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(content)

    logger.info(f"Exported {len(records)} records to {path}")
    return path
