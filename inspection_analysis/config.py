"""
分析ツールの設定

責務:
  - 既定値の一元管理
  - 環境変数からの上書き
  - YAML設定ファイル・年度目標ファイルの読み込み
"""
import os
import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from inspection_analysis.keywords import DEFAULT_KEYWORDS

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'keywords': list(DEFAULT_KEYWORDS),
    'date_range': 'month',
    'output_dir': os.environ.get('INSPECTION_OUTPUT_DIR', 'out'),
    'log_level': os.environ.get('INSPECTION_LOG_LEVEL', 'INFO'),
    'figure_dpi': 100,
    'targets': {},
}


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    設定を読み込む（ファイルの値が既定値を上書きする）

    Args:
        path: YAML設定ファイルのパス（Noneの場合は既定値のみ）

    Returns:
        設定の辞書
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path is None:
        return config

    with open(path, 'r', encoding='utf-8') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")

    config.update(loaded)
    logger.info(f"Config loaded from {path}")
    return config


def coerce_targets(raw: Any) -> Dict[str, float]:
    """目標値を数値に変換（変換できない値は未設定として除外）"""
    if not isinstance(raw, dict):
        raise ValueError(f"Targets must be a mapping of district to target: {raw!r}")

    targets = {}
    for district, value in raw.items():
        if value is None or isinstance(value, bool):
            continue
        try:
            targets[str(district)] = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric target for {district}: {value!r}")
    return targets


def load_targets(path: Union[str, Path]) -> Dict[str, float]:
    """
    年度目標ファイル（YAMLまたはJSON）を読み込む

    Args:
        path: 轄區名 → 目標値 の対応を書いたファイル

    Returns:
        轄區名 → 目標値
    """
    path = Path(path)
    text = path.read_text(encoding='utf-8')
    raw = json.loads(text) if path.suffix.lower() == '.json' else yaml.safe_load(text)

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Targets file must contain a mapping: {path}")
    return coerce_targets(raw)
