"""
共通フィクスチャ
"""
import os

# 画面のない環境で図を生成する
os.environ.setdefault('MPLBACKEND', 'Agg')

import pytest

from inspection_data.models import StationRecord


@pytest.fixture
def make_record():
    """検査レコードを作る関数"""
    def _make(district='北區', inspection_date='113/05/20', improvement='',
              station_type='鐵塔', name='測試站', height=30):
        return StationRecord(
            name=name,
            district=district,
            station_type=station_type,
            height=height,
            previous_maintenance='112/05/20',
            inspection_date=inspection_date,
            improvement=improvement,
            notes=None,
        )
    return _make


@pytest.fixture
def sample_records(make_record):
    """2024年（民國113年）の検査レコード"""
    return [
        make_record('北區', '113/02/10', '螺絲鬆脫已鎖緊', name='北一'),
        make_record('北區', '113/05/20', '正常', name='北二'),
        make_record('南區', '113/05/21', '天線支架更換', station_type='屋頂', name='南一'),
        make_record('南區', '113/03/15', '', station_type='屋頂', name='南二'),
        make_record('東區', '不明', '', name='東一'),
        make_record('', '113/05/20', '漏水', name='無轄區'),
        make_record('北區', '112/12/31', '', name='北三'),
    ]
