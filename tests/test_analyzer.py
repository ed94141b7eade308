"""
分析クラスのテスト
"""
from datetime import datetime

import matplotlib.pyplot as plt
import pytest

from inspection_data.models import DistrictCounts, TimeWindow
from inspection_analysis.aggregator import AGGREGATE_LABEL
from inspection_analysis.analyzer import (
    STATS_COLUMNS, TOTAL_LABEL, UNKNOWN_LABEL, InspectionAnalyzer
)

NOW = datetime(2024, 5, 31, 12, 0)
SELECTION = TimeWindow(datetime(2024, 5, 10), datetime(2024, 5, 31, 23, 59, 59, 999000))


@pytest.fixture
def analyzer():
    return InspectionAnalyzer()


@pytest.fixture
def result(analyzer, sample_records):
    return analyzer.analyze(sample_records, SELECTION, now=NOW)


# ═══════════════════════════════════════
# 1. 分析の実行
# ═══════════════════════════════════════
def test_analyze_filters_selection(result):
    """選択期間内のレコードだけを残す（轄區なしも含む）"""
    assert [r.name for r in result.records] == ['北二', '南一', '無轄區']
    assert [r.name for r in result.special_records] == ['南一', '無轄區']


def test_analyze_year_to_date_window(result):
    assert result.year_to_date == TimeWindow(
        datetime(2024, 1, 1), datetime(2024, 5, 9, 23, 59, 59, 999000))


def test_analyze_district_stats(result):
    assert result.district_stats == {
        '北區': DistrictCounts(1, 1, 2),
        '南區': DistrictCounts(1, 1, 2),
        '東區': DistrictCounts(0, 0, 0),
    }


def test_analyze_district_filter_does_not_affect_stats(analyzer, sample_records):
    """轄區フィルタは一覧にだけ効き、年度統計は全轄區"""
    result = analyzer.analyze(sample_records, SELECTION, districts=['南區'], now=NOW)

    assert [r.name for r in result.records] == ['南一']
    assert set(result.district_stats) == {'北區', '南區', '東區'}


def test_analyze_custom_keywords(analyzer, sample_records):
    result = analyzer.analyze(sample_records, SELECTION, keywords=['正常'], now=NOW)
    assert [r.name for r in result.special_records] == ['北二']
    assert result.keywords == ('正常',)


def test_analyze_no_records(analyzer):
    result = analyzer.analyze([], SELECTION, now=NOW)
    assert result.is_empty
    assert result.district_stats == {}


def test_analyze_nothing_matches(analyzer, make_record):
    """轄區なし・期間外のみなら空の結果"""
    result = analyzer.analyze([make_record('', '110/01/01')], SELECTION, now=NOW)
    assert result.is_empty


# ═══════════════════════════════════════
# 2. 表
# ═══════════════════════════════════════
def test_count_by_district_descending(analyzer, make_record):
    records = [make_record('南區'), make_record('北區'), make_record('北區'),
               make_record(''), make_record('北區')]
    counts = analyzer.count_by(records, '轄區')

    assert list(counts.index) == ['北區', '南區', UNKNOWN_LABEL]
    assert list(counts.values) == [3, 1, 1]
    assert counts['北區'] == 3


def test_count_by_attribute_name(analyzer, sample_records):
    counts = analyzer.count_by(sample_records, 'station_type')
    assert counts['鐵塔'] == 5
    assert counts['屋頂'] == 2


def test_count_by_unknown_field(analyzer, sample_records):
    with pytest.raises(ValueError):
        analyzer.count_by(sample_records, 'color')


def test_count_by_empty(analyzer):
    assert analyzer.count_by([], '轄區').empty


def test_district_table_sorted_with_totals(analyzer, result):
    table = analyzer.district_table(result.district_stats)

    assert list(table.columns) == STATS_COLUMNS
    assert list(table.index) == sorted(result.district_stats) + [TOTAL_LABEL]
    assert list(table.loc[TOTAL_LABEL]) == [2, 2, 4]


def test_district_table_empty(analyzer):
    table = analyzer.district_table({})
    assert table.empty


def test_completion_table(analyzer, result):
    targets = {'北區': 4, '南區': 2, '東區': 10}
    table = analyzer.completion_table(result.district_stats, targets)

    assert list(table['轄區']) == ['北區', '南區', '東區', AGGREGATE_LABEL]
    assert list(table['達成率(%)']) == [50.0, 100.0, 0.0, 4 / 16 * 100]


# ═══════════════════════════════════════
# 3. 図
# ═══════════════════════════════════════
def test_plot_counts(analyzer, sample_records):
    fig = analyzer.plot_counts(sample_records, '型式')
    assert fig is not None
    plt.close(fig)


def test_plot_counts_no_data(analyzer):
    assert analyzer.plot_counts([], '轄區') is None


def test_plot_district_stats(analyzer, result):
    fig = analyzer.plot_district_stats(result.district_stats)
    assert fig is not None
    plt.close(fig)
    assert analyzer.plot_district_stats({}) is None


def test_plot_completion(analyzer, result):
    fig = analyzer.plot_completion(result.district_stats, {'北區': 1, '南區': 4})
    assert fig is not None
    plt.close(fig)


def test_plot_completion_without_targets(analyzer, result):
    assert analyzer.plot_completion(result.district_stats, {}) is None


# ═══════════════════════════════════════
# 4. レポート
# ═══════════════════════════════════════
def test_summary_report(analyzer, result):
    report = analyzer.generate_summary_report(result)

    assert 'Period: 2024-05-10 to 2024-05-31' in report
    assert 'Matched records: 3' in report
    assert 'Special records: 2' in report
    assert TOTAL_LABEL in report
    assert 'Targets not set' in report


def test_summary_report_with_complete_targets(analyzer, result):
    targets = {'北區': 4, '南區': 2, '東區': 10}
    report = analyzer.generate_summary_report(result, targets)

    assert '北區: 50.0%' in report
    assert f'{AGGREGATE_LABEL}: 25.0%' in report


def test_summary_report_with_incomplete_targets(analyzer, result):
    report = analyzer.generate_summary_report(result, {'北區': 4})
    assert 'Targets incomplete' in report


def test_summary_report_empty(analyzer):
    result = analyzer.analyze([], SELECTION, now=NOW)
    report = analyzer.generate_summary_report(result)
    assert 'No data found' in report
