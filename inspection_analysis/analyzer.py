"""
基地台検査データの分析クラス
選択期間・轄區・キーワードに応じて集計結果と図表を生成する
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from inspection_data.models import (
    FIELD_NAMES, DistrictStats, StationRecord, TimeWindow
)
from inspection_analysis.aggregator import aggregate, completion, targets_complete
from inspection_analysis.date_ranges import year_to_date_window
from inspection_analysis.keywords import DEFAULT_KEYWORDS, filter_special
from inspection_analysis.roc_calendar import roc_to_gregorian

logger = logging.getLogger(__name__)

# 中文フォント設定
plt.rcParams['font.sans-serif'] = ['Noto Sans CJK TC', 'Microsoft JhengHei',
                                   'PingFang TC', 'DejaVu Sans', 'Arial Unicode MS']
plt.rcParams['axes.unicode_minus'] = False

UNKNOWN_LABEL = '未知'
TOTAL_LABEL = '全轄區總計'
STATS_COLUMNS = ['年度累計 (A)', '本期新增 (B)', '總計 (C=A+B)']
COMPLETION_COLUMNS = ['轄區', '達成率(%)']

PRIMARY_COLOR = '#4a90d9'
SECONDARY_COLOR = '#f5a623'
SUCCESS_COLOR = '#2e9e5b'


@dataclass
class AnalysisResult:
    """1回の分析の結果"""
    selection: TimeWindow                     # 選択期間 (B)
    year_to_date: TimeWindow                  # 年度累計期間 (A)
    records: List[StationRecord]              # 期間・轄區で絞り込んだレコード
    special_records: List[StationRecord]      # キーワードに該当するレコード
    district_stats: DistrictStats             # 轄區別の A / B / C
    keywords: Tuple[str, ...] = field(default=DEFAULT_KEYWORDS)
    districts: Tuple[str, ...] = ()           # 轄區フィルタ（空は全轄區）

    @property
    def is_empty(self) -> bool:
        return not self.records and not self.district_stats


def _in_window(record: StationRecord, window: TimeWindow) -> bool:
    inspected = roc_to_gregorian(record.inspection_date)
    return inspected is not None and window.contains(inspected)


class InspectionAnalyzer:
    """
    基地台検査データの分析クラス
    入力パラメータに応じて集計・可視化を行う
    """

    def __init__(self, figure_dpi: int = 100):
        """
        Args:
            figure_dpi: 図の解像度
        """
        self.figure_dpi = figure_dpi
        logger.info("Analyzer initialized")

    def analyze(self,
                records: Sequence[StationRecord],
                selection: TimeWindow,
                districts: Optional[Sequence[str]] = None,
                keywords: Sequence[str] = DEFAULT_KEYWORDS,
                now: Optional[datetime] = None) -> AnalysisResult:
        """
        選択期間の検査レコードを分析

        Args:
            records: 全レコード
            selection: 選択期間
            districts: 対象轄區（None・空の場合は全轄區）
            keywords: 特殊改善情形のキーワード
            now: 基準日時（年度累計の起点を決める）

        Returns:
            分析結果
        """
        year_to_date = year_to_date_window(selection, now)
        keywords = tuple(keywords)
        districts = tuple(districts or ())

        if not records:
            logger.warning("No records to analyze")
            return AnalysisResult(selection, year_to_date, [], [], {},
                                  keywords, districts)

        # 年度統計は轄區フィルタに関係なく全レコードから集計
        stats = aggregate(records, year_to_date, selection)

        filtered = [r for r in records if _in_window(r, selection)]
        if districts:
            filtered = [r for r in filtered if r.district in districts]

        special = filter_special(filtered, keywords)

        result = AnalysisResult(selection, year_to_date, filtered, special, stats,
                                keywords, districts)
        if result.is_empty:
            logger.warning("No data found for specified filters")
        else:
            logger.info(f"Analysis complete: {len(filtered)} records matched "
                        f"({len(special)} special)")
        return result

    def count_by(self, records: Sequence[StationRecord], field_name: str) -> pd.Series:
        """
        項目ごとの件数（件数の多い順、同数は出現順）

        Args:
            records: レコード
            field_name: '轄區'、'型式' などのフィールド名または属性名

        Returns:
            項目名をインデックスとした件数のSeries
        """
        if field_name not in FIELD_NAMES and field_name not in FIELD_NAMES.values():
            raise ValueError(f"Unknown field: {field_name}")

        keys = [str(r.get(field_name) or UNKNOWN_LABEL) for r in records]
        if not keys:
            return pd.Series(dtype='int64', name='count')

        values = pd.Series(keys)
        counts = values.groupby(values, sort=False).size()
        counts = counts.sort_values(ascending=False, kind='stable')
        counts.index.name = None
        counts.name = 'count'
        return counts

    def district_table(self, stats: DistrictStats) -> pd.DataFrame:
        """
        轄區別統計表（轄區名順、最終行に全轄區合計）

        Args:
            stats: aggregate() の結果

        Returns:
            DataFrame
        """
        districts = sorted(stats)
        rows = [[stats[d].count_a, stats[d].count_b, stats[d].count_c] for d in districts]
        table = pd.DataFrame(rows, index=pd.Index(districts, name='轄區'),
                             columns=STATS_COLUMNS, dtype='int64')

        if table.empty:
            return table

        table.loc[TOTAL_LABEL] = table.sum()
        return table

    def completion_table(self, stats: DistrictStats,
                         targets: Mapping[str, Any]) -> pd.DataFrame:
        """目標達成率の表（集計行は最後）"""
        entries = completion(stats, targets)
        return pd.DataFrame([(e.label, e.percentage) for e in entries],
                            columns=COMPLETION_COLUMNS)

    def plot_counts(self,
                    records: Sequence[StationRecord],
                    field_name: str = '轄區',
                    title: Optional[str] = None,
                    figsize: Tuple[int, int] = (8, 5)) -> plt.Figure:
        """
        項目別件数の棒グラフ

        Args:
            records: レコード
            field_name: 集計するフィールド
            title: グラフタイトル
            figsize: 図のサイズ

        Returns:
            Figure（データがない場合はNone）
        """
        counts = self.count_by(records, field_name)
        if counts.empty:
            logger.error("Cannot plot: no data")
            return None

        fig, ax = plt.subplots(figsize=figsize, dpi=self.figure_dpi)
        sns.barplot(x=counts.values, y=counts.index, orient='h',
                    color=PRIMARY_COLOR, ax=ax)
        ax.bar_label(ax.containers[0], fmt='%d', padding=2)
        ax.set_xlabel('Count')
        ax.set_ylabel(self._get_label(field_name))
        ax.set_title(title or f'{self._get_label(field_name)}統計')
        sns.despine(ax=ax)

        plt.tight_layout()
        return fig

    def plot_district_stats(self,
                            stats: DistrictStats,
                            figsize: Tuple[int, int] = (10, 5)) -> plt.Figure:
        """
        轄區別の年度累計 (A) と本期新增 (B) の積み上げ棒グラフ

        Returns:
            Figure（データがない場合はNone）
        """
        if not stats:
            logger.error("Cannot plot: no district statistics")
            return None

        districts = sorted(stats)
        count_a = np.array([stats[d].count_a for d in districts])
        count_b = np.array([stats[d].count_b for d in districts])
        positions = np.arange(len(districts))

        fig, ax = plt.subplots(figsize=figsize, dpi=self.figure_dpi)
        ax.bar(positions, count_a, color=PRIMARY_COLOR, label=STATS_COLUMNS[0])
        ax.bar(positions, count_b, bottom=count_a, color=SECONDARY_COLOR,
               label=STATS_COLUMNS[1])

        for x, total in zip(positions, count_a + count_b):
            ax.annotate(str(total), (x, total), ha='center', va='bottom')

        ax.set_xticks(positions)
        ax.set_xticklabels(districts, rotation=0)
        ax.set_ylabel('Count')
        ax.set_title('年度轄區統計')
        ax.legend(loc='upper right')
        ax.grid(True, axis='y', alpha=0.3)

        plt.tight_layout()
        return fig

    def plot_completion(self,
                        stats: DistrictStats,
                        targets: Mapping[str, Any],
                        figsize: Tuple[int, int] = (8, 5)) -> plt.Figure:
        """
        年度目標達成率の横棒グラフ

        100%を超えた轄區は色を変えて表示する。

        Returns:
            Figure（計算できない場合はNone）
        """
        entries = completion(stats, targets)
        if not entries:
            logger.error("Cannot plot: completion rate unavailable")
            return None

        labels = [e.label for e in entries]
        percentages = np.array([e.percentage for e in entries])
        max_value = max(100.0, percentages.max())
        colors = [SUCCESS_COLOR if p > 100 else PRIMARY_COLOR for p in percentages]

        fig, ax = plt.subplots(figsize=figsize, dpi=self.figure_dpi)
        # 上から表の順に並べる
        positions = np.arange(len(entries))[::-1]
        bars = ax.barh(positions, percentages, color=colors)
        ax.bar_label(bars, labels=[f'{p:.1f}%' for p in percentages], padding=2)
        ax.axvline(100, color='gray', linestyle='--', alpha=0.6)

        ax.set_yticks(positions)
        ax.set_yticklabels(labels)
        ax.set_xlim(0, max_value * 1.1)
        ax.set_xlabel('Completion (%)')
        ax.set_title('年度目標達成率')

        plt.tight_layout()
        return fig

    def _get_label(self, field_name: str) -> str:
        """
        フィールド名から表示用ラベルを取得

        Args:
            field_name: フィールド名または属性名

        Returns:
            ラベル文字列
        """
        labels = {attr: key for key, attr in FIELD_NAMES.items()}
        return labels.get(field_name, field_name)

    def generate_summary_report(self,
                                result: AnalysisResult,
                                targets: Optional[Mapping[str, Any]] = None) -> str:
        """
        分析結果のサマリーレポートを生成

        Args:
            result: analyze() の結果
            targets: 轄區別の年度目標

        Returns:
            レポート文字列
        """
        selection = result.selection
        year_to_date = result.year_to_date

        if result.is_empty:
            table_text = 'No data found for specified filters'
        else:
            table_text = self.district_table(result.district_stats).to_string()

        if not targets:
            completion_text = 'Targets not set'
        elif targets_complete(result.district_stats, targets):
            completion_text = '\n'.join(
                f'{e.label}: {e.percentage:.1f}%'
                for e in completion(result.district_stats, targets)
            )
        else:
            completion_text = 'Targets incomplete (every district needs a positive target)'

        report = f"""
========================================
Base Station Inspection Analysis
========================================
Period: {selection.start:%Y-%m-%d} to {selection.end:%Y-%m-%d}
Year-to-date: {year_to_date.start:%Y-%m-%d} to {year_to_date.end:%Y-%m-%d}
Districts: {', '.join(result.districts) or 'All districts'}
Keywords: {', '.join(result.keywords) or '-'}

[Records]
Matched records: {len(result.records)}
Special records: {len(result.special_records)}

[District Statistics]
{table_text}

[Completion Rate]
{completion_text}

========================================
"""
        return report
