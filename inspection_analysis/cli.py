"""
基地台検査分析のコマンドライン

Usage:
    inspection-analysis stations.json
    inspection-analysis stations.json --range month-last --district 北區 --district 南區
    inspection-analysis stations.json --range custom --start 2024-05-01 --end 2024-05-31
    inspection-analysis stations.json --targets targets.yaml --export csv --plot-dir out/
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt

from inspection_data.exporter import EXPORT_FORMATS, export_records
from inspection_data.loader import StationDataStore
from inspection_analysis.aggregator import targets_complete
from inspection_analysis.analyzer import InspectionAnalyzer
from inspection_analysis.config import coerce_targets, load_config, load_targets
from inspection_analysis.date_ranges import PRESETS, resolve_date_range
from inspection_analysis.keywords import add_keywords

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Analyze base station inspection records by district')
    parser.add_argument('data', help='JSON file with inspection records')
    parser.add_argument('--range', '-r', dest='date_range', choices=PRESETS,
                        help='Date range preset (default: from config, month)')
    parser.add_argument('--start', help='Custom range start (YYYY-MM-DD); with --end implies custom')
    parser.add_argument('--end', help='Custom range end (YYYY-MM-DD)')
    parser.add_argument('--district', '-d', action='append', dest='districts',
                        help='District to include (can specify multiple)')
    parser.add_argument('--keyword', '-k', action='append', dest='keywords',
                        help='Extra keyword(s), comma or space separated')
    parser.add_argument('--targets', '-t', help='YAML/JSON file: district -> yearly target')
    parser.add_argument('--config', '-c', help='YAML config file')
    parser.add_argument('--export', '-e', choices=EXPORT_FORMATS,
                        help='Export all and special records in this format')
    parser.add_argument('--plot-dir', help='Save charts as PNG into this directory')
    return parser


def _select_preset(args: argparse.Namespace, config: dict) -> str:
    """--start / --end が両方あれば custom とみなす"""
    if args.date_range:
        if args.date_range != 'custom' and (args.start or args.end):
            logger.warning(f"--start/--end are ignored with --range {args.date_range}")
        return args.date_range
    if args.start and args.end:
        return 'custom'
    if args.start or args.end:
        logger.warning("Both --start and --end are needed for a custom range; "
                       f"using {config['date_range']}")
    return config['date_range']


def _save_figures(analyzer: InspectionAnalyzer, result, targets, plot_dir: Path):
    plot_dir.mkdir(parents=True, exist_ok=True)
    figures = {
        'district_counts': analyzer.plot_counts(result.records, '轄區', '轄區統計'),
        'station_type_counts': analyzer.plot_counts(result.records, '型式', '站台型式統計'),
        'yearly_stats': analyzer.plot_district_stats(result.district_stats),
    }
    # 全轄區に正の目標がある場合のみ達成率を描く
    if targets_complete(result.district_stats, targets):
        figures['completion'] = analyzer.plot_completion(result.district_stats, targets)

    for name, fig in figures.items():
        if fig is None:
            continue
        path = plot_dir / f'{name}.png'
        fig.savefig(path)
        plt.close(fig)
        logger.info(f"Saved chart to {path}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Failed to load config: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, str(config['log_level']).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        store = StationDataStore()
        store.load_file(args.data)
        if not store.records:
            logger.error("Please provide a non-empty JSON dataset")
            return 1

        selection = resolve_date_range(_select_preset(args, config),
                                       start=args.start, end=args.end)

        keywords = tuple(config['keywords'])
        for text in args.keywords or []:
            keywords = add_keywords(keywords, text)

        targets = coerce_targets(config.get('targets') or {})
        if args.targets:
            targets.update(load_targets(args.targets))

        analyzer = InspectionAnalyzer(figure_dpi=int(config['figure_dpi']))
        result = analyzer.analyze(store.records, selection,
                                  districts=args.districts, keywords=keywords)
        print(analyzer.generate_summary_report(result, targets))

        if args.export:
            out_dir = Path(config['output_dir'])
            export_records(result.records, 'all', args.export, out_dir)
            export_records(result.special_records, 'special', args.export, out_dir)

        if args.plot_dir:
            _save_figures(analyzer, result, targets, Path(args.plot_dir))

    except (OSError, ValueError) as e:
        logger.error(f"Analysis failed: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
