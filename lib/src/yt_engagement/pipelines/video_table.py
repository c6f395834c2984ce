from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import polars as pl
import structlog

from yt_engagement.analyze.engagement import (
    add_engagement_ratios,
    compare_groups,
    plot_ratio_density,
    ratio_columns,
    summarize,
)
from yt_engagement.loaders.record_source import load_records
from yt_engagement.loaders.table_store import write_table
from yt_engagement.pipelines.config import PipelineConfig, get_config
from yt_engagement.preprocessors.flatten import RecordFlattener
from yt_engagement.preprocessors.keyword_filter import flag_keywords
from yt_engagement.preprocessors.table_assemble import AssemblyResult, TableAssembler

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def build_assembler(cfg: PipelineConfig, max_workers: Optional[int] = None) -> TableAssembler:
    """flatten.yaml 설정으로 TableAssembler 생성"""
    fcfg = cfg.flatten
    flattener = RecordFlattener(
        aligned_field=fcfg.get_aligned_field(),
        expected_keys=fcfg.get_expected_keys(),
        explode_fields=fcfg.get_explode_fields(),
        list_separator=fcfg.get_list_separator(),
        sep=fcfg.get_path_separator(),
    )
    return TableAssembler(
        flattener=flattener,
        id_col=fcfg.get_identifier(),
        metric_col=fcfg.get_engagement_metric(),
        prefixes=fcfg.get_structural_prefixes(),
        numeric_patterns=fcfg.get_numeric_patterns(),
        timestamp_source=fcfg.get_timestamp_source(),
        timestamp_target=fcfg.get_timestamp_target(),
        max_workers=max_workers or fcfg.get_max_workers(),
    )


class VideoTablePipeline:
    """JSON export → VideoTable → 키워드 플래그 → 참여도 분석 → CSV/그래프"""

    def __init__(self, cfg: PipelineConfig = None, max_workers: Optional[int] = None):
        self.cfg = cfg or get_config()
        self.assembler = build_assembler(self.cfg, max_workers)
        self.stats: Dict[str, Any] = {}

    def load(self, input_path: Union[str, Path]) -> List[Dict[str, Any]]:
        return load_records(input_path)

    def assemble(self, records: Sequence[Any]) -> AssemblyResult:
        result = self.assembler.assemble(records)
        self.stats['assembly'] = result.report.summary()
        return result

    def flag(self, table: pl.DataFrame) -> pl.DataFrame:
        acfg = self.cfg.analysis
        return flag_keywords(
            table,
            terms=acfg.get_keyword_terms(),
            column_patterns=acfg.get_text_columns(),
            flag=acfg.get_flag_column(),
        )

    def analyze(self, table: pl.DataFrame, figure_path: Optional[Union[str, Path]] = None) -> pl.DataFrame:
        """비율 파생, 기술 통계, 그룹 비교, 밀도 그래프"""
        acfg = self.cfg.analysis
        flag = acfg.get_flag_column()
        metrics = acfg.get_ratio_metrics()

        table = add_engagement_ratios(table, metrics, acfg.get_ratio_denominator())
        ratios = [c for c in ratio_columns(metrics) if c in table.columns]

        self.stats['summary'] = summarize(table, percentiles=acfg.get_percentiles())
        self.stats['comparisons'] = []
        for col in ratios:
            try:
                self.stats['comparisons'].append(compare_groups(table, col, flag).to_dict())
            except ValueError as e:
                logger.warning('group comparison skipped', column=col, reason=str(e))

        if figure_path is not None:
            plot_ratio_density(
                table, ratios, flag, figure_path,
                figsize=acfg.get_plot_figsize(), close=True,
            )

        return table

    def save(self, table: pl.DataFrame, output_path: Union[str, Path]) -> Path:
        return write_table(table, output_path)

    def run(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        figure_path: Optional[Union[str, Path]] = None,
    ) -> pl.DataFrame:
        logger.info('pipeline started', input=str(input_path), output=str(output_path))

        records = self.load(input_path)
        result = self.assemble(records)
        table = self.flag(result.table)
        table = self.analyze(table, figure_path)
        self.save(table, output_path)

        logger.info('pipeline finished', **self.stats['assembly'])
        return table


if __name__ == '__main__':
    import sys
    from yt_engagement.logging_config import configure_logging

    configure_logging(level='DEBUG')
    pipeline = VideoTablePipeline()
    out = pipeline.run(sys.argv[1], sys.argv[2], sys.argv[3] if len(sys.argv) > 3 else None)
    print(out)
    print(pipeline.stats['summary'])
