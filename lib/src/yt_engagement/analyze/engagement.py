"""
참여도(engagement) 분석 모듈

- 조회수 대비 좋아요/싫어요/댓글 비율 파생
- 숫자 컬럼 기술 통계 (count, mean, std, quantile)
- 키워드 매칭 여부 두 그룹 비교 (Mann-Whitney U) 및 밀도 그래프
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import matplotlib

matplotlib.use('Agg')

import matplotlib.pyplot as plt
import numpy as np
import polars as pl
import seaborn as sns
import structlog
from matplotlib.figure import Figure
from scipy.stats import mannwhitneyu

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

RATIO_SUFFIX = '_ratio'


@dataclass
class ComparisonResult:
    test_name: str
    value_col: str
    group_col: str
    n_true: int
    n_false: int
    median_true: float
    median_false: float
    statistic: float
    p_value: float

    def is_significant(self, alpha: float = 0.05) -> bool:
        return self.p_value < alpha

    def to_dict(self) -> dict:
        return self.__dict__


def ratio_column(metric: str) -> str:
    return f'{metric}{RATIO_SUFFIX}'


def add_engagement_ratios(
    df: pl.DataFrame,
    metrics: Sequence[str],
    denominator: str = 'viewCount',
) -> pl.DataFrame:
    """metric / denominator 비율 컬럼 추가 ('likeCount' → 'likeCount_ratio')

    분모가 0이거나 결측이면 null. 없는 metric 컬럼은 건너뜀.
    """
    if denominator not in df.columns:
        raise KeyError(f"Denominator column not found: {denominator}")

    denom = pl.col(denominator).cast(pl.Float64)
    exprs = []
    for metric in metrics:
        if metric not in df.columns:
            logger.warning('ratio metric column not found', metric=metric)
            continue
        exprs.append(
            pl.when(denom > 0)
            .then(pl.col(metric).cast(pl.Float64) / denom)
            .otherwise(None)
            .alias(ratio_column(metric))
        )
    return df.with_columns(exprs)


def summarize(
    df: pl.DataFrame,
    columns: Optional[Sequence[str]] = None,
    percentiles: Sequence[float] = (0.25, 0.5, 0.75),
) -> pl.DataFrame:
    """숫자 컬럼 기술 통계

    Returns:
        statistic 컬럼(count, null_count, mean, std, min, 25%, 50%, 75%, max) + 컬럼별 값
    """
    if columns is None:
        columns = [name for name, dtype in df.schema.items() if dtype.is_numeric()]
    columns = [c for c in columns if c in df.columns]
    if not columns:
        logger.warning('no numeric columns to summarize')
        return pl.DataFrame({'statistic': []}, schema={'statistic': pl.Utf8})

    return df.select(columns).describe(percentiles=list(percentiles))


def summarize_by_group(
    df: pl.DataFrame,
    columns: Sequence[str],
    group_col: str,
    percentiles: Sequence[float] = (0.25, 0.5, 0.75),
) -> Dict[bool, pl.DataFrame]:
    """그룹(True/False)별 기술 통계"""
    return {
        key: summarize(df.filter(pl.col(group_col) == key), columns, percentiles)
        for key in (True, False)
    }


def compare_groups(df: pl.DataFrame, value_col: str, group_col: str) -> ComparisonResult:
    """group_col(True/False) 두 그룹의 value_col 분포 비교 (양측 Mann-Whitney U)

    Raises:
        ValueError: 어느 한 그룹에 유효 관측치가 없을 때
    """
    values = df.select([group_col, value_col]).drop_nulls()
    group_true = values.filter(pl.col(group_col))[value_col].to_numpy()
    group_false = values.filter(~pl.col(group_col))[value_col].to_numpy()

    if len(group_true) == 0 or len(group_false) == 0:
        raise ValueError(
            f"Both groups need observations: {group_col}=True n={len(group_true)}, "
            f"False n={len(group_false)}"
        )

    stat, p_value = mannwhitneyu(group_true, group_false, alternative='two-sided')
    result = ComparisonResult(
        test_name='Mann-Whitney U',
        value_col=value_col,
        group_col=group_col,
        n_true=len(group_true),
        n_false=len(group_false),
        median_true=float(np.median(group_true)),
        median_false=float(np.median(group_false)),
        statistic=float(stat),
        p_value=float(p_value),
    )
    logger.info('groups compared', **result.to_dict())
    return result


def plot_ratio_density(
    df: pl.DataFrame,
    ratio_cols: Sequence[str],
    group_col: str,
    output_path: Optional[Union[str, Path]] = None,
    figsize: tuple = (12, 4),
    close: bool = False,
) -> Figure:
    """비율 컬럼별 KDE 밀도 그래프 (hue = 키워드 매칭 그룹)"""
    ratio_cols = [c for c in ratio_cols if c in df.columns]
    fig, axes = plt.subplots(1, max(len(ratio_cols), 1), figsize=figsize, squeeze=False)

    pdf = df.select(ratio_cols + [group_col]).to_pandas()
    for ax, col in zip(axes[0], ratio_cols):
        data = pdf[[col, group_col]].dropna()
        # 그룹당 관측치 2개 미만이면 KDE 불가
        counts = data[group_col].value_counts()
        if data.empty or (counts < 2).any() or len(counts) < 2:
            ax.set_title(f'{col} (insufficient data)')
            logger.warning('density skipped', column=col, counts=counts.to_dict())
            continue

        sns.kdeplot(data=data, x=col, hue=group_col, common_norm=False, fill=True, ax=ax)
        ax.set_title(col)

    fig.suptitle(f'Engagement ratio density by {group_col}')
    fig.tight_layout()

    if output_path is not None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=120)
        logger.info('density plot saved', path=str(output_path))

    if close:
        plt.close(fig)

    return fig


def ratio_columns(metrics: Sequence[str]) -> List[str]:
    return [ratio_column(m) for m in metrics]
