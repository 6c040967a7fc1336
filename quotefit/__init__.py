"""quotefit - 行情时间序列规范化与样条拟合

把嵌套的行情响应整理成规范的时间序列表, 按时间与价格区间过滤,
用自然样条拟合收盘价并计算残差, 为探索性图表准备数据.
"""

from quotefit.core.data.classifier import FieldClassifier, classify_label
from quotefit.core.data.normalizer import NormalizedQuote, ResponseNormalizer, normalize_response
from quotefit.core.models import (
    FieldRole,
    MetaData,
    PipelineResult,
    PipelineStage,
    QuoteFunction,
    QuoteRequest,
    ResidualRecord,
    RunParameters,
    TimeSeriesPoint,
    TimeSeriesTable,
)
from quotefit.core.services import (
    QuotePipeline,
    build_chart_views,
    compute_residuals,
    filter_table,
    fit_spline,
    run_on_table,
)

__version__ = "0.1.0"

__all__ = [
    "FieldClassifier",
    "FieldRole",
    "MetaData",
    "NormalizedQuote",
    "PipelineResult",
    "PipelineStage",
    "QuoteFunction",
    "QuotePipeline",
    "QuoteRequest",
    "ResidualRecord",
    "ResponseNormalizer",
    "RunParameters",
    "TimeSeriesPoint",
    "TimeSeriesTable",
    "build_chart_views",
    "classify_label",
    "compute_residuals",
    "filter_table",
    "fit_spline",
    "normalize_response",
    "run_on_table",
]
