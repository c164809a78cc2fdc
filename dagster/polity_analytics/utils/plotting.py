"""
Layered trend chart builder.

Layers are collected as descriptors and consumed by a single render step
that always draws bands first, lines second and labels last.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, List, Optional, Sequence, Tuple, Union

import pandas as pd
import plotly.graph_objects as go

from ..resources.classification import CLASSIFICATION_BANDS, SCORE_MAX, SCORE_MIN, ClassificationBand
from .aggregation import TrendComparison

logger = logging.getLogger(__name__)

PEER_PALETTE = ['#1b9e77', '#d95f02', '#7570b3', '#e7298a', '#66a61e', '#e6ab02', '#a6761d', '#666666']


@dataclass
class ChartStyle:
    title: str = ''
    x_title: str = 'Year'
    y_title: str = 'Polity score'
    invert_y: bool = False
    band_opacity: float = 0.5
    width: int = 900
    height: int = 550
    template: str = 'plotly_white'
    show_band_legend: bool = True


@dataclass
class BandLayer:
    order: ClassVar[int] = 0
    band: ClassificationBand
    opacity: float


@dataclass
class LineLayer:
    order: ClassVar[int] = 1
    name: str
    years: List[int]
    values: List[float]
    color: str
    dash: str = 'solid'
    width: float = 2.0


@dataclass
class LabelLayer:
    order: ClassVar[int] = 2
    text: str
    x: float
    y: float
    color: str = '#333333'
    xanchor: str = 'left'


@dataclass
class _DirectLabels:
    year: int
    min_gap: float
    x_offset: float


Layer = Union[BandLayer, LineLayer, LabelLayer]


class TrendChartBuilder:
    """
    Accumulates band, line and label layers and renders a plotly Figure.

    Usage:
        builder = TrendChartBuilder(style=ChartStyle(title="Hungary vs. NATO"))
        builder.add_series("Hungary", target, color="#b2182b")
        builder.add_series("NATO average", peers, y_column="mean_score", dash="dash")
        builder.add_direct_labels(year=2017)
        fig = builder.render()
    """

    def __init__(self, bands: Sequence[ClassificationBand] = CLASSIFICATION_BANDS,
                 style: Optional[ChartStyle] = None):
        self.style = style or ChartStyle()
        self.layers: List[Layer] = [BandLayer(band, self.style.band_opacity) for band in bands]
        self._direct_labels: Optional[_DirectLabels] = None

    @property
    def lines(self) -> List[LineLayer]:
        return [layer for layer in self.layers if isinstance(layer, LineLayer)]

    def add_series(self, name: str, frame: pd.DataFrame, color: str = '#333333', dash: str = 'solid',
                   width: float = 2.0, y_column: str = 'score') -> 'TrendChartBuilder':
        """Add a line ordered by year. Rows with a missing value break the line."""
        df = frame.sort_values('year')
        values = [None if pd.isna(v) else float(v) for v in df[y_column]]
        self.layers.append(LineLayer(name, [int(y) for y in df['year']], values, color, dash, width))
        return self

    def add_label(self, text: str, x: float, y: float, color: str = '#333333',
                  xanchor: str = 'left') -> 'TrendChartBuilder':
        """Add a label at a fixed anchor."""
        self.layers.append(LabelLayer(text, x, y, color, xanchor))
        return self

    def add_direct_labels(self, year: int, min_gap: float = 0.8, x_offset: float = 0.3) -> 'TrendChartBuilder':
        """
        Label every line at its value for the given year.

        Lines without a value in that year use their latest earlier value.
        Labels are spread vertically so that none are closer than min_gap.
        """
        self._direct_labels = _DirectLabels(year, min_gap, x_offset)
        return self

    def _resolve_direct_labels(self) -> List[LabelLayer]:
        if self._direct_labels is None:
            return []
        directive = self._direct_labels

        anchors = []
        for line in self.lines:
            points = [(x, y) for x, y in zip(line.years, line.values) if y is not None and x <= directive.year]
            if not points:
                logger.debug(f"No value for '{line.name}' at or before {directive.year}, skipping label")
                continue
            anchors.append([points[-1][1], line])

        positions = spread_positions([y for y, _ in anchors], directive.min_gap, SCORE_MIN, SCORE_MAX)
        return [
            LabelLayer(line.name, directive.year + directive.x_offset, y, line.color)
            for y, (_, line) in zip(positions, anchors)
        ]

    def ordered_layers(self) -> List[Layer]:
        """All layers in draw order; insertion order is kept within a layer kind."""
        layers = list(self.layers) + self._resolve_direct_labels()
        return sorted(layers, key=lambda layer: layer.order)

    def render(self) -> go.Figure:
        fig = go.Figure()
        years = []
        layers = self.ordered_layers()
        has_labels = any(isinstance(layer, LabelLayer) for layer in layers)

        for layer in layers:
            if isinstance(layer, BandLayer):
                self._draw_band(fig, layer)
            elif isinstance(layer, LineLayer):
                years.extend(layer.years)
                fig.add_trace(go.Scatter(
                    x=layer.years,
                    y=layer.values,
                    mode='lines',
                    name=layer.name,
                    line=dict(color=layer.color, dash=layer.dash, width=layer.width),
                    connectgaps=False,
                ))
            else:
                fig.add_annotation(
                    x=layer.x, y=layer.y, text=layer.text, showarrow=False,
                    xanchor=layer.xanchor, font=dict(color=layer.color),
                )

        y_range = [SCORE_MAX, SCORE_MIN] if self.style.invert_y else [SCORE_MIN, SCORE_MAX]
        fig.update_yaxes(range=y_range, title_text=self.style.y_title, dtick=2, zeroline=False)
        fig.update_xaxes(title_text=self.style.x_title)
        if years:
            fig.update_xaxes(range=[min(years), max(years) + 2 if has_labels else max(years)])

        fig.update_layout(
            title=self.style.title,
            template=self.style.template,
            width=self.style.width,
            height=self.style.height,
            legend=dict(traceorder='normal'),
        )
        return fig

    def _draw_band(self, fig: go.Figure, layer: BandLayer):
        y0, y1 = layer.band.render_bounds()
        fig.add_hrect(
            y0=y0, y1=y1, fillcolor=layer.band.color, opacity=layer.opacity,
            layer='below', line_width=0,
        )
        if self.style.show_band_legend:
            # Shapes have no legend entry; a dataless marker trace stands in for one
            fig.add_trace(go.Scatter(
                x=[None], y=[None], mode='markers', name=layer.band.label,
                marker=dict(symbol='square', size=12, color=layer.band.color),
                legendgroup='bands', hoverinfo='skip',
            ))


def spread_positions(values: List[float], min_gap: float, lower: float, upper: float) -> List[float]:
    """
    Move label positions apart so neighbours are at least min_gap apart.

    Positions keep their relative order and stay within [lower, upper] when
    there is room for all of them. Returned in the order of the input.
    """
    if not values:
        return []

    order = sorted(range(len(values)), key=lambda i: values[i])
    placed = [float(values[i]) for i in order]

    for i in range(1, len(placed)):
        placed[i] = max(placed[i], placed[i - 1] + min_gap)

    overflow = placed[-1] - upper
    if overflow > 0:
        placed[-1] -= overflow
        for i in range(len(placed) - 2, -1, -1):
            placed[i] = min(placed[i], placed[i + 1] - min_gap)
    if placed[0] < lower:
        shift = lower - placed[0]
        placed = [p + shift for p in placed]

    result = [0.0] * len(values)
    for rank, index in enumerate(order):
        result[index] = placed[rank]
    return result


def build_comparison_chart(comparison: TrendComparison, target_name: str, group_name: str = 'NATO',
                           label_year: Optional[int] = None, style: Optional[ChartStyle] = None,
                           bands: Sequence[ClassificationBand] = CLASSIFICATION_BANDS) -> go.Figure:
    """
    Standard comparison chart: target line, peer average line, named peers.

    With no named peers the two lines get fixed labels at the end of each
    line; otherwise every line is labelled and spread apart.
    """
    style = style or ChartStyle(title=f"{target_name} vs. {group_name} average")
    builder = TrendChartBuilder(bands=bands, style=style)
    average_name = f"{group_name} average (excl. {target_name})"

    builder.add_series(target_name, comparison.target, color='#b2182b', width=3)
    builder.add_series(average_name, comparison.peer_average, color='#2166ac', dash='dash',
                       y_column='mean_score')

    named = comparison.named_peers
    for position, (name, frame) in enumerate(named.groupby('entity_name', sort=False)):
        builder.add_series(name, frame, color=PEER_PALETTE[position % len(PEER_PALETTE)],
                           dash='dot', width=1.5)

    if named.empty:
        for line in builder.lines:
            last = _last_point(line)
            if last is not None:
                builder.add_label(line.name, last[0] + 0.3, last[1], color=line.color)
    else:
        years = [year for line in builder.lines for year in line.years]
        if years:
            builder.add_direct_labels(label_year or max(years))

    return builder.render()


def _last_point(line: LineLayer) -> Optional[Tuple[int, float]]:
    points = [(x, y) for x, y in zip(line.years, line.values) if y is not None]
    return points[-1] if points else None


def write_chart(fig: go.Figure, path: Union[str, Path]) -> Path:
    """Write a chart to .html or .json. Only called when a file is requested."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    suffix = path.suffix.lower()
    if suffix in ('.html', '.htm'):
        fig.write_html(str(path), include_plotlyjs='cdn')
    elif suffix == '.json':
        fig.write_json(str(path))
    else:
        raise ValueError(f"Unsupported chart format '{suffix}', use .html or .json")

    logger.info(f"Chart written to {path}")
    return path
