"""
Plotting module for rendering pivoted benchmark datasets.

Each PivotedDataset becomes one PNG chart:
- Bars: one group of bars per axis label, one bar per series, error bars
- Lines: one line per series across the axis labels, error bars
Charts can be vertical or horizontal and use a logarithmic value axis.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from core.plot_config import ChartKind, Orientation, PlotConfiguration
from core.records import PivotedDataset

from .config import PLOT_BACKGROUND, SERIES_COLORS, RenderingConfiguration


# Configure matplotlib for non-interactive backend
plt.switch_backend("Agg")

MARKERS = ["o", "s", "^", "D", "v", "<", ">", "p", "*", "h"]


def setup_plot_style(rendering: Optional[RenderingConfiguration] = None):
    """Set up consistent plot styling."""
    rendering = rendering or RenderingConfiguration()
    plt.style.use("default")
    plt.rcParams.update(
        {
            "font.family": rendering.font_family,
            "font.size": rendering.base_font_size,
            "axes.titlesize": rendering.header_font_size,
            "axes.labelsize": rendering.big_font_size,
            "axes.labelweight": "bold",
            "xtick.labelsize": rendering.base_font_size,
            "ytick.labelsize": rendering.base_font_size,
            "legend.fontsize": rendering.base_font_size,
            "figure.dpi": 100,
            "savefig.dpi": rendering.dpi,
            "savefig.bbox": "tight",
        }
    )


def figure_size(dataset: PivotedDataset, config: PlotConfiguration) -> tuple:
    """
    Figure size in inches.

    Horizontal bar charts grow with the number of bars (12pt per record plus
    80pt of margins) so labels never overlap.
    """
    if config.chart_kind == ChartKind.BARS and config.orientation == Orientation.HORIZONTAL:
        min_height = (len(dataset) * 12 + 80) / 72.0
        return (10, max(6.0, min_height))
    return (10, 6)


def format_mean(value: float) -> str:
    """Label text for a bar."""
    return f"{value:.3f}"


def _series_label(label: str, dataset: PivotedDataset) -> str:
    return label if label else dataset.unit


def _draw_bars(ax, dataset: PivotedDataset, config: PlotConfiguration) -> None:
    means, errors = dataset.to_arrays()
    n_series, n_axis = means.shape
    positions = np.arange(n_axis)
    width = 0.8 / max(n_series, 1)
    horizontal = config.orientation == Orientation.HORIZONTAL

    for i, series in enumerate(dataset.series_labels):
        offsets = positions - 0.4 + width * (i + 0.5)
        color = SERIES_COLORS[i % len(SERIES_COLORS)]
        label = _series_label(series, dataset)
        if horizontal:
            bars = ax.barh(offsets, means[i], height=width, xerr=errors[i],
                           color=color, label=label, error_kw={"elinewidth": 0.8})
        else:
            bars = ax.bar(offsets, means[i], width=width, yerr=errors[i],
                          color=color, label=label, error_kw={"elinewidth": 0.8})

        # Add value labels inside the bars
        for bar, value in zip(bars, means[i]):
            if np.isnan(value):
                continue
            if horizontal:
                ax.text(bar.get_x() + bar.get_width(), bar.get_y() + bar.get_height() / 2.0,
                        f"{format_mean(value)} ", ha="right", va="center",
                        color="white", fontsize="small")
            else:
                ax.text(bar.get_x() + bar.get_width() / 2.0, bar.get_height(),
                        f"{format_mean(value)} ", ha="center", va="top",
                        rotation=90, color="white", fontsize="small")


def _draw_lines(ax, dataset: PivotedDataset, config: PlotConfiguration) -> None:
    means, errors = dataset.to_arrays()
    positions = np.arange(means.shape[1])
    horizontal = config.orientation == Orientation.HORIZONTAL

    for i, series in enumerate(dataset.series_labels):
        color = SERIES_COLORS[i % len(SERIES_COLORS)]
        marker = MARKERS[i % len(MARKERS)]
        label = _series_label(series, dataset)
        if horizontal:
            ax.errorbar(means[i], positions, xerr=errors[i], marker=marker,
                        linewidth=2, markersize=6, color=color, label=label, capsize=0)
        else:
            ax.errorbar(positions, means[i], yerr=errors[i], marker=marker,
                        linewidth=2, markersize=6, color=color, label=label, capsize=0)


def plot_dataset(
    dataset: PivotedDataset,
    config: PlotConfiguration,
    output_path: Path,
    title: Optional[str] = None,
    rendering: Optional[RenderingConfiguration] = None,
) -> Path:
    """
    Draw one pivoted dataset.

    Args:
        dataset: Dataset produced by the pivot engine
        config: Plot configuration the dataset was pivoted with
        output_path: Path to save the plot
        title: Chart title; defaults to config.title
        rendering: Font sizes and resolution

    Returns:
        Path of the written image
    """
    setup_plot_style(rendering)

    fig, ax = plt.subplots(figsize=figure_size(dataset, config))
    ax.set_facecolor(PLOT_BACKGROUND)

    if config.chart_kind == ChartKind.BARS:
        _draw_bars(ax, dataset, config)
    else:
        _draw_lines(ax, dataset, config)

    positions = np.arange(len(dataset.axis_labels))
    category_label = dataset.axis_key or ""
    if config.orientation == Orientation.HORIZONTAL:
        ax.set_yticks(positions)
        ax.set_yticklabels(dataset.axis_labels)
        ax.invert_yaxis()
        ax.set_ylabel(category_label)
        ax.set_xlabel(dataset.unit)
        if config.log_scale:
            ax.set_xscale("log")
        ax.grid(True, axis="x", color="white", alpha=0.8)
    else:
        ax.set_xticks(positions)
        ax.set_xticklabels(dataset.axis_labels, rotation=45, ha="right")
        ax.set_xlabel(category_label)
        ax.set_ylabel(dataset.unit)
        if config.log_scale:
            ax.set_yscale("log")
        ax.grid(True, axis="y", color="white", alpha=0.8)

    ax.set_axisbelow(True)
    if any(dataset.series_labels):
        ax.legend(loc="best")

    chart_title = title if title is not None else config.title
    if chart_title:
        ax.set_title(chart_title, fontweight="bold")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    plt.savefig(output_path)
    plt.close(fig)
    return output_path


def slugify(name: str) -> str:
    """File-system friendly version of a benchmark name."""
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", name).strip("_") or "plot"


def generate_plots(
    content,
    plots_dir: Path,
    rendering: Optional[RenderingConfiguration] = None,
) -> Dict[str, List[Path]]:
    """
    Generate the charts of every benchmark in a report.

    Args:
        content: ReportContent produced by core.pipeline.prepare_report
        plots_dir: Directory to write PNG files into
        rendering: Font sizes and resolution

    Returns:
        Dictionary mapping benchmark id to its chart paths, in plot order
    """
    plots_dir = Path(plots_dir)
    plots_dir.mkdir(parents=True, exist_ok=True)

    plot_files: Dict[str, List[Path]] = {}
    for chapter, report in enumerate(content.groups, 1):
        group = report.group
        paths: List[Path] = []
        for index, plot in enumerate(report.plots, 1):
            if plot.dataset is None:
                continue
            name = f"{chapter:02d}_{slugify(group.short_name)}_{index}"
            if plot.part is not None:
                name += f"_{slugify(plot.part)}"
            title = plot.config.title
            if plot.part is not None:
                title = f"{title or ''} {plot.config.per_param}={plot.part}".strip()
            paths.append(
                plot_dataset(plot.dataset, plot.config, plots_dir / f"{name}.png",
                             title=title, rendering=rendering)
            )
        plot_files[group.benchmark_id] = paths

    return plot_files
