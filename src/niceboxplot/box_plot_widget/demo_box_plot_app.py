# Demo app for BoxPlotController
"""Demo application for BoxPlotController.

Builds a synthetic dataset with a two-level X hierarchy and an extra
continuous column, prints the box statistics table and serves the panel.
Right-click the plot to choose a marker line; click a box to mark its rows;
double-click empty plot area to clear the marking.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from nicegui import ui

from niceboxplot.utils.gui_defaults import setUpGuiDefaults
from niceboxplot.utils.logging import setup_logging
from niceboxplot.box_plot_widget.box_plot_controller import BoxPlotController
from niceboxplot.box_plot_widget.data_view import DataFrameDataView
from niceboxplot.box_plot_widget.render_pipeline import run_render_pass


def make_demo_df(seed: int = 42) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    rows = []
    for site in ["North", "South"]:
        for line in ["L1", "L2", "L3"]:
            center = rng.uniform(10, 30)
            for v in rng.normal(center, 3.0, size=40):
                rows.append({"site": site, "line": line, "yield": float(v)})
            # a few far values so outliers show up
            rows.append({"site": site, "line": line, "yield": float(center + 20)})
    df = pd.DataFrame(rows)
    df["target"] = 20.0
    return df


def main() -> None:
    setup_logging(level="INFO")

    df = make_demo_df()
    view = DataFrameDataView(df, x_columns=["site", "line"], y_column="yield", extra_columns=["target"])

    setUpGuiDefaults()
    ui.page_title("BoxPlotController Demo")

    ctrl = BoxPlotController(view, on_marking_changed=lambda rows: ui.notify(f"{len(rows)} rows marked"))

    async def _print_stats() -> None:
        result = await run_render_pass(view, ctrl.settings)
        print(result.stats.to_string())

    with ui.column().classes("w-full h-screen p-4"):
        ctrl.build()
    ui.timer(0.1, ctrl.refresh, once=True)
    ui.timer(0.1, _print_stats, once=True)

    ui.run(reload=False, native=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()
