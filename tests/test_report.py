from wc_dashboard.domain.dataset import Dataset
from wc_dashboard.domain.models import Entity, EntitySnapshot
from wc_dashboard.domain.services import DatasetAggregator
from wc_dashboard.presentation.report import (
    render_csv,
    render_html,
    rows_to_dataframe,
    snapshots_to_rows,
)


def make_rows():
    dataset = Dataset(
        [
            EntitySnapshot.create(
                quarter="25.3Q",
                entity=Entity.CHINA,
                quarterly_revenue=1000,
                receivables=100,
                inventory=240,
                payables=480,
            )
        ]
    )
    return DatasetAggregator().enrich(dataset)


def test_rows_include_metrics_and_basis():
    rows = snapshots_to_rows(make_rows())

    assert rows[0]["quarter"] == "25.3Q"
    assert rows[0]["working_capital"] == "-140"
    assert rows[0]["ccc"] == "-27"
    assert rows[0]["cogs"] == ""
    assert rows[0]["cogs_basis"] == "estimated"


def test_render_csv():
    content = render_csv(snapshots_to_rows(make_rows())).decode("utf-8")

    assert content.splitlines()[0].startswith("quarter,entity,revenue")
    assert render_csv([]) == b""


def test_render_html():
    assert "<table>" in render_html(snapshots_to_rows(make_rows()))
    assert render_html([]) == "<p>No data for the selected range.</p>"


def test_rows_to_dataframe():
    frame = rows_to_dataframe(make_rows())

    assert list(frame["dso"]) == [9]
    assert frame.loc[0, "working_capital"] == -140.0
    assert rows_to_dataframe([]).empty


def test_render_csv_selected_columns():
    content = render_csv(snapshots_to_rows(make_rows()), columns=["entity", "ccc"]).decode("utf-8")

    assert content.splitlines() == ["entity,ccc", "중국,-27"]


def test_render_html_escapes_and_titles():
    html = render_html([{"entity": "<b>X</b>", "score": "90"}], title="Priority issues 2025 Q3")

    assert html.startswith("<h2>Priority issues 2025 Q3</h2><table>")
    assert "<td>&lt;b&gt;X&lt;/b&gt;</td>" in html
    assert render_html([], empty_message="None & done", title="T") == "<h2>T</h2><p>None &amp; done</p>"
