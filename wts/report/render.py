from __future__ import annotations
from pathlib import Path
import datetime
import jinja2
import pandas as pd

from wts.utils.io import ensure_dir

jinja_environment = jinja2.Environment(loader=jinja2.BaseLoader(), autoescape=True)

REPORT_TEMPLATE = """<!DOCTYPE html>
<html><head><meta charset="utf-8">
<title>{{ title }}</title>
<style>body{font-family:sans-serif;margin:2em} .table td,.table th{padding:2px 8px;text-align:right} img{max-width:100%}</style>
</head><body>
<h1>{{ title }}</h1>
<p>Generated {{ stamp }}</p>
{% for table in tables %}
<h2>{{ table.title }}</h2>
{{ table.html | safe }}
{% endfor %}
{% for figure in figures %}
<h2>{{ figure.title }}</h2>
<img src="{{ figure.src }}" alt="{{ figure.title }}">
{% endfor %}
</body></html>
"""


def _table_html(df: pd.DataFrame) -> str:
    # to_html escapes cell text itself
    return df.to_html(float_format="{:.3f}".format, na_rep="NA", border=0, classes="table")


def render_report(report_dir: Path, tables: dict[str, pd.DataFrame],
                  figures: dict[str, Path], title: str = "WTS subtyping report") -> Path:
    """
    Writes report_dir/report.html with the tables (in order) followed by the
    figures. Figure files must live under report_dir.
    """
    report_dir = ensure_dir(Path(report_dir))
    root = report_dir.resolve()

    template = jinja_environment.from_string(REPORT_TEMPLATE)
    page = template.render(
        title=title,
        stamp=datetime.datetime.now().isoformat(timespec="seconds"),
        tables=[{"title": name, "html": _table_html(df)} for name, df in tables.items()],
        figures=[
            {"title": name, "src": Path(path).resolve().relative_to(root).as_posix()}
            for name, path in figures.items()
        ],
    )

    out = report_dir / "report.html"
    out.write_text(page, encoding="utf-8")
    return out
