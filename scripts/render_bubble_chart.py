from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from bubble_chart.models.chart_spec import BubbleChartOptions
from bubble_chart.models.errors import BubbleChartError
from bubble_chart.pipeline.bubble_chart import bubble_chart


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a bubble chart from a CSV file.")
    parser.add_argument("csv_path", help="Path (or URL) of the delimited data file")
    parser.add_argument("x_field", help="Field used for x axis values")
    parser.add_argument("y_field", help="Field used for y axis values")
    parser.add_argument("--x-range", type=float, nargs=2, metavar=("MIN", "MAX"))
    parser.add_argument("--y-range", type=float, nargs=2, metavar=("MIN", "MAX"))
    parser.add_argument("--name-field")
    parser.add_argument("--color-field")
    parser.add_argument("--size-field")
    parser.add_argument("--color-scale", nargs="+")
    parser.add_argument("--size-scale", type=float, nargs=2, metavar=("MIN", "MAX"))
    parser.add_argument("--show-labels", action="store_true")
    parser.add_argument("--discrete-color-scale", action="store_true")
    parser.add_argument("--color-mapping", nargs="+")
    parser.add_argument("--unknown-color")
    parser.add_argument("--x-scale-type", default="linear")
    parser.add_argument("--y-scale-type", default="linear")
    parser.add_argument("--color-scale-type", default="linear")
    parser.add_argument("--size-scale-type", default="linear")
    parser.add_argument("--power-exponent", type=float, default=1.0)
    parser.add_argument("--delimiter")
    parser.add_argument("--title")
    parser.add_argument("--width", type=int)
    parser.add_argument("--height", type=int)
    parser.add_argument("--output", default="output/bubble_chart.html", help="HTML output path")
    parser.add_argument("--json", dest="json_path", help="Optional path for the response JSON")
    return parser.parse_args(argv)


def _build_options(args: argparse.Namespace) -> BubbleChartOptions:
    values = {
        "x_range": args.x_range,
        "y_range": args.y_range,
        "name_field": args.name_field,
        "color_field": args.color_field,
        "size_field": args.size_field,
        "color_scale": args.color_scale,
        "size_scale": args.size_scale,
        "show_labels": args.show_labels,
        "discrete_color_scale": args.discrete_color_scale,
        "color_mapping": args.color_mapping,
        "unknown_color": args.unknown_color,
        "x_scale_type": args.x_scale_type,
        "y_scale_type": args.y_scale_type,
        "color_scale_type": args.color_scale_type,
        "size_scale_type": args.size_scale_type,
        "power_exponent": args.power_exponent,
        "delimiter": args.delimiter,
        "title": args.title,
        "width": args.width,
        "height": args.height,
    }
    # unset flags keep the model defaults
    return BubbleChartOptions(**{k: v for k, v in values.items() if v is not None})


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        response = bubble_chart(args.csv_path, args.x_field, args.y_field, _build_options(args))
    except BubbleChartError as exc:
        print(f"{exc.code}: {exc}", file=sys.stderr)
        return 1

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(response.html or "", encoding="utf-8")

    if args.json_path:
        json_path = Path(args.json_path)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        json_path.write_text(
            json.dumps(response.model_dump(mode="json", exclude={"html"}), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    print(
        json.dumps(
            {
                "output": str(output_path),
                "point_count": response.point_count,
                "dropped_row_count": response.dropped_row_count,
                "render_engine": response.render_engine,
            },
            ensure_ascii=False,
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
