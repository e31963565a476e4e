from __future__ import annotations

import argparse
import json
import sys

from telres.app.runner import run


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="telres")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Bootstrap sessions and print the resulting resource")
    p_run.add_argument("--config", default="config/telemetry.yaml")

    args = parser.parse_args(argv)

    if args.cmd == "run":
        attributes = run(args.config)
        print(json.dumps(attributes, sort_keys=True))
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
