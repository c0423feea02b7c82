from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from .api import parse_files
from .config import VolumenConfig, find_config, load_config
from .languages import is_supported
from .model import ParseResultError, ParseResultSuccess
from .serialize import to_dict
from .spans import position_at
from .testing.helpers import interpolate

logger = logging.getLogger(__name__)

_PREVIEW = 72


def _collect(paths: list[str], config: VolumenConfig) -> list[Path]:
    out: list[Path] = []
    for raw in paths:
        p = Path(raw).expanduser()
        if not p.is_dir():
            # Explicit files are parsed even with an unknown extension so the
            # error shows up in the report.
            out.append(p)
            continue
        for dirpath, dirnames, filenames in os.walk(p):
            base = Path(dirpath)
            dirnames[:] = sorted(
                d for d in dirnames if not d.startswith(".") and not config.is_excluded(base / d)
            )
            for name in sorted(filenames):
                f = base / name
                if is_supported(name) and not config.is_excluded(f):
                    out.append(f)
    return out


def _preview(text: str) -> str:
    flat = text.replace("\n", "\\n")
    if len(flat) > _PREVIEW:
        return flat[: _PREVIEW - 3] + "..."
    return flat


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="volumen", description="Extract LLM prompts from source files")
    ap.add_argument("paths", nargs="+", help="Source files or directories")
    ap.add_argument("--json", action="store_true", help="Print parse results as JSON")
    ap.add_argument("--config", default=None, help="Path to volumen.toml (default: search upwards)")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    args = ap.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        config_path = Path(args.config) if args.config else find_config(Path(args.paths[0]))
        config = load_config(config_path)
    except (OSError, ValueError) as err:
        logger.error("invalid config: %s", err)
        return 2
    if config_path is not None:
        logger.info("using config %s", config_path)
    config.apply()

    files = _collect(args.paths, config)
    logger.info("parsing %d file(s)", len(files))
    results = parse_files(files)

    failed = [path for path, res in results.items() if isinstance(res, ParseResultError)]
    for path in failed:
        logger.warning("%s: %s", path, results[path].message)

    if args.json:
        payload = {k: to_dict(v) for k, v in results.items()}
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        for path, res in sorted(results.items()):
            if not isinstance(res, ParseResultSuccess):
                continue
            src = Path(path).read_bytes()
            for prompt in res.prompts:
                pos = position_at(src, prompt.span.outer.start)
                print(f"{path}:{pos.line}:{pos.column}: {_preview(interpolate(src, prompt))}")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
