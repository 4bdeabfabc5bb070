"""Command‑line interface: **fsv encode / decode / bench**"""
from __future__ import annotations

import argparse, logging, sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import orjson

from .config import FirestoreConfig
from .decoder import decode_document
from .json_util import dumps, loads
from .models import FirestoreDocument
from .path import InvalidResourceNameError

LOGGER = logging.getLogger("fsv.cli")
LOGGER.addHandler(logging.NullHandler())

# -----------------------------------------------------------------------------
# Helper I/O
# -----------------------------------------------------------------------------

def _load_json(path: Path) -> Any:
    try:
        return loads(path.read_bytes())
    except FileNotFoundError:
        sys.exit(f"❌ input file not found: {path}")
    except orjson.JSONDecodeError as e:
        sys.exit(f"❌ invalid JSON in {path}: {e}")
    except OSError as e:
        sys.exit(f"❌ cannot read {path}: {e}")


def _dump_json(obj, path: Path):
    path.write_text(dumps(obj), encoding="utf-8")


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

def cmd_encode(ns):
    data = _load_json(ns.input)
    if not isinstance(data, dict):
        sys.exit("❌ encode expects a JSON object at the top level")

    t0 = time.perf_counter()
    doc = FirestoreDocument.from_native(data, name=ns.name)
    enc_ms = (time.perf_counter() - t0) * 1000

    print(f"✓ encoded {len(doc.fields)} field(s) in {enc_ms:.2f} ms → {ns.output}")
    _dump_json(doc.to_dict(), ns.output)


def cmd_decode(ns):
    raw = _load_json(ns.input)
    docs = raw if isinstance(raw, list) else [raw]
    for d in docs:
        if not isinstance(d, dict) or "name" not in d:
            sys.exit("❌ decode expects a document object with a 'name' (or a list of them)")

    t0 = time.perf_counter()
    try:
        out = [decode_document(d) for d in docs]
    except InvalidResourceNameError as e:
        sys.exit(f"❌ {e}")
    dec_ms = (time.perf_counter() - t0) * 1000

    print(f"✓ decoded {len(out)} document(s) in {dec_ms:.2f} ms → {ns.output}")
    _dump_json(out if isinstance(raw, list) else out[0], ns.output)


def cmd_bench(ns):
    """Benchmark encode → decode with optional progress bar."""
    from random import randint, random
    from .encoder import encode_document

    cfg = FirestoreConfig.from_env()
    name_root = cfg.path_util().documents_root if cfg.project_id else "bench"
    now = datetime.now(timezone.utc)
    data = [
        {
            "x": randint(0, 9),
            "y": [randint(0, 9) for _ in range(5)],
            "score": random(),
            "meta": {"ok": True, "at": now, "tag": None},
        }
        for _ in range(ns.n)
    ]

    steps = ["encode", "decode"]
    if ns.progress:
        try:
            from tqdm import tqdm  # type: ignore
        except ModuleNotFoundError:
            sys.exit("❌ --progress requires tqdm (pip install fsv-core[bench])")
        steps = tqdm(steps, desc="Benchmark")
    for step in steps:
        if step == "encode":
            t0 = time.perf_counter()
            docs = [encode_document(d) for d in data]
            enc_ms = (time.perf_counter() - t0) * 1000
        else:
            t0 = time.perf_counter()
            for i, d in enumerate(docs):
                decode_document({"name": f"{name_root}/bench/{i}", **d})
            dec_ms = (time.perf_counter() - t0) * 1000

    print(f"n={ns.n:,} | encode {enc_ms:.2f} ms | decode {dec_ms:.2f} ms")


# -----------------------------------------------------------------------------
# Argument parsing
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="fsv", description="Firestore value encode/decode toolkit")
    ap.add_argument("--debug", action="store_true", help="enable DEBUG logging")
    sub = ap.add_subparsers(dest="cmd", required=True)

    # encode ---------------------------------------------------------
    sp = sub.add_parser("encode", help="JSON object → Firestore document")
    sp.add_argument("--input", "-i", type=Path, required=True)
    sp.add_argument("--output", "-o", type=Path, required=True)
    sp.add_argument("--name", default=None, help="resource name to attach to the document")
    sp.set_defaults(func=cmd_encode)

    # decode ---------------------------------------------------------
    sp = sub.add_parser("decode", help="Firestore document(s) → JSON")
    sp.add_argument("--input", "-i", type=Path, required=True)
    sp.add_argument("--output", "-o", type=Path, required=True)
    sp.set_defaults(func=cmd_decode)

    # bench ----------------------------------------------------------
    sp = sub.add_parser("bench", help="quick encode/decode benchmark")
    sp.add_argument("--n", type=int, default=10000, help="synthetic record count")
    sp.add_argument("--progress", action="store_true", help="show progress bar with tqdm")
    sp.set_defaults(func=cmd_bench)
    return ap


def main(argv=None):
    ns = build_parser().parse_args(argv)
    if ns.debug or FirestoreConfig.from_env().debug:
        logging.basicConfig(level=logging.DEBUG)
        LOGGER.debug("debug logging enabled")
    ns.func(ns)

if __name__ == "__main__":
    main()
