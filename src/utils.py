#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
utils.py — shared CLI/number/JSON helpers for the spike proof scripts

ETHOS
  • Run parameters arrive ONLY as CLI strings and are kept exact (Fraction)
    until a stage decides whether it needs a float or an interval.
  • No embedded theory constants. Pure plumbing/formatting utilities.
  • Interval scalars are mpmath `iv.mpf`; they are printed and serialised
    through their outward-rounded float endpoints.

WHAT THIS PROVIDES
  Parsing & Numbers
    - parse_number("1/9")    -> ParsedNumber(raw="1/9", rational="1/9",
                                             fraction=Fraction(1, 9), float=mpf)
    - parse_number("0.0005") -> ParsedNumber(raw="0.0005", rational="1/2000", ...)

  JSON I/O (write only) & Meta
    - default_json_out(args.json_out, __file__)
    - write_json(path, payload)
    - make_meta(__file__, description="...")
    - interval_payload(x)   -> {"inf": "...", "sup": "..."}

  Console Ledger
    - ledger_header("Title")
    - console_show("N", "20", value)
    - console_interval("Y0", y0)       # aligned name / [inf, sup]
"""

from __future__ import annotations

import json
import sys
import platform
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path
from typing import Any, Optional, Iterable, Tuple, Dict

import mpmath as mp

from intervals import inf, sup

# ------------------------------- data classes --------------------------------

@dataclass(frozen=True)
class ParsedNumber:
    """Uniform representation of a CLI-provided scalar."""
    raw: str                 # original CLI string as passed on CLI
    rational: str            # "p/q" (decimals are exact rationals too)
    fraction: Fraction       # exact value
    float: mp.mpf            # mpmath high-precision echo

# ------------------------------- num parsing ---------------------------------

def parse_rat_or_float(s: str) -> Tuple[Fraction, mp.mpf]:
    """
    Accept 'p/q' or a decimal-like string; return (exact Fraction, mpf echo).
    Decimal strings are read exactly ("0.0005" -> 1/2000), never through a
    binary float.
    """
    t = str(s).strip()
    fr = Fraction(t)
    with mp.workdps(60):
        val = mp.mpf(fr.numerator) / mp.mpf(fr.denominator)
    return fr, val

def parse_number(s: str) -> ParsedNumber:
    """Parse a CLI scalar into (raw, rational tag, Fraction, mpf)."""
    try:
        fr, mpv = parse_rat_or_float(s)
    except (ValueError, ZeroDivisionError) as e:
        raise ValueError(f"Cannot parse number {s!r}") from e
    if not mp.isfinite(mpv):
        raise ValueError(f"Non-finite value after parsing {s!r}")
    return ParsedNumber(raw=str(s), rational=f"{fr.numerator}/{fr.denominator}",
                        fraction=fr, float=mpv)

# ------------------------------ JSON utilities -------------------------------

def default_json_out(arg: Optional[str], script_file: str) -> Path:
    """
    Compute the output JSON path following the project convention:
      - if arg is provided, use it (create parent dirs)
      - else write to outputs/<script_basename>.json
    """
    if arg:
        p = Path(arg)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    outdir = Path("outputs")
    outdir.mkdir(parents=True, exist_ok=True)
    return outdir / (Path(script_file).with_suffix(".json").name)

def write_json(path: Path | str, payload: Dict[str, Any]) -> None:
    """
    Deterministically write JSON (sorted keys, 2-space indent).
    (Note: interval endpoints are emitted as strings via interval_payload.)
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

def make_meta(script_file: str, *, description: Optional[str] = None,
              ethos_note: Optional[str] = None) -> Dict[str, Any]:
    """
    Standard meta block with script name, runtime, and optional description/ethos note.
    """
    return {
        "schema_version": "1.0",
        "script": Path(script_file).name,
        "run_env": {"python": sys.version.split()[0], "platform": platform.platform()},
        **({"description": description} if description else {}),
        **({"ethos": ethos_note} if ethos_note else {}),
    }

def interval_payload(x, digits: int = 17) -> Dict[str, str]:
    """{"inf", "sup"} decimal strings of the outward float endpoints of x."""
    return {"inf": mp.nstr(mp.mpf(inf(x)), digits),
            "sup": mp.nstr(mp.mpf(sup(x)), digits)}

# ----------------------------- console formatting ----------------------------

def ledger_header(title: str) -> None:
    print(f"\n=== {title} ===")

def console_show(name: str, tag: Optional[str], value, width: int = 12) -> None:
    """
    Pretty console line: right-aligned name, value, and a [tag] if present.
    """
    v_str = mp.nstr(mp.mpf(value), 17)
    print(f"{name:>{width}} : {v_str}   [{tag or '-'}]")

def console_interval(name: str, x, width: int = 12, digits: int = 12) -> None:
    """Pretty console line for an interval scalar: name : [inf, sup]."""
    lo = mp.nstr(mp.mpf(inf(x)), digits)
    hi = mp.nstr(mp.mpf(sup(x)), digits)
    print(f"{name:>{width}} : [{lo}, {hi}]")

# ------------------------------ validations ----------------------------------

def ensure_finite(name_value_pairs: Iterable[Tuple[str, Any]]) -> None:
    """
    Assert all values (mpf, float or interval) are finite; raise ValueError otherwise.
    """
    for name, v in name_value_pairs:
        try:
            ends = (mp.mpf(inf(v)), mp.mpf(sup(v)))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Non-numeric value for {name}: {v!r}") from e
        if not all(mp.isfinite(e) for e in ends):
            raise ValueError(f"Non-finite value for {name}: {v!r}")

def require(condition: bool, message: str) -> None:
    """
    Fail loudly with a clear message if a required condition is not met.
    """
    if not condition:
        raise ValueError(message)
