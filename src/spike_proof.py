#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
spike_proof.py — computer-assisted existence proof of a spike solution of

    λ₁Δu − u + u² − λ₁u³ = 0   on ℝ²   (reduced Gray-Scott, λ₁γ = 1)

PIPELINE
  1. newton.initial_guess + newton.newton    float approximation U₀ (order N)
  2. boundary_trace.compatibility_projection interval U₀ with 𝒯U₀ ∋ 0
  3. bounds.compute_bounds                  Y₀, Z₁, Z₂, Ẑ₂, Zᵤ (iv.mpf)
  4. certificate.radii_polynomial_check     finite domain (Z₂) and
                                            periodic extension (Ẑ₂)

OUTPUT
  Console ledger of every bound and both verdicts; JSON at
  outputs/spike_proof.json (or --json-out). Exit status 0 iff both proofs
  succeed; a Newton run that does not converge, or whose projected iterate
  vanishes, stops before the interval stage.

USAGE
  python src/spike_proof.py --N 20 --d 4 --lambda1 1/9 --s0 0.0005
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, replace
from typing import Any, Dict

from mpmath import iv

from boundary_trace import compatibility_projection, trace_operator
from bounds import ProofBounds, compute_bounds
from certificate import CertificateResult, radii_polynomial_check
from d4fourier import D4Fourier, Sequence
from intervals import sup
from newton import DEGENERATE_NORM, NewtonResult, initial_guess, newton
from operators import linear_part
from proof_config import ProofConfig, add_config_arguments
from utils import (console_interval, console_show, default_json_out, ensure_finite,
                   interval_payload, ledger_header, make_meta, write_json)

@dataclass
class ProofRun:
    config: ProofConfig
    newton: NewtonResult
    U0: Sequence
    bounds: ProofBounds
    finite: CertificateResult
    periodic: CertificateResult

    @property
    def ok(self) -> bool:
        return self.finite.ok and self.periodic.ok


class NewtonFailure(RuntimeError):
    """Newton stage did not produce a usable approximate solution."""

    def __init__(self, result: NewtonResult):
        super().__init__(f"Newton stage ended with status {result.status!r} "
                         f"(||F||_inf = {result.residual:.3e} after {result.iterations} iterations)")
        self.result = result


def run_proof(config: ProofConfig, verbose: bool = False) -> ProofRun:
    floats = config.floats()
    guess = initial_guess(config.N, floats["d"], floats["lambda1"])
    result = newton(guess, config.newton_max_iter, floats["lambda1"],
                    tol=config.newton_tol, verbose=verbose)
    if not result.ok:
        raise NewtonFailure(result)

    space = D4Fourier(config.N, iv.pi / config.interval("d"))
    _, L11_inv = linear_part(space, config.interval("lambda1"))
    U0 = compatibility_projection(Sequence(space, result.solution.coefficients),
                                  L11_inv, trace_operator(config.N))
    # the trace condition can remove the whole spike (e.g. N = 0)
    nu = sup(U0.norm(1))
    if nu < DEGENERATE_NORM:
        raise NewtonFailure(replace(result, status="degenerate", solution=U0.mid(), norm=nu))

    bounds = compute_bounds(U0, config, verbose=verbose)
    ensure_finite(bounds.items())
    finite = radii_polynomial_check(bounds.Y0, bounds.Z1, bounds.Z2, config.s0)
    periodic = radii_polynomial_check(bounds.Y0, bounds.Z1, bounds.Z2_periodic, config.s0)
    return ProofRun(config, result, U0, bounds, finite, periodic)

def _verdict_payload(res: CertificateResult) -> Dict[str, Any]:
    return {"ok": res.ok, "reason": res.reason, "s0": repr(res.s0),
            "s_min": None if res.s_min is None else repr(res.s_min),
            "s_max": None if res.s_max is None else repr(res.s_max)}

def main() -> None:
    ap = argparse.ArgumentParser(description="Computer-assisted proof of a D4 spike of the reduced Gray-Scott model.")
    add_config_arguments(ap)
    args = ap.parse_args()
    config = ProofConfig.from_args(args)

    ledger_header("Spike proof: parameters")
    console_show("N", None, config.N)
    console_show("d", str(config.d), float(config.d))
    console_show("lambda1", str(config.lambda1), float(config.lambda1))
    console_show("s0", str(config.s0), float(config.s0))

    out_path = default_json_out(args.json_out, __file__)
    meta = make_meta(__file__,
        description="Rigorous Y0/Z1/Z2/Zu bounds and radii polynomial verdicts for the reduced Gray-Scott spike.",
        ethos_note="Float Newton stage; every bound is an outward-rounded interval enclosure.")

    ledger_header("Newton")
    try:
        run = run_proof(config, verbose=True)
    except NewtonFailure as e:
        print(f"[spike_proof] {e}")
        write_json(out_path, {"meta": meta, "inputs": config.as_payload(),
                              "outputs": {"newton": {"status": e.result.status,
                                                     "iterations": e.result.iterations,
                                                     "residual_inf": repr(e.result.residual)}},
                              "status": {"ok": False, "stage": "newton"}})
        sys.exit(1)

    ledger_header("Verdicts")
    print(f"   finite domain : {run.finite.message()}")
    print(f"        periodic : {run.periodic.message()}")
    if run.finite.ok and run.finite.s_min is not None:
        console_show("s_min", None, run.finite.s_min)
        console_show("s_max", None, run.finite.s_max)
    console_interval("Z1+Z2*s0", run.bounds.Z1 + run.bounds.Z2 * config.interval("s0"))
    print()

    out: Dict[str, Any] = {
        "meta": meta,
        "inputs": config.as_payload(),
        "intermediates": {
            "newton": {"status": run.newton.status, "iterations": run.newton.iterations,
                       "residual_inf": repr(run.newton.residual), "norm_l1": repr(run.newton.norm)},
        },
        "outputs": {
            "bounds": {name: interval_payload(value) for name, value in run.bounds.items()},
            "finite_domain": _verdict_payload(run.finite),
            "periodic": _verdict_payload(run.periodic),
        },
        "status": {"ok": run.ok},
    }
    write_json(out_path, out)
    print(f"Wrote JSON results to: {out_path}")
    sys.exit(0 if run.ok else 1)

if __name__ == "__main__":
    main()
