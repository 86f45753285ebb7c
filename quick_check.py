# quick_check.py
import json, sys, pathlib as p
root = p.Path("outputs")
expect = {
  "newton.json": ("outputs", "status", "converged"),
  "spike_proof.json": ("outputs", "finite_domain", True),
  "spike_proof.json#periodic": ("outputs", "periodic", True),
}
ok = True
for key,(k,sub,ref) in expect.items():
    f = root/key.split("#")[0]
    if not f.exists():
        print("MISSING", f); ok=False; continue
    data = json.loads(f.read_text())
    val = data[k][sub]
    if isinstance(val, dict): val = val.get("ok")
    if val != ref: print("FAIL", f, sub, val, "≠", ref); ok=False
print("ALL PASS" if ok else "SOME FAIL"); sys.exit(0 if ok else 1)
