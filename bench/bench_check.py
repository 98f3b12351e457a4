import argparse
import statistics
import time

from tinyrbac import Policy, ResourceGrant, Role, build_from_policy
from tinyrbac.core.constants import ACTIONS


def gen_policy(roles: int, resources: int) -> Policy:
    names = tuple(f"res{i:02d}" for i in range(resources))
    out = []
    for r in range(roles):
        grants = tuple(
            ResourceGrant(names[(r + k) % resources], ACTIONS[: 1 + (k % len(ACTIONS))])
            for k in range(min(8, resources))
        )
        out.append(Role(name=f"role{r:02d}", resource_grants=grants))
    return Policy(resources=names, roles=tuple(out))


def run(roles: int, resources: int, iters: int):
    model = build_from_policy(gen_policy(roles, resources))
    # worst case for the linear scans: last role, last resource
    role = model.roles[-1]
    res = model.resources[-1]
    lat = []
    for _ in range(iters):
        t0 = time.perf_counter()
        d = model.check(role, res, "DELETE")
        lat.append((time.perf_counter() - t0) * 1_000_000.0)
    return {
        "p50": statistics.median(lat),
        "avg": sum(lat) / len(lat),
        "p90": percentile(lat, 90),
        "allowed": d.allowed,
    }


def percentile(arr, p):
    arr2 = sorted(arr)
    k = int(round((p / 100.0) * (len(arr2) - 1)))
    return arr2[k]


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--roles", type=int, nargs="+", default=[1, 5, 10, 20])
    ap.add_argument("--resources", type=int, default=64)
    ap.add_argument("--iters", type=int, default=10000)
    args = ap.parse_args()
    print("roles,resources,avg_us,p50_us,p90_us,allowed")
    for n in args.roles:
        r = run(n, args.resources, args.iters)
        print(f"{n},{args.resources},{r['avg']:.3f},{r['p50']:.3f},{r['p90']:.3f},{r['allowed']}")


if __name__ == "__main__":
    main()
