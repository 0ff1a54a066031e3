"""mp-access command-line interface.

Sub-commands:

``simulate``
    Evaluate one request (or a batch of cases) against a policy document.
    Exit code 0 when every decision is ALLOW / matches its expectation,
    1 otherwise.

``plan``
    Resolve a target configuration and print the provisioning order.
    Exit code 2 on a configuration error (cycle, dangling reference, …).

Neither command calls the identity provider.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

from mp_access import __version__
from mp_access.application.provisioning import ProvisioningPlan, load_policy_store, load_target_configuration
from mp_access.application.simulation import SimulationCase, Simulator, load_simulation_cases
from mp_access.config import ConfigError, load_engine_settings
from mp_access.kernel.errors import DomainError
from mp_access.kernel.security import RequestContext
from mp_access.observability.logging import JsonLoggerFactory

EX_OK = 0
EX_DENIED = 1
EX_CONFIG = 2


def _pairs(values: Sequence[str] | None, flag: str) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for item in values or ():
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"{flag} expects KEY=VALUE, got {item!r}")
        out[key] = value
    return out


def _print(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, sort_keys=True) + "\n")


# ---------------------------------------------------------------------------
# simulate
# ---------------------------------------------------------------------------


def cmd_simulate(args: argparse.Namespace) -> int:
    store = load_policy_store(args.policies)
    if args.cases:
        cases = load_simulation_cases(args.cases)
    else:
        missing = [f"--{n}" for n in ("principal", "action", "resource") if not getattr(args, n)]
        if missing:
            sys.stderr.write(f"error: simulate requires {', '.join(missing)} or --cases\n")
            return EX_CONFIG
        context = RequestContext.build(
            tags=_pairs(args.tag, "--tag"),
            session=_pairs(args.session, "--session"),
            mfa=True if args.mfa else None,
            source_ip=args.source_ip,
        )
        cases = [SimulationCase(args.principal, args.action, args.resource, context)]

    report = Simulator(store).run(cases)
    if args.json:
        _print(report.to_dict())
    else:
        for outcome in report.outcomes:
            line = f"{outcome.decision.value:<14} {outcome.case.name}"
            if outcome.case.expected is not None:
                line += "  ok" if outcome.passed else f"  EXPECTED {outcome.case.expected.value}"
            sys.stdout.write(line + "\n")
            if args.verbose:
                sys.stdout.write(f"    {outcome.reason}\n")

    if args.cases:
        return EX_OK if report.passed else EX_DENIED
    return EX_OK if report.outcomes[0].decision.allowed else EX_DENIED


# ---------------------------------------------------------------------------
# plan
# ---------------------------------------------------------------------------


def cmd_plan(args: argparse.Namespace) -> int:
    plan = ProvisioningPlan.build(load_target_configuration(args.config))
    if args.json:
        _print(plan.to_dict())
        return EX_OK
    for step, entity in enumerate(plan.order, start=1):
        sys.stdout.write(f"{step:>3}. {entity.kind.value:<17} {entity.name}\n")
    if args.waves:
        for n, wave in enumerate(plan.waves):
            sys.stdout.write(f"wave {n}: {', '.join(e.name for e in wave)}\n")
    return EX_OK


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mp-access",
        description="Access-control policy simulation and provisioning planning.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--env-file", help="load settings from a .env file first")
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="evaluate requests against a policy document")
    sim.add_argument("--policies", required=True, help="policy store JSON file")
    sim.add_argument("--principal")
    sim.add_argument("--action")
    sim.add_argument("--resource")
    sim.add_argument("--tag", action="append", metavar="KEY=VALUE", help="resource tag (repeatable)")
    sim.add_argument("--session", action="append", metavar="KEY=VALUE", help="session attribute (repeatable)")
    sim.add_argument("--mfa", action="store_true", help="the session has a second factor")
    sim.add_argument("--source-ip")
    sim.add_argument("--cases", help="batch of simulation cases (JSON file)")
    sim.add_argument("--json", action="store_true", help="print a JSON report")
    sim.add_argument("-v", "--verbose", action="store_true", help="print the deciding statements")
    sim.set_defaults(func=cmd_simulate)

    pln = sub.add_parser("plan", help="print the resolved provisioning order")
    pln.add_argument("config", help="target configuration JSON file")
    pln.add_argument("--json", action="store_true")
    pln.add_argument("--waves", action="store_true", help="also print concurrency waves")
    pln.set_defaults(func=cmd_plan)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_engine_settings(args.env_file)
        JsonLoggerFactory.configure(settings.log_level_number, json=settings.log_json)
        return args.func(args)
    except argparse.ArgumentTypeError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EX_CONFIG
    except (DomainError, ConfigError) as exc:
        sys.stderr.write(f"error: {exc.message}\n")
        return EX_CONFIG
    except OSError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EX_CONFIG


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
