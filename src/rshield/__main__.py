"""CLI entry point for rshield.

Usage:
    rshield simulate [config.yaml]   Run the model and print the daily chart
    rshield rc [config.yaml]         Print the controlled reproduction number Rc
    rshield solve [config.yaml]      Rescale suppression/correction so that Rc = 1
    rshield fit [config.yaml]        Grid-search fit to the observed peak
    rshield advise TOPIC [config] [--remote]
                                     Expert assessment (remote AI with --remote)
    rshield reach INDEX [K]          Estimated people reached for an interest index
    rshield version                  Show version
"""
from __future__ import annotations

import logging
import sys

from rshield.utils.config import RShieldConfig, load_config


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(0)

    command = sys.argv[1].lower()
    args = sys.argv[2:]

    if command == "simulate":
        _run_simulate(args)
    elif command == "rc":
        _run_rc(args)
    elif command == "solve":
        _run_solve(args)
    elif command == "fit":
        _run_fit(args)
    elif command == "advise":
        _run_advise(args)
    elif command == "reach":
        _run_reach(args)
    elif command in ("version", "--version", "-v"):
        from rshield import __version__
        print(f"rshield {__version__}")
    elif command in ("help", "--help", "-h"):
        print(__doc__)
    else:
        print(f"Unknown command: {command}")
        print(__doc__)
        sys.exit(1)


def _load(args: list[str]) -> RShieldConfig:
    """Load the config named by the first argument and set up logging."""
    config = load_config(args[0] if args else None)
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    return config


def _fail(message: str) -> None:
    print(f"Error: {message}")
    sys.exit(1)


def _run_simulate(args: list[str]) -> None:
    from rshield.analysis.reproduction import estimate_rc
    from rshield.analysis.summary import summarize_chart
    from rshield.errors import ConfigurationError
    from rshield.simulation.delayed_seir import chart_series, integrate
    from rshield.verification.conservation import check_positivity

    config = _load(args)
    params, observed = config.parameters, config.observed_series()
    try:
        state = integrate(params, observed)
    except ConfigurationError as e:
        _fail(str(e))
    chart = chart_series(state, params, observed)

    print(f"{'day':>4} {'S':>12} {'E':>12} {'I':>12} {'R':>12} {'observed':>12}")
    for p in chart.points:
        obs = f"{p.observed:.0f}" if p.observed is not None else "-"
        print(
            f"{p.day:>4} {p.susceptible:>12} {p.exposed:>12} "
            f"{p.infected:>12} {p.recovered:>12} {obs:>12}"
        )

    summary = summarize_chart(chart, observed, estimate_rc(params, observed))
    print(f"\nPeak simulated: {summary.peak_simulated}")
    print(f"Peak observed: {summary.peak_observed:.0f}")
    print(f"Final active: {summary.final_infected}")
    print(f"Final disengaged: {summary.final_recovered}")
    print(f"Rc: {summary.rc:.4f} ({'controlled' if summary.controlled else 'outbreak risk'})")
    print(check_positivity(state).message)


def _run_rc(args: list[str]) -> None:
    from rshield.analysis.reproduction import estimate_rc, is_controlled
    from rshield.errors import ConfigurationError

    config = _load(args)
    try:
        rc = estimate_rc(config.parameters, config.observed_series())
    except ConfigurationError as e:
        _fail(str(e))
    print(f"Rc = {rc:.4f} ({'controlled' if is_controlled(rc) else 'outbreak risk'})")


def _run_solve(args: list[str]) -> None:
    from rshield.analysis.reproduction import estimate_rc
    from rshield.analysis.threshold import solve_for_rc_one
    from rshield.errors import ConfigurationError

    config = _load(args)
    observed = config.observed_series()
    try:
        solved = solve_for_rc_one(config.parameters, observed)
    except ConfigurationError as e:
        _fail(str(e))
    if solved is config.parameters:
        print("No positive scaling reaches Rc = 1; parameters unchanged.")
        return
    c = solved.controls
    print(f"suppression v = {c.suppression}")
    print(f"correction u_g = {c.correction}")
    print(f"Rc = {estimate_rc(solved, observed):.4f}")


def _run_fit(args: list[str]) -> None:
    from rshield.analysis.jobs import FitJob

    config = _load(args)

    def _progress(done: int, total: int) -> None:
        if done % 100 == 0 or done == total:
            print(f"  {done}/{total} candidates")

    with FitJob(
        config.parameters, config.observed_series(), config.fit_grid, on_progress=_progress,
    ) as job:
        try:
            result = job.submit().result()
        except KeyboardInterrupt:
            job.cancel()
            _fail("fit cancelled")

    if not result.fitted:
        print("Not enough observed data to fit (need at least 3 points).")
        return
    p = result.parameters
    print(f"population = {p.population:.0f}")
    print(f"beta = {p.beta}")
    print(f"gamma = {p.gamma}")
    print(f"alpha = {p.alpha}")
    print(
        f"peak: simulated day {result.peak_simulated_day:.2f} "
        f"({result.peak_simulated_value:.0f}) vs observed day "
        f"{result.peak_observed_day} ({result.peak_observed_value:.0f})"
    )
    print(f"error = {result.error:.3f}")


def _run_advise(args: list[str]) -> None:
    from rshield.agents.advisor import AdvisorAgent
    from rshield.agents.base import CLIBackend
    from rshield.analysis.summary import summarize
    from rshield.errors import RemoteServiceError

    remote = "--remote" in args
    args = [a for a in args if a != "--remote"]
    if not args:
        _fail("advise requires a topic")
    config = _load(args[1:])
    backend = None
    if remote:
        b = config.backend
        backend = CLIBackend(b.executable, max_retries=b.max_retries, timeout=b.timeout)
    summary = summarize(config.parameters, config.observed_series())
    try:
        print(AdvisorAgent(backend).run(args[0], config.parameters, summary, config.locale))
    except RemoteServiceError as e:
        _fail(str(e))


def _run_reach(args: list[str]) -> None:
    from rshield.analysis.reach import K_FACTOR, estimate_reach

    if not args:
        _fail("reach requires an interest index")
    try:
        index = float(args[0])
        k = float(args[1]) if len(args) > 1 else K_FACTOR
    except ValueError:
        _fail(f"not a number: {' '.join(args)}")
    print(f"{estimate_reach(index, k)}")


if __name__ == "__main__":
    main()
