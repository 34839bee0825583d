"""
UAV Flight Simulation - CLI

The single entry point for running simulations from the command line and
exporting the recorded series.
"""

import argparse
import dataclasses
import logging
import os
import sys

from uav_sim.config import ControllerType, SolverType, create_default_config
from uav_sim.main import run_simulation

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    defaults = create_default_config()
    parser = argparse.ArgumentParser(
        description="Fixed-wing UAV Flight Simulation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--solver",
        type=int,
        choices=[int(s) for s in SolverType],
        default=int(defaults.solver_type),
        help="0 = forward Euler, 1 = RK45, 2 = BDF"
    )
    parser.add_argument(
        "--t-final",
        type=float,
        default=defaults.t_f,
        help="Final simulation time (s)"
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=defaults.dt,
        help="Fixed time step (s)"
    )
    parser.add_argument(
        "--controller",
        type=int,
        choices=[int(c) for c in ControllerType],
        default=int(defaults.controller_type),
        help="0 = static, 1 = trimmed static, 2 = feedback"
    )
    parser.add_argument(
        "--airspeed",
        type=float,
        default=defaults.trim_airspeed,
        help="Trim airspeed (m/s)"
    )
    parser.add_argument(
        "--output-dir", "-o",
        type=str,
        default=None,
        help="Directory to write states.csv and inputs.csv"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress verbose output"
    )
    return parser.parse_args(argv)


def build_config(args):
    """Build a SimulationConfig from parsed arguments."""
    return dataclasses.replace(
        create_default_config(),
        solver_type=args.solver,
        t_f=args.t_final,
        dt=args.dt,
        controller_type=args.controller,
        trim_airspeed=args.airspeed,
        verbose=not args.quiet,
    )


def main(argv=None):
    """Main execution flow."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = build_config(args)
        output = run_simulation(config)

        print("\n" + "=" * 60)
        print("SIMULATION SUMMARY")
        print("=" * 60)
        print(f"Final time: {output.final_time:.2f} s")
        print(f"Final altitude: {output.final_state.altitude:.2f} m")
        print(f"Final airspeed: {output.final_state.airspeed:.2f} m/s")
        print(f"Steps: {output.steps}")
        print(f"Wall time: {output.wall_time:.2f} s")
        print("=" * 60 + "\n")

        if args.output_dir:
            out_dir = os.path.abspath(args.output_dir)
            logger.info(f"Writing recorded series to {out_dir}")
            output.to_csv(out_dir)
            print(f">> Output written to: {out_dir}")

    except Exception as e:
        logger.error(f"Simulation failed: {e}", exc_info=True)
        print(f"\n[ERROR] Simulation failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
