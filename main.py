#!/usr/bin/env python3
"""
Main entry point for cloth simulation.

Usage:
    python main.py run --steps 300 --mode lines --animate
    python main.py run --side-count 15 --gravity 1.0 --plot
"""

import argparse
import logging
import sys

from verlet_cloth import (
    SimulationConfig,
    ClothSimulator,
    animate_cloth,
    plot_trajectories,
)
from verlet_cloth.errors import VerletClothError
from verlet_cloth.logging_config import setup_logging


def run_simulation(args):
    """Run the scripted cloth simulation."""
    print("=== Cloth Simulation ===")

    # Create config
    config = SimulationConfig(
        side_count=args.side_count,
        side_length=args.side_length,
        stiffness_multiplier=args.stiffness,
        base_mass=args.mass,
        damping_factor=1.0 - args.dissipation,
        time_step=args.dt,
        amplitude=args.amplitude,
        period=args.period,
        device=args.device,
    )

    print(
        f"Config: {config.side_count}x{config.side_count} grid, "
        f"side={config.side_length}, stiffness={config.stiffness:.3e}"
    )
    print(f"Steps: {args.steps}, dt={config.time_step:.3f}")

    # Create simulator
    simulator = ClothSimulator(config)
    simulator.set_gravity(args.gravity)
    print(f"Device: {config.device}")

    # Animate if requested; the animation drives the simulator itself
    if args.animate:
        print("Creating animation...")
        animate_cloth(simulator, args.steps, mode=args.mode, path=args.animation_path)
        print(f"Animation saved to {args.animation_path}")
        print("Done!")
        return None

    print("Running simulation...")
    trajectory = simulator.run(args.steps, record=True)
    print(f"Trajectory shape: {trajectory.shape}")

    # Plot trajectories if requested
    if args.plot:
        import matplotlib.pyplot as plt

        fig = plot_trajectories(trajectory)
        fig.savefig(args.plot_path)
        plt.close(fig)
        print(f"Trajectory plot saved to {args.plot_path}")

    print("Done!")
    return trajectory


def build_parser():
    parser = argparse.ArgumentParser(description="Mass-spring cloth simulation")
    parser.add_argument(
        "--log-level", default="WARNING", help="Console log level (DEBUG, INFO, ...)"
    )
    parser.add_argument("--log-file", type=str, help="Also write a debug log to this file")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    run_parser = subparsers.add_parser("run", help="Run the cloth simulation")

    # Grid parameters
    run_parser.add_argument("--side-count", type=int, default=27, help="Vertices per side")
    run_parser.add_argument("--side-length", type=float, default=200.0, help="Cloth side length")
    run_parser.add_argument("--mass", type=float, default=0.1, help="Total cloth mass")

    # Physics parameters
    run_parser.add_argument(
        "--stiffness", type=float, default=0.001, help="Hooke's coefficient multiplier"
    )
    run_parser.add_argument(
        "--dissipation", type=float, default=0.002, help="Velocity fraction lost per tick"
    )
    run_parser.add_argument("--gravity", type=float, default=0.0, help="Gravity slider level")

    # Scripted center motion
    run_parser.add_argument("--amplitude", type=float, default=10.0, help="Center amplitude")
    run_parser.add_argument("--period", type=float, default=16.0, help="Center period")

    # Simulation parameters
    run_parser.add_argument("--dt", type=float, default=0.2, help="Time step")
    run_parser.add_argument("--steps", type=int, default=300, help="Number of steps")
    run_parser.add_argument("--device", type=str, default=None, help="Warp device")

    # Output options
    run_parser.add_argument(
        "--mode", choices=["lines", "triangles"], default="lines", help="Rendering mode"
    )
    run_parser.add_argument("--animate", action="store_true", help="Create animation")
    run_parser.add_argument(
        "--animation-path", type=str, default="cloth_animation.gif", help="Animation output path"
    )
    run_parser.add_argument("--plot", action="store_true", help="Plot vertex heights")
    run_parser.add_argument(
        "--plot-path", type=str, default="trajectories.png", help="Plot output path"
    )

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_file, level=getattr(logging, args.log_level.upper(), logging.WARNING))

    if args.command == "run":
        try:
            return run_simulation(args)
        except VerletClothError as exc:
            print(f"error: {exc}", file=sys.stderr)
            sys.exit(2)

    parser.print_help()
    sys.exit(1)


if __name__ == "__main__":
    main()
