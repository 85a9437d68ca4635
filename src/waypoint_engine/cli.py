"""waypoint-engine CLI: record a reference gesture, then count repetitions.

Usage:
    waypoint-engine run SCRIPT       Interactive record / reps menu over a motion source
    waypoint-engine quantize W X Y Z  Print the waypoint of one quaternion
                                       (use `--` before negative components)
"""

from __future__ import annotations

import logging
from typing import Optional

try:
    import typer
except ImportError:
    raise ImportError("typer is required for CLI. Install with: pip install typer")

from waypoint_engine.config import EngineConfig
from waypoint_engine.device import (
    DeviceState,
    DeviceUnavailable,
    MotionSource,
    open_source,
    session_ticks,
)
from waypoint_engine.gestures import GestureLibrary, GestureNotFound
from waypoint_engine.matcher import GestureMatcher, MatchResult, RepCounter
from waypoint_engine.recorder import GestureRecorder
from waypoint_engine.waypoints import quantize as quantize_sample

app = typer.Typer(
    name="waypoint-engine",
    help="Record orientation gestures and count repetitions.",
    add_completion=False,
)

MENU = "\n1. Record a gesture\n2. Perform reps of a gesture\n3. Quit"


class Session:
    """Menu-level state shared by the record and reps actions."""

    def __init__(self, source: MotionSource, config: EngineConfig):
        self.source = source
        self.config = config
        self.state = DeviceState(resolution=config.resolution)
        self.library = GestureLibrary()
        self.recorder = GestureRecorder(config)
        self.matcher = GestureMatcher(config)

    def ticks(self):
        return session_ticks(self.source, self.state, self.config)

    def record(self):
        typer.echo(f"Recording... send '{self.config.stop_event}' to stop")
        gesture = self.recorder.record(
            self.ticks(),
            on_waypoint=lambda wp: typer.echo(f"\r{self.state.status_line()}", nl=False),
        )
        typer.echo(f"\n{gesture.to_json()}")

        if not typer.confirm("Do you want to save?"):
            typer.echo("Gesture discarded!")
            return

        while True:
            name = typer.prompt("Gesture recorded! Enter a name for the gesture")
            try:
                self.library.save(name, gesture)
                break
            except ValueError as e:
                typer.echo(f"Invalid! {e}")
        typer.echo(f"Gesture {name} saved!")

    def reps(self):
        names = self.library.names()
        if not names:
            typer.echo("No gestures saved yet.")
            return

        for i, name in enumerate(names, start=1):
            typer.echo(f"{i}. {name}")

        while True:
            try:
                name = self.library.name_at(typer.prompt("Gesture", type=int))
                break
            except GestureNotFound:
                typer.echo("Incorrect input!")

        total = typer.prompt("How many reps would you like to perform?", type=int)
        while total < 0:
            typer.echo("Incorrect input!")
            total = typer.prompt("How many reps would you like to perform?", type=int)

        counter = RepCounter(self.matcher, self.library.get(name), total)
        report = counter.run(
            self.ticks,
            on_progress=lambda done, n: typer.echo(f"Reps: {done} / {n}"),
        )

        if report.aborted:
            typer.echo(f"Set aborted after {report.completed} reps.")
        elif report.interrupted_by is MatchResult.EXHAUSTED:
            typer.echo(f"Motion source ended after {report.completed} reps.")


@app.command()
def run(
    script: str = typer.Argument(..., help="Path to a motion source script (YAML)"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to engine YAML config"),
    timeout: Optional[float] = typer.Option(None, help="Device discovery timeout in seconds"),
    realtime: Optional[bool] = typer.Option(None, "--realtime/--no-realtime", help="Pace polling at the sampling period"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Record gestures and perform repetitions against them."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = EngineConfig.from_yaml(config_path) if config_path else EngineConfig()
    except (OSError, ValueError) as e:
        typer.echo(f"❌ Invalid config: {e}", err=True)
        raise typer.Exit(1)

    if timeout is not None:
        config.discovery_timeout_s = timeout
    if realtime is not None:
        config.realtime = realtime

    typer.echo("Attempting to find a motion source...")
    try:
        source = open_source(script, config)
    except DeviceUnavailable as e:
        typer.echo(f"Error: {e}", err=True)
        typer.pause("Press enter to continue.")
        raise typer.Exit(1)
    typer.echo("Connected to a motion source!")

    session = Session(source, config)
    with source:
        while not source.exhausted:
            typer.echo(MENU)
            choice = typer.prompt("Choice", type=int)
            if choice == 1:
                session.record()
            elif choice == 2:
                session.reps()
            elif choice == 3:
                break
            else:
                typer.echo("Incorrect input!")
        else:
            typer.echo("Motion source exhausted.")


@app.command()
def quantize(
    w: float = typer.Argument(..., help="Quaternion w"),
    x: float = typer.Argument(..., help="Quaternion x"),
    y: float = typer.Argument(..., help="Quaternion y"),
    z: float = typer.Argument(..., help="Quaternion z"),
    resolution: int = typer.Option(18, help="Bins per axis"),
):
    """Print the waypoint for a single orientation sample."""
    typer.echo(str(quantize_sample((w, x, y, z), resolution)))


def main():
    app()


if __name__ == "__main__":
    main()
