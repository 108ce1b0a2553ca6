"""Circuit breaker CLI commands for GapMiner.

Shows the resolved per-service breaker configuration and lets operators
rehearse a failure sequence against a breaker without touching a real
service.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import click

from .circuit_breaker import CircuitBreakerRegistry, CircuitState
from .settings import GapMinerSettings


@click.group()
def circuits() -> None:
    """Circuit breaker inspection commands."""
    pass


@circuits.command(name="defaults")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def circuits_defaults(settings: GapMinerSettings, as_json: bool) -> None:
    """Show the breaker configuration for every configured service."""
    configs = {name: settings.services[name].to_dict() for name in sorted(settings.services)}
    if as_json:
        click.echo(json.dumps(configs, indent=2))
        return

    click.echo("\n" + "=" * 60)
    click.echo("Circuit Breaker Configuration")
    click.echo("=" * 60)
    for name, config in configs.items():
        deadline = config["call_timeout_seconds"]
        click.echo(
            f"  {name}: failures={config['failure_threshold']}, "
            f"successes={config['success_threshold']}, "
            f"timeout={config['timeout_seconds']:g}s, "
            f"window={config['monitoring_window_seconds']:g}s, "
            f"deadline={'none' if deadline is None else f'{deadline:g}s'}"
        )


@circuits.command(name="simulate")
@click.argument("service")
@click.option("--failures", "-f", type=int, default=None, help="Failing calls (default: threshold)")
@click.option("--successes", "-s", type=int, default=0, help="Succeeding calls afterwards")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def circuits_simulate(
    settings: GapMinerSettings,
    service: str,
    failures: int | None,
    successes: int,
    as_json: bool,
) -> None:
    """Drive a breaker through failing then succeeding calls and show each state."""
    clock = _SimulatedClock()
    registry = settings.build_registry(clock=clock)
    steps = asyncio.run(_simulate(registry, clock, service, failures, successes))
    metrics = registry.get_breaker(service).get_metrics().to_dict()

    if as_json:
        click.echo(json.dumps({"steps": steps, "metrics": metrics}, indent=2))
        return

    for step in steps:
        marker = "ok" if step["success"] else "x"
        click.echo(f"  [{marker}] call {step['call']}: {step['outcome']} -> {step['state']}")
    click.echo(
        f"\n{service}: {metrics['state']} "
        f"(failures={metrics['failure_count']}, total={metrics['total_requests']})"
    )


class _SimulatedClock:
    """Manually advanced clock so cool-downs pass instantly."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


async def _simulate(
    registry: CircuitBreakerRegistry,
    clock: _SimulatedClock,
    service: str,
    failures: int | None,
    successes: int,
) -> list[dict[str, Any]]:
    """Run the simulated call sequence against a breaker.

    Calls are one second apart. Before the first succeeding call an open
    circuit's cool-down is skipped, so the recovery path is shown.
    """
    breaker = registry.get_breaker(service)
    failure_calls = breaker.config.failure_threshold if failures is None else failures

    async def fail() -> None:
        raise ConnectionError(f"simulated {service} outage")

    async def succeed() -> str:
        return "ok"

    steps: list[dict[str, Any]] = []
    plan = [fail] * failure_calls + [succeed] * successes
    for number, operation in enumerate(plan, start=1):
        clock.now += 1.0
        if operation is succeed and breaker.state == CircuitState.OPEN:
            clock.now += breaker.get_time_until_retry()
        result = await breaker.execute(operation, operation_name="simulate")
        steps.append(
            {
                "call": number,
                "success": result.success,
                "outcome": "ok" if result.success else (result.error or "failed"),
                "state": result.circuit_state.value,
            }
        )
    return steps
