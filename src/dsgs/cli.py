"""dsgs CLI: check, status, migrate, serve, stdio."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dsgs.config import settings


def cmd_check(args: argparse.Namespace) -> int:
    """Generate a TCC and its constraints, then run the task-type checks.

    Returns 0 when no violations are found, 1 on violations or error.
    """
    from dsgs.constraint.generator import generate_constraints
    from dsgs.constraint.violations import TaskTypeViolationChecker
    from dsgs.errors.exceptions import GenerationError, SizeExceededError
    from dsgs.specification.tcc_generator import generate_tcc, update_tcc_with_system_state

    try:
        tcc = generate_tcc(args.task_id, args.goal, args.task_type)
        constraints = generate_constraints(tcc)
    except (GenerationError, SizeExceededError, ValueError) as exc:
        print(f"Error during constraint check: {exc}", file=sys.stderr)
        return 1

    print(f'\nEnforcing {len(constraints)} constraints for task "{args.goal}":')
    for constraint in constraints:
        print(f"  - [{constraint.severity}] {constraint.name}: {constraint.description}")

    violations = TaskTypeViolationChecker().check(constraints, tcc)
    if violations:
        print(f"\n{len(violations)} constraint violation(s) found:", file=sys.stderr)
        for violation in violations:
            print(f"  - {violation.message}", file=sys.stderr)
        return 1

    print("\nAll constraints satisfied")
    update_tcc_with_system_state(tcc)
    return 0


def _show_status(state_path: Path) -> None:
    from dsgs.evolution.manager import EvolutionManager, load_state

    manager = EvolutionManager()
    state = load_state(state_path, manager)
    stage = manager.current_stage(state)
    if stage is None:
        print("\nEvolution stage not available")
        return

    print("\nEvolution Status:")
    print(f"   Current Stage: {stage.name} (v{stage.version})")
    print(f"   Entered: {state.entered_at}")
    print(f"   Features: {', '.join(stage.features)}")
    self_constraints = manager.self_constraints(state)
    if self_constraints:
        print(f"   Self-Constraints: {', '.join(self_constraints)}")
    upcoming = manager.next_stage(state)
    if upcoming is not None and upcoming.prerequisites:
        print(f"   Next Stage: {upcoming.name} (requires: {', '.join(upcoming.prerequisites)})")


def cmd_status(args: argparse.Namespace) -> int:
    _show_status(Path(args.state))
    return 0


def cmd_migrate(args: argparse.Namespace) -> int:
    from dsgs.evolution.manager import EvolutionManager, load_state, save_state

    state_path = Path(args.state)
    manager = EvolutionManager()
    print("\nAttempting evolution migration...")
    outcome = manager.migrate(load_state(state_path, manager), confirmed=args.confirm)
    if not outcome.migrated:
        print(f"Migration failed: {outcome.reason}")
        return 1

    try:
        save_state(outcome.state, state_path)
    except OSError as exc:
        print(f"Migration failed: could not persist state: {exc}")
        return 1
    print("Migration successful!")
    _show_status(state_path)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from dsgs.server_cli import serve_http

    serve_http(args.host, args.port, args.max_connections)
    return 0


def cmd_stdio(args: argparse.Namespace) -> int:
    from dsgs.mcp.stdio_server import serve_stdio

    serve_stdio(settings.log_level)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dsgs", description="DSGS CLI Interface")
    sub = parser.add_subparsers(dest="command")

    p_check = sub.add_parser("check", help="Check constraints for a task")
    p_check.add_argument("task_id", metavar="taskId")
    p_check.add_argument("goal")
    p_check.add_argument("task_type", metavar="taskType")
    p_check.set_defaults(func=cmd_check)

    p_status = sub.add_parser("status", help="Show current evolution status")
    p_status.add_argument("--state", default=str(settings.evolution_state_path), help="Evolution state file")
    p_status.set_defaults(func=cmd_status)

    p_migrate = sub.add_parser("migrate", help="Attempt to migrate to next evolutionary stage")
    p_migrate.add_argument("--state", default=str(settings.evolution_state_path), help="Evolution state file")
    p_migrate.add_argument(
        "--confirm",
        action="append",
        default=[],
        metavar="PREREQUISITE",
        help="Confirm a prerequisite of the next stage (repeatable)",
    )
    p_migrate.set_defaults(func=cmd_migrate)

    p_serve = sub.add_parser("serve", help="Run the HTTP transport")
    p_serve.add_argument("--host", default=settings.host)
    p_serve.add_argument("--port", type=int, default=settings.port)
    p_serve.add_argument("--max-connections", type=int, default=settings.max_connections)
    p_serve.set_defaults(func=cmd_serve)

    p_stdio = sub.add_parser("stdio", help="Run the line-delimited stdin/stdout transport")
    p_stdio.set_defaults(func=cmd_stdio)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        sys.exit(0)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
