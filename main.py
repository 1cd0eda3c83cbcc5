#!/usr/bin/env python3
"""
main.py - Orchestrator for the orbital garden project

Usage examples:
    python main.py sim_run --difficulty easy
    python main.py sim_run --difficulty hard --realtime --no_controller
    python main.py sim_run --plot_dir plots
    python main.py evaluate --difficulty hard --n_episodes 20

This script expects to be run from the project root.
"""
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from config import load_config
from baseline_controller import BaselineController
from rl.evaluate_policy import evaluate_policy
from sim.clock import TickClock
from sim.engine import SimulationEngine


def setup_logging(prefix="sim_run", level=logging.INFO):
    log_dir = ROOT / "logs"
    log_dir.mkdir(exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"{prefix}_{timestamp}.log"

    logging.basicConfig(
        level=level,
        format='%(asctime)s | %(levelname)s | %(message)s',
        handlers=[
            logging.FileHandler(log_file, mode='w'),
            logging.StreamHandler()  # Also print to console
        ]
    )
    return log_file


def new_log_entries(snapshot, seen_total):
    """Event log entries added since `seen_total` messages, oldest first."""
    fresh = snapshot['events_logged'] - seen_total
    if fresh <= 0:
        return []
    return list(reversed(snapshot['event_log'][:fresh]))


def report_interval_ticks(report_every, tick_seconds):
    return max(1, int(round(report_every / tick_seconds)))


def sim_run(args):
    log_file = setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)
    logger = logging.getLogger(__name__)

    cfg = load_config(args.config)
    if args.seed is not None:
        cfg['seed'] = args.seed

    engine = SimulationEngine(cfg)
    engine.start_game(args.difficulty)
    engine.start_playing()

    clock_cfg = cfg.get('clock') or {}
    interval = clock_cfg.get('tick_interval_s', 0.1) if args.realtime else 0.0
    clock = TickClock(engine, interval=interval)

    logger.info("="*80)
    logger.info("SIMULATION RUN STARTED")
    logger.info(f"Difficulty: {args.difficulty}")
    logger.info(f"Cadence: {'real time' if args.realtime else 'fast-forward'}")
    logger.info(f"Log file: {log_file}")
    logger.info("="*80)

    controller = None if args.no_controller else BaselineController(args.difficulty)
    if controller is not None:
        logger.info(f"Using controller: {controller.name}")

    history = None
    if args.plot_dir:
        from viz.plot_utils import history_recorder
        history, recorder = history_recorder()
        clock.add_listener(recorder)

    every_ticks = report_interval_ticks(args.report_every, clock_cfg.get('tick_seconds', 0.1))
    seen = {'total': 0}

    def on_tick(snapshot):
        # report new player-facing messages once
        for entry in new_log_entries(snapshot, seen['total']):
            logger.info(f"[t={entry['time']:6.1f}s] {entry['message']}")
        seen['total'] = snapshot['events_logged']
        if snapshot['tick_count'] % every_ticks == 0 or snapshot['game_phase'] != 'playing':
            res = ', '.join(f"{k}={v:.1f}" for k, v in snapshot['resources'].items())
            logger.info(f"t={snapshot['elapsed_time']:6.1f}s stage={snapshot['growth_stage']} "
                        f"health={snapshot['plant_health']:.1f} progress={snapshot['growth_progress']:.1f} | {res}")
        if controller is not None and snapshot['game_phase'] == 'playing':
            command = controller.decide_from_snapshot(snapshot)
            if command is not None:
                op, resource = command
                clock.submit(op, resource.value)

    clock.add_listener(on_tick)
    try:
        ticks = clock.run(max_ticks=args.ticks)
    except KeyboardInterrupt:
        clock.stop()
        engine.set_phase('paused')
        ticks = clock.ticks
        logger.info("Interrupted, session paused")

    summary = engine.summary()
    logger.info("-"*80)
    logger.info(f"Ticks run: {ticks}")
    for key, value in summary.items():
        logger.info(f"  {key}: {value}")
    for reason in engine.loss_reasons():
        logger.info(f"  [{reason['cause']}] {reason['advice']}")
    logger.info("="*80)

    if history is not None:
        from viz.plot_utils import plot_episode_summary
        plot_episode_summary(history, summary=summary, out_dir=args.plot_dir,
                             prefix=f"{args.difficulty}_{summary['outcome']}")

    print(f"[main] Sim finished: {summary['outcome']} at stage {summary['stage_reached']}")
    print(f"[main] Detailed log saved to: {log_file}")


def evaluate(args):
    cfg = load_config(args.config)
    evaluate_policy(difficulty=args.difficulty, n_episodes=args.n_episodes, seed=args.seed, cfg=cfg)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Orbital garden - main orchestrator")
    sub = p.add_subparsers(dest="cmd")

    s = sub.add_parser("sim_run", help="Run one session (baseline controller unless --no_controller)")
    s.add_argument("--difficulty", choices=["easy", "hard"], default="easy")
    s.add_argument("--ticks", type=int, default=None, help="stop after this many ticks")
    s.add_argument("--realtime", action='store_true', help="tick at the configured wall-clock cadence")
    s.add_argument("--no_controller", action='store_true', help="let the plant fend for itself")
    s.add_argument("--seed", type=int, default=None, help="override config seed")
    s.add_argument("--config", type=str, default=None, help="path to YAML config")
    s.add_argument("--report_every", type=float, default=15.0, help="status line interval (simulated s)")
    s.add_argument("--plot_dir", type=str, default=None, help="save time-series plots here")
    s.add_argument("--verbose", action='store_true', help="debug logging")

    e = sub.add_parser("evaluate", help="Evaluate the baseline controller over seeded episodes")
    e.add_argument("--difficulty", choices=["easy", "hard"], default="easy")
    e.add_argument("--n_episodes", type=int, default=20)
    e.add_argument("--seed", type=int, default=42)
    e.add_argument("--config", type=str, default=None, help="path to YAML config")

    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if not args.cmd:
        print("No command given. Use -h to see options.")
        return
    if args.cmd == "sim_run":
        sim_run(args)
    elif args.cmd == "evaluate":
        evaluate(args)
    else:
        print("Unknown command:", args.cmd)


if __name__ == "__main__":
    main()
