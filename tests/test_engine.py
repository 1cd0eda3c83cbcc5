import numpy as np
import pytest

from sim.engine import INSUFFICIENT_ENERGY, SimulationEngine
from sim.plant import STAGE_THRESHOLDS
from sim.resources import RESOURCE_RANGES
from sim.state import GamePhase, GrowthStage, ResourceId, STAGE_ORDER

from conftest import NO_EVENTS, playing_engine

# health never moves, so only growth and time matter
FROZEN_HEALTH = {'plant': {'critical_penalty': 0.0, 'warning_penalty': 0.0, 'optimal_bonus': 0.0}}


def _assert_invariants(state):
    for r, v in state.resources.items():
        lo, hi = RESOURCE_RANGES[r].valid
        assert lo <= v <= hi, f"{r.value}={v}"
    assert 0.0 <= state.plant_health <= 100.0
    assert 0.0 <= state.growth_progress <= 100.0


# -------------------------
# Lifecycle and phases

def test_start_game_resets_and_opens_tutorial():
    engine = SimulationEngine(NO_EVENTS)
    assert engine.phase is GamePhase.MENU
    assert engine.start_game('hard')
    state = engine.state
    assert state.game_phase is GamePhase.TUTORIAL
    assert state.difficulty.value == 'hard'
    assert state.resources[ResourceId.WATER] == 50.0
    assert state.resources[ResourceId.TEMPERATURE] == 22.0
    assert state.resources[ResourceId.ENERGY] == 100.0
    assert state.growth_stage is GrowthStage.SEED
    assert state.plant_health == 100.0
    assert state.elapsed_time == 0.0


def test_start_game_rejects_bad_difficulty():
    engine = SimulationEngine(NO_EVENTS)
    with pytest.raises(ValueError):
        engine.start_game('nightmare')


def test_invalid_transitions_rejected():
    engine = SimulationEngine(NO_EVENTS)
    assert not engine.start_playing()           # menu -> playing
    assert not engine.set_phase('won')
    assert engine.start_game('easy')
    assert not engine.start_game('easy')        # only from menu
    assert engine.set_phase('menu')             # tutorial -> menu
    assert engine.set_phase('tutorial')
    assert not engine.set_phase('paused')       # tutorial -> paused
    assert engine.start_playing()
    assert not engine.set_phase('menu')         # playing -> menu
    assert not engine.set_phase('tutorial')


def test_pause_freezes_time(easy_engine):
    easy_engine.run(10)
    assert easy_engine.set_phase('paused')
    before = easy_engine.snapshot()
    assert easy_engine.tick() is False
    assert easy_engine.run(50) == 0
    assert easy_engine.snapshot() == before
    assert easy_engine.start_playing()
    easy_engine.tick()
    assert easy_engine.state.elapsed_time == pytest.approx(1.1)


def test_play_again_resets_state():
    engine = playing_engine('easy')
    engine.run(20)
    engine.state.plant_health = 0.1
    engine.state.resources[ResourceId.WATER] = 0.0
    engine.tick()
    assert engine.phase is GamePhase.LOST
    assert engine.start_playing()
    assert engine.phase is GamePhase.PLAYING
    assert engine.state.elapsed_time == 0.0
    assert engine.state.plant_health == 100.0
    assert engine.state.difficulty.value == 'easy'


def test_reset_keeps_phase_and_difficulty(hard_engine):
    hard_engine.run(30)
    hard_engine.reset_game()
    assert hard_engine.phase is GamePhase.PLAYING
    assert hard_engine.state.difficulty.value == 'hard'
    assert hard_engine.state.tick_count == 0


def test_terminal_phase_freezes_ticks(easy_engine):
    easy_engine.state.plant_health = 0.1
    easy_engine.state.resources[ResourceId.WATER] = 0.0
    easy_engine.tick()
    assert easy_engine.phase is GamePhase.LOST
    t = easy_engine.state.elapsed_time
    assert easy_engine.tick() is False
    assert easy_engine.state.elapsed_time == t


# -------------------------
# Time and orbits

def test_orbit_toggles_daylight(easy_engine):
    easy_engine.run(149)
    assert easy_engine.state.is_daylight
    easy_engine.tick()
    assert easy_engine.state.elapsed_time == 15.0
    assert easy_engine.state.orbit_count == 1
    assert not easy_engine.state.is_daylight
    easy_engine.run(150)
    assert easy_engine.state.orbit_count == 2
    assert easy_engine.state.is_daylight


def test_orbit_boundary_tick_drifts_under_previous_phase(easy_engine):
    easy_engine.run(149)
    light = easy_engine.state.resources[ResourceId.LIGHT]
    assert light == pytest.approx(50.0 + 149 * 0.15)
    easy_engine.tick()
    assert not easy_engine.state.is_daylight
    assert easy_engine.state.resources[ResourceId.LIGHT] == pytest.approx(light + 0.15)
    easy_engine.tick()
    assert easy_engine.state.resources[ResourceId.LIGHT] == pytest.approx(light + 0.15 - 0.2)


def test_growth_gate_reads_health_from_tick_start(easy_engine):
    state = easy_engine.state
    state.plant_health = 30.3
    state.resources[ResourceId.WATER] = 0.0
    easy_engine.tick()
    # health fell below the floor this tick, growth still counted
    assert state.plant_health == pytest.approx(29.8)
    assert state.growth_progress == pytest.approx(0.05)
    easy_engine.tick()
    assert state.growth_progress == pytest.approx(0.05)


def test_full_session_reaches_time_limit():
    engine = playing_engine('easy', FROZEN_HEALTH)
    assert engine.run(5000) == 3000
    assert engine.state.elapsed_time == 300.0
    assert engine.state.orbit_count == 20
    assert engine.phase in (GamePhase.WON, GamePhase.LOST)
    # health stayed at 100 so the plant had time to flower
    assert engine.phase is GamePhase.WON


def test_stages_fire_once_in_order():
    engine = playing_engine('easy', FROZEN_HEALTH)
    seen = []
    for _ in range(2000):
        engine.tick()
        stage = engine.state.growth_stage
        if not seen or seen[-1] is not stage:
            seen.append(stage)
    assert seen == STAGE_ORDER
    assert engine.state.growth_progress > 95
    # exactly the five stage messages, most recent first
    messages = [m for m, _ in engine.state.event_log]
    assert messages == [text for _, _, text in reversed(STAGE_THRESHOLDS)]


def test_health_depletion_overrides_win():
    engine = playing_engine('easy')
    state = engine.state
    state.tick_count = 2999
    state.elapsed_time = 299.9
    state.orbit_count = 19
    state.growth_stage = GrowthStage.FLOWERING
    state.growth_progress = 100.0
    state.plant_health = 0.3
    state.resources[ResourceId.WATER] = 0.0
    engine.tick()
    assert state.elapsed_time == 300.0
    assert state.plant_health == 0.0
    assert engine.phase is GamePhase.LOST
    causes = [r['cause'] for r in engine.loss_reasons()]
    assert 'health' in causes and 'water' in causes
    assert 'time' not in causes


def test_time_expiry_without_flowering_loses():
    engine = playing_engine('easy')
    state = engine.state
    state.tick_count = 2999
    state.growth_stage = GrowthStage.BUDDING
    state.growth_progress = 80.0
    engine.tick()
    assert engine.phase is GamePhase.LOST
    assert [r['cause'] for r in engine.loss_reasons()] == ['time']
    summary = engine.summary()
    assert summary['outcome'] == 'lost'
    assert summary['minutes_survived'] == 5.0
    assert summary['stage_reached'] == 'budding'


def test_no_loss_reasons_while_playing(easy_engine):
    easy_engine.state.resources[ResourceId.WATER] = 0.0
    easy_engine.tick()
    assert easy_engine.loss_reasons() == []


# -------------------------
# Commands

def test_hard_commands_cost_two_energy(hard_engine):
    for _ in range(10):
        assert hard_engine.increase_resource('water', 5)
    r = hard_engine.state.resources
    assert r[ResourceId.ENERGY] == 80.0
    assert r[ResourceId.WATER] == 100.0


def test_energy_cost_independent_of_amount(hard_engine):
    hard_engine.decrease_resource('light', 0.5)
    hard_engine.increase_resource('nutrients', 40)
    assert hard_engine.state.resources[ResourceId.ENERGY] == 96.0
    assert hard_engine.state.resources[ResourceId.LIGHT] == 49.5


def test_energy_gate_rejects_without_side_effects(hard_engine):
    hard_engine.state.resources[ResourceId.ENERGY] = 1.9
    before = dict(hard_engine.state.resources)
    log_len = len(hard_engine.state.event_log)
    assert not hard_engine.increase_resource('water', 5)
    assert hard_engine.state.resources == before
    assert len(hard_engine.state.event_log) == log_len + 1
    assert hard_engine.state.event_log.entries()[0][0] == INSUFFICIENT_ENERGY


def test_energy_commands_are_free(hard_engine):
    hard_engine.state.resources[ResourceId.ENERGY] = 1.0
    assert hard_engine.increase_resource('energy', 5)
    assert hard_engine.state.resources[ResourceId.ENERGY] == 6.0


def test_easy_commands_do_not_cost_energy(easy_engine):
    assert easy_engine.increase_resource('light', 20)
    assert easy_engine.state.resources[ResourceId.LIGHT] == 70.0
    assert easy_engine.state.resources[ResourceId.ENERGY] == 100.0


def test_default_command_step(easy_engine):
    easy_engine.increase_resource('temperature')
    easy_engine.decrease_resource('water')
    assert easy_engine.state.resources[ResourceId.TEMPERATURE] == 22.5
    assert easy_engine.state.resources[ResourceId.WATER] == 45.0


def test_commands_clamp(easy_engine):
    easy_engine.increase_resource('temperature', 100)
    easy_engine.decrease_resource('nutrients', 100)
    assert easy_engine.state.resources[ResourceId.TEMPERATURE] == 30.0
    assert easy_engine.state.resources[ResourceId.NUTRIENTS] == 0.0


def test_hard_only_resources_rejected_in_easy(easy_engine):
    assert not easy_engine.increase_resource('humidity', 5)
    assert easy_engine.state.resources[ResourceId.HUMIDITY] == 50.0


def test_commands_ignored_outside_playing(easy_engine):
    easy_engine.set_phase('paused')
    assert not easy_engine.increase_resource('water', 10)
    assert easy_engine.state.resources[ResourceId.WATER] == 50.0
    assert len(easy_engine.state.event_log) == 0


def test_unknown_resource_raises(easy_engine):
    with pytest.raises(ValueError):
        easy_engine.increase_resource('oxygen', 1)


# -------------------------
# Snapshot, log and invariants

def test_snapshot_is_detached(easy_engine):
    snap = easy_engine.snapshot()
    snap['resources']['water'] = -1
    snap['event_log'].append({'message': 'x', 'time': 0})
    assert easy_engine.state.resources[ResourceId.WATER] == 50.0
    assert len(easy_engine.state.event_log) == 0
    assert set(snap) >= {'elapsed_time', 'orbit_count', 'is_daylight', 'growth_stage',
                         'growth_progress', 'plant_health', 'resources', 'stress_factors',
                         'active_event', 'event_log', 'game_phase', 'difficulty'}


def test_event_log_capped_most_recent_first(hard_engine):
    for i in range(7):
        hard_engine.log_event(f"msg {i}")
    entries = hard_engine.state.event_log.entries()
    assert len(entries) == 5
    assert entries[0][0] == 'msg 6'
    assert entries[-1][0] == 'msg 2'


@pytest.mark.parametrize('difficulty', ['easy', 'hard'])
def test_random_play_keeps_invariants(difficulty):
    engine = playing_engine(difficulty, {'events': {'chance_easy': 0.05, 'chance_hard': 0.05}}, seed=7)
    rng = np.random.default_rng(123)
    resources = [r.value for r in ResourceId]
    last_stage = engine.state.growth_stage.index
    while engine.is_playing:
        if rng.random() < 0.3:
            op = engine.increase_resource if rng.random() < 0.5 else engine.decrease_resource
            op(resources[rng.integers(len(resources))], float(rng.uniform(0, 30)))
            _assert_invariants(engine.state)
        engine.tick()
        state = engine.state
        _assert_invariants(state)
        assert state.growth_stage.index >= last_stage
        last_stage = state.growth_stage.index
    assert engine.phase.is_terminal
    assert engine.state.elapsed_time <= 300.0
