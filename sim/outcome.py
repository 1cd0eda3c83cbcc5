# sim/outcome.py
"""
OutcomeJudge
------------
Decides when a session ends and explains why it was lost.

Priority each tick: depleted health loses immediately, even on the tick the
time limit expires. Otherwise reaching the time limit wins only at flowering.
"""

from typing import Dict, List, Optional

from sim.state import GamePhase, GrowthStage, SimulationState, StressLevel

RESOURCE_ADVICE = {
    'water': "Water reached a critical level. Keep it between 40 and 70.",
    'light': "Light reached a critical level. Compensate during the orbital night.",
    'nutrients': "Nutrients reached a critical level. Top them up before they run low.",
    'temperature': "Temperature reached a critical level. Hold it between 20 and 24 C.",
    'humidity': "Humidity reached a critical level. Watch how water and heat move it.",
    'co2': "CO2 reached a critical level. Keep the air system supplied.",
    'energy': "Energy dropped below 20. Every adjustment costs power, plan them.",
}
HEALTH_ADVICE = "Plant health reached zero. Correct warnings before they turn critical."
TIME_ADVICE = "Time ran out before the zinnia flowered. Keep health above 30 so it keeps growing."


class OutcomeJudge:
    def __init__(self, cfg=None):
        cfg = cfg or {}
        self.time_limit = cfg.get('time_limit_s', 300.0)

    def judge(self, state: SimulationState) -> Optional[GamePhase]:
        """Terminal phase for this tick, or None to keep playing."""
        if state.plant_health <= 0:
            return GamePhase.LOST
        if state.elapsed_time >= self.time_limit:
            if state.growth_stage is GrowthStage.FLOWERING:
                return GamePhase.WON
            return GamePhase.LOST
        return None

    def loss_reasons(self, state: SimulationState) -> List[Dict[str, str]]:
        reasons = []
        for resource, level in state.stress_factors.items():
            if level is StressLevel.CRITICAL:
                reasons.append({'cause': resource.value, 'advice': RESOURCE_ADVICE[resource.value]})
        if state.plant_health <= 0:
            reasons.append({'cause': 'health', 'advice': HEALTH_ADVICE})
        if state.elapsed_time >= self.time_limit and state.growth_stage is not GrowthStage.FLOWERING:
            reasons.append({'cause': 'time', 'advice': TIME_ADVICE})
        return reasons

    def summary(self, state: SimulationState) -> dict:
        """End-of-mission statistics."""
        return {
            'outcome': state.game_phase.value,
            'difficulty': state.difficulty.value,
            'minutes_survived': round(state.elapsed_time / 60.0, 1),
            'final_health': round(state.plant_health),
            'stage_reached': state.growth_stage.value,
            'progress': round(state.growth_progress),
            'orbits_completed': state.orbit_count,
        }
