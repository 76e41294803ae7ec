"""Rule-based trajectory judge.

Scores a completed trajectory from its step rewards and overall quality and
attaches the resulting verdict to the trajectory.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from core.errors import IncompleteTrajectoryError
from memory.scoring import recency_decay
from memory.types.trajectory import Trajectory, TrajectoryStep, TrajectoryVerdict

POSITIVE_REWARD = 0.5
SUCCESS_POSITIVE_RATIO = 0.6
RECENCY_SCALE_DAYS = 30.0

LOW_AVG_REWARD = "Low average reward"
DECLINING_REWARD = "Declining reward trajectory"
MOSTLY_NEUTRAL = "Many negative/neutral steps"
LONG_MEDIOCRE = "Long trajectory with mediocre outcome"

IMPROVEMENTS = {
    LOW_AVG_REWARD: "Consider alternative strategies for each step",
    DECLINING_REWARD: "Re-evaluate approach when reward decreases",
    MOSTLY_NEUTRAL: "Focus on steps with clearer positive signals",
    LONG_MEDIOCRE: "Look for shortcuts or more direct approaches",
}


@dataclass(frozen=True)
class StepAnalysis:
    """Aggregate reward statistics for a trajectory's steps."""

    total_steps: int
    avg_reward: float
    positive_ratio: float
    reward_delta: float


def analyze_steps(steps: list[TrajectoryStep]) -> StepAnalysis:
    count = len(steps)
    if count == 0:
        return StepAnalysis(total_steps=0, avg_reward=0.0, positive_ratio=0.0, reward_delta=0.0)
    rewards = [step.reward for step in steps]
    positive = sum(1 for reward in rewards if reward > POSITIVE_REWARD)
    return StepAnalysis(
        total_steps=count,
        avg_reward=sum(rewards) / count,
        positive_ratio=positive / count,
        reward_delta=rewards[-1] - rewards[0] if count > 1 else 0.0,
    )


class TrajectoryJudge:
    """Evaluates trajectory quality with fixed heuristics."""

    def __init__(self, distillation_threshold: float = 0.6) -> None:
        self.distillation_threshold = distillation_threshold

    def judge(self, trajectory: Trajectory, now: datetime | None = None) -> TrajectoryVerdict:
        """Produce a verdict and attach it to the trajectory."""
        if not trajectory.is_complete:
            raise IncompleteTrajectoryError(trajectory.trajectory_id)

        analysis = analyze_steps(trajectory.steps)
        quality = trajectory.quality_score
        success = (
            quality >= self.distillation_threshold
            and analysis.positive_ratio > SUCCESS_POSITIVE_RATIO
        )
        weaknesses = self.identify_weaknesses(quality, analysis)

        verdict = TrajectoryVerdict(
            success=success,
            confidence=self.compute_confidence(quality, analysis),
            strengths=self.identify_strengths(quality, analysis),
            weaknesses=weaknesses,
            improvements=[IMPROVEMENTS[w] for w in weaknesses],
            relevance_score=self.compute_relevance(trajectory, now=now),
        )
        trajectory.verdict = verdict
        return verdict

    @staticmethod
    def identify_strengths(quality: float, analysis: StepAnalysis) -> list[str]:
        strengths: list[str] = []
        if analysis.avg_reward > 0.7:
            strengths.append("High average reward across steps")
        if analysis.reward_delta > 0.2:
            strengths.append("Positive reward trajectory")
        if quality > 0.8:
            strengths.append("High overall quality")
        if analysis.total_steps < 5 and quality > 0.6:
            strengths.append("Efficient solution (few steps)")
        return strengths

    @staticmethod
    def identify_weaknesses(quality: float, analysis: StepAnalysis) -> list[str]:
        weaknesses: list[str] = []
        if analysis.avg_reward < 0.4:
            weaknesses.append(LOW_AVG_REWARD)
        if analysis.reward_delta < -0.1:
            weaknesses.append(DECLINING_REWARD)
        if analysis.positive_ratio < 0.5:
            weaknesses.append(MOSTLY_NEUTRAL)
        if analysis.total_steps > 10 and quality < 0.7:
            weaknesses.append(LONG_MEDIOCRE)
        return weaknesses

    @staticmethod
    def compute_confidence(quality: float, analysis: StepAnalysis) -> float:
        step_factor = min(analysis.total_steps / 10, 1.0)
        outcome_factor = abs(quality - 0.5) * 2
        confidence = 0.3 * step_factor + 0.4 * analysis.positive_ratio + 0.3 * outcome_factor
        return min(1.0, confidence)

    @staticmethod
    def compute_relevance(trajectory: Trajectory, now: datetime | None = None) -> float:
        recency = recency_decay(trajectory.start_time, scale_days=RECENCY_SCALE_DAYS, now=now)
        return 0.7 * trajectory.quality_score + 0.3 * recency
