"""Human-readable explanations of engine outputs."""

from __future__ import annotations

from workforce_engine.schema import AssignmentCandidate, TrendResult


def explain_candidate(candidate: AssignmentCandidate) -> str:
    """Multi-line explanation of why a candidate was ranked where it was."""

    lines = [
        f"{candidate.employee_name} ({candidate.role})",
        f"Suitability Score: {candidate.suitability_score}/100",
        "",
        "Reasons:",
    ]
    lines.extend(f"  - {reason}" for reason in candidate.reasoning)
    lines.extend(
        [
            "",
            "Details:",
            f"  - Skills Match: {candidate.skills_match}%",
            f"  - Current Workload: {candidate.current_workload} active tasks",
            f"  - Productivity Score: {candidate.productivity_score:g}/100",
        ]
    )
    return "\n".join(lines)


def explain_trend(result: TrendResult) -> dict:
    """Flatten a trend result into the top factors and headline numbers."""

    return {
        "employee": result.employee_name,
        "trend": result.trend,
        "confidence": result.confidence,
        "score_change": round(result.predicted_score - result.current_score, 2),
        "top_factors": result.contributing_factors[:3],
    }
