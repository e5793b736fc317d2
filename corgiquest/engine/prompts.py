"""
corgiquest.engine.prompts — Recommendation Prompt Templates
============================================================

The system prompt describes the game rules and the JSON shape expected
back; :func:`render_user_prompt` serialises the dog's last week of data.
"""

from __future__ import annotations

import json
from typing import Any

from corgiquest.engine.activities import DURATION_ACTIVITIES, FIXED_ACTIVITIES, ActivityDefinition


def _describe(name: str, definition: ActivityDefinition, per_ten: bool) -> str:
    split = ", ".join(f"{stat} ({pct}%)" for stat, pct in definition.distribution.items())
    points = []
    if definition.physical_points:
        points.append(f"{definition.physical_points} physical")
    if definition.mental_points:
        points.append(f"{definition.mental_points} mental")
    suffix = " per 10 min" if per_ten else ""
    return f"- {name}: {definition.base_xp} XP → {split} | {' + '.join(points) or '0'} points{suffix}"


def _activity_reference() -> str:
    lines = ["Duration-based activities (XP per 10 minutes):"]
    lines += [_describe(n, d, True) for n, d in DURATION_ACTIVITIES.items()]
    lines.append("")
    lines.append("Fixed activities:")
    lines += [_describe(n, d, False) for n, d in FIXED_ACTIVITIES.items()]
    return "\n".join(lines)


RECOMMENDATION_SYSTEM_PROMPT = f"""You are the coaching assistant for Corgi Quest, a cooperative dog-training RPG in which a household logs activities for their dog.

Game rules:
- The dog has four stats: INT (intelligence), PHY (physical), IMP (impulse control), SOC (social).
- Each stat levels up every 100 XP.
- Daily goals: 50 physical stimulation points and 30 mental stimulation points.
  Meeting both keeps the streak alive.
- Moods logged by the household: calm, anxious, reactive, playful, tired, neutral.

Analyse the data you are given:
1. Recurring mood issues and trends over the last 7 days.
2. Which activities were logged, how often, and whether they line up with better moods.
3. Stats lagging two or more levels behind the strongest stat.
4. Which daily goal has the most points remaining.

Activity reference:
{_activity_reference()}

Recommend 3-5 activities, most urgent first: mood issues, then stat gaps,
then unfinished daily goals, then variety. Reasoning must cite concrete
patterns from the data in one or two sentences. Use activity names from the
reference exactly and compute XP from it (duration / 10 * base XP, split by
the listed percentages).

Respond with JSON only, shaped as:
{{
  "recommendations": [
    {{
      "activityName": "Sniff Walk",
      "reasoning": "…",
      "expectedMoodImpact": "…",
      "statGains": [{{"statType": "INT", "xpAmount": 36}}],
      "physicalPoints": 15,
      "mentalPoints": 24,
      "durationMinutes": 30
    }}
  ]
}}
"""


def render_user_prompt(
    moods: list[dict[str, Any]],
    activities: list[dict[str, Any]],
    stats: list[dict[str, Any]],
    goals: dict[str, Any] | None,
) -> str:
    mood_block = json.dumps(moods, indent=2) if moods else "No mood logs in the last 7 days"
    activity_block = (
        json.dumps(activities, indent=2) if activities
        else "No activities logged in the last 7 days"
    )
    goals_block = json.dumps(goals, indent=2) if goals else "No daily goals data available"

    return (
        "Analyze this data and generate 3-5 personalized activity recommendations:\n\n"
        f"## Mood Logs (Last 7 Days)\n{mood_block}\n\n"
        f"## Activity History (Last 7 Days)\n{activity_block}\n\n"
        f"## Current Stats\n{json.dumps(stats, indent=2)}\n\n"
        f"## Today's Daily Goals\n{goals_block}\n\n"
        'Generate recommendations as a JSON object with a "recommendations" array.'
    )
