"""Prompt text for the schedule completion call."""
from __future__ import annotations

from typing import List

from dayplanner.domain.timeutils import time_to_minutes
from dayplanner.services.time_range_validator import TimeType, determine_time_type


def build_prompts(
    tasks: List[str],
    date: str,
    start_time: str,
    end_time: str,
    *,
    language: str = "Korean",
) -> tuple[str, str]:
    """Return ``(system_prompt, user_prompt)`` for one scheduling request."""
    return _system_prompt(start_time, end_time, language), _user_prompt(tasks, date, start_time, end_time, language)


def _system_prompt(start_time: str, end_time: str, language: str) -> str:
    return (
        'You are a "Professional Schedule Planning AI".\n'
        f"Current time range: {start_time} ~ {end_time}\n\n"
        "Goal:\n"
        "- Arrange all given tasks efficiently to maximize productivity.\n\n"
        "Constraints:\n"
        f'1. All tasks must start after "{start_time}" and finish before "{end_time}".\n'
        "2. **All given tasks must be scheduled within the time range** (shorten or merge tasks if needed).\n"
        '3. Output format: "HH:MM-HH:MM: Task Name", one task per line.\n'
        "4. Do not split tasks into multiple time slots.\n"
        "5. Do not place any breaks unless they are explicitly listed as tasks.\n"
        "6. Only include the provided tasks in the schedule. **Do not create or add any new tasks**.\n"
        f"7. Final answer must be written in {language}.\n\n"
        "Output format:\n"
        "HH:MM-HH:MM: [Exact Task Name]\n"
        "..."
    )


def _user_prompt(tasks: List[str], date: str, start_time: str, end_time: str, language: str) -> str:
    tasks_text = "\n".join(f"- {task}" for task in tasks)
    return (
        f"Date: {date}\n"
        f"Time range: {start_time} ~ {end_time}\n"
        f"Day profile: {tone_of_day(start_time, end_time)}\n\n"
        "Task list:\n"
        f"{tasks_text}\n\n"
        "Important:\n"
        "- Include only the tasks listed above in the schedule. Do not create any additional tasks.\n"
        f"- The output must be entirely in {language}.\n\n"
        "Rules for scheduling:\n"
        "1. **All tasks must be scheduled within the time range** (shorten durations if needed).\n"
        "2. Each time block must have a clear start and end time.\n"
        "3. Do not split tasks into multiple slots.\n"
        "4. No duplicate task entries.\n"
        "5. Do not add breaks unless they are given as tasks.\n"
        "6. Only use the exact task names provided.\n\n"
        "Output format:\n"
        "HH:MM-HH:MM: [Exact Task Name]"
    )


TONES = {
    TimeType.MORNING: "morning session; put demanding tasks first while energy is high.",
    TimeType.EVENING: "evening session; keep blocks short and wind down towards the end.",
    TimeType.FULL_DAY: "full day; place demanding tasks in the late morning and mid-afternoon.",
    TimeType.PARTIAL_DAY: "part of the day; keep blocks focused and avoid long stretches.",
}


def tone_of_day(start_time: str, end_time: str) -> str:
    start_hour = time_to_minutes(start_time) // 60
    end_hour = time_to_minutes(end_time) // 60
    return TONES[determine_time_type(start_hour, end_hour)]
