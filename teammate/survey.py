"""Interactive personality survey.

Prompts are read through an injectable `prompt` callable (``input`` by
default) and messages written through `out` (``print`` by default). Typing
``cancel`` at any prompt abandons the survey.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Collection, Dict, List, Optional

from teammate.domain.roster import BALANCED, LEADER, THINKER, Candidate, classify_personality

QUESTIONS = [
    "I enjoy taking the lead and guiding others during group activities.",
    "I prefer analyzing situations and coming up with strategic solutions.",
    "I work well with others and enjoy collaborative teamwork.",
    "I am calm under pressure and can help maintain team morale.",
    "I like making quick decisions and adapting in dynamic situations.",
]

GAMES = ["Valorant", "DOTA 2", "CS:GO", "FIFA", "Basketball", "Chess", "Badminton"]

ROLES = {
    "Strategist": "Focuses on tactics and planning. Keeps the bigger picture in mind.",
    "Attacker": "Frontline player. Good reflexes, offensive tactics, quick execution.",
    "Defender": "Protects and supports team stability. Good under pressure.",
    "Supporter": "Jack-of-all-trades. Adapts roles, ensures smooth coordination.",
    "Coordinator": "Communication lead. Keeps team informed and organized.",
}

DESCRIPTIONS = {
    LEADER: "Confident, decision-maker, naturally takes charge",
    BALANCED: "Adaptive, communicative, team-oriented",
    THINKER: "Observant, analytical, prefers planning before action",
}

Prompt = Callable[[str], str]
Output = Callable[[str], None]


class SurveyCancelled(Exception):
    """Raised internally when the respondent types 'cancel'."""


@dataclass
class SurveyResult:
    responses: Dict[str, int] = field(default_factory=dict)
    preferred_game: str = ""
    skill_level: int = 0
    preferred_role: str = ""

    @property
    def personality_score(self) -> int:
        return sum(self.responses.values()) * 4

    @property
    def personality_type(self) -> str:
        return classify_personality(self.personality_score)

    def encoded_responses(self) -> str:
        return ";".join(f"{k}={v}" for k, v in self.responses.items())


def _ask(prompt: Prompt, text: str) -> str:
    answer = prompt(text).strip()
    if answer.lower() == "cancel":
        raise SurveyCancelled()
    return answer


def _ask_int(prompt: Prompt, out: Output, text: str, low: int, high: int) -> int:
    while True:
        answer = _ask(prompt, text)
        try:
            value = int(answer)
        except ValueError:
            out(f"Please enter a valid number between {low} and {high}.")
            continue
        if low <= value <= high:
            return value
        out(f"Please enter a number between {low} and {high}.")


def run_survey(prompt: Prompt = input, out: Output = print) -> Optional[SurveyResult]:
    """
    Ask the five personality statements, then game, skill level and role.

    Returns:
        SurveyResult, or None if the respondent cancelled
    """
    result = SurveyResult()
    out("Please rate each statement from 1 (Strongly Disagree) to 5 (Strongly Agree)")
    try:
        _ask(prompt, "Press Enter to continue or 'cancel' to stop: ")

        for number, question in enumerate(QUESTIONS, start=1):
            out(f"\nQ{number}: {question}")
            result.responses[f"Q{number}"] = _ask_int(
                prompt, out, "Your rating (1-5, or 'cancel' to stop): ", 1, 5
            )

        out("\n=== Game Preference ===")
        for number, game in enumerate(GAMES, start=1):
            out(f"{number}. {game}")
        choice = _ask_int(
            prompt, out, f"Select your preferred game (1-{len(GAMES)}, or 'cancel' to stop): ", 1, len(GAMES)
        )
        result.preferred_game = GAMES[choice - 1]

        result.skill_level = _ask_int(
            prompt, out, "Enter your skill level (1-10, where 10 is expert, or 'cancel' to stop): ", 1, 10
        )

        out("\n=== Preferred Role ===")
        role_names = list(ROLES)
        for number, role in enumerate(role_names, start=1):
            out(f"{number}. {role}: {ROLES[role]}")
        choice = _ask_int(
            prompt, out, f"Select your preferred role (1-{len(role_names)}, or 'cancel' to stop): ", 1, len(role_names)
        )
        result.preferred_role = role_names[choice - 1]
    except SurveyCancelled:
        out("Survey cancelled.")
        return None

    out("\n=== Survey Results ===")
    out(f"Personality Score: {result.personality_score}")
    out(f"Personality Type: {result.personality_type}")
    out(f"Description: {DESCRIPTIONS.get(result.personality_type, 'Personality type not determined')}")
    out(f"Preferred Game: {result.preferred_game}")
    out(f"Skill Level: {result.skill_level}")
    out(f"Preferred Role: {result.preferred_role}")
    return result


def conduct_new_surveys(
    count: int,
    existing_ids: Collection[str] = (),
    prompt: Prompt = input,
    out: Output = print,
) -> List[tuple[Candidate, SurveyResult]]:
    """
    Register and survey `count` new participants.

    Empty or duplicate ids and missing name/email skip that participant;
    cancelled surveys are not added.

    Returns:
        List of (candidate, survey result) for completed surveys
    """
    if count <= 0:
        out("Invalid number. Must be greater than 0.")
        return []

    seen = set(existing_ids)
    completed: List[tuple[Candidate, SurveyResult]] = []
    for number in range(1, count + 1):
        out(f"\n--- Participant {number} ---")
        participant_id = prompt("Enter participant ID: ").strip()
        if not participant_id:
            out("Participant ID cannot be empty. Skipping...")
            continue
        if participant_id in seen:
            out("Participant ID already exists. Skipping...")
            continue

        name = prompt("Enter participant name: ").strip()
        email = prompt("Enter participant email: ").strip()
        if not name or not email:
            out("Name or email is empty. Skipping...")
            continue

        out(f"\n=== Personality Survey for {name} ===")
        result = run_survey(prompt, out)
        if result is None:
            out("Survey was not completed. Participant not added.")
            continue

        candidate = Candidate(
            candidate_id=participant_id,
            name=name,
            email=email,
            skill_level=result.skill_level,
            personality_score=result.personality_score,
            preferred_game=result.preferred_game,
            preferred_role=result.preferred_role,
        )
        seen.add(participant_id)
        completed.append((candidate, result))
        out("Participant added and survey completed!")

    return completed
